# =============================================================================
# RUN LOG
# =============================================================================
# - Collect errors, warnings and info messages raised during a pipeline run
# - Echo every message to stdout with its level
# - Errors decide the exit status of the calling script


from typing import Dict, List


def init_run_log() -> Dict[str, List[str]]:

    return {
        'errors': [],
        'warnings': [],
        'info': []
    }


def log_info(message: str, run_log: Dict[str, List[str]]) -> None:
    print(f'[INFO] {message}')
    run_log['info'].append(message)


def log_warning(message: str, run_log: Dict[str, List[str]]) -> None:
    print(f'[WARNING] {message}')
    run_log['warnings'].append(message)


def log_error(message: str, run_log: Dict[str, List[str]]) -> None:
    print(f'[ERROR] {message}')
    run_log['errors'].append(message)


# =============================================================================
# END OF SCRIPT
# =============================================================================
