# =============================================================================
# EXPORT LOGISTICS REPORTS
# =============================================================================
# - Load and validate the logistics tables
# - Compute the requested reports against one loaded snapshot
# - Write each report as a delimited file for display or BI consumption


import os
import sys
from typing import Dict, List, Optional
import pandas as pd

from logistics_reports.compute_logistics_reports import REPORTS, compute_report
from logistics_reports.load_logistics_data import load_tables
from logistics_reports.run_log import init_run_log, log_error, log_info
from logistics_reports.validate_logistics_data import validate_tables


# ------------------------------------------------------------
# CONFIGURATIONS
# ------------------------------------------------------------

REPORTS_OUTPUT_PATH = os.getenv('REPORTS_OUTPUT_PATH', 'data/reports')
REPORT_NAMES = [
    name.strip()
    for name in os.getenv('REPORT_NAMES', '').split(',')
    if name.strip()
]


# ------------------------------------------------------------
# REPORT EXECUTION
# ------------------------------------------------------------

def run_reports(tables: Dict[str, pd.DataFrame],
                names: Optional[List[str]] = None
                ) -> Dict[str, pd.DataFrame]:
    """
    Compute reports in registry order, or in the order given by `names`.
    """

    selected = names if names else list(REPORTS)

    return {name: compute_report(name, tables) for name in selected}


# ------------------------------------------------------------
# INPUT-OUTPUT HELPER
# ------------------------------------------------------------

def write_report(df: pd.DataFrame, name: str, output_path: str,
                 run_log: Dict[str, List[str]]
                 ) -> str:
    """
    Write one report to <output_path>/<name>.csv.
    Does not touch the source data directory.
    """

    os.makedirs(output_path, exist_ok=True)
    csv_path = os.path.join(output_path, f'{name}.csv')
    df.to_csv(csv_path, index=False)
    log_info(f'Wrote {name} ({len(df)} rows) to {csv_path}', run_log)

    return csv_path


# ------------------------------------------------------------
# MAIN EXECUTION
# ------------------------------------------------------------

def main() -> None:
    run_log = init_run_log()

    unknown = [name for name in REPORT_NAMES if name not in REPORTS]
    if unknown:
        log_error(f'Unknown report name(s): {unknown}', run_log)
        sys.exit(1)

    tables = load_tables(run_log)
    validate_tables(tables, run_log)

    if run_log['errors']:
        log_error(f'{len(run_log["errors"])} validation error(s); no reports written', run_log)
        sys.exit(1)

    results = run_reports(tables, REPORT_NAMES)

    for name, df in results.items():
        write_report(df, name, REPORTS_OUTPUT_PATH, run_log)

    sys.exit(0)


if __name__ == '__main__':
    main()


# =============================================================================
# END OF SCRIPT
# =============================================================================
