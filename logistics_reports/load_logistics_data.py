# =============================================================================
# LOAD LOGISTICS DATA
# =============================================================================
# - Read the four logistics tables from CSV partitions or a relational database
# - Read every database table inside one transaction for a consistent snapshot
# - Coerce timestamps and costs so downstream reports share one typing


import os
import glob
from typing import Dict, List, Optional
import pandas as pd
from sqlalchemy import create_engine

from logistics_reports.run_log import log_error, log_info


# ------------------------------------------------------------
# CONFIGURATIONS
# ------------------------------------------------------------

LOGISTICS_DATA_PATH = os.getenv('LOGISTICS_DATA_PATH', 'data/raw')
DATABASE_URL = os.getenv('DATABASE_URL')

TABLE_CONFIG = {
    'Orders': {
        'role': 'event_fact',
        'primary_key': ['OrderID'],
        'required_columns': ['OrderID', 'CustomerID', 'OrderDate',
                             'Status', 'ShippingMethod'],
        'timestamp_columns': ['OrderDate'],
        'numeric_columns': [],
    },
    'Transportation': {
        'role': 'transaction_detail',
        'primary_key': ['OrderID'],
        'required_columns': ['OrderID', 'CarrierID', 'DeliveryDate',
                             'ShippingCost'],
        'timestamp_columns': ['DeliveryDate'],
        'numeric_columns': ['ShippingCost'],
    },
    'Carriers': {
        'role': 'entity_reference',
        'primary_key': ['CarrierID'],
        'required_columns': ['CarrierID', 'CarrierName'],
        'timestamp_columns': [],
        'numeric_columns': [],
    },
    'Customers': {
        'role': 'entity_reference',
        'primary_key': ['CustomerID'],
        'required_columns': ['CustomerID', 'Name', 'Region'],
        'timestamp_columns': [],
        'numeric_columns': [],
    },
}


# ------------------------------------------------------------
# TYPE COERCION
# ------------------------------------------------------------

def parse_timestamps(values: pd.Series) -> pd.Series:
    """
    Parse any ISO 8601 shape per value; anything else becomes NaT.
    """

    return pd.to_datetime(values, errors='coerce', format='ISO8601')


def coerce_table_types(tables: Dict[str, pd.DataFrame]) -> Dict[str, pd.DataFrame]:
    """
    Return copies of the tables with declared timestamp and numeric columns parsed.

    Unparsable values become NaT / NaN, so a malformed DeliveryDate reads
    as "not yet delivered".
    """

    typed = {}

    for table_name, df in tables.items():
        df = df.copy()
        config = TABLE_CONFIG.get(table_name, {})

        for col in config.get('timestamp_columns', []):
            if col in df.columns:
                df[col] = parse_timestamps(df[col])

        for col in config.get('numeric_columns', []):
            if col in df.columns:
                df[col] = pd.to_numeric(df[col], errors='coerce').astype('float64')

        typed[table_name] = df

    return typed


# ------------------------------------------------------------
# INPUT-OUTPUT HELPERS
# ------------------------------------------------------------

def load_csv_file(csv_path: str, table_name: str,
                  run_log: Dict[str, List[str]]
                  ) -> Optional[pd.DataFrame]:
    try:
        df = pd.read_csv(csv_path)
        log_info(f'Loaded {table_name} file: {os.path.basename(csv_path)} ({len(df)} rows)', run_log)

        return df

    except (OSError, ValueError) as e:
        log_error(f'Failed to load {table_name} file {csv_path}: {e}', run_log)

        return None


def load_logical_table(data_path: str,
                       table_name: str,
                       run_log: Dict[str, List[str]]
                       ) -> Optional[pd.DataFrame]:
    """
    Stack every <table_name>*.csv partition, in filename order, into one frame.
    Unreadable partitions are logged and left out.
    """

    pattern = os.path.join(data_path, f'{table_name}*.csv')
    csv_files = sorted(glob.glob(pattern))

    if not csv_files:
        log_error(f'{table_name}: no files found matching pattern {pattern}', run_log)

        return None

    dfs = []
    for csv_path in csv_files:
        df = load_csv_file(csv_path, table_name, run_log)
        if df is not None:
            dfs.append(df)

    if not dfs:
        log_error(f'{table_name}: all matching files failed to load', run_log)

        return None

    combined_df = pd.concat(dfs, ignore_index=True)
    log_info(f'{table_name}: combined {len(csv_files)} file(s) into '
             f'{len(combined_df)} rows',
             run_log)

    return combined_df


def load_tables_from_csv(data_path: str,
                         run_log: Dict[str, List[str]]
                         ) -> Dict[str, pd.DataFrame]:
    tables: Dict[str, pd.DataFrame] = {}

    for table_name in TABLE_CONFIG:
        df = load_logical_table(data_path, table_name, run_log)
        if df is None:

            continue

        tables[table_name] = df

    return tables


def load_tables_from_database(database_url: str,
                              run_log: Dict[str, List[str]]
                              ) -> Dict[str, pd.DataFrame]:
    """
    Read every logistics table inside a single transaction.

    Connection and query failures are not caught here.
    """

    engine = create_engine(database_url)
    tables: Dict[str, pd.DataFrame] = {}

    try:
        with engine.connect() as connection:
            with connection.begin():
                for table_name in TABLE_CONFIG:
                    df = pd.read_sql_table(table_name, connection)
                    log_info(f'Loaded {table_name} table from database ({len(df)} rows)', run_log)
                    tables[table_name] = df
    finally:
        engine.dispose()

    return tables


def load_tables(run_log: Dict[str, List[str]]) -> Dict[str, pd.DataFrame]:
    """
    Load from DATABASE_URL when it is set, otherwise from LOGISTICS_DATA_PATH.
    """

    if DATABASE_URL:
        log_info('Reading logistics tables from database', run_log)
        tables = load_tables_from_database(DATABASE_URL, run_log)
    else:
        log_info(f'Reading logistics tables from {LOGISTICS_DATA_PATH}', run_log)
        tables = load_tables_from_csv(LOGISTICS_DATA_PATH, run_log)

    return tables


# =============================================================================
# END OF SCRIPT
# =============================================================================
