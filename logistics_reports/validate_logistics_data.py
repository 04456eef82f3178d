# =============================================================================
# VALIDATE LOGISTICS DATA
# =============================================================================
# - Check structural and semantic integrity of the four logistics tables
# - Block data that would corrupt report joins, counts or costs
# - Tolerated anomalies (orphans, late or missing deliveries) are logged as warnings


from typing import Dict, List
import pandas as pd

from logistics_reports.load_logistics_data import TABLE_CONFIG, parse_timestamps
from logistics_reports.run_log import log_error, log_info, log_warning


# ------------------------------------------------------------
# BASE VALIDATIONS (ALL TABLES)
# ------------------------------------------------------------

def run_base_validations(df: pd.DataFrame,
                         table_name: str,
                         config: Dict,
                         run_log: Dict[str, List[str]]
                         ) -> None:
    """
    Base structural validations.

    Stops if structure is broken. An empty table is a valid input.
    """

    duplicate_columns = df.columns[df.columns.duplicated()].tolist()
    if duplicate_columns:
        log_error(
            f'{table_name}: duplicate column names detected: {duplicate_columns}',
            run_log
            )

    missing_columns = [col for col in config['required_columns'] if col not in df.columns]
    if missing_columns:
        log_error(
            f'{table_name}: missing required column(s): {missing_columns}',
            run_log
            )

        return

    if df.empty:
        log_warning(f'{table_name}: dataset is empty', run_log)

        return

    primary_key = config['primary_key']

    pk_null_count = df[primary_key].isnull().any(axis=1).sum()
    if pk_null_count > 0:
        log_error(
            f'{table_name}: {pk_null_count} row(s) with null primary key values',
            run_log
            )

    duplicate_pk_count = df.duplicated(subset=primary_key).sum()
    if duplicate_pk_count > 0:
        log_error(
            f'{table_name}: {duplicate_pk_count} duplicated primary key value(s)',
            run_log
            )


# ------------------------------------------------------------
# EVENT FACT VALIDATIONS
# ------------------------------------------------------------

def run_event_fact_validations(df: pd.DataFrame,
                               table_name: str,
                               run_log: Dict[str, List[str]]
                               ) -> None:
    """
    Order timestamps must parse, otherwise daily trends lose rows.
    """

    order_ts = parse_timestamps(df['OrderDate'])

    invalid_count = order_ts.isna().sum()
    if invalid_count > 0:
        log_error(
            f'{table_name}: {invalid_count} unparsable timestamp value(s) in `OrderDate`',
            run_log
            )


# ------------------------------------------------------------
# TRANSACTION DETAIL VALIDATIONS
# ------------------------------------------------------------

def run_transaction_detail_validations(df: pd.DataFrame,
                                       table_name: str,
                                       run_log: Dict[str, List[str]]
                                       ) -> None:
    """
    Transaction detail validations.

    Stops if cost aggregations would be corrupted.
    """

    delivery_raw = df['DeliveryDate']
    delivery_ts = parse_timestamps(delivery_raw)

    unparsable = (delivery_raw.notna() & delivery_ts.isna()).sum()
    if unparsable > 0:
        log_warning(
            f'{table_name}: {unparsable} unparsable `DeliveryDate` value(s) '
            f'will be treated as not yet delivered',
            run_log
            )

    undelivered = delivery_raw.isna().sum()
    if undelivered > 0:
        log_info(f'{table_name}: {undelivered} shipment(s) not yet delivered', run_log)

    cost = pd.to_numeric(df['ShippingCost'], errors='coerce')

    invalid_cost = (df['ShippingCost'].notna() & cost.isna()).sum()
    if invalid_cost > 0:
        log_error(
            f'{table_name}: {invalid_cost} non-numeric value(s) in `ShippingCost`',
            run_log
            )

        return

    negative_count = (cost < 0).sum()
    if negative_count > 0:
        log_error(
            f'{table_name}: {negative_count} negative value(s) in `ShippingCost`',
            run_log
            )


# ------------------------------------------------------------
# CROSS-TABLE VALIDATIONS
# ------------------------------------------------------------

def run_cross_table_validations(tables: Dict[str, pd.DataFrame],
                                run_log: Dict[str, List[str]]
                                ) -> None:
    """
    Cross-table validations.

    Dangling references are dropped by inner joins, so they only warn.
    """

    missing_tables = [t for t in TABLE_CONFIG if t not in tables]

    if missing_tables:
        log_error(
            f'Cross-table validation failed: missing required table(s): {missing_tables}',
            run_log
            )

        return

    orders_df = tables['Orders']
    transportation_df = tables['Transportation']
    carriers_df = tables['Carriers']
    customers_df = tables['Customers']

    references = [
        ('Orders', orders_df, 'CustomerID', customers_df),
        ('Transportation', transportation_df, 'OrderID', orders_df),
        ('Transportation', transportation_df, 'CarrierID', carriers_df),
    ]

    for child_name, child_df, key, parent_df in references:
        if key not in child_df.columns or key not in parent_df.columns:

            continue

        key_set = set(parent_df[key].dropna().unique())
        orphans = ~child_df[key].isin(key_set)
        if orphans.any():
            log_warning(
                f'{child_name}: {orphans.sum()} orphan record(s) referencing non-existent {key}',
                run_log
                )

    if 'OrderID' not in orders_df.columns or 'OrderDate' not in orders_df.columns:

        return

    if 'DeliveryDate' not in transportation_df.columns:

        return

    # Delivery before Order
    timeline = transportation_df[['OrderID', 'DeliveryDate']].merge(
        orders_df[['OrderID', 'OrderDate']], on='OrderID', how='inner'
        )
    delivered_ts = parse_timestamps(timeline['DeliveryDate'])
    order_ts = parse_timestamps(timeline['OrderDate'])

    invalid_delivery = (delivered_ts < order_ts).sum()
    if invalid_delivery > 0:
        log_warning(
            f'Transportation: {invalid_delivery} record(s) where delivery precedes order',
            run_log
            )


# ------------------------------------------------------------
# ENTRY POINT
# ------------------------------------------------------------

def validate_tables(tables: Dict[str, pd.DataFrame],
                    run_log: Dict[str, List[str]]
                    ) -> None:
    valid_tables: Dict[str, pd.DataFrame] = {}

    for table_name, config in TABLE_CONFIG.items():
        df = tables.get(table_name)
        if df is None:

            continue

        errors_before = len(run_log['errors'])
        run_base_validations(df, table_name, config, run_log)

        if len(run_log['errors']) > errors_before:

            continue

        if not df.empty:
            if config['role'] == 'event_fact':
                run_event_fact_validations(df, table_name, run_log)

            elif config['role'] == 'transaction_detail':
                run_transaction_detail_validations(df, table_name, run_log)

        valid_tables[table_name] = df

    expected_tables = [t for t in TABLE_CONFIG if t in tables]

    if len(valid_tables) == len(expected_tables):
        run_cross_table_validations(tables, run_log)

    else:
        log_error('Cross-table validation skipped: structural errors in source tables', run_log)


# =============================================================================
# END OF SCRIPT
# =============================================================================
