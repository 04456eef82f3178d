# =============================================================================
# COMPUTE LOGISTICS REPORTS
# =============================================================================
# - Derive delivery times and delay flags from Orders and Transportation
# - Compute the fixed catalogue of read-only descriptive reports
# - Every report is a pure function of the tables and returns a new DataFrame
# - Ordering is deterministic: ties fall back to ascending group key


import os
from typing import Callable, Dict, List
import pandas as pd

from logistics_reports.load_logistics_data import coerce_table_types


# ------------------------------------------------------------
# CONFIGURATIONS
# ------------------------------------------------------------

# Delivery time strictly above this many days counts as late / delayed
LATE_THRESHOLD_DAYS = int(os.getenv('LATE_THRESHOLD_DAYS', '5'))

TOP_CUSTOMERS_LIMIT = 10

STATUS_CANCELLED = 'Cancelled'
STATUS_DELIVERED = 'Delivered'

CARRIER_KEY = ['CarrierID', 'CarrierName']
CUSTOMER_KEY = ['CustomerID', 'Name']


# ------------------------------------------------------------
# BUILDING BLOCKS
# ------------------------------------------------------------

def add_delivery_time(df: pd.DataFrame) -> pd.DataFrame:
    """
    Whole calendar days between OrderDate and DeliveryDate.

    NaN where DeliveryDate is missing. Negative values are kept as is.
    """

    df = df.copy()
    elapsed = df['DeliveryDate'].dt.normalize() - df['OrderDate'].dt.normalize()
    df['DeliveryTime'] = elapsed.dt.days

    return df


def add_outcome_flags(df: pd.DataFrame,
                      late_threshold_days: int = LATE_THRESHOLD_DAYS
                      ) -> pd.DataFrame:
    df = df.copy()
    df['IsCancelled'] = df['Status'].eq(STATUS_CANCELLED)
    df['IsDelivered'] = df['Status'].eq(STATUS_DELIVERED)
    df['IsDelayed'] = df['DeliveryDate'].notna() & (df['DeliveryTime'] > late_threshold_days)

    return df


def orders_with_transportation(tables: Dict[str, pd.DataFrame],
                               how: str) -> pd.DataFrame:
    """
    Orders joined to Transportation with delivery time attached.

    `how='inner'` keeps only shipped orders, `how='left'` keeps every order.
    """

    merged = tables['Orders'].merge(tables['Transportation'], on='OrderID', how=how)

    return add_delivery_time(merged)


def shipments_with_carriers(tables: Dict[str, pd.DataFrame]) -> pd.DataFrame:
    """Transportation -> Orders -> Carriers, inner joins throughout."""

    merged = tables['Transportation'].merge(tables['Orders'], on='OrderID', how='inner')
    merged = merged.merge(tables['Carriers'], on='CarrierID', how='inner')

    return add_delivery_time(merged)


def customers_with_orders(tables: Dict[str, pd.DataFrame]) -> pd.DataFrame:
    return tables['Customers'].merge(tables['Orders'], on='CustomerID', how='inner')


def count_by(df: pd.DataFrame, keys: List[str], name: str) -> pd.DataFrame:
    return df.groupby(keys, dropna=False).size().reset_index(name=name)


def count_outcomes_by(df: pd.DataFrame, keys: List[str],
                      outcomes: List[str]) -> pd.DataFrame:
    columns = {
        'cancelled': ('CancelledOrders', 'IsCancelled'),
        'delayed': ('DelayedOrders', 'IsDelayed'),
        'delivered': ('DeliveredOrders', 'IsDelivered'),
    }
    aggregations = {columns[o][0]: (columns[o][1], 'sum') for o in outcomes}

    grouped = df.groupby(keys, dropna=False).agg(**aggregations).reset_index()

    for column, _ in aggregations.items():
        grouped[column] = grouped[column].astype('int64')

    return grouped


def sort_descending(df: pd.DataFrame, by: List[str]) -> pd.DataFrame:
    return df.sort_values(by, ascending=False, kind='mergesort').reset_index(drop=True)


def _typed(tables: Dict[str, pd.DataFrame]) -> Dict[str, pd.DataFrame]:
    return coerce_table_types(tables)


# ------------------------------------------------------------
# ORDER REPORTS
# ------------------------------------------------------------

def status_distribution(tables: Dict[str, pd.DataFrame]) -> pd.DataFrame:
    tables = _typed(tables)

    return count_by(tables['Orders'], ['Status'], 'TotalOrders')


def shipping_method_popularity(tables: Dict[str, pd.DataFrame]) -> pd.DataFrame:
    tables = _typed(tables)
    counts = count_by(tables['Orders'], ['ShippingMethod'], 'TotalOrders')

    return sort_descending(counts, ['TotalOrders'])


def daily_order_trends(tables: Dict[str, pd.DataFrame]) -> pd.DataFrame:
    tables = _typed(tables)
    orders = tables['Orders'].assign(OrderDay=tables['Orders']['OrderDate'].dt.normalize())
    counts = count_by(orders, ['OrderDay'], 'TotalOrders')

    return counts.sort_values('OrderDay', kind='mergesort').reset_index(drop=True)


# ------------------------------------------------------------
# DELIVERY REPORTS
# ------------------------------------------------------------

def average_delivery_time_by_carrier(tables: Dict[str, pd.DataFrame]) -> pd.DataFrame:
    """
    Mean delivery time per carrier over delivered shipments only.

    A carrier whose shipments are all undelivered does not appear.
    """

    tables = _typed(tables)
    shipments = shipments_with_carriers(tables)
    delivered = shipments[shipments['DeliveryDate'].notna()]

    return (delivered.groupby(CARRIER_KEY, dropna=False)['DeliveryTime']
            .mean()
            .reset_index(name='AvgDeliveryTime'))


def late_orders(tables: Dict[str, pd.DataFrame],
                late_threshold_days: int = LATE_THRESHOLD_DAYS
                ) -> pd.DataFrame:
    tables = _typed(tables)
    shipped = orders_with_transportation(tables, how='inner')

    late = shipped[shipped['DeliveryDate'].notna()
                   & (shipped['DeliveryTime'] > late_threshold_days)]
    late = late[['OrderID', 'OrderDate', 'DeliveryDate', 'DeliveryTime']].reset_index(drop=True)
    late['DeliveryTime'] = late['DeliveryTime'].astype('int64')

    return late


def delays_by_shipping_method(tables: Dict[str, pd.DataFrame],
                              late_threshold_days: int = LATE_THRESHOLD_DAYS
                              ) -> pd.DataFrame:
    """
    Delayed shipment count per shipping method.

    Only delivered shipments are considered; on-time ones keep their
    method in the result with a zero count.
    """

    tables = _typed(tables)
    shipped = orders_with_transportation(tables, how='inner')
    delivered = add_outcome_flags(shipped[shipped['DeliveryDate'].notna()],
                                  late_threshold_days)

    return count_outcomes_by(delivered, ['ShippingMethod'], ['delayed'])


# ------------------------------------------------------------
# REGIONAL AND CUSTOMER REPORTS
# ------------------------------------------------------------

def regional_order_distribution(tables: Dict[str, pd.DataFrame]) -> pd.DataFrame:
    tables = _typed(tables)
    counts = count_by(customers_with_orders(tables), ['Region'], 'TotalOrders')

    return sort_descending(counts, ['TotalOrders'])


def cancelled_orders_by_region(tables: Dict[str, pd.DataFrame]) -> pd.DataFrame:
    tables = _typed(tables)
    orders = customers_with_orders(tables)
    cancelled = orders[orders['Status'].eq(STATUS_CANCELLED)]
    counts = count_by(cancelled, ['Region'], 'CancelledOrders')

    return sort_descending(counts, ['CancelledOrders'])


def top_customers(tables: Dict[str, pd.DataFrame],
                  limit: int = TOP_CUSTOMERS_LIMIT
                  ) -> pd.DataFrame:
    """
    Customers with the most orders.

    Ties at the cut-off are decided by ascending CustomerID.
    """

    tables = _typed(tables)
    counts = count_by(customers_with_orders(tables), CUSTOMER_KEY, 'TotalOrders')

    return sort_descending(counts, ['TotalOrders']).head(limit)


def shipping_cost_by_region(tables: Dict[str, pd.DataFrame]) -> pd.DataFrame:
    tables = _typed(tables)
    shipped = customers_with_orders(tables).merge(
        tables['Transportation'], on='OrderID', how='inner'
        )
    totals = (shipped.groupby('Region', dropna=False)['ShippingCost']
              .sum()
              .reset_index(name='TotalShippingCost'))

    return sort_descending(totals, ['TotalShippingCost'])


# ------------------------------------------------------------
# CARRIER REPORTS
# ------------------------------------------------------------

def carrier_cost_efficiency(tables: Dict[str, pd.DataFrame]) -> pd.DataFrame:
    tables = _typed(tables)
    shipments = tables['Transportation'].merge(tables['Carriers'], on='CarrierID', how='inner')
    averages = (shipments.groupby(CARRIER_KEY, dropna=False)['ShippingCost']
                .mean()
                .reset_index(name='AvgShippingCost'))

    return averages.sort_values('AvgShippingCost', kind='mergesort').reset_index(drop=True)


def high_performing_carriers(tables: Dict[str, pd.DataFrame]) -> pd.DataFrame:
    tables = _typed(tables)
    shipments = shipments_with_carriers(tables)
    delivered = shipments[shipments['Status'].eq(STATUS_DELIVERED)]
    counts = count_by(delivered, CARRIER_KEY, 'DeliveredOrders')

    return sort_descending(counts, ['DeliveredOrders'])


# ------------------------------------------------------------
# PERFORMANCE DROP REPORTS
# ------------------------------------------------------------

def status_trend_over_time(tables: Dict[str, pd.DataFrame],
                           late_threshold_days: int = LATE_THRESHOLD_DAYS
                           ) -> pd.DataFrame:
    tables = _typed(tables)
    orders = add_outcome_flags(orders_with_transportation(tables, how='left'),
                               late_threshold_days)
    orders['OrderDay'] = orders['OrderDate'].dt.normalize()
    trend = count_outcomes_by(orders, ['OrderDay'], ['cancelled', 'delayed', 'delivered'])

    return trend.sort_values('OrderDay', kind='mergesort').reset_index(drop=True)


def regional_performance_drop(tables: Dict[str, pd.DataFrame],
                              late_threshold_days: int = LATE_THRESHOLD_DAYS
                              ) -> pd.DataFrame:
    tables = _typed(tables)
    orders = customers_with_orders(tables).merge(
        tables['Transportation'], on='OrderID', how='left'
        )
    orders = add_outcome_flags(add_delivery_time(orders), late_threshold_days)
    drop = count_outcomes_by(orders, ['Region'], ['cancelled', 'delayed', 'delivered'])

    return sort_descending(drop, ['CancelledOrders', 'DelayedOrders'])


def carrier_performance_drop(tables: Dict[str, pd.DataFrame],
                             late_threshold_days: int = LATE_THRESHOLD_DAYS
                             ) -> pd.DataFrame:
    """
    Cancelled and delayed counts per carrier.

    Built on shipped orders only, so a carrier without shipments never
    appears (unlike the regional report, which keeps unshipped orders).
    """

    tables = _typed(tables)
    shipments = add_outcome_flags(shipments_with_carriers(tables), late_threshold_days)
    drop = count_outcomes_by(shipments, CARRIER_KEY, ['cancelled', 'delayed'])

    return sort_descending(drop, ['CancelledOrders', 'DelayedOrders'])


def shipping_method_performance_drop(tables: Dict[str, pd.DataFrame],
                                     late_threshold_days: int = LATE_THRESHOLD_DAYS
                                     ) -> pd.DataFrame:
    tables = _typed(tables)
    orders = add_outcome_flags(orders_with_transportation(tables, how='left'),
                               late_threshold_days)
    drop = count_outcomes_by(orders, ['ShippingMethod'], ['cancelled', 'delayed', 'delivered'])

    return sort_descending(drop, ['CancelledOrders', 'DelayedOrders'])


def overall_performance_metrics(tables: Dict[str, pd.DataFrame],
                                late_threshold_days: int = LATE_THRESHOLD_DAYS
                                ) -> pd.DataFrame:
    """
    Cancellation and delay rates, in percent, over every order.

    Both rates are NaN for an empty dataset.
    """

    tables = _typed(tables)
    orders = add_outcome_flags(orders_with_transportation(tables, how='left'),
                               late_threshold_days)
    total = len(orders)

    if total == 0:
        cancellation_rate = float('nan')
        delay_rate = float('nan')
    else:
        cancellation_rate = orders['IsCancelled'].sum() * 100.0 / total
        delay_rate = orders['IsDelayed'].sum() * 100.0 / total

    return pd.DataFrame({
        'CancellationRate': [float(cancellation_rate)],
        'DelayRate': [float(delay_rate)],
    })


# ------------------------------------------------------------
# REPORT REGISTRY
# ------------------------------------------------------------

REPORTS: Dict[str, Callable[[Dict[str, pd.DataFrame]], pd.DataFrame]] = {
    'status_distribution': status_distribution,
    'average_delivery_time_by_carrier': average_delivery_time_by_carrier,
    'late_orders': late_orders,
    'regional_order_distribution': regional_order_distribution,
    'cancelled_orders_by_region': cancelled_orders_by_region,
    'shipping_method_popularity': shipping_method_popularity,
    'carrier_cost_efficiency': carrier_cost_efficiency,
    'high_performing_carriers': high_performing_carriers,
    'delays_by_shipping_method': delays_by_shipping_method,
    'top_customers': top_customers,
    'shipping_cost_by_region': shipping_cost_by_region,
    'daily_order_trends': daily_order_trends,
    'status_trend_over_time': status_trend_over_time,
    'regional_performance_drop': regional_performance_drop,
    'carrier_performance_drop': carrier_performance_drop,
    'shipping_method_performance_drop': shipping_method_performance_drop,
    'overall_performance_metrics': overall_performance_metrics,
}


def compute_report(name: str, tables: Dict[str, pd.DataFrame]) -> pd.DataFrame:
    """Raises KeyError for an unknown report name."""

    return REPORTS[name](tables)


# =============================================================================
# END OF SCRIPT
# =============================================================================
