"""Shared fixtures for the logistics report tests."""

import pandas as pd
import pytest


ORDER_COLUMNS = ['OrderID', 'CustomerID', 'OrderDate', 'Status', 'ShippingMethod']
TRANSPORTATION_COLUMNS = ['OrderID', 'CarrierID', 'DeliveryDate', 'ShippingCost']
CARRIER_COLUMNS = ['CarrierID', 'CarrierName']
CUSTOMER_COLUMNS = ['CustomerID', 'Name', 'Region']


def make_tables(orders=(), transportation=(), carriers=(), customers=()):
    """Build a table dict from row tuples; every table keeps its columns when empty."""
    return {
        'Orders': pd.DataFrame(list(orders), columns=ORDER_COLUMNS),
        'Transportation': pd.DataFrame(list(transportation), columns=TRANSPORTATION_COLUMNS),
        'Carriers': pd.DataFrame(list(carriers), columns=CARRIER_COLUMNS),
        'Customers': pd.DataFrame(list(customers), columns=CUSTOMER_COLUMNS),
    }


@pytest.fixture()
def empty_tables():
    return make_tables()


@pytest.fixture()
def sample_tables():
    """
    Small dataset covering every status, a missing delivery, an unshipped
    order, a carrier without shipments and a dangling customer reference.

    Delivery times: O1=9, O2=2, O3=6, O4=None (in transit), O6=1.
    O5 has no Transportation row. O7 points at an unknown customer.
    """
    orders = [
        ('O1', 'CU1', '2024-01-01', 'Delivered', 'Standard'),
        ('O2', 'CU1', '2024-01-01', 'Delivered', 'Expedited'),
        ('O3', 'CU2', '2024-01-02', 'Delivered', 'Standard'),
        ('O4', 'CU2', '2024-01-02', 'Shipped', 'Same-day'),
        ('O5', 'CU3', '2024-01-03', 'Cancelled', 'Standard'),
        ('O6', 'CU3', '2024-01-03', 'Cancelled', 'Expedited'),
        ('O7', 'CU9', '2024-01-03', 'Processing', 'Standard'),
    ]
    transportation = [
        ('O1', 'C1', '2024-01-10', 20.0),
        ('O2', 'C2', '2024-01-03', 35.0),
        ('O3', 'C1', '2024-01-08', 10.0),
        ('O4', 'C2', None, 15.0),
        ('O6', 'C1', '2024-01-04', 5.0),
    ]
    carriers = [
        ('C1', 'FastShip'),
        ('C2', 'Reliable'),
        ('C3', 'Idle'),
    ]
    customers = [
        ('CU1', 'Alice', 'East'),
        ('CU2', 'Bob', 'West'),
        ('CU3', 'Carol', 'East'),
    ]
    return make_tables(orders, transportation, carriers, customers)
