import pandas as pd
import pytest

from logistics_reports import export_reports
from logistics_reports import load_logistics_data
from logistics_reports.compute_logistics_reports import REPORTS
from logistics_reports.run_log import init_run_log


@pytest.fixture()
def csv_source(tmp_path, sample_tables, monkeypatch):
    source = tmp_path / 'raw'
    source.mkdir()
    for table_name, df in sample_tables.items():
        df.to_csv(source / f'{table_name}.csv', index=False)

    output = tmp_path / 'reports'
    monkeypatch.setattr(load_logistics_data, 'DATABASE_URL', None)
    monkeypatch.setattr(load_logistics_data, 'LOGISTICS_DATA_PATH', str(source))
    monkeypatch.setattr(export_reports, 'REPORTS_OUTPUT_PATH', str(output))
    monkeypatch.setattr(export_reports, 'REPORT_NAMES', [])
    return source, output


def test_run_reports_covers_registry_in_order(sample_tables):
    results = export_reports.run_reports(sample_tables)
    assert list(results) == list(REPORTS)
    assert len(results) == 17


def test_run_reports_subset(sample_tables):
    results = export_reports.run_reports(sample_tables, ['top_customers', 'late_orders'])
    assert list(results) == ['top_customers', 'late_orders']


def test_write_report_creates_csv(tmp_path):
    df = pd.DataFrame({'Status': ['Delivered'], 'TotalOrders': [3]})
    run_log = init_run_log()

    path = export_reports.write_report(df, 'status_distribution', str(tmp_path / 'out'), run_log)

    assert pd.read_csv(path).to_dict('records') == [{'Status': 'Delivered', 'TotalOrders': 3}]
    assert run_log['info']


def test_main_exports_every_report(csv_source):
    _, output = csv_source

    with pytest.raises(SystemExit) as exc:
        export_reports.main()

    assert exc.value.code == 0
    assert sorted(p.stem for p in output.glob('*.csv')) == sorted(REPORTS)

    regional = pd.read_csv(output / 'regional_order_distribution.csv')
    assert regional.to_dict('records') == [
        {'Region': 'East', 'TotalOrders': 4},
        {'Region': 'West', 'TotalOrders': 2},
    ]


def test_main_exports_selected_reports(csv_source, monkeypatch):
    _, output = csv_source
    monkeypatch.setattr(export_reports, 'REPORT_NAMES', ['overall_performance_metrics'])

    with pytest.raises(SystemExit) as exc:
        export_reports.main()

    assert exc.value.code == 0
    assert [p.name for p in output.glob('*.csv')] == ['overall_performance_metrics.csv']


def test_main_rejects_unknown_report(csv_source, monkeypatch):
    _, output = csv_source
    monkeypatch.setattr(export_reports, 'REPORT_NAMES', ['weekly_magic'])

    with pytest.raises(SystemExit) as exc:
        export_reports.main()

    assert exc.value.code == 1
    assert not output.exists()


def test_main_stops_on_validation_errors(csv_source):
    source, output = csv_source
    (source / 'Carriers.csv').unlink()

    with pytest.raises(SystemExit) as exc:
        export_reports.main()

    assert exc.value.code == 1
    assert not output.exists()
