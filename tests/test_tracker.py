import pandas as pd
import pytest

from funnelkit.models import ViewMode
from funnelkit.reports.aggregation import summarize_budget
from funnelkit.reports.metrics import derive_metrics
from funnelkit.reports.tracker import MASTER_REPORT_COLUMNS, master_report_frame, weekly_tracker_frame, write_csv
from funnelkit.reports.weeks import with_derived_weeks


def test_weekly_tracker_frame(derived_horizon):
    df = weekly_tracker_frame(derived_horizon, ViewMode.NET)
    assert len(df) == 13
    assert df.loc[0, 'date_range'] == "1 Oct - 7 Oct"
    assert df.loc[0, 'var_leads'] == 38
    assert df.loc[2, 'cum_act_leads'] == 229
    assert df['cum_plan_spend'].iloc[-1] == pytest.approx(derive_metrics(derived_horizon.plan).base_budget)
    assert df.loc[1, 'digital_bookings'] == 1
    assert df.loc[0, 'plan_cpl'] == 0.0
    assert df.loc[5, 'plan_cpl'] == pytest.approx(4819)


def test_weekly_tracker_gross_spend(derived_horizon):
    df = weekly_tracker_frame(derived_horizon, ViewMode.GROSS)
    assert df.loc[0, 'actual_spend'] == pytest.approx(137143 * 1.18)


def test_master_report_frame(demo):
    projects = [with_derived_weeks(p) for p in demo]
    df = master_report_frame(projects, 0, 2, ViewMode.NET)
    assert list(df.columns) == MASTER_REPORT_COLUMNS
    assert list(df['project_id']) == ["1", "2"]
    row = df.iloc[0]
    assert row['actual_leads'] == 229
    assert row['digital_achieved_bv'] == pytest.approx(14)
    assert bool(row['locked']) is True
    assert df.iloc[1]['actual_leads'] == 0
    budget = summarize_budget(projects[0], ViewMode.NET)
    assert row['buffer'] == pytest.approx(budget.received - budget.planned_spend)
    assert row['planned_spend'] == pytest.approx(budget.planned_spend)


def test_master_report_empty():
    df = master_report_frame([], 0, 12, ViewMode.NET)
    assert df.empty
    assert list(df.columns) == MASTER_REPORT_COLUMNS


def test_write_csv(tmp_path, derived_horizon):
    out = write_csv(weekly_tracker_frame(derived_horizon, ViewMode.NET), tmp_path / "nested" / "t.csv")
    assert out.exists()
    assert len(pd.read_csv(out)) == 13
