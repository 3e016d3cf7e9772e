from datetime import date

import pytest

from funnelkit.constants import DEFAULT_AD_CONVERSION
from funnelkit.reports.metrics import derive_metrics
from funnelkit.reports.weeks import (
    generate_weeks,
    recalculate_weeks,
    report_window,
    week_date_range,
    week_index_for_date,
)


def test_generate_weeks_defaults(start_date):
    weeks = generate_weeks(start_date)
    assert len(weeks) == 13
    assert [w.id for w in weeks] == list(range(13))
    assert weeks[0].week_label == "Week 1"
    assert weeks[0].date_range == "1 Oct - 7 Oct"
    assert weeks[4].date_range == "29 Oct - 4 Nov"
    assert [w.ad_conversion for w in weeks] == DEFAULT_AD_CONVERSION
    assert sum(w.spend_distribution for w in weeks) == 100
    assert weeks[0].leads == 0


def test_week_date_range_crosses_year():
    assert week_date_range(date(2025, 12, 29), 0) == "29 Dec - 4 Jan"


def test_recalculate_distributes_targets(start_date, plan):
    m = derive_metrics(plan)
    weeks = recalculate_weeks(generate_weeks(start_date), m)
    w2 = weeks[2]
    assert w2.leads == pytest.approx(m.target_leads * 0.07)
    assert w2.ad == pytest.approx(w2.leads * 0.03)
    assert w2.ap == pytest.approx(w2.ad * 2)
    assert w2.spends_base == pytest.approx(m.base_budget * 0.07)
    assert w2.spends_all_in == pytest.approx(m.all_in_budget * 0.07)
    assert weeks[-1].cumulative_leads == pytest.approx(m.target_leads)
    assert sum(w.spends_base for w in weeks) == pytest.approx(m.base_budget)


def test_recalculate_is_idempotent(start_date, plan):
    m = derive_metrics(plan)
    once = recalculate_weeks(generate_weeks(start_date), m)
    assert recalculate_weeks(once, m) == once


def test_cumulatives_are_monotonic_and_ordered(start_date, plan):
    m = derive_metrics(plan)
    shuffled = list(reversed(generate_weeks(start_date)))
    weeks = recalculate_weeks(shuffled, m)
    assert [w.id for w in weeks] == list(range(13))
    for prev, cur in zip(weeks, weeks[1:]):
        assert cur.cumulative_leads >= prev.cumulative_leads
        assert cur.cumulative_ap >= prev.cumulative_ap
        assert cur.cumulative_ad >= prev.cumulative_ad


def test_custom_ap_to_ad_ratio(start_date, plan):
    weeks = recalculate_weeks(generate_weeks(start_date), derive_metrics(plan), ap_to_ad_ratio=3)
    assert weeks[5].ap == pytest.approx(weeks[5].ad * 3)


def test_distribution_not_required_to_sum_to_100(start_date, plan):
    m = derive_metrics(plan)
    weeks = recalculate_weeks(generate_weeks(start_date, lead_distribution=[50] * 13), m)
    assert weeks[-1].cumulative_leads == pytest.approx(m.target_leads * 6.5)


def test_week_index_for_date(start_date):
    assert week_index_for_date(date(2025, 9, 30), start_date) == -1
    assert week_index_for_date(start_date, start_date) == 0
    assert week_index_for_date(date(2025, 10, 7), start_date) == 0
    assert week_index_for_date(date(2025, 10, 8), start_date) == 1
    assert week_index_for_date(date(2026, 6, 1), start_date) == 12


def test_report_window_clamps(start_date):
    assert report_window(date(2025, 9, 1), date(2025, 10, 20), start_date) == (0, 2)
    assert report_window(date(2025, 9, 1), date(2025, 9, 20), start_date) == (0, 0)
    assert report_window(date(2025, 10, 15), date(2027, 1, 1), start_date) == (2, 12)
