import math
from dataclasses import replace

import pytest

from funnelkit.reports.metrics import derive_metrics, effective_plan, implied_overall_bv


def test_reference_plan(plan):
    m = derive_metrics(plan)
    assert m.total_units == pytest.approx(50.0)
    assert m.digital_bv == pytest.approx(43.75)
    assert m.digital_units == pytest.approx(6.25)
    assert m.presales_bv == pytest.approx(8.75)
    assert m.presales_units == pytest.approx(1.25)
    assert m.target_walkins == pytest.approx(104.1667, rel=1e-4)
    assert m.target_leads == pytest.approx(3472.22, rel=1e-4)
    assert m.base_budget == pytest.approx(16_732_639, rel=1e-3)
    assert m.all_in_budget == pytest.approx(19_744_514, rel=1e-3)
    assert m.tax_amount == pytest.approx(m.base_budget * 0.18)
    assert m.revenue == pytest.approx(3_500_000_000)


def test_unit_costs(plan):
    m = derive_metrics(plan)
    # walk-in cost is CPL / LTW, booking cost is CPL / (LTW * WTB)
    assert m.cpw == pytest.approx(4819 / 0.03)
    assert m.cpb == pytest.approx(4819 / 0.03 / 0.06)
    assert m.target_com == pytest.approx(m.all_in_budget / (43.75 * 10_000_000) * 100)


def test_zero_ticket_size_gives_inf_not_error(plan):
    m = derive_metrics(replace(plan, ats=0))
    assert math.isinf(m.total_units)
    assert math.isinf(m.digital_units)
    assert math.isinf(m.base_budget)


def test_zero_conversion_rates(plan):
    m = derive_metrics(replace(plan, wtb_percent=0))
    assert math.isinf(m.target_walkins)
    m = derive_metrics(replace(plan, ltw_percent=0))
    assert math.isinf(m.target_leads)


def test_zero_over_zero_is_nan(plan):
    m = derive_metrics(replace(plan, overall_bv=0, ats=0))
    assert math.isnan(m.total_units)
    assert math.isnan(m.digital_units)


def test_budget_mode_inverts_funnel(plan):
    budget_plan = replace(plan, calculation_mode="budget", budget_input=4819 * 1000)
    # 1000 leads -> 30 walk-ins -> 1.8 units -> 12.6 Cr digital -> 100.8 Cr overall
    assert implied_overall_bv(budget_plan) == pytest.approx(100.8)
    m = derive_metrics(budget_plan)
    assert m.target_leads == pytest.approx(1000)
    assert m.base_budget == pytest.approx(4_819_000)


def test_budget_mode_round_trips_revenue_mode(plan):
    base = derive_metrics(plan).base_budget
    budget_plan = replace(plan, calculation_mode="budget", budget_input=base)
    assert effective_plan(budget_plan).overall_bv == pytest.approx(350)


def test_budget_mode_without_input_keeps_plan(plan):
    budget_plan = replace(plan, calculation_mode="budget", budget_input=None)
    assert effective_plan(budget_plan) is budget_plan
