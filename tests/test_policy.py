import pytest

from funnelkit.models import ViewMode
from funnelkit.policy import (
    AddMediaChannel,
    Capability,
    RecordActual,
    RecordActualRevenue,
    ReassignPoc,
    SetManualMediaBudget,
    ToggleLock,
    UpdateBudgetField,
    UpdatePlanField,
    UpdateWeekSeed,
    apply_edit,
    has_capability,
)
from funnelkit.reports.metrics import effective_plan


def test_role_capabilities(gm, sm, manager):
    assert all(has_capability(gm, c) for c in Capability)
    assert has_capability(sm, Capability.EDIT_PLAN)
    assert not has_capability(sm, Capability.TOGGLE_LOCK)
    assert not has_capability(sm, Capability.CREATE_PROJECT)
    assert has_capability(manager, Capability.RECORD_ACTUALS)
    assert has_capability(manager, Capability.EDIT_OTHER_SPENDS)
    assert not has_capability(manager, Capability.EDIT_PLAN)


def test_manager_cannot_edit_plan(reserve, manager):
    assert apply_edit(reserve, UpdatePlanField("overall_bv", 600), manager) is reserve


def test_manager_records_actuals_on_locked_project(horizon, manager):
    updated = apply_edit(horizon, RecordActual(4, "leads", "150"), manager)
    assert updated.actuals[4].leads == 150


def test_lock_blocks_sm_but_not_gm(horizon, sm, gm):
    intent = UpdatePlanField("overall_bv", 400)
    assert apply_edit(horizon, intent, sm) is horizon
    assert apply_edit(horizon, intent, gm).plan.overall_bv == 400


def test_only_gm_toggles_lock(horizon, sm, gm):
    assert apply_edit(horizon, ToggleLock(), sm) is horizon
    assert apply_edit(horizon, ToggleLock(), gm).is_locked is False


def test_other_spends_net_edit_stored_gross(horizon, manager):
    updated = apply_edit(horizon, UpdateBudgetField("other_spends", 100000, ViewMode.NET), manager)
    assert updated.other_spends == pytest.approx(118000)


def test_received_budget_needs_capability(reserve, manager, sm):
    assert apply_edit(reserve, UpdateBudgetField("received_budget", 1000), manager) is reserve
    assert apply_edit(reserve, UpdateBudgetField("received_budget", "1,000"), sm).plan.received_budget == 1000


def test_received_budget_not_editable_as_plan_field(reserve, gm):
    assert apply_edit(reserve, UpdatePlanField("received_budget", 5), gm) is reserve


def test_plan_field_coercion_and_view(reserve, sm):
    assert apply_edit(reserve, UpdatePlanField("ats", "abc"), sm).plan.ats == 0
    updated = apply_edit(reserve, UpdatePlanField("cpl", 5900, ViewMode.GROSS), sm)
    assert updated.plan.cpl == pytest.approx(5000)


def test_calculation_mode_validated(reserve, sm):
    assert apply_edit(reserve, UpdatePlanField("calculation_mode", "magic"), sm) is reserve
    assert apply_edit(reserve, UpdatePlanField("calculation_mode", "budget"), sm).plan.calculation_mode == "budget"


def test_week_seed_edit(reserve, sm):
    updated = apply_edit(reserve, UpdateWeekSeed(2, "spend_distribution", "20"), sm)
    assert updated.weeks[2].spend_distribution == 20
    assert apply_edit(reserve, UpdateWeekSeed(2, "leads", 5), sm) is reserve
    assert apply_edit(reserve, UpdateWeekSeed(40, "ad_conversion", 5), sm) is reserve


def test_revenue_override_is_an_actuals_edit(horizon, reserve, manager, sm):
    intent = RecordActualRevenue("digital", 21)
    # managers record actuals, and the lock does not gate actuals
    updated = apply_edit(horizon, intent, manager)
    assert updated is not horizon
    assert updated.plan.digital_contribution_percent == 6.0
    assert apply_edit(horizon, intent, sm).plan.digital_contribution_percent == 6.0
    assert apply_edit(reserve, intent, sm).plan.digital_contribution_percent == 4.2


def test_budget_input_can_be_cleared(reserve, sm):
    budget_mode = apply_edit(reserve, UpdatePlanField("calculation_mode", "budget"), sm)
    with_budget = apply_edit(budget_mode, UpdatePlanField("budget_input", "5,000,000"), sm)
    assert with_budget.plan.budget_input == 5_000_000
    cleared = apply_edit(with_budget, UpdatePlanField("budget_input", None), sm)
    assert cleared.plan.budget_input is None
    assert effective_plan(cleared.plan).overall_bv == 500
    assert apply_edit(with_budget, UpdatePlanField("budget_input", "  "), sm).plan.budget_input is None
    assert apply_edit(with_budget, UpdatePlanField("budget_input", "abc"), sm).plan.budget_input == 0


def test_media_plan_edits(reserve, sm, manager):
    assert apply_edit(reserve, AddMediaChannel("YouTube"), manager) is reserve
    updated = apply_edit(reserve, AddMediaChannel("YouTube", "yt"), sm)
    assert updated.media_plan[-1].id == "yt"
    assert apply_edit(reserve, SetManualMediaBudget("250000"), sm).manual_media_budget == 250000
    assert apply_edit(reserve, SetManualMediaBudget(None), sm).manual_media_budget is None


def test_reassign_poc(reserve, sm, manager):
    assert apply_edit(reserve, ReassignPoc("Pratham"), manager) is reserve
    assert apply_edit(reserve, ReassignPoc("Pratham"), sm).poc == "Pratham"
