"""Plan -> target funnel derivation.

Works backward from the sales goal: BV -> digital units -> walk-ins (WTB) ->
leads (LTW) -> budget (CPL). A zero conversion rate or ticket size yields
``inf``/``nan`` rather than an exception.
"""

from __future__ import annotations

from dataclasses import replace

from funnelkit.constants import CRORE
from funnelkit.models import CalculatedMetrics, PlanningData
from funnelkit.utils.numeric import ieee_divide, pct

BUDGET_MODE = "budget"
REVENUE_MODE = "revenue"


def implied_overall_bv(plan: PlanningData) -> float:
    """Invert the funnel: overall BV (crore) that ``budget_input`` buys."""
    budget = plan.budget_input or 0.0
    leads = ieee_divide(budget, plan.cpl)
    walkins = leads * pct(plan.ltw_percent)
    digital_units = walkins * pct(plan.wtb_percent)
    digital_bv = digital_units * plan.ats
    return ieee_divide(digital_bv, pct(plan.digital_contribution_percent))


def is_budget_driven(plan: PlanningData) -> bool:
    return plan.calculation_mode == BUDGET_MODE and plan.budget_input is not None


def effective_plan(plan: PlanningData) -> PlanningData:
    """The plan the engine actually derives from.

    In budget-driven mode the overall BV is whatever the entered budget buys;
    otherwise the plan is returned as-is.
    """
    if is_budget_driven(plan):
        return replace(plan, overall_bv=implied_overall_bv(plan))
    return plan


def derive_metrics(plan: PlanningData) -> CalculatedMetrics:
    plan = effective_plan(plan)

    digital_bv = plan.overall_bv * pct(plan.digital_contribution_percent)
    presales_bv = plan.overall_bv * pct(plan.presales_contribution_percent)

    total_units = ieee_divide(plan.overall_bv, plan.ats)
    digital_units = ieee_divide(digital_bv, plan.ats)
    presales_units = ieee_divide(presales_bv, plan.ats)

    target_walkins = ieee_divide(digital_units, pct(plan.wtb_percent))
    target_leads = ieee_divide(target_walkins, pct(plan.ltw_percent))

    base_budget = target_leads * plan.cpl
    tax_amount = base_budget * pct(plan.tax_percent)
    all_in_budget = base_budget + tax_amount

    return CalculatedMetrics(
        total_units=total_units,
        digital_units=digital_units,
        presales_units=presales_units,
        digital_bv=digital_bv,
        presales_bv=presales_bv,
        target_walkins=target_walkins,
        target_leads=target_leads,
        base_budget=base_budget,
        tax_amount=tax_amount,
        all_in_budget=all_in_budget,
        cpw=ieee_divide(base_budget, target_walkins),
        cpb=ieee_divide(base_budget, digital_units),
        revenue=plan.overall_bv * CRORE,
        target_com=ieee_divide(all_in_budget, digital_bv * CRORE) * 100,
    )
