"""Plan vs actual roll-ups for one project.

Two financial views are supported. Money the business receives
(``received_budget``, ``other_spends``) is stored gross and divided down for
the NET view; money spent on media (actual ``spends``) is stored net and
multiplied up for the GROSS view. Conversions are applied per field, never as
one global multiplier.

Period figures cover an inclusive week-index window. Life-to-date figures
ignore the window and use every recorded actual.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List

from funnelkit.constants import AT_RISK_THRESHOLD, ON_TRACK_THRESHOLD, VERTICALS
from funnelkit.models import PlanningData, Project, ViewMode, WeeklyData
from funnelkit.reports.metrics import effective_plan
from funnelkit.utils.numeric import ieee_divide, pct, safe_divide


# ---------------------------------------------------------------------------
# View conversion
# ---------------------------------------------------------------------------


def tax_divisor(plan: PlanningData) -> float:
    return 1 + pct(plan.tax_percent)


def tax_multiplier(plan: PlanningData, view: ViewMode) -> float:
    return tax_divisor(plan) if view == ViewMode.GROSS else 1.0


def display_gross_stored(value: float, plan: PlanningData, view: ViewMode) -> float:
    """Display a gross-stored amount (work orders, other spends) in *view*."""
    if view == ViewMode.GROSS:
        return value
    return ieee_divide(value, tax_divisor(plan))


def display_net_stored(value: float, plan: PlanningData, view: ViewMode) -> float:
    """Display a net-stored amount (media spends, CPL) in *view*."""
    return value * tax_multiplier(plan, view)


def store_gross_from_view(value: float, plan: PlanningData, view: ViewMode) -> float:
    """Inverse of ``display_gross_stored``: an amount entered in *view* -> gross storage."""
    if view == ViewMode.GROSS:
        return value
    return value * tax_divisor(plan)


def store_net_from_view(value: float, plan: PlanningData, view: ViewMode) -> float:
    """Inverse of ``display_net_stored``: an amount entered in *view* -> net storage."""
    return ieee_divide(value, tax_multiplier(plan, view))


# ---------------------------------------------------------------------------
# Result records
# ---------------------------------------------------------------------------


def classify_delivery(delivery_pct: float) -> str:
    if delivery_pct >= ON_TRACK_THRESHOLD:
        return "on-track"
    if delivery_pct >= AT_RISK_THRESHOLD:
        return "at-risk"
    return "off-track"


def delivery_pct(achieved: float, target: float) -> float:
    """``achieved / target`` as a percent; exactly 0 when the target is 0."""
    return safe_divide(achieved, target) * 100


@dataclass(frozen=True)
class FunnelDelivery:
    target: float
    achieved: float

    @property
    def delivery_pct(self) -> float:
        return delivery_pct(self.achieved, self.target)

    @property
    def status(self) -> str:
        return classify_delivery(self.delivery_pct)


@dataclass(frozen=True)
class CostRatio:
    target: float
    achieved: float

    @property
    def within_target(self) -> bool:
        """Achieved cost at or under target (both must be known)."""
        return self.achieved > 0 and self.target > 0 and self.achieved <= self.target


@dataclass(frozen=True)
class PeriodSummary:
    start_week: int
    end_week: int
    leads: FunnelDelivery
    ap: FunnelDelivery
    ad: FunnelDelivery
    plan_spend: float
    actual_spend: float
    cpl: CostRatio
    cpap: CostRatio
    cpw: CostRatio
    cpb: CostRatio
    bookings: Dict[str, float]
    direct_units: float
    cp_units: float
    achieved_bv: float


@dataclass(frozen=True)
class VerticalRevenue:
    vertical: str
    target: float
    achieved: float

    @property
    def achievement_pct(self) -> float:
        return delivery_pct(self.achieved, self.target)

    @property
    def deficit(self) -> float:
        """Positive is a shortfall, negative a surplus."""
        return self.target - self.achieved


@dataclass(frozen=True)
class LifetimeSummary:
    planned_bv: float
    total_units_target: float
    verticals: Dict[str, VerticalRevenue]
    achieved_units: float
    achieved_bv: float

    @property
    def digital(self) -> VerticalRevenue:
        return self.verticals["digital"]

    @property
    def digital_deficit(self) -> float:
        return self.digital.deficit

    @property
    def digital_share_pct(self) -> float:
        """Digital's share of everything achieved so far."""
        return delivery_pct(self.digital.achieved, self.achieved_bv)


@dataclass(frozen=True)
class BudgetSummary:
    received: float
    performance_spends: float
    other_spends: float
    planned_spend: float

    @property
    def total_spends(self) -> float:
        return self.performance_spends + self.other_spends

    @property
    def pending(self) -> float:
        return self.received - self.total_spends

    @property
    def pending_pct(self) -> float:
        return safe_divide(self.pending, self.received) * 100

    @property
    def percent_spent(self) -> float:
        return safe_divide(self.total_spends, self.received) * 100

    @property
    def buffer(self) -> float:
        return self.received - self.planned_spend


@dataclass(frozen=True)
class ProjectSummary:
    project_id: str
    name: str
    view: ViewMode
    period: PeriodSummary
    lifetime: LifetimeSummary
    budget: BudgetSummary


# ---------------------------------------------------------------------------
# Roll-ups
# ---------------------------------------------------------------------------


def weeks_in_period(project: Project, start_week: int, end_week: int) -> List[WeeklyData]:
    return [w for w in project.weeks if start_week <= w.id <= end_week]


def summarize_period(project: Project, start_week: int, end_week: int, view: ViewMode) -> PeriodSummary:
    """Delivery and efficiency for weeks ``start_week..end_week`` inclusive.

    *project* must already carry derived weeks (see ``with_derived_weeks``).
    """
    plan = project.plan
    weeks = weeks_in_period(project, start_week, end_week)
    actuals = [project.actual_for(w.id) for w in weeks]

    leads = FunnelDelivery(sum(w.leads for w in weeks), sum(a.leads for a in actuals))
    ap = FunnelDelivery(sum(w.ap for w in weeks), sum(a.ap for a in actuals))
    ad = FunnelDelivery(sum(w.ad for w in weeks), sum(a.ad for a in actuals))

    plan_spend = sum(w.spends_all_in if view == ViewMode.GROSS else w.spends_base for w in weeks)
    actual_spend = sum(display_net_stored(a.spends, plan, view) for a in actuals)

    bookings = {v: sum(getattr(a, field) for a in actuals) for v, (field, _) in VERTICALS.items()}
    target_digital_bookings = ad.target * pct(plan.wtb_percent)
    direct_units = sum(units for v, units in bookings.items() if v != "cp")

    return PeriodSummary(
        start_week=start_week,
        end_week=end_week,
        leads=leads,
        ap=ap,
        ad=ad,
        plan_spend=plan_spend,
        actual_spend=actual_spend,
        cpl=CostRatio(
            safe_divide(plan_spend, leads.target, default=display_net_stored(plan.cpl, plan, view)),
            safe_divide(actual_spend, leads.achieved),
        ),
        cpap=CostRatio(safe_divide(plan_spend, ap.target), safe_divide(actual_spend, ap.achieved)),
        cpw=CostRatio(safe_divide(plan_spend, ad.target), safe_divide(actual_spend, ad.achieved)),
        cpb=CostRatio(
            safe_divide(plan_spend, target_digital_bookings),
            safe_divide(actual_spend, bookings["digital"]),
        ),
        bookings=bookings,
        direct_units=direct_units,
        cp_units=bookings["cp"],
        achieved_bv=(direct_units + bookings["cp"]) * plan.ats,
    )


def summarize_lifetime(project: Project) -> LifetimeSummary:
    """Life-to-date revenue per vertical against the plan's contribution mix."""
    plan = effective_plan(project.plan)
    verticals: Dict[str, VerticalRevenue] = {}
    achieved_units = 0.0
    for vertical, (booking_field, plan_field) in VERTICALS.items():
        units = sum(getattr(a, booking_field) for a in project.actuals.values())
        achieved_units += units
        verticals[vertical] = VerticalRevenue(
            vertical=vertical,
            target=plan.overall_bv * pct(getattr(plan, plan_field)),
            achieved=units * plan.ats,
        )
    return LifetimeSummary(
        planned_bv=plan.overall_bv,
        total_units_target=plan.overall_bv / plan.ats if plan.ats > 0 else 0.0,
        verticals=verticals,
        achieved_units=achieved_units,
        achieved_bv=sum(v.achieved for v in verticals.values()),
    )


def summarize_budget(project: Project, view: ViewMode) -> BudgetSummary:
    plan = project.plan
    raw_spends = sum(project.actual_for(w.id).spends for w in project.weeks)
    return BudgetSummary(
        received=display_gross_stored(plan.received_budget, plan, view),
        performance_spends=display_net_stored(raw_spends, plan, view),
        other_spends=display_gross_stored(project.other_spends, plan, view),
        planned_spend=sum(w.spends_all_in if view == ViewMode.GROSS else w.spends_base for w in project.weeks),
    )


def summarize_project(project: Project, start_week: int, end_week: int, view: ViewMode) -> ProjectSummary:
    return ProjectSummary(
        project_id=project.id,
        name=project.name,
        view=view,
        period=summarize_period(project, start_week, end_week, view),
        lifetime=summarize_lifetime(project),
        budget=summarize_budget(project, view),
    )
