"""Actuals ledger: recorded weekly performance and per-channel counters.

Every function takes a ``Project`` and returns a new one; the input is never
modified. Unknown weeks, fields or verticals leave the project unchanged.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Dict

from funnelkit.constants import VERTICALS, WEEK_COUNT
from funnelkit.models import (
    ACTUAL_FIELDS,
    CHANNEL_PERFORMANCE_FIELDS,
    ChannelPerformance,
    Project,
    WeeklyActuals,
)
from funnelkit.reports.metrics import effective_plan, is_budget_driven
from funnelkit.utils.logs import report
from funnelkit.utils.numeric import at_least_one

logger = report.settings(__file__)

# Week that absorbs back-solved booking deltas
ADJUSTMENT_WEEK = 0
DIGITAL_PLAN_FIELD = VERTICALS["digital"][1]


def _week_ids(project: Project) -> set[int]:
    if project.weeks:
        return {w.id for w in project.weeks}
    return set(range(WEEK_COUNT))


def record_actual(project: Project, week_id: int, field: str, value: float) -> Project:
    """Upsert one actual figure for one week.

    Creates a zeroed entry for the week on first write. Sign and magnitude are
    not checked; negative values are corrections.
    """
    if field not in ACTUAL_FIELDS:
        logger.warning("Ignoring unknown actuals field %r on project %s", field, project.id)
        return project
    if week_id not in _week_ids(project):
        logger.info("Ignoring actual for missing week %s on project %s", week_id, project.id)
        return project
    current = project.actual_for(week_id)
    actuals: Dict[int, WeeklyActuals] = dict(project.actuals)
    actuals[week_id] = replace(current, **{field: float(value)})
    return replace(project, actuals=actuals)


def total_bookings(project: Project, vertical: str) -> float:
    """Life-to-date booking units recorded for *vertical*."""
    booking_field, _ = VERTICALS[vertical]
    return sum(getattr(a, booking_field) for a in project.actuals.values())


def back_solve_vertical_units(project: Project, vertical: str, revenue_cr: float) -> Project:
    """Make the vertical's life-to-date bookings worth *revenue_cr*.

    The whole unit delta lands in the adjustment week (week 0) rather than
    being spread across weeks.
    """
    if vertical not in VERTICALS:
        logger.warning("Ignoring unknown vertical %r on project %s", vertical, project.id)
        return project
    booking_field, _ = VERTICALS[vertical]
    ats = at_least_one(effective_plan(project.plan).ats)
    delta = revenue_cr / ats - total_bookings(project, vertical)

    bucket = project.actual_for(ADJUSTMENT_WEEK)
    actuals: Dict[int, WeeklyActuals] = dict(project.actuals)
    actuals[ADJUSTMENT_WEEK] = replace(bucket, **{booking_field: getattr(bucket, booking_field) + delta})
    return replace(project, actuals=actuals)


def revise_target_from_actual(project: Project, vertical: str, revenue_cr: float) -> Project:
    """Overwrite the vertical's plan contribution % from an actual revenue figure.

    Rounded to 2 decimals. This couples "what happened" back into "what was
    planned"; keep it separate from ``back_solve_vertical_units`` so either
    half can be dropped on its own.

    In budget-driven mode the implied overall BV depends on the digital
    contribution %, so revising digital rescales ``budget_input`` by the same
    factor and the overall BV stays put.
    """
    if vertical not in VERTICALS:
        logger.warning("Ignoring unknown vertical %r on project %s", vertical, project.id)
        return project
    _, plan_field = VERTICALS[vertical]
    plan = project.plan
    overall_bv = at_least_one(effective_plan(plan).overall_bv)
    contribution = round(revenue_cr / overall_bv * 100, 2)
    logger.debug("Project %s: %s -> %.2f%% from actual revenue %.4f Cr", project.id, plan_field, contribution, revenue_cr)
    changes: Dict[str, float] = {plan_field: contribution}
    if plan_field == DIGITAL_PLAN_FIELD and is_budget_driven(plan):
        if plan.digital_contribution_percent > 0:
            changes["budget_input"] = plan.budget_input * contribution / plan.digital_contribution_percent
        else:
            logger.warning("Project %s: digital contribution is 0; budget_input left unscaled", project.id)
    return replace(project, plan=replace(plan, **changes))


def record_actual_revenue(project: Project, vertical: str, revenue_cr: float) -> Project:
    """Set a vertical's life-to-date revenue: back-solve units, then revise the target mix."""
    if vertical not in VERTICALS:
        logger.warning("Ignoring unknown vertical %r on project %s", vertical, project.id)
        return project
    updated = back_solve_vertical_units(project, vertical, revenue_cr)
    return revise_target_from_actual(updated, vertical, revenue_cr)


def record_channel_performance(project: Project, channel_id: str, field: str, value: float) -> Project:
    """Upsert one raw funnel counter for a media channel."""
    if field not in CHANNEL_PERFORMANCE_FIELDS:
        logger.warning("Ignoring unknown channel performance field %r on project %s", field, project.id)
        return project
    rows = list(project.channel_performance)
    for i, row in enumerate(rows):
        if row.channel_id == channel_id:
            rows[i] = replace(row, **{field: float(value)})
            break
    else:
        rows.append(ChannelPerformance(channel_id=channel_id, **{field: float(value)}))
    return replace(project, channel_performance=tuple(rows))
