"""Weekly funnel distribution over the 13-week campaign window."""

from __future__ import annotations

from dataclasses import replace
from datetime import date, timedelta
from typing import Iterable, List, Optional, Sequence, Tuple

from funnelkit.constants import (
    AP_TO_AD_RATIO,
    DEFAULT_AD_CONVERSION,
    DEFAULT_LEAD_DISTRIBUTION,
    DEFAULT_SPEND_DISTRIBUTION,
    WEEK_COUNT,
    WEEK_LENGTH_DAYS,
)
from funnelkit.models import CalculatedMetrics, Project, WeeklyData
from funnelkit.reports.metrics import derive_metrics
from funnelkit.utils.numeric import pct


def week_date_range(start_date: date, week_id: int) -> str:
    """Label like ``"1 Oct - 7 Oct"`` for week *week_id* of a campaign starting *start_date*."""
    start = start_date + timedelta(days=week_id * WEEK_LENGTH_DAYS)
    end = start + timedelta(days=WEEK_LENGTH_DAYS - 1)
    return f"{start.day} {start:%b} - {end.day} {end:%b}"


def generate_weeks(
    start_date: date,
    spend_distribution: Optional[Sequence[float]] = None,
    lead_distribution: Optional[Sequence[float]] = None,
    ad_conversion: Optional[Sequence[float]] = None,
) -> List[WeeklyData]:
    """Seed the 13 weeks with the default (or supplied) distribution curves.

    Derived fields are left at zero; run ``recalculate_weeks`` to fill them.
    """
    spend = list(spend_distribution if spend_distribution is not None else DEFAULT_SPEND_DISTRIBUTION)
    leads = list(lead_distribution if lead_distribution is not None else DEFAULT_LEAD_DISTRIBUTION)
    conv = list(ad_conversion if ad_conversion is not None else DEFAULT_AD_CONVERSION)

    def at(values: List[float], i: int) -> float:
        return float(values[i]) if i < len(values) else 0.0

    return [
        WeeklyData(
            id=i,
            week_label=f"Week {i + 1}",
            date_range=week_date_range(start_date, i),
            spend_distribution=at(spend, i),
            lead_distribution=at(leads, i),
            ad_conversion=at(conv, i),
        )
        for i in range(WEEK_COUNT)
    ]


def recalculate_weeks(
    weeks: Iterable[WeeklyData],
    metrics: CalculatedMetrics,
    ap_to_ad_ratio: float = AP_TO_AD_RATIO,
) -> Tuple[WeeklyData, ...]:
    """Spread the plan targets over the weeks in id order.

    Only the three seed fields of each week are read; every derived field is
    recomputed, so calling this twice gives identical output. Distribution
    percentages are not required to sum to 100.
    """
    cum_leads = 0.0
    cum_ap = 0.0
    cum_ad = 0.0
    out: List[WeeklyData] = []
    for week in sorted(weeks, key=lambda w: w.id):
        leads = metrics.target_leads * pct(week.lead_distribution)
        cum_leads += leads
        ad = leads * pct(week.ad_conversion)
        ap = ad * ap_to_ad_ratio
        cum_ap += ap
        cum_ad += ad
        out.append(
            replace(
                week,
                leads=leads,
                cumulative_leads=cum_leads,
                ap=ap,
                cumulative_ap=cum_ap,
                ad=ad,
                cumulative_ad=cum_ad,
                spends_base=metrics.base_budget * pct(week.spend_distribution),
                spends_all_in=metrics.all_in_budget * pct(week.spend_distribution),
            )
        )
    return tuple(out)


def week_index_for_date(day: date, start_date: date) -> int:
    """Week index containing *day*: ``-1`` before the campaign, capped at the last week."""
    if day < start_date:
        return -1
    idx = (day - start_date).days // WEEK_LENGTH_DAYS
    return min(idx, WEEK_COUNT - 1)


def report_window(start_day: date, end_day: date, start_date: date) -> Tuple[int, int]:
    """Clamp a reporting date range to an inclusive ``(first, last)`` week index pair."""
    first = week_index_for_date(start_day, start_date)
    last = week_index_for_date(end_day, start_date)
    return max(0, first), (last if last >= 0 else 0)


def with_derived_weeks(project: Project, ap_to_ad_ratio: float = AP_TO_AD_RATIO) -> Project:
    """Return *project* with its week series recomputed from its current plan."""
    metrics = derive_metrics(project.plan)
    return replace(project, weeks=recalculate_weeks(project.weeks, metrics, ap_to_ad_ratio))
