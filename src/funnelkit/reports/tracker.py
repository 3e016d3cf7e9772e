"""Plan-vs-actual tracker tables.

Builds pandas frames for CSV export: one row per week for a single project
(with variances and cumulative pacing) and one row per project for the
master report.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable

import pandas as pd

from funnelkit.constants import VERTICALS
from funnelkit.models import Project, ViewMode
from funnelkit.reports.aggregation import display_net_stored, summarize_project
from funnelkit.utils.logs import report

logger = report.settings(__file__)

MASTER_REPORT_COLUMNS = [
    'project_id', 'project', 'poc', 'location', 'status', 'locked',
    'plan_leads', 'actual_leads', 'leads_pct',
    'plan_ap', 'actual_ap', 'ap_pct',
    'plan_ad', 'actual_ad', 'ad_pct', 'status_ad',
    'plan_spend', 'actual_spend',
    'target_cpl', 'actual_cpl', 'target_cpw', 'actual_cpw',
    'digital_bookings', 'period_bv',
    'planned_bv', 'achieved_bv', 'digital_target_bv', 'digital_achieved_bv', 'digital_gap_bv',
    'received_budget', 'planned_spend', 'total_spends', 'pending_budget', 'percent_spent', 'buffer',
]


def weekly_tracker_frame(project: Project, view: ViewMode) -> pd.DataFrame:
    """Weekly plan vs actual for *project*, which must carry derived weeks."""
    plan = project.plan
    rows = []
    for week in sorted(project.weeks, key=lambda w: w.id):
        act = project.actual_for(week.id)
        rows.append({
            'week': week.week_label,
            'date_range': week.date_range,
            'plan_leads': week.leads,
            'actual_leads': act.leads,
            'plan_ap': week.ap,
            'actual_ap': act.ap,
            'plan_ad': week.ad,
            'actual_ad': act.ad,
            'plan_spend': week.spends_all_in if view == ViewMode.GROSS else week.spends_base,
            'actual_spend': display_net_stored(act.spends, plan, view),
            **{f'{v}_bookings': getattr(act, field) for v, (field, _) in VERTICALS.items()},
        })
    df = pd.DataFrame(rows)
    if df.empty:
        return df
    return add_variances(df)


def add_variances(df: pd.DataFrame) -> pd.DataFrame:
    for metric in ('leads', 'ap', 'ad', 'spend'):
        df[f'var_{metric}'] = df[f'actual_{metric}'] - df[f'plan_{metric}']
    # Cumulative pacing
    for metric in ('leads', 'ad', 'spend'):
        df[f'cum_plan_{metric}'] = df[f'plan_{metric}'].cumsum()
        df[f'cum_act_{metric}'] = df[f'actual_{metric}'].cumsum()
        df[f'cum_var_{metric}'] = df[f'cum_act_{metric}'] - df[f'cum_plan_{metric}']
    df['plan_cpl'] = df.apply(lambda r: (r['plan_spend'] / r['plan_leads']) if r['plan_leads'] > 0 else 0.0, axis=1)
    df['actual_cpl'] = df.apply(lambda r: (r['actual_spend'] / r['actual_leads']) if r['actual_leads'] > 0 else 0.0, axis=1)
    return df


def master_report_frame(projects: Iterable[Project], start_week: int, end_week: int, view: ViewMode) -> pd.DataFrame:
    """One row per project: period delivery, lifetime revenue and budget position."""
    rows = []
    for project in projects:
        s = summarize_project(project, start_week, end_week, view)
        rows.append({
            'project_id': project.id,
            'project': project.name,
            'poc': project.poc,
            'location': project.location,
            'status': project.status,
            'locked': project.is_locked,
            'plan_leads': s.period.leads.target,
            'actual_leads': s.period.leads.achieved,
            'leads_pct': s.period.leads.delivery_pct,
            'plan_ap': s.period.ap.target,
            'actual_ap': s.period.ap.achieved,
            'ap_pct': s.period.ap.delivery_pct,
            'plan_ad': s.period.ad.target,
            'actual_ad': s.period.ad.achieved,
            'ad_pct': s.period.ad.delivery_pct,
            'status_ad': s.period.ad.status,
            'plan_spend': s.period.plan_spend,
            'actual_spend': s.period.actual_spend,
            'target_cpl': s.period.cpl.target,
            'actual_cpl': s.period.cpl.achieved,
            'target_cpw': s.period.cpw.target,
            'actual_cpw': s.period.cpw.achieved,
            'digital_bookings': s.period.bookings['digital'],
            'period_bv': s.period.achieved_bv,
            'planned_bv': s.lifetime.planned_bv,
            'achieved_bv': s.lifetime.achieved_bv,
            'digital_target_bv': s.lifetime.digital.target,
            'digital_achieved_bv': s.lifetime.digital.achieved,
            'digital_gap_bv': s.lifetime.digital_deficit,
            'received_budget': s.budget.received,
            'planned_spend': s.budget.planned_spend,
            'total_spends': s.budget.total_spends,
            'pending_budget': s.budget.pending,
            'percent_spent': s.budget.percent_spent,
            'buffer': s.budget.buffer,
        })
    return pd.DataFrame(rows, columns=MASTER_REPORT_COLUMNS)


def write_csv(df: pd.DataFrame, out_path: Path) -> Path:
    out_path = Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(out_path, index=False)
    logger.info("Wrote %d row(s) to %s", len(df), out_path)
    return out_path
