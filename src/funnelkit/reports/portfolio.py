"""Organisation-wide roll-up across every project a user can see.

Figures are straight currency sums, so the headline achievement % is
BV-weighted: a 500 Cr project moves it more than a 50 Cr one. It is not the
average of per-project percentages.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from funnelkit.constants import VERTICALS
from funnelkit.models import Project, User
from funnelkit.policy import Capability, has_capability
from funnelkit.reports.aggregation import VerticalRevenue, delivery_pct, summarize_lifetime


@dataclass(frozen=True)
class PortfolioSummary:
    project_count: int
    planned_bv: float
    verticals: Dict[str, VerticalRevenue]

    @property
    def achieved_bv(self) -> float:
        return sum(v.achieved for v in self.verticals.values())

    @property
    def digital(self) -> VerticalRevenue:
        return self.verticals["digital"]

    @property
    def digital_deficit(self) -> float:
        return self.digital.deficit

    @property
    def digital_achievement_pct(self) -> float:
        return self.digital.achievement_pct

    @property
    def digital_share_pct(self) -> float:
        return delivery_pct(self.digital.achieved, self.achieved_bv)

    @property
    def achievement_pct(self) -> float:
        return delivery_pct(self.achieved_bv, self.planned_bv)


def summarize_portfolio(projects: Iterable[Project]) -> PortfolioSummary:
    targets = {v: 0.0 for v in VERTICALS}
    achieved = {v: 0.0 for v in VERTICALS}
    planned_bv = 0.0
    count = 0
    for project in projects:
        lifetime = summarize_lifetime(project)
        planned_bv += lifetime.planned_bv
        for vertical, row in lifetime.verticals.items():
            targets[vertical] += row.target
            achieved[vertical] += row.achieved
        count += 1
    return PortfolioSummary(
        project_count=count,
        planned_bv=planned_bv,
        verticals={v: VerticalRevenue(v, targets[v], achieved[v]) for v in VERTICALS},
    )


def can_see_project(user: User, project: Project) -> bool:
    """GM and SM see everything; a manager sees projects where they are the SPOC."""
    if has_capability(user, Capability.VIEW_ALL_PROJECTS):
        return True
    first_name = user.name.split(" ")[0]
    return (bool(first_name) and first_name in project.poc) or project.poc == user.name


def visible_projects(user: User, projects: Iterable[Project], poc_filter: Optional[str] = None) -> List[Project]:
    """Projects *user* may see, optionally narrowed to one SPOC (``None``/``"All"`` = no filter)."""
    out = [p for p in projects if can_see_project(user, p)]
    if poc_filter and poc_filter != "All":
        out = [p for p in out if p.poc == poc_filter]
    return out
