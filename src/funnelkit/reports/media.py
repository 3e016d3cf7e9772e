"""Channel-level media planning.

Independent of the week-based budget split: each channel takes its
allocation share of the media budget and runs it through its own estimated
CPL and qualification rates.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, fields, replace
from typing import List, Optional

from funnelkit.constants import (
    CHANNEL_PRESETS,
    DEFAULT_AP_TO_AD,
    DEFAULT_CAPI_TO_AP,
    DEFAULT_CHANNEL_CAPI,
    DEFAULT_CHANNEL_CPL,
)
from funnelkit.models import ChannelPerformance, MediaChannel, Project
from funnelkit.reports.metrics import derive_metrics
from funnelkit.utils.logs import report
from funnelkit.utils.numeric import pct, safe_divide

logger = report.settings(__file__)

EDITABLE_CHANNEL_FIELDS = tuple(f.name for f in fields(MediaChannel) if f.name not in {"id", "is_custom"})


@dataclass(frozen=True)
class ChannelPlan:
    channel_id: str
    name: str
    budget: float
    leads: float
    qualified: float
    ap: float
    ad: float

    @property
    def cpw(self) -> float:
        return safe_divide(self.budget, self.ad)


@dataclass(frozen=True)
class ChannelEfficiency:
    channel_id: str
    cpl: float
    cpap: float
    cpw: float
    cpb: float
    contact_rate_pct: float
    lost_pct: float


def media_budget(project: Project) -> float:
    """Net media budget: the manual override when set, else the plan's base budget."""
    if project.manual_media_budget is not None:
        return project.manual_media_budget
    return derive_metrics(project.plan).base_budget


def allocation_total(project: Project) -> float:
    """Sum of channel allocation %; not required to be 100."""
    return sum(c.allocation_percent for c in project.media_plan)


def plan_channel(channel: MediaChannel, budget: float) -> ChannelPlan:
    spend = budget * pct(channel.allocation_percent)
    leads = safe_divide(spend, channel.estimated_cpl)
    qualified = leads * pct(channel.capi_percent)
    ap = qualified * pct(channel.capi_to_ap_percent)
    return ChannelPlan(
        channel_id=channel.id,
        name=channel.name,
        budget=spend,
        leads=leads,
        qualified=qualified,
        ap=ap,
        ad=ap * pct(channel.ap_to_ad_percent),
    )


def plan_media(project: Project) -> List[ChannelPlan]:
    budget = media_budget(project)
    return [plan_channel(c, budget) for c in project.media_plan]


def channel_efficiency(perf: ChannelPerformance) -> ChannelEfficiency:
    return ChannelEfficiency(
        channel_id=perf.channel_id,
        cpl=safe_divide(perf.spends, perf.leads),
        cpap=safe_divide(perf.spends, perf.ap),
        cpw=safe_divide(perf.spends, perf.ad),
        cpb=safe_divide(perf.spends, perf.bookings),
        contact_rate_pct=safe_divide(perf.contacted, perf.leads) * 100,
        lost_pct=safe_divide(perf.lost, perf.leads) * 100,
    )


# ---------------------------------------------------------------------------
# Media plan edits
# ---------------------------------------------------------------------------


def new_media_channel(preset_name: Optional[str] = None, channel_id: Optional[str] = None) -> MediaChannel:
    """A custom channel with defaults guessed from its name."""
    cpl, capi = DEFAULT_CHANNEL_CPL, DEFAULT_CHANNEL_CAPI
    if preset_name:
        lower = preset_name.lower()
        for keywords, preset_cpl, preset_capi in CHANNEL_PRESETS:
            if any(k in lower for k in keywords):
                cpl, capi = float(preset_cpl), float(preset_capi)
                break
    return MediaChannel(
        id=channel_id or uuid.uuid4().hex[:12],
        name=preset_name or "New Channel",
        allocation_percent=0.0,
        estimated_cpl=cpl,
        capi_percent=capi,
        capi_to_ap_percent=DEFAULT_CAPI_TO_AP,
        ap_to_ad_percent=DEFAULT_AP_TO_AD,
        is_custom=True,
    )


def add_media_channel(project: Project, preset_name: Optional[str] = None, channel_id: Optional[str] = None) -> Project:
    channel = new_media_channel(preset_name, channel_id)
    return replace(project, media_plan=project.media_plan + (channel,))


def update_media_channel(project: Project, channel_id: str, field: str, value) -> Project:
    if field not in EDITABLE_CHANNEL_FIELDS:
        logger.warning("Ignoring unknown media channel field %r on project %s", field, project.id)
        return project
    if not any(c.id == channel_id for c in project.media_plan):
        logger.info("Ignoring edit of missing channel %s on project %s", channel_id, project.id)
        return project
    value = str(value) if field == "name" else float(value)
    return replace(
        project,
        media_plan=tuple(replace(c, **{field: value}) if c.id == channel_id else c for c in project.media_plan),
    )


def delete_media_channel(project: Project, channel_id: str) -> Project:
    kept = tuple(c for c in project.media_plan if c.id != channel_id)
    if len(kept) == len(project.media_plan):
        return project
    return replace(project, media_plan=kept)
