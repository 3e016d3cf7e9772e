"""Data model for campaign planning and tracking.

All records are frozen dataclasses. Updates go through ``dataclasses.replace``
so a reader holding a ``Project`` never sees it half-updated.

Money stored on ``PlanningData.received_budget`` and ``Project.other_spends``
is tax-inclusive (gross). Actual media ``spends`` are tax-exclusive (net).
BV and ticket size are in crore.
"""

from __future__ import annotations

import collections.abc
from dataclasses import asdict, dataclass, field, fields
from datetime import date
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple


class ViewMode(str, Enum):
    NET = "net"      # brand view, excluding tax / agency fee
    GROSS = "gross"  # agency view, including tax / agency fee

    @classmethod
    def parse(cls, value: "str | ViewMode") -> "ViewMode":
        if isinstance(value, ViewMode):
            return value
        key = str(value).strip().lower()
        aliases = {"brand": cls.NET, "agency": cls.GROSS}
        if key in aliases:
            return aliases[key]
        return cls(key)


class UserRole(str, Enum):
    GM = "GM"            # head of marketing
    SM = "SM"            # cluster head
    MANAGER = "MANAGER"  # project SPOC


@dataclass(frozen=True)
class User:
    id: str
    name: str
    role: UserRole


@dataclass(frozen=True)
class Poc:
    id: str
    name: str


@dataclass(frozen=True)
class PlanningData:
    overall_bv: float = 350.0
    ats: float = 7.0
    cpl: float = 4819.0
    tax_percent: float = 18.0
    ltw_percent: float = 3.0
    wtb_percent: float = 6.0
    digital_contribution_percent: float = 12.5
    presales_contribution_percent: float = 2.5
    brand_contribution_percent: float = 5.0
    referral_contribution_percent: float = 5.0
    cp_contribution_percent: float = 75.0
    received_budget: float = 0.0
    calculation_mode: str = "revenue"  # 'revenue' | 'budget'
    budget_input: Optional[float] = None


@dataclass(frozen=True)
class CalculatedMetrics:
    total_units: float
    digital_units: float
    presales_units: float
    digital_bv: float
    presales_bv: float
    target_walkins: float
    target_leads: float
    base_budget: float
    tax_amount: float
    all_in_budget: float
    cpw: float
    cpb: float
    revenue: float
    target_com: float


@dataclass(frozen=True)
class WeeklyData:
    id: int
    week_label: str
    date_range: str
    spend_distribution: float = 0.0
    lead_distribution: float = 0.0
    ad_conversion: float = 0.0
    leads: float = 0.0
    cumulative_leads: float = 0.0
    ap: float = 0.0
    cumulative_ap: float = 0.0
    ad: float = 0.0
    cumulative_ad: float = 0.0
    spends_base: float = 0.0
    spends_all_in: float = 0.0


SEED_FIELDS = ("spend_distribution", "lead_distribution", "ad_conversion")


@dataclass(frozen=True)
class WeeklyActuals:
    week_id: int
    leads: float = 0.0
    ap: float = 0.0
    ad: float = 0.0
    spends: float = 0.0
    bookings: float = 0.0
    presales_bookings: float = 0.0
    brand_bookings: float = 0.0
    referral_bookings: float = 0.0
    cp_bookings: float = 0.0


ACTUAL_FIELDS = tuple(f.name for f in fields(WeeklyActuals) if f.name != "week_id")


class ActualsByWeek(collections.abc.Mapping):
    """Read-only ``week_id -> WeeklyActuals`` mapping. Hashable, so ``Project`` is too."""

    __slots__ = ("_entries",)

    def __init__(self, entries: Any = ()) -> None:
        self._entries: Dict[int, WeeklyActuals] = dict(entries)

    def __getitem__(self, week_id: int) -> WeeklyActuals:
        return self._entries[week_id]

    def __iter__(self):
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __hash__(self) -> int:
        return hash(frozenset(self._entries.items()))

    def __repr__(self) -> str:
        return f"ActualsByWeek({self._entries!r})"


@dataclass(frozen=True)
class MediaChannel:
    id: str
    name: str
    allocation_percent: float = 0.0
    estimated_cpl: float = 0.0
    capi_percent: float = 0.0
    capi_to_ap_percent: float = 0.0
    ap_to_ad_percent: float = 0.0
    is_custom: bool = False


@dataclass(frozen=True)
class ChannelPerformance:
    channel_id: str
    spends: float = 0.0
    leads: float = 0.0
    open_attempted: float = 0.0
    contacted: float = 0.0
    assigned_to_sales: float = 0.0
    ap: float = 0.0
    ad: float = 0.0
    bookings: float = 0.0
    lost: float = 0.0


CHANNEL_PERFORMANCE_FIELDS = tuple(f.name for f in fields(ChannelPerformance) if f.name != "channel_id")


@dataclass(frozen=True)
class Project:
    id: str
    name: str
    poc: str
    start_date: date
    plan: PlanningData = field(default_factory=PlanningData)
    weeks: Tuple[WeeklyData, ...] = ()
    actuals: Mapping[int, WeeklyActuals] = field(default_factory=ActualsByWeek)
    media_plan: Tuple[MediaChannel, ...] = ()
    channel_performance: Tuple[ChannelPerformance, ...] = ()
    location: str = ""
    status: str = "Planning"
    other_spends: float = 0.0
    is_locked: bool = False
    manual_media_budget: Optional[float] = None

    def __post_init__(self) -> None:
        if not isinstance(self.actuals, ActualsByWeek):
            object.__setattr__(self, "actuals", ActualsByWeek(self.actuals))

    def actual_for(self, week_id: int) -> WeeklyActuals:
        """Actuals for *week_id*; an absent entry reads as all zeros."""
        return self.actuals.get(week_id) or WeeklyActuals(week_id=week_id)


# ---------------------------------------------------------------------------
# Plain-dict conversion (JSON snapshots for the CLI)
# ---------------------------------------------------------------------------


def project_to_dict(project: Project) -> Dict[str, Any]:
    data = {f.name: getattr(project, f.name) for f in fields(project)}
    data["plan"] = asdict(project.plan)
    data["start_date"] = project.start_date.isoformat()
    data["weeks"] = [asdict(w) for w in project.weeks]
    data["actuals"] = {str(k): asdict(v) for k, v in sorted(project.actuals.items())}
    data["media_plan"] = [asdict(c) for c in project.media_plan]
    data["channel_performance"] = [asdict(c) for c in project.channel_performance]
    return data


def project_from_dict(data: Mapping[str, Any], default_start: Optional[date] = None) -> Project:
    """Build a ``Project`` from a snapshot dict.

    Week seeds are regenerated when ``weeks`` is missing; derived week fields in
    the snapshot are ignored by the engine anyway.
    """
    from funnelkit.reports.weeks import generate_weeks

    start = data.get("start_date") or default_start
    if start is None:
        raise ValueError(f"project {data.get('id')!r} has no start_date")
    start_date = date.fromisoformat(start) if isinstance(start, str) else start
    plan = PlanningData(**dict(data.get("plan") or {}))
    raw_weeks = data.get("weeks")
    if raw_weeks:
        weeks = tuple(WeeklyData(**dict(w)) for w in raw_weeks)
    else:
        weeks = tuple(generate_weeks(start_date))
    actuals = {}
    for key, raw in (data.get("actuals") or {}).items():
        entry = dict(raw)
        entry.setdefault("week_id", int(key))
        actuals[int(key)] = WeeklyActuals(**entry)
    return Project(
        id=str(data["id"]),
        name=str(data.get("name", "")),
        poc=str(data.get("poc", "")),
        start_date=start_date,
        plan=plan,
        weeks=weeks,
        actuals=actuals,
        media_plan=tuple(MediaChannel(**dict(c)) for c in data.get("media_plan") or ()),
        channel_performance=tuple(ChannelPerformance(**dict(c)) for c in data.get("channel_performance") or ()),
        location=str(data.get("location", "")),
        status=str(data.get("status", "Planning")),
        other_spends=float(data.get("other_spends", 0.0)),
        is_locked=bool(data.get("is_locked", False)),
        manual_media_budget=data.get("manual_media_budget"),
    )


__all__ = [
    "ViewMode",
    "UserRole",
    "User",
    "Poc",
    "PlanningData",
    "CalculatedMetrics",
    "WeeklyData",
    "WeeklyActuals",
    "MediaChannel",
    "ChannelPerformance",
    "ActualsByWeek",
    "Project",
    "SEED_FIELDS",
    "ACTUAL_FIELDS",
    "CHANNEL_PERFORMANCE_FIELDS",
    "project_to_dict",
    "project_from_dict",
]
