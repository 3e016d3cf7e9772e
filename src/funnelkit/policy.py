"""Who may change what: capabilities per role and the single edit entry point.

Every mutation from a user goes through ``apply_edit(project, intent, actor)``.
A denied edit is not an error; the project comes back unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from enum import Enum
from typing import Any, Callable, ClassVar, Dict, FrozenSet, Optional, Type

from funnelkit.models import SEED_FIELDS, PlanningData, Project, User, UserRole, ViewMode
from funnelkit.reports import aggregation, ledger, media
from funnelkit.utils.logs import report
from funnelkit.utils.numeric import coerce_number

logger = report.settings(__file__)


class Capability(str, Enum):
    EDIT_PLAN = "EDIT_PLAN"
    EDIT_WEEKS = "EDIT_WEEKS"
    EDIT_MEDIA_PLAN = "EDIT_MEDIA_PLAN"
    EDIT_RECEIVED_BUDGET = "EDIT_RECEIVED_BUDGET"
    EDIT_OTHER_SPENDS = "EDIT_OTHER_SPENDS"
    EDIT_LOCKED = "EDIT_LOCKED"
    RECORD_ACTUALS = "RECORD_ACTUALS"
    REASSIGN_POC = "REASSIGN_POC"
    TOGGLE_LOCK = "TOGGLE_LOCK"
    CREATE_PROJECT = "CREATE_PROJECT"
    DELETE_PROJECT = "DELETE_PROJECT"
    VIEW_ALL_PROJECTS = "VIEW_ALL_PROJECTS"


ALL_CAPABILITIES: FrozenSet[Capability] = frozenset(Capability)

ROLE_CAPABILITY_MAP: Dict[UserRole, FrozenSet[Capability]] = {
    UserRole.GM: ALL_CAPABILITIES,
    UserRole.SM: ALL_CAPABILITIES
    - {Capability.EDIT_LOCKED, Capability.TOGGLE_LOCK, Capability.CREATE_PROJECT, Capability.DELETE_PROJECT},
    UserRole.MANAGER: frozenset({Capability.RECORD_ACTUALS, Capability.EDIT_OTHER_SPENDS}),
}

# Edits a locked project refuses unless the actor holds EDIT_LOCKED
LOCK_GATED: FrozenSet[Capability] = frozenset(
    {
        Capability.EDIT_PLAN,
        Capability.EDIT_WEEKS,
        Capability.EDIT_MEDIA_PLAN,
        Capability.EDIT_RECEIVED_BUDGET,
    }
)


def capabilities_for(user: User) -> FrozenSet[Capability]:
    return ROLE_CAPABILITY_MAP.get(user.role, frozenset())


def has_capability(user: User, capability: Capability) -> bool:
    return capability in capabilities_for(user)


# ---------------------------------------------------------------------------
# Edit intents
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class EditIntent:
    requires: ClassVar[FrozenSet[Capability]] = frozenset()

    def required_capabilities(self) -> FrozenSet[Capability]:
        return self.requires


@dataclass(frozen=True)
class UpdatePlanField(EditIntent):
    """Set one plan parameter. ``cpl``/``budget_input`` entered in *view* are stored net."""

    requires: ClassVar[FrozenSet[Capability]] = frozenset({Capability.EDIT_PLAN})
    key: str
    value: Any
    view: Optional[ViewMode] = None


@dataclass(frozen=True)
class UpdateBudgetField(EditIntent):
    """Set ``received_budget`` or ``other_spends`` as entered in *view*; stored gross."""

    field: str
    value: Any
    view: ViewMode = ViewMode.GROSS

    def required_capabilities(self) -> FrozenSet[Capability]:
        if self.field == "received_budget":
            return frozenset({Capability.EDIT_RECEIVED_BUDGET})
        return frozenset({Capability.EDIT_OTHER_SPENDS})


@dataclass(frozen=True)
class UpdateWeekSeed(EditIntent):
    requires: ClassVar[FrozenSet[Capability]] = frozenset({Capability.EDIT_WEEKS})
    week_id: int
    field: str
    value: Any


@dataclass(frozen=True)
class RecordActual(EditIntent):
    requires: ClassVar[FrozenSet[Capability]] = frozenset({Capability.RECORD_ACTUALS})
    week_id: int
    field: str
    value: Any


@dataclass(frozen=True)
class RecordActualRevenue(EditIntent):
    """Set a vertical's life-to-date revenue (crore); also rewrites its plan contribution %.

    An actuals edit: any role that records actuals may make it, locked or not.
    """

    requires: ClassVar[FrozenSet[Capability]] = frozenset({Capability.RECORD_ACTUALS})
    vertical: str
    revenue_cr: Any


@dataclass(frozen=True)
class RecordChannelPerformance(EditIntent):
    requires: ClassVar[FrozenSet[Capability]] = frozenset({Capability.RECORD_ACTUALS})
    channel_id: str
    field: str
    value: Any


@dataclass(frozen=True)
class UpdateMediaChannel(EditIntent):
    requires: ClassVar[FrozenSet[Capability]] = frozenset({Capability.EDIT_MEDIA_PLAN})
    channel_id: str
    field: str
    value: Any


@dataclass(frozen=True)
class AddMediaChannel(EditIntent):
    requires: ClassVar[FrozenSet[Capability]] = frozenset({Capability.EDIT_MEDIA_PLAN})
    preset_name: Optional[str] = None
    channel_id: Optional[str] = None


@dataclass(frozen=True)
class DeleteMediaChannel(EditIntent):
    requires: ClassVar[FrozenSet[Capability]] = frozenset({Capability.EDIT_MEDIA_PLAN})
    channel_id: str


@dataclass(frozen=True)
class SetManualMediaBudget(EditIntent):
    requires: ClassVar[FrozenSet[Capability]] = frozenset({Capability.EDIT_MEDIA_PLAN})
    value: Any


@dataclass(frozen=True)
class ToggleLock(EditIntent):
    requires: ClassVar[FrozenSet[Capability]] = frozenset({Capability.TOGGLE_LOCK})


@dataclass(frozen=True)
class ReassignPoc(EditIntent):
    requires: ClassVar[FrozenSet[Capability]] = frozenset({Capability.REASSIGN_POC})
    poc: str


def is_permitted(actor: User, project: Project, intent: EditIntent) -> bool:
    needed = intent.required_capabilities()
    held = capabilities_for(actor)
    if not needed <= held:
        return False
    if project.is_locked and needed & LOCK_GATED and Capability.EDIT_LOCKED not in held:
        return False
    return True


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------

_PLAN_FIELDS = {f.name for f in fields(PlanningData)}
_NET_STORED_PLAN_FIELDS = {"cpl", "budget_input"}
_CALCULATION_MODES = {"revenue", "budget"}


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _update_plan_field(project: Project, intent: UpdatePlanField) -> Project:
    if intent.key not in _PLAN_FIELDS or intent.key == "received_budget":
        logger.warning("Ignoring edit of plan field %r on project %s", intent.key, project.id)
        return project
    if intent.key == "calculation_mode":
        if intent.value not in _CALCULATION_MODES:
            logger.warning("Ignoring unknown calculation mode %r on project %s", intent.value, project.id)
            return project
        value: Any = intent.value
    elif intent.key == "budget_input" and _is_blank(intent.value):
        value = None
    else:
        value = coerce_number(intent.value)
        if intent.key in _NET_STORED_PLAN_FIELDS and intent.view is not None:
            value = aggregation.store_net_from_view(value, project.plan, intent.view)
    return replace(project, plan=replace(project.plan, **{intent.key: value}))


def _update_budget_field(project: Project, intent: UpdateBudgetField) -> Project:
    if intent.field not in ("received_budget", "other_spends"):
        logger.warning("Ignoring edit of budget field %r on project %s", intent.field, project.id)
        return project
    stored = aggregation.store_gross_from_view(coerce_number(intent.value), project.plan, intent.view)
    if intent.field == "received_budget":
        return replace(project, plan=replace(project.plan, received_budget=stored))
    return replace(project, other_spends=stored)


def _update_week_seed(project: Project, intent: UpdateWeekSeed) -> Project:
    if intent.field not in SEED_FIELDS:
        logger.warning("Ignoring edit of week field %r on project %s", intent.field, project.id)
        return project
    if not any(w.id == intent.week_id for w in project.weeks):
        logger.info("Ignoring edit of missing week %s on project %s", intent.week_id, project.id)
        return project
    value = coerce_number(intent.value)
    weeks = tuple(replace(w, **{intent.field: value}) if w.id == intent.week_id else w for w in project.weeks)
    return replace(project, weeks=weeks)


def _record_actual(project: Project, intent: RecordActual) -> Project:
    return ledger.record_actual(project, intent.week_id, intent.field, coerce_number(intent.value))


def _record_actual_revenue(project: Project, intent: RecordActualRevenue) -> Project:
    return ledger.record_actual_revenue(project, intent.vertical, coerce_number(intent.revenue_cr))


def _record_channel_performance(project: Project, intent: RecordChannelPerformance) -> Project:
    return ledger.record_channel_performance(project, intent.channel_id, intent.field, coerce_number(intent.value))


def _update_media_channel(project: Project, intent: UpdateMediaChannel) -> Project:
    value = intent.value if intent.field == "name" else coerce_number(intent.value)
    return media.update_media_channel(project, intent.channel_id, intent.field, value)


def _add_media_channel(project: Project, intent: AddMediaChannel) -> Project:
    return media.add_media_channel(project, intent.preset_name, intent.channel_id)


def _delete_media_channel(project: Project, intent: DeleteMediaChannel) -> Project:
    return media.delete_media_channel(project, intent.channel_id)


def _set_manual_media_budget(project: Project, intent: SetManualMediaBudget) -> Project:
    value = None if intent.value is None else coerce_number(intent.value)
    return replace(project, manual_media_budget=value)


def _toggle_lock(project: Project, intent: ToggleLock) -> Project:
    return replace(project, is_locked=not project.is_locked)


def _reassign_poc(project: Project, intent: ReassignPoc) -> Project:
    return replace(project, poc=intent.poc)


_HANDLERS: Dict[Type[EditIntent], Callable[[Project, Any], Project]] = {
    UpdatePlanField: _update_plan_field,
    UpdateBudgetField: _update_budget_field,
    UpdateWeekSeed: _update_week_seed,
    RecordActual: _record_actual,
    RecordActualRevenue: _record_actual_revenue,
    RecordChannelPerformance: _record_channel_performance,
    UpdateMediaChannel: _update_media_channel,
    AddMediaChannel: _add_media_channel,
    DeleteMediaChannel: _delete_media_channel,
    SetManualMediaBudget: _set_manual_media_budget,
    ToggleLock: _toggle_lock,
    ReassignPoc: _reassign_poc,
}


def apply_edit(project: Project, intent: EditIntent, actor: User) -> Project:
    """Apply *intent* to *project* on behalf of *actor*.

    Returns the updated project, or *project* itself when the actor lacks the
    capability or the project is locked against this kind of edit.
    """
    if not is_permitted(actor, project, intent):
        logger.info(
            "Denied %s on project %s for %s (%s)",
            type(intent).__name__,
            project.id,
            actor.name,
            actor.role.value,
        )
        return project
    handler = _HANDLERS[type(intent)]
    return handler(project, intent)
