"""In-memory project repository.

The engine reads projects through ``get_project`` and writes whole new
``Project`` objects through ``replace_project``; nothing is updated in place.
A lock serialises concurrent writers so each edit sees the latest state.
"""

from __future__ import annotations

import json
import threading
import uuid
from datetime import date
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from funnelkit.constants import AP_TO_AD_RATIO
from funnelkit.defaults import DEFAULT_POCS, new_project
from funnelkit.models import Poc, Project, User, project_from_dict, project_to_dict
from funnelkit.policy import Capability, EditIntent, apply_edit, has_capability
from funnelkit.reports.portfolio import visible_projects
from funnelkit.reports.weeks import with_derived_weeks
from funnelkit.utils.logs import report

logger = report.settings(__file__)


class ProjectStore:
    def __init__(self, projects: Iterable[Project] = (), pocs: Iterable[Poc] = DEFAULT_POCS) -> None:
        self._lock = threading.RLock()
        self._projects: Dict[str, Project] = {p.id: p for p in projects}
        self._pocs: List[Poc] = list(pocs)

    # Reads
    def get_project(self, project_id: str) -> Optional[Project]:
        return self._projects.get(project_id)

    def list_projects(self) -> List[Project]:
        return list(self._projects.values())

    @property
    def pocs(self) -> List[Poc]:
        return list(self._pocs)

    def calculated_project(self, project_id: str, ap_to_ad_ratio: float = AP_TO_AD_RATIO) -> Optional[Project]:
        project = self.get_project(project_id)
        return with_derived_weeks(project, ap_to_ad_ratio) if project else None

    def visible_to(
        self,
        user: User,
        poc_filter: Optional[str] = None,
        ap_to_ad_ratio: float = AP_TO_AD_RATIO,
    ) -> List[Project]:
        """Projects *user* may see, with derived weeks filled in."""
        return [with_derived_weeks(p, ap_to_ad_ratio) for p in visible_projects(user, self.list_projects(), poc_filter)]

    # Writes
    def replace_project(self, project_id: str, new_state: Project) -> bool:
        """Swap in a new project state. Unknown ids are ignored."""
        with self._lock:
            if project_id not in self._projects:
                logger.info("replace_project: no project %s", project_id)
                return False
            self._projects[project_id] = new_state
            logger.debug("Project %s replaced", project_id)
            return True

    def apply(self, project_id: str, intent: EditIntent, actor: User) -> Optional[Project]:
        """Apply one edit atomically; returns the resulting project (``None`` if unknown)."""
        with self._lock:
            current = self.get_project(project_id)
            if current is None:
                logger.info("Ignoring %s for missing project %s", type(intent).__name__, project_id)
                return None
            updated = apply_edit(current, intent, actor)
            if updated is not current:
                self._projects[project_id] = updated
            return updated

    def create_project(self, name: str, poc: str, actor: User, start_date: date) -> Optional[Project]:
        if not has_capability(actor, Capability.CREATE_PROJECT):
            logger.info("Denied project creation for %s", actor.name)
            return None
        if not name.strip():
            return None
        project = new_project(name.strip(), poc, start_date)
        with self._lock:
            self._projects[project.id] = project
        logger.info("Created project %s (%s)", project.id, project.name)
        return project

    def delete_project(self, project_id: str, actor: User) -> bool:
        if not has_capability(actor, Capability.DELETE_PROJECT):
            logger.info("Denied deletion of project %s for %s", project_id, actor.name)
            return False
        with self._lock:
            removed = self._projects.pop(project_id, None)
        if removed is not None:
            logger.info("Deleted project %s (%s)", project_id, removed.name)
        return removed is not None

    def add_poc(self, name: str) -> Optional[Poc]:
        if not name.strip():
            return None
        poc = Poc(uuid.uuid4().hex[:12], name.strip())
        with self._lock:
            self._pocs.append(poc)
        return poc

    # JSON snapshots
    @classmethod
    def from_json(cls, path: Path, default_start: Optional[date] = None) -> "ProjectStore":
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        projects = [project_from_dict(p, default_start) for p in data.get("projects", [])]
        pocs = [Poc(str(p["id"]), str(p["name"])) for p in data.get("pocs", [])] or list(DEFAULT_POCS)
        logger.info("Loaded %d project(s) from %s", len(projects), path)
        return cls(projects, pocs)

    def to_json(self, path: Path) -> Path:
        out = Path(path)
        out.parent.mkdir(parents=True, exist_ok=True)
        payload = {
            "projects": [project_to_dict(p) for p in self.list_projects()],
            "pocs": [{"id": p.id, "name": p.name} for p in self._pocs],
        }
        out.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        return out
