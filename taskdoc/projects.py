"""Project directory used to label project chips.

Project chips store only a project id. When a chip is shown as text the id
is looked up here and rendered as ``#Project Name``.
"""

from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass, replace
from typing import Callable, Optional

from .constants import DocumentConstants

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Project:
    id: str
    name: str
    created_at: Optional[float] = None


Listener = Callable[[list[Project]], None]


class ProjectDirectory:
    """In-memory store of projects, keyed by id.

    Listeners registered with ``subscribe`` are called with the current
    project list on every change, so chip labels can follow renames.
    """

    def __init__(self, projects: Optional[list[Project]] = None):
        self._projects: dict[str, Project] = {}
        self._listeners: list[Listener] = []
        for project in projects or []:
            self._projects[project.id] = project

    def __len__(self) -> int:
        return len(self._projects)

    def __contains__(self, project_id) -> bool:
        return project_id in self._projects

    def projects(self) -> list[Project]:
        return list(self._projects.values())

    def get(self, project_id: Optional[str]) -> Optional[Project]:
        if not project_id:
            return None
        return self._projects.get(str(project_id))

    def get_name(self, project_id: Optional[str]) -> Optional[str]:
        project = self.get(project_id)
        return project.name if project else None

    def add(self, name: str, project_id: Optional[str] = None) -> Project:
        """Add a project, generating an id if none is given.

        Adding an id that already exists keeps the existing project.
        """
        project_id = project_id or f"proj-{uuid.uuid4().hex[:12]}"
        existing = self._projects.get(project_id)
        if existing:
            return existing
        project = Project(project_id, str(name), created_at=time.time())
        self._projects[project_id] = project
        self._notify()
        return project

    def update(self, project_id: str, name: str) -> Optional[Project]:
        project = self._projects.get(project_id)
        if project is None:
            return None
        project = replace(project, name=str(name))
        self._projects[project_id] = project
        self._notify()
        return project

    def remove(self, project_id: str) -> bool:
        if self._projects.pop(project_id, None) is None:
            return False
        self._notify()
        return True

    def ensure(self, project_id: Optional[str], name: Optional[str] = None) -> Optional[Project]:
        """Return the project, creating it when missing and a name is given."""
        if not project_id:
            return None
        project = self.get(project_id)
        if project:
            return project
        if not name:
            return None
        return self.add(name, project_id)

    def clear(self) -> None:
        self._projects.clear()
        self._notify()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a change listener; returns a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        snapshot = self.projects()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception as e:
                logger.warning(f"Project listener {listener!r} failed: {e}")

    def resolve_label(
        self,
        kind: str,
        reference_id: Optional[str],
        fallback_name: Optional[str] = None,
    ) -> str:
        """Return the display label for an atomic reference node.

        Known ids resolve to ``#Name``. Unknown ids fall back to
        ``#fallback_name``, then ``#reference_id``, then the placeholder.
        """
        prefix = DocumentConstants.LABEL_PREFIX
        name = self.get_name(reference_id)
        if name:
            return f"{prefix}{name}"
        if fallback_name:
            return f"{prefix}{fallback_name}"
        if reference_id:
            return f"{prefix}{reference_id}"
        return DocumentConstants.PLACEHOLDER_LABEL

    __call__ = resolve_label


# Global instance
_directory: Optional[ProjectDirectory] = None


def get_directory() -> ProjectDirectory:
    """Get the global project directory instance."""
    global _directory
    if _directory is None:
        _directory = ProjectDirectory()
    return _directory
