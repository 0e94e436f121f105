"""The current project being edited and its persistence."""

from collections.abc import Iterable
from typing import Any

import structlog

from shared.contracts.dto.project import ProjectDTO
from shared.onboarding import normalize_document

from . import sections
from .fallback import ProjectStore

logger = structlog.get_logger(__name__)


class ProjectSession:
    """Single source of truth for one onboarding project.

    Edits are applied to ``project`` immediately and persisted afterwards
    through ``store``; with the default wiring that is a FallbackProjectStore,
    so an unreachable API degrades to the local store. Two sessions editing
    the same id overwrite each other per top-level key (last write wins).
    """

    def __init__(self, store: ProjectStore):
        self.store = store
        self._project: ProjectDTO | None = None
        self.created = False

    @property
    def project(self) -> ProjectDTO:
        if self._project is None:
            raise RuntimeError("No project loaded. Call open() first.")
        return self._project

    async def open(self, project_id: str | None = None) -> ProjectDTO:
        """Load ``project_id`` or, when no id is given, create a new project.

        A supplied id that neither store knows raises ProjectNotFoundError;
        a missing project is never replaced by a fresh one silently.
        """
        if project_id:
            project = await self.store.get(project_id)
            self.created = False
        else:
            project = await self.store.create()
            self.created = True

        self._project = project.model_copy(update={"data": normalize_document(project.data)})
        structlog.contextvars.bind_contextvars(project_id=self._project.id)
        logger.info("project_opened", project_id=self._project.id, created=self.created)
        return self._project

    async def update(self, updates: dict[str, Any]) -> ProjectDTO:
        """Merge ``updates`` locally, then persist exactly those keys."""
        return await self.commit(sections.apply_updates(self.project, updates), keys=updates)

    async def commit(self, project: ProjectDTO, keys: Iterable[str] | None = None) -> ProjectDTO:
        """Adopt an edited version of the project and persist the changed keys."""
        if project.id != self.project.id:
            raise ValueError(f"Cannot commit project {project.id} into session {self.project.id}")
        keys = list(keys) if keys is not None else sections.changed_keys(self.project, project)
        self._project = project
        if not keys:
            return project
        await self.store.save(project, keys)
        return project

    async def save(self) -> ProjectDTO:
        """Persist the whole current project."""
        await self.store.save(self.project)
        return self.project

    async def mark_section_completed(self, section_id: str) -> ProjectDTO:
        updated = sections.mark_section_completed(self.project, section_id)
        if updated is self.project:
            return updated
        return await self.commit(updated, keys=["completedSections"])

    async def share(self) -> str:
        return await self.store.share(self.project.id)

    async def close(self) -> None:
        await self.store.close()
