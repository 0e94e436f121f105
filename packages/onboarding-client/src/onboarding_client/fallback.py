"""Primary/fallback composition of project stores."""

from collections.abc import Iterable
from typing import Protocol

import structlog

from shared.contracts.dto.project import ProjectDTO, ProjectSummaryDTO
from shared.errors import ProjectNotFoundError, ProjectStoreError, StoreUnreachableError

logger = structlog.get_logger(__name__)


class ProjectStore(Protocol):
    """Capability set shared by the remote, local and fallback stores."""

    async def create(self) -> ProjectDTO: ...
    async def get(self, project_id: str) -> ProjectDTO: ...
    async def list(self) -> list[ProjectSummaryDTO]: ...
    async def save(self, project: ProjectDTO, keys: Iterable[str] | None = None) -> ProjectDTO: ...
    async def delete(self, project_id: str) -> None: ...
    async def share(self, project_id: str) -> str: ...
    async def close(self) -> None: ...


class FallbackProjectStore:
    """Try the primary store, fall back to the secondary one.

    The two stores are never written together and are not reconciled
    afterwards, so they may diverge. InvalidDocumentError is always raised.
    """

    def __init__(self, primary: ProjectStore, fallback: ProjectStore):
        self.primary = primary
        self.fallback = fallback

    async def create(self) -> ProjectDTO:
        try:
            project = await self.primary.create()
        except ProjectStoreError as e:
            logger.warning("project_create_fallback", error=str(e), error_type=type(e).__name__)
            return await self.fallback.create()
        logger.info("project_create_primary", project_id=project.id)
        return project

    async def get(self, project_id: str) -> ProjectDTO:
        try:
            project = await self.primary.get(project_id)
        except (StoreUnreachableError, ProjectNotFoundError) as e:
            logger.warning(
                "project_get_fallback",
                project_id=project_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            return await self.fallback.get(project_id)
        logger.debug("project_get_primary", project_id=project_id)
        return project

    async def list(self) -> list[ProjectSummaryDTO]:
        try:
            return await self.primary.list()
        except StoreUnreachableError as e:
            logger.warning("project_list_fallback", error=str(e))
            return await self.fallback.list()

    async def save(self, project: ProjectDTO, keys: Iterable[str] | None = None) -> ProjectDTO:
        keys = list(keys) if keys is not None else None
        try:
            saved = await self.primary.save(project, keys)
        except (StoreUnreachableError, ProjectNotFoundError) as e:
            # Project may exist only locally (created while offline)
            logger.warning(
                "project_save_fallback",
                project_id=project.id,
                error=str(e),
                error_type=type(e).__name__,
            )
            return await self.fallback.save(project)
        logger.info("project_save_primary", project_id=project.id, keys=keys)
        return saved

    async def delete(self, project_id: str) -> None:
        try:
            await self.primary.delete(project_id)
        except StoreUnreachableError as e:
            logger.warning("project_delete_fallback", project_id=project_id, error=str(e))
            await self.fallback.delete(project_id)
            return
        logger.info("project_delete_primary", project_id=project_id)

    async def share(self, project_id: str) -> str:
        try:
            return await self.primary.share(project_id)
        except StoreUnreachableError as e:
            logger.warning("project_share_fallback", project_id=project_id, error=str(e))
            return await self.fallback.share(project_id)

    async def close(self) -> None:
        await self.primary.close()
        await self.fallback.close()
