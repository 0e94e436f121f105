"""Project store: keyed JSON documents with merge-on-update semantics."""

import json
from typing import Any
import uuid

from pydantic import ValidationError
from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from shared.contracts.dto.project import (
    ProjectDTO,
    ProjectStatus,
    ProjectSummaryDTO,
    unique_sections,
    utc_now,
)
from shared.errors import InvalidDocumentError, ProjectNotFoundError, StorageUnavailableError
from shared.models import Project
from shared.onboarding import default_document

from .schemas import ProjectUpdate

logger = structlog.get_logger()


def encode_json(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False)


def decode_document(project_id: str, raw: str) -> dict[str, Any]:
    try:
        value = json.loads(raw)
    except (json.JSONDecodeError, TypeError) as e:
        raise InvalidDocumentError(project_id, f"data is not valid JSON: {e}") from e
    if not isinstance(value, dict):
        raise InvalidDocumentError(project_id, "data is not a JSON object")
    return value


def decode_sections(project_id: str, raw: str) -> list[str]:
    try:
        value = json.loads(raw)
    except (json.JSONDecodeError, TypeError) as e:
        raise InvalidDocumentError(project_id, f"completed_sections is not valid JSON: {e}") from e
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise InvalidDocumentError(project_id, "completed_sections is not a list of strings")
    return value


def _summary(row: Project) -> ProjectSummaryDTO:
    try:
        return ProjectSummaryDTO(
            id=row.id,
            created_at=row.created_at,
            updated_at=row.updated_at,
            status=row.status,
            completed_sections=decode_sections(row.id, row.completed_sections),
        )
    except ValidationError as e:
        raise InvalidDocumentError(row.id, f"invalid envelope: {e}") from e


def _to_dto(row: Project) -> ProjectDTO:
    summary = _summary(row)
    return ProjectDTO(**summary.model_dump(), data=decode_document(row.id, row.data))


class ProjectStore:
    """Persistence operations for onboarding projects.

    Logical failures raise ProjectNotFoundError / InvalidDocumentError;
    any database failure is re-raised as StorageUnavailableError.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self) -> ProjectDTO:
        now = utc_now()
        row = Project(
            id=str(uuid.uuid4()),
            created_at=now,
            updated_at=now,
            status=ProjectStatus.DRAFT.value,
            completed_sections=encode_json([]),
            data=encode_json(default_document()),
        )
        project = _to_dto(row)
        try:
            self.session.add(row)
            await self.session.commit()
        except SQLAlchemyError as e:
            await self._rollback()
            logger.error("project_create_failed", error=str(e), error_type=type(e).__name__)
            raise StorageUnavailableError("Failed to create project") from e

        logger.info("project_created", project_id=project.id)
        return project

    async def get(self, project_id: str) -> ProjectDTO:
        row = await self._load(project_id)
        return _to_dto(row)

    async def list(self, status: ProjectStatus | None = None) -> list[ProjectSummaryDTO]:
        query = select(Project).order_by(Project.updated_at.desc(), Project.created_at.desc())
        if status:
            query = query.where(Project.status == status.value)
        try:
            result = await self.session.execute(query)
            rows = list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("project_list_failed", error=str(e), error_type=type(e).__name__)
            raise StorageUnavailableError("Failed to fetch projects") from e
        return [_summary(row) for row in rows]

    async def update(self, project_id: str, changes: ProjectUpdate) -> ProjectDTO:
        row = await self._load(project_id)

        current_data = decode_document(project_id, row.data)
        current_sections = decode_sections(project_id, row.completed_sections)

        # Shallow merge: overlay keys replace stored ones wholesale, omitted keys survive.
        overlay = changes.document_overlay()
        merged_data = {**current_data, **overlay}
        sections = (
            unique_sections(changes.completed_sections)
            if changes.completed_sections is not None
            else current_sections
        )
        status = changes.status.value if changes.status else row.status

        row.data = encode_json(merged_data)
        row.completed_sections = encode_json(sections)
        row.status = status
        row.updated_at = utc_now()
        project = _to_dto(row)
        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            await self._rollback()
            logger.error(
                "project_update_failed",
                project_id=project_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise StorageUnavailableError("Failed to update project") from e

        logger.info(
            "project_updated",
            project_id=project_id,
            status=status,
            document_keys=sorted(overlay),
        )
        return project

    async def delete(self, project_id: str) -> None:
        try:
            result = await self.session.execute(delete(Project).where(Project.id == project_id))
            await self.session.commit()
        except SQLAlchemyError as e:
            await self._rollback()
            logger.error(
                "project_delete_failed",
                project_id=project_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise StorageUnavailableError("Failed to delete project") from e

        if result.rowcount == 0:
            raise ProjectNotFoundError(project_id)
        logger.info("project_deleted", project_id=project_id)

    async def _load(self, project_id: str) -> Project:
        try:
            row = await self.session.get(Project, project_id)
        except SQLAlchemyError as e:
            logger.error(
                "project_fetch_failed",
                project_id=project_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise StorageUnavailableError("Failed to fetch project") from e
        if row is None:
            raise ProjectNotFoundError(project_id)
        return row

    async def _rollback(self) -> None:
        try:
            await self.session.rollback()
        except SQLAlchemyError:
            logger.warning("session_rollback_failed", exc_info=True)
