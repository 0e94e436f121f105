"""Projects router."""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from shared.contracts.dto.project import ErrorCode
from shared.errors import (
    InvalidDocumentError,
    ProjectNotFoundError,
    ProjectStoreError,
    StorageUnavailableError,
)
from shared.onboarding import build_share_link

from ..config import get_settings
from ..database import get_async_session
from ..schemas import MessageDTO, ProjectStatus, ProjectSummaryDTO, ProjectUpdate, ShareLinkDTO
from ..store import ProjectStore

logger = structlog.get_logger()

router = APIRouter(prefix="/projects", tags=["projects"])


def get_project_store(db: AsyncSession = Depends(get_async_session)) -> ProjectStore:
    return ProjectStore(db)


def _http_error(error: ProjectStoreError) -> HTTPException:
    """Translate a store failure into an HTTP error with a machine-readable code."""
    if isinstance(error, ProjectNotFoundError):
        return HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"code": ErrorCode.NOT_FOUND.value, "message": "Project not found"},
        )
    if isinstance(error, InvalidDocumentError):
        logger.error("project_data_invalid", project_id=error.project_id, reason=error.reason)
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"code": ErrorCode.INVALID_DOCUMENT.value, "message": "Invalid project data"},
        )
    if isinstance(error, StorageUnavailableError):
        return HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"code": ErrorCode.STORAGE_UNAVAILABLE.value, "message": str(error)},
        )
    raise error


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_project(store: ProjectStore = Depends(get_project_store)) -> dict[str, Any]:
    """Create a new project with the default document."""
    try:
        project = await store.create()
    except ProjectStoreError as e:
        raise _http_error(e) from e
    return project.to_document()


@router.get("/{project_id}")
async def get_project(
    project_id: str,
    store: ProjectStore = Depends(get_project_store),
) -> dict[str, Any]:
    """Get project by ID, document keys flattened next to the envelope."""
    try:
        project = await store.get(project_id)
    except ProjectStoreError as e:
        raise _http_error(e) from e
    return project.to_document()


@router.get("/", response_model=list[ProjectSummaryDTO], response_model_by_alias=True)
async def list_projects(
    status: ProjectStatus | None = None,
    store: ProjectStore = Depends(get_project_store),
) -> list[ProjectSummaryDTO]:
    """List project summaries, most recently updated first."""
    try:
        return await store.list(status=status)
    except ProjectStoreError as e:
        raise _http_error(e) from e


@router.put("/{project_id}")
async def update_project(
    project_id: str,
    project_in: ProjectUpdate,
    store: ProjectStore = Depends(get_project_store),
) -> dict[str, Any]:
    """Merge the supplied top-level keys into the project."""
    try:
        project = await store.update(project_id, project_in)
    except ProjectStoreError as e:
        raise _http_error(e) from e
    return project.to_document()


@router.delete("/{project_id}", response_model=MessageDTO)
async def delete_project(
    project_id: str,
    store: ProjectStore = Depends(get_project_store),
) -> MessageDTO:
    """Delete project permanently."""
    try:
        await store.delete(project_id)
    except ProjectStoreError as e:
        raise _http_error(e) from e
    return MessageDTO(message="Project deleted successfully")


@router.post("/{project_id}/share", response_model=ShareLinkDTO, response_model_by_alias=True)
async def share_project(project_id: str, request: Request) -> ShareLinkDTO:
    """Build a shareable link for the project. Does not touch storage."""
    base_url = request.headers.get("origin") or get_settings().share_base_url
    return ShareLinkDTO(shareable_link=build_share_link(base_url, project_id))
