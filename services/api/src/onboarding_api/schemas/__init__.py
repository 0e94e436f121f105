"""Schemas package."""

from shared.contracts.dto.project import (
    MessageDTO,
    ProjectDTO,
    ProjectStatus,
    ProjectSummaryDTO,
    ShareLinkDTO,
)

from .project import ProjectUpdate

__all__ = [
    "MessageDTO",
    "ProjectDTO",
    "ProjectStatus",
    "ProjectSummaryDTO",
    "ProjectUpdate",
    "ShareLinkDTO",
]
