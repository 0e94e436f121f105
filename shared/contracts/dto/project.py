from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

# Wire keys that belong to the record envelope rather than the document.
ENVELOPE_KEYS = ("id", "createdAt", "updatedAt", "status", "completedSections")
# Envelope keys a caller may never overwrite through an update body.
IMMUTABLE_KEYS = ("id", "createdAt", "updatedAt")
CONTROL_KEYS = ("completedSections", "status")


class ProjectStatus(str, Enum):
    DRAFT = "draft"
    SUBMITTED = "submitted"
    COMPLETED = "completed"


class ErrorCode(str, Enum):
    """Machine-readable codes carried in API error details."""

    NOT_FOUND = "not_found"
    INVALID_DOCUMENT = "invalid_document"
    STORAGE_UNAVAILABLE = "storage_unavailable"


def utc_now() -> datetime:
    return datetime.now(UTC)


def unique_sections(sections: list[str]) -> list[str]:
    """Drop repeated section ids, keeping first occurrences in order."""
    return list(dict.fromkeys(sections))


class ProjectSummaryDTO(BaseModel):
    """Project envelope without the document, as returned by list."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    created_at: datetime
    updated_at: datetime
    status: ProjectStatus = ProjectStatus.DRAFT
    completed_sections: list[str] = []

    @field_validator("created_at", "updated_at")
    @classmethod
    def ensure_aware(cls, value: datetime) -> datetime:
        # SQLite hands timestamps back without tzinfo; they are always UTC.
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value


class ProjectDTO(ProjectSummaryDTO):
    """Full project: envelope plus the opaque section document.

    On the wire the document keys are flattened next to the envelope keys;
    use ``from_document`` / ``to_document`` to convert.
    """

    data: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_document(cls, document: dict[str, Any]) -> "ProjectDTO":
        envelope = {key: document[key] for key in ENVELOPE_KEYS if key in document}
        data = {key: value for key, value in document.items() if key not in ENVELOPE_KEYS}
        return cls.model_validate({**envelope, "data": data})

    def to_document(self) -> dict[str, Any]:
        envelope = self.summary().model_dump(mode="json", by_alias=True)
        # Envelope wins over any document key of the same name.
        return {**self.data, **envelope}

    def summary(self) -> ProjectSummaryDTO:
        return ProjectSummaryDTO(
            id=self.id,
            created_at=self.created_at,
            updated_at=self.updated_at,
            status=self.status,
            completed_sections=list(self.completed_sections),
        )


class ShareLinkDTO(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    shareable_link: str


class MessageDTO(BaseModel):
    message: str
