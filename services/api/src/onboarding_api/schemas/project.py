"""Project request schemas."""

from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from shared.contracts.dto.project import IMMUTABLE_KEYS, ProjectStatus


class ProjectUpdate(BaseModel):
    """Partial update: control fields plus any number of document keys.

    Every key other than ``completedSections`` and ``status`` is treated as a
    top-level document key and shallow-merged over the stored document.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    completed_sections: list[str] | None = None
    status: ProjectStatus | None = None

    @field_validator("status", mode="before")
    @classmethod
    def blank_status_means_unchanged(cls, value: Any) -> Any:
        if value == "":
            return None
        return value

    def document_overlay(self) -> dict[str, Any]:
        """Document keys supplied by the caller, minus envelope keys."""
        extra = self.model_extra or {}
        return {key: value for key, value in extra.items() if key not in IMMUTABLE_KEYS}
