"""Project model."""

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from shared.contracts.dto.project import ProjectStatus

from .base import Base


class Project(Base):
    """Onboarding project - typed envelope around an opaque JSON document.

    ``completed_sections`` and ``data`` hold serialized JSON text. The store
    decodes them itself so that a corrupt payload can be reported instead of
    failing inside the ORM.
    """

    __tablename__ = "projects"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    status: Mapped[str] = mapped_column(String(32), default=ProjectStatus.DRAFT.value)
    completed_sections: Mapped[str] = mapped_column(Text, default="[]")
    data: Mapped[str] = mapped_column(Text, nullable=False)
