"""Base database model."""

from datetime import datetime

from sqlalchemy import DateTime
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from shared.contracts.dto.project import utc_now


class Base(DeclarativeBase):
    """Base class for all models."""

    # Set from Python rather than server_default so that ordering by
    # updated_at keeps sub-second precision on every backend.
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        index=True,
    )
