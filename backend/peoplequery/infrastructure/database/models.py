from datetime import UTC, datetime

from sqlalchemy import DateTime
from sqlalchemy.orm import Mapped, MappedAsDataclass, mapped_column


def utcnow() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(UTC)


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes read back from backends that drop tzinfo (SQLite)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class TimestampMixin(MappedAsDataclass):
    """Mixin for adding created_at and updated_at timestamp columns.

    Both timestamps are stored timezone-aware in UTC and are excluded from
    dataclass initialization so callers never set them by hand.

    Attributes:
        created_at: Timestamp when the record was created.
        updated_at: Timestamp when the record was last written.

    Note:
        Bulk inserts that bypass the ORM (``insert(...).values(...)``) do not
        run the dataclass default factories; pass both columns explicitly there.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default_factory=utcnow,
        nullable=False,
        init=False,
    )

    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        default_factory=utcnow,
        nullable=True,
        init=False,
    )
