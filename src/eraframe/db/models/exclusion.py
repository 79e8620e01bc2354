"""Image exclusion database model."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import DateTime, Text, func, text
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column

from eraframe.db.base import Base


class ImageExclusionModel(Base):
    """
    A permanently rejected image URL.

    Rows are insert-only; the unique constraint on image_url gives the
    table set semantics.
    """

    __tablename__ = "image_exclusions"
    __mapper_args__ = {"eager_defaults": True}

    id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        primary_key=True,
        default=uuid4,
        server_default=text("gen_random_uuid()"),
    )
    image_url: Mapped[str] = mapped_column(Text, nullable=False, unique=True)

    # Context captured when the user rejected the image
    title_hint: Mapped[str | None] = mapped_column(Text, nullable=True)
    query_hint: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<ImageExclusionModel(id={self.id}, image_url='{self.image_url}')>"
