"""SQLAlchemy models for chunk entities."""

from typing import List

from sqlalchemy import JSON, Boolean, ForeignKey, Integer, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from ...infrastructure.database.models import TimestampMixin
from ...infrastructure.database.session import Base


class DocumentChunk(Base, TimestampMixin):
    """A window of a document's text with its embedding.

    ``chunk_index`` is scoped to the owning document and runs 0..n-1.
    Embeddings are stored as JSON arrays so the table works on both
    PostgreSQL and SQLite; ``is_placeholder`` marks zero vectors written
    when the embedding backend was unavailable.
    """

    __tablename__ = "document_chunks"
    __table_args__ = (UniqueConstraint("document_id", "chunk_index", name="uq_document_chunks_document_index"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True, init=False)
    document_id: Mapped[int] = mapped_column(Integer, ForeignKey("documents.id", ondelete="CASCADE"), index=True)
    chunk_index: Mapped[int] = mapped_column(Integer)
    content: Mapped[str] = mapped_column(Text)
    embedding: Mapped[List[float]] = mapped_column(JSON)
    is_placeholder: Mapped[bool] = mapped_column(Boolean, default=False)
