"""SQLAlchemy ORM models for documents and chat sessions."""

from datetime import datetime
from typing import Any

from sqlalchemy import (
    JSON,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy.sql import func


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class StoredDocument(Base):
    """Legal document table; ``seq`` preserves insertion order for ranking ties."""

    __tablename__ = "legal_document"
    __table_args__ = (Index("idx_legal_document_category", "category"),)

    seq: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    document_id: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    official_number: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    title_arabic: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[str] = mapped_column(Text, nullable=False)
    summary: Mapped[str | None] = mapped_column(Text, nullable=True)
    related_laws: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)

    # Usage tracking
    usage_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_queried: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    popular_articles: Mapped[dict[str, int]] = mapped_column(JSON, nullable=False, default=dict)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    # Relationships
    articles: Mapped[list["StoredArticle"]] = relationship(
        "StoredArticle",
        back_populates="document",
        cascade="all, delete-orphan",
        order_by="StoredArticle.position",
        lazy="selectin",
    )


class StoredArticle(Base):
    """Article table - one row per numbered clause."""

    __tablename__ = "legal_article"
    __table_args__ = (
        UniqueConstraint("document_seq", "number", name="uq_article_document_number"),
        Index("idx_legal_article_number", "number"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    document_seq: Mapped[int] = mapped_column(
        Integer, ForeignKey("legal_document.seq", ondelete="CASCADE"), nullable=False
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    number: Mapped[str] = mapped_column(Text, nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    keywords: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    # Relationships
    document: Mapped["StoredDocument"] = relationship("StoredDocument", back_populates="articles")


class StoredSession(Base):
    """Chat session table - whole session document in ``data``.

    ``user_id``, ``status``, ``category`` and ``last_activity`` are copied out
    of the document for filtering and ordering.
    """

    __tablename__ = "chat_session"
    __table_args__ = (Index("idx_chat_session_user_activity", "user_id", "last_activity"),)

    session_id: Mapped[str] = mapped_column(String(36), primary_key=True)
    user_id: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(Text, nullable=False)
    last_activity: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    data: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
