"""SQLAlchemy ORM models."""

from datetime import datetime
from enum import Enum

from sqlalchemy import JSON, DateTime, ForeignKey, Index, Integer, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


class ScopeDocStatus(str, Enum):
    DRAFT = "draft"
    GENERATED = "generated"
    FINAL = "final"


class Intake(Base):
    """Intake - one client engagement request, owned by a single user.

    The canonical intake (as produced by ``validate_intake``) lives in
    ``content``; a few fields are denormalized for listing.
    """

    __tablename__ = "intakes"
    __table_args__ = (
        Index("ix_intakes_user_id", "user_id"),
        Index("ix_intakes_created_at", "created_at"),
    )

    id: Mapped[str] = mapped_column(String(40), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(100), nullable=False)

    project_name: Mapped[str] = mapped_column(String(120), nullable=False)
    industry: Mapped[str] = mapped_column(String(50), nullable=False)
    project_type: Mapped[str] = mapped_column(String(50), nullable=False)

    content: Mapped[dict] = mapped_column(JSON, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    # Relationships
    scope_docs: Mapped[list["ScopeDoc"]] = relationship(
        back_populates="intake", cascade="all, delete-orphan"
    )


class ScopeDoc(Base):
    """Scope Doc - one generated version of a scope of work for an intake.

    ``generated_json`` is written once, at generation time. Manual review
    edits go to ``edited_json`` so both variants are kept side by side.
    """

    __tablename__ = "scope_docs"
    __table_args__ = (
        Index("ix_scope_docs_user_id", "user_id"),
        Index("ix_scope_docs_intake_version", "intake_id", "version"),
    )

    id: Mapped[str] = mapped_column(String(40), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(100), nullable=False)
    intake_id: Mapped[str] = mapped_column(
        ForeignKey("intakes.id", ondelete="CASCADE"), nullable=False
    )

    status: Mapped[str] = mapped_column(String(20), default=ScopeDocStatus.GENERATED.value)
    version: Mapped[int] = mapped_column(Integer, default=1)

    generated_json: Mapped[dict] = mapped_column(JSON, nullable=False)
    edited_json: Mapped[dict | None] = mapped_column(JSON)

    export_count: Mapped[int] = mapped_column(Integer, default=0)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    # Relationships
    intake: Mapped["Intake"] = relationship(back_populates="scope_docs")
