"""SQLAlchemy ORM models for PostgreSQL."""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .db import Base


class User(Base):
    """Story owner, keyed by the auth subject."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    email: Mapped[Optional[str]] = mapped_column(String(320))
    name: Mapped[Optional[str]] = mapped_column(String(255))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    stories: Mapped[list["Story"]] = relationship(back_populates="owner")


class Story(Base):
    """Story model - main entity for generated stories."""

    __tablename__ = "stories"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    owner_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    age_group: Mapped[str] = mapped_column(String(10), nullable=False)
    language: Mapped[str] = mapped_column(String(5), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="draft")
    # Structured content or an {error, timestamp} diagnostic, as JSON text
    content_json: Mapped[Optional[str]] = mapped_column(Text)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    # Relationships
    owner: Mapped["User"] = relationship(back_populates="stories")
    assets: Mapped[list["StoryAsset"]] = relationship(
        back_populates="story", cascade="all, delete-orphan", order_by="StoryAsset.sequence"
    )

    __table_args__ = (
        Index("idx_stories_owner_id", "owner_id"),
        Index("idx_stories_status", "status"),
        Index("idx_stories_created_at", "created_at"),
    )


class StoryAsset(Base):
    """Generated asset (currently only images) attached to a story."""

    __tablename__ = "story_assets"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    story_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("stories.id", ondelete="CASCADE"), nullable=False
    )
    type: Mapped[str] = mapped_column(String(20), nullable=False, default="image")
    url: Mapped[str] = mapped_column(Text, nullable=False)
    prompt: Mapped[str] = mapped_column(Text, nullable=False)
    sequence: Mapped[int] = mapped_column(Integer, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    # Relationship
    story: Mapped["Story"] = relationship(back_populates="assets")

    __table_args__ = (
        Index("idx_story_assets_story_id", "story_id"),
        # One asset per prompt index; retries overwrite
        Index("uq_story_asset_sequence", "story_id", "sequence", unique=True),
    )
