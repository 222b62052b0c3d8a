import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, LargeBinary, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ai_visibility.db.base import Base


class Account(Base):
    __tablename__ = "accounts"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    plan: Mapped[str] = mapped_column(String(20), default="free")  # free / starter / pro / agency
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    # Provider API credentials (encrypted); server-wide keys are used when empty
    openai_api_key: Mapped[bytes | None] = mapped_column(LargeBinary, nullable=True)
    anthropic_api_key: Mapped[bytes | None] = mapped_column(LargeBinary, nullable=True)
    perplexity_api_key: Mapped[bytes | None] = mapped_column(LargeBinary, nullable=True)
    google_api_key: Mapped[bytes | None] = mapped_column(LargeBinary, nullable=True)
    xai_api_key: Mapped[bytes | None] = mapped_column(LargeBinary, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc)
    )

    # Relationships
    users: Mapped[list["User"]] = relationship("User", back_populates="account", cascade="all, delete-orphan")  # noqa: F821
    projects: Mapped[list["Project"]] = relationship(  # noqa: F821
        "Project", back_populates="account", cascade="all, delete-orphan"
    )
