import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ai_visibility.db.base import Base


class Project(Base):
    __tablename__ = "projects"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    account_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    domain: Mapped[str] = mapped_column(String(255), nullable=False)  # the tracked brand, e.g. "acme.com"
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc)
    )

    # Relationships
    account: Mapped["Account"] = relationship("Account", back_populates="projects")  # noqa: F821
    competitors: Mapped[list["Competitor"]] = relationship(  # noqa: F821
        "Competitor", back_populates="project", cascade="all, delete-orphan"
    )
    visibility_checks: Mapped[list["VisibilityCheck"]] = relationship(  # noqa: F821
        "VisibilityCheck", back_populates="project", cascade="all, delete-orphan"
    )
