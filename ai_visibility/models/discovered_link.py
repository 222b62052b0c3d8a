from datetime import datetime, timezone

from sqlalchemy import DateTime, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from ai_visibility.db.base import Base


class DiscoveredLink(Base):
    """A backlink found by the crawler. Only read here, for the backlink summary."""

    __tablename__ = "discovered_links"
    __table_args__ = (UniqueConstraint("source_url", "target_url", name="uq_discovered_link"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    source_url: Mapped[str] = mapped_column(String(2048), nullable=False)
    source_domain: Mapped[str] = mapped_column(String(255), nullable=False)
    target_url: Mapped[str] = mapped_column(String(2048), nullable=False)
    target_domain: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    anchor_text: Mapped[str | None] = mapped_column(String(500), nullable=True)
    rel: Mapped[str] = mapped_column(String(20), default="dofollow")  # dofollow | nofollow | ugc | sponsored
    discovered_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    last_seen_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
