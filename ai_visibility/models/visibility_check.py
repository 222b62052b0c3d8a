from datetime import datetime, timezone

from sqlalchemy import JSON, BigInteger, Boolean, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ai_visibility.db.base import Base


class VisibilityCheck(Base):
    """Result of asking one provider one query for one project at one point in time.

    Rows are append-only: enrichment is merged in before the insert and nothing
    updates a row afterwards.
    """

    __tablename__ = "visibility_checks"
    __table_args__ = (Index("ix_visibility_checks_project_checked_at", "project_id", "checked_at"),)

    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True
    )
    project_id: Mapped[int] = mapped_column(
        ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True
    )
    provider: Mapped[str] = mapped_column(String(30), nullable=False)  # chatgpt | claude | ... | gemini_ai_mode
    query: Mapped[str] = mapped_column(Text, nullable=False)
    keyword_id: Mapped[int | None] = mapped_column(Integer, nullable=True)  # back-reference only, no FK

    response_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    brand_mentioned: Mapped[bool] = mapped_column(Boolean, default=False)
    url_cited: Mapped[bool] = mapped_column(Boolean, default=False)
    cited_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    citation_position: Mapped[int | None] = mapped_column(Integer, nullable=True)  # 1-based line number
    competitor_mentions: Mapped[list | None] = mapped_column(
        JSON().with_variant(JSONB(), "postgresql"), nullable=True
    )  # [{"domain": "rival.com", "mentioned": true, "position": 3}, ...]

    # Enrichment (null when skipped or failed)
    sentiment: Mapped[str | None] = mapped_column(String(20), nullable=True)  # positive | neutral | negative
    brand_description: Mapped[str | None] = mapped_column(Text, nullable=True)

    region: Mapped[str] = mapped_column(String(10), default="us")
    language: Mapped[str] = mapped_column(String(10), default="en")
    checked_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False
    )

    project: Mapped["Project"] = relationship("Project", back_populates="visibility_checks")  # noqa: F821
