"""initial schema: accounts, users, projects, competitors, visibility checks, backlinks

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects.postgresql import JSONB, UUID

revision: str = "0001_initial_schema"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    # =========================================================
    # 1. Accounts and users
    # =========================================================
    op.create_table(
        "accounts",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("plan", sa.String(20), nullable=False, server_default="free"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="true"),
        sa.Column("openai_api_key", sa.LargeBinary(), nullable=True),
        sa.Column("anthropic_api_key", sa.LargeBinary(), nullable=True),
        sa.Column("perplexity_api_key", sa.LargeBinary(), nullable=True),
        sa.Column("google_api_key", sa.LargeBinary(), nullable=True),
        sa.Column("xai_api_key", sa.LargeBinary(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "users",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "account_id",
            UUID(as_uuid=True),
            sa.ForeignKey("accounts.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("role", sa.String(20), nullable=False, server_default="member"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="true"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    # =========================================================
    # 2. Projects and tracked competitors
    # =========================================================
    op.create_table(
        "projects",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "account_id",
            UUID(as_uuid=True),
            sa.ForeignKey("accounts.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("domain", sa.String(255), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="true"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "competitors",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "project_id", sa.Integer(), sa.ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True
        ),
        sa.Column("domain", sa.String(255), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("project_id", "domain", name="uq_competitor_project_domain"),
    )

    # =========================================================
    # 3. Visibility checks (append-only)
    # =========================================================
    op.create_table(
        "visibility_checks",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column(
            "project_id", sa.Integer(), sa.ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True
        ),
        sa.Column("provider", sa.String(30), nullable=False),
        sa.Column("query", sa.Text(), nullable=False),
        sa.Column("keyword_id", sa.Integer(), nullable=True),
        sa.Column("response_text", sa.Text(), nullable=True),
        sa.Column("brand_mentioned", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("url_cited", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("cited_url", sa.String(2048), nullable=True),
        sa.Column("citation_position", sa.Integer(), nullable=True),
        sa.Column("competitor_mentions", JSONB(), nullable=True),
        sa.Column("sentiment", sa.String(20), nullable=True),
        sa.Column("brand_description", sa.Text(), nullable=True),
        sa.Column("region", sa.String(10), nullable=False, server_default="us"),
        sa.Column("language", sa.String(10), nullable=False, server_default="en"),
        sa.Column("checked_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index(
        "ix_visibility_checks_project_checked_at", "visibility_checks", ["project_id", "checked_at"]
    )

    # =========================================================
    # 4. Discovered backlinks
    # =========================================================
    op.create_table(
        "discovered_links",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("source_url", sa.String(2048), nullable=False),
        sa.Column("source_domain", sa.String(255), nullable=False),
        sa.Column("target_url", sa.String(2048), nullable=False),
        sa.Column("target_domain", sa.String(255), nullable=False, index=True),
        sa.Column("anchor_text", sa.String(500), nullable=True),
        sa.Column("rel", sa.String(20), nullable=False, server_default="dofollow"),
        sa.Column("discovered_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("last_seen_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("source_url", "target_url", name="uq_discovered_link"),
    )


def downgrade() -> None:
    op.drop_table("discovered_links")
    op.drop_index("ix_visibility_checks_project_checked_at", table_name="visibility_checks")
    op.drop_table("visibility_checks")
    op.drop_table("competitors")
    op.drop_table("projects")
    op.drop_table("users")
    op.drop_table("accounts")
