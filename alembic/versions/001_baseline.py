"""Baseline schema — contacts, papers, reviews, comments, settings, action log.

Revision ID: 001
Revises: None
Create Date: 2026-10-19
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # ── contact_info ─────────────────────────────────────────────────────────
    op.create_table(
        "contact_info",
        sa.Column("contact_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("first_name", sa.String(120), nullable=False, server_default=""),
        sa.Column("last_name", sa.String(120), nullable=False, server_default=""),
        sa.Column("email", sa.String(120), nullable=False, unique=True),
        sa.Column("affiliation", sa.String(2048), nullable=False, server_default=""),
        sa.Column("roles", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("disabled", sa.Boolean(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
    )

    # ── api_tokens ───────────────────────────────────────────────────────────
    op.create_table(
        "api_tokens",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("token_hash", sa.String(64), nullable=False, unique=True),
        sa.Column("token_prefix", sa.String(20), nullable=False),
        sa.Column("label", sa.String(255), nullable=False),
        sa.Column(
            "contact_id",
            sa.Integer(),
            sa.ForeignKey("contact_info.contact_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="1"),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("last_used_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_api_tokens_token_hash", "api_tokens", ["token_hash"], unique=True)
    op.create_index("ix_api_tokens_contact_id", "api_tokens", ["contact_id"])

    # ── papers ───────────────────────────────────────────────────────────────
    op.create_table(
        "papers",
        sa.Column("paper_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(500), nullable=False, server_default=""),
        sa.Column("time_submitted", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("time_withdrawn", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("blind", sa.Boolean(), nullable=False, server_default="1"),
        sa.Column("outcome", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("manager_contact_id", sa.Integer(), nullable=False, server_default="0"),
    )

    # ── paper_conflicts ──────────────────────────────────────────────────────
    op.create_table(
        "paper_conflicts",
        sa.Column(
            "paper_id",
            sa.Integer(),
            sa.ForeignKey("papers.paper_id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "contact_id",
            sa.Integer(),
            sa.ForeignKey("contact_info.contact_id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("conflict_type", sa.Integer(), nullable=False, server_default="0"),
    )

    # ── paper_reviews ────────────────────────────────────────────────────────
    op.create_table(
        "paper_reviews",
        sa.Column("review_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "paper_id",
            sa.Integer(),
            sa.ForeignKey("papers.paper_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("contact_id", sa.Integer(), sa.ForeignKey("contact_info.contact_id"), nullable=False),
        sa.Column("review_type", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("review_submitted", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("review_needs_submit", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("review_modified", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("overall_merit", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("reviewer_qualification", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("paper_summary", sa.Text(), nullable=True),
        sa.Column("comments_to_author", sa.Text(), nullable=True),
        sa.UniqueConstraint("paper_id", "contact_id", name="uq_paper_reviews_paper_contact"),
    )
    op.create_index("ix_paper_reviews_paper_id", "paper_reviews", ["paper_id"])
    op.create_index("ix_paper_reviews_contact_id", "paper_reviews", ["contact_id"])
    op.create_index("ix_paper_reviews_review_submitted", "paper_reviews", ["review_submitted"])

    # ── paper_comments ───────────────────────────────────────────────────────
    op.create_table(
        "paper_comments",
        sa.Column("comment_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "paper_id",
            sa.Integer(),
            sa.ForeignKey("papers.paper_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("contact_id", sa.Integer(), sa.ForeignKey("contact_info.contact_id"), nullable=False),
        sa.Column("time_modified", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("visibility", sa.String(10), nullable=False, server_default="rev"),
        sa.Column("reply_to", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("comment", sa.Text(), nullable=False, server_default=""),
    )
    op.create_index("ix_paper_comments_paper_id", "paper_comments", ["paper_id"])
    op.create_index("ix_paper_comments_contact_id", "paper_comments", ["contact_id"])
    op.create_index("ix_paper_comments_time_modified", "paper_comments", ["time_modified"])

    # ── settings ─────────────────────────────────────────────────────────────
    op.create_table(
        "settings",
        sa.Column("name", sa.String(50), primary_key=True),
        sa.Column("value", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("data", sa.Text(), nullable=True),
    )

    # ── action_log ───────────────────────────────────────────────────────────
    op.create_table(
        "action_log",
        sa.Column("log_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("time", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("ipaddr", sa.String(39), nullable=True),
        sa.Column("contact_id", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("paper_id", sa.Integer(), nullable=True),
        sa.Column("action", sa.String(4096), nullable=False),
    )
    op.create_index("ix_action_log_time", "action_log", ["time"])
    op.create_index("ix_action_log_contact_id", "action_log", ["contact_id"])
    op.create_index("ix_action_log_paper_id", "action_log", ["paper_id"])


def downgrade() -> None:
    op.drop_table("action_log")
    op.drop_table("settings")
    op.drop_table("paper_comments")
    op.drop_table("paper_reviews")
    op.drop_table("paper_conflicts")
    op.drop_table("papers")
    op.drop_table("api_tokens")
    op.drop_table("contact_info")
