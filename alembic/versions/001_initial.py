"""initial

Revision ID: 001
Revises:
Create Date: 2026-10-18

"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    ]


def _publishable_columns() -> list[sa.Column]:
    """명함·포트폴리오·챌린지 공통 컬럼(id, user_id, slug, 게시 상태)."""
    return [
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("slug", sa.String(120), nullable=False),
        sa.Column("publish_status", sa.String(16), nullable=False, server_default="DRAFT"),
        sa.Column("published_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    ]


def _publishable_indexes(table: str) -> None:
    op.create_index(f"ix_{table}_user_id", table, ["user_id"], unique=False)
    op.create_index(f"ix_{table}_publish_status", table, ["publish_status"], unique=False)
    op.create_index(f"ix_{table}_created_at", table, ["created_at"], unique=False)
    # 공개 목록 keyset (published_at, id)
    op.create_index(
        f"ix_{table}_published_listing",
        table,
        ["publish_status", "published_at", "id"],
        unique=False,
    )


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("clerk_id", sa.String(191), nullable=False),
        sa.Column("username", sa.String(30), nullable=True),
        sa.Column("email", sa.String(320), nullable=True),
        sa.Column("display_name", sa.String(191), nullable=False, server_default="User"),
        sa.Column("avatar_url", sa.String(2048), nullable=True),
        sa.Column("avatar_key", sa.String(512), nullable=True),
        sa.Column("banner_key", sa.String(512), nullable=True),
        sa.Column("role", sa.String(16), nullable=False, server_default="USER"),
        sa.Column("phone", sa.String(64), nullable=True),
        sa.Column("religion", sa.String(64), nullable=True),
        sa.Column("country", sa.String(64), nullable=True),
        sa.Column("date_of_birth", sa.Date(), nullable=True),
        sa.Column("show_email", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("show_phone", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("show_religion", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("show_country", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("show_date_of_birth", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("stripe_customer_id", sa.String(255), nullable=True),
        sa.Column("plan", sa.String(16), nullable=True),
        sa.Column("subscription_status", sa.String(32), nullable=True),
        sa.Column("current_period_end", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("clerk_id", name="users_clerk_id_key"),
        sa.UniqueConstraint("username", name="users_username_key"),
        sa.UniqueConstraint("stripe_customer_id", name="users_stripe_customer_id_key"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=False)

    op.create_table(
        "subscriptions",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("stripe_sub_id", sa.String(255), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("stripe_price_id", sa.String(255), nullable=False, server_default=""),
        sa.Column("status", sa.String(32), nullable=False),
        sa.Column("current_period_end", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("stripe_sub_id", name="uq_subscription_stripe_sub"),
    )
    op.create_index("ix_subscriptions_user_id", "subscriptions", ["user_id"], unique=False)

    op.create_table(
        "digital_name_cards",
        *_publishable_columns(),
        sa.Column("first_name", sa.String(80), nullable=False),
        sa.Column("last_name", sa.String(80), nullable=False),
        sa.Column("app_name", sa.String(50), nullable=False),
        sa.Column("status", sa.String(16), nullable=False, server_default="STUDENT"),
        sa.Column("role", sa.String(80), nullable=False),
        sa.Column("short_bio", sa.String(200), nullable=False, server_default=""),
        sa.Column("company", sa.String(160), nullable=True),
        sa.Column("university", sa.String(160), nullable=True),
        sa.Column("country", sa.String(64), nullable=True),
        sa.Column("religion", sa.String(64), nullable=True),
        sa.Column("phone", sa.String(64), nullable=True),
        sa.Column("avatar_key", sa.String(512), nullable=True),
        sa.Column("banner_key", sa.String(512), nullable=True),
        sa.Column("show_phone", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("show_religion", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("show_company", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("show_university", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("show_country", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("slug", name="digital_name_cards_slug_key"),
    )
    _publishable_indexes("digital_name_cards")

    op.create_table(
        "social_accounts",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("card_id", sa.Integer(), nullable=False),
        sa.Column("platform", sa.String(16), nullable=False),
        sa.Column("handle", sa.String(120), nullable=True),
        sa.Column("url", sa.String(2048), nullable=True),
        sa.Column("label", sa.String(120), nullable=True),
        sa.Column("is_public", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        sa.ForeignKeyConstraint(["card_id"], ["digital_name_cards.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_social_accounts_card_id", "social_accounts", ["card_id"], unique=False)

    op.create_table(
        "portfolios",
        *_publishable_columns(),
        sa.Column("title", sa.String(120), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("main_image_key", sa.String(512), nullable=True),
        sa.Column(
            "tags",
            postgresql.JSONB(astext_type=sa.Text()),
            nullable=False,
            server_default=sa.text("'[]'::jsonb"),
        ),
        sa.Column("about", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("slug", name="portfolios_slug_key"),
    )
    _publishable_indexes("portfolios")

    op.create_table(
        "portfolio_images",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("portfolio_id", sa.Integer(), nullable=False),
        sa.Column("key", sa.String(512), nullable=False),
        sa.Column("url", sa.String(2048), nullable=False),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        sa.ForeignKeyConstraint(["portfolio_id"], ["portfolios.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_portfolio_images_portfolio_id", "portfolio_images", ["portfolio_id"], unique=False
    )

    op.create_table(
        "portfolio_video_links",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("portfolio_id", sa.Integer(), nullable=False),
        sa.Column("platform", sa.String(16), nullable=False),
        sa.Column("url", sa.String(2048), nullable=False),
        sa.Column("description", sa.String(300), nullable=True),
        sa.ForeignKeyConstraint(["portfolio_id"], ["portfolios.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_portfolio_video_links_portfolio_id",
        "portfolio_video_links",
        ["portfolio_id"],
        unique=False,
    )

    op.create_table(
        "portfolio_projects",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("portfolio_id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(160), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("main_image_key", sa.String(512), nullable=True),
        sa.Column(
            "tags",
            postgresql.JSONB(astext_type=sa.Text()),
            nullable=False,
            server_default=sa.text("'[]'::jsonb"),
        ),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        sa.ForeignKeyConstraint(["portfolio_id"], ["portfolios.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_portfolio_projects_portfolio_id", "portfolio_projects", ["portfolio_id"], unique=False
    )

    op.create_table(
        "project_images",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("project_id", sa.Integer(), nullable=False),
        sa.Column("key", sa.String(512), nullable=False),
        sa.Column("url", sa.String(2048), nullable=False),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        sa.ForeignKeyConstraint(["project_id"], ["portfolio_projects.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_project_images_project_id", "project_images", ["project_id"], unique=False)

    op.create_table(
        "project_video_links",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("project_id", sa.Integer(), nullable=False),
        sa.Column("platform", sa.String(16), nullable=False),
        sa.Column("url", sa.String(2048), nullable=False),
        sa.Column("description", sa.String(300), nullable=True),
        sa.ForeignKeyConstraint(["project_id"], ["portfolio_projects.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_project_video_links_project_id", "project_video_links", ["project_id"], unique=False
    )

    op.create_table(
        "portfolio_experiences",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("portfolio_id", sa.Integer(), nullable=False),
        sa.Column("company", sa.String(160), nullable=False),
        sa.Column("role", sa.String(120), nullable=False),
        sa.Column("location", sa.String(160), nullable=True),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("current", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("summary", sa.Text(), nullable=True),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        sa.ForeignKeyConstraint(["portfolio_id"], ["portfolios.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_portfolio_experiences_portfolio_id",
        "portfolio_experiences",
        ["portfolio_id"],
        unique=False,
    )

    op.create_table(
        "portfolio_educations",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("portfolio_id", sa.Integer(), nullable=False),
        sa.Column("school", sa.String(160), nullable=False),
        sa.Column("degree", sa.String(120), nullable=True),
        sa.Column("field", sa.String(120), nullable=True),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("summary", sa.Text(), nullable=True),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        sa.ForeignKeyConstraint(["portfolio_id"], ["portfolios.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_portfolio_educations_portfolio_id",
        "portfolio_educations",
        ["portfolio_id"],
        unique=False,
    )

    op.create_table(
        "challenges",
        *_publishable_columns(),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("brand_name", sa.String(200), nullable=True),
        sa.Column("brand_logo_key", sa.String(255), nullable=True),
        sa.Column("posting_url", sa.String(2048), nullable=True),
        sa.Column(
            "target_platforms",
            postgresql.JSONB(astext_type=sa.Text()),
            nullable=False,
            server_default=sa.text("'[]'::jsonb"),
        ),
        sa.Column("goal_views", sa.Integer(), nullable=True),
        sa.Column("goal_likes", sa.Integer(), nullable=True),
        sa.Column("deadline", sa.DateTime(timezone=True), nullable=True),
        sa.Column("status", sa.String(16), nullable=False, server_default="OPEN"),
        sa.Column("next_submission_order", sa.Integer(), nullable=False, server_default="1"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("slug", name="challenges_slug_key"),
    )
    _publishable_indexes("challenges")
    op.create_index("ix_challenges_status", "challenges", ["status"], unique=False)

    op.create_table(
        "challenge_images",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("challenge_id", sa.Integer(), nullable=False),
        sa.Column("key", sa.String(512), nullable=False),
        sa.Column("url", sa.String(2048), nullable=False),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        sa.ForeignKeyConstraint(["challenge_id"], ["challenges.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_challenge_images_challenge_id", "challenge_images", ["challenge_id"], unique=False
    )

    op.create_table(
        "challenge_prizes",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("challenge_id", sa.Integer(), nullable=False),
        sa.Column("rank", sa.Integer(), nullable=False),
        sa.Column("label", sa.String(120), nullable=True),
        sa.Column("amount_cents", sa.Integer(), nullable=True),
        sa.Column("notes", sa.String(500), nullable=True),
        sa.ForeignKeyConstraint(["challenge_id"], ["challenges.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_challenge_prizes_challenge_id", "challenge_prizes", ["challenge_id"], unique=False
    )

    op.create_table(
        "challenge_submissions",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("challenge_id", sa.Integer(), nullable=False),
        sa.Column("submitter_id", sa.Integer(), nullable=False),
        sa.Column("platform", sa.String(32), nullable=False),
        sa.Column("link_url", sa.String(2048), nullable=True),
        sa.Column("image_key", sa.String(512), nullable=True),
        sa.Column("notes", sa.String(1000), nullable=True),
        sa.Column("submission_order", sa.Integer(), nullable=False),
        sa.Column("submitter_name", sa.String(191), nullable=True),
        sa.Column("submitter_phone", sa.String(64), nullable=True),
        sa.Column(
            "submitter_socials",
            postgresql.JSONB(astext_type=sa.Text()),
            nullable=False,
            server_default=sa.text("'[]'::jsonb"),
        ),
        sa.Column("status", sa.String(16), nullable=False, server_default="PENDING"),
        *_timestamps(),
        sa.ForeignKeyConstraint(["challenge_id"], ["challenges.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["submitter_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "challenge_id", "submitter_id", name="uq_submission_challenge_submitter"
        ),
        sa.UniqueConstraint(
            "challenge_id", "submission_order", name="uq_submission_challenge_order"
        ),
    )
    op.create_index(
        "ix_challenge_submissions_challenge_id",
        "challenge_submissions",
        ["challenge_id"],
        unique=False,
    )
    op.create_index(
        "ix_challenge_submissions_submitter_id",
        "challenge_submissions",
        ["submitter_id"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_table("challenge_submissions")
    op.drop_table("challenge_prizes")
    op.drop_table("challenge_images")
    op.drop_table("challenges")
    op.drop_table("portfolio_educations")
    op.drop_table("portfolio_experiences")
    op.drop_table("project_video_links")
    op.drop_table("project_images")
    op.drop_table("portfolio_projects")
    op.drop_table("portfolio_video_links")
    op.drop_table("portfolio_images")
    op.drop_table("portfolios")
    op.drop_table("social_accounts")
    op.drop_table("digital_name_cards")
    op.drop_table("subscriptions")
    op.drop_table("users")
