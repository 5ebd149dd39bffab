"""Initial schema

Revision ID: 001_initial
Revises:
Create Date: 2026-10-18

"""

from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001_initial"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    # Create enums with conditional check (Postgres doesn't support IF NOT EXISTS for TYPE)
    op.execute("""
        DO $$ BEGIN
            CREATE TYPE producttype AS ENUM ('PERSONAL', 'BUSINESS');
        EXCEPTION WHEN duplicate_object THEN NULL;
        END $$;
    """)
    op.execute("""
        DO $$ BEGIN
            CREATE TYPE offerstatus AS ENUM ('ACTIVE', 'INACTIVE', 'EXPIRED');
        EXCEPTION WHEN duplicate_object THEN NULL;
        END $$;
    """)

    # Reference enums without auto-creating them
    product_type_enum = postgresql.ENUM(
        "PERSONAL", "BUSINESS", name="producttype", create_type=False
    )
    offer_status_enum = postgresql.ENUM(
        "ACTIVE", "INACTIVE", "EXPIRED", name="offerstatus", create_type=False
    )

    # Issuers table
    op.create_table(
        "issuers",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("slug", sa.String(255), unique=True, nullable=False, index=True),
        sa.Column("website", sa.String(2048), nullable=False),
        *_timestamps(),
    )

    # Card products table
    op.create_table(
        "card_products",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "issuer_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("issuers.id", ondelete="RESTRICT"),
            nullable=False,
            index=True,
        ),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("slug", sa.String(255), unique=True, nullable=False, index=True),
        sa.Column("network", sa.String(50), nullable=False),
        sa.Column("product_type", product_type_enum, nullable=False),
        sa.Column("currency", sa.String(255), nullable=False),
        sa.Column("currency_code", sa.String(20), nullable=False, index=True),
        sa.Column("description", sa.Text(), nullable=True),
        *_timestamps(),
    )

    # Offers table
    op.create_table(
        "offers",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "product_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("card_products.id", ondelete="RESTRICT"),
            nullable=False,
            index=True,
        ),
        sa.Column("headline", sa.String(500), nullable=False),
        sa.Column("bonus_points", sa.Integer(), nullable=False, index=True),
        sa.Column("min_spend_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("min_spend_window_days", sa.Integer(), nullable=False),
        sa.Column("annual_fee", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("first_year_waived", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("statement_credits", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("landing_url", sa.String(2048), nullable=False),
        sa.Column("source_type", sa.String(50), nullable=False, server_default="PUBLIC"),
        sa.Column("geo", sa.String(10), nullable=False, server_default="US"),
        sa.Column("status", offer_status_enum, nullable=False, index=True),
        sa.Column(
            "last_verified_at",
            sa.DateTime(),
            nullable=False,
            server_default=sa.func.now(),
            index=True,
        ),
        sa.Column("published_at", sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("bonus_points >= 0", name="ck_offers_bonus_points_non_negative"),
        sa.CheckConstraint("min_spend_amount >= 0", name="ck_offers_min_spend_non_negative"),
        sa.CheckConstraint("min_spend_window_days > 0", name="ck_offers_spend_window_positive"),
        sa.CheckConstraint("annual_fee >= 0", name="ck_offers_annual_fee_non_negative"),
        sa.CheckConstraint(
            "statement_credits >= 0", name="ck_offers_statement_credits_non_negative"
        ),
    )

    # Offer snapshots table (append-only)
    op.create_table(
        "offer_snapshots",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "offer_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("offers.id", ondelete="RESTRICT"),
            nullable=False,
            index=True,
        ),
        sa.Column(
            "captured_at", sa.DateTime(), nullable=False, server_default=sa.func.now(), index=True
        ),
        sa.Column("bonus_points", sa.Integer(), nullable=False),
        sa.Column("min_spend_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("min_spend_window_days", sa.Integer(), nullable=False),
        sa.Column("annual_fee", sa.Numeric(12, 2), nullable=False),
        sa.Column("statement_credits", sa.Numeric(12, 2), nullable=False),
        sa.Column("expires_on", sa.Date(), nullable=True),
        sa.Column("landing_url", sa.String(2048), nullable=False),
        sa.Column("diff_summary", sa.Text(), nullable=True),
        sa.Column("changes", sa.JSON(), nullable=True),
    )
    # Latest-snapshot lookups per offer
    op.create_index(
        "ix_offer_snapshots_offer_id_captured_at",
        "offer_snapshots",
        ["offer_id", "captured_at"],
    )

    # Currency valuations table
    op.create_table(
        "currency_valuations",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("currency_code", sa.String(20), unique=True, nullable=False, index=True),
        sa.Column("cents_per_point", sa.Numeric(8, 4), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
    )

    # Subscribers table
    op.create_table(
        "subscribers",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("email", sa.String(255), unique=True, nullable=False, index=True),
        sa.Column("email_verified", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("verification_token", sa.String(64), unique=True, nullable=True, index=True),
        sa.Column("unsubscribe_token", sa.String(64), unique=True, nullable=False, index=True),
        sa.Column("unsubscribed_at", sa.DateTime(), nullable=True),
        *_timestamps(),
    )

    # Subscriber preferences table
    op.create_table(
        "subscriber_preferences",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "subscriber_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("subscribers.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("issuer_slug", sa.String(255), nullable=True),
        sa.Column("currency_code", sa.String(20), nullable=True),
        sa.Column("min_bonus", sa.Integer(), nullable=True),
    )


def downgrade() -> None:
    op.drop_table("subscriber_preferences")
    op.drop_table("subscribers")
    op.drop_table("currency_valuations")
    op.drop_index("ix_offer_snapshots_offer_id_captured_at", table_name="offer_snapshots")
    op.drop_table("offer_snapshots")
    op.drop_table("offers")
    op.drop_table("card_products")
    op.drop_table("issuers")
    op.execute("DROP TYPE IF EXISTS offerstatus")
    op.execute("DROP TYPE IF EXISTS producttype")
