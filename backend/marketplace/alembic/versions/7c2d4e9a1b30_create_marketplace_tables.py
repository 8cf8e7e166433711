"""Create users, gigs, offers, orders and webhook_logs tables

Revision ID: 7c2d4e9a1b30
Revises:
Create Date: 2026-10-19

"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "7c2d4e9a1b30"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=False),
        sa.Column("token_identifier", sa.String(length=255), nullable=False),
        sa.Column("username", sa.String(length=64), nullable=False),
        sa.Column("full_name", sa.String(length=128), nullable=True),
        sa.Column("stripe_account_id", sa.String(length=64), nullable=True),
        sa.Column(
            "stripe_account_setup_complete", sa.Boolean(), nullable=False, server_default=sa.false()
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_users_token_identifier", "users", ["token_identifier"], unique=True)
    op.create_index("ix_users_username", "users", ["username"], unique=True)

    op.create_table(
        "gigs",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=False),
        sa.Column(
            "seller_id",
            sa.BigInteger(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.String(), nullable=False),
        sa.Column("published", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_gigs_seller_id", "gigs", ["seller_id"])

    op.create_table(
        "offers",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=False),
        sa.Column(
            "gig_id",
            sa.BigInteger(),
            sa.ForeignKey("gigs.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.String(), nullable=False),
        sa.Column("tier", sa.String(length=16), nullable=False),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
        sa.Column("delivery_days", sa.Integer(), nullable=False),
        sa.Column("revisions", sa.Integer(), nullable=False),
        sa.Column("stripe_price_id", sa.String(length=64), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("gig_id", "tier", name="uq_offers_gig_id_tier"),
    )
    op.create_index("ix_offers_gig_id", "offers", ["gig_id"])
    op.create_index("ix_offers_tier", "offers", ["tier"])

    op.create_table(
        "orders",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=False),
        sa.Column("offer_id", sa.BigInteger(), sa.ForeignKey("offers.id"), nullable=False),
        sa.Column("gig_id", sa.BigInteger(), sa.ForeignKey("gigs.id"), nullable=False),
        sa.Column("buyer_id", sa.BigInteger(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("seller_id", sa.BigInteger(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("tier", sa.String(length=16), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
        sa.Column("delivery_days", sa.Integer(), nullable=False),
        sa.Column("revisions", sa.Integer(), nullable=False),
        sa.Column("fulfillment_status", sa.String(length=16), nullable=False),
        sa.Column("payment_status", sa.String(length=16), nullable=False),
        sa.Column("stripe_session_id", sa.String(length=255), nullable=False),
        sa.Column("order_date", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("stripe_session_id", name="uq_orders_stripe_session_id"),
    )
    op.create_index("ix_orders_stripe_session_id", "orders", ["stripe_session_id"], unique=True)
    op.create_index("ix_orders_buyer_id", "orders", ["buyer_id"])
    op.create_index("ix_orders_gig_id", "orders", ["gig_id"])
    op.create_index("ix_orders_seller_id", "orders", ["seller_id"])

    op.create_table(
        "webhook_logs",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=False),
        sa.Column("stage", sa.String(length=64), nullable=False),
        sa.Column("data", sa.JSON(), nullable=True),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_webhook_logs_stage", "webhook_logs", ["stage"])


def downgrade() -> None:
    op.drop_index("ix_webhook_logs_stage", table_name="webhook_logs")
    op.drop_table("webhook_logs")
    op.drop_index("ix_orders_seller_id", table_name="orders")
    op.drop_index("ix_orders_gig_id", table_name="orders")
    op.drop_index("ix_orders_buyer_id", table_name="orders")
    op.drop_index("ix_orders_stripe_session_id", table_name="orders")
    op.drop_table("orders")
    op.drop_index("ix_offers_tier", table_name="offers")
    op.drop_index("ix_offers_gig_id", table_name="offers")
    op.drop_table("offers")
    op.drop_index("ix_gigs_seller_id", table_name="gigs")
    op.drop_table("gigs")
    op.drop_index("ix_users_username", table_name="users")
    op.drop_index("ix_users_token_identifier", table_name="users")
    op.drop_table("users")
