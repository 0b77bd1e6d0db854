"""create purchased_coupons and redemption_transactions tables

Revision ID: b2d4f6a8c0e3
Revises: a1c3e5f7b9d2
Create Date: 2026-10-19 09:30:00.000000

"""

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "b2d4f6a8c0e3"
down_revision = "a1c3e5f7b9d2"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "purchased_coupons",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("organization_id", sa.String(length=36), nullable=False),
        sa.Column("customer_id", sa.String(length=36), nullable=True),
        sa.Column("discount_deal_id", sa.String(length=36), nullable=True),
        sa.Column("code", sa.String(length=64), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("deal_title", sa.String(length=255), nullable=False),
        sa.Column("discount_value", sa.String(length=50), nullable=False),
        sa.Column("store_name", sa.String(length=255), nullable=True),
        sa.Column("customer_name", sa.String(length=255), nullable=True),
        sa.Column("purchase_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("expiry_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("redemption_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("(CURRENT_TIMESTAMP)"),
            nullable=True,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("(CURRENT_TIMESTAMP)"),
            nullable=True,
        ),
        sa.ForeignKeyConstraint(["organization_id"], ["organizations.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["customer_id"], ["customers.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(
            ["discount_deal_id"], ["discount_deals.id"], ondelete="RESTRICT"
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("organization_id", "code", name="uq_purchased_coupons_org_code"),
    )
    op.create_index(
        "ix_purchased_coupons_organization_id", "purchased_coupons", ["organization_id"]
    )
    op.create_index("ix_purchased_coupons_customer_id", "purchased_coupons", ["customer_id"])
    op.create_index(
        "ix_purchased_coupons_discount_deal_id", "purchased_coupons", ["discount_deal_id"]
    )
    op.create_index("ix_purchased_coupons_code", "purchased_coupons", ["code"])

    op.create_table(
        "redemption_transactions",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("organization_id", sa.String(length=36), nullable=False),
        sa.Column("code", sa.String(length=64), nullable=False),
        sa.Column("deal_title", sa.String(length=255), nullable=True),
        sa.Column("discount_display", sa.String(length=50), nullable=True),
        sa.Column("customer_name", sa.String(length=255), nullable=True),
        sa.Column("outcome", sa.String(length=20), nullable=False),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["organization_id"], ["organizations.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_redemption_transactions_organization_id",
        "redemption_transactions",
        ["organization_id"],
    )
    op.create_index("ix_redemption_transactions_code", "redemption_transactions", ["code"])
    op.create_index(
        "ix_redemption_transactions_timestamp", "redemption_transactions", ["timestamp"]
    )


def downgrade() -> None:
    op.drop_index("ix_redemption_transactions_timestamp", table_name="redemption_transactions")
    op.drop_index("ix_redemption_transactions_code", table_name="redemption_transactions")
    op.drop_index(
        "ix_redemption_transactions_organization_id", table_name="redemption_transactions"
    )
    op.drop_table("redemption_transactions")
    op.drop_index("ix_purchased_coupons_code", table_name="purchased_coupons")
    op.drop_index("ix_purchased_coupons_discount_deal_id", table_name="purchased_coupons")
    op.drop_index("ix_purchased_coupons_customer_id", table_name="purchased_coupons")
    op.drop_index("ix_purchased_coupons_organization_id", table_name="purchased_coupons")
    op.drop_table("purchased_coupons")
