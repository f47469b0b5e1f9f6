"""quotation and sales_order tables

Revision ID: 0002bb000002
Revises: 0001aa000001
Create Date: 2026-10-20 00:00:00.000000

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0002bb000002"
down_revision: Union[str, None] = "0001aa000001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _document_columns() -> list[sa.Column]:
    # Columns shared by quotations and orders
    return [
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("account_id", sa.Integer(), sa.ForeignKey("account.id"), nullable=False),
        sa.Column("customer_id", sa.Integer(), sa.ForeignKey("customer.id"), nullable=False),
        sa.Column("customer_snapshot", sa.JSON(), nullable=False),
        sa.Column("items", sa.JSON(), nullable=False),
        sa.Column("subtotal", sa.Float(), nullable=False, server_default="0"),
        sa.Column("tax_rate", sa.Float(), nullable=False, server_default="18"),
        sa.Column("tax", sa.Float(), nullable=False, server_default="0"),
        sa.Column("total", sa.Float(), nullable=False, server_default="0"),
        sa.Column("notes", sa.String(), nullable=False, server_default=""),
    ]


def upgrade() -> None:
    op.create_table(
        "quotation",
        *_document_columns(),
        sa.Column("quotation_number", sa.String(), nullable=False),
        sa.Column("status", sa.String(length=8), nullable=False, server_default="draft"),
        sa.Column("valid_until", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_quotation_account_id", "quotation", ["account_id"])
    op.create_index("ix_quotation_customer_id", "quotation", ["customer_id"])

    op.create_table(
        "sales_order",
        *_document_columns(),
        sa.Column("order_number", sa.String(), nullable=False),
        sa.Column("status", sa.String(length=10), nullable=False, server_default="pending"),
        sa.Column("expected_delivery", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_sales_order_account_id", "sales_order", ["account_id"])
    op.create_index("ix_sales_order_customer_id", "sales_order", ["customer_id"])
    op.create_index("ix_sales_order_status", "sales_order", ["status"])


def downgrade() -> None:
    op.drop_index("ix_sales_order_status", table_name="sales_order")
    op.drop_index("ix_sales_order_customer_id", table_name="sales_order")
    op.drop_index("ix_sales_order_account_id", table_name="sales_order")
    op.drop_table("sales_order")
    op.drop_index("ix_quotation_customer_id", table_name="quotation")
    op.drop_index("ix_quotation_account_id", table_name="quotation")
    op.drop_table("quotation")
