"""initial schema: account with device session, audit log, billing catalogs

Revision ID: 0001aa000001
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001aa000001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "account",
        sa.Column("id", sa.Integer(), primary_key=True),
        *_timestamps(),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("full_name", sa.String(), nullable=False),
        sa.Column("company_name", sa.String(), nullable=False, server_default=""),
        sa.Column("phone", sa.String(), nullable=False, server_default=""),
        sa.Column("role", sa.String(length=5), nullable=False, server_default="user"),
        sa.Column("auth_provider", sa.String(), nullable=False, server_default="password"),
        sa.Column("password_hash", sa.String(), nullable=True),
        sa.Column("google_id", sa.String(), nullable=True),
        sa.Column("email_verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("subscription_tier", sa.String(length=10), nullable=False, server_default="trial"),
        sa.Column("subscription_status", sa.String(length=9), nullable=False, server_default="trial"),
        sa.Column("subscription_start_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("subscription_end_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("pinned_device_id", sa.String(), nullable=True),
        sa.Column("session_device_id", sa.String(), nullable=True),
        sa.Column("session_device_info", sa.String(), nullable=True),
        sa.Column("session_last_login_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
    )
    op.create_index("ix_account_email", "account", ["email"], unique=True)
    op.create_index("ix_account_google_id", "account", ["google_id"], unique=True)

    op.create_table(
        "audit_log",
        sa.Column("id", sa.Integer(), primary_key=True),
        *_timestamps(),
        sa.Column("account_id", sa.Integer(), sa.ForeignKey("account.id"), nullable=True),
        sa.Column("event_type", sa.String(), nullable=False),
        sa.Column("device_id", sa.String(), nullable=True),
        sa.Column("data", sa.JSON(), nullable=True),
    )
    op.create_index("ix_audit_log_account_id", "audit_log", ["account_id"])
    op.create_index("ix_audit_log_event_type", "audit_log", ["event_type"])

    op.create_table(
        "customer",
        sa.Column("id", sa.Integer(), primary_key=True),
        *_timestamps(),
        sa.Column("account_id", sa.Integer(), sa.ForeignKey("account.id"), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("phone", sa.String(), nullable=False, server_default=""),
        sa.Column("email", sa.String(), nullable=False, server_default=""),
        sa.Column("address", sa.String(), nullable=False, server_default=""),
        sa.Column("gst", sa.String(), nullable=False, server_default=""),
        sa.Column("notes", sa.String(), nullable=False, server_default=""),
    )
    op.create_index("ix_customer_account_id", "customer", ["account_id"])
    op.create_index("ix_customer_name", "customer", ["name"])

    op.create_table(
        "product",
        sa.Column("id", sa.Integer(), primary_key=True),
        *_timestamps(),
        sa.Column("account_id", sa.Integer(), sa.ForeignKey("account.id"), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("category", sa.String(), nullable=False, server_default=""),
        sa.Column("thickness", sa.String(), nullable=False, server_default=""),
        sa.Column("unit", sa.String(), nullable=False, server_default="sq ft"),
        sa.Column("price", sa.Float(), nullable=False, server_default="0"),
        sa.Column("description", sa.String(), nullable=False, server_default=""),
    )
    op.create_index("ix_product_account_id", "product", ["account_id"])
    op.create_index("ix_product_name", "product", ["name"])

    op.create_table(
        "invoice",
        sa.Column("id", sa.Integer(), primary_key=True),
        *_timestamps(),
        sa.Column("account_id", sa.Integer(), sa.ForeignKey("account.id"), nullable=False),
        sa.Column("customer_id", sa.Integer(), sa.ForeignKey("customer.id"), nullable=False),
        sa.Column("customer_snapshot", sa.JSON(), nullable=False),
        sa.Column("items", sa.JSON(), nullable=False),
        sa.Column("subtotal", sa.Float(), nullable=False, server_default="0"),
        sa.Column("tax_rate", sa.Float(), nullable=False, server_default="18"),
        sa.Column("tax", sa.Float(), nullable=False, server_default="0"),
        sa.Column("discount", sa.Float(), nullable=False, server_default="0"),
        sa.Column("total", sa.Float(), nullable=False, server_default="0"),
        sa.Column("paid", sa.Float(), nullable=False, server_default="0"),
        sa.Column("balance", sa.Float(), nullable=False, server_default="0"),
        sa.Column("status", sa.String(length=7), nullable=False, server_default="draft"),
        sa.Column("due_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("notes", sa.String(), nullable=False, server_default=""),
    )
    op.create_index("ix_invoice_account_id", "invoice", ["account_id"])
    op.create_index("ix_invoice_customer_id", "invoice", ["customer_id"])
    op.create_index("ix_invoice_status", "invoice", ["status"])

    op.create_table(
        "payment",
        sa.Column("id", sa.Integer(), primary_key=True),
        *_timestamps(),
        sa.Column("account_id", sa.Integer(), sa.ForeignKey("account.id"), nullable=False),
        sa.Column("invoice_id", sa.Integer(), sa.ForeignKey("invoice.id"), nullable=False),
        sa.Column("amount", sa.Float(), nullable=False),
        sa.Column("payment_method", sa.String(length=13), nullable=False, server_default="cash"),
        sa.Column("payment_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("reference_number", sa.String(), nullable=False, server_default=""),
        sa.Column("notes", sa.String(), nullable=False, server_default=""),
    )
    op.create_index("ix_payment_account_id", "payment", ["account_id"])
    op.create_index("ix_payment_invoice_id", "payment", ["invoice_id"])

    op.create_table(
        "settings",
        sa.Column("id", sa.Integer(), primary_key=True),
        *_timestamps(),
        sa.Column("account_id", sa.Integer(), sa.ForeignKey("account.id"), nullable=False),
        sa.Column("company_name", sa.String(), nullable=False, server_default=""),
        sa.Column("company_address", sa.String(), nullable=False, server_default=""),
        sa.Column("company_phone", sa.String(), nullable=False, server_default=""),
        sa.Column("company_email", sa.String(), nullable=False, server_default=""),
        sa.Column("company_gst", sa.String(), nullable=False, server_default=""),
        sa.Column("currency", sa.String(), nullable=False, server_default="₹"),
        sa.Column("tax_rate", sa.Float(), nullable=False, server_default="18"),
        sa.Column("terms_and_conditions", sa.String(), nullable=False, server_default=""),
        sa.UniqueConstraint("account_id", name="uq_settings_account_id"),
    )


def downgrade() -> None:
    op.drop_table("settings")
    op.drop_index("ix_payment_invoice_id", table_name="payment")
    op.drop_index("ix_payment_account_id", table_name="payment")
    op.drop_table("payment")
    op.drop_index("ix_invoice_status", table_name="invoice")
    op.drop_index("ix_invoice_customer_id", table_name="invoice")
    op.drop_index("ix_invoice_account_id", table_name="invoice")
    op.drop_table("invoice")
    op.drop_index("ix_product_name", table_name="product")
    op.drop_index("ix_product_account_id", table_name="product")
    op.drop_table("product")
    op.drop_index("ix_customer_name", table_name="customer")
    op.drop_index("ix_customer_account_id", table_name="customer")
    op.drop_table("customer")
    op.drop_index("ix_audit_log_event_type", table_name="audit_log")
    op.drop_index("ix_audit_log_account_id", table_name="audit_log")
    op.drop_table("audit_log")
    op.drop_index("ix_account_google_id", table_name="account")
    op.drop_index("ix_account_email", table_name="account")
    op.drop_table("account")
