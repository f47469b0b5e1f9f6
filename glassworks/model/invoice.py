from __future__ import annotations

import enum
from datetime import datetime
from typing import Any

import sqlalchemy as sa
from sqlmodel import Field

from glassworks.model.base import BaseModel


class InvoiceStatus(str, enum.Enum):
    DRAFT = "draft"
    SENT = "sent"
    PAID = "paid"
    PARTIAL = "partial"
    OVERDUE = "overdue"


class Invoice(BaseModel, table=True):
    """
    Invoice issued to a customer.

    Notes:
      - `customer_snapshot` is copied from the customer at creation time, later
        edits to the customer do not change issued invoices.
      - `subtotal`, `tax`, `total`, `paid` and `balance` are derived by
        services.billing_service; never trust values sent by the client.
    """

    __tablename__ = "invoice"

    account_id: int = Field(foreign_key="account.id", index=True, nullable=False)
    customer_id: int = Field(foreign_key="customer.id", index=True, nullable=False)
    customer_snapshot: dict[str, Any] = Field(default_factory=dict, sa_type=sa.JSON)

    # [{"description", "quantity", "unit", "rate", "amount"}]
    items: list[dict[str, Any]] = Field(default_factory=list, sa_type=sa.JSON)

    subtotal: float = Field(default=0)
    tax_rate: float = Field(default=18)
    tax: float = Field(default=0)
    discount: float = Field(default=0)
    total: float = Field(default=0)
    paid: float = Field(default=0)
    balance: float = Field(default=0)

    status: InvoiceStatus = Field(
        default=InvoiceStatus.DRAFT,
        sa_type=sa.Enum(
            InvoiceStatus,
            name="invoice_status",
            native_enum=False,
            values_callable=lambda e: [m.value for m in e],
        ),
        index=True,
    )
    due_date: datetime | None = Field(default=None, sa_type=sa.DateTime(timezone=True), nullable=True)
    notes: str = Field(default="")
