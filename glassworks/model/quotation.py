from __future__ import annotations

import enum
from datetime import datetime
from typing import Any

import sqlalchemy as sa
from sqlmodel import Field

from glassworks.model.base import BaseModel


class QuotationStatus(str, enum.Enum):
    DRAFT = "draft"
    SENT = "sent"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    EXPIRED = "expired"


class Quotation(BaseModel, table=True):
    """
    Price quotation offered to a customer before an order.

    Notes:
      - `quotation_number` is QT0001, QT0002, ... per account.
      - Totals are derived by services.billing_service, like invoices.
    """

    __tablename__ = "quotation"

    account_id: int = Field(foreign_key="account.id", index=True, nullable=False)
    quotation_number: str = Field(nullable=False)
    customer_id: int = Field(foreign_key="customer.id", index=True, nullable=False)
    customer_snapshot: dict[str, Any] = Field(default_factory=dict, sa_type=sa.JSON)
    items: list[dict[str, Any]] = Field(default_factory=list, sa_type=sa.JSON)

    subtotal: float = Field(default=0)
    tax_rate: float = Field(default=18)
    tax: float = Field(default=0)
    total: float = Field(default=0)

    status: QuotationStatus = Field(
        default=QuotationStatus.DRAFT,
        sa_type=sa.Enum(
            QuotationStatus,
            name="quotation_status",
            native_enum=False,
            values_callable=lambda e: [m.value for m in e],
        ),
    )
    valid_until: datetime | None = Field(default=None, sa_type=sa.DateTime(timezone=True), nullable=True)
    notes: str = Field(default="")
