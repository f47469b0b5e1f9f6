from __future__ import annotations

import enum
from datetime import datetime

import sqlalchemy as sa
from sqlmodel import Field

from glassworks.model.base import BaseModel, utc_now


class PaymentMethod(str, enum.Enum):
    CASH = "cash"
    CHEQUE = "cheque"
    BANK_TRANSFER = "bank_transfer"
    UPI = "upi"
    CARD = "card"
    OTHER = "other"


class Payment(BaseModel, table=True):
    __tablename__ = "payment"

    account_id: int = Field(foreign_key="account.id", index=True, nullable=False)
    invoice_id: int = Field(foreign_key="invoice.id", index=True, nullable=False)
    amount: float = Field(nullable=False)
    payment_method: PaymentMethod = Field(
        default=PaymentMethod.CASH,
        sa_type=sa.Enum(
            PaymentMethod,
            name="payment_method",
            native_enum=False,
            values_callable=lambda e: [m.value for m in e],
        ),
    )
    payment_date: datetime = Field(
        default_factory=utc_now,
        sa_type=sa.DateTime(timezone=True),
        nullable=False,
    )
    reference_number: str = Field(default="")
    notes: str = Field(default="")
