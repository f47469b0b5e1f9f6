from __future__ import annotations

import enum
from datetime import datetime
from typing import Any

import sqlalchemy as sa
from sqlmodel import Field

from glassworks.model.base import BaseModel


class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Order(BaseModel, table=True):
    """Fabrication order of a customer (`order_number` is ORD0001, ORD0002, ... per account)."""

    __tablename__ = "sales_order"

    account_id: int = Field(foreign_key="account.id", index=True, nullable=False)
    order_number: str = Field(nullable=False)
    customer_id: int = Field(foreign_key="customer.id", index=True, nullable=False)
    customer_snapshot: dict[str, Any] = Field(default_factory=dict, sa_type=sa.JSON)
    items: list[dict[str, Any]] = Field(default_factory=list, sa_type=sa.JSON)

    subtotal: float = Field(default=0)
    tax_rate: float = Field(default=18)
    tax: float = Field(default=0)
    total: float = Field(default=0)

    status: OrderStatus = Field(
        default=OrderStatus.PENDING,
        sa_type=sa.Enum(
            OrderStatus,
            name="order_status",
            native_enum=False,
            values_callable=lambda e: [m.value for m in e],
        ),
        index=True,
    )
    expected_delivery: datetime | None = Field(default=None, sa_type=sa.DateTime(timezone=True), nullable=True)
    notes: str = Field(default="")
