from __future__ import annotations

from typing import Any

import sqlalchemy as sa
from sqlmodel import Field

from glassworks.model.base import BaseModel


class AuditLog(BaseModel, table=True):
    __tablename__ = "audit_log"

    # NULL for events not tied to an account.
    account_id: int | None = Field(default=None, foreign_key="account.id", index=True)

    event_type: str = Field(index=True)
    device_id: str | None = Field(default=None, nullable=True)
    data: dict[str, Any] | None = Field(default=None, sa_type=sa.JSON)
