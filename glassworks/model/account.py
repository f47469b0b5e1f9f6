from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime

import sqlalchemy as sa
from sqlmodel import Field

from glassworks.model.base import BaseModel, as_utc


class AccountRole(str, enum.Enum):
    USER = "user"
    ADMIN = "admin"


class SubscriptionTier(str, enum.Enum):
    TRIAL = "trial"
    BASIC = "basic"
    PREMIUM = "premium"
    ENTERPRISE = "enterprise"


class SubscriptionStatus(str, enum.Enum):
    TRIAL = "trial"
    ACTIVE = "active"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


def _enum_type(enum_cls: type[enum.Enum], name: str) -> sa.Enum:
    # Persist enums by *value* ("trial", "active", ...), the column is a plain string.
    return sa.Enum(
        enum_cls,
        name=name,
        native_enum=False,
        values_callable=lambda e: [m.value for m in e],
    )


@dataclass(frozen=True)
class ActiveSession:
    """The currently admitted login of an account."""

    device_id: str
    device_info: str
    last_login_at: datetime | None


class Account(BaseModel, table=True):
    """
    Business owner account (table `account`).

    Session sub-state lives in the `session_*` columns and `pinned_device_id`.
    Read it through `active_session` and change it only through
    `admit_session()` / `clear_session()`.

    `version` is bumped by IdentityStore.update() on every write (optimistic
    locking); do not change it by hand.
    """

    __tablename__ = "account"

    email: str = Field(index=True, unique=True)
    full_name: str
    company_name: str = Field(default="")
    phone: str = Field(default="")
    role: AccountRole = Field(
        default=AccountRole.USER,
        sa_type=_enum_type(AccountRole, "account_role"),
    )
    auth_provider: str = Field(default="password")  # password, google

    password_hash: str | None = Field(default=None, nullable=True)
    google_id: str | None = Field(default=None, nullable=True, unique=True, index=True)
    email_verified: bool = Field(default=False)

    subscription_tier: SubscriptionTier = Field(
        default=SubscriptionTier.TRIAL,
        sa_type=_enum_type(SubscriptionTier, "subscription_tier"),
    )
    subscription_status: SubscriptionStatus = Field(
        default=SubscriptionStatus.TRIAL,
        sa_type=_enum_type(SubscriptionStatus, "subscription_status"),
    )
    subscription_start_date: datetime | None = Field(
        default=None, sa_type=sa.DateTime(timezone=True), nullable=True
    )
    subscription_end_date: datetime | None = Field(
        default=None, sa_type=sa.DateTime(timezone=True), nullable=True
    )

    pinned_device_id: str | None = Field(default=None, nullable=True)
    session_device_id: str | None = Field(default=None, nullable=True)
    session_device_info: str | None = Field(default=None, nullable=True)
    session_last_login_at: datetime | None = Field(
        default=None, sa_type=sa.DateTime(timezone=True), nullable=True
    )
    last_login_at: datetime | None = Field(
        default=None, sa_type=sa.DateTime(timezone=True), nullable=True
    )

    version: int = Field(default=1, nullable=False)

    @property
    def active_session(self) -> ActiveSession | None:
        # A session without a device id is corrupt and reads as "no session".
        if not self.session_device_id:
            return None
        return ActiveSession(
            device_id=self.session_device_id,
            device_info=self.session_device_info or "Unknown",
            last_login_at=as_utc(self.session_last_login_at),
        )

    @property
    def has_corrupt_session(self) -> bool:
        return not self.session_device_id and (
            self.session_device_id is not None
            or self.session_device_info is not None
            or self.session_last_login_at is not None
        )

    def admit_session(self, device_id: str | None, device_info: str, now: datetime) -> None:
        """NoSession/ActiveSession -> ActiveSession(device_id, now)."""
        self.last_login_at = now
        if not device_id:
            # No device tracking requested: the previous device binding is dropped.
            self.clear_session()
            return
        self.pinned_device_id = device_id
        self.session_device_id = device_id
        self.session_device_info = device_info
        self.session_last_login_at = now

    def clear_session(self, *, unpin: bool = False) -> None:
        """ActiveSession -> NoSession. `unpin` also forgets the pinned device."""
        self.session_device_id = None
        self.session_device_info = None
        self.session_last_login_at = None
        if unpin:
            self.pinned_device_id = None

    def trial_has_ended(self, now: datetime) -> bool:
        end = as_utc(self.subscription_end_date)
        return (
            self.subscription_status == SubscriptionStatus.TRIAL
            and end is not None
            and now > end
        )
