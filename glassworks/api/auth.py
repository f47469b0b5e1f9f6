import logging
from datetime import datetime, timedelta
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, field_validator
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from glassworks.auth.admission import SessionAdmissionController
from glassworks.auth.dependencies import (
    get_admission_controller,
    get_current_account,
    get_identity_store,
    require_current_device,
)
from glassworks.auth.errors import AccountNotFound, DeviceConflict, Unauthorized
from glassworks.auth.jwt import create_access_token
from glassworks.auth.oauth import verify_google_token
from glassworks.auth.password import hash_password, verify_password
from glassworks.config import settings
from glassworks.db.session import get_session
from glassworks.model.account import Account, SubscriptionStatus, SubscriptionTier
from glassworks.model.audit_log import AuditLog
from glassworks.model.base import utc_now
from glassworks.services.email_service import send_welcome_email
from glassworks.services.identity_store import IdentityStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])

MIN_PASSWORD_LENGTH = 6


def try_write_audit_log(session: Session, audit: AuditLog) -> None:
    """
    Best-effort audit: a failure here must not break the request.
    """
    try:
        session.add(audit)
        session.commit()
    except Exception:
        logger.warning(f"Could not write audit event {audit.event_type}", exc_info=True)
        session.rollback()


def normalize_email(v: str) -> str:
    v = (v or "").strip().lower()
    if "@" not in v or v.startswith("@") or v.endswith("@"):
        raise ValueError("invalid email")
    return v


def _device_info(request: Request) -> str:
    return request.headers.get("user-agent") or "Unknown"


class RegisterRequest(BaseModel):
    email: str
    password: str
    full_name: str
    company_name: str = ""
    phone: str = ""

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return normalize_email(v)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        if len(v or "") < MIN_PASSWORD_LENGTH:
            raise ValueError(f"password must have at least {MIN_PASSWORD_LENGTH} characters")
        return v

    @field_validator("full_name")
    @classmethod
    def validate_full_name(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("full_name must not be empty")
        return v.strip()


class RegisterResponse(BaseModel):
    account_id: int
    message: str


class LoginRequest(BaseModel):
    email: str
    password: str
    device_id: Optional[str] = None
    force_logout: bool = False
    logout_other_devices: bool = False

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return normalize_email(v)

    @property
    def override_requested(self) -> bool:
        return self.force_logout or self.logout_other_devices


class GoogleLoginRequest(BaseModel):
    id_token: str
    device_id: Optional[str] = None
    force_logout: bool = False


class ForceLogoutRequest(BaseModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return normalize_email(v)


class AccountProfile(BaseModel):
    """Public view of an account; the password hash is never part of it."""

    id: int
    email: str
    full_name: str
    company_name: str
    phone: str
    role: str
    auth_provider: str
    email_verified: bool
    subscription_tier: str
    subscription_status: str
    subscription_start_date: Optional[datetime] = None
    subscription_end_date: Optional[datetime] = None

    @classmethod
    def from_account(cls, account: Account) -> "AccountProfile":
        return cls(
            id=account.id,
            email=account.email,
            full_name=account.full_name,
            company_name=account.company_name,
            phone=account.phone,
            role=account.role.value,
            auth_provider=account.auth_provider,
            email_verified=account.email_verified,
            subscription_tier=account.subscription_tier.value,
            subscription_status=account.subscription_status.value,
            subscription_start_date=account.subscription_start_date,
            subscription_end_date=account.subscription_end_date,
        )


class AuthResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    account: AccountProfile


class MessageResponse(BaseModel):
    success: bool = True
    message: str


def _new_trial_account(**fields) -> Account:
    now = utc_now()
    return Account(
        subscription_tier=SubscriptionTier.TRIAL,
        subscription_status=SubscriptionStatus.TRIAL,
        subscription_start_date=now,
        subscription_end_date=now + timedelta(days=settings.trial_days),
        **fields,
    )


def _admit(
    session: Session,
    controller: SessionAdmissionController,
    *,
    account: Account,
    device_id: Optional[str],
    credential_ok: bool,
    override_requested: bool,
    device_info: str,
) -> AuthResponse:
    try:
        admitted = controller.admit_login(
            account.id,
            device_id,
            credential_ok=credential_ok,
            override_requested=override_requested,
            device_info=device_info,
        )
    except (DeviceConflict, Unauthorized) as e:
        try_write_audit_log(
            session,
            AuditLog(
                account_id=account.id,
                event_type="login_rejected",
                device_id=device_id,
                data={"code": e.code},
            ),
        )
        raise

    try_write_audit_log(
        session,
        AuditLog(
            account_id=admitted.id,
            event_type="login_admitted",
            device_id=device_id,
            data={"override": override_requested, "device_info": device_info},
        ),
    )
    token = create_access_token(
        account_id=admitted.id,
        email=admitted.email,
        role=admitted.role.value,
        device_id=device_id,
    )
    return AuthResponse(access_token=token, account=AccountProfile.from_account(admitted))


@router.post("/register", response_model=RegisterResponse, status_code=201)
def register(
    body: RegisterRequest,
    store: IdentityStore = Depends(get_identity_store),
):
    """
    Create a password account with a trial subscription.

    The email is verified by use: the first successful login marks it verified.
    """
    if store.get_by_email(body.email):
        raise HTTPException(status_code=400, detail="Account already exists with this email")

    try:
        account = store.add(
            _new_trial_account(
                email=body.email,
                full_name=body.full_name,
                company_name=body.company_name,
                phone=body.phone,
                auth_provider="password",
                password_hash=hash_password(body.password),
            )
        )
    except IntegrityError as e:
        store.session.rollback()
        raise HTTPException(status_code=400, detail="Account already exists with this email") from e
    logger.info(f"Account {account.id} registered")
    send_welcome_email(account.email, account.full_name, settings.trial_days)
    return RegisterResponse(
        account_id=account.id,
        message="Registration successful. You can now login.",
    )


@router.post("/login", response_model=AuthResponse)
def login(
    body: LoginRequest,
    request: Request,
    session: Session = Depends(get_session),
    store: IdentityStore = Depends(get_identity_store),
    controller: SessionAdmissionController = Depends(get_admission_controller),
):
    """
    Password login.

    Body: {"email", "password", "device_id"?, "force_logout"?, "logout_other_devices"?}
    Returns a system JWT bound to `device_id`, or 409 DEVICE_CONFLICT when another
    device logged in less than SESSION_STALE_HOURS ago. Retrying with
    `force_logout: true` evicts the other device.
    """
    account = store.get_by_email(body.email)
    if not account:
        raise AccountNotFound()

    return _admit(
        session,
        controller,
        account=account,
        device_id=body.device_id,
        credential_ok=verify_password(body.password, account.password_hash),
        override_requested=body.override_requested,
        device_info=_device_info(request),
    )


@router.post("/google", response_model=AuthResponse)
def auth_google(
    body: GoogleLoginRequest,
    request: Request,
    session: Session = Depends(get_session),
    store: IdentityStore = Depends(get_identity_store),
    controller: SessionAdmissionController = Depends(get_admission_controller),
):
    """
    Login or register with Google.

    Body: {"id_token": "<Google JWT>", "device_id"?, "force_logout"?}
    The account is created on first use; an existing password account with the
    same email gets the Google identity linked to it.
    """
    idinfo = verify_google_token(body.id_token)
    google_id = idinfo["sub"]
    email = idinfo["email"]

    account = store.get_by_google_id(google_id) if google_id else None
    if account is None:
        account = store.get_by_email(email)

    if account is None:
        account = store.add(
            _new_trial_account(
                email=email,
                full_name=idinfo["name"],
                auth_provider="google",
                google_id=google_id or None,
                email_verified=True,
            )
        )
        logger.info(f"Account {account.id} created from Google login")
    elif not account.google_id and google_id:
        account.google_id = google_id
        account = store.update(account, expected_version=account.version)
        logger.info(f"Google identity linked to account {account.id}")

    return _admit(
        session,
        controller,
        account=account,
        device_id=body.device_id,
        credential_ok=True,
        override_requested=body.force_logout,
        device_info=_device_info(request),
    )


@router.post("/logout", response_model=MessageResponse)
def logout(
    account: Account = Depends(get_current_account),
    session: Session = Depends(get_session),
    controller: SessionAdmissionController = Depends(get_admission_controller),
):
    """End the current session. Repeating the call is harmless."""
    account_id = account.id
    controller.logout(account_id)
    try_write_audit_log(session, AuditLog(account_id=account_id, event_type="logout"))
    return MessageResponse(message="Logged out successfully")


@router.post("/force-logout", response_model=MessageResponse)
def force_logout(
    body: ForceLogoutRequest,
    session: Session = Depends(get_session),
    store: IdentityStore = Depends(get_identity_store),
    controller: SessionAdmissionController = Depends(get_admission_controller),
):
    """
    Recovery path for a user locked out by another device: re-checks the
    password and forgets the pinned device and the session. No token needed.
    """
    account = store.get_by_email(body.email)
    if not account:
        raise AccountNotFound()

    controller.force_clear_session(
        account.id,
        credential_ok=verify_password(body.password, account.password_hash),
    )
    try_write_audit_log(session, AuditLog(account_id=account.id, event_type="force_logout"))
    return MessageResponse(message="Device session cleared. You can now login from any device.")


@router.get("/me", response_model=AccountProfile)
def get_me(account: Account = Depends(require_current_device)):
    """Profile of the authenticated account."""
    return AccountProfile.from_account(account)
