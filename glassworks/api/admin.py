import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel, field_validator
from sqlmodel import Session

from glassworks.api.auth import MessageResponse, normalize_email, try_write_audit_log
from glassworks.auth.admission import SessionAdmissionController
from glassworks.auth.dependencies import get_admission_controller, get_identity_store, require_admin
from glassworks.auth.errors import AccountNotFound
from glassworks.db.session import get_session
from glassworks.model.account import Account
from glassworks.model.audit_log import AuditLog
from glassworks.services.identity_store import IdentityStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Admin"])


class ClearDeviceByEmailRequest(BaseModel):
    email: str

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return normalize_email(v)


def _clear_device(
    session: Session,
    controller: SessionAdmissionController,
    account_id: int,
    admin: Account,
) -> None:
    # Ends the active session only; the pinned device is kept (force-logout forgets it).
    admin_id = admin.id
    controller.logout(account_id)
    logger.info(f"Admin {admin_id} cleared the device session of account {account_id}")
    try_write_audit_log(
        session,
        AuditLog(account_id=account_id, event_type="admin_clear_device", data={"admin_id": admin_id}),
    )


@router.post("/clear-device/{account_id}", response_model=MessageResponse)
def clear_device(
    account_id: int,
    admin: Account = Depends(require_admin),
    session: Session = Depends(get_session),
    controller: SessionAdmissionController = Depends(get_admission_controller),
):
    """Admin only: end the active session of an account so any device can login."""
    _clear_device(session, controller, account_id, admin)
    return MessageResponse(message="Device session cleared successfully")


@router.post("/clear-device-by-email", response_model=MessageResponse)
def clear_device_by_email(
    body: ClearDeviceByEmailRequest,
    admin: Account = Depends(require_admin),
    session: Session = Depends(get_session),
    store: IdentityStore = Depends(get_identity_store),
    controller: SessionAdmissionController = Depends(get_admission_controller),
):
    account = store.get_by_email(body.email)
    if not account:
        raise AccountNotFound()
    _clear_device(session, controller, account.id, admin)
    return MessageResponse(message=f"Device session cleared successfully for {account.email}")
