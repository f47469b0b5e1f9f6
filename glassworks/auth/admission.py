"""
Session admission: decides whether a credential-checked login may open a
session, given the single-device policy of the account.

Per account the session sub-state is:

    NoSession --admit_login--> ActiveSession(device_id, last_login_at)
    ActiveSession --admit_login (same device, stale, or override)--> ActiveSession
    ActiveSession --logout / force_clear_session--> NoSession

A login from another device while a *recent* session exists is rejected with
DeviceConflict and changes nothing.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional

from glassworks.auth.errors import AccountNotFound, DeviceConflict, StaleAccountError, Unauthorized
from glassworks.config import Settings
from glassworks.model.account import Account, SubscriptionStatus
from glassworks.model.base import utc_now
from glassworks.services.identity_store import IdentityStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AdmissionPolicy:
    # Sessions older than this no longer block another device.
    stale_after: timedelta = timedelta(hours=24)
    # A successful login proves ownership of the email.
    verify_email_on_login: bool = True
    # Attempts of the read-modify-write before giving up on a contended account.
    max_write_attempts: int = 3

    @classmethod
    def from_settings(cls, settings: Settings) -> "AdmissionPolicy":
        return cls(
            stale_after=timedelta(hours=settings.session_stale_hours),
            verify_email_on_login=settings.verify_email_on_login,
        )


class SessionAdmissionController:
    """
    Owns every transition of the account session sub-state.

    Credentials are never checked here: callers pass `credential_ok` after
    running the password or OAuth verification themselves. Each call is one
    read-modify-write of a single Account through IdentityStore; on a lost
    compare-and-set the whole decision is re-evaluated on fresh data.
    """

    def __init__(
        self,
        store: IdentityStore,
        policy: Optional[AdmissionPolicy] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.policy = policy or AdmissionPolicy()
        self.clock = clock

    def _load(self, account_id: int) -> Account:
        account = self.store.get(account_id)
        if account is None:
            raise AccountNotFound()
        return account

    def _read_modify_write(self, account_id: int, mutate: Callable[[Account, datetime], None]) -> Account:
        last_error: StaleAccountError | None = None
        for _ in range(self.policy.max_write_attempts):
            account = self._load(account_id)
            expected_version = account.version
            mutate(account, self.clock())
            try:
                return self.store.update(account, expected_version=expected_version)
            except StaleAccountError as e:
                last_error = e
        logger.error(f"Giving up on account {account_id} after {self.policy.max_write_attempts} conflicting writes")
        raise last_error or StaleAccountError(account_id)

    def _is_blocking(self, account: Account, device_id: Optional[str], now: datetime) -> bool:
        active = account.active_session
        if active is None or not device_id:
            return False
        if active.device_id == device_id:
            return False
        if active.last_login_at is None:
            return False
        return now - active.last_login_at < self.policy.stale_after

    def admit_login(
        self,
        account_id: int,
        device_id: Optional[str],
        credential_ok: bool,
        override_requested: bool = False,
        device_info: Optional[str] = None,
    ) -> Account:
        """
        Admit a login and record its session.

        Args:
            account_id: account the credentials were checked for
            device_id: client device identifier; None disables the device check
            credential_ok: result of the caller's credential verification
            override_requested: evict any other session instead of conflicting
            device_info: free-form client description (user agent)

        Returns:
            The account as stored after admission

        Raises:
            AccountNotFound: unknown account (nothing written)
            Unauthorized: credential_ok is False (nothing written)
            DeviceConflict: a recent session from another device exists (nothing written)
        """
        if not credential_ok:
            # Still resolve the account so unknown ids report NotFound.
            self._load(account_id)
            raise Unauthorized()

        def mutate(account: Account, now: datetime) -> None:
            if override_requested:
                account.clear_session(unpin=True)
            elif account.has_corrupt_session:
                account.clear_session()
            elif self._is_blocking(account, device_id, now):
                active = account.active_session
                logger.warning(
                    f"Login for account {account.id} rejected: device {active.device_id} "
                    f"has an active session since {active.last_login_at.isoformat()}"
                )
                raise DeviceConflict()

            if account.trial_has_ended(now):
                account.subscription_status = SubscriptionStatus.EXPIRED
                logger.info(f"Trial of account {account.id} expired")

            if self.policy.verify_email_on_login:
                account.email_verified = True

            account.admit_session(device_id, device_info or "Unknown", now)

        account = self._read_modify_write(account_id, mutate)
        logger.info(
            f"Login admitted for account {account.id} "
            f"(device={device_id or '-'}, override={bool(override_requested)})"
        )
        return account

    def logout(self, account_id: int) -> Account:
        """Clear the active session. Idempotent: the pinned device is kept."""
        account = self._read_modify_write(account_id, lambda a, _now: a.clear_session())
        logger.info(f"Account {account_id} logged out")
        return account

    def force_clear_session(self, account_id: int, credential_ok: bool) -> Account:
        """Recovery path: forget the pinned device and the session (password re-checked by caller)."""
        if not credential_ok:
            self._load(account_id)
            raise Unauthorized("Invalid password")
        account = self._read_modify_write(account_id, lambda a, _now: a.clear_session(unpin=True))
        logger.info(f"Device session of account {account_id} force-cleared")
        return account
