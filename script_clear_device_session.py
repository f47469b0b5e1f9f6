"""
Clear the device session of one account (pinned device + active session).

Use when an owner is locked out and cannot run the force-logout flow.

Usage: python script_clear_device_session.py <email>
"""
import argparse
import logging
import sys

from glassworks.auth.admission import SessionAdmissionController
from glassworks.db.session import get_session_context
from glassworks.services.identity_store import IdentityStore


def clear_device_session(email: str) -> int:
    with get_session_context() as session:
        store = IdentityStore(session)
        account = store.get_by_email(email)
        if not account:
            print(f"ERROR: account not found: {email}")
            return 1

        # Operator action: the password check is replaced by shell access to the server.
        SessionAdmissionController(store).force_clear_session(account.id, credential_ok=True)

    print(f"OK: device session cleared for {email}")
    print("   The account can now login from any device.")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Clear the device session of an account")
    parser.add_argument("email", help="account email")
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO)
    return clear_device_session(args.email)


if __name__ == "__main__":
    sys.exit(main())
