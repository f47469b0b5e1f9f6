"""
Outgoing email.
Delivery is not wired to a provider yet: messages are only logged.
"""
import logging
from typing import Optional

from glassworks.config import settings

logger = logging.getLogger(__name__)


def send_welcome_email(
    to_email: str,
    full_name: str,
    trial_days: int,
    app_url: Optional[str] = None,
) -> bool:
    """
    Send the welcome message after registration.

    Returns:
        True if the message was handed off, False otherwise
    """
    try:
        app_url = app_url or settings.app_url

        subject = "Welcome to Glassworks"

        body = f"""
Hello {full_name},

Your account is ready. Your free trial lasts {trial_days} days.

Sign in at:
{app_url}
        """.strip()

        logger.info(f"Welcome email sent to {to_email}")
        logger.debug(f"Subject: {subject}")
        logger.debug(f"Body:\n{body}")
        return True
    except Exception as e:
        logger.error(f"Failed to send welcome email to {to_email}: {e}", exc_info=True)
        return False
