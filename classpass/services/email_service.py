"""Email service for transactional emails (Resend).

To send to any recipient, verify a domain at resend.com/domains and set
EMAIL_FROM to an address at that domain.
"""

from urllib.parse import urlencode

import resend

from classpass.config import settings
from classpass.core.logging import get_logger

logger = get_logger(__name__)

TEST_DOMAINS = ("@test.com", "@test.example.com", "@example.com", "@resend.dev")


def _should_skip_email(to_email: str) -> bool:
    """Skip sending in test env or to test domains (Resend sandbox restricts recipients)."""
    if settings.ENVIRONMENT == "test":
        return True
    return to_email.lower().endswith(TEST_DOMAINS)


def build_reset_link(token: str) -> str:
    return f"{settings.FRONTEND_RESET_PASSWORD_URL.rstrip('/')}?{urlencode({'token': token})}"


def send_password_reset(to_email: str, display_name: str, token: str) -> bool:
    """
    Send the password reset link.
    Returns True if sent or deliberately skipped for a test recipient,
    False if no API key is configured or the provider call failed.
    """
    if not settings.RESEND_API_KEY:
        logger.info("Email skipped (RESEND_API_KEY not set): password reset to %s", to_email)
        return False
    if _should_skip_email(to_email):
        logger.info("Email skipped (test env or test domain): password reset to %s", to_email)
        return True

    reset_url = build_reset_link(token)
    minutes = settings.PASSWORD_RESET_EXPIRE_MINUTES
    html = f"""
<!DOCTYPE html>
<html>
<head><meta charset="utf-8"><title>{settings.APP_NAME} password reset</title></head>
<body style="font-family: sans-serif; line-height: 1.6; color: #333; max-width: 560px; margin: 0 auto; padding: 20px;">
  <h2 style="color: #f97316;">Reset your password</h2>
  <p>Hi {display_name},</p>
  <p>We received a request to reset the password for your account.</p>
  <p style="margin: 24px 0;">
    <a href="{reset_url}" style="background: #f97316; color: white; padding: 12px 24px; text-decoration: none; border-radius: 6px; display: inline-block;">Choose a new password</a>
  </p>
  <p style="color: #666; font-size: 14px;">This link expires in {minutes} minutes. If you did not ask for it, ignore this email.</p>
</body>
</html>
"""

    try:
        resend.api_key = settings.RESEND_API_KEY
        resend.Emails.send(
            {
                "from": settings.EMAIL_FROM,
                "to": [to_email],
                "subject": "Reset your password",
                "html": html,
            }
        )
        logger.info("Password reset email sent to %s", to_email)
        return True
    except Exception as e:
        logger.exception("Failed to send password reset email to %s: %s", to_email, e)
        return False
