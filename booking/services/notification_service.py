"""
Unified Notification Service
Sends one notification over email and SMS from the same event
"""

import logging
from typing import Optional

from ..email_service import render_email_html, send_email
from ..shared.validators import normalize_phone
from .twilio_service import send_sms

logger = logging.getLogger(__name__)


async def send_notification(
    recipient_name: str,
    recipient_email: Optional[str],
    recipient_phone: Optional[str],
    notification_type: str,
    subject: str,
    lines: list[str],
) -> dict:
    """
    Unified notification sender that handles both email and SMS

    Args:
        recipient_name: Name for logging
        recipient_email: Email address (skipped when empty)
        recipient_phone: Phone number (skipped when empty)
        notification_type: Type of notification (for logging)
        subject: Email subject, also the first SMS line
        lines: Message body, one entry per paragraph

    Returns:
        Dict with email_sent and sms_sent status
    """
    result = {"email_sent": False, "sms_sent": False, "email_error": None, "sms_error": None}

    if recipient_email:
        try:
            logger.info(f"📧 Sending {notification_type} email to {recipient_email}")
            await send_email(recipient_email, subject, render_email_html(subject, lines))
            result["email_sent"] = True
        except Exception as e:
            result["email_error"] = str(e)
            logger.error(f"❌ Failed to send {notification_type} email to {recipient_email}: {e}")
    else:
        logger.debug(f"⚠️ No email address for {notification_type} notification to {recipient_name}")

    if recipient_phone:
        try:
            formatted_phone = normalize_phone(recipient_phone)
        except ValueError:
            formatted_phone = None

        if not formatted_phone:
            logger.warning(f"⚠️ Invalid phone number format for {recipient_name}: {recipient_phone}")
            result["sms_error"] = "Invalid phone number format"
        else:
            success, error = await send_sms(formatted_phone, "\n".join([subject, *lines]))
            if success:
                result["sms_sent"] = True
            else:
                result["sms_error"] = error
                if error and "disabled" not in error.lower():
                    logger.warning(f"⚠️ {notification_type} SMS not sent to {formatted_phone}: {error}")
                else:
                    logger.debug(f"ℹ️ {notification_type} SMS skipped: {error}")
    else:
        logger.debug(f"⚠️ No phone number for {notification_type} SMS to {recipient_name}")

    return result
