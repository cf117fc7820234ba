"""
Email Service using Resend
Sends appointment notification emails
"""

import asyncio
import logging
from typing import Optional, Union

import resend

from .config import EMAIL_FROM_ADDRESS, RESEND_API_KEY

logger = logging.getLogger(__name__)

resend.api_key = RESEND_API_KEY


def render_email_html(heading: str, lines: list[str]) -> str:
    """Minimal HTML body: a heading and one paragraph per line"""
    paragraphs = "".join(f"<p style=\"margin:0 0 12px\">{line}</p>" for line in lines)
    return (
        "<div style=\"font-family:Arial,sans-serif;font-size:15px;color:#1f2937\">"
        f"<h2 style=\"margin:0 0 16px\">{heading}</h2>{paragraphs}</div>"
    )


async def send_email(
    to: Union[str, list[str]],
    subject: str,
    html_content: str,
    from_address: Optional[str] = None,
) -> dict:
    """
    Send an email via Resend.

    The Resend SDK is synchronous, so the call runs in a worker thread.

    Raises:
        Exception: when Resend is not configured or the send fails
    """
    recipients = [to] if isinstance(to, str) else to
    sender = from_address or EMAIL_FROM_ADDRESS

    if not RESEND_API_KEY:
        logger.error("❌ No email service configured - RESEND_API_KEY missing")
        raise Exception("Email service not configured")

    try:
        logger.info(f"📧 Sending email via Resend to: {to}")
        email_data = {
            "from": sender,
            "to": recipients,
            "subject": subject,
            "html": html_content,
        }
        response = await asyncio.to_thread(resend.Emails.send, email_data)
        logger.info(f"✅ Email sent successfully via Resend: {response}")
        return response
    except Exception as e:
        logger.error(f"❌ Email send error to {recipients}: {e}")
        raise Exception(f"Failed to send email: {str(e)}") from e
