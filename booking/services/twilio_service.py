"""
Twilio SMS Service
Sends appointment SMS through the Twilio REST API
"""

import logging
from typing import Optional

import httpx

from ..config import TWILIO_ACCOUNT_SID, TWILIO_AUTH_TOKEN, TWILIO_FROM_NUMBER

logger = logging.getLogger(__name__)

TWILIO_API_BASE = "https://api.twilio.com/2010-04-01"


def is_configured() -> bool:
    return bool(TWILIO_ACCOUNT_SID and TWILIO_AUTH_TOKEN and TWILIO_FROM_NUMBER)


async def send_sms(to_phone: str, message_body: str) -> tuple[bool, Optional[str]]:
    """
    Send SMS via Twilio

    Args:
        to_phone: Recipient phone number (E.164)
        message_body: SMS message content

    Returns:
        Tuple of (success: bool, error_message: Optional[str])
    """
    if not to_phone:
        return False, "No phone number provided"

    if not to_phone.startswith("+"):
        logger.warning(f"Phone number not in E.164 format: {to_phone}")
        return False, "Phone number must be in E.164 format"

    if not is_configured():
        return False, "SMS disabled: Twilio not configured"

    data = {"To": to_phone, "From": TWILIO_FROM_NUMBER, "Body": message_body}

    try:
        logger.info(f"🚀 Sending SMS to Twilio API for {to_phone}")
        async with httpx.AsyncClient() as client:
            response = await client.post(
                f"{TWILIO_API_BASE}/Accounts/{TWILIO_ACCOUNT_SID}/Messages.json",
                auth=(TWILIO_ACCOUNT_SID, TWILIO_AUTH_TOKEN),
                data=data,
                timeout=10.0,
            )

        logger.info(f"📡 Twilio API response status: {response.status_code}")

        if response.status_code in [200, 201]:
            logger.info(f"✅ SMS sent: sid={response.json().get('sid')}")
            return True, None

        try:
            error_message = response.json().get("message", response.text)
        except ValueError:
            error_message = response.text
        logger.error(f"❌ Twilio API error {response.status_code}: {error_message}")
        return False, error_message

    except httpx.HTTPError as e:
        logger.error(f"❌ Failed to reach Twilio: {str(e)}")
        return False, str(e)
