"""Tests for the email/SMS fan-out used by the worker tasks."""

import pytest

from booking import email_service
from booking.services import notification_service, twilio_service
from booking.shared.validators import normalize_phone


@pytest.fixture
def channels(monkeypatch):
    calls = {"email": [], "sms": []}

    async def fake_send_email(to, subject, html_content, from_address=None):
        calls["email"].append((to, subject, html_content))
        return {"id": "email-1"}

    async def fake_send_sms(to_phone, message_body):
        calls["sms"].append((to_phone, message_body))
        return True, None

    monkeypatch.setattr(notification_service, "send_email", fake_send_email)
    monkeypatch.setattr(notification_service, "send_sms", fake_send_sms)
    return calls


class TestSendNotification:
    @pytest.mark.asyncio
    async def test_email_and_sms(self, channels):
        result = await notification_service.send_notification(
            recipient_name="Ada",
            recipient_email="ada@example.com",
            recipient_phone="(555) 123-0001",
            notification_type="appointment_reminder",
            subject="Appointment reminder",
            lines=["Hi Ada,", "See you tomorrow."],
        )

        assert result["email_sent"] is True
        assert result["sms_sent"] is True
        assert channels["email"][0][0] == "ada@example.com"
        assert "<h2" in channels["email"][0][2]
        assert channels["sms"] == [("+15551230001", "Appointment reminder\nHi Ada,\nSee you tomorrow.")]

    @pytest.mark.asyncio
    async def test_invalid_phone_skips_sms(self, channels):
        result = await notification_service.send_notification(
            recipient_name="Ada",
            recipient_email=None,
            recipient_phone="12345",
            notification_type="appointment_reminder",
            subject="Appointment reminder",
            lines=["Hi"],
        )

        assert result["sms_sent"] is False
        assert result["sms_error"] == "Invalid phone number format"
        assert channels["sms"] == []
        assert channels["email"] == []

    @pytest.mark.asyncio
    async def test_email_failure_does_not_block_sms(self, channels, monkeypatch):
        async def failing_send_email(*args, **kwargs):
            raise Exception("Email service not configured")

        monkeypatch.setattr(notification_service, "send_email", failing_send_email)

        result = await notification_service.send_notification(
            recipient_name="Ada",
            recipient_email="ada@example.com",
            recipient_phone="+447700900123",
            notification_type="appointment_cancelled",
            subject="Cancelled",
            lines=["Hi"],
        )

        assert result["email_sent"] is False
        assert result["email_error"] == "Email service not configured"
        assert result["sms_sent"] is True


class TestChannels:
    @pytest.mark.asyncio
    async def test_sms_disabled_without_credentials(self, monkeypatch):
        monkeypatch.setattr(twilio_service, "TWILIO_ACCOUNT_SID", None)

        success, error = await twilio_service.send_sms("+15551230001", "hello")

        assert success is False
        assert "disabled" in error

    @pytest.mark.asyncio
    async def test_sms_requires_e164(self):
        success, error = await twilio_service.send_sms("5551230001", "hello")

        assert success is False
        assert "E.164" in error

    @pytest.mark.asyncio
    async def test_email_requires_api_key(self, monkeypatch):
        monkeypatch.setattr(email_service, "RESEND_API_KEY", None)

        with pytest.raises(Exception, match="not configured"):
            await email_service.send_email("ada@example.com", "Subject", "<p>Body</p>")


class TestNormalizePhone:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("(555) 123-0001", "+15551230001"),
            ("1-555-123-0001", "+15551230001"),
            ("+44 7700 900123", "+447700900123"),
        ],
    )
    def test_normalizes(self, raw, expected):
        assert normalize_phone(raw) == expected

    @pytest.mark.parametrize("raw", ["12345", "+12"])
    def test_rejects(self, raw):
        with pytest.raises(ValueError):
            normalize_phone(raw)
