import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./booking.db")

# Business calendar
# Dates in availability queries are interpreted in this timezone
BUSINESS_TIMEZONE = os.getenv("BUSINESS_TIMEZONE", "UTC")
BUSINESS_OPEN_TIME = os.getenv("BUSINESS_OPEN_TIME", "09:00")  # HH:MM
BUSINESS_CLOSE_TIME = os.getenv("BUSINESS_CLOSE_TIME", "22:00")  # HH:MM

# Hours before the appointment when the reminder job fires
REMINDER_LEAD_HOURS = int(os.getenv("REMINDER_LEAD_HOURS", "24"))

# Identity provider (token issuance lives outside this service)
# AUTH_CERTS_URL must return a JSON object of {kid: x509 PEM certificate}
AUTH_CERTS_URL = os.getenv("AUTH_CERTS_URL")
AUTH_AUDIENCE = os.getenv("AUTH_AUDIENCE")
AUTH_ISSUER = os.getenv("AUTH_ISSUER")

# Resend Email Configuration
RESEND_API_KEY = os.getenv("RESEND_API_KEY")
EMAIL_FROM_ADDRESS = os.getenv("EMAIL_FROM_ADDRESS", "Bookings <noreply@example.com>")

# Twilio SMS Configuration
TWILIO_ACCOUNT_SID = os.getenv("TWILIO_ACCOUNT_SID")
TWILIO_AUTH_TOKEN = os.getenv("TWILIO_AUTH_TOKEN")
TWILIO_FROM_NUMBER = os.getenv("TWILIO_FROM_NUMBER")
