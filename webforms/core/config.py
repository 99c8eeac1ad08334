from pydantic_settings import BaseSettings
from pydantic import Field
from typing import Literal

"""
API CONFIGURATION
"""


#Class to load and read backend .env (read-only once loaded)
class Settings(BaseSettings):

    #Branding used in outgoing emails
    COMPANY_NAME: str = "NexGen Solutions"
    FROM_EMAIL: str = "noreply@nexgensolutions.com"

    #Where submissions are delivered
    CONTACT_RECEIVING_EMAIL: str = "contact@nexgensolutions.com"
    NEWSLETTER_RECEIVING_EMAIL: str = "newsletter@nexgensolutions.com"

    #Contact form limits
    MAX_MESSAGE_LENGTH: int = Field(default=5000, gt=10)

    #Per-client cooldown between accepted submissions
    CONTACT_COOLDOWN_SECONDS: int = 60
    NEWSLETTER_COOLDOWN_SECONDS: int = 30

    #Newsletter feature flags
    NEWSLETTER_ADMIN_NOTIFICATION: bool = True
    NEWSLETTER_SEND_CONFIRMATION: bool = True
    NEWSLETTER_USE_DATABASE: bool = False
    NEWSLETTER_DOUBLE_OPTIN: bool = False

    #Outbound mail transport
    MAIL_TRANSPORT: Literal["smtp", "brevo"] = "smtp"

    SMTP_HOST: str = "localhost"
    SMTP_PORT: int = 25
    SMTP_USERNAME: str | None = None
    SMTP_PASSWORD: str | None = None
    SMTP_ENCRYPTION: Literal["none", "tls", "ssl"] = "none"
    SMTP_TIMEOUT_SECONDS: int = 20

    BREVO_API_KEY: str | None = None

    #Optional subscriber storage
    DATABASE_URL: str = "sqlite:///./dev.db"

    #Signs the session cookie that carries rate-limit state
    SESSION_SECRET_KEY: str = "change-me-in-production"

    #Optional append-only submission log (skipped when directory is missing)
    SUBMISSION_LOG_DIR: str | None = None

    #Used to build the double opt-in confirmation link
    PUBLIC_BASE_URL: str = "http://localhost:8000"

    ALLOWED_ORIGINS: list[str] = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]

    class Config:
        env_file = ".env"
        case_sensitive = True
        frozen = True


settings = Settings()


#Fields that must be non-empty after trimming, checked in this order
CONTACT_REQUIRED_FIELDS = ("name", "email", "subject", "message")
NEWSLETTER_REQUIRED_FIELDS = ("email",)

#Hidden form field that only bots fill in
HONEYPOT_FIELD = "website"


#Case-insensitive substrings rejected in contact subject/message
SPAM_KEYWORDS = (
    "viagra",
    "cialis",
    "casino",
    "lottery",
    "prize",
)


#Throwaway address providers rejected for newsletter signups
DISPOSABLE_DOMAINS = frozenset({
    "tempmail.com",
    "throwaway.email",
    "10minutemail.com",
    "guerrillamail.com",
})


#Rate limiter purposes (prefix of the session key)
RATE_LIMIT_PURPOSES = {
    "contact": "contact_form",
    "newsletter": "newsletter",
}


#Field length bounds for the contact form
NAME_LENGTH = (2, 100)
SUBJECT_LENGTH = (3, 200)
MESSAGE_MIN_LENGTH = 10
