import html
import re
import secrets
from typing import Mapping

from email_validator import validate_email, EmailNotValidError

from webforms.core.config import (
    CONTACT_REQUIRED_FIELDS,
    NEWSLETTER_REQUIRED_FIELDS,
    HONEYPOT_FIELD,
    SPAM_KEYWORDS,
    DISPOSABLE_DOMAINS,
    NAME_LENGTH,
    SUBJECT_LENGTH,
    MESSAGE_MIN_LENGTH,
)
from webforms.core.errors import FormError, MissingField, InvalidField, SpamDetected
from webforms.schemas.contact import ValidatedContact
from webforms.schemas.newsletter import ValidatedSubscription

"""
FORM VALIDATION

Each rule returns None when it passes or a FormError when it fails. The
validators walk the rules in order and stop at the first error, so a
ValidatedContact / ValidatedSubscription only ever exists for a submission
that passed everything.
"""

_BACKSLASH_ESCAPE = re.compile(r"\\(.?)", re.DOTALL)

#Characters kept by the address sanitizer; everything else is dropped
_NOT_EMAIL_CHARS = re.compile(r"[^A-Za-z0-9!#$%&'*+\-=?^_`{|}~@.\[\]]")


#Trim, remove backslash escapes, then HTML-encode
def sanitize_input(value: str | None) -> str:
    value = (value or "").strip()
    value = _BACKSLASH_ESCAPE.sub(r"\1", value)
    return html.escape(value, quote=True)


#Drop every character that cannot appear in an email address
def sanitize_email(value: str | None) -> str:
    return _NOT_EMAIL_CHARS.sub("", (value or "").strip())


def is_valid_email(value: str) -> bool:
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


#Domain part after the last "@", lower-cased
def email_domain(value: str) -> str:
    _, _, domain = value.rpartition("@")
    return domain.lower()


def _field(form: Mapping[str, str], name: str) -> str:
    value = form.get(name)
    return value if isinstance(value, str) else ""


def _check_required(form: Mapping[str, str], fields, message: str | None = None) -> FormError | None:
    for field in fields:
        if not _field(form, field).strip():
            return MissingField(
                message=message or f"Please fill in all required fields. Missing: {field}",
                field=field,
            )
    return None


def _check_honeypot(form: Mapping[str, str]) -> FormError | None:
    if _field(form, HONEYPOT_FIELD):
        return SpamDetected()
    return None


def _check_length(value: str, field: str, bounds: tuple[int, int], label: str) -> FormError | None:
    low, high = bounds
    if len(value) < low or len(value) > high:
        return InvalidField(
            message=f"{label} must be between {low} and {high} characters.",
            field=field,
        )
    return None


def _check_email(value: str) -> FormError | None:
    if not is_valid_email(value):
        return InvalidField(message="Please provide a valid email address.", field="email")
    return None


def _check_message(value: str, max_length: int) -> FormError | None:
    if len(value) < MESSAGE_MIN_LENGTH:
        return InvalidField(
            message=f"Message must be at least {MESSAGE_MIN_LENGTH} characters long.",
            field="message",
        )
    if len(value) > max_length:
        return InvalidField(
            message=f"Message is too long. Maximum {max_length} characters allowed.",
            field="message",
        )
    return None


def _check_keywords(*texts: str) -> FormError | None:
    haystack = " ".join(texts).lower()
    for keyword in SPAM_KEYWORDS:
        if keyword in haystack:
            return SpamDetected(message="Your message contains prohibited content.")
    return None


def _check_disposable(email: str) -> FormError | None:
    if email_domain(email) in DISPOSABLE_DOMAINS:
        return InvalidField(message="Disposable email addresses are not allowed.", field="email")
    return None


def _first_error(*checks) -> FormError | None:
    for check in checks:
        error = check()
        if error is not None:
            return error
    return None


#Validate a contact form submission
def validate_contact(form: Mapping[str, str], max_message_length: int) -> ValidatedContact | FormError:
    error = _first_error(
        lambda: _check_required(form, CONTACT_REQUIRED_FIELDS),
        lambda: _check_honeypot(form),
    )
    if error:
        return error

    name = sanitize_input(_field(form, "name"))
    email = sanitize_email(_field(form, "email"))
    subject = sanitize_input(_field(form, "subject"))
    message = sanitize_input(_field(form, "message"))
    phone = sanitize_input(_field(form, "phone"))
    company = sanitize_input(_field(form, "company"))

    error = _first_error(
        lambda: _check_length(name, "name", NAME_LENGTH, "Name"),
        lambda: _check_email(email),
        lambda: _check_length(subject, "subject", SUBJECT_LENGTH, "Subject"),
        lambda: _check_message(message, max_message_length),
        lambda: _check_keywords(message, subject),
    )
    if error:
        return error

    return ValidatedContact(
        name=name,
        email=email,
        subject=subject,
        message=message,
        phone=phone or None,
        company=company or None,
    )


#Validate a newsletter signup and mint its subscription token
def validate_subscription(form: Mapping[str, str]) -> ValidatedSubscription | FormError:
    error = _first_error(
        lambda: _check_required(form, NEWSLETTER_REQUIRED_FIELDS, "Please provide an email address."),
        lambda: _check_honeypot(form),
    )
    if error:
        return error

    email = sanitize_email(_field(form, "email"))

    error = _first_error(
        lambda: _check_email(email),
        lambda: _check_disposable(email),
    )
    if error:
        return error

    return ValidatedSubscription(
        email=email,
        subscription_token=secrets.token_hex(32),
    )
