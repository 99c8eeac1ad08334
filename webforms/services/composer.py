import html
import re
from datetime import datetime
from email.utils import formataddr

from markupsafe import Markup

from webforms.schemas.contact import ValidatedContact
from webforms.schemas.newsletter import ValidatedSubscription
from webforms.schemas.message import CompanyMeta, OutboundMessage
from webforms.services.templates import render_pair, NEWSLETTER_BENEFITS
from webforms.services.validation import sanitize_input

"""
MESSAGE COMPOSER

Pure functions: validated input + company metadata + a fixed timestamp in,
OutboundMessage out. Free-text form values arrive HTML-encoded from the
validator and are passed to the templates as Markup, so the HTML and
plain-text bodies carry the same encoded text.
"""

_HEADER_BREAK = re.compile(r"[\r\n]+")

#Sent on every outgoing message
MAILER_HEADERS = {"X-Mailer": "Webforms/2.0"}


# -------------------------------------------------------------------
# Helpers
# -------------------------------------------------------------------
def format_timestamp(now: datetime) -> str:
    """Long human form, e.g. ``October 19, 2026, 3:04 pm UTC``."""
    hour = now.hour % 12 or 12
    meridiem = "am" if now.hour < 12 else "pm"
    zone = now.strftime("%Z")
    stamp = f"{now:%B} {now.day}, {now.year}, {hour}:{now:%M} {meridiem}"
    return f"{stamp} {zone}" if zone else stamp


#Header values: decode entities back to text and refuse line breaks
def header_value(value: str) -> str:
    return _HEADER_BREAK.sub(" ", html.unescape(value)).strip()


def _from_display(company: CompanyMeta) -> str:
    return formataddr((header_value(company.name), company.from_email))


# -------------------------------------------------------------------
# Contact form
# -------------------------------------------------------------------
def _contact_fields(contact: ValidatedContact) -> list[tuple[str, str | Markup]]:
    fields = [("Name", Markup(contact.name)), ("Email", contact.email)]
    if contact.phone:
        fields.append(("Phone", Markup(contact.phone)))
    if contact.company:
        fields.append(("Company", Markup(contact.company)))
    fields.append(("Subject", Markup(contact.subject)))
    return fields


def render_contact(contact: ValidatedContact, company: CompanyMeta, *, client_ip: str, now: datetime) -> tuple[str, str]:
    """Return the (HTML, plain text) bodies for a contact submission."""
    return render_pair(
        "contact",
        company=company.name,
        fields=_contact_fields(contact),
        message=Markup(contact.message),
        submitted=format_timestamp(now),
        ip=client_ip,
        year=now.year,
    )


def compose_contact_message(
    contact: ValidatedContact,
    company: CompanyMeta,
    *,
    client_ip: str,
    now: datetime,
) -> OutboundMessage:
    html_body, text_body = render_contact(contact, company, client_ip=client_ip, now=now)
    return OutboundMessage(
        to=company.receiving_email,
        subject=f"[Contact Form] {header_value(contact.subject)}",
        html_body=html_body,
        text_body=text_body,
        reply_to=formataddr((header_value(contact.name), contact.email)),
        from_display=_from_display(company),
        headers=MAILER_HEADERS,
    )


# -------------------------------------------------------------------
# Newsletter
# -------------------------------------------------------------------
def confirmation_link(base_url: str, token: str) -> str:
    return f"{base_url.rstrip('/')}/confirm-subscription?token={token}"


def compose_confirmation_message(
    subscription: ValidatedSubscription,
    company: CompanyMeta,
    *,
    double_optin: bool,
    base_url: str,
    now: datetime,
) -> OutboundMessage:
    link = confirmation_link(base_url, subscription.subscription_token) if double_optin else None

    html_body, text_body = render_pair(
        "confirmation",
        company=company.name,
        email=subscription.email,
        confirmation_link=link,
        benefits=NEWSLETTER_BENEFITS,
        receiving_email=company.receiving_email,
        year=now.year,
    )

    return OutboundMessage(
        to=subscription.email,
        subject=f"Welcome to {header_value(company.name)} Newsletter!",
        html_body=html_body,
        text_body=text_body,
        reply_to=company.receiving_email,
        from_display=_from_display(company),
        headers=MAILER_HEADERS,
    )


def compose_admin_notification(
    subscription: ValidatedSubscription,
    company: CompanyMeta,
    *,
    client_ip: str,
    user_agent: str | None,
    now: datetime,
) -> OutboundMessage:
    # the user agent is client-supplied free text, encode it like a form field
    html_body, text_body = render_pair(
        "admin_notification",
        email=subscription.email,
        ip=client_ip,
        submitted=format_timestamp(now),
        user_agent=Markup(sanitize_input(user_agent or "Unknown")),
    )
    return OutboundMessage(
        to=company.receiving_email,
        subject="New Newsletter Subscription",
        html_body=html_body,
        text_body=text_body,
        reply_to=company.from_email,
        from_display=company.from_email,
        headers=MAILER_HEADERS,
    )
