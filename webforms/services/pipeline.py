import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Mapping

from webforms.core.config import Settings, RATE_LIMIT_PURPOSES
from webforms.core.errors import FormError, RateLimited
from webforms.core.rate_limit import RateLimiter, Throttled
from webforms.schemas.message import CompanyMeta
from webforms.services.composer import (
    compose_contact_message,
    compose_confirmation_message,
    compose_admin_notification,
)
from webforms.services.dispatch import send, store_subscriber, release_subscriber, send_newsletter_messages
from webforms.services.email import MailTransport
from webforms.services.subscribers import SubscriberStore
from webforms.services.submission_log import log_contact, log_subscription
from webforms.services.validation import validate_contact, validate_subscription

logger = logging.getLogger(__name__)

"""
SUBMISSION PIPELINES

rate limit -> validation -> (storage) -> dispatch -> record cooldown -> log

Each step returns a FormError to stop the pipeline; the caller turns
whatever comes back into the JSON response.
"""

CONTACT_SUCCESS = "Thank you for contacting us! We will get back to you within 24 hours."
NEWSLETTER_SUCCESS = "Thank you for subscribing! You will receive our latest updates and insights."
NEWSLETTER_SUCCESS_DOUBLE_OPTIN = "Thank you for subscribing! Please check your email to confirm your subscription."


@dataclass(frozen=True)
class Success:
    message: str
    status_code: int = 200


#Everything one request needs, resolved by the HTTP layer
@dataclass
class SubmissionContext:
    settings: Settings
    transport: MailTransport
    limiter: RateLimiter
    client_ip: str
    now: datetime
    user_agent: str | None = None
    subscribers: SubscriberStore | None = None


def _check_cooldown(ctx: SubmissionContext, purpose: str, cooldown: int, action: str) -> RateLimited | None:
    result = ctx.limiter.check(
        RATE_LIMIT_PURPOSES[purpose], ctx.client_ip, cooldown, ctx.now.timestamp()
    )
    if isinstance(result, Throttled):
        return RateLimited(
            message=f"Please wait {result.seconds_remaining} seconds before {action} again.",
            seconds_remaining=result.seconds_remaining,
        )
    return None


def _record_cooldown(ctx: SubmissionContext, purpose: str) -> None:
    ctx.limiter.record(RATE_LIMIT_PURPOSES[purpose], ctx.client_ip, ctx.now.timestamp())


# -------------------------------------------------------------------
# Contact form
# -------------------------------------------------------------------
def handle_contact(form: Mapping[str, str], ctx: SubmissionContext) -> Success | FormError:
    settings = ctx.settings

    throttled = _check_cooldown(ctx, "contact", settings.CONTACT_COOLDOWN_SECONDS, "submitting")
    if throttled:
        return throttled

    contact = validate_contact(form, settings.MAX_MESSAGE_LENGTH)
    if isinstance(contact, FormError):
        return contact

    company = CompanyMeta(
        name=settings.COMPANY_NAME,
        from_email=settings.FROM_EMAIL,
        receiving_email=settings.CONTACT_RECEIVING_EMAIL,
    )
    message = compose_contact_message(contact, company, client_ip=ctx.client_ip, now=ctx.now)

    failure = send(ctx.transport, message)
    if failure:
        return failure

    _record_cooldown(ctx, "contact")

    log_contact(
        settings.SUBMISSION_LOG_DIR,
        name=contact.name,
        email=contact.email,
        subject=contact.subject,
        ip=ctx.client_ip,
        now=ctx.now,
    )
    logger.info("Contact submission accepted from %s", ctx.client_ip)

    return Success(CONTACT_SUCCESS)


# -------------------------------------------------------------------
# Newsletter signup
# -------------------------------------------------------------------
def handle_newsletter(form: Mapping[str, str], ctx: SubmissionContext) -> Success | FormError:
    settings = ctx.settings

    throttled = _check_cooldown(ctx, "newsletter", settings.NEWSLETTER_COOLDOWN_SECONDS, "subscribing")
    if throttled:
        return throttled

    subscription = validate_subscription(form)
    if isinstance(subscription, FormError):
        return subscription

    stored = settings.NEWSLETTER_USE_DATABASE and ctx.subscribers is not None
    if stored:
        error = store_subscriber(
            ctx.subscribers, subscription, client_ip=ctx.client_ip, now=ctx.now
        )
        if error:
            return error

    company = CompanyMeta(
        name=settings.COMPANY_NAME,
        from_email=settings.FROM_EMAIL,
        receiving_email=settings.NEWSLETTER_RECEIVING_EMAIL,
    )

    confirmation = None
    if settings.NEWSLETTER_SEND_CONFIRMATION:
        confirmation = compose_confirmation_message(
            subscription,
            company,
            double_optin=settings.NEWSLETTER_DOUBLE_OPTIN,
            base_url=settings.PUBLIC_BASE_URL,
            now=ctx.now,
        )

    admin_notification = None
    if settings.NEWSLETTER_ADMIN_NOTIFICATION:
        admin_notification = compose_admin_notification(
            subscription,
            company,
            client_ip=ctx.client_ip,
            user_agent=ctx.user_agent,
            now=ctx.now,
        )

    failure = send_newsletter_messages(
        ctx.transport,
        confirmation=confirmation,
        admin_notification=admin_notification,
    )
    if failure:
        #The address must stay free to retry after a failed confirmation
        if stored:
            release_subscriber(ctx.subscribers, subscription)
        return failure

    log_subscription(settings.SUBMISSION_LOG_DIR, email=subscription.email, ip=ctx.client_ip, now=ctx.now)
    _record_cooldown(ctx, "newsletter")
    logger.info("Newsletter subscription accepted from %s", ctx.client_ip)

    if settings.NEWSLETTER_DOUBLE_OPTIN:
        return Success(NEWSLETTER_SUCCESS_DOUBLE_OPTIN)
    return Success(NEWSLETTER_SUCCESS)
