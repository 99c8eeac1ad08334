from datetime import datetime, timezone

from fastapi import Depends, Request

from webforms.core.config import Settings, settings
from webforms.core.rate_limit import RateLimiter, SessionRateLimitStore
from webforms.db.session import SessionLocal
from webforms.services.email import MailTransport, build_transport
from webforms.services.pipeline import SubmissionContext
from webforms.services.subscribers import SubscriberStore

#Every method is routed to the form handlers so non-POST calls get the fixed 403 instead of a 405
FORM_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]


def get_settings() -> Settings:
    return settings


#Transport is built once per application and reused
def get_transport(
    request: Request,
    settings: Settings = Depends(get_settings),
) -> MailTransport:
    transport = getattr(request.app.state, "transport", None)
    if transport is None:
        transport = build_transport(settings)
        request.app.state.transport = transport
    return transport


def get_clock() -> datetime:
    return datetime.now(timezone.utc)


def get_client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"


#Cooldown state lives in the client's session cookie
def get_rate_limiter(request: Request) -> RateLimiter:
    return RateLimiter(SessionRateLimitStore(request.session))


#Subscriber storage only when the database feature is switched on
def get_subscriber_store(settings: Settings = Depends(get_settings)):
    if not settings.NEWSLETTER_USE_DATABASE:
        yield None
        return

    db = SessionLocal()
    try:
        yield SubscriberStore(db)
    finally:
        db.close()


def get_submission_context(
    request: Request,
    settings: Settings = Depends(get_settings),
    transport: MailTransport = Depends(get_transport),
    limiter: RateLimiter = Depends(get_rate_limiter),
    now: datetime = Depends(get_clock),
    client_ip: str = Depends(get_client_ip),
    subscribers: SubscriberStore | None = Depends(get_subscriber_store),
) -> SubmissionContext:
    return SubmissionContext(
        settings=settings,
        transport=transport,
        limiter=limiter,
        client_ip=client_ip,
        now=now,
        user_agent=request.headers.get("user-agent"),
        subscribers=subscribers,
    )


#Form-encoded body as plain strings (file uploads are ignored)
async def get_form_fields(request: Request) -> dict[str, str]:
    if request.method != "POST":
        return {}
    form = await request.form()
    return {key: value for key, value in form.items() if isinstance(value, str)}
