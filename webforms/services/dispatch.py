import logging
from datetime import datetime

from webforms.core.errors import FormError, DispatchFailure, DuplicateSubscription, MailTransportError
from webforms.schemas.message import OutboundMessage
from webforms.schemas.newsletter import ValidatedSubscription
from webforms.services.email import MailTransport
from webforms.services.subscribers import SubscriberStore, SubscriberStoreUnavailable

logger = logging.getLogger(__name__)

#Statuses that make a second signup a duplicate
ACTIVE_STATUSES = ("pending", "active")


# -------------------------------------------------------------------
# Single send (ONLY place that talks to a transport)
# -------------------------------------------------------------------
def send(transport: MailTransport, message: OutboundMessage) -> DispatchFailure | None:
    try:
        transport.send(message)
    except MailTransportError as e:
        logger.error("Dispatch to %s failed: %s", message.to, e)
        return DispatchFailure()
    return None


# -------------------------------------------------------------------
# Newsletter persistence
# -------------------------------------------------------------------
def store_subscriber(
    store: SubscriberStore,
    subscription: ValidatedSubscription,
    *,
    client_ip: str,
    now: datetime,
) -> FormError | None:
    """
    Duplicate check then insert. A broken database only disables storage for
    this request; the signup itself still goes through.
    """
    try:
        if store.exists_with_status(subscription.email, ACTIVE_STATUSES):
            return DuplicateSubscription()

        inserted = store.insert_if_absent(
            email=subscription.email,
            ip_address=client_ip,
            subscription_token=subscription.subscription_token,
            subscribed_at=now,
        )
        if not inserted:
            return DuplicateSubscription()

    except SubscriberStoreUnavailable as e:
        logger.error("Database error: %s", e.__cause__ or e)

    return None


#Drop the row stored for this signup so the address can try again
def release_subscriber(store: SubscriberStore, subscription: ValidatedSubscription) -> None:
    try:
        store.discard_pending(
            email=subscription.email,
            subscription_token=subscription.subscription_token,
        )
    except SubscriberStoreUnavailable as e:
        logger.error("Database error: %s", e.__cause__ or e)


# -------------------------------------------------------------------
# Newsletter emails
# -------------------------------------------------------------------
def send_newsletter_messages(
    transport: MailTransport,
    *,
    confirmation: OutboundMessage | None,
    admin_notification: OutboundMessage | None,
) -> DispatchFailure | None:
    #Subscriber confirmation is critical
    if confirmation is not None:
        failure = send(transport, confirmation)
        if failure:
            return failure

    #Admin notification is not: a failure here is logged and the signup still succeeds
    if admin_notification is not None:
        if send(transport, admin_notification):
            logger.warning("Admin notification for new subscriber was not delivered")

    return None
