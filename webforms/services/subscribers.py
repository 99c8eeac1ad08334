import logging
from datetime import datetime
from typing import Iterable

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from webforms.db.models import NewsletterSubscriber

logger = logging.getLogger(__name__)


class SubscriberStoreUnavailable(RuntimeError):
    pass


#Thin wrapper over the newsletter_subscribers table
class SubscriberStore:
    def __init__(self, db: Session):
        self.db = db

    def exists_with_status(self, email: str, statuses: Iterable[str]) -> bool:
        try:
            count = (
                self.db.query(NewsletterSubscriber)
                .filter(
                    NewsletterSubscriber.email == email,
                    NewsletterSubscriber.status.in_(list(statuses)),
                )
                .count()
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            raise SubscriberStoreUnavailable("Subscriber lookup failed") from e

        return count > 0

    def insert_if_absent(
        self,
        *,
        email: str,
        ip_address: str,
        subscription_token: str,
        subscribed_at: datetime,
    ) -> bool:
        """
        Store a pending subscriber. Returns False when the address is already
        pending or active. An unsubscribed row is reset to pending with the
        new token, since the email column is unique.
        """
        try:
            existing = (
                self.db.query(NewsletterSubscriber)
                .filter(NewsletterSubscriber.email == email)
                .first()
            )

            if existing and existing.status != "unsubscribed":
                return False

            if existing:
                existing.ip_address = ip_address
                existing.subscription_token = subscription_token
                existing.subscribed_at = subscribed_at
                existing.confirmed_at = None
                existing.status = "pending"
            else:
                self.db.add(
                    NewsletterSubscriber(
                        email=email,
                        ip_address=ip_address,
                        subscription_token=subscription_token,
                        subscribed_at=subscribed_at,
                        status="pending",
                    )
                )

            self.db.commit()
            return True

        except IntegrityError:
            # lost a race with a concurrent insert of the same address
            self.db.rollback()
            return False

        except SQLAlchemyError as e:
            self.db.rollback()
            raise SubscriberStoreUnavailable("Subscriber insert failed") from e

    #Undo a signup whose confirmation email could not be sent
    def discard_pending(self, *, email: str, subscription_token: str) -> bool:
        try:
            removed = (
                self.db.query(NewsletterSubscriber)
                .filter(
                    NewsletterSubscriber.email == email,
                    NewsletterSubscriber.subscription_token == subscription_token,
                    NewsletterSubscriber.status == "pending",
                )
                .delete(synchronize_session=False)
            )
            self.db.commit()

        except SQLAlchemyError as e:
            self.db.rollback()
            raise SubscriberStoreUnavailable("Subscriber delete failed") from e

        return removed > 0
