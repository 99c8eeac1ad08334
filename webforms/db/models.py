from sqlalchemy import (
    Column,
    Integer,
    String,
    DateTime,
    Enum,
)
from sqlalchemy.sql import func
from webforms.db.base import Base


# =========================================================
# SHARED ENUMS:
# =========================================================


#Lifecycle of a newsletter subscriber (transitions happen outside this service)
SubscriberStatusEnum = Enum(
    "pending", "active", "unsubscribed", name="subscriber_status_enum"
)


# =========================================================
# NEWSLETTER SUBSCRIBERS:
# =========================================================


#One row per subscribed address
class NewsletterSubscriber(Base):
    __tablename__ = "newsletter_subscribers"

    id = Column(Integer, primary_key=True)
    email = Column(String(255), unique=True, nullable=False, index=True)

    #Request metadata captured at signup
    ip_address = Column(String(45), nullable=True)
    subscription_token = Column(String(64), nullable=True)

    #Double opt-in state
    subscribed_at = Column(DateTime(timezone=True), nullable=False)
    confirmed_at = Column(DateTime(timezone=True), nullable=True)
    status = Column(SubscriberStatusEnum, nullable=False, default="pending", index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
