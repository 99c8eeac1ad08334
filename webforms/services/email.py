import logging
import smtplib
import ssl
from email.message import EmailMessage
from email.utils import parseaddr
from typing import Protocol

import sib_api_v3_sdk
from sib_api_v3_sdk.rest import ApiException

from webforms.core.config import Settings
from webforms.core.errors import MailTransportError
from webforms.schemas.message import OutboundMessage

logger = logging.getLogger(__name__)


# -------------------------------------------------------------------
# Transport interface
# -------------------------------------------------------------------
class MailTransport(Protocol):
    def send(self, message: OutboundMessage) -> None:
        """Deliver one message or raise MailTransportError."""
        ...


# -------------------------------------------------------------------
# SMTP (local mail agent by default, relay when credentials are set)
# -------------------------------------------------------------------
class SmtpTransport:
    def __init__(
        self,
        host: str = "localhost",
        port: int = 25,
        *,
        username: str | None = None,
        password: str | None = None,
        encryption: str = "none",
        timeout: int = 20,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.encryption = encryption
        self.timeout = timeout

    #Build the multipart/alternative MIME message (plain text first, HTML preferred)
    @staticmethod
    def build_mime(message: OutboundMessage) -> EmailMessage:
        mime = EmailMessage()
        mime["From"] = message.from_display
        mime["To"] = message.to
        mime["Reply-To"] = message.reply_to
        mime["Subject"] = message.subject
        for name, value in message.headers.items():
            mime[name] = value

        mime.set_content(message.text_body)
        mime.add_alternative(message.html_body, subtype="html")
        return mime

    def _connect(self) -> smtplib.SMTP:
        if self.encryption == "ssl":
            return smtplib.SMTP_SSL(
                self.host,
                self.port,
                timeout=self.timeout,
                context=ssl.create_default_context(),
            )
        return smtplib.SMTP(self.host, self.port, timeout=self.timeout)

    def send(self, message: OutboundMessage) -> None:
        mime = self.build_mime(message)
        try:
            with self._connect() as smtp:
                if self.encryption == "tls":
                    smtp.starttls(context=ssl.create_default_context())
                if self.username and self.password:
                    smtp.login(self.username, self.password)
                smtp.send_message(mime)

        except (smtplib.SMTPException, OSError) as e:
            logger.warning("SMTP delivery to %s failed: %s", message.to, e)
            raise MailTransportError(f"SMTP delivery failed ({self.host}:{self.port})") from e


# -------------------------------------------------------------------
# Brevo transactional API
# -------------------------------------------------------------------
def _address(value: str) -> dict[str, str]:
    name, email = parseaddr(value)
    address = {"email": email}
    if name:
        address["name"] = name
    return address


class BrevoTransport:
    def __init__(self, api_key: str | None):
        if not api_key:
            raise RuntimeError("BREVO_API_KEY is not set")

        config = sib_api_v3_sdk.Configuration()
        config.api_key["api-key"] = api_key

        client = sib_api_v3_sdk.ApiClient(config)
        self.brevo = sib_api_v3_sdk.TransactionalEmailsApi(client)

    def send(self, message: OutboundMessage) -> None:
        try:
            email = sib_api_v3_sdk.SendSmtpEmail(
                sender=_address(message.from_display),
                to=[_address(message.to)],
                reply_to=_address(message.reply_to),
                subject=message.subject,
                html_content=message.html_body,
                text_content=message.text_body,
                headers=message.headers or None,
            )
            self.brevo.send_transac_email(email)

        except ApiException as e:
            logger.warning("Brevo delivery to %s failed: %s", message.to, e)
            raise MailTransportError("Brevo email failed") from e


#Pick the transport named by MAIL_TRANSPORT
def build_transport(settings: Settings) -> MailTransport:
    if settings.MAIL_TRANSPORT == "brevo":
        return BrevoTransport(settings.BREVO_API_KEY)

    return SmtpTransport(
        settings.SMTP_HOST,
        settings.SMTP_PORT,
        username=settings.SMTP_USERNAME,
        password=settings.SMTP_PASSWORD,
        encryption=settings.SMTP_ENCRYPTION,
        timeout=settings.SMTP_TIMEOUT_SECONDS,
    )
