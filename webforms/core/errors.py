from dataclasses import dataclass

"""
PIPELINE OUTCOMES

Every step of a submission pipeline returns either its product or one of
these values. Nothing here is raised; the first error returned ends the
pipeline and is turned into the JSON response as-is.
"""


#Base class for every user-facing failure
@dataclass(frozen=True)
class FormError:
    message: str

    @property
    def status_code(self) -> int:
        return 400


#Non-POST request, rejected before the pipeline runs
@dataclass(frozen=True)
class MethodNotAllowed(FormError):
    message: str = "Direct access not permitted"

    @property
    def status_code(self) -> int:
        return 403


#Client submitted again before its cooldown window elapsed
@dataclass(frozen=True)
class RateLimited(FormError):
    seconds_remaining: int = 0


#Required field absent or blank after trimming
@dataclass(frozen=True)
class MissingField(FormError):
    field: str = ""


#Field present but fails a length or syntax rule
@dataclass(frozen=True)
class InvalidField(FormError):
    field: str = ""


#Honeypot filled or denylisted content found (message never names the check)
@dataclass(frozen=True)
class SpamDetected(FormError):
    message: str = "Spam detected."


@dataclass(frozen=True)
class DuplicateSubscription(FormError):
    message: str = "This email is already subscribed to our newsletter."


#Mail transport refused or failed to deliver the primary message
@dataclass(frozen=True)
class DispatchFailure(FormError):
    message: str = "Failed to send email. Please try again later or contact us directly."


#Raised by transport adapters only; the dispatcher converts it to DispatchFailure
class MailTransportError(RuntimeError):
    pass
