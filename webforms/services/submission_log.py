import logging
import os
from datetime import datetime

logger = logging.getLogger(__name__)


#Append one "[timestamp] Label: value | ..." line to a monthly log file
def append_submission(
    log_dir: str | None,
    prefix: str,
    fields: list[tuple[str, str]],
    now: datetime,
) -> bool:
    #No destination configured or created, nothing to do
    if not log_dir or not os.path.isdir(log_dir):
        return False

    path = os.path.join(log_dir, f"{prefix}_{now:%Y-%m}.log")
    entry = "[{}] {}\n".format(
        now.strftime("%Y-%m-%d %H:%M:%S"),
        " | ".join(f"{label}: {value}" for label, value in fields),
    )

    try:
        with open(path, "a", encoding="utf-8") as fh:
            fh.write(entry)

    except OSError as e:
        #Never allow log failures to break the submission
        logger.warning("Could not write submission log %s: %s", path, e)
        return False

    return True


def log_contact(log_dir: str | None, *, name: str, email: str, subject: str, ip: str, now: datetime) -> bool:
    return append_submission(
        log_dir,
        "contact_submissions",
        [("Name", name), ("Email", email), ("Subject", subject), ("IP", ip)],
        now,
    )


def log_subscription(log_dir: str | None, *, email: str, ip: str, now: datetime) -> bool:
    return append_submission(
        log_dir,
        "newsletter_subscriptions",
        [("Email", email), ("IP", ip)],
        now,
    )
