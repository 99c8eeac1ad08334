import hashlib
from dataclasses import dataclass
from typing import MutableMapping, Protocol

"""
COOLDOWN RATE LIMITER

One timestamp per (purpose, client) pair: the time of the last accepted
submission. Advisory throttling only. Entries are never expired, they just
stop mattering once the cooldown has elapsed. Not safe across processes
unless the injected store is (the session store is per client, so two
racing requests from the same client can lose an update; last write wins).
"""


#Key-value interface the limiter reads and writes through
class RateLimitStore(Protocol):
    def get(self, key: str) -> float | None: ...

    def set(self, key: str, timestamp: float) -> None: ...


#Process-local store, shared by every client of this worker
class InMemoryRateLimitStore:
    def __init__(self):
        self._entries: dict[str, float] = {}

    def get(self, key: str) -> float | None:
        return self._entries.get(key)

    def set(self, key: str, timestamp: float) -> None:
        self._entries[key] = timestamp


#Store backed by the client's signed session cookie
class SessionRateLimitStore:
    """
    Wraps ``request.session`` from Starlette's ``SessionMiddleware``.

    State travels with the client's cookie, so a client that drops its
    cookie starts with an empty store and is not throttled.
    """

    def __init__(self, session: MutableMapping):
        self._session = session

    def get(self, key: str) -> float | None:
        value = self._session.get(key)
        if value is None:
            return None
        try:
            return float(value)
        except (TypeError, ValueError):
            return None

    def set(self, key: str, timestamp: float) -> None:
        self._session[key] = timestamp


@dataclass(frozen=True)
class Allowed:
    pass


@dataclass(frozen=True)
class Throttled:
    seconds_remaining: int


def make_key(purpose: str, client_id: str) -> str:
    digest = hashlib.md5((client_id or "unknown").encode("utf-8")).hexdigest()
    return f"{purpose}_{digest}"


class RateLimiter:
    def __init__(self, store: RateLimitStore):
        self.store = store

    def check(self, purpose: str, client_id: str, cooldown_seconds: int, now: float) -> Allowed | Throttled:
        last = self.store.get(make_key(purpose, client_id))
        if last is None:
            return Allowed()

        elapsed = max(int(now - last), 0)
        if elapsed >= cooldown_seconds:
            return Allowed()

        return Throttled(seconds_remaining=cooldown_seconds - elapsed)

    #Only accepted submissions are recorded, so rejections never extend the wait
    def record(self, purpose: str, client_id: str, now: float) -> None:
        self.store.set(make_key(purpose, client_id), now)

    def check_and_record(self, purpose: str, client_id: str, cooldown_seconds: int, now: float) -> Allowed | Throttled:
        result = self.check(purpose, client_id, cooldown_seconds, now)
        if isinstance(result, Allowed):
            self.record(purpose, client_id, now)
        return result
