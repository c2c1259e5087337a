"""Per-client session state: the bearer token and the rate-limit snapshot.

A :class:`Session` is owned by one :class:`~mangoclient.api.Api` instance
and shared by all of its in-flight calls, so several independent clients
can live in the same process. The token is replaced wholesale on every
(re)authorization; :attr:`Session.lock` serializes those so concurrent
calls that find the token expired trigger a single token request.

The rate-limit snapshot is advisory: it records what the server reported
in the ``x-ratelimit*`` headers of the latest response and is never used to
throttle calls.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Callable, Mapping, Optional

logger = logging.getLogger(__name__)

RATE_LIMIT_WINDOWS: tuple[int, ...] = (15, 30, 60, 24 * 60)
"""Window lengths in minutes, in the order the headers report them."""

_RATE_LIMIT_HEADERS: tuple[tuple[str, str], ...] = (
    ("x-ratelimit", "calls_made"),
    ("x-ratelimit-remaining", "calls_remaining"),
    ("x-ratelimit-reset", "reset_time"),
)

TOKEN_EXPIRY_MARGIN = 60.0
"""Seconds before the real expiry at which a token is treated as stale."""


@dataclass
class RateLimit:
    """Usage counters for one rate-limit window."""

    minutes_interval: int
    calls_made: int = 0
    calls_remaining: int = 0
    reset_time: int = 0


class RateLimits:
    """The four-window snapshot updated from response headers."""

    def __init__(self) -> None:
        self.windows: list[RateLimit] = [RateLimit(m) for m in RATE_LIMIT_WINDOWS]

    def __iter__(self):
        return iter(self.windows)

    def __len__(self) -> int:
        return len(self.windows)

    def __getitem__(self, index: int) -> RateLimit:
        return self.windows[index]

    def update_from_headers(self, headers: Mapping[str, str]) -> None:
        """Overwrite the snapshot from ``x-ratelimit*`` headers.

        Each header is a comma separated 4-tuple aligned with
        :data:`RATE_LIMIT_WINDOWS`. A missing header leaves its counter
        untouched; a malformed one is logged and skipped.
        """
        for header, attr in _RATE_LIMIT_HEADERS:
            raw = headers.get(header)
            if raw is None:
                continue
            try:
                values = _parse_rate_limit_header(raw)
            except ValueError as exc:
                logger.warning("Ignoring malformed %s header %r: %s", header, raw, exc)
                continue
            for window, value in zip(self.windows, values):
                setattr(window, attr, value)


def _parse_rate_limit_header(raw: str) -> list[int]:
    values = [int(part.strip()) for part in raw.split(",")]
    if len(values) != len(RATE_LIMIT_WINDOWS):
        raise ValueError(f"expected {len(RATE_LIMIT_WINDOWS)} values, got {len(values)}")
    if any(value < 0 for value in values):
        raise ValueError("negative value")
    return values


class Session:
    """Mutable auth state of one client.

    Args:
        clock: Returns the current time in epoch seconds. Tests inject a
            fake clock to move past the token expiry.
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self.authorization: Optional[str] = None
        self.expires_at: float = 0.0
        self.rate_limits = RateLimits()
        self.lock = asyncio.Lock()

    @property
    def has_token(self) -> bool:
        return self.authorization is not None

    def set_token(self, token_type: str, access_token: str, expires_in: float) -> None:
        """Replace the active token; ``expires_in`` is in seconds from now."""
        self.authorization = f"{token_type} {access_token}"
        self.expires_at = self._clock() + float(expires_in)

    def clear(self) -> None:
        self.authorization = None
        self.expires_at = 0.0

    def is_expired(self) -> bool:
        """True once the token is within :data:`TOKEN_EXPIRY_MARGIN` of expiring."""
        return self._clock() > self.expires_at - TOKEN_EXPIRY_MARGIN

    def needs_authorization(self) -> bool:
        return not self.has_token or self.is_expired()
