"""Shared test fixtures for mangoclient.

Provides a scripted fake of the Mangopay API served through
``httpx.MockTransport``, a controllable clock, an ``Api`` factory wired to
both, environment isolation and output/CLI helpers. These fixtures are
discovered by pytest and available to all test modules.
"""

from __future__ import annotations

import json
from typing import Any, Callable, Optional, Union

import httpx
import pytest

from mangoclient.api import Api
from mangoclient.output import OutputFormat, OutputManager, reset_output, set_output

CannedResponse = Union[httpx.Response, Callable[[httpx.Request], httpx.Response]]


# ---------------------------------------------------------------------------
# Auto-reset global state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The manager keeps references to sys.stdout/sys.stderr; CliRunner swaps
    those streams per invocation, so a stale manager would write to closed
    files.
    """
    yield
    reset_output()


@pytest.fixture(autouse=True)
def _isolated_environment(tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Clear MANGOPAY_* variables and run every test from an empty directory."""
    for var in [
        "MANGOPAY_CLIENT_ID",
        "MANGOPAY_CLIENT_API_KEY",
        "MANGOPAY_BASE_URL",
        "MANGOPAY_API_VERSION",
        "MANGOPAY_CONNECTION_TIMEOUT",
        "MANGOPAY_RESPONSE_TIMEOUT",
        "MANGOPAY_DEBUG",
        "MANGOPAY_CONFIG",
    ]:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


# ---------------------------------------------------------------------------
# Fake Mangopay server
# ---------------------------------------------------------------------------


class FakeMangopay:
    """Scripted stand-in for the Mangopay API.

    Token requests (``/oauth/token``) are answered by :meth:`token_handler`
    and issue ``token-1``, ``token-2``, ... in order. Every other request is
    recorded in :attr:`requests` and answered from the :meth:`queue`, or
    with ``200 {}`` when the queue is empty.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.token_requests: list[httpx.Request] = []
        self.token_status = 200
        self.token_payload: Optional[dict[str, Any]] = None
        self.expires_in = 3600
        self._queue: list[CannedResponse] = []

    def queue(
        self,
        payload: Any = None,
        status_code: int = 200,
        headers: Optional[dict[str, str]] = None,
    ) -> None:
        """Append a canned response for the next resource request."""
        if payload is None:
            self._queue.append(httpx.Response(status_code, headers=headers))
        else:
            self._queue.append(httpx.Response(status_code, json=payload, headers=headers))

    def queue_handler(self, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self._queue.append(handler)

    def token_handler(self, request: httpx.Request) -> httpx.Response:
        self.token_requests.append(request)
        if self.token_payload is not None:
            return httpx.Response(self.token_status, json=self.token_payload)
        return httpx.Response(
            self.token_status,
            json={
                "access_token": f"token-{len(self.token_requests)}",
                "token_type": "Bearer",
                "expires_in": self.expires_in,
            },
        )

    def __call__(self, request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/oauth/token"):
            return self.token_handler(request)
        self.requests.append(request)
        if not self._queue:
            return httpx.Response(200, json={})
        canned = self._queue.pop(0)
        if isinstance(canned, httpx.Response):
            return canned
        return canned(request)

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self) -> Any:
        return json.loads(self.last_request.content)


class FakeClock:
    """A clock frozen at ``now`` until a test moves it."""

    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_mangopay() -> FakeMangopay:
    return FakeMangopay()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_api(fake_mangopay: FakeMangopay, clock: FakeClock) -> Callable[..., Api]:
    """Factory for an ``Api`` talking to :class:`FakeMangopay`.

    Keyword arguments override ``ClientConfig`` fields.
    """

    def _make(**overrides: Any) -> Api:
        settings: dict[str, Any] = {
            "client_id": "sdk-unit-tests",
            "client_api_key": "cqFfFrWfCcb7UadHNxx2C9Lo6Djw8ZduLi7J9USTmu8bhxxpju",
            "base_url": "https://api.test.mangopay.com",
        }
        settings.update(overrides)
        return Api(transport=httpx.MockTransport(fake_mangopay), clock=clock, **settings)

    return _make


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def cli_runner():
    from typer.testing import CliRunner

    return CliRunner()
