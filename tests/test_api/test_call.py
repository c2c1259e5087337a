"""Tests for Api.call(): auth lifecycle, headers, errors and result shaping."""

from __future__ import annotations

import anyio
import httpx
import pytest

from mangoclient.api import RequestOptions
from mangoclient.exceptions import (
    AuthError,
    InvalidUsageError,
    ModelError,
    NotFoundError,
    RequestError,
    TransportError,
)
from mangoclient.models import UserNatural, Wallet


pytestmark = pytest.mark.anyio


# ---------------------------------------------------------------------------
# Authorization lifecycle
# ---------------------------------------------------------------------------


class TestAuthorizationLifecycle:
    async def test_first_call_authorizes_once(self, make_api, fake_mangopay) -> None:
        async with make_api() as api:
            await api.call("users_get", path={"id": "1"})

        assert len(fake_mangopay.token_requests) == 1
        assert fake_mangopay.last_request.headers["Authorization"] == "Bearer token-1"

    async def test_valid_token_is_reused(self, make_api, fake_mangopay) -> None:
        async with make_api() as api:
            await api.call("users_get", path={"id": "1"})
            await api.call("users_get", path={"id": "2"})

        assert len(fake_mangopay.token_requests) == 1
        assert len(fake_mangopay.requests) == 2

    async def test_expired_token_is_refreshed_before_the_call(
        self, make_api, fake_mangopay, clock
    ) -> None:
        async with make_api() as api:
            await api.call("users_get", path={"id": "1"})
            clock.advance(3600)
            await api.call("users_get", path={"id": "1"})

        assert len(fake_mangopay.token_requests) == 2
        assert len(fake_mangopay.requests) == 2
        assert fake_mangopay.last_request.headers["Authorization"] == "Bearer token-2"

    async def test_401_reauthorizes_and_retries_once(self, make_api, fake_mangopay) -> None:
        fake_mangopay.queue({"Message": "expired"}, status_code=401)
        fake_mangopay.queue({"Id": "1", "FirstName": "John"})

        async with make_api() as api:
            result = await api.call("users_get", path={"id": "1"})

        assert result == {"Id": "1", "FirstName": "John"}
        assert len(fake_mangopay.token_requests) == 2
        assert len(fake_mangopay.requests) == 2
        assert fake_mangopay.requests[0].headers["Authorization"] == "Bearer token-1"
        assert fake_mangopay.requests[1].headers["Authorization"] == "Bearer token-2"

    async def test_second_401_is_raised(self, make_api, fake_mangopay) -> None:
        fake_mangopay.queue({"Message": "nope"}, status_code=401)
        fake_mangopay.queue({"Message": "still nope"}, status_code=401)

        async with make_api() as api:
            with pytest.raises(RequestError) as exc_info:
                await api.call("users_get", path={"id": "1"})

        assert exc_info.value.status_code == 401
        assert exc_info.value.body == {"Message": "still nope"}
        assert len(fake_mangopay.requests) == 2
        assert len(fake_mangopay.token_requests) == 2

    async def test_failed_reauthorization_raises_auth_error(self, make_api, fake_mangopay) -> None:
        def _revoke_credentials(request: httpx.Request) -> httpx.Response:
            fake_mangopay.token_status = 401
            fake_mangopay.token_payload = {"error": "invalid_client"}
            return httpx.Response(401, json={"Message": "expired"})

        fake_mangopay.queue_handler(_revoke_credentials)

        async with make_api() as api:
            with pytest.raises(AuthError, match="invalid_client"):
                await api.call("users_get", path={"id": "1"})

        assert len(fake_mangopay.token_requests) == 2
        assert len(fake_mangopay.requests) == 1

    async def test_concurrent_calls_share_one_token_request(
        self, make_api, fake_mangopay
    ) -> None:
        async with make_api() as api:
            async with anyio.create_task_group() as tg:
                for user_id in ("1", "2", "3"):
                    tg.start_soon(api.call, "users_get", RequestOptions(path={"id": user_id}))

        assert len(fake_mangopay.token_requests) == 1
        assert len(fake_mangopay.requests) == 3


# ---------------------------------------------------------------------------
# URL and header construction
# ---------------------------------------------------------------------------


class TestRequestConstruction:
    async def test_url_uses_default_path_params(self, make_api, fake_mangopay) -> None:
        async with make_api() as api:
            await api.call("wallets_get", path={"id": "42"})

        request = fake_mangopay.last_request
        assert request.method == "GET"
        assert str(request.url) == "https://api.test.mangopay.com/v2.01/sdk-unit-tests/wallets/42"

    async def test_query_params_are_forwarded(self, make_api, fake_mangopay) -> None:
        fake_mangopay.queue([])
        async with make_api() as api:
            await api.call("users_all", query={"page": 2, "per_page": 5})

        assert fake_mangopay.last_request.url.params["page"] == "2"
        assert fake_mangopay.last_request.url.params["per_page"] == "5"

    async def test_default_headers(self, make_api, fake_mangopay) -> None:
        from mangoclient import __version__

        async with make_api() as api:
            await api.call("users_get", path={"id": "1"})

        headers = fake_mangopay.last_request.headers
        assert headers["Content-Type"] == "application/json"
        assert headers["User-Agent"] == f"mangoclient/{__version__}"

    async def test_caller_cannot_override_authorization(self, make_api, fake_mangopay) -> None:
        async with make_api() as api:
            await api.call(
                "users_get",
                path={"id": "1"},
                headers={"Authorization": "", "X-Trace": "abc"},
            )

        headers = fake_mangopay.last_request.headers
        assert headers["Authorization"] == "Bearer token-1"
        assert headers["X-Trace"] == "abc"

    async def test_lowercase_authorization_is_replaced(self, make_api, fake_mangopay) -> None:
        async with make_api() as api:
            await api.call("users_get", path={"id": "1"}, headers={"authorization": ""})

        headers = fake_mangopay.last_request.headers
        assert headers.get_list("authorization") == ["Bearer token-1"]

    async def test_caller_content_type_wins(self, make_api, fake_mangopay) -> None:
        async with make_api() as api:
            await api.call(
                "users_get",
                path={"id": "1"},
                headers={"Content-Type": "text/plain"},
            )

        headers = fake_mangopay.last_request.headers
        assert headers["Content-Type"] == "text/plain"
        assert headers["Authorization"] == "Bearer token-1"

    async def test_lowercase_content_type_replaces_default(self, make_api, fake_mangopay) -> None:
        async with make_api() as api:
            await api.call("users_get", path={"id": "1"}, headers={"content-type": "text/plain"})

        headers = fake_mangopay.last_request.headers
        assert headers.get_list("content-type") == ["text/plain"]
        assert headers["Authorization"] == "Bearer token-1"

    async def test_unknown_endpoint_raises_invalid_usage(self, make_api, fake_mangopay) -> None:
        async with make_api() as api:
            with pytest.raises(InvalidUsageError, match="users_delete"):
                await api.call("users_delete")

        assert fake_mangopay.requests == []

    async def test_missing_path_param_raises_invalid_usage(self, make_api) -> None:
        async with make_api() as api:
            with pytest.raises(InvalidUsageError, match="id"):
                await api.call("users_get")

    async def test_model_body_is_serialized_without_read_only_fields(
        self, make_api, fake_mangopay
    ) -> None:
        wallet = Wallet(Id="9", Owners=["8"], Currency="EUR", Description="main", FundsType="DEFAULT")
        async with make_api() as api:
            await api.call("wallets_create", data=wallet)

        assert fake_mangopay.last_json() == {
            "Owners": ["8"],
            "Currency": "EUR",
            "Description": "main",
        }

    async def test_debug_mode_logs_each_call(self, make_api) -> None:
        calls = []
        async with make_api(debug_mode=True, log_class=lambda m, o: calls.append((m, o))) as api:
            await api.call("users_get", path={"id": "1"})

        assert len(calls) == 1
        assert calls[0][0] == "users_get"
        assert calls[0][1].path == {"id": "1"}


# ---------------------------------------------------------------------------
# Error mapping
# ---------------------------------------------------------------------------


class TestErrors:
    async def test_error_handler_is_invoked_before_raising(self, make_api, fake_mangopay) -> None:
        seen = []
        body = {"Message": "One or several required parameters are missing", "Type": "param_error"}
        fake_mangopay.queue(body, status_code=400)

        async with make_api(error_handler=lambda msg, data: seen.append((msg, data))) as api:
            with pytest.raises(RequestError) as exc_info:
                await api.call("users_create_natural", data={})

        assert seen == [("One or several required parameters are missing", body)]
        assert exc_info.value.status_code == 400
        assert exc_info.value.body == body
        assert "required parameters" in str(exc_info.value)

    async def test_404_raises_not_found(self, make_api, fake_mangopay) -> None:
        fake_mangopay.queue({"Message": "Not found"}, status_code=404)

        async with make_api() as api:
            with pytest.raises(NotFoundError) as exc_info:
                await api.call("users_get", path={"id": "missing"})

        assert exc_info.value.exit_code == 4
        assert isinstance(exc_info.value, RequestError)

    async def test_non_401_errors_are_not_retried(self, make_api, fake_mangopay) -> None:
        fake_mangopay.queue({"Message": "boom"}, status_code=500)

        async with make_api() as api:
            with pytest.raises(RequestError):
                await api.call("users_get", path={"id": "1"})

        assert len(fake_mangopay.requests) == 1
        assert len(fake_mangopay.token_requests) == 1

    async def test_timeout_raises_transport_error(self, make_api, fake_mangopay) -> None:
        def _timeout(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("read timed out", request=request)

        fake_mangopay.queue_handler(_timeout)

        async with make_api() as api:
            with pytest.raises(TransportError, match="timed out"):
                await api.call("users_get", path={"id": "1"})

    async def test_payload_not_fitting_model_raises_model_error(
        self, make_api, fake_mangopay
    ) -> None:
        fake_mangopay.queue({"Id": "1", "Owners": "not-a-list"})

        async with make_api() as api:
            with pytest.raises(ModelError, match="Wallet"):
                await api.call("wallets_get", path={"id": "1"}, data_class=Wallet)


# ---------------------------------------------------------------------------
# Result shaping
# ---------------------------------------------------------------------------


class TestResults:
    async def test_raw_payload_without_data_class(self, make_api, fake_mangopay) -> None:
        fake_mangopay.queue({"Id": "1"})
        async with make_api() as api:
            assert await api.call("users_get", path={"id": "1"}) == {"Id": "1"}

    async def test_data_class_builds_model(self, make_api, fake_mangopay) -> None:
        fake_mangopay.queue({"Id": "1", "FirstName": "John", "PersonType": "NATURAL"})
        async with make_api() as api:
            user = await api.call("users_get_natural", path={"id": "1"}, data_class=UserNatural)

        assert isinstance(user, UserNatural)
        assert user.Id == "1"
        assert user.FirstName == "John"

    async def test_list_payload_builds_models_in_order(self, make_api, fake_mangopay) -> None:
        fake_mangopay.queue([{"Id": "3"}, {"Id": "1"}, {"Id": "2"}])
        async with make_api() as api:
            wallets = await api.call("users_get_wallets", path={"id": "8"}, data_class=Wallet)

        assert [w.Id for w in wallets] == ["3", "1", "2"]
        assert all(isinstance(w, Wallet) for w in wallets)

    async def test_unknown_fields_are_kept(self, make_api, fake_mangopay) -> None:
        fake_mangopay.queue({"Id": "1", "SomethingNew": "x"})
        async with make_api() as api:
            wallet = await api.call("wallets_get", path={"id": "1"}, data_class=Wallet)

        assert wallet.SomethingNew == "x"

    async def test_full_response(self, make_api, fake_mangopay) -> None:
        fake_mangopay.queue({"Id": "1"}, headers={"X-Request-Id": "abc"})
        async with make_api() as api:
            response = await api.call(
                "users_get",
                path={"id": "1"},
                data_class=Wallet,
                resolve_with_full_response=True,
            )

        assert isinstance(response, httpx.Response)
        assert response.headers["X-Request-Id"] == "abc"
        assert response.json() == {"Id": "1"}

    async def test_payload_is_merged_onto_request_dict(self, make_api, fake_mangopay) -> None:
        fake_mangopay.queue({"Id": "77", "Owners": ["8"], "Currency": "EUR"})
        data = {"Owners": ["8"], "Currency": "EUR"}

        async with make_api() as api:
            await api.call("wallets_create", data=data)

        assert data["Id"] == "77"
        assert data["data"] == {"Id": "77", "Owners": ["8"], "Currency": "EUR"}

    async def test_payload_is_merged_onto_request_model(self, make_api, fake_mangopay) -> None:
        fake_mangopay.queue({"Id": "77", "Owners": ["8"], "Currency": "EUR", "FundsType": "DEFAULT"})
        wallet = Wallet(Owners=["8"], Currency="EUR")

        async with make_api() as api:
            await api.call("wallets_create", data=wallet, data_class=Wallet)

        assert wallet.Id == "77"
        assert wallet.FundsType == "DEFAULT"

    async def test_options_object_and_keyword_shortcut(self, make_api, fake_mangopay) -> None:
        fake_mangopay.queue({"Id": "5"})
        options = RequestOptions(path={"id": "5"})
        async with make_api() as api:
            wallet = await api.call("wallets_get", options, data_class=Wallet)

        assert wallet.Id == "5"
        assert options.data_class is None

    async def test_empty_body_is_none(self, make_api, fake_mangopay) -> None:
        fake_mangopay.queue(status_code=204)
        async with make_api() as api:
            assert await api.call("users_get", path={"id": "1"}) is None


class TestRateLimitsFromResponses:
    async def test_headers_update_snapshot(self, make_api, fake_mangopay) -> None:
        fake_mangopay.queue(
            {"Id": "1"},
            headers={
                "x-ratelimit": "1,2,3,4",
                "x-ratelimit-remaining": "99,98,97,96",
                "x-ratelimit-reset": "1700000900,1700001800,1700003600,1700086400",
            },
        )
        async with make_api() as api:
            await api.call("users_get", path={"id": "1"})
            windows = list(api.rate_limits)

        assert [w.minutes_interval for w in windows] == [15, 30, 60, 1440]
        assert [w.calls_made for w in windows] == [1, 2, 3, 4]
        assert [w.calls_remaining for w in windows] == [99, 98, 97, 96]
        assert windows[3].reset_time == 1700086400

    async def test_malformed_header_does_not_fail_the_call(self, make_api, fake_mangopay) -> None:
        fake_mangopay.queue({"Id": "1"}, headers={"x-ratelimit": "garbage"})
        async with make_api() as api:
            assert await api.call("users_get", path={"id": "1"}) == {"Id": "1"}
            assert api.rate_limits[0].calls_made == 0


class TestManualRequest:
    async def test_request_absolute_url_with_auth(self, make_api, fake_mangopay) -> None:
        fake_mangopay.queue({"ok": True})
        async with make_api() as api:
            result = await api.request(
                "get", "https://api.test.mangopay.com/v2.01/sdk-unit-tests/events"
            )

        assert result == {"ok": True}
        assert fake_mangopay.last_request.method == "GET"
        assert fake_mangopay.last_request.headers["Authorization"] == "Bearer token-1"
