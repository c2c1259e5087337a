"""The dispatcher: authentication, the single outbound call path, and services.

:class:`Api` is the single choke point for every request sent to Mangopay.
It wraps :class:`httpx.AsyncClient` and adds:

* OAuth2 client-credentials authorization with a per-client
  :class:`~mangoclient.session.Session` (token refreshed 60 seconds before
  it expires, concurrent refreshes serialized on the session lock);
* one re-authorization and retry when a call is answered with 401;
* typed error mapping (:class:`~mangoclient.exceptions.RequestError`,
  :class:`~mangoclient.exceptions.TransportError`, ...) after invoking the
  configured error handler;
* rate-limit bookkeeping from the ``x-ratelimit*`` headers;
* serialization of model payloads and deserialization of responses into
  the requested model class.

No other failure is retried: transport errors and non-401 statuses are
raised to the caller as-is.

Example::

    async with Api(client_id="sdk-unit-tests", client_api_key="secret") as api:
        user = await api.users.create(UserNatural(FirstName="John", ...))
        print(user.Id)
"""

from __future__ import annotations

import base64
import dataclasses
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Union

import httpx
from pydantic import BaseModel, ValidationError

from mangoclient import __version__
from mangoclient.config import ClientConfig, resolve_config
from mangoclient.endpoints import get_endpoint
from mangoclient.exceptions import (
    AuthError,
    ModelError,
    NotFoundError,
    RequestError,
    TransportError,
    error_message,
)
from mangoclient.models import BankAccount, EntityBase, PayIn, PayOut, Serializable
from mangoclient.services import (
    CardPreAuthorizations,
    CardRegistrations,
    Cards,
    Deposits,
    PayIns,
    PayOuts,
    Refunds,
    Users,
    Wallets,
)
from mangoclient.session import RateLimits, Session

logger = logging.getLogger(__name__)

# (model type, field names) whose nested object is inlined into the write payload
_SUB_REQUEST_DATA: tuple[tuple[type[EntityBase], tuple[str, ...]], ...] = (
    (PayIn, ("PaymentDetails", "ExecutionDetails")),
    (PayOut, ("MeanOfPaymentDetails",)),
    (BankAccount, ("Details",)),
)


@dataclass
class RequestOptions:
    """Per-call options for :meth:`Api.call`.

    Attributes:
        path: Values for the endpoint's URL placeholders (``id``, ...).
        query: Query-string parameters.
        headers: Extra request headers.
        data: Request body: a model, any :class:`~mangoclient.models.Serializable`,
            or plain JSON data. A ``dict`` or model passed here is updated
            in place with the response payload.
        data_class: Model class the response payload is converted into.
        resolve_with_full_response: Return the :class:`httpx.Response`
            instead of the decoded payload.
    """

    path: dict[str, Any] = field(default_factory=dict)
    query: dict[str, Any] = field(default_factory=dict)
    headers: dict[str, str] = field(default_factory=dict)
    data: Any = None
    data_class: Optional[type[BaseModel]] = None
    resolve_with_full_response: bool = False


def _basic_auth_header(client_id: str, api_key: str) -> str:
    token = base64.b64encode(f"{client_id}:{api_key}".encode()).decode("ascii")
    return f"Basic {token}"


def _decode_body(response: httpx.Response) -> Any:
    """Decode a response body: JSON when possible, raw text otherwise, ``None`` when empty."""
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


class Api:
    """Asynchronous Mangopay client.

    Args:
        config: A ready :class:`~mangoclient.config.ClientConfig`. When
            omitted, one is built by :func:`~mangoclient.config.resolve_config`
            from ``overrides``, the environment and the config file.
        transport: Optional httpx transport (tests pass
            :class:`httpx.MockTransport`).
        clock: Time source in epoch seconds used for token expiry.
        **overrides: ``ClientConfig`` fields (``client_id``,
            ``client_api_key``, ``base_url``, ...).

    The services are available as attributes: :attr:`users`,
    :attr:`wallets`, :attr:`pay_ins`, :attr:`pay_outs`, :attr:`refunds`,
    :attr:`cards`, :attr:`card_registrations`,
    :attr:`card_pre_authorizations` and :attr:`deposits`.
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        clock: Callable[[], float] = time.time,
        **overrides: Any,
    ) -> None:
        if config is None:
            config = resolve_config(**overrides)
        elif overrides:
            config = config.model_copy(update=overrides)
        self.config = config
        self.session = Session(clock=clock)

        self.default_headers: dict[str, str] = {
            "Content-Type": "application/json",
            "User-Agent": f"mangoclient/{__version__}",
        }
        self.default_path: dict[str, Any] = {
            "client_id": config.client_id,
            "api_version": config.api_version,
        }
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(config.response_timeout, connect=config.connection_timeout),
            transport=transport,
        )

        self.users = Users(self)
        self.wallets = Wallets(self)
        self.pay_ins = PayIns(self)
        self.pay_outs = PayOuts(self)
        self.refunds = Refunds(self)
        self.cards = Cards(self)
        self.card_registrations = CardRegistrations(self)
        self.card_pre_authorizations = CardPreAuthorizations(self)
        self.deposits = Deposits(self)

    # ------------------------------------------------------------------ #
    # Async context manager
    # ------------------------------------------------------------------ #

    async def __aenter__(self) -> Api:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    @property
    def rate_limits(self) -> RateLimits:
        return self.session.rate_limits

    # ------------------------------------------------------------------ #
    # Authorization
    # ------------------------------------------------------------------ #

    async def authorize(self) -> dict[str, Any]:
        """Request a new bearer token with the client-credentials grant.

        Returns:
            The raw token payload (``token_type``, ``access_token``,
            ``expires_in``).

        Raises:
            AuthError: If the grant is rejected or the payload lacks
                ``token_type``/``access_token``.
            TransportError: On network failure or timeout.
        """
        endpoint = get_endpoint("authentication_oauth")
        url = endpoint.build_url(self.config.base_url, self.default_path)
        headers = {
            **self.default_headers,
            "Authorization": _basic_auth_header(
                self.config.client_id, self.config.client_api_key
            ),
            "Content-Type": "application/x-www-form-urlencoded",
        }
        response = await self._send(
            endpoint.method.value,
            url,
            headers=headers,
            data={"grant_type": "client_credentials"},
        )
        payload = _decode_body(response)

        if not response.is_success:
            raise AuthError(
                f"Token request failed with status {response.status_code}: "
                f"{error_message(payload) or response.reason_phrase}",
                payload,
            )
        if (
            not isinstance(payload, dict)
            or not payload.get("token_type")
            or not payload.get("access_token")
        ):
            raise AuthError("Token response missing 'token_type' or 'access_token'", payload)
        try:
            expires_in = float(payload.get("expires_in") or 0)
        except (TypeError, ValueError):
            raise AuthError(
                f"Token response has invalid 'expires_in': {payload['expires_in']!r}", payload
            ) from None

        self.session.set_token(payload["token_type"], payload["access_token"], expires_in)
        logger.debug("Authorized client %s; token expires in %ss",
                     self.config.client_id, payload.get("expires_in"))
        return payload

    def is_expired(self) -> bool:
        return self.session.is_expired()

    async def _ensure_token(self) -> None:
        if not self.session.needs_authorization():
            return
        async with self.session.lock:
            # another call may have refreshed while we waited
            if self.session.needs_authorization():
                await self.authorize()

    async def _reauthorize(self, rejected: Optional[str]) -> None:
        async with self.session.lock:
            if self.session.authorization == rejected:
                await self.authorize()

    # ------------------------------------------------------------------ #
    # Calls
    # ------------------------------------------------------------------ #

    async def call(
        self,
        method: str,
        options: Optional[RequestOptions] = None,
        **kwargs: Any,
    ) -> Any:
        """Call a catalog endpoint by name.

        Args:
            method: Logical endpoint name (see :mod:`mangoclient.endpoints`).
            options: Per-call options; keyword arguments are accepted as a
                shortcut and override fields of *options*.

        Returns:
            An instance (or list of instances) of ``options.data_class``
            when set, the :class:`httpx.Response` when
            ``resolve_with_full_response`` is set, the decoded payload
            otherwise.

        Raises:
            InvalidUsageError: Unknown endpoint or missing path parameter.
            AuthError: The token grant failed.
            RequestError: Non-2xx response (``NotFoundError`` for 404).
            TransportError: Network failure or timeout.
            ModelError: The payload does not fit ``data_class``.
        """
        if options is None:
            options = RequestOptions(**kwargs)
        elif kwargs:
            options = dataclasses.replace(options, **kwargs)

        if self.config.debug_mode:
            self.config.log_class(method, options)

        endpoint = get_endpoint(method)
        url = endpoint.build_url(self.config.base_url, {**self.default_path, **options.path})
        return await self._dispatch(endpoint.method.value, url, options, manual=False)

    async def request(
        self,
        verb: str,
        url: str,
        options: Optional[RequestOptions] = None,
        **kwargs: Any,
    ) -> Any:
        """Send an authenticated request to an absolute *url* outside the catalog.

        The response payload is returned as decoded; it is neither merged
        into ``options.data`` nor converted into a model.
        """
        if options is None:
            options = RequestOptions(**kwargs)
        elif kwargs:
            options = dataclasses.replace(options, **kwargs)

        if self.config.debug_mode:
            self.config.log_class(f"{verb.upper()} {url}", options)
        return await self._dispatch(verb.upper(), url, options, manual=True)

    async def _dispatch(
        self,
        verb: str,
        url: str,
        options: RequestOptions,
        *,
        manual: bool,
    ) -> Any:
        body = self._serialize(options.data)

        # a 401 earns exactly one re-authorization and one retry
        for attempt in range(2):
            await self._ensure_token()
            authorization = self.session.authorization
            headers = self._merge_headers(options.headers)
            response = await self._send(
                verb, url, headers=headers, params=options.query or None, body=body
            )
            if response.status_code == 401 and attempt == 0:
                logger.info("%s %s answered 401; re-authorizing", verb, url)
                await self._reauthorize(authorization)
                continue
            break

        return self._handle_response(response, options, manual=manual)

    def _serialize(self, data: Any) -> Any:
        if isinstance(data, EntityBase):
            return self.build_request_data(data)
        if isinstance(data, Serializable):
            return data.to_request_data()
        return data

    def _merge_headers(self, custom: dict[str, str]) -> httpx.Headers:
        """Combine default, auth and caller headers.

        A caller that sets ``Content-Type`` takes over the merge; otherwise
        defaults (including ``Authorization``) win so the auth header
        cannot be blanked by accident. Names compare case-insensitively.
        """
        defaults = httpx.Headers(self.default_headers)
        if self.session.authorization:
            defaults["Authorization"] = self.session.authorization
        caller = httpx.Headers(custom)
        if "Content-Type" in caller:
            del defaults["Content-Type"]
            defaults.update(caller)
            return defaults
        caller.update(defaults)
        return caller

    async def _send(
        self,
        verb: str,
        url: str,
        *,
        headers: Union[httpx.Headers, dict[str, str]],
        params: Optional[dict[str, Any]] = None,
        body: Any = None,
        data: Optional[dict[str, Any]] = None,
    ) -> httpx.Response:
        kwargs: dict[str, Any] = {"headers": headers}
        if params:
            kwargs["params"] = params
        if data is not None:
            kwargs["data"] = data
        elif isinstance(body, (str, bytes)):
            kwargs["content"] = body
        elif body is not None:
            kwargs["json"] = body

        try:
            return await self._client.request(verb, url, **kwargs)
        except httpx.TimeoutException as exc:
            raise TransportError(f"{verb} {url} timed out: {exc}") from exc
        except httpx.RequestError as exc:
            raise TransportError(f"{verb} {url} failed: {exc}") from exc

    def _handle_response(
        self,
        response: httpx.Response,
        options: RequestOptions,
        *,
        manual: bool,
    ) -> Any:
        payload = _decode_body(response)

        if not response.is_success:
            self.config.error_handler(error_message(payload), payload)
            if response.status_code == 404:
                raise NotFoundError(response.status_code, payload)
            raise RequestError(response.status_code, payload)

        self.session.rate_limits.update_from_headers(response.headers)

        if options.resolve_with_full_response:
            return response
        if manual:
            return payload

        _merge_into(options.data, payload)
        if options.data_class is None:
            return payload
        return _to_model(options.data_class, payload)

    # ------------------------------------------------------------------ #
    # Write payloads
    # ------------------------------------------------------------------ #

    def build_request_data(self, entity: EntityBase) -> dict[str, Any]:
        """Compute the write payload for *entity*.

        Read-only fields are dropped, and designated nested variant objects
        (pay-in payment/execution details, pay-out mean of payment details,
        bank account details) are replaced by their own fields at the top
        level.
        """
        read_only = set(entity.read_only_properties())
        request_data: dict[str, Any] = {}
        nested: list[Any] = []

        for key, value in entity.to_request_data().items():
            if key in read_only:
                continue
            if self.can_read_sub_request_data(entity, key):
                nested.append(getattr(entity, key, None))
                continue
            request_data[key] = value

        for sub in nested:
            if isinstance(sub, Serializable):
                request_data.update(sub.to_request_data())
            elif isinstance(sub, dict):
                request_data.update(sub)

        # inlined variants must not bring read-only keys back
        return {key: value for key, value in request_data.items() if key not in read_only}

    def can_read_sub_request_data(self, entity: EntityBase, property_name: str) -> bool:
        for model_type, names in _SUB_REQUEST_DATA:
            if isinstance(entity, model_type) and property_name in names:
                return True
        return False


def _merge_into(target: Any, payload: Any) -> None:
    """Copy a response payload onto the caller's request object.

    Callers that keep a reference to the ``dict`` they sent read the result
    from it afterwards, both at the top level and under ``"data"``.
    """
    if not isinstance(payload, dict):
        return
    if isinstance(target, dict):
        target.update(payload)
        target["data"] = payload
    elif isinstance(target, BaseModel):
        try:
            fresh = type(target).model_validate(payload)
        except ValidationError as exc:
            logger.debug("Response does not fit %s; request object left as sent: %s",
                         type(target).__name__, exc)
            return
        for name in fresh.model_fields_set:
            setattr(target, name, getattr(fresh, name))


def _to_model(data_class: type[BaseModel], payload: Any) -> Any:
    try:
        if isinstance(payload, list):
            return [data_class.model_validate(item) for item in payload]
        return data_class.model_validate(payload)
    except ValidationError as exc:
        raise ModelError(
            f"Response payload does not fit {data_class.__name__}: {exc}"
        ) from exc
