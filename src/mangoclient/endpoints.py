"""Static catalog of the Mangopay REST endpoints used by the services.

Every remote operation is an immutable :class:`Endpoint` carrying its
HTTP verb and URL path template. Templates use ``str.format`` placeholders:
``{api_version}`` and ``{client_id}`` are filled from the client
configuration, resource ids (``{id}``, ``{type}``, ...) from the
per-call path parameters.

The catalog is a plain typed mapping built once at import time;
:func:`get_endpoint` is the only lookup the dispatcher performs.
"""

from __future__ import annotations

import enum
import string
from typing import Any, Final, Mapping

from pydantic import BaseModel, ConfigDict

from mangoclient.exceptions import InvalidUsageError


class HTTPMethod(str, enum.Enum):
    """HTTP verbs used by the catalog."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"


class Endpoint(BaseModel):
    """One remote operation: a verb and a path template."""

    model_config = ConfigDict(frozen=True)

    name: str
    method: HTTPMethod
    path: str

    @property
    def placeholders(self) -> list[str]:
        """Names of the ``{placeholders}`` in :attr:`path`, in order."""
        return [
            field_name
            for _, field_name, _, _ in string.Formatter().parse(self.path)
            if field_name
        ]

    def build_url(self, base_url: str, path_params: Mapping[str, Any]) -> str:
        """Substitute *path_params* into the template and prefix *base_url*.

        Raises:
            InvalidUsageError: If a placeholder has no value.
        """
        missing = [name for name in self.placeholders if path_params.get(name) is None]
        if missing:
            raise InvalidUsageError(
                f"Endpoint '{self.name}' requires path parameter(s): {', '.join(missing)}"
            )
        values = {name: str(path_params[name]) for name in self.placeholders}
        return base_url.rstrip("/") + self.path.format(**values)


_ROOT = "/{api_version}/{client_id}"

_CATALOG: tuple[tuple[str, HTTPMethod, str], ...] = (
    ("authentication_oauth", HTTPMethod.POST, "/{api_version}/oauth/token"),
    # users
    ("users_create_natural", HTTPMethod.POST, _ROOT + "/users/natural"),
    ("users_create_legal", HTTPMethod.POST, _ROOT + "/users/legal"),
    ("users_save_natural", HTTPMethod.PUT, _ROOT + "/users/natural/{id}"),
    ("users_save_legal", HTTPMethod.PUT, _ROOT + "/users/legal/{id}"),
    ("users_get", HTTPMethod.GET, _ROOT + "/users/{id}"),
    ("users_get_natural", HTTPMethod.GET, _ROOT + "/users/natural/{id}"),
    ("users_get_legal", HTTPMethod.GET, _ROOT + "/users/legal/{id}"),
    ("users_all", HTTPMethod.GET, _ROOT + "/users"),
    ("users_get_wallets", HTTPMethod.GET, _ROOT + "/users/{id}/wallets"),
    ("users_get_cards", HTTPMethod.GET, _ROOT + "/users/{id}/cards"),
    ("users_get_transactions", HTTPMethod.GET, _ROOT + "/users/{id}/transactions"),
    ("users_create_bankaccount", HTTPMethod.POST, _ROOT + "/users/{id}/bankaccounts/{type}"),
    ("users_get_bankaccount", HTTPMethod.GET, _ROOT + "/users/{id}/bankaccounts/{account_id}"),
    ("users_get_bankaccounts", HTTPMethod.GET, _ROOT + "/users/{id}/bankaccounts"),
    ("users_save_bankaccount", HTTPMethod.PUT, _ROOT + "/users/{id}/bankaccounts/{account_id}"),
    # wallets
    ("wallets_create", HTTPMethod.POST, _ROOT + "/wallets"),
    ("wallets_save", HTTPMethod.PUT, _ROOT + "/wallets/{id}"),
    ("wallets_get", HTTPMethod.GET, _ROOT + "/wallets/{id}"),
    ("wallets_get_transactions", HTTPMethod.GET, _ROOT + "/wallets/{id}/transactions"),
    # pay-ins
    ("payins_card_web_create", HTTPMethod.POST, _ROOT + "/payins/card/web"),
    ("payins_card_direct_create", HTTPMethod.POST, _ROOT + "/payins/card/direct"),
    ("payins_preauthorized_direct_create", HTTPMethod.POST, _ROOT + "/payins/preauthorized/direct"),
    ("payins_bankwire_direct_create", HTTPMethod.POST, _ROOT + "/payins/bankwire/direct"),
    ("payins_directdebit_web_create", HTTPMethod.POST, _ROOT + "/payins/directdebit/web"),
    ("payins_directdebit_direct_create", HTTPMethod.POST, _ROOT + "/payins/directdebit/direct"),
    ("payins_paypal_web_create", HTTPMethod.POST, _ROOT + "/payins/payment-methods/paypal"),
    ("payins_payconiq_web_create", HTTPMethod.POST, _ROOT + "/payins/payconiq/web"),
    ("payins_mbway_web_create", HTTPMethod.POST, _ROOT + "/payins/payment-methods/mbway"),
    ("payins_get", HTTPMethod.GET, _ROOT + "/payins/{id}"),
    ("payins_createrefunds", HTTPMethod.POST, _ROOT + "/payins/{id}/refunds"),
    ("payins_getrefunds", HTTPMethod.GET, _ROOT + "/payins/{id}/refunds"),
    ("payins_recurring_registration_create", HTTPMethod.POST, _ROOT + "/recurringpayinregistrations"),
    ("payins_recurring_registration_get", HTTPMethod.GET, _ROOT + "/recurringpayinregistrations/{id}"),
    ("payins_recurring_registration_put", HTTPMethod.PUT, _ROOT + "/recurringpayinregistrations/{id}"),
    ("payins_recurring_card_direct_cit", HTTPMethod.POST, _ROOT + "/payins/recurring/card/direct"),
    ("payins_recurring_card_direct_mit", HTTPMethod.POST, _ROOT + "/payins/recurring/card/direct"),
    # pay-outs
    ("payouts_bankwire_create", HTTPMethod.POST, _ROOT + "/payouts/bankwire"),
    ("payouts_get", HTTPMethod.GET, _ROOT + "/payouts/{id}"),
    ("payouts_getrefunds", HTTPMethod.GET, _ROOT + "/payouts/{id}/refunds"),
    # refunds
    ("refunds_get", HTTPMethod.GET, _ROOT + "/refunds/{id}"),
    # cards
    ("card_get", HTTPMethod.GET, _ROOT + "/cards/{id}"),
    ("card_save", HTTPMethod.PUT, _ROOT + "/cards/{id}"),
    ("card_get_transactions", HTTPMethod.GET, _ROOT + "/cards/{id}/transactions"),
    ("card_get_preauthorizations", HTTPMethod.GET, _ROOT + "/cards/{id}/preauthorizations"),
    ("cardregistrations_create", HTTPMethod.POST, _ROOT + "/cardregistrations"),
    ("cardregistrations_save", HTTPMethod.PUT, _ROOT + "/cardregistrations/{id}"),
    ("cardregistrations_get", HTTPMethod.GET, _ROOT + "/cardregistrations/{id}"),
    ("preauthorizations_create", HTTPMethod.POST, _ROOT + "/preauthorizations/card/direct"),
    ("preauthorizations_get", HTTPMethod.GET, _ROOT + "/preauthorizations/{id}"),
    ("preauthorizations_save", HTTPMethod.PUT, _ROOT + "/preauthorizations/{id}"),
    ("preauthorizations_get_transactions", HTTPMethod.GET, _ROOT + "/preauthorizations/{id}/transactions"),
    # deposits
    ("deposits_create", HTTPMethod.POST, _ROOT + "/deposit-preauthorizations/card/direct"),
    ("deposits_get", HTTPMethod.GET, _ROOT + "/deposit-preauthorizations/{id}"),
    ("deposits_cancel", HTTPMethod.PUT, _ROOT + "/deposit-preauthorizations/{id}"),
)

ENDPOINTS: Final[Mapping[str, Endpoint]] = {
    name: Endpoint(name=name, method=method, path=path) for name, method, path in _CATALOG
}


def get_endpoint(name: str) -> Endpoint:
    """Look up an endpoint descriptor by its logical name.

    Raises:
        InvalidUsageError: If *name* is not in the catalog.
    """
    endpoint = ENDPOINTS.get(name)
    if endpoint is None:
        raise InvalidUsageError(f"Unknown API method '{name}'")
    return endpoint
