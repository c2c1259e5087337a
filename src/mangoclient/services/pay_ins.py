"""Pay-ins, their refunds and recurring pay-in registrations.

The create endpoint depends on the payment type and the execution type
(``payins_<payment>_<execution>_create``). Both are read from the nested
details of a :class:`~mangoclient.models.PayIn` when present, otherwise
from its flat ``PaymentType``/``ExecutionType`` fields (or keys, for a
plain dict).
"""

from __future__ import annotations

from typing import Any, Optional, Union

from mangoclient.endpoints import ENDPOINTS
from mangoclient.exceptions import InvalidUsageError
from mangoclient.models import PayIn, RecurringPayInRegistration, Refund
from mangoclient.services.base import PaginationLike, Service, field_value, list_query

PayInData = Union[PayIn, dict[str, Any]]


def _type_key(value: Any) -> str:
    """``"BANK_WIRE"`` -> ``"bankwire"``."""
    return str(value or "").lower().replace("_", "")


def create_endpoint_name(pay_in: PayInData) -> str:
    """Return the catalog name of the create endpoint for *pay_in*.

    Raises:
        InvalidUsageError: If the type pair is missing or has no endpoint.
    """
    payment_details = field_value(pay_in, "PaymentDetails")
    execution_details = field_value(pay_in, "ExecutionDetails")
    payment = _type_key(
        getattr(payment_details, "payment_type", None) or field_value(pay_in, "PaymentType")
    )
    execution = _type_key(
        getattr(execution_details, "execution_type", None) or field_value(pay_in, "ExecutionType")
    )
    if not payment or not execution:
        raise InvalidUsageError("Pay-in needs both a payment type and an execution type")

    name = f"payins_{payment}_{execution}_create"
    if name not in ENDPOINTS:
        raise InvalidUsageError(
            f"No pay-in endpoint for payment type '{payment}' with execution type '{execution}'"
        )
    return name


class PayIns(Service):
    """``/payins`` and ``/recurringpayinregistrations`` endpoints."""

    async def create(self, pay_in: PayInData) -> PayIn:
        return await self._api.call(
            create_endpoint_name(pay_in), data=pay_in, data_class=PayIn
        )

    async def get(self, pay_in_id: str) -> PayIn:
        return await self._api.call("payins_get", path={"id": pay_in_id}, data_class=PayIn)

    async def create_refund(
        self, pay_in_id: str, refund: Union[Refund, dict[str, Any]]
    ) -> Refund:
        """Refund a pay-in, fully (empty refund) or partially (``DebitedFunds`` and ``Fees``)."""
        return await self._api.call(
            "payins_createrefunds",
            path={"id": pay_in_id},
            data=refund,
            data_class=Refund,
        )

    async def get_refunds(
        self,
        pay_in_id: str,
        pagination: PaginationLike = None,
        sort: Optional[str] = None,
        **filters: Any,
    ) -> list[Refund]:
        return await self._api.call(
            "payins_getrefunds",
            path={"id": pay_in_id},
            query=list_query(pagination, sort, filters),
            data_class=Refund,
        )

    async def create_recurring_payment(
        self, registration: Union[RecurringPayInRegistration, dict[str, Any]]
    ) -> RecurringPayInRegistration:
        return await self._api.call(
            "payins_recurring_registration_create",
            data=registration,
            data_class=RecurringPayInRegistration,
        )

    async def get_recurring_payin(self, registration_id: str) -> RecurringPayInRegistration:
        return await self._api.call(
            "payins_recurring_registration_get",
            path={"id": registration_id},
            data_class=RecurringPayInRegistration,
        )

    async def update_recurring_payin(
        self,
        registration_id: str,
        registration: Union[RecurringPayInRegistration, dict[str, Any]],
    ) -> RecurringPayInRegistration:
        return await self._api.call(
            "payins_recurring_registration_put",
            path={"id": registration_id},
            data=registration,
            data_class=RecurringPayInRegistration,
        )

    async def create_recurring_payin_registration_cit(self, pay_in: PayInData) -> PayIn:
        """First, customer-initiated pay-in of a recurring registration."""
        return await self._api.call(
            "payins_recurring_card_direct_cit", data=pay_in, data_class=PayIn
        )

    async def create_recurring_payin_registration_mit(self, pay_in: PayInData) -> PayIn:
        """Subsequent, merchant-initiated pay-in of a recurring registration."""
        return await self._api.call(
            "payins_recurring_card_direct_mit", data=pay_in, data_class=PayIn
        )
