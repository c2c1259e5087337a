"""Cards, card registrations and card pre-authorizations."""

from __future__ import annotations

from typing import Any, Optional, Union

from mangoclient.models import Card, CardPreAuthorization, CardRegistration, Transaction
from mangoclient.services.base import PaginationLike, Service, list_query, require_id


class Cards(Service):
    """``/cards`` endpoints."""

    async def get(self, card_id: str) -> Card:
        return await self._api.call("card_get", path={"id": card_id}, data_class=Card)

    async def update(self, card: Union[Card, dict[str, Any]]) -> Card:
        return await self._api.call(
            "card_save", path={"id": require_id(card)}, data=card, data_class=Card
        )

    async def deactivate(self, card_id: str) -> Card:
        """Deactivate a card. Deactivation cannot be undone."""
        return await self._api.call(
            "card_save", path={"id": card_id}, data={"Active": False}, data_class=Card
        )

    async def get_transactions(
        self,
        card_id: str,
        pagination: PaginationLike = None,
        sort: Optional[str] = None,
        **filters: Any,
    ) -> list[Transaction]:
        return await self._api.call(
            "card_get_transactions",
            path={"id": card_id},
            query=list_query(pagination, sort, filters),
            data_class=Transaction,
        )

    async def get_pre_authorizations(
        self,
        card_id: str,
        pagination: PaginationLike = None,
        sort: Optional[str] = None,
    ) -> list[CardPreAuthorization]:
        return await self._api.call(
            "card_get_preauthorizations",
            path={"id": card_id},
            query=list_query(pagination, sort),
            data_class=CardPreAuthorization,
        )


class CardRegistrations(Service):
    """``/cardregistrations`` endpoints.

    A registration is created, the card data is posted to the tokenization
    server at ``CardRegistrationURL`` (outside this client), and the
    returned ``RegistrationData`` is sent back with :meth:`update`.
    """

    async def create(
        self, registration: Union[CardRegistration, dict[str, Any]]
    ) -> CardRegistration:
        return await self._api.call(
            "cardregistrations_create", data=registration, data_class=CardRegistration
        )

    async def update(
        self, registration: Union[CardRegistration, dict[str, Any]]
    ) -> CardRegistration:
        return await self._api.call(
            "cardregistrations_save",
            path={"id": require_id(registration)},
            data=registration,
            data_class=CardRegistration,
        )

    async def get(self, registration_id: str) -> CardRegistration:
        return await self._api.call(
            "cardregistrations_get", path={"id": registration_id}, data_class=CardRegistration
        )


class CardPreAuthorizations(Service):
    """``/preauthorizations`` endpoints."""

    async def create(
        self, pre_authorization: Union[CardPreAuthorization, dict[str, Any]]
    ) -> CardPreAuthorization:
        return await self._api.call(
            "preauthorizations_create",
            data=pre_authorization,
            data_class=CardPreAuthorization,
        )

    async def get(self, pre_authorization_id: str) -> CardPreAuthorization:
        return await self._api.call(
            "preauthorizations_get",
            path={"id": pre_authorization_id},
            data_class=CardPreAuthorization,
        )

    async def update(
        self, pre_authorization: Union[CardPreAuthorization, dict[str, Any]]
    ) -> CardPreAuthorization:
        """Update a pre-authorization, typically ``PaymentStatus="CANCELED"``."""
        return await self._api.call(
            "preauthorizations_save",
            path={"id": require_id(pre_authorization)},
            data=pre_authorization,
            data_class=CardPreAuthorization,
        )

    async def get_transactions(
        self,
        pre_authorization_id: str,
        pagination: PaginationLike = None,
        sort: Optional[str] = None,
    ) -> list[Transaction]:
        return await self._api.call(
            "preauthorizations_get_transactions",
            path={"id": pre_authorization_id},
            query=list_query(pagination, sort),
            data_class=Transaction,
        )
