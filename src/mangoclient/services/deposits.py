"""Deposit pre-authorizations."""

from __future__ import annotations

from typing import Any, Union

from mangoclient.models import Deposit
from mangoclient.services.base import Service


class Deposits(Service):
    """``/deposit-preauthorizations`` endpoints."""

    async def create(self, deposit: Union[Deposit, dict[str, Any]]) -> Deposit:
        return await self._api.call("deposits_create", data=deposit, data_class=Deposit)

    async def get(self, deposit_id: str) -> Deposit:
        return await self._api.call("deposits_get", path={"id": deposit_id}, data_class=Deposit)

    async def cancel(self, deposit_id: str) -> Deposit:
        """Cancel a deposit by setting its ``PaymentStatus`` to ``CANCELED``."""
        return await self._api.call(
            "deposits_cancel",
            path={"id": deposit_id},
            data={"PaymentStatus": "CANCELED"},
            data_class=Deposit,
        )
