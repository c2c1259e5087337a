"""Refunds."""

from __future__ import annotations

from mangoclient.models import Refund
from mangoclient.services.base import Service


class Refunds(Service):
    async def get(self, refund_id: str) -> Refund:
        return await self._api.call("refunds_get", path={"id": refund_id}, data_class=Refund)
