"""Pay-outs (bank wire) and their refunds."""

from __future__ import annotations

from typing import Any, Optional, Union

from mangoclient.models import PayOut, Refund
from mangoclient.services.base import PaginationLike, Service, list_query


class PayOuts(Service):
    """``/payouts`` endpoints."""

    async def create(self, pay_out: Union[PayOut, dict[str, Any]]) -> PayOut:
        return await self._api.call("payouts_bankwire_create", data=pay_out, data_class=PayOut)

    async def get(self, pay_out_id: str) -> PayOut:
        return await self._api.call("payouts_get", path={"id": pay_out_id}, data_class=PayOut)

    async def get_refunds(
        self,
        pay_out_id: str,
        pagination: PaginationLike = None,
        sort: Optional[str] = None,
    ) -> list[Refund]:
        return await self._api.call(
            "payouts_getrefunds",
            path={"id": pay_out_id},
            query=list_query(pagination, sort),
            data_class=Refund,
        )
