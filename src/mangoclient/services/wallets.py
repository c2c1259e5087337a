"""Wallets."""

from __future__ import annotations

from typing import Any, Optional, Union

from mangoclient.models import Transaction, Wallet
from mangoclient.services.base import PaginationLike, Service, list_query, require_id

WalletData = Union[Wallet, dict[str, Any]]


class Wallets(Service):
    """``/wallets`` endpoints."""

    async def create(self, wallet: WalletData) -> Wallet:
        return await self._api.call("wallets_create", data=wallet, data_class=Wallet)

    async def update(self, wallet: WalletData) -> Wallet:
        """Update a wallet; only ``Description`` and ``Tag`` are writable remotely."""
        return await self._api.call(
            "wallets_save",
            path={"id": require_id(wallet)},
            data=wallet,
            data_class=Wallet,
        )

    async def get(self, wallet_id: str) -> Wallet:
        return await self._api.call("wallets_get", path={"id": wallet_id}, data_class=Wallet)

    async def get_transactions(
        self,
        wallet_id: str,
        pagination: PaginationLike = None,
        sort: Optional[str] = None,
        **filters: Any,
    ) -> list[Transaction]:
        return await self._api.call(
            "wallets_get_transactions",
            path={"id": wallet_id},
            query=list_query(pagination, sort, filters),
            data_class=Transaction,
        )
