"""Users and their bank accounts."""

from __future__ import annotations

from typing import Any, Optional, Union

from pydantic import ValidationError

from mangoclient.exceptions import InvalidUsageError, ModelError
from mangoclient.models import (
    BankAccount,
    Card,
    Transaction,
    User,
    UserLegal,
    UserNatural,
    Wallet,
)
from mangoclient.services.base import (
    PaginationLike,
    Service,
    field_value,
    list_query,
    require_id,
)

UserData = Union[User, dict[str, Any]]

_USER_CLASSES: dict[str, type[User]] = {
    "NATURAL": UserNatural,
    "LEGAL": UserLegal,
}


def _person_type(user: UserData) -> str:
    person_type = str(field_value(user, "PersonType") or "").upper()
    if person_type not in _USER_CLASSES:
        raise InvalidUsageError(
            f"PersonType must be NATURAL or LEGAL, got {person_type or 'nothing'!r}"
        )
    return person_type


def _account_type(bank_account: Union[BankAccount, dict[str, Any]]) -> str:
    details = field_value(bank_account, "Details")
    account_type = getattr(details, "account_type", "") or field_value(bank_account, "Type")
    if not account_type:
        raise InvalidUsageError("Bank account type unknown: set Details or Type")
    return str(account_type).lower()


class Users(Service):
    """``/users`` endpoints."""

    async def create(self, user: UserData) -> User:
        """Create a natural or legal user depending on ``PersonType``."""
        person_type = _person_type(user)
        return await self._api.call(
            f"users_create_{person_type.lower()}",
            data=user,
            data_class=_USER_CLASSES[person_type],
        )

    async def update(self, user: UserData) -> User:
        person_type = _person_type(user)
        return await self._api.call(
            f"users_save_{person_type.lower()}",
            path={"id": require_id(user)},
            data=user,
            data_class=_USER_CLASSES[person_type],
        )

    async def get(self, user_id: str) -> User:
        """Fetch a user of either kind.

        The concrete class is picked from the returned ``PersonType``.
        """
        payload = await self._api.call("users_get", path={"id": user_id})
        if not isinstance(payload, dict):
            raise ModelError(f"Expected a user object, got {type(payload).__name__}")
        user_class = _USER_CLASSES.get(str(payload.get("PersonType", "")).upper(), User)
        try:
            return user_class.model_validate(payload)
        except ValidationError as exc:
            raise ModelError(f"Response payload does not fit {user_class.__name__}: {exc}") from exc

    async def get_natural(self, user_id: str) -> UserNatural:
        return await self._api.call(
            "users_get_natural", path={"id": user_id}, data_class=UserNatural
        )

    async def get_legal(self, user_id: str) -> UserLegal:
        return await self._api.call(
            "users_get_legal", path={"id": user_id}, data_class=UserLegal
        )

    async def get_all(
        self, pagination: PaginationLike = None, sort: Optional[str] = None
    ) -> list[User]:
        return await self._api.call(
            "users_all", query=list_query(pagination, sort), data_class=User
        )

    async def get_wallets(
        self, user_id: str, pagination: PaginationLike = None, sort: Optional[str] = None
    ) -> list[Wallet]:
        return await self._api.call(
            "users_get_wallets",
            path={"id": user_id},
            query=list_query(pagination, sort),
            data_class=Wallet,
        )

    async def get_cards(
        self, user_id: str, pagination: PaginationLike = None, sort: Optional[str] = None
    ) -> list[Card]:
        return await self._api.call(
            "users_get_cards",
            path={"id": user_id},
            query=list_query(pagination, sort),
            data_class=Card,
        )

    async def get_transactions(
        self,
        user_id: str,
        pagination: PaginationLike = None,
        sort: Optional[str] = None,
        **filters: Any,
    ) -> list[Transaction]:
        """List a user's transactions; ``filters`` (``Status``, ``Type``, ...) go to the query."""
        return await self._api.call(
            "users_get_transactions",
            path={"id": user_id},
            query=list_query(pagination, sort, filters),
            data_class=Transaction,
        )

    async def create_bank_account(
        self, user_id: str, bank_account: Union[BankAccount, dict[str, Any]]
    ) -> BankAccount:
        """Register a bank account; the path segment comes from the details variant."""
        return await self._api.call(
            "users_create_bankaccount",
            path={"id": user_id, "type": _account_type(bank_account)},
            data=bank_account,
            data_class=BankAccount,
        )

    async def get_bank_account(self, user_id: str, account_id: str) -> BankAccount:
        return await self._api.call(
            "users_get_bankaccount",
            path={"id": user_id, "account_id": account_id},
            data_class=BankAccount,
        )

    async def get_bank_accounts(
        self, user_id: str, pagination: PaginationLike = None, sort: Optional[str] = None
    ) -> list[BankAccount]:
        return await self._api.call(
            "users_get_bankaccounts",
            path={"id": user_id},
            query=list_query(pagination, sort),
            data_class=BankAccount,
        )

    async def deactivate_bank_account(self, user_id: str, account_id: str) -> BankAccount:
        """Deactivate a bank account. The API offers no way back."""
        return await self._api.call(
            "users_save_bankaccount",
            path={"id": user_id, "account_id": account_id},
            data={"Active": False},
            data_class=BankAccount,
        )
