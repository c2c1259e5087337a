"""Shared plumbing for the resource services."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Optional, Union

from mangoclient.exceptions import InvalidUsageError

if TYPE_CHECKING:
    from mangoclient.api import Api


@dataclass
class Pagination:
    """Page selection for listing calls; ``page`` starts at 1."""

    page: int = 1
    per_page: int = 10


PaginationLike = Union[Pagination, dict[str, Any], None]


def list_query(
    pagination: PaginationLike = None,
    sort: Optional[str] = None,
    filters: Optional[dict[str, Any]] = None,
) -> dict[str, Any]:
    """Build the query string of a listing call.

    ``sort`` uses the API syntax, e.g. ``"CreationDate:DESC"``. Filters with
    a ``None`` value are dropped.
    """
    query: dict[str, Any] = {}
    if isinstance(pagination, Pagination):
        query["page"] = pagination.page
        query["per_page"] = pagination.per_page
    elif pagination:
        query.update({k: v for k, v in pagination.items() if k in ("page", "per_page")})
    if sort:
        query["Sort"] = sort
    if filters:
        query.update({k: v for k, v in filters.items() if v is not None})
    return query


def field_value(data: Any, name: str) -> Any:
    """Read *name* from a model or a plain mapping."""
    if isinstance(data, dict):
        return data.get(name)
    return getattr(data, name, None)


def require_id(data: Any) -> str:
    """Return the ``Id`` of an entity or mapping, or raise when it has none."""
    entity_id = field_value(data, "Id")
    if not entity_id:
        raise InvalidUsageError(f"{type(data).__name__} has no 'Id'; cannot address it")
    return str(entity_id)


class Service:
    """Base class of the services attached to :class:`~mangoclient.api.Api`."""

    def __init__(self, api: Api) -> None:
        self._api = api
