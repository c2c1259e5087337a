"""Resource services exposed as attributes of :class:`~mangoclient.api.Api`."""

from mangoclient.services.base import Pagination, Service
from mangoclient.services.cards import CardPreAuthorizations, CardRegistrations, Cards
from mangoclient.services.deposits import Deposits
from mangoclient.services.pay_ins import PayIns
from mangoclient.services.pay_outs import PayOuts
from mangoclient.services.refunds import Refunds
from mangoclient.services.users import Users
from mangoclient.services.wallets import Wallets

__all__ = [
    "CardPreAuthorizations",
    "CardRegistrations",
    "Cards",
    "Deposits",
    "Pagination",
    "PayIns",
    "PayOuts",
    "Refunds",
    "Service",
    "Users",
    "Wallets",
]
