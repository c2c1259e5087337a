"""mangoclient -- asynchronous client for the Mangopay payment REST API.

The package wraps the Mangopay v2 REST API behind a single dispatcher that
handles OAuth2 client-credentials authentication, request serialization,
response-to-model mapping, rate-limit tracking and error mapping. Resource
services (users, wallets, pay-ins, ...) are thin typed layers on top.

Typical use::

    from mangoclient import Api
    from mangoclient.models import UserNatural

    async with Api(client_id="sdk-unit-tests", client_api_key="secret") as api:
        user = await api.users.create(UserNatural(FirstName="John", LastName="Doe"))

A small ``mangoclient`` command line is included for token checks and ad-hoc
calls against the endpoint catalog.

Modules:
    api: The dispatcher (:class:`~mangoclient.api.Api`).
    endpoints: Static endpoint catalog.
    models: Pydantic models of the API resources.
    services: Per-resource services.
    session: Token and rate-limit state.
    config: Configuration and precedence resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    output: stdout/stderr formatting with Rich support.
    app: Typer command line.
"""

__version__ = "0.3.0"

from mangoclient.api import Api, RequestOptions  # noqa: E402
from mangoclient.config import ClientConfig  # noqa: E402

__all__ = ["Api", "ClientConfig", "RequestOptions", "__version__"]
