"""Numeric process exit codes used by the ``mangoclient`` command line.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~mangoclient.exceptions.MangoError` subclass.
Shell wrappers can inspect the exit code to determine the failure class
without parsing stderr.

Example::

    $ mangoclient call users_get --path id=123
    $ echo $?
    4   # EXIT_NOT_FOUND -- the user does not exist
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with an unknown endpoint or missing path parameters."""

EXIT_AUTH_FAILURE = 3
"""The OAuth2 token grant was rejected."""

EXIT_NOT_FOUND = 4
"""The requested resource was not found (HTTP 404)."""

EXIT_REQUEST_ERROR = 5
"""The remote API answered with a non-2xx status."""

EXIT_TRANSPORT_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""

EXIT_MODEL_ERROR = 7
"""A response payload could not be mapped onto the requested model."""
