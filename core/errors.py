"""
core/errors.py -- Exception taxonomy shared by every layer.

Two families:

  ServiceError -- failures that reach the HTTP boundary. Each subclass
      carries the HTTP status and a machine-readable code; api/main.py renders
      them through the response envelope without inspecting the type.

  GatewayError -- failures local to core/gateway.py. Callers translate them
      into a ServiceError (AuthRejected -> Unauthorized, UpstreamError ->
      UpstreamUnavailable) or swallow them inside the reconciliation flow.
      They never reach the HTTP boundary on their own.

Anything that is neither is "unclassified": the catch-all handler logs it
with a traceback and answers 500 with a generic message.
"""

from typing import Optional


class ServiceError(Exception):
    """Base class for errors rendered to API clients."""

    status_code: int = 500
    code: str = "internal_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class Misconfigured(ServiceError):
    """A required configuration value is missing."""

    status_code = 500
    code = "misconfigured"


class Unauthorized(ServiceError):
    status_code = 401
    code = "unauthorized"


class Forbidden(ServiceError):
    status_code = 403
    code = "forbidden"


class NotFound(ServiceError):
    status_code = 404
    code = "not_found"


class Conflict(ServiceError):
    status_code = 409
    code = "conflict"


class UpstreamUnavailable(ServiceError):
    """The identity provider was reachable but the call failed."""

    status_code = 500
    code = "upstream_unavailable"


class BadUpstreamPayload(ServiceError):
    """The identity provider answered 2xx with data we cannot use."""

    status_code = 500
    code = "bad_upstream_payload"


class GatewayError(Exception):
    """Base class for identity provider call failures."""


class AuthRejected(GatewayError):
    """POST /login failed: transport error or non-2xx status."""


class UpstreamError(GatewayError):
    """A non-login provider call failed.

    status_code is None for transport failures (timeout, DNS, refused).
    """

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code
