"""
gateway.py -- All calls to the external identity provider (ReqRes).

Every call takes the base URL and API key as arguments. The caller owns
configuration; this module never reads the environment.

Failure classification:
  authenticate   -- any transport error or non-2xx -> AuthRejected
  list_users     -- any transport error or non-2xx -> UpstreamError
  get_user_by_id -- remote 404 -> NotFound, anything else -> UpstreamError
  all            -- empty base URL -> Misconfigured, before any network I/O

authenticate parses its body outside the error handling: a 2xx with a
malformed body is a provider defect, not a rejected login, and surfaces to
the caller as whatever exception the parsing raised. get_user_by_id instead
answers None for any unusable 2xx body, which the import flow reports as
BadUpstreamPayload.

No retries. Each call is attempted exactly once.
"""

import logging
from typing import Any, Optional

import requests

from core.errors import AuthRejected, Misconfigured, NotFound, UpstreamError
from core.models import AuthToken, ExternalIdentity

logger = logging.getLogger("reqresbridge.gateway")

API_KEY_HEADER = "x-api-key"
AUTH_TIMEOUT = 5
DEFAULT_TIMEOUT = 10

# Module-level session shared across all gateway calls for connection pooling.
# max_redirects=3 replaces the requests default of 30 -- the provider is a
# known API, 3 hops is generous and limits redirect-chain abuse.
_session = requests.Session()
_session.max_redirects = 3


def _require_base_url(base_url: Optional[str]) -> str:
    if not base_url:
        raise Misconfigured("REQRES_URL is not configured.")
    return base_url.rstrip("/")


def _headers(api_key: Optional[str]) -> dict[str, str]:
    return {API_KEY_HEADER: api_key} if api_key else {}


def authenticate(
    email: str,
    password: str,
    api_key: Optional[str],
    base_url: Optional[str],
    timeout: float = AUTH_TIMEOUT,
) -> AuthToken:
    """Exchange credentials for an opaque provider token.

    The underlying requests error is logged and replaced with AuthRejected so
    provider error text never reaches API clients.
    """
    base = _require_base_url(base_url)
    try:
        resp = _session.post(
            f"{base}/login",
            json={"email": email, "password": password},
            headers=_headers(api_key),
            timeout=timeout,
        )
        resp.raise_for_status()
    except requests.RequestException as e:
        logger.error("Identity provider rejected login for %s: %s", email, e)
        raise AuthRejected("Identity provider rejected the credentials.") from None
    payload = resp.json()
    return AuthToken(token=payload["token"])


def list_users(
    page: int,
    api_key: Optional[str],
    base_url: Optional[str],
    timeout: float = DEFAULT_TIMEOUT,
) -> list[ExternalIdentity]:
    """Fetch one page (1-based) of the provider's user directory."""
    base = _require_base_url(base_url)
    try:
        resp = _session.get(
            f"{base}/users",
            params={"page": page},
            headers=_headers(api_key),
            timeout=timeout,
        )
        resp.raise_for_status()
    except requests.RequestException as e:
        status = e.response.status_code if e.response is not None else None
        logger.warning("Provider user listing failed for page %d: %s", page, e)
        raise UpstreamError(f"User listing page {page} failed.", status_code=status) from e
    entries: list[dict[str, Any]] = resp.json().get("data") or []
    users = []
    for entry in entries:
        try:
            users.append(ExternalIdentity.from_payload(entry))
        except (AttributeError, ValueError) as e:
            logger.warning("Skipping unusable directory entry on page %d: %s", page, e)
    return users


def get_user_by_id(
    user_id: int,
    api_key: Optional[str],
    base_url: Optional[str],
    timeout: float = DEFAULT_TIMEOUT,
) -> Optional[ExternalIdentity]:
    """Fetch a single provider user.

    Returns None when the provider answers 2xx with a body that is not JSON,
    is not an object, or lacks a `data` object with an integer id.
    """
    base = _require_base_url(base_url)
    try:
        resp = _session.get(f"{base}/users/{user_id}", headers=_headers(api_key), timeout=timeout)
        resp.raise_for_status()
    except requests.RequestException as e:
        logger.error("Error fetching provider user %s: %s", user_id, e)
        status = e.response.status_code if e.response is not None else None
        if status == 404:
            raise NotFound(f"User {user_id} was not found at the identity provider.") from None
        raise UpstreamError(f"Fetching user {user_id} failed.", status_code=status) from e
    try:
        body = resp.json()
    except ValueError:
        logger.error("Provider returned a non-JSON body for user %s", user_id)
        return None
    data = body.get("data") if isinstance(body, dict) else None
    if not isinstance(data, dict):
        return None
    try:
        return ExternalIdentity.from_payload(data)
    except ValueError as e:
        logger.error("Provider returned unusable data for user %s: %s", user_id, e)
        return None
