"""
auth/login.py -- Login proxy and identity reconciliation.

The identity provider only answers "is this password right?" with an opaque
token; it says nothing about who the user is. login() therefore runs two
phases:

  1. Authenticate against the provider. Failure here is terminal and
     reported as Unauthorized with a fixed message -- the provider's error
     text is logged, never returned.

  2. Work out who authenticated, trying each source in order and stopping at
     the first hit:
        local store by email -> provider directory page 1 -> page 2
     A failing source is logged and skipped, never fatal. When every source
     misses, a Fallback identity is synthesized from the email.

Configuration arrives as an argument. A missing REQRES_URL is detected before
any network call.
"""

from __future__ import annotations

import logging
from functools import partial
from typing import Callable, Optional

from auth.models import ExternalMatch, Fallback, LocalMatch, LoginResult, ReconciledIdentity
from core.config import Settings
from core.errors import AuthRejected, Misconfigured, Unauthorized
from core.gateway import authenticate, list_users
from identity.store import IdentityStore

logger = logging.getLogger("reqresbridge.auth")

INVALID_CREDENTIALS = "Invalid credentials provided by the identity provider."

# Provider directory pages scanned, in order, when the email is not saved locally.
DIRECTORY_PAGES = (1, 2)


def login(email: str, password: str, store: IdentityStore, settings: Settings) -> LoginResult:
    """Authenticate through the identity provider and resolve the caller's identity.

    Raises:
        Misconfigured: REQRES_URL is empty.
        Unauthorized: the provider rejected the credentials or was unreachable.
    Any other exception (e.g. a malformed provider response) propagates as-is.
    """
    if not settings.reqres_url:
        raise Misconfigured("REQRES_URL is not configured.")

    try:
        auth = authenticate(
            email,
            password,
            settings.reqres_api_key,
            settings.reqres_url,
            timeout=settings.reqres_timeout,
        )
    except AuthRejected:
        raise Unauthorized(INVALID_CREDENTIALS) from None

    return LoginResult(token=auth.token, identity=resolve_identity(email, store, settings))


def resolve_identity(email: str, store: IdentityStore, settings: Settings) -> ReconciledIdentity:
    """Return the first identity any source yields for `email`, else a Fallback."""
    steps: list[tuple[str, Callable[[], Optional[ReconciledIdentity]]]] = [
        ("local store", partial(_find_local, store, email)),
    ]
    for page in DIRECTORY_PAGES:
        steps.append((f"provider page {page}", partial(_find_in_directory, email, page, settings)))

    for source, step in steps:
        try:
            match = step()
        except Exception:  # noqa: BLE001 -- a failing source degrades to the next one
            logger.warning("Identity lookup via %s failed for %s", source, email, exc_info=True)
            continue
        if match is not None:
            logger.info("Resolved %s via %s", email, source)
            return match

    logger.info("No identity found for %s -- using fallback", email)
    return Fallback(email=email)


def _find_local(store: IdentityStore, email: str) -> Optional[LocalMatch]:
    user = store.get_user_by_email(email)
    return LocalMatch(user=user) if user is not None else None


def _find_in_directory(email: str, page: int, settings: Settings) -> Optional[ExternalMatch]:
    for identity in list_users(page, settings.reqres_api_key, settings.reqres_url):
        if identity.email == email:
            return ExternalMatch(identity=identity)
    return None
