"""
users/service.py -- Import and CRUD operations on locally saved users.

Plain functions with explicit dependencies (store, settings), called by
api/routes/users.py and main.py. Each raises a core.errors.ServiceError
subclass on a rule violation; the HTTP layer renders it.

Authorization rules:
  - Deleting a user requires the acting user (admin_id) to be an ADMIN.
  - An admin may not demote themself to USER.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.exc import IntegrityError

from core.config import Settings
from core.errors import BadUpstreamPayload, Conflict, Forbidden, NotFound, UpstreamError, UpstreamUnavailable
from core.gateway import get_user_by_id
from core.models import ROLE_ADMIN, ROLE_USER
from identity.models import Page, SavedUser, User, UserWithPostCount, page_offset
from identity.store import IdentityStore

logger = logging.getLogger("reqresbridge.users")

# The provider's user 1 becomes the local administrator on import. Fixed
# policy: the provider payload's own fields never decide the role.
ADMIN_EXTERNAL_ID = 1


def import_user(store: IdentityStore, settings: Settings, user_id: int) -> User:
    """Copy provider user `user_id` into the local store."""
    if store.get_user(user_id) is not None:
        raise Conflict(f"User {user_id} is already saved locally.")

    try:
        external = get_user_by_id(user_id, settings.reqres_api_key, settings.reqres_url)
    except UpstreamError:
        raise UpstreamUnavailable("Error communicating with the identity provider.") from None

    # The local row is keyed by the requested id; a payload describing
    # another user is as unusable as an empty one.
    if external is None or not external.email or external.id != user_id:
        raise BadUpstreamPayload("The identity provider response does not contain the expected user data.")

    try:
        saved = store.create_user(
            User(
                id=external.id,
                email=external.email,
                first_name=external.first_name,
                last_name=external.last_name,
                avatar=external.avatar,
                role=ROLE_ADMIN if external.id == ADMIN_EXTERNAL_ID else ROLE_USER,
            )
        )
    except IntegrityError:
        # Lost a race with a concurrent import, or the email is already held.
        raise Conflict(f"User {user_id} or email {external.email} is already saved locally.") from None
    logger.info("Imported user %s (%s) as %s", saved.id, saved.email, saved.role)
    return saved


def list_saved_users(store: IdentityStore, page: int = 1, limit: int = 10) -> Page[UserWithPostCount]:
    items = store.list_users(page_offset(page, limit), limit)
    total = store.count_users()
    return Page(items=items, total=total, page=page, limit=limit)


def get_saved_user(store: IdentityStore, user_id: int) -> SavedUser:
    user = store.get_user(user_id)
    if user is None:
        raise NotFound(f"Locally saved user with ID {user_id} not found.")
    return SavedUser(user=user, posts=store.get_posts_by_author(user_id))


def delete_saved_user(store: IdentityStore, user_id: int, admin_id: int) -> User:
    """Delete a user and every post they wrote. Returns the deleted user.

    Posts are removed before the user so no post ever references a missing
    author. The two deletes are separate store calls, not one transaction.
    """
    admin = store.get_user(admin_id)
    if admin is None or admin.role != ROLE_ADMIN:
        raise Forbidden("Insufficient permissions to delete users. Only administrators can perform this action.")

    user = store.get_user(user_id)
    if user is None:
        raise NotFound(f"Locally saved user with ID {user_id} not found.")

    removed = store.delete_posts_by_author(user_id)
    store.delete_user(user_id)
    logger.info("Admin %s deleted user %s and %d post(s)", admin_id, user_id, removed)
    return user


def update_saved_user(store: IdentityStore, user_id: int, fields: dict[str, Any]) -> User:
    """Apply only the supplied fields (email, first_name, last_name, avatar)."""
    user = store.get_user(user_id)
    if user is None:
        raise NotFound(f"User with ID {user_id} not found.")

    email = fields.get("email")
    if email and email != user.email and store.get_user_by_email(email) is not None:
        raise Conflict(f"Email {email} is already in use by another user.")

    return store.update_user(user_id, **fields)


def update_user_role(store: IdentityStore, user_id: int, role: str, admin_id: int) -> User:
    # Self-demotion is refused before touching the store.
    if user_id == admin_id and role == ROLE_USER:
        raise Forbidden("You cannot remove your own administrator role. Ask another administrator.")

    if store.get_user(user_id) is None:
        raise NotFound(f"User with ID {user_id} not found.")

    return store.update_user(user_id, role=role)
