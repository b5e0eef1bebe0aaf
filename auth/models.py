"""
auth/models.py -- Result types of the login reconciliation flow.

A login resolves to exactly one of three identity variants:

  LocalMatch    -- the email belongs to a locally saved user. The stored role
                   is the source of truth and is returned verbatim.
  ExternalMatch -- the email appears on page 1 or 2 of the identity provider's
                   user directory. There is no local role, so USER is assumed.
  Fallback      -- nothing matched. A placeholder identity is synthesized from
                   the email address.

display_identity() maps every variant onto the one snake_case shape the login
response carries. It raises TypeError for anything else, so adding a variant
without mapping it fails loudly instead of leaking a half-filled identity.

Layer rule: no imports from api/.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from core.models import ROLE_USER, ExternalIdentity
from identity.models import User

FALLBACK_AVATAR = "https://reqres.in/img/faces/1-image.jpg"


@dataclass(frozen=True)
class LocalMatch:
    user: User


@dataclass(frozen=True)
class ExternalMatch:
    identity: ExternalIdentity


@dataclass(frozen=True)
class Fallback:
    email: str


ReconciledIdentity = Union[LocalMatch, ExternalMatch, Fallback]


@dataclass(frozen=True)
class LoginIdentity:
    """The identity shown to the client after a successful login."""

    id: int
    email: str
    first_name: str
    last_name: str
    avatar: Optional[str]
    role: str


@dataclass(frozen=True)
class LoginResult:
    token: str
    identity: ReconciledIdentity

    @property
    def user(self) -> LoginIdentity:
        return display_identity(self.identity)


def display_identity(resolved: ReconciledIdentity) -> LoginIdentity:
    if isinstance(resolved, LocalMatch):
        u = resolved.user
        return LoginIdentity(
            id=u.id,
            email=u.email,
            first_name=u.first_name,
            last_name=u.last_name,
            avatar=u.avatar,
            role=u.role,
        )
    if isinstance(resolved, ExternalMatch):
        ext = resolved.identity
        return LoginIdentity(
            id=ext.id,
            email=ext.email,
            first_name=ext.first_name,
            last_name=ext.last_name,
            avatar=ext.avatar,
            role=ROLE_USER,
        )
    if isinstance(resolved, Fallback):
        return LoginIdentity(
            id=0,
            email=resolved.email,
            first_name=resolved.email.split("@", 1)[0],
            last_name="",
            avatar=FALLBACK_AVATAR,
            role=ROLE_USER,
        )
    raise TypeError(f"Unhandled identity variant: {type(resolved).__name__}")
