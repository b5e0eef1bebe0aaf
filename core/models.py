from dataclasses import dataclass
from typing import Any, Optional

# ---------------------------------------------------------------------------
# Domain constants
# ---------------------------------------------------------------------------

# Roles a local user can hold. A domain rule -- not an API contract.
ROLE_USER = "USER"
ROLE_ADMIN = "ADMIN"
ROLES = (ROLE_USER, ROLE_ADMIN)


@dataclass(frozen=True)
class AuthToken:
    token: str


@dataclass(frozen=True)
class ExternalIdentity:
    """A user record as the identity provider returns it (snake_case)."""

    id: int
    email: str
    first_name: str = ""
    last_name: str = ""
    avatar: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "ExternalIdentity":
        """Build from a provider `data` object.

        Raises ValueError when the payload carries no usable integer id.
        """
        raw_id = payload.get("id")
        if isinstance(raw_id, bool):
            raw_id = None
        try:
            user_id = int(raw_id)
        except (TypeError, ValueError):
            raise ValueError(f"Provider user payload has no usable id: {raw_id!r}") from None
        return cls(
            id=user_id,
            email=payload.get("email") or "",
            first_name=payload.get("first_name") or "",
            last_name=payload.get("last_name") or "",
            avatar=payload.get("avatar"),
        )
