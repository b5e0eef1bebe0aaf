"""
identity/models.py -- Domain dataclasses for locally persisted users and posts.

Pure data containers. Business rules (admin-only deletion, self-demotion
guard, author existence checks) live in users/service.py and
posts/service.py; persistence lives in identity/store.py.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Generic, Optional, TypeVar

from core.models import ROLE_USER

T = TypeVar("T")


@dataclass
class User:
    """A user imported from the identity provider and kept locally.

    id is the provider's id, not a store-generated one: import preserves it
    so the local record and the provider record line up.
    """

    id: int
    email: str
    first_name: str
    last_name: str
    avatar: Optional[str] = None
    role: str = ROLE_USER  # "USER" | "ADMIN"
    created_at: str = ""  # ISO 8601, set by store on insert
    updated_at: str = ""


@dataclass
class Post:
    """A post authored by a local user.

    author is populated by store reads that join the users table; it is None
    on freshly constructed instances and on plain per-author listings.
    id is None before the record is written to the database.
    """

    title: str
    content: str
    author_user_id: int
    id: Optional[int] = None
    created_at: str = ""
    updated_at: str = ""
    author: Optional[User] = None


@dataclass
class UserWithPostCount:
    user: User
    post_count: int = 0


@dataclass
class SavedUser:
    """A local user together with every post they authored."""

    user: User
    posts: list[Post] = field(default_factory=list)


def page_offset(page: int, limit: int) -> int:
    """Rows to skip for a 1-based page of `limit` rows."""
    return (page - 1) * limit


@dataclass
class Page(Generic[T]):
    items: list[T]
    total: int
    page: int
    limit: int

    @property
    def last_page(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0
