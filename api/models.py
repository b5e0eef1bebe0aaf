"""
API request and response models for ReqRes Bridge REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in identity/models.py and
auth/models.py, which own the internal domain representation. Route handlers
map between the two via the from_* factory methods colocated below.

Wire conventions:
  - Every response body is an ApiResponse envelope {success, message, code, data}.
  - Users and posts use camelCase keys (firstName, authorUserId, createdAt).
    The Python attributes stay snake_case; _CamelModel supplies the aliases and
    FastAPI serializes by alias.
  - The login identity keeps the identity provider's snake_case keys
    (first_name, last_name) so clients see one shape whether the identity
    came from the local store or the provider.
"""

from enum import Enum
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from auth.models import LoginResult
from identity.models import Page, Post, SavedUser, User, UserWithPostCount
from identity.stats import Stats

T = TypeVar("T")

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"
URL_PATTERN = r"^https?://\S+$"


# ---------------------------------------------------------------------------
# Base classes
# ---------------------------------------------------------------------------


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class _CamelRequest(_CamelModel):
    # Unknown keys are rejected rather than silently dropped.
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="forbid",
    )


# ---------------------------------------------------------------------------
# Envelope
# ---------------------------------------------------------------------------


class ApiResponse(BaseModel, Generic[T]):
    """Uniform envelope for every response, successful or not."""

    success: bool
    message: str
    code: int
    data: Optional[T] = None

    @classmethod
    def ok(cls, data: T, code: int = 200, message: str = "Success") -> "ApiResponse[T]":
        return cls(success=True, message=message, code=code, data=data)

    @classmethod
    def error(cls, message: str = "Error", code: int = 500) -> "ApiResponse[T]":
        return cls(success=False, message=message, code=code)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class RoleEnum(str, Enum):
    USER = "USER"
    ADMIN = "ADMIN"


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


class LoginRequest(BaseModel):
    """Request body for POST /auth/login."""

    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    email: str = Field(pattern=EMAIL_PATTERN, max_length=255, examples=["eve.holt@reqres.in"])
    password: str = Field(min_length=4, max_length=255, examples=["cityslicka"])


class LoginUser(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    email: str
    first_name: str
    last_name: str
    avatar: Optional[str]
    role: RoleEnum


class LoginResponse(BaseModel):
    """data payload of POST /auth/login."""

    model_config = ConfigDict(frozen=True)

    token: str
    user: LoginUser

    @classmethod
    def from_result(cls, result: LoginResult) -> "LoginResponse":
        u = result.user
        return cls(
            token=result.token,
            user=LoginUser(
                id=u.id,
                email=u.email,
                first_name=u.first_name,
                last_name=u.last_name,
                avatar=u.avatar,
                role=u.role,
            ),
        )


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


class UserUpdate(_CamelRequest):
    """Request body for PATCH /users/saved/{id}. Every field is optional."""

    email: Optional[str] = Field(default=None, pattern=EMAIL_PATTERN, max_length=255)
    first_name: Optional[str] = Field(default=None, min_length=2, max_length=255)
    last_name: Optional[str] = Field(default=None, min_length=2, max_length=255)
    avatar: Optional[str] = Field(default=None, pattern=URL_PATTERN, max_length=2048)


class RoleUpdate(_CamelRequest):
    """Request body for PATCH /users/saved/{id}/role."""

    role: RoleEnum
    admin_id: int = Field(description="ID of the administrator requesting the change.")


class UserResponse(_CamelModel):
    id: int
    email: str
    first_name: str
    last_name: str
    avatar: Optional[str]
    role: RoleEnum
    created_at: str
    updated_at: str

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            avatar=user.avatar,
            role=user.role,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


class UserListRow(UserResponse):
    """One row in GET /users/saved: the user plus how many posts they wrote."""

    post_count: int

    @classmethod
    def from_row(cls, row: UserWithPostCount) -> "UserListRow":
        return cls(**UserResponse.from_user(row.user).model_dump(), post_count=row.post_count)


class PageMeta(_CamelModel):
    total: int
    page: int
    last_page: int
    limit: int

    @classmethod
    def from_page(cls, page: Page) -> "PageMeta":
        return cls(total=page.total, page=page.page, last_page=page.last_page, limit=page.limit)


class UserPage(_CamelModel):
    data: list[UserListRow]
    meta: PageMeta

    @classmethod
    def from_page(cls, page: Page[UserWithPostCount]) -> "UserPage":
        return cls(data=[UserListRow.from_row(r) for r in page.items], meta=PageMeta.from_page(page))


# ---------------------------------------------------------------------------
# Posts
# ---------------------------------------------------------------------------


class PostCreate(_CamelRequest):
    """Request body for POST /posts."""

    title: str = Field(min_length=3, max_length=255, examples=["My first post"])
    content: str = Field(min_length=5, examples=["This is the body of my post."])
    author_user_id: int = Field(description="ID of a locally saved user.")


class PostUpdate(_CamelRequest):
    """Request body for PUT /posts/{id}. Only supplied fields are changed."""

    title: Optional[str] = Field(default=None, min_length=3, max_length=255)
    content: Optional[str] = Field(default=None, min_length=5)


class AuthorSummary(_CamelModel):
    id: int
    email: str
    first_name: str
    last_name: str
    avatar: Optional[str]

    @classmethod
    def from_user(cls, user: User) -> "AuthorSummary":
        return cls(
            id=user.id,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            avatar=user.avatar,
        )


class PostResponse(_CamelModel):
    id: int
    title: str
    content: str
    author_user_id: int
    created_at: str
    updated_at: str

    @classmethod
    def from_post(cls, post: Post) -> "PostResponse":
        return cls(
            id=post.id,
            title=post.title,
            content=post.content,
            author_user_id=post.author_user_id,
            created_at=post.created_at,
            updated_at=post.updated_at,
        )


class PostWithAuthor(PostResponse):
    """A post with a short author summary (create and list)."""

    author: Optional[AuthorSummary] = None

    @classmethod
    def from_post(cls, post: Post) -> "PostWithAuthor":
        author = AuthorSummary.from_user(post.author) if post.author is not None else None
        return cls(**PostResponse.from_post(post).model_dump(), author=author)


class PostDetail(PostResponse):
    """A post with the full author record (GET /posts/{id})."""

    author: Optional[UserResponse] = None

    @classmethod
    def from_post(cls, post: Post) -> "PostDetail":
        author = UserResponse.from_user(post.author) if post.author is not None else None
        return cls(**PostResponse.from_post(post).model_dump(), author=author)


class PostPage(_CamelModel):
    data: list[PostWithAuthor]
    meta: PageMeta

    @classmethod
    def from_page(cls, page: Page[Post]) -> "PostPage":
        return cls(data=[PostWithAuthor.from_post(p) for p in page.items], meta=PageMeta.from_page(page))


class UserDetail(UserResponse):
    """GET /users/saved/{id}: the user and every post they wrote."""

    posts: list[PostResponse]

    @classmethod
    def from_saved(cls, saved: SavedUser) -> "UserDetail":
        return cls(
            **UserResponse.from_user(saved.user).model_dump(),
            posts=[PostResponse.from_post(p) for p in saved.posts],
        )


# ---------------------------------------------------------------------------
# Stats and health
# ---------------------------------------------------------------------------


class StatsResponse(_CamelModel):
    """data payload of GET /stats."""

    total_users: int
    total_posts: int
    latest_users: list[AuthorSummary]
    recent_posts: list[PostWithAuthor]

    @classmethod
    def from_stats(cls, stats: Stats) -> "StatsResponse":
        return cls(
            total_users=stats.total_users,
            total_posts=stats.total_posts,
            latest_users=[AuthorSummary.from_user(u) for u in stats.latest_users],
            recent_posts=[PostWithAuthor.from_post(p) for p in stats.recent_posts],
        )


class HealthResponse(BaseModel):
    """data payload of GET /health."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    version: str
    components: dict[str, str]
