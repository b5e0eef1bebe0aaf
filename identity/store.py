"""
identity/store.py -- SQLAlchemy Core persistence layer for users and posts.

Uses SQLAlchemy Core (not ORM) so the dataclasses in identity/models.py remain
the authoritative domain representation. Swapping SQLite for PostgreSQL is a
connection string change (DATABASE_URL), not a rewrite.

Pattern: Repository + Data Mapper. IdentityStore is the repository (one clean
interface per entity). The _row_to_* functions are the mappers. Services and
route handlers never touch SQL directly.

Each public method is a single self-contained unit of work. Check-then-act
sequences (existence check then write) are composed by the services and are
not atomic.

Security: all queries use bound parameters. No f-strings in SQL.

Usage:
    store = IdentityStore()                                # SQLite default
    store = IdentityStore("postgresql://user:pw@host/db")  # PostgreSQL
    store.create_user(User(id=2, email="janet.weaver@reqres.in", first_name="Janet", last_name="Weaver"))
    post_id = store.create_post(Post(title="Hello", content="First post", author_user_id=2))
    store.close()
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import (
    Column,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    create_engine,
    event,
    func,
    select,
    text,
)
from sqlalchemy.engine import Engine

from core.config import DEFAULT_DATABASE_URL
from identity.models import Post, User, UserWithPostCount


# Columns a caller may change through update_user / update_post. Anything else
# (id, created_at, author_user_id) is fixed at insert time.
_USER_MUTABLE = {"email", "first_name", "last_name", "avatar", "role"}
_POST_MUTABLE = {"title", "content"}

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

metadata = MetaData()

_users = Table(
    "users",
    metadata,
    # Not autoincrement: import writes the identity provider's id verbatim.
    Column("id", Integer, primary_key=True, autoincrement=False),
    Column("email", String(255), nullable=False, unique=True),
    Column("first_name", String(255), nullable=False),
    Column("last_name", String(255), nullable=False),
    Column("avatar", Text),
    Column("role", String(10), nullable=False, server_default="USER"),
    Column("created_at", String(32), nullable=False),
    Column("updated_at", String(32), nullable=False),
)

_posts = Table(
    "posts",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("title", String(255), nullable=False),
    Column("content", Text, nullable=False),
    Column("author_user_id", Integer, ForeignKey("users.id"), nullable=False, index=True),
    Column("created_at", String(32), nullable=False),
    Column("updated_at", String(32), nullable=False),
)

# Author columns labelled so they do not collide with posts.id / created_at
# when the two tables are selected together.
_AUTHOR_COLUMNS = (
    _users.c.id.label("author_id"),
    _users.c.email.label("author_email"),
    _users.c.first_name.label("author_first_name"),
    _users.c.last_name.label("author_last_name"),
    _users.c.avatar.label("author_avatar"),
    _users.c.role.label("author_role"),
    _users.c.created_at.label("author_created_at"),
    _users.c.updated_at.label("author_updated_at"),
)


# ---------------------------------------------------------------------------
# SQLite pragmas
# ---------------------------------------------------------------------------


def _set_sqlite_pragmas(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode and foreign key enforcement.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")
    dbapi_conn.execute("PRAGMA foreign_keys=ON")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _newest_first(table: Table):
    # id breaks ties between rows created within the same timestamp tick.
    return (table.c.created_at.desc(), table.c.id.desc())


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class IdentityStore:
    """Repository for User and Post entities."""

    def __init__(self, db_url: str = DEFAULT_DATABASE_URL) -> None:
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_sqlite_pragmas)
        metadata.create_all(self.engine)

    def ping(self) -> bool:
        """Return True if the database answers a trivial query."""
        with self.engine.connect() as conn:
            return conn.execute(text("SELECT 1")).scalar() == 1

    # ------------------------------------------------------------------
    # User queries
    # ------------------------------------------------------------------

    def get_user(self, user_id: int) -> User | None:
        """Look up a user by primary key. Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.id == user_id)).fetchone()
        return _row_to_user(row) if row is not None else None

    def get_user_by_email(self, email: str) -> User | None:
        """Look up a user by exact email (case-sensitive). Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.email == email)).fetchone()
        return _row_to_user(row) if row is not None else None

    def create_user(self, user: User) -> User:
        """Insert a new user with the id it carries and return the stored record.

        Raises sqlalchemy.exc.IntegrityError if the id or email already exists.
        """
        now = _now_iso()
        with self.engine.connect() as conn:
            conn.execute(
                _users.insert().values(
                    id=user.id,
                    email=user.email,
                    first_name=user.first_name,
                    last_name=user.last_name,
                    avatar=user.avatar,
                    role=user.role,
                    created_at=now,
                    updated_at=now,
                )
            )
            conn.commit()
        return self.get_user(user.id)

    def list_users(self, skip: int, take: int) -> list[UserWithPostCount]:
        """Return one slice of users, newest first, each with its post count.

        The count is a correlated subquery so the page costs one round trip
        regardless of page size.
        """
        post_count = (
            select(func.count(_posts.c.id))
            .where(_posts.c.author_user_id == _users.c.id)
            .scalar_subquery()
            .label("post_count")
        )
        stmt = select(_users, post_count).order_by(*_newest_first(_users)).offset(skip).limit(take)
        with self.engine.connect() as conn:
            rows = conn.execute(stmt).fetchall()
        return [UserWithPostCount(user=_row_to_user(r), post_count=r.post_count or 0) for r in rows]

    def count_users(self) -> int:
        with self.engine.connect() as conn:
            result = conn.execute(select(func.count()).select_from(_users)).scalar()
        return result or 0

    def latest_users(self, limit: int) -> list[User]:
        """Return the `limit` most recently created users."""
        with self.engine.connect() as conn:
            rows = conn.execute(_users.select().order_by(*_newest_first(_users)).limit(limit)).fetchall()
        return [_row_to_user(r) for r in rows]

    def update_user(self, user_id: int, **fields) -> User | None:
        """Update mutable fields on an existing user and return the fresh record.

        Accepted fields: email, first_name, last_name, avatar, role. Unknown
        keys raise ValueError rather than being silently ignored.
        Returns None if user_id was not found.
        """
        unknown = set(fields) - _USER_MUTABLE
        if unknown:
            raise ValueError(f"Unknown user fields: {unknown!r}")
        with self.engine.connect() as conn:
            conn.execute(_users.update().where(_users.c.id == user_id).values(updated_at=_now_iso(), **fields))
            conn.commit()
        return self.get_user(user_id)

    def delete_user(self, user_id: int) -> bool:
        """Permanently delete a user record. Returns True if deleted, False if not found.

        Callers must delete the user's posts first; with foreign keys enforced
        the delete fails while posts still reference the user.
        """
        with self.engine.connect() as conn:
            result = conn.execute(_users.delete().where(_users.c.id == user_id))
            conn.commit()
        return result.rowcount > 0

    # ------------------------------------------------------------------
    # Post queries
    # ------------------------------------------------------------------

    def create_post(self, post: Post) -> int:
        """Insert a new post and return its assigned database ID."""
        now = _now_iso()
        with self.engine.connect() as conn:
            result = conn.execute(
                _posts.insert().values(
                    title=post.title,
                    content=post.content,
                    author_user_id=post.author_user_id,
                    created_at=now,
                    updated_at=now,
                )
            )
            conn.commit()
            return result.inserted_primary_key[0]

    def get_post(self, post_id: int) -> Post | None:
        """Look up a post by primary key, with its author attached."""
        stmt = (
            select(_posts, *_AUTHOR_COLUMNS)
            .select_from(_posts.outerjoin(_users, _posts.c.author_user_id == _users.c.id))
            .where(_posts.c.id == post_id)
        )
        with self.engine.connect() as conn:
            row = conn.execute(stmt).fetchone()
        return _row_to_post(row, with_author=True) if row is not None else None

    def list_posts(self, skip: int, take: int, author_user_id: Optional[int] = None) -> list[Post]:
        """Return one slice of posts, newest first, each with its author attached."""
        stmt = select(_posts, *_AUTHOR_COLUMNS).select_from(
            _posts.outerjoin(_users, _posts.c.author_user_id == _users.c.id)
        )
        if author_user_id is not None:
            stmt = stmt.where(_posts.c.author_user_id == author_user_id)
        stmt = stmt.order_by(*_newest_first(_posts)).offset(skip).limit(take)
        with self.engine.connect() as conn:
            rows = conn.execute(stmt).fetchall()
        return [_row_to_post(r, with_author=True) for r in rows]

    def count_posts(self, author_user_id: Optional[int] = None) -> int:
        stmt = select(func.count()).select_from(_posts)
        if author_user_id is not None:
            stmt = stmt.where(_posts.c.author_user_id == author_user_id)
        with self.engine.connect() as conn:
            result = conn.execute(stmt).scalar()
        return result or 0

    def get_posts_by_author(self, author_user_id: int) -> list[Post]:
        """Return every post written by one user, oldest first. No author join."""
        with self.engine.connect() as conn:
            rows = conn.execute(
                _posts.select().where(_posts.c.author_user_id == author_user_id).order_by(_posts.c.id)
            ).fetchall()
        return [_row_to_post(r) for r in rows]

    def recent_posts(self, limit: int) -> list[Post]:
        """Return the `limit` most recently created posts with their authors."""
        return self.list_posts(0, limit)

    def update_post(self, post_id: int, **fields) -> Post | None:
        """Update title and/or content. Returns the fresh record, or None if not found."""
        unknown = set(fields) - _POST_MUTABLE
        if unknown:
            raise ValueError(f"Unknown post fields: {unknown!r}")
        with self.engine.connect() as conn:
            conn.execute(_posts.update().where(_posts.c.id == post_id).values(updated_at=_now_iso(), **fields))
            conn.commit()
        return self.get_post(post_id)

    def delete_post(self, post_id: int) -> bool:
        with self.engine.connect() as conn:
            result = conn.execute(_posts.delete().where(_posts.c.id == post_id))
            conn.commit()
        return result.rowcount > 0

    def delete_posts_by_author(self, author_user_id: int) -> int:
        """Delete every post written by one user. Returns the number removed."""
        with self.engine.connect() as conn:
            result = conn.execute(_posts.delete().where(_posts.c.author_user_id == author_user_id))
            conn.commit()
        return result.rowcount

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mappers (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_user(row) -> User:
    return User(
        id=row.id,
        email=row.email,
        first_name=row.first_name,
        last_name=row.last_name,
        avatar=row.avatar,
        role=row.role,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _row_to_author(row) -> User | None:
    # Outer join: author columns are NULL if the user row is gone.
    if row.author_id is None:
        return None
    return User(
        id=row.author_id,
        email=row.author_email,
        first_name=row.author_first_name,
        last_name=row.author_last_name,
        avatar=row.author_avatar,
        role=row.author_role,
        created_at=row.author_created_at,
        updated_at=row.author_updated_at,
    )


def _row_to_post(row, with_author: bool = False) -> Post:
    return Post(
        id=row.id,
        title=row.title,
        content=row.content,
        author_user_id=row.author_user_id,
        created_at=row.created_at,
        updated_at=row.updated_at,
        author=_row_to_author(row) if with_author else None,
    )
