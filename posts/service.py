"""
posts/service.py -- CRUD operations on posts.

A post can only be created for an author that exists locally; the check is an
explicit lookup before the insert, not a reliance on the foreign key.
update_post and remove_post go through get_post first so a missing post is
reported as NotFound before anything is written.
"""

from __future__ import annotations

from typing import Any, Optional

from core.errors import NotFound
from identity.models import Page, Post, page_offset
from identity.store import IdentityStore


def create_post(store: IdentityStore, title: str, content: str, author_user_id: int) -> Post:
    if store.get_user(author_user_id) is None:
        raise NotFound(f"User with ID {author_user_id} is not saved locally.")
    post_id = store.create_post(Post(title=title, content=content, author_user_id=author_user_id))
    return store.get_post(post_id)


def list_posts(
    store: IdentityStore,
    page: int = 1,
    limit: int = 10,
    author_user_id: Optional[int] = None,
) -> Page[Post]:
    items = store.list_posts(page_offset(page, limit), limit, author_user_id=author_user_id)
    total = store.count_posts(author_user_id=author_user_id)
    return Page(items=items, total=total, page=page, limit=limit)


def get_post(store: IdentityStore, post_id: int) -> Post:
    post = store.get_post(post_id)
    if post is None:
        raise NotFound(f"Post with ID {post_id} not found.")
    return post


def update_post(store: IdentityStore, post_id: int, fields: dict[str, Any]) -> Post:
    get_post(store, post_id)
    return store.update_post(post_id, **fields)


def remove_post(store: IdentityStore, post_id: int) -> Post:
    """Delete a post and return it as it was before deletion."""
    post = get_post(store, post_id)
    store.delete_post(post_id)
    return post
