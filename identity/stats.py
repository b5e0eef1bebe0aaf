"""
identity/stats.py -- Aggregated counts and "latest" lists for the stats endpoint.

The four reads are independent, so they run concurrently: each blocking store
call is pushed to a worker thread with asyncio.to_thread and the results are
joined with asyncio.gather. No ordering between them is implied. If any read
raises, gather propagates the first error and the whole call fails.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field

from identity.models import Post, User
from identity.store import IdentityStore

LATEST_LIMIT = 3


@dataclass
class Stats:
    total_users: int
    total_posts: int
    latest_users: list[User] = field(default_factory=list)
    recent_posts: list[Post] = field(default_factory=list)


async def gather_stats(store: IdentityStore, limit: int = LATEST_LIMIT) -> Stats:
    total_users, total_posts, latest_users, recent_posts = await asyncio.gather(
        asyncio.to_thread(store.count_users),
        asyncio.to_thread(store.count_posts),
        asyncio.to_thread(store.latest_users, limit),
        asyncio.to_thread(store.recent_posts, limit),
    )
    return Stats(
        total_users=total_users,
        total_posts=total_posts,
        latest_users=latest_users,
        recent_posts=recent_posts,
    )
