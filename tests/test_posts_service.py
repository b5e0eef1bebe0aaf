"""Unit tests for posts/service.py -- post CRUD against a real in-memory store."""

from unittest.mock import MagicMock

import pytest

from core.errors import NotFound
from posts.service import create_post, get_post, list_posts, remove_post, update_post


class TestCreatePost:
    def test_creates_with_author(self, seeded_store):
        post = create_post(seeded_store, "Hello", "World, again.", 2)
        assert post.id is not None
        assert post.author_user_id == 2
        assert post.author.email == "janet.weaver@reqres.in"
        assert post.created_at

    def test_unknown_author_is_not_found_and_nothing_written(self):
        store = MagicMock()
        store.get_user.return_value = None
        with pytest.raises(NotFound, match="999"):
            create_post(store, "Title", "Some content", 999)
        store.create_post.assert_not_called()


class TestListPosts:
    def test_newest_first_with_meta(self, seeded_store):
        page = list_posts(seeded_store, page=1, limit=2)
        assert page.total == 3
        assert page.last_page == 2
        assert [p.title for p in page.items] == ["Janet two", "Janet one"]
        assert page.items[0].author.first_name == "Janet"

    def test_filter_by_author(self, seeded_store):
        page = list_posts(seeded_store, author_user_id=1)
        assert page.total == 1
        assert [p.author_user_id for p in page.items] == [1]

    def test_filter_by_author_without_posts(self, seeded_store):
        page = list_posts(seeded_store, author_user_id=55)
        assert page.items == []
        assert page.total == 0
        assert page.last_page == 0


class TestGetUpdateRemove:
    def test_get_includes_full_author(self, seeded_store):
        post = get_post(seeded_store, 1)
        assert post.title == "Admin notes"
        assert post.author.role == "ADMIN"

    def test_get_missing(self, seeded_store):
        with pytest.raises(NotFound):
            get_post(seeded_store, 404)

    def test_update_changes_only_supplied_fields(self, seeded_store):
        updated = update_post(seeded_store, 2, {"title": "Janet one (edited)"})
        assert updated.title == "Janet one (edited)"
        assert updated.content == "First post by Janet."

    def test_update_missing_writes_nothing(self):
        store = MagicMock()
        store.get_post.return_value = None
        with pytest.raises(NotFound):
            update_post(store, 9, {"title": "New title"})
        store.update_post.assert_not_called()

    def test_remove_returns_prior_state(self, seeded_store):
        removed = remove_post(seeded_store, 3)
        assert removed.title == "Janet two"
        assert seeded_store.get_post(3) is None
        assert seeded_store.count_posts() == 2

    def test_remove_missing(self, seeded_store):
        with pytest.raises(NotFound):
            remove_post(seeded_store, 77)
