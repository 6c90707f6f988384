# ABOUTME: Tests for storage.py SQLite record persistence.
# ABOUTME: Covers the existence query, soft deletes, and slugs generated through save hooks.

from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import pytest

from sluggable.exceptions import InvalidOption, StorageError
from sluggable.lifecycle import SlugLifecycle
from sluggable.models import Model
from sluggable.options import SlugOptions
from sluggable.storage import SqliteRecordStore


class Article(Model):
    table = "articles"
    soft_deletes = True

    def get_slug_options(self) -> SlugOptions:
        return SlugOptions.create().generate_slugs_from("title").save_slugs_to("slug")


class Page(Model):
    table = "pages"

    def get_slug_options(self) -> SlugOptions:
        return SlugOptions.create().generate_slugs_from("title").save_slugs_to("slug")


class BrokenPage(Page):
    def get_slug_options(self) -> SlugOptions:
        return SlugOptions.create().generate_slugs_from("title")


@pytest.fixture
def store(sqlite_store: SqliteRecordStore) -> SqliteRecordStore:
    """SQLite store with the slug lifecycle attached."""
    SlugLifecycle.for_store(sqlite_store).attach(sqlite_store)
    return sqlite_store


class TestEnsureTable:
    """Tests for SqliteRecordStore.ensure_table."""

    def test_creates_database_file(self, temp_db: Path) -> None:
        """The database file and parent directory are created."""
        with SqliteRecordStore(temp_db) as store:
            store.ensure_table("notes", ["title"])

        assert temp_db.exists()

    def test_idempotent(self, sqlite_store: SqliteRecordStore) -> None:
        """Ensuring an existing table is a no-op."""
        sqlite_store.ensure_table("pages", ["title", "slug"])

    def test_invalid_identifier_rejected(self, sqlite_store: SqliteRecordStore) -> None:
        """Table names that are not plain identifiers raise StorageError."""
        with pytest.raises(StorageError):
            sqlite_store.ensure_table("pages; DROP TABLE pages", ["title"])


class TestExistsOtherWithFieldValue:
    """Tests for SqliteRecordStore.exists_other_with_field_value."""

    def test_empty_table(self, sqlite_store: SqliteRecordStore) -> None:
        """Nothing matches in an empty table."""
        assert sqlite_store.exists_other_with_field_value("pages", "slug", "home", 0, False) is False

    def test_matching_row(self, sqlite_store: SqliteRecordStore) -> None:
        """A row with the value matches."""
        page = Page(title="Home", slug="home")
        sqlite_store.save(page)

        assert sqlite_store.exists_other_with_field_value("pages", "slug", "home", 0, False) is True

    def test_excludes_given_key(self, sqlite_store: SqliteRecordStore) -> None:
        """The row with the excluded key never matches."""
        page = Page(title="Home", slug="home")
        sqlite_store.save(page)

        assert sqlite_store.exists_other_with_field_value("pages", "slug", "home", page.get_primary_key(), False) is False

    def test_trashed_rows(self, sqlite_store: SqliteRecordStore) -> None:
        """Trashed rows only match when include_trashed is set."""
        article = Article(title="Hello", slug="hello")
        sqlite_store.save(article)
        sqlite_store.delete(article)

        assert sqlite_store.exists_other_with_field_value("articles", "slug", "hello", 0, False) is False
        assert sqlite_store.exists_other_with_field_value("articles", "slug", "hello", 0, True) is True

    def test_missing_table_raises(self, sqlite_store: SqliteRecordStore) -> None:
        """Query failures surface as StorageError."""
        with pytest.raises(StorageError):
            sqlite_store.exists_other_with_field_value("missing", "slug", "x", 0, False)


class TestSaveAndFind:
    """Tests for SqliteRecordStore.save, find and delete."""

    def test_insert_assigns_key(self, sqlite_store: SqliteRecordStore) -> None:
        """Inserting sets the primary key and snapshots originals."""
        page = Page(title="Home")
        sqlite_store.save(page)

        assert page.get_primary_key() is not None
        assert page.exists is True
        assert page.dirty_fields() == {}

    def test_find_round_trip(self, sqlite_store: SqliteRecordStore) -> None:
        """A saved record can be loaded back."""
        page = Page(title="Home", slug="home")
        sqlite_store.save(page)

        loaded = sqlite_store.find(Page, page.get_primary_key())

        assert loaded is not None
        assert loaded.get_field("title") == "Home"
        assert loaded.get_original_field("slug") == "home"

    def test_update_changed_fields(self, sqlite_store: SqliteRecordStore) -> None:
        """Updates persist changed fields."""
        page = Page(title="Home", slug="home")
        sqlite_store.save(page)
        page.set_field("title", "Start")
        sqlite_store.save(page)

        loaded = sqlite_store.find(Page, page.get_primary_key())

        assert loaded is not None
        assert loaded.get_field("title") == "Start"

    def test_soft_deleted_hidden_from_find(self, sqlite_store: SqliteRecordStore) -> None:
        """Trashed records are only found with with_trashed."""
        article = Article(title="Hello")
        sqlite_store.save(article)
        sqlite_store.delete(article)

        assert article.trashed is True
        assert sqlite_store.find(Article, article.get_primary_key()) is None
        assert sqlite_store.find(Article, article.get_primary_key(), with_trashed=True) is not None

    def test_hard_delete_removes_row(self, sqlite_store: SqliteRecordStore) -> None:
        """Records without soft deletes are removed."""
        page = Page(title="Home")
        sqlite_store.save(page)
        key = page.get_primary_key()
        sqlite_store.delete(page)

        assert sqlite_store.find(Page, key) is None
        assert page.exists is False

    def test_unique_index_backstop(self, sqlite_store: SqliteRecordStore) -> None:
        """A unique index rejects duplicates that slip past the existence check."""
        sqlite_store.ensure_table("posts", ["slug"], unique=["slug"])

        class Post(Page):
            table = "posts"

        sqlite_store.save(Post(slug="dup"))
        duplicate = Post(slug="dup")

        with pytest.raises(StorageError):
            sqlite_store.save(duplicate)

        assert duplicate.exists is False


class TestSlugsThroughSave:
    """Slug generation driven by the store's create/update notifications."""

    def test_create_generates_slug(self, store: SqliteRecordStore) -> None:
        """Saving a new record fills its slug."""
        article = Article(title="Hello World")
        store.save(article)

        loaded = store.find(Article, article.get_primary_key())

        assert loaded is not None
        assert loaded.get_field("slug") == "hello-world"

    def test_siblings_get_suffixes(self, store: SqliteRecordStore) -> None:
        """Records with the same title get -1, -2 suffixes."""
        articles = [Article(title="Hello World") for _ in range(3)]
        for article in articles:
            store.save(article)

        assert [a.get_field("slug") for a in articles] == ["hello-world", "hello-world-1", "hello-world-2"]

    def test_update_does_not_collide_with_itself(self, store: SqliteRecordStore) -> None:
        """Re-deriving the same slug on update keeps it unsuffixed."""
        article = Article(title="Hello World")
        store.save(article)
        article.set_field("body", "Some text")
        store.save(article)

        assert article.get_field("slug") == "hello-world"

    def test_update_rederives_from_changed_title(self, store: SqliteRecordStore) -> None:
        """An untouched slug follows the title on update."""
        article = Article(title="Hello World")
        store.save(article)
        article.set_field("title", "Goodbye World")
        store.save(article)

        assert article.get_field("slug") == "goodbye-world"

    def test_edited_slug_kept_on_update(self, store: SqliteRecordStore) -> None:
        """A slug edited before the update is saved verbatim."""
        article = Article(title="Hello World")
        store.save(article)
        article.set_field("title", "Goodbye World")
        article.set_field("slug", "Custom_Value")
        store.save(article)

        loaded = store.find(Article, article.get_primary_key())

        assert loaded is not None
        assert loaded.get_field("slug") == "Custom_Value"

    def test_manual_slug_overwritten_by_later_update(self, store: SqliteRecordStore) -> None:
        """Once saved, a manual slug is no longer custom and gets re-derived."""
        article = Article(title="Hello World", slug="my-handpicked-slug")
        store.save(article)
        assert article.get_field("slug") == "my-handpicked-slug"

        article.set_field("title", "Hello Again")
        store.save(article)

        assert article.get_field("slug") == "hello-again"

    def test_trashed_record_still_holds_slug(self, store: SqliteRecordStore) -> None:
        """A soft-deleted sibling keeps its slug taken."""
        first = Article(title="Hello World")
        store.save(first)
        store.delete(first)

        second = Article(title="Hello World")
        store.save(second)

        assert second.get_field("slug") == "hello-world-1"

    def test_hard_deleted_record_frees_slug(self, store: SqliteRecordStore) -> None:
        """A removed row no longer blocks its slug."""
        first = Page(title="Home")
        store.save(first)
        store.delete(first)

        second = Page(title="Home")
        store.save(second)

        assert second.get_field("slug") == "home"

    def test_record_types_do_not_collide(self, store: SqliteRecordStore) -> None:
        """Uniqueness is scoped to one record type."""
        article = Article(title="Home")
        page = Page(title="Home")
        store.save(article)
        store.save(page)

        assert article.get_field("slug") == "home"
        assert page.get_field("slug") == "home"

    def test_invalid_options_roll_back(self, store: SqliteRecordStore) -> None:
        """A failing hook aborts the insert."""
        page = BrokenPage(title="Home")

        with pytest.raises(InvalidOption):
            store.save(page)

        assert page.exists is False
        assert store.exists_other_with_field_value("pages", "title", "Home", 0, False) is False

    def test_preset_id_does_not_hide_collision(self, store: SqliteRecordStore) -> None:
        """An id chosen by the caller keeps it and still gets a unique slug."""
        first = Page(title="Home")
        store.save(first)

        second = Page(id=50, title="Home")
        store.save(second)

        assert second.get_primary_key() == 50
        assert second.get_field("slug") == "home-1"

    def test_preset_id_conflict_raises(self, store: SqliteRecordStore) -> None:
        """Reusing an existing key for a new record fails instead of duplicating the slug."""
        first = Page(title="Home")
        store.save(first)

        duplicate = Page(id=first.get_primary_key(), title="Home")

        with pytest.raises(StorageError):
            store.save(duplicate)

        assert duplicate.exists is False
        loaded = store.find(Page, first.get_primary_key())
        assert loaded is not None
        assert loaded.get_field("slug") == "home"


class TestConcurrentStores:
    """Several stores writing to one database file."""

    def test_same_title_from_threads_gets_distinct_slugs(
        self, sqlite_store: SqliteRecordStore, temp_db: Path
    ) -> None:
        """Immediate transactions serialize the slug check with the insert across connections."""
        stores = [SqliteRecordStore(temp_db) for _ in range(4)]
        for other in stores:
            SlugLifecycle.for_store(other).attach(other)
        articles = [Article(title="Hello World") for _ in range(20)]

        try:
            with ThreadPoolExecutor(max_workers=4) as executor:
                futures = [
                    executor.submit(stores[index % len(stores)].save, article)
                    for index, article in enumerate(articles)
                ]
                for future in futures:
                    future.result()
        finally:
            for other in stores:
                other.close()

        slugs = [article.get_field("slug") for article in articles]
        assert len(set(slugs)) == len(articles)
        assert "hello-world" in slugs
        for article in articles:
            loaded = sqlite_store.find(Article, article.get_primary_key())
            assert loaded is not None
            assert loaded.get_field("slug") == article.get_field("slug")
