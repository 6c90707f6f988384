"""Contains configurations for the test run."""

from collections.abc import Iterator
from pathlib import Path
from typing import Any

import pytest

from sluggable.storage import SqliteRecordStore


class FakeStore:
    """In-memory SlugStore that records every existence query."""

    def __init__(self, taken: set[str] | None = None) -> None:
        self.taken = set(taken or ())
        self.calls: list[tuple[str, str, str, Any, bool]] = []

    def exists_other_with_field_value(
        self,
        record_type: str,
        field_name: str,
        value: str,
        exclude_key: Any,
        include_trashed: bool,
    ) -> bool:
        self.calls.append((record_type, field_name, value, exclude_key, include_trashed))
        return value in self.taken


@pytest.fixture
def fake_store() -> FakeStore:
    """Empty in-memory store."""
    return FakeStore()


@pytest.fixture
def temp_db(tmp_path: Path) -> Path:
    """Create a temporary database path."""
    return tmp_path / "db" / "test_records.sqlite"


@pytest.fixture
def sqlite_store(temp_db: Path) -> Iterator[SqliteRecordStore]:
    """SQLite store with articles (soft deletes) and pages (hard deletes) tables."""
    store = SqliteRecordStore(temp_db)
    store.ensure_table("articles", ["title", "body", "slug"], soft_deletes=True)
    store.ensure_table("pages", ["title", "slug"])
    yield store
    store.close()
