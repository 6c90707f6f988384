# ABOUTME: SQLite persistence for records, with create/update notifications and soft deletes.
# ABOUTME: Answers the slug existence query and serializes slug checks with writes.

import logging
import re
import sqlite3
import threading
from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, TypeVar

from sluggable.exceptions import StorageError
from sluggable.models import PRIMARY_KEY, Model
from sluggable.settings import settings

logger = logging.getLogger(__name__)

SOFT_DELETE_COLUMN = "deleted_at"

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

ModelT = TypeVar("ModelT", bound=Model)
RecordListener = Callable[[Model], None]


def _quote(identifier: str) -> str:
    """Validate a table/column name and quote it for interpolation into SQL."""
    if not _IDENTIFIER.match(identifier):
        raise StorageError(f"Invalid SQL identifier: {identifier!r}")
    return f'"{identifier}"'


class SqliteRecordStore:
    """Store records in a SQLite database file.

    Listeners registered with `on_creating` / `on_updating` run inside the same
    ``BEGIN IMMEDIATE`` transaction as the write, so a slug existence check made
    by a listener cannot be invalidated by another writer before the commit.

    Args:
        db_path: Path to the database file. Defaults to settings.db_path.
    """

    def __init__(self, db_path: Path | None = None) -> None:
        if db_path is None:
            db_path = settings.db_path

        db_path.parent.mkdir(parents=True, exist_ok=True)
        self.db_path = db_path
        self._lock = threading.RLock()
        self._creating: list[RecordListener] = []
        self._updating: list[RecordListener] = []
        try:
            self._conn = sqlite3.connect(str(db_path), isolation_level=None, check_same_thread=False)
        except sqlite3.Error as exc:
            raise StorageError(f"Failed to open SQLite database: {db_path}") from exc
        self._conn.row_factory = sqlite3.Row

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    def __enter__(self) -> "SqliteRecordStore":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # -----------------------------------------------------------------------
    # Schema
    # -----------------------------------------------------------------------

    def ensure_table(
        self,
        record_type: str,
        columns: Sequence[str],
        *,
        soft_deletes: bool = False,
        unique: Sequence[str] = (),
    ) -> None:
        """Create the table for `record_type` if it doesn't exist.

        Args:
            record_type: Table name.
            columns: Data columns, stored as TEXT.
            soft_deletes: Add a deleted_at column for soft deletion.
            unique: Columns that get a unique index.
        """
        column_defs = [f"{_quote(PRIMARY_KEY)} INTEGER PRIMARY KEY AUTOINCREMENT"]
        column_defs += [f"{_quote(column)} TEXT" for column in columns]
        if soft_deletes:
            column_defs.append(f"{_quote(SOFT_DELETE_COLUMN)} TEXT")

        with self._transaction() as conn:
            conn.execute(f"CREATE TABLE IF NOT EXISTS {_quote(record_type)} ({', '.join(column_defs)})")
            for column in unique:
                index_name = _quote(f"{record_type}_{column}_unique")
                conn.execute(
                    f"CREATE UNIQUE INDEX IF NOT EXISTS {index_name} ON {_quote(record_type)} ({_quote(column)})"
                )
        logger.debug("Ensured table %s with columns %s", record_type, list(columns))

    def _has_column(self, record_type: str, column: str) -> bool:
        rows = self._query(f"PRAGMA table_info({_quote(record_type)})")
        return any(row["name"] == column for row in rows)

    # -----------------------------------------------------------------------
    # Lifecycle notifications
    # -----------------------------------------------------------------------

    def on_creating(self, callback: RecordListener) -> None:
        """Call `callback(record)` before a new record is inserted."""
        self._creating.append(callback)

    def on_updating(self, callback: RecordListener) -> None:
        """Call `callback(record)` before an existing record is updated."""
        self._updating.append(callback)

    # -----------------------------------------------------------------------
    # Queries
    # -----------------------------------------------------------------------

    def exists_other_with_field_value(
        self,
        record_type: str,
        field_name: str,
        value: str,
        exclude_key: Any,
        include_trashed: bool,
    ) -> bool:
        """Check whether a row other than `exclude_key` has `field_name == value`.

        Args:
            record_type: Table to search.
            field_name: Column to match.
            value: Value to look for.
            exclude_key: Primary key of the row to ignore.
            include_trashed: Also match soft-deleted rows.

        Returns:
            True if at least one other row matches.
        """
        query = (
            f"SELECT 1 FROM {_quote(record_type)} "  # noqa: S608
            f"WHERE {_quote(field_name)} = ? AND {_quote(PRIMARY_KEY)} != ?"
        )
        if not include_trashed and self._has_column(record_type, SOFT_DELETE_COLUMN):
            query += f" AND {_quote(SOFT_DELETE_COLUMN)} IS NULL"
        query += " LIMIT 1"

        rows = self._query(query, [value, exclude_key])
        return bool(rows)

    def find(self, model_cls: type[ModelT], key: Any, *, with_trashed: bool = False) -> ModelT | None:
        """Load a record by primary key.

        Args:
            model_cls: Model class to instantiate.
            key: Primary key value.
            with_trashed: Also return soft-deleted records.

        Returns:
            The loaded record, or None if not found.
        """
        record_type = model_cls.record_type()
        query = f"SELECT * FROM {_quote(record_type)} WHERE {_quote(PRIMARY_KEY)} = ?"  # noqa: S608
        if model_cls.soft_deletes and not with_trashed:
            query += f" AND {_quote(SOFT_DELETE_COLUMN)} IS NULL"

        rows = self._query(query, [key])
        if not rows:
            return None

        record = model_cls(**dict(rows[0]))
        record.sync_original()
        return record

    # -----------------------------------------------------------------------
    # Writes
    # -----------------------------------------------------------------------

    def save(self, record: Model) -> None:
        """Insert or update `record`, notifying listeners first.

        Listener exceptions roll the transaction back and propagate unchanged.

        Args:
            record: The record to persist. Its primary key is set after an insert.
        """
        record_type = record.get_record_type()
        with self._transaction() as conn:
            if record.exists:
                for listener in self._updating:
                    listener(record)
                self._update(conn, record_type, record)
            else:
                for listener in self._creating:
                    listener(record)
                self._insert(conn, record_type, record)
        record.sync_original()

    def _insert(self, conn: sqlite3.Connection, record_type: str, record: Model) -> None:
        values = {
            name: value for name, value in record.attributes.items() if name != PRIMARY_KEY or value is not None
        }
        if values:
            columns = ", ".join(_quote(name) for name in values)
            placeholders = ", ".join("?" for _ in values)
            sql = f"INSERT INTO {_quote(record_type)} ({columns}) VALUES ({placeholders})"  # noqa: S608
        else:
            sql = f"INSERT INTO {_quote(record_type)} DEFAULT VALUES"  # noqa: S608
        cursor = conn.execute(sql, list(values.values()))
        record.set_field(PRIMARY_KEY, cursor.lastrowid)

    def _update(self, conn: sqlite3.Connection, record_type: str, record: Model) -> None:
        updates = {name: value for name, value in record.dirty_fields().items() if name != PRIMARY_KEY}
        if not updates:
            return
        set_clause = ", ".join(f"{_quote(name)} = ?" for name in updates)
        conn.execute(
            f"UPDATE {_quote(record_type)} SET {set_clause} WHERE {_quote(PRIMARY_KEY)} = ?",  # noqa: S608
            [*updates.values(), record.original[PRIMARY_KEY]],
        )

    def delete(self, record: Model) -> None:
        """Delete `record`, soft-deleting it when its type supports soft deletion."""
        record_type = record.get_record_type()
        key = record.get_primary_key()
        with self._transaction() as conn:
            if record.supports_soft_delete():
                deleted_at = datetime.now(UTC).isoformat()
                conn.execute(
                    f"UPDATE {_quote(record_type)} SET {_quote(SOFT_DELETE_COLUMN)} = ? "  # noqa: S608
                    f"WHERE {_quote(PRIMARY_KEY)} = ?",
                    [deleted_at, key],
                )
                record.set_field(SOFT_DELETE_COLUMN, deleted_at)
            else:
                conn.execute(f"DELETE FROM {_quote(record_type)} WHERE {_quote(PRIMARY_KEY)} = ?", [key])  # noqa: S608
        if record.supports_soft_delete():
            record.sync_original()
            logger.info("Soft-deleted %s #%s", record_type, key)
        else:
            record.original = {}
            record.attributes.pop(PRIMARY_KEY, None)

    # -----------------------------------------------------------------------
    # Connection helpers
    # -----------------------------------------------------------------------

    def _query(self, sql: str, params: Sequence[Any] = ()) -> list[sqlite3.Row]:
        with self._lock:
            try:
                return self._conn.execute(sql, params).fetchall()
            except sqlite3.Error as exc:
                raise StorageError(f"SQLite query failed: {self.db_path}") from exc

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        """Run the body in an immediate (write-locked) transaction."""
        with self._lock:
            if self._conn.in_transaction:
                yield self._conn
                return
            try:
                self._conn.execute("BEGIN IMMEDIATE")
            except sqlite3.Error as exc:
                raise StorageError(f"Failed to begin transaction: {self.db_path}") from exc
            try:
                yield self._conn
                self._conn.execute("COMMIT")
            except sqlite3.Error as exc:
                if self._conn.in_transaction:
                    self._conn.execute("ROLLBACK")
                raise StorageError(f"SQLite operation failed: {self.db_path}") from exc
            except BaseException:
                self._conn.execute("ROLLBACK")
                raise
