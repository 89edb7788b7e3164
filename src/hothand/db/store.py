from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterable, Iterator, Mapping

from sqlalchemy import Table, delete, func, select
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError

from .engine import create_store_engine
from .models import TABLES, TIMESTAMP_COLUMNS, ResourceKind, metadata

logger = logging.getLogger("hothand.store")

Key = Mapping[str, Any]
Row = dict[str, Any]


class CacheStore:
    """Durable key/row cache with one SQLite table per resource kind.

    Keys are mappings of primary-key column name to value. Every write is an
    upsert, so a key never holds more than one row and concurrent writers of
    the same key resolve as last-writer-wins.
    """

    def __init__(self, engine: Engine, *, batch_size: int = 500) -> None:
        self._engine = engine
        self._batch_size = max(1, batch_size)

    @classmethod
    def open(cls, db_path: Path, *, batch_size: int = 500) -> "CacheStore":
        store = cls(create_store_engine(db_path), batch_size=batch_size)
        store.ensure_schema()
        logger.info("Opened cache store at %s", db_path)
        return store

    def close(self) -> None:
        self._engine.dispose()

    @property
    def engine(self) -> Engine:
        return self._engine

    def ensure_schema(self) -> None:
        with self._engine.begin() as connection:
            metadata.create_all(connection, checkfirst=True)

    @contextmanager
    def transaction(self) -> Iterator[Connection]:
        with self._engine.begin() as connection:
            yield connection

    def get(self, kind: ResourceKind, key: Key) -> Row | None:
        table = _table(kind)
        _require_full_key(table, key)
        with self._engine.connect() as connection:
            row = connection.execute(select(table).where(*_match(table, key))).mappings().first()
        return dict(row) if row else None

    def find(self, kind: ResourceKind, partial_key: Key) -> list[Row]:
        table = _table(kind)
        with self._engine.connect() as connection:
            rows = connection.execute(select(table).where(*_match(table, partial_key))).mappings().all()
        return [dict(row) for row in rows]

    def list_all(self, kind: ResourceKind) -> list[Row]:
        table = _table(kind)
        with self._engine.connect() as connection:
            rows = connection.execute(select(table)).mappings().all()
        return [dict(row) for row in rows]

    def count(self, kind: ResourceKind) -> int:
        table = _table(kind)
        with self._engine.connect() as connection:
            return int(connection.execute(select(func.count()).select_from(table)).scalar_one())

    def put(self, kind: ResourceKind, key: Key, row: Mapping[str, Any], timestamp: float | None) -> None:
        table = _table(kind)
        _require_full_key(table, key)
        with self._engine.begin() as connection:
            _upsert(connection, table, _values(kind, key, row, timestamp))

    def put_many(
        self,
        kind: ResourceKind,
        items: Iterable[tuple[Key, Mapping[str, Any]]],
        timestamp: float | None,
    ) -> int:
        """Upsert rows independently in batches; failed or keyless rows are logged and skipped."""
        table = _table(kind)
        pending = list(items)
        written = 0

        for start in range(0, len(pending), self._batch_size):
            batch = pending[start : start + self._batch_size]
            logger.debug("Writing %s batch %s with %s rows", kind.value, start // self._batch_size + 1, len(batch))
            for key, row in batch:
                if any(not str(key.get(column.name) or "").strip() for column in table.primary_key.columns):
                    logger.warning("Skipping %s row with empty key: %s", kind.value, dict(key))
                    continue
                try:
                    with self._engine.begin() as connection:
                        _upsert(connection, table, _values(kind, key, row, timestamp))
                except SQLAlchemyError:
                    logger.warning("Failed to write %s row %s", kind.value, dict(key), exc_info=True)
                    continue
                written += 1

        return written

    def delete_all(self, kind: ResourceKind) -> int:
        table = _table(kind)
        with self._engine.begin() as connection:
            return connection.execute(delete(table)).rowcount

    def delete_by_partial_key(self, kind: ResourceKind, partial_key: Key) -> int:
        table = _table(kind)
        if not partial_key:
            raise ValueError("Partial key must name at least one column; use delete_all instead.")
        with self._engine.begin() as connection:
            return connection.execute(delete(table).where(*_match(table, partial_key))).rowcount


def _table(kind: ResourceKind) -> Table:
    return TABLES[ResourceKind(kind)]


def _match(table: Table, key: Key) -> list:
    unknown = set(key) - {column.name for column in table.primary_key.columns}
    if unknown:
        raise ValueError(f"{table.name} has no key columns named {sorted(unknown)}")
    return [table.c[name] == value for name, value in key.items()]


def _require_full_key(table: Table, key: Key) -> None:
    expected = {column.name for column in table.primary_key.columns}
    if set(key) != expected:
        raise ValueError(f"{table.name} is keyed by {sorted(expected)}, got {sorted(key)}")


def _values(kind: ResourceKind, key: Key, row: Mapping[str, Any], timestamp: float | None) -> Row:
    values = {**row, **key}
    values[TIMESTAMP_COLUMNS[kind]] = timestamp
    return values


def _upsert(connection: Connection, table: Table, values: Row) -> None:
    key_columns = [column.name for column in table.primary_key.columns]
    statement = sqlite_insert(table).values(**values)
    statement = statement.on_conflict_do_update(
        index_elements=key_columns,
        set_={name: statement.excluded[name] for name in values if name not in key_columns},
    )
    connection.execute(statement)
