"""
SQLite gateway.

Serves the journal tables from a local SQLite database through SQLAlchemy.
SQLite failures are translated to the same error codes the hosted
backend reports.
"""

import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Generator, List, Optional, Type

from sqlalchemy import select
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session

from cryptojournal.core.db import get_engine, get_session_factory, init_db, session_scope
from cryptojournal.core.errors import (
    GatewayError,
    RowNotFoundError,
    SetupError,
    StoreError,
    classify_error,
)
from cryptojournal.core.models import MODELS_BY_TABLE, Base
from cryptojournal.store.base import Gateway, Row

logger = logging.getLogger(__name__)

# Columns the store owns on upsert
_PROTECTED_COLUMNS = {"id", "created_at"}


def _translate(exc: SQLAlchemyError, table: str) -> GatewayError:
    """Map a SQLAlchemy/SQLite error to a GatewayError."""
    message = str(getattr(exc, "orig", exc))
    lowered = message.lower()

    if isinstance(exc, OperationalError):
        if "no such table" in lowered:
            return SetupError(
                f'relation "{table}" does not exist', code="42P01", details=message, table=table
            )
        if "no such column" in lowered or "has no column" in lowered:
            return SetupError(message, code="42703", table=table)
    if isinstance(exc, IntegrityError):
        return classify_error("23505" if "unique" in lowered else "23502", message, table=table)

    return StoreError(message, table=table)


class SqlGateway(Gateway):
    """
    Gateway backed by SQLAlchemy on SQLite.

    One engine per gateway; every call runs in its own transaction.
    """

    def __init__(self, engine: Engine, create_tables: bool = True):
        self.engine = engine
        self._session_factory = get_session_factory(engine)
        if create_tables:
            init_db(engine)

    @classmethod
    def from_path(cls, database_path: str, create_tables: bool = True) -> "SqlGateway":
        """Open (and by default initialize) the database at database_path."""
        return cls(get_engine(database_path), create_tables=create_tables)

    def _model(self, table: str) -> Type[Base]:
        model = MODELS_BY_TABLE.get(table)
        if model is None:
            raise SetupError(f'relation "{table}" does not exist', code="42P01", table=table)
        return model

    def _column(self, model: Type[Base], name: str, table: str):
        if name not in model.__table__.columns:
            raise SetupError(
                f'column "{name}" of relation "{table}" does not exist', code="42703", table=table
            )
        return getattr(model, name)

    @contextmanager
    def _session(self, table: str) -> Generator[Session, None, None]:
        try:
            with session_scope(self._session_factory) as session:
                yield session
        except GatewayError:
            raise
        except SQLAlchemyError as e:
            error = _translate(e, table)
            logger.error(f"SQLite error on {table}: {error}")
            raise error from e

    def _build(self, model: Type[Base], row: Row, table: str) -> Base:
        for name in row:
            self._column(model, name, table)
        return model(**row)

    def select(
        self,
        table: str,
        filters: Dict[str, Any],
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> List[Row]:
        model = self._model(table)
        stmt = select(model)
        for name, value in filters.items():
            stmt = stmt.where(self._column(model, name, table) == value)
        if order_by:
            column = self._column(model, order_by, table)
            stmt = stmt.order_by(column.desc() if descending else column.asc())

        with self._session(table) as session:
            return [obj.to_row() for obj in session.scalars(stmt).all()]

    def select_one(self, table: str, filters: Dict[str, Any]) -> Row:
        rows = self.select(table, filters)
        if not rows:
            raise RowNotFoundError(
                "JSON object requested, multiple (or no) rows returned",
                code="PGRST116",
                details="The result contains 0 rows",
                table=table,
            )
        return rows[0]

    def insert(self, table: str, row: Row) -> Row:
        model = self._model(table)
        with self._session(table) as session:
            obj = self._build(model, row, table)
            session.add(obj)
            session.flush()
            return obj.to_row()

    def update(self, table: str, row_id: str, changes: Row) -> Optional[Row]:
        model = self._model(table)
        with self._session(table) as session:
            obj = session.get(model, row_id)
            if obj is None:
                return None
            for name, value in changes.items():
                self._column(model, name, table)
                setattr(obj, name, value)
            session.flush()
            return obj.to_row()

    def delete(self, table: str, row_id: str) -> bool:
        model = self._model(table)
        with self._session(table) as session:
            obj = session.get(model, row_id)
            if obj is None:
                return False
            session.delete(obj)
            return True

    def upsert(self, table: str, row: Row, on_conflict: str) -> Row:
        """Single INSERT ... ON CONFLICT DO UPDATE keyed on on_conflict."""
        model = self._model(table)
        for name in row:
            self._column(model, name, table)
        if on_conflict not in row:
            raise StoreError(f"Upsert row is missing conflict column {on_conflict}", table=table)

        stmt = sqlite_insert(model).values(**row)
        updates = {
            name: stmt.excluded[name]
            for name in row
            if name != on_conflict and name not in _PROTECTED_COLUMNS
        }
        if "updated_at" in model.__table__.columns:
            updates["updated_at"] = datetime.now(timezone.utc)
        stmt = stmt.on_conflict_do_update(index_elements=[on_conflict], set_=updates)

        with self._session(table) as session:
            session.execute(stmt)
            stored = session.scalars(
                select(model).where(getattr(model, on_conflict) == row[on_conflict])
            ).one()
            return stored.to_row()

    def ping(self, table: str) -> None:
        model = self._model(table)
        with self._session(table) as session:
            session.scalars(select(model).limit(1)).all()
