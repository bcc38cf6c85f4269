"""Warehouse materialization for the date spine.

The spine table is always rebuilt wholesale: drop, create and load happen
in one transaction, so readers see either the previous table or the new one.
"""
import logging
from datetime import date
from typing import Dict, Iterable, List, Optional

from sqlalchemy import (
    Column, Date, Integer, MetaData, String, Table, create_engine, event, func, select
)
from sqlalchemy.engine import Engine

from models.time_spine import DateSpineRow

logger = logging.getLogger(__name__)

_COLUMN_TYPES = {
    date: Date,
    int: Integer,
    str: String(16),
}

INSERT_BATCH_SIZE = 1000


def _begin_sqlite_transaction(conn) -> None:
    # pysqlite autocommits DDL unless the driver transaction handling is disabled
    conn.connection.dbapi_connection.isolation_level = None
    conn.exec_driver_sql("BEGIN")


def _enable_sqlite_transactional_ddl(engine: Engine) -> None:
    if engine.dialect.name != "sqlite":
        return
    if not event.contains(engine, "begin", _begin_sqlite_transaction):
        event.listen(engine, "begin", _begin_sqlite_transaction)


def spine_table(metadata: MetaData, table_name: str, schema: Optional[str] = None) -> Table:
    """Build the SQLAlchemy table definition from the DateSpineRow fields."""
    columns = []
    for name, field in DateSpineRow.model_fields.items():
        column_type = _COLUMN_TYPES[field.annotation]
        columns.append(Column(name, column_type, primary_key=(name == "date_day"), nullable=False))
    return Table(table_name, metadata, *columns, schema=schema)


class WarehouseWriter:
    """Writer that materializes spine rows as a database table."""

    def __init__(self, url: Optional[str] = None, table_name: str = "metricflow_time_spine",
                 schema: Optional[str] = None, engine: Optional[Engine] = None):
        """Initialize the writer.

        Args:
            url: SQLAlchemy database URL (ignored when ``engine`` is given)
            table_name: Target table name
            schema: Optional target schema
            engine: Existing SQLAlchemy engine to reuse; a SQLite engine gets
                explicit BEGIN handling so the replace stays transactional
        """
        if engine is None and not url:
            raise ValueError("Either a database URL or an engine is required")
        if engine is None:
            engine = create_engine(url)
        _enable_sqlite_transactional_ddl(engine)
        self.engine = engine
        self.metadata = MetaData()
        self.table = spine_table(self.metadata, table_name, schema)

    @property
    def qualified_name(self) -> str:
        return self.table.fullname

    def materialize(self, rows: Iterable[DateSpineRow]) -> int:
        """Replace the spine table with ``rows``.

        Args:
            rows: Spine rows to load

        Returns:
            Number of rows loaded
        """
        records = [row.model_dump() for row in rows]
        logger.info(f"Materializing {len(records)} rows into {self.qualified_name}")

        with self.engine.begin() as conn:
            self.table.drop(conn, checkfirst=True)
            self.table.create(conn)
            for offset in range(0, len(records), INSERT_BATCH_SIZE):
                batch = records[offset:offset + INSERT_BATCH_SIZE]
                conn.execute(self.table.insert(), batch)

        logger.debug(f"Replaced {self.qualified_name}")
        return len(records)

    def row_count(self) -> int:
        with self.engine.connect() as conn:
            return conn.execute(select(func.count()).select_from(self.table)).scalar_one()

    def read_back(self) -> List[Dict[str, object]]:
        """Read the materialized table ordered by ``date_day``."""
        with self.engine.connect() as conn:
            result = conn.execute(select(self.table).order_by(self.table.c.date_day))
            return [dict(row._mapping) for row in result]
