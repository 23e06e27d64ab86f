"""Read-only access to the primary warehouse.

Three operations live here: forwarding ad-hoc SELECT text to the store, listing
the tables of the configured schema and describing one table from
``information_schema``.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from fastapi.encoders import jsonable_encoder
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .errors import ExecutionError, ValidationError

logger = logging.getLogger(__name__)

QueryValidator = Callable[[Optional[str]], None]

# Binary values are sent in PostgreSQL's bytea hex output form: a backslash, "x", then hex digits.
ROW_ENCODERS = {
    bytes: lambda value: "\\x" + value.hex(),
    memoryview: lambda value: "\\x" + value.tobytes().hex(),
}


@dataclass(frozen=True)
class QueryResult:
    rows: List[Dict[str, Any]]
    row_count: int


@dataclass(frozen=True)
class ColumnDescriptor:
    name: str
    type: Optional[str]
    nullable: bool
    default: Optional[str]
    is_primary_key: bool = False


@dataclass(frozen=True)
class TableSchema:
    table_name: str
    columns: List[ColumnDescriptor] = field(default_factory=list)


LIST_TABLES_SQL = text(
    """
    SELECT table_name AS name
    FROM information_schema.tables
    WHERE table_schema = :schema
    ORDER BY table_name
    """
)

COLUMNS_SQL = text(
    """
    SELECT column_name, data_type, is_nullable, column_default
    FROM information_schema.columns
    WHERE table_name = :table_name
      AND table_schema = :schema
    ORDER BY ordinal_position
    """
)

PRIMARY_KEY_SQL = text(
    """
    SELECT column_name
    FROM information_schema.key_column_usage
    WHERE table_name = :table_name
      AND table_schema = :schema
      AND constraint_name IN (
        SELECT constraint_name
        FROM information_schema.table_constraints
        WHERE table_name = :table_name
          AND table_schema = :schema
          AND constraint_type = 'PRIMARY KEY'
      )
    """
)


def require_select(sql: Optional[str]) -> None:
    """Reject anything that does not start with ``select``.

    This is a textual prefix check only. It does not parse the statement, so it
    is not a security boundary.
    """
    if not sql:
        logger.debug("Rejected query: no SQL text")
        raise ValidationError("SQL query is required")
    if not sql.strip().lower().startswith("select"):
        logger.debug("Rejected non-SELECT query: %.80s", sql)
        raise ValidationError("Only SELECT queries are allowed")


def run_query(db: Session, sql: Optional[str], validate: QueryValidator = require_select) -> QueryResult:
    validate(sql)
    try:
        # Sent to the driver verbatim: no ":name" binding, no "%" placeholder parsing.
        result = db.connection().exec_driver_sql(sql, execution_options={"no_parameters": True})
        reported = result.rowcount
        rows = [jsonable_encoder(dict(row), custom_encoder=ROW_ENCODERS) for row in result.mappings()]
    except SQLAlchemyError as exc:
        logger.warning("Query failed: %s", exc)
        raise ExecutionError.from_db(exc) from exc

    # SQLite reports -1 for SELECT.
    row_count = reported if reported is not None and reported >= 0 else len(rows)
    logger.info("Query returned %d rows", row_count)
    return QueryResult(rows=rows, row_count=row_count)


def list_tables(db: Session, schema: str) -> List[str]:
    try:
        return list(db.execute(LIST_TABLES_SQL, {"schema": schema}).scalars())
    except SQLAlchemyError as exc:
        logger.exception("Listing tables in schema %s failed", schema)
        raise ExecutionError.from_db(exc) from exc


def describe_table(db: Session, table_name: str, schema: str) -> TableSchema:
    """Describe ``table_name`` from catalog metadata.

    Columns come back in physical order. An unknown table is not an error: it
    simply has no columns.
    """
    params = {"table_name": table_name, "schema": schema}
    try:
        column_rows = db.execute(COLUMNS_SQL, params).mappings().all()
        primary_keys = set(db.execute(PRIMARY_KEY_SQL, params).scalars())
    except SQLAlchemyError as exc:
        logger.exception("Describing %s.%s failed", schema, table_name)
        raise ExecutionError.from_db(exc) from exc

    columns = [
        ColumnDescriptor(
            name=row["column_name"],
            type=row["data_type"],
            nullable=row["is_nullable"] == "YES",
            default=row["column_default"],
            is_primary_key=row["column_name"] in primary_keys,
        )
        for row in column_rows
    ]
    if not columns:
        logger.info("No columns found for %s.%s", schema, table_name)
    return TableSchema(table_name=table_name, columns=columns)
