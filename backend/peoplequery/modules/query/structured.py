"""Guarded execution of SQL against the target database."""

import asyncio
import re
from typing import Any, Dict, List

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from ...infrastructure.logging import get_logger
from ..common.exceptions import StructuredQueryError, UnsafeQueryRejectedError
from ..common.utils.serialization import jsonable_rows
from .synthesizer import FALLBACK, StructuredQuery

logger = get_logger(__name__)

DEFAULT_MAX_ROWS = 100

_READ_ONLY_START = re.compile(r"^\s*(select|with)\b", re.IGNORECASE)

_BLOCKED_PATTERNS = tuple(
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        r"\binsert\b",
        r"\bupdate\b",
        r"\bdelete\b",
        r"\bdrop\b",
        r"\balter\b",
        r"\bcreate\b",
        r"\btruncate\b",
        r"\bgrant\b",
        r"\brevoke\b",
        r"\bmerge\b",
        r"\bupsert\b",
        r"\binto\b",
        r"\bexec\b",
        r"\bexecute\b",
        r"\bcall\b",
        r"\bcopy\b",
        r"\battach\b",
        r"\bdetach\b",
        r"\bpragma\b",
        r"\bvacuum\b",
        r"\breindex\b",
        r"\block\b",
        r"\bbegin\b",
        r"\bcommit\b",
        r"\brollback\b",
        r"\bsavepoint\b",
        r"\bload_extension\b",
    )
)

# Literals, quoted identifiers and comments, removed before keyword checks.
_NON_CODE = re.compile(
    r"\$([a-zA-Z_]\w*)?\$.*?\$\1\$|'(?:[^']|'')*'|\"(?:[^\"]|\"\")*\"|--[^\n]*|/\*.*?\*/",
    re.DOTALL,
)


def _code_only(sql: str) -> str:
    return _NON_CODE.sub(" ", sql)


def validate_read_only(sql: str) -> str:
    """Check that ``sql`` is a single read-only statement.

    Returns:
        The statement without a trailing semicolon

    Raises:
        UnsafeQueryRejectedError: If the statement could write, is not a
            SELECT/WITH query, or contains more than one statement
    """
    statement = (sql or "").strip().rstrip(";").strip()
    if not statement:
        raise UnsafeQueryRejectedError("Empty query")

    code = _code_only(statement)
    if "'" in code or '"' in code or "/*" in code:
        raise UnsafeQueryRejectedError("Unterminated literal or comment")
    if not _READ_ONLY_START.match(code):
        raise UnsafeQueryRejectedError("Only SELECT or WITH queries are allowed")
    if ";" in code:
        raise UnsafeQueryRejectedError("Multiple statements are not allowed")

    for pattern in _BLOCKED_PATTERNS:
        if pattern.search(code):
            raise UnsafeQueryRejectedError(f"Query contains a blocked keyword: {pattern.pattern[2:-2].upper()}")

    return statement


def quote_identifier(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


def bounded_scan(table_name: str, limit: int) -> StructuredQuery:
    """The fallback query: the first ``limit`` rows of a table."""
    return StructuredQuery(sql=f"SELECT * FROM {quote_identifier(table_name)} LIMIT {int(limit)}", source=FALLBACK)


class StructuredRetriever:
    """Runs validated, read-only SQL with a row cap.

    The statement is wrapped as ``SELECT * FROM (<sql>) AS capped LIMIT n``
    and executed inside a read-only transaction (``SET TRANSACTION READ
    ONLY`` on PostgreSQL, ``PRAGMA query_only`` on SQLite).
    """

    def __init__(self, max_rows: int = DEFAULT_MAX_ROWS):
        self.max_rows = max_rows

    async def execute(self, query: StructuredQuery, engine: AsyncEngine) -> List[Dict[str, Any]]:
        """Execute ``query`` and return its rows as JSON-safe dicts.

        Raises:
            UnsafeQueryRejectedError: If the query fails validation; nothing is sent to the database
            StructuredQueryError: If the database is unreachable, or rejects or fails the query
        """
        statement = validate_read_only(query.sql)
        capped = text(f"SELECT * FROM ({statement}) AS capped LIMIT :row_cap")

        try:
            async with engine.connect() as conn:
                if engine.dialect.name == "postgresql":
                    await conn.execute(text("SET TRANSACTION READ ONLY"))
                elif engine.dialect.name == "sqlite":
                    await conn.exec_driver_sql("PRAGMA query_only = ON")

                result = await conn.execute(capped, {"row_cap": self.max_rows})
                rows = jsonable_rows(result)
                await conn.rollback()
        except (SQLAlchemyError, OSError, asyncio.TimeoutError) as e:
            logger.warning("Structured query failed", extra={"sql": statement, "error": str(e)})
            raise StructuredQueryError("Query execution failed") from e

        logger.debug("Structured query executed", extra={"row_count": len(rows), "source": query.source})
        return rows
