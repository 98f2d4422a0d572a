"""Read-only SELECT validation for model-generated SQL."""

from __future__ import annotations

import re
from dataclasses import dataclass

from .errors import InvalidQuery

BLOCKED_KEYWORDS = (
    "drop",
    "delete",
    "truncate",
    "insert",
    "update",
    "alter",
    "create",
    "grant",
    "revoke",
    "execute",
    "exec",
    "transaction",
    "commit",
    "rollback",
)
CATALOG_MARKERS = ("information_schema", "pg_catalog")

_LINE_COMMENT = re.compile(r"--.*$", re.MULTILINE)
_BLOCK_COMMENT = re.compile(r"/\*.*?\*/", re.DOTALL)
_BLOCKED_PATTERNS = tuple(
    (keyword, re.compile(rf"\b{keyword}\b", re.IGNORECASE)) for keyword in BLOCKED_KEYWORDS
)


@dataclass(frozen=True)
class SanitizedQuery:
    """A single comment-free SELECT statement without a trailing separator."""

    sql: str

    def __str__(self) -> str:
        return self.sql


def remove_sql_comments(sql: str) -> str:
    """Strip ``--`` line comments and ``/* */`` block comments."""
    without_lines = _LINE_COMMENT.sub("", sql)
    return _BLOCK_COMMENT.sub("", without_lines).strip()


def prepare(raw_sql: object) -> SanitizedQuery:
    """
    Normalise ``raw_sql`` into a single read-only SELECT.

    Raises:
        InvalidQuery: empty input, several statements, a non-SELECT statement,
            catalog access, or a blocked keyword used as a whole word.
    """
    if not isinstance(raw_sql, str) or not raw_sql.strip():
        raise InvalidQuery("A SQL query string is required")

    statements = [
        statement.strip()
        for statement in remove_sql_comments(raw_sql).split(";")
        if statement.strip()
    ]

    if not statements:
        raise InvalidQuery("SQL query cannot be empty")
    if len(statements) > 1:
        raise InvalidQuery("Only single SELECT statements are allowed")

    statement = statements[0]
    lowered = statement.lower()

    if not lowered.startswith("select"):
        raise InvalidQuery("Only SELECT queries are allowed for security reasons")

    if any(marker in lowered for marker in CATALOG_MARKERS):
        raise InvalidQuery(
            "Access to system catalog tables is blocked. "
            "Use get_database_schema or get_table_info instead."
        )

    for keyword, pattern in _BLOCKED_PATTERNS:
        if pattern.search(lowered):
            raise InvalidQuery(f"Query contains blocked keyword: {keyword}")

    return SanitizedQuery(statement)
