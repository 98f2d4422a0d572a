"""Bounded execution of sanitized SELECT statements."""

from __future__ import annotations

import re
import time
from dataclasses import dataclass, field
from typing import Any

from loguru import logger

from .errors import HandlerFailure, InvalidQuery, QueryTimeout
from .formatter import FormattedResult, format_rows
from .introspector import SchemaIntrospector
from .sanitizer import SanitizedQuery, prepare
from .store import SqlStore

_LIMIT_WORD = re.compile(r"\blimit\b", re.IGNORECASE)
_NUMERIC_LIMIT = re.compile(r"\blimit\s+(\d+)", re.IGNORECASE)
_TABLE_REFERENCE = re.compile(r"\b(?:from|join)\s+([a-zA-Z0-9_.\"-]+)", re.IGNORECASE)
_QUOTED = re.compile(r"'(?:[^']|'')*'|\"(?:[^\"]|\"\")*\"")


def _mask_quoted(sql: str) -> str:
    """Blank the inside of quoted literals and identifiers, keeping offsets."""

    def _blank(match: re.Match[str]) -> str:
        quoted = match.group(0)
        return quoted[0] + " " * (len(quoted) - 2) + quoted[-1]

    return _QUOTED.sub(_blank, sql)


def _outer_matches(pattern: re.Pattern[str], masked: str) -> list[re.Match[str]]:
    """Matches of ``pattern`` outside any parentheses."""
    depths = []
    depth = 0
    for char in masked:
        if char == ")":
            depth -= 1
        depths.append(depth)
        if char == "(":
            depth += 1
    return [match for match in pattern.finditer(masked) if depths[match.start()] == 0]


@dataclass
class QueryResult:
    rows: list[dict[str, Any]]
    row_count: int
    execution_time_ms: int
    executed_sql: str
    formatted: FormattedResult = field(default_factory=lambda: format_rows([]))


class BoundedExecutor:
    """
    Runs validated SELECT statements with a row ceiling and a timeout.

    Failures other than timeouts are rewritten into a message that carries
    column hints for the tables the statement referenced, so the model can
    repair its query without another round trip.
    """

    MAX_RESULT_LIMIT = 1000
    QUERY_TIMEOUT_SECONDS = 30
    MAX_TABLE_HINTS = 6
    MAX_COLUMN_HINTS = 12

    def __init__(self, store: SqlStore, introspector: SchemaIntrospector):
        self.store = store
        self.introspector = introspector

    def run(self, raw_sql: Any) -> QueryResult:
        """Validate ``raw_sql`` and execute it. ``InvalidQuery`` is raised as is."""
        try:
            sanitized = prepare(raw_sql)
        except InvalidQuery as exc:
            logger.warning(f"Query rejected: {exc} | SQL: {str(raw_sql)[:100]}")
            raise
        return self.execute(sanitized)

    def execute(self, sanitized: SanitizedQuery) -> QueryResult:
        final_sql = self.apply_result_limit(sanitized.sql)
        started = time.perf_counter()

        try:
            rows = self.store.fetch_rows(
                final_sql,
                timeout_seconds=self.QUERY_TIMEOUT_SECONDS,
                max_rows=self.MAX_RESULT_LIMIT,
            )
        except QueryTimeout as exc:
            elapsed_ms = int((time.perf_counter() - started) * 1000)
            logger.error(f"Query timed out after {elapsed_ms} ms | SQL: {final_sql[:100]}")
            raise QueryTimeout(exc.timeout_seconds, elapsed_ms) from exc
        except Exception as exc:  # noqa: BLE001
            logger.error(f"Query execution error: {exc} | SQL: {final_sql[:100]}")
            raise HandlerFailure(self.build_detailed_error(exc, final_sql)) from exc

        elapsed_ms = int((time.perf_counter() - started) * 1000)
        logger.info(
            f"Query executed successfully: {len(rows)} rows in {elapsed_ms} ms | SQL: {final_sql[:100]}"
        )
        return QueryResult(
            rows=rows,
            row_count=len(rows),
            execution_time_ms=elapsed_ms,
            executed_sql=final_sql,
            formatted=format_rows(rows),
        )

    def explain(self, raw_sql: Any) -> dict[str, Any]:
        """Return the plan of a validated SELECT without running it."""
        try:
            sanitized = prepare(raw_sql)
            if self.store.dialect == "postgresql":
                explain_sql = f"EXPLAIN (FORMAT JSON) {sanitized.sql}"
            elif self.store.dialect == "sqlite":
                explain_sql = f"EXPLAIN QUERY PLAN {sanitized.sql}"
            else:
                explain_sql = f"EXPLAIN {sanitized.sql}"
            plan = self.store.fetch_rows(
                explain_sql, timeout_seconds=self.QUERY_TIMEOUT_SECONDS
            )
            return {"valid": True, "plan": plan, "query": sanitized.sql}
        except Exception as exc:  # noqa: BLE001
            logger.warning(f"Explain failed: {exc}")
            return {"valid": False, "error": str(exc), "query": raw_sql}

    @classmethod
    def apply_result_limit(cls, sql: str) -> str:
        """
        Cap the statement at ``MAX_RESULT_LIMIT`` rows whatever LIMIT it asks for.

        Only LIMIT clauses of the outer statement count. Quoted literals and
        identifiers are never rewritten, and a LIMIT inside a subquery does
        not stop the outer LIMIT from being appended.
        """
        ceiling = cls.MAX_RESULT_LIMIT
        masked = _mask_quoted(sql)
        outer_limits = _outer_matches(_LIMIT_WORD, masked)

        if not outer_limits:
            return f"{sql} LIMIT {ceiling}"

        numeric = [_NUMERIC_LIMIT.match(masked, match.start()) for match in outer_limits]
        if not all(numeric):
            # LIMIT ALL, LIMIT NULL or an expression
            return f"SELECT * FROM ({sql}) AS bounded_query LIMIT {ceiling}"

        capped = sql
        for match in reversed(numeric):
            if int(match.group(1)) > ceiling:
                capped = f"{capped[:match.start()]}LIMIT {ceiling}{capped[match.end():]}"
        return capped

    def build_detailed_error(self, error: Exception, executed_sql: str) -> str:
        """Attach schema hints to ``error``; never raises."""
        cause = getattr(error, "orig", None) or error
        base_message = f"Query execution failed: {str(cause).strip()}"

        try:
            table_names = self.extract_table_names(executed_sql)
            if not table_names:
                return base_message

            hints = self.introspector.column_hints(table_names, self.MAX_COLUMN_HINTS)
            if not hints:
                return base_message

            formatted = "\n".join(
                f"- {table_name}: {', '.join(columns)}" for table_name, columns in hints.items()
            )
            return (
                f"{base_message}\n\nSchema hints for referenced tables:\n{formatted}"
                "\n\nTip: Use get_table_info for full details on a specific table before retrying."
            )
        except Exception as hint_error:  # noqa: BLE001
            logger.debug(f"Could not build schema hints: {hint_error}")
            return base_message

    @classmethod
    def extract_table_names(cls, sql: str) -> list[str]:
        names: dict[str, None] = {}
        for match in _TABLE_REFERENCE.finditer(sql or ""):
            raw_name = match.group(1).replace('"', "")
            if not raw_name or raw_name.startswith("("):
                continue
            normalized = raw_name.split(".")[-1].strip()
            if normalized:
                names.setdefault(normalized, None)
        return list(names)[: cls.MAX_TABLE_HINTS]

    @staticmethod
    def query_examples() -> list[dict[str, str]]:
        """Reference JOINs over the HRM schema for the model."""
        return [
            {
                "description": "Active employees with their department and designation",
                "sql": (
                    "SELECT e.employee_id, e.first_name, e.last_name, e.email, "
                    "d.department_name, des.designation_name "
                    "FROM employees e "
                    "LEFT JOIN departments d ON e.department_id = d.department_id "
                    "LEFT JOIN designations des ON e.designation_id = des.designation_id "
                    "WHERE e.status = 'active' ORDER BY e.first_name"
                ),
            },
            {
                "description": "Employees with their salary information",
                "sql": (
                    "SELECT e.employee_id, e.first_name || ' ' || e.last_name AS full_name, "
                    "d.department_name, ss.base_salary, ss.allowances, ss.gross_salary "
                    "FROM employees e "
                    "LEFT JOIN departments d ON e.department_id = d.department_id "
                    "LEFT JOIN salary_structures ss ON e.employee_id = ss.employee_id "
                    "WHERE e.status = 'active' ORDER BY ss.gross_salary DESC"
                ),
            },
            {
                "description": "Employees with their skills/competencies",
                "sql": (
                    "SELECT e.employee_id, e.first_name || ' ' || e.last_name AS full_name, "
                    "c.competency_name, ec.proficiency_level, ec.years_of_experience "
                    "FROM employees e "
                    "LEFT JOIN employee_competencies ec ON e.employee_id = ec.employee_id "
                    "LEFT JOIN competencies c ON ec.competency_id = c.competency_id "
                    "WHERE e.status = 'active' ORDER BY e.first_name, c.competency_name"
                ),
            },
            {
                "description": "Department headcount and average salary",
                "sql": (
                    "SELECT d.department_name, COUNT(DISTINCT e.employee_id) AS employee_count, "
                    "AVG(ss.gross_salary) AS avg_salary "
                    "FROM departments d "
                    "LEFT JOIN employees e ON d.department_id = e.department_id AND e.status = 'active' "
                    "LEFT JOIN salary_structures ss ON e.employee_id = ss.employee_id "
                    "GROUP BY d.department_id, d.department_name ORDER BY employee_count DESC"
                ),
            },
        ]
