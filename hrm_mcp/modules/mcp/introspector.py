"""Schema descriptions of the live catalog for LLM prompts and error hints."""

from __future__ import annotations

from typing import Any, Iterable

from loguru import logger
from sqlalchemy import func, inspect, literal_column, select, table
from sqlalchemy.engine import Engine, Inspector

from .errors import TableNotFound

MAX_FOREIGN_KEY_PREVIEW = 3
MAX_SAMPLE_ROWS = 3


class SchemaIntrospector:
    """
    Reads table, column and constraint metadata from the database catalog.

    Nothing is cached: a new ``Inspector`` is created for each call so that
    callers always see the current schema.
    """

    def __init__(self, engine: Engine, schema: str | None = "public"):
        self.engine = engine
        # SQLite has no named schemas besides "main"
        self.schema = schema if engine.dialect.name == "postgresql" else None

    def _inspector(self) -> Inspector:
        return inspect(self.engine)

    def table_names(self) -> list[str]:
        return sorted(self._inspector().get_table_names(schema=self.schema))

    def compact_schema(self) -> dict[str, Any]:
        """
        Token-friendly schema: primary keys and at most three foreign keys
        per table, plus the number of foreign keys left out.
        """
        inspector = self._inspector()
        tables = sorted(inspector.get_table_names(schema=self.schema))

        summaries = []
        tables_with_fks = 0
        for name in tables:
            pk = inspector.get_pk_constraint(name, schema=self.schema) or {}
            relationships = self._relationships_for(inspector, name)
            if relationships:
                tables_with_fks += 1
            foreign_keys = [
                f"{rel['from_column']} -> {rel['to_table']}.{rel['to_column']}"
                for rel in relationships
            ]
            summaries.append(
                {
                    "table": name,
                    "primaryKeys": list(pk.get("constrained_columns") or []),
                    "foreignKeysPreview": foreign_keys[:MAX_FOREIGN_KEY_PREVIEW],
                    "foreignKeyCount": len(foreign_keys),
                }
            )

        logger.debug(f"Compact schema built for {len(tables)} tables")
        return {
            "summary": {
                "totalTables": len(tables),
                "tablesWithForeignKeys": tables_with_fks,
            },
            "tables": summaries,
            "note": (
                "Compact schema preview. For columns and full relationships "
                "use get_table_info or get_database_schema with detailed=true."
            ),
        }

    def full_schema(self) -> dict[str, Any]:
        """Every column of every table and the complete relationship graph."""
        inspector = self._inspector()
        tables = sorted(inspector.get_table_names(schema=self.schema))

        relationships: list[dict[str, Any]] = []
        for name in tables:
            relationships.extend(self._relationships_for(inspector, name))

        schema_tables = []
        for name in tables:
            schema_tables.append(
                {
                    "name": name,
                    "columns": [
                        {
                            "name": column["name"],
                            "type": str(column["type"]),
                            "nullable": bool(column.get("nullable", True)),
                            "default": column.get("default"),
                        }
                        for column in inspector.get_columns(name, schema=self.schema)
                    ],
                    "relationships": [
                        rel
                        for rel in relationships
                        if rel["from_table"] == name or rel["to_table"] == name
                    ],
                }
            )

        logger.info(f"Full schema loaded: {len(tables)} tables")
        return {"tables": schema_tables, "relationships": relationships}

    def table_info(self, table_name: str) -> dict[str, Any]:
        """
        Columns, keys, three sample rows and the row count of one table.

        Raises:
            TableNotFound: ``table_name`` is not a table of the inspected schema.
        """
        inspector = self._inspector()
        if not inspector.has_table(table_name, schema=self.schema):
            raise TableNotFound(table_name)

        columns = [
            {
                "column_name": column["name"],
                "data_type": str(column["type"]),
                "is_nullable": bool(column.get("nullable", True)),
                "column_default": column.get("default"),
            }
            for column in inspector.get_columns(table_name, schema=self.schema)
        ]
        pk = inspector.get_pk_constraint(table_name, schema=self.schema) or {}
        foreign_keys = [
            {
                "column_name": rel["from_column"],
                "referenced_table": rel["to_table"],
                "referenced_column": rel["to_column"],
            }
            for rel in self._relationships_for(inspector, table_name)
        ]

        target = table(table_name, schema=self.schema)
        with self.engine.connect() as conn:
            sample = conn.execute(
                select(literal_column("*")).select_from(target).limit(MAX_SAMPLE_ROWS)
            )
            sample_rows = [dict(row._mapping) for row in sample]
            total = conn.execute(select(func.count()).select_from(target)).scalar_one()

        return {
            "tableName": table_name,
            "columns": columns,
            "primaryKeys": list(pk.get("constrained_columns") or []),
            "foreignKeys": foreign_keys,
            "sampleData": sample_rows,
            "totalRows": int(total or 0),
        }

    def column_hints(
        self, table_names: Iterable[str], max_columns: int
    ) -> dict[str, list[str]]:
        """Column names for each known table; unknown names are skipped."""
        inspector = self._inspector()
        hints: dict[str, list[str]] = {}
        for name in table_names:
            normalized = name.replace('"', "").strip()
            if not normalized or not inspector.has_table(normalized, schema=self.schema):
                continue
            columns = inspector.get_columns(normalized, schema=self.schema)
            if columns:
                hints[normalized] = [column["name"] for column in columns[:max_columns]]
        return hints

    def _relationships_for(self, inspector: Inspector, table_name: str) -> list[dict[str, Any]]:
        relationships = []
        for fk in inspector.get_foreign_keys(table_name, schema=self.schema):
            for from_column, to_column in zip(
                fk.get("constrained_columns") or [], fk.get("referred_columns") or []
            ):
                relationships.append(
                    {
                        "from_table": table_name,
                        "from_column": from_column,
                        "to_table": fk.get("referred_table"),
                        "to_column": to_column,
                        "constraint_name": fk.get("name"),
                    }
                )
        return relationships
