"""Relational schema introspection."""

import asyncio
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from sqlalchemy import func, inspect, literal_column, select, table
from sqlalchemy.engine import Connection
from sqlalchemy.exc import CompileError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from ...infrastructure.logging import get_logger
from ..common.exceptions import ConnectionFailedError
from ..common.utils.serialization import jsonable_rows
from .schemas import ColumnDescription, Relationship, SchemaDescription, TableDescription

logger = get_logger(__name__)

SAMPLE_ROW_COUNT = 2

DEFAULT_SYNONYMS: Dict[str, Tuple[str, ...]] = {
    "salary": ("compensation", "pay", "wage", "income"),
    "employee": ("worker", "staff", "personnel", "team member"),
    "department": ("division", "unit", "team", "group"),
    "hire_date": ("start date", "join date", "employment date"),
    "manager": ("supervisor", "boss", "lead"),
    "review": ("evaluation", "appraisal", "assessment"),
    "title": ("role", "position", "job title"),
}


def _type_name(column_type: Any) -> str:
    try:
        return str(column_type)
    except CompileError:
        return type(column_type).__name__


def _referenced_table_candidates(stem: str) -> List[str]:
    candidates = [stem, f"{stem}s", f"{stem}es"]
    if stem.endswith("y"):
        candidates.append(f"{stem[:-1]}ies")
    return candidates


class SchemaDiscoverer:
    """Builds a ``SchemaDescription`` from a live database connection.

    Declared foreign keys are reported as-is. Columns without a constraint
    are linked by naming convention: ``<name>_id`` points at the table
    called ``<name>`` (or its plural) when that table has a single-column
    primary key, and a column named exactly like another table's
    non-``id`` primary key points at that key.

    The synonym map keeps only the domain terms that name a table or a
    column of the discovered schema.
    """

    def __init__(
        self,
        synonyms: Optional[Mapping[str, Sequence[str]]] = None,
        sample_row_count: int = SAMPLE_ROW_COUNT,
        timeout: float = 30.0,
    ):
        self.synonyms = {term: tuple(values) for term, values in (synonyms or DEFAULT_SYNONYMS).items()}
        self.sample_row_count = sample_row_count
        self.timeout = timeout

    async def discover(self, engine: AsyncEngine) -> SchemaDescription:
        """Introspect the database behind ``engine``.

        Raises:
            ConnectionFailedError: If the database is unreachable or rejects the connection
        """
        try:
            return await asyncio.wait_for(self._discover(engine), timeout=self.timeout)
        except (SQLAlchemyError, OSError, asyncio.TimeoutError) as e:
            logger.warning("Schema discovery failed", extra={"error": str(e)})
            raise ConnectionFailedError(f"Could not connect to database: {type(e).__name__}") from e

    async def _discover(self, engine: AsyncEngine) -> SchemaDescription:
        async with engine.connect() as conn:
            raw_tables = await conn.run_sync(self._inspect)

            tables = []
            for raw in raw_tables:
                row_count, sample_rows = await self._read_rows(conn, raw["name"])
                tables.append(
                    TableDescription(
                        name=raw["name"],
                        columns=tuple(raw["columns"]),
                        row_count=row_count,
                        sample_rows=tuple(sample_rows),
                    )
                )

        relationships = self._relationships(tables, {raw["name"]: raw["foreign_keys"] for raw in raw_tables})
        description = SchemaDescription(
            tables=tuple(tables),
            relationships=tuple(relationships),
            synonym_map=self._synonyms_for(tables),
        )

        logger.info(
            "Schema discovered",
            extra={"table_count": len(tables), "relationship_count": len(relationships)},
        )
        return description

    def _inspect(self, sync_conn: Connection) -> List[Dict[str, Any]]:
        inspector = inspect(sync_conn)
        raw_tables = []

        for table_name in sorted(inspector.get_table_names()):
            primary_key = set(inspector.get_pk_constraint(table_name).get("constrained_columns") or [])
            columns = [
                ColumnDescription(
                    name=column["name"],
                    type=_type_name(column["type"]),
                    is_primary_key=column["name"] in primary_key,
                    nullable=bool(column.get("nullable", True)),
                )
                for column in inspector.get_columns(table_name)
            ]
            raw_tables.append(
                {
                    "name": table_name,
                    "columns": columns,
                    "foreign_keys": inspector.get_foreign_keys(table_name),
                }
            )

        return raw_tables

    async def _read_rows(self, conn, table_name: str) -> Tuple[int, List[Dict[str, Any]]]:
        target = table(table_name)
        row_count = (await conn.execute(select(func.count()).select_from(target))).scalar_one()

        result = await conn.execute(select(literal_column("*")).select_from(target).limit(self.sample_row_count))
        sample_rows = jsonable_rows(result)
        return int(row_count), sample_rows

    def _relationships(
        self, tables: List[TableDescription], foreign_keys: Dict[str, List[Dict[str, Any]]]
    ) -> List[Relationship]:
        by_name = {t.name.lower(): t for t in tables}
        relationships: List[Relationship] = []
        linked = set()

        for t in tables:
            for fk in foreign_keys.get(t.name, []):
                constrained = fk.get("constrained_columns") or []
                referred = fk.get("referred_columns") or []
                if len(constrained) != 1 or len(referred) != 1:
                    continue
                relationships.append(
                    Relationship(
                        from_column=f"{t.name}.{constrained[0]}",
                        to_column=f"{fk['referred_table']}.{referred[0]}",
                        cardinality=self._cardinality(t, constrained[0]),
                    )
                )
                linked.add((t.name, constrained[0]))

        for t in tables:
            for column in t.columns:
                if (t.name, column.name) in linked:
                    continue
                target = self._infer_target(t, column.name, by_name, tables)
                if target is None:
                    continue
                relationships.append(
                    Relationship(
                        from_column=f"{t.name}.{column.name}",
                        to_column=target,
                        cardinality=self._cardinality(t, column.name),
                        inferred=True,
                    )
                )

        return relationships

    def _infer_target(
        self,
        source: TableDescription,
        column_name: str,
        by_name: Dict[str, TableDescription],
        tables: Iterable[TableDescription],
    ) -> Optional[str]:
        name = column_name.lower()
        if source.primary_key == [column_name]:
            return None

        if name.endswith("_id") and len(name) > 3:
            for candidate in _referenced_table_candidates(name[:-3]):
                referenced = by_name.get(candidate)
                if referenced is not None and len(referenced.primary_key) == 1:
                    return f"{referenced.name}.{referenced.primary_key[0]}"

        for other in tables:
            if other.name == source.name or len(other.primary_key) != 1:
                continue
            key = other.primary_key[0]
            if key.lower() != "id" and key.lower() == name:
                return f"{other.name}.{key}"

        return None

    @staticmethod
    def _cardinality(source: TableDescription, column_name: str) -> str:
        return "one-to-one" if source.primary_key == [column_name] else "many-to-one"

    def _synonyms_for(self, tables: List[TableDescription]) -> Dict[str, Tuple[str, ...]]:
        table_names = {t.name.lower() for t in tables}
        column_names = {column.name.lower() for t in tables for column in t.columns}

        synonym_map = {}
        for term, synonyms in self.synonyms.items():
            term_key = term.lower()
            if term_key in column_names or any(name in table_names for name in _referenced_table_candidates(term_key)):
                synonym_map[term] = synonyms
        return synonym_map
