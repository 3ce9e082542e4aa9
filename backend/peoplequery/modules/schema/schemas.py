"""Pydantic schemas describing a discovered relational schema."""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..common.schemas import SuccessResponse


class DatabaseType(str, Enum):
    SQLITE = "sqlite"
    POSTGRESQL = "postgresql"


class ColumnDescription(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    type: str
    is_primary_key: bool = False
    nullable: bool = True


class TableDescription(BaseModel):
    """A table with its columns, row count and a couple of example rows."""

    model_config = ConfigDict(frozen=True)

    name: str
    columns: Tuple[ColumnDescription, ...]
    row_count: int = 0
    sample_rows: Tuple[Dict[str, Any], ...] = ()

    @property
    def primary_key(self) -> List[str]:
        return [column.name for column in self.columns if column.is_primary_key]

    @property
    def column_names(self) -> List[str]:
        return [column.name for column in self.columns]


class Relationship(BaseModel):
    """A link between two columns, written ``table.column``."""

    model_config = ConfigDict(frozen=True)

    from_column: str
    to_column: str
    cardinality: Literal["many-to-one", "one-to-one"] = "many-to-one"
    inferred: bool = False


class SchemaDescription(BaseModel):
    """Immutable snapshot of one discovery run.

    A later discovery produces a new description; descriptions are never
    edited in place.
    """

    model_config = ConfigDict(frozen=True)

    tables: Tuple[TableDescription, ...] = ()
    relationships: Tuple[Relationship, ...] = ()
    synonym_map: Dict[str, Tuple[str, ...]] = Field(default_factory=dict)

    @property
    def table_names(self) -> List[str]:
        return [table.name for table in self.tables]

    def table(self, name: str) -> Optional[TableDescription]:
        """Look a table up by name, ignoring case."""
        wanted = name.lower()
        for table in self.tables:
            if table.name.lower() == wanted:
                return table
        return None

    def primary_entity(self, preferred: str) -> Optional[TableDescription]:
        """The table a bounded scan should read when no better query is available.

        Returns ``preferred`` when it exists, otherwise the first table whose
        name mentions "employee", otherwise the first table.
        """
        table = self.table(preferred)
        if table is not None:
            return table
        for candidate in self.tables:
            if "employee" in candidate.name.lower():
                return candidate
        return self.tables[0] if self.tables else None


class ConnectRequest(BaseModel):
    """Connection details for the database whose schema should be discovered."""

    model_config = ConfigDict(
        json_schema_extra={"example": {"connection_string": "sqlite:///./hr.db", "database_type": "sqlite"}}
    )

    connection_string: str = Field(min_length=1, description="SQLAlchemy URL, or a file path for SQLite")
    database_type: DatabaseType

    @field_validator("connection_string")
    @classmethod
    def strip_connection_string(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Connection string is required")
        return v


class ConnectResponse(SuccessResponse):
    model_config = ConfigDict(populate_by_name=True)

    job_id: str
    schema_: SchemaDescription = Field(alias="schema")


class CurrentSchema(BaseModel):
    """The newest stored discovery together with how to reach its database."""

    model_config = ConfigDict(frozen=True)

    description: SchemaDescription
    database_type: DatabaseType
    connection_url: str
    discovered_at: datetime


class CurrentSchemaResponse(SuccessResponse):
    model_config = ConfigDict(populate_by_name=True)

    schema_: Optional[SchemaDescription] = Field(default=None, alias="schema")
    database_type: Optional[DatabaseType] = None
    discovered_at: Optional[datetime] = None
    message: Optional[str] = None
