"""Natural-language to SQL synthesis through the completion service."""

from dataclasses import dataclass
from typing import List, Protocol

from ...infrastructure.logging import get_logger
from ..common.exceptions import SynthesisUnavailableError, UpstreamUnavailableError
from ..schema.schemas import DatabaseType, SchemaDescription

logger = get_logger(__name__)

SYNTHESIZED = "synthesized"
FALLBACK = "fallback"

SYSTEM_PROMPT = (
    "Convert natural language questions into a single read-only SQL SELECT statement "
    "for the {dialect} database described below. Use only the tables and columns listed. "
    "Only output the SQL query, no explanations.\n\n{schema}"
)


class CompletionBackend(Protocol):
    async def complete(self, system_prompt: str, user_prompt: str) -> str: ...


@dataclass(frozen=True)
class StructuredQuery:
    """A SQL statement and whether it was synthesized or is the bounded-scan fallback."""

    sql: str
    source: str = SYNTHESIZED


def render_schema(schema: SchemaDescription) -> str:
    """Describe a schema as prompt text: tables, relationships and synonyms."""
    lines: List[str] = ["Tables:"]
    for table in schema.tables:
        columns = ", ".join(
            f"{column.name} {column.type}{' PRIMARY KEY' if column.is_primary_key else ''}" for column in table.columns
        )
        lines.append(f"- {table.name} ({table.row_count} rows): {columns}")

    if schema.relationships:
        lines.append("Relationships:")
        for relationship in schema.relationships:
            lines.append(f"- {relationship.from_column} -> {relationship.to_column} ({relationship.cardinality})")

    if schema.synonym_map:
        lines.append("Synonyms (the user may use these words for the schema term):")
        for term, synonyms in schema.synonym_map.items():
            lines.append(f"- {term}: {', '.join(synonyms)}")

    return "\n".join(lines)


def extract_sql(completion: str) -> str:
    """Strip markdown fences and a trailing semicolon from a completion."""
    text = completion.strip()

    if text.startswith("```sql"):
        text = text[6:]
    elif text.startswith("```"):
        text = text[3:]

    if text.endswith("```"):
        text = text[:-3]

    return text.strip().rstrip(";").strip()


class QuerySynthesizer:
    """Asks the completion service to turn a question into SQL for the discovered schema."""

    def __init__(self, client: CompletionBackend):
        self.client = client

    async def synthesize(
        self,
        question: str,
        schema: SchemaDescription,
        database_type: DatabaseType = DatabaseType.POSTGRESQL,
    ) -> StructuredQuery:
        """Synthesize a SQL statement answering ``question``.

        The statement is not validated here; the structured retriever
        decides whether it is safe to run.

        Raises:
            SynthesisUnavailableError: If the completion service fails or returns no query
        """
        system_prompt = SYSTEM_PROMPT.format(dialect=database_type.value, schema=render_schema(schema))

        try:
            completion = await self.client.complete(system_prompt, question)
        except UpstreamUnavailableError as e:
            raise SynthesisUnavailableError(str(e)) from e

        sql = extract_sql(completion)
        if not sql:
            raise SynthesisUnavailableError("Completion service returned no query")

        logger.debug("Query synthesized", extra={"sql": sql})
        return StructuredQuery(sql=sql)
