"""Schema discovery and read-only querying against a real PostgreSQL server."""

import pytest
from sqlalchemy import text
from sqlalchemy.ext.asyncio import create_async_engine

from peoplequery.modules.common.exceptions import StructuredQueryError, UnsafeQueryRejectedError
from peoplequery.modules.query.structured import StructuredRetriever
from peoplequery.modules.query.synthesizer import StructuredQuery
from peoplequery.modules.schema.connection import get_target_engine, normalize_connection_url
from peoplequery.modules.schema.discoverer import SchemaDiscoverer
from peoplequery.modules.schema.schemas import DatabaseType, Relationship

SETUP_STATEMENTS = [
    "DROP TABLE IF EXISTS reviews, employees, departments",
    "CREATE TABLE departments (id SERIAL PRIMARY KEY, name TEXT NOT NULL)",
    """
    CREATE TABLE employees (
        id SERIAL PRIMARY KEY,
        name TEXT NOT NULL,
        department_id INTEGER REFERENCES departments(id),
        salary NUMERIC(10, 2)
    )
    """,
    "CREATE TABLE reviews (id SERIAL PRIMARY KEY, employee_id INTEGER, rating INTEGER)",
    "INSERT INTO departments (name) VALUES ('Engineering'), ('People')",
    "INSERT INTO employees (name, department_id, salary) VALUES ('Ada Park', 1, 185000), ('Dev Rao', 2, 98000)",
    "INSERT INTO reviews (employee_id, rating) VALUES (1, 5)",
]


@pytest.fixture
async def pg_url(pg_container, target_engines):
    url = normalize_connection_url(pg_container.get_connection_url(), DatabaseType.POSTGRESQL)
    engine = create_async_engine(url)
    async with engine.begin() as conn:
        for statement in SETUP_STATEMENTS:
            await conn.execute(text(statement))
    await engine.dispose()
    return url


@pytest.mark.asyncio
async def test_discovers_postgres_schema(pg_url):
    schema = await SchemaDiscoverer().discover(get_target_engine(pg_url))

    assert schema.table_names == ["departments", "employees", "reviews"]
    assert schema.table("employees").row_count == 2
    assert schema.table("employees").primary_key == ["id"]
    assert len(schema.table("departments").sample_rows) == 2
    assert Relationship(from_column="employees.department_id", to_column="departments.id") in schema.relationships
    assert (
        Relationship(from_column="reviews.employee_id", to_column="employees.id", inferred=True)
        in schema.relationships
    )


@pytest.mark.asyncio
async def test_read_only_queries(pg_url):
    retriever = StructuredRetriever(max_rows=10)
    engine = get_target_engine(pg_url)

    rows = await retriever.execute(StructuredQuery(sql="SELECT name, salary FROM employees WHERE salary > 100000"), engine)
    assert rows == [{"name": "Ada Park", "salary": 185000.0}]

    with pytest.raises(UnsafeQueryRejectedError):
        await retriever.execute(StructuredQuery(sql="DELETE FROM employees"), engine)

    with pytest.raises(StructuredQueryError):
        await retriever.execute(StructuredQuery(sql="SELECT * FROM contractors"), engine)


@pytest.mark.asyncio
async def test_join_keeps_columns_with_the_same_name(pg_url):
    rows = await StructuredRetriever().execute(
        StructuredQuery(
            sql="SELECT e.name, d.name FROM employees e JOIN departments d ON d.id = e.department_id "
            "WHERE e.salary > 100000"
        ),
        get_target_engine(pg_url),
    )

    assert rows == [{"name": "Ada Park", "name_1": "Engineering"}]
