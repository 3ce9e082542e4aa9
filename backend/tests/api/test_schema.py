"""API tests for database connection and schema discovery."""

from pathlib import Path

import pytest
from httpx import AsyncClient

from peoplequery.modules.schema.services import NO_SCHEMA_MESSAGE


@pytest.mark.asyncio
async def test_no_schema_yet(client: AsyncClient):
    response = await client.get("/api/v1/schema/")

    assert response.status_code == 200
    body = response.json()
    assert body["schema"] is None
    assert body["message"] == NO_SCHEMA_MESSAGE


@pytest.mark.asyncio
async def test_connect_and_read_schema(client: AsyncClient, employee_db: Path):
    response = await client.post(
        "/api/v1/schema/connect",
        json={"connection_string": str(employee_db), "database_type": "sqlite"},
    )

    assert response.status_code == 201, response.text
    body = response.json()
    assert [table["name"] for table in body["schema"]["tables"]] == ["departments", "employees", "reviews"]
    assert {"from_column": "reviews.employee_id", "to_column": "employees.id", "cardinality": "many-to-one",
            "inferred": True} in body["schema"]["relationships"]

    job = (await client.get(f"/api/v1/jobs/{body['job_id']}")).json()["job"]
    assert job["type"] == "database"
    assert job["status"] == "completed"

    current = (await client.get("/api/v1/schema/")).json()
    assert current["schema"] == body["schema"]
    assert current["database_type"] == "sqlite"
    assert current["message"] is None
    assert "connection_url" not in current


@pytest.mark.asyncio
async def test_connect_to_missing_database(client: AsyncClient, tmp_path: Path):
    response = await client.post(
        "/api/v1/schema/connect",
        json={"connection_string": str(tmp_path / "missing.db"), "database_type": "sqlite"},
    )

    assert response.status_code == 500
    assert response.json()["success"] is False
    assert "not found" in response.json()["error"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        {"connection_string": "sqlite:///hr.db", "database_type": "postgresql"},
        {"connection_string": "   ", "database_type": "sqlite"},
        {"connection_string": "hr.db", "database_type": "oracle"},
    ],
)
async def test_connect_rejects_bad_input(client: AsyncClient, payload: dict):
    response = await client.post("/api/v1/schema/connect", json=payload)

    assert response.status_code == 400
    assert response.json()["success"] is False
