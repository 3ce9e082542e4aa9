"""API tests for document ingestion and management."""

import pytest
from httpx import AsyncClient

HANDBOOK = ("Employees accrue two days of paid leave per month. " * 48)[:2400]


async def ingest(client: AsyncClient, *files) -> dict:
    response = await client.post(
        "/api/v1/documents/ingest",
        files=[("files", (name, content.encode("utf-8"), "text/plain")) for name, content in files],
    )
    assert response.status_code == 201, response.text
    return response.json()


@pytest.mark.asyncio
async def test_ingest_and_job_status(client: AsyncClient):
    body = await ingest(client, ("handbook.txt", HANDBOOK), ("benefits.txt", "Dental cover starts after 90 days."))

    assert body["success"] is True
    assert body["processed_count"] == 2
    assert [document["file_name"] for document in body["documents"]] == ["handbook.txt", "benefits.txt"]
    assert body["documents"][0]["chunk_count"] == 6
    assert body["documents"][1]["chunk_count"] == 1

    job = (await client.get(f"/api/v1/jobs/{body['job_id']}")).json()["job"]
    assert job["type"] == "documents"
    assert job["status"] == "completed"
    assert job["metadata"]["processed_count"] == 2


@pytest.mark.asyncio
async def test_ingest_without_files(client: AsyncClient):
    response = await client.post("/api/v1/documents/ingest")

    assert response.status_code == 400
    assert response.json()["success"] is False


@pytest.mark.asyncio
async def test_list_get_and_chunks(client: AsyncClient):
    body = await ingest(client, ("handbook.txt", HANDBOOK))
    document_id = body["documents"][0]["id"]

    listing = (await client.get("/api/v1/documents/", params={"items_per_page": 10})).json()
    assert listing["total_count"] == 1
    assert listing["has_more"] is False
    assert listing["data"][0]["file_name"] == "handbook.txt"

    detail = (await client.get(f"/api/v1/documents/{document_id}")).json()
    assert detail["document"]["content"] == HANDBOOK
    assert detail["document"]["file_size"] == 2400

    chunks = (await client.get(f"/api/v1/documents/{document_id}/chunks")).json()
    assert chunks["count"] == 6
    assert [chunk["chunk_index"] for chunk in chunks["chunks"]] == list(range(6))
    assert chunks["chunks"][0]["embedding_dimension"] == 8


@pytest.mark.asyncio
async def test_delete_document(client: AsyncClient):
    body = await ingest(client, ("handbook.txt", HANDBOOK))
    document_id = body["documents"][0]["id"]

    response = await client.delete(f"/api/v1/documents/{document_id}")
    assert response.status_code == 200
    assert response.json() == {"success": True, "document_id": document_id}

    missing = await client.get(f"/api/v1/documents/{document_id}")
    assert missing.status_code == 404
    assert missing.json() == {"success": False, "error": "Document not found"}

    assert (await client.get(f"/api/v1/documents/{document_id}/chunks")).status_code == 404
    assert (await client.delete(f"/api/v1/documents/{document_id}")).status_code == 404


@pytest.mark.asyncio
async def test_invalid_pagination(client: AsyncClient):
    response = await client.get("/api/v1/documents/", params={"items_per_page": 1000})

    assert response.status_code == 400
