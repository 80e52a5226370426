"""Integration tests for the /documents endpoints."""

from collections.abc import Iterator
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from backend.legal_assistant.api.dependencies import get_document_store
from backend.legal_assistant.errors import DocumentStoreError
from backend.legal_assistant.main import app


@pytest.fixture
def client(document_store) -> Iterator[TestClient]:
    app.dependency_overrides[get_document_store] = lambda: document_store
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_get_document(client: TestClient) -> None:
    response = client.get("/documents/electricity")

    assert response.status_code == 200
    data = response.json()
    assert data["titleArabic"] == "قانون الكهرباء"
    assert [a["number"] for a in data["articles"]] == ["1", "27"]


def test_get_missing_document_is_404(client: TestClient) -> None:
    assert client.get("/documents/unknown").status_code == 404


@pytest.mark.parametrize("number", ["27", "٢٧"])
def test_get_article_in_either_digit_script(client: TestClient, number: str) -> None:
    response = client.get(f"/documents/electricity/articles/{number}")

    assert response.status_code == 200
    assert response.json()["content"] == "penalty text"


def test_get_missing_article_is_404(client: TestClient) -> None:
    assert client.get("/documents/electricity/articles/99").status_code == 404


def test_store_failure_is_500(client: TestClient) -> None:
    broken = AsyncMock()
    broken.get.side_effect = DocumentStoreError("down")
    app.dependency_overrides[get_document_store] = lambda: broken

    response = client.get("/documents/electricity")

    assert response.status_code == 500
    assert response.json()["detail"] == "internal error"
