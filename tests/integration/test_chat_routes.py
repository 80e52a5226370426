"""Integration tests for the /chat endpoints."""

from collections.abc import Iterator
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient
from redis.exceptions import ConnectionError as RedisConnectionError

from backend.legal_assistant.api.dependencies import (
    get_chat_service,
    get_rate_limit_policy,
)
from backend.legal_assistant.db.inmemory import InMemoryRateLimiter
from backend.legal_assistant.llm.client import GenerationGateway, UnconfiguredClient
from backend.legal_assistant.llm.fallback import FallbackSynthesizer
from backend.legal_assistant.main import app
from backend.legal_assistant.models.common import Category
from backend.legal_assistant.orchestration.chat import ChatService
from backend.legal_assistant.ratelimit import RateLimitPolicy, RedisRateLimiter
from backend.legal_assistant.retrieval.engine import RetrievalEngine
from backend.legal_assistant.sessions.manager import SessionManager

USER = {"Authorization": "Bearer user-1"}
OTHER_USER = {"Authorization": "Bearer user-2"}


@pytest.fixture
def chat_service(document_store, session_store, clock) -> ChatService:
    return ChatService(
        documents=document_store,
        sessions=SessionManager(session_store, clock=clock),
        engine=RetrievalEngine(document_store),
        gateway=GenerationGateway(UnconfiguredClient(), FallbackSynthesizer("en"), language="en"),
        language="en",
    )


@pytest.fixture
def rate_limit() -> RateLimitPolicy:
    return RateLimitPolicy(InMemoryRateLimiter(max_requests=3))


@pytest.fixture
def client(chat_service: ChatService, rate_limit: RateLimitPolicy) -> Iterator[TestClient]:
    """Test client wired to in-memory services."""
    app.dependency_overrides[get_chat_service] = lambda: chat_service
    app.dependency_overrides[get_rate_limit_policy] = lambda: rate_limit
    yield TestClient(app)
    app.dependency_overrides.clear()


def send(client: TestClient, body: dict, headers: dict = USER):
    return client.post("/chat/message", json=body, headers=headers)


class TestSendMessage:
    """POST /chat/message."""

    def test_answer_uses_camel_case_contract(self, client: TestClient) -> None:
        response = send(client, {"message": "article 27"})

        assert response.status_code == 200
        data = response.json()
        assert data["sessionId"]
        assert "penalty text" in data["message"]
        assert data["relevantDocuments"][0]["id"] == "electricity"
        assert data["relevantDocuments"][0]["officialNumber"] == "LAW-electricity"
        assert 70 <= data["confidence"] <= 95
        assert data["metadata"]["documentsFound"] >= 1
        assert data["metadata"]["source"] == "fallback"
        assert data["metadata"]["articleNumber"] == "27"

    def test_continue_session(self, client: TestClient) -> None:
        first = send(client, {"message": "article 27"}).json()

        second = send(client, {"message": "penal code", "sessionId": first["sessionId"]})

        assert second.status_code == 200
        assert second.json()["sessionId"] == first["sessionId"]

    def test_explicit_category(self, client: TestClient) -> None:
        response = send(client, {"message": "contract", "category": Category.civil.value})

        assert response.status_code == 200
        assert response.json()["metadata"]["category"] == "Civil Law"

    def test_blank_message_is_400(self, client: TestClient) -> None:
        response = send(client, {"message": "   "})

        assert response.status_code == 400

    def test_message_over_configured_limit_is_400(self, client: TestClient) -> None:
        response = send(client, {"message": "x" * 2001})

        assert response.status_code == 400

    @pytest.mark.parametrize("body", [{}, {"message": ""}, {"message": "x" * 10001}])
    def test_schema_violations_are_422(self, client: TestClient, body: dict) -> None:
        assert send(client, body).status_code == 422

    def test_malformed_session_id_is_400(self, client: TestClient) -> None:
        response = send(client, {"message": "article 27", "sessionId": "abc"})

        assert response.status_code == 400

    def test_unknown_session_is_404(self, client: TestClient) -> None:
        response = send(
            client,
            {"message": "article 27", "sessionId": "3fa85f64-5717-4562-b3fc-2c963f66afa6"},
        )

        assert response.status_code == 404

    def test_inactive_session_is_409(self, client: TestClient) -> None:
        session_id = send(client, {"message": "article 27"}).json()["sessionId"]
        client.post(f"/chat/sessions/{session_id}/complete", headers=USER)

        response = send(client, {"message": "more", "sessionId": session_id})

        assert response.status_code == 409

    def test_rate_limited_after_quota(self, client: TestClient) -> None:
        for _ in range(3):
            assert send(client, {"message": "article 27"}).status_code == 200

        response = send(client, {"message": "article 27"})

        assert response.status_code == 429
        assert int(response.headers["Retry-After"]) > 0

    def test_quota_is_per_user(self, client: TestClient) -> None:
        for _ in range(3):
            send(client, {"message": "article 27"})

        assert send(client, {"message": "article 27"}, OTHER_USER).status_code == 200

    def test_redis_outage_does_not_block_chat(self, client: TestClient) -> None:
        redis_client = AsyncMock()
        redis_client.incr.side_effect = RedisConnectionError("connection refused")
        policy = RateLimitPolicy(RedisRateLimiter(redis_client, max_requests=1))
        app.dependency_overrides[get_rate_limit_policy] = lambda: policy

        for _ in range(3):
            assert send(client, {"message": "article 27"}).status_code == 200
        assert redis_client.incr.await_count == 3

    def test_bad_auth_header_is_401(self, client: TestClient) -> None:
        response = send(client, {"message": "article 27"}, {"Authorization": "Token abc"})

        assert response.status_code == 401

    def test_unexpected_failure_is_500(self, client: TestClient) -> None:
        broken = AsyncMock(spec=ChatService)
        broken.handle_message.side_effect = RuntimeError("boom")
        app.dependency_overrides[get_chat_service] = lambda: broken

        response = send(client, {"message": "article 27"})

        assert response.status_code == 500
        assert response.json()["detail"] == "internal error"


class TestSessions:
    """Session listing and lifecycle endpoints."""

    def test_categories(self, client: TestClient) -> None:
        response = client.get("/chat/categories")

        assert response.status_code == 200
        categories = response.json()["categories"]
        assert "Civil Law" in categories
        assert "General Inquiry" in categories

    def test_get_session_with_messages(self, client: TestClient) -> None:
        session_id = send(client, {"message": "article 27"}).json()["sessionId"]

        response = client.get(f"/chat/sessions/{session_id}", headers=USER)

        assert response.status_code == 200
        data = response.json()
        assert data["analytics"]["totalMessages"] == 2
        assert [m["role"] for m in data["messages"]] == ["user", "assistant"]

    def test_other_user_cannot_read_session(self, client: TestClient) -> None:
        session_id = send(client, {"message": "article 27"}).json()["sessionId"]

        response = client.get(f"/chat/sessions/{session_id}", headers=OTHER_USER)

        assert response.status_code == 404

    def test_list_sessions_paginates(self, client: TestClient) -> None:
        for question in ["article 27", "penal code", "contract"]:
            send(client, {"message": question})

        response = client.get("/chat/sessions", params={"limit": 2}, headers=USER)

        assert response.status_code == 200
        data = response.json()
        assert len(data["data"]) == 2
        assert data["pagination"] == {"current": 1, "pages": 2, "total": 3}

    def test_list_sessions_rejects_unknown_status(self, client: TestClient) -> None:
        response = client.get("/chat/sessions", params={"status": "paused"}, headers=USER)

        assert response.status_code == 400

    def test_complete_then_archive_conflicts(self, client: TestClient) -> None:
        session_id = send(client, {"message": "article 27"}).json()["sessionId"]

        completed = client.post(f"/chat/sessions/{session_id}/complete", headers=USER)
        archived = client.post(f"/chat/sessions/{session_id}/archive", headers=USER)

        assert completed.status_code == 200
        assert completed.json()["status"] == "completed"
        assert archived.status_code == 409

    def test_completed_sessions_listed_by_status(self, client: TestClient) -> None:
        session_id = send(client, {"message": "article 27"}).json()["sessionId"]
        client.post(f"/chat/sessions/{session_id}/complete", headers=USER)

        active = client.get("/chat/sessions", headers=USER).json()
        completed = client.get("/chat/sessions", params={"status": "completed"}, headers=USER).json()
        every = client.get("/chat/sessions", params={"status": "all"}, headers=USER).json()

        assert active["pagination"]["total"] == 0
        assert completed["data"][0]["sessionId"] == session_id
        assert every["pagination"]["total"] == 1

    def test_rate_session(self, client: TestClient) -> None:
        session_id = send(client, {"message": "article 27"}).json()["sessionId"]

        response = client.post(
            f"/chat/sessions/{session_id}/rate",
            json={"rating": 5, "comment": "clear", "categories": ["helpful"]},
            headers=USER,
        )

        assert response.status_code == 200
        assert response.json()["feedback"]["rating"] == 5

    def test_rating_out_of_range_is_422(self, client: TestClient) -> None:
        session_id = send(client, {"message": "article 27"}).json()["sessionId"]

        response = client.post(
            f"/chat/sessions/{session_id}/rate", json={"rating": 6}, headers=USER
        )

        assert response.status_code == 422

    def test_delete_session(self, client: TestClient) -> None:
        session_id = send(client, {"message": "article 27"}).json()["sessionId"]

        deleted = client.delete(f"/chat/sessions/{session_id}", headers=USER)
        fetched = client.get(f"/chat/sessions/{session_id}", headers=USER)

        assert deleted.status_code == 204
        assert fetched.status_code == 404

    def test_repeated_delete_is_204(self, client: TestClient) -> None:
        session_id = send(client, {"message": "article 27"}).json()["sessionId"]

        first = client.delete(f"/chat/sessions/{session_id}", headers=USER)
        second = client.delete(f"/chat/sessions/{session_id}", headers=USER)

        assert first.status_code == 204
        assert second.status_code == 204
        assert client.get(f"/chat/sessions/{session_id}", headers=USER).status_code == 404

    def test_other_user_cannot_delete_session(self, client: TestClient) -> None:
        session_id = send(client, {"message": "article 27"}).json()["sessionId"]

        response = client.delete(f"/chat/sessions/{session_id}", headers=OTHER_USER)

        assert response.status_code == 404
        assert client.get(f"/chat/sessions/{session_id}", headers=USER).status_code == 200
