"""
HTTP-level tests for the FastAPI app, with backends replaced by mocks.

The lifespan is not run: services are placed on app.state directly.
"""

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from shared.clients.history.memory.HistoryStoreMemory import HistoryStoreMemory
from conftest import make_match
from shared.errors import EmbeddingError, PersistenceError, RAGProcessingError, UpstreamServiceError
from server.api_server import app
from server.core.ChatService import ChatOutcome, ChatService
from server.core.DecisionEngine import RoutingDecision
from server.core.HistoryService import HistoryService
from server.models.history import InteractionRecord
from server.models.responses import ChatResponse, SearchMatch, SearchResponse, SourceItem

TIMESTAMP = "2024-05-01T12:00:00.000Z"


def make_outcome(question: str = "What is RAG?", used_rag: bool = False) -> ChatOutcome:
    sources = [SourceItem(id="doc-1", score=0.9, title="Intro", content="Preview")] if used_rag else []
    return ChatOutcome(
        response=ChatResponse(
            question=question,
            answer="An answer",
            used_rag=used_rag,
            sources=sources,
            context_used=used_rag,
            agent_decision="RAG" if used_rag else "GENERAL",
            timestamp=TIMESTAMP,
        ),
        record=InteractionRecord(question=question, answer="An answer", used_rag=used_rag, timestamp=TIMESTAMP),
    )


@pytest.fixture
def chat_service():
    service = AsyncMock()
    service.chat.return_value = make_outcome()
    return service


@pytest.fixture
def document_service():
    return AsyncMock()


@pytest.fixture
def decision_engine():
    engine = AsyncMock()
    engine.classify.return_value = RoutingDecision.GENERAL
    return engine


@pytest.fixture
def history_service(helper_config, monkeypatch):
    monkeypatch.delenv("HISTORY_SESSION", raising=False)
    monkeypatch.delenv("HISTORY_MAX_ENTRIES", raising=False)
    return HistoryService(helper_config=helper_config, store=HistoryStoreMemory(helper_config=helper_config))


@pytest.fixture
def client(logger, helper_config, chat_service, document_service, decision_engine, history_service):
    app.state.logging = logger
    app.state.helper_config = helper_config
    app.state.chat_service = chat_service
    app.state.document_service = document_service
    app.state.decision_engine = decision_engine
    app.state.history_service = history_service
    return TestClient(app)


def assert_cors(response):
    assert response.headers["Access-Control-Allow-Origin"] == "*"
    assert response.headers["Access-Control-Allow-Methods"] == "GET, POST, PUT, DELETE, OPTIONS"
    assert response.headers["Access-Control-Allow-Headers"] == "Content-Type"


class TestChatEndpoint:
    """Tests for POST /chat."""

    @pytest.mark.parametrize("body", [{"question": ""}, {}, {"topK": 2}])
    def test_missing_question(self, client, chat_service, body):
        response = client.post("/chat", json=body)

        assert response.status_code == 400
        assert response.json() == {"error": "Question is required"}
        assert_cors(response)
        chat_service.chat.assert_not_called()

    def test_malformed_json(self, client):
        response = client.post("/chat", content="{not json", headers={"Content-Type": "application/json"})

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid request body"

    def test_general_answer(self, client, chat_service):
        response = client.post("/chat", json={"question": "What is RAG?"})

        assert response.status_code == 200
        assert response.json() == {
            "question": "What is RAG?",
            "answer": "An answer",
            "usedRAG": False,
            "sources": [],
            "context_used": False,
            "agentDecision": "GENERAL",
            "timestamp": TIMESTAMP,
        }
        assert_cors(response)
        chat_service.chat.assert_awaited_once_with("What is RAG?", top_k=3, force_rag=False)

    def test_rag_answer_with_options(self, client, chat_service):
        chat_service.chat.return_value = make_outcome("Find the policy document", used_rag=True)

        response = client.post("/chat", json={"question": "Find the policy document", "topK": 5, "forceRAG": True})

        assert response.status_code == 200
        data = response.json()
        assert data["usedRAG"] is True
        assert data["agentDecision"] == "RAG"
        assert data["sources"] == [{"id": "doc-1", "score": 0.9, "title": "Intro", "content": "Preview"}]
        chat_service.chat.assert_awaited_once_with("Find the policy document", top_k=5, force_rag=True)

    def test_interaction_is_saved(self, client, history_service):
        client.post("/chat", json={"question": "What is RAG?"})
        client.post("/chat", json={"question": "What is RAG?"})

        response = client.get("/agent/history")
        assert response.status_code == 200
        assert response.json()["history"] == [
            {"question": "What is RAG?", "answer": "An answer", "usedRAG": False, "timestamp": TIMESTAMP},
        ] * 2

    def test_failed_save_does_not_affect_response(self, client, helper_config):
        store = AsyncMock()
        store.get_list.side_effect = PersistenceError("store unreachable")
        app.state.history_service = HistoryService(helper_config=helper_config, store=store)

        response = client.post("/chat", json={"question": "What is RAG?"})

        assert response.status_code == 200
        assert response.json()["answer"] == "An answer"

    def test_rag_answer_with_numeric_title(self, client, helper_config, embed_client, vector_client, llm_client, decision_engine):
        vector_client.do_query.return_value = [make_match(score=0.9, title=2024, content="Alpha")]
        app.state.chat_service = ChatService(
            helper_config=helper_config,
            decision_engine=decision_engine,
            embed_client=embed_client,
            vector_client=vector_client,
            llm_client=llm_client,
        )

        response = client.post("/chat", json={"question": "Summarise the 2024 report", "forceRAG": True})

        assert response.status_code == 200
        data = response.json()
        assert data["sources"] == [{"id": "doc-1", "score": 0.9, "title": 2024, "content": "Alpha"}]
        assert data["answer"] == "Generated answer"

    def test_pipeline_failure(self, client, chat_service):
        chat_service.chat.side_effect = RAGProcessingError("RAG processing failed: vectorize API error (500)")

        response = client.post("/chat", json={"question": "What is RAG?"})

        assert response.status_code == 500
        assert response.json() == {
            "error": "Failed to process chat request",
            "details": "RAG processing failed: vectorize API error (500)",
        }
        assert_cors(response)


class TestDocumentEndpoints:
    """Tests for POST /insert and POST /search."""

    @pytest.mark.parametrize("body", [{}, {"documents": "not a list"}, {"documents": None}])
    def test_insert_requires_array(self, client, document_service, body):
        response = client.post("/insert", json=body)

        assert response.status_code == 400
        assert response.json() == {"error": "Documents array is required"}
        document_service.insert.assert_not_called()

    def test_insert_success(self, client, document_service):
        document_service.insert.return_value = 2

        response = client.post("/insert", json={"documents": ["a", {"content": "b", "title": "B"}]})

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "inserted": 2,
            "message": "Successfully inserted 2 documents",
        }
        document_service.insert.assert_awaited_once_with(["a", {"content": "b", "title": "B"}])

    def test_insert_without_embeddings(self, client, document_service):
        document_service.insert.side_effect = EmbeddingError("No embedding data received")

        response = client.post("/insert", json={"documents": ["a"]})

        assert response.status_code == 500
        assert response.json() == {"error": "No embedding data received"}

    def test_insert_upstream_failure(self, client, document_service):
        document_service.insert.side_effect = UpstreamServiceError("vectorize API error", status_code=400)

        response = client.post("/insert", json={"documents": ["a"]})

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to insert documents", "details": "vectorize API error (400)"}

    def test_search_requires_query(self, client):
        response = client.post("/search", json={"query": ""})

        assert response.status_code == 400
        assert response.json() == {"error": "Query is required"}

    def test_search_success(self, client, document_service):
        document_service.search.return_value = SearchResponse(
            query="refunds",
            matches=[SearchMatch(id="doc-1", score=0.8, title="Refunds", content="Full text", source="faq", timestamp=TIMESTAMP)],
        )

        response = client.post("/search", json={"query": "refunds", "topK": 2})

        assert response.status_code == 200
        assert response.json() == {
            "query": "refunds",
            "matches": [{
                "id": "doc-1",
                "score": 0.8,
                "title": "Refunds",
                "content": "Full text",
                "source": "faq",
                "timestamp": TIMESTAMP,
            }],
        }
        document_service.search.assert_awaited_once_with("refunds", top_k=2)

    def test_search_without_embeddings(self, client, document_service):
        document_service.search.side_effect = EmbeddingError("No embedding data received")

        response = client.post("/search", json={"query": "refunds"})

        assert response.status_code == 500
        assert response.json() == {"error": "No query vector data received"}

    def test_search_upstream_failure(self, client, document_service):
        document_service.search.side_effect = UpstreamServiceError("vectorize API error", status_code=503)

        response = client.post("/search", json={"query": "refunds"})

        assert response.status_code == 500
        assert response.json()["error"] == "Search failed"


class TestAgentEndpoints:
    """Tests for the /agent routes."""

    def test_decision_test(self, client, decision_engine):
        decision_engine.classify.return_value = RoutingDecision.RAG

        response = client.post("/agent/test", json={"question": "Check the archived documents"})

        assert response.status_code == 200
        assert response.json() == {
            "question": "Check the archived documents",
            "decision": "RAG",
            "reasoning": "This question appears to require specific document search",
        }

    def test_decision_test_requires_question(self, client):
        response = client.post("/agent/test", json={})

        assert response.status_code == 400
        assert response.json() == {"error": "Question is required"}

    def test_status(self, client):
        data = client.get("/agent/status").json()

        assert data["status"] == "Agent is running"
        assert data["capabilities"] == ["RAG decision-making", "Document search", "General conversation"]
        assert data["timestamp"].endswith("Z")

    def test_empty_history_and_stats(self, client):
        assert client.get("/agent/history").json() == {"history": []}
        assert client.get("/agent/stats").json() == {
            "totalInteractions": 0,
            "ragUsage": 0,
            "generalUsage": 0,
            "ragPercentage": 0,
        }

    def test_stats_after_chats(self, client, chat_service):
        chat_service.chat.side_effect = [
            make_outcome(used_rag=True),
            make_outcome(used_rag=False),
            make_outcome(used_rag=False),
        ]
        for _ in range(3):
            client.post("/chat", json={"question": "What is RAG?"})

        assert client.get("/agent/stats").json() == {
            "totalInteractions": 3,
            "ragUsage": 1,
            "generalUsage": 2,
            "ragPercentage": 33,
        }

    def test_history_failure(self, client):
        failing = AsyncMock()
        failing.history.side_effect = PersistenceError("Failed to retrieve history: boom")
        failing.stats.side_effect = PersistenceError("Failed to retrieve history: boom")
        app.state.history_service = failing

        history = client.get("/agent/history")
        stats = client.get("/agent/stats")

        assert history.status_code == 500
        assert history.json()["error"] == "Failed to get agent history"
        assert stats.status_code == 500
        assert stats.json()["error"] == "Failed to get agent stats"


class TestSystemEndpoints:
    """Tests for health, CORS preflight, favicon and discovery."""

    def test_health(self, client):
        data = client.get("/health").json()

        assert data["status"] == "healthy"
        assert data["timestamp"].endswith("Z")

    @pytest.mark.parametrize("path", ["/chat", "/insert", "/anything/else"])
    def test_preflight(self, client, path):
        response = client.options(path)

        assert response.status_code == 200
        assert response.content == b""
        assert_cors(response)

    def test_favicon(self, client):
        response = client.get("/favicon.ico")

        assert response.status_code == 404
        assert response.content == b""

    @pytest.mark.parametrize("method, path", [("GET", "/"), ("GET", "/unknown"), ("POST", "/nope"), ("GET", "/chat")])
    def test_discovery(self, client, method, path):
        response = client.request(method, path)

        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "RAG API Server with Intelligent Agent"
        assert "POST /chat" in data["endpoints"]
        assert_cors(response)
