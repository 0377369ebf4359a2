"""
Integration tests for the HTTP surface.

Most tests patch answer_query; the full-pipeline tests index temporary documents
and patch only the OpenAI calls.
"""

from unittest.mock import patch

import httpx
import openai
import pytest
from fastapi.testclient import TestClient

from app.core import config
from app.core.errors import ConfigurationError
from app.main import app


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


def test_root_returns_welcome_text(client: TestClient) -> None:
    response = client.get("/")
    assert response.status_code == 200
    assert response.text == "Welcome to the Llama Server!"
    assert response.headers["content-type"].startswith("text/plain")


def test_health(client: TestClient) -> None:
    assert client.get("/health").json() == {"ok": True}


def test_query_missing_field_returns_400(client: TestClient) -> None:
    """POST /query without query returns 400 and never touches the pipeline."""
    with patch("app.api.routes.answer_query") as mock_answer:
        response = client.post("/query", json={})
    assert response.status_code == 400
    assert response.json() == {"error": "Query not provided"}
    mock_answer.assert_not_called()


@pytest.mark.parametrize("body", [{"query": ""}, {"query": "   "}, {"query": None}])
def test_query_empty_returns_400(client: TestClient, body: dict) -> None:
    with patch("app.api.routes.answer_query") as mock_answer:
        response = client.post("/query", json=body)
    assert response.status_code == 400
    assert response.json() == {"error": "Query not provided"}
    mock_answer.assert_not_called()


def test_query_without_body_returns_400(client: TestClient) -> None:
    response = client.post("/query")
    assert response.status_code == 400
    assert response.json() == {"error": "Query not provided"}


def test_query_malformed_json_returns_400(client: TestClient) -> None:
    response = client.post("/query", content="not json", headers={"Content-Type": "application/json"})
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid request body"}


def test_query_non_string_returns_400(client: TestClient) -> None:
    response = client.post("/query", json={"query": 42})
    assert response.status_code == 400
    assert "error" in response.json()


def test_query_success_returns_response_string(client: TestClient) -> None:
    with patch("app.api.routes.answer_query", return_value="Zig Jackson won several awards.") as mock_answer:
        response = client.post("/query", json={"query": "What awards did Zig get?"})
    assert response.status_code == 200
    data = response.json()
    assert data == {"response": "Zig Jackson won several awards."}
    assert isinstance(data["response"], str)
    mock_answer.assert_called_once_with("What awards did Zig get?")


def test_query_internal_failure_returns_500_and_keeps_serving(client: TestClient) -> None:
    with patch("app.api.routes.answer_query", side_effect=RuntimeError("API unreachable")):
        response = client.post("/query", json={"query": "anything"})
    assert response.status_code == 500
    assert response.json() == {"error": "An error occurred while processing the query."}
    assert client.get("/").status_code == 200


def test_cors_allows_any_origin(client: TestClient) -> None:
    response = client.get("/", headers={"Origin": "http://example.com"})
    assert response.headers.get("access-control-allow-origin") == "*"


def test_startup_succeeds_with_api_key() -> None:
    with TestClient(app) as client:
        assert client.get("/").status_code == 200


def test_missing_api_key_aborts_startup(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    with pytest.raises(ConfigurationError, match="No OpenAI API key provided"):
        with TestClient(app):
            pass


def test_unknown_query_mode_aborts_startup(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(config, "QUERY_MODE", "routr")
    with pytest.raises(ConfigurationError, match="Unknown QUERY_MODE 'routr'"):
        with TestClient(app):
            pass


# --- Full pipeline: real loader, index, router and agent; only OpenAI calls are patched ---

@pytest.fixture
def router_data(tmp_path, monkeypatch: pytest.MonkeyPatch):
    entertainment = tmp_path / "entertainment"
    news = tmp_path / "news"
    entertainment.mkdir()
    news.mkdir()
    (entertainment / "zig.txt").write_text("Zig Jackson won an award for photography.", encoding="utf-8")
    (news / "bridge.txt").write_text("The bridge collapse happened after a ship struck it.", encoding="utf-8")
    monkeypatch.setattr(config, "ENTERTAINMENT_DATA_DIR", str(entertainment))
    monkeypatch.setattr(config, "NEWS_DATA_DIR", str(news))
    monkeypatch.setattr(config, "ROUTER_SOURCES", [
        (str(entertainment), "Useful for questions about Zig Jackson"),
        (str(news), "Useful for questions about the Francis Scott Key Bridge collapse"),
    ])
    monkeypatch.setattr(config, "QUERY_MODE", "router")
    monkeypatch.setattr(config, "USE_AGENT", True)
    monkeypatch.setattr(config, "CACHE_INDEXES", False)
    return tmp_path


def _tool_call(query: str) -> list[dict]:
    return [{"id": "call_1", "name": config.QUERY_TOOL_NAME, "arguments": {"input": query}}]


def test_query_runs_full_pipeline(client: TestClient, router_data, fake_embedder) -> None:
    question = "What hit the bridge?"
    with patch("app.services.vector_store.embed_texts", side_effect=fake_embedder), \
         patch("app.agent.graph.complete", return_value="2\nThe question is about the bridge.") as mock_select, \
         patch("app.services.query_engine.complete", return_value="A ship struck the bridge.") as mock_synth, \
         patch("app.agent.runner.chat_with_tools", side_effect=[
             (None, _tool_call(question)),
             ("A ship struck the bridge.", None),
         ]) as mock_chat:
        response = client.post("/query", json={"query": question})

    assert response.status_code == 200
    assert response.json() == {"response": "A ship struck the bridge."}
    mock_select.assert_called_once()
    # The news index answered: its chunk reached the synthesis prompt
    assert "ship struck it" in mock_synth.call_args.args[0]
    messages = mock_chat.call_args_list[0].args[0]
    assert messages[1] == {"role": "user", "content": f"{question} Use a tool."}
    assert messages[-1]["role"] == "tool"
    assert messages[-1]["content"] == "A ship struck the bridge."
    tool_names = [s["function"]["name"] for s in mock_chat.call_args_list[0].args[1]]
    assert tool_names == [config.QUERY_TOOL_NAME, "sumNumbers"]


def test_query_openai_failure_returns_500(client: TestClient, router_data, fake_embedder) -> None:
    api_error = openai.APIConnectionError(request=httpx.Request("POST", "https://api.openai.com/v1/chat/completions"))
    with patch("app.services.vector_store.embed_texts", side_effect=fake_embedder), \
         patch("app.agent.graph.complete", return_value="1"), \
         patch("app.services.query_engine.complete", return_value="unused"), \
         patch("app.agent.runner.chat_with_tools", side_effect=api_error):
        response = client.post("/query", json={"query": "Who is Zig Jackson?"})

    assert response.status_code == 500
    assert response.json() == {"error": "An error occurred while processing the query."}
    assert client.get("/").status_code == 200


def test_query_without_documents_returns_500(client: TestClient, router_data, fake_embedder) -> None:
    (router_data / "news" / "bridge.txt").unlink()
    with patch("app.services.vector_store.embed_texts", side_effect=fake_embedder), \
         patch("app.agent.runner.chat_with_tools") as mock_chat:
        response = client.post("/query", json={"query": "What hit the bridge?"})

    assert response.status_code == 500
    assert response.json() == {"error": "An error occurred while processing the query."}
    mock_chat.assert_not_called()
