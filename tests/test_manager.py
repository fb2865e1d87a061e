"""Tests for the summarization manager against a fake HTTP backend."""

import httpx
import pytest

from rewriter.errors import (
    BackendProtocolError,
    BackendTransportError,
    EmptyResponseError,
    ProfileNotFoundError,
)
from rewriter.summarizer.manager import SummarizationManager
from rewriter.summarizer.models import BackendType


def _ollama_ok(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, json={"response": "  Polished text.  ", "done": True})


def _openai_ok(request: httpx.Request) -> httpx.Response:
    return httpx.Response(
        200, json={"choices": [{"message": {"role": "assistant", "content": " Hi! "}}]}
    )


@pytest.mark.anyio
@pytest.mark.parametrize("text", ["", "um so basically", "  padded  \n"])
async def test_raw_profile_is_pass_through(manager, backend, text):
    assert await manager.process(text, "raw") == text
    assert backend.requests == []


@pytest.mark.anyio
async def test_unknown_profile_raises_without_network(manager, backend):
    with pytest.raises(ProfileNotFoundError):
        await manager.process("hello", "does_not_exist")
    assert backend.requests == []


@pytest.mark.anyio
async def test_process_with_ollama_backend(manager, backend, store):
    store.update(llm_endpoint="http://ollama.local:11434/", llm_model="llama3.2")
    backend.handler = _ollama_ok

    result = await manager.process("send the report friday", "professional")

    assert result == "Polished text."
    assert len(backend.requests) == 1
    request = backend.requests[0]
    assert request.method == "POST"
    assert str(request.url) == "http://ollama.local:11434/api/generate"
    body = backend.last_json()
    assert body["model"] == "llama3.2"
    assert body["stream"] is False
    assert body["options"] == {"temperature": 0.3, "top_p": 0.9}
    assert body["prompt"].startswith("System: You are a professional writing assistant.")
    assert body["prompt"].endswith(
        "\n\nUser: Convert this speech transcription into professional text:"
        "\n\nsend the report friday"
    )


@pytest.mark.anyio
async def test_v1_endpoint_selects_openai_even_with_ollama_hint(manager, backend, store):
    store.update(
        llm_endpoint="http://host/v1/",
        llm_model="mistral-small",
        llm_api_type=BackendType.OLLAMA,
    )
    backend.handler = _openai_ok

    result = await manager.process("hello there", "email")

    assert result == "Hi!"
    assert str(backend.requests[0].url) == "http://host/chat/completions"
    body = backend.last_json()
    assert body["model"] == "mistral-small"
    assert body["temperature"] == 0.3
    assert body["max_tokens"] == 1000
    assert [m["role"] for m in body["messages"]] == ["system", "user"]
    assert body["messages"][1]["content"].endswith("\n\nhello there")


@pytest.mark.anyio
async def test_openai_hint_selects_openai_for_plain_endpoint(manager, backend, store):
    store.update(llm_endpoint="http://host:11434", llm_api_type=BackendType.OPENAI)
    backend.handler = _openai_ok

    await manager.process("hello", "notes")

    assert str(backend.requests[0].url) == "http://host:11434/chat/completions"


@pytest.mark.anyio
async def test_request_timeout_follows_user_setting(manager, backend, store):
    store.update(llm_timeout_seconds=42)
    backend.handler = _ollama_ok

    await manager.process("hello", "notes")

    timeout = backend.requests[0].extensions["timeout"]
    assert timeout["read"] == 42.0
    assert timeout["connect"] == 2.0


@pytest.mark.anyio
@pytest.mark.parametrize("api_type", [BackendType.OLLAMA, BackendType.OPENAI])
async def test_non_success_status_surfaces_protocol_error(
    manager, backend, store, api_type
):
    store.update(llm_api_type=api_type)
    backend.handler = lambda request: httpx.Response(500, text="internal failure")

    with pytest.raises(BackendProtocolError) as excinfo:
        await manager.process("hello", "notes")

    assert excinfo.value.status_code == 500
    assert "internal failure" in excinfo.value.body
    assert len(backend.requests) == 1


@pytest.mark.anyio
async def test_empty_choices_surfaces_empty_response(manager, backend, store):
    store.update(llm_api_type=BackendType.OPENAI)
    backend.handler = lambda request: httpx.Response(200, json={"choices": []})

    with pytest.raises(EmptyResponseError):
        await manager.process("hello", "notes")


@pytest.mark.anyio
async def test_connection_failure_surfaces_transport_error(manager, backend):
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    backend.handler = refuse

    with pytest.raises(BackendTransportError):
        await manager.process("hello", "notes")
    assert len(backend.requests) == 1


@pytest.mark.anyio
async def test_timeout_surfaces_transport_error(manager, backend):
    def slow(request):
        raise httpx.ReadTimeout("timed out", request=request)

    backend.handler = slow

    with pytest.raises(BackendTransportError):
        await manager.process("hello", "notes")


@pytest.mark.anyio
async def test_process_active_respects_enabled_flag(manager, backend, store):
    store.update(enable_summarization=False, active_profile_id="notes")
    assert await manager.process_active("as spoken") == "as spoken"
    assert backend.requests == []

    store.update(enable_summarization=True)
    backend.handler = _ollama_ok
    assert await manager.process_active("as spoken") == "Polished text."
    assert len(backend.requests) == 1


@pytest.mark.anyio
async def test_process_active_falls_back_to_raw_for_unknown_profile(
    manager, backend, store
):
    store.update(enable_summarization=True, active_profile_id="gone")
    assert await manager.process_active("as spoken") == "as spoken"
    assert backend.requests == []


@pytest.mark.anyio
async def test_resolve_active_profile(manager, store):
    store.update(enable_summarization=False, active_profile_id="notes")
    assert manager.resolve_active_profile() == "raw"

    store.update(enable_summarization=True)
    assert manager.resolve_active_profile() == "notes"

    store.update(active_profile_id="gone")
    assert manager.resolve_active_profile() == "raw"


@pytest.mark.anyio
async def test_check_availability_true_on_success(manager, backend, store):
    store.update(llm_endpoint="http://host:11434/")
    backend.handler = lambda request: httpx.Response(200, json={"version": "0.5.1"})

    assert await manager.check_availability() is True
    assert str(backend.requests[0].url) == "http://host:11434/api/version"
    assert backend.requests[0].method == "GET"


@pytest.mark.anyio
async def test_check_availability_false_on_error_status(manager, backend):
    backend.handler = lambda request: httpx.Response(404, text="not found")
    assert await manager.check_availability() is False


@pytest.mark.anyio
async def test_check_availability_false_on_transport_error(manager, backend):
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    backend.handler = refuse
    assert await manager.check_availability() is False


@pytest.mark.anyio
@pytest.mark.parametrize("endpoint", ["localhost:11434", "http://", "", "ftp://x"])
async def test_check_availability_false_on_malformed_endpoint(
    store, service_settings, endpoint
):
    store.update(llm_endpoint=endpoint)
    manager = SummarizationManager(store, settings=service_settings)
    try:
        assert await manager.check_availability() is False
    finally:
        await manager.aclose()


@pytest.mark.anyio
async def test_list_models(manager, backend):
    backend.handler = lambda request: httpx.Response(
        200,
        json={
            "models": [
                {"name": "llama3.2:latest", "size": 1},
                {"name": "mistral:7b", "size": 2},
            ]
        },
    )

    assert await manager.list_models() == ["llama3.2:latest", "mistral:7b"]
    assert backend.requests[0].url.path == "/api/tags"


@pytest.mark.anyio
async def test_list_models_error_status_raises(manager, backend):
    backend.handler = lambda request: httpx.Response(502, text="bad gateway")
    with pytest.raises(BackendProtocolError) as excinfo:
        await manager.list_models()
    assert excinfo.value.status_code == 502


@pytest.mark.anyio
@pytest.mark.parametrize(
    "body",
    [
        {"tags": []},
        {"models": [{"model": "x"}]},
        {"models": "llama"},
        {"models": [{"name": None}]},
        {"models": [{"name": "ok"}, {"name": 7}]},
    ],
)
async def test_list_models_unexpected_shape_raises(manager, backend, body):
    backend.handler = lambda request: httpx.Response(200, json=body)
    with pytest.raises(BackendProtocolError):
        await manager.list_models()


@pytest.mark.anyio
async def test_list_models_transport_error_raises(manager, backend):
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    backend.handler = refuse
    with pytest.raises(BackendTransportError):
        await manager.list_models()
