"""Tests for the Ollama provider - HTTP boundary, retries and error mapping."""

from __future__ import annotations

from typing import Any

import httpx
import pytest
import tenacity

import docblocks.providers.ollama as ollama_mod
from docblocks.errors import LLMConnectionError, LLMError, LLMTimeoutError
from docblocks.providers import LLMProvider, OllamaProvider, get_provider
from docblocks.providers.ollama import extract_json, parse_json_object

URL = "http://127.0.0.1:11434"


class _FakeResponse:
    def __init__(self, *, status_code: int = 200, payload: Any = None) -> None:
        self.status_code = status_code
        self._payload = payload if payload is not None else {}

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            request = httpx.Request("POST", URL)
            raise httpx.HTTPStatusError(
                f"http {self.status_code}",
                request=request,
                response=httpx.Response(self.status_code, request=request),
            )

    def json(self) -> Any:
        return self._payload


class _FakeClient:
    """Stands in for httpx.Client; replays queued responses or exceptions."""

    def __init__(self, script: list[Any], calls: list[dict[str, Any]]) -> None:
        self._script = script
        self._calls = calls

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):  # noqa: ANN001
        return False

    def _next(self, method: str, url: str, body: Any = None):
        self._calls.append({"method": method, "url": url, "json": body})
        item = self._script.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def get(self, url: str):
        return self._next("GET", url)

    def post(self, url: str, json: dict[str, Any]):
        return self._next("POST", url, json)


@pytest.fixture
def fake_http(monkeypatch: pytest.MonkeyPatch):
    """Install a scripted httpx.Client; returns (script, calls)."""
    script: list[Any] = []
    calls: list[dict[str, Any]] = []

    def fake_client(*_args, **_kwargs):
        return _FakeClient(script, calls)

    monkeypatch.setattr(ollama_mod.httpx, "Client", fake_client)
    monkeypatch.setattr(OllamaProvider._post_chat.retry, "wait", tenacity.wait_none())
    return script, calls


def _chat(content: str) -> _FakeResponse:
    return _FakeResponse(payload={"message": {"role": "assistant", "content": content}})


class TestChat:
    """Chat requests."""

    def test_chat_text(self, fake_http) -> None:
        script, calls = fake_http
        script.append(_chat("  hello  "))

        provider = OllamaProvider(url=URL, model="m1")
        assert provider.chat_text(system="sys", user="hi", temperature=0.7) == "hello"

        payload = calls[0]["json"]
        assert calls[0]["url"] == f"{URL}/api/chat"
        assert payload["model"] == "m1"
        assert payload["stream"] is False
        assert payload["options"] == {"temperature": 0.7}
        assert payload["messages"] == [
            {"role": "system", "content": "sys"},
            {"role": "user", "content": "hi"},
        ]
        assert "format" not in payload

    def test_chat_json_requests_json_and_unwraps(self, fake_http) -> None:
        script, calls = fake_http
        script.append(_chat('```json\n{"blocks": []}\n```'))

        provider = OllamaProvider(url=URL, model="m1")
        assert provider.chat_json(system="s", user="u") == '{"blocks": []}'
        assert calls[0]["json"]["format"] == "json"
        assert calls[0]["json"]["options"] == {}

    def test_missing_message(self, fake_http) -> None:
        script, _ = fake_http
        script.append(_FakeResponse(payload={"done": True}))

        with pytest.raises(LLMError, match="missing message"):
            OllamaProvider(url=URL, model="m1").chat_text(system="s", user="u")

    def test_model_not_found(self, fake_http) -> None:
        script, _ = fake_http
        script.append(_FakeResponse(status_code=404))

        with pytest.raises(LLMError, match="not found") as exc_info:
            OllamaProvider(url=URL, model="ghost").chat_text(system="s", user="u")
        assert exc_info.value.model == "ghost"

    def test_server_error_is_not_retried(self, fake_http) -> None:
        script, calls = fake_http
        script.append(_FakeResponse(status_code=500))

        with pytest.raises(LLMError):
            OllamaProvider(url=URL, model="m1").chat_text(system="s", user="u")
        assert len(calls) == 1


class TestRetries:
    """Transient transport failures are retried, then mapped."""

    def test_recovers_after_timeout(self, fake_http) -> None:
        script, calls = fake_http
        script.extend([httpx.ReadTimeout("slow"), _chat("ok")])

        assert OllamaProvider(url=URL, model="m1").chat_text(system="s", user="u") == "ok"
        assert len(calls) == 2

    def test_connection_refused(self, fake_http) -> None:
        script, calls = fake_http
        script.extend([httpx.ConnectError("refused")] * ollama_mod.RETRY.MAX_ATTEMPTS)

        with pytest.raises(LLMConnectionError) as exc_info:
            OllamaProvider(url=URL, model="m1").chat_text(system="s", user="u")
        assert exc_info.value.recoverable is True
        assert exc_info.value.context["url"] == URL
        assert len(calls) == ollama_mod.RETRY.MAX_ATTEMPTS

    def test_timeout(self, fake_http) -> None:
        script, _ = fake_http
        script.extend([httpx.ReadTimeout("slow")] * ollama_mod.RETRY.MAX_ATTEMPTS)

        with pytest.raises(LLMTimeoutError):
            OllamaProvider(url=URL, model="m1").chat_text(system="s", user="u", timeout_seconds=5)


class TestModels:
    """Model listing, health and auto-selection."""

    def test_list_models_skips_malformed(self, fake_http) -> None:
        script, _ = fake_http
        script.append(_FakeResponse(payload={"models": [
            {"name": "llama3.2:3b", "size": 2 * 1024**3, "details": {"family": "llama"}},
            {"nope": 1},
            "x",
        ]}))

        models = OllamaProvider(url=URL).list_models()
        assert [m.name for m in models] == ["llama3.2:3b"]
        assert models[0].size_gb == 2.0
        assert models[0].description == "llama"

    def test_list_models_on_error(self, fake_http) -> None:
        script, _ = fake_http
        script.append(httpx.ConnectError("refused"))
        assert OllamaProvider(url=URL).list_models() == []

    def test_health(self, fake_http) -> None:
        script, _ = fake_http
        script.append(_FakeResponse(payload={"models": [{"name": "a"}, {"name": "b"}]}))

        health = OllamaProvider(url=URL, model="a").check_health()
        assert health.reachable is True
        assert health.model_count == 2
        assert health.current_model == "a"

    def test_health_unreachable(self, fake_http) -> None:
        script, _ = fake_http
        script.append(httpx.ConnectError("refused"))

        health = OllamaProvider(url=URL).check_health()
        assert health.reachable is False
        assert health.error

    def test_auto_selects_preferred_model(self, fake_http, monkeypatch: pytest.MonkeyPatch) -> None:
        script, calls = fake_http
        script.append(_FakeResponse(payload={"models": [{"name": "tinyllm"}, {"name": "qwen2.5:7b"}]}))
        script.append(_chat("ok"))

        provider = OllamaProvider(url=URL, model=None)
        monkeypatch.setattr(provider, "_model", None)
        provider.chat_text(system="s", user="u")
        assert calls[1]["json"]["model"] == "qwen2.5:7b"

    def test_no_models_installed(self, fake_http, monkeypatch: pytest.MonkeyPatch) -> None:
        script, _ = fake_http
        script.append(_FakeResponse(payload={"models": []}))

        provider = OllamaProvider(url=URL)
        monkeypatch.setattr(provider, "_model", None)
        with pytest.raises(LLMError, match="No Ollama model"):
            provider.chat_text(system="s", user="u")


class TestFactory:
    """Provider construction."""

    def test_get_provider(self) -> None:
        provider = get_provider(url=f"{URL}/", model="m1")
        assert isinstance(provider, OllamaProvider)
        assert isinstance(provider, LLMProvider)
        assert provider.provider_type == "ollama"


class TestJsonHelpers:
    """Pulling JSON out of chatty model output."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ('{"a": 1}', '{"a": 1}'),
            ('```json\n{"a": 1}\n```', '{"a": 1}'),
            ('Sure! {"a": 1} Hope that helps.', '{"a": 1}'),
            ("no json here", "no json here"),
        ],
    )
    def test_extract_json(self, raw: str, expected: str) -> None:
        assert extract_json(raw) == expected

    def test_parse_json_object(self) -> None:
        assert parse_json_object('{"a": 1}') == {"a": 1}
        assert parse_json_object("[1, 2]") is None
        assert parse_json_object("not json") is None
