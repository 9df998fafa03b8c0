"""Summary: Tests for remote classifier providers and helpers.

Importance: Ensures model replies are parsed, normalized, and retried correctly.
Alternatives: Exercise providers only against live endpoints.
"""

from __future__ import annotations

import io
import json
import urllib.error
import urllib.request
from dataclasses import replace
from typing import Any

import pytest

from triagedesk.ai import (
    ClassifierFactory,
    GroqProvider,
    RemoteTriageProvider,
    build_prompt,
    parse_json_from_text,
    with_retries,
)
from triagedesk.classifier import RuleBasedClassifier
from triagedesk.config import AppConfig


class _FakeResponse(io.BytesIO):
    def __enter__(self) -> "_FakeResponse":
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


def _install_urlopen(monkeypatch: pytest.MonkeyPatch, body: Any, calls: list[Any]) -> None:
    def fake_urlopen(request: urllib.request.Request, timeout: int = 0) -> _FakeResponse:
        calls.append(request)
        raw = body if isinstance(body, str) else json.dumps(body)
        return _FakeResponse(raw.encode("utf-8"))

    monkeypatch.setattr(urllib.request, "urlopen", fake_urlopen)


def _completion(content: str) -> dict[str, Any]:
    return {"choices": [{"message": {"content": content}}]}


def _build_config(**overrides: Any) -> AppConfig:
    config = AppConfig(
        db_path="unused.db",
        classifier_provider="mock",
        groq_api_key=None,
        groq_model="llama-3.3-70b-versatile",
        groq_base_url="https://api.groq.com/openai/v1",
        triage_api_url="http://localhost:3001",
        cache_ttl_seconds=600,
        classifier_retries=2,
        retry_backoff_ms=300,
        request_timeout_seconds=30,
        bulk_limit=50,
        api_host="127.0.0.1",
        api_port=3001,
        api_key="",
    )
    return replace(config, **overrides)


def test_parse_json_from_text_handles_wrapped_json() -> None:
    """Summary: JSON is recovered from prose or fenced replies.

    Importance: Models often add commentary around the object.
    Alternatives: Require pure JSON replies.
    """

    assert parse_json_from_text('{"a": 1}') == {"a": 1}
    assert parse_json_from_text('Sure! ```json\n{"a": 2}\n``` hope it helps') == {"a": 2}
    assert parse_json_from_text("no json here") is None
    assert parse_json_from_text("[1, 2]") is None


def test_build_prompt_lists_categories() -> None:
    messages = build_prompt("Server is down")
    assert [message["role"] for message in messages] == ["system", "user"]
    assert "Billing Issue" in messages[1]["content"]
    assert "Server is down" in messages[1]["content"]


def test_with_retries_backs_off_then_succeeds() -> None:
    attempts: list[int] = []
    sleeps: list[float] = []

    def flaky() -> str:
        attempts.append(1)
        if len(attempts) < 3:
            raise RuntimeError("boom")
        return "ok"

    assert with_retries(flaky, retries=2, backoff_ms=300, sleep=sleeps.append) == "ok"
    assert sleeps == [0.3, 0.6]


def test_with_retries_raises_when_exhausted() -> None:
    """Summary: The last error propagates once retries run out.

    Importance: Callers decide how to fall back.
    Alternatives: Return None after the final failure.
    """

    sleeps: list[float] = []

    def failing() -> str:
        raise RuntimeError("still down")

    with pytest.raises(RuntimeError):
        with_retries(failing, retries=1, backoff_ms=100, sleep=sleeps.append)
    assert sleeps == [0.1]


def test_with_retries_doubles_the_delay() -> None:
    sleeps: list[float] = []

    def failing() -> str:
        raise RuntimeError("still down")

    with pytest.raises(RuntimeError):
        with_retries(failing, retries=3, backoff_ms=100, sleep=sleeps.append)
    assert sleeps == [0.1, 0.2, 0.4]


def test_groq_provider_parses_reply(monkeypatch: pytest.MonkeyPatch) -> None:
    """Summary: A well-formed completion becomes a normalized classification.

    Importance: Invalid categories are dropped and the model name is recorded.
    Alternatives: Pass the raw completion to callers.
    """

    calls: list[Any] = []
    content = json.dumps(
        {
            "primaryCategory": "Outage",
            "categories": ["Outage", "Made Up", "Technical Problem"],
            "confidence": 0.92,
            "reasoning": "Service is down.",
        }
    )
    _install_urlopen(monkeypatch, _completion(content), calls)
    provider = GroqProvider("gsk-test", "llama-test", "https://api.example.com/v1/")
    result = provider.classify("Everything is down")
    assert result.primary_category == "Outage"
    assert result.categories == ["Outage", "Technical Problem"]
    assert result.confidence == 0.92
    assert result.model == "llama-test"
    request = calls[0]
    assert request.full_url == "https://api.example.com/v1/chat/completions"
    assert request.get_header("Authorization") == "Bearer gsk-test"
    body = json.loads(request.data.decode("utf-8"))
    assert body["temperature"] == 0.2


def test_groq_provider_fills_missing_fields(monkeypatch: pytest.MonkeyPatch) -> None:
    _install_urlopen(monkeypatch, _completion('{"categories": ["billing issue"]}'), [])
    result = GroqProvider("key", "model", "https://api.example.com").classify("Refund?")
    assert result.primary_category == "Billing Issue"
    assert result.confidence == 0.5
    assert result.reasoning == "No reasoning provided."


def test_groq_provider_rejects_garbage(monkeypatch: pytest.MonkeyPatch) -> None:
    _install_urlopen(monkeypatch, _completion("I cannot help with that."), [])
    with pytest.raises(RuntimeError):
        GroqProvider("key", "model", "https://api.example.com").classify("hello")
    _install_urlopen(monkeypatch, {"unexpected": True}, [])
    with pytest.raises(RuntimeError):
        GroqProvider("key", "model", "https://api.example.com").classify("hello")


def test_network_errors_become_runtime_errors(monkeypatch: pytest.MonkeyPatch) -> None:
    def broken(request: urllib.request.Request, timeout: int = 0) -> None:
        raise urllib.error.URLError("connection refused")

    monkeypatch.setattr(urllib.request, "urlopen", broken)
    with pytest.raises(RuntimeError):
        GroqProvider("key", "model", "https://api.example.com").classify("hello")
    with pytest.raises(RuntimeError):
        RemoteTriageProvider("http://localhost:3001").classify("hello")


def test_remote_provider_posts_to_triage(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[Any] = []
    payload = {"primaryCategory": "Billing Issue", "categories": ["Billing Issue"], "confidence": 0.8}
    _install_urlopen(monkeypatch, payload, calls)
    result = RemoteTriageProvider("http://triage.local/").classify("Invoice is wrong")
    assert calls[0].full_url == "http://triage.local/api/triage"
    assert result.primary_category == "Billing Issue"


def test_factory_selects_provider() -> None:
    """Summary: The factory maps the provider name onto a classifier.

    Importance: Misconfiguration fails fast at startup.
    Alternatives: Silently default to the rule-based classifier.
    """

    assert isinstance(ClassifierFactory(_build_config()).build(), RuleBasedClassifier)
    groq = ClassifierFactory(_build_config(classifier_provider="groq", groq_api_key="k")).build()
    assert isinstance(groq, GroqProvider)
    remote = ClassifierFactory(_build_config(classifier_provider="remote")).build()
    assert isinstance(remote, RemoteTriageProvider)
    with pytest.raises(ValueError):
        ClassifierFactory(_build_config(classifier_provider="groq")).build()
    with pytest.raises(ValueError):
        ClassifierFactory(_build_config(classifier_provider="psychic")).build()
