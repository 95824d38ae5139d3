"""Tests for the ordered endpoint walk in :mod:`newsflow.services.gemini`."""

from __future__ import annotations

import requests

from newsflow.config import GeminiEndpoint
from newsflow.services.gemini import GeminiClient, GenerationConfig, extract_text


def gemini_payload(text: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


class DummyResponse:
    def __init__(self, payload, status_code: int = 200) -> None:
        self._payload = payload
        self.status_code = status_code

    def json(self):
        return self._payload

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"HTTP {self.status_code}")


class ScriptedSession:
    """Returns (or raises) one scripted outcome per POST, in order."""

    def __init__(self, *outcomes) -> None:
        self.outcomes = list(outcomes)
        self.calls: list[dict] = []

    def post(self, url, params=None, json=None, timeout=None):
        self.calls.append({"url": url, "params": params, "json": json, "timeout": timeout})
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


ENDPOINTS = [GeminiEndpoint(name=f"e{index}", url=f"https://gemini.test/{index}") for index in range(3)]
LEGACY = GeminiEndpoint(name="legacy", url="https://gemini.test/legacy")


def test_extract_text_handles_unexpected_shapes() -> None:
    assert extract_text(gemini_payload("hello")) == "hello"
    assert extract_text(gemini_payload("   ")) is None
    assert extract_text({"candidates": []}) is None
    assert extract_text(None) is None


def test_first_successful_endpoint_wins() -> None:
    session = ScriptedSession(DummyResponse(gemini_payload("first")))
    client = GeminiClient(ENDPOINTS, LEGACY, session=session)

    outcome = client.generate("key", "prompt", GenerationConfig(), timeout=15)

    assert outcome.text == "first"
    assert outcome.attempts == 1
    assert outcome.variant == 0
    assert len(session.calls) == 1
    assert session.calls[0]["params"] == {"key": "key"}
    assert session.calls[0]["timeout"] == 15
    assert session.calls[0]["json"]["generationConfig"]["maxOutputTokens"] == 1024


def test_failures_move_on_to_the_next_endpoint_in_order() -> None:
    session = ScriptedSession(
        requests.Timeout("slow"),
        DummyResponse({"candidates": []}),
        DummyResponse(gemini_payload("third")),
    )
    client = GeminiClient(ENDPOINTS, LEGACY, session=session)

    outcome = client.generate("key", ["p0", "p1", "p2"], GenerationConfig(), timeout=10)

    assert outcome.text == "third"
    assert outcome.attempts == 3
    assert outcome.variant == 2
    assert outcome.endpoint == "e2"
    assert len(outcome.errors) == 2
    assert [call["url"] for call in session.calls] == [endpoint.url for endpoint in ENDPOINTS]
    assert [call["json"]["contents"][0]["parts"][0]["text"] for call in session.calls] == ["p0", "p1", "p2"]


def test_http_errors_and_rejected_text_exhaust_all_endpoints() -> None:
    session = ScriptedSession(
        DummyResponse({}, status_code=404),
        DummyResponse(gemini_payload("\n\n")),
        DummyResponse(gemini_payload("unusable")),
    )
    client = GeminiClient(ENDPOINTS, LEGACY, session=session)

    outcome = client.generate(
        "key", "prompt", GenerationConfig(), timeout=10, accept=lambda text: text != "unusable"
    )

    assert not outcome.succeeded
    assert outcome.attempts == 3
    assert outcome.variant is None


def test_legacy_request_uses_prompt_shape() -> None:
    session = ScriptedSession(DummyResponse(gemini_payload("legacy summary")))
    client = GeminiClient(ENDPOINTS, LEGACY, session=session)

    text = client.generate_legacy("key", "Summarize this", timeout=15)

    assert text == "legacy summary"
    assert session.calls[0]["url"] == LEGACY.url
    assert session.calls[0]["json"] == {
        "prompt": {"text": "Summarize this"},
        "temperature": 0.2,
        "maxOutputTokens": 800,
    }


def test_legacy_request_failure_returns_none() -> None:
    client = GeminiClient(ENDPOINTS, LEGACY, session=ScriptedSession(requests.ConnectionError("down")))

    assert client.generate_legacy("key", "text", timeout=1) is None
