"""Tests for interest-driven query generation and per-page selection."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
import requests

from newsflow.config import GeminiEndpoint
from newsflow.errors import InvalidRequestError
from newsflow.services.gemini import GeminiClient
from newsflow.services.queries import (
    build_query_prompt,
    fallback_query,
    generate_queries,
    parse_queries,
    select_query,
)


def gemini_payload(text: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


class DummyResponse:
    def __init__(self, payload) -> None:
        self._payload = payload
        self.status_code = 200

    def json(self):
        return self._payload

    def raise_for_status(self) -> None:
        return None


class ScriptedSession:
    def __init__(self, *outcomes) -> None:
        self.outcomes = list(outcomes)
        self.calls: list[dict] = []

    def post(self, url, params=None, json=None, timeout=None):
        self.calls.append({"url": url, "json": json, "timeout": timeout})
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def make_client(*outcomes) -> tuple[GeminiClient, ScriptedSession]:
    session = ScriptedSession(*outcomes)
    endpoints = [GeminiEndpoint(name=f"e{index}", url=f"https://gemini.test/{index}") for index in range(3)]
    return GeminiClient(endpoints, session=session), session


MARCH_15_MS = int(datetime(2024, 3, 15, 12, tzinfo=timezone.utc).timestamp() * 1000)


def test_parse_queries_drops_blank_lines_and_markers() -> None:
    """List markers, quotes and blank lines are stripped from model output."""

    text = "\n1. quantum error correction breakthrough\n\n- \"IBM quantum roadmap\"\n* qubit startups funding\nextra"

    assert parse_queries(text) == [
        "quantum error correction breakthrough",
        "IBM quantum roadmap",
        "qubit startups funding",
    ]
    assert parse_queries("   \n\n") == []
    assert parse_queries(None) == []


def test_prompt_mentions_freshness_and_page_only_when_given() -> None:
    """Freshness and page hints appear only when a timestamp or later page is given."""

    plain = build_query_prompt(["AI", "Chips"])
    nudged = build_query_prompt(["AI"], page=3, timestamp=MARCH_15_MS)

    assert "AI, Chips" in plain
    assert "freshness" not in plain
    assert "different from previous queries" not in plain
    assert f"timestamp: {MARCH_15_MS}" in nudged
    assert "(page: 3)" in nudged


def test_generate_queries_returns_at_most_three() -> None:
    """No more than three queries are kept from a longer answer."""

    client, session = make_client(DummyResponse(gemini_payload("a\nb\nc\nd")))

    queries = generate_queries(client, "key", ["AI"], page=1)

    assert queries == ["a", "b", "c"]
    assert session.calls[0]["timeout"] == 10.0
    assert session.calls[0]["json"]["generationConfig"]["temperature"] == 0.7


def test_empty_response_tries_next_endpoint() -> None:
    """A blank answer moves on to the next endpoint."""

    client, session = make_client(
        DummyResponse(gemini_payload("\n  \n")),
        DummyResponse(gemini_payload("solar storage news")),
    )

    assert generate_queries(client, "key", ["Energy"]) == ["solar storage news"]
    assert len(session.calls) == 2


@pytest.mark.parametrize(
    "outcomes",
    [
        (requests.ConnectionError("a"), requests.ConnectionError("b"), requests.ConnectionError("c")),
        tuple(DummyResponse(gemini_payload("\n")) for _ in range(3)),
        tuple(DummyResponse({}) for _ in range(3)),
    ],
)
def test_generate_queries_never_returns_empty(outcomes) -> None:
    """Every kind of model failure still yields the synthesized query."""

    client, _ = make_client(*outcomes)

    queries = generate_queries(client, "key", ["Quantum Computing"], page=2, timestamp=MARCH_15_MS)

    assert queries == ["Quantum Computing 3 2"]


def test_fallback_query_without_timestamp() -> None:
    """Without a timestamp the month is left out of the synthesized query."""

    assert fallback_query(["Robotics", "AI"], page=4) == "Robotics 4"


def test_fallback_query_ignores_out_of_range_timestamp() -> None:
    """A timestamp no calendar can hold drops the month instead of failing."""

    assert fallback_query(["Robotics"], page=2, timestamp=10**20) == "Robotics 2"


def test_generate_queries_survives_outage_with_huge_timestamp() -> None:
    """Even with the model down and a bogus timestamp, one query comes back."""

    client, _ = make_client(*(requests.ConnectionError("down") for _ in range(3)))

    assert generate_queries(client, "key", ["Quantum Computing"], timestamp=10**20) == ["Quantum Computing 1"]


def test_generate_queries_requires_interests() -> None:
    """An empty interest list is rejected before any model call."""

    client, _ = make_client()

    with pytest.raises(InvalidRequestError):
        generate_queries(client, "key", [])


def test_select_query_is_deterministic_and_cycles() -> None:
    """The query for a page is stable and cycles through the list."""

    queries = ["q1", "q2", "q3"]

    assert select_query(queries, 1) == select_query(queries, 1) == "q1"
    assert [select_query(queries, page) for page in range(1, 8)] == ["q1", "q2", "q3", "q1", "q2", "q3", "q1"]
    assert select_query(["only"], 5) == "only"


def test_select_query_rejects_empty_list() -> None:
    """Selecting from an empty list is an error."""

    with pytest.raises(ValueError):
        select_query([], 1)
