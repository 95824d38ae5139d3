"""Small text helpers shared by the fetcher and the summariser."""

from __future__ import annotations

import re

from bs4 import BeautifulSoup

__all__ = ["flatten_markup"]

_WHITESPACE_RE = re.compile(r"\s+")


def flatten_markup(value: str | None) -> str | None:
    """Return ``value`` with any HTML markup reduced to plain text.

    Provider descriptions occasionally carry ``<p>``/``<a>`` tags from the
    originating feed. Plain strings are returned unchanged.
    """

    if value is None or "<" not in value:
        return value

    text = BeautifulSoup(value, "lxml").get_text(" ", strip=True)
    return _WHITESPACE_RE.sub(" ", text).strip()
