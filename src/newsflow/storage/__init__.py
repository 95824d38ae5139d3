"""Relational storage for NewsFlow accounts, interests and saved articles."""

from __future__ import annotations

from .database import Storage, init_database  # noqa: F401

__all__ = ["Storage", "init_database"]
