import json
from pathlib import Path

import pytest

from newsflow.config import DEFAULT_GEMINI_ENDPOINTS, Settings


def test_from_file_loads_values(tmp_path: Path) -> None:
    config_path = tmp_path / "settings.json"
    config_path.write_text(
        json.dumps({"news_api_key": "abc", "news_country": "gb", "summary_timeout": 5}),
        encoding="utf-8",
    )

    settings = Settings.from_file(config_path)

    assert settings.news_api_key == "abc"
    assert settings.news_country == "gb"
    assert settings.summary_timeout == 5
    assert settings.gemini_api_key is None


def test_from_file_rejects_invalid_json(tmp_path: Path) -> None:
    config_path = tmp_path / "settings.json"
    config_path.write_text("{not json", encoding="utf-8")

    with pytest.raises(ValueError, match="Invalid JSON"):
        Settings.from_file(config_path)


def test_from_file_rejects_invalid_values(tmp_path: Path) -> None:
    config_path = tmp_path / "settings.json"
    config_path.write_text(json.dumps({"query_timeout": -1}), encoding="utf-8")

    with pytest.raises(ValueError, match="invalid"):
        Settings.from_file(config_path)


def test_from_file_missing(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        Settings.from_file(tmp_path / "missing.json")


def test_from_env_reads_keys_and_paths(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("NEWS_API_KEY", "news")
    monkeypatch.setenv("GEMINI_API_KEY", "")
    monkeypatch.setenv("NEWSFLOW_DB_PATH", str(tmp_path / "db.sqlite"))
    monkeypatch.setenv("NEWSFLOW_SESSION_SECRET", "s3cret")

    settings = Settings.from_env()

    assert settings.news_api_key == "news"
    assert settings.gemini_api_key is None
    assert settings.database_path == tmp_path / "db.sqlite"
    assert settings.session_secret == "s3cret"


def test_default_endpoints_are_ordered_and_independent() -> None:
    settings = Settings()

    assert [endpoint.name for endpoint in settings.gemini_endpoints] == [
        endpoint.name for endpoint in DEFAULT_GEMINI_ENDPOINTS
    ]
    settings.gemini_endpoints[0].url = "https://example.com"
    assert DEFAULT_GEMINI_ENDPOINTS[0].url != "https://example.com"
    assert settings.summary_timeout == 15
    assert settings.query_timeout == 10
