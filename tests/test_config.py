import json

from config import DEFAULT_CONFIG, load_config


def test_defaults_without_file(monkeypatch, tmp_path):
    monkeypatch.setenv("SEARCH_CONFIG_PATH", str(tmp_path / "missing.json"))
    monkeypatch.delenv("SEARCH_DB_PATH", raising=False)
    monkeypatch.delenv("FEED_TIMEOUT", raising=False)

    assert load_config() == DEFAULT_CONFIG


def test_file_and_environment_overrides(monkeypatch, tmp_path):
    path = tmp_path / "search_config.json"
    path.write_text(json.dumps({"trending_limit": 4, "feeds": {"ai": ["https://example.com/rss"]}}))
    monkeypatch.setenv("SEARCH_CONFIG_PATH", str(path))
    monkeypatch.setenv("SEARCH_DB_PATH", "/tmp/other.db")
    monkeypatch.setenv("FEED_TIMEOUT", "3")

    config = load_config()

    assert config["trending_limit"] == 4
    assert config["feeds"] == {"ai": ["https://example.com/rss"]}
    assert config["db_path"] == "/tmp/other.db"
    assert config["feed_timeout"] == 3.0
    assert config["recent_search_limit"] == 5


def test_malformed_file_is_ignored(monkeypatch, tmp_path):
    path = tmp_path / "search_config.json"
    path.write_text("{not json")
    monkeypatch.setenv("SEARCH_CONFIG_PATH", str(path))
    monkeypatch.delenv("SEARCH_DB_PATH", raising=False)

    assert load_config()["db_path"] == DEFAULT_CONFIG["db_path"]
