"""Tests for configuration loading and logging setup."""

import logging

import orjson
import pytest

from schooltenders.core.config import AppConfig, ConfigError, CrawlerConfig, load_app_config
from schooltenders.core.logging import JSONFormatter, get_contextual_logger, setup_logging


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.delenv("SCAN_TIMEOUT", raising=False)


def test_missing_file_gives_defaults(tmp_path):
    config = load_app_config(tmp_path / "missing.yaml", env_file=None)

    assert config == AppConfig()
    assert config.crawler.timeout_seconds == 15.0
    assert config.crawler.candidate_paths[0] == "/albo-pretorio"
    assert config.database.url == "sqlite:///data/schooltenders.db"


def test_yaml_with_env_expansion(tmp_path, monkeypatch):
    monkeypatch.setenv("SCAN_TIMEOUT", "30")
    path = tmp_path / "app.yaml"
    path.write_text(
        "crawler:\n"
        "  timeout_seconds: ${SCAN_TIMEOUT}\n"
        "  url_concurrency: ${URL_CONCURRENCY:-8}\n"
        "  candidate_paths: [albo, /albo, ' /gare ']\n"
        "logging:\n"
        "  level: debug\n",
        encoding="utf-8",
    )

    config = load_app_config(path, env_file=None)

    assert config.crawler.timeout_seconds == 30.0
    assert config.crawler.url_concurrency == 8
    assert config.crawler.candidate_paths == ["/albo", "/gare"]
    assert config.logging.level == "DEBUG"


def test_database_url_environment_override(tmp_path, monkeypatch):
    path = tmp_path / "app.yaml"
    path.write_text("database:\n  url: sqlite:///other.db\n", encoding="utf-8")
    monkeypatch.setenv("DATABASE_URL", "mysql://user:pw@db/tenders")

    assert load_app_config(path, env_file=None).database.url == "mysql://user:pw@db/tenders"


def test_dotenv_file_is_loaded(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("SCAN_TIMEOUT=45\n", encoding="utf-8")
    path = tmp_path / "app.yaml"
    path.write_text("crawler:\n  timeout_seconds: ${SCAN_TIMEOUT:-15}\n", encoding="utf-8")

    config = load_app_config(path, env_file=env_file)

    assert config.crawler.timeout_seconds == 45.0


def test_invalid_yaml_raises(tmp_path):
    path = tmp_path / "app.yaml"
    path.write_text("crawler: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigError) as exc_info:
        load_app_config(path, env_file=None)

    assert exc_info.value.path == path


def test_invalid_values_raise(tmp_path):
    path = tmp_path / "app.yaml"
    path.write_text("crawler:\n  site_concurrency: 0\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="Invalid app configuration"):
        load_app_config(path, env_file=None)


def test_crawler_config_rejects_zero_retries():
    with pytest.raises(ValueError):
        CrawlerConfig(max_retries=0)


def test_json_formatter_emits_context_fields():
    record = logging.LogRecord("schooltenders.scanner", logging.WARNING, __file__, 1, "Unavailable %s", ("u",), None)
    record.site = "IC Manzoni"
    record.site_id = 7
    record.outcome = "timeout"

    data = orjson.loads(JSONFormatter().format(record))

    assert data["message"] == "Unavailable u"
    assert data["site_id"] == 7
    assert data["outcome"] == "timeout"


def test_contextual_logger_adds_site(tmp_path):
    log_file = tmp_path / "logs" / "scan.log"
    logger = setup_logging(level="DEBUG", log_file=log_file, rich_console=False)

    try:
        get_contextual_logger("scanner", site="IC Manzoni", site_id=7).info("Found %d tender(s)", 2)
    finally:
        for handler in logger.handlers:
            handler.close()
        logger.handlers.clear()

    line = orjson.loads(log_file.read_text(encoding="utf-8").splitlines()[-1])
    assert line["site"] == "IC Manzoni"
    assert line["site_id"] == 7
    assert line["logger"] == "schooltenders.scanner"
