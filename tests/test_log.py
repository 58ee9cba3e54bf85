import json
import logging

import pytest
import structlog

from restclient import Config
from restclient.log import configure_from, configure_logging


@pytest.fixture(autouse=True)
def reset_structlog():
    yield
    structlog.reset_defaults()


def test_events_render_as_json(caplog):
    configure_logging("debug")
    caplog.set_level(logging.INFO)

    structlog.get_logger("restclient.tests.log").info("request_sent", method="GET")

    records = [r for r in caplog.records if r.name == "restclient.tests.log"]
    assert len(records) == 1
    event = json.loads(records[0].getMessage())
    assert event["event"] == "request_sent"
    assert event["method"] == "GET"
    assert event["level"] == "info"
    assert "timestamp" in event


def test_events_below_level_are_dropped(caplog):
    configure_logging()
    caplog.set_level(logging.WARNING)

    structlog.get_logger("restclient.tests.filtered").info("noise")

    assert not [r for r in caplog.records if r.name == "restclient.tests.filtered"]


def test_configure_from_config(caplog, tmp_path, monkeypatch):
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    path = tmp_path / "config.yaml"
    path.write_text("logging:\n  level: INFO\n  format: json\n")
    configure_from(Config(str(path), load_env_file=False))
    caplog.set_level(logging.INFO)

    structlog.get_logger("restclient.tests.from_config").warning("http_error", status_code=500)

    records = [r for r in caplog.records if r.name == "restclient.tests.from_config"]
    assert json.loads(records[0].getMessage())["status_code"] == 500
