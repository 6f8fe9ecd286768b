import logging

import pytest

from requests_api.config import configure_logging


@pytest.fixture
def basic_config(monkeypatch):
    calls = []
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))
    return calls


def test_log_level_is_case_insensitive(monkeypatch, basic_config):
    monkeypatch.setenv("LOG_LEVEL", "debug")

    configure_logging()

    assert basic_config[0]["level"] == "DEBUG"
    assert logging.getLevelName(basic_config[0]["level"]) == logging.DEBUG


def test_log_level_defaults_to_info(monkeypatch, basic_config):
    monkeypatch.delenv("LOG_LEVEL", raising=False)

    configure_logging()

    assert basic_config[0]["level"] == "INFO"
