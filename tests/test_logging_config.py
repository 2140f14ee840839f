import logging

import pytest

from pitgen.logging_config import configure_logging


@pytest.fixture
def captured_basic_config(monkeypatch):
    calls = []
    monkeypatch.setattr(logging, "basicConfig", lambda **kw: calls.append(kw))
    return calls


def test_default_level(monkeypatch, captured_basic_config):
    monkeypatch.delenv("PITGEN_LOG_LEVEL", raising=False)
    configure_logging(logging.WARNING)
    assert captured_basic_config[0]["level"] == logging.WARNING
    assert "%(name)s" in captured_basic_config[0]["format"]


def test_env_var_overrides_level(monkeypatch, captured_basic_config):
    monkeypatch.setenv("PITGEN_LOG_LEVEL", "debug")
    configure_logging(logging.WARNING)
    assert captured_basic_config[0]["level"] == logging.DEBUG


def test_unknown_env_level_keeps_default(monkeypatch, captured_basic_config):
    monkeypatch.setenv("PITGEN_LOG_LEVEL", "chatty")
    configure_logging(logging.INFO)
    assert captured_basic_config[0]["level"] == logging.INFO
