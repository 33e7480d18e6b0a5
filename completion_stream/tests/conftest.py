"""Shared fixtures for the completion_stream test suite."""

from __future__ import annotations

import json
import logging
from typing import Iterator, List

import pytest

from completion_stream.base.logging import BASE_LOGGER_NAME, LOG_LEVEL_ENV, get_logger
from completion_stream.base.models import ProviderConfig
from completion_stream.tests.fakes import FakeClock, FakeProvider, WordTokenCounter


class _ListHandler(logging.Handler):
    def __init__(self) -> None:
        super().__init__(level=logging.DEBUG)
        self.messages: List[str] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.messages.append(record.getMessage())

    def events(self) -> List[dict]:
        out = []
        for msg in self.messages:
            try:
                payload = json.loads(msg)
            except ValueError:
                continue
            if isinstance(payload, dict) and "event" in payload:
                out.append(payload)
        return out

    def named(self, event: str) -> List[dict]:
        return [e for e in self.events() if e["event"] == event]


@pytest.fixture()
def fake_provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture()
def provider_config() -> ProviderConfig:
    return ProviderConfig(endpoint="http://llm.local:5000/v1", api_key="sk-test-key-123456", model="test-model")


@pytest.fixture()
def word_counter() -> WordTokenCounter:
    return WordTokenCounter()


@pytest.fixture()
def fake_clock():
    return FakeClock


@pytest.fixture()
def log_capture(monkeypatch: pytest.MonkeyPatch) -> Iterator[_ListHandler]:
    """Attach a collecting handler to the base logger at DEBUG level."""
    monkeypatch.setenv(LOG_LEVEL_ENV, "DEBUG")
    logger = get_logger(BASE_LOGGER_NAME)
    handler = _ListHandler()
    previous = logger.level
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    try:
        yield handler
    finally:
        logger.removeHandler(handler)
        logger.setLevel(previous)
