"""Shared test fixtures and helpers."""

from datetime import datetime, timedelta, timezone

import pytest

from dynamics_assistant.config import AppConfig, AssistantConfig, CacheConfig, QueryConfig
from dynamics_assistant.connector.in_memory import InMemoryConnector
from dynamics_assistant.conversation.query_assistant import QueryAssistant
from dynamics_assistant.metadata.cache import MetadataCache
from dynamics_assistant.query.executor import QueryExecutor
from dynamics_assistant.query.nl_parser import NaturalLanguageParser, NLQueryService
from dynamics_assistant.query.shorthand import ShorthandCommandService
from dynamics_assistant.services import build_services


class FakeClock:
    """Monotonic seconds that only move when told to."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeDateClock:
    """Wall-clock datetimes that only move when told to."""

    def __init__(self) -> None:
        self.now = datetime(2025, 5, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def connector():
    return InMemoryConnector()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def date_clock():
    return FakeDateClock()


@pytest.fixture
def cache_config():
    return CacheConfig(metadata_ttl_sec=3600, data_model_entity_limit=20, entity_list_top=500)


@pytest.fixture
def query_config():
    return QueryConfig(
        default_top=50, default_order_by="createdon desc",
        count_cap=1000, count_select_field="createdon",
    )


@pytest.fixture
def assistant_config():
    return AssistantConfig(session_ttl_minutes=30, sweep_interval_sec=300)


@pytest.fixture
def metadata_cache(connector, cache_config, clock):
    return MetadataCache(connector, cache_config, clock=clock)


@pytest.fixture
def executor(connector, query_config):
    return QueryExecutor(connector, query_config)


@pytest.fixture
def shorthand(executor, metadata_cache):
    return ShorthandCommandService(executor, metadata_cache)


@pytest.fixture
def nl_parser():
    return NaturalLanguageParser()


@pytest.fixture
def nl_service(executor):
    return NLQueryService(executor)


@pytest.fixture
def assistant(executor, metadata_cache, assistant_config, date_clock):
    qa = QueryAssistant(executor, metadata_cache, assistant_config, clock=date_clock)
    yield qa
    qa.dispose()


@pytest.fixture
def services(connector, cache_config, query_config, assistant_config):
    config = AppConfig(cache=cache_config, query=query_config, assistant=assistant_config)
    svc = build_services(config, connector=connector, auto_sweep=False)
    yield svc
    svc.dispose()


def walk(assistant: QueryAssistant, session_id: str, inputs: list[str]):
    """Send inputs in order and return the last reply."""
    reply = None
    for text in inputs:
        reply = assistant.process_input(session_id, text)
    return reply
