"""
Service wiring.

Builds the connector, metadata cache, executor and the three query front
ends from one AppConfig. The in-memory connector is used whenever no
Dynamics URL and token are configured.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from dynamics_assistant.config import AppConfig, settings
from dynamics_assistant.connector.base import CRMConnector
from dynamics_assistant.connector.dynamics_client import DynamicsClient
from dynamics_assistant.connector.in_memory import InMemoryConnector
from dynamics_assistant.conversation.query_assistant import QueryAssistant
from dynamics_assistant.metadata.cache import MetadataCache
from dynamics_assistant.query.executor import QueryExecutor
from dynamics_assistant.query.nl_parser import NLQueryService
from dynamics_assistant.query.shorthand import ShorthandCommandService

logger = logging.getLogger(__name__)


@dataclass
class Services:
    config: AppConfig
    connector: CRMConnector
    metadata: MetadataCache
    executor: QueryExecutor
    shorthand: ShorthandCommandService
    nl_query: NLQueryService
    assistant: QueryAssistant

    def dispose(self) -> None:
        """Stop the session sweeper and drop all sessions and cached metadata."""
        self.assistant.dispose()
        self.metadata.invalidate()
        close = getattr(self.connector, "close", None)
        if callable(close):
            close()
        logger.debug("Services disposed")


def build_connector(config: AppConfig) -> CRMConnector:
    if config.dynamics.is_live:
        logger.info("Using Dynamics 365 Web API at %s", config.dynamics.url)
        return DynamicsClient(config.dynamics)
    logger.warning("DYNAMICS_URL/DYNAMICS_ACCESS_TOKEN not set, using in-memory sample data")
    return InMemoryConnector()


def build_services(
    config: Optional[AppConfig] = None,
    connector: Optional[CRMConnector] = None,
    auto_sweep: bool = True,
) -> Services:
    cfg = config or settings
    conn = connector or build_connector(cfg)
    metadata = MetadataCache(conn, cfg.cache)
    executor = QueryExecutor(conn, cfg.query)
    return Services(
        config=cfg,
        connector=conn,
        metadata=metadata,
        executor=executor,
        shorthand=ShorthandCommandService(executor, metadata),
        nl_query=NLQueryService(executor),
        assistant=QueryAssistant(executor, metadata, cfg.assistant, auto_sweep=auto_sweep),
    )
