"""Explicit entity type -> fuzzy search client association."""

import logging
from typing import Any, Dict, List, Optional

from trigram.config import FuzzyConfig
from trigram.errors import ConfigurationError
from trigram_server import TrigramServer

from .client import FuzzySearchClient
from .records import RecordSource

logger = logging.getLogger(__name__)


class FuzzyRegistry:
    """
    Holds one client (config + record source + trigram server) per entity type.
    Entity types are whatever the caller registers them under: a model class or a name.
    """

    def __init__(self) -> None:
        self._clients: Dict[Any, FuzzySearchClient] = {}

    def register(
        self,
        entity: Any,
        config: FuzzyConfig,
        records: RecordSource,
        server: Optional[TrigramServer] = None,
        max_query_length: Optional[int] = None,
    ) -> FuzzySearchClient:
        if entity in self._clients:
            raise ConfigurationError(f"Entity type already registered: {entity!r}")
        client = FuzzySearchClient(config, records, server=server, max_query_length=max_query_length)
        self._clients[entity] = client
        logger.debug("Registered fuzzy search for %r on attributes %s", entity, config.attributes)
        return client

    def client_for(self, entity: Any) -> FuzzySearchClient:
        try:
            return self._clients[entity]
        except KeyError:
            raise ConfigurationError(f"Entity type not registered for fuzzy search: {entity!r}") from None

    def entities(self) -> List[Any]:
        return list(self._clients)

    def __contains__(self, entity: Any) -> bool:
        return entity in self._clients

    def close(self) -> None:
        for client in self._clients.values():
            client.close()
        self._clients.clear()
