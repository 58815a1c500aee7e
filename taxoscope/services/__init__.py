"""Analysis services: closure, reference discovery and aggregation."""

from .closure import ClosureEngine
from .discovery import ReferenceFieldDiscovery
from .entity_tables import EntityTableResolver
from .references import ReferenceAggregator

__all__ = [
    "ClosureEngine",
    "EntityTableResolver",
    "ReferenceAggregator",
    "ReferenceFieldDiscovery",
]
