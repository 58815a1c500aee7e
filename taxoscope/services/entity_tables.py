"""Resolution of the table holding a record type's id, label and bundle."""

import logging
import re
from typing import Optional

from ..descriptors import EntityTable
from ..schema import SchemaRegistry

logger = logging.getLogger(__name__)

ALIAS_PREFIX_LENGTH = 12


def make_alias(entity_type: str, position: int) -> str:
    """Readable table alias, unique within a query through ``position``."""
    prefix = re.sub(r"[^a-z]", "", entity_type.lower())[:ALIAS_PREFIX_LENGTH]
    return f"{prefix or 'entity'}_{position}"


class EntityTableResolver:
    """Looks up where a record type stores its identity and label."""

    def __init__(self, registry: SchemaRegistry):
        self.registry = registry

    def resolve(self, entity_type: str, position: int = 0) -> Optional[EntityTable]:
        """
        Resolve the enrichment table of a record type.

        Args:
            entity_type: Record type id
            position: Ordinal of the table within the query being built

        Returns:
            EntityTable, or None if the type is unknown or has no id or label key
        """
        storage = self.registry.get_storage(entity_type)
        if storage is None:
            logger.debug(f"Unknown entity type {entity_type}, skipping enrichment")
            return None

        table = storage.data_table or storage.base_table
        keys = storage.keys
        if not table or not keys.id or not keys.label:
            logger.debug(
                f"Entity type {entity_type} has no table, id or label key, "
                "skipping enrichment"
            )
            return None

        return EntityTable(
            entity_type=entity_type,
            table=table,
            id_column=keys.id,
            label_column=keys.label,
            bundle_column=keys.bundle,
            alias=make_alias(entity_type, position),
        )
