"""Discovery of entity reference fields that target a vocabulary."""

import logging
from typing import Dict, List

from ..descriptors import ReferenceField
from ..models import (
    PARENT_FIELD_NAME,
    TERM_ENTITY_TYPE,
    FieldType,
    field_table_name,
    field_target_column,
)
from ..schema import SchemaRegistry

logger = logging.getLogger(__name__)

PARENT_FIELD_TABLE = field_table_name(TERM_ENTITY_TYPE, PARENT_FIELD_NAME)


class ReferenceFieldDiscovery:
    """Finds every field table whose target column may hold a term of a vocabulary."""

    def __init__(self, registry: SchemaRegistry):
        self.registry = registry

    def discover(
        self, vid: str, include_parent_field: bool = False
    ) -> List[ReferenceField]:
        """
        Discover entity reference fields targeting a vocabulary.

        Record types, fields and bundles are visited in lexicographic order and
        the first matching bundle wins for a given table, so the result does
        not depend on the registry's enumeration order.

        Args:
            vid: Vocabulary ID
            include_parent_field: Include the term parent field

        Returns:
            One ReferenceField per field table, ordered by table name
        """
        fields: Dict[str, ReferenceField] = {}
        field_map = self.registry.get_field_map_by_field_type(
            FieldType.ENTITY_REFERENCE.value
        )

        for entity_type in sorted(field_map):
            entity_field_info = field_map[entity_type]
            for field_name in sorted(entity_field_info):
                table = field_table_name(entity_type, field_name)

                # Already matched through another bundle
                if table in fields:
                    continue

                for bundle in sorted(entity_field_info[field_name].bundles):
                    definition = self.registry.get_field_definitions(
                        entity_type, bundle
                    ).get(field_name)
                    if definition is None:
                        continue

                    settings = definition.settings
                    if settings.target_type != TERM_ENTITY_TYPE:
                        continue

                    # Restricted to other vocabularies
                    if settings.target_bundles and vid not in settings.target_bundles:
                        continue

                    fields[table] = ReferenceField(
                        entity_type=entity_type,
                        field_name=field_name,
                        table=table,
                        column=field_target_column(field_name),
                    )
                    break

        if not include_parent_field:
            fields.pop(PARENT_FIELD_TABLE, None)

        logger.debug(
            f"Discovered {len(fields)} reference fields for vocabulary {vid}: "
            f"{', '.join(sorted(fields))}"
        )
        return [fields[table] for table in sorted(fields)]
