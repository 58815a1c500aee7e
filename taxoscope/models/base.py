"""Base classes and shared constants for taxoscope models."""

from enum import Enum

from sqlalchemy.orm import declarative_base

Base = declarative_base()

# Parent id stored on root terms
ROOT_PARENT_ID = 0

# Entity type id of taxonomy terms in the schema registry
TERM_ENTITY_TYPE = "taxonomy_term"


class FieldType(str, Enum):
    """Enumeration of field types the analyzer inspects."""

    ENTITY_REFERENCE = "entity_reference"


def field_table_name(entity_type: str, field_name: str) -> str:
    """Name of the dedicated table storing values of a multi-value field."""
    return f"{entity_type}__{field_name}"


def field_target_column(field_name: str) -> str:
    """Name of the column holding the referenced id in a field table."""
    return f"{field_name}_target_id"
