"""taxoscope models package."""

from .base import (
    ROOT_PARENT_ID,
    TERM_ENTITY_TYPE,
    Base,
    FieldType,
    field_table_name,
    field_target_column,
)
from .taxonomy import PARENT_FIELD_NAME, Term, TermParent

__all__ = [
    # Base
    "Base",
    "FieldType",
    "ROOT_PARENT_ID",
    "TERM_ENTITY_TYPE",
    "field_table_name",
    "field_target_column",
    # Taxonomy
    "PARENT_FIELD_NAME",
    "Term",
    "TermParent",
]
