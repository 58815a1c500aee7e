"""Value objects produced by the analyzer."""

from dataclasses import dataclass
from typing import Optional

from .models import Term


@dataclass(frozen=True)
class ReferenceField:
    """A column somewhere in the schema holding a taxonomy term id."""

    entity_type: str
    field_name: str
    table: str
    column: str


@dataclass(frozen=True)
class EntityTable:
    """Table holding the id, label and bundle of one record type."""

    entity_type: str
    table: str
    id_column: str
    label_column: str
    bundle_column: Optional[str]
    alias: str


@dataclass(frozen=True)
class ReferencingRecord:
    """A record referencing a term of the analyzed closure."""

    entity_type: str
    entity_id: int
    label: Optional[str] = None
    bundle: str = ""


@dataclass(frozen=True)
class Descendant:
    """A term with its immediate parent and its depth below the anchor."""

    term: Term
    parent_id: Optional[int]
    depth: int

    @property
    def tid(self) -> int:
        return self.term.tid
