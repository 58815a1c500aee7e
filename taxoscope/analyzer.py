"""Taxonomy hierarchy analysis facade."""

from typing import List, Optional

from sqlalchemy.orm import Session

from .descriptors import Descendant, ReferenceField, ReferencingRecord
from .query import MAX_CLOSURE_DEPTH
from .schema import SchemaRegistry
from .services import ClosureEngine, ReferenceAggregator, ReferenceFieldDiscovery
from .services.references import TermLike


class TaxonomyHierarchyAnalyzer:
    """Descendant and cross-table reference analysis for taxonomy terms.

    Args:
        session: Database session used for every query
        registry: Source of field and storage metadata
        max_depth: Recursion limit for closure queries
    """

    def __init__(
        self,
        session: Session,
        registry: SchemaRegistry,
        max_depth: int = MAX_CLOSURE_DEPTH,
    ):
        self.closure = ClosureEngine(session, max_depth=max_depth)
        self.discovery = ReferenceFieldDiscovery(registry)
        self.references = ReferenceAggregator(session, registry, max_depth=max_depth)

    def count_descendants(self, tid: Optional[int], vid: Optional[str] = None) -> int:
        return self.closure.count_descendants(tid, vid)

    def get_descendants(
        self, tid: Optional[int], vid: Optional[str] = None
    ) -> List[Descendant]:
        return self.closure.get_descendants(tid, vid)

    def get_reference_fields(
        self, vid: str, include_parent_field: bool = False
    ) -> List[ReferenceField]:
        return self.discovery.discover(vid, include_parent_field)

    def count_referencing_records(
        self, term: TermLike, descendants_only: bool = False
    ) -> int:
        return self.references.count_referencing_records(term, descendants_only)

    def get_referencing_records(
        self, term: TermLike, descendants_only: bool = False
    ) -> List[ReferencingRecord]:
        return self.references.get_referencing_records(term, descendants_only)
