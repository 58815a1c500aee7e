"""Records anywhere in the schema that reference a term or its descendants."""

import logging
from typing import List, Protocol

from sqlalchemy.orm import Session

from ..descriptors import ReferencingRecord
from ..query import (
    MAX_CLOSURE_DEPTH,
    ReferenceQueryBuilder,
    anchor_seed,
    build_descendants_cte,
    children_seed,
)
from ..schema import SchemaRegistry
from .discovery import ReferenceFieldDiscovery
from .entity_tables import EntityTableResolver

logger = logging.getLogger(__name__)


class TermLike(Protocol):
    """Anything identifying a term and its vocabulary."""

    tid: int
    vid: str


class ReferenceAggregator:
    """Counts and lists records referencing the closure of a term.

    Reference fields are discovered for the term's vocabulary, one branch is
    generated per field table, and everything runs as a single statement.
    """

    def __init__(
        self,
        session: Session,
        registry: SchemaRegistry,
        max_depth: int = MAX_CLOSURE_DEPTH,
    ):
        self.session = session
        self.discovery = ReferenceFieldDiscovery(registry)
        self.resolver = EntityTableResolver(registry)
        self.max_depth = max_depth

    def _build(
        self, term: TermLike, descendants_only: bool
    ) -> ReferenceQueryBuilder | None:
        fields = self.discovery.discover(term.vid)
        if not fields:
            logger.debug(f"No reference fields target vocabulary {term.vid}")
            return None

        seed = children_seed(term.tid) if descendants_only else anchor_seed(term.tid)
        closure = build_descendants_cte(
            seed, max_depth=self.max_depth, cte_name="closure"
        )

        builder = ReferenceQueryBuilder(closure)
        for field in fields:
            builder.add_field(field)
        return builder

    def count_referencing_records(
        self, term: TermLike, descendants_only: bool = False
    ) -> int:
        """
        Count distinct records referencing a term or any of its descendants.

        Args:
            term: The anchor term
            descendants_only: Exclude references to the anchor itself

        Returns:
            Number of distinct (entity type, entity id) pairs
        """
        builder = self._build(term, descendants_only)
        if builder is None:
            return 0

        count = self.session.execute(builder.count_query()).scalar_one()
        logger.debug(
            f"Term {term.tid} is referenced by {count} records "
            f"(descendants_only={descendants_only})"
        )
        return count

    def get_referencing_records(
        self, term: TermLike, descendants_only: bool = False
    ) -> List[ReferencingRecord]:
        """
        List distinct records referencing a term or any of its descendants.

        Labels and bundles come from each record type's data table; record
        types that cannot be resolved keep their rows with no label.

        Args:
            term: The anchor term
            descendants_only: Exclude references to the anchor itself

        Returns:
            Referencing records ordered by entity type, then entity id
        """
        builder = self._build(term, descendants_only)
        if builder is None:
            return []

        entity_types = sorted({f.field.entity_type for f in builder.fragments})
        for position, entity_type in enumerate(entity_types, start=1):
            entity_table = self.resolver.resolve(entity_type, position)
            if entity_table is not None:
                builder.add_entity_table(entity_table)

        return [
            ReferencingRecord(
                entity_type=row.entity_type,
                entity_id=row.entity_id,
                label=row.label,
                bundle=row.bundle if row.bundle is not None else "",
            )
            for row in self.session.execute(builder.listing_query())
        ]
