"""SQL construction for closure and cross-table reference queries.

Closure CTEs are built from a *seed* select yielding ``(tid, depth)`` rows and
a recursive step following ``taxonomy_term__parent`` one level at a time.
Reference queries are assembled by :class:`ReferenceQueryBuilder` from one
fragment per reference field and composed into a single statement.
"""

from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy import (
    CTE,
    Integer,
    Select,
    String,
    Subquery,
    and_,
    cast,
    column,
    func,
    literal,
    literal_column,
    null,
    select,
    table,
    union,
)

from .descriptors import EntityTable, ReferenceField
from .models import ROOT_PARENT_ID, Term, TermParent

# Upper bound on recursion depth; stops expansion on cyclic parent data
MAX_CLOSURE_DEPTH = 1000

# Column of field tables holding the id of the record owning the value
FIELD_ENTITY_ID_COLUMN = "entity_id"


def anchor_seed(tid: int) -> Select:
    """Seed a closure with the anchor term itself at depth 0."""
    return select(
        cast(literal(tid), Integer).label("tid"),
        literal_column("0", Integer).label("depth"),
    )


def children_seed(tid: int) -> Select:
    """Seed a closure with the direct children of a term at depth 1."""
    return select(
        TermParent.entity_id.label("tid"),
        literal_column("1", Integer).label("depth"),
    ).where(TermParent.parent_target_id == tid)


def roots_seed(vid: str) -> Select:
    """Seed a closure with every root term of a vocabulary at depth 0."""
    return (
        select(
            Term.tid.label("tid"),
            literal_column("0", Integer).label("depth"),
        )
        .select_from(Term)
        .join(TermParent, TermParent.entity_id == Term.tid)
        .where(
            and_(
                Term.vid == vid,
                TermParent.parent_target_id == ROOT_PARENT_ID,
            )
        )
    )


def build_descendants_cte(
    seed: Select,
    vid: Optional[str] = None,
    max_depth: int = MAX_CLOSURE_DEPTH,
    cte_name: str = "descendants",
) -> CTE:
    """Build a recursive CTE of ``(tid, depth)`` rows expanded from ``seed``.

    Args:
        seed: Select producing the initial ``(tid, depth)`` rows
        vid: When given, expansion only follows children in this vocabulary
        max_depth: Rows at this depth are not expanded further
        cte_name: Name for the CTE (must be unique within a query)

    Returns:
        SQLAlchemy CTE with ``tid`` and ``depth`` columns
    """
    descendants = seed.cte(cte_name, recursive=True)

    recursive_query = select(
        TermParent.entity_id.label("tid"),
        (descendants.c.depth + literal_column("1", Integer)).label("depth"),
    ).where(
        and_(
            TermParent.parent_target_id == descendants.c.tid,
            descendants.c.depth < max_depth,
        )
    )
    if vid is not None:
        recursive_query = (
            recursive_query.select_from(TermParent)
            .join(Term, Term.tid == TermParent.entity_id)
            .where(Term.vid == vid)
        )

    return descendants.union_all(recursive_query)


def build_descendants_listing(descendants: CTE, min_depth: int = 0) -> Select:
    """Select terms of a closure with their parent id and depth."""
    return (
        select(
            Term,
            TermParent.parent_target_id.label("parent"),
            descendants.c.depth,
        )
        .select_from(descendants)
        .join(Term, Term.tid == descendants.c.tid)
        .outerjoin(TermParent, TermParent.entity_id == Term.tid)
        .where(descendants.c.depth >= min_depth)
        .order_by(descendants.c.depth, Term.tid)
    )


def build_descendants_count(descendants: CTE, min_depth: int = 0) -> Select:
    """Count the rows :func:`build_descendants_listing` would return."""
    return (
        select(func.count())
        .select_from(descendants)
        .join(Term, Term.tid == descendants.c.tid)
        .outerjoin(TermParent, TermParent.entity_id == Term.tid)
        .where(descendants.c.depth >= min_depth)
    )


@dataclass(frozen=True)
class ReferenceFragment:
    """One branch of the reference union."""

    field: ReferenceField
    statement: Select


class ReferenceQueryBuilder:
    """Accumulates reference fragments and composes them into one query.

    Every fragment selects ``(entity_type, entity_id)`` from one field table
    where the field's target column is a member of the closure. Fragments are
    combined with a deduplicating UNION.
    """

    def __init__(self, closure: CTE):
        self.closure = closure
        self.fragments: List[ReferenceFragment] = []
        self.entity_tables: List[EntityTable] = []

    def add_field(self, field: ReferenceField) -> ReferenceFragment:
        """Add a branch selecting records whose field points into the closure."""
        field_table = table(
            field.table,
            column(FIELD_ENTITY_ID_COLUMN, Integer),
            column(field.column, Integer),
        )
        statement = select(
            cast(literal(field.entity_type), String).label("entity_type"),
            field_table.c[FIELD_ENTITY_ID_COLUMN].label("entity_id"),
        ).where(field_table.c[field.column].in_(select(self.closure.c.tid)))

        fragment = ReferenceFragment(field=field, statement=statement)
        self.fragments.append(fragment)
        return fragment

    def add_entity_table(self, entity_table: EntityTable) -> None:
        """Register a table to enrich listing rows with label and bundle."""
        self.entity_tables.append(entity_table)

    def union(self) -> Subquery:
        """Deduplicated union of all fragments as a ``refs`` subquery."""
        if not self.fragments:
            raise ValueError("Cannot compose a reference query without fragments")

        statements = [fragment.statement for fragment in self.fragments]
        if len(statements) == 1:
            # A single branch still needs deduplication
            return statements[0].distinct().subquery("refs")
        return union(*statements).subquery("refs")

    def count_query(self) -> Select:
        """Number of distinct ``(entity_type, entity_id)`` pairs."""
        refs = self.union()
        return select(func.count()).select_from(refs)

    def listing_query(self) -> Select:
        """Distinct referencing records with coalesced label and bundle."""
        refs = self.union()

        joined = refs
        labels = []
        bundles = []
        for entity_table in self.entity_tables:
            enrichment = _enrichment_subquery(entity_table)
            joined = joined.outerjoin(
                enrichment,
                and_(
                    refs.c.entity_type == entity_table.entity_type,
                    enrichment.c.id == refs.c.entity_id,
                ),
            )
            labels.append(enrichment.c.label)
            if entity_table.bundle_column:
                bundles.append(enrichment.c.bundle)

        return (
            select(
                refs.c.entity_type,
                refs.c.entity_id,
                _coalesce(labels).label("label"),
                _coalesce(bundles, default=literal("")).label("bundle"),
            )
            .select_from(joined)
            .order_by(refs.c.entity_type, refs.c.entity_id)
        )


def _enrichment_subquery(entity_table: EntityTable) -> Subquery:
    """One ``(id, label, bundle)`` row per record of an entity data table.

    Data tables may hold several rows per id (one per translation); the
    lowest label and bundle are kept so the join cannot multiply records.
    """
    columns = [
        column(entity_table.id_column),
        column(entity_table.label_column),
    ]
    if entity_table.bundle_column:
        columns.append(column(entity_table.bundle_column))
    data_table = table(entity_table.table, *columns)

    selected = [
        data_table.c[entity_table.id_column].label("id"),
        func.min(data_table.c[entity_table.label_column]).label("label"),
    ]
    if entity_table.bundle_column:
        selected.append(
            func.min(data_table.c[entity_table.bundle_column]).label("bundle")
        )
    return (
        select(*selected)
        .group_by(data_table.c[entity_table.id_column])
        .subquery(entity_table.alias)
    )


def _coalesce(columns, default=None):
    """First non-null of ``columns``, then ``default``; NULL when both are empty."""
    if default is not None:
        columns = [*columns, default]
    if not columns:
        return null()
    # SQLite rejects COALESCE with a single argument
    if len(columns) == 1:
        return columns[0]
    return func.coalesce(*columns)
