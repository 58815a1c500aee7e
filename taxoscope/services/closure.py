"""Descendant closure over the taxonomy parent table."""

import logging
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ..descriptors import Descendant
from ..exceptions import InvalidArgumentError
from ..models import Term
from ..query import (
    MAX_CLOSURE_DEPTH,
    anchor_seed,
    build_descendants_count,
    build_descendants_cte,
    build_descendants_listing,
    roots_seed,
)

logger = logging.getLogger(__name__)


class ClosureEngine:
    """Counts and lists descendants of a term, or every term of a vocabulary.

    Each call issues exactly one statement; anchored calls use a recursive CTE
    so arbitrarily deep trees are expanded by the database.
    """

    def __init__(self, session: Session, max_depth: int = MAX_CLOSURE_DEPTH):
        self.session = session
        self.max_depth = max_depth

    def count_descendants(self, tid: Optional[int], vid: Optional[str] = None) -> int:
        """
        Count descendants of a term, or all terms of a vocabulary.

        Args:
            tid: Anchor term id, or None for the entire vocabulary
            vid: Vocabulary id (required when tid is None)

        Returns:
            Number of descendant terms, the anchor itself excluded

        Raises:
            InvalidArgumentError: If both tid and vid are None
        """
        if tid is None:
            self._require_vocabulary(vid)
            # Whole vocabulary: a flat count, no closure needed
            query = select(func.count()).select_from(Term).where(Term.vid == vid)
            count = self.session.execute(query).scalar_one()
            logger.debug(f"Vocabulary {vid} has {count} terms")
            return count

        descendants = build_descendants_cte(anchor_seed(tid), max_depth=self.max_depth)
        count = self.session.execute(
            build_descendants_count(descendants, min_depth=1)
        ).scalar_one()
        logger.debug(f"Term {tid} has {count} descendants")
        return count

    def get_descendants(
        self, tid: Optional[int], vid: Optional[str] = None
    ) -> List[Descendant]:
        """
        List descendants of a term, or all terms of a vocabulary, with depth.

        With an anchor only strict descendants are returned (depth 1 is a
        direct child). Without one, every term reachable from the vocabulary's
        roots is returned with roots at depth 0.

        Args:
            tid: Anchor term id, or None for the entire vocabulary
            vid: Vocabulary id (required when tid is None)

        Returns:
            Descendants ordered by depth, then term id

        Raises:
            InvalidArgumentError: If both tid and vid are None
        """
        if tid is None:
            self._require_vocabulary(vid)
            descendants = build_descendants_cte(
                roots_seed(vid), vid=vid, max_depth=self.max_depth, cte_name="tree"
            )
            query = build_descendants_listing(descendants, min_depth=0)
        else:
            descendants = build_descendants_cte(
                anchor_seed(tid), max_depth=self.max_depth
            )
            query = build_descendants_listing(descendants, min_depth=1)

        result = [
            Descendant(term=row[0], parent_id=row.parent, depth=row.depth)
            for row in self.session.execute(query)
        ]
        anchor = f"term {tid}" if tid is not None else f"vocabulary {vid}"
        logger.debug(f"Found {len(result)} descendants for {anchor}")
        return result

    @staticmethod
    def _require_vocabulary(vid: Optional[str]) -> None:
        if vid is None:
            raise InvalidArgumentError("Vocabulary ID required when term ID is None")
