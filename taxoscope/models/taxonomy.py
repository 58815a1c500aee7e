"""Taxonomy term models: term data and the parent adjacency table."""

from sqlalchemy import Column, ForeignKey, Index, Integer, String, Text

from .base import ROOT_PARENT_ID, Base, field_table_name, field_target_column

PARENT_FIELD_NAME = "parent"


class Term(Base):
    """A taxonomy term belonging to exactly one vocabulary."""

    __tablename__ = "taxonomy_term_field_data"
    __table_args__ = (Index("idx_taxonomy_term_field_data_vid_name", "vid", "name"),)

    tid = Column(Integer, primary_key=True)
    vid = Column(String, nullable=False, index=True)
    langcode = Column(String, nullable=False, default="en")
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    weight = Column(Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        return f"<Term tid={self.tid} vid={self.vid!r} name={self.name!r}>"


class TermParent(Base):
    """Adjacency row mapping a term to its parent (0 for roots)."""

    __tablename__ = field_table_name("taxonomy_term", PARENT_FIELD_NAME)
    __table_args__ = (
        Index("idx_taxonomy_term__parent_target", "parent_target_id"),
    )

    entity_id = Column(
        Integer,
        ForeignKey("taxonomy_term_field_data.tid", ondelete="CASCADE"),
        primary_key=True,
    )
    delta = Column(Integer, primary_key=True, default=0)
    bundle = Column(String, nullable=False)
    parent_target_id = Column(
        field_target_column(PARENT_FIELD_NAME),
        Integer,
        nullable=False,
        default=ROOT_PARENT_ID,
    )
