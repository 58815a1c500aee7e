"""Tests for the taxonomy models."""

from sqlalchemy import inspect

from taxoscope.models import Term, TermParent


class TestTermModels:
    """Test the term model mappings."""

    def test_models_map_columns_only(self):
        """Test no ORM relationship can cascade writes between term tables."""
        assert list(inspect(Term).relationships) == []
        assert list(inspect(TermParent).relationships) == []

    def test_parent_column_name(self):
        """Test the parent id maps to the parent field's target column."""
        assert TermParent.parent_target_id.property.columns[0].name == (
            "parent_target_id"
        )
