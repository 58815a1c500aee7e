"""Taxonomy hierarchy closure and cross-table reference analysis."""

from .analyzer import TaxonomyHierarchyAnalyzer
from .exceptions import InvalidArgumentError, SchemaDefinitionError

__all__ = [
    "InvalidArgumentError",
    "SchemaDefinitionError",
    "TaxonomyHierarchyAnalyzer",
]
