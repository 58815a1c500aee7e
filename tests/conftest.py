"""Test configuration and fixtures for taxoscope tests.

Tests run against an in-memory SQLite database holding the taxonomy tables
plus a small site schema (nodes, products, media) whose field tables
reference taxonomy terms. Tests create their own data with the fixtures'
helpers or directly with model constructors.
"""

import pytest
from sqlalchemy import (
    Column,
    Integer,
    MetaData,
    String,
    Table,
    create_engine,
    insert,
)
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from taxoscope.models import Base, Term, TermParent
from taxoscope.schema import StaticSchemaRegistry

site_metadata = MetaData()


def _field_table(name: str, field_name: str) -> Table:
    return Table(
        name,
        site_metadata,
        Column("bundle", String, nullable=False),
        Column("entity_id", Integer, primary_key=True),
        Column("delta", Integer, primary_key=True),
        Column(f"{field_name}_target_id", Integer, nullable=False),
    )


node_field_data = Table(
    "node_field_data",
    site_metadata,
    Column("nid", Integer, primary_key=True),
    Column("langcode", String, primary_key=True, default="en"),
    Column("type", String, nullable=False),
    Column("title", String, nullable=False),
)
commerce_product_field_data = Table(
    "commerce_product_field_data",
    site_metadata,
    Column("product_id", Integer, primary_key=True),
    Column("type", String, nullable=False),
    Column("title", String, nullable=False),
)
media_field_data = Table(
    "media_field_data",
    site_metadata,
    Column("mid", Integer, primary_key=True),
    Column("bundle", String, nullable=False),
)

FIELD_TABLES = {
    "node__field_tags": _field_table("node__field_tags", "field_tags"),
    "node__field_color": _field_table("node__field_color", "field_color"),
    "node__field_size": _field_table("node__field_size", "field_size"),
    "commerce_product__field_color": _field_table(
        "commerce_product__field_color", "field_color"
    ),
    "media__field_category": _field_table("media__field_category", "field_category"),
}


SITE_SCHEMA = {
    "entity_types": {
        "taxonomy_term": {
            "base_table": "taxonomy_term_data",
            "data_table": "taxonomy_term_field_data",
            "keys": {"id": "tid", "label": "name", "bundle": "vid"},
            "bundles": ["colors", "sizes"],
            "fields": [
                {
                    "name": "parent",
                    "type": "entity_reference",
                    "settings": {"target_type": "taxonomy_term"},
                }
            ],
        },
        "node": {
            "base_table": "node",
            "data_table": "node_field_data",
            "keys": {"id": "nid", "label": "title", "bundle": "type"},
            "bundles": ["article", "page"],
            "fields": [
                {
                    "name": "field_tags",
                    "type": "entity_reference",
                    "settings": {"target_type": "taxonomy_term"},
                    "bundles": ["article"],
                },
                {
                    "name": "field_color",
                    "type": "entity_reference",
                    "settings": {
                        "target_type": "taxonomy_term",
                        "target_bundles": ["colors"],
                    },
                },
                {
                    "name": "field_size",
                    "type": "entity_reference",
                    "settings": {
                        "target_type": "taxonomy_term",
                        "target_bundles": ["sizes"],
                    },
                },
                {
                    "name": "field_author",
                    "type": "entity_reference",
                    "settings": {"target_type": "user"},
                },
                {"name": "body", "type": "text_long"},
            ],
        },
        "commerce_product": {
            "base_table": "commerce_product",
            "data_table": "commerce_product_field_data",
            "keys": {"id": "product_id", "label": "title", "bundle": "type"},
            "bundles": ["clothing"],
            "fields": [
                {
                    "name": "field_color",
                    "type": "entity_reference",
                    "settings": {
                        "target_type": "taxonomy_term",
                        "target_bundles": ["colors"],
                    },
                }
            ],
        },
        "media": {
            "base_table": "media",
            "data_table": "media_field_data",
            "keys": {"id": "mid", "bundle": "bundle"},
            "bundles": ["image"],
            "fields": [
                {
                    "name": "field_category",
                    "type": "entity_reference",
                    "settings": {"target_type": "taxonomy_term"},
                }
            ],
        },
    }
}


@pytest.fixture
def engine():
    """Fresh in-memory database with the taxonomy and site tables."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    site_metadata.create_all(engine)

    yield engine

    engine.dispose()


@pytest.fixture
def db_session(engine):
    """Provide a database session for tests."""
    session = Session(engine)

    yield session

    session.close()


@pytest.fixture
def registry():
    """Schema registry describing the test site."""
    return StaticSchemaRegistry.from_dict(SITE_SCHEMA)


@pytest.fixture
def add_term(db_session):
    """Factory adding a term and its parent edge (0 for roots)."""

    def _add_term(tid, vid, name, parent=0, weight=0):
        term = Term(tid=tid, vid=vid, name=name, weight=weight)
        db_session.add(term)
        db_session.add(TermParent(entity_id=tid, bundle=vid, parent_target_id=parent))
        db_session.flush()
        return term

    return _add_term


@pytest.fixture
def add_reference(db_session):
    """Factory storing a field value referencing a term."""

    def _add_reference(table_name, entity_id, target_id, bundle="default", delta=0):
        field_table = FIELD_TABLES[table_name]
        target_column = [c for c in field_table.c if c.name.endswith("_target_id")][0]
        db_session.execute(
            insert(field_table).values(
                {
                    "bundle": bundle,
                    "entity_id": entity_id,
                    "delta": delta,
                    target_column.name: target_id,
                }
            )
        )

    return _add_reference


@pytest.fixture
def add_entity(db_session):
    """Factory inserting a row into one of the site's entity data tables."""
    tables = {
        "node": node_field_data,
        "commerce_product": commerce_product_field_data,
        "media": media_field_data,
    }

    def _add_entity(entity_type, **values):
        db_session.execute(insert(tables[entity_type]).values(values))

    return _add_entity


@pytest.fixture
def colors(add_term):
    """Vocabulary 'colors': red (1) -> crimson (2) -> scarlet (3)."""
    return {
        "red": add_term(1, "colors", "red"),
        "crimson": add_term(2, "colors", "crimson", parent=1),
        "scarlet": add_term(3, "colors", "scarlet", parent=2),
    }


@pytest.fixture
def scarlet_product(colors, add_entity, add_reference):
    """Product 10 tagged scarlet through its color field."""
    add_entity("commerce_product", product_id=10, type="clothing", title="Scarf")
    add_reference("commerce_product__field_color", 10, 3, bundle="clothing")
    return 10


@pytest.fixture
def site_schema():
    """The test site's schema document."""
    return SITE_SCHEMA
