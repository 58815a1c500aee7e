"""Schema registry: which record types exist, their fields and storage."""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, ValidationError, model_validator

from .exceptions import SchemaDefinitionError

logger = logging.getLogger(__name__)


class FieldSettings(BaseModel):
    """Settings of one field instance."""

    target_type: Optional[str] = None
    # Vocabularies the field may reference; empty means any
    target_bundles: List[str] = Field(default_factory=list)


class FieldDefinition(BaseModel):
    """A field declared on a record type."""

    name: str
    type: str
    settings: FieldSettings = Field(default_factory=FieldSettings)
    # Bundles carrying the field; None means every bundle of the record type
    bundles: Optional[List[str]] = None
    # Per-bundle settings replacing ``settings`` for that bundle
    bundle_settings: Dict[str, FieldSettings] = Field(default_factory=dict)


class FieldMapEntry(BaseModel):
    """Where a field of a given type is attached."""

    type: str
    bundles: List[str]


class EntityKeys(BaseModel):
    """Column names of the identity, label and bundle keys."""

    id: Optional[str] = None
    label: Optional[str] = None
    bundle: Optional[str] = None


class EntityTypeDefinition(BaseModel):
    """Storage shape and fields of one record type."""

    base_table: Optional[str] = None
    data_table: Optional[str] = None
    keys: EntityKeys = Field(default_factory=EntityKeys)
    bundles: List[str] = Field(default_factory=list)
    fields: List[FieldDefinition] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_field_bundles(self):
        for field in self.fields:
            declared = set(field.bundles or []) | set(field.bundle_settings)
            unknown = declared - set(self.bundles)
            if unknown:
                raise ValueError(
                    f"Field {field.name} declares unknown bundles: "
                    f"{', '.join(sorted(unknown))}"
                )
        return self


class SchemaDocument(BaseModel):
    """Declarative description of a site's record types."""

    entity_types: Dict[str, EntityTypeDefinition] = Field(default_factory=dict)


class SchemaRegistry(ABC):
    """Abstract source of field and storage metadata."""

    @abstractmethod
    def get_field_map_by_field_type(
        self, field_type: str
    ) -> Dict[str, Dict[str, FieldMapEntry]]:
        """Map record type -> field name -> bundles, for fields of ``field_type``."""
        pass

    @abstractmethod
    def get_field_definitions(
        self, entity_type: str, bundle: str
    ) -> Dict[str, FieldDefinition]:
        """Fields present on one bundle of a record type, with their settings."""
        pass

    @abstractmethod
    def get_storage(self, entity_type: str) -> Optional[EntityTypeDefinition]:
        """Storage description of a record type, or None if it is unknown."""
        pass


class StaticSchemaRegistry(SchemaRegistry):
    """Schema registry backed by a validated :class:`SchemaDocument`."""

    def __init__(self, document: SchemaDocument):
        self.document = document

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StaticSchemaRegistry":
        """Build a registry from an already parsed schema document."""
        try:
            document = SchemaDocument.model_validate(data)
        except ValidationError as e:
            raise SchemaDefinitionError(f"Invalid schema document: {e}") from e
        return cls(document)

    @classmethod
    def from_file(cls, path: str | Path) -> "StaticSchemaRegistry":
        """Load a registry from a JSON schema document."""
        path = Path(path)
        try:
            raw = path.read_text(encoding="utf-8")
        except OSError as e:
            raise SchemaDefinitionError(
                f"Cannot read schema document: {e}", source=str(path)
            ) from e

        try:
            document = SchemaDocument.model_validate_json(raw)
        except ValidationError as e:
            raise SchemaDefinitionError(
                f"Invalid schema document {path}: {e}", source=str(path)
            ) from e

        logger.info(
            f"Loaded schema for {len(document.entity_types)} entity types from {path}"
        )
        return cls(document)

    def get_field_map_by_field_type(
        self, field_type: str
    ) -> Dict[str, Dict[str, FieldMapEntry]]:
        field_map = {}
        for entity_type, definition in self.document.entity_types.items():
            fields = {}
            for field in definition.fields:
                if field.type != field_type:
                    continue
                bundles = (
                    field.bundles if field.bundles is not None else definition.bundles
                )
                fields[field.name] = FieldMapEntry(type=field.type, bundles=bundles)
            if fields:
                field_map[entity_type] = fields
        return field_map

    def get_field_definitions(
        self, entity_type: str, bundle: str
    ) -> Dict[str, FieldDefinition]:
        definition = self.document.entity_types.get(entity_type)
        if definition is None or bundle not in definition.bundles:
            return {}

        fields = {}
        for field in definition.fields:
            if field.bundles is not None and bundle not in field.bundles:
                continue
            override = field.bundle_settings.get(bundle)
            if override is not None:
                field = field.model_copy(update={"settings": override})
            fields[field.name] = field
        return fields

    def get_storage(self, entity_type: str) -> Optional[EntityTypeDefinition]:
        return self.document.entity_types.get(entity_type)
