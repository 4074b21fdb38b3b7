"""Registry that reflects entity classes into descriptor sets."""

from __future__ import annotations

import dataclasses
import logging
import sys
import types
import typing
from datetime import datetime
from typing import Any, Union

from sqlite_tables.entity import (
    COLUMN_METADATA_KEY,
    JOIN_METADATA_KEY,
    TABLE_NAME_ATTR,
    ColumnSpec,
    JoinSpec,
    is_entity,
)
from sqlite_tables.exceptions import SchemaError
from sqlite_tables.types import (
    ColumnDescriptor,
    EntityMetadata,
    JoinDescriptor,
    SemanticType,
)

logger = logging.getLogger(__name__)

# Exact-type lookup; bool must not fall through to int.
_PYTHON_TYPES: dict[Any, SemanticType] = {
    str: SemanticType.TEXT,
    bool: SemanticType.BOOLEAN,
    int: SemanticType.INTEGER,
    float: SemanticType.REAL,
    bytes: SemanticType.BLOB,
    bytearray: SemanticType.BLOB,
    datetime: SemanticType.TIMESTAMP,
}


def unwrap_optional(annotation: Any) -> Any:
    """Strip ``None`` from ``X | None`` / ``Optional[X]``."""
    origin = typing.get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        args = [a for a in typing.get_args(annotation) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return annotation


def infer_semantic_type(annotation: Any, owner: type, field_name: str) -> SemanticType:
    """Infer the semantic type of a field from its annotation."""
    base = unwrap_optional(annotation)
    if base in _PYTHON_TYPES:
        return _PYTHON_TYPES[base]
    if is_entity(base):
        return SemanticType.ENTITY
    raise SchemaError(
        f"Unsupported type: {getattr(base, '__name__', base)!s} for field "
        f"'{field_name}' in table {owner.__name__}"
    )


class MetadataRegistry:
    """Builds and caches :class:`EntityMetadata` keyed by entity class."""

    def __init__(self) -> None:
        self._metadata: dict[type, EntityMetadata] = {}

    def describe(self, entity_type: type) -> EntityMetadata:
        """Return the metadata for an entity class.

        Raises:
            SchemaError: If the class is not an entity, has no table name,
                declares no mapped fields, or declares an invalid field.
        """
        cached = self._metadata.get(entity_type)
        if cached is not None:
            return cached

        metadata = self._build(entity_type)
        self._metadata[entity_type] = metadata
        logger.debug(
            "Described %s as table '%s' (%d columns, %d joins)",
            entity_type.__name__,
            metadata.table_name,
            len(metadata.columns),
            len(metadata.joins),
        )
        return metadata

    def related(self, join: JoinDescriptor) -> EntityMetadata:
        """Return the metadata of a join's related entity."""
        return self.describe(join.related_entity_type)

    def source_column(self, join: JoinDescriptor) -> ColumnDescriptor:
        """Return the related-entity column that supplies a join's key value."""
        related = self.related(join)
        column = related.get_column(join.source_field_name)
        if column is None:
            column = related.column_by_name(join.source_field_name)
        if column is None:
            raise SchemaError(
                f"Source field '{join.source_field_name}' not found in "
                f"{related.entity_type.__name__} for join field '{join.field_name}'"
            )
        return column

    def __contains__(self, entity_type: type) -> bool:
        return entity_type in self._metadata

    def _build(self, entity_type: type) -> EntityMetadata:
        if not isinstance(entity_type, type):
            raise SchemaError(f"Expected an entity class, got {entity_type!r}")

        table_name = getattr(entity_type, TABLE_NAME_ATTR, None)
        if table_name is None:
            raise SchemaError(
                f"Entity class {entity_type.__name__} is not annotated with @table"
            )
        if not table_name:
            raise SchemaError(
                f"Entity class {entity_type.__name__} has no table name defined"
            )
        if not dataclasses.is_dataclass(entity_type):
            raise SchemaError(f"Entity class {entity_type.__name__} is not a dataclass")

        try:
            hints = typing.get_type_hints(entity_type)
        except NameError as e:
            raise SchemaError(
                f"Cannot resolve field annotations of {entity_type.__name__}: {e}"
            ) from e

        columns: dict[str, ColumnDescriptor] = {}
        joins: dict[str, JoinDescriptor] = {}
        primary_key: ColumnDescriptor | None = None

        for f in dataclasses.fields(entity_type):
            column_spec = f.metadata.get(COLUMN_METADATA_KEY)
            join_spec = f.metadata.get(JOIN_METADATA_KEY)

            if column_spec is not None:
                descriptor = self._column_descriptor(
                    entity_type, f.name, hints.get(f.name), column_spec
                )
                if descriptor.primary_key:
                    if primary_key is not None:
                        raise SchemaError(
                            f"Entity class {entity_type.__name__} declares more than "
                            f"one primary key ('{primary_key.field_name}', '{f.name}')"
                        )
                    primary_key = descriptor
                columns[f.name] = descriptor
            elif join_spec is not None:
                joins[f.name] = self._join_descriptor(entity_type, f.name, join_spec)

        return EntityMetadata(
            entity_type=entity_type,
            table_name=table_name,
            columns=columns,
            joins=joins,
            primary_key=primary_key,
        )

    def _column_descriptor(
        self, owner: type, field_name: str, annotation: Any, spec: ColumnSpec
    ) -> ColumnDescriptor:
        if spec.sql_type is not None:
            semantic_type = spec.sql_type
        elif annotation is None:
            raise SchemaError(
                f"Field '{field_name}' in class {owner.__name__} has no type annotation"
            )
        else:
            semantic_type = infer_semantic_type(annotation, owner, field_name)

        nullable = spec.nullable if spec.nullable is not None else not spec.primary_key
        return ColumnDescriptor(
            field_name=field_name,
            column_name=spec.name or field_name,
            semantic_type=semantic_type,
            nullable=nullable,
            unique=spec.unique,
            primary_key=spec.primary_key,
            auto_increment=spec.auto_increment,
            default_value=spec.default_value,
        )

    def _join_descriptor(self, owner: type, field_name: str, spec: JoinSpec) -> JoinDescriptor:
        if not spec.target_name:
            raise SchemaError(
                f"Field '{field_name}' in class {owner.__name__} has no target name defined"
            )
        if not spec.source:
            raise SchemaError(
                f"Field '{field_name}' in class {owner.__name__} has no source field defined"
            )
        return JoinDescriptor(
            field_name=field_name,
            target_column_name=spec.target_name,
            related_entity_type=self._resolve_relationship(owner, field_name, spec.relationship),
            source_field_name=spec.source,
            nullable=spec.nullable,
            unique=spec.unique,
            default_value=spec.default_value,
        )

    def _resolve_relationship(self, owner: type, field_name: str, relationship: type | str) -> type:
        """Resolve a relationship given by class or by name in the owner's module."""
        if isinstance(relationship, type):
            return relationship
        if relationship == owner.__name__:
            return owner
        module = sys.modules.get(owner.__module__)
        resolved = getattr(module, relationship, None) if module is not None else None
        if not isinstance(resolved, type):
            raise SchemaError(
                f"Field '{field_name}' in class {owner.__name__} has no relationship "
                f"class defined (cannot resolve '{relationship}')"
            )
        return resolved


default_registry = MetadataRegistry()


def describe(entity_type: type) -> EntityMetadata:
    """Describe an entity class using the shared default registry."""
    return default_registry.describe(entity_type)
