"""
Schema compiler - validates a schema document and produces entity definitions.

Validates the document structure first (pydantic), then cross-references
between entities, and produces the frozen EntityDef map the registry serves.

Usage:
    from relplan.core.compiler import SchemaCompiler

    compiler = SchemaCompiler()
    result = compiler.compile(document_dict)
    if not result.success:
        print(result.error_messages())
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from pydantic import ValidationError as PydanticValidationError

from .defs import EntityDef, RelationDescriptor, RelationSchema
from .documents import EntityDocument, SchemaDocument
from .errors import SchemaConfigError


VALID_CARDINALITIES = ("one", "many")


@dataclass
class CompilationError:
    """Single compilation error."""
    entity: Optional[str]
    field: Optional[str]
    message: str

    def __str__(self) -> str:
        parts = []
        if self.entity:
            parts.append(self.entity)
        if self.field:
            parts.append(self.field)
        location = ".".join(parts) if parts else "global"
        return f"[{location}] {self.message}"


@dataclass
class CompilationResult:
    """Result of compilation."""
    success: bool
    entities: dict[str, EntityDef] = field(default_factory=dict)
    errors: list[CompilationError] = field(default_factory=list)

    def error_messages(self) -> list[str]:
        """Get all error messages as strings."""
        return [str(e) for e in self.errors]


class SchemaCompiler:
    """
    Compiles a schema document into entity definitions.

    Performs validation:
    - Document shape matches the pydantic models
    - Every entity declares at least one key, and keys exist in fields
    - All relation targets exist
    - Cardinality is "one" or "many"
    - Ref relations reference valid fields on both sides
    """

    def __init__(self):
        self.errors: list[CompilationError] = []

    def compile(self, document: dict[str, Any] | SchemaDocument) -> CompilationResult:
        """
        Compile a schema document.

        Args:
            document: Raw document dict or an already parsed SchemaDocument

        Returns:
            CompilationResult with either entities or errors
        """
        self.errors = []

        if not isinstance(document, SchemaDocument):
            try:
                document = SchemaDocument.model_validate(document)
            except PydanticValidationError as e:
                for err in e.errors():
                    location = ".".join(str(part) for part in err["loc"])
                    self._add_error(f"{location}: {err['msg']}")
                return CompilationResult(success=False, errors=self.errors)

        entities = document.entities

        self._validate_entities(entities)
        self._validate_relations(entities)

        if self.errors:
            return CompilationResult(success=False, errors=self.errors)

        return CompilationResult(
            success=True,
            entities={
                name: self._build_entity(name, entity)
                for name, entity in entities.items()
            },
        )

    def _add_error(
        self,
        message: str,
        entity: Optional[str] = None,
        field: Optional[str] = None,
    ):
        """Add a compilation error."""
        self.errors.append(CompilationError(
            entity=entity,
            field=field,
            message=message,
        ))

    def _validate_entities(self, entities: dict[str, EntityDocument]):
        """Validate entity definitions."""
        for entity_name, entity in entities.items():
            if not entity.keys:
                self._add_error(
                    "No primary keys defined",
                    entity=entity_name,
                )

            # Keys are implicit fields when no fields are declared at all
            if entity.fields:
                for key in entity.keys:
                    if key not in entity.fields:
                        self._add_error(
                            f"Key '{key}' not in fields",
                            entity=entity_name,
                        )

            for rel_name in entity.relations:
                if rel_name in entity.fields:
                    self._add_error(
                        "Relation name clashes with a scalar field",
                        entity=entity_name,
                        field=rel_name,
                    )

    def _validate_relations(self, entities: dict[str, EntityDocument]):
        """Validate all relations reference valid entities and fields."""
        for entity_name, entity in entities.items():
            for rel_name, rel in entity.relations.items():
                if rel.target not in entities:
                    self._add_error(
                        f"Unknown target entity '{rel.target}'",
                        entity=entity_name,
                        field=rel_name,
                    )
                    continue

                if rel.cardinality not in VALID_CARDINALITIES:
                    self._add_error(
                        f"Invalid cardinality '{rel.cardinality}', must be 'one' or 'many'",
                        entity=entity_name,
                        field=rel_name,
                    )

                if rel.ref:
                    self._validate_ref(
                        entity_name,
                        rel_name,
                        rel.ref.from_field,
                        rel.ref.to_field,
                        entity,
                        entities[rel.target],
                    )

    def _validate_ref(
        self,
        entity_name: str,
        rel_name: str,
        from_field: Optional[str],
        to_field: str,
        parent: EntityDocument,
        target: EntityDocument,
    ):
        """Validate ref relation configuration."""
        if from_field and parent.fields and from_field not in parent.fields:
            self._add_error(
                f"Ref from_field '{from_field}' not in {entity_name}",
                entity=entity_name,
                field=rel_name,
            )

        target_fields = set(target.fields) | set(target.keys)
        if to_field not in target_fields:
            self._add_error(
                f"Ref to_field '{to_field}' not in target entity",
                entity=entity_name,
                field=rel_name,
            )

    def _build_entity(self, name: str, entity: EntityDocument) -> EntityDef:
        """Build the frozen entity definition."""
        relations = RelationSchema.from_descriptors(
            RelationDescriptor(
                name=rel_name,
                target=rel.target,
                cardinality=rel.cardinality,
                foreign_key_field=rel.ref.from_field if rel.ref else None,
                foreign_reference_field=rel.ref.to_field if rel.ref else "id",
            )
            for rel_name, rel in entity.relations.items()
        )
        return EntityDef(
            name=name,
            keys=tuple(entity.keys),
            fields=frozenset(entity.fields) | frozenset(entity.keys),
            unique_fields=frozenset(
                field_name
                for field_name, field_doc in entity.fields.items()
                if field_doc.unique and field_name not in entity.keys
            ),
            relations=relations,
        )


def compile_schema(document: dict[str, Any] | SchemaDocument) -> dict[str, EntityDef]:
    """
    Convenience function to compile a schema document.

    Raises:
        SchemaConfigError: If compilation fails

    Returns:
        Entity definitions keyed by entity name
    """
    compiler = SchemaCompiler()
    result = compiler.compile(document)

    if not result.success:
        raise SchemaConfigError(result.error_messages())

    return result.entities
