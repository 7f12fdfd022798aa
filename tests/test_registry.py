from __future__ import annotations

import json

import pytest
import yaml
from sqlalchemy import Column, ForeignKey, Integer, String, Table, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from relplan import RelationDescriptor, SchemaRegistry
from relplan.core.compiler import SchemaCompiler, compile_schema
from relplan.core.errors import SchemaConfigError, UnknownEntityError


# =============================================================================
# Schema documents
# =============================================================================


def test_relations_are_split_by_cardinality(registry):
    relations = registry.get_relations("Post")

    assert [d.name for d in relations.list] == ["tags", "comments"]
    assert [d.name for d in relations.singular] == ["category", "author"]
    assert relations.get("category") == RelationDescriptor(
        name="category",
        target="Category",
        cardinality="one",
        foreign_key_field="category_id",
        foreign_reference_field="id",
    )
    assert relations.get("missing") is None
    assert len(relations) == 4


def test_unique_fields(registry):
    assert registry.get_unique_fields("User") == {"email", "username"}
    assert registry.get_unique_fields("Post") == {"slug"}
    assert registry.get_unique_fields("Tag") == frozenset()


def test_entity_without_relations_has_empty_schema(registry):
    relations = registry.get_relations("Tag")
    assert not relations
    assert relations.singular == () and relations.list == ()


def test_entity_lookup_ignores_naming_convention(schema_document):
    schema_document["entities"]["PostTag"] = {"fields": {"id": {"type": "string"}}}
    registry = SchemaRegistry.from_graph(schema_document)

    for name in ("PostTag", "postTag", "post_tag"):
        assert registry.get_entity(name).name == "PostTag"
    assert "post_tag" in registry
    assert "Nope" not in registry


def test_entity_names_folding_to_same_key_are_rejected():
    document = {"entities": {
        "PostTag": {"fields": {"id": {"type": "string"}}},
        "post_tag": {"fields": {"id": {"type": "string"}}},
    }}
    with pytest.raises(SchemaConfigError) as exc_info:
        SchemaRegistry.from_graph(document)
    assert exc_info.value.errors == ["[post_tag] Entity name clashes with 'PostTag'"]


def test_unknown_entity_raises(registry):
    with pytest.raises(UnknownEntityError) as exc_info:
        registry.get_relations("Invoice")
    assert "Invoice" in str(exc_info.value)
    assert isinstance(exc_info.value, SchemaConfigError)


def test_primary_keys_are_not_unique_fields():
    registry = SchemaRegistry.from_graph({"entities": {"Thing": {
        "keys": ["code"],
        "fields": {"code": {"type": "string", "unique": True}},
    }}})
    assert registry.get_unique_fields("Thing") == frozenset()
    assert registry.get_entity("Thing").keys == ("code",)


def test_from_file_yaml(tmp_path, schema_document):
    path = tmp_path / "schema.yaml"
    path.write_text(yaml.safe_dump(schema_document))

    registry = SchemaRegistry.from_file(path)

    assert len(registry) == len(schema_document["entities"])
    assert registry.get_unique_fields("User") == {"email", "username"}


def test_from_file_json(tmp_path, schema_document):
    path = tmp_path / "schema.json"
    path.write_text(json.dumps(schema_document))

    registry = SchemaRegistry.from_file(path)

    assert registry.get_relations("Comment").get("author").target == "User"


def test_from_file_missing(tmp_path):
    with pytest.raises(SchemaConfigError, match="not found"):
        SchemaRegistry.from_file(tmp_path / "nope.yaml")


def test_from_file_not_a_mapping(tmp_path):
    path = tmp_path / "schema.yaml"
    path.write_text("- just\n- a list\n")
    with pytest.raises(SchemaConfigError, match="mapping"):
        SchemaRegistry.from_file(path)


# =============================================================================
# Compiler
# =============================================================================


def test_compiler_collects_every_error():
    document = {"entities": {
        "Post": {
            "keys": ["id"],
            "fields": {"id": {"type": "string"}, "tags": {"type": "string"}},
            "relations": {
                "tags": {"target": "Tag", "cardinality": "many"},
                "author": {"target": "User", "cardinality": "several"},
                "owner": {"target": "User", "ref": {"from_field": "owner_id", "to_field": "uuid"}},
            },
        },
        "User": {"keys": ["pk"], "fields": {"id": {"type": "string"}}},
    }}

    result = SchemaCompiler().compile(document)

    assert not result.success
    messages = result.error_messages()
    assert "[Post.tags] Unknown target entity 'Tag'" in messages
    assert "[Post.tags] Relation name clashes with a scalar field" in messages
    assert "[Post.author] Invalid cardinality 'several', must be 'one' or 'many'" in messages
    assert "[Post.owner] Ref from_field 'owner_id' not in Post" in messages
    assert "[Post.owner] Ref to_field 'uuid' not in target entity" in messages
    assert "[User] Key 'pk' not in fields" in messages


def test_compiler_reports_shape_errors():
    result = SchemaCompiler().compile({"entities": {"Post": {"relations": {"tags": {}}}}})

    assert not result.success
    assert any("target" in message for message in result.error_messages())


def test_compile_schema_raises_schema_config_error():
    with pytest.raises(SchemaConfigError) as exc_info:
        compile_schema({"entities": {"Post": {"keys": []}}})
    assert exc_info.value.errors == ["[Post] No primary keys defined"]


def test_entity_without_declared_fields_is_valid():
    entities = compile_schema({"entities": {"Tag": {}}})
    assert entities["Tag"].keys == ("id",)
    assert entities["Tag"].fields == {"id"}


# =============================================================================
# SQLAlchemy models
# =============================================================================


class Base(DeclarativeBase):
    pass


post_tags = Table(
    "post_tags",
    Base.metadata,
    Column("post_id", ForeignKey("posts.id"), primary_key=True),
    Column("tag_id", ForeignKey("tags.id"), primary_key=True),
)


class Author(Base):
    __tablename__ = "authors"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    email: Mapped[str] = mapped_column(String, unique=True)
    handle: Mapped[str] = mapped_column(String)
    name: Mapped[str] = mapped_column(String)

    posts: Mapped[list["Article"]] = relationship(back_populates="author")

    __table_args__ = (UniqueConstraint("handle"),)


class Label(Base):
    __tablename__ = "tags"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    label: Mapped[str] = mapped_column(String)


class Article(Base):
    __tablename__ = "posts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(String)
    author_id: Mapped[int] = mapped_column(ForeignKey("authors.id"))

    author: Mapped[Author] = relationship(back_populates="posts")
    tags: Mapped[list[Label]] = relationship(secondary=post_tags)


def test_from_models_reads_relationships():
    registry = SchemaRegistry.from_models([Author, Label, Article])

    relations = registry.get_relations("Article")
    assert relations.get("author") == RelationDescriptor(
        name="author",
        target="Author",
        cardinality="one",
        foreign_key_field="author_id",
        foreign_reference_field="id",
    )
    tags = relations.get("tags")
    assert tags.cardinality == "many"
    assert tags.target == "Label"
    assert tags.foreign_key_field is None

    assert [d.name for d in registry.get_relations("Author").list] == ["posts"]


def test_from_models_reads_unique_columns():
    registry = SchemaRegistry.from_models([Author, Label, Article])

    assert registry.get_unique_fields("Author") == {"email", "handle"}
    assert registry.get_unique_fields("Label") == frozenset()
    assert registry.get_entity("Article").fields == {"id", "title", "author_id"}


def test_from_models_rejects_unregistered_targets():
    with pytest.raises(SchemaConfigError, match="Unknown target entity 'Label'"):
        SchemaRegistry.from_models([Author, Article])


def test_from_models_drives_resolution():
    from relplan import RelationResolver

    registry = SchemaRegistry.from_models([Author, Label, Article])
    resolver = RelationResolver(registry)

    result = resolver.resolve_entity("Article", {
        "title": "Hi",
        "author": {"email": "a@example.com"},
        "tags": [{"id": 1}, {"label": "new"}],
    })

    assert result == {
        "title": "Hi",
        "author": {"connect": {"email": "a@example.com"}},
        "tags": {"create": [{"label": "new"}], "connect": [{"id": 1}]},
    }
