# File: tests/conftest.py
# Shared fixtures: a small users/pets schema graph and config factories.

import io
from typing import Any, Callable

import pytest

from rest_spec_generator.config import GenerationConfig
from rest_spec_generator.graph import EdgeInfo, FieldInfo, FieldType, SchemaGraph, SchemaInfo
from rest_spec_generator.predicates import Predicate


def build_pet_graph() -> SchemaGraph:
    """Users own pets; a pet always eager-loads its owner."""
    user = SchemaInfo(
        name="User",
        fields=[
            FieldInfo("name", FieldType.STRING, filter=Predicate.GROUP_EQUAL, sortable=True),
            FieldInfo("email", FieldType.STRING, unique=True, filter=Predicate.EQ),
            FieldInfo("password", FieldType.STRING, sensitive=True, filter=Predicate.GROUP_EQUAL),
            FieldInfo("age", FieldType.INTEGER, optional=True, filter=Predicate.GROUP_LENGTH, sortable=True),
            FieldInfo("created_at", FieldType.TIME, read_only=True, immutable=True),
        ],
        edges=[
            EdgeInfo("pets", target="Pet", filter=Predicate.EDGE | Predicate.IS_NIL),
        ],
    )
    pet = SchemaInfo(
        name="Pet",
        fields=[
            FieldInfo("name", FieldType.STRING, filter=Predicate.EQ),
            FieldInfo("type", FieldType.ENUM, enum_values=["dog", "cat"], filter=Predicate.GROUP_ARRAY),
        ],
        edges=[
            EdgeInfo("owner", target="User", unique=True, required=True, eager_load=True),
        ],
    )
    return SchemaGraph([user, pet])


@pytest.fixture
def pet_graph() -> SchemaGraph:
    return build_pet_graph()


@pytest.fixture
def make_config() -> Callable[..., GenerationConfig]:
    """Factory returning a validated config that writes into an in-memory buffer."""

    def _make(**kwargs: Any) -> GenerationConfig:
        kwargs.setdefault("writer", io.StringIO())
        return GenerationConfig(**kwargs).validate()

    return _make
