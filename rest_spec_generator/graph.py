"""
Schema graph models consumed by the generator.

Loading a graph from a real schema source is done elsewhere; these models are
the contract the generator reads. Per-field and per-edge filter capability is
already resolved into a ``Predicate`` by the time it lands here.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Sequence, Union

from .constants import Operation
from .predicates import Predicate


class FieldType(Enum):
    """Value domain of a field."""

    STRING = "string"
    TEXT = "text"
    ENUM = "enum"
    UUID = "uuid"
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    TIME = "time"
    JSON = "json"
    BYTES = "bytes"


# Types whose values are compared by length/lexical order rather than magnitude.
TEXTUAL_TYPES = frozenset({FieldType.STRING, FieldType.TEXT, FieldType.ENUM, FieldType.UUID})

OPENAPI_TYPES: Dict[FieldType, Dict[str, Any]] = {
    FieldType.STRING: {"type": "string"},
    FieldType.TEXT: {"type": "string"},
    FieldType.ENUM: {"type": "string"},
    FieldType.UUID: {"type": "string", "format": "uuid"},
    FieldType.INTEGER: {"type": "integer"},
    FieldType.FLOAT: {"type": "number", "format": "double"},
    FieldType.BOOLEAN: {"type": "boolean"},
    FieldType.TIME: {"type": "string", "format": "date-time"},
    FieldType.JSON: {"type": "object", "additionalProperties": True},
    FieldType.BYTES: {"type": "string", "format": "byte"},
}


def _coerce_predicate(value: Union[Predicate, int, Sequence[str], None]) -> Predicate:
    if value is None:
        return Predicate(0)
    if isinstance(value, (list, tuple, set, frozenset)):
        return Predicate.from_names(value)
    return Predicate(value)


@dataclass
class FieldInfo:
    """A scalar field on a schema."""

    name: str
    type: FieldType = FieldType.STRING
    optional: bool = False
    nullable: bool = False
    unique: bool = False
    sensitive: bool = False
    immutable: bool = False
    read_only: bool = False
    filter: Predicate = Predicate(0)
    sortable: bool = False
    description: Optional[str] = None
    enum_values: Optional[List[str]] = None

    def __post_init__(self):
        self.filter = _coerce_predicate(self.filter)
        if self.enum_values and self.type != FieldType.ENUM:
            self.type = FieldType.ENUM

    @property
    def is_string(self) -> bool:
        """True when the value domain is textual."""
        return self.type in TEXTUAL_TYPES

    def openapi_schema(self) -> Dict[str, Any]:
        """OpenAPI schema fragment describing a single value of this field."""
        schema = dict(OPENAPI_TYPES[self.type])
        if self.enum_values:
            schema["enum"] = list(self.enum_values)
        if self.nullable:
            schema["nullable"] = True
        if self.description:
            schema["description"] = self.description
        return schema


@dataclass
class EdgeInfo:
    """A relation from one schema to another."""

    name: str
    target: str
    unique: bool = False
    required: bool = False
    # None defers to the configuration's default_eager_load.
    eager_load: Optional[bool] = None
    filter: Predicate = Predicate(0)
    description: Optional[str] = None
    exclude_endpoint: bool = False

    def __post_init__(self):
        self.filter = _coerce_predicate(self.filter)

    def is_eager_loaded(self, default: bool) -> bool:
        return default if self.eager_load is None else self.eager_load


@dataclass
class SchemaInfo:
    """
    A single entity schema.

    ``operations`` and ``pagination`` override the configuration defaults for
    this schema only; leave them ``None`` to inherit.
    """

    name: str
    fields: List[FieldInfo] = field(default_factory=list)
    edges: List[EdgeInfo] = field(default_factory=list)
    id_type: FieldType = FieldType.INTEGER
    operations: Optional[List[Operation]] = None
    pagination: Optional[bool] = None
    skip: bool = False
    description: Optional[str] = None

    def get_field(self, name: str) -> Optional[FieldInfo]:
        for f in self.fields:
            if f.name == name:
                return f
        return None

    def get_edge(self, name: str) -> Optional[EdgeInfo]:
        for e in self.edges:
            if e.name == name:
                return e
        return None

    @property
    def sortable_fields(self) -> List[str]:
        return ["id"] + [f.name for f in self.fields if f.sortable and not f.sensitive]


@dataclass
class SchemaGraph:
    """Ordered collection of schemas making up one generation input."""

    schemas: List[SchemaInfo] = field(default_factory=list)

    def __iter__(self) -> Iterator[SchemaInfo]:
        return iter(self.schemas)

    def __len__(self) -> int:
        return len(self.schemas)

    def get(self, name: str) -> Optional[SchemaInfo]:
        """Get a schema by name."""
        for schema in self.schemas:
            if schema.name == name:
                return schema
        return None
