"""
Predicate catalog: query parameter tokens and human descriptions.

Both lookups are total over the closed ``Op`` enumeration; anything else is a
bug in the caller and raises ``PredicateError``.
"""

import logging
from typing import Any, Dict, List, Protocol, Union

from .exceptions import PredicateError
from .naming import to_camel_case, to_snake_case
from .predicates import Op, Predicate


logger = logging.getLogger(__name__)


class DescribableField(Protocol):
    name: str

    @property
    def is_string(self) -> bool: ...


_TOKEN_OVERRIDES: Dict[Op, str] = {
    Op.IS_NIL: "null",
    Op.HAS_PREFIX: "prefix",
    Op.HAS_SUFFIX: "suffix",
    Op.EQUAL_FOLD: "eqFold",
}

# (generic wording, wording for textual fields)
_DESCRIPTIONS: Dict[Op, tuple] = {
    Op.EQ: ("to be equal to the provided value.", None),
    Op.NEQ: ("to be not equal to the provided value.", None),
    Op.GT: (
        "to be greater than the provided value.",
        "to be longer than the provided value.",
    ),
    Op.GTE: (
        "to be greater than or equal to the provided value.",
        "to be longer than or equal in length to the provided value.",
    ),
    Op.LT: (
        "to be less than the provided value.",
        "to be shorter than the provided value.",
    ),
    Op.LTE: (
        "to be less than or equal to the provided value.",
        "to be shorter than or equal in length to the provided value.",
    ),
    Op.IS_NIL: ("to be null/nil.", None),
    Op.NOT_NIL: ("to be not null/nil.", None),
    Op.IN: ("to be within the provided values.", None),
    Op.NOT_IN: ("to be not within the provided values.", None),
    Op.EQUAL_FOLD: ("to be equal to the provided value, case-insensitive.", None),
    Op.CONTAINS: ("to contain the provided value.", None),
    Op.CONTAINS_FOLD: ("to contain the provided value, case-insensitive.", None),
    Op.HAS_PREFIX: ("to start with the provided value.", None),
    Op.HAS_SUFFIX: ("to end with the provided value.", None),
}


def _as_op(op: Union[Op, Predicate]) -> Op:
    if isinstance(op, Predicate):
        return op.op()
    if isinstance(op, Op):
        return op
    raise PredicateError(f"unknown predicate operation: {op!r}", predicate=op)


def param_token(op: Union[Op, Predicate]) -> str:
    """Return the query string suffix for an atomic operation, e.g. ``notIn``."""
    op = _as_op(op)
    if op in _TOKEN_OVERRIDES:
        return _TOKEN_OVERRIDES[op]
    return to_camel_case(to_snake_case(op.value))


def describe(field: DescribableField, op: Union[Op, Predicate]) -> str:
    """Return a one-sentence description of filtering ``field`` with ``op``."""
    op = _as_op(op)
    generic, textual = _DESCRIPTIONS[op]
    wording = textual if textual and field.is_string else generic
    return f'Filters field "{field.name}" {wording}'


def param_name(field_name: str, op: Op, prefix: str = "") -> str:
    """Query parameter name: ``<field>`` for EQ, ``<field>.<token>`` otherwise."""
    base = f"{prefix}.{field_name}" if prefix else field_name
    if op == Op.EQ:
        return base
    return f"{base}.{param_token(op)}"


def _param_schema(value_schema: Dict[str, Any], op: Op) -> Dict[str, Any]:
    schema = {k: v for k, v in value_schema.items() if k not in ("description", "nullable")}
    if op in (Op.IS_NIL, Op.NOT_NIL):
        return {"type": "boolean"}
    if op in (Op.IN, Op.NOT_IN):
        return {"type": "array", "items": schema}
    return schema


def filter_parameters(field: Any, predicates: Predicate, prefix: str = "") -> List[Dict[str, Any]]:
    """
    Render OpenAPI query parameters for every operation enabled on a field.

    Sensitive fields never get filters regardless of their predicate set.
    """
    if getattr(field, "sensitive", False) or not predicates:
        return []

    params = []
    for op in predicates.explode():
        param = {
            "name": param_name(field.name, op, prefix),
            "in": "query",
            "required": False,
            "description": describe(field, op),
            "schema": _param_schema(field.openapi_schema(), op),
        }
        if op in (Op.IN, Op.NOT_IN):
            param["explode"] = True
            param["style"] = "form"
        params.append(param)
        logger.debug(f"Added filter parameter: {param['name']}")
    return params


def edge_filter_parameters(edge: Any, target: Any) -> List[Dict[str, Any]]:
    """
    Render query parameters contributed by an edge.

    ``has<Edge>`` appears when the edge allows nil checks; the target's own
    field filters appear (prefixed with the edge name) only with ``EDGE``.
    """
    params = []
    if edge.filter.has(Predicate.IS_NIL) or edge.filter.has(Predicate.NOT_NIL):
        params.append({
            "name": to_camel_case(f"has_{edge.name}"),
            "in": "query",
            "required": False,
            "description": f'If true, only return entities that have a "{edge.name}" edge.',
            "schema": {"type": "boolean"},
        })

    if edge.filter.has(Predicate.EDGE) and target is not None:
        for target_field in target.fields:
            params.extend(filter_parameters(target_field, target_field.filter, prefix=edge.name))
    return params
