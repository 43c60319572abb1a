"""
REST spec generator.

Derives per-field filter capabilities from a schema graph and drives the
pipeline that produces an OpenAPI document honoring them.
"""

from .catalog import describe, filter_parameters, param_token
from .config import GenerationConfig, load_config
from .constants import ALL_OPERATIONS, HandlerTarget, Operation
from .exceptions import (
    ConfigurationError,
    HookError,
    PredicateError,
    RestGeneratorError,
    SpecGenerationError,
    SpecWriteError,
)
from .graph import EdgeInfo, FieldInfo, FieldType, SchemaGraph, SchemaInfo
from .pipeline import HandlerRenderer, generate, write_spec
from .predicates import Op, Predicate

__version__ = "0.1.0"

__all__ = [
    # Filter capability model
    'Predicate',
    'Op',
    'param_token',
    'describe',
    'filter_parameters',

    # Configuration
    'GenerationConfig',
    'load_config',
    'Operation',
    'ALL_OPERATIONS',
    'HandlerTarget',

    # Schema graph
    'SchemaGraph',
    'SchemaInfo',
    'FieldInfo',
    'EdgeInfo',
    'FieldType',

    # Pipeline
    'generate',
    'write_spec',
    'HandlerRenderer',

    # Errors
    'RestGeneratorError',
    'ConfigurationError',
    'PredicateError',
    'HookError',
    'SpecGenerationError',
    'SpecWriteError',
]
