"""
Centralized constants for the REST spec generator.

Operation and handler enumerations, pagination defaults and the conventional
output location live here so the config layer and the assembler agree on them.
"""

from enum import Enum
from typing import List


OPENAPI_VERSION = "3.0.3"


class Operation(str, Enum):
    """CRUD operation(s) generated per schema."""

    # POST /<resources>
    CREATE = "create"
    # GET /<resources>/{id}
    READ = "read"
    # PATCH /<resources>/{id}
    UPDATE = "update"
    # DELETE /<resources>/{id}
    DELETE = "delete"
    # GET /<resources>
    LIST = "list"

    def __str__(self) -> str:
        return self.value


ALL_OPERATIONS: List[Operation] = [
    Operation.CREATE,
    Operation.READ,
    Operation.UPDATE,
    Operation.DELETE,
    Operation.LIST,
]


class HandlerTarget(str, Enum):
    """Server frameworks that request handlers can be generated for."""

    NONE = ""
    GENERIC = "generic"
    DRF = "drf"
    FASTAPI = "fastapi"

    def __str__(self) -> str:
        return self.value


SUPPORTED_HANDLERS: List[HandlerTarget] = [
    HandlerTarget.NONE,
    HandlerTarget.GENERIC,
    HandlerTarget.DRF,
    HandlerTarget.FASTAPI,
]


class PaginationDefaults:
    """Page size bounds used when the configuration leaves them unset."""

    MIN_ITEMS_PER_PAGE = 1
    MAX_ITEMS_PER_PAGE = 100
    ITEMS_PER_PAGE = 10


class OutputDefaults:
    """Conventional on-disk destination for the finished document."""

    OUTPUT_DIR = "./rest"
    SPEC_FILENAME = "openapi.json"
    SPEC_HANDLER_PATH = "/openapi.json"


class ParamNames:
    """Names of the non-filter query parameters on list operations."""

    PAGE = "page"
    PER_PAGE = "per_page"
    SORT = "sort"
    ORDER = "order"
