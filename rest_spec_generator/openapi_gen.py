import copy
import logging
from typing import Any, Dict, Iterator, List, Optional, Tuple

from .catalog import edge_filter_parameters, filter_parameters
from .config import GenerationConfig
from .constants import OPENAPI_VERSION, Operation, OutputDefaults, ParamNames
from .errors import (
    ERROR_SCHEMA,
    ERROR_SCHEMA_NAME,
    EXCLUDED_ERRORS_BY_OPERATION,
    ONLY_ON_MUTATIONS,
)
from .exceptions import SpecGenerationError
from .graph import OPENAPI_TYPES, EdgeInfo, SchemaGraph, SchemaInfo
from .naming import pluralize, to_kebab_case, to_pascal_case, to_snake_case


logger = logging.getLogger(__name__)

HTTP_METHODS = ("get", "put", "post", "delete", "options", "head", "patch", "trace")


def schema_ref(name: str) -> Dict[str, str]:
    return {"$ref": f"#/components/schemas/{name}"}


def resource_path(schema: SchemaInfo) -> str:
    """Collection path for a schema, e.g. ``/pet-owners``."""
    return "/" + to_kebab_case(pluralize(to_snake_case(schema.name)))


def effective_operations(schema: SchemaInfo, config: GenerationConfig) -> List[Operation]:
    if schema.operations is not None:
        return [Operation(op) for op in schema.operations]
    return list(config.default_operations)


def is_paginated(schema: SchemaInfo, config: GenerationConfig) -> bool:
    if schema.pagination is not None:
        return schema.pagination
    return not config.disable_pagination


def _json_content(schema: Dict[str, Any]) -> Dict[str, Any]:
    return {"application/json": {"schema": schema}}


def _target_schema(graph: SchemaGraph, owner: SchemaInfo, edge: EdgeInfo) -> Optional[SchemaInfo]:
    target = graph.get(edge.target)
    if target is None:
        raise SpecGenerationError(
            f"edge {edge.name!r} on {owner.name!r} points at unknown schema {edge.target!r}",
            schema=owner.name,
            edge=edge.name,
        )
    if target.skip:
        logger.warning(f"Skipping edge {owner.name}.{edge.name}: target schema {target.name} is skipped.")
        return None
    return target


def check_edge_targets(graph: SchemaGraph) -> None:
    """Fail on any edge of a generated schema whose target is not in the graph."""
    for schema in graph:
        if schema.skip:
            continue
        for edge in schema.edges:
            if graph.get(edge.target) is None:
                raise SpecGenerationError(
                    f"edge {edge.name!r} on {schema.name!r} points at unknown schema {edge.target!r}",
                    schema=schema.name,
                    edge=edge.name,
                )


# --- Component schemas ---


def generate_read_schema(
    schema: SchemaInfo, graph: SchemaGraph, config: GenerationConfig
) -> Dict[str, Any]:
    """Output schema for a single entity. Sensitive fields are never exposed."""
    properties: Dict[str, Any] = {"id": dict(OPENAPI_TYPES[schema.id_type])}
    required = ["id"]

    for field_info in schema.fields:
        if field_info.sensitive:
            continue
        properties[field_info.name] = field_info.openapi_schema()
        # Fields are always serialized unless the caller opted out, so a
        # missing optional field is still present (possibly null/zero).
        if not config.disable_patch_json_tag or not field_info.optional:
            required.append(field_info.name)

    edge_properties = {}
    for edge in schema.edges:
        if not edge.is_eager_loaded(config.default_eager_load):
            continue
        target = _target_schema(graph, schema, edge)
        if target is None:
            continue
        if edge.unique:
            edge_properties[edge.name] = schema_ref(target.name)
        else:
            edge_properties[edge.name] = {"type": "array", "items": schema_ref(target.name)}

    if edge_properties:
        properties["edges"] = {"type": "object", "properties": edge_properties}

    result = {"type": "object", "properties": properties, "required": required}
    if schema.description:
        result["description"] = schema.description
    return result


def _edge_id_schema(graph: SchemaGraph, edge: EdgeInfo) -> Dict[str, Any]:
    target = graph.get(edge.target)
    if target is None:
        raise SpecGenerationError(
            f"edge {edge.name!r} points at unknown schema {edge.target!r}", edge=edge.name
        )
    id_schema = dict(OPENAPI_TYPES[target.id_type])
    if edge.unique:
        return id_schema
    return {"type": "array", "items": id_schema}


def generate_create_schema(
    schema: SchemaInfo, graph: SchemaGraph, config: GenerationConfig
) -> Dict[str, Any]:
    """Input schema for create (POST)."""
    properties: Dict[str, Any] = {}
    required: List[str] = []

    if config.allow_client_uuids:
        properties["id"] = dict(OPENAPI_TYPES[schema.id_type])

    for field_info in schema.fields:
        if field_info.read_only:
            continue
        properties[field_info.name] = field_info.openapi_schema()
        if not field_info.optional:
            required.append(field_info.name)

    for edge in schema.edges:
        properties[edge.name] = _edge_id_schema(graph, edge)
        if edge.required:
            required.append(edge.name)

    result: Dict[str, Any] = {"type": "object", "properties": properties}
    if required:
        result["required"] = required
    if config.strict_mutate:
        result["additionalProperties"] = False
    return result


def generate_update_schema(
    schema: SchemaInfo, graph: SchemaGraph, config: GenerationConfig
) -> Dict[str, Any]:
    """Input schema for update (PATCH). Every property is optional."""
    properties: Dict[str, Any] = {}

    for field_info in schema.fields:
        if field_info.read_only or field_info.immutable:
            continue
        properties[field_info.name] = field_info.openapi_schema()

    for edge in schema.edges:
        if edge.unique:
            properties[edge.name] = _edge_id_schema(graph, edge)
        else:
            id_list = _edge_id_schema(graph, edge)
            properties[f"add_{edge.name}"] = id_list
            properties[f"remove_{edge.name}"] = copy.deepcopy(id_list)

    result: Dict[str, Any] = {"type": "object", "properties": properties}
    if config.strict_mutate:
        result["additionalProperties"] = False
    return result


def generate_list_schema(schema_name: str) -> Dict[str, Any]:
    """Pagination envelope wrapping a page of entities."""
    return {
        "type": "object",
        "properties": {
            "page": {"type": "integer", "description": "Current page number.", "minimum": 1},
            "total_count": {"type": "integer", "description": "Total number of items.", "minimum": 0},
            "last_page": {"type": "integer", "description": "Last page number.", "minimum": 1},
            "content": {"type": "array", "items": schema_ref(schema_name)},
        },
        "required": ["page", "total_count", "last_page", "content"],
    }


# --- Parameters ---


def _create_path_parameter(name: str, description: str, schema: Dict[str, Any]) -> Dict[str, Any]:
    """Creates a standardized path parameter."""
    return {
        "name": name,
        "in": "path",
        "required": True,
        "description": description,
        "schema": schema,
    }


def pagination_parameters(config: GenerationConfig) -> List[Dict[str, Any]]:
    """``page`` and ``per_page`` bounded by the configured page sizes."""
    return [
        {
            "name": ParamNames.PAGE,
            "in": "query",
            "required": False,
            "description": "Returns the given page number of results.",
            "schema": {"type": "integer", "minimum": 1, "default": 1},
        },
        {
            "name": ParamNames.PER_PAGE,
            "in": "query",
            "required": False,
            "description": "The number of results to return per page.",
            "schema": {
                "type": "integer",
                "minimum": config.min_items_per_page,
                "maximum": config.max_items_per_page,
                "default": config.items_per_page,
            },
        },
    ]


def sort_parameters(schema: SchemaInfo) -> List[Dict[str, Any]]:
    """``sort`` (enum of sortable fields) and ``order``."""
    return [
        {
            "name": ParamNames.SORT,
            "in": "query",
            "required": False,
            "description": "Sort entity results by the given field.",
            "schema": {"type": "string", "enum": schema.sortable_fields, "default": "id"},
        },
        {
            "name": ParamNames.ORDER,
            "in": "query",
            "required": False,
            "description": "Sorts the provided results in either ascending or descending order.",
            "schema": {"type": "string", "enum": ["asc", "desc"], "default": "asc"},
        },
    ]


def list_parameters(
    schema: SchemaInfo, graph: SchemaGraph, config: GenerationConfig, paginated: bool
) -> List[Dict[str, Any]]:
    """Every query parameter accepted by a list operation over ``schema``."""
    params = pagination_parameters(config) if paginated else []
    params.extend(sort_parameters(schema))

    for field_info in schema.fields:
        params.extend(filter_parameters(field_info, field_info.filter))

    for edge in schema.edges:
        if not edge.filter:
            continue
        target = _target_schema(graph, schema, edge)
        params.extend(edge_filter_parameters(edge, target))

    seen = set()
    unique_params = []
    for param in params:
        if param["name"] in seen:
            logger.warning(f"Duplicate query parameter {param['name']!r} on {schema.name}, keeping the first.")
            continue
        seen.add(param["name"])
        unique_params.append(param)
    return unique_params


# --- Operations and paths ---


def _read_tags(schema: SchemaInfo, graph: SchemaGraph, config: GenerationConfig) -> List[str]:
    tags = [schema.name]
    if config.add_edges_to_tags:
        for edge in schema.edges:
            if edge.is_eager_loaded(config.default_eager_load) and edge.target not in tags:
                tags.append(edge.target)
    return tags


def _list_response(schema_name: str, paginated: bool) -> Dict[str, Any]:
    if paginated:
        return schema_ref(f"{schema_name}List")
    return {"type": "array", "items": schema_ref(schema_name)}


def generate_paths_for_schema(
    schema: SchemaInfo, graph: SchemaGraph, config: GenerationConfig
) -> Dict[str, Any]:
    """CRUD and list path items for one schema."""
    operations = effective_operations(schema, config)
    paginated = is_paginated(schema, config)
    collection = resource_path(schema)
    detail = f"{collection}/{{id}}"
    plural_name = to_pascal_case(pluralize(to_snake_case(schema.name)))
    read_tags = _read_tags(schema, graph, config)
    paths: Dict[str, Any] = {}

    if Operation.LIST in operations:
        paths.setdefault(collection, {})["get"] = {
            "tags": read_tags,
            "summary": f"List {plural_name}",
            "operationId": f"list{plural_name}",
            "parameters": list_parameters(schema, graph, config, paginated),
            "responses": {
                "200": {
                    "description": f"The list of {plural_name}.",
                    "content": _json_content(_list_response(schema.name, paginated)),
                },
            },
        }

    if Operation.CREATE in operations:
        paths.setdefault(collection, {})["post"] = {
            "tags": [schema.name],
            "summary": f"Create a new {schema.name}",
            "operationId": f"create{schema.name}",
            "requestBody": {
                "description": f"{schema.name} to create.",
                "required": True,
                "content": _json_content(schema_ref(f"{schema.name}Create")),
            },
            "responses": {
                "201": {
                    "description": f"The created {schema.name}.",
                    "content": _json_content(schema_ref(schema.name)),
                },
            },
        }

    id_param = _create_path_parameter(
        "id", f"The ID of the {schema.name} to act upon.", dict(OPENAPI_TYPES[schema.id_type])
    )

    if Operation.READ in operations:
        paths.setdefault(detail, {})["get"] = {
            "tags": read_tags,
            "summary": f"Retrieve a {schema.name}",
            "operationId": f"read{schema.name}",
            "responses": {
                "200": {
                    "description": f"The requested {schema.name}.",
                    "content": _json_content(schema_ref(schema.name)),
                },
            },
        }

    if Operation.UPDATE in operations:
        paths.setdefault(detail, {})["patch"] = {
            "tags": [schema.name],
            "summary": f"Update an existing {schema.name}",
            "operationId": f"update{schema.name}",
            "requestBody": {
                "description": f"{schema.name} fields to update. All fields are optional.",
                "required": True,
                "content": _json_content(schema_ref(f"{schema.name}Update")),
            },
            "responses": {
                "200": {
                    "description": f"The updated {schema.name}.",
                    "content": _json_content(schema_ref(schema.name)),
                },
            },
        }

    if Operation.DELETE in operations:
        paths.setdefault(detail, {})["delete"] = {
            "tags": [schema.name],
            "summary": f"Delete an existing {schema.name}",
            "operationId": f"delete{schema.name}",
            "responses": {
                "204": {"description": f"The {schema.name} was deleted."},
            },
        }

    if detail in paths:
        paths[detail] = {"parameters": [id_param], **paths[detail]}

    if Operation.READ in operations:
        paths.update(generate_edge_paths(schema, graph, config, id_param))

    return paths


def generate_edge_paths(
    schema: SchemaInfo,
    graph: SchemaGraph,
    config: GenerationConfig,
    id_param: Dict[str, Any],
) -> Dict[str, Any]:
    """
    Dedicated ``/<resources>/{id}/<edge>`` endpoints.

    Eager-loaded edges are already embedded in the parent, so their endpoint is
    optional and, unless told otherwise, not paginated.
    """
    paths: Dict[str, Any] = {}
    detail = f"{resource_path(schema)}/{{id}}"

    for edge in schema.edges:
        if edge.exclude_endpoint:
            continue
        eager = edge.is_eager_loaded(config.default_eager_load)
        if eager and config.disable_eager_loaded_endpoints:
            logger.debug(f"Skipping endpoint for eager-loaded edge {schema.name}.{edge.name}")
            continue
        target = _target_schema(graph, schema, edge)
        if target is None:
            continue

        edge_path = f"{detail}/{to_kebab_case(edge.name)}"
        edge_pascal = to_pascal_case(edge.name)

        if edge.unique:
            operation = {
                "tags": [schema.name, target.name],
                "summary": f"Retrieve the {edge.name} of a {schema.name}",
                "operationId": f"read{schema.name}{edge_pascal}",
                "responses": {
                    "200": {
                        "description": f"The {target.name} attached to the {schema.name}.",
                        "content": _json_content(schema_ref(target.name)),
                    },
                },
            }
        else:
            paginated = is_paginated(target, config)
            if eager and not config.disable_eager_load_non_paged_opt:
                paginated = False
            operation = {
                "tags": [schema.name, target.name],
                "summary": f"List the {edge.name} of a {schema.name}",
                "operationId": f"list{schema.name}{edge_pascal}",
                "parameters": list_parameters(target, graph, config, paginated),
                "responses": {
                    "200": {
                        "description": f"The {edge.name} attached to the {schema.name}.",
                        "content": _json_content(_list_response(target.name, paginated)),
                    },
                },
            }

        paths[edge_path] = {"parameters": [copy.deepcopy(id_param)], "get": operation}
        logger.debug(f"Added edge endpoint: {edge_path}")

    return paths


def generate_spec_handler_path() -> Dict[str, Any]:
    """Path item serving the document itself."""
    return {
        OutputDefaults.SPEC_HANDLER_PATH: {
            "get": {
                "tags": ["Meta"],
                "summary": "Get the OpenAPI specification for this API",
                "operationId": "getOpenAPI",
                "responses": {
                    "200": {
                        "description": "The OpenAPI specification.",
                        "content": _json_content({"type": "object", "additionalProperties": True}),
                    },
                },
            }
        }
    }


# --- Document assembly ---


def new_document(config: GenerationConfig) -> Dict[str, Any]:
    """Deep copy of the configured base document, with required keys filled in."""
    doc = copy.deepcopy(config.spec) if config.spec else {}
    doc.setdefault("openapi", OPENAPI_VERSION)
    doc.setdefault("info", {"title": "API", "version": "1.0.0"})
    doc.setdefault("paths", {})
    doc.setdefault("components", {})
    doc["components"].setdefault("schemas", {})
    doc.setdefault("tags", [])
    return doc


def _merge_paths(doc: Dict[str, Any], paths: Dict[str, Any]) -> None:
    for path, item in paths.items():
        existing = doc["paths"].setdefault(path, {})
        for key, value in item.items():
            if key in existing:
                logger.debug(f"Keeping existing {key!r} on {path} from the base document.")
                continue
            existing[key] = value


def assemble_document(graph: SchemaGraph, config: GenerationConfig, doc: Dict[str, Any]) -> Dict[str, Any]:
    """Add every schema-driven component, path and tag to ``doc`` in place."""
    check_edge_targets(graph)
    schemas = doc["components"]["schemas"]
    tags: List[str] = []

    for schema in graph:
        if schema.skip:
            logger.debug(f"Skipping schema {schema.name}")
            continue
        operations = effective_operations(schema, config)
        logger.debug(f"Generating {schema.name} with operations {[op.value for op in operations]}")

        schemas.setdefault(schema.name, generate_read_schema(schema, graph, config))
        if Operation.CREATE in operations:
            schemas.setdefault(f"{schema.name}Create", generate_create_schema(schema, graph, config))
        if Operation.UPDATE in operations:
            schemas.setdefault(f"{schema.name}Update", generate_update_schema(schema, graph, config))
        if is_paginated(schema, config):
            schemas.setdefault(f"{schema.name}List", generate_list_schema(schema.name))

        _merge_paths(doc, generate_paths_for_schema(schema, graph, config))
        tags.append(schema.name)

    if config.has_handler and not config.disable_spec_handler:
        _merge_paths(doc, generate_spec_handler_path())
        tags.append("Meta")

    schemas.setdefault(ERROR_SCHEMA_NAME, copy.deepcopy(ERROR_SCHEMA))

    existing_tags = {tag["name"] for tag in doc["tags"]}
    for tag in tags:
        if tag not in existing_tags:
            doc["tags"].append({"name": tag})
            existing_tags.add(tag)

    logger.info(f"Assembled {len(doc['paths'])} paths and {len(schemas)} schemas.")
    return doc


# --- Global policies ---


def iter_operations(doc: Dict[str, Any]) -> Iterator[Tuple[str, str, Dict[str, Any]]]:
    """Yield ``(path, method, operation)`` for every operation in ``doc``."""
    for path, item in doc.get("paths", {}).items():
        for method in HTTP_METHODS:
            operation = item.get(method)
            if isinstance(operation, dict):
                yield path, method, operation


def operation_kind(method: str, operation: Dict[str, Any]) -> str:
    """Classify an operation as create/read/update/delete/list."""
    if method == "post":
        return Operation.CREATE.value
    if method in ("patch", "put"):
        return Operation.UPDATE.value
    if method == "delete":
        return Operation.DELETE.value
    if str(operation.get("operationId", "")).startswith("list"):
        return Operation.LIST.value
    return Operation.READ.value


def apply_global_request_headers(doc: Dict[str, Any], config: GenerationConfig) -> None:
    if not config.global_request_headers:
        return
    for _, _, operation in iter_operations(doc):
        params = operation.setdefault("parameters", [])
        present = {(p.get("name"), p.get("in")) for p in params if isinstance(p, dict)}
        for name, header in config.global_request_headers.items():
            if (name, "header") in present:
                continue
            param = {"name": name, "in": "header", "required": False, "schema": {"type": "string"}}
            param.update(copy.deepcopy(header))
            param["name"], param["in"] = name, "header"
            params.append(param)


def apply_global_response_headers(doc: Dict[str, Any], config: GenerationConfig) -> None:
    if not config.global_response_headers:
        return
    for _, _, operation in iter_operations(doc):
        for response in operation.get("responses", {}).values():
            # References cannot carry sibling keys.
            if "$ref" in response:
                continue
            headers = response.setdefault("headers", {})
            for name, header in config.global_response_headers.items():
                headers.setdefault(name, copy.deepcopy(header))


def apply_global_error_responses(doc: Dict[str, Any], config: GenerationConfig) -> None:
    for _, method, operation in iter_operations(doc):
        kind = operation_kind(method, operation)
        responses = operation.setdefault("responses", {})
        for status in sorted(config.global_error_responses):
            if kind in EXCLUDED_ERRORS_BY_OPERATION.get(status, ()):
                continue
            if status in ONLY_ON_MUTATIONS and kind not in (Operation.CREATE.value, Operation.UPDATE.value):
                continue
            responses.setdefault(str(status), copy.deepcopy(config.global_error_responses[status]))


def apply_global_policies(doc: Dict[str, Any], config: GenerationConfig) -> Dict[str, Any]:
    """Stamp global headers and error responses onto every operation."""
    apply_global_request_headers(doc, config)
    # Error responses first so they carry the response headers too.
    apply_global_error_responses(doc, config)
    apply_global_response_headers(doc, config)
    return doc
