"""Built-in global error responses and the schema they share."""

from typing import Any, Dict


ERROR_SCHEMA_NAME = "ErrorResponse"
ERROR_SCHEMA_REF = f"#/components/schemas/{ERROR_SCHEMA_NAME}"

ERROR_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "error": {
            "type": "string",
            "description": "A human-readable error message.",
        },
        "type": {
            "type": "string",
            "description": "The HTTP status text for the error.",
        },
        "code": {
            "type": "integer",
            "description": "The HTTP status code for the error.",
        },
        "request_id": {
            "type": "string",
            "description": "Request ID for tracing, if available.",
        },
        "timestamp": {
            "type": "string",
            "format": "date-time",
            "description": "Time the error occurred.",
        },
    },
    "required": ["error", "type", "code", "timestamp"],
}


def error_response(description: str) -> Dict[str, Any]:
    """Build a response object carrying the shared error schema."""
    return {
        "description": description,
        "content": {"application/json": {"schema": {"$ref": ERROR_SCHEMA_REF}}},
    }


DEFAULT_ERROR_RESPONSES: Dict[int, Dict[str, Any]] = {
    400: error_response("Invalid input data was provided."),
    401: error_response("Unauthorized."),
    403: error_response("Forbidden."),
    404: error_response("Entity was not found."),
    409: error_response("There was a conflict while executing the request."),
    429: error_response("Rate limit exceeded. Please try again later."),
    500: error_response("There was an internal server error."),
}

# Status codes that only make sense on some operations.
EXCLUDED_ERRORS_BY_OPERATION = {
    404: {"list", "create"},
}
ONLY_ON_MUTATIONS = {409}
