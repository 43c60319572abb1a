import copy
import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PrivateAttr,
    ValidationError,
)
from pydantic.alias_generators import to_camel

from .constants import (
    ALL_OPERATIONS,
    HandlerTarget,
    Operation,
    OutputDefaults,
    PaginationDefaults,
    SUPPORTED_HANDLERS,
)
from .errors import DEFAULT_ERROR_RESPONSES
from .exceptions import ConfigurationError
from .graph import SchemaGraph


logger = logging.getLogger(__name__)


# Hooks receive the live document and mutate it in place; raising aborts the run.
GraphHook = Callable[[SchemaGraph, Dict[str, Any]], Any]
DocumentHook = Callable[[Dict[str, Any]], Any]


class GenerationConfig(BaseModel):
    """
    Generation-wide policy for one run of the generator.

    Construct it with any subset of fields (snake_case names or the camelCase
    aliases used in YAML files), then call ``validate()`` once. Validation
    normalizes pagination bounds and fills in defaults; after that the
    configuration is treated as read-only for the rest of the run.
    """

    # Base document that generated paths/schemas are merged into. Use it for
    # info, servers, security schemes, etc.
    spec: Optional[Dict[str, Any]] = Field(
        default=None, description="Optional base OpenAPI document."
    )

    disable_pagination: bool = Field(
        default=False,
        description="Disable pagination for all schemas unless a schema opts back in.",
    )
    min_items_per_page: Optional[int] = Field(
        default=None, description="Minimum page size for paginated calls."
    )
    max_items_per_page: Optional[int] = Field(
        default=None, description="Maximum page size for paginated calls."
    )
    items_per_page: Optional[int] = Field(
        default=None, description="Default page size for paginated calls."
    )

    default_eager_load: bool = Field(
        default=False, description="Eager-load every edge unless the edge opts out."
    )
    disable_eager_load_non_paged_opt: bool = Field(
        default=False,
        description="Keep pagination on edge endpoints whose edge is also eager-loaded.",
    )
    disable_eager_loaded_endpoints: bool = Field(
        default=False,
        description="Skip dedicated endpoints for edges that are eager-loaded.",
    )
    add_edges_to_tags: bool = Field(
        default=False,
        description="Add eager-loaded edge targets to the tags of read/list operations.",
    )

    default_operations: Optional[List[Operation]] = Field(
        default=None,
        description="Operations generated unless a schema overrides them. Defaults to all.",
    )

    global_request_headers: Dict[str, Dict[str, Any]] = Field(
        default_factory=dict,
        description="Header name -> parameter fields added to every operation.",
    )
    global_response_headers: Dict[str, Dict[str, Any]] = Field(
        default_factory=dict,
        description="Header name -> header object added to every response.",
    )
    global_error_responses: Dict[int, Dict[str, Any]] = Field(
        default_factory=dict,
        description="Status code (>= 400) -> response object added to every operation.",
    )

    handler: Union[HandlerTarget, str] = Field(
        default=HandlerTarget.NONE,
        description="Server framework to generate request handlers for, or none.",
    )
    strict_mutate: bool = Field(
        default=False, description="Reject unknown fields on create/update with a 400."
    )
    disable_spec_handler: bool = Field(
        default=False, description="Do not expose the spec itself as an endpoint."
    )
    allow_client_uuids: bool = Field(
        default=False,
        alias="allowClientUUIDs",
        description="Allow callers to supply the id on create.",
    )
    disable_patch_json_tag: bool = Field(
        default=False,
        alias="disablePatchJSONTag",
        description="Stop forcing optional output fields to always be present.",
    )
    with_testing: bool = Field(
        default=False,
        description="Generate test helpers. Forced off when no handler is configured.",
    )

    pre_generate_hook: Optional[GraphHook] = Field(default=None, exclude=True)
    post_generate_hook: Optional[GraphHook] = Field(default=None, exclude=True)
    pre_write_hook: Optional[DocumentHook] = Field(default=None, exclude=True)

    # Any object with a write(str) method. When unset the document is written
    # to <output_dir>/<spec_filename>.
    writer: Optional[Any] = Field(default=None, exclude=True)
    output_dir: str = Field(default=OutputDefaults.OUTPUT_DIR, min_length=1)
    spec_filename: str = Field(default=OutputDefaults.SPEC_FILENAME, min_length=1)

    _is_validated: bool = PrivateAttr(default=False)

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        arbitrary_types_allowed=True,
        extra="ignore",
    )

    @property
    def is_validated(self) -> bool:
        return self._is_validated

    def validate(self) -> "GenerationConfig":
        """
        Normalize and check the configuration in place.

        Idempotent: once it has succeeded, later calls return immediately, even
        if fields were changed in between.

        This instance method replaces pydantic's deprecated ``BaseModel.validate``
        classmethod. Build instances from raw data with ``model_validate``.

        Raises:
            ConfigurationError: if an error response uses a status below 400
                or the handler is not a supported identifier. The configuration
                stays unvalidated.
        """
        if self._is_validated:
            return self

        if self.min_items_per_page is None or self.min_items_per_page < 1:
            self.min_items_per_page = PaginationDefaults.MIN_ITEMS_PER_PAGE

        if self.max_items_per_page is None or self.max_items_per_page < 1:
            self.max_items_per_page = PaginationDefaults.MAX_ITEMS_PER_PAGE

        if self.max_items_per_page < self.min_items_per_page:
            self.max_items_per_page = self.min_items_per_page

        if self.items_per_page is None or self.items_per_page < 1:
            self.items_per_page = PaginationDefaults.ITEMS_PER_PAGE

        if self.items_per_page < self.min_items_per_page:
            self.items_per_page = self.min_items_per_page

        if self.items_per_page > self.max_items_per_page:
            self.items_per_page = self.max_items_per_page

        if not self.default_operations:
            self.default_operations = list(ALL_OPERATIONS)

        if not self.global_error_responses:
            self.global_error_responses = copy.deepcopy(DEFAULT_ERROR_RESPONSES)

        for status in self.global_error_responses:
            if status < 400:
                raise ConfigurationError(
                    f"error response defined with status code {status}, which is not an HTTP error code",
                    context={"status_code": status},
                )

        if self.handler not in SUPPORTED_HANDLERS:
            raise ConfigurationError(
                f"unsupported handler provided: {self.handler}",
                context={"supported_handlers": [h.value for h in SUPPORTED_HANDLERS if h.value]},
            )
        self.handler = HandlerTarget(self.handler)

        if self.handler == HandlerTarget.NONE and self.with_testing:
            logger.debug("with_testing ignored because no handler is configured.")
            self.with_testing = False

        self._is_validated = True
        logger.debug(
            f"Configuration validated: per_page={self.items_per_page} "
            f"[{self.min_items_per_page}, {self.max_items_per_page}], handler={self.handler.value or 'none'}"
        )
        return self

    @property
    def has_handler(self) -> bool:
        return self.handler != HandlerTarget.NONE

    @property
    def spec_path(self) -> Path:
        return Path(self.output_dir) / self.spec_filename

    def to_dict(self) -> Dict[str, Any]:
        """Serializable view (hooks and writer excluded), keyed by YAML aliases."""
        return self.model_dump(mode="json", by_alias=True)


def _format_validation_errors(error: ValidationError) -> List[str]:
    lines = []
    for err in error.errors():
        loc = " -> ".join(str(part) for part in err.get("loc", ())) or "Model Level"
        lines.append(f"{loc}: {err.get('msg', 'Unknown validation error')}")
    return lines


def load_config(
    config_path: Optional[str], overrides: Optional[Dict[str, Any]] = None
) -> GenerationConfig:
    """
    Loads configuration from a YAML file, applies explicit overrides, and
    returns a validated ``GenerationConfig``.

    Overrides with a ``None`` value are ignored so CLI flags that were not
    given do not clobber the file.
    """
    raw_config: Dict[str, Any] = {}

    # 1. Load from YAML file if path is provided
    if config_path:
        config_file = Path(config_path)
        if config_file.is_file():
            try:
                with open(config_file, "r", encoding="utf-8") as f:
                    yaml_config = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigurationError(
                    f"Error parsing YAML file {config_path}: {e}", config_file=config_path
                ) from e
            if yaml_config and isinstance(yaml_config, dict):
                raw_config.update(yaml_config)
                logger.debug(f"Loaded configuration from {config_path}")
            elif yaml_config:
                logger.warning(
                    f"Content in config file {config_path} is not a dictionary. Ignoring file content."
                )
        else:
            logger.warning(f"Config file not found at {config_path}. Using defaults.")

    # 2. Override with explicit values
    overridden_keys = set()
    for key, value in (overrides or {}).items():
        if value is not None:
            raw_config[key] = value
            overridden_keys.add(key)
    if overridden_keys:
        logger.debug(f"Overridden config keys: {overridden_keys}")

    # 3. Schema validation, then policy validation
    try:
        config = GenerationConfig.model_validate(raw_config)
    except ValidationError as e:
        raise ConfigurationError(
            "Configuration validation failed. Please check your config file or arguments.",
            config_file=config_path,
            context={"errors": _format_validation_errors(e)},
        ) from e

    config.validate()
    logger.info("Configuration loaded and validated successfully.")
    return config
