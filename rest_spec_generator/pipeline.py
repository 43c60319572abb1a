"""
Generation pipeline.

One run turns one schema graph into one written document:

    validate config -> copy base document -> pre_generate_hook(graph, doc)
    -> schema-driven paths/schemas -> post_generate_hook(graph, doc)
    -> global headers/errors -> pre_write_hook(doc) -> write

Hooks run strictly in that order against the same dict. If any hook raises,
the run stops with ``HookError`` and nothing is written.
"""

import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Protocol

import yaml

from .config import GenerationConfig
from .exceptions import HookError, SpecWriteError
from .graph import SchemaGraph
from .openapi_gen import apply_global_policies, assemble_document, new_document


logger = logging.getLogger(__name__)


class HandlerRenderer(Protocol):
    """Renders server handler code for ``config.handler`` from a finished document."""

    def render(self, graph: SchemaGraph, config: GenerationConfig, doc: Dict[str, Any]) -> None: ...


def _run_hook(name: str, hook: Optional[Callable[..., Any]], *args: Any) -> None:
    if hook is None:
        return
    logger.debug(f"Running {name}")
    try:
        hook(*args)
    except Exception as e:
        raise HookError(f"{name} failed: {e}", hook=name) from e


def serialize_spec(doc: Dict[str, Any], fmt: str = "json") -> str:
    if fmt == "yaml":
        return yaml.safe_dump(doc, sort_keys=False, allow_unicode=True)
    return json.dumps(doc, indent=4, ensure_ascii=False) + "\n"


def write_spec(doc: Dict[str, Any], config: GenerationConfig) -> Optional[Path]:
    """
    Write the document to ``config.writer`` if set, otherwise to
    ``<output_dir>/<spec_filename>``. Returns the file path when one was used.
    """
    if config.writer is not None:
        try:
            config.writer.write(serialize_spec(doc))
        except Exception as e:
            raise SpecWriteError(f"Failed to write OpenAPI specification: {e}", destination="writer") from e
        logger.info("OpenAPI specification written to the configured writer.")
        return None

    output_path = config.spec_path
    fmt = "yaml" if output_path.suffix.lower() in (".yaml", ".yml") else "json"
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w", encoding="utf-8") as f:
            f.write(serialize_spec(doc, fmt))
    except OSError as e:
        raise SpecWriteError(
            f"Failed to save OpenAPI specification to {output_path}: {e}", destination=str(output_path)
        ) from e
    logger.info(f"OpenAPI specification saved to {output_path}")
    return output_path


def generate(
    graph: SchemaGraph,
    config: GenerationConfig,
    renderer: Optional[HandlerRenderer] = None,
) -> Dict[str, Any]:
    """Run the full pipeline and return the document that was written."""
    config.validate()
    logger.info(f"Generating OpenAPI specification for {len(graph)} schemas...")

    doc = new_document(config)

    _run_hook("pre_generate_hook", config.pre_generate_hook, graph, doc)
    assemble_document(graph, config, doc)
    _run_hook("post_generate_hook", config.post_generate_hook, graph, doc)
    apply_global_policies(doc, config)
    _run_hook("pre_write_hook", config.pre_write_hook, doc)

    write_spec(doc, config)

    if config.has_handler:
        if renderer is None:
            logger.warning(
                f"Handler {config.handler.value!r} configured but no renderer supplied; only the spec was generated."
            )
        else:
            logger.info(f"Rendering {config.handler.value} handlers (with_testing={config.with_testing})...")
            renderer.render(graph, config, doc)

    return doc
