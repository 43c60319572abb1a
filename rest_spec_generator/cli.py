import argparse
import importlib
import logging
import sys
from typing import List, Optional

import yaml

from rest_spec_generator.colored_logging import (
    log_progress,
    log_section,
    log_success,
    setup_colored_logging,
)
from rest_spec_generator.config import load_config
from rest_spec_generator.exceptions import RestGeneratorError
from rest_spec_generator.graph import SchemaGraph
from rest_spec_generator.pipeline import generate


logger = logging.getLogger(__name__)


def load_graph(reference: str) -> SchemaGraph:
    """
    Import a schema graph from ``package.module:attribute``.

    The attribute may be a ``SchemaGraph`` or a zero-argument callable
    returning one.
    """
    module_name, _, attr = reference.partition(":")
    if not module_name or not attr:
        raise ValueError(f"Graph reference must look like 'module:attribute', got {reference!r}")

    module = importlib.import_module(module_name)
    graph = getattr(module, attr)
    if callable(graph) and not isinstance(graph, SchemaGraph):
        graph = graph()
    if not isinstance(graph, SchemaGraph):
        raise ValueError(f"{reference!r} did not resolve to a SchemaGraph (got {type(graph).__name__})")
    return graph


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rest-spec-gen",
        description="Generate an OpenAPI specification (and optionally handlers) from a schema graph.",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable verbose DEBUG logging."
    )
    parser.add_argument(
        "--no-color", action="store_true", help="Disable colored output (useful for CI/CD environments)."
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    validate_parser = subparsers.add_parser(
        "validate", help="Validate a configuration file and print the normalized result."
    )
    validate_parser.add_argument("-c", "--config", required=True, help="Path to the YAML configuration file.")

    generate_parser = subparsers.add_parser("generate", help="Generate the OpenAPI specification.")
    generate_parser.add_argument("-c", "--config", help="Path to the YAML configuration file.")
    generate_parser.add_argument(
        "-g", "--graph", required=True, help="Schema graph to import, as 'module:attribute'."
    )
    generate_parser.add_argument(
        "-o", "--output-dir", help="Directory to write the spec to. Overrides the config file."
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    setup_colored_logging(
        level=logging.DEBUG if args.verbose else logging.INFO,
        use_colors=not args.no_color,
    )

    try:
        if args.command == "validate":
            config = load_config(args.config)
            print(yaml.safe_dump(config.to_dict(), sort_keys=False), end="")
            return 0

        log_section(logger, "Configuration")
        log_progress(logger, "Loading configuration...")
        config = load_config(args.config, {"outputDir": args.output_dir})

        log_progress(logger, f"Loading schema graph from {args.graph}...")
        try:
            graph = load_graph(args.graph)
        except (ImportError, AttributeError, ValueError) as e:
            logger.error(f"Could not load schema graph: {e}", exc_info=args.verbose)
            return 1

        log_section(logger, "OpenAPI Specification")
        generate(graph, config)
        log_success(logger, f"OpenAPI specification generated: {config.spec_path}")
        return 0

    except RestGeneratorError as e:
        logger.error(str(e), exc_info=args.verbose)
        return 1


if __name__ == "__main__":
    sys.exit(main())
