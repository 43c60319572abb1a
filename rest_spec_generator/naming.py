"""
Naming convention utilities.

Casing and word-massaging helpers used to derive paths, operation ids and
query parameter names. They are exported so hooks can name any extra paths
they add the same way the generator does.
"""

import logging
import re

import inflect


logger = logging.getLogger(__name__)

# Initialize inflect engine for pluralization
p = inflect.engine()


def to_snake_case(name: str) -> str:
    """
    Convert CamelCase or PascalCase to snake_case.

    Example:
        >>> to_snake_case("ContainsFold")
        'contains_fold'
        >>> to_snake_case("XMLHttpRequest")
        'xml_http_request'
    """
    if not isinstance(name, str):
        raise TypeError(f"Expected string, got {type(name).__name__}")

    name = re.sub("(.)([A-Z][a-z]+)", r"\1_\2", name)
    name = re.sub("__([A-Z])", r"_\1", name)
    name = re.sub("([a-z0-9])([A-Z])", r"\1_\2", name)
    return name.replace("-", "_").lower()


def to_pascal_case(name: str) -> str:
    """Convert snake_case (or already Pascal) to PascalCase."""
    return "".join(word[:1].upper() + word[1:] for word in to_snake_case(name).split("_") if word)


def to_camel_case(name: str) -> str:
    """
    Convert snake_case to lowerCamelCase.

    Example:
        >>> to_camel_case("not_nil")
        'notNil'
    """
    pascal = to_pascal_case(name)
    return pascal[:1].lower() + pascal[1:]


def to_kebab_case(name: str) -> str:
    """Convert any supported casing to kebab-case."""
    return to_snake_case(name).replace("_", "-")


def pluralize(word: str) -> str:
    """Pluralize a word, falling back to appending 's'."""
    if not word:
        return ""
    try:
        plural = p.plural(word)
    except Exception as e:
        logger.debug(f"Inflect pluralization failed for '{word}': {e}. Falling back to adding 's'.")
        return word + "s"
    return plural or word + "s"


def singularize(word: str) -> str:
    """Singularize a word; inflect returns False when it is already singular."""
    singular = p.singular_noun(word)
    return singular if singular else word
