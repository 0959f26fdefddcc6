"""Key normalization and custom-identifier classification.

Every cache and registry lookup goes through normalize_key(), so two raw
identifiers that normalize to the same string always share one entry.
"""

import re

from pokemon_cache.models.settings_models import CUSTOM_ID_CEILING

IMAGE_KEY_PREFIX = "pokemon_img_"
CUSTOM_NAMES_KEY = "pokemon_custom_names"

PLACEHOLDER_MARKER = "?"

# Surrounding whitespace, byte order mark included
_EDGE_SPACE = re.compile(r"^[\s\ufeff]+|[\s\ufeff]+$")

# Leading ASCII integer, the way a lenient parser reads "25abc" as 25
_LEADING_INT = re.compile(r"^[\s\ufeff]*([+-]?[0-9]+)")


def normalize_key(identifier) -> str:
    """Standardize a name or ID into a cache key.

    Args:
        identifier: Numeric ID, name, or any value with a string form.

    Returns:
        The lower-cased string form with surrounding whitespace and byte
        order marks removed.
    """
    return _EDGE_SPACE.sub("", str(identifier).lower())


def image_storage_key(identifier) -> str:
    """Durable-tier key for an image entry, e.g. ``pokemon_img_pikachu``."""
    return f"{IMAGE_KEY_PREFIX}{normalize_key(identifier)}"


def parse_leading_int(value) -> int | None:
    """Parse the leading integer of a value's string form.

    Args:
        value: Anything with a string form.

    Returns:
        The parsed integer, or None if the string does not start with digits.
    """
    match = _LEADING_INT.match(str(value))
    if match is None:
        return None
    return int(match.group(1))


def is_custom_id(identifier, ceiling: int = CUSTOM_ID_CEILING) -> bool:
    """Check whether an identifier falls outside the canonical dataset.

    Placeholder IDs containing "?" are always custom. Numeric IDs are custom
    when they exceed the canonical ceiling. Anything else, including plain
    names such as "abc", is treated as not custom.

    Args:
        identifier: String or numeric ID, possibly None.
        ceiling: Highest numeric ID in the canonical dataset.

    Returns:
        True if the identifier is a placeholder or beyond the ceiling.
    """
    if not identifier:
        return False
    if PLACEHOLDER_MARKER in str(identifier):
        return True

    number = parse_leading_int(identifier)
    return number is not None and number > ceiling
