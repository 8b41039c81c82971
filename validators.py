"""
Field validation predicates for order and search input.

Each predicate returns a plain bool so callers decide which error to raise.
"""

import re
from typing import Any, Optional

from bson import ObjectId

NAME_PATTERN = re.compile(r"[A-Za-z\s]+", re.ASCII)
PHONE_PATTERN = re.compile(r"\d+", re.ASCII)
NUMBER_PATTERN = re.compile(r"\s*[+-]?\d+\s*", re.ASCII)

# BSON integers are signed 64-bit
INT64_MIN = -2 ** 63
INT64_MAX = 2 ** 63 - 1


def is_valid_name(value: Any) -> bool:
    """Customer names are letters and whitespace only."""
    return isinstance(value, str) and NAME_PATTERN.fullmatch(value) is not None


def is_valid_phone(value: Any) -> bool:
    """Phone numbers are digits only, no separators or leading '+'."""
    return isinstance(value, str) and PHONE_PATTERN.fullmatch(value) is not None


def is_valid_object_id(value: Any) -> bool:
    return isinstance(value, str) and ObjectId.is_valid(value)


def parse_search_number(value: str) -> Optional[int]:
    # None means the numeric half of a search has nothing to match
    if NUMBER_PATTERN.fullmatch(value) is None:
        return None
    number = int(value)
    if not INT64_MIN <= number <= INT64_MAX:
        return None
    return number
