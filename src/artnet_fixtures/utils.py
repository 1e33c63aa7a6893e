"""
Helper functions shared by the registries and the control surface
"""
import re
from typing import Any, Optional

from .constants import MAX_VALUE_8BIT, MAX_VALUE_16BIT

_LEADING_INT = re.compile(r'^\s*([+-]?\d+)')


def parse_int(value: Any) -> Optional[int]:
    """
    Parse a leading integer the way form inputs are read.

    "12" -> 12, " 7abc" -> 7, 3.9 -> 3, "abc" -> None, None -> None.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if value != value or value in (float('inf'), float('-inf')):
            return None
        return int(value)
    match = _LEADING_INT.match(str(value))
    if not match:
        return None
    return int(match.group(1))


def clean_text(value: Any) -> str:
    """Trimmed string form of a config value ('' for None)."""
    if value is None:
        return ''
    return str(value).strip()


def max_value(bits: int) -> int:
    return MAX_VALUE_16BIT if bits == 16 else MAX_VALUE_8BIT


def clamp(value: int, bits: int) -> int:
    """Clamp a value into the range of an 8- or 16-bit channel."""
    return max(0, min(max_value(bits), value))


def slugify(text: str) -> str:
    """Variable/preset id fragment: lower-cased, spaces replaced by underscores."""
    return text.lower().replace(' ', '_')


def split_attribute_id(attribute_id: Any):
    """
    Split an "attribute:bits" selector id.

    Returns:
        (attribute, bits) with bits 16 or 8
    """
    attribute, _, bits = clean_text(attribute_id).partition(':')
    return attribute, 16 if bits == '16' else 8
