"""Text utilities for locating abbrlink fields in raw document text."""

import re
from functools import lru_cache
from typing import Optional, Pattern

from config import Encoding

FIELD_NAME = "abbrlink"

# Line-leading field, optional quotes around the value, nothing alphanumeric after it
_FIELD_TEMPLATE = r"^{field}:[ \t]*(['\"]?)({value})\1(?![0-9A-Za-z])"


@lru_cache(maxsize=64)
def _pattern(value: str) -> Pattern[str]:
    return re.compile(_FIELD_TEMPLATE.format(field=FIELD_NAME, value=value), re.MULTILINE)


def abbrlink_pattern(hash_length: int, encoding: Encoding = Encoding.HEX) -> Pattern[str]:
    """
    Build the pattern recognising an abbrlink of the configured shape.

    Args:
        hash_length: Expected identifier length
        encoding: Identifier alphabet

    Returns:
        Compiled pattern whose second group is the identifier
    """
    if Encoding(encoding) is Encoding.HEX:
        return _pattern(f"[a-fA-F0-9]{{{hash_length}}}")
    return _pattern(f"\\d{{1,{hash_length}}}")


def extract_abbrlink(
    text: str, hash_length: int, encoding: Encoding = Encoding.HEX
) -> Optional[str]:
    """
    Extract an existing abbrlink matching the configured length and alphabet.

    Args:
        text: Raw document text
        hash_length: Expected identifier length
        encoding: Identifier alphabet

    Returns:
        First matching identifier or None
    """
    match = abbrlink_pattern(hash_length, encoding).search(text)
    return match.group(2) if match else None


def extract_any_abbrlink(text: str, encoding: Encoding = Encoding.HEX) -> Optional[str]:
    """
    Extract an abbrlink of any length drawn from the encoding's alphabet.

    Used to spot identifiers written under a different ``hash_length``.
    """
    value = r"[a-fA-F0-9]+" if Encoding(encoding) is Encoding.HEX else r"\d+"
    match = _pattern(value).search(text)
    return match.group(2) if match else None
