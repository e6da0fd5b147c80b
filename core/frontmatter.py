"""YAML front matter parsing and abbrlink field editing."""

import logging
import re
from typing import Any, Dict, Optional, Tuple

import yaml

from utils.text import FIELD_NAME

logger = logging.getLogger(__name__)

DELIMITER = "---"
BOM = "\ufeff"

_FIELD_LINE = re.compile(rf"^{FIELD_NAME}[ \t]*:.*$")


def split_front_matter(text: str) -> Tuple[Optional[str], str]:
    """
    Split a document into its front matter block and body.

    A leading byte-order mark is ignored when looking for the block.

    Args:
        text: Raw document text

    Returns:
        Tuple of (front matter without delimiters or None, body)
    """
    content = text[len(BOM) :] if text.startswith(BOM) else text
    lines = content.splitlines(keepends=True)
    if not lines or lines[0].rstrip("\r\n") != DELIMITER:
        return None, text

    for index in range(1, len(lines)):
        if lines[index].rstrip("\r\n") == DELIMITER:
            return "".join(lines[1:index]), "".join(lines[index + 1 :])

    # Unterminated block is treated as plain content
    return None, text


def parse_front_matter(text: str) -> Dict[str, Any]:
    """Parse the front matter into a dict, empty when absent or malformed."""
    block, _ = split_front_matter(text)
    if not block:
        return {}

    try:
        data = yaml.safe_load(block)
    except yaml.YAMLError as e:
        logger.debug(f"Ignoring malformed front matter: {e}")
        return {}

    return data if isinstance(data, dict) else {}


def render_field(value: str) -> str:
    """Render ``abbrlink: value`` the way a YAML dumper quotes it."""
    return yaml.safe_dump({FIELD_NAME: value}, default_flow_style=False, allow_unicode=True).strip()


def set_abbrlink(text: str, abbrlink: str) -> str:
    """
    Set the abbrlink field in a document's front matter.

    An existing field line is replaced in place; otherwise the field is
    inserted as the first line of the block, creating the block when the
    document has none. Other lines and a leading byte-order mark are left
    untouched.

    Args:
        text: Raw document text
        abbrlink: Identifier to store

    Returns:
        Updated document text
    """
    field_line = render_field(abbrlink)
    newline = "\r\n" if "\r\n" in text else "\n"
    bom = BOM if text.startswith(BOM) else ""
    text = text[len(bom) :]
    block, body = split_front_matter(text)

    if block is None:
        return f"{bom}{DELIMITER}{newline}{field_line}{newline}{DELIMITER}{newline}{text}"

    block_lines = block.splitlines(keepends=True)
    for index, line in enumerate(block_lines):
        if _FIELD_LINE.match(line.rstrip("\r\n")):
            ending = line[len(line.rstrip("\r\n")) :] or newline
            block_lines[index] = field_line + ending
            break
    else:
        block_lines.insert(0, field_line + newline)

    return f"{bom}{DELIMITER}{newline}{''.join(block_lines)}{DELIMITER}{newline}{body}"
