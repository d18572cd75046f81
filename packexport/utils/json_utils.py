"""JSON helpers for packexport.

Pure functions — no I/O.
"""

from __future__ import annotations

import json

from config.defaults import JSON_INDENT


def pretty_print_json(text: str, indent: int = JSON_INDENT) -> str:
    """Return text re-serialized as indented JSON if it parses, else unchanged.

    Parse failures are ignored on purpose: this is a readability pass over
    stored JSON strings, not validation.

    Args:
        text: String that may contain JSON.
        indent: Indentation width of the output.

    Returns:
        Pretty-printed JSON, or the original string.
    """
    try:
        decoded = json.loads(text)
    except (ValueError, TypeError):
        return text
    return json.dumps(decoded, indent=indent, ensure_ascii=False)
