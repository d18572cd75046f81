"""Text helpers for packexport names and identifiers.

Pure functions — no I/O.
"""

from __future__ import annotations

import re
from typing import Optional

_NON_SLUG = re.compile(r"[^a-z0-9]+")


def normalize_site_name(name: str) -> str:
    """Lower-case name and collapse every run of other characters to '-'.

    >>> normalize_site_name("My Site: Studio")
    'my-site-studio'
    """
    return _NON_SLUG.sub("-", (name or "").lower())


def slugify(value: str, max_length: int = 40, separator: str = "_") -> str:
    """Build a filesystem-safe slug for run ids."""
    slug = _NON_SLUG.sub(separator, (value or "").lower())[:max_length].strip(separator)
    return slug or "run"


def config_type_id(name: str) -> Optional[str]:
    """Return the type id segment of a `provider.type.id` config name.

    Names with fewer than three segments (simple configuration such as
    ``system.site``) have no type id.
    """
    parts = name.split(".")
    if len(parts) < 3:
        return None
    return parts[1]
