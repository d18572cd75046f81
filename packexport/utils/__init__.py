"""packexport utilities package.

Stateless helpers with no external calls.
"""

from packexport.utils.json_utils import pretty_print_json
from packexport.utils.text import config_type_id, normalize_site_name, slugify

__all__ = [
    "pretty_print_json",
    "config_type_id",
    "normalize_site_name",
    "slugify",
]
