"""Configuration record encoder for packexport.

Turns one configuration record into deterministic, diff-friendly YAML:
  - embedded JSON strings (json_values, json_mapper, package settings) are
    pretty-printed so they land in the archive as readable blocks
  - no line wrapping, 2-space indentation, literal block style for every
    multi-line string (CRLF and bare CR line endings are written as LF)
  - key order is preserved exactly as stored

encode_record() is pure: the same mapping always yields the same bytes.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from typing import Any, Dict, Mapping

import yaml

from config.defaults import JSON_STRING_FIELDS, PACKAGE_RECORD_TYPE, YAML_INDENT
from packexport.exceptions import EncodingError
from packexport.utils.json_utils import pretty_print_json

logger = logging.getLogger(__name__)


class _ExportDumper(yaml.SafeDumper):
    """SafeDumper with literal blocks for multi-line strings.

    Anything SafeDumper cannot represent (file handles, arbitrary objects)
    still raises RepresenterError.
    """

    def ignore_aliases(self, data: Any) -> bool:
        # Repeated sub-structures are written out in full, never as &anchors
        return True

    def choose_scalar_style(self) -> str:
        style = super().choose_scalar_style()
        if (
            self.event.style == "|"
            and style != "|"
            and not self.flow_level
            and not self.simple_key_context
            and _fits_literal_block(self.event.value)
        ):
            # PyYAML refuses "|" for lines with trailing spaces or tabs,
            # both of which a literal block keeps verbatim
            return "|"
        return style


def _fits_literal_block(value: str) -> bool:
    """True if value holds only characters a literal block can carry."""
    for ch in value:
        if ch in "\n\t" or "\x20" <= ch <= "\x7e":
            continue
        if ch == "\ufeff":
            return False
        if not (
            ch == "\x85"
            or "\xa0" <= ch <= "\ud7ff"
            or "\ue000" <= ch <= "\ufffd"
            or "\U00010000" <= ch < "\U0010ffff"
        ):
            return False
    return True


def _represent_str(dumper: yaml.SafeDumper, data: str) -> yaml.ScalarNode:
    if "\n" in data or "\r" in data:
        # Literal blocks cannot hold a bare CR; line endings are written as LF
        data = data.replace("\r\n", "\n").replace("\r", "\n")
        return dumper.represent_scalar("tag:yaml.org,2002:str", data, style="|")
    return dumper.represent_scalar("tag:yaml.org,2002:str", data)


def _represent_ordered(dumper: yaml.SafeDumper, data: OrderedDict) -> yaml.MappingNode:
    return dumper.represent_mapping("tag:yaml.org,2002:map", data.items())


def _represent_tuple(dumper: yaml.SafeDumper, data: tuple) -> yaml.SequenceNode:
    return dumper.represent_list(list(data))


_ExportDumper.add_representer(str, _represent_str)
_ExportDumper.add_representer(OrderedDict, _represent_ordered)
_ExportDumper.add_representer(tuple, _represent_tuple)


def normalize_json_fields(record: Mapping[str, Any]) -> Dict[str, Any]:
    """Return a shallow copy of record with embedded JSON pretty-printed.

    Args:
        record: Configuration record.

    Returns:
        New dict; record itself is left untouched.
    """
    data = dict(record)

    for key in JSON_STRING_FIELDS:
        if isinstance(data.get(key), str):
            data[key] = pretty_print_json(data[key])

    if data.get("type") == PACKAGE_RECORD_TYPE and isinstance(data.get("settings"), str):
        data["settings"] = pretty_print_json(data["settings"])

    return data


def encode_record(record: Mapping[str, Any]) -> str:
    """Serialize a configuration record to YAML.

    Args:
        record: Mapping of field name to value.

    Returns:
        YAML document string.

    Raises:
        EncodingError: If record is not a mapping or holds a value that YAML
            cannot represent losslessly.
    """
    if not isinstance(record, Mapping):
        raise EncodingError(f"Configuration record must be a mapping, got {type(record).__name__}")

    data = normalize_json_fields(record)
    try:
        return yaml.dump(
            data,
            Dumper=_ExportDumper,
            width=float("inf"),
            indent=YAML_INDENT,
            default_flow_style=False,
            sort_keys=False,
            allow_unicode=True,
        )
    except yaml.YAMLError as exc:
        logger.debug("YAML encoding failed: %s", exc)
        raise EncodingError(str(exc)) from exc


def decode_record(text: str) -> Any:
    """Parse a YAML document written by encode_record()."""
    return yaml.safe_load(text)
