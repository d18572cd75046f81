"""Unit tests for packexport.io.encoder and packexport.utils.json_utils.

Covers:
- pretty_print_json: valid JSON re-indented, invalid JSON returned unchanged
- normalize_json_fields: json_values/json_mapper, package settings, no mutation
- encode_record: key order, literal blocks, no wrapping, no aliases,
  determinism, unrepresentable values
"""

from __future__ import annotations

import json
from collections import OrderedDict

import pytest

from packexport.exceptions import EncodingError, ExportError
from packexport.io.encoder import decode_record, encode_record, normalize_json_fields
from packexport.utils.json_utils import pretty_print_json


# ── pretty_print_json ─────────────────────────────────────────────────────────────

class TestPrettyPrintJson:
    def test_valid_json_is_indented(self):
        """Compact JSON must be re-serialized with 2-space indentation."""
        assert pretty_print_json('{"a":1}') == '{\n  "a": 1\n}'

    def test_invalid_json_returned_unchanged(self):
        """Strings that are not JSON must pass through untouched."""
        assert pretty_print_json("{not json") == "{not json"

    def test_empty_string_returned_unchanged(self):
        assert pretty_print_json("") == ""

    def test_unicode_not_escaped(self):
        """Non-ASCII characters must survive as-is (ensure_ascii=False)."""
        assert "café" in pretty_print_json('{"label":"café"}')

    def test_nested_structures(self):
        """Nested objects and arrays must be expanded onto separate lines."""
        result = pretty_print_json('{"a":{"b":[1,2]}}')
        assert json.loads(result) == {"a": {"b": [1, 2]}}
        assert result.count("\n") > 3


# ── normalize_json_fields ─────────────────────────────────────────────────────────

class TestNormalizeJsonFields:
    def test_json_values_pretty_printed(self):
        record = {"id": "hero", "json_values": '{"a":1}'}
        assert normalize_json_fields(record)["json_values"] == '{\n  "a": 1\n}'

    def test_json_mapper_pretty_printed(self):
        record = {"json_mapper": '{"map":[]}'}
        assert normalize_json_fields(record)["json_mapper"] == '{\n  "map": []\n}'

    def test_input_record_not_mutated(self):
        """The caller's mapping must be left exactly as it was."""
        record = {"json_values": '{"a":1}'}
        normalize_json_fields(record)
        assert record == {"json_values": '{"a":1}'}

    def test_package_settings_pretty_printed(self):
        """Settings of sync_package records hold JSON and must be expanded."""
        record = {"type": "sync_package", "settings": '{"members":["a.b.c"]}'}
        result = normalize_json_fields(record)
        assert result["settings"] == '{\n  "members": [\n    "a.b.c"\n  ]\n}'

    def test_settings_of_other_types_untouched(self):
        """Only package records get their settings re-indented."""
        record = {"type": "cohesion_component", "settings": '{"members":[]}'}
        assert normalize_json_fields(record)["settings"] == '{"members":[]}'

    def test_non_string_json_field_untouched(self):
        """A json_values field that is already structured must not be altered."""
        record = {"json_values": {"a": 1}}
        assert normalize_json_fields(record)["json_values"] == {"a": 1}


# ── encode_record ─────────────────────────────────────────────────────────────────

class TestEncodeRecord:
    def test_simple_record(self):
        """Scalars must be emitted one per line in block style."""
        assert encode_record({"id": "hero", "status": True}) == "id: hero\nstatus: true\n"

    def test_key_order_preserved(self):
        """Keys must appear in storage order, never sorted."""
        text = encode_record({"zeta": 1, "alpha": 2, "mid": 3})
        assert text == "zeta: 1\nalpha: 2\nmid: 3\n"

    def test_ordered_dict_accepted(self):
        record = OrderedDict([("b", 1), ("a", 2)])
        assert encode_record(record) == "b: 1\na: 2\n"

    def test_json_values_written_as_literal_block(self):
        """Embedded JSON must land in the YAML as a readable literal block."""
        text = encode_record({"json_values": '{"a":1}'})

        assert text.startswith("json_values: |")
        assert '  "a": 1' in text
        assert decode_record(text)["json_values"] == '{\n  "a": 1\n}'

    def test_multiline_string_uses_literal_style(self):
        text = encode_record({"description": "line one\nline two\n"})
        assert text == "description: |\n  line one\n  line two\n"

    def test_trailing_spaces_keep_literal_style(self):
        """CSS with trailing spaces on a line must still be a literal block."""
        css = "a { color: red; } \nb {}\n"
        text = encode_record({"css": css})

        assert text == "css: |\n  a { color: red; } \n  b {}\n"
        assert decode_record(text) == {"css": css}

    def test_trailing_space_on_last_line(self):
        text = encode_record({"css": "a\nb "})
        assert text == "css: |-\n  a\n  b \n"
        assert decode_record(text) == {"css": "a\nb "}

    def test_tabs_keep_literal_style(self):
        text = encode_record({"template": "<div>\n\t<p></p>\n</div>\n"})
        assert text.startswith("template: |\n")
        assert decode_record(text) == {"template": "<div>\n\t<p></p>\n</div>\n"}

    def test_crlf_written_as_literal_block_with_lf(self):
        text = encode_record({"css": "a {}\r\nb {}\r\n"})
        assert text == "css: |\n  a {}\n  b {}\n"
        assert decode_record(text) == {"css": "a {}\nb {}\n"}

    def test_control_characters_fall_back_to_quoted(self):
        """Strings a literal block cannot carry must still round-trip."""
        value = "a\x00\nb"
        text = encode_record({"raw": value})
        assert "|" not in text
        assert decode_record(text) == {"raw": value}

    def test_long_lines_not_wrapped(self):
        """Long scalars must stay on a single line."""
        long_value = " ".join(["word"] * 200)
        text = encode_record({"label": long_value})
        assert text.count("\n") == 1
        assert decode_record(text)["label"] == long_value

    def test_nested_mapping_indented_two_spaces(self):
        text = encode_record({"dependencies": {"config": ["a.b.c"]}})
        assert text == "dependencies:\n  config:\n  - a.b.c\n"

    def test_repeated_structures_have_no_aliases(self):
        """Shared sub-structures must be written in full, without anchors."""
        shared = {"color": "#fff"}
        text = encode_record({"light": shared, "dark": shared})

        assert "&" not in text
        assert "*" not in text
        assert decode_record(text) == {"light": shared, "dark": shared}

    def test_tuple_written_as_list(self):
        text = encode_record({"regions": ("header", "footer")})
        assert decode_record(text) == {"regions": ["header", "footer"]}

    def test_unicode_written_verbatim(self):
        text = encode_record({"label": "Привет 你好"})
        assert "Привет 你好" in text

    def test_deterministic_output(self, sample_records):
        """The same record must always encode to identical text."""
        for record in sample_records.values():
            assert encode_record(record) == encode_record(dict(record))

    def test_decoded_output_matches_normalized_record(self, sample_records):
        """Decoding the YAML must yield the record with JSON fields expanded."""
        record = sample_records["cohesion_elements.cohesion_component.hero"]
        assert decode_record(encode_record(record)) == normalize_json_fields(record)

    def test_empty_record(self):
        assert encode_record({}) == "{}\n"

    def test_non_mapping_raises_encoding_error(self):
        with pytest.raises(EncodingError):
            encode_record(["not", "a", "mapping"])

    def test_unrepresentable_value_raises_encoding_error(self):
        """Values YAML cannot represent losslessly must raise, not be stringified."""
        with pytest.raises(EncodingError):
            encode_record({"handle": object()})

    def test_encoding_error_is_export_error(self):
        assert issubclass(EncodingError, ExportError)
