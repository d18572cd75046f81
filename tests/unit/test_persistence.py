"""Unit tests for packexport.io.persistence.

Covers:
- atomic_write_text: replacement semantics, parent creation, failed rename
- dumps_pretty: index formatting, dataclass and Path values
- save_json / load_json: state-file round trips, unreadable files
"""

from __future__ import annotations

import json
import os

import pytest

from packexport.io.persistence import atomic_write_text, dumps_pretty, load_json, save_json
from packexport.models.export import ArtifactStatus, ExportSummary


# ── atomic_write_text ────────────────────────────────────────────────────────────

class TestAtomicWriteText:
    def test_writes_and_returns_path(self, tmp_path):
        target = atomic_write_text(tmp_path / "system.site.yml", "name: Sample\n")

        assert target == tmp_path / "system.site.yml"
        assert target.read_text(encoding="utf-8") == "name: Sample\n"

    def test_creates_missing_collection_directories(self, tmp_path):
        target = tmp_path / "language" / "fr" / "a.type.x.yml"
        atomic_write_text(str(target), "label: Bonjour\n")

        assert target.is_file()

    def test_replaces_previous_content(self, tmp_path):
        target = tmp_path / "a.type.x.yml"
        atomic_write_text(target, "v: 1\n")
        atomic_write_text(target, "v: 2\n")

        assert target.read_text() == "v: 2\n"

    def test_failed_replace_keeps_old_file_and_no_temp(self, tmp_path, monkeypatch):
        """A failed rename must leave the old content and no stray temp file."""
        target = tmp_path / "a.type.x.yml"
        atomic_write_text(target, "v: 1\n")

        def failing_replace(src, dst):
            raise OSError("Disk full")

        monkeypatch.setattr(os, "replace", failing_replace)
        with pytest.raises(OSError):
            atomic_write_text(target, "v: 2\n")

        assert target.read_text() == "v: 1\n"
        assert list(tmp_path.iterdir()) == [target]


# ── dumps_pretty ──────────────────────────────────────────────────────────────────

class TestDumpsPretty:
    def test_index_layout(self):
        index = {"file:file:abc": {"filename": "hero.jpg"}}
        assert dumps_pretty(index) == '{\n  "file:file:abc": {\n    "filename": "hero.jpg"\n  }\n}'

    def test_empty_index(self):
        assert dumps_pretty({}) == "{}"

    def test_unicode_preserved(self):
        assert "Ünïcödé" in dumps_pretty({"label": "Ünïcödé"})

    def test_dataclass_and_path_values(self, tmp_path):
        status = ArtifactStatus(path=tmp_path / "site.tar.gz", generated=True)
        decoded = json.loads(dumps_pretty(status))

        assert decoded["path"] == str(tmp_path / "site.tar.gz")
        assert decoded["generated"] is True

    def test_unserializable_raises(self):
        with pytest.raises(TypeError):
            dumps_pretty({"x": object()})


# ── save_json / load_json ─────────────────────────────────────────────────────────

class TestSaveAndLoadJson:
    def test_state_round_trip(self, tmp_path):
        """Flags written with save_json must come back unchanged."""
        target = tmp_path / "state" / "packexport_state.json"
        state = {"packexport.package_export_in_progress": True}

        save_json(state, target)

        assert load_json(target) == state

    def test_summary_dataclass_saved(self, tmp_path):
        target = tmp_path / "summary.json"
        save_json(ExportSummary(run_id="r1", config_count=12, file_count=3), target)

        saved = json.loads(target.read_text())
        assert saved["config_count"] == 12
        assert saved["status"] == "COMPLETE"

    def test_unserializable_data_writes_nothing(self, tmp_path):
        target = tmp_path / "state.json"
        with pytest.raises(TypeError):
            save_json({"x": object()}, target)
        assert not target.exists()

    def test_missing_file_loads_none(self, tmp_path):
        assert load_json(tmp_path / "does_not_exist.json") is None

    def test_directory_loads_none(self, tmp_path):
        assert load_json(tmp_path) is None

    @pytest.mark.parametrize("content", ["", "{this is not valid json}", "[1, 2"])
    def test_unreadable_file_loads_none(self, tmp_path, content):
        target = tmp_path / "state.json"
        target.write_text(content, encoding="utf-8")

        assert load_json(target) is None

    def test_list_content(self, tmp_path):
        target = tmp_path / "list.json"
        target.write_text("[1, 2, 3]", encoding="utf-8")
        assert load_json(str(target)) == [1, 2, 3]
