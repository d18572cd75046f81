"""Shared pytest fixtures for packexport tests.

Conventions:
- The sample site has 12 configuration records and 3 managed files, so a
  full export with chunk_size=5 plans exactly 3 batches
- Managed file bytes are written to tmp_path; nothing outside it is touched
- Archive contents are inspected through the read_archive fixture
"""

from __future__ import annotations

import json
import tarfile
from pathlib import Path
from typing import Any, Dict, List, Tuple

import pytest

BUTTON_UUID = "11111111-1111-4111-8111-111111111111"
HERO_UUID = "22222222-2222-4222-8222-222222222222"
CARD_UUID = "33333333-3333-4333-8333-333333333333"
FILE_UUIDS = [BUTTON_UUID, HERO_UUID, CARD_UUID]

BUTTON = "cohesion_base_styles.cohesion_base_styles.button"
HERO = "cohesion_elements.cohesion_component.hero"
CARD = "cohesion_elements.cohesion_component.card"
PACKAGE = "sync.package.homepage"


def _record(name: str, **extra: Any) -> Dict[str, Any]:
    """Minimal configuration record in storage key order."""
    record: Dict[str, Any] = {
        "uuid": f"uuid-{name.rsplit('.', 1)[-1]}",
        "langcode": "en",
        "status": True,
        "id": name.rsplit(".", 1)[-1],
        "label": name.rsplit(".", 1)[-1].title(),
    }
    record.update(extra)
    return record


# ── Configuration records ────────────────────────────────────────────────────────

@pytest.fixture
def sample_records() -> Dict[str, Dict[str, Any]]:
    """The 12 configuration records of the sample site.

    Dependency shape:
      sync.package.homepage  members: hero
      hero  -> config: button   content: hero file
      button -> content: button file
      card   -> content: card file
    """
    return {
        BUTTON: _record(
            BUTTON,
            json_values='{"styles":{"color":"#fff"}}',
            dependencies={"content": [f"file:file:{BUTTON_UUID}"]},
        ),
        "cohesion_custom_styles.cohesion_custom_style.dark": _record(
            "cohesion_custom_styles.cohesion_custom_style.dark",
            json_values='{"dark":true}',
        ),
        CARD: _record(
            CARD,
            dependencies={"content": [f"file:file:{CARD_UUID}"]},
        ),
        HERO: _record(
            HERO,
            json_values='{"a":1}',
            json_mapper="{}",
            dependencies={
                "config": [BUTTON],
                "content": [f"file:file:{HERO_UUID}"],
            },
        ),
        "cohesion_style_helpers.cohesion_style_helper.spacing": _record(
            "cohesion_style_helpers.cohesion_style_helper.spacing",
        ),
        "cohesion_templates.cohesion_content_templates.page": _record(
            "cohesion_templates.cohesion_content_templates.page",
            json_values='{"canvas":[]}',
        ),
        "cohesion_templates.cohesion_master_templates.master": _record(
            "cohesion_templates.cohesion_master_templates.master",
        ),
        "cohesion_website_settings.cohesion_color.primary": _record(
            "cohesion_website_settings.cohesion_color.primary",
            json_values='{"value":{"hex":"#0055ff"}}',
        ),
        "cohesion_website_settings.cohesion_font_stack.body": _record(
            "cohesion_website_settings.cohesion_font_stack.body",
        ),
        "cohesion_website_settings.cohesion_icon_library.fa": _record(
            "cohesion_website_settings.cohesion_icon_library.fa",
        ),
        PACKAGE: _record(
            PACKAGE,
            type="sync_package",
            settings=json.dumps({"members": [HERO]}),
        ),
        "system.site": {"name": "Sample site", "slogan": "", "page": {"front": "/node"}},
    }


@pytest.fixture
def memory_store(sample_records):
    """MemoryStorage holding the sample site's records."""
    from packexport.storage.memory import MemoryStorage

    return MemoryStorage(sample_records)


# ── Managed files ────────────────────────────────────────────────────────────────

@pytest.fixture
def asset_dir(tmp_path) -> Path:
    """Directory holding the raw bytes of the sample managed files."""
    directory = tmp_path / "assets"
    directory.mkdir()
    (directory / "button.png").write_bytes(b"\x89PNG button-bytes")
    (directory / "hero.jpg").write_bytes(b"\xff\xd8\xff hero-bytes " * 64)
    (directory / "card.svg").write_bytes(b"<svg>card</svg>")
    return directory


@pytest.fixture
def file_uuids() -> List[str]:
    """Uuids of the sample assets, sorted (button, hero, card)."""
    return list(FILE_UUIDS)


@pytest.fixture
def file_registry(asset_dir):
    """FileRegistry with the 3 sample assets (created = 1700000000 + n*100)."""
    from packexport.storage.files import FileAsset, FileRegistry

    return FileRegistry(
        [
            FileAsset(
                uuid=BUTTON_UUID,
                filename="button.png",
                uri=str(asset_dir / "button.png"),
                created=1700000000,
                fields={"filemime": "image/png", "status": 1},
            ),
            FileAsset(
                uuid=HERO_UUID,
                filename="hero.jpg",
                uri=str(asset_dir / "hero.jpg"),
                created=1700000100,
                fields={"filemime": "image/jpeg", "status": 1},
            ),
            FileAsset(
                uuid=CARD_UUID,
                filename="card.svg",
                uri=str(asset_dir / "card.svg"),
                created=1700000200,
                fields={"filemime": "image/svg+xml", "status": 1, "alt": None},
            ),
        ]
    )


# ── Config fixture ───────────────────────────────────────────────────────────────

@pytest.fixture
def export_config(tmp_path):
    """ExportConfig isolated to tmp_path, with 5 entries per batch."""
    from config.settings import ExportConfig

    return ExportConfig(
        site_name="Test Site",
        config_dir=str(tmp_path / "config"),
        file_registry=str(tmp_path / "files.yml"),
        sync_dir=None,
        temporary_dir=str(tmp_path / "tmp"),
        state_path=None,
        full_export_limit=5,
        enabled_entity_types={},
        log_level="WARNING",
    )


# ── Archive inspection helper ────────────────────────────────────────────────────

@pytest.fixture
def read_archive():
    """Return a reader listing (name, bytes, mtime) for every archive member, in order.

    Usage:
        def test_something(read_archive):
            members = read_archive(path)
            names = [m[0] for m in members]
    """

    def _read(path) -> List[Tuple[str, bytes, int]]:
        members: List[Tuple[str, bytes, int]] = []
        with tarfile.open(path, "r:gz") as archive:
            for info in archive.getmembers():
                handle = archive.extractfile(info)
                data = handle.read() if handle is not None else b""
                members.append((info.name, data, int(info.mtime)))
        return members

    return _read
