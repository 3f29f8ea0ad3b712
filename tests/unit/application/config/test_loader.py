"""Tests for ConfigLoader."""

import json
import logging
from pathlib import Path

import pytest

from scrobblehub.application.config.loader import (
    ConfigLoader,
    normalize_type_document,
)
from scrobblehub.domain.entities import SourceType
from scrobblehub.domain.exceptions import ConfigParseError, FileReadError


def write_json(path: Path, value: object) -> None:
    path.write_text(json.dumps(value), encoding="utf-8")


@pytest.fixture
def loader(tmp_path: Path) -> ConfigLoader:
    return ConfigLoader(tmp_path)


class TestLoadCombined:
    """Test config.json handling."""

    async def test_missing_file_returns_none(self, loader: ConfigLoader) -> None:
        assert await loader.load_combined() is None

    async def test_reads_sources_and_defaults(self, loader: ConfigLoader, tmp_path: Path) -> None:
        write_json(
            tmp_path / "config.json",
            {
                "sources": [{"type": "subsonic", "name": "home", "data": {}}],
                "sourceDefaults": {"interval": 10},
            },
        )

        combined = await loader.load_combined()

        assert combined is not None
        assert combined.path == "config.json"
        assert combined.sources == [{"type": "subsonic", "name": "home", "data": {}}]
        assert combined.source_defaults == {"interval": 10}

    async def test_defaults_to_empty_sections(self, loader: ConfigLoader, tmp_path: Path) -> None:
        write_json(tmp_path / "config.json", {})

        combined = await loader.load_combined()

        assert combined is not None
        assert combined.sources == []
        assert combined.source_defaults == {}

    async def test_malformed_json_is_fatal(self, loader: ConfigLoader, tmp_path: Path) -> None:
        (tmp_path / "config.json").write_text("{not json", encoding="utf-8")

        with pytest.raises(ConfigParseError, match="config.json could not be parsed"):
            await loader.load_combined()

    async def test_non_object_document_is_fatal(self, loader: ConfigLoader, tmp_path: Path) -> None:
        write_json(tmp_path / "config.json", [1, 2])

        with pytest.raises(ConfigParseError):
            await loader.load_combined()

    async def test_sources_must_be_array(self, loader: ConfigLoader, tmp_path: Path) -> None:
        write_json(tmp_path / "config.json", {"sources": {"type": "plex"}})

        with pytest.raises(ConfigParseError, match="'sources' must be an array"):
            await loader.load_combined()


class TestNormalizeTypeDocument:
    """Test per-type document shape handling."""

    def test_array_is_used_as_is(self) -> None:
        entries = [{"name": "a", "data": {}}, None]
        assert normalize_type_document(entries, "plex.json") == entries

    def test_legacy_object_with_data(self) -> None:
        result = normalize_type_document({"name": "a", "data": {"user": "x"}}, "plex.json")
        assert result == [{"mode": "single", "name": "a", "data": {"user": "x"}}]

    def test_legacy_bare_settings_object(self) -> None:
        result = normalize_type_document({"user": "x"}, "plex.json")
        assert result == [{"data": {"user": "x"}, "mode": "single", "name": "unnamed"}]

    def test_legacy_shapes_log_deprecation(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING):
            normalize_type_document({"user": "x"}, "plex.json")
        assert "DEPRECATED" in caplog.text

    def test_null_document_rejected(self) -> None:
        with pytest.raises(FileReadError, match="contained no data"):
            normalize_type_document(None, "plex.json")

    def test_scalar_document_rejected(self) -> None:
        with pytest.raises(FileReadError, match="array of objects"):
            normalize_type_document("nope", "plex.json")


class TestLoadTypeFiles:
    """Test per-type file isolation."""

    async def test_missing_file_returns_none(self, loader: ConfigLoader) -> None:
        assert await loader.load_type_file(SourceType.PLEX) is None

    async def test_type_file_is_tagged(self, loader: ConfigLoader, tmp_path: Path) -> None:
        write_json(tmp_path / "subsonic.json", [{"name": "home", "data": {}}])

        type_file = await loader.load_type_file(SourceType.SUBSONIC)

        assert type_file is not None
        assert type_file.source_type is SourceType.SUBSONIC
        assert type_file.path == "subsonic.json"
        assert type_file.entries == [{"name": "home", "data": {}}]

    async def test_malformed_file_raises_file_read_error(
        self, loader: ConfigLoader, tmp_path: Path
    ) -> None:
        (tmp_path / "plex.json").write_text("[{", encoding="utf-8")

        with pytest.raises(FileReadError):
            await loader.load_type_file(SourceType.PLEX)

    async def test_malformed_file_only_skips_its_type(
        self, loader: ConfigLoader, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        (tmp_path / "plex.json").write_text("[{", encoding="utf-8")
        write_json(tmp_path / "jellyfin.json", [{"name": "jf", "data": {}}])
        write_json(tmp_path / "subsonic.json", [{"name": "home", "data": {}}])

        with caplog.at_level(logging.ERROR):
            files = await loader.load_type_files(
                [SourceType.PLEX, SourceType.SUBSONIC, SourceType.JELLYFIN]
            )

        assert SourceType.PLEX not in files
        assert files[SourceType.SUBSONIC].entries == [{"name": "home", "data": {}}]
        assert files[SourceType.JELLYFIN].entries == [{"name": "jf", "data": {}}]
        assert "plex.json config file could not be parsed" in caplog.text

    async def test_null_file_is_skipped(
        self, loader: ConfigLoader, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        write_json(tmp_path / "plex.json", None)

        with caplog.at_level(logging.ERROR):
            files = await loader.load_type_files([SourceType.PLEX])

        assert files == {}
        assert "plex.json contained no data" in caplog.text
