"""End-to-end tests for a ScrobbleSources resolution pass.

Subsonic is the adapter under test here because it is the one that talks to a
server during the pass, so the HTTP side is faked with httpx.MockTransport.
"""

import json
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

import httpx
import pytest

from scrobblehub.application.services.source_builder import ScrobbleSources
from scrobblehub.domain.entities import BuildStatus
from scrobblehub.domain.exceptions import ConfigParseError

OK_ENVELOPE = {"subsonic-response": {"status": "ok", "version": "1.16.1"}}
BAD_LOGIN_ENVELOPE = {
    "subsonic-response": {
        "status": "failed",
        "version": "1.16.1",
        "error": {"code": 40, "message": "Wrong username or password"},
    }
}


def subsonic_server(bad_users: tuple[str, ...] = ()) -> Callable[[httpx.Request], httpx.Response]:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.params.get("u") in bad_users:
            return httpx.Response(200, json=BAD_LOGIN_ENVELOPE)
        return httpx.Response(200, json=OK_ENVELOPE)

    return handler


def write(config_dir: Path, filename: str, document: Any) -> None:
    path = config_dir / filename
    if isinstance(document, str):
        path.write_text(document)
    else:
        path.write_text(json.dumps(document))


@pytest.fixture
def make_sources(tmp_path: Path) -> Callable[..., ScrobbleSources]:
    def _make(
        env: dict[str, str] | None = None,
        handler: Callable[[httpx.Request], httpx.Response] | None = None,
    ) -> ScrobbleSources:
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler or subsonic_server()))
        return ScrobbleSources(
            "http://localhost:9078",
            tmp_path,
            env or {},
            http_client=client,
        )

    return _make


class TestNamingConflicts:
    """Test unique naming across config files."""

    async def test_duplicate_names_across_files_are_suffixed(
        self,
        tmp_path: Path,
        make_sources: Callable[..., ScrobbleSources],
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        write(
            tmp_path,
            "config.json",
            {
                "sourceDefaults": {"password": "pw"},
                "sources": [
                    {"type": "subsonic", "name": "home", "data": {"user": "a", "url": "http://a"}}
                ],
            },
        )
        write(tmp_path, "subsonic.json", [{"name": "home", "data": {"user": "b", "url": "http://b"}}])
        sources = make_sources()

        with caplog.at_level(logging.INFO):
            results = await sources.build_sources_from_config()

        assert [r.name for r in results] == ["home1", "home2"]
        assert all(r.status is BuildStatus.REGISTERED for r in results)
        first = sources.get_by_name_and_type("home1", "subsonic")
        second = sources.get_by_name_and_type("home2", "subsonic")
        assert first is not None and first.config["user"] == "a"
        assert second is not None and second.config["user"] == "b"
        assert 'the following configs have the same name "home"' in caplog.text

    async def test_env_and_file_unnamed_entries(
        self,
        tmp_path: Path,
        make_sources: Callable[..., ScrobbleSources],
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        write(tmp_path, "subsonic.json", [{"data": {"user": "b", "password": "p", "url": "http://b"}}])
        env = {"SUBSONIC_USER": "a", "SUBSONIC_PASSWORD": "p", "SUBSONIC_URL": "http://a"}
        sources = make_sources(env=env)

        with caplog.at_level(logging.INFO):
            await sources.build_sources_from_config()

        env_source = sources.get_by_name_and_type("unnamed1", "subsonic")
        file_source = sources.get_by_name_and_type("unnamed2", "subsonic")
        assert env_source is not None and env_source.config["user"] == "a"
        assert file_source is not None and file_source.config["user"] == "b"
        assert '"unnamed" configs occur when using ENVs' in caplog.text

    async def test_same_name_different_types_untouched(
        self, tmp_path: Path, make_sources: Callable[..., ScrobbleSources]
    ) -> None:
        write(tmp_path, "plex.json", [{"name": "home", "data": {"user": "me"}}])
        write(tmp_path, "jellyfin.json", [{"name": "home", "data": {"user": "me"}}])
        sources = make_sources()

        await sources.build_sources_from_config()

        assert {(s.type, s.name) for s in sources.sources} == {("plex", "home"), ("jellyfin", "home")}


class TestFailureContainment:
    """Test that problems stay local to their file or entry."""

    async def test_missing_password_names_the_field(
        self,
        tmp_path: Path,
        make_sources: Callable[..., ScrobbleSources],
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        write(tmp_path, "subsonic.json", [{"name": "home", "data": {"user": "a", "url": "http://a"}}])
        sources = make_sources()

        with caplog.at_level(logging.ERROR):
            results = await sources.build_sources_from_config()

        assert [r.status for r in results] == [BuildStatus.CONSTRUCTION_FAILED]
        assert sources.sources == []
        assert "Cannot setup Subsonic source, 'password' is not defined" in caplog.text

    async def test_malformed_type_file_only_skips_that_type(
        self,
        tmp_path: Path,
        make_sources: Callable[..., ScrobbleSources],
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        write(tmp_path, "plex.json", "{not json")
        write(tmp_path, "jellyfin.json", [{"name": "jf", "data": {"user": "me"}}])
        sources = make_sources()

        with caplog.at_level(logging.ERROR):
            await sources.build_sources_from_config()

        assert [s.name for s in sources.sources] == ["jf"]
        assert "plex.json config file could not be parsed" in caplog.text

    async def test_non_list_clients_only_skips_that_entry(
        self,
        tmp_path: Path,
        make_sources: Callable[..., ScrobbleSources],
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        write(tmp_path, "plex.json", [{"name": "bad", "clients": 5, "data": {"user": "a"}}])
        write(tmp_path, "jellyfin.json", [{"name": "jf", "data": {"user": "me"}}])
        sources = make_sources()

        with caplog.at_level(logging.ERROR):
            results = await sources.build_sources_from_config()

        assert [s.name for s in sources.sources] == ["jf"]
        assert [r.name for r in results] == ["jf"]
        assert "'clients' must be a string or an array of strings" in caplog.text

    async def test_invalid_entry_skipped_others_built(
        self, tmp_path: Path, make_sources: Callable[..., ScrobbleSources]
    ) -> None:
        write(
            tmp_path,
            "plex.json",
            [None, {"name": "nodata"}, {"name": "empty", "data": {}}, {"name": "ok", "data": {"user": "me"}}],
        )
        sources = make_sources()

        results = await sources.build_sources_from_config()

        assert [s.name for s in sources.sources] == ["ok"]
        statuses = {r.name: r.status for r in results}
        assert statuses["empty"] is BuildStatus.INVALID
        assert statuses["ok"] is BuildStatus.REGISTERED
        assert "nodata" not in statuses

    async def test_unparsable_combined_config_aborts_pass(
        self, tmp_path: Path, make_sources: Callable[..., ScrobbleSources]
    ) -> None:
        write(tmp_path, "config.json", "{ sources: [")
        write(tmp_path, "plex.json", [{"name": "ok", "data": {"user": "me"}}])
        sources = make_sources()

        with pytest.raises(ConfigParseError, match="config.json could not be parsed"):
            await sources.build_sources_from_config()

        assert sources.sources == []

    async def test_auth_failure_keeps_source_registered(
        self,
        tmp_path: Path,
        make_sources: Callable[..., ScrobbleSources],
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        write(
            tmp_path,
            "subsonic.json",
            [{"name": "home", "data": {"user": "intruder", "password": "x", "url": "http://a"}}],
        )
        sources = make_sources(handler=subsonic_server(bad_users=("intruder",)))

        with caplog.at_level(logging.WARNING):
            results = await sources.build_sources_from_config()

        assert results[0].status is BuildStatus.AUTH_FAILED
        assert results[0].error == "Wrong username or password"
        source = sources.get_by_name("home")
        assert source is not None
        assert source.authed is False
        assert "source auth failed" in caplog.text


class TestAdditionalConfigs:
    """Test caller-supplied entries."""

    async def test_additional_configs_come_first_and_clients_are_ignored(
        self, tmp_path: Path, make_sources: Callable[..., ScrobbleSources]
    ) -> None:
        write(tmp_path, "plex.json", [{"name": "file", "data": {"user": "me"}}])
        sources = make_sources()

        results = await sources.build_sources_from_config(
            [
                {"type": "plex", "name": "extra", "data": {"user": "x"}},
                {"type": "plex", "name": "scrobbler", "configureAs": "client", "data": {"user": "y"}},
            ]
        )

        assert [r.name for r in results] == ["extra", "file"]

    async def test_no_config_at_all(self, make_sources: Callable[..., ScrobbleSources]) -> None:
        sources = make_sources()

        results = await sources.build_sources_from_config()

        assert results == []
        assert sources.sources == []


class TestAddSource:
    """Test adding one source by hand."""

    async def test_add_source_from_mapping(self, make_sources: Callable[..., ScrobbleSources]) -> None:
        sources = make_sources()

        result = await sources.add_source(
            {"type": "subsonic", "name": "solo", "data": {"user": "a", "url": "http://a"}},
            {"password": "pw"},
        )

        assert result.status is BuildStatus.REGISTERED
        assert sources.get_by_type("subsonic")[0].name == "solo"
