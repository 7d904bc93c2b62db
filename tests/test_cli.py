"""Tests for the command-line interface."""

import asyncio
import logging

import pytest
from click.testing import CliRunner
from conftest import FakeMusicService

from playlist_tagger import __version__
from playlist_tagger.cli.commands import TaggerApp
from playlist_tagger.cli.main import cli
from playlist_tagger.database import TrackStoreService
from playlist_tagger.models import Track, TrackWithTags, User

ME = User(id="me", name="Me")


class LoggedInMusicService(FakeMusicService):
    """Fake music service that knows the logged-in account."""

    def current_user(self) -> User:
        return ME


@pytest.fixture(autouse=True)
def restore_root_logger():
    """Keep the handlers installed by the CLI out of other tests."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def db_path(tmp_path, monkeypatch):
    """Point the configuration at a temporary directory."""
    path = tmp_path / "tags.db"
    monkeypatch.setenv("PLAYLIST_TAGGER_DATABASE_PATH", str(path))
    monkeypatch.setenv("PLAYLIST_TAGGER_TIDAL_TOKEN_FILE", str(tmp_path / "t.json"))
    monkeypatch.delenv("PLAYLIST_TAGGER_LOG_FILE", raising=False)
    return path


@pytest.fixture
def music_service():
    """Create the library seen by every command."""
    return LoggedInMusicService(
        [Track(id="1", title="So What"), Track(id="2", title="Blue in Green")]
    )


@pytest.fixture
def runner(db_path, music_service, monkeypatch):
    """Create a CliRunner whose commands use the fake music service."""

    def make_app():
        app = TaggerApp()
        app._music_service = music_service
        return app

    monkeypatch.setattr("playlist_tagger.cli.main.TaggerApp", make_app)
    return CliRunner()


def read_store(db_path):
    """Get the stored tracks of the logged-in user by id."""
    store = TrackStoreService(db_path=db_path)
    try:
        tracks = asyncio.run(store.get_user_tracks(ME, "fake"))
    finally:
        store.close()
    return {track.id: track for track in tracks}


def seed_store(db_path, *tracks):
    """Write tracks straight into the store."""
    store = TrackStoreService(db_path=db_path)
    try:
        asyncio.run(store.upsert_tracks(ME, "fake", list(tracks)))
    finally:
        store.close()


def test_version():
    """Test --version reports the package version."""
    result = CliRunner().invoke(cli, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.output


def test_sync_stores_library(runner, db_path):
    """Test sync copies the library into the store."""
    result = runner.invoke(cli, ["sync"])

    assert result.exit_code == 0, result.output
    assert "2 tracks in store" in result.output
    stored = read_store(db_path)
    assert set(stored) == {"1", "2"}
    assert stored["1"].title == "So What"
    assert stored["1"].tags == []


def test_tag_add_and_remove(runner, db_path):
    """Test tags are added and removed through the tag commands."""
    runner.invoke(cli, ["sync"])

    result = runner.invoke(cli, ["tag", "add", "jazz", "modal", "-i", "1", "-i", "2"])
    assert result.exit_code == 0, result.output
    assert "Tagged 2 track(s)" in result.output

    result = runner.invoke(cli, ["tag", "remove", "modal", "--track", "2"])
    assert result.exit_code == 0, result.output

    stored = read_store(db_path)
    assert stored["1"].tags == ["jazz", "modal"]
    assert stored["2"].tags == ["jazz"]


def test_tag_add_unknown_track_fails(runner, db_path):
    """Test tagging a track missing from the store exits with an error."""
    runner.invoke(cli, ["sync"])

    result = runner.invoke(cli, ["tag", "add", "jazz", "-i", "404"])

    assert result.exit_code == 1
    assert "not found in store" in result.output
    assert all(track.tags == [] for track in read_store(db_path).values())


def test_tag_add_requires_track(runner):
    """Test the --track option is mandatory."""
    result = runner.invoke(cli, ["tag", "add", "jazz"])

    assert result.exit_code == 2
    assert "--track" in result.output


def test_playlist_create(runner, db_path, music_service):
    """Test a playlist is created from the tagged tracks."""
    seed_store(
        db_path,
        TrackWithTags(id="1", tags=["jazz"]),
        TrackWithTags(id="2", tags=["rock"]),
    )

    result = runner.invoke(cli, ["playlist", "create", "Jazz", "--tag", "jazz"])

    assert result.exit_code == 0, result.output
    assert "pl-1" in result.output
    metadata, tracks = music_service.playlists["pl-1"]
    assert metadata.name == "Jazz"
    assert [t.id for t in tracks] == ["1"]


def test_playlist_update_adds_missing_tracks(runner, db_path, music_service):
    """Test only tracks the playlist lacks are sent."""
    seed_store(
        db_path,
        TrackWithTags(id="1", tags=["jazz"]),
        TrackWithTags(id="2", tags=["jazz"]),
    )
    music_service.add_playlist("pl-9", "Mix", ["1"])

    result = runner.invoke(cli, ["playlist", "update", "pl-9", "-t", "jazz"])

    assert result.exit_code == 0, result.output
    assert music_service.calls[-1] == ("update_playlist_tracks", "me", "pl-9", ["2"])


def test_playlists_lists_tags(runner, db_path, music_service):
    """Test playlists are shown with the stored tags of their tracks."""
    seed_store(db_path, TrackWithTags(id="1", tags=["jazz"]))
    music_service.add_playlist("pl-9", "Evening", ["1"])

    result = runner.invoke(cli, ["playlists"])

    assert result.exit_code == 0, result.output
    assert "Evening" in result.output
    assert "jazz" in result.output


def test_playlists_empty(runner):
    """Test the message shown when there are no playlists."""
    result = runner.invoke(cli, ["playlists"])

    assert result.exit_code == 0, result.output
    assert "No playlists found" in result.output


def test_status(runner, db_path):
    """Test status reports the store contents."""
    seed_store(db_path, TrackWithTags(id="1", tags=["jazz"]))

    result = runner.invoke(cli, ["status"])

    assert result.exit_code == 0, result.output
    assert "Track Store" in result.output
    assert "jazz" in result.output


def test_music_service_failure_exits_with_error(runner, music_service):
    """Test service errors are reported and exit with status 1."""
    music_service.fail_on.add("get_all_songs")

    result = runner.invoke(cli, ["sync"])

    assert result.exit_code == 1
    assert "Sync failed" in result.output


def test_tag_commands_reject_tag_short_flag(runner):
    """Test -t is reserved for --tag and cannot pass track ids."""
    result = runner.invoke(cli, ["tag", "add", "jazz", "-t", "1"])

    assert result.exit_code == 2
    assert "No such option" in result.output


def test_playlists_show_markup_like_tags_verbatim(runner, db_path, music_service):
    """Test tags and names containing square brackets are printed as text."""
    seed_store(db_path, TrackWithTags(id="1", tags=["[/oops]", "[bold]"]))
    music_service.add_playlist("pl-9", "[red]Evening", ["1"])

    result = runner.invoke(cli, ["playlists"])

    assert result.exit_code == 0, result.output
    assert "[/oops]" in result.output
    assert "[bold]" in result.output
    assert "[red]Evening" in result.output


def test_status_shows_markup_like_tags_verbatim(runner, db_path):
    """Test the tag table prints bracketed tags as text."""
    seed_store(db_path, TrackWithTags(id="1", tags=["[/oops]"]))

    result = runner.invoke(cli, ["status"])

    assert result.exit_code == 0, result.output
    assert "[/oops]" in result.output


def test_error_message_with_brackets_exits_cleanly(runner, db_path):
    """Test an error mentioning a bracketed id still ends in a clean exit."""
    runner.invoke(cli, ["sync"])

    result = runner.invoke(cli, ["tag", "add", "jazz", "-i", "[/x]"])

    assert result.exit_code == 1
    assert isinstance(result.exception, SystemExit)
    assert "[/x]" in result.output


def test_created_playlist_name_with_brackets(runner, db_path, music_service):
    """Test the confirmation prints the playlist name as given."""
    seed_store(db_path, TrackWithTags(id="1", tags=["jazz"]))

    result = runner.invoke(cli, ["playlist", "create", "[/Jazz]", "-t", "jazz"])

    assert result.exit_code == 0, result.output
    assert "[/Jazz]" in result.output
