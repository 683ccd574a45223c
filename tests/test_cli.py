"""Test the command-line interface"""

from unittest.mock import MagicMock, patch

import pytest
import yaml
from click.testing import CliRunner

from conftest import make_playlist_item
from yt_playlist_downloader import __version__
from yt_playlist_downloader.cli import cli
from yt_playlist_downloader.core.exceptions import TransportError
from yt_playlist_downloader.storage.records import VideoRecordStore
from yt_playlist_downloader.sync.synchronizer import SyncStats, VideoFailure
from yt_playlist_downloader.youtube.models import Video


@pytest.fixture
def project_dir(temp_dir, monkeypatch):
    """Working directory with a config.yaml"""
    monkeypatch.chdir(temp_dir)
    config = {
        "youtube": {"api_key": "test-key"},
        "output": {"directory": str(temp_dir / "out")},
        "sync": {"playlists": ["PLconfigured"], "threads": 2},
    }
    (temp_dir / "config.yaml").write_text(yaml.safe_dump(config), encoding="utf-8")
    return temp_dir


@pytest.fixture
def mock_sync():
    """Patch out logging setup and the synchronizer factory"""
    synchronizer = MagicMock()
    synchronizer.stats = SyncStats(playlists=1, total=2, synced=2)
    synchronizer.failures = []

    with patch("yt_playlist_downloader.cli.setup_logging"), \
            patch("yt_playlist_downloader.cli.shutdown_logging"), \
            patch("yt_playlist_downloader.cli.create_synchronizer") as mock_create:
        mock_create.return_value = synchronizer
        yield mock_create, synchronizer


class TestSyncCommand:
    """Test `ytpl sync`"""

    def test_sync_url_argument(self, project_dir, mock_sync):
        """Test playlist URLs are reduced to ids"""
        _, synchronizer = mock_sync

        result = CliRunner().invoke(
            cli, ["sync", "https://www.youtube.com/playlist?list=PLabc", "PLdef"]
        )

        assert result.exit_code == 0, result.output
        synchronizer.sync_playlists.assert_called_once_with(["PLabc", "PLdef"])

    def test_sync_configured_playlists(self, project_dir, mock_sync):
        """Test sync.playlists is used without arguments"""
        _, synchronizer = mock_sync

        result = CliRunner().invoke(cli, ["sync"])

        assert result.exit_code == 0, result.output
        synchronizer.sync_playlists.assert_called_once_with(["PLconfigured"])

    def test_options_override_config(self, project_dir, mock_sync):
        """Test --threads and --continue-on-error reach the synchronizer config"""
        mock_create, _ = mock_sync

        result = CliRunner().invoke(
            cli, ["sync", "--threads", "8", "--continue-on-error", "--no-progress"]
        )

        assert result.exit_code == 0, result.output
        config = mock_create.call_args[0][0]
        assert config.sync.threads == 8
        assert config.sync.continue_on_error is True
        assert mock_create.call_args[1]["show_progress"] is False

    def test_no_playlists(self, temp_dir, monkeypatch, mock_sync):
        """Test a usage error when nothing is given or configured"""
        monkeypatch.chdir(temp_dir)
        config = {"youtube": {"api_key": "k"}, "output": {"directory": str(temp_dir)}}
        (temp_dir / "config.yaml").write_text(yaml.safe_dump(config), encoding="utf-8")

        result = CliRunner().invoke(cli, ["sync"])

        assert result.exit_code == 2

    def test_invalid_playlist_url(self, project_dir, mock_sync):
        """Test a URL without a list parameter"""
        result = CliRunner().invoke(cli, ["sync", "https://www.youtube.com/watch?v=abc"])

        assert result.exit_code == 2

    def test_missing_config(self, temp_dir, monkeypatch, mock_sync):
        """Test a configuration error exits with 1"""
        monkeypatch.chdir(temp_dir)

        result = CliRunner().invoke(cli, ["sync", "PLabc"])

        assert result.exit_code == 1
        assert "Configuration error" in result.output

    def test_recorded_failures_exit_1(self, project_dir, mock_sync):
        """Test failures collected with --continue-on-error give a non-zero exit"""
        _, synchronizer = mock_sync
        synchronizer.failures = [VideoFailure("PLabc", "v1", TransportError("HTTP 404"))]

        result = CliRunner().invoke(cli, ["sync", "PLabc", "--continue-on-error"])

        assert result.exit_code == 1
        assert "1 videos failed" in result.output

    def test_quota_error(self, project_dir, mock_sync):
        """Test the quota hint on an exhausted quota"""
        _, synchronizer = mock_sync
        synchronizer.sync_playlists.side_effect = TransportError(
            "YouTube API quota exhausted while listing playlist: PLabc",
            http_status=403,
            is_quota_error=True
        )

        result = CliRunner().invoke(cli, ["sync", "PLabc"])

        assert result.exit_code == 1
        assert "quota" in result.output

    def test_invalid_key_hint(self, project_dir, mock_sync):
        """Test the API key hint on HTTP 400/403"""
        _, synchronizer = mock_sync
        synchronizer.sync_playlists.side_effect = TransportError(
            "Failed to list playlist items: HTTP 400", http_status=400
        )

        result = CliRunner().invoke(cli, ["sync", "PLabc"])

        assert result.exit_code == 1
        assert "api_key" in result.output


class TestVideosCommand:
    """Test `ytpl videos`"""

    def test_lists_records(self, project_dir):
        """Test records are printed ordered by id"""
        store = VideoRecordStore(project_dir / "out" / "videos")
        store.ensure_directory()
        store.save(Video.from_playlist_item(make_playlist_item("bbb", title="Second")))
        store.save(Video.from_playlist_item(make_playlist_item("aaa", title="First")))

        result = CliRunner().invoke(cli, ["videos"])

        assert result.exit_code == 0, result.output
        assert "aaa  2021-03-04  First" in result.output
        assert "bbb  2021-03-04  Second" in result.output
        assert result.output.index("aaa") < result.output.index("bbb")

    def test_no_records(self, project_dir):
        """Test an unsynced output directory"""
        result = CliRunner().invoke(cli, ["videos"])

        assert result.exit_code == 0
        assert "0 videos" in result.output


def test_version():
    """Test --version"""
    result = CliRunner().invoke(cli, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.output
