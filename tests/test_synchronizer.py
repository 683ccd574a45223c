"""Test playlist synchronization"""

from pathlib import Path

import pytest

from conftest import FakeImageFetcher, FakePlaylistClient, make_page, make_playlist_item
from yt_playlist_downloader.core.config import Config, OutputConfig, SyncConfig, YouTubeConfig
from yt_playlist_downloader.core.exceptions import (
    MalformedResponseError,
    StorageError,
    TransportError,
)
from yt_playlist_downloader.storage.records import VideoRecordStore
from yt_playlist_downloader.storage.thumbnails import ThumbnailMaterializer
from yt_playlist_downloader.sync.synchronizer import (
    PlaylistSynchronizer,
    SyncStats,
    VideoFailure,
    create_synchronizer,
)
from yt_playlist_downloader.youtube.fetcher import PlaylistFetcher


def make_synchronizer(
    root: Path,
    client: FakePlaylistClient,
    image_fetcher: FakeImageFetcher,
    threads: int = 4,
    continue_on_error: bool = False
) -> PlaylistSynchronizer:
    return PlaylistSynchronizer(
        fetcher=PlaylistFetcher(client),
        record_store=VideoRecordStore(root / "videos"),
        materializer=ThumbnailMaterializer(image_fetcher, root / "thumbnails"),
        threads=threads,
        continue_on_error=continue_on_error
    )


def snapshot(root: Path) -> dict[str, bytes]:
    """Map every file under root (relative path) to its content."""
    return {
        str(path.relative_to(root)): path.read_bytes()
        for path in sorted(root.rglob("*"))
        if path.is_file()
    }


@pytest.fixture
def basic_client():
    """P1 = [V1 public, private entry, V2 unlisted with a standard thumbnail]"""
    return FakePlaylistClient({
        "P1": [make_page([
            make_playlist_item("V1"),
            make_playlist_item("X", privacy_status="private"),
            make_playlist_item("V2", privacy_status="unlisted", standard=True),
        ])]
    })


class TestSyncStats:
    """Test SyncStats"""

    def test_success_rate(self):
        """Test percentage computation"""
        assert SyncStats(total=4, synced=3, failed=1).success_rate == 75.0

    def test_success_rate_empty(self):
        """Test zero videos gives 0%"""
        assert SyncStats().success_rate == 0.0


class TestSyncPlaylist:
    """Test PlaylistSynchronizer.sync_playlist"""

    def test_mirrors_available_videos(self, temp_dir, basic_client, image_fetcher):
        """Test records and thumbnails are written for available videos only"""
        synchronizer = make_synchronizer(temp_dir, basic_client, image_fetcher)

        videos = synchronizer.sync_playlist("P1")

        assert [v.video_id for v in videos] == ["V1", "V2"]
        assert sorted(p.name for p in (temp_dir / "videos").iterdir()) == ["V1.json", "V2.json"]
        assert sorted(p.name for p in (temp_dir / "thumbnails" / "V1").iterdir()) == [
            "default.jpg", "hqdefault.jpg", "mqdefault.jpg"
        ]
        assert sorted(p.name for p in (temp_dir / "thumbnails" / "V2").iterdir()) == [
            "default.jpg", "hqdefault.jpg", "mqdefault.jpg", "sddefault.jpg"
        ]
        assert not (temp_dir / "thumbnails" / "X").exists()
        assert synchronizer.stats == SyncStats(playlists=1, total=2, synced=2, failed=0)
        assert synchronizer.failures == []

    def test_resync_is_idempotent(self, temp_dir, basic_client, image_fetcher):
        """Test a second run leaves byte-identical files"""
        synchronizer = make_synchronizer(temp_dir, basic_client, image_fetcher)

        synchronizer.sync_playlist("P1")
        first = snapshot(temp_dir)
        basic_client.reset()
        synchronizer.sync_playlist("P1")

        assert snapshot(temp_dir) == first

    def test_result_in_playlist_order(self, temp_dir):
        """Test slow early videos do not reorder the result"""
        ids = [f"V{i}" for i in range(8)]
        client = FakePlaylistClient({
            "P1": [make_page([make_playlist_item(v) for v in ids])]
        })
        fetcher = FakeImageFetcher(delays={
            "https://i.ytimg.com/vi/V0/default.jpg": 0.2,
            "https://i.ytimg.com/vi/V1/default.jpg": 0.1,
        })

        videos = make_synchronizer(temp_dir, client, fetcher, threads=4).sync_playlist("P1")

        assert [v.video_id for v in videos] == ids

    def test_empty_playlist(self, temp_dir, image_fetcher):
        """Test an empty playlist still prepares the records directory"""
        client = FakePlaylistClient({"P1": [make_page([])]})
        synchronizer = make_synchronizer(temp_dir, client, image_fetcher)

        assert synchronizer.sync_playlist("P1") == []
        assert (temp_dir / "videos").is_dir()
        assert synchronizer.stats.playlists == 1
        assert image_fetcher.fetched == []

    def test_enumeration_error_writes_nothing(self, temp_dir, image_fetcher):
        """Test a listing failure propagates before any file is written"""
        client = FakePlaylistClient(
            {}, errors={"P1": TransportError("Playlist not found: P1", http_status=404)}
        )
        synchronizer = make_synchronizer(temp_dir, client, image_fetcher)

        with pytest.raises(TransportError):
            synchronizer.sync_playlist("P1")

        assert not (temp_dir / "videos").exists()
        assert synchronizer.stats.playlists == 0

    @pytest.mark.parametrize("video_id", ["", "../escaped", ".."])
    def test_unusable_video_id_writes_nothing(self, temp_dir, image_fetcher, video_id):
        """Test an id that would escape the output directories fails before any I/O"""
        bad = make_playlist_item("V2")
        bad["contentDetails"]["videoId"] = video_id
        client = FakePlaylistClient({"P1": [make_page([make_playlist_item("V1"), bad])]})
        synchronizer = make_synchronizer(temp_dir, client, image_fetcher)

        with pytest.raises(MalformedResponseError) as exc_info:
            synchronizer.sync_playlist("P1")

        assert exc_info.value.field == "contentDetails.videoId"
        assert snapshot(temp_dir) == {}
        assert not (temp_dir / "escaped.json").exists()
        assert image_fetcher.fetched == []

    def test_records_directory_unusable(self, temp_dir, basic_client, image_fetcher):
        """Test a file in place of the records directory is a StorageError"""
        (temp_dir / "videos").write_text("oops")
        synchronizer = make_synchronizer(temp_dir, basic_client, image_fetcher)

        with pytest.raises(StorageError):
            synchronizer.sync_playlist("P1")

        assert image_fetcher.fetched == []

    def test_abort_on_first_failure(self, temp_dir):
        """Test the default policy raises the failing video's error"""
        client = FakePlaylistClient({
            "P1": [make_page([make_playlist_item(v) for v in ["V1", "V2", "V3"]])]
        })
        fetcher = FakeImageFetcher(fail_urls={"https://i.ytimg.com/vi/V1/hqdefault.jpg"})
        synchronizer = make_synchronizer(temp_dir, client, fetcher, threads=1)

        with pytest.raises(TransportError) as exc_info:
            synchronizer.sync_playlist("P1")

        assert exc_info.value.details["url"] == "https://i.ytimg.com/vi/V1/hqdefault.jpg"
        assert synchronizer.failures[0] == VideoFailure("P1", "V1", exc_info.value)
        assert synchronizer.stats.failed >= 1
        assert (temp_dir / "videos" / "V1.json").exists()

    def test_continue_on_error(self, temp_dir):
        """Test failures are recorded and the other videos still complete"""
        client = FakePlaylistClient({
            "P1": [make_page([make_playlist_item(v) for v in ["V1", "V2", "V3"]])]
        })
        fetcher = FakeImageFetcher(fail_urls={"https://i.ytimg.com/vi/V2/mqdefault.jpg"})
        synchronizer = make_synchronizer(temp_dir, client, fetcher, continue_on_error=True)

        videos = synchronizer.sync_playlist("P1")

        assert [v.video_id for v in videos] == ["V1", "V2", "V3"]
        assert [(f.playlist_id, f.video_id) for f in synchronizer.failures] == [("P1", "V2")]
        assert isinstance(synchronizer.failures[0].error, TransportError)
        assert synchronizer.stats == SyncStats(playlists=1, total=3, synced=2, failed=1)
        assert (temp_dir / "videos" / "V2.json").exists()
        assert (temp_dir / "thumbnails" / "V2" / "default.jpg").exists()
        assert len(list((temp_dir / "thumbnails" / "V3").iterdir())) == 3


class TestSyncPlaylists:
    """Test PlaylistSynchronizer.sync_playlists"""

    def test_concatenates_in_given_order(self, temp_dir, image_fetcher):
        """Test results follow the playlist order, then playlist order within"""
        client = FakePlaylistClient({
            "P1": [make_page([make_playlist_item("A1"), make_playlist_item("A2")])],
            "P2": [make_page([make_playlist_item("B1")])],
        })
        synchronizer = make_synchronizer(temp_dir, client, image_fetcher)

        videos = synchronizer.sync_playlists(["P2", "P1"])

        assert [v.video_id for v in videos] == ["B1", "A1", "A2"]
        assert synchronizer.stats.playlists == 2
        assert synchronizer.stats.synced == 3

    def test_shared_video_written_once_per_playlist(self, temp_dir, image_fetcher):
        """Test a video in two playlists appears twice and has one record"""
        client = FakePlaylistClient({
            "P1": [make_page([make_playlist_item("S")])],
            "P2": [make_page([make_playlist_item("S")])],
        })
        synchronizer = make_synchronizer(temp_dir, client, image_fetcher)

        videos = synchronizer.sync_playlists(["P1", "P2"])

        assert [v.video_id for v in videos] == ["S", "S"]
        assert [p.name for p in (temp_dir / "videos").iterdir()] == ["S.json"]

    def test_error_stops_remaining_playlists(self, temp_dir, image_fetcher):
        """Test playlists after a failing one are not requested"""
        bad_page = {"kind": "youtube#playlistItemListResponse"}
        client = FakePlaylistClient({
            "P1": [bad_page],
            "P2": [make_page([make_playlist_item("B1")])],
        })
        synchronizer = make_synchronizer(temp_dir, client, image_fetcher)

        with pytest.raises(MalformedResponseError):
            synchronizer.sync_playlists(["P1", "P2"])

        assert [call[0] for call in client.calls] == ["P1"]

    def test_empty_list(self, temp_dir, basic_client, image_fetcher):
        """Test no playlists means no work"""
        synchronizer = make_synchronizer(temp_dir, basic_client, image_fetcher)

        assert synchronizer.sync_playlists([]) == []
        assert basic_client.calls == []


class TestLoadAllVideos:
    """Test reading back synced records"""

    def test_after_sync(self, temp_dir, basic_client, image_fetcher):
        """Test records read back equal the synced videos"""
        synchronizer = make_synchronizer(temp_dir, basic_client, image_fetcher)
        videos = synchronizer.sync_playlist("P1")

        assert synchronizer.load_all_videos() == sorted(videos, key=lambda v: v.video_id)

    def test_before_any_sync(self, temp_dir, basic_client, image_fetcher):
        """Test an empty result before the first sync"""
        synchronizer = make_synchronizer(temp_dir, basic_client, image_fetcher)

        assert synchronizer.load_all_videos() == []


class TestCreateSynchronizer:
    """Test create_synchronizer"""

    def test_wires_config(self, temp_dir, basic_client, image_fetcher):
        """Test directories, threads and error policy come from the config"""
        config = Config(
            youtube=YouTubeConfig(api_key="test-key", request_timeout=10.0),
            output=OutputConfig(
                directory=temp_dir,
                videos_directory=temp_dir / "records",
                thumbnails_directory=temp_dir / "images"
            ),
            sync=SyncConfig(playlists=("P1",), threads=2, continue_on_error=True)
        )

        synchronizer = create_synchronizer(
            config, client=basic_client, image_fetcher=image_fetcher
        )
        synchronizer.sync_playlist("P1")

        assert synchronizer.threads == 2
        assert synchronizer.continue_on_error is True
        assert (temp_dir / "records" / "V1.json").exists()
        assert (temp_dir / "images" / "V2" / "sddefault.jpg").exists()
