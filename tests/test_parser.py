"""Tests for Spotify and Apple link parsing."""
import pytest

from backend.models import Catalog, ItemType
from backend.parser import MUSIC_RULES, PODCAST_RULES, parse_apple_url, parse_spotify_url, parse_url


class TestSpotifyLinks:

    @pytest.mark.parametrize("kind", ["track", "album", "artist", "show", "episode"])
    def test_each_type(self, kind):
        url = f"https://open.spotify.com/{kind}/4uLU6hMCjMI75M1A2tKUQC"
        parsed = parse_spotify_url(url)
        assert parsed.source is Catalog.SPOTIFY
        assert parsed.type is ItemType(kind)
        assert parsed.id == "4uLU6hMCjMI75M1A2tKUQC"
        assert parsed.show_id is None
        assert parsed.original_url == url

    def test_locale_prefix_and_tracking_query(self):
        parsed = parse_spotify_url("https://open.spotify.com/intl-es/track/abc123?si=xyz")
        assert parsed.type is ItemType.TRACK
        assert parsed.id == "abc123"

    def test_missing_id(self):
        assert parse_spotify_url("https://open.spotify.com/track/") is None

    def test_unknown_type(self):
        assert parse_spotify_url("https://open.spotify.com/playlist/37i9dQZF1DX") is None

    def test_wrong_host(self):
        assert parse_spotify_url("https://spotify.example.com/track/abc") is None


class TestApplePodcastLinks:

    def test_episode_from_query_id(self):
        parsed = parse_apple_url("https://podcasts.apple.com/us/podcast/some-show/id456?i=123")
        assert parsed.source is Catalog.APPLE
        assert parsed.type is ItemType.EPISODE
        assert parsed.id == "123"
        assert parsed.show_id == "456"
        assert parsed.country == "us"

    def test_show_without_query_id(self):
        parsed = parse_apple_url("https://podcasts.apple.com/gb/podcast/some-show/id456")
        assert parsed.type is ItemType.SHOW
        assert parsed.id == "456"
        assert parsed.show_id is None
        assert parsed.country == "gb"

    def test_show_id_without_prefix(self):
        parsed = parse_apple_url("https://podcasts.apple.com/us/podcast/some-show/456")
        assert parsed.type is ItemType.SHOW
        assert parsed.id == "456"

    def test_podcast_on_itunes_host(self):
        parsed = parse_apple_url("https://itunes.apple.com/podcast/some-show/id456?i=789")
        assert parsed.type is ItemType.EPISODE
        assert parsed.id == "789"
        assert parsed.show_id == "456"
        assert parsed.country == "us"

    def test_episode_without_show_id_in_path(self):
        parsed = parse_apple_url("https://podcasts.apple.com/us/podcast/some-show?i=123")
        assert parsed.type is ItemType.EPISODE
        assert parsed.id == "123"
        assert parsed.show_id is None

    def test_podcast_without_any_id(self):
        assert parse_apple_url("https://podcasts.apple.com/us/podcast/some-show") is None


class TestAppleMusicLinks:

    def test_album(self):
        parsed = parse_apple_url("https://music.apple.com/us/album/name/789")
        assert parsed.type is ItemType.ALBUM
        assert parsed.id == "789"
        assert parsed.country == "us"

    def test_track_inside_album(self):
        parsed = parse_apple_url("https://music.apple.com/us/album/name/789?i=321")
        assert parsed.type is ItemType.TRACK
        assert parsed.id == "321"
        assert parsed.show_id is None

    def test_artist_ignores_query_id(self):
        parsed = parse_apple_url("https://music.apple.com/de/artist/someone/136975?i=999")
        assert parsed.type is ItemType.ARTIST
        assert parsed.id == "136975"
        assert parsed.country == "de"

    def test_song_uses_path_id_without_query(self):
        parsed = parse_apple_url("https://music.apple.com/us/song/name/1440857790")
        assert parsed.type is ItemType.TRACK
        assert parsed.id == "1440857790"

    def test_song_prefers_query_id(self):
        parsed = parse_apple_url("https://music.apple.com/us/song/name/111?i=222")
        assert parsed.id == "222"

    def test_unknown_type_with_query_id_is_track(self):
        parsed = parse_apple_url("https://music.apple.com/us/playlist/mix/pl.u-123?i=555")
        assert parsed.type is ItemType.TRACK
        assert parsed.id == "555"

    def test_unknown_type_without_query_id(self):
        assert parse_apple_url("https://music.apple.com/us/playlist/mix/pl.u-123") is None

    def test_legacy_itunes_id_prefix(self):
        parsed = parse_apple_url("https://itunes.apple.com/album/name/id1440857781")
        assert parsed.type is ItemType.ALBUM
        assert parsed.id == "1440857781"
        assert parsed.country == "us"

    def test_country_is_lowercased(self):
        parsed = parse_apple_url("https://music.apple.com/GB/album/name/789")
        assert parsed.country == "gb"

    def test_album_without_id(self):
        assert parse_apple_url("https://music.apple.com/us/album/name") is None

    def test_empty_path(self):
        assert parse_apple_url("https://music.apple.com/") is None


class TestParseUrl:

    def test_unrecognized_host(self):
        assert parse_url("https://example.com/track/1") is None

    @pytest.mark.parametrize("garbage", ["", "not a url", "http://[::1", "://"])
    def test_malformed_input_never_raises(self, garbage):
        assert parse_url(garbage) is None

    def test_dispatches_to_both_dialects(self):
        assert parse_url("https://open.spotify.com/track/abc").source is Catalog.SPOTIFY
        assert parse_url("https://music.apple.com/us/album/a/1").source is Catalog.APPLE

    @pytest.mark.parametrize(
        "url, kind",
        [
            ("https://music.apple.com/us/album/x/1440857781?i=1440857790&uo=4", ItemType.TRACK),
            ("https://music.apple.com/us/album/x/1440857781?uo=4", ItemType.ALBUM),
            ("https://music.apple.com/us/artist/x/136975?uo=4", ItemType.ARTIST),
            ("https://podcasts.apple.com/us/podcast/x/id1535809341?uo=4", ItemType.SHOW),
            ("https://podcasts.apple.com/us/podcast/ep/id1535809341?i=1000582936530&uo=4", ItemType.EPISODE),
        ],
    )
    def test_apple_view_urls_parse_back(self, url, kind):
        # Shapes returned by the iTunes API as trackViewUrl/collectionViewUrl/...
        assert parse_url(url).type is kind


class TestDecisionTables:

    def test_podcast_rules_order(self):
        assert [r.item_type for r in PODCAST_RULES] == [ItemType.EPISODE, ItemType.SHOW]

    def test_music_rules_cover_every_music_type(self):
        types = {r.item_type for r in MUSIC_RULES}
        assert types == {ItemType.TRACK, ItemType.ALBUM, ItemType.ARTIST}
