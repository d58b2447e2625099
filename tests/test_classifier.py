"""Tests for site classification and URL normalization."""

from urllib.parse import urlparse

import pytest

from video_relay.classifier import StrategyId, classify, list_site_families, normalize


class TestClassify:
    """Tests for classify."""

    @pytest.mark.parametrize("url, expected", [
        ("https://www.youtube.com/watch?v=dQw4w9WgXcQ", StrategyId.YOUTUBE),
        ("https://youtu.be/dQw4w9WgXcQ", StrategyId.YOUTUBE),
        ("https://m.youtube.com/shorts/abc", StrategyId.YOUTUBE),
        ("https://www.tiktok.com/@user/video/1234567890", StrategyId.TIKTOK),
        ("https://vm.tiktok.com/ZMabc/", StrategyId.TIKTOK),
        ("https://twitter.com/user/status/1", StrategyId.TWITTER),
        ("https://x.com/user/status/1", StrategyId.TWITTER),
        ("https://www.facebook.com/watch?v=123", StrategyId.FACEBOOK),
        ("https://fb.com/watch?v=123", StrategyId.FACEBOOK),
        ("https://fb.watch/abc/", StrategyId.FACEBOOK),
        ("https://example.com/clip", StrategyId.GENERIC),
    ])
    def test_known_sites(self, url, expected):
        assert classify(url) == expected

    def test_matches_host_not_substring(self):
        # "x.com" inside another host or the path must not select Twitter
        assert classify("https://box.com/video") == StrategyId.GENERIC
        assert classify("https://example.com/?ref=youtube.com") == StrategyId.GENERIC
        assert classify("https://notyoutube.com/v") == StrategyId.GENERIC

    def test_total_on_garbage(self):
        for url in ("", "not-a-url", "http://[::1", None):
            assert classify(url) == StrategyId.GENERIC

    def test_deterministic(self):
        url = "https://x.com/someone/status/99"
        assert {classify(url) for _ in range(10)} == {StrategyId.TWITTER}

    def test_site_families_order(self):
        assert list_site_families() == ["youtube", "tiktok", "twitter", "facebook"]


class TestNormalize:
    """Tests for normalize."""

    def test_youtube_short_link(self):
        assert normalize("https://youtu.be/dQw4w9WgXcQ?si=abc", StrategyId.YOUTUBE) == \
            "https://www.youtube.com/watch?v=dQw4w9WgXcQ"

    def test_youtube_keeps_only_video_id(self):
        url = "https://m.youtube.com/watch?feature=share&v=dQw4w9WgXcQ&t=10#x"
        assert normalize(url, StrategyId.YOUTUBE) == "https://www.youtube.com/watch?v=dQw4w9WgXcQ"

    def test_youtube_shorts_and_embed(self):
        assert normalize("https://www.youtube.com/shorts/abc_DEF-1", "youtube") == \
            "https://www.youtube.com/watch?v=abc_DEF-1"
        assert normalize("https://www.youtube-nocookie.com/embed/xyz", "youtube") == \
            "https://www.youtube.com/watch?v=xyz"

    def test_tiktok_strips_query(self):
        canonical = normalize("https://www.tiktok.com/@user/video/1234567890?extra=1", StrategyId.TIKTOK)
        parts = urlparse(canonical)
        assert parts.path == "/@user/video/1234567890"
        assert parts.query == ""
        assert canonical == "https://www.tiktok.com/@user/video/1234567890"

    def test_tiktok_unknown_path_passes_through(self):
        assert normalize("https://m.tiktok.com/t/ZTabc/?x=1", StrategyId.TIKTOK) == \
            "https://www.tiktok.com/t/ZTabc/"

    def test_twitter_folds_x(self):
        assert normalize("https://x.com/someone/status/123/photo/1?s=20", StrategyId.TWITTER) == \
            "https://twitter.com/someone/status/123"

    def test_facebook_keeps_v(self):
        assert normalize("https://fb.com/watch/?v=42&mibextid=abc", StrategyId.FACEBOOK) == \
            "https://www.facebook.com/watch/?v=42"

    def test_generic_drops_tracking(self):
        url = "https://Example.com/clip?id=5&utm_source=x&fbclid=y#top"
        assert normalize(url, StrategyId.GENERIC) == "https://example.com/clip?id=5"

    def test_generic_keeps_untracked_query_verbatim(self):
        url = "https://example.com/clip?q=a%20b&page=2"
        assert normalize(url, StrategyId.GENERIC) == url

    def test_fail_open(self):
        assert normalize("https://example.com/a", "no-such-family") == "https://example.com/a"
        assert normalize("http://[::1", StrategyId.YOUTUBE) == "http://[::1"

    @pytest.mark.parametrize("family, url", [
        (StrategyId.YOUTUBE, "https://youtu.be/dQw4w9WgXcQ?t=1"),
        (StrategyId.YOUTUBE, "https://www.youtube.com/watch?v=a&list=b"),
        (StrategyId.YOUTUBE, "https://www.youtube.com/channel/UC123"),
        (StrategyId.TIKTOK, "https://www.tiktok.com/@user/video/1234567890?extra=1"),
        (StrategyId.TWITTER, "https://mobile.twitter.com/i/web/status/5?s=1"),
        (StrategyId.FACEBOOK, "https://m.facebook.com/story.php?story_fbid=1&v=2"),
        (StrategyId.GENERIC, "https://EXAMPLE.com:8080/a b?utm_medium=x&k=v w"),
        (StrategyId.GENERIC, "http://[::1]:8000/clip?gclid=1"),
    ])
    def test_idempotent(self, family, url):
        once = normalize(url, family)
        assert normalize(once, family) == once
