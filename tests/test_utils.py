"""Tests for the utils module."""

import logging
import re

from rich.logging import RichHandler

from video_relay.utils import (
    configure_logging,
    download_filename,
    format_duration,
    human_readable_size,
    slugify_title,
)


class TestFormatting:
    """Tests for formatting helpers."""

    def test_human_readable_size(self):
        assert human_readable_size(512) == "512.00 B"
        assert human_readable_size(1536) == "1.50 KB"
        assert human_readable_size(None) == "Unknown"

    def test_slugify_title(self):
        assert slugify_title("My Video: Part 1!") == "my_video__part_1_"
        assert slugify_title("") == "video"
        assert slugify_title(None) == "video"
        assert slugify_title("a" * 300) == "a" * 100

    def test_download_filename(self):
        assert download_filename("Cat Video", token=1700000000000) == "1700000000000_cat_video.mp4"
        assert re.fullmatch(r"\d{13}_clip\.mp4", download_filename("clip"))

    def test_format_duration(self):
        assert format_duration(None) == "Unknown"
        assert format_duration(75) == "1:15"
        assert format_duration(3725) == "1:02:05"


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_single_rich_handler(self):
        root = logging.getLogger()
        saved_handlers, saved_level = root.handlers[:], root.level
        try:
            configure_logging("debug")
            configure_logging("warning")
            rich_handlers = [h for h in root.handlers if isinstance(h, RichHandler)]
            assert len(rich_handlers) == 1
            assert root.level == logging.WARNING
            assert logging.getLogger("aiohttp.access").level == logging.WARNING
        finally:
            root.handlers = saved_handlers
            root.setLevel(saved_level)
