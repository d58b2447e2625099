"""Extraction strategies producing VideoRecords from media-page URLs."""

from .base import BaseExtractor, MediaSource, VideoRecord
from .youtube import YouTubeExtractor
from .tiktok import TikTokExtractor
from .twitter import TwitterExtractor
from .facebook import FacebookExtractor
from .generic import GenericExtractor
from .factory import get_extractor, register_extractor, list_supported_platforms

__all__ = [
    "BaseExtractor",
    "MediaSource",
    "VideoRecord",
    "YouTubeExtractor",
    "TikTokExtractor",
    "TwitterExtractor",
    "FacebookExtractor",
    "GenericExtractor",
    "get_extractor",
    "register_extractor",
    "list_supported_platforms",
]
