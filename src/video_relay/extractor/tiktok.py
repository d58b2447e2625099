"""TikTok extractor."""

import re
from typing import Optional

from bs4 import BeautifulSoup

from ..classifier import StrategyId
from .base import BaseExtractor, MediaSource


class TikTokExtractor(BaseExtractor):
    """Extractor for TikTok video pages."""

    strategy_id = StrategyId.TIKTOK
    platform = "tiktok"
    site_name = "TikTok"

    default_title = "TikTok Video"
    default_author = "Unknown Creator"
    author_separators = (" on TikTok",)

    referer = "https://www.tiktok.com/"

    # Keys of the player state embedded in the page, best first
    EMBEDDED_KEYS = ('playAddr', 'downloadAddr')
    DURATION_PATTERN = re.compile(r'"duration":\s*(\d+)')

    def _find_embedded_media(self, html: str, page_url: str) -> list[MediaSource]:
        sources = []
        for key in self.EMBEDDED_KEYS:
            for match in re.finditer(rf'"{key}":"([^"]+)"', html):
                url = self._unescape_json_url(match.group(1))
                sources.append(MediaSource(url=url, mime_type='video/mp4', quality_label=key))
        return sources

    def _extract_duration(self, soup: BeautifulSoup, html: str) -> Optional[int]:
        match = self.DURATION_PATTERN.search(html)
        return self._parse_int(match.group(1)) if match else None
