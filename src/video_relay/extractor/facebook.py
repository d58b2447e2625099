"""Facebook extractor."""

import re

from ..classifier import StrategyId
from .base import BaseExtractor, MediaSource


class FacebookExtractor(BaseExtractor):
    """Extractor for Facebook video, watch and reel pages."""

    strategy_id = StrategyId.FACEBOOK
    platform = "facebook"
    site_name = "Facebook"

    default_title = "Facebook Video"
    default_author = "Unknown User"
    author_separators = (" - ",)

    referer = "https://www.facebook.com/"

    # Player keys seen in Facebook's embedded JSON, HD first
    EMBEDDED_KEYS = (
        ('hd_src', 'hd'),
        ('browser_native_hd_url', 'hd'),
        ('playable_url_quality_hd', 'hd'),
        ('sd_src', 'sd'),
        ('browser_native_sd_url', 'sd'),
        ('playable_url', 'sd'),
    )

    def _request_headers(self) -> dict[str, str]:
        return {
            'User-Agent': self.user_agent,
            'Accept': 'text/html,application/xhtml+xml',
            'Accept-Language': 'en-US,en;q=0.9',
            'sec-fetch-site': 'none',
            'sec-fetch-mode': 'navigate',
        }

    def _find_embedded_media(self, html: str, page_url: str) -> list[MediaSource]:
        sources = []
        for key, quality in self.EMBEDDED_KEYS:
            match = re.search(rf'"{key}":"([^"]+)"', html)
            if match:
                sources.append(MediaSource(
                    url=self._unescape_json_url(match.group(1)),
                    mime_type='video/mp4',
                    quality_label=quality,
                ))
        return sources
