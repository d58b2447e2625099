"""Twitter/X extractor."""

import re
from urllib.parse import urlparse, urlunparse

from ..classifier import StrategyId
from .base import BaseExtractor, MediaSource, MOBILE_USER_AGENT


class TwitterExtractor(BaseExtractor):
    """
    Extractor for Twitter/X status pages.

    The mobile site serves simpler markup, so pages are fetched from
    ``mobile.twitter.com`` with an iPhone user agent.
    """

    strategy_id = StrategyId.TWITTER
    platform = "twitter"
    site_name = "Twitter"

    default_title = "Twitter Video"
    default_author = "Unknown User"
    author_separators = (" on Twitter", " on X")

    referer = "https://twitter.com/"

    MOBILE_HOST = "mobile.twitter.com"
    VIDEO_CDN_PATTERN = re.compile(r'https://video\.twimg\.com/[^"\'\s<>\\]+?\.mp4(?:\?[^"\'\s<>\\]*)?')

    def _page_url(self, url: str) -> str:
        parts = urlparse(url)
        if parts.hostname in ('twitter.com', 'www.twitter.com'):
            return urlunparse(parts._replace(netloc=self.MOBILE_HOST))
        return url

    def _request_headers(self) -> dict[str, str]:
        return {
            'User-Agent': MOBILE_USER_AGENT,
            'Accept': 'text/html,application/xhtml+xml',
            'Accept-Language': 'en-US,en;q=0.9',
        }

    def _find_embedded_media(self, html: str, page_url: str) -> list[MediaSource]:
        text = html.replace('\\/', '/')
        return [
            MediaSource(url=self._unescape_json_url(match), mime_type='video/mp4')
            for match in self.VIDEO_CDN_PATTERN.findall(text)
        ]

    def _rank_sources(self, sources: list[MediaSource]) -> list[MediaSource]:
        """Prefer the largest rendition when the CDN path carries WxH."""
        def area(source: MediaSource) -> int:
            match = re.search(r'/(\d+)x(\d+)/', source.url)
            return int(match.group(1)) * int(match.group(2)) if match else 0

        ranked = sorted(sources, key=area, reverse=True)
        return [
            MediaSource(s.url, s.mime_type, self._quality_from_url(s.url), s.format_id)
            for s in ranked
        ]

    def _quality_from_url(self, url: str) -> str:
        match = re.search(r'/(\d+)x(\d+)/', url)
        return f"{match.group(1)}x{match.group(2)}" if match else 'unknown'
