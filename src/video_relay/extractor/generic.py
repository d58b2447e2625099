"""Generic fallback extractor for sites without a dedicated strategy."""

from typing import Optional
from urllib.parse import urlparse

from bs4 import BeautifulSoup

from ..classifier import StrategyId
from .base import BaseExtractor, MediaSource, VideoRecord


class GenericExtractor(BaseExtractor):
    """
    Best-effort extractor for arbitrary pages.

    Reads the usual preview tags with HTML fallbacks, scans <video> elements
    including their nested <source> children, and accepts a wider set of
    media extensions. The platform label is the bare hostname.
    """

    strategy_id = StrategyId.GENERIC
    platform = "generic"
    site_name = ""

    default_title = "Video"
    default_author = ""

    media_extensions = ('mp4', 'mov', 'webm', 'ogg', 'm4v')

    def relay_referer(self, record: VideoRecord) -> Optional[str]:
        return record.source_url

    def _platform_label(self, page_url: str) -> str:
        host = (urlparse(page_url).hostname or '').lower()
        if host.startswith('www.'):
            host = host[len('www.'):]
        return host or self.platform

    def _extract_title(self, soup: BeautifulSoup) -> Optional[str]:
        title = super()._extract_title(soup)
        if not title and soup.title:
            title = self._clean_text(soup.title.get_text())
        return title

    def _extract_description(self, soup: BeautifulSoup) -> Optional[str]:
        return super()._extract_description(soup) or self._clean_text(
            self._extract_meta(soup, 'description')
        )

    def _extract_thumbnail(self, soup: BeautifulSoup) -> Optional[str]:
        return super()._extract_thumbnail(soup) or self._extract_meta(soup, 'thumbnail', 'thumbnailUrl')

    def _extract_author(self, soup: BeautifulSoup, title: Optional[str]) -> Optional[str]:
        return self._clean_text(self._extract_meta(soup, 'author', 'article:author')) or self.default_author

    def _extract_duration(self, soup: BeautifulSoup, html: str) -> Optional[int]:
        return self._parse_int(self._extract_meta(soup, 'og:video:duration', 'video:duration'))

    def _find_media_elements(self, soup: BeautifulSoup, page_url: str) -> list[MediaSource]:
        """Every <video> src and nested <source>, then og:video tags."""
        sources = []

        for video in soup.find_all('video'):
            src = video.get('src')
            if src:
                sources.append(MediaSource(url=src, mime_type='video/mp4', quality_label='unknown'))

            for source in video.find_all('source'):
                source_src = source.get('src')
                if source_src:
                    sources.append(MediaSource(
                        url=source_src,
                        mime_type=source.get('type') or 'video/mp4',
                        quality_label=source.get('size') or source.get('label') or 'unknown',
                    ))

        sources.extend(self._find_preview_video(soup))
        return sources

