"""YouTube extractor backed by yt-dlp."""

import asyncio
import logging
from typing import Optional

import yt_dlp

from ..classifier import StrategyId
from ..validator import is_absolute_url
from .base import BaseExtractor, MediaSource, VideoRecord


logger = logging.getLogger(__name__)


class YouTubeExtractor(BaseExtractor):
    """
    Extractor for YouTube watch pages.

    Does not scrape the page. yt-dlp resolves the format manifest, and only
    formats that carry both audio and video are exposed, tallest first.
    """

    strategy_id = StrategyId.YOUTUBE
    platform = "youtube"
    site_name = "YouTube"

    default_title = "YouTube Video"
    default_author = "Unknown Channel"

    referer = "https://www.youtube.com/"

    async def extract(self, url: str) -> VideoRecord:
        logger.info("Resolving YouTube formats for %s", url)
        # yt-dlp is blocking; keep it off the event loop
        loop = asyncio.get_running_loop()
        try:
            info = await loop.run_in_executor(None, self._extract_info, url)
        except Exception as e:
            raise self._error(str(e)) from e

        if not info:
            raise self._error("No metadata returned")

        try:
            record = self._parse_info(info, url)
        except Exception as e:
            raise self._error(str(e)) from e

        logger.info(
            "Extracted %r from %s (%d muxed format(s))",
            record.title, url, len(record.candidate_media_sources),
        )
        return record

    def _extract_info(self, url: str) -> Optional[dict]:
        ydl_opts = {
            'quiet': True,
            'no_warnings': True,
            'noplaylist': True,
            'skip_download': True,
            'socket_timeout': self.timeout,
            'http_headers': {
                'User-Agent': self.user_agent,
                'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8',
                'Accept-Language': 'en-US,en;q=0.5',
            },
        }

        with yt_dlp.YoutubeDL(ydl_opts) as ydl:
            return ydl.extract_info(url, download=False)

    def _parse_info(self, info: dict, page_url: str) -> VideoRecord:
        """Turn a yt-dlp info dict into a record."""
        formats = [f for f in info.get('formats') or [] if self._is_muxed(f)]
        formats.sort(key=lambda f: (f.get('height') or 0, f.get('tbr') or 0), reverse=True)

        sources = self._dedupe([
            MediaSource(
                url=f['url'],
                mime_type=f"video/{f.get('ext') or 'mp4'}",
                quality_label=self._quality_label(f),
                format_id=str(f['format_id']) if f.get('format_id') is not None else None,
            )
            for f in formats
        ])

        thumbnails = [t for t in info.get('thumbnails') or [] if t.get('url')]
        thumbnail = thumbnails[-1]['url'] if thumbnails else info.get('thumbnail')

        return self._build_record(
            page_url,
            title=self._clean_text(info.get('title')),
            description=info.get('description') or None,
            thumbnail_url=self._resolve(thumbnail, page_url),
            author=info.get('uploader') or info.get('channel') or self.default_author,
            duration_seconds=self._parse_int(info.get('duration')),
            sources=sources,
        )

    def _is_muxed(self, fmt: dict) -> bool:
        """Formats with both audio and video and a direct http(s) URL."""
        if fmt.get('vcodec') in (None, 'none') or fmt.get('acodec') in (None, 'none'):
            return False
        protocol = fmt.get('protocol') or 'https'
        return protocol in ('http', 'https') and is_absolute_url(fmt.get('url'))

    def _quality_label(self, fmt: dict) -> str:
        if fmt.get('height'):
            return f"{fmt['height']}p"
        return fmt.get('format_note') or 'unknown'
