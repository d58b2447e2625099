"""Base extractor interface and the shared page-scraping skeleton."""

import asyncio
import html as html_lib
import logging
import re
from abc import ABC
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional
from urllib.parse import urljoin, urlparse

import aiohttp
from bs4 import BeautifulSoup

from ..classifier import StrategyId
from ..errors import ExtractionError
from ..validator import is_absolute_url


logger = logging.getLogger(__name__)


DESKTOP_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
MOBILE_USER_AGENT = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 16_6 like Mac OS X) "
    "AppleWebKit/605.1.15 (KHTML, like Gecko) Version/16.6 Mobile/15E148 Safari/604.1"
)

MIME_TYPES = {
    'mp4': 'video/mp4',
    'm4v': 'video/mp4',
    'mov': 'video/quicktime',
    'webm': 'video/webm',
    'ogg': 'video/ogg',
    'ogv': 'video/ogg',
}

# Streaming manifests, not raw media bytes
PLAYLIST_EXTENSIONS = ('m3u8', 'mpd')


@dataclass(frozen=True)
class MediaSource:
    """A directly fetchable media URL with its labels."""

    url: str
    mime_type: str = 'video/mp4'
    quality_label: str = 'unknown'
    format_id: Optional[str] = None  # YouTube itag


@dataclass(frozen=True)
class VideoRecord:
    """Metadata and ranked media locators extracted from one page."""

    title: str
    platform: str
    source_url: str

    thumbnail_url: Optional[str] = None
    description: Optional[str] = None
    author: Optional[str] = None
    duration_seconds: Optional[int] = None

    # Best known quality first
    primary_media_url: Optional[str] = None
    candidate_media_sources: tuple[MediaSource, ...] = field(default_factory=tuple)

    def __post_init__(self):
        if not self.title or not self.title.strip():
            raise ValueError("VideoRecord.title must not be empty")
        if not isinstance(self.candidate_media_sources, tuple):
            object.__setattr__(self, 'candidate_media_sources', tuple(self.candidate_media_sources))
        if self.duration_seconds is not None and self.duration_seconds < 0:
            raise ValueError("VideoRecord.duration_seconds must be non-negative")
        if self.candidate_media_sources and self.primary_media_url is not None:
            if self.primary_media_url != self.candidate_media_sources[0].url:
                raise ValueError("primary_media_url must be the first candidate source")
        for url in self.all_urls():
            if not is_absolute_url(url):
                raise ValueError(f"VideoRecord URLs must be absolute: {url!r}")

    @property
    def has_locator(self) -> bool:
        return self.primary_media_url is not None

    def all_urls(self) -> list[str]:
        """Every non-null URL carried by the record."""
        urls = [self.source_url, self.thumbnail_url, self.primary_media_url]
        urls.extend(source.url for source in self.candidate_media_sources)
        return [url for url in urls if url is not None]


class BaseExtractor(ABC):
    """
    Abstract base class for site extraction strategies.

    Subclasses set the class attributes describing their site and override
    the hook methods (``_find_embedded_media``, ``_extract_duration``, ...)
    where the site needs it. The skeleton in ``extract`` is shared:

    1. fetch the page with a browser-like request
    2. read title/description/thumbnail from social-preview tags
    3. locate media: explicit media elements, then site-specific embedded
       data, then a broad scan of the raw source; the first step that
       finds anything wins
    4. deduplicate and resolve every URL against the page
    """

    strategy_id: StrategyId = StrategyId.GENERIC
    platform: str = "unknown"
    site_name: str = ""

    default_title: str = "Video"
    default_author: Optional[str] = None
    author_separators: tuple[str, ...] = ()

    # Hotlink protection: sent as Referer when relaying media
    referer: Optional[str] = None

    media_extensions: tuple[str, ...] = ('mp4',)

    def __init__(
        self,
        timeout: int = 30,
        user_agent: Optional[str] = None,
    ):
        self.timeout = timeout
        self.user_agent = user_agent or DESKTOP_USER_AGENT

    async def extract(self, url: str) -> VideoRecord:
        """
        Extract metadata and media locators from a canonical page URL.

        Args:
            url: Canonical URL of the media page

        Returns:
            VideoRecord, possibly without a locator

        Raises:
            ExtractionError: If the page cannot be fetched or holds no
                metadata at all
        """
        logger.info("Extracting %s page %s", self.platform, url)
        html = await self._fetch_page(self._page_url(url))

        try:
            record = self._parse_document(html, url)
        except ExtractionError:
            raise
        except Exception as e:
            raise self._error(str(e)) from e

        logger.info(
            "Extracted %r from %s (%d media source(s))",
            record.title, url, len(record.candidate_media_sources),
        )
        return record

    def relay_referer(self, record: VideoRecord) -> Optional[str]:
        """Referer to present when fetching this record's media."""
        return self.referer

    # ==================== FETCHING ====================

    def _page_url(self, url: str) -> str:
        """URL actually requested for a canonical page URL."""
        return url

    def _request_headers(self) -> dict[str, str]:
        headers = {
            'User-Agent': self.user_agent,
            'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8',
            'Accept-Language': 'en-US,en;q=0.9',
        }
        if self.referer:
            headers['Referer'] = self.referer
        return headers

    async def _fetch_page(self, url: str) -> str:
        """Fetch a page and return its decoded body."""
        timeout = aiohttp.ClientTimeout(total=self.timeout)
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.get(url, headers=self._request_headers(), allow_redirects=True) as response:
                    if response.status >= 400:
                        raise self._error(f"HTTP {response.status}")
                    return await response.text(errors='replace')
        except asyncio.TimeoutError as e:
            raise self._error(f"Timeout after {self.timeout}s") from e
        except aiohttp.ClientError as e:
            raise self._error(f"Network error: {e}") from e

    # ==================== PARSING ====================

    def _parse_document(self, html: str, page_url: str) -> VideoRecord:
        """Build a record from a fetched page."""
        if not html or not html.strip():
            raise self._error("Empty response from origin")

        soup = BeautifulSoup(html, 'html.parser')

        title = self._extract_title(soup)
        description = self._extract_description(soup)
        thumbnail = self._resolve(self._extract_thumbnail(soup), page_url)
        sources = self._locate_media(soup, html, page_url)

        page_title = self._clean_text(soup.title.get_text()) if soup.title else None
        if not any((title, description, thumbnail, page_title, sources)):
            raise self._error("No metadata found in page")

        return self._build_record(
            page_url,
            title=title,
            description=description,
            thumbnail_url=thumbnail,
            author=self._extract_author(soup, title),
            duration_seconds=self._extract_duration(soup, html),
            sources=sources,
        )

    def _build_record(
        self,
        page_url: str,
        title: Optional[str],
        sources: Iterable[MediaSource] = (),
        **fields,
    ) -> VideoRecord:
        """Assemble a record; the first source becomes the primary locator."""
        sources = tuple(sources)
        return VideoRecord(
            title=title or self.default_title,
            platform=self._platform_label(page_url),
            source_url=page_url,
            primary_media_url=sources[0].url if sources else None,
            candidate_media_sources=sources,
            **fields,
        )

    def _platform_label(self, page_url: str) -> str:
        return self.platform

    def _extract_title(self, soup: BeautifulSoup) -> Optional[str]:
        return self._clean_text(self._extract_meta(soup, 'og:title', 'twitter:title'))

    def _extract_description(self, soup: BeautifulSoup) -> Optional[str]:
        return self._clean_text(self._extract_meta(soup, 'og:description', 'twitter:description'))

    def _extract_thumbnail(self, soup: BeautifulSoup) -> Optional[str]:
        return self._extract_meta(soup, 'og:image', 'og:image:url', 'twitter:image')

    def _extract_author(self, soup: BeautifulSoup, title: Optional[str]) -> Optional[str]:
        """Derive the author from the title ("<author> on <Site>...")."""
        if not title:
            return self.default_author
        author = title
        for separator in self.author_separators:
            if separator in title:
                author = title.split(separator)[0]
                break
        return author.strip() or self.default_author

    def _extract_duration(self, soup: BeautifulSoup, html: str) -> Optional[int]:
        return None

    def _extract_meta(self, soup: BeautifulSoup, *names: str) -> Optional[str]:
        """Return the content of the first meta tag matching any name."""
        for name in names:
            for attr in ('property', 'name', 'itemprop'):
                tag = soup.find('meta', attrs={attr: name})
                if tag and tag.get('content') and tag['content'].strip():
                    return tag['content'].strip()
        return None

    # ==================== MEDIA DISCOVERY ====================

    def _locate_media(self, soup: BeautifulSoup, html: str, page_url: str) -> list[MediaSource]:
        """Run the discovery steps in order; the first non-empty one wins."""
        steps: tuple[tuple[str, Callable[[], list[MediaSource]]], ...] = (
            ("media elements", lambda: self._find_media_elements(soup, page_url)),
            ("embedded data", lambda: self._find_embedded_media(html, page_url)),
            ("source scan", lambda: self._scan_media_urls(html, page_url)),
        )
        for name, step in steps:
            found = self._dedupe(self._resolve_sources(step(), page_url))
            if found:
                logger.debug("%s: %d source(s) from %s", self.platform, len(found), name)
                return self._rank_sources(found)
            logger.debug("%s: nothing found by %s", self.platform, name)
        return []

    def _find_media_elements(self, soup: BeautifulSoup, page_url: str) -> list[MediaSource]:
        """Explicit <video>/<source> elements and og:video tags."""
        sources = []

        for video in soup.find_all('video'):
            src = video.get('src')
            if src and self._has_media_extension(src):
                sources.append(MediaSource(url=src, mime_type=self._guess_mime_type(src)))

        for source in soup.find_all('source'):
            src = source.get('src')
            if src and self._has_media_extension(src):
                sources.append(MediaSource(
                    url=src,
                    mime_type=source.get('type') or self._guess_mime_type(src),
                ))

        sources.extend(self._find_preview_video(soup))
        return sources

    def _find_preview_video(self, soup: BeautifulSoup) -> list[MediaSource]:
        """og:video tags, skipping HTML player embeds."""
        declared_type = self._extract_meta(soup, 'og:video:type')
        if declared_type and 'html' in declared_type.lower():
            return []

        sources = []
        for name in ('og:video:secure_url', 'og:video:url', 'og:video'):
            content = self._extract_meta(soup, name)
            if content:
                sources.append(MediaSource(
                    url=html_lib.unescape(content),
                    mime_type=declared_type or self._guess_mime_type(content),
                ))
        return sources

    def _find_embedded_media(self, html: str, page_url: str) -> list[MediaSource]:
        """Site-specific patterns in the raw page source."""
        return []

    def _scan_media_urls(self, html: str, page_url: str) -> list[MediaSource]:
        """Any absolute URL in the raw source ending in a media extension."""
        extensions = '|'.join(re.escape(ext) for ext in self.media_extensions)
        pattern = re.compile(
            rf'https?://[^"\'\s)<>\\]+?\.(?:{extensions})(?![A-Za-z0-9])(?:\?[^"\'\s)<>\\]*)?',
            re.IGNORECASE,
        )
        text = html.replace('\\/', '/')
        return [
            MediaSource(url=html_lib.unescape(match), mime_type=self._guess_mime_type(match))
            for match in pattern.findall(text)
        ]

    def _rank_sources(self, sources: list[MediaSource]) -> list[MediaSource]:
        """Order sources best first. Discovery order by default."""
        return sources

    # ==================== HELPERS ====================

    def _resolve(self, url: Optional[str], page_url: str) -> Optional[str]:
        """Resolve ``url`` against the page; None unless the result is http(s)."""
        if not url:
            return None
        absolute = urljoin(page_url, url.strip())
        return absolute if is_absolute_url(absolute) else None

    def _resolve_sources(self, sources: list[MediaSource], page_url: str) -> list[MediaSource]:
        resolved = []
        for source in sources:
            url = self._resolve(source.url, page_url)
            if url is None:
                # blob:/data: URLs and the like cannot be fetched
                continue
            if self._is_playlist(url):
                continue
            if url != source.url:
                source = MediaSource(url, source.mime_type, source.quality_label, source.format_id)
            resolved.append(source)
        return resolved

    def _is_playlist(self, url: str) -> bool:
        path = urlparse(url).path.lower()
        return any(path.endswith('.' + ext) for ext in PLAYLIST_EXTENSIONS)

    def _dedupe(self, sources: list[MediaSource]) -> list[MediaSource]:
        seen = set()
        unique = []
        for source in sources:
            if source.url not in seen:
                seen.add(source.url)
                unique.append(source)
        return unique

    def _has_media_extension(self, url: str) -> bool:
        path = urlparse(url).path.lower()
        return any(path.endswith('.' + ext) for ext in self.media_extensions) or '.mp4' in url.lower()

    def _guess_mime_type(self, url: str) -> str:
        path = urlparse(url).path.lower()
        extension = path.rsplit('.', 1)[-1] if '.' in path else ''
        return MIME_TYPES.get(extension, 'video/mp4')

    def _unescape_json_url(self, value: str) -> str:
        """Undo JSON string escaping commonly found around embedded URLs."""
        value = value.replace('\\u002F', '/').replace('\\u002f', '/')
        value = value.replace('\\u0026', '&').replace('\\/', '/')
        return html_lib.unescape(value)

    def _parse_int(self, value) -> Optional[int]:
        try:
            number = int(float(value))
        except (TypeError, ValueError, OverflowError):
            return None
        return number if number >= 0 else None

    def _clean_text(self, text: Optional[str]) -> Optional[str]:
        """Clean and normalize text content."""
        if not text:
            return None
        text = ' '.join(text.split())
        return text.strip() if text else None

    def _error(self, reason: str) -> ExtractionError:
        subject = f"{self.site_name} video" if self.site_name else "video"
        return ExtractionError(f"Failed to extract {subject}. {reason}", platform=self.platform)
