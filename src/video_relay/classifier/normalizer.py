"""Per-site URL canonicalization."""

import logging
import re
from typing import Callable, Union
from urllib.parse import ParseResult, parse_qsl, urlencode, urlparse, urlunparse

from .sites import StrategyId


logger = logging.getLogger(__name__)


# Query parameters that never identify content
TRACKING_PARAMS = {'fbclid', 'gclid', 'igsh', 'mibextid', 'si'}
TRACKING_PREFIXES = ('utm_',)

YOUTUBE_HOST = 'www.youtube.com'
YOUTUBE_ALIASES = {
    'youtu.be', 'www.youtu.be', 'youtube.com', 'www.youtube.com', 'm.youtube.com',
    'music.youtube.com', 'youtube-nocookie.com', 'www.youtube-nocookie.com',
}
YOUTUBE_PATH_ID = re.compile(r'^/(?:shorts|embed|live|v)/([A-Za-z0-9_-]+)')
YOUTUBE_SHORT_ID = re.compile(r'^/([A-Za-z0-9_-]+)')

TIKTOK_HOST = 'www.tiktok.com'
TIKTOK_ALIASES = {'tiktok.com', 'www.tiktok.com', 'm.tiktok.com'}
TIKTOK_VIDEO_PATH = re.compile(r'/(@[^/]+)/video/(\d+)')

TWITTER_HOST = 'twitter.com'
TWITTER_ALIASES = {
    'x.com', 'www.x.com', 'mobile.x.com',
    'twitter.com', 'www.twitter.com', 'mobile.twitter.com',
}
TWITTER_STATUS_PATH = re.compile(r'/(i/web|[A-Za-z0-9_]+)/status(?:es)?/(\d+)')

FACEBOOK_HOST = 'www.facebook.com'
FACEBOOK_ALIASES = {
    'fb.com', 'www.fb.com', 'facebook.com', 'www.facebook.com',
    'm.facebook.com', 'web.facebook.com',
}


def _keep_params(query: str, allowed: tuple[str, ...]) -> str:
    """Keep only allow-listed query parameters, in allow-list order."""
    pairs = parse_qsl(query, keep_blank_values=False)
    kept = []
    for name in allowed:
        for key, value in pairs:
            if key == name:
                kept.append((key, value))
                break
    return urlencode(kept)


def _drop_tracking(query: str) -> str:
    """Drop tracking parameters, leaving the query untouched otherwise."""
    if not query:
        return query
    pairs = parse_qsl(query, keep_blank_values=True)
    kept = [
        (key, value) for key, value in pairs
        if key.lower() not in TRACKING_PARAMS and not key.lower().startswith(TRACKING_PREFIXES)
    ]
    if len(kept) == len(pairs):
        return query
    return urlencode(kept)


def _normalize_youtube(parts: ParseResult) -> str:
    host = (parts.hostname or '').lower()
    path = parts.path or '/'
    video_id = None

    if host in ('youtu.be', 'www.youtu.be'):
        match = YOUTUBE_SHORT_ID.match(path)
        if match:
            video_id = match.group(1)
    else:
        match = YOUTUBE_PATH_ID.match(path)
        if match:
            video_id = match.group(1)

    if video_id:
        path = '/watch'
        query = urlencode([('v', video_id)])
    else:
        query = _keep_params(parts.query, ('v',))

    if host in YOUTUBE_ALIASES:
        host = YOUTUBE_HOST
    return urlunparse(('https', host, path, '', query, ''))


def _normalize_tiktok(parts: ParseResult) -> str:
    host = (parts.hostname or '').lower()
    if host in TIKTOK_ALIASES:
        host = TIKTOK_HOST

    path = parts.path or '/'
    match = TIKTOK_VIDEO_PATH.search(path)
    if match:
        path = f"/{match.group(1)}/video/{match.group(2)}"
    return urlunparse(('https', host, path, '', '', ''))


def _normalize_twitter(parts: ParseResult) -> str:
    host = (parts.hostname or '').lower()
    if host in TWITTER_ALIASES:
        host = TWITTER_HOST

    path = parts.path or '/'
    match = TWITTER_STATUS_PATH.search(path)
    if match:
        path = f"/{match.group(1)}/status/{match.group(2)}"
    return urlunparse(('https', host, path, '', '', ''))


def _normalize_facebook(parts: ParseResult) -> str:
    host = (parts.hostname or '').lower()
    if host in FACEBOOK_ALIASES:
        host = FACEBOOK_HOST
    query = _keep_params(parts.query, ('v',))
    return urlunparse(('https', host, parts.path or '/', '', query, ''))


def _normalize_generic(parts: ParseResult) -> str:
    host = (parts.hostname or '').lower()
    if ':' in host:
        host = f"[{host}]"
    netloc = host
    if parts.port is not None:
        netloc = f"{host}:{parts.port}"
    if parts.username is not None:
        userinfo = parts.username
        if parts.password is not None:
            userinfo = f"{userinfo}:{parts.password}"
        netloc = f"{userinfo}@{netloc}"
    return urlunparse((
        parts.scheme.lower(),
        netloc,
        parts.path,
        parts.params,
        _drop_tracking(parts.query),
        '',
    ))


_NORMALIZERS: dict[StrategyId, Callable[[ParseResult], str]] = {
    StrategyId.YOUTUBE: _normalize_youtube,
    StrategyId.TIKTOK: _normalize_tiktok,
    StrategyId.TWITTER: _normalize_twitter,
    StrategyId.FACEBOOK: _normalize_facebook,
    StrategyId.GENERIC: _normalize_generic,
}


def normalize(url: str, family: Union[StrategyId, str]) -> str:
    """
    Canonicalize a URL for a site family.

    Folds domain aliases, prunes query parameters to the ones the site
    needs and re-derives a minimal path where the site encodes the
    resource id in it. Never raises: any failure returns ``url`` as is.

    Args:
        url: Well-formed absolute URL
        family: Strategy id (or its string value) of the site family

    Returns:
        Canonical URL
    """
    try:
        normalizer = _NORMALIZERS[StrategyId(family)]
        return normalizer(urlparse(url))
    except Exception as e:
        logger.debug("Normalization failed for %s (%s): %s", url, family, e)
        return url
