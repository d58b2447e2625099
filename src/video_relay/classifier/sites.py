"""Site classification for media-page URLs."""

from enum import Enum
from typing import Optional
from urllib.parse import urlparse


class StrategyId(str, Enum):
    """Named extraction strategies."""

    YOUTUBE = "youtube"
    TIKTOK = "tiktok"
    TWITTER = "twitter"
    FACEBOOK = "facebook"
    GENERIC = "generic"


# Ordered table: the first entry whose domains match the host wins
SITE_TABLE: tuple[tuple[StrategyId, tuple[str, ...]], ...] = (
    (StrategyId.YOUTUBE, ("youtube.com", "youtu.be", "youtube-nocookie.com")),
    (StrategyId.TIKTOK, ("tiktok.com",)),
    (StrategyId.TWITTER, ("twitter.com", "x.com")),
    (StrategyId.FACEBOOK, ("facebook.com", "fb.com", "fb.watch")),
)


def extract_host(url: str) -> Optional[str]:
    """Return the lower-cased hostname of ``url`` or None."""
    try:
        host = urlparse(url).hostname
    except (ValueError, TypeError, AttributeError):
        return None
    return host.lower().rstrip('.') if host else None


def host_matches(host: str, domain: str) -> bool:
    """True if ``host`` is ``domain`` or one of its subdomains."""
    return host == domain or host.endswith('.' + domain)


def classify(url: str) -> StrategyId:
    """
    Map a URL to the extraction strategy that handles it.

    Matching is done on the hostname against a fixed, ordered table.
    Unrecognized or unparseable URLs fall back to the generic strategy.

    Args:
        url: URL to classify

    Returns:
        StrategyId of the first matching table entry
    """
    host = extract_host(url)
    if not host:
        return StrategyId.GENERIC

    for strategy_id, domains in SITE_TABLE:
        if any(host_matches(host, domain) for domain in domains):
            return strategy_id
    return StrategyId.GENERIC


def list_site_families() -> list[str]:
    """List the strategy ids that have a dedicated site table entry."""
    return [strategy_id.value for strategy_id, _ in SITE_TABLE]
