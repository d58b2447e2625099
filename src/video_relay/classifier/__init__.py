"""Classifier module for routing URLs to extraction strategies."""

from .sites import (
    StrategyId,
    SITE_TABLE,
    classify,
    extract_host,
    host_matches,
    list_site_families,
)
from .normalizer import normalize

__all__ = [
    "StrategyId",
    "SITE_TABLE",
    "classify",
    "extract_host",
    "host_matches",
    "list_site_families",
    "normalize",
]
