"""Extractor registry mapping strategy ids to implementations."""

from typing import Union

from ..classifier import StrategyId
from .base import BaseExtractor
from .facebook import FacebookExtractor
from .generic import GenericExtractor
from .tiktok import TikTokExtractor
from .twitter import TwitterExtractor
from .youtube import YouTubeExtractor


# Registry of available extractors
_EXTRACTORS: dict[StrategyId, type[BaseExtractor]] = {
    StrategyId.YOUTUBE: YouTubeExtractor,
    StrategyId.TIKTOK: TikTokExtractor,
    StrategyId.TWITTER: TwitterExtractor,
    StrategyId.FACEBOOK: FacebookExtractor,
    StrategyId.GENERIC: GenericExtractor,
}


def get_extractor(strategy_id: Union[StrategyId, str], **kwargs) -> BaseExtractor:
    """
    Get the extractor registered for a strategy id.

    Args:
        strategy_id: Strategy id from the classifier
        **kwargs: Additional arguments passed to the extractor constructor

    Returns:
        Extractor instance (the generic one for unknown ids)
    """
    try:
        strategy_id = StrategyId(strategy_id)
    except ValueError:
        strategy_id = StrategyId.GENERIC
    extractor_class = _EXTRACTORS.get(strategy_id, GenericExtractor)
    return extractor_class(**kwargs)


def register_extractor(strategy_id: StrategyId, extractor_class: type[BaseExtractor]) -> None:
    """
    Register an extractor class for a strategy id.

    Args:
        strategy_id: Strategy id the class handles
        extractor_class: Extractor class to register
    """
    _EXTRACTORS[strategy_id] = extractor_class


def list_supported_platforms() -> list[str]:
    """List the platforms with a dedicated extractor."""
    return sorted(
        extractor_class.platform
        for strategy_id, extractor_class in _EXTRACTORS.items()
        if strategy_id is not StrategyId.GENERIC
    )
