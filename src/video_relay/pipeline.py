"""Strategy pipeline: validate, classify, normalize and extract."""

import logging
from dataclasses import dataclass
from typing import Optional

from .classifier import StrategyId, classify, normalize
from .errors import LocatorNotFoundError
from .extractor import BaseExtractor, VideoRecord, get_extractor
from .utils.formatting import download_filename
from .validator import validate_url


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DownloadPlan:
    """Everything needed to relay a record's media to a client."""

    record: VideoRecord
    locator: str
    referer: Optional[str]
    filename: str


class ExtractionPipeline:
    """
    Runs exactly one extraction strategy per request.

    A failing strategy is reported to the caller; the pipeline never falls
    through to another strategy.
    """

    def __init__(
        self,
        timeout: int = 30,
        user_agent: Optional[str] = None,
    ):
        self.timeout = timeout
        self.user_agent = user_agent

    def resolve_strategy(self, raw_url: str) -> tuple[StrategyId, str]:
        """
        Validate a URL and pick its strategy and canonical form.

        Raises:
            InputError: If the URL is missing or malformed
        """
        url = validate_url(raw_url)
        strategy_id = classify(url)
        canonical = normalize(url, strategy_id)
        if canonical != url:
            logger.debug("Normalized %s -> %s", url, canonical)
        return strategy_id, canonical

    def build_extractor(self, strategy_id: StrategyId) -> BaseExtractor:
        return get_extractor(strategy_id, timeout=self.timeout, user_agent=self.user_agent)

    async def extract(self, raw_url: str) -> VideoRecord:
        """
        Extract a VideoRecord from a submitted URL.

        Raises:
            InputError: Before any network call, for a bad URL
            ExtractionError: If the selected strategy fails
        """
        strategy_id, canonical = self.resolve_strategy(raw_url)
        extractor = self.build_extractor(strategy_id)
        return await extractor.extract(canonical)

    async def resolve_download(self, raw_url: str) -> DownloadPlan:
        """
        Extract a record and make sure it has something to relay.

        Raises:
            InputError: For a bad URL
            ExtractionError: If extraction fails
            LocatorNotFoundError: If the record has no media locator
        """
        strategy_id, canonical = self.resolve_strategy(raw_url)
        extractor = self.build_extractor(strategy_id)
        record = await extractor.extract(canonical)

        if not record.has_locator:
            site = extractor.site_name or "the"
            raise LocatorNotFoundError(
                f"Could not find video URL in {site} page",
                platform=record.platform,
            )

        return DownloadPlan(
            record=record,
            locator=record.primary_media_url,
            referer=extractor.relay_referer(record),
            filename=download_filename(record.title),
        )
