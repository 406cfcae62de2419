"""Resolution orchestrator: ordered fallback across extraction strategies."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from linkfetch.core.error_handling import COMMON_HANDLER_EXCEPTIONS, log_exception
from linkfetch.core.exceptions import ExtractionError, ExtractionTimeoutError
from linkfetch.core.models import ExtractionFailure, MediaResult, Platform
from linkfetch.services.platforms import detect_platform

if TYPE_CHECKING:
    from collections.abc import Sequence

    from linkfetch.services.extractors import Extractor

logger = logging.getLogger(__name__)

UNSUPPORTED_REASON = "Unsupported platform link"
UNKNOWN_REASON = "Unknown error"


class MediaResolver:
    """Try each applicable extractor in priority order until one succeeds.

    Attempts are strictly sequential; a failing strategy never aborts the
    chain. The aggregate failure carries the first attempted strategy's
    reason.
    """

    def __init__(self, extractors: Sequence[Extractor]) -> None:
        self.extractors = tuple(extractors)

    async def resolve(self, url: str) -> MediaResult | ExtractionFailure:
        """Resolve a link into media, or the most relevant failure."""
        platform = detect_platform(url)
        first_failure: ExtractionFailure | None = None

        for extractor in self.extractors:
            if not extractor.supports(platform):
                continue

            try:
                return await extractor.attempt(url, platform)
            except ExtractionTimeoutError as exc:
                failure = ExtractionFailure(reason=exc.reason, timed_out=True)
                logger.warning("%s timed out for url=%s", extractor.name, url)
            except ExtractionError as exc:
                failure = ExtractionFailure(reason=f"Parsing failed: {exc.reason}")
                logger.info(
                    "%s found nothing for url=%s: %s",
                    extractor.name,
                    url,
                    exc.reason,
                )
            except COMMON_HANDLER_EXCEPTIONS as exc:
                failure = ExtractionFailure(reason=f"Parsing failed: {exc}")
                log_exception(
                    logger=logger,
                    message="Extractor raised unexpectedly",
                    error=exc,
                    context={"extractor": extractor.name, "url": url},
                )

            if first_failure is None:
                first_failure = failure

        if first_failure is not None:
            return first_failure
        if platform is Platform.UNKNOWN:
            return ExtractionFailure(reason=UNSUPPORTED_REASON)
        return ExtractionFailure(reason=UNKNOWN_REASON)
