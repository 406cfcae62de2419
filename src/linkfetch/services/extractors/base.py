"""Common interface shared by every extraction strategy."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from linkfetch.core.models import MediaResult, Platform


class Extractor(Protocol):
    """A strategy that turns a source URL into direct media URLs.

    `attempt` raises `ExtractionError` (or a subclass) when nothing usable
    was found; any other exception is treated the same way by the resolver.
    """

    name: str

    def supports(self, platform: Platform) -> bool:
        """Return True when this strategy should run for `platform`."""
        ...

    async def attempt(self, url: str, platform: Platform) -> MediaResult:
        """Extract media for `url`."""
        ...
