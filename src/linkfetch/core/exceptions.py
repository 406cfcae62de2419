"""Custom exceptions for linkfetch."""

TIMEOUT_REASON = "Parsing timed out, please try again later"


class ExtractionError(RuntimeError):
    """Raised when an extraction strategy cannot produce media for a URL."""

    def __init__(self, reason: str) -> None:
        """Initialize the error with a user-facing reason."""
        self.reason = reason
        super().__init__(reason)


class ExtractionTimeoutError(ExtractionError):
    """Raised when the universal extractor does not finish in time."""

    def __init__(self, timeout_seconds: float | None = None) -> None:
        """Initialize the timeout error with the standard reason."""
        self.timeout_seconds = timeout_seconds
        super().__init__(TIMEOUT_REASON)


class AttachmentUnavailableError(RuntimeError):
    """Raised when a chat attachment cannot be turned into a download URL."""
