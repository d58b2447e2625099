"""Exception types shared by the extraction and relay layers."""


class VideoRelayError(Exception):
    """Base class for every error raised by this package."""


class InputError(VideoRelayError):
    """The submitted URL is missing or malformed."""


class ExtractionError(VideoRelayError):
    """The origin page could not be fetched or yielded no metadata."""

    def __init__(self, reason: str, platform: str = "unknown"):
        super().__init__(reason)
        self.reason = reason
        self.platform = platform


class LocatorNotFoundError(VideoRelayError):
    """Metadata was extracted but no direct media URL exists."""

    def __init__(self, message: str = "Could not find video URL in the page", platform: str = "unknown"):
        super().__init__(message)
        self.platform = platform


class RelayError(VideoRelayError):
    """The upstream media connection failed before or during a relay."""

    def __init__(self, reason: str, locator: str = None):
        super().__init__(reason)
        self.reason = reason
        self.locator = locator
