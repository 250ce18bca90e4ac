"""Custom exception hierarchy for ani-track application.

Provides specific exception types for different failure scenarios,
making error handling more precise and testable.
"""


class AniTrackError(Exception):
    """Base exception for all ani-track errors."""

    pass


class SourceError(AniTrackError):
    """Raised when a source handler cannot do its work."""

    pass


class UnknownSourceError(SourceError):
    """Raised when a handler is requested for a source name that has none.

    This is a configuration problem, not a transient failure.
    """

    def __init__(self, source: str) -> None:
        super().__init__(f"Tried to get a handler for unknown source {source}")
        self.source = source


class FetchError(SourceError):
    """Raised when a source page cannot be fetched."""

    pass


class RequestError(AniTrackError):
    """Raised when a client request is invalid (missing field, unknown title, ...).

    The message is shown to the user through the acknowledgment.
    """

    def to_payload(self) -> dict:
        return {"message": str(self)}


class PersistenceError(AniTrackError):
    """Raised when JSON file I/O operations fail."""

    pass


class ConfigError(AniTrackError):
    """Raised when configuration is invalid or missing."""

    pass
