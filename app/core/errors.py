"""Domain exceptions for Streamscout."""


class StreamscoutError(Exception):
    """Base exception for catalog search failures."""

    def __init__(self, message: str, original_exception: Exception | None = None):
        super().__init__(message)
        self.original_exception = original_exception


class NotFound(StreamscoutError):
    """Raised when a title does not exist in the catalog."""


class UpstreamUnavailable(StreamscoutError):
    """The primary data path could not be reached."""


class SearchUnavailable(UpstreamUnavailable):
    """The local search index could not answer a query."""


class StoreUnavailable(StreamscoutError):
    """The catalog store failed to read or write a title."""


class ProviderUnavailable(StreamscoutError):
    """The external catalog provider failed or could not be reached."""


class IndexUnavailable(StreamscoutError):
    """The search index could not be reached."""


class IndexWriteError(IndexUnavailable):
    """A document could not be written to the search index."""
