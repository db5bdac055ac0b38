# newsengine/errors.py
from __future__ import annotations


class NewsEngineError(Exception):
    """Base class for failures the HTTP layer maps to a generic response."""

    public_message = "Internal Server Error"
    status_code = 500


class CacheUnavailableError(NewsEngineError):
    """The article cache (or any table behind it) could not be read or written."""

    public_message = "Storage unavailable"


class UpstreamSourceError(NewsEngineError):
    """Every configured news provider failed for a request."""

    public_message = "Upstream news source unavailable"


class SummarizerError(NewsEngineError):
    # Never leaves the summarization pipeline; converted to the fallback summary there.
    public_message = "Summarizer unavailable"


class IdentityUnavailableError(NewsEngineError):
    """The external identity provider could not be reached."""

    public_message = "Identity provider unavailable"
    status_code = 503


class SummaryNotStoredError(CacheUnavailableError):
    """A fresh model summary was produced but could not be written back."""

    def __init__(self, result, message: str = "summary could not be stored"):
        super().__init__(message)
        self.result = result
