"""
Exception types surfaced by the ingestion and search pipeline.

Malformed input units (bad rows, dates, JSON fragments) never raise; they are
dropped where they are found. Only the failures below reach a caller.
"""


class BidFinderError(Exception):
    """Base class for pipeline errors."""


class InputContractError(BidFinderError, ValueError):
    """A request is missing a required field. Raised before any I/O."""


class UpstreamUnavailableError(BidFinderError):
    """The catalog store or the web search capability could not be reached."""


class ImportFailedError(BidFinderError):
    """An import was aborted and nothing from it was applied."""

    def __init__(self, source: str, message: str):
        super().__init__(f"Import of {source!r} failed: {message}")
        self.source = source
