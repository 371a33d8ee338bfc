"""
Exceptions raised by the comment analysis pipeline.

Fatal errors derive from AnalysisError and are surfaced to the caller as a
structured failure. Everything else is recovered inside the pipeline and only
shows up as lowered confidence and the diagnostics flags.
"""


class AnalysisError(Exception):
    """Base exception for errors that fail the whole run."""

    pass


class EmptyCorpus(AnalysisError):
    """No comments survived loading and length filtering."""

    pass


class NoProcessableRecords(AnalysisError):
    """Comments exist but none of them contain analysable words."""

    def __init__(self, found: int, minimum: int = 1):
        super().__init__(
            f"Not enough valid comments to analyze. Found {found} processable "
            f"comments, need at least {minimum}."
        )
        self.found = found
        self.minimum = minimum


class OversizedCorpus(AnalysisError):
    """
    Estimated token volume exceeds the hard ceiling.

    Raised before any request is sent to the classification service.
    """

    def __init__(self, comment_count: int, estimated_tokens: int, max_comments: int):
        super().__init__(
            f"Dataset too large: {comment_count} comments (estimated {estimated_tokens} tokens). "
            f"Please reduce to under {max_comments:,} comments to avoid API limits."
        )
        self.comment_count = comment_count
        self.estimated_tokens = estimated_tokens


class AggregationInvariantError(AnalysisError):
    """Theme group volumes do not add up to the number of comments."""

    pass


class ThemeDiscoveryError(Exception):
    """Base exception for discovery failures; always rerouted to the keyword fallback."""

    pass


class DiscoveryUnavailable(ThemeDiscoveryError):
    """The classification service is not configured."""

    pass


class DiscoveryRequestFailed(ThemeDiscoveryError):
    """The discovery request itself raised."""

    pass


class MalformedThemeResponse(ThemeDiscoveryError):
    """The discovery payload could not be parsed into themes."""

    def __init__(self, message: str, raw: str = ""):
        super().__init__(message)
        self.raw = raw


class RateLimited(Exception):
    """The classification service rejected a request because of rate limits."""

    pass


class ClassificationCoverageError(Exception):
    """Classifications do not cover every comment index exactly once."""

    pass


class ChatUnavailable(Exception):
    """The chat assistant has no configured classification service."""

    pass
