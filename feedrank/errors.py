"""Exceptions raised inside the ranking core and caught at the FeedService boundary."""


class FeedRankError(Exception):
    """Base class for ranking engine errors."""


class IndexUnavailableError(FeedRankError):
    """The candidate index is not built, empty, or mid-rebuild without a snapshot."""


class IncompatibleEmbeddingError(FeedRankError):
    """No embedding of the index dimension can be derived for an item."""


class CollaboratorTimeoutError(FeedRankError):
    """An external collaborator did not answer within the configured timeout."""
