class SiteMetaError(Exception):
    """Base class for errors raised by the metadata engine."""


class NormalizationError(SiteMetaError, ValueError):
    """The caller supplied a URL that cannot be turned into a cache key."""


class StrategyFailure(SiteMetaError):
    """A single resolution strategy could not produce metadata.

    Raised by strategies and always handled by the resolver; it never reaches
    callers of ``WebsiteParser.resolve``.
    """

    def __init__(self, strategy: str, message: str):
        super().__init__(f"{strategy}: {message}")
        self.strategy = strategy
        self.message = message
