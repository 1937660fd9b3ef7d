"""Exception hierarchy for the snapshot feed."""


class FeedError(Exception):
    """Base class for every failure that aborts a run."""


class ConfigurationError(FeedError):
    """Required configuration (e.g. DATABASE_URL) is missing or invalid."""


class NetworkError(FeedError):
    """A page or feed could not be retrieved, or returned a non-success status."""


class ParseError(FeedError):
    """The source's last-update timestamp is missing or malformed."""


class DatabaseError(FeedError):
    """Connection, query or transaction failure against the destination table."""
