"""Exceptions raised while loading snapshots and settings."""


class SnapshotError(Exception):
    """Base class for snapshot retrieval and decoding failures."""

    def __init__(self, message: str, *, source: str | None = None) -> None:
        super().__init__(message)
        self.source = source


class FetchError(SnapshotError):
    """Transport failure or non-success status on a required source."""


class ParseError(SnapshotError):
    """Content could not be read as JSON or newline-delimited JSON."""


class MissingDataWarning(UserWarning):
    """A single newline-delimited record was unreadable and skipped."""


class ConfigError(ValueError):
    """A configuration value is missing or invalid."""
