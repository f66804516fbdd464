"""Build facts exceptions."""


class BuildFactsError(Exception):
    """Base exception for build facts errors."""

    pass


class EventFormatError(BuildFactsError, ValueError):
    """Raised when a build event record cannot be decoded."""

    pass
