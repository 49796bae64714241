"""Errors raised while turning an event into a Matomo request."""


class TransformError(Exception):
    """Base class; no request is produced when one is raised."""


class EventKindMismatch(TransformError):
    """The event payload does not match the entry point that was called."""

    def __init__(self, expected: str, actual: str):
        self.expected = expected
        self.actual = actual
        super().__init__(f"Expected {expected} data, got {actual}")


class ConfigurationError(TransformError):
    """A required setting is missing or malformed."""
