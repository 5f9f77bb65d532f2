"""State management errors."""


class StateError(Exception):
    """Raised when the metadata document cannot be written."""


class StateParseError(StateError):
    """Raised internally when the metadata payload is malformed."""
