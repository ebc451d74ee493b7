class TeamsEnumError(Exception):
    """Base class for errors that abort an enumeration run."""


class SourceIOError(TeamsEnumError):
    """The identity source could not be opened."""


class SinkIOError(TeamsEnumError):
    """The output destination could not be created."""
