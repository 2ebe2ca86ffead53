class KeyquestError(Exception):
    """Base class for errors raised outside the typing core."""


class StorageError(KeyquestError):
    """Raised when the progress document cannot be written."""


class SettingsError(KeyquestError):
    """Raised when a settings payload is malformed."""
