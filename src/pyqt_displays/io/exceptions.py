"""Config IO exceptions."""


class ConfigIOError(Exception):
    """Base class for group file read/write failures.

    ``path`` is the file involved; ``str(error)`` is the user-facing message.
    """

    def __init__(self, message: str, path=None):
        super().__init__(message)
        self.path = path


class ConfigReadError(ConfigIOError):
    """Raised when a config file cannot be opened or parsed."""


class ConfigWriteError(ConfigIOError):
    """Raised when a config file cannot be serialized or written."""
