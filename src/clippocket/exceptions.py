"""Custom exceptions for ClipPocket."""


class ClipPocketError(Exception):
    """Base exception for all ClipPocket errors."""

    def __init__(self, message: str, original_error: Exception = None):
        super().__init__(message)
        self.original_error = original_error

    def __str__(self):
        base_msg = super().__str__()
        if self.original_error:
            return f"{base_msg} (Caused by: {type(self.original_error).__name__}: {self.original_error})"
        return base_msg


class ConfigurationError(ClipPocketError):
    """Raised when settings cannot be parsed."""
    pass


class PersistenceError(ClipPocketError):
    """Raised when stored clipboard data cannot be written."""
    pass


class BackupImportError(ClipPocketError):
    """Raised when a backup file is neither a bundle nor a bare history array."""
    pass
