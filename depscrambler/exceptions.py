"""
Custom exceptions for the dependency scrambler.
"""


class ScramblerError(Exception):
    """Base exception for scrambler failures."""
    pass


class LoadError(ScramblerError):
    """Raised when a manifest cannot be read or parsed."""
    pass


class SaveError(ScramblerError):
    """Raised when a manifest cannot be written."""
    pass


class BackupError(ScramblerError):
    """Raised when backup operation fails."""
    pass


class RestoreError(ScramblerError):
    """Raised when restoring from a backup fails."""
    pass


class ConfigError(ScramblerError):
    """Raised when a scramble profile or option value is invalid."""
    pass
