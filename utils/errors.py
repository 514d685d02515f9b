"""
Defines custom exception classes for the application.
"""

class GaitException(Exception):
    """Base exception class for the gait application."""
    pass

class ConfigError(GaitException):
    """Raised when settings, user state or credentials cannot be read or written."""
    pass

class NotARepositoryError(GaitException):
    """Raised when the working directory is not inside a Git repository."""
    pass

class ProviderError(GaitException):
    """Raised when an error occurs with the completion service."""
    pass

class DecisionParseError(ProviderError):
    """Raised when the completion service returns a malformed decision."""
    pass
