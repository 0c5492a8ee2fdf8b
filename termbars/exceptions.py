"""
Terminal Progress Bars - Exceptions

Centralized exception hierarchy for progress bar errors.
"""


class ProgressBarError(Exception):
    """Base exception for all progress bar operations."""
    pass


class BarFormatError(ProgressBarError, TypeError):
    """Exception for malformed bar templates.

    Raised when:
    - A bar is constructed with something other than a format string
      (e.g. an options mapping passed where the template belongs)
    """
    pass


class ConfigurationError(ProgressBarError, ValueError):
    """Exception for invalid bar configuration.

    Raised when:
    - An unknown option name is passed to update()
    - A numeric option is negative
    """
    pass


class CoordinatorError(ProgressBarError, RuntimeError):
    """Exception for multi-bar coordinator misuse.

    Raised when:
    - start() is called before any bar has been registered
    """
    pass
