"""Exceptions raised by the CSRF guard"""


class CsrfGuardError(Exception):
    """Base class for guard errors."""


class ConfigurationError(CsrfGuardError, ValueError):
    """Raised when the guard is configured with an invalid value."""


class InvalidArgumentError(CsrfGuardError, TypeError):
    """Raised when excluded routes are passed in an unsupported shape."""


class SessionRequiredError(CsrfGuardError, RuntimeError):
    """Raised when a request reaches the guard without an active session.

    The session middleware (or ``app.secret_key``) must be configured before
    the guard runs. This is never handled by the guard itself.
    """

    def __init__(self, message='Sessions are required to use the CSRF guard.'):
        super().__init__(message)
