"""Exception hierarchy for scmauth.

All exceptions raised by this package inherit from :class:`ScmAuthError`,
which carries an ``exit_code`` attribute mapped to a constant from
:mod:`scmauth.exit_codes`. The CLI entry point in :func:`scmauth.app.main`
catches ``ScmAuthError`` and exits with the appropriate code.

Failures raised by an injected OAuth client are *not* part of this
hierarchy: they propagate to the caller exactly as the client raised them.

Subclass hierarchy::

    ScmAuthError (exit 1)
    +-- UnsupportedHostError (exit 3)
    +-- MalformedUrlError    (exit 4)
    +-- ConfigError          (exit 5)
"""

from __future__ import annotations

from scmauth.exit_codes import (
    EXIT_CONFIG_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_MALFORMED_URL,
    EXIT_UNSUPPORTED_HOST,
)


class ScmAuthError(Exception):
    """Base exception for all scmauth errors.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class UnsupportedHostError(ScmAuthError):
    """Raised when no registered provider claims the host of the requested URL.

    This always points at a configuration gap (a missing provider
    registration) and is not worth retrying.

    Attributes:
        url: The URL exactly as the caller supplied it.
    """

    exit_code = EXIT_UNSUPPORTED_HOST

    def __init__(self, url: str):
        super().__init__(f"No authentication provider available for access to '{url}'")
        self.url = url


class MalformedUrlError(ScmAuthError, ValueError):
    """Raised when a request URL cannot be parsed into an absolute URL.

    Attributes:
        url: The offending input.
    """

    exit_code = EXIT_MALFORMED_URL

    def __init__(self, url: str, reason: str | None = None):
        message = f"Invalid URL '{url}'"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.url = url


class ConfigError(ScmAuthError):
    """Raised for configuration problems (invalid JSON, unknown provider types, bad credential sources)."""

    exit_code = EXIT_CONFIG_ERROR
