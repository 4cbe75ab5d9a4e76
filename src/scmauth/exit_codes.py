"""Numeric process exit codes for the ``scmauth`` command line.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~scmauth.exceptions.ScmAuthError` subclass.
Shell wrappers and git credential helpers can inspect the exit code to
determine the failure class without parsing stderr.

Example::

    $ scmauth check https://git.internal.example/org/repo
    $ echo $?
    3   # EXIT_UNSUPPORTED_HOST -- no provider is registered for that host
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments."""

EXIT_UNSUPPORTED_HOST = 3
"""No registered provider claims the requested URL's host."""

EXIT_MALFORMED_URL = 4
"""The requested URL could not be parsed into an absolute URL."""

EXIT_CONFIG_ERROR = 5
"""The configuration file or a credential source could not be resolved."""
