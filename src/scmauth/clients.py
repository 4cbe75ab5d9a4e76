"""Ready-made OAuth clients.

:class:`StaticTokenAuthApi` satisfies the :class:`~scmauth.base.OAuthApi`
contract for tokens that already exist -- a personal access token in an
environment variable, a CI job token in a file -- so that a provider can be
registered without an interactive OAuth flow.
"""

from __future__ import annotations

import logging
from typing import Any

from scmauth.config import resolve_credential

logger = logging.getLogger(__name__)


class StaticTokenAuthApi:
    """Resolve a pre-issued token from a credential source.

    The source is resolved on every call so that rotated tokens are picked
    up. Requested scopes cannot be enforced on a static token and are
    ignored.

    Args:
        source: A credential source descriptor (``env:VAR``,
            ``file:/path``, or ``prompt``).

    Example::

        github = ScmAuth.for_github(StaticTokenAuthApi("env:GITHUB_TOKEN"))
    """

    def __init__(self, source: str) -> None:
        self._source = source

    def __repr__(self) -> str:
        return f"StaticTokenAuthApi({self._source!r})"

    def get_access_token(self, scopes: list[str], options: dict[str, Any]) -> str:
        """Return the token from the configured source.

        Raises:
            ConfigError: If the source cannot be resolved.
        """
        logger.debug("Resolving static token from %s", self._source)
        return resolve_credential(self._source)
