"""Host-based dispatch across several providers.

:class:`ScmAuthMux` is what :meth:`ScmAuth.merge <scmauth.provider.ScmAuth.merge>`
returns. It holds an ordered tuple of providers and forwards each request
to the first one that claims the request URL's host.

See Also:
    :class:`~scmauth.provider.ScmAuth` -- the single-host implementation.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Iterable

from scmauth.base import ScmAuthApi
from scmauth.exceptions import UnsupportedHostError
from scmauth.models import CredentialRequest, CredentialResponse
from scmauth.urls import parse_url

if TYPE_CHECKING:
    from scmauth.provider import ScmAuth

logger = logging.getLogger(__name__)


class ScmAuthMux(ScmAuthApi):
    """Routes credential requests to the provider that owns the URL's host.

    Args:
        providers: Providers in priority order. Overlapping hosts are
            allowed; the earliest registration wins.
    """

    def __init__(self, providers: Iterable[ScmAuth]) -> None:
        self._providers: tuple[ScmAuth, ...] = tuple(providers)

    def __repr__(self) -> str:
        return f"<ScmAuthMux providers={list(self._providers)!r}>"

    @property
    def providers(self) -> tuple[ScmAuth, ...]:
        """The registered providers in priority order."""
        return self._providers

    def find_provider(self, url: str) -> ScmAuth:
        """Return the first provider that supports *url*.

        Raises:
            MalformedUrlError: If *url* cannot be parsed.
            UnsupportedHostError: If no provider matches.
        """
        parsed = parse_url(url)
        for provider in self._providers:
            if provider.is_url_supported(parsed):
                logger.debug("Routing %s to %r", url, provider)
                return provider
        raise UnsupportedHostError(url)

    async def get_credentials(
        self, request: CredentialRequest | dict[str, Any]
    ) -> CredentialResponse:
        """Delegate to the matching provider and return its result unchanged.

        The provider lookup runs before anything is awaited, so an
        unsupported or malformed URL fails without touching any client.
        """
        request = CredentialRequest.coerce(request)
        provider = self.find_provider(request.url)
        return await provider.get_credentials(request)
