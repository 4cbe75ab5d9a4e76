"""Interfaces shared by single providers and the multiplexer.

This module defines the two seams of the package:

- :class:`OAuthApi` -- the outbound contract. Anything with a
  ``get_access_token(scopes, options)`` method qualifies; the method may
  return the token directly or an awaitable resolving to it. Interactive
  flows, popups, token caching and refresh all live behind this method.
- :class:`ScmAuthApi` -- the inbound contract implemented by both
  :class:`~scmauth.provider.ScmAuth` (one host) and
  :class:`~scmauth.mux.ScmAuthMux` (many hosts), so callers never need to
  know which one they hold.

See Also:
    :mod:`scmauth.provider` for the provider presets.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Awaitable, Protocol, Union, runtime_checkable

from scmauth.models import CredentialRequest, CredentialResponse


@runtime_checkable
class OAuthApi(Protocol):
    """An OAuth-capable client for one hosting provider."""

    def get_access_token(
        self, scopes: list[str], options: dict[str, Any]
    ) -> Union[str, Awaitable[str]]:
        """Return an access token granting at least *scopes*.

        Args:
            scopes: Provider-specific scope strings, in policy order.
            options: Caller-supplied passthrough options, forwarded as-is.
        """
        ...


class ScmAuthApi(ABC):
    """Issues bearer credentials for source-control URLs."""

    @abstractmethod
    async def get_credentials(
        self, request: CredentialRequest | dict[str, Any]
    ) -> CredentialResponse:
        """Return credentials for ``request.url``.

        Args:
            request: A :class:`~scmauth.models.CredentialRequest` or a
                mapping of the same shape (``url``, optional
                ``additionalScope``/``additional_scope`` and any
                passthrough options).

        Returns:
            The token and an ``Authorization: Bearer <token>`` header.

        Raises:
            UnsupportedHostError: If no provider serves the URL's host.
            MalformedUrlError: If the URL cannot be parsed.
        """
        ...
