"""httpx integration -- attach issued credentials to outgoing requests.

:class:`ScmHttpxAuth` plugs any :class:`~scmauth.base.ScmAuthApi` into an
:class:`httpx.Client` or :class:`httpx.AsyncClient`. Credentials are
requested per request, for that request's URL, so a single client can talk
to several hosting providers.

Example::

    auth = ScmHttpxAuth(scm_auth, repo_write=True)
    async with httpx.AsyncClient(auth=auth) as client:
        await client.post("https://api.github.com/repos/org/repo/issues", json=...)

Credentials are keyed by the *request* URL, so API hosts such as
``api.github.com`` need their own provider registration.
"""

from __future__ import annotations

import asyncio
from typing import Any, AsyncGenerator, Generator

import httpx

from scmauth.base import ScmAuthApi
from scmauth.models import CredentialRequest

_RESERVED_OPTIONS = frozenset({"url", "additional_scope", "additionalScope"})


class ScmHttpxAuth(httpx.Auth):
    """An :class:`httpx.Auth` that adds scmauth credential headers.

    The sync flow drives the coroutine with :func:`asyncio.run`, so a plain
    :class:`httpx.Client` raises :class:`RuntimeError` when used from inside
    a running event loop. Use :class:`httpx.AsyncClient` there.

    Args:
        api: Provider or multiplexer issuing the credentials.
        repo_write: Request the write scope set instead of the default one.
        **options: Passthrough options forwarded to the OAuth client.
            The names ``url``, ``additional_scope`` and ``additionalScope``
            are reserved for the request itself.

    Raises:
        TypeError: If *options* uses a reserved name.
    """

    def __init__(self, api: ScmAuthApi, repo_write: bool = False, **options: Any) -> None:
        reserved = sorted(_RESERVED_OPTIONS.intersection(options))
        if reserved:
            raise TypeError(
                f"ScmHttpxAuth options may not use reserved names: {', '.join(reserved)}"
            )
        self._api = api
        self._repo_write = repo_write
        self._options = options

    def _credential_request(self, request: httpx.Request) -> CredentialRequest:
        return CredentialRequest(
            url=str(request.url),
            additional_scope={"repo_write": self._repo_write},
            **self._options,
        )

    def sync_auth_flow(
        self, request: httpx.Request
    ) -> Generator[httpx.Request, httpx.Response, None]:
        credentials = asyncio.run(
            self._api.get_credentials(self._credential_request(request))
        )
        request.headers.update(credentials.headers)
        yield request

    async def async_auth_flow(
        self, request: httpx.Request
    ) -> AsyncGenerator[httpx.Request, httpx.Response]:
        credentials = await self._api.get_credentials(self._credential_request(request))
        request.headers.update(credentials.headers)
        yield request
