"""Per-host credential providers.

A :class:`ScmAuth` binds one host to an OAuth client and a two-tier
:class:`~scmauth.models.ScopeMapping`. Instances are only created through
the class-method factories:

- :meth:`ScmAuth.for_github`, :meth:`ScmAuth.for_gitlab`,
  :meth:`ScmAuth.for_azure`, :meth:`ScmAuth.for_bitbucket` -- presets with
  a fixed scope policy and a default public host that can be overridden
  for self-hosted instances.
- :meth:`ScmAuth.for_auth_api` -- fully generic, caller supplies the host
  and the scope mapping.
- :meth:`ScmAuth.merge` -- combines providers into a single
  :class:`~scmauth.base.ScmAuthApi` that routes by host.

Typical usage::

    from scmauth import ScmAuth

    scm_auth = ScmAuth.merge(
        ScmAuth.for_github(github_client),
        ScmAuth.for_github(ghe_client, host="github.example.com"),
        ScmAuth.for_gitlab(gitlab_client),
    )
    creds = await scm_auth.get_credentials(
        {"url": "https://github.com/org/repo", "additionalScope": {"repoWrite": True}}
    )
    creds.headers["Authorization"]  # "Bearer ..."
"""

from __future__ import annotations

import inspect
import logging
from typing import Any, Optional

import httpx

from scmauth.base import OAuthApi, ScmAuthApi
from scmauth.models import CredentialRequest, CredentialResponse, ScopeMapping
from scmauth.mux import ScmAuthMux
from scmauth.urls import parse_url, url_host

logger = logging.getLogger(__name__)

GITHUB_HOST = "github.com"
GITHUB_SCOPES = ScopeMapping(
    default=["repo", "read:org", "read:user"],
    repo_write=["repo", "read:org", "read:user", "gist"],
)

GITLAB_HOST = "gitlab.com"
GITLAB_SCOPES = ScopeMapping(
    default=["read_user", "read_api", "read_repository"],
    repo_write=["read_user", "read_api", "write_repository", "api"],
)

AZURE_HOST = "dev.azure.com"
AZURE_SCOPES = ScopeMapping(
    default=["vso.build", "vso.code", "vso.graph", "vso.project", "vso.profile"],
    repo_write=[
        "vso.build",
        "vso.code_manage",
        "vso.graph",
        "vso.project",
        "vso.profile",
    ],
)

BITBUCKET_HOST = "bitbucket.org"
BITBUCKET_SCOPES = ScopeMapping(
    default=["account", "team", "pullrequest", "snippet", "issue"],
    repo_write=[
        "account",
        "team",
        "pullrequest:write",
        "snippet:write",
        "issue:write",
    ],
)

# Only the factories below hold this key.
_FACTORY_KEY = object()


class ScmAuth(ScmAuthApi):
    """Credential provider for a single source-control host.

    Do not instantiate directly; use one of the ``for_*`` factories.
    The bound client, host, and scope mapping are fixed for the lifetime
    of the instance.
    """

    @classmethod
    def for_auth_api(
        cls,
        api: OAuthApi,
        *,
        host: str,
        scope_mapping: ScopeMapping | dict[str, Any],
    ) -> ScmAuth:
        """Create a provider with an explicit host and scope mapping.

        Args:
            api: The OAuth client that issues tokens for *host*.
            host: Host to serve, compared against the URL host (including a
                non-default ``:port``).
            scope_mapping: A :class:`~scmauth.models.ScopeMapping`, or a
                mapping with ``default`` and ``repo_write``/``repoWrite``
                scope lists.
        """
        if not isinstance(scope_mapping, ScopeMapping):
            scope_mapping = ScopeMapping.model_validate(scope_mapping)
        return cls(api, host, scope_mapping, _key=_FACTORY_KEY)

    @classmethod
    def for_github(cls, api: OAuthApi, *, host: Optional[str] = None) -> ScmAuth:
        """GitHub (or GitHub Enterprise when *host* is given)."""
        return cls(api, host or GITHUB_HOST, GITHUB_SCOPES, _key=_FACTORY_KEY)

    @classmethod
    def for_gitlab(cls, api: OAuthApi, *, host: Optional[str] = None) -> ScmAuth:
        """GitLab.com or a self-managed GitLab instance."""
        return cls(api, host or GITLAB_HOST, GITLAB_SCOPES, _key=_FACTORY_KEY)

    @classmethod
    def for_azure(cls, api: OAuthApi, *, host: Optional[str] = None) -> ScmAuth:
        """Azure DevOps; *api* is normally a Microsoft identity client."""
        return cls(api, host or AZURE_HOST, AZURE_SCOPES, _key=_FACTORY_KEY)

    @classmethod
    def for_bitbucket(cls, api: OAuthApi, *, host: Optional[str] = None) -> ScmAuth:
        """Bitbucket Cloud."""
        return cls(api, host or BITBUCKET_HOST, BITBUCKET_SCOPES, _key=_FACTORY_KEY)

    @staticmethod
    def merge(*providers: ScmAuth) -> ScmAuthApi:
        """Merge providers into one API that routes requests by URL host.

        Providers are tried in the order given; the first whose host
        matches wins. Duplicate hosts are not rejected.
        """
        return ScmAuthMux(providers)

    def __init__(
        self,
        api: OAuthApi,
        host: str,
        scope_mapping: ScopeMapping,
        *,
        _key: object = None,
    ) -> None:
        if _key is not _FACTORY_KEY:
            raise TypeError(
                "ScmAuth cannot be instantiated directly; use ScmAuth.for_auth_api() "
                "or one of the provider presets"
            )
        self.__api = api
        self.__host = host
        self.__scope_mapping = scope_mapping

    def __repr__(self) -> str:
        return f"<ScmAuth host={self.__host!r}>"

    def is_url_supported(self, url: httpx.URL | str) -> bool:
        """Check whether this provider can authenticate requests to *url*.

        Raises:
            MalformedUrlError: If *url* is a string that cannot be parsed.
        """
        return url_host(parse_url(url)) == self.__host

    async def get_credentials(
        self, request: CredentialRequest | dict[str, Any]
    ) -> CredentialResponse:
        """Request a token for the scopes matching the request's intent.

        Errors raised by the OAuth client propagate unchanged.
        """
        request = CredentialRequest.coerce(request)
        scopes = self.__scope_mapping.select(request.repo_write)
        logger.debug(
            "Requesting token for %s with scopes %s", self.__host, " ".join(scopes)
        )
        token = self.__api.get_access_token(scopes, request.options)
        if inspect.isawaitable(token):
            token = await token
        return CredentialResponse.for_token(token)
