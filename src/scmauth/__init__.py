"""scmauth -- credentials for source-control hosts, routed by URL host.

Tooling that talks to several hosting providers (GitHub, GitLab, Azure
DevOps, Bitbucket, or self-hosted instances of them) registers one
provider per host and asks a single merged API for credentials. The
request URL selects the provider; a write-intent flag selects between the
provider's default and repository-write scope sets; the injected OAuth
client issues the token.

Typical usage::

    from scmauth import ScmAuth

    scm_auth = ScmAuth.merge(
        ScmAuth.for_github(github_oauth),
        ScmAuth.for_gitlab(gitlab_oauth, host="gitlab.example.com"),
    )
    creds = await scm_auth.get_credentials({"url": "https://github.com/org/repo"})

Modules:
    provider: Per-host providers and their scope presets.
    mux: Host-based dispatch across providers.
    base: The OAuth client protocol and the shared credential interface.
    models: Pydantic request, response, and config models.
    config: XDG-aware config loading and provider wiring.
    clients: Static-token OAuth client.
    httpx_auth: ``httpx.Auth`` adapter.
    app: Typer CLI entry point.
"""

__version__ = "0.1.0"

from scmauth.base import OAuthApi, ScmAuthApi  # noqa: E402
from scmauth.exceptions import (  # noqa: E402
    ConfigError,
    MalformedUrlError,
    ScmAuthError,
    UnsupportedHostError,
)
from scmauth.models import CredentialRequest, CredentialResponse, ScopeMapping  # noqa: E402
from scmauth.mux import ScmAuthMux  # noqa: E402
from scmauth.provider import ScmAuth  # noqa: E402

__all__ = [
    "ConfigError",
    "CredentialRequest",
    "CredentialResponse",
    "MalformedUrlError",
    "OAuthApi",
    "ScmAuth",
    "ScmAuthApi",
    "ScmAuthError",
    "ScmAuthMux",
    "ScopeMapping",
    "UnsupportedHostError",
]
