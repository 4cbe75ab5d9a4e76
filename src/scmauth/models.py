"""Canonical Pydantic models shared across all scmauth modules.

The models fall into two groups:

**Credential models** -- the request/response shapes of
:meth:`~scmauth.base.ScmAuthApi.get_credentials`:
    :class:`ScopeMapping`, :class:`AdditionalScope`,
    :class:`CredentialRequest`, and :class:`CredentialResponse`.

**Configuration models** -- serialised as JSON by :mod:`scmauth.config`:
    :class:`ProviderType`, :class:`ProviderEntry`, and :class:`ScmAuthConfig`.

Field names are snake_case; the camelCase spellings used by the wider
tooling ecosystem (``additionalScope``, ``repoWrite``, ``scopeMapping``,
``tokenSource``) are accepted as aliases on input.
"""

from __future__ import annotations

import enum
from typing import Any, Optional

import httpx
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from scmauth.exceptions import MalformedUrlError


# --- Credential models ---


class ScopeMapping(BaseModel):
    """The two-tier scope policy of a provider.

    Scopes are provider-specific strings handed verbatim, in order, to the
    OAuth client. The mapping is frozen once built.

    Example::

        ScopeMapping(default=["repo"], repo_write=["repo", "gist"])
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    default: tuple[str, ...] = Field(description="Scopes for routine read access")
    repo_write: tuple[str, ...] = Field(
        alias="repoWrite", description="Scopes for repository-mutating operations"
    )

    def select(self, repo_write: bool) -> list[str]:
        """Return a fresh list of the scopes for the given intent."""
        return list(self.repo_write if repo_write else self.default)


class AdditionalScope(BaseModel):
    """Elevated permissions requested on top of the default scope set."""

    model_config = ConfigDict(populate_by_name=True)

    repo_write: bool = Field(default=False, alias="repoWrite")


class CredentialRequest(BaseModel):
    """A request for credentials to access ``url``.

    Any field not declared here is kept in ``model_extra`` and forwarded
    untouched to the OAuth client as its options mapping (for example an
    ``optional`` or ``instant_popup`` flag understood by that client).

    Example::

        CredentialRequest.model_validate(
            {"url": "https://github.com/org/repo", "additionalScope": {"repoWrite": True}}
        )
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    url: str
    additional_scope: Optional[AdditionalScope] = Field(
        default=None, alias="additionalScope"
    )

    @field_validator("url", mode="before")
    @classmethod
    def _url_to_str(cls, value: Any) -> Any:
        if isinstance(value, httpx.URL):
            return str(value)
        return value

    @property
    def repo_write(self) -> bool:
        """Whether the caller asked for repository write access."""
        return self.additional_scope is not None and self.additional_scope.repo_write

    @property
    def options(self) -> dict[str, Any]:
        """The passthrough options, i.e. every undeclared field."""
        return dict(self.model_extra or {})

    @classmethod
    def coerce(cls, request: CredentialRequest | dict[str, Any]) -> CredentialRequest:
        """Accept either a model instance or a plain mapping of the same shape.

        Raises:
            MalformedUrlError: If ``url`` is missing or is neither a string
                nor an :class:`httpx.URL`.
        """
        if isinstance(request, cls):
            return request
        try:
            return cls.model_validate(request)
        except ValidationError as exc:
            url_errors = [err for err in exc.errors() if err["loc"][:1] == ("url",)]
            if not url_errors:
                raise
            value = request.get("url") if isinstance(request, dict) else None
            raise MalformedUrlError(str(value), url_errors[0]["msg"]) from exc


class CredentialResponse(BaseModel):
    """Issued credentials: the raw token plus ready-to-send HTTP headers."""

    token: str
    headers: dict[str, str] = Field(default_factory=dict)

    @classmethod
    def for_token(cls, token: str) -> CredentialResponse:
        return cls(token=token, headers={"Authorization": f"Bearer {token}"})


# --- Configuration models ---


class ProviderType(str, enum.Enum):
    """Provider presets that can be named in a config file."""

    GITHUB = "github"
    GITLAB = "gitlab"
    AZURE = "azure"
    BITBUCKET = "bitbucket"
    CUSTOM = "custom"


class ProviderEntry(BaseModel):
    """One provider registration in the config file.

    Preset types take an optional ``host`` override for self-hosted
    instances. ``custom`` entries must spell out both the host and the
    scope mapping.

    Example::

        ProviderEntry(type="github", host="github.example.com", token_source="env:GHE_TOKEN")
    """

    model_config = ConfigDict(populate_by_name=True)

    type: ProviderType
    host: Optional[str] = Field(
        default=None, description="Host override; defaults to the preset's public host"
    )
    token_source: str = Field(
        default="prompt",
        alias="tokenSource",
        description="Credential source for the static token client: env:VAR, file:/path, prompt",
    )
    scope_mapping: Optional[ScopeMapping] = Field(default=None, alias="scopeMapping")

    @model_validator(mode="after")
    def _check_custom(self) -> ProviderEntry:
        if self.type == ProviderType.CUSTOM:
            if not self.host:
                raise ValueError("custom providers require a 'host'")
            if self.scope_mapping is None:
                raise ValueError("custom providers require a 'scope_mapping'")
        elif self.scope_mapping is not None:
            raise ValueError(
                f"'scope_mapping' is only allowed for custom providers, not '{self.type.value}'"
            )
        return self


class ScmAuthConfig(BaseModel):
    """Root of the ``config.json`` / ``scmauth.json`` file.

    Provider order is significant: the first entry whose host matches a
    request wins.
    """

    providers: list[ProviderEntry] = Field(default_factory=list)
