"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent configuration for scmauth:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.scmauth/`` on macOS and Windows. See :func:`get_config_dir`.
* **Provider config** -- A single :class:`~scmauth.models.ScmAuthConfig`
  JSON file listing provider registrations. See :func:`load_config`,
  :func:`save_config`, :func:`add_provider`, and :func:`resolve_config_path`
  for the lookup order.
* **Credential resolution** -- :func:`resolve_credential` reads secrets
  from env vars, files, or interactive prompts.
* **Wiring** -- :func:`build_scm_auth` turns a config into a ready
  :class:`~scmauth.base.ScmAuthApi`.

Example ``config.json``::

    {
      "providers": [
        {"type": "github", "token_source": "env:GITHUB_TOKEN"},
        {"type": "github", "host": "github.example.com", "token_source": "file:~/.ghe-token"},
        {"type": "custom", "host": "git.example.org", "token_source": "env:GITEA_TOKEN",
         "scope_mapping": {"default": ["read:repository"], "repo_write": ["write:repository"]}}
      ]
    }
"""

from __future__ import annotations

import getpass
import json
import logging
import os
import platform
import sys
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING, Mapping, Optional

from scmauth.exceptions import ConfigError
from scmauth.models import ProviderEntry, ProviderType, ScmAuthConfig

if TYPE_CHECKING:
    from scmauth.base import OAuthApi
    from scmauth.mux import ScmAuthMux

logger = logging.getLogger(__name__)

_APP_NAME = "scmauth"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "scmauth.json"
CONFIG_ENV_VAR = "SCMAUTH_CONFIG"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/scmauth/`` (default ``~/.config/scmauth/``).
    On macOS/Windows: ``~/.scmauth/``.

    Returns:
        Absolute path to the configuration directory (guaranteed to exist).
    """
    if _is_xdg_platform():
        env_value = os.environ.get("XDG_CONFIG_HOME", "")
        base = Path(env_value) if env_value else Path.home() / ".config"
        path = base / _APP_NAME
    else:
        path = Path.home() / f".{_APP_NAME}"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems. On any failure the
    temp file is removed and the original file is left untouched.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Provider config ---


def user_config_path() -> Path:
    """Path to the per-user config file."""
    return get_config_dir() / _CONFIG_FILENAME


def resolve_config_path(path: Optional[Path] = None) -> Optional[Path]:
    """Find the config file to use.

    Precedence (high to low):
        1. The explicit *path* argument (``--config`` on the CLI)
        2. The ``SCMAUTH_CONFIG`` environment variable
        3. Project config (``./scmauth.json``)
        4. User config (``~/.config/scmauth/config.json``)

    Returns:
        The path of the file to load, or ``None`` when neither the project
        nor the user config exists and nothing was requested explicitly.

    Raises:
        ConfigError: If an explicitly requested file (1 or 2) does not exist.
    """
    if path is not None:
        if not path.is_file():
            raise ConfigError(f"Config file not found: {path}")
        return path

    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        candidate = Path(env_path).expanduser()
        if not candidate.is_file():
            raise ConfigError(
                f"Config file not found: {candidate} (from {CONFIG_ENV_VAR})"
            )
        return candidate

    project = Path.cwd() / _PROJECT_CONFIG_FILENAME
    if project.is_file():
        return project

    user = user_config_path()
    if user.is_file():
        return user
    return None


def load_config(path: Optional[Path] = None) -> ScmAuthConfig:
    """Load the provider configuration.

    Args:
        path: Explicit config file; see :func:`resolve_config_path` for the
            lookup order when omitted.

    Returns:
        The deserialised :class:`~scmauth.models.ScmAuthConfig`. If no
        config file exists, an empty config (no providers) is returned.

    Raises:
        ConfigError: If the file is missing when explicitly requested,
            contains invalid JSON, or fails Pydantic validation.
    """
    resolved = resolve_config_path(path)
    if resolved is None:
        logger.debug("No config file found, using defaults")
        return ScmAuthConfig()
    logger.debug("Loading config from %s", resolved)
    try:
        text = resolved.read_text(encoding="utf-8")
        data = json.loads(text)
        return ScmAuthConfig.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid config at {resolved}: {exc}") from exc


def save_config(config: ScmAuthConfig, path: Optional[Path] = None) -> Path:
    """Persist the configuration atomically.

    Args:
        config: The configuration to save.
        path: Target file; defaults to the user config file.

    Returns:
        The path that was written.
    """
    target = path or user_config_path()
    data = config.model_dump(mode="json", exclude_none=True)
    _atomic_write(target, json.dumps(data, indent=2) + "\n")
    return target


def writable_config_path(path: Optional[Path] = None) -> Path:
    """Pick the file that :func:`add_provider` should write to.

    An explicit *path* or ``SCMAUTH_CONFIG`` is used even when the file
    does not exist yet. Otherwise the file :func:`resolve_config_path`
    would load is reused, falling back to the user config file.
    """
    if path is not None:
        return path
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser()
    return resolve_config_path() or user_config_path()


def add_provider(entry: ProviderEntry, path: Optional[Path] = None) -> Path:
    """Append *entry* to the provider list and save the config.

    The new entry has the lowest priority: any existing entry for the
    same host keeps winning.

    Returns:
        The path that was written.

    Raises:
        ConfigError: If the existing file cannot be loaded.
    """
    target = writable_config_path(path)
    config = load_config(target) if target.is_file() else ScmAuthConfig()
    config.providers.append(entry)
    logger.debug("Adding %s provider to %s", entry.type.value, target)
    return save_config(config, target)


# --- Credential source resolution ---


def resolve_credential(source: str) -> str:
    """Resolve a credential from its source descriptor.

    Supported formats:
        - ``"env:VAR_NAME"`` -- reads ``os.environ["VAR_NAME"]``
        - ``"file:/path/to/file"`` -- reads file content, stripped of whitespace
        - ``"prompt"`` -- prompts user interactively (requires a TTY)

    Args:
        source: The source descriptor string.

    Returns:
        The resolved credential string.

    Raises:
        ConfigError: If the source can't be resolved.
    """
    if source.startswith("env:"):
        var_name = source[4:]
        value = os.environ.get(var_name)
        if value is None:
            raise ConfigError(
                f"Environment variable '{var_name}' is not set (source: {source})"
            )
        return value

    if source.startswith("file:"):
        path = Path(source[5:]).expanduser()
        if not path.is_file():
            raise ConfigError(f"Credential file not found: {path} (source: {source})")
        try:
            return path.read_text(encoding="utf-8").strip()
        except OSError as exc:
            raise ConfigError(f"Cannot read credential file {path}: {exc}") from exc

    if source == "prompt":
        if not sys.stdin.isatty():
            raise ConfigError(
                "Cannot prompt for credentials: stdin is not a TTY (source: prompt)"
            )
        return getpass.getpass("Enter token: ")

    raise ConfigError(f"Unknown credential source format: {source}")


# --- Wiring ---


def build_scm_auth(
    config: ScmAuthConfig,
    clients: Optional[Mapping[str, OAuthApi]] = None,
) -> ScmAuthMux:
    """Build a routing :class:`~scmauth.mux.ScmAuthMux` from *config*.

    One provider is created per entry, in file order. The OAuth client for
    an entry is ``clients[entry.type]`` when supplied (keys are provider
    type names such as ``"github"``); otherwise a
    :class:`~scmauth.clients.StaticTokenAuthApi` reading
    ``entry.token_source``.

    Args:
        config: The loaded configuration.
        clients: Optional OAuth clients keyed by provider type.

    Returns:
        A multiplexer over the configured providers.
    """
    from scmauth.clients import StaticTokenAuthApi
    from scmauth.mux import ScmAuthMux
    from scmauth.provider import ScmAuth

    presets = {
        ProviderType.GITHUB: ScmAuth.for_github,
        ProviderType.GITLAB: ScmAuth.for_gitlab,
        ProviderType.AZURE: ScmAuth.for_azure,
        ProviderType.BITBUCKET: ScmAuth.for_bitbucket,
    }
    clients = clients or {}

    providers = []
    for entry in config.providers:
        api = clients.get(entry.type.value)
        if api is None:
            api = StaticTokenAuthApi(entry.token_source)
        if entry.type == ProviderType.CUSTOM:
            assert entry.host is not None and entry.scope_mapping is not None
            provider = ScmAuth.for_auth_api(
                api, host=entry.host, scope_mapping=entry.scope_mapping
            )
        else:
            provider = presets[entry.type](api, host=entry.host)
        logger.debug("Registered %r", provider)
        providers.append(provider)
    return ScmAuthMux(providers)
