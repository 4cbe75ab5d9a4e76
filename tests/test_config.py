"""Tests for scmauth.config -- XDG paths, lookup precedence, credentials, wiring."""

from __future__ import annotations

import asyncio
import io
import json
from pathlib import Path
from typing import Any

import pytest

from scmauth.config import (
    _atomic_write,
    build_scm_auth,
    get_config_dir,
    load_config,
    resolve_config_path,
    resolve_credential,
    add_provider,
    save_config,
    user_config_path,
    writable_config_path,
)
from scmauth.exceptions import ConfigError, UnsupportedHostError
from scmauth.models import ProviderEntry, ScmAuthConfig, ScopeMapping


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _write_json(path: Path, data: Any) -> None:
    """Write a dict as JSON to *path*, creating parent dirs."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")


def _providers(*types: str) -> dict[str, Any]:
    return {"providers": [{"type": t, "token_source": f"env:{t.upper()}_TOKEN"} for t in types]}


# ---------------------------------------------------------------------------
# XDG path resolution
# ---------------------------------------------------------------------------


class TestConfigDir:
    def test_xdg_custom(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("scmauth.config._is_xdg_platform", lambda: True)
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
        result = get_config_dir()
        assert result == tmp_path / "xdg" / "scmauth"
        assert result.is_dir()

    def test_xdg_default(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("scmauth.config._is_xdg_platform", lambda: True)
        monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))
        assert get_config_dir() == tmp_path / ".config" / "scmauth"

    def test_non_xdg_platform(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("scmauth.config._is_xdg_platform", lambda: False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))
        assert get_config_dir() == tmp_path / ".scmauth"


# ---------------------------------------------------------------------------
# Atomic writes
# ---------------------------------------------------------------------------


class TestAtomicWrite:
    def test_writes_content(self, tmp_path: Path) -> None:
        target = tmp_path / "sub" / "file.json"
        _atomic_write(target, "hello")
        assert target.read_text(encoding="utf-8") == "hello"

    def test_no_temp_files_left(self, tmp_path: Path) -> None:
        target = tmp_path / "file.json"
        _atomic_write(target, "one")
        _atomic_write(target, "two")
        assert [p.name for p in tmp_path.iterdir()] == ["file.json"]


# ---------------------------------------------------------------------------
# Lookup precedence
# ---------------------------------------------------------------------------


class TestResolveConfigPath:
    def test_nothing_found(self, isolated_config: Path) -> None:
        assert resolve_config_path() is None
        assert load_config() == ScmAuthConfig()

    def test_user_config(self, isolated_config: Path) -> None:
        _write_json(user_config_path(), _providers("github"))
        assert resolve_config_path() == user_config_path()

    def test_project_beats_user(self, isolated_config: Path) -> None:
        _write_json(user_config_path(), _providers("github"))
        _write_json(isolated_config / "scmauth.json", _providers("gitlab"))
        config = load_config()
        assert [p.type.value for p in config.providers] == ["gitlab"]

    def test_env_beats_project(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        _write_json(isolated_config / "scmauth.json", _providers("gitlab"))
        env_file = isolated_config / "elsewhere.json"
        _write_json(env_file, _providers("azure"))
        monkeypatch.setenv("SCMAUTH_CONFIG", str(env_file))
        assert [p.type.value for p in load_config().providers] == ["azure"]

    def test_explicit_beats_env(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        env_file = isolated_config / "env.json"
        explicit = isolated_config / "explicit.json"
        _write_json(env_file, _providers("azure"))
        _write_json(explicit, _providers("bitbucket"))
        monkeypatch.setenv("SCMAUTH_CONFIG", str(env_file))
        assert [p.type.value for p in load_config(explicit).providers] == ["bitbucket"]

    def test_missing_explicit_file(self, isolated_config: Path) -> None:
        with pytest.raises(ConfigError, match="not found"):
            load_config(isolated_config / "missing.json")

    def test_missing_env_file(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SCMAUTH_CONFIG", str(isolated_config / "missing.json"))
        with pytest.raises(ConfigError, match="SCMAUTH_CONFIG"):
            load_config()


class TestLoadSave:
    def test_invalid_json(self, isolated_config: Path) -> None:
        user_config_path().write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigError, match="Invalid config"):
            load_config()

    def test_invalid_entry(self, isolated_config: Path) -> None:
        _write_json(user_config_path(), {"providers": [{"type": "custom"}]})
        with pytest.raises(ConfigError):
            load_config()

    def test_save_then_load(self, isolated_config: Path) -> None:
        config = ScmAuthConfig(
            providers=[
                ProviderEntry(type="github", token_source="env:GH"),
                ProviderEntry(
                    type="custom",
                    host="git.example.org",
                    token_source="file:~/.gitea",
                    scope_mapping=ScopeMapping(default=["read"], repo_write=["write"]),
                ),
            ]
        )
        path = save_config(config)
        assert path == user_config_path()
        assert load_config() == config
        assert "host" not in json.loads(path.read_text())["providers"][0]


class TestAddProvider:
    def test_writes_user_config_when_nothing_exists(self, isolated_config: Path) -> None:
        path = add_provider(ProviderEntry(type="gitlab", token_source="env:GL"))
        assert path == user_config_path()
        assert load_config().providers[0].type.value == "gitlab"

    def test_appends_to_project_config(self, isolated_config: Path) -> None:
        project = isolated_config / "scmauth.json"
        project.write_text(json.dumps({"providers": [{"type": "github"}]}), encoding="utf-8")
        path = add_provider(ProviderEntry(type="bitbucket"))
        assert path == project
        assert [e.type.value for e in load_config().providers] == ["github", "bitbucket"]

    def test_env_path_may_not_exist_yet(
        self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        target = isolated_config / "new" / "scm.json"
        monkeypatch.setenv("SCMAUTH_CONFIG", str(target))
        assert writable_config_path() == target
        add_provider(ProviderEntry(type="azure"))
        assert load_config().providers[0].type.value == "azure"

    def test_invalid_existing_file_is_left_alone(self, isolated_config: Path) -> None:
        user_config_path().write_text("[", encoding="utf-8")
        with pytest.raises(ConfigError):
            add_provider(ProviderEntry(type="github"))
        assert user_config_path().read_text(encoding="utf-8") == "["


# ---------------------------------------------------------------------------
# Credential sources
# ---------------------------------------------------------------------------


class TestResolveCredential:
    def test_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MY_TOKEN", "secret")
        assert resolve_credential("env:MY_TOKEN") == "secret"

    def test_env_missing(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("MY_TOKEN", raising=False)
        with pytest.raises(ConfigError, match="MY_TOKEN"):
            resolve_credential("env:MY_TOKEN")

    def test_file_is_stripped(self, tmp_path: Path) -> None:
        path = tmp_path / "tok"
        path.write_text("  tok \n", encoding="utf-8")
        assert resolve_credential(f"file:{path}") == "tok"

    def test_file_missing(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="not found"):
            resolve_credential(f"file:{tmp_path / 'nope'}")

    def test_prompt_without_tty(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("sys.stdin", io.StringIO())
        with pytest.raises(ConfigError, match="not a TTY"):
            resolve_credential("prompt")

    def test_unknown_format(self) -> None:
        with pytest.raises(ConfigError, match="Unknown credential source"):
            resolve_credential("vault:secret/scm")


# ---------------------------------------------------------------------------
# Wiring
# ---------------------------------------------------------------------------


class TestBuildScmAuth:
    def test_one_provider_per_entry_in_order(self) -> None:
        config = ScmAuthConfig.model_validate(_providers("github", "gitlab", "azure", "bitbucket"))
        mux = build_scm_auth(config)
        assert len(mux.providers) == 4
        assert mux.find_provider("https://dev.azure.com/org") is mux.providers[2]

    def test_static_token_client_by_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GITHUB_TOKEN", "from-env")
        mux = build_scm_auth(ScmAuthConfig.model_validate(_providers("github")))
        result = asyncio.run(mux.get_credentials({"url": "https://github.com/x"}))
        assert result.token == "from-env"

    def test_injected_clients_win(self, make_api) -> None:
        api = make_api(token="injected")
        mux = build_scm_auth(
            ScmAuthConfig.model_validate(_providers("gitlab")), clients={"gitlab": api}
        )
        result = asyncio.run(
            mux.get_credentials({"url": "https://gitlab.com/x", "additionalScope": {"repoWrite": True}})
        )
        assert result.token == "injected"
        assert api.calls[0][0] == ["read_user", "read_api", "write_repository", "api"]

    def test_host_override_and_custom(self, make_api) -> None:
        config = ScmAuthConfig.model_validate(
            {
                "providers": [
                    {"type": "github", "host": "github.example.com"},
                    {
                        "type": "custom",
                        "host": "git.example.org",
                        "scopeMapping": {"default": ["read"], "repoWrite": ["write"]},
                    },
                ]
            }
        )
        custom_api = make_api(token="c")
        mux = build_scm_auth(config, clients={"custom": custom_api})

        assert mux.find_provider("https://github.example.com/x") is mux.providers[0]
        with pytest.raises(UnsupportedHostError):
            mux.find_provider("https://github.com/x")

        asyncio.run(mux.get_credentials({"url": "https://git.example.org/x"}))
        assert custom_api.calls[0][0] == ["read"]
