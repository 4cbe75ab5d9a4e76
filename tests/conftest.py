"""Shared test fixtures for scmauth.

Provides a recording fake OAuth client, an isolated config environment,
and the Typer CLI runner. These fixtures are discovered automatically by
pytest and available to all test modules without explicit imports.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Optional

import pytest

from scmauth.output import reset_output


class FakeOAuthApi:
    """OAuth client double that records every ``get_access_token`` call.

    Args:
        token: Token to return.
        error: Exception to raise instead of returning a token.
        is_async: Return an awaitable instead of the token itself.
    """

    def __init__(
        self,
        token: str = "abc123",
        error: Optional[Exception] = None,
        is_async: bool = False,
    ) -> None:
        self.token = token
        self.error = error
        self.is_async = is_async
        self.calls: list[tuple[list[str], dict[str, Any]]] = []

    def _issue(self, scopes: list[str], options: dict[str, Any]) -> str:
        self.calls.append((scopes, options))
        if self.error is not None:
            raise self.error
        return self.token

    def get_access_token(self, scopes: list[str], options: dict[str, Any]) -> Any:
        if self.is_async:
            async def _later() -> str:
                return self._issue(scopes, options)

            return _later()
        return self._issue(scopes, options)


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Drop the global OutputManager so CliRunner stream swaps don't leak."""
    yield
    reset_output()


# ---------------------------------------------------------------------------
# OAuth client fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def make_api() -> Callable[..., FakeOAuthApi]:
    """Factory for :class:`FakeOAuthApi` instances."""
    return FakeOAuthApi


@pytest.fixture
def fake_api() -> FakeOAuthApi:
    """A synchronous fake client returning ``"abc123"``."""
    return FakeOAuthApi()


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Points XDG_CONFIG_HOME at ``tmp_path/config``, forces the XDG code
    path, clears ``SCMAUTH_CONFIG`` and changes the working directory to
    *tmp_path* so no project config is picked up by accident.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setattr("scmauth.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.delenv("SCMAUTH_CONFIG", raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
