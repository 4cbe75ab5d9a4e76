"""Typer application and CLI entry point for scmauth.

The ``scmauth`` command inspects and exercises the provider configuration
loaded by :func:`~scmauth.config.load_config`:

- ``scmauth providers`` -- list configured providers in priority order.
- ``scmauth add TYPE [--host H] [-t SOURCE]`` -- append a provider to the config.
- ``scmauth check URL`` -- show which provider would serve *URL*.
- ``scmauth token URL [--write] [--header]`` -- issue credentials for *URL*.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``.

See Also:
    :mod:`scmauth.config`: Config file lookup and provider wiring.
    :mod:`scmauth.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import asyncio
import logging
import signal
import sys
from pathlib import Path
from typing import Any, Optional

import typer

from scmauth import __version__
from scmauth.exceptions import ScmAuthError
from scmauth.exit_codes import EXIT_GENERIC_FAILURE
from scmauth.models import ProviderEntry, ProviderType
from scmauth.output import error, get_output, suggest


app = typer.Typer(
    name="scmauth",
    help="Route source-control credential requests to the right provider.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"scmauth {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    config_path: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Config file to use instead of the default lookup."
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output format."),
    plain_output: bool = typer.Option(False, "--plain", help="Plain text output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug logging on stderr."
    ),
) -> None:
    """Install the global output manager and stash shared options in ``ctx.obj``."""
    from scmauth.output import OutputFormat, OutputManager, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet))

    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            stream=sys.stderr,
            format="%(levelname)s %(name)s: %(message)s",
        )

    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


def _load(ctx: typer.Context) -> Any:
    """Load the config selected by ``--config`` or the default lookup."""
    from scmauth.config import load_config

    try:
        return load_config(ctx.obj.get("config_path"))
    except ScmAuthError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None


def _entry_host(entry: ProviderEntry) -> str:
    """Return the host an entry binds, applying the preset default."""
    from scmauth.provider import AZURE_HOST, BITBUCKET_HOST, GITHUB_HOST, GITLAB_HOST

    defaults = {
        ProviderType.GITHUB: GITHUB_HOST,
        ProviderType.GITLAB: GITLAB_HOST,
        ProviderType.AZURE: AZURE_HOST,
        ProviderType.BITBUCKET: BITBUCKET_HOST,
    }
    return entry.host or defaults[entry.type]


@app.command("providers")
def providers_command(ctx: typer.Context) -> None:
    """List configured providers in the order they are matched.

    Example::

        scmauth providers
    """
    config = _load(ctx)
    if not config.providers:
        get_output().info("No providers configured.")
        suggest("Register one with: scmauth add github -t env:GITHUB_TOKEN")
        return

    rows = [
        [str(i), entry.type.value, _entry_host(entry), entry.token_source]
        for i, entry in enumerate(config.providers, 1)
    ]
    get_output().print_table(["#", "type", "host", "token_source"], rows, title="Providers")


@app.command("add")
def add_command(
    ctx: typer.Context,
    provider_type: ProviderType = typer.Argument(
        metavar="TYPE", help="Provider preset, or 'custom'."
    ),
    host: Optional[str] = typer.Option(
        None, "--host", help="Host to bind; required for custom providers."
    ),
    token_source: str = typer.Option(
        "prompt", "--token-source", "-t", help="env:VAR, file:/path or prompt."
    ),
    default_scope: Optional[list[str]] = typer.Option(
        None, "--default-scope", help="Read scope of a custom provider (repeatable)."
    ),
    write_scope: Optional[list[str]] = typer.Option(
        None, "--write-scope", help="Write scope of a custom provider (repeatable)."
    ),
) -> None:
    """Append a provider to the config file.

    The entry is matched after every existing one.

    Example::

        scmauth add github --host github.example.com -t env:GHE_TOKEN
        scmauth add custom --host git.example.org --default-scope read:repository \\
            --write-scope write:repository -t env:GITEA_TOKEN
    """
    from pydantic import ValidationError

    from scmauth.config import add_provider
    from scmauth.exit_codes import EXIT_CONFIG_ERROR
    from scmauth.models import ScopeMapping

    scope_mapping = None
    if default_scope or write_scope:
        scope_mapping = ScopeMapping(
            default=default_scope or [], repo_write=write_scope or []
        )
    try:
        entry = ProviderEntry(
            type=provider_type,
            host=host,
            token_source=token_source,
            scope_mapping=scope_mapping,
        )
    except ValidationError as exc:
        error(f"Invalid provider: {exc.errors()[0]['msg']}")
        raise typer.Exit(code=EXIT_CONFIG_ERROR) from None

    try:
        path = add_provider(entry, ctx.obj.get("config_path"))
    except ScmAuthError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    get_output().info(f"Added {entry.type.value} provider for {_entry_host(entry)} to {path}")
    suggest(f"Try: scmauth check https://{_entry_host(entry)}/")


@app.command("check")
def check_command(
    ctx: typer.Context,
    url: str = typer.Argument(help="Repository or API URL to route."),
) -> None:
    """Show which configured provider serves URL.

    Exits with code 3 when no provider claims the URL's host and 4 when the
    URL cannot be parsed.

    Example::

        scmauth check https://github.com/org/repo
    """
    from scmauth.config import build_scm_auth

    config = _load(ctx)
    mux = build_scm_auth(config)
    try:
        provider = mux.find_provider(url)
    except ScmAuthError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    entry = config.providers[mux.providers.index(provider)]
    get_output().format_data(
        {"url": url, "type": entry.type.value, "host": _entry_host(entry)}
    )


@app.command("token")
def token_command(
    ctx: typer.Context,
    url: str = typer.Argument(help="Repository or API URL to authenticate against."),
    write: bool = typer.Option(
        False, "--write", "-w", help="Request the repository write scope set."
    ),
    header: bool = typer.Option(
        False, "--header", help="Print the Authorization header line instead of the token."
    ),
) -> None:
    """Issue credentials for URL through the configured providers.

    Example::

        curl -H "$(scmauth token --header https://github.com/org/repo)" ...
    """
    from scmauth.config import build_scm_auth
    from scmauth.output import OutputFormat

    mux = build_scm_auth(_load(ctx))
    try:
        credentials = asyncio.run(
            mux.get_credentials({"url": url, "additional_scope": {"repo_write": write}})
        )
    except ScmAuthError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    output = get_output()
    if output.format == OutputFormat.JSON:
        output.format_data(credentials.model_dump())
    elif header:
        output.print_data(f"Authorization: {credentials.headers['Authorization']}")
    else:
        output.print_data(credentials.token)


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def main() -> None:
    """CLI entry point invoked by the ``scmauth`` console script.

    Unhandled :class:`~scmauth.exceptions.ScmAuthError` instances cause a
    clean exit with the error's ``exit_code``; anything else is reported
    and exits with :data:`~scmauth.exit_codes.EXIT_GENERIC_FAILURE`.
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except ScmAuthError as exc:
        error(str(exc))
        sys.exit(exc.exit_code)
    except Exception as exc:
        error(f"Unexpected error: {exc}")
        sys.exit(EXIT_GENERIC_FAILURE)
