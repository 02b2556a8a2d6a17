"""Typer application and CLI entry point for oauthflow.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. It installs a SIGINT handler, invokes the Typer app, maps
:class:`~oauthflow.exceptions.OAuthFlowError` to its exit code, and writes a
crash log for anything unexpected.

See Also:
    :mod:`oauthflow.commands.token`: the ``token``, ``grants`` and ``profiles`` commands.
    :mod:`oauthflow.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Optional

import typer

from oauthflow import __version__
from oauthflow.commands.token import grants_command, profiles_command, token_command
from oauthflow.exit_codes import EXIT_GENERIC_FAILURE

app = typer.Typer(
    name="oauthflow",
    help="Acquire OAuth 2.0 access tokens from the command line.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

app.command("token")(token_command)
app.command("grants")(grants_command)
app.command("profiles")(profiles_command)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"oauthflow {__version__}")
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
    profile: Optional[str] = typer.Option(
        None, "--profile", "-p", help="Default profile for sub-commands."
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output format."),
    plain_output: bool = typer.Option(False, "--plain", help="Plain text output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug output."),
) -> None:
    """Root callback executed before every sub-command.

    Installs the global :class:`~oauthflow.output.OutputManager` and the
    ``oauthflow`` log handler, and stores shared options in ``ctx.obj``.
    """
    from oauthflow.logging_config import setup_logging
    from oauthflow.output import OutputFormat, OutputManager, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose))
    setup_logging(verbose=verbose, quiet=quiet)

    ctx.ensure_object(dict)
    ctx.obj["profile"] = profile
    ctx.obj["verbose"] = verbose


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write the current traceback under the data directory and return its path."""
    from oauthflow.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``oauthflow`` console script.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from oauthflow.exceptions import OAuthFlowError
        from oauthflow.output import error

        if isinstance(exc, OAuthFlowError):
            error(str(exc))
            sys.exit(exc.exit_code)
        log_path = _write_crash_log(exc)
        error(f"Unexpected error. Debug log: {log_path}")
        sys.exit(EXIT_GENERIC_FAILURE)
