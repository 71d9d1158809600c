"""Typer application and CLI entry point for apidex.

This module wires together the top-level Typer application and registers
the built-in commands: the browse family (``browse``, ``search``,
``show``, ``tags``, ``list``, ``schemas``, ``schema``), ``export``, and the
``mcp`` and ``config`` groups.

The root callback resolves configuration and output preferences once; the
specification itself is loaded lazily by the first command that needs it
(:func:`~apidex.commands.common.get_engine`), so ``config`` commands work
without one.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. It installs signal handlers and invokes the Typer app.
:class:`~apidex.exceptions.ApidexError` exits with the error's code;
anything else is written to a crash log under the data directory.

See Also:
    :mod:`apidex.config`: Configuration and spec source resolution.
    :mod:`apidex.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import logging
import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Optional

import typer

from apidex import __version__
from apidex.commands.browse import (
    browse_command,
    list_command,
    schema_command,
    schemas_command,
    search_command,
    show_command,
    tags_command,
)
from apidex.commands.config import config_app
from apidex.commands.export import export_command
from apidex.commands.mcp import mcp_app
from apidex.exit_codes import EXIT_GENERIC_FAILURE


app = typer.Typer(
    name="apidex",
    help="Index, search, and document Swagger/OpenAPI specifications.",
    no_args_is_help=True,
    add_completion=True,
    rich_markup_mode="rich",
)

app.command("browse")(browse_command)
app.command("search")(search_command)
app.command("show")(show_command)
app.command("tags")(tags_command)
app.command("list")(list_command)
app.command("schemas")(schemas_command)
app.command("schema")(schema_command)
app.command("export")(export_command)
app.add_typer(mcp_app, name="mcp", help="Query the resource and tool catalog.")
app.add_typer(config_app, name="config", help="Configuration management.")


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"apidex {__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    """Send library log records to stderr; DEBUG with ``--verbose``, WARNING otherwise."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
        force=True,
    )


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
    spec: Optional[str] = typer.Option(
        None,
        "--spec",
        help="Spec file, URL, or '-' for stdin (overrides APIDEX_SPEC and config).",
    ),
    json_output: bool = typer.Option(
        False, "--json", help="JSON output format."
    ),
    plain_output: bool = typer.Option(
        False, "--plain", help="Plain text output."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output."
    ),
    output_file: Optional[str] = typer.Option(
        None, "--output", help="Write primary output to this file."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Resolves configuration, initialises the global
    :class:`~apidex.output.OutputManager` from CLI flags (falling back to
    ``output.format`` from config), and stores shared state in
    ``ctx.obj`` for sub-commands.

    Args:
        ctx: Typer invocation context.
        version: If ``True``, print the version string and exit.
        spec: Spec source override (highest precedence).
        json_output: Force JSON output format.
        plain_output: Force plain-text output format.
        no_color: Disable all colour and Rich markup.
        quiet: Suppress non-essential diagnostic output.
        verbose: Enable debug-level diagnostic output.
        output_file: Redirect primary data output to a file path.
    """
    from apidex.config import resolve_config
    from apidex.exceptions import ConfigError
    from apidex.models import GlobalConfig
    from apidex.output import OutputFormat, OutputManager, set_output, warning

    _configure_logging(verbose)

    config_problem: Optional[ConfigError] = None
    try:
        config = resolve_config()
    except ConfigError as exc:
        config_problem = exc
        config = GlobalConfig()

    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN
    else:
        try:
            fmt = OutputFormat(config.output.format)
        except ValueError:
            fmt = OutputFormat.AUTO

    output = OutputManager(
        format=fmt,
        no_color=no_color,
        quiet=quiet,
        verbose=verbose,
        use_pager=config.output.pager,
        output_file=output_file,
    )
    set_output(output)

    if config_problem is not None:
        warning(f"{config_problem} (using defaults)")

    ctx.ensure_object(dict)
    ctx.obj["spec"] = spec
    ctx.obj["config"] = config
    ctx.obj["verbose"] = verbose


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path."""
    from apidex.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(
        "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    )
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``apidex`` console script.

    Unhandled :class:`~apidex.exceptions.ApidexError` instances cause a
    clean exit with the error's ``exit_code``. All other exceptions produce
    a crash log and a generic failure exit.

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
        from apidex.exceptions import ApidexError
        from apidex.output import error

        if isinstance(exc, ApidexError):
            error(str(exc))
            sys.exit(exc.exit_code)
        else:
            log_path = _write_crash_log(exc)
            error(f"Unexpected error. Debug log: {log_path}")
            sys.exit(EXIT_GENERIC_FAILURE)
