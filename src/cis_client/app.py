"""Command-line entry point for cis-client.

``cis-client`` exposes the library operations as sub-commands::

    cis-client get-user ID [--by KIND] [--filter LEVEL]
    cis-client update-user ID --file PROFILE.json
    cis-client delete-user ID --file PROFILE.json
    cis-client token [--show]
    cis-client config show

Commands report expected failures themselves and exit with the
``exit_code`` of the :class:`~cis_client.exceptions.CisClientError` behind
them.  :func:`main` is the console script; anything it does not recognise
is written to a crash log under :func:`~cis_client.config.get_data_dir`.
"""

from __future__ import annotations

import logging
import signal
import sys
import traceback
from datetime import datetime
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from cis_client import __version__
from cis_client.commands.config import config_app
from cis_client.commands.token import token_command
from cis_client.commands.users import (
    delete_user_command,
    get_user_command,
    update_user_command,
)
from cis_client.exit_codes import EXIT_GENERIC_FAILURE

EXIT_INTERRUPTED = 130

app = typer.Typer(
    name="cis-client",
    help="Read and change CIS user profiles with a client-credentials bearer token.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

app.command("get-user")(get_user_command)
app.command("update-user")(update_user_command)
app.command("delete-user")(delete_user_command)
app.command("token")(token_command)
app.add_typer(config_app, name="config", help="Settings inspection.")


def _print_version(value: bool) -> None:
    if not value:
        return
    typer.echo(f"cis-client {__version__}")
    raise typer.Exit()


def _configure_logging(verbose: bool, console: Console) -> None:
    """Send ``cis_client`` log records to *console* when verbose.

    Otherwise records are swallowed: failures already reach the user as
    ``Error:`` lines from the commands.
    """
    logger = logging.getLogger("cis_client")
    for handler in [h for h in logger.handlers if isinstance(h, (RichHandler, logging.NullHandler))]:
        logger.removeHandler(handler)
    if not verbose:
        logger.addHandler(logging.NullHandler())
        logger.setLevel(logging.WARNING)
        return
    handler = RichHandler(console=console, show_path=False, rich_tracebacks=False)
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_print_version,
        is_eager=True,
        help="Print the version and exit.",
    ),
    config: Optional[str] = typer.Option(
        None, "--config", "-c", help="Settings file (JSON or YAML)."
    ),
    json_output: bool = typer.Option(False, "--json", help="Print data as JSON."),
    plain_output: bool = typer.Option(False, "--plain", help="Print data as plain text."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable colour."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only print data, warnings and errors."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log token and HTTP activity."),
) -> None:
    """Set up output and logging, and remember ``--config`` for the sub-command."""
    from cis_client.output import OutputFormat, OutputManager, set_output

    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN
    else:
        fmt = OutputFormat.AUTO

    output = OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose)
    set_output(output)
    _configure_logging(verbose, output.stderr_console)

    obj = ctx.ensure_object(dict)
    obj.update(config=config, verbose=verbose)


def _exit_on_interrupt(signum: int, frame: object) -> None:
    sys.stderr.write("\nCancelled.\n")
    sys.exit(EXIT_INTERRUPTED)


def _write_crash_log() -> Path:
    """Save the traceback being handled, with the version, and return the file."""
    from cis_client.config import get_data_dir

    path = get_data_dir() / "logs" / f"crash-{datetime.now():%Y%m%d-%H%M%S}.log"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(f"cis-client {__version__}\n\n{traceback.format_exc()}", encoding="utf-8")
    return path


def main() -> None:
    """Console-script entry point; always ends in :class:`SystemExit`."""
    from cis_client.exceptions import CisClientError
    from cis_client.output import error

    signal.signal(signal.SIGINT, _exit_on_interrupt)
    try:
        app()
    except KeyboardInterrupt:
        _exit_on_interrupt(signal.SIGINT, None)
    except CisClientError as exc:
        error(str(exc))
        sys.exit(exc.exit_code)
    except Exception:
        error(f"Unexpected error. Debug log: {_write_crash_log()}")
        sys.exit(EXIT_GENERIC_FAILURE)
