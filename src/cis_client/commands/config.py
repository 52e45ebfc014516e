"""Config commands -- inspect the effective settings.

``cis-client config show`` resolves settings exactly like the other commands
(``--config`` flag, ``CIS_CLIENT_CONFIG``, project file, user config
directory, ``CIS_*`` overrides) and prints them with the client secret
redacted.
"""

from __future__ import annotations

import typer

from cis_client.commands._common import fail
from cis_client.exceptions import CisClientError
from cis_client.output import format_response, info

config_app = typer.Typer(no_args_is_help=True)

REDACTED = "********"


@config_app.command("show")
def config_show(ctx: typer.Context) -> None:
    """Show the effective settings with the client secret redacted.

    Example::

        cis-client --config ./cis-client.yaml config show --json
    """
    from cis_client.config import find_settings_file, resolve_settings

    cli_path = ctx.ensure_object(dict).get("config")
    try:
        settings = resolve_settings(cli_path)
    except CisClientError as exc:
        fail(exc)

    source = find_settings_file(cli_path)
    info(f"Settings: {source if source is not None else 'environment'}")
    data = settings.model_dump(mode="json")
    data["client_config"]["client_secret"] = REDACTED
    format_response(data)
