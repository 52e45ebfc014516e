"""Token command -- check that the client credentials work.

``cis-client token`` runs the client-credentials grant once and prints the
expiry of the issued token.  The token itself is only printed with
``--show`` so it does not end up in terminal scrollback by accident.
"""

from __future__ import annotations

from datetime import datetime, timezone

import typer

from cis_client.commands._common import fail, open_client
from cis_client.exceptions import CisClientError
from cis_client.output import format_response


def token_command(
    ctx: typer.Context,
    show: bool = typer.Option(False, "--show", help="Also print the bearer token."),
) -> None:
    """Obtain a bearer token and print its expiry."""
    try:
        with open_client(ctx) as client:
            credential = client.token_cache.get()
    except CisClientError as exc:
        fail(exc)

    remaining = credential.expiry - datetime.now(timezone.utc)
    data = {
        "expiry": credential.expiry.isoformat(),
        "expires_in": max(int(remaining.total_seconds()), 0),
    }
    if show:
        data["token"] = credential.token
    format_response(data)
