"""User commands -- read and change profiles.

Provides ``get-user``, ``update-user`` and ``delete-user``.  Each command
obtains a bearer token (reusing a cached one within the process), performs
one request, and prints the JSON result on stdout.

Typical workflow::

    cis-client get-user 'ad|Mozilla-LDAP|jdoe' --by user_id --filter public
    cis-client update-user 'ad|Mozilla-LDAP|jdoe' --file profile.json
"""

from __future__ import annotations

from typing import Optional

import typer

from cis_client.commands._common import fail, open_client, read_profile
from cis_client.exceptions import CisClientError
from cis_client.models import GetBy
from cis_client.output import format_response


def get_user_command(
    ctx: typer.Context,
    user_id: str = typer.Argument(help="Identifier of the user to look up."),
    by: GetBy = typer.Option(
        GetBy.USER_ID, "--by", "-b", case_sensitive=False, help="How to interpret the identifier."
    ),
    filter: Optional[str] = typer.Option(
        None, "--filter", help="filterDisplay level, e.g. 'public' or 'staff'."
    ),
) -> None:
    """Fetch a profile from the person API.

    Example::

        cis-client get-user jdoe@mozilla.com --by primary_email
    """
    try:
        with open_client(ctx) as client:
            profile = client.get_user_by(user_id, by, filter)
    except CisClientError as exc:
        fail(exc)
    format_response(profile)


def update_user_command(
    ctx: typer.Context,
    user_id: str = typer.Argument(help="user_id of the profile to change."),
    file: str = typer.Option(..., "--file", "-f", help="Profile JSON file, or '-' for stdin."),
) -> None:
    """Submit a profile to the change API."""
    try:
        profile = read_profile(file)
        with open_client(ctx) as client:
            result = client.update_user(user_id, profile)
    except CisClientError as exc:
        fail(exc)
    format_response(result)


def delete_user_command(
    ctx: typer.Context,
    user_id: str = typer.Argument(help="user_id of the profile to change."),
    file: str = typer.Option(
        ..., "--file", "-f", help="Profile JSON file naming the fields to retract, or '-'."
    ),
) -> None:
    """Retract profile fields through the change API."""
    try:
        profile = read_profile(file)
        with open_client(ctx) as client:
            result = client.delete_user(user_id, profile)
    except CisClientError as exc:
        fail(exc)
    format_response(result)
