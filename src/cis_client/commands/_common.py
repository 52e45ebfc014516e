"""Helpers shared by the built-in commands."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, NoReturn

import typer

from cis_client.client import CisClient
from cis_client.exceptions import CisClientError, InvalidUsageError
from cis_client.output import error


def open_client(ctx: typer.Context) -> CisClient:
    """Build a :class:`CisClient` from the settings selected by ``--config``."""
    from cis_client.config import resolve_settings

    obj = ctx.ensure_object(dict)
    return CisClient.from_settings(resolve_settings(obj.get("config")))


def fail(exc: CisClientError) -> NoReturn:
    """Report *exc* on stderr and exit with its exit code."""
    error(str(exc))
    raise typer.Exit(code=exc.exit_code)


def read_profile(source: str) -> dict[str, Any]:
    """Read a profile document from a JSON file, or stdin when *source* is ``-``.

    Raises:
        InvalidUsageError: If the input cannot be read or is not a JSON object.
    """
    try:
        if source == "-":
            text = sys.stdin.read()
        else:
            text = Path(source).expanduser().read_text(encoding="utf-8")
    except OSError as exc:
        raise InvalidUsageError(f"Cannot read profile file {source}: {exc}") from exc

    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise InvalidUsageError(f"Invalid JSON in profile file {source}: {exc}") from exc
    if not isinstance(data, dict):
        raise InvalidUsageError(
            f"Profile file {source} must contain a JSON object (got {type(data).__name__})"
        )
    return data
