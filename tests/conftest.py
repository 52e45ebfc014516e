"""Shared test fixtures for cis_client.

Provides settings for a fake CIS deployment, a controllable clock, config
isolation, and output-state cleanup.  These fixtures are discovered by
pytest and available to all test modules without explicit imports.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from cis_client.models import CisSettings, ClientConfig, RequestConfig
from cis_client.output import reset_output


TOKEN_ENDPOINT = "https://auth.cis.test/oauth/token"
PERSON_ENDPOINT = "https://person.api.cis.test/v2/user"
CHANGE_ENDPOINT = "https://change.api.cis.test/v2/user"


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time; CliRunner swaps those streams per invocation.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Clock
# ---------------------------------------------------------------------------


class FakeClock:
    """A manually advanced UTC clock."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


@pytest.fixture
def client_config() -> ClientConfig:
    return ClientConfig(
        client_id="test-client",
        client_secret="test-secret",
        audience="api.cis.test",
        token_endpoint=TOKEN_ENDPOINT,
        scopes="classification:public display:all",
    )


@pytest.fixture
def settings(client_config: ClientConfig) -> CisSettings:
    return CisSettings(
        client_config=client_config,
        person_api_user_endpoint=PERSON_ENDPOINT,
        change_api_user_endpoint=CHANGE_ENDPOINT,
        request=RequestConfig(timeout=5, verify_ssl=False),
    )


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Points the XDG directories at tmp_path, clears every ``CIS_*``
    environment variable, and changes the working directory to tmp_path.
    """
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.setattr("cis_client.config._is_xdg_platform", lambda: True)

    for var in [
        "CIS_CLIENT_CONFIG",
        "CIS_CLIENT_ID",
        "CIS_CLIENT_SECRET",
        "CIS_AUDIENCE",
        "CIS_TOKEN_ENDPOINT",
        "CIS_SCOPES",
        "CIS_PERSON_API_USER_ENDPOINT",
        "CIS_CHANGE_API_USER_ENDPOINT",
    ]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path
