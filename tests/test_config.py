"""Tests for cis_client.config -- XDG paths, settings files, env overrides, precedence."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest
import yaml

from cis_client.config import (
    apply_env_overrides,
    find_settings_file,
    get_config_dir,
    get_data_dir,
    load_settings,
    resolve_credential,
    resolve_settings,
)
from cis_client.exceptions import ConfigError
from cis_client.models import CisSettings


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _settings_data(**overrides: Any) -> dict[str, Any]:
    data: dict[str, Any] = {
        "client_config": {
            "client_id": "abc",
            "client_secret": "shh",
            "audience": "api.sso.mozilla.com",
            "token_endpoint": "https://auth.mozilla.auth0.com/oauth/token",
            "scopes": "classification:public display:all",
        },
        "person_api_user_endpoint": "https://person.api.sso.mozilla.com/v2/user",
        "change_api_user_endpoint": "https://change.api.sso.mozilla.com/v2/user",
    }
    data.update(overrides)
    return data


def _write_json(path: Path, data: Any) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")
    return path


def _write_yaml(path: Path, data: Any) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump(data), encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# XDG path resolution
# ---------------------------------------------------------------------------


class TestXDGPaths:
    def test_config_dir_xdg_custom(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        custom = tmp_path / "custom_config"
        monkeypatch.setattr("cis_client.config._is_xdg_platform", lambda: True)
        monkeypatch.setenv("XDG_CONFIG_HOME", str(custom))

        result = get_config_dir()
        assert result == custom / "cis-client"
        assert result.is_dir()

    def test_config_dir_xdg_default(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("cis_client.config._is_xdg_platform", lambda: True)
        monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))

        assert get_config_dir() == tmp_path / ".config" / "cis-client"

    def test_data_dir_xdg_default(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("cis_client.config._is_xdg_platform", lambda: True)
        monkeypatch.delenv("XDG_DATA_HOME", raising=False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))

        assert get_data_dir() == tmp_path / ".local" / "share" / "cis-client"

    def test_non_xdg_fallback(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("cis_client.config._is_xdg_platform", lambda: False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))

        assert get_config_dir() == tmp_path / ".cis-client"
        assert get_data_dir() == tmp_path / ".cis-client"


# ---------------------------------------------------------------------------
# Loading settings files
# ---------------------------------------------------------------------------


class TestLoadSettings:
    def test_load_json(self, isolated_config: Path) -> None:
        path = _write_json(isolated_config / "s.json", _settings_data())

        settings = load_settings(path)

        assert isinstance(settings, CisSettings)
        assert settings.client_config.client_id == "abc"
        assert settings.client_config.scopes == "classification:public display:all"
        assert settings.request.timeout == 30.0
        assert settings.request.verify_ssl is True

    def test_load_yaml(self, isolated_config: Path) -> None:
        path = _write_yaml(
            isolated_config / "s.yaml",
            _settings_data(request={"timeout": 5, "verify_ssl": False}),
        )

        settings = load_settings(path)

        assert settings.person_api_user_endpoint == "https://person.api.sso.mozilla.com/v2/user"
        assert settings.request.timeout == 5.0
        assert settings.request.verify_ssl is False

    def test_unknown_extension_is_sniffed(self, isolated_config: Path) -> None:
        path = _write_yaml(isolated_config / "settings.conf", _settings_data())

        assert load_settings(path).client_config.audience == "api.sso.mozilla.com"

    def test_scopes_default_to_empty(self, isolated_config: Path) -> None:
        data = _settings_data()
        del data["client_config"]["scopes"]
        path = _write_json(isolated_config / "s.json", data)

        assert load_settings(path).client_config.scopes == ""

    def test_missing_file(self, isolated_config: Path) -> None:
        with pytest.raises(ConfigError, match="not found"):
            load_settings(isolated_config / "missing.json")

    def test_invalid_json(self, isolated_config: Path) -> None:
        path = isolated_config / "s.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(ConfigError, match="Invalid JSON"):
            load_settings(path)

    def test_non_mapping_document(self, isolated_config: Path) -> None:
        path = _write_yaml(isolated_config / "s.yaml", ["a", "b"])

        with pytest.raises(ConfigError, match="object"):
            load_settings(path)

    def test_missing_required_field(self, isolated_config: Path) -> None:
        data = _settings_data()
        del data["change_api_user_endpoint"]
        path = _write_json(isolated_config / "s.json", data)

        with pytest.raises(ConfigError, match="change_api_user_endpoint"):
            load_settings(path)


# ---------------------------------------------------------------------------
# Environment overrides and credential indirection
# ---------------------------------------------------------------------------


class TestEnvOverrides:
    def test_overrides_nested_and_top_level_fields(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CIS_CLIENT_SECRET", "from-env")
        monkeypatch.setenv("CIS_PERSON_API_USER_ENDPOINT", "https://person.example/v2/user")
        data = _settings_data()

        merged = apply_env_overrides(data)

        assert merged["client_config"]["client_secret"] == "from-env"
        assert merged["person_api_user_endpoint"] == "https://person.example/v2/user"
        assert data["client_config"]["client_secret"] == "shh"

    def test_override_applies_when_loading(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CIS_SCOPES", "display:staff")
        path = _write_json(isolated_config / "s.json", _settings_data())

        assert load_settings(path).client_config.scopes == "display:staff"


class TestResolveCredential:
    def test_literal(self) -> None:
        assert resolve_credential("plain-secret") == "plain-secret"

    def test_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MY_CIS_SECRET", "s3cret")
        assert resolve_credential("env:MY_CIS_SECRET") == "s3cret"

    def test_env_missing(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("MY_CIS_SECRET", raising=False)
        with pytest.raises(ConfigError, match="MY_CIS_SECRET"):
            resolve_credential("env:MY_CIS_SECRET")

    def test_file(self, tmp_path: Path) -> None:
        secret = tmp_path / "secret.txt"
        secret.write_text("  from-file\n", encoding="utf-8")
        assert resolve_credential(f"file:{secret}") == "from-file"

    def test_file_missing(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="not found"):
            resolve_credential(f"file:{tmp_path / 'nope'}")

    def test_secret_indirection_resolved_on_load(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MY_CIS_SECRET", "s3cret")
        data = _settings_data()
        data["client_config"]["client_secret"] = "env:MY_CIS_SECRET"
        path = _write_json(isolated_config / "s.json", data)

        assert load_settings(path).client_config.client_secret == "s3cret"


# ---------------------------------------------------------------------------
# Precedence
# ---------------------------------------------------------------------------


class TestPrecedence:
    def test_cli_path_wins(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        cli = _write_json(isolated_config / "cli.json", _settings_data())
        env = _write_json(isolated_config / "env.json", _settings_data())
        monkeypatch.setenv("CIS_CLIENT_CONFIG", str(env))

        assert find_settings_file(str(cli)) == cli

    def test_env_var_beats_project_file(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        env = _write_json(isolated_config / "env.json", _settings_data())
        _write_json(isolated_config / "cis-client.json", _settings_data())
        monkeypatch.setenv("CIS_CLIENT_CONFIG", str(env))

        assert find_settings_file() == env

    def test_project_file_beats_user_config(self, isolated_config: Path) -> None:
        project = _write_yaml(isolated_config / "cis-client.yaml", _settings_data())
        _write_json(get_config_dir() / "settings.json", _settings_data())

        assert find_settings_file() == project

    def test_user_config_dir(self, isolated_config: Path) -> None:
        user = _write_json(get_config_dir() / "settings.json", _settings_data())

        assert find_settings_file() == user

    def test_nothing_found(self, isolated_config: Path) -> None:
        assert find_settings_file() is None

    def test_explicit_missing_path_is_reported(self, isolated_config: Path) -> None:
        with pytest.raises(ConfigError, match="not found"):
            resolve_settings(str(isolated_config / "missing.yaml"))

    def test_environment_only(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        for var, value in {
            "CIS_CLIENT_ID": "abc",
            "CIS_CLIENT_SECRET": "shh",
            "CIS_AUDIENCE": "api.sso.mozilla.com",
            "CIS_TOKEN_ENDPOINT": "https://auth.example/oauth/token",
            "CIS_PERSON_API_USER_ENDPOINT": "https://person.example/v2/user",
            "CIS_CHANGE_API_USER_ENDPOINT": "https://change.example/v2/user",
        }.items():
            monkeypatch.setenv(var, value)

        settings = resolve_settings()

        assert settings.client_config.token_endpoint == "https://auth.example/oauth/token"
        assert settings.client_config.scopes == ""

    def test_environment_only_incomplete(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CIS_CLIENT_ID", "abc")

        with pytest.raises(ConfigError, match="environment"):
            resolve_settings()

