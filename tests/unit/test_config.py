"""Tests for application configuration."""

import json
from pathlib import Path

import pytest

from content_gateway.config import Environment, Settings, games_config_path


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "ENV",
        "GAMES_CONFIG_PATH",
        "SQUIDEX_APPS",
        "SQUIDEX_DEFAULT_APP",
        "SQUIDEX_DEFAULT_URL",
        "FIREBASE_FRONTEND_CONFIG",
        "ENABLE_REQUEST_LOGGING",
    ):
        monkeypatch.delenv(name, raising=False)


def _write_config(tmp_path: Path, content: dict) -> Path:
    path = tmp_path / "games.test.json"
    path.write_text(json.dumps(content), encoding="utf-8")
    return path


class TestSettings:
    """Test Settings defaults and environment handling."""

    def test_defaults(self) -> None:
        s = Settings(_env_file=None)
        assert s.env == Environment.DEV
        assert s.enable_request_logging is False
        assert s.is_dev is True
        assert s.is_prod is False
        assert s.squidex_apps == {}
        assert s.squidex_timeout_seconds == 30.0
        assert s.squidex_token_margin_seconds == 300
        assert s.auth_rate_limit == 10
        assert s.api_rate_limit == 100
        assert s.rate_limit_window_seconds == 900

    def test_unknown_environment_falls_back_to_dev(self) -> None:
        s = Settings(env="moon", _env_file=None)  # type: ignore[arg-type]
        assert s.env == Environment.DEV

    def test_environment_is_case_insensitive(self) -> None:
        s = Settings(env="PRODUCTION", _env_file=None)  # type: ignore[arg-type]
        assert s.is_prod is True

    def test_squidex_apps_from_env_json(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(
            "SQUIDEX_APPS",
            json.dumps({"acme": {"clientId": "cid", "clientSecret": "secret"}}),
        )
        s = Settings(_env_file=None)
        app = s.squidex_apps["acme"]
        assert app.client_id == "cid"
        assert app.client_secret.get_secret_value() == "secret"
        assert app.url is None

    def test_client_secret_not_exposed(self) -> None:
        s = Settings(
            squidex_apps={"acme": {"clientId": "cid", "clientSecret": "hunter2"}},
            _env_file=None,
        )
        assert "hunter2" not in repr(s)

    def test_firebase_frontend_config_camel_case(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv(
            "FIREBASE_FRONTEND_CONFIG",
            json.dumps({"apiKey": "web-key", "projectId": "proj", "databaseURL": "db"}),
        )
        s = Settings(_env_file=None)
        assert s.firebase_web_api_key == "web-key"
        assert s.firebase_frontend_config.project_id == "proj"
        assert s.firebase_frontend_config.database_url == "db"


class TestGamesConfigFile:
    def test_path_from_explicit_variable(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GAMES_CONFIG_PATH", "/etc/games.json")
        monkeypatch.setenv("ENV", "staging")
        assert games_config_path() == Path("/etc/games.json")

    def test_path_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ENV", "staging")
        assert games_config_path() == Path("config/games.staging.json")

    def test_no_path_without_variables(self) -> None:
        assert games_config_path() is None

    def test_file_values_loaded(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        path = _write_config(
            tmp_path,
            {
                "SQUIDEX_DEFAULT_URL": "https://cms.example",
                "SQUIDEX_DEFAULT_APP": "acme",
                "SQUIDEX_APPS": {
                    "acme": {"clientId": "cid", "clientSecret": "secret"},
                },
                "GAMES_MEASUREMENT_ID": "G-123",
            },
        )
        monkeypatch.setenv("GAMES_CONFIG_PATH", str(path))

        s = Settings(_env_file=None)

        assert s.squidex_default_url == "https://cms.example"
        assert s.squidex_default_app == "acme"
        assert list(s.squidex_apps) == ["acme"]
        assert s.games_measurement_id == "G-123"

    def test_file_wins_over_env(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        path = _write_config(tmp_path, {"SQUIDEX_DEFAULT_APP": "from-file"})
        monkeypatch.setenv("GAMES_CONFIG_PATH", str(path))
        monkeypatch.setenv("SQUIDEX_DEFAULT_APP", "from-env")

        assert Settings(_env_file=None).squidex_default_app == "from-file"

    def test_env_used_when_file_lacks_key(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        path = _write_config(tmp_path, {})
        monkeypatch.setenv("GAMES_CONFIG_PATH", str(path))
        monkeypatch.setenv("SQUIDEX_DEFAULT_APP", "from-env")

        assert Settings(_env_file=None).squidex_default_app == "from-env"

    def test_missing_file_is_ignored(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("GAMES_CONFIG_PATH", str(tmp_path / "absent.json"))
        assert Settings(_env_file=None).squidex_default_app == ""

    def test_invalid_json_is_ignored(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        monkeypatch.setenv("GAMES_CONFIG_PATH", str(path))
        assert Settings(_env_file=None).squidex_apps == {}
