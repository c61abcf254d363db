"""
Tests for load_from_env and print_config_summary.
"""

import pytest
from pydantic import ValidationError

from onebun_requests import CustomAuth, OneBunAuth, RequestsOptions
from onebun_requests.core.env_config import load_from_env, load_settings, print_config_summary


class TestLoadFromEnv:

    def test_defaults(self):
        options = load_from_env()

        assert isinstance(options, RequestsOptions)
        assert options.base_url is None
        assert options.timeout == 10000
        assert options.auth is None
        assert options.logging is None
        assert options.retry_policy.max_retries == 3

    def test_env_file(self, tmp_path):
        env_file = tmp_path / ".env.test"
        env_file.write_text(
            "ONEBUN_REQUESTS_BASE_URL=https://orders.internal\n"
            "ONEBUN_REQUESTS_RETRY_MAX_RETRIES=1\n"
            "ONEBUN_REQUESTS_AUTH_TYPE=onebun\n"
            "ONEBUN_REQUESTS_AUTH_SERVICE_ID=billing\n"
            "ONEBUN_REQUESTS_AUTH_SECRET_KEY=s3cret\n"
        )

        options = load_from_env(str(env_file))

        assert options.base_url == "https://orders.internal"
        assert options.retry_policy.max_retries == 1
        assert options.auth == OneBunAuth("billing", "s3cret")

    def test_default_dotenv_in_cwd(self, tmp_path):
        (tmp_path / ".env").write_text("ONEBUN_REQUESTS_TIMEOUT=1500\n")
        assert load_from_env().timeout == 1500

    def test_environment_beats_env_file(self, tmp_path, monkeypatch):
        env_file = tmp_path / "custom.env"
        env_file.write_text("ONEBUN_REQUESTS_BASE_URL=https://from-file\n")
        monkeypatch.setenv("ONEBUN_REQUESTS_BASE_URL", "https://from-env")

        assert load_from_env(str(env_file)).base_url == "https://from-env"

    def test_overrides_win(self, monkeypatch):
        monkeypatch.setenv("ONEBUN_REQUESTS_BASE_URL", "https://from-env")

        options = load_from_env(base_url="https://override", metrics=False)

        assert options.base_url == "https://override"
        assert options.metrics is False

    def test_logging(self, tmp_path):
        options = load_from_env(
            log_enabled=True,
            log_format="json",
            log_enable_console=False,
            log_enable_file=True,
            log_file_path=str(tmp_path / "out.log"),
        )
        assert options.logging.enable_file is True

    def test_invalid(self):
        with pytest.raises(ValidationError):
            load_from_env(retry_max_retries=-1)

    def test_load_settings(self):
        assert load_settings(user_agent="orders/2.0").user_agent == "orders/2.0"


class TestPrintConfigSummary:

    def test_masks_secrets(self, capsys):
        print_config_summary(load_from_env(
            base_url="https://orders.internal",
            auth_type="onebun",
            auth_service_id="billing",
            auth_secret_key="super-secret-value",
        ))

        output = capsys.readouterr().out
        assert "base_url: https://orders.internal" in output
        assert "auth: onebun" in output
        assert "service_id=billing" in output
        assert "super-secret-value" not in output
        assert "supe***alue" in output

    def test_api_key_value_masked(self, capsys):
        print_config_summary(load_from_env(
            auth_type="apikey", auth_api_key_name="X-Api-Key", auth_api_key_value="abcdefghijkl"
        ))
        output = capsys.readouterr().out
        assert "abcdefghijkl" not in output
        assert "key=X-Api-Key" in output

    def test_custom_auth_type_only(self, capsys):
        print_config_summary(RequestsOptions(auth=CustomAuth(headers={"X-Secret": "hidden"})))
        output = capsys.readouterr().out
        assert "auth: custom" in output
        assert "hidden" not in output

    def test_logging_section(self, capsys, tmp_path):
        print_config_summary(load_from_env(
            log_enabled=True, log_enable_file=True, log_file_path=str(tmp_path / "a.log")
        ))
        output = capsys.readouterr().out
        assert "logging: level=INFO, format=text" in output
        assert "a.log" in output
