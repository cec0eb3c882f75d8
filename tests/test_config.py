"""Tests for configuration loading and validation."""

from pathlib import Path

import pytest
import yaml

from wolnet.config.loader import (
    ConfigError,
    Settings,
    load_config,
    machines_from_config,
    parse_listen,
    settings_from_config,
    validate_config,
)
from wolnet.core.machine import Machine


def _valid() -> dict:
    return {
        "server": {"listen": "0.0.0.0:7777", "password": "secret", "status_interval": 5},
        "ping": {"privileged": True},
        "machines": [
            {"name": "desktop", "mac": "AA:BB:CC:DD:EE:FF", "ip": "192.168.1.10"},
            {"name": "nas", "mac": "11-22-33-44-55-66"},
        ],
    }


class TestLoadConfig:
    """Tests for load_config function."""

    def test_load_valid_yaml(self, tmp_path: Path) -> None:
        """Should load a valid YAML config file."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text(yaml.dump(_valid()))

        result = load_config(config_file)

        assert result == _valid()
        assert result["machines"][0]["name"] == "desktop"

    def test_load_missing_file_raises(self) -> None:
        """Should raise FileNotFoundError for missing config."""
        with pytest.raises(FileNotFoundError):
            load_config(Path("/nonexistent/config.yaml"))

    def test_load_empty_file(self, tmp_path: Path) -> None:
        """Should return None for empty YAML file."""
        config_file = tmp_path / "empty.yaml"
        config_file.write_text("")

        assert load_config(config_file) is None

    def test_load_invalid_yaml_raises(self, tmp_path: Path) -> None:
        """Should raise error for invalid YAML syntax."""
        config_file = tmp_path / "invalid.yaml"
        config_file.write_text("invalid: yaml: content: [")

        with pytest.raises(yaml.YAMLError):
            load_config(config_file)


class TestValidateConfig:
    """Tests for validate_config function."""

    def test_valid_config_has_no_errors(self) -> None:
        assert validate_config(_valid()) == []

    def test_minimal_config(self) -> None:
        assert validate_config({"machines": []}) == []

    def test_root_must_be_mapping(self) -> None:
        assert validate_config(["nope"]) == ["Config root must be a YAML mapping"]  # type: ignore[arg-type]

    def test_missing_machines(self) -> None:
        errors = validate_config({"server": {}})
        assert any("'machines'" in e for e in errors)

    def test_machines_not_list(self) -> None:
        errors = validate_config({"machines": {"name": "x"}})
        assert "'machines' must be a list" in errors

    def test_missing_required_fields(self) -> None:
        errors = validate_config({"machines": [{"ip": "10.0.0.1"}]})
        assert "machines[0]: missing required field 'name'" in errors
        assert "machines[0]: missing required field 'mac'" in errors

    @pytest.mark.parametrize("mac", ["invalid-mac", "AA:BB:CC:DD:EE", "AA:BB-CC:DD:EE:FF"])
    def test_invalid_mac(self, mac: str) -> None:
        errors = validate_config({"machines": [{"name": "pc", "mac": mac}]})
        assert errors == [f"machines[0]: invalid mac '{mac}'"]

    def test_duplicate_names_case_insensitive(self) -> None:
        errors = validate_config(
            {
                "machines": [
                    {"name": "Desktop", "mac": "AA:BB:CC:DD:EE:FF"},
                    {"name": "desktop", "mac": "AA:BB:CC:DD:EE:00"},
                ]
            }
        )
        assert errors == ["machines[1]: duplicate machine name 'desktop'"]

    def test_ip_must_be_string(self) -> None:
        errors = validate_config({"machines": [{"name": "pc", "mac": "AA:BB:CC:DD:EE:FF", "ip": 42}]})
        assert errors == ["machines[0]: ip must be a string"]

    def test_bad_listen(self) -> None:
        errors = validate_config({"server": {"listen": "nowhere"}, "machines": []})
        assert len(errors) == 1
        assert errors[0].startswith("server.listen:")

    @pytest.mark.parametrize("interval", [0, -1, "soon", True])
    def test_bad_status_interval(self, interval: object) -> None:
        errors = validate_config({"server": {"status_interval": interval}, "machines": []})
        assert errors == ["server.status_interval must be a positive number of seconds"]

    def test_privileged_must_be_bool(self) -> None:
        errors = validate_config({"ping": {"privileged": "yes"}, "machines": []})
        assert errors == ["ping.privileged must be true or false"]

    @pytest.mark.parametrize("key", ["password", "secret"])
    @pytest.mark.parametrize("value", [["a", "b"], {"x": 1}, True, 1.5])
    def test_password_and_secret_must_be_strings(self, key: str, value: object) -> None:
        errors = validate_config({"server": {key: value}, "machines": []})
        assert errors == [f"server.{key} must be a string"]

    def test_numeric_password_accepted(self) -> None:
        """An unquoted all-digit password loads from YAML as an int."""
        raw = yaml.safe_load("server:\n  password: 4056063\n  secret: 12345\nmachines: []\n")
        assert validate_config(raw) == []


class TestMachinesFromConfig:
    def test_builds_machines(self) -> None:
        machines = machines_from_config(_valid())
        assert machines == [
            Machine(name="desktop", mac="AA:BB:CC:DD:EE:FF", ip="192.168.1.10"),
            Machine(name="nas", mac="11-22-33-44-55-66", ip=None),
        ]

    def test_blank_ip_is_none(self) -> None:
        machines = machines_from_config({"machines": [{"name": "pc", "mac": "AA:BB:CC:DD:EE:FF", "ip": ""}]})
        assert machines[0].ip is None


class TestSettingsFromConfig:
    def test_defaults(self) -> None:
        assert settings_from_config({"machines": []}) == Settings()

    def test_values(self) -> None:
        s = settings_from_config(_valid())
        assert s.listen_host == "0.0.0.0"
        assert s.listen_port == 7777
        assert s.password == "secret"
        assert s.status_interval == 5.0
        assert s.privileged is True

    def test_numeric_password_and_secret_become_text(self) -> None:
        raw = yaml.safe_load("server:\n  password: 4056063\n  secret: 12345\nmachines: []\n")
        s = settings_from_config(raw)
        assert s.password == "4056063"
        assert s.secret == "12345"

    def test_empty_password_disables_auth(self) -> None:
        assert settings_from_config({"server": {"password": ""}, "machines": []}).password is None


class TestParseListen:
    def test_host_and_port(self) -> None:
        assert parse_listen("127.0.0.1:8080") == ("127.0.0.1", 8080)

    def test_empty_host_means_all(self) -> None:
        assert parse_listen(":7777") == ("0.0.0.0", 7777)

    def test_bracketed_ipv6(self) -> None:
        assert parse_listen("[::]:7777") == ("::", 7777)

    @pytest.mark.parametrize("value", ["7777x", "host", "host:99999", "host:"])
    def test_invalid(self, value: str) -> None:
        with pytest.raises(ConfigError):
            parse_listen(value)
