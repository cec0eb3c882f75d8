"""YAML configuration loader and validator."""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import yaml

from wolnet.core.mac import MacAddressError, parse_mac
from wolnet.core.machine import Machine

DEFAULT_LISTEN = "0.0.0.0:7777"
DEFAULT_STATUS_INTERVAL = 5.0


class ConfigError(Exception):
    """Raised for invalid or missing configuration."""


@dataclass(frozen=True)
class Settings:
    """Server and ping settings."""

    listen_host: str = "0.0.0.0"
    listen_port: int = 7777
    password: Optional[str] = None
    # Overrides the per-process flash cookie secret when set.
    secret: Optional[str] = None
    status_interval: float = DEFAULT_STATUS_INTERVAL
    privileged: bool = False


def load_config(path: Path) -> Optional[dict[str, Any]]:
    """
    Load configuration from a YAML file.

    Args:
        path: Path to the YAML config file

    Returns:
        Parsed configuration dictionary, or None if file is empty

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If YAML is invalid
    """
    with open(path) as f:
        result: Optional[dict[str, Any]] = yaml.safe_load(f)
        return result


def parse_listen(value: str) -> tuple[str, int]:
    """
    Parse a ``host:port`` listen address. An empty host (":7777") means all interfaces.

    Raises:
        ConfigError: If the value is not host:port or the port is invalid
    """
    host, sep, port = str(value).rpartition(":")
    if not sep or not port.isdigit() or not 0 < int(port) < 65536:
        raise ConfigError(f"invalid listen address '{value}' (expected host:port)")
    host = host.strip("[]") or "0.0.0.0"
    return host, int(port)


def validate_config(config: dict[str, Any]) -> list[str]:
    """
    Validate a loaded configuration dictionary.

    Returns:
        List of validation error messages (empty list = valid)
    """
    errors: list[str] = []

    if not isinstance(config, dict):
        return ["Config root must be a YAML mapping"]

    server = config.get("server", {}) or {}
    if not isinstance(server, dict):
        errors.append("'server' must be a mapping")
    else:
        if "listen" in server:
            try:
                parse_listen(server["listen"])
            except ConfigError as exc:
                errors.append(f"server.listen: {exc}")
        interval = server.get("status_interval", DEFAULT_STATUS_INTERVAL)
        if isinstance(interval, bool) or not isinstance(interval, (int, float)) or interval <= 0:
            errors.append("server.status_interval must be a positive number of seconds")
        # All-digit values load from YAML as int; settings_from_config turns them into text.
        for key in ("password", "secret"):
            value = server.get(key)
            if value is not None and (isinstance(value, bool) or not isinstance(value, (str, int))):
                errors.append(f"server.{key} must be a string")

    ping = config.get("ping", {}) or {}
    if not isinstance(ping, dict):
        errors.append("'ping' must be a mapping")
    elif not isinstance(ping.get("privileged", False), bool):
        errors.append("ping.privileged must be true or false")

    machines = config.get("machines")
    if machines is None:
        errors.append("'machines' key is required")
        return errors

    if not isinstance(machines, list):
        errors.append("'machines' must be a list")
        return errors

    seen: set[str] = set()
    for i, machine in enumerate(machines):
        prefix = f"machines[{i}]"
        if not isinstance(machine, dict):
            errors.append(f"{prefix}: must be a mapping")
            continue
        for field in ("name", "mac"):
            if not machine.get(field):
                errors.append(f"{prefix}: missing required field '{field}'")
        name = str(machine.get("name", "")).strip()
        if name:
            if name.casefold() in seen:
                errors.append(f"{prefix}: duplicate machine name '{name}'")
            seen.add(name.casefold())
        mac = machine.get("mac")
        if mac:
            try:
                parse_mac(str(mac))
            except MacAddressError:
                errors.append(f"{prefix}: invalid mac '{mac}'")
        ip = machine.get("ip")
        if ip is not None and not isinstance(ip, str):
            errors.append(f"{prefix}: ip must be a string")

    return errors


def machines_from_config(config: dict[str, Any]) -> list[Machine]:
    """
    Construct a list of Machine objects from a validated config dict.

    Args:
        config: Parsed and validated config dictionary

    Returns:
        List of Machine instances, in config order
    """
    machines: list[Machine] = []
    for raw in config.get("machines", []) or []:
        ip = raw.get("ip")
        machines.append(
            Machine(
                name=str(raw["name"]).strip(),
                mac=str(raw["mac"]).strip(),
                ip=(str(ip).strip() or None) if ip else None,
            )
        )
    return machines


def _text_or_none(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(value)


def settings_from_config(config: dict[str, Any]) -> Settings:
    """Build Settings from the ``server`` and ``ping`` sections, applying defaults."""
    server = config.get("server", {}) or {}
    ping = config.get("ping", {}) or {}
    host, port = parse_listen(server.get("listen", DEFAULT_LISTEN))
    return Settings(
        listen_host=host,
        listen_port=port,
        password=_text_or_none(server.get("password")),
        secret=_text_or_none(server.get("secret")),
        status_interval=float(server.get("status_interval", DEFAULT_STATUS_INTERVAL)),
        privileged=bool(ping.get("privileged", False)),
    )
