"""wolnet — Wake-on-LAN sender with a CLI and web UI."""

__version__ = "0.1.0"
