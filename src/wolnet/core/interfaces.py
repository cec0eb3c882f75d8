"""Network interface snapshots taken from the operating system."""

import logging
import socket
from dataclasses import dataclass
from typing import Optional

import psutil

from wolnet.core.errors import InterfaceEnumerationError

logger = logging.getLogger(__name__)

_INET_FAMILIES = (socket.AF_INET, socket.AF_INET6)


@dataclass(frozen=True)
class InterfaceAddress:
    """One address assigned to an interface, with its netmask as reported by the OS."""

    address: str
    netmask: Optional[str] = None


@dataclass(frozen=True)
class InterfaceSnapshot:
    """Flags and addresses of a single interface at the moment it was queried."""

    name: str
    up: bool
    loopback: bool
    broadcast: bool
    addresses: tuple[InterfaceAddress, ...] = ()

    @property
    def can_broadcast(self) -> bool:
        return self.up and self.broadcast and not self.loopback


def _parse_flags(raw: str) -> set[str]:
    return {f.strip().lower() for f in raw.split(",") if f.strip()}


def list_interfaces() -> list[InterfaceSnapshot]:
    """
    Query the OS for every network interface and its addresses.

    Nothing is cached: each call reflects the interfaces as they are right now.

    Returns:
        One InterfaceSnapshot per interface reported by psutil

    Raises:
        InterfaceEnumerationError: If the interface tables cannot be read
    """
    try:
        stats = psutil.net_if_stats()
        addrs = psutil.net_if_addrs()
    except (OSError, psutil.Error) as exc:
        raise InterfaceEnumerationError(f"cannot list network interfaces: {exc}") from exc

    snapshots: list[InterfaceSnapshot] = []
    for name, entries in addrs.items():
        stat = stats.get(name)
        flags = _parse_flags(getattr(stat, "flags", "") or "")
        inet = [e for e in entries if e.family in _INET_FAMILIES]
        addresses = tuple(
            # Link-local IPv6 addresses carry a "%scope" suffix.
            InterfaceAddress(address=e.address.split("%", 1)[0], netmask=e.netmask)
            for e in inet
        )

        if flags:
            up = "up" in flags
            loopback = "loopback" in flags
            broadcast = "broadcast" in flags
        else:
            # Platforms without interface flags (Windows): infer them.
            up = bool(stat and stat.isup)
            loopback = any(a.address in ("127.0.0.1", "::1") for a in addresses)
            broadcast = any(e.broadcast for e in inet if e.family == socket.AF_INET)

        snapshots.append(
            InterfaceSnapshot(
                name=name, up=up, loopback=loopback, broadcast=broadcast, addresses=addresses
            )
        )

    logger.debug("Found %d network interface(s)", len(snapshots))
    return snapshots
