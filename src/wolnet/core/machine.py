"""Configured machines."""

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Machine:
    """A machine that can be woken, as listed in the config file."""

    name: str
    mac: str
    # Known IP address. Enables unicast wake and status probing.
    ip: Optional[str] = None


def find_machine(machines: Iterable[Machine], name: str) -> Optional[Machine]:
    """Return the machine whose name matches ``name`` case-insensitively, or None."""
    wanted = name.strip().casefold()
    return next((m for m in machines if m.name.casefold() == wanted), None)
