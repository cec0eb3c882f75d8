"""Hardware (MAC) address parsing."""

import re
from dataclasses import dataclass

# Six hex pairs joined by one separator, used consistently: ":" or "-".
_MAC_RE = re.compile(r"^[0-9A-Fa-f]{2}([:\-])(?:[0-9A-Fa-f]{2}\1){4}[0-9A-Fa-f]{2}$")


class MacAddressError(ValueError):
    """Raised when a textual MAC address cannot be parsed."""


@dataclass(frozen=True)
class HardwareAddress:
    """A validated 6-byte physical address."""

    octets: bytes

    def __post_init__(self) -> None:
        if len(self.octets) != 6:
            raise MacAddressError(f"hardware address must be 6 bytes, got {len(self.octets)}")

    def __str__(self) -> str:
        return ":".join(f"{b:02x}" for b in self.octets)


def parse_mac(text: str) -> HardwareAddress:
    """
    Parse a textual MAC address.

    Args:
        text: Address such as "AA:BB:CC:DD:EE:FF" or "aa-bb-cc-dd-ee-ff"

    Returns:
        HardwareAddress holding the 6 raw bytes

    Raises:
        MacAddressError: On wrong length, non-hex digits or a wrong/mixed separator
    """
    value = text.strip()
    if not _MAC_RE.match(value):
        raise MacAddressError(f"invalid MAC address '{text}'")
    return HardwareAddress(bytes.fromhex(value.replace(value[2], "")))
