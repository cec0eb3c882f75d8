"""Wake-on-LAN functionality."""

import logging

from wolnet.core.machine import Machine
from wolnet.core.mac import parse_mac
from wolnet.core.magicpacket import WOL_PORT, MagicPacket

logger = logging.getLogger(__name__)


def wake(machine: Machine, port: int = WOL_PORT) -> list[str]:
    """
    Send a Wake-on-LAN magic packet to wake a configured machine.

    When the machine has an IP address, a unicast packet is sent there first
    (Wake-on-WAN). A unicast failure is logged and never stops the broadcast
    that follows.

    Args:
        machine: Machine to wake
        port: UDP port for the unicast packet (default: 9)

    Returns:
        Broadcast addresses the packet reached

    Raises:
        MacAddressError: If the machine's MAC address is malformed
        WakeError: If the broadcast could not be delivered anywhere
    """
    mac = parse_mac(machine.mac)
    packet = MagicPacket(mac)

    if machine.ip:
        address = f"[{machine.ip}]:{port}" if ":" in machine.ip else f"{machine.ip}:{port}"
        logger.info("Sending unicast magic packet for %s to %s", machine.name, address)
        try:
            packet.send(address)
        except (OSError, ValueError) as exc:
            logger.warning("Unicast magic packet to %s failed: %s", address, exc)

    logger.info("Broadcasting magic packet for %s (%s)", machine.name, mac)
    return packet.broadcast()
