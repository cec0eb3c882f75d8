"""Wake-on-LAN magic packet construction and delivery."""

import ipaddress
import logging
import socket
from collections.abc import Iterable, Iterator
from typing import Optional

from wolnet.core.errors import DeliveryError
from wolnet.core.interfaces import InterfaceSnapshot, list_interfaces
from wolnet.core.mac import HardwareAddress

logger = logging.getLogger(__name__)

WOL_PORT = 9
GLOBAL_BROADCAST = "255.255.255.255"
PACKET_SIZE = 102

_SYNC_STREAM = b"\xff" * 6


def build_packet(mac: HardwareAddress) -> bytes:
    """Return the 102-byte payload: six 0xFF bytes, then the address 16 times."""
    return _SYNC_STREAM + mac.octets * 16


def broadcast_address(ip: str, netmask: str) -> Optional[str]:
    """
    Compute the directed broadcast address of a subnet.

    Each octet is ``ip | ~mask``. A 16-byte mask is narrowed to its trailing
    4 bytes.

    Args:
        ip: Address assigned to the interface
        netmask: Subnet mask of that address

    Returns:
        Dotted-quad broadcast address, or None when ``ip`` has no IPv4 form

    Raises:
        ValueError: If either argument is not an IP address
    """
    addr = ipaddress.ip_address(ip)
    if isinstance(addr, ipaddress.IPv6Address):
        if addr.ipv4_mapped is None:
            return None
        addr = addr.ipv4_mapped

    mask = ipaddress.ip_address(netmask).packed
    if len(mask) == 16:
        mask = mask[12:]

    octets = bytes(a | (~m & 0xFF) for a, m in zip(addr.packed, mask))
    return str(ipaddress.IPv4Address(octets))


def broadcast_targets(interfaces: Iterable[InterfaceSnapshot]) -> Iterator[str]:
    """Yield the broadcast address of every IPv4 address on every usable interface."""
    for iface in interfaces:
        if not iface.can_broadcast:
            logger.debug(
                "Skipping interface %s (up=%s loopback=%s broadcast=%s)",
                iface.name,
                iface.up,
                iface.loopback,
                iface.broadcast,
            )
            continue
        for entry in iface.addresses:
            if not entry.netmask:
                continue
            try:
                target = broadcast_address(entry.address, entry.netmask)
            except ValueError as exc:
                logger.debug("Skipping address %s on %s: %s", entry.address, iface.name, exc)
                continue
            if target is not None:
                yield target


def split_host_port(address: str) -> tuple[str, int]:
    """
    Split a ``host:port`` string. IPv6 hosts must be bracketed (``[::1]:9``).

    Raises:
        ValueError: If the string is not a valid host:port pair
    """
    host, sep, port = address.rpartition(":")
    if not sep or not host or not port.isdigit():
        raise ValueError(f"address '{address}' is not in host:port form")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    elif ":" in host:
        raise ValueError(f"IPv6 address in '{address}' must be enclosed in brackets")
    if not 0 < int(port) < 65536:
        raise ValueError(f"port {port} out of range")
    return host, int(port)


def _send_udp(payload: bytes, address: tuple, family: int = socket.AF_INET) -> None:
    with socket.socket(family, socket.SOCK_DGRAM) as sock:
        if family == socket.AF_INET:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_BROADCAST, 1)
        sock.connect(address)
        sock.send(payload)


class MagicPacket:
    """A magic packet for one hardware address, plus the ways to deliver it."""

    def __init__(self, mac: HardwareAddress) -> None:
        self.mac = mac
        self.payload = build_packet(mac)

    def broadcast(self, port: int = WOL_PORT) -> list[str]:
        """
        Broadcast the packet on every usable local interface.

        Interfaces that are down, loopback, or not broadcast-capable are skipped.
        One successful send is enough. When every send fails (or there is nothing
        to send on), a single attempt is made to 255.255.255.255.

        Args:
            port: Destination UDP port (default: 9)

        Returns:
            Broadcast addresses the packet was written to

        Raises:
            InterfaceEnumerationError: If interfaces could not be listed; nothing is sent
            DeliveryError: If every target and the global fallback failed
        """
        interfaces = list_interfaces()

        sent: list[str] = []
        last_error: Optional[OSError] = None
        for target in broadcast_targets(interfaces):
            try:
                _send_udp(self.payload, (target, port))
            except OSError as exc:
                logger.warning("Failed to send magic packet to %s:%d: %s", target, port, exc)
                last_error = exc
                continue
            logger.info("Sent magic packet for %s to %s:%d", self.mac, target, port)
            sent.append(target)

        if sent:
            return sent

        logger.info("No interface broadcast succeeded, falling back to %s", GLOBAL_BROADCAST)
        try:
            _send_udp(self.payload, (GLOBAL_BROADCAST, port))
        except OSError as exc:
            raise DeliveryError(
                f"failed to send magic packet for {self.mac}: {exc}",
                last_interface_error=last_error,
            ) from exc
        logger.info("Sent magic packet for %s to %s:%d", self.mac, GLOBAL_BROADCAST, port)
        return [GLOBAL_BROADCAST]

    def send(self, address: str) -> None:
        """
        Send the packet once to a single ``host:port`` (unicast, Wake-on-WAN).

        No fallback and no retry: resolution and socket errors propagate as OSError.

        Raises:
            ValueError: If ``address`` is not in host:port form
            OSError: If the host cannot be resolved or the write fails
        """
        host, port = split_host_port(address)
        family, _, _, _, sockaddr = socket.getaddrinfo(host, port, type=socket.SOCK_DGRAM)[0]
        _send_udp(self.payload, sockaddr, family)
        logger.info("Sent magic packet for %s to %s", self.mac, address)


def broadcast(mac: HardwareAddress, port: int = WOL_PORT) -> list[str]:
    """Build a packet for ``mac`` and broadcast it. See MagicPacket.broadcast."""
    return MagicPacket(mac).broadcast(port)


def send_unicast(mac: HardwareAddress, address: str) -> None:
    """Build a packet for ``mac`` and send it to ``address``. See MagicPacket.send."""
    MagicPacket(mac).send(address)
