"""Concurrent reachability polling of configured machines."""

import logging
import threading
from collections.abc import Iterable

from icmplib import ICMPLibError, ping

from wolnet.core.errors import ProbeError
from wolnet.core.machine import Machine

logger = logging.getLogger(__name__)

ONLINE = "online"
OFFLINE = "offline"
UNKNOWN = "unknown"

PROBE_TIMEOUT = 2.0


def probe(address: str, privileged: bool = False, timeout: float = PROBE_TIMEOUT) -> bool:
    """
    Send a single ICMP echo request and wait for the reply.

    Args:
        address: Hostname or IP address to probe
        privileged: Use raw sockets (needs root/CAP_NET_RAW) instead of datagram ICMP sockets
        timeout: Seconds to wait for the reply

    Returns:
        True if a reply was received before the timeout

    Raises:
        ProbeError: If the probe could not be sent (name lookup, socket permissions, …)
    """
    try:
        host = ping(address, count=1, timeout=timeout, privileged=privileged)
    except (ICMPLibError, OSError) as exc:
        raise ProbeError(f"error pinging {address}: {exc}") from exc
    return host.packets_received > 0


def machine_status(machine: Machine, privileged: bool = False, timeout: float = PROBE_TIMEOUT) -> str:
    """Return "online", "offline" or "unknown" for one machine. Never raises ProbeError."""
    if not machine.ip:
        return UNKNOWN
    try:
        reachable = probe(machine.ip, privileged=privileged, timeout=timeout)
    except ProbeError as exc:
        logger.warning("Error getting status for machine %s: %s", machine.name, exc)
        return UNKNOWN
    return ONLINE if reachable else OFFLINE


def poll_all(
    machines: Iterable[Machine],
    privileged: bool = False,
    timeout: float = PROBE_TIMEOUT,
) -> dict[str, str]:
    """
    Probe every machine concurrently and return a fresh name -> status map.

    Each machine with an IP gets its own thread and exactly one echo probe.
    The call blocks until every probe has finished or timed out. A failing
    probe yields "unknown" for that machine only.

    Args:
        machines: Machines to poll
        privileged: Passed through to the ICMP probe
        timeout: Per-probe timeout in seconds (default: 2)

    Returns:
        Mapping with exactly one entry per machine
    """
    statuses: dict[str, str] = {}
    lock = threading.Lock()

    def _poll(machine: Machine) -> None:
        status = UNKNOWN
        try:
            status = machine_status(machine, privileged=privileged, timeout=timeout)
        except Exception as exc:
            logger.error("Unexpected error polling machine %s: %s", machine.name, exc)
        with lock:
            statuses[machine.name] = status

    threads = []
    for machine in machines:
        if not machine.ip:
            with lock:
                statuses[machine.name] = UNKNOWN
            continue
        t = threading.Thread(target=_poll, args=(machine,), name=f"poll-{machine.name}", daemon=True)
        t.start()
        threads.append(t)

    for t in threads:
        t.join()

    logger.debug("Polled %d machine(s): %s", len(statuses), statuses)
    return statuses
