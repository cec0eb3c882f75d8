"""Errors raised by the wake and status engines."""

from typing import Optional


class WakeError(Exception):
    """Base error for a magic packet that could not be delivered."""


class InterfaceEnumerationError(WakeError):
    """Raised when the list of network interfaces cannot be read."""


class DeliveryError(WakeError):
    """Raised when every broadcast target and the global fallback failed."""

    def __init__(self, message: str, last_interface_error: Optional[OSError] = None) -> None:
        super().__init__(message)
        self.last_interface_error = last_interface_error


class ProbeError(Exception):
    """Raised when an echo probe could not be built or run."""
