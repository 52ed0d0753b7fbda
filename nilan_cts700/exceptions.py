"""Custom exceptions for the Nilan CTS700 Modbus client."""
from __future__ import annotations


class CTS700Error(Exception):
    """Base exception for the CTS700 client."""


class NotConnectedError(CTS700Error):
    """Operation attempted while no Modbus session is open."""


class OutOfRangeError(CTS700Error, ValueError):
    """Value read from or written to the device is outside its domain."""


class InvalidEnumValueError(CTS700Error, ValueError):
    """Raw register value does not map to a member of the expected enum."""


class WriteVerificationError(CTS700Error):
    """Device acknowledged a write with a different value than sent."""

    def __init__(self, address: int, expected: int, actual: int | None) -> None:
        super().__init__(
            f"Register {address} acknowledged {actual!r} instead of {expected}"
        )
        self.address = address
        self.expected = expected
        self.actual = actual


class EmptyScheduleError(CTS700Error):
    """Weekly program table does not contain any records."""


class InvalidResponseError(CTS700Error):
    """Device returned an error response or an unexpected amount of data."""
