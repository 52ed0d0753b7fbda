"""Modbus TCP client for Nilan Compact P units with a CTS700 controller."""

from __future__ import annotations

from .client import CTS700Client
from .connection import ConnectionState, TcpConnectionManager
from .coordinator import CTS700Coordinator
from .exceptions import (
    CTS700Error,
    EmptyScheduleError,
    InvalidEnumValueError,
    InvalidResponseError,
    NotConnectedError,
    OutOfRangeError,
    WriteVerificationError,
)
from .models import (
    DateTime,
    OperationMode,
    PauseOption,
    Readings,
    Settings,
    VentilationMode,
    WeekScheduleRecord,
)

__all__ = [
    "CTS700Client",
    "CTS700Coordinator",
    "CTS700Error",
    "ConnectionState",
    "DateTime",
    "EmptyScheduleError",
    "InvalidEnumValueError",
    "InvalidResponseError",
    "NotConnectedError",
    "OperationMode",
    "OutOfRangeError",
    "PauseOption",
    "Readings",
    "Settings",
    "TcpConnectionManager",
    "VentilationMode",
    "WeekScheduleRecord",
    "WriteVerificationError",
]
