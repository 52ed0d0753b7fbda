"""Connection management for the CTS700 Modbus TCP session.

A connection manager owns the single Modbus session to one controller. Calls
made while the session is down fail immediately with
:class:`~.exceptions.NotConnectedError`. Network failures mark the session
as disconnected and schedule a reconnect in the background; bursts of such
requests collapse into one attempt per cooldown window.
"""

from __future__ import annotations

import asyncio
import errno
import inspect
import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from enum import Enum
from typing import Any

from pymodbus.client import AsyncModbusTcpClient
from pymodbus.exceptions import ConnectionException, ModbusException, ModbusIOException

from .const import DEFAULT_PORT, DEFAULT_SLAVE_ID, DEFAULT_TIMEOUT, RECONNECT_COOLDOWN
from .exceptions import InvalidResponseError, NotConnectedError
from .modbus_helpers import _call_modbus

_LOGGER = logging.getLogger(__name__)

# OS error codes treated as transient network conditions
NETWORK_ERRNOS: frozenset[int] = frozenset(
    {
        errno.ETIMEDOUT,
        errno.ECONNRESET,
        errno.ECONNREFUSED,
        errno.EHOSTUNREACH,
        errno.ENETUNREACH,
        errno.ECONNABORTED,
        errno.EWOULDBLOCK,
        errno.EAGAIN,
        errno.EPIPE,
    }
)


class ConnectionState(Enum):
    """Lifecycle of the Modbus session."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


def is_network_error(exc: BaseException) -> bool:
    """Return whether ``exc`` indicates a transient network failure."""

    if isinstance(exc, (asyncio.TimeoutError, TimeoutError)):
        return True
    if isinstance(exc, (ConnectionException, ModbusIOException)):
        return True
    if isinstance(exc, (ConnectionError, BlockingIOError)):
        return True
    if isinstance(exc, OSError):
        return exc.errno in NETWORK_ERRNOS
    return False


class BaseConnectionManager(ABC):
    """Base interface for Modbus session supervision."""

    def __init__(
        self,
        *,
        slave_id: int = DEFAULT_SLAVE_ID,
        timeout: float = DEFAULT_TIMEOUT,
        reconnect_cooldown: float = RECONNECT_COOLDOWN,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.slave_id = slave_id
        self.timeout = float(timeout)
        self.reconnect_cooldown = max(0.0, float(reconnect_cooldown))
        self.state = ConnectionState.DISCONNECTED
        self.connection_attempts = 0
        self._clock = clock
        self._last_reconnect: float | None = None
        self._reconnect_task: asyncio.Task[bool] | None = None
        # The protocol has no multiplexing, one request at a time
        self._lock = asyncio.Lock()

    @property
    def connected(self) -> bool:
        """Return whether the session is usable."""

        return self.state is ConnectionState.CONNECTED

    @property
    def reconnect_pending(self) -> bool:
        return self._reconnect_task is not None and not self._reconnect_task.done()

    async def connect(self) -> bool:
        """Open the session right away, bypassing the reconnect throttle.

        Failures are logged and reported through the return value. Later
        calls made while disconnected request a throttled reconnect.
        """

        self._last_reconnect = self._clock()
        return await self._attempt_connection()

    def request_reconnect(self) -> bool:
        """Schedule a reconnect attempt in the background.

        The request is dropped when an attempt is already in flight or when
        the previous attempt started less than ``reconnect_cooldown``
        seconds ago. Return whether an attempt was scheduled.
        """

        if self.reconnect_pending:
            _LOGGER.debug("Reconnect to %s already in progress", self.describe())
            return False

        now = self._clock()
        if self._last_reconnect is not None and now - self._last_reconnect < self.reconnect_cooldown:
            _LOGGER.debug(
                "Dropping reconnect request for %s, last attempt %.1fs ago",
                self.describe(),
                now - self._last_reconnect,
            )
            return False

        self._last_reconnect = now
        task = asyncio.get_running_loop().create_task(self._attempt_connection())
        task.add_done_callback(self._reconnect_done)
        self._reconnect_task = task
        return True

    def _reconnect_done(self, task: asyncio.Task[bool]) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            self.state = ConnectionState.DISCONNECTED
            _LOGGER.error("Unexpected error reconnecting to %s: %s", self.describe(), exc)

    async def _attempt_connection(self) -> bool:
        async with self._lock:
            self.connection_attempts += 1
            if self._has_session():
                await self._reset_connection()
            self.state = ConnectionState.CONNECTING
            try:
                await self._connect()
            except (ModbusException, OSError, asyncio.TimeoutError) as exc:
                _LOGGER.warning("Could not connect to %s: %s", self.describe(), exc)
                await self._reset_connection()
                self.state = ConnectionState.DISCONNECTED
                return False
            self.state = ConnectionState.CONNECTED
            _LOGGER.info("Modbus connection established to %s", self.describe())
            return True

    async def call(self, method: str, *args: Any, **kwargs: Any) -> Any:
        """Invoke ``method`` of the underlying client on the live session."""

        async with self._lock:
            client = self._client()
            if not self.connected or client is None:
                self.request_reconnect()
                raise NotConnectedError(f"Not connected to {self.describe()}")
            try:
                return await _call_modbus(
                    getattr(client, method),
                    self.slave_id,
                    *args,
                    timeout=self.timeout,
                    **kwargs,
                )
            except (ModbusException, OSError, asyncio.TimeoutError) as exc:
                if is_network_error(exc):
                    _LOGGER.warning(
                        "Network error talking to %s, scheduling reconnect: %s",
                        self.describe(),
                        exc,
                    )
                    self.state = ConnectionState.DISCONNECTED
                    self.request_reconnect()
                raise

    async def read_holding_registers(self, address: int, count: int = 1) -> list[int]:
        """Read ``count`` holding registers starting at ``address``."""

        response = await self.call("read_holding_registers", address, count=count)
        if response is None or response.isError():
            raise InvalidResponseError(
                f"Error response reading {count} register(s) at {address}: {response}"
            )
        registers = list(getattr(response, "registers", None) or [])
        if len(registers) < count:
            raise InvalidResponseError(
                f"Expected {count} register(s) at {address}, got {len(registers)}"
            )
        return registers[:count]

    async def write_register(self, address: int, value: int) -> Any:
        """Write a single holding register and return the device response."""

        response = await self.call("write_register", address, value)
        if response is None or response.isError():
            raise InvalidResponseError(f"Error response writing register {address}: {response}")
        return response

    async def close(self) -> None:
        """Close the session and cancel any pending reconnect."""

        task = self._reconnect_task
        if task is not None and not task.done():
            task.cancel()
        async with self._lock:
            await self._reset_connection()
            self.state = ConnectionState.DISCONNECTED

    def describe(self) -> str:
        return f"slave {self.slave_id}"

    @abstractmethod
    def _client(self) -> Any:
        """Return the underlying client, if any."""

    @abstractmethod
    def _has_session(self) -> bool:
        """Return whether a session is believed to be open."""

    @abstractmethod
    async def _connect(self) -> None:
        """Open a new session."""

    @abstractmethod
    async def _reset_connection(self) -> None:
        """Close the current session, if any."""


class TcpConnectionManager(BaseConnectionManager):
    """Modbus TCP session to one controller."""

    def __init__(
        self,
        *,
        host: str,
        port: int = DEFAULT_PORT,
        slave_id: int = DEFAULT_SLAVE_ID,
        timeout: float = DEFAULT_TIMEOUT,
        reconnect_cooldown: float = RECONNECT_COOLDOWN,
        clock: Callable[[], float] = time.monotonic,
        client_factory: Callable[..., Any] = AsyncModbusTcpClient,
    ) -> None:
        super().__init__(
            slave_id=slave_id,
            timeout=timeout,
            reconnect_cooldown=reconnect_cooldown,
            clock=clock,
        )
        self.host = host
        self.port = port
        self.client: Any | None = None
        self._client_factory = client_factory

    def describe(self) -> str:
        return f"{self.host}:{self.port} (slave {self.slave_id})"

    def _client(self) -> Any:
        return self.client

    def _has_session(self) -> bool:
        return self.client is not None

    async def _connect(self) -> None:
        self.client = self._client_factory(
            self.host,
            port=self.port,
            timeout=self.timeout,
            # Reconnects are driven by this manager only
            reconnect_delay=0,
        )
        connected = await asyncio.wait_for(self.client.connect(), timeout=self.timeout)
        if not connected:
            raise ConnectionException(f"Could not connect to {self.host}:{self.port}")

    async def _reset_connection(self) -> None:
        if self.client is None:
            return
        try:
            result = self.client.close()
            if inspect.isawaitable(result):
                await result
        finally:
            self.client = None
