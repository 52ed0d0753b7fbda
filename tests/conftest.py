"""Test configuration for the CTS700 Modbus client."""

from __future__ import annotations

import struct
from collections.abc import Iterable

import pytest

from nilan_cts700.client import CTS700Client
from nilan_cts700.connection import TcpConnectionManager
from nilan_cts700.registers import Register


class FakeResponse:
    """Minimal stand-in for a pymodbus response."""

    def __init__(self, registers: list[int] | None = None, error: bool = False) -> None:
        self.registers = registers or []
        self._error = error

    def isError(self) -> bool:
        return self._error


class FakeModbusClient:
    """In-memory holding register store with the pymodbus client interface."""

    def __init__(self, host: str = "192.0.2.10", port: int = 502, timeout: float = 5) -> None:
        self.host = host
        self.port = port
        self.timeout = timeout
        self.connected = False
        self.closed = False
        self.connect_result = True
        self.reconnect_delay: float | None = None
        self.registers: dict[int, int] = {}
        self.calls: list[tuple[str, int, int]] = []
        self.fail_with: BaseException | None = None
        self.error_response = False
        self.ack_override: int | None = None

    async def connect(self) -> bool:
        self.connected = self.connect_result
        return self.connect_result

    def close(self) -> None:
        self.connected = False
        self.closed = True

    async def read_holding_registers(self, address, *, count=1, device_id=1):
        self.calls.append(("read_holding_registers", address, count))
        if self.fail_with is not None:
            raise self.fail_with
        if self.error_response:
            return FakeResponse(error=True)
        return FakeResponse([self.registers.get(address + i, 0) for i in range(count)])

    async def write_register(self, address, value, *, device_id=1):
        self.calls.append(("write_register", address, value))
        if self.fail_with is not None:
            raise self.fail_with
        if self.error_response:
            return FakeResponse(error=True)
        self.registers[address] = value
        ack = value if self.ack_override is None else self.ack_override
        return FakeResponse([ack])

    def set_block(self, address: int, words: Iterable[int]) -> None:
        for offset, word in enumerate(words):
            self.registers[address + offset] = word


def pack_words(data: bytes) -> list[int]:
    """Split ``data`` into big-endian register words."""

    if len(data) % 2:
        data += b"\x00"
    return [int.from_bytes(data[i : i + 2], "big") for i in range(0, len(data), 2)]


def pack_week_program(records: Iterable[tuple], slots: int = 14) -> bytes:
    """Pack ``(week_day, hour, minute, temp, dhw_temp, flags, fan)`` tuples.

    Temperatures are given in tenths of a degree. Unused slots are zeroed.
    """

    data = b"".join(struct.pack(">BBBhhBH", *record) for record in records)
    return data.ljust(slots * 10, b"\x00")


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_modbus() -> FakeModbusClient:
    """Fake device preloaded with plausible register values."""

    fake = FakeModbusClient()
    fake.registers.update(
        {
            Register.MASTER_SENSOR_TEMPERATURE: 215,
            Register.OUTDOOR_TEMPERATURE: 0xFFCE,
            Register.PANEL_TEMPERATURE: 220,
            Register.ACTUAL_HUMIDITY: 45,
            Register.DHW_TOP_TANK_TEMPERATURE: 523,
            Register.DHW_BOTTOM_TANK_TEMPERATURE: 401,
            Register.PAUSE: 0,
            Register.FAN_SPEED: 60,
            Register.ROOM_TEMPERATURE_SET_POINT: 225,
            Register.DHW_SET_POINT: 500,
            Register.VENTILATION_MODE: 2,
            Register.OPERATION_MODE: 3,
        }
    )
    # 10:15:30, day 17, week day 3, month 10, year 22
    fake.set_block(Register.CURRENT_TIME, pack_words(bytes([30, 15, 10, 17, 3, 10, 22, 0])))
    fake.set_block(
        Register.FIRST_WEEK_PROGRAM,
        pack_words(
            pack_week_program(
                [
                    (1, 6, 0, 210, 500, 0, 60),
                    (3, 8, 0, 200, 450, 1, 40),
                    (5, 18, 30, 225, 550, 0, 80),
                ]
            )
        ),
    )
    return fake


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def connection(fake_modbus: FakeModbusClient, clock: FakeClock) -> TcpConnectionManager:
    """Connection manager wired to ``fake_modbus``; not yet connected."""

    def factory(host, port, timeout, reconnect_delay=None):
        fake_modbus.reconnect_delay = reconnect_delay
        fake_modbus.host = host
        fake_modbus.port = port
        fake_modbus.timeout = timeout
        fake_modbus.closed = False
        return fake_modbus

    return TcpConnectionManager(host="192.0.2.10", clock=clock, client_factory=factory)


@pytest.fixture
def client(connection: TcpConnectionManager) -> CTS700Client:
    return CTS700Client(connection, name="Test unit")
