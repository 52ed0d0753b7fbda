"""High level client for the CTS700 controller.

:class:`CTS700Client` exposes one coroutine per domain quantity. Every
operation issues its register reads and writes one after another on the
client's own connection manager. A failing read aborts the whole fetch;
nothing is retried here, reconnection is left to the connection manager.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Any

from pymodbus.client import AsyncModbusTcpClient

from .codec import (
    decode_date_time,
    decode_fan_speed,
    decode_humidity,
    decode_operation_mode,
    decode_pause_option,
    decode_temperature,
    decode_ventilation_mode,
    decode_week_schedule_table,
    encode_enum,
    encode_fan_speed,
    encode_temperature,
    registers_to_bytes,
)
from .const import (
    DEFAULT_NAME,
    DEFAULT_PORT,
    DEFAULT_SLAVE_ID,
    DEFAULT_TIMEOUT,
    DHW_SET_POINT_MAX,
    DHW_SET_POINT_MIN,
    RECONNECT_COOLDOWN,
    ROOM_SET_POINT_MAX,
    ROOM_SET_POINT_MIN,
    WEEK_PROGRAM_COUNT,
)
from .connection import BaseConnectionManager, TcpConnectionManager
from .exceptions import CTS700Error, EmptyScheduleError, WriteVerificationError
from .models import (
    DateTime,
    PauseOption,
    Readings,
    Settings,
    VentilationMode,
    WeekScheduleRecord,
)
from .registers import Register, address_of, is_writable, register_count
from .schedule import resolve_active

_LOGGER = logging.getLogger(__name__)


def _acknowledged_value(response: Any) -> int | None:
    """Return the register value echoed back by a write response."""

    # pymodbus >= 3.7 reports the echo in ``registers``, older releases in ``value``
    registers = getattr(response, "registers", None)
    if registers:
        return int(registers[0])
    value = getattr(response, "value", None)
    return None if value is None else int(value)


class CTS700Client:
    """Register level API of one CTS700 controller."""

    def __init__(self, connection: BaseConnectionManager, *, name: str = DEFAULT_NAME) -> None:
        self.connection = connection
        self.name = name

    @classmethod
    async def create(
        cls,
        host: str,
        *,
        port: int = DEFAULT_PORT,
        slave_id: int = DEFAULT_SLAVE_ID,
        timeout: float = DEFAULT_TIMEOUT,
        name: str = DEFAULT_NAME,
        reconnect_cooldown: float = RECONNECT_COOLDOWN,
        clock: Callable[[], float] = time.monotonic,
        client_factory: Callable[..., Any] = AsyncModbusTcpClient,
    ) -> CTS700Client:
        """Create a client and make the first connection attempt.

        A failed first attempt is not fatal; calls fail with
        :class:`~.exceptions.NotConnectedError` until a reconnect succeeds.
        """

        connection = TcpConnectionManager(
            host=host,
            port=port,
            slave_id=slave_id,
            timeout=timeout,
            reconnect_cooldown=reconnect_cooldown,
            clock=clock,
            client_factory=client_factory,
        )
        client = cls(connection, name=name)
        await connection.connect()
        return client

    async def close(self) -> None:
        await self.connection.close()

    # ------------------------------------------------------------------
    # Register access
    # ------------------------------------------------------------------

    async def _read_single(self, register: Register) -> int:
        registers = await self.connection.read_holding_registers(address_of(register), 1)
        return registers[0]

    async def _read_block(self, register: Register) -> bytes:
        registers = await self.connection.read_holding_registers(
            address_of(register), register_count(register)
        )
        return registers_to_bytes(registers)

    async def _read_temperature(self, register: Register) -> float:
        return decode_temperature(await self._read_single(register))

    async def _write(self, register: Register, value: int) -> int:
        """Write ``value`` to ``register`` and verify the acknowledged value."""

        if not is_writable(register):
            raise CTS700Error(f"Register {register.name} is read-only")

        address = address_of(register)
        response = await self.connection.write_register(address, value)
        acknowledged = _acknowledged_value(response)
        if acknowledged != value:
            _LOGGER.error(
                "%s: writing %s to %s was acknowledged with %s",
                self.name,
                value,
                register.name,
                acknowledged,
            )
            raise WriteVerificationError(address, value, acknowledged)
        _LOGGER.debug("%s: wrote %s to %s", self.name, value, register.name)
        return value

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def fetch_date_time(self) -> DateTime:
        """Read the controller clock."""

        return decode_date_time(await self._read_block(Register.CURRENT_TIME))

    async def fetch_readings(self) -> Readings:
        """Read all sensor values and the controller clock."""

        readings = Readings(
            room_temperature=await self._read_temperature(Register.MASTER_SENSOR_TEMPERATURE),
            outdoor_temperature=await self._read_temperature(Register.OUTDOOR_TEMPERATURE),
            panel_temperature=await self._read_temperature(Register.PANEL_TEMPERATURE),
            actual_humidity=decode_humidity(await self._read_single(Register.ACTUAL_HUMIDITY)),
            dhw_tank_top_temperature=await self._read_temperature(
                Register.DHW_TOP_TANK_TEMPERATURE
            ),
            dhw_tank_bottom_temperature=await self._read_temperature(
                Register.DHW_BOTTOM_TANK_TEMPERATURE
            ),
            current_date_time=await self.fetch_date_time(),
        )
        _LOGGER.debug("%s: fetched readings %s", self.name, readings)
        return readings

    async def fetch_settings(self) -> Settings:
        """Read the user adjustable settings and the current operation mode."""

        settings = Settings(
            paused=decode_pause_option(await self._read_single(Register.PAUSE)),
            fan_speed=decode_fan_speed(await self._read_single(Register.FAN_SPEED)),
            room_temperature_set_point=await self._read_temperature(
                Register.ROOM_TEMPERATURE_SET_POINT
            ),
            dhw_temperature_set_point=await self._read_temperature(Register.DHW_SET_POINT),
            ventilation_mode=decode_ventilation_mode(
                await self._read_single(Register.VENTILATION_MODE)
            ),
            operation_mode=decode_operation_mode(await self._read_single(Register.OPERATION_MODE)),
        )
        _LOGGER.debug("%s: fetched settings %s", self.name, settings)
        return settings

    async def fetch_week_program(self) -> list[WeekScheduleRecord]:
        """Read the configured entries of the weekly program."""

        data = await self._read_block(Register.FIRST_WEEK_PROGRAM)
        return decode_week_schedule_table(data, WEEK_PROGRAM_COUNT)

    async def fetch_active_week_program_for_date_time(self, now: DateTime) -> WeekScheduleRecord:
        """Return the weekly program entry in effect at ``now``."""

        records = await self.fetch_week_program()
        active = resolve_active(records, now)
        if active is None:
            raise EmptyScheduleError(f"{self.name}: weekly program has no entries")
        _LOGGER.debug("%s: active week program at %s is %s", self.name, now, active)
        return active

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def write_fan_speed(self, value: float) -> int:
        return await self._write(Register.FAN_SPEED, encode_fan_speed(value))

    async def write_room_temperature_set_point(self, value: float) -> int:
        raw = encode_temperature(value, ROOM_SET_POINT_MIN, ROOM_SET_POINT_MAX)
        return await self._write(Register.ROOM_TEMPERATURE_SET_POINT, raw)

    async def write_dhw_set_point(self, value: float) -> int:
        raw = encode_temperature(value, DHW_SET_POINT_MIN, DHW_SET_POINT_MAX)
        return await self._write(Register.DHW_SET_POINT, raw)

    async def write_pause_option(self, option: PauseOption | int) -> int:
        return await self._write(Register.PAUSE, encode_enum(PauseOption, option))

    async def write_ventilation_mode(self, mode: VentilationMode | int) -> int:
        return await self._write(Register.VENTILATION_MODE, encode_enum(VentilationMode, mode))

