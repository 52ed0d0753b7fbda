"""Holding register map of the CTS700 controller.

The controller exposes every quantity used by this package as holding
registers. Addresses are fixed by the controller firmware; changing any of
them breaks compatibility with the device.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

from .const import (
    DATE_TIME_REGISTER_COUNT,
    WEEK_PROGRAM_COUNT,
    WEEK_PROGRAM_RECORD_BYTES,
)


class Register(IntEnum):
    """Holding register addresses."""

    # 0 disabled, 1 ventilation, 2 DHW, 3 all
    PAUSE = 4727
    FAN_SPEED = 4747
    # Desired room temperature in tenths of a degree
    ROOM_TEMPERATURE_SET_POINT = 4746
    # Temperature used for regulation
    MASTER_SENSOR_TEMPERATURE = 5088
    PANEL_TEMPERATURE = 4713
    OUTDOOR_TEMPERATURE = 5152
    ACTUAL_HUMIDITY = 4716
    # T11
    DHW_TOP_TANK_TEMPERATURE = 5162
    # T12
    DHW_BOTTOM_TANK_TEMPERATURE = 5163
    DHW_SET_POINT = 5548
    # 0 auto, 1 cooling, 2 heating
    VENTILATION_MODE = 2402
    # 0 undefined, 1 cooling, 2 heating, 3 ventilation, 4 hot water
    OPERATION_MODE = 5432
    CURRENT_TIME = 4701
    FIRST_WEEK_PROGRAM = 4800


@dataclass(slots=True, frozen=True)
class RegisterMapEntry:
    """Static description of one register block."""

    register: Register
    count: int = 1
    writable: bool = False

    @property
    def address(self) -> int:
        return int(self.register)


REGISTER_MAP: dict[Register, RegisterMapEntry] = {
    entry.register: entry
    for entry in (
        RegisterMapEntry(Register.PAUSE, writable=True),
        RegisterMapEntry(Register.FAN_SPEED, writable=True),
        RegisterMapEntry(Register.ROOM_TEMPERATURE_SET_POINT, writable=True),
        RegisterMapEntry(Register.MASTER_SENSOR_TEMPERATURE),
        RegisterMapEntry(Register.PANEL_TEMPERATURE),
        RegisterMapEntry(Register.OUTDOOR_TEMPERATURE),
        RegisterMapEntry(Register.ACTUAL_HUMIDITY),
        RegisterMapEntry(Register.DHW_TOP_TANK_TEMPERATURE),
        RegisterMapEntry(Register.DHW_BOTTOM_TANK_TEMPERATURE),
        RegisterMapEntry(Register.DHW_SET_POINT, writable=True),
        RegisterMapEntry(Register.VENTILATION_MODE, writable=True),
        RegisterMapEntry(Register.OPERATION_MODE),
        RegisterMapEntry(Register.CURRENT_TIME, count=DATE_TIME_REGISTER_COUNT),
        RegisterMapEntry(
            Register.FIRST_WEEK_PROGRAM,
            # Two bytes per register
            count=WEEK_PROGRAM_COUNT * WEEK_PROGRAM_RECORD_BYTES // 2,
        ),
    )
}


def address_of(register: Register) -> int:
    """Return the Modbus address of ``register``."""

    return REGISTER_MAP[register].address


def register_count(register: Register) -> int:
    """Return the number of consecutive registers making up ``register``."""

    return REGISTER_MAP[register].count


def is_writable(register: Register) -> bool:
    return REGISTER_MAP[register].writable
