"""Value objects exchanged with the CTS700 controller."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import IntEnum


class PauseOption(IntEnum):
    """Subsystems currently suspended by the controller."""

    DISABLED = 0
    VENTILATION = 1
    DHW = 2
    ALL = 3


class VentilationMode(IntEnum):
    """Forced operation requested from the controller."""

    AUTO = 0
    COOLING = 1
    HEATING = 2


class OperationMode(IntEnum):
    """Regulation activity reported by the controller."""

    UNDEFINED = 0
    COOLING = 1
    HEATING = 2
    VENTILATION = 3
    DHW = 4


@dataclass(slots=True, frozen=True)
class DateTime:
    """Controller clock as stored in the current time block.

    ``year`` is an offset from the controller epoch, ``week_day`` runs from
    1 to 7 using the controller's own numbering.
    """

    second: int
    minute: int
    hour: int
    day: int
    week_day: int
    month: int
    year: int

    def to_minute(self) -> DateTime:
        """Return a copy truncated to minute precision."""

        return replace(self, second=0)


@dataclass(slots=True, frozen=True)
class WeekScheduleRecord:
    """One entry of the weekly program table."""

    week_day: int
    hour: int
    minute: int
    temperature: float
    dhw_temperature: float
    flags: int
    fan_speed: int


@dataclass(slots=True, frozen=True)
class Readings:
    """Sensor readings fetched in one pass."""

    room_temperature: float
    outdoor_temperature: float
    panel_temperature: float
    actual_humidity: int
    dhw_tank_top_temperature: float
    dhw_tank_bottom_temperature: float
    current_date_time: DateTime


@dataclass(slots=True, frozen=True)
class Settings:
    """Controller settings fetched in one pass."""

    paused: PauseOption
    fan_speed: int
    room_temperature_set_point: float
    dhw_temperature_set_point: float
    ventilation_mode: VentilationMode
    operation_mode: OperationMode

    @property
    def ventilation_paused(self) -> bool:
        return self.paused in (PauseOption.VENTILATION, PauseOption.ALL)

    @property
    def dhw_paused(self) -> bool:
        return self.paused in (PauseOption.DHW, PauseOption.ALL)
