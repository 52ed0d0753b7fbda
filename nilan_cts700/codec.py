"""Conversion between raw register words and domain values.

Single register quantities are 16 bit words. Temperatures are signed
tenths of a degree, percentages and enums are stored verbatim. The current
time and the weekly program are read as register blocks and decoded from
their big-endian byte representation.
"""

from __future__ import annotations

import math
import struct
from collections.abc import Sequence
from decimal import ROUND_DOWN, Decimal
from enum import IntEnum
from typing import TypeVar

from .const import (
    DATE_TIME_BYTES,
    PERCENTAGE_MAX,
    PERCENTAGE_MIN,
    WEEK_PROGRAM_RECORD_BYTES,
)
from .exceptions import InvalidEnumValueError, InvalidResponseError, OutOfRangeError
from .models import (
    DateTime,
    OperationMode,
    PauseOption,
    VentilationMode,
    WeekScheduleRecord,
)

_EnumT = TypeVar("_EnumT", bound=IntEnum)

# week day, hour, minute, temperature, DHW temperature, flags, fan speed
_WEEK_PROGRAM_RECORD = struct.Struct(">BBBhhBH")

_INT16_MIN = -0x8000
_INT16_MAX = 0x7FFF


def registers_to_bytes(registers: Sequence[int]) -> bytes:
    """Return the big-endian byte representation of ``registers``."""

    return b"".join((int(word) & 0xFFFF).to_bytes(2, "big") for word in registers)


def _to_signed(word: int) -> int:
    word &= 0xFFFF
    return word - 0x10000 if word & 0x8000 else word


def decode_temperature(word: int) -> float:
    """Decode a signed temperature word stored in tenths of a degree."""

    return _to_signed(word) / 10


def encode_temperature(
    value: float,
    min_value: float | None = None,
    max_value: float | None = None,
) -> int:
    """Encode ``value`` as a 16 bit word in tenths of a degree.

    ``min_value`` and ``max_value`` are the domain bounds of the quantity
    being written. Fractions below a tenth are truncated toward zero and
    negative values use the two's complement representation.
    """

    if not math.isfinite(value):
        raise OutOfRangeError(f"{value} is not a finite temperature")
    if min_value is not None and value < min_value:
        raise OutOfRangeError(f"{value} below minimum {min_value}")
    if max_value is not None and value > max_value:
        raise OutOfRangeError(f"{value} above maximum {max_value}")

    tenths = int((Decimal(str(value)) * 10).to_integral_value(rounding=ROUND_DOWN))
    if not _INT16_MIN <= tenths <= _INT16_MAX:
        raise OutOfRangeError(f"{value} cannot be stored as a signed 16 bit temperature")
    return tenths + 0x10000 if tenths < 0 else tenths


def _decode_percentage(word: int, name: str) -> int:
    if not PERCENTAGE_MIN <= word <= PERCENTAGE_MAX:
        raise OutOfRangeError(f"{name} value {word} outside of {PERCENTAGE_MIN}-{PERCENTAGE_MAX}")
    return int(word)


def decode_fan_speed(word: int) -> int:
    return _decode_percentage(word, "Fan speed")


def decode_humidity(word: int) -> int:
    return _decode_percentage(word, "Humidity")


def encode_fan_speed(value: float) -> int:
    """Validate a fan speed percentage and drop any fractional part."""

    if not PERCENTAGE_MIN <= value <= PERCENTAGE_MAX:
        raise OutOfRangeError(
            f"Fan speed {value} outside of {PERCENTAGE_MIN}-{PERCENTAGE_MAX}"
        )
    return int(value)


def _decode_enum(enum_cls: type[_EnumT], word: int) -> _EnumT:
    try:
        return enum_cls(word)
    except ValueError as err:
        raise InvalidEnumValueError(
            f"Invalid {enum_cls.__name__} value {word}; allowed: {[int(m) for m in enum_cls]}"
        ) from err


def decode_pause_option(word: int) -> PauseOption:
    return _decode_enum(PauseOption, word)


def decode_ventilation_mode(word: int) -> VentilationMode:
    return _decode_enum(VentilationMode, word)


def decode_operation_mode(word: int) -> OperationMode:
    return _decode_enum(OperationMode, word)


def encode_enum(enum_cls: type[_EnumT], value: int) -> int:
    """Return the raw word for ``value`` after checking it belongs to ``enum_cls``."""

    return int(_decode_enum(enum_cls, int(value)))


def decode_date_time(data: bytes) -> DateTime:
    """Decode the current time block.

    Every field occupies one byte: second, minute, hour, day, week day,
    month and year. Values are taken as reported by the controller.
    """

    if len(data) < DATE_TIME_BYTES:
        raise InvalidResponseError(
            f"Date/time block needs {DATE_TIME_BYTES} bytes, got {len(data)}"
        )
    second, minute, hour, day, week_day, month, year = data[:DATE_TIME_BYTES]
    return DateTime(
        second=second,
        minute=minute,
        hour=hour,
        day=day,
        week_day=week_day,
        month=month,
        year=year,
    )


def decode_week_schedule_table(data: bytes, record_count: int) -> list[WeekScheduleRecord]:
    """Decode up to ``record_count`` weekly program records from ``data``.

    A record with week day 0 marks the first unused slot; it and everything
    after it is discarded.
    """

    records: list[WeekScheduleRecord] = []
    for index in range(record_count):
        offset = index * WEEK_PROGRAM_RECORD_BYTES
        if offset + WEEK_PROGRAM_RECORD_BYTES > len(data):
            raise InvalidResponseError(
                f"Week program block truncated at record {index} ({len(data)} bytes)"
            )
        week_day, hour, minute, temperature, dhw_temperature, flags, fan_speed = (
            _WEEK_PROGRAM_RECORD.unpack_from(data, offset)
        )
        if week_day == 0:
            break
        records.append(
            WeekScheduleRecord(
                week_day=week_day,
                hour=hour,
                minute=minute,
                temperature=temperature / 10,
                dhw_temperature=dhw_temperature / 10,
                flags=flags,
                fan_speed=fan_speed,
            )
        )
    return records
