"""Polling coordinator keeping a snapshot of one CTS700 controller."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Mapping
from datetime import datetime, timezone
from typing import Any

from pymodbus.exceptions import ModbusException

from .client import CTS700Client
from .const import (
    CONF_HOST,
    CONF_NAME,
    CONF_PORT,
    CONF_SCAN_INTERVAL,
    CONF_SCHEDULE,
    CONF_SLAVE_ID,
    CONF_TIMEOUT,
    DEFAULT_SCAN_INTERVAL,
)
from .exceptions import CTS700Error, EmptyScheduleError
from .models import DateTime, Readings, Settings, WeekScheduleRecord

_LOGGER = logging.getLogger(__name__)


class CTS700Coordinator:
    """Poll a controller on a fixed interval and apply its weekly program.

    Every cycle reads the sensors, applies the active weekly program entry
    when the controller clock moved to a new minute and the entry differs
    from the last one applied, then reads the settings. A failed cycle is
    logged and counted; the next cycle runs as usual.
    """

    def __init__(
        self,
        client: CTS700Client,
        *,
        scan_interval: float = DEFAULT_SCAN_INTERVAL,
        schedule_enabled: bool = True,
    ) -> None:
        self.client = client
        self.scan_interval = float(scan_interval)
        self.schedule_enabled = schedule_enabled

        self.readings: Readings | None = None
        self.settings: Settings | None = None
        self.active_schedule: WeekScheduleRecord | None = None

        self._processed_date_time: DateTime | None = None
        self._listeners: list[Callable[[], None]] = []
        self._task: asyncio.Task[None] | None = None

        self.statistics: dict[str, Any] = {
            "successful_updates": 0,
            "failed_updates": 0,
            "schedule_updates": 0,
            "last_error": None,
            "last_successful_update": None,
        }

    @classmethod
    async def from_config(cls, config: Mapping[str, Any]) -> CTS700Coordinator:
        """Create a coordinator from a validated device entry."""

        client = await CTS700Client.create(
            config[CONF_HOST],
            port=config[CONF_PORT],
            slave_id=config[CONF_SLAVE_ID],
            timeout=config[CONF_TIMEOUT],
            name=config[CONF_NAME],
        )
        return cls(
            client,
            scan_interval=config[CONF_SCAN_INTERVAL],
            schedule_enabled=config[CONF_SCHEDULE],
        )

    @property
    def name(self) -> str:
        return self.client.name

    def add_listener(self, listener: Callable[[], None]) -> Callable[[], None]:
        """Register ``listener`` for successful updates; return a remover."""

        self._listeners.append(listener)

        def _remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _remove

    async def async_refresh(self) -> bool:
        """Run one poll cycle and return whether it succeeded."""

        try:
            readings = await self.client.fetch_readings()
            if self.schedule_enabled:
                await self._sync_schedule(readings.current_date_time)
            settings = await self.client.fetch_settings()
        except (CTS700Error, ModbusException, OSError, asyncio.TimeoutError) as exc:
            self.statistics["failed_updates"] += 1
            self.statistics["last_error"] = str(exc)
            _LOGGER.error("%s: could not update readings and settings: %s", self.name, exc)
            return False

        self.readings = readings
        self.settings = settings
        self.statistics["successful_updates"] += 1
        self.statistics["last_successful_update"] = datetime.now(timezone.utc)
        for listener in list(self._listeners):
            try:
                listener()
            except Exception as err:  # noqa: BLE001
                _LOGGER.exception("%s: error in update listener %s: %s", self.name, listener, err)
        return True

    async def _sync_schedule(self, now: DateTime) -> None:
        """Write the set points of the active weekly program entry."""

        # The program has minute precision
        current = now.to_minute()
        if current == self._processed_date_time:
            return

        _LOGGER.debug("%s: checking week schedule", self.name)
        try:
            active = await self.client.fetch_active_week_program_for_date_time(now)
        except EmptyScheduleError:
            _LOGGER.debug("%s: no week schedule configured", self.name)
            self._processed_date_time = current
            return

        if active != self.active_schedule:
            _LOGGER.debug(
                "%s: applying week schedule temperature=%s dhw=%s fan=%s",
                self.name,
                active.temperature,
                active.dhw_temperature,
                active.fan_speed,
            )
            await self.client.write_room_temperature_set_point(active.temperature)
            await self.client.write_dhw_set_point(active.dhw_temperature)
            await self.client.write_fan_speed(active.fan_speed)
            self.active_schedule = active
            self.statistics["schedule_updates"] += 1
        else:
            _LOGGER.debug("%s: no updates for week schedule needed", self.name)

        self._processed_date_time = current

    async def _run(self) -> None:
        while True:
            try:
                await self.async_refresh()
            except Exception as err:  # noqa: BLE001
                self.statistics["failed_updates"] += 1
                self.statistics["last_error"] = str(err)
                _LOGGER.exception("%s: unexpected error during update: %s", self.name, err)
            await asyncio.sleep(self.scan_interval)

    async def async_start(self) -> None:
        """Start polling in the background."""

        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self._run())

    async def async_shutdown(self) -> None:
        """Stop polling and disconnect."""

        _LOGGER.debug("Shutting down %s coordinator", self.name)
        task, self._task = self._task, None
        if task is not None:
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)
        await self.client.close()
