"""Validation of device configuration entries."""

from __future__ import annotations

import ipaddress
import logging
import re
from collections.abc import Iterable, Mapping
from typing import Any

import voluptuous as vol

from .const import (
    CONF_HOST,
    CONF_NAME,
    CONF_PORT,
    CONF_SCAN_INTERVAL,
    CONF_SCHEDULE,
    CONF_SLAVE_ID,
    CONF_TIMEOUT,
    DEFAULT_PORT,
    DEFAULT_SCAN_INTERVAL,
    DEFAULT_SLAVE_ID,
    DEFAULT_TIMEOUT,
)

_LOGGER = logging.getLogger(__name__)

_HOSTNAME_LABEL = re.compile(r"^(?!-)[A-Za-z0-9-]{1,63}(?<!-)$")


def _looks_like_hostname(value: str) -> bool:
    """Basic hostname validation without name resolution."""

    if len(value) > 253 or value.replace(".", "").isdigit():
        return False
    return all(_HOSTNAME_LABEL.match(label) for label in value.rstrip(".").split("."))


def validate_host(value: Any) -> str:
    """Return ``value`` stripped if it is an IP address or a hostname."""

    host = str(value or "").strip()
    if not host:
        raise vol.Invalid("missing_host")
    try:
        ipaddress.ip_address(host)
    except ValueError:
        if not _looks_like_hostname(host):
            raise vol.Invalid("invalid_host") from None
    return host


DEVICE_SCHEMA = vol.Schema(
    {
        vol.Required(CONF_NAME): vol.All(str, str.strip, vol.Length(min=1)),
        vol.Required(CONF_HOST): validate_host,
        vol.Optional(CONF_PORT, default=DEFAULT_PORT): vol.All(
            vol.Coerce(int), vol.Range(min=1, max=65535)
        ),
        vol.Optional(CONF_SLAVE_ID, default=DEFAULT_SLAVE_ID): vol.All(
            vol.Coerce(int), vol.Range(min=1, max=247)
        ),
        vol.Optional(CONF_TIMEOUT, default=DEFAULT_TIMEOUT): vol.All(
            vol.Coerce(float), vol.Range(min=0.5, max=60)
        ),
        vol.Optional(CONF_SCAN_INTERVAL, default=DEFAULT_SCAN_INTERVAL): vol.All(
            vol.Coerce(float), vol.Range(min=1)
        ),
        vol.Optional(CONF_SCHEDULE, default=True): vol.Boolean(),
    },
    extra=vol.REMOVE_EXTRA,
)


def validate_device(data: Mapping[str, Any]) -> dict[str, Any]:
    """Validate one device entry and fill in defaults."""

    return DEVICE_SCHEMA(dict(data))


def validate_devices(entries: Iterable[Mapping[str, Any]] | None) -> list[dict[str, Any]]:
    """Validate a list of device entries.

    Invalid entries are logged and skipped. When several entries share a
    host only the first one is kept.
    """

    devices: list[dict[str, Any]] = []
    hosts: set[str] = set()
    for index, entry in enumerate(entries or []):
        if not isinstance(entry, Mapping):
            _LOGGER.warning("Skipping device entry %s: expected a mapping", index)
            continue
        try:
            device = validate_device(entry)
        except vol.Invalid as err:
            _LOGGER.warning("Skipping device entry %s: %s", index, err)
            continue
        if device[CONF_HOST] in hosts:
            _LOGGER.warning(
                "Skipping device %s: host %s already configured",
                device[CONF_NAME],
                device[CONF_HOST],
            )
            continue
        hosts.add(device[CONF_HOST])
        devices.append(device)
    return devices
