"""Constants for the Nilan CTS700 Modbus client."""

from __future__ import annotations

# Connection defaults
DEFAULT_NAME = "Nilan"
DEFAULT_PORT = 502
DEFAULT_SLAVE_ID = 1
DEFAULT_TIMEOUT = 5
DEFAULT_SCAN_INTERVAL = 10

# Minimum number of seconds between two reconnect attempts
RECONNECT_COOLDOWN = 10.0

# Configuration keys
CONF_NAME = "name"
CONF_HOST = "host"
CONF_PORT = "port"
CONF_SLAVE_ID = "slave_id"
CONF_TIMEOUT = "timeout"
CONF_SCAN_INTERVAL = "scan_interval"
CONF_SCHEDULE = "schedule"

# Value limits
PERCENTAGE_MIN = 0
PERCENTAGE_MAX = 100
ROOM_SET_POINT_MIN = 5.0
ROOM_SET_POINT_MAX = 50.0
DHW_SET_POINT_MIN = 5.0
DHW_SET_POINT_MAX = 65.0

# Layout of multi-register blocks
DATE_TIME_REGISTER_COUNT = 4
DATE_TIME_BYTES = 7
WEEK_PROGRAM_COUNT = 14
WEEK_PROGRAM_RECORD_BYTES = 10
