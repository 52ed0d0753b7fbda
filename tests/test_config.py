"""Tests for device configuration validation."""

import logging

import pytest
import voluptuous as vol

from nilan_cts700.config import validate_device, validate_devices, validate_host
from nilan_cts700.const import (
    CONF_HOST,
    CONF_NAME,
    CONF_PORT,
    CONF_SCAN_INTERVAL,
    CONF_SCHEDULE,
    CONF_SLAVE_ID,
    CONF_TIMEOUT,
)


def test_defaults_are_applied():
    device = validate_device({CONF_NAME: "Compact P", CONF_HOST: " 192.168.5.107 "})

    assert device == {
        CONF_NAME: "Compact P",
        CONF_HOST: "192.168.5.107",
        CONF_PORT: 502,
        CONF_SLAVE_ID: 1,
        CONF_TIMEOUT: 5.0,
        CONF_SCAN_INTERVAL: 10.0,
        CONF_SCHEDULE: True,
    }


def test_values_are_coerced():
    device = validate_device(
        {
            CONF_NAME: "Unit",
            CONF_HOST: "nilan.local",
            CONF_PORT: "5020",
            CONF_SLAVE_ID: "3",
            CONF_SCHEDULE: "off",
            "unknown": 1,
        }
    )

    assert device[CONF_PORT] == 5020
    assert device[CONF_SLAVE_ID] == 3
    assert device[CONF_SCHEDULE] is False
    assert "unknown" not in device


@pytest.mark.parametrize(
    "data",
    [
        {CONF_HOST: "192.0.2.1"},
        {CONF_NAME: "Unit"},
        {CONF_NAME: "Unit", CONF_HOST: ""},
        {CONF_NAME: "Unit", CONF_HOST: "bad host"},
        {CONF_NAME: "Unit", CONF_HOST: "192.0.2.1", CONF_PORT: 70000},
        {CONF_NAME: "Unit", CONF_HOST: "192.0.2.1", CONF_SLAVE_ID: 0},
        {CONF_NAME: "Unit", CONF_HOST: "192.0.2.1", CONF_SLAVE_ID: 248},
        {CONF_NAME: "Unit", CONF_HOST: "192.0.2.1", CONF_SCAN_INTERVAL: 0},
    ],
)
def test_invalid_entries(data):
    with pytest.raises(vol.Invalid):
        validate_device(data)


@pytest.mark.parametrize("host", ["192.168.1.20", "::1", "localhost", "nilan-unit.home.arpa"])
def test_valid_hosts(host):
    assert validate_host(host) == host


@pytest.mark.parametrize("host", ["", None, "-nilan", "a..b", "300.1.1.1.1"])
def test_invalid_hosts(host):
    with pytest.raises(vol.Invalid):
        validate_host(host)


def test_validate_devices_skips_invalid_and_duplicates(caplog):
    caplog.set_level(logging.WARNING)

    devices = validate_devices(
        [
            {CONF_NAME: "First", CONF_HOST: "192.0.2.1"},
            {CONF_NAME: "No host"},
            "not a mapping",
            {CONF_NAME: "Second", CONF_HOST: "192.0.2.1"},
            {CONF_NAME: "Third", CONF_HOST: "192.0.2.3", CONF_SCHEDULE: False},
        ]
    )

    assert [device[CONF_NAME] for device in devices] == ["First", "Third"]
    assert len([r for r in caplog.records if r.levelno == logging.WARNING]) == 3


def test_validate_devices_accepts_missing_list():
    assert validate_devices(None) == []
