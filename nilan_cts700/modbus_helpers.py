"""Helpers for issuing and logging Modbus calls."""

from __future__ import annotations

import asyncio
import inspect
import logging
import weakref
from collections.abc import Awaitable, Callable
from typing import Any

_LOGGER = logging.getLogger(__name__)

# Keywords used by the different pymodbus releases for the unit identifier
_UNIT_KWARGS = ("device_id", "slave", "unit")

# Cache which unit keyword a given function accepts
_KWARG_CACHE: weakref.WeakKeyDictionary[Callable[..., Awaitable[Any]], str] = (
    weakref.WeakKeyDictionary()
)
# Cache function signatures to avoid repeated inspection
_SIG_CACHE: weakref.WeakKeyDictionary[Callable[..., Awaitable[Any]], inspect.Signature] = (
    weakref.WeakKeyDictionary()
)


def _mask_frame(frame: bytes) -> str:
    """Return a hex representation of ``frame`` with the slave ID masked."""

    if not frame:
        return ""

    hex_str = frame.hex()
    if len(hex_str) >= 2:
        return f"**{hex_str[2:]}"
    return hex_str


def _build_request_frame(
    func_name: str, slave_id: int, positional: list[Any], kwargs: dict[str, Any]
) -> bytes:
    """Best-effort Modbus request frame builder for logging."""

    try:
        if func_name == "read_holding_registers":
            addr = int(kwargs.get("address", positional[0] if positional else 0))
            count = int(kwargs.get("count", positional[1] if len(positional) > 1 else 1))
            return bytes([slave_id, 0x03, addr >> 8, addr & 0xFF, count >> 8, count & 0xFF])
        if func_name == "write_register":
            addr = int(kwargs.get("address", positional[0] if positional else 0))
            value = int(kwargs.get("value", positional[1] if len(positional) > 1 else 0))
            return bytes([slave_id, 0x06, addr >> 8, addr & 0xFF, value >> 8, value & 0xFF])
    except (ValueError, TypeError, IndexError) as err:
        _LOGGER.debug("Failed to build request frame: %s", err)
        return b""

    return b""


def _unit_kwarg(func: Callable[..., Awaitable[Any]], params: Any) -> str:
    kwarg = _KWARG_CACHE.get(func)
    if kwarg is None:
        kwarg = ""
        for name in _UNIT_KWARGS:
            if name in params and params[name].kind is not inspect.Parameter.POSITIONAL_ONLY:
                kwarg = name
                break
        _KWARG_CACHE[func] = kwarg
    return kwarg


async def _call_modbus(
    func: Callable[..., Awaitable[Any]],
    slave_id: int,
    *args: Any,
    timeout: float | None = None,
    **kwargs: Any,
) -> Any:
    """Invoke a Modbus function passing the unit identifier it expects.

    The function signature is inspected to determine whether the wrapped
    callable expects a ``device_id``, ``slave`` or ``unit`` keyword argument.
    If none is present the function is called without either keyword. The
    chosen keyword (or lack thereof) is cached per callable.
    """

    signature = _SIG_CACHE.get(func)
    if signature is None:
        signature = inspect.signature(func)
        _SIG_CACHE[func] = signature

    # Move values meant for keyword-only parameters (e.g. ``count``) into kwargs
    params = signature.parameters
    positional: list[Any] = []
    param_iter = iter(params.values())
    for arg in args:
        try:
            param = next(param_iter)
        except StopIteration:
            positional.append(arg)
            continue

        if param.kind is inspect.Parameter.KEYWORD_ONLY:
            kwargs[param.name] = arg
        else:
            positional.append(arg)

    kwarg = _unit_kwarg(func, params)
    func_name = getattr(func, "__name__", repr(func))

    _LOGGER.info(
        "Calling %s on slave %s (count=%s)",
        func_name,
        slave_id,
        kwargs.get("count", 1),
    )

    if _LOGGER.isEnabledFor(logging.DEBUG):
        request_frame = _build_request_frame(func_name, slave_id, positional, kwargs)
        if request_frame:
            _LOGGER.debug("Modbus request: %s", _mask_frame(request_frame))
        else:
            _LOGGER.debug(
                "Sending %s to slave %s: args=%s kwargs=%s", func_name, slave_id, positional, kwargs
            )

    if kwarg:
        kwargs[kwarg] = slave_id

    try:
        if timeout is not None:
            response = await asyncio.wait_for(func(*positional, **kwargs), timeout=timeout)
        else:
            response = await func(*positional, **kwargs)
    except Exception:
        _LOGGER.debug("Call to %s failed", func_name)
        raise

    if _LOGGER.isEnabledFor(logging.DEBUG):
        try:
            encoded = response.encode() if hasattr(response, "encode") else b""
        except (AttributeError, ValueError, TypeError, UnicodeError) as err:
            _LOGGER.debug("Failed to encode Modbus response: %s", err)
            encoded = b""
        if isinstance(encoded, (bytes, bytearray)) and encoded:
            _LOGGER.debug("Modbus response: %s", _mask_frame(bytes(encoded)))
        else:
            _LOGGER.debug("Received from %s: %s", func_name, response)
    return response
