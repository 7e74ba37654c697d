#!/usr/bin/python3
"""Modalias parsing utilities for bluebus.

BlueZ publishes a ``Modalias`` property on adapters and devices using the
Linux kernel's fixed-width format ``<source>:v<VVVV>p<PPPP>d<DDDD>``, where
each field is four big-endian hex digits.

For more information on modalias format, see:
https://wiki.archlinux.org/title/Modalias
"""
from __future__ import annotations

import re
from typing import NamedTuple

from bluebus.core.errors import UnknownError

_MODALIAS_RX = re.compile(
    r"(?P<source>[^:]+):v(?P<vendor>[0-9A-Fa-f]{4})"
    r"p(?P<product>[0-9A-Fa-f]{4})d(?P<device>[0-9A-Fa-f]{4})"
)


class Modalias(NamedTuple):
    source: str
    vendor: int
    product: int
    device: int


def parse_modalias(modalias: str) -> Modalias:
    """Split *modalias* into ``(source, vendor, product, device)``.

    Raises :class:`UnknownError` when the string does not follow the
    fixed-width grammar.

    >>> parse_modalias("usb:v1D6Bp0246d052A")
    Modalias(source='usb', vendor=7531, product=582, device=1322)
    """
    match = _MODALIAS_RX.fullmatch(str(modalias))
    if not match:
        raise UnknownError(f"Could not parse modalias {modalias!r}")
    return Modalias(
        match.group("source"),
        int(match.group("vendor"), 16),
        int(match.group("product"), 16),
        int(match.group("device"), 16),
    )


def format_modalias_info(modalias: str) -> str:
    """Format modalias information for display.

    Returns the original string unchanged if it cannot be parsed.
    """
    try:
        info = parse_modalias(modalias)
    except UnknownError:
        return modalias

    return (f"{modalias} (Source: {info.source}, Vendor: 0x{info.vendor:04X}, "
            f"Product: 0x{info.product:04X}, Device ID: 0x{info.device:04X})")
