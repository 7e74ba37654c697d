from __future__ import annotations

import pytest

from bluebus.ble_ops.modalias import Modalias, format_modalias_info, parse_modalias
from bluebus.core.errors import UnknownError


def test_parse_usb_modalias() -> None:
    assert parse_modalias("usb:v1D6Bp0246d052A") == Modalias("usb", 0x1D6B, 0x0246, 0x052A)


def test_parse_bluetooth_source_lowercase_hex() -> None:
    assert parse_modalias("bluetooth:v004cp0320d0b12") == ("bluetooth", 0x004C, 0x0320, 0x0B12)


@pytest.mark.parametrize(
    "value",
    [
        "",
        "usb",
        "usb:v1D6B",
        "usb:v1D6Bp0246",
        "usb:v1D6Bp0246d052",
        "usb:v1D6Bp0246d052A0",
        "usb:vXXXXp0246d052A",
        ":v1D6Bp0246d052A",
        "usb:v1D6Bp0246d052A\n",
    ],
)
def test_malformed_modalias(value: str) -> None:
    with pytest.raises(UnknownError):
        parse_modalias(value)


def test_format_modalias_info() -> None:
    text = format_modalias_info("usb:v1D6Bp0246d052A")
    assert "Vendor: 0x1D6B" in text
    assert "Device ID: 0x052A" in text
    assert format_modalias_info("garbage") == "garbage"
