"""Pure helpers that decode values published by BlueZ."""

from bluebus.ble_ops.modalias import Modalias, parse_modalias, format_modalias_info

__all__ = ["Modalias", "parse_modalias", "format_modalias_info"]
