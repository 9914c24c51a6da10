"""
Profile Parameters
==================
Holds the raw text typed by the user for every profile parameter together
with the derived numeric view consumed by the geometry engine.

The numeric view follows a "parse-or-default" policy: text that does not
start with a decimal literal resolves to 0.0 instead of raising, so the
geometry engine always receives a well-defined input.
"""
from __future__ import annotations

import logging
import math
import re
from typing import Dict, Mapping, Optional

from fluidshape.config import DEFAULT_FIELD_RANGES, FieldRange

logger = logging.getLogger(__name__)

PARAMETER_KEYS = ("A", "B", "C", "D", "E", "L_start", "L_end", "rho")

DEFAULT_PARAMETERS: Dict[str, str] = {
    "A": "100", "B": "40", "C": "15", "D": "20", "E": "50",
    "L_start": "0.0", "L_end": "1.0", "rho": "1121.7",
}

# Longest leading decimal literal, e.g. "12.5mm" -> "12.5", " -3e2" -> "-3e2"
_NUMBER_PREFIX = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def parse_number(text: str, default: float = 0.0) -> float:
    """
    Parse the numeric prefix of `text`.

    Empty, non-numeric and non-finite input resolves to `default`.
    """
    match = _NUMBER_PREFIX.match(text or "")
    if not match:
        return default
    value = float(match.group(1))
    if not math.isfinite(value):
        return default
    return value


def format_number(value: float) -> str:
    """Format a slider value the way it is typed: no trailing '.0'."""
    if float(value).is_integer():
        return str(int(value))
    return f"{value:g}"


class ParameterSet:
    """Text view of the profile parameters plus its numeric view."""

    def __init__(
        self,
        values: Optional[Mapping[str, str]] = None,
        ranges: Optional[Mapping[str, FieldRange]] = None
    ) -> None:
        self._text: Dict[str, str] = dict(DEFAULT_PARAMETERS)
        self.ranges: Dict[str, FieldRange] = dict(ranges if ranges is not None else DEFAULT_FIELD_RANGES)
        if values:
            self.restore(values)

    def __getitem__(self, key: str) -> str:
        return self._text[key]

    def set_field(self, key: str, text: str) -> None:
        """Replace one field's text. No validation happens here."""
        if key not in self._text:
            raise KeyError(f"Unknown parameter '{key}'")
        self._text[key] = text

    def set_value(self, key: str, value: float) -> str:
        """
        Slider input: clamp to the configured range and store as text.

        Returns the text that was stored.
        """
        field_range = self.ranges.get(key)
        if field_range is not None:
            value = field_range.clamp(value)
        text = format_number(value)
        self.set_field(key, text)
        return text

    def text_view(self) -> Dict[str, str]:
        return dict(self._text)

    def numeric_view(self) -> Dict[str, float]:
        return {key: parse_number(text) for key, text in self._text.items()}

    def effective_length(self) -> float:
        """Longitudinal span in meters, never negative."""
        return effective_length(self.numeric_view())

    def snapshot(self) -> Dict[str, str]:
        return self.text_view()

    def restore(self, snapshot: Mapping[str, str]) -> None:
        """Replace the text view with a saved snapshot, byte for byte."""
        for key, text in snapshot.items():
            if key not in self._text:
                logger.warning(f"Ignoring unknown parameter '{key}' in snapshot.")
                continue
            self._text[key] = str(text)


def effective_length(numeric: Mapping[str, float]) -> float:
    diff = numeric.get("L_end", 0.0) - numeric.get("L_start", 0.0)
    return diff if diff > 0 else 0.0
