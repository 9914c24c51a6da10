"""
Configuration & Constants
=========================
This module serves as the central registry for file paths and global constants.

Why is this file needed?
------------------------
1. Abstraction: It prevents hardcoded paths scattered throughout the code.
2. Input limits: It holds the allowed range of every slider-driven dimension.

Exports:
    APP_ID (str): Namespace of the shared profile collection.
    DEFAULT_HISTORY_PATH (str): Default HDF5 file of the local profile collection.
    FieldRange: Range/step configuration of a single dimension.
    DEFAULT_FIELD_RANGES (dict): FieldRange for each of the dimensions A-E.
"""
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict


@dataclass(frozen=True)
class FieldRange:
    """Allowed interval and slider step of one dimension (mm)."""
    min_value: float = 0.0
    max_value: float = 250.0
    step: float = 1.0

    def clamp(self, value: float) -> float:
        return min(max(value, self.min_value), self.max_value)


# Global Constants
APP_ID: str = "fluid-shape-pro-default"
DEFAULT_HISTORY_PATH: str = os.path.join(str(Path.home()), ".fluidshape", f"{APP_ID}.h5")

DIMENSION_KEYS = ("A", "B", "C", "D", "E")
DEFAULT_FIELD_RANGES: Dict[str, FieldRange] = {key: FieldRange() for key in DIMENSION_KEYS}
