"""
Temperature threshold evaluation for GPU Temp Reader.
Decides whether a reading is drawn in the warning style.
"""

from dataclasses import dataclass
from enum import Enum

from . import config


class Severity(Enum):
    """Display severity of a temperature reading"""
    NORMAL = "normal"
    WARNING = "warning"


@dataclass
class TemperatureRule:
    """Warning rule for GPU temperature."""

    threshold: float = config.TEMPERATURE_WARNING_THRESHOLD

    def is_exceeded(self, temperature: float) -> bool:
        # Strictly greater: a reading equal to the threshold stays normal.
        return temperature > self.threshold

    def classify(self, temperature: float) -> Severity:
        if self.is_exceeded(temperature):
            return Severity.WARNING
        return Severity.NORMAL
