"""
Terminal rendering for GPU readings.

Every cycle produces exactly one line. The line is written after a carriage
return and without a newline so the next cycle overwrites it in place. The
temperature value is drawn in red when it exceeds the warning threshold.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import Optional, TextIO

import typer

from .alerts import Severity

WARNING_COLOR = typer.colors.RED
CLEAR_SCREEN = "\033[2J\033[H"


@dataclass(frozen=True)
class Reading:
    """One poll cycle's worth of GPU telemetry."""

    temperature: float
    load: float
    model: str


def format_number(value: float) -> str:
    """Format a reading value without a trailing ``.0`` for whole numbers.

    ``72.0`` becomes ``72`` and ``72.5`` stays ``72.5``.
    """
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def format_reading_line(reading: Reading, severity: Severity = Severity.NORMAL, color: bool = True) -> str:
    """Compose the display line for a reading.

    With ``color`` disabled the result is plain text, which is also what gets
    logged for each cycle.
    """
    temperature = format_number(reading.temperature)
    if color and severity is Severity.WARNING:
        temperature = typer.style(temperature, fg=WARNING_COLOR)
    return f"GPU: {reading.model} Temperature: {temperature} °C, Load: {format_number(reading.load)}%"


def format_error_line(error: Exception) -> str:
    return f"Error: {error}"


class LineWriter:
    """Writes single-line frames that overwrite each other."""

    def __init__(self, stream: Optional[TextIO] = None, color: Optional[bool] = None) -> None:
        self._stream = stream
        self.color = color

    @property
    def stream(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stdout

    def _isatty(self) -> bool:
        isatty = getattr(self.stream, "isatty", None)
        return bool(isatty and isatty())

    def write_line(self, text: str) -> None:
        typer.echo(f"\r{text}", file=self.stream, nl=False, color=self.color)
        self.stream.flush()

    def newline(self) -> None:
        typer.echo("", file=self.stream)

    def clear_screen(self) -> None:
        if not self._isatty():
            return
        self.stream.write(CLEAR_SCREEN)
        self.stream.flush()
