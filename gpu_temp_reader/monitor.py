"""GPU temperature poll loop using nvidia-smi"""

import logging
from enum import Enum

from . import config
from .alerts import TemperatureRule
from .nvidia_smi import QueryError, get_gpu_load, get_gpu_model, get_gpu_temperature
from .render import LineWriter, Reading, format_error_line, format_reading_line

logger = logging.getLogger(__name__)


class CycleState(Enum):
    """States of the poll loop"""
    POLLING = "polling"
    RENDERING = "rendering"
    AWAITING_INPUT = "awaiting_input"
    TERMINATED = "terminated"


class GPUTemperatureMonitor:
    """Poll nvidia-smi, render one line per cycle, stop on the quit key"""

    def __init__(self, terminal, writer=None, rule=None, interval=None,
                 quit_key=None, smi_path=None, query_timeout=None):
        self.terminal = terminal
        self.writer = writer or LineWriter()
        self.rule = rule or TemperatureRule()
        self.interval = config.POLL_INTERVAL if interval is None else interval
        self.quit_key = quit_key or config.QUIT_KEY
        self.smi_path = smi_path
        self.query_timeout = query_timeout
        self.state = CycleState.POLLING
        self.running = False

    def _query(self, func):
        return func(smi_path=self.smi_path, timeout=self.query_timeout)

    def _query_or_fallback(self, func, label, fallback):
        """Run a secondary query, logging and substituting on failure"""
        try:
            return self._query(func)
        except QueryError as e:
            logger.error(f"Failed to get GPU {label}: {e}")
            return fallback

    def poll(self):
        """Read temperature, load and model for this cycle

        Load and model failures fall back to defaults. A temperature failure
        propagates and the other two metrics are not queried.

        Raises:
            QueryError: If the temperature query fails
        """
        self.state = CycleState.POLLING
        temperature = self._query(get_gpu_temperature)
        load = self._query_or_fallback(get_gpu_load, 'load', config.FALLBACK_LOAD)
        model = self._query_or_fallback(get_gpu_model, 'model', config.FALLBACK_MODEL)
        return Reading(temperature=temperature, load=load, model=model)

    def run_cycle(self):
        """Poll and render one line, returning it without styling"""
        try:
            reading = self.poll()
        except QueryError as e:
            logger.error(f"Failed to get GPU temperature: {e}")
            self.state = CycleState.RENDERING
            line = format_error_line(e)
            self.writer.write_line(line)
            return line

        self.state = CycleState.RENDERING
        severity = self.rule.classify(reading.temperature)
        line = format_reading_line(reading, severity, color=False)
        logger.info(line)
        self.writer.write_line(format_reading_line(reading, severity))
        return line

    def await_input(self):
        """Wait one poll interval for a key, returning True on the quit key"""
        self.state = CycleState.AWAITING_INPUT
        key = self.terminal.read_key(self.interval)
        if key is None:
            return False
        logger.debug(f"Key pressed: {key!r}")
        return key == self.quit_key

    def run(self):
        """Run cycles until the quit key is pressed

        Returns:
            int: Number of completed cycles
        """
        self.running = True
        self.writer.clear_screen()
        logger.info("Starting gpu_temp_reader")

        cycles = 0
        while self.running:
            self.run_cycle()
            cycles += 1
            if self.await_input():
                self.stop()

        logger.debug(f"Poll loop finished after {cycles} cycle(s)")
        return cycles

    def stop(self):
        self.running = False
        self.state = CycleState.TERMINATED
