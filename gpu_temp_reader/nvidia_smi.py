"""
nvidia-smi query helpers
One short-lived nvidia-smi process per metric, parsed into a float or a name
"""

import subprocess
import logging
from enum import Enum
from typing import Optional

from . import config

logger = logging.getLogger(__name__)


class Metric(Enum):
    """Metrics read from nvidia-smi"""
    TEMPERATURE = "temperature"
    LOAD = "load"
    MODEL = "model"


QUERY_ARGS = {
    Metric.TEMPERATURE: ['--query-gpu=temperature.gpu', '--format=csv,noheader,nounits'],
    Metric.LOAD: ['--query-gpu=utilization.gpu', '--format=csv,noheader,nounits'],
    Metric.MODEL: ['--query-gpu=name', '--format=csv,noheader'],
}


class QueryError(Exception):
    """Base exception for a failed nvidia-smi metric query"""

    def __init__(self, metric: Metric, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.metric = metric
        self.message = message
        self.cause = cause


class SpawnFailedError(QueryError):
    """nvidia-smi could not be started"""
    pass


class NonZeroExitError(QueryError):
    """nvidia-smi exited with a non-zero status"""

    def __init__(self, metric: Metric, returncode: int, stderr: str):
        super().__init__(
            metric,
            f"Command failed with status: {returncode}, stderr: {stderr}",
        )
        self.returncode = returncode
        self.stderr = stderr


class DecodeFailedError(QueryError):
    """nvidia-smi output was not valid UTF-8"""
    pass


class ParseFailedError(QueryError):
    """nvidia-smi output could not be parsed as a number"""
    pass


class QueryTimeoutError(QueryError):
    """nvidia-smi did not finish within the configured timeout"""
    pass


def run_query(metric, smi_path=None, timeout=None):
    """Run nvidia-smi for a single metric and return its stripped stdout

    Args:
        metric: Metric to query
        smi_path: Query tool executable, defaults to config.SMI_PATH
        timeout: Seconds to wait for the tool; None or 0 waits indefinitely

    Raises:
        QueryError: One of its subclasses, describing why the query failed
    """
    smi_path = smi_path or config.SMI_PATH
    if timeout is None:
        timeout = config.QUERY_TIMEOUT
    command = [smi_path, *QUERY_ARGS[metric]]
    logger.debug(f"Running {' '.join(command)}")

    try:
        result = subprocess.run(command, capture_output=True, timeout=timeout or None)
    except subprocess.TimeoutExpired as e:
        raise QueryTimeoutError(metric, f"Command timed out after {timeout}s", e) from e
    except OSError as e:
        raise SpawnFailedError(metric, f"Failed to execute command: {e}", e) from e

    if result.returncode != 0:
        stderr = result.stderr.decode('utf-8', errors='replace').strip()
        raise NonZeroExitError(metric, result.returncode, stderr)

    try:
        output = result.stdout.decode('utf-8')
    except UnicodeDecodeError as e:
        raise DecodeFailedError(metric, f"Failed to parse output: {e}", e) from e

    return output.strip()


def _query_float(metric, smi_path=None, timeout=None):
    """Query a numeric metric and parse it as a float"""
    value = run_query(metric, smi_path=smi_path, timeout=timeout)
    try:
        return float(value)
    except ValueError as e:
        raise ParseFailedError(metric, f"Failed to parse {metric.value}: {e}", e) from e


def get_gpu_temperature(smi_path=None, timeout=None) -> float:
    """GPU core temperature in °C"""
    return _query_float(Metric.TEMPERATURE, smi_path=smi_path, timeout=timeout)


def get_gpu_load(smi_path=None, timeout=None) -> float:
    """GPU utilization in percent"""
    return _query_float(Metric.LOAD, smi_path=smi_path, timeout=timeout)


def get_gpu_model(smi_path=None, timeout=None) -> str:
    """GPU product name"""
    return run_query(Metric.MODEL, smi_path=smi_path, timeout=timeout)
