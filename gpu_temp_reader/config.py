"""
Configuration settings for GPU Temp Reader
"""

import os


def _env_float(name, default):
    """Read float environment variable with fallback on errors."""
    value = os.getenv(name)
    if value is None:
        return float(default)
    try:
        return float(value)
    except (TypeError, ValueError):
        return float(default)


def _env_str(name, default):
    """Read string environment variable, treating blank values as unset."""
    value = os.getenv(name, '').strip()
    return value or default


# Query tool
SMI_PATH = _env_str('GPU_TEMP_SMI_PATH', 'nvidia-smi')
QUERY_TIMEOUT = _env_float('GPU_TEMP_QUERY_TIMEOUT', 0.0)  # 0 disables the per-query timeout

# Poll loop
POLL_INTERVAL = _env_float('GPU_TEMP_POLL_INTERVAL', 1.0)  # Input wait doubles as the poll interval
QUIT_KEY = _env_str('GPU_TEMP_QUIT_KEY', 'q')

# Display
TEMPERATURE_WARNING_THRESHOLD = _env_float('GPU_TEMP_WARNING_THRESHOLD', 70.0)
FALLBACK_LOAD = 0.0
FALLBACK_MODEL = 'Unknown'

# Logging
LOG_FILE = _env_str('GPU_TEMP_LOG_FILE', 'gpu_temp_reader.log')
DEBUG = os.getenv('GPU_TEMP_DEBUG', 'false').lower() == 'true'
