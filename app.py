#!/usr/bin/env python3
"""GPU Temp Reader - Terminal GPU temperature monitor (nvidia-smi + raw terminal input)"""

import logging
from pathlib import Path
from typing import Optional

import typer

from gpu_temp_reader import __version__, config
from gpu_temp_reader.alerts import TemperatureRule
from gpu_temp_reader.monitor import GPUTemperatureMonitor
from gpu_temp_reader.render import LineWriter
from gpu_temp_reader.terminal import RawTerminal

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

logger = logging.getLogger(__name__)

app = typer.Typer(
    help="Show GPU temperature, load and model from nvidia-smi. Press q to quit.",
    context_settings={"help_option_names": ["-h", "--help"]},
    add_completion=False,
)


def configure_logging(log_file, debug=False):
    """Log INFO and up to the console and everything to a fresh log file"""
    console = logging.StreamHandler()
    console.setLevel(logging.DEBUG if debug else logging.INFO)
    file_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
    file_handler.setLevel(logging.DEBUG)
    logging.basicConfig(
        level=logging.DEBUG,
        format=LOG_FORMAT,
        handlers=[console, file_handler],
        force=True,
    )


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"gpu-temp-reader {__version__}")
        raise typer.Exit()


@app.command()
def main(
    interval: float = typer.Option(
        config.POLL_INTERVAL,
        "--interval",
        "-i",
        min=0.0,
        help="Seconds to wait for a key press between polls.",
    ),
    threshold: float = typer.Option(
        config.TEMPERATURE_WARNING_THRESHOLD,
        "--threshold",
        "-t",
        help="Temperatures above this value (°C) are highlighted.",
    ),
    smi_path: str = typer.Option(
        config.SMI_PATH,
        "--smi-path",
        help="nvidia-smi executable to query.",
    ),
    query_timeout: float = typer.Option(
        config.QUERY_TIMEOUT,
        "--query-timeout",
        min=0.0,
        help="Seconds before a single nvidia-smi call is abandoned (0 waits forever).",
    ),
    log_file: Path = typer.Option(
        Path(config.LOG_FILE),
        "--log-file",
        dir_okay=False,
        help="Debug log file, truncated on every run.",
    ),
    debug: bool = typer.Option(
        config.DEBUG,
        "--debug/--no-debug",
        help="Also show debug messages on the console.",
    ),
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show the version and exit.",
    ),
) -> None:
    """Poll the GPU until q is pressed."""
    configure_logging(log_file, debug=debug)

    writer = LineWriter()
    terminal = RawTerminal()
    monitor = GPUTemperatureMonitor(
        terminal,
        writer=writer,
        rule=TemperatureRule(threshold=threshold),
        interval=interval,
        smi_path=smi_path,
        query_timeout=query_timeout,
    )

    try:
        with terminal:
            monitor.run()
    except OSError as e:
        logger.error(f"Terminal I/O failed: {e}")
        typer.secho(f"Terminal I/O failed: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    writer.newline()
    typer.echo("Program terminated.")
    logger.info("Exiting gpu_temp_reader")


if __name__ == '__main__':
    app()
