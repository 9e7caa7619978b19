"""Validate command for configuration files."""

from pathlib import Path

import typer

from inference_bench.adapters import AdapterFactory
from inference_bench.core.config import load_config
from inference_bench.core.exceptions import ConfigError
from inference_bench.core.runner import concurrency_levels


def validate_command(
    config_path: Path = typer.Option(
        Path("config.json"),
        "--config", "-c",
        help="Path to configuration file",
    ),
) -> None:
    """Validate a configuration file without sending any requests."""
    try:
        config = load_config(config_path)
    except ConfigError as e:
        typer.echo(f"[inference-bench] Error: {e}", err=True)
        raise typer.Exit(1)

    ramp = config.concurrency
    levels = list(concurrency_levels(ramp.start, ramp.end, ramp.step))
    modes = [
        name
        for name, enabled in (
            ("streaming", config.test.streaming),
            ("non-streaming", config.test.non_streaming),
        )
        if enabled
    ]
    family = AdapterFactory.resolve(config.model.id).family

    print(f"[inference-bench] Configuration OK: {config_path}")
    print(f"[inference-bench] Model: {config.model.id} (family: {family})")
    print(f"[inference-bench] Modes: {', '.join(modes)}")
    print(f"[inference-bench] Concurrency levels: {levels}")
    print(
        f"[inference-bench] Estimated duration: "
        f"{len(levels) * len(modes) * ramp.duration_seconds:g}s"
    )
