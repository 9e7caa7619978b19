"""Run command for concurrency ramp benchmarks."""

import functools
import json
import signal
from pathlib import Path
from typing import Optional

import typer

from inference_bench.adapters import AdapterFactory
from inference_bench.core.cancellation import CancellationToken
from inference_bench.core.config import load_config
from inference_bench.core.exceptions import BenchmarkError, ConfigError
from inference_bench.core.models import ConcurrencyLevelStats
from inference_bench.core.runner import Runner
from inference_bench.logging_config import configure_logging, get_logger
from inference_bench.report import ConsoleReporter, MarkdownReporter

logger = get_logger(__name__)


def install_signal_handlers(
    token: CancellationToken,
    received: list[int],
) -> dict[int, object]:
    """Cancel ``token`` on SIGINT/SIGTERM; returns the previous handlers.

    The handler only records the signal number in ``received`` and cancels
    the token. Reporting happens on the main thread once the run unwinds.
    """

    def handle_signal(signum, frame) -> None:
        received.append(signum)
        token.cancel()

    previous = {}
    for signum in (signal.SIGINT, signal.SIGTERM):
        previous[signum] = signal.signal(signum, handle_signal)
    return previous


def restore_signal_handlers(previous: dict[int, object]) -> None:
    for signum, handler in previous.items():
        signal.signal(signum, handler)


def save_json_results(all_stats: list[ConcurrencyLevelStats], path: Path) -> None:
    """Dump per-level results as JSON."""
    data = [level.model_dump(mode="json") for level in all_stats]
    with open(path, "w") as f:
        json.dump(data, f, indent=2)


def run_command(
    config_path: Path = typer.Option(
        Path("config.json"),
        "--config", "-c",
        help="Path to configuration file",
    ),
    api_key: Optional[str] = typer.Option(
        None,
        "--api-key",
        help="API key for authentication (overrides endpoint.api_key)",
        envvar="LLM_API_KEY",
    ),
    log_level: str = typer.Option(
        "WARNING",
        "--log-level",
        help="Log level for diagnostics written to stderr",
    ),
    json_logs: bool = typer.Option(
        False,
        "--json-logs",
        help="Write diagnostics as JSON lines",
    ),
) -> None:
    """Run the concurrency ramp benchmark.

    Examples:

        # Run with the settings in config.json
        inference-bench run --config config.json

        # Verbose diagnostics as JSON
        inference-bench run -c config.json --log-level INFO --json-logs
    """
    try:
        configure_logging(log_level, json_logs)
    except ValueError as e:
        typer.echo(f"[inference-bench] Error: {e}", err=True)
        raise typer.Exit(1)

    try:
        config = load_config(config_path)
    except ConfigError as e:
        typer.echo(f"Failed to load configuration: {e}", err=True)
        raise typer.Exit(1)

    if api_key:
        config.endpoint.api_key = api_key

    console = ConsoleReporter()
    console.print_header(config)

    client_factory = functools.partial(AdapterFactory.create, config)
    runner = Runner(config, client_factory, reporter=console)

    token = CancellationToken()
    received: list[int] = []
    previous_handlers = install_signal_handlers(token, received)
    try:
        all_stats = runner.run(token)
    except BenchmarkError as e:
        logger.error("benchmark_failed", error=str(e))
        typer.echo(f"Benchmark failed: {e}", err=True)
        raise typer.Exit(1)
    finally:
        restore_signal_handlers(previous_handlers)

    if received:
        logger.warning("signal_received", signal=signal.Signals(received[0]).name)
        typer.echo("Received interrupt signal, remaining levels skipped.", err=True)

    generator = MarkdownReporter(config)
    try:
        generator.save(generator.generate(all_stats), config.output.report_file)
        if config.output.json_file:
            save_json_results(all_stats, Path(config.output.json_file))
    except OSError as e:
        typer.echo(f"Failed to generate report: failed to save report: {e}", err=True)
        raise typer.Exit(1)

    console.print_report_saved(config.output.report_file)
    if config.output.json_file:
        print(f"Results saved to: {config.output.json_file}")

    print("\nBenchmark completed successfully!")
