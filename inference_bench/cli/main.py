"""Inference Bench CLI - Main entry point."""

from typing import Optional

import typer

from inference_bench import __version__
from inference_bench.cli.commands.run import run_command
from inference_bench.cli.commands.validate import validate_command

app = typer.Typer(
    name="inference-bench",
    help="Concurrency ramp benchmark for LLM inference endpoints",
    add_completion=False,
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        print(f"inference-bench version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """Inference Bench - measure an inference endpoint under increasing concurrency.

    Each concurrency level runs for a fixed window; streaming and
    non-streaming sweeps are run back to back when both are enabled.

    Examples:

        # Run the benchmark described by config.json
        inference-bench run --config config.json

        # Check a configuration and show the levels it will visit
        inference-bench validate --config config.json
    """
    pass


app.command("run", help="Run the benchmark described by a config file")(run_command)
app.command("validate", help="Validate a config file and show the sweep")(validate_command)


if __name__ == "__main__":
    app()
