"""Concurrency ramp runner."""

from typing import Iterator, Optional, Protocol

from inference_bench.core.cancellation import CancellationToken
from inference_bench.core.config import BenchmarkConfig
from inference_bench.core.exceptions import BenchmarkError
from inference_bench.core.metrics import MetricsCollector
from inference_bench.core.models import ConcurrencyLevelStats, Stats
from inference_bench.core.worker_pool import ClientFactory, WorkerPool
from inference_bench.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_PROMPT_TEMPLATE = (
    "Please write a detailed explanation about artificial intelligence, "
    "covering its history, applications, and future prospects. "
    "Make your response approximately {size} characters long."
)
PROMPT_PADDING = "Please provide more detailed information. "


class ProgressReporter(Protocol):
    """Receives sweep events and live snapshots while a benchmark runs."""

    def print_section(self, title: str) -> None: ...

    def print_concurrency_level(self, level: int) -> None: ...

    def print_progress(self, stats: Stats, concurrency: int) -> None: ...

    def print_stats(self, stats: Stats, concurrency: int) -> None: ...


def generate_prompt(template: str, size: int) -> str:
    """Generate a prompt of exactly ``size`` characters.

    Args:
        template: Prompt template; ``{size}`` is replaced with the size. An
            empty template selects the default one.
        size: Target prompt length in characters.

    Returns:
        Prompt string truncated or padded to ``size`` characters.
    """
    if not template:
        template = DEFAULT_PROMPT_TEMPLATE

    prompt = template.replace("{size}", str(size))
    if len(prompt) >= size:
        return prompt[:size]

    padding = PROMPT_PADDING * ((size - len(prompt)) // 45 + 1)
    prompt = prompt + " " + padding
    return prompt[:size]


def concurrency_levels(start: int, end: int, step: int) -> Iterator[int]:
    """Yield concurrency levels from ``start`` to ``end`` inclusive."""
    if step <= 0:
        raise ValueError(f"step must be positive, got {step}")
    level = start
    while level <= end:
        yield level
        level += step


class Runner:
    """Orchestrates streaming and non-streaming concurrency sweeps."""

    def __init__(
        self,
        config: BenchmarkConfig,
        client_factory: ClientFactory,
        reporter: Optional[ProgressReporter] = None,
    ):
        """Initialize the runner.

        Args:
            config: Validated benchmark configuration.
            client_factory: Callable returning a fresh invocation client; called
                once per worker.
            reporter: Optional receiver of section banners and live progress.
        """
        self.config = config
        self.client_factory = client_factory
        self.reporter = reporter
        self.prompt = generate_prompt(config.test.prompt_template, config.test.prompt_size)

    def run(self, cancellation: Optional[CancellationToken] = None) -> list[ConcurrencyLevelStats]:
        """Run every enabled sweep.

        Streaming results precede non-streaming results.

        Raises:
            BenchmarkError: If any concurrency level run fails.
        """
        cancellation = cancellation or CancellationToken()
        all_stats: list[ConcurrencyLevelStats] = []

        if self.config.test.streaming:
            self._section("Streaming Mode Test")
            try:
                all_stats.extend(self.run_sweep(True, cancellation))
            except BenchmarkError as e:
                raise BenchmarkError(f"streaming test failed: {e}") from e

        if self.config.test.non_streaming:
            self._section("Non-Streaming Mode Test")
            try:
                all_stats.extend(self.run_sweep(False, cancellation))
            except BenchmarkError as e:
                raise BenchmarkError(f"non-streaming test failed: {e}") from e

        return all_stats

    def run_sweep(
        self,
        streaming: bool,
        cancellation: CancellationToken,
    ) -> list[ConcurrencyLevelStats]:
        """Run one mode across all configured concurrency levels."""
        ramp = self.config.concurrency
        results: list[ConcurrencyLevelStats] = []

        logger.info(
            "sweep_started",
            streaming=streaming,
            start=ramp.start,
            end=ramp.end,
            step=ramp.step,
        )

        for level in concurrency_levels(ramp.start, ramp.end, ramp.step):
            if cancellation.cancelled:
                logger.warning("sweep_cancelled", streaming=streaming, next_level=level)
                break

            if self.reporter:
                self.reporter.print_concurrency_level(level)

            try:
                stats = self.run_level(level, streaming, cancellation)
            except BenchmarkError as e:
                raise BenchmarkError(f"concurrency level {level} failed: {e}") from e

            results.append(
                ConcurrencyLevelStats(concurrency_level=level, streaming=streaming, stats=stats)
            )
            if self.reporter:
                self.reporter.print_stats(stats, level)

        logger.info("sweep_finished", streaming=streaming, levels=len(results))
        return results

    def run_level(
        self,
        level: int,
        streaming: bool,
        cancellation: CancellationToken,
    ) -> Stats:
        """Run a single concurrency level for the configured duration."""
        ramp = self.config.concurrency
        collector = MetricsCollector()
        pool = WorkerPool(self.client_factory, collector, streaming, self.prompt, level)
        level_token = cancellation.child(timeout=ramp.duration_seconds)

        logger.info(
            "level_started",
            concurrency=level,
            streaming=streaming,
            duration_seconds=ramp.duration_seconds,
        )

        try:
            pool.start(level_token)
            while not level_token.wait(ramp.progress_interval_seconds):
                if self.reporter:
                    self.reporter.print_progress(collector.snapshot(), level)
        finally:
            pool.stop()
            level_token.release()

        collector.finalize()
        stats = collector.snapshot()

        logger.info(
            "level_completed",
            concurrency=level,
            streaming=streaming,
            total_requests=stats.total_requests,
            success_count=stats.success_count,
            failure_count=stats.failure_count,
        )
        return stats

    def _section(self, title: str) -> None:
        if self.reporter:
            self.reporter.print_section(title)
