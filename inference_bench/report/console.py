"""Real-time console output for benchmark runs."""

from inference_bench.core.config import BenchmarkConfig
from inference_bench.core.models import LatencyStats, Stats

WIDTH = 80


def sorted_errors(errors_by_type: dict[str, int]) -> list[tuple[str, int]]:
    """Order error kinds by descending count, then name."""
    return sorted(errors_by_type.items(), key=lambda item: (-item[1], item[0]))


class ConsoleReporter:
    """Prints benchmark progress and results to stdout."""

    def print_header(self, config: BenchmarkConfig) -> None:
        """Print the test header."""
        ramp = config.concurrency
        print("=" * WIDTH)
        print("Inference Endpoint Performance Benchmark")
        print("=" * WIDTH)
        print(f"Model: {config.model.id}")
        print(f"Endpoint: {config.endpoint.url}")
        print(f"Prompt Size: {config.test.prompt_size} characters")
        print(f"Max Tokens: {config.test.max_tokens}")
        print(f"Temperature: {config.test.temperature:.2f}")
        print(f"Concurrency Range: {ramp.start} -> {ramp.end} (step: {ramp.step})")
        print(f"Duration per Level: {ramp.duration_seconds:g} seconds")
        print("=" * WIDTH)
        print()

    def print_section(self, title: str) -> None:
        print()
        print("-" * WIDTH)
        print(f">>> {title}")
        print("-" * WIDTH)
        print()

    def print_concurrency_level(self, level: int) -> None:
        print(f"\n[Concurrency Level: {level}]")
        print("Starting test...")

    def print_progress(self, stats: Stats, concurrency: int) -> None:
        print(
            f"  Progress: {stats.total_requests} requests"
            f" | Success: {stats.success_count}"
            f" | Failures: {stats.failure_count}"
            f" | Req/s: {stats.requests_per_second:.2f}"
            f" | Tokens/s: {stats.token_throughput:.2f}",
            flush=True,
        )

    def _print_latency_block(self, title: str, latency: LatencyStats) -> None:
        print(f"\n  {title}:")
        print(f"    Average:          {latency.avg:.2f}")
        print(f"    Min:              {latency.min:.2f}")
        print(f"    Max:              {latency.max:.2f}")
        print(f"    P50:              {latency.p50:.2f}")
        print(f"    P95:              {latency.p95:.2f}")
        print(f"    P99:              {latency.p99:.2f}")

    def print_stats(self, stats: Stats, concurrency: int) -> None:
        """Print detailed statistics for a completed level."""
        print("\nResults:")
        print("─" * WIDTH)

        print(f"  Total Requests:     {stats.total_requests}")
        print(f"  Successful:         {stats.success_count} ({stats.success_rate:.2f}%)")
        print(f"  Failed:             {stats.failure_count}")
        print(f"  Duration:           {stats.duration_seconds:.1f}s")

        print("\n  Throughput:")
        print(f"    Requests/sec:     {stats.requests_per_second:.2f}")
        print(f"    Tokens/sec:       {stats.token_throughput:.2f}")

        print("\n  Token Usage:")
        print(f"    Input Tokens:     {stats.total_input_tokens}")
        print(f"    Output Tokens:    {stats.total_output_tokens}")
        print(f"    Total Tokens:     {stats.total_tokens}")

        if stats.success_count > 0:
            self._print_latency_block("Latency (ms)", stats.latency)

        if stats.has_ttft:
            self._print_latency_block("Time to First Token (ms)", stats.ttft)

        if stats.errors_by_type:
            print("\n  Error Distribution:")
            for error_type, count in sorted_errors(stats.errors_by_type):
                print(f"    {error_type}: {count}")

        print("─" * WIDTH, flush=True)

    def print_report_saved(self, filename: str) -> None:
        print()
        print("=" * WIDTH)
        print(f"Report saved to: {filename}")
        print("=" * WIDTH)
