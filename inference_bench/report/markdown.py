"""Markdown report generation."""

from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from inference_bench.core.config import BenchmarkConfig
from inference_bench.core.models import ConcurrencyLevelStats, LatencyStats
from inference_bench.report.console import sorted_errors

_DISTRIBUTION_HEADER = (
    "| Concurrency | Mode | Min (ms) | Avg (ms) | Max (ms) | P50 (ms) | P95 (ms) | P99 (ms) |\n"
    "|-------------|------|----------|----------|----------|----------|----------|----------|\n"
)


class MarkdownReporter:
    """Renders the full benchmark report as Markdown."""

    def __init__(self, config: BenchmarkConfig):
        self.config = config

    def generate(
        self,
        all_stats: list[ConcurrencyLevelStats],
        generated_at: Optional[datetime] = None,
    ) -> str:
        """Generate the full markdown report.

        Args:
            all_stats: Results in the order the levels were run.
            generated_at: Report timestamp; defaults to now.

        Returns:
            Report content.
        """
        generated_at = generated_at or datetime.now()
        parts = [
            "# Inference Endpoint Performance Benchmark Report\n\n",
            f"Generated: {generated_at:%Y-%m-%d %H:%M:%S}\n\n",
            self._configuration(),
            self._overall_summary(all_stats),
            self._detailed_results(all_stats),
            self._latency_analysis(all_stats),
            self._ttft_analysis(all_stats),
            self._error_analysis(all_stats),
        ]
        return "".join(parts)

    def save(self, content: str, path: Union[str, Path]) -> None:
        """Write report content to ``path``."""
        Path(path).write_text(content, encoding="utf-8")

    def _configuration(self) -> str:
        cfg = self.config
        ramp = cfg.concurrency
        rows = [
            ("Model", cfg.model.id),
            ("Endpoint", cfg.endpoint.url),
            ("Quota", str(cfg.model.quota)),
            ("Prompt Size", f"{cfg.test.prompt_size} characters"),
            ("Max Tokens", str(cfg.test.max_tokens)),
            ("Temperature", f"{cfg.test.temperature:.2f}"),
            ("Service Tier", cfg.test.service_tier),
            ("Streaming Enabled", str(cfg.test.streaming).lower()),
            ("Non-Streaming Enabled", str(cfg.test.non_streaming).lower()),
            ("Concurrency Range", f"{ramp.start} - {ramp.end} (step: {ramp.step})"),
            ("Duration per Level", f"{ramp.duration_seconds:g} seconds"),
        ]
        lines = ["## Test Configuration\n\n", "| Parameter | Value |\n", "|-----------|-------|\n"]
        lines.extend(f"| {name} | {value} |\n" for name, value in rows)
        lines.append("\n")
        return "".join(lines)

    def _overall_summary(self, all_stats: list[ConcurrencyLevelStats]) -> str:
        total_requests = sum(s.stats.total_requests for s in all_stats)
        total_success = sum(s.stats.success_count for s in all_stats)
        total_failures = sum(s.stats.failure_count for s in all_stats)
        total_tokens = sum(s.stats.total_tokens for s in all_stats)
        success_rate = total_success / total_requests * 100.0 if total_requests > 0 else 0.0

        return (
            "## Overall Summary\n\n"
            "| Metric | Value |\n"
            "|--------|-------|\n"
            f"| Total Requests | {total_requests} |\n"
            f"| Successful Requests | {total_success} ({success_rate:.2f}%) |\n"
            f"| Failed Requests | {total_failures} |\n"
            f"| Total Tokens Processed | {total_tokens} |\n\n"
        )

    def _detailed_results(self, all_stats: list[ConcurrencyLevelStats]) -> str:
        lines = [
            "## Detailed Results by Concurrency Level\n\n",
            "| Concurrency | Mode | Requests | Success Rate | Req/s | Tokens/s "
            "| Avg Latency (ms) | P50 (ms) | P95 (ms) | P99 (ms) |\n",
            "|-------------|------|----------|--------------|-------|----------"
            "|------------------|----------|----------|----------|\n",
        ]
        for level in all_stats:
            s = level.stats
            lines.append(
                f"| {level.concurrency_level} | {level.mode} | {s.total_requests} "
                f"| {s.success_rate:.2f}% | {s.requests_per_second:.2f} "
                f"| {s.token_throughput:.2f} | {s.latency.avg:.2f} | {s.latency.p50:.2f} "
                f"| {s.latency.p95:.2f} | {s.latency.p99:.2f} |\n"
            )
        lines.append("\n")
        return "".join(lines)

    def _latency_analysis(self, all_stats: list[ConcurrencyLevelStats]) -> str:
        lines = [
            "## Latency Analysis\n\n",
            "### Latency Distribution by Concurrency Level\n\n",
            _DISTRIBUTION_HEADER,
        ]
        for level in all_stats:
            if level.stats.success_count > 0:
                lines.append(self._distribution_row(level, level.stats.latency))
        lines.append("\n")
        return "".join(lines)

    def _ttft_analysis(self, all_stats: list[ConcurrencyLevelStats]) -> str:
        with_ttft = [level for level in all_stats if level.stats.has_ttft]
        if not with_ttft:
            return ""

        lines = [
            "## Time to First Token (TTFT) Analysis\n\n",
            "### TTFT Distribution by Concurrency Level (Streaming Mode)\n\n",
            _DISTRIBUTION_HEADER,
        ]
        lines.extend(self._distribution_row(level, level.stats.ttft) for level in with_ttft)
        lines.append("\n")
        return "".join(lines)

    def _distribution_row(self, level: ConcurrencyLevelStats, latency: LatencyStats) -> str:
        return (
            f"| {level.concurrency_level} | {level.mode} | {latency.min:.2f} | {latency.avg:.2f} "
            f"| {latency.max:.2f} | {latency.p50:.2f} | {latency.p95:.2f} | {latency.p99:.2f} |\n"
        )

    def _error_analysis(self, all_stats: list[ConcurrencyLevelStats]) -> str:
        all_errors: dict[str, int] = {}
        for level in all_stats:
            for error_type, count in level.stats.errors_by_type.items():
                all_errors[error_type] = all_errors.get(error_type, 0) + count

        if not all_errors:
            return "## Error Analysis\n\nNo errors occurred during the test.\n\n"

        lines = [
            "## Error Analysis\n\n",
            "### Error Distribution\n\n",
            "| Error Type | Count |\n",
            "|------------|-------|\n",
        ]
        lines.extend(f"| {error_type} | {count} |\n" for error_type, count in sorted_errors(all_errors))
        lines.append("\n")

        lines.extend([
            "### Errors by Concurrency Level\n\n",
            "| Concurrency | Mode | Total Errors | Error Types |\n",
            "|-------------|------|--------------|-------------|\n",
        ])
        for level in all_stats:
            if level.stats.failure_count > 0:
                error_types = ", ".join(
                    f"{error_type}({count})"
                    for error_type, count in sorted_errors(level.stats.errors_by_type)
                )
                lines.append(
                    f"| {level.concurrency_level} | {level.mode} "
                    f"| {level.stats.failure_count} | {error_types} |\n"
                )
        lines.append("\n")
        return "".join(lines)
