"""Unit tests for console and markdown reporting."""

from datetime import datetime

from inference_bench.core.models import ConcurrencyLevelStats, Stats
from inference_bench.report import ConsoleReporter, MarkdownReporter
from inference_bench.report.console import sorted_errors


class TestSortedErrors:
    def test_count_then_name(self):
        errors = {"TimeoutError": 2, "ThrottlingError": 5, "AccessDeniedError": 2}

        assert sorted_errors(errors) == [
            ("ThrottlingError", 5),
            ("AccessDeniedError", 2),
            ("TimeoutError", 2),
        ]


class TestMarkdownReporter:
    """Tests for MarkdownReporter."""

    def test_sections(self, sample_config, sample_level_stats):
        content = MarkdownReporter(sample_config).generate(
            sample_level_stats, generated_at=datetime(2024, 5, 1, 12, 30, 0)
        )

        assert content.startswith("# Inference Endpoint Performance Benchmark Report\n")
        assert "Generated: 2024-05-01 12:30:00" in content
        for heading in (
            "## Test Configuration",
            "## Overall Summary",
            "## Detailed Results by Concurrency Level",
            "## Latency Analysis",
            "## Time to First Token (TTFT) Analysis",
            "## Error Analysis",
        ):
            assert heading in content
        assert "| Model | deepseek-r1 |" in content
        assert "| Concurrency Range | 1 - 3 (step: 2) |" in content

    def test_overall_summary_totals(self, sample_config, sample_level_stats):
        content = MarkdownReporter(sample_config).generate(sample_level_stats)

        assert "| Total Requests | 200 |" in content
        assert "| Successful Requests | 190 (95.00%) |" in content
        assert "| Failed Requests | 5 |" in content
        assert "| Total Tokens Processed | 28500 |" in content

    def test_detailed_rows_carry_mode(self, sample_config, sample_level_stats):
        content = MarkdownReporter(sample_config).generate(sample_level_stats)

        assert "| 1 | streaming | 100 | 95.00% | 1.58 | 237.50 | 1200.00 | 1100.00 | 2000.00 | 2400.00 |" in content
        assert "| 1 | non-streaming | 100 |" in content

    def test_ttft_only_for_levels_with_samples(self, sample_config, sample_level_stats):
        content = MarkdownReporter(sample_config).generate(sample_level_stats)
        ttft_section = content.split("## Time to First Token (TTFT) Analysis")[1].split("## Error Analysis")[0]

        assert "| 1 | streaming | 150.00 | 300.00 | 900.00 | 280.00 | 600.00 | 850.00 |" in ttft_section
        assert "non-streaming" not in ttft_section

    def test_error_analysis(self, sample_config, sample_level_stats):
        content = MarkdownReporter(sample_config).generate(sample_level_stats)

        assert "| ThrottlingError | 4 |" in content
        assert "| TimeoutError | 1 |" in content
        assert "| 1 | streaming | 5 | ThrottlingError(4), TimeoutError(1) |" in content

    def test_no_errors_and_no_ttft(self, sample_config, sample_level_stats):
        content = MarkdownReporter(sample_config).generate(sample_level_stats[1:])

        assert "No errors occurred during the test." in content
        assert "Time to First Token" not in content

    def test_latency_skips_levels_without_successes(self, sample_config):
        failed = ConcurrencyLevelStats(
            concurrency_level=7,
            stats=Stats(total_requests=3, failure_count=3, errors_by_type={"ValidationError": 3}),
        )
        content = MarkdownReporter(sample_config).generate([failed])
        latency_section = content.split("## Latency Analysis")[1].split("## Error Analysis")[0]

        assert "| 7 |" not in latency_section
        assert "| 7 | non-streaming | 3 | ValidationError(3) |" in content

    def test_empty_results(self, sample_config):
        content = MarkdownReporter(sample_config).generate([])

        assert "| Successful Requests | 0 (0.00%) |" in content
        assert "No errors occurred during the test." in content

    def test_save(self, tmp_path, sample_config):
        reporter = MarkdownReporter(sample_config)
        path = tmp_path / "report.md"

        reporter.save("# Report\n", path)

        assert path.read_text() == "# Report\n"


class TestConsoleReporter:
    """Tests for ConsoleReporter."""

    def test_header(self, capsys, sample_config):
        ConsoleReporter().print_header(sample_config)
        out = capsys.readouterr().out

        assert "Model: deepseek-r1" in out
        assert "Concurrency Range: 1 -> 3 (step: 2)" in out
        assert "Duration per Level: 0.2 seconds" in out

    def test_progress(self, capsys, sample_stats):
        ConsoleReporter().print_progress(sample_stats, 4)
        out = capsys.readouterr().out

        assert "Progress: 100 requests | Success: 95 | Failures: 5" in out
        assert "Tokens/s: 237.50" in out

    def test_stats(self, capsys, sample_stats):
        ConsoleReporter().print_stats(sample_stats, 1)
        out = capsys.readouterr().out

        assert "Successful:         95 (95.00%)" in out
        assert "Latency (ms)" in out
        assert "Time to First Token (ms)" in out
        assert out.index("ThrottlingError: 4") < out.index("TimeoutError: 1")

    def test_stats_without_successes(self, capsys):
        ConsoleReporter().print_stats(
            Stats(total_requests=2, failure_count=2, errors_by_type={"UnknownError": 2}), 1
        )
        out = capsys.readouterr().out

        assert "Latency (ms)" not in out
        assert "Time to First Token" not in out
        assert "UnknownError: 2" in out

    def test_section_and_level(self, capsys):
        reporter = ConsoleReporter()
        reporter.print_section("Streaming Mode Test")
        reporter.print_concurrency_level(3)
        out = capsys.readouterr().out

        assert ">>> Streaming Mode Test" in out
        assert "[Concurrency Level: 3]" in out
