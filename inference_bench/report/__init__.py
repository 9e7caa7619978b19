"""Console and file report rendering."""

from inference_bench.report.console import ConsoleReporter
from inference_bench.report.markdown import MarkdownReporter

__all__ = ["ConsoleReporter", "MarkdownReporter"]
