"""Command-line interface for inference-bench."""
