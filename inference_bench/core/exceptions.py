"""Exceptions raised by the benchmark core."""


class BenchmarkError(Exception):
    """A run-level failure that aborts the whole benchmark."""


class ConfigError(Exception):
    """Raised when the configuration file cannot be loaded or is invalid."""
