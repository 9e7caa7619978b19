"""Inference Bench - concurrency ramp load testing for LLM inference endpoints."""

__version__ = "0.3.0"
