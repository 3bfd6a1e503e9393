"""Latency benchmarks for the table variants (see `runner`)."""
