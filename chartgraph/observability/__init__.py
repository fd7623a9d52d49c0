"""Logging and metrics for chartgraph."""
