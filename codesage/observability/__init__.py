"""Logging and in-process telemetry helpers."""
