"""Rolling telemetry helpers."""
