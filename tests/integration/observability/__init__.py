"""Observability integration tests using the OpenTelemetry SDK."""
