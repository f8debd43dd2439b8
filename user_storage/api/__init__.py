"""HTTP surface: federation API, health checks and JSON error handlers."""
