"""Cross-cutting configuration: settings and logging."""
