"""Processing engines."""
