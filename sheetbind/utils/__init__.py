"""Internal helpers for logging and filesystem handling."""
