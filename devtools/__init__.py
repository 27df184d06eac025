"""Developer utilities."""
