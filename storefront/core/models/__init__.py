"""I/O and domain models."""
