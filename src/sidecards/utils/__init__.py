"""Shared utilities: logging, atomic I/O and path validation."""
