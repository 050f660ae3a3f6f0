"""Shared helpers: logging setup and input validation."""
