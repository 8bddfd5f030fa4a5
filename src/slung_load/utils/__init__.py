"""Shared utilities: logging setup and config loading."""
