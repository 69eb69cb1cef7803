"""Preflight checks for database dependencies via their command-line clients."""
