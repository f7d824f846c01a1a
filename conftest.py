"""Shared pytest configuration."""

pytest_plugins = ["authzkit.testing.fixtures"]
