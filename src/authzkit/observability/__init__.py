"""Observability – logging of authorization decisions and diagnostics."""
