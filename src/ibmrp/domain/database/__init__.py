"""Managed database domain: states, scaling limits and connection details."""
