"""Core domain definitions."""
