"""Infrastructure layer: logging, resilience, waiters, persistence and registry."""
