"""Expand and flatten helpers between attribute blocks and API payloads."""
