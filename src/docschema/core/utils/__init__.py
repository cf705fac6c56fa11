"""Shared utilities (I/O, merging, identifiers)."""
