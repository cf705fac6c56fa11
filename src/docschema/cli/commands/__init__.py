"""docschema CLI commands (auto-discovered)."""
