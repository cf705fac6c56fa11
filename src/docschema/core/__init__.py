"""Core of the document model compiler: declarations, registry, generators."""
