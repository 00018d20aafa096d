"""Application layer: example plugin, use cases and startup."""
