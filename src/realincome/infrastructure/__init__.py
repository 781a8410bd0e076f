"""Infrastructure layer: configuration, logging, cache, data providers, containers."""
