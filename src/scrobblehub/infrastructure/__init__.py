"""Infrastructure layer: adapters, HTTP, logging."""
