"""Domain layer for scrobblehub."""
