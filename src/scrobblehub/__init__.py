"""scrobblehub - listening activity source resolution and lifecycle."""

__version__ = "0.1.0"
