"""Ports (interfaces) implemented by infrastructure adapters."""

from scrobblehub.domain.ports.source import ISource

__all__ = ["ISource"]
