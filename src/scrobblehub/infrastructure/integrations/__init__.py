"""HTTP integration helpers."""

from scrobblehub.infrastructure.integrations.http_pool import HttpClientPool

__all__ = ["HttpClientPool"]
