"""Transport layer - shared async HTTP client."""

from .http_client import HttpReply, SharedHttpClient, get_shared_http_client, shutdown_shared_http_client

__all__ = ["HttpReply", "SharedHttpClient", "get_shared_http_client", "shutdown_shared_http_client"]
