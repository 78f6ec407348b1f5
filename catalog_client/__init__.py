"""catalog_client - resilient data-access layer for the storefront admin catalog."""

from .client import CatalogClient

__all__ = ["CatalogClient"]
