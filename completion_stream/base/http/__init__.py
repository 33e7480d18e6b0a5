"""HTTP utilities package for the completion client.

Exposes the bounded provider client pool.
"""

from .pool import PooledClient, ProviderClientPool, api_key_fingerprint, pool_key

__all__ = ["PooledClient", "ProviderClientPool", "api_key_fingerprint", "pool_key"]
