from .in_memory_catalog import InMemorySubscriptionCatalog

__all__ = ['InMemorySubscriptionCatalog']
