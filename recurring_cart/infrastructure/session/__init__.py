from .memory_session import MemorySessionStore
from .redis_session import RedisSessionStore

__all__ = ['MemorySessionStore', 'RedisSessionStore']
