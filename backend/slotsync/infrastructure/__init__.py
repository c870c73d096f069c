"""
Infrastructure layer - external system integrations.
Keeps sync logic clean from implementation details.
"""

from .redis_client import get_redis, close_redis, RedisClient

__all__ = ['get_redis', 'close_redis', 'RedisClient']
