from __future__ import annotations

from functools import lru_cache

import redis

from adventure.assets.registry import Catalog, get_catalog
from adventure.infra.redis_client import create_redis
from adventure.session_store import SessionRegistry, registry
from adventure.settings import Settings, load_settings


@lru_cache(maxsize=1)
def _shared_redis() -> redis.Redis | None:
    # Sessions outlive requests and keep publishing frames, so the client is process-wide.
    return create_redis()


def get_redis() -> redis.Redis | None:
    return _shared_redis()


def get_settings() -> Settings:
    return load_settings()


def get_catalog_dep() -> Catalog:
    return get_catalog()


def get_registry() -> SessionRegistry:
    return registry
