from __future__ import annotations

import os

import redis


def get_redis_url() -> str | None:
    # Frame streams are opt-in: no REDIS_URL, no Redis.
    return os.environ.get("REDIS_URL") or None


def create_redis() -> redis.Redis | None:
    url = get_redis_url()
    if url is None:
        return None
    # decode_responses=True => strings in/out instead of bytes
    return redis.Redis.from_url(url, decode_responses=True)
