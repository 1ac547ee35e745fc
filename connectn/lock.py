from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from uuid import uuid4

import redis

from connectn.errors import SessionBusy

# Compare-and-delete in one round trip, so an expired hold that someone else
# re-took is never released by us.
_RELEASE_SCRIPT = """
if redis.call('get', KEYS[1]) == ARGV[1] then
    return redis.call('del', KEYS[1])
end
return 0
"""


def lock_key(code: str) -> str:
    return f"connectn:lock:session:{code}"


@contextmanager
def session_lock(*, r: redis.Redis, code: str, ttl_ms: int = 5_000) -> Iterator[str]:
    """Per-session mutual exclusion across workers sharing one Redis.

    Every inbound message for a session runs under this lock, so a session
    only ever sees one transition at a time. A holder that dies releases it
    through the TTL. Contention is reported as `SessionBusy`, never waited on.
    """

    key = lock_key(code)
    token = uuid4().hex
    if not r.set(key, token, nx=True, px=ttl_ms):
        raise SessionBusy()
    try:
        yield token
    finally:
        r.register_script(_RELEASE_SCRIPT)(keys=[key], args=[token])
