from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, cast

import redis


@dataclass(frozen=True, slots=True)
class EventLog:
    session_code: str

    @property
    def key(self) -> str:
        return f"connectn:events:{self.session_code}"


def publish_event(*, r: redis.Redis, log: EventLog, fields: Mapping[str, str]) -> str:
    """Append an entry to a session's event log stream."""

    # redis-py stubs expect field/value unions; in our app we only use string fields/values.
    stream_id = r.xadd(log.key, {str(k): str(v) for k, v in fields.items()})
    return cast(str, stream_id)


def read_events(*, r: redis.Redis, log: EventLog, count: int = 50, start: str = "-", end: str = "+") -> list[dict[str, object]]:
    entries = r.xrange(log.key, min=start, max=end, count=count)
    return [{"id": mid, "fields": fields} for mid, fields in entries]


def drop_event_log(*, r: redis.Redis, log: EventLog) -> None:
    r.delete(log.key)
