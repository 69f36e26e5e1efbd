from __future__ import annotations

import logging
from queue import Queue, Full
from threading import Lock
from typing import Any, Callable, Dict, List, Tuple

logger = logging.getLogger(__name__)

Predicate = Callable[[Dict[str, Any]], bool]

# Simple in-memory pub/sub of row-change events for SSE. Not suitable for multi-process deployments.
_subs: dict[str, List[Tuple[Queue, Predicate]]] = {}
_lock = Lock()


def subscribe(table: str, predicate: Predicate | None = None, maxsize: int = 100) -> Queue:
    q: Queue = Queue(maxsize=maxsize)
    with _lock:
        _subs.setdefault(table, []).append((q, predicate or (lambda _row: True)))
    return q


def unsubscribe(table: str, q: Queue) -> None:
    with _lock:
        arr = _subs.get(table)
        if not arr:
            return
        arr[:] = [(sq, pred) for sq, pred in arr if sq is not q]
        if not arr:
            _subs.pop(table, None)


def publish(table: str, row: Dict[str, Any]) -> int:
    """Deliver ``row`` to every subscriber of ``table`` whose predicate accepts it.

    Best-effort: returns the number of queues that took the event; slow or
    broken subscribers are skipped.
    """
    with _lock:
        arr = list(_subs.get(table, []))
    delivered = 0
    for q, predicate in arr:
        try:
            if not predicate(row):
                continue
            q.put_nowait(row)
            delivered += 1
        except Full:
            logger.warning("Dropping %s event for a full subscriber queue", table)
        except Exception:
            logger.exception("Subscriber predicate failed for %s event", table)
    return delivered


def subscriber_count(table: str) -> int:
    with _lock:
        return len(_subs.get(table, []))
