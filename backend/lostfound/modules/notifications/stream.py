"""Server-Sent Events over the in-process bus."""
from __future__ import annotations

import json
import time
from queue import Empty

from flask import Response, stream_with_context

from .bus import Predicate, subscribe, unsubscribe

# Below gunicorn's worker timeout so idle streams still yield
KEEPALIVE_SECONDS = 15

_SSE_HEADERS = {
    "Content-Type": "text/event-stream",
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


def _frame(event: str, payload: dict) -> str:
    return f"event: {event}\ndata: {json.dumps(payload)}\n\n"


def sse_response(table: str, predicate: Predicate, event: str) -> Response:
    """Stream every ``table`` row accepted by ``predicate`` as an ``event`` frame.

    The subscription is dropped when the client disconnects.
    """
    q = subscribe(table, predicate)

    def frames():
        try:
            yield ": connected\n\n"
            while True:
                try:
                    row = q.get(timeout=KEEPALIVE_SECONDS)
                except Empty:
                    yield _frame("ping", {"ts": int(time.time())})
                    continue
                yield _frame(event, row)
        finally:
            unsubscribe(table, q)

    return Response(stream_with_context(frames()), headers=_SSE_HEADERS)
