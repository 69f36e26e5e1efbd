"""Trigram title matching between lost and found reports.

Scoring mirrors PostgreSQL's ``pg_trgm`` ``similarity()``: each word is
lower-cased and padded with two leading blanks and one trailing blank, and the
score is the Jaccard coefficient of the two trigram sets.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import List, Set

from flask import current_app, has_app_context

from ...extensions import db
from ...models.item import Item
from ..notifications.dispatcher import notify, publish_notifications

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 0.3

_WORD_RE = re.compile(r"[^\W_]+", re.UNICODE)


@dataclass(frozen=True)
class MatchCandidate:
    item: Item
    score: float


def trigrams(text: str | None) -> Set[str]:
    if not text:
        return set()
    grams: Set[str] = set()
    for word in _WORD_RE.findall(text.lower()):
        padded = f"  {word} "
        for i in range(len(padded) - 2):
            grams.add(padded[i:i + 3])
    return grams


def similarity(a: str | None, b: str | None) -> float:
    ta = trigrams(a)
    tb = trigrams(b)
    if not ta or not tb:
        return 0.0
    return len(ta & tb) / len(ta | tb)


def _threshold() -> float:
    if has_app_context():
        try:
            return float(current_app.config.get("MATCH_SIMILARITY_THRESHOLD", DEFAULT_THRESHOLD))
        except (TypeError, ValueError):
            return DEFAULT_THRESHOLD
    return DEFAULT_THRESHOLD


def opposite_kind(kind: str) -> str:
    return "found" if kind == "lost" else "lost"


def _candidates(item: Item) -> List[Item]:
    return (
        Item.query
        .filter(
            Item.kind == opposite_kind(item.kind),
            Item.status == "pending",
            Item.id != item.id,
        )
        .all()
    )


def _qualifying(item: Item) -> List[MatchCandidate]:
    threshold = _threshold()
    out: List[MatchCandidate] = []
    for cand in _candidates(item):
        score = similarity(item.title, cand.title)
        if score > threshold:
            out.append(MatchCandidate(item=cand, score=score))
    return out


def suggest_matches(item: Item, limit: int = 10) -> List[MatchCandidate]:
    """Qualifying candidates for display, best first. No side effects."""
    ranked = sorted(_qualifying(item), key=lambda m: (-m.score, m.item.id))
    return ranked[: max(1, min(50, limit))]


def run_match_pass(item: Item) -> List[MatchCandidate]:
    """Notify both owners for every qualifying candidate of a newly created item.

    Does not deduplicate: callers invoke it once per item creation.
    """
    matches = _qualifying(item)
    if not matches:
        return matches

    rows = []
    for m in matches:
        cand = m.item
        rows.append(notify(
            cand.owner_id,
            "match",
            "Potential match found",
            f"A {item.kind} item '{item.title}' may match your {cand.kind} report '{cand.title}'.",
            item_id=cand.id,
            related_item_id=item.id,
            payload={"score": round(m.score, 4)},
        ))
        rows.append(notify(
            item.owner_id,
            "match",
            "Potential match found",
            f"A {cand.kind} item '{cand.title}' may match your {item.kind} report '{item.title}'.",
            item_id=item.id,
            related_item_id=cand.id,
            payload={"score": round(m.score, 4)},
        ))
    db.session.commit()
    publish_notifications(rows)
    logger.info("Match pass for item %s notified %d candidate pair(s)", item.id, len(matches))
    return matches


def run_match_pass_safely(item: Item) -> List[MatchCandidate]:
    """Best-effort wrapper used after item creation: failures are logged, never raised."""
    item_id = item.id
    try:
        return run_match_pass(item)
    except Exception:
        db.session.rollback()
        logger.exception("Match pass failed for item %s", item_id)
        return []
