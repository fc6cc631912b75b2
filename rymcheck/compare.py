from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from rymcheck.config import DEFAULT_POLICY, MATCH_FIELDS, MatchPolicy
from rymcheck.normalize import normalize, similarity
from rymcheck.types import AlbumRecord

logger = logging.getLogger(__name__)

Keys = Tuple[str, ...]


@dataclass(frozen=True)
class ReconciliationResult:
    unique: List[AlbumRecord]
    matched: int

    @property
    def total(self) -> int:
        return len(self.unique) + self.matched


def _strip_article(text: str, articles: Sequence[str]) -> str:
    # "the beatles" and "beatles the" (from "Beatles, The") both become "beatles"
    words = text.split(" ")
    if len(words) < 2:
        return text
    if words[0] in articles:
        return " ".join(words[1:])
    if words[-1] in articles:
        return " ".join(words[:-1])
    return text


def comparison_keys(record: AlbumRecord, policy: MatchPolicy = DEFAULT_POLICY) -> Keys:
    """
    Normalized (title, artist) used for scoring.

    On top of normalize(), one leading or trailing article from
    policy.articles is dropped. This is intentional: plain edit distance
    scores "beatles" vs "the beatles" at 1 - 4/11, below the 0.75 default,
    so without it "Beatles" and "The Beatles" never match. Keep it; pass
    articles=() for bare normalize() keys.
    """
    return tuple(
        _strip_article(normalize(getattr(record, field)), policy.articles)
        for field in MATCH_FIELDS
    )


def _accepts(local_keys: Keys, ref_keys: Keys, policy: MatchPolicy) -> bool:
    # Conjunctive: every field must clear its own threshold
    for field, a, b in zip(MATCH_FIELDS, local_keys, ref_keys):
        if not similarity(a, b) > policy.threshold_for(field):
            return False
    return True


def _first_match(
    local_keys: Keys,
    reference: Iterable[Tuple[AlbumRecord, Keys]],
    policy: MatchPolicy,
) -> Optional[AlbumRecord]:
    for ref, ref_keys in reference:
        if _accepts(local_keys, ref_keys, policy):
            return ref
    return None


def find_match(
    record: AlbumRecord,
    reference: Iterable[AlbumRecord],
    policy: MatchPolicy = DEFAULT_POLICY,
) -> Optional[AlbumRecord]:
    """
    Returns the first reference record (in reference order) accepted as a match
    for `record`, or None. Scanning stops at the first acceptance; it is not a
    best-score search.
    """
    keyed = ((ref, comparison_keys(ref, policy)) for ref in reference)
    return _first_match(comparison_keys(record, policy), keyed, policy)


def reconcile(
    local: Sequence[AlbumRecord],
    reference: Sequence[AlbumRecord],
    policy: MatchPolicy = DEFAULT_POLICY,
) -> ReconciliationResult:
    """
    Partitions `local` into records already present in `reference` and those
    that are not. `unique` keeps the relative order of `local`.
    """
    # Reference keys are reused for every local record
    keyed_ref = [(ref, comparison_keys(ref, policy)) for ref in reference]

    unique: List[AlbumRecord] = []
    matched = 0
    for rec in local:
        hit = _first_match(comparison_keys(rec, policy), keyed_ref, policy)
        if hit is None:
            unique.append(rec)
        else:
            matched += 1
            logger.debug("match: %s <-> %s", rec.label(), hit.label())

    logger.info(
        "Reconciled %d local albums against %d reference albums: %d matched, %d unique",
        len(local), len(keyed_ref), matched, len(unique),
    )
    return ReconciliationResult(unique=unique, matched=matched)


def reference_json(reference: Sequence[AlbumRecord]) -> str:
    rows: List[Dict] = [r.to_dict() for r in reference]
    return json.dumps(rows, indent=2, ensure_ascii=False)
