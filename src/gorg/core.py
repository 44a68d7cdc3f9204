"""Project matching helpers (pure functions, no I/O)."""

from typing import List, Optional, Sequence, Tuple

from .models import Candidate, MatchMode, ScoredCandidate

SEGMENT_SEPARATORS = frozenset("/-_.")


def is_segment_start(text: str, pos: int) -> bool:
    """Return True if pos directly follows a separator such as "/" or "-"."""
    return pos > 0 and text[pos - 1] in SEGMENT_SEPARATORS


def is_subsequence(query: str, text: str) -> bool:
    """Return True if query's characters occur in text in order, ignoring case."""
    it = iter(text.lower())
    return all(ch in it for ch in query.lower())


def best_placement(query: str, text: str) -> Optional[Tuple[int, int, int]]:
    """Find the best way to place query's characters inside text.

    Both arguments are expected to be lowercased already. Placements are
    compared by, in order: smallest span between the first and last
    matched character, most matched characters on a segment start, and
    a first match at position 0.

    Returns (start, end, boundary_count) or None if query is not a
    subsequence of text.
    """
    if not query:
        return None
    n = len(text)
    bonus = [1 if is_segment_start(text, i) else 0 for i in range(n)]

    # placed[p]: best (start, boundary_count) for the query so far ending at p.
    # For a fixed end the latest start is the tightest span, and adding a
    # character adds the same bonus to every placement ending at p, so the
    # lexicographic maximum is all that has to be kept.
    placed: List[Optional[Tuple[int, int]]] = [
        (p, bonus[p]) if text[p] == query[0] else None for p in range(n)
    ]
    for ch in query[1:]:
        nxt: List[Optional[Tuple[int, int]]] = [None] * n
        running: Optional[Tuple[int, int]] = None
        for p in range(n):
            if running is not None and text[p] == ch:
                nxt[p] = (running[0], running[1] + bonus[p])
            if placed[p] is not None and (running is None or placed[p] > running):
                running = placed[p]
        placed = nxt

    best = None
    best_key = None
    for end, found in enumerate(placed):
        if found is None:
            continue
        start, boundaries = found
        key = (start - end, boundaries, start == 0)
        if best_key is None or key > best_key:
            best_key = key
            best = (start, end, boundaries)
    return best


def fuzzy_score(query: str, text: str) -> Optional[int]:
    """Score text against query, or None if it does not match.

    Higher is better. The weights keep the priority order strict: one
    character less of span outweighs any number of segment-start
    matches, and one segment-start match outweighs starting at 0.
    """
    if not query:
        return 0
    q = query.lower()
    t = text.lower()
    if not is_subsequence(q, t):
        return None
    placement = best_placement(q, t)
    if placement is None:
        return None
    start, end, boundaries = placement
    span_weight = 2 * len(q) + 2
    return -(end - start) * span_weight + 2 * boundaries + (1 if start == 0 else 0)


def prefix_matches(query: str, text: str) -> bool:
    return text.lower().startswith(query.lower())


def match(
    query: str, candidates: Sequence[Candidate], mode: MatchMode = "fuzzy"
) -> List[ScoredCandidate]:
    """Filter and rank candidates against query.

    Output is sorted by descending score. Fuzzy ties go to the shorter
    text, then to the earlier candidate; prefix matches and the empty
    query keep the original candidate order. Never raises: no match is
    an empty list.
    """
    if not query:
        return [
            ScoredCandidate(candidate=c, score=0, tie_break=(i,))
            for i, c in enumerate(candidates)
        ]

    results: List[ScoredCandidate] = []
    if mode == "prefix":
        for i, c in enumerate(candidates):
            if prefix_matches(query, c.text):
                results.append(ScoredCandidate(candidate=c, score=0, tie_break=(i,)))
        return results

    for i, c in enumerate(candidates):
        score = fuzzy_score(query, c.text)
        if score is None:
            continue
        results.append(ScoredCandidate(candidate=c, score=score, tie_break=(len(c.text), i)))
    results.sort(key=ScoredCandidate.sort_key)
    return results
