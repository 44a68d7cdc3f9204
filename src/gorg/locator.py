"""Resolve queries against the index to project entries and paths."""

import logging
from typing import Callable, List, Optional, Sequence

from .core import match
from .errors import Cancelled, NoMatch
from .models import Candidate, Index, IndexEntry, MatchMode, entries_of

logger = logging.getLogger(__name__)

# select(candidates, initial_query, mode) -> chosen candidate, or None if cancelled
Selector = Callable[[Sequence[Candidate], str, MatchMode], Optional[Candidate]]


def find_entries(index: Index, query: str, mode: MatchMode = "fuzzy") -> List[IndexEntry]:
    """Return every matching entry in score order (all entries for an empty query)."""
    return entries_of(match(query, index.candidates(), mode))


def resolve_many(index: Index, query: str, mode: MatchMode = "fuzzy") -> List[str]:
    """Return the path of every matching entry, in score order."""
    return [entry.path for entry in find_entries(index, query, mode)]


def select_entry(
    index: Index,
    query: str,
    mode: MatchMode = "fuzzy",
    select: Optional[Selector] = None,
) -> IndexEntry:
    """Pick exactly one entry for query.

    A single match is returned as-is. Otherwise the choice is handed to
    select (the interactive picker), which also runs when nothing matches
    yet since the user can still edit the query. Without a selector the
    best-ranked match wins.
    """
    if not len(index):
        raise NoMatch("The project index is empty")
    candidates = index.candidates()
    ranked = match(query, candidates, mode)
    logger.debug("Query %r matched %d of %d projects", query, len(ranked), len(candidates))

    if len(ranked) == 1:
        return ranked[0].candidate.ref
    if select is None:
        if not ranked:
            raise NoMatch(f"No project matches {query!r}")
        return ranked[0].candidate.ref

    chosen = select(candidates, query, mode)
    if chosen is None:
        raise Cancelled("Selection cancelled")
    return chosen.ref


def resolve_one(
    index: Index,
    query: str,
    mode: MatchMode = "fuzzy",
    select: Optional[Selector] = None,
) -> str:
    """Return the path of the single entry chosen for query."""
    return select_entry(index, query, mode, select).path
