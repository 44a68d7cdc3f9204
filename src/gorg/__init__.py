"""gorg - organize Git repositories under one directory and find them fuzzily."""

__version__ = "0.1.0"

from .models import Candidate, Index, IndexEntry, ScoredCandidate
from .storage import build_index, load_index, save_index
from .core import match
from .locator import resolve_many, resolve_one

__all__ = [
    "Candidate",
    "Index",
    "IndexEntry",
    "ScoredCandidate",
    "build_index",
    "load_index",
    "save_index",
    "match",
    "resolve_many",
    "resolve_one",
]
