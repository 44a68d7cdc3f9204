"""Data models and constants for gorg."""

import os
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Literal, Sequence, Tuple

DEFAULT_PROJECTS_DIR = os.path.join("~", "Projects")
DEFAULT_INDEX_NAME = ".gorg-index"
INDEX_HEADER = "# gorg-index v1"

MatchMode = Literal["fuzzy", "prefix"]


@dataclass(frozen=True)
class IndexEntry:
    """A single discovered repository."""

    name: str  # e.g. "github.com/jpallari/gorg"
    path: str  # absolute path to the repository root

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("IndexEntry name must be non-empty")
        if not os.path.isabs(self.path):
            raise ValueError(f"IndexEntry path must be absolute: {self.path!r}")

    def to_record(self) -> Dict[str, str]:
        return {"name": self.name, "path": self.path}


@dataclass
class Index:
    """Ordered collection of index entries, unique by path."""

    entries: List[IndexEntry] = field(default_factory=list)

    def __post_init__(self) -> None:
        seen = set()
        for entry in self.entries:
            if entry.path in seen:
                raise ValueError(f"Duplicate index path: {entry.path}")
            seen.add(entry.path)

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[IndexEntry]:
        return iter(self.entries)

    def candidates(self) -> List["Candidate"]:
        """Return one matcher candidate per entry, in index order."""
        return [Candidate(text=e.name, ref=e) for e in self.entries]


@dataclass(frozen=True)
class Candidate:
    """Matcher input: a display string plus a back-reference to its origin."""

    text: str
    ref: Any = None


@dataclass(frozen=True)
class ScoredCandidate:
    """A candidate that passed the matcher, with its score and tie-break key."""

    candidate: Candidate
    score: int
    tie_break: Tuple[int, ...]

    @property
    def text(self) -> str:
        return self.candidate.text

    def sort_key(self) -> Tuple[int, ...]:
        return (-self.score,) + self.tie_break


def entries_of(scored: Sequence[ScoredCandidate]) -> List[IndexEntry]:
    """Unwrap scored candidates back to the index entries they came from."""
    return [s.candidate.ref for s in scored]
