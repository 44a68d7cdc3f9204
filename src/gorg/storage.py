"""File I/O for the gorg project index."""

import json
import logging
import os
import tempfile
from typing import Iterator, List, Sequence

from .errors import IndexUnavailable, IndexWriteError, ProjectsDirMissing
from .models import INDEX_HEADER, Index, IndexEntry

logger = logging.getLogger(__name__)

GIT_DIR_NAME = ".git"


def _parse_record(line: str, lineno: int, path: str) -> IndexEntry:
    try:
        record = json.loads(line)
    except json.JSONDecodeError as e:
        raise IndexUnavailable(f"{path}:{lineno}: malformed record: {e.msg}") from e
    if not isinstance(record, dict):
        raise IndexUnavailable(f"{path}:{lineno}: record is not an object")
    name, entry_path = record.get("name"), record.get("path")
    if not isinstance(name, str) or not isinstance(entry_path, str):
        raise IndexUnavailable(f"{path}:{lineno}: record needs string 'name' and 'path'")
    try:
        return IndexEntry(name=name, path=entry_path)
    except ValueError as e:
        raise IndexUnavailable(f"{path}:{lineno}: {e}") from e


def load_index(path: str) -> Index:
    """Load the index file.

    The first line must be the index header; every following non-blank
    line must be one JSON record. Any line that does not parse fails the
    whole load with IndexUnavailable.
    """
    logger.debug("Reading index from %s", path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            lines = f.read().split("\n")
    except FileNotFoundError as e:
        raise IndexUnavailable(
            f"Index not found at {path}. Run `gorg update-index` first."
        ) from e
    except (OSError, UnicodeDecodeError) as e:
        raise IndexUnavailable(f"Cannot read index at {path}: {e}") from e

    if not lines or lines[0].strip() != INDEX_HEADER:
        raise IndexUnavailable(f"{path}: missing index header")

    entries: List[IndexEntry] = []
    for lineno, line in enumerate(lines[1:], start=2):
        if not line.strip():
            continue
        entries.append(_parse_record(line, lineno, path))

    try:
        index = Index(entries)
    except ValueError as e:
        raise IndexUnavailable(f"{path}: {e}") from e
    logger.debug("Loaded %d index entries", len(index))
    return index


def save_index(path: str, entries: Sequence[IndexEntry]) -> None:
    """Rewrite the whole index file from the given entries.

    The data goes to a temporary file next to the target which is then
    renamed over it, so readers see either the old or the new index.
    """
    directory = os.path.dirname(os.path.abspath(path))
    tmp_path = None
    try:
        os.makedirs(directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(prefix=".gorg-index.", suffix=".tmp", dir=directory)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(INDEX_HEADER + "\n")
            for entry in entries:
                f.write(json.dumps(entry.to_record(), ensure_ascii=True) + "\n")
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
    except (OSError, ValueError) as e:
        if tmp_path is not None and os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise IndexWriteError(f"Failed to write index to {path}: {e}") from e
    logger.debug("Wrote %d index entries to %s", len(entries), path)


def _log_walk_error(err: OSError) -> None:
    logger.warning("Skipping unreadable directory %s: %s", err.filename, err.strerror)


def scan_repositories(root: str) -> Iterator[str]:
    """Yield the absolute path of every git repository root below root.

    A directory holding a .git directory is a repository; its contents
    are not searched further. Symlinked directories are not followed.
    """
    root = os.path.abspath(root)
    if not os.path.isdir(root):
        raise ProjectsDirMissing(f"Project directory does not exist: {root}")
    for dirpath, dirnames, _ in os.walk(root, onerror=_log_walk_error):
        if GIT_DIR_NAME in dirnames and os.path.isdir(os.path.join(dirpath, GIT_DIR_NAME)):
            dirnames[:] = []
            yield dirpath
            continue
        dirnames.sort()


def entry_name(root: str, repo_path: str) -> str:
    """Name a repository by its path relative to root, with / separators."""
    rel = os.path.relpath(repo_path, root)
    if rel == os.curdir:
        return os.path.basename(os.path.abspath(repo_path)) or repo_path
    return rel.replace(os.sep, "/")


def build_index(root: str) -> Index:
    """Scan root and build a fresh index, sorted by entry name."""
    root = os.path.abspath(root)
    entries = [IndexEntry(name=entry_name(root, p), path=p) for p in scan_repositories(root)]
    entries.sort(key=lambda e: e.name)
    logger.debug("Scan of %s found %d repositories", root, len(entries))
    return Index(entries)
