"""Build git remote URLs and map them to project directories."""

from typing import List, Sequence

from .errors import RemoteUrlError

SCHEMES = ("ssh", "git", "rsync", "file", "http", "https")
USER_SCHEMES = ("ssh", "rsync")
DEFAULT_SCHEME = "https"
DEFAULT_USER = "git"
GIT_SUFFIX = ".git"


def _has_scheme(s: str) -> bool:
    head, sep, _ = s.partition(":")
    return bool(sep) and head in SCHEMES


def _join(base: str, parts: Sequence[str]) -> str:
    rest = [p for p in parts if p.strip()]
    url = base + "/" + "/".join(rest) if rest else base
    if not url.endswith(GIT_SUFFIX):
        url += GIT_SUFFIX
    return url


def from_parts(parts: Sequence[str]) -> str:
    """Build a remote URL from command-line parts.

    A single part is used as the URL unchanged. Otherwise the first part
    is a scheme, a URL prefix with a scheme, or a host (https assumed),
    and the remaining parts become the slash-separated repository path:

        from_parts(["github.com", "jpallari", "gorg"])
        -> "https://github.com/jpallari/gorg.git"
    """
    if not parts:
        raise RemoteUrlError("Not enough parameters to build a remote URL")
    if len(parts) == 1:
        return parts[0]

    first = parts[0]
    if first.startswith("/") or first.startswith("~"):
        raise RemoteUrlError("File URLs are not supported")

    if first not in SCHEMES:
        base = first if _has_scheme(first) else f"{DEFAULT_SCHEME}://{first}"
        return _join(base, parts[1:])

    if first == "file":
        raise RemoteUrlError("File URLs are not supported")
    host = parts[1]
    if first in USER_SCHEMES and "@" not in host:
        host = f"{DEFAULT_USER}@{host}"
    return _join(f"{first}://{host}", parts[2:])


def to_path(url: str) -> List[str]:
    """Split a remote URL into project path parts: host, then repository path.

        to_path("git@github.com:jpallari/gorg.git") -> ["github.com", "jpallari", "gorg"]
    """
    url = url.strip()
    if not url:
        raise RemoteUrlError("Empty URL cannot be converted to a path")
    left, sep, right = url.partition(":")
    if not sep:
        raise RemoteUrlError(f"Unsupported URL: {url}")

    if left == "file":
        raise RemoteUrlError(f"File URLs are unsupported: {url}")
    if left in SCHEMES:
        if not right.startswith("//"):
            raise RemoteUrlError(f"Invalid URL: {url}")
        authority, slash, path_part = right[2:].partition("/")
        if not slash:
            raise RemoteUrlError(f"Invalid URL: {url}")
        host = authority.rpartition("@")[2].partition(":")[0]
    else:
        # scp-like syntax: [user@]host:path
        host = left.rpartition("@")[2]
        path_part = right

    path = [host]
    segments = [s.strip() for s in path_part.split("/")]
    for i, segment in enumerate(segments):
        if segment.startswith("~"):
            segment = segment[1:]
        if i == len(segments) - 1 and segment.endswith(GIT_SUFFIX):
            segment = segment[: -len(GIT_SUFFIX)]
        if segment:
            path.append(segment)

    if not host or any(part in (".", "..") for part in path):
        raise RemoteUrlError(f"URL does not map to a directory below the project directory: {url}")
    if len(path) <= 1:
        raise RemoteUrlError("Not enough parts in URL to convert it to a path")
    return path
