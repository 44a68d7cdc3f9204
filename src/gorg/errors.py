"""Exception types raised by gorg."""


class GorgError(Exception):
    """Base class for errors reported to the user."""


class IndexUnavailable(GorgError):
    """The index file is missing or cannot be parsed."""


class IndexWriteError(GorgError):
    """Writing the index failed; the previous index is left in place."""


class NoMatch(GorgError):
    """A query matched nothing where a match was required."""


class Cancelled(GorgError):
    """The user aborted an interactive selection."""


class ConfigError(GorgError):
    """The configuration file is unreadable or holds invalid values."""


class ProjectsDirMissing(GorgError):
    """The configured projects directory does not exist."""


class RemoteUrlError(GorgError):
    """A remote URL could not be built or mapped to a project path."""


class GitCommandError(GorgError):
    """The git executable exited with a failure status."""
