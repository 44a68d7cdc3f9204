"""Thin wrapper around the git executable."""

import logging
import subprocess
import sys
from typing import List, Optional

from .errors import GitCommandError

logger = logging.getLogger(__name__)


class GitCommand:
    """Runs git subcommands for init/clone/remote setup.

    Output of non-capturing commands is sent to stderr so stdout only
    carries gorg's own results.
    """

    def __init__(self, executable: str = "git"):
        self.executable = executable

    def _run(
        self, args: List[str], cwd: Optional[str] = None, capture: bool = False
    ) -> subprocess.CompletedProcess:
        cmd = [self.executable] + args
        logger.debug("Running: %s (cwd=%s)", " ".join(cmd), cwd)
        try:
            result = subprocess.run(
                cmd,
                cwd=cwd,
                stdout=subprocess.PIPE if capture else sys.stderr,
                text=True,
            )
        except OSError as e:
            raise GitCommandError(f"Cannot run {self.executable}: {e}") from e
        if result.returncode != 0:
            raise GitCommandError(
                f"`{' '.join(cmd)}` failed in {cwd or '.'}: exit code {result.returncode}"
            )
        return result

    def init(self, directory: str) -> None:
        self._run(["init"], cwd=directory)

    def clone(self, url: str, directory: str) -> None:
        self._run(["clone", "--", url, directory])

    def remotes(self, directory: str) -> List[str]:
        result = self._run(["remote"], cwd=directory, capture=True)
        return [line.strip() for line in result.stdout.splitlines() if line.strip()]

    def remote_add(self, name: str, url: str, directory: str) -> None:
        self._run(["remote", "add", name, url], cwd=directory)

    def remote_set_url(self, name: str, url: str, directory: str) -> None:
        self._run(["remote", "set-url", name, url], cwd=directory)

    def set_remote(self, name: str, url: str, directory: str) -> None:
        """Point remote name at url, adding the remote if it does not exist."""
        if name in self.remotes(directory):
            logger.debug("Git set remote %s=%s for %s", name, url, directory)
            self.remote_set_url(name, url, directory)
        else:
            logger.debug("Git add remote %s=%s for %s", name, url, directory)
            self.remote_add(name, url, directory)
