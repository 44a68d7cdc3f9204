"""gorg command-line interface."""

import argparse
import logging
import os
import subprocess
import sys
from typing import List, Optional

from . import __version__
from .config import Config, load_config
from .errors import Cancelled, GorgError, ProjectsDirMissing
from .gitcmd import GitCommand
from .giturl import from_parts, to_path
from .locator import Selector, find_entries, select_entry
from .models import IndexEntry
from .storage import build_index, load_index, save_index

logger = logging.getLogger(__name__)


def _setup_logging(verbose: bool = False) -> None:
    """Configure logging for CLI output."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s" if not verbose else "%(levelname)s: %(name)s: %(message)s",
        stream=sys.stderr,
    )


def join_query(words: List[str]) -> str:
    """Concatenate query words; the matcher treats them as one subsequence."""
    return "".join(w.strip() for w in words)


def print_entry(entry: IndexEntry, full_path: bool) -> None:
    print(entry.path if full_path else entry.name)


def rebuild_index(cfg: Config) -> int:
    """Scan the projects directory and replace the index. Returns the entry count."""
    if not os.path.isdir(cfg.projects_path):
        raise ProjectsDirMissing(f"Project directory does not exist: {cfg.projects_path}")
    index = build_index(cfg.projects_path)
    save_index(cfg.index_path, index.entries)
    return len(index)


def cmd_update_index(args: argparse.Namespace, cfg: Config) -> int:
    count = rebuild_index(cfg)
    logger.info("Indexed %d projects into %s", count, cfg.index_path)
    return 0


def cmd_init(args: argparse.Namespace, cfg: Config) -> int:
    git = GitCommand(cfg.git_command)
    url = from_parts(args.remote)
    parts = to_path(url)
    project_dir = os.path.join(cfg.projects_path, *parts)
    logger.debug("Git URL = %s, Git path = %s", url, "/".join(parts))

    if not os.path.isdir(os.path.join(project_dir, ".git")):
        logger.debug("Directory %s not found", project_dir)
        if args.no_clone:
            logger.debug("Git init for %s", project_dir)
            os.makedirs(project_dir, exist_ok=True)
            git.init(project_dir)
        else:
            logger.debug("Git clone for %s from %s", project_dir, url)
            os.makedirs(os.path.dirname(project_dir), exist_ok=True)
            git.clone(url, project_dir)

    git.set_remote(cfg.git_remote_name, url, project_dir)
    rebuild_index(cfg)
    print(project_dir)
    return 0


def cmd_list(args: argparse.Namespace, cfg: Config) -> int:
    index = load_index(cfg.index_path)
    query = join_query(args.query)
    mode = "prefix" if args.prefix_search else "fuzzy"
    logger.debug("List with query: %r (%s)", query, mode)
    for entry in find_entries(index, query, mode):
        print_entry(entry, args.full_path)
    return 0


def _interactive_selector(cfg: Config) -> Selector:
    def select(candidates, query, mode):
        from .tui import pick

        return pick(candidates, query, mode, max_items=cfg.max_find_items)

    return select


def cmd_find(args: argparse.Namespace, cfg: Config, select: Optional[Selector] = None) -> int:
    index = load_index(cfg.index_path)
    query = join_query(args.query)
    entry = select_entry(index, query, "fuzzy", select or _interactive_selector(cfg))
    print_entry(entry, args.full_path)
    return 0


def cmd_run(args: argparse.Namespace, cfg: Config) -> int:
    if not args.command:
        logger.error("No command specified")
        return 1

    index = load_index(cfg.index_path)
    targets = find_entries(index, args.query or "", "fuzzy")
    command_str = " ".join(args.command)

    if args.dry:
        for entry in targets:
            print(f"dry! {entry.name}: {command_str}", file=sys.stderr)
        return 0

    success = True
    for entry in targets:
        if not args.quiet:
            print(f"{entry.name}: {command_str}", file=sys.stderr)
        sys.stdout.flush()
        result = subprocess.run(args.command, cwd=entry.path)
        if result.returncode != 0:
            logger.debug("%s exited with %d in %s", args.command[0], result.returncode, entry.path)
            success = False
    return 0 if success else 1


def build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser."""
    p = argparse.ArgumentParser(
        prog="gorg", description="Organize Git repositories and find them by fuzzy name."
    )
    p.add_argument("-c", "--config", metavar="FILE", help="Path to the gorg configuration file")
    p.add_argument("-v", "--verbose", action="store_true", help="Verbose (debug) logging")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = p.add_subparsers(dest="cmd")

    s_find = sub.add_parser("find", help="Find a project using a fuzzy matcher (interactive)")
    s_find.add_argument("query", nargs="*", help="Initial fuzzy find query")
    s_find.add_argument(
        "-f", "--full-path", action="store_true", help="Print full path instead of the project name"
    )
    s_find.set_defaults(func=cmd_find)

    s_init = sub.add_parser("init", help="Initialize a repository for the given remote")
    s_init.add_argument("remote", nargs="+", help="Git remote URL, or its parts (host owner repo)")
    s_init.add_argument("--no-clone", action="store_true", help="Run `git init` instead of cloning")
    s_init.set_defaults(func=cmd_init)

    s_list = sub.add_parser(
        "list", aliases=["ls"], help="List all projects that match the given query"
    )
    s_list.add_argument("query", nargs="*", help="Query; all projects are listed when omitted")
    s_list.add_argument(
        "-f", "--full-path", action="store_true", help="Print full path instead of the project name"
    )
    s_list.add_argument(
        "-p", "--prefix-search", action="store_true", help="Use a prefix query instead of a fuzzy query"
    )
    s_list.set_defaults(func=cmd_list)

    s_run = sub.add_parser("run", help="Run a command in all (matching) projects")
    s_run.add_argument("-q", "--query", metavar="QUERY", help="Fuzzy query selecting the projects")
    s_run.add_argument(
        "-d", "--dry", action="store_true", help="Only print where the command would be run"
    )
    s_run.add_argument("--quiet", action="store_true", help="Do not print project names")
    s_run.add_argument("command", nargs=argparse.REMAINDER, help="Command and its arguments")
    s_run.set_defaults(func=cmd_run)

    s_update = sub.add_parser("update-index", help="Scan the project directory and rebuild the index")
    s_update.set_defaults(func=cmd_update_index)

    return p


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    _setup_logging(verbose=args.verbose)
    if hasattr(sys.stdout, "reconfigure"):
        # Repository paths may hold undecodable bytes; write them back out as-is.
        sys.stdout.reconfigure(errors="surrogateescape")

    if args.cmd is None:
        parser.print_help(sys.stderr)
        return 1

    try:
        cfg = load_config(args.config)
        return args.func(args, cfg)
    except Cancelled:
        return 1
    except KeyboardInterrupt:
        return 130
    except (GorgError, OSError) as e:
        if args.verbose:
            logger.exception("Error: %s", e)
        else:
            print(f"gorg: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
