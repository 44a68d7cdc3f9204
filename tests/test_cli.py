"""Tests for gorg.cli."""

import os
import sys

import pytest

from gorg import cli
from gorg.models import IndexEntry
from gorg.storage import load_index, save_index


def make_repo(root, *parts):
    path = root.joinpath(*parts)
    (path / ".git").mkdir(parents=True)
    return path


@pytest.fixture
def projects(tmp_path):
    root = tmp_path / "Projects"
    make_repo(root, "github.com", "jpallari", "gorg")
    make_repo(root, "gitlab.com", "acme", "widget")
    make_repo(root, "github.com", "golang", "go")
    return root


@pytest.fixture
def config_file(tmp_path, projects):
    path = tmp_path / "gorg.toml"
    path.write_text(
        f'projects_path = "{projects}"\nindex_path = "{tmp_path / "index"}"\nmax_find_items = 5\n',
        encoding="utf-8",
    )
    return str(path)


@pytest.fixture
def indexed(config_file):
    assert cli.main(["-c", config_file, "update-index"]) == 0
    return config_file


def run(config_file, *args):
    return cli.main(["-c", config_file, *args])


class TestUpdateIndex:
    def test_writes_sorted_index(self, indexed, tmp_path, projects):
        index = load_index(str(tmp_path / "index"))
        assert [e.name for e in index] == [
            "github.com/golang/go",
            "github.com/jpallari/gorg",
            "gitlab.com/acme/widget",
        ]
        assert index.entries[0].path == str(projects / "github.com" / "golang" / "go")

    def test_empty_scan_replaces_existing_index(self, config_file, tmp_path, projects):
        save_index(str(tmp_path / "index"), [IndexEntry("old", "/old")])
        for repo in ("github.com", "gitlab.com"):
            os.rename(projects / repo, tmp_path / f"moved-{repo}")
        assert run(config_file, "update-index") == 0
        assert len(load_index(str(tmp_path / "index"))) == 0

    def test_undecodable_repository_name(self, config_file, tmp_path, projects):
        name = os.fsdecode(b"caf\xe9")
        try:
            make_repo(projects, "host", name)
        except (OSError, UnicodeEncodeError):
            pytest.skip("filesystem rejects non-UTF-8 names")
        assert run(config_file, "update-index") == 0
        assert "host/" + name in [e.name for e in load_index(str(tmp_path / "index"))]
        assert not [f for f in os.listdir(tmp_path) if f.endswith(".tmp")]

    def test_missing_projects_dir(self, tmp_path, capsys):
        path = tmp_path / "c.toml"
        path.write_text(f'projects_path = "{tmp_path / "nope"}"\n', encoding="utf-8")
        assert run(str(path), "update-index") == 1
        assert "does not exist" in capsys.readouterr().err


class TestList:
    def test_list_all(self, indexed, capsys):
        assert run(indexed, "list") == 0
        assert capsys.readouterr().out.splitlines() == [
            "github.com/golang/go",
            "github.com/jpallari/gorg",
            "gitlab.com/acme/widget",
        ]

    def test_list_fuzzy_words_are_joined(self, indexed, capsys):
        assert run(indexed, "ls", "jp", "gorg") == 0
        assert capsys.readouterr().out.splitlines() == ["github.com/jpallari/gorg"]

    def test_list_prefix_full_path(self, indexed, capsys, projects):
        assert run(indexed, "list", "-p", "-f", "gitlab") == 0
        assert capsys.readouterr().out.splitlines() == [
            str(projects / "gitlab.com" / "acme" / "widget")
        ]

    def test_list_no_match_is_not_an_error(self, indexed, capsys):
        assert run(indexed, "list", "zzz") == 0
        assert capsys.readouterr().out == ""

    def test_missing_index(self, config_file, capsys):
        assert run(config_file, "list") == 1
        assert "update-index" in capsys.readouterr().err


class TestFind:
    def test_single_match_prints_directly(self, indexed, capsys, monkeypatch):
        monkeypatch.setattr(
            cli, "_interactive_selector", lambda cfg: lambda c, q, m: pytest.fail("no picker")
        )
        assert run(indexed, "find", "acme") == 0
        assert capsys.readouterr().out.strip() == "gitlab.com/acme/widget"

    def test_interactive_selection(self, indexed, capsys, monkeypatch, projects):
        seen = {}

        def selector(cfg):
            def select(candidates, query, mode):
                seen["query"] = query
                seen["max"] = cfg.max_find_items
                return candidates[1]

            return select

        monkeypatch.setattr(cli, "_interactive_selector", selector)
        assert run(indexed, "find", "-f", "g") == 0
        assert capsys.readouterr().out.strip() == str(projects / "github.com" / "jpallari" / "gorg")
        assert seen == {"query": "g", "max": 5}

    def test_cancelled_selection_exits_nonzero(self, indexed, capsys, monkeypatch):
        monkeypatch.setattr(
            cli, "_interactive_selector", lambda cfg: lambda candidates, query, mode: None
        )
        assert run(indexed, "find") == 1
        assert capsys.readouterr().out == ""

    def test_empty_index(self, config_file, tmp_path, capsys):
        save_index(str(tmp_path / "index"), [])
        assert run(config_file, "find") == 1
        assert "empty" in capsys.readouterr().err


class TestRun:
    def test_dry_run(self, indexed, capsys):
        assert run(indexed, "run", "-d", "-q", "go", "git", "status") == 0
        err = capsys.readouterr().err.splitlines()
        assert "dry! github.com/golang/go: git status" in err
        assert all(line.startswith("dry! ") for line in err)

    def test_runs_in_each_matching_project(self, indexed, projects, capsys):
        code = "import os; open('marker', 'w').write(os.getcwd())"
        assert run(indexed, "run", "-q", "jpgorg", sys.executable, "-c", code) == 0
        gorg_dir = projects / "github.com" / "jpallari" / "gorg"
        assert (gorg_dir / "marker").read_text() == str(gorg_dir)
        assert not (projects / "gitlab.com" / "acme" / "widget" / "marker").exists()
        assert "github.com/jpallari/gorg:" in capsys.readouterr().err

    def test_failure_in_any_project_fails(self, indexed, capsys):
        assert run(indexed, "run", "--quiet", sys.executable, "-c", "raise SystemExit(3)") == 1
        assert capsys.readouterr().err == ""

    def test_missing_command(self, indexed):
        assert run(indexed, "run") == 1

    def test_spawn_error_is_reported(self, indexed, capsys):
        assert run(indexed, "run", "--quiet", "/nonexistent/gorg-test-command") == 1
        assert capsys.readouterr().err.startswith("gorg: ")


class FakeGit:
    calls = []

    def __init__(self, executable):
        self.executable = executable

    def init(self, directory):
        FakeGit.calls.append(("init", directory))
        os.makedirs(os.path.join(directory, ".git"))

    def clone(self, url, directory):
        FakeGit.calls.append(("clone", url, directory))
        os.makedirs(os.path.join(directory, ".git"))

    def set_remote(self, name, url, directory):
        FakeGit.calls.append(("set_remote", name, url, directory))


class TestInit:
    @pytest.fixture(autouse=True)
    def fake_git(self, monkeypatch):
        FakeGit.calls = []
        monkeypatch.setattr(cli, "GitCommand", FakeGit)

    def test_clone_and_reindex(self, indexed, projects, tmp_path, capsys):
        assert run(indexed, "init", "github.com", "someone", "thing") == 0
        target = projects / "github.com" / "someone" / "thing"
        url = "https://github.com/someone/thing.git"
        assert FakeGit.calls == [
            ("clone", url, str(target)),
            ("set_remote", "origin", url, str(target)),
        ]
        assert capsys.readouterr().out.strip() == str(target)
        names = [e.name for e in load_index(str(tmp_path / "index"))]
        assert "github.com/someone/thing" in names

    def test_no_clone_runs_init(self, indexed, projects):
        assert run(indexed, "init", "--no-clone", "git@example.org:me/new.git") == 0
        target = projects / "example.org" / "me" / "new"
        assert FakeGit.calls[0] == ("init", str(target))

    def test_existing_repository_only_sets_remote(self, indexed, projects):
        assert run(indexed, "init", "https://github.com/jpallari/gorg.git") == 0
        assert [c[0] for c in FakeGit.calls] == ["set_remote"]

    def test_bad_remote(self, indexed, capsys):
        assert run(indexed, "init", "file", "/tmp/repo") == 1
        assert "not supported" in capsys.readouterr().err

    def test_remote_escaping_projects_dir(self, indexed, tmp_path, capsys):
        assert run(indexed, "init", "https://host/../../escaped") == 1
        assert FakeGit.calls == []
        assert not (tmp_path / "escaped").exists()
        assert "below the project directory" in capsys.readouterr().err


def test_no_subcommand_prints_help(capsys):
    assert cli.main([]) == 1
    assert "usage" in capsys.readouterr().err
