import os
import subprocess
from pathlib import Path

import pytest

_GIT_IDENTITY = [
    "-c", "user.name=buildrev tests",
    "-c", "user.email=tests@example.invalid",
    "-c", "commit.gpgsign=false",
    "-c", "tag.gpgsign=false",
]


def _git(repo: Path, *args: str) -> str:
    p = subprocess.run(
        ["git", *_GIT_IDENTITY, *args],
        cwd=str(repo),
        check=True,
        capture_output=True,
        text=True,
    )
    return p.stdout.strip()


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    # Settings are read from the environment on every call
    for key in list(os.environ):
        if key.startswith("BUILDREV_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture()
def git():
    return _git


@pytest.fixture()
def tmp_repo(tmp_path: Path):
    """
    A git repo with a single commit of a tracked README.md.
    """
    repo = tmp_path / "repo"
    repo.mkdir(parents=True, exist_ok=True)
    _git(repo, "init")
    (repo / "README.md").write_text("x", encoding="utf-8")
    _git(repo, "add", ".")
    _git(repo, "commit", "-m", "init")
    return repo


@pytest.fixture()
def not_a_repo(tmp_path: Path, monkeypatch):
    """
    A plain directory; git is prevented from finding an enclosing repo.
    """
    d = tmp_path / "plain"
    d.mkdir()
    monkeypatch.setenv("GIT_CEILING_DIRECTORIES", str(tmp_path))
    return d


@pytest.fixture()
def no_git(monkeypatch):
    monkeypatch.setenv("BUILDREV_GIT", "buildrev-no-such-git-executable")
