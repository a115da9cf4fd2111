# buildrev/core/git_ops/runner.py

from __future__ import annotations

import logging
import os
import subprocess
from pathlib import Path
from typing import Optional, Sequence

from buildrev.config import load_settings

GIT = "git"

log = logging.getLogger("buildrev.git")


class GitError(RuntimeError):
    pass


# ---------------------------------------------------------------------
# Command formatting
# ---------------------------------------------------------------------

def git_command(args: Sequence[str]) -> str:
    """Format a git command line for error messages."""
    return " ".join([GIT, *args])


def _git_executable() -> str:
    return load_settings().git or GIT


def _git_env() -> dict:
    return {**os.environ, "GIT_PAGER": "cat", "PAGER": "cat"}


# ---------------------------------------------------------------------
# Runners
# ---------------------------------------------------------------------

def run_git_raw(directory: Path, args: Sequence[str]) -> bytes:
    """
    Run git in `directory` and return its raw stdout. Any failure to start
    git or a non-zero exit status raises GitError.
    """
    cmd = git_command(args)
    log.debug("running `%s` in %s", cmd, directory)
    try:
        p = subprocess.run(
            [_git_executable(), *args],
            cwd=str(directory),
            stdin=subprocess.DEVNULL,
            capture_output=True,
            env=_git_env(),
        )
    except OSError as e:
        raise GitError(f"failed to run `{cmd}`") from e

    if p.returncode != 0:
        raise GitError(f"`{cmd}` reported non-zero exit-status{_exit_code_suffix(p.returncode)}")
    return p.stdout


def run_git_output(directory: Path, args: Sequence[str]) -> str:
    raw = run_git_raw(directory, args)
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise GitError(f"failed to read `{git_command(args)}` output as UTF-8 string") from e


def run_git_status(directory: Path, args: Sequence[str]) -> bool:
    """Run git discarding all output; report only whether it succeeded."""
    cmd = git_command(args)
    log.debug("probing `%s` in %s", cmd, directory)
    try:
        rc = subprocess.run(
            [_git_executable(), *args],
            cwd=str(directory),
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            env=_git_env(),
        ).returncode
    except OSError as e:
        raise GitError(f"failed to run `{cmd}`") from e
    return rc == 0


def _exit_code_suffix(returncode: Optional[int]) -> str:
    # Negative return codes mean the process was killed by a signal and
    # carry no exit code of their own.
    if returncode is None or returncode < 0:
        return ""
    return f" ({returncode})"


# ---------------------------------------------------------------------
# Repository layout
# ---------------------------------------------------------------------

def git_dir(directory: Path) -> Path:
    out = run_git_raw(directory, ["rev-parse", "--git-dir"])
    # git always terminates this output with exactly one newline
    if out.endswith(b"\n"):
        out = out[:-1]
    return Path(os.fsdecode(out))
