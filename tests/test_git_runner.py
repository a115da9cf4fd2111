from pathlib import Path

import pytest

from buildrev.core.git_ops.runner import (
    GitError,
    _exit_code_suffix,
    git_command,
    git_dir,
    run_git_output,
    run_git_raw,
    run_git_status,
)


def test_git_command_formatting():
    assert git_command(["rev-parse", "--short", "HEAD"]) == "git rev-parse --short HEAD"
    assert git_command([]) == "git"


def test_run_git_raw_returns_stdout(tmp_repo):
    out = run_git_raw(tmp_repo, ["rev-parse", "HEAD"])
    assert isinstance(out, bytes)
    assert len(out.strip()) == 40


def test_non_zero_exit_reports_command_and_code(tmp_repo):
    with pytest.raises(GitError) as ei:
        run_git_raw(tmp_repo, ["rev-parse", "--verify", "no-such-ref"])
    msg = str(ei.value)
    assert msg.startswith("`git rev-parse --verify no-such-ref` reported non-zero exit-status (")
    assert msg.endswith(")")


def test_exit_code_suffix_omitted_for_signals():
    assert _exit_code_suffix(128) == " (128)"
    assert _exit_code_suffix(-9) == ""
    assert _exit_code_suffix(None) == ""


def test_missing_git_executable(tmp_repo, no_git):
    with pytest.raises(GitError) as ei:
        run_git_status(tmp_repo, ["rev-parse", "--git-dir"])
    assert str(ei.value) == "failed to run `git rev-parse --git-dir`"
    assert isinstance(ei.value.__cause__, OSError)

    with pytest.raises(GitError):
        run_git_raw(tmp_repo, ["status"])


def test_run_git_status(tmp_repo, not_a_repo):
    assert run_git_status(tmp_repo, ["rev-parse", "--git-dir"]) is True
    assert run_git_status(not_a_repo, ["rev-parse", "--git-dir"]) is False


def test_run_git_output_rejects_non_utf8(tmp_repo, git):
    (tmp_repo / "blob.bin").write_bytes(b"\xff\xfe\x00not utf-8\xc3")
    git(tmp_repo, "add", "blob.bin")
    git(tmp_repo, "commit", "-m", "binary")

    assert run_git_raw(tmp_repo, ["show", "HEAD:blob.bin"]).startswith(b"\xff\xfe")
    with pytest.raises(GitError) as ei:
        run_git_output(tmp_repo, ["show", "HEAD:blob.bin"])
    assert str(ei.value) == "failed to read `git show HEAD:blob.bin` output as UTF-8 string"
    assert isinstance(ei.value.__cause__, UnicodeDecodeError)


def test_git_dir_strips_trailing_newline(tmp_repo):
    assert git_dir(tmp_repo) == Path(".git")


def test_git_dir_from_subdirectory(tmp_repo):
    sub = tmp_repo / "src"
    sub.mkdir()
    gd = git_dir(sub)
    assert gd.is_absolute()
    assert gd.name == ".git"
