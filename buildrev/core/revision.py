from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional, TextIO, Tuple, Union

from buildrev.config import Settings, load_settings
from buildrev.core.git_ops.runner import (
    GitError,
    git_dir,
    run_git_output,
    run_git_raw,
    run_git_status,
)
from buildrev.core.models import RevisionInfo

log = logging.getLogger("buildrev.revision")

# Files below the git directory whose change means the revision may have
# changed: a checkout, a staged change, a new commit or tag.
WATCH_PATHS: Tuple[str, ...] = ("HEAD", "index", "refs/")

PathLike = Union[str, Path]


def format_revision(base: str, dirty: bool) -> str:
    return f"{base.strip()}{'+' if dirty else ''}"


def _directive(writer: TextIO, prefix: str, key: str, value: str) -> None:
    writer.write(f"{prefix}{key}={value}\n")


def emit_rerun_directives(directory: PathLike, writer: TextIO, prefix: str) -> None:
    gd = git_dir(Path(directory))
    for path in WATCH_PATHS:
        # os.path.join keeps the trailing slash of "refs/"; Path would drop it.
        _directive(writer, prefix, "rerun-if-changed", os.path.join(str(gd), path))


# ---------------------------------------------------------------------
# Git state
# ---------------------------------------------------------------------

def _is_modified(directory: Path) -> bool:
    changes = run_git_raw(directory, ["status", "--porcelain", "--untracked-files=no"])
    return bool(changes)


def _exact_tag(directory: Path) -> Optional[str]:
    try:
        tag = run_git_output(directory, ["describe", "--exact-match", "--tags", "HEAD"]).strip()
    except GitError:
        return None
    return tag or None


def _short_sha(directory: Path) -> str:
    return run_git_output(directory, ["rev-parse", "--short", "HEAD"]).strip()


def _current_revision(directory: Path) -> str:
    modified = _is_modified(directory)
    base = _exact_tag(directory) or _short_sha(directory)
    return format_revision(base, modified)


def probe_revision(directory: PathLike) -> Optional[RevisionInfo]:
    """
    Full revision details for `directory`, or None when it is not inside
    a git repository. Unlike get_revision, emits no directives and does
    not consult the metadata file.
    """
    d = Path(directory)
    if not run_git_status(d, ["rev-parse", "--git-dir"]):
        return None

    dirty = _is_modified(d)
    tag = _exact_tag(d)
    commit = run_git_output(d, ["rev-parse", "HEAD"]).strip()
    base = tag or _short_sha(d)
    return RevisionInfo(
        revision=format_revision(base, dirty),
        commit=commit,
        tag=tag,
        dirty=dirty,
        source="git",
    )


def _metadata_fallback(directory: Path, settings: Settings) -> Optional[RevisionInfo]:
    if not settings.metadata_fallback:
        return None
    # Imported lazily: metadata builds on probe_revision from this module.
    from buildrev.core.metadata import load_revision_metadata

    info = load_revision_metadata(directory / settings.metadata_file)
    if info is not None:
        log.info("using recorded revision %s from %s", info.revision, settings.metadata_file)
    return info


def get_revision(
    directory: PathLike,
    writer: TextIO,
    prefix: Optional[str] = None,
) -> Optional[str]:
    """
    Retrieve a revision identifier for the repository containing
    `directory`: the tag HEAD is on, or else the abbreviated SHA-1, with
    a trailing '+' when tracked files carry local changes.

    Meant to be run from a build script. Directives telling the build tool
    when to rerun are written to `writer`, so callers should invoke this
    once and cache the result.

    If git is missing or `directory` is not in a repository, a warning
    directive is written and the recorded revision metadata file is used
    instead, if there is one; otherwise None is returned. Once the
    repository is found, every further git failure raises GitError.
    """
    settings = load_settings()
    if prefix is None:
        prefix = settings.directive_prefix
    d = Path(directory)

    try:
        in_repo = run_git_status(d, ["rev-parse", "--git-dir"])
    except GitError as e:
        log.warning("git unavailable: %s", e)
        _directive(writer, prefix, "warning", f"Failed to invoke `git`; unable to embed git revision: {e}")
        info = _metadata_fallback(d, settings)
        return info.revision if info else None

    if not in_repo:
        log.warning("%s is not in a git repository", d)
        _directive(writer, prefix, "warning", "Not in a git repository; unable to embed git revision")
        info = _metadata_fallback(d, settings)
        return info.revision if info else None

    # A repository created after this point will not trigger a rerun; there
    # is no reliable way to guess where it would appear.
    emit_rerun_directives(d, writer, prefix)
    return _current_revision(d)
