from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, HTTPException

from buildrev.config import load_settings
from buildrev.core.git_ops.runner import GitError
from buildrev.core.metadata import MetadataError, load_revision_metadata
from buildrev.core.models import RevisionInfo
from buildrev.core.revision import probe_revision

router = APIRouter(tags=["revision"])

log = logging.getLogger("buildrev.revision")


@router.get("/api/v1/revision", response_model=RevisionInfo)
def read_revision():
    settings = load_settings()
    repo_dir: Path = settings.repo_dir

    git_error: Optional[GitError] = None
    try:
        info = probe_revision(repo_dir)
    except GitError as e:
        log.warning("git probe failed for %s: %s", repo_dir, e)
        git_error = e
        info = None

    if info is None and settings.metadata_fallback:
        try:
            info = load_revision_metadata(repo_dir / settings.metadata_file)
        except MetadataError as e:
            raise HTTPException(status_code=500, detail=str(e)) from e

    if info is None:
        # Without a recorded revision to fall back on, a git failure is
        # still a server error rather than "not found".
        if git_error is not None:
            raise git_error
        raise HTTPException(status_code=404, detail=f"No git repository or revision metadata at {repo_dir}")
    return info
