from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import ValidationError

from buildrev.config import load_settings
from buildrev.core.git_ops.runner import GitError
from buildrev.core.models import RevisionInfo
from buildrev.core.revision import probe_revision

# Keys that describe the revision itself; everything else is bookkeeping.
_COMPARED_KEYS = ("revision", "commit", "tag", "dirty")


class MetadataError(ValueError):
    pass


def _now_utc_iso() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


def build_revision_metadata(directory: Path) -> Dict[str, Any]:
    directory = Path(directory).resolve()
    info = probe_revision(directory)
    if info is None:
        raise GitError(f"{directory} is not in a git repository")

    return {
        "revision": info.revision,
        "commit": info.commit,
        "tag": info.tag,
        "dirty": info.dirty,
        "generated_at_utc": _now_utc_iso(),
    }


def write_revision_metadata(directory: Path, out: Optional[Path] = None) -> Dict[str, Any]:
    data = build_revision_metadata(directory)
    target = Path(out) if out is not None else Path(directory) / load_settings().metadata_file
    target.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    return data


def read_revision_metadata(path: Path) -> Optional[Dict[str, Any]]:
    path = Path(path)
    if not path.exists():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise MetadataError(f"{path}: not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise MetadataError(f"{path}: expected a JSON object")
    return data


def load_revision_metadata(path: Path) -> Optional[RevisionInfo]:
    """
    Load a recorded revision. Returns None if the file does not exist;
    raises MetadataError if it exists but is unusable.
    """
    data = read_revision_metadata(path)
    if data is None:
        return None

    revision = data.get("revision")
    if not isinstance(revision, str) or not revision.strip():
        raise MetadataError(f"{path}: missing 'revision'")

    try:
        return RevisionInfo(
            revision=revision.strip(),
            commit=data.get("commit"),
            tag=data.get("tag"),
            dirty=data["dirty"] if "dirty" in data else revision.strip().endswith("+"),
            source="metadata",
        )
    except ValidationError as e:
        raise MetadataError(f"{path}: {e}") from e


def metadata_matches(current: Dict[str, Any], recorded: Dict[str, Any]) -> bool:
    return all(current.get(k) == recorded.get(k) for k in _COMPARED_KEYS)
