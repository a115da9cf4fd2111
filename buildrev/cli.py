from __future__ import annotations

import argparse
import io
import logging
import sys
from pathlib import Path
from typing import List, Optional

from buildrev.config import load_settings
from buildrev.core.git_ops.runner import GitError
from buildrev.core.metadata import (
    MetadataError,
    build_revision_metadata,
    metadata_matches,
    read_revision_metadata,
    write_revision_metadata,
)
from buildrev.core.revision import get_revision

log = logging.getLogger("buildrev.cli")


def _log_level() -> int:
    level = getattr(logging, load_settings().log_level, logging.WARNING)
    # Names like BASIC_FORMAT exist on the module but are not levels
    return level if isinstance(level, int) else logging.WARNING


def _configure_logging() -> None:
    logging.basicConfig(level=_log_level(), format="%(levelname)s %(name)s: %(message)s", stream=sys.stderr)


def _cmd_revision(args: argparse.Namespace) -> int:
    # Directives are only wanted on stdout when asked for; otherwise they
    # are collected and dropped.
    writer = sys.stdout if args.directives else io.StringIO()
    revision = get_revision(Path(args.directory), writer)
    print(revision or "")
    return 0


def _cmd_metadata(args: argparse.Namespace) -> int:
    directory = Path(args.directory)
    out_path = Path(args.out) if args.out else directory / load_settings().metadata_file

    if args.check:
        recorded = read_revision_metadata(out_path)
        if recorded is None:
            print(f"ERROR: {out_path} missing. Run without --check to generate.", file=sys.stderr)
            return 2
        current = build_revision_metadata(directory)
        if not metadata_matches(current, recorded):
            print(
                f"ERROR: {out_path.name} drift detected "
                f"(recorded {recorded.get('revision')}, current {current['revision']}).",
                file=sys.stderr,
            )
            return 3
        print(f"OK: {out_path.name} matches.")
        return 0

    data = write_revision_metadata(directory, out_path)
    print(f"Wrote: {out_path} ({data['revision']})")
    return 0


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="buildrev", description="Embed git revision identifiers in builds")
    sub = ap.add_subparsers(dest="command", required=True)

    rev = sub.add_parser("revision", help="Print the revision identifier")
    rev.add_argument("directory", nargs="?", default=".", help="Directory inside the repository (default .)")
    rev.add_argument("--directives", action="store_true", help="Also print build directives before the revision")
    rev.set_defaults(func=_cmd_revision)

    meta = sub.add_parser("metadata", help="Write or check the revision metadata file")
    meta.add_argument("directory", nargs="?", default=".", help="Repository directory (default .)")
    meta.add_argument("--out", default=None, help="Output path (default <directory>/revision_metadata.json)")
    meta.add_argument("--check", action="store_true", help="Fail if the recorded metadata differs from the current revision")
    meta.set_defaults(func=_cmd_metadata)

    return ap


def main(argv: Optional[List[str]] = None) -> int:
    _configure_logging()
    args = build_parser().parse_args(argv)
    try:
        return args.func(args)
    except (GitError, MetadataError) as e:
        log.debug("command failed", exc_info=True)
        print(f"ERROR: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
