#!/usr/bin/env python3
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Iterable

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from dockerfile_ast import parser  # noqa: E402


def main() -> int:
    args = _parse_args()
    files = sorted(_collect_files(args.paths))
    if not files:
        print("no Dockerfiles found", file=sys.stderr)
        return 1

    failed = False
    for path in files:
        source = path.read_text()
        dockerfile, diagnostics = parser.parse_dockerfile(source)
        if diagnostics:
            failed = True
            for diag in diagnostics:
                print(f"[parse error] {diag.format(source, path=str(path))}", file=sys.stderr)
                for note in diag.notes:
                    print(f"    note: {note}", file=sys.stderr)
        else:
            print(f"[ok] {path}")
        if args.dump:
            for instruction in dockerfile.instructions:
                print(f"  {instruction.span}: {instruction!r}")

    return 1 if failed else 0


def _parse_args() -> argparse.Namespace:
    ap = argparse.ArgumentParser(description="Parse Dockerfiles and report diagnostics")
    ap.add_argument(
        "paths",
        nargs="*",
        default=["playground"],
        help="Dockerfiles or directories to scan",
    )
    ap.add_argument(
        "--dump",
        action="store_true",
        help="print every assembled instruction",
    )
    return ap.parse_args()


def _is_dockerfile(path: Path) -> bool:
    name = path.name
    return name == "Dockerfile" or name.startswith("Dockerfile.") or path.suffix == ".dockerfile"


def _collect_files(targets: Iterable[str]) -> Iterable[Path]:
    seen = set()
    for target in targets:
        base = Path(target)
        if base.is_file():
            resolved = base.resolve()
            if resolved not in seen:
                seen.add(resolved)
                yield resolved
            continue
        if base.is_dir():
            for path in base.rglob("*"):
                if not path.is_file() or not _is_dockerfile(path):
                    continue
                resolved = path.resolve()
                if resolved not in seen:
                    seen.add(resolved)
                    yield resolved


if __name__ == "__main__":
    raise SystemExit(main())
