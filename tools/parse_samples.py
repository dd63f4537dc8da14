#!/usr/bin/env python3
"""Parse alle tracker-PDF's in samples/ en toon rijen en waarschuwingen."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from tracker_parser.normalize import parse_to_normalized  # noqa: E402


def iter_documents(root: Path) -> List[Path]:
    return [path for path in sorted(root.rglob("*")) if path.suffix.lower() == ".pdf" and path.is_file()]


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Parse alle tracker-samples")
    parser.add_argument(
        "--samples-dir",
        default="samples",
        help="Map met PDF-bestanden (standaard: samples)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print het volledige rapport als JSON",
    )
    parser.add_argument(
        "--stop-on-error",
        action="store_true",
        help="Stop direct bij de eerste fout",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)

    root = Path(args.samples_dir).expanduser().resolve()
    if not root.exists():
        print(f"[x] samples-map ontbreekt: {root}")
        return 1

    files = iter_documents(root)
    if not files:
        print(f"[i] Geen bestanden gevonden in {root}")
        return 0

    success = 0
    failed = 0
    for path in files:
        rel = path.relative_to(root)
        try:
            _, report = parse_to_normalized(str(path))
        except Exception as exc:  # pragma: no cover - runtime helper
            print(f"[x] {rel}: {exc}")
            failed += 1
            if args.stop_on_error:
                break
            continue

        success += 1
        if args.json:
            print(json.dumps(report.model_dump(), indent=2, ensure_ascii=False))
            continue
        week = report.detectedWeekNumber if report.detectedWeekNumber is not None else "?"
        marker = "!" if report.warnings else "✓"
        print(f"[{marker}] {rel}: {len(report.rows)} rijen, week {week}")
        for warn in report.warnings:
            print(f"    - {warn.code}: {warn.message}")

    print(f"\nSamenvatting: {success} geslaagd, {failed} gefaald")
    return 0 if failed == 0 else 2


if __name__ == "__main__":
    raise SystemExit(main())
