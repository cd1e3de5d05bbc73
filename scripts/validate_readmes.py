#!/usr/bin/env python3
"""
Validate datastore README files against the mandatory keys of a converter.

Key features:
- Recurses into directories (optional) and supports a filename pattern.
- Reports ALL missing/empty mandatory keys per file (not just the first).
- Can emit machine-readable JSON for CI.
- Parallel validation for speed on large datastore trees.
- Proper exit codes: 0=ok, 1=errors, 2=no files found.
"""

from __future__ import annotations

import argparse
import concurrent.futures as futures
import json
import os
import sys
from pathlib import Path
from typing import Any, Dict, Iterable, List

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from lisdatastore import ConversionError, ReadmeLoader, build_default_converter_registry  # noqa: E402


def find_readme_files(inputs: Iterable[str], pattern: str, recursive: bool) -> List[Path]:
    results: List[Path] = []
    for raw in inputs:
        p = Path(raw)
        if p.is_dir():
            if recursive:
                results.extend(sorted(p.rglob(pattern)))
            else:
                results.extend(sorted(p.glob(pattern)))
        else:
            # Direct files may have any name
            if p.exists():
                results.append(p)
    return results


def validate_one(file: Path, loader: ReadmeLoader) -> Dict[str, Any]:
    """Return a result dict with 'file', 'ok', and 'errors' (list)."""
    result: Dict[str, Any] = {"file": str(file), "ok": True, "errors": []}
    try:
        payload = loader.read_mapping(file)
    except ConversionError as e:
        result["ok"] = False
        result["errors"].append({"file": str(file), "type": "yaml", "message": e.message})
        return result
    except OSError as e:
        result["ok"] = False
        result["errors"].append({"file": str(file), "type": "io", "message": f"{e.__class__.__name__}: {e}"})
        return result

    problems = loader.errors(payload)
    if problems:
        result["ok"] = False
        result["errors"] = [{"file": str(file), "type": "schema", "message": message} for message in problems]
    return result


def print_text_result(res: Dict[str, Any], show_ok: bool) -> None:
    if res["ok"]:
        if show_ok:
            print(f"OK: {res['file']}")
        return
    for e in res["errors"]:
        print(f"ERROR: {e['file']} :: {e['message']}")


def main(argv: List[str]) -> int:
    registry = build_default_converter_registry()

    ap = argparse.ArgumentParser(description="Validate datastore README files for a converter.")
    ap.add_argument("paths", nargs="+", help="Files or directories to validate.")
    ap.add_argument("-c", "--converter", required=True, choices=registry.available(), help="Converter whose mandatory README keys apply.")
    ap.add_argument("-p", "--pattern", default="README*.yml", help="Filename glob to look for in directories (default: README*.yml).")
    ap.add_argument("-r", "--recursive", action="store_true", help="Recurse into directories.")
    ap.add_argument("-j", "--jobs", type=int, default=max(os.cpu_count() or 2, 2), help="Parallel workers (default: CPU count).")
    ap.add_argument("--format", choices=["text", "json"], default="text", help="Output format.")
    ap.add_argument("--show-ok", action="store_true", help="Also print files that validated successfully.")
    args = ap.parse_args(argv)

    loader = ReadmeLoader.for_policy(registry.get(args.converter).policy)

    files = find_readme_files(args.paths, args.pattern, args.recursive)
    if not files:
        print("No README files found.", file=sys.stderr)
        return 2

    results: List[Dict[str, Any]] = []
    with futures.ThreadPoolExecutor(max_workers=args.jobs) as ex:
        for res in ex.map(lambda f: validate_one(f, loader), files):
            results.append(res)

    failed = sum(1 for r in results if not r["ok"])

    if args.format == "json":
        print(json.dumps({"summary": {"total": len(results), "failed": failed}, "results": results}, indent=2))
    else:
        for r in results:
            print_text_result(r, show_ok=args.show_ok)
        print(f"Summary: {len(results)} files checked, {failed} failed.", file=sys.stderr)

    return 0 if failed == 0 else 1


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
