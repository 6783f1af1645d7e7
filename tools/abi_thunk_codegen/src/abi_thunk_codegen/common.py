from __future__ import annotations

import difflib
import json
from pathlib import Path
from typing import Any


class ThunkCodegenError(Exception):
    pass


def read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ThunkCodegenError(f"Unable to read '{path}': {exc}") from exc


def load_json_object(path: Path) -> dict[str, Any]:
    try:
        payload = json.loads(read_text(path))
    except json.JSONDecodeError as exc:
        raise ThunkCodegenError(f"Invalid JSON in '{path}': {exc}") from exc
    if not isinstance(payload, dict):
        raise ThunkCodegenError(f"JSON root in '{path}' must be an object")
    return payload


def write_json(path: Path, value: dict[str, Any]) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(value, indent=2, sort_keys=True) + "\n", encoding="utf-8")
    except OSError as exc:
        raise ThunkCodegenError(f"Unable to write '{path}': {exc}") from exc


def artifact_status(path: Path, content: str) -> str:
    if not path.exists():
        return "created"
    if read_text(path) == content:
        return "unchanged"
    return "updated"


def write_if_changed(path: Path, content: str, check: bool, dry_run: bool) -> int:
    existing = read_text(path) if path.exists() else ""
    if existing == content:
        return 0
    if check:
        diff = difflib.unified_diff(
            existing.splitlines(),
            content.splitlines(),
            fromfile=f"a/{path}",
            tofile=f"b/{path}",
            lineterm="",
        )
        print("\n".join(diff))
        return 1
    if not dry_run:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        except OSError as exc:
            raise ThunkCodegenError(f"Unable to write '{path}': {exc}") from exc
    return 0
