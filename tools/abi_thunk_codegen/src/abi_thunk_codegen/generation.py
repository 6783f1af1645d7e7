from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .common import artifact_status, write_if_changed
from .config import CodegenConfig
from .managed_emitter import render_managed_thunks
from .native_emitter import render_native_wrapper
from .parser import ParseResult


@dataclass(frozen=True)
class GeneratedArtifacts:
    managed: str
    native: str
    function_count: int


@dataclass(frozen=True)
class ArtifactTarget:
    label: str
    path: Path
    content: str


def generate_artifacts(result: ParseResult, config: CodegenConfig) -> GeneratedArtifacts:
    # The callback table slots and dispatch struct fields are matched by
    # position, so both sides render from the one parsed sequence.
    functions = result.functions
    return GeneratedArtifacts(
        managed=render_managed_thunks(functions, config.managed),
        native=render_native_wrapper(functions, config.native),
        function_count=len(functions),
    )


def artifact_targets(artifacts: GeneratedArtifacts, managed_path: Path, native_path: Path) -> list[ArtifactTarget]:
    return [
        ArtifactTarget("managed", managed_path, artifacts.managed),
        ArtifactTarget("native", native_path, artifacts.native),
    ]


def write_artifacts(
    targets: list[ArtifactTarget],
    *,
    check: bool,
    dry_run: bool,
    quiet: bool = False,
) -> tuple[int, dict[str, str]]:
    status = 0
    statuses: dict[str, str] = {}
    for target in targets:
        state = artifact_status(target.path, target.content)
        if state != "unchanged" and not check and not dry_run and not quiet:
            print(f"Generating {target.path}")
        drift = write_if_changed(target.path, target.content, check, dry_run)
        if check and drift:
            state = "drift"
        statuses[target.label] = state
        status |= drift
    return status, statuses


def build_report(result: ParseResult, statuses: dict[str, str], paths: dict[str, Path]) -> dict[str, Any]:
    return {
        "function_count": len(result.functions),
        "functions": [decl.as_dict() for decl in result.functions],
        "diagnostics": [item.as_dict() for item in result.diagnostics],
        "artifacts": {
            label: {"path": str(paths[label]), "status": statuses.get(label, "n/a")}
            for label in sorted(paths)
        },
    }
