from __future__ import annotations

import shlex
import subprocess
from pathlib import Path
from typing import Any, Sequence

from .common import ThunkCodegenError

INSTRUCTION_SET_OUTPUT_COUNT = 5


def render_generator_command(template: Sequence[str], input_path: Path, outputs: Sequence[Path]) -> list[str]:
    if not template:
        raise ThunkCodegenError(
            "Instruction set generation requires 'instruction_set_generator.command' in the config"
        )
    if len(outputs) != INSTRUCTION_SET_OUTPUT_COUNT:
        raise ThunkCodegenError(
            f"Instruction set generation expects {INSTRUCTION_SET_OUTPUT_COUNT} output paths, got {len(outputs)}"
        )

    replacements = {"{input}": str(input_path)}
    for index, output in enumerate(outputs):
        replacements[f"{{output{index}}}"] = str(output)

    rendered: list[str] = []
    for token in template:
        if token == "{outputs}":
            rendered.extend(str(output) for output in outputs)
            continue
        current = token
        for key, value in replacements.items():
            current = current.replace(key, value)
        if current:
            rendered.append(current)
    return rendered


def run_instruction_set_generator(
    template: Sequence[str],
    input_path: Path,
    outputs: Sequence[Path],
    *,
    dry_run: bool = False,
) -> dict[str, Any]:
    """Hand the instruction set input over to the external generator."""
    if not input_path.exists():
        raise ThunkCodegenError(f"Instruction set input not found: {input_path}")
    rendered = render_generator_command(template, input_path, outputs)
    command = " ".join(shlex.quote(item) for item in rendered)
    if dry_run:
        return {"status": "skipped", "command": command, "stdout": "", "stderr": "", "exit_code": 0}

    try:
        proc = subprocess.run(rendered, capture_output=True, text=True)
    except OSError as exc:
        raise ThunkCodegenError(f"Unable to run instruction set generator '{rendered[0]}': {exc}") from exc
    return {
        "status": "pass" if proc.returncode == 0 else "fail",
        "command": command,
        "stdout": proc.stdout.strip(),
        "stderr": proc.stderr.strip(),
        "exit_code": proc.returncode,
    }
