from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .common import ThunkCodegenError, write_json
from .config import load_config
from .generation import artifact_targets, build_report, generate_artifacts, write_artifacts
from .instruction_sets import INSTRUCTION_SET_OUTPUT_COUNT, run_instruction_set_generator
from .parser import parse_file

COMMANDS = {"thunks", "instruction-sets"}
LEGACY_INSTRUCTION_SET_DISCRIMINATOR = "InstructionSetGenerator"


def command_thunks(args: argparse.Namespace) -> int:
    config = load_config(Path(args.config).resolve() if args.config else None)
    idl_path = Path(args.idl).resolve()
    managed_path = Path(args.managed_out).resolve()
    native_path = Path(args.native_out).resolve()

    result = parse_file(idl_path)
    for diagnostic in result.diagnostics:
        print(diagnostic.format(), file=sys.stderr)

    artifacts = generate_artifacts(result, config)
    targets = artifact_targets(artifacts, managed_path, native_path)
    exit_code, statuses = write_artifacts(targets, check=args.check, dry_run=args.dry_run, quiet=args.quiet)

    if not args.quiet:
        print(
            f"[thunks] functions={artifacts.function_count} diagnostics={len(result.diagnostics)} "
            f"managed={statuses['managed']} native={statuses['native']}"
        )

    if args.report_json:
        report = build_report(result, statuses, {"managed": managed_path, "native": native_path})
        report["idl"] = str(idl_path)
        write_json(Path(args.report_json).resolve(), report)

    if args.fail_on_parse_errors and result.diagnostics:
        exit_code = 1
    return exit_code


def command_instruction_sets(args: argparse.Namespace) -> int:
    if len(args.outputs) != INSTRUCTION_SET_OUTPUT_COUNT:
        raise ThunkCodegenError(
            f"instruction-sets expects {INSTRUCTION_SET_OUTPUT_COUNT} output paths, got {len(args.outputs)}"
        )
    config = load_config(Path(args.config).resolve())
    outputs = [Path(item).resolve() for item in args.outputs]
    result = run_instruction_set_generator(
        config.instruction_set_command,
        Path(args.input).resolve(),
        outputs,
        dry_run=args.dry_run,
    )
    if not args.dry_run:
        for output in outputs:
            print(f"Generating {output}")
    print(f"[instruction-sets] status={result['status']} command={result['command']}")
    if result["stdout"]:
        print(f"  stdout: {result['stdout']}")
    if result["stderr"]:
        print(f"  stderr: {result['stderr']}")
    return 0 if result["status"] != "fail" else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="abi_thunk_codegen",
        description="Generate matching managed export thunks and native callback wrappers from a thunk IDL.",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    thunks = sub.add_parser("thunks", help="Generate managed thunks and the native wrapper from an IDL file.")
    thunks.add_argument("idl", help="Path to the thunk IDL input.")
    thunks.add_argument("managed_out", help="Managed export table output path.")
    thunks.add_argument("native_out", help="Native dispatch struct and wrapper output path.")
    thunks.add_argument("--config", help="Path to codegen config JSON.")
    thunks.add_argument("--check", action="store_true", help="Fail if generated files are out of date; write nothing.")
    thunks.add_argument("--dry-run", action="store_true", help="Render without writing outputs.")
    thunks.add_argument("--report-json", help="Write a JSON summary of parsed functions and diagnostics.")
    thunks.add_argument("--fail-on-parse-errors", action="store_true", help="Exit non-zero when any IDL line is rejected.")
    thunks.add_argument("--quiet", action="store_true", help="Suppress progress output.")
    thunks.set_defaults(func=command_thunks)

    instruction_sets = sub.add_parser(
        "instruction-sets",
        help="Run the external instruction set generator over its input file.",
    )
    instruction_sets.add_argument("input", help="Instruction set definition input.")
    instruction_sets.add_argument("outputs", nargs="+", help=f"Exactly {INSTRUCTION_SET_OUTPUT_COUNT} output paths.")
    instruction_sets.add_argument("--config", required=True, help="Path to codegen config JSON.")
    instruction_sets.add_argument("--dry-run", action="store_true", help="Print the generator command without running it.")
    instruction_sets.set_defaults(func=command_instruction_sets)

    return parser


def normalize_argv(argv: list[str]) -> list[str]:
    """Accept the positional invocation used by existing build scripts."""
    if not argv or argv[0] in COMMANDS or argv[0].startswith("-"):
        return argv
    if argv[0] == LEGACY_INSTRUCTION_SET_DISCRIMINATOR:
        return ["instruction-sets", *argv[1:]]
    return ["thunks", *argv]


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(normalize_argv(list(sys.argv[1:] if argv is None else argv)))

    try:
        return int(args.func(args))
    except ThunkCodegenError as exc:
        print(f"abi_thunk_codegen error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
