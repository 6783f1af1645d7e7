from __future__ import annotations

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import jsonschema

from .common import ThunkCodegenError, load_json_object
from .managed_emitter import ManagedRenderOptions
from .native_emitter import NativeRenderOptions

SCHEMA_PATH = Path(__file__).resolve().parent / "schemas" / "config.schema.json"


@dataclass(frozen=True)
class CodegenConfig:
    managed: ManagedRenderOptions = field(default_factory=ManagedRenderOptions)
    native: NativeRenderOptions = field(default_factory=NativeRenderOptions)
    instruction_set_command: tuple[str, ...] = ()


def validate_config_payload(payload: dict[str, Any], label: str) -> None:
    schema = load_json_object(SCHEMA_PATH)
    try:
        jsonschema.validate(payload, schema)
    except jsonschema.ValidationError as exc:
        location = "/".join(str(part) for part in exc.absolute_path) or "<root>"
        raise ThunkCodegenError(f"{label} failed schema validation at {location}: {exc.message}") from exc


def _build_options(cls: type, raw: dict[str, Any] | None) -> Any:
    if not raw:
        return cls()
    known = {item.name for item in fields(cls)}
    values: dict[str, Any] = {}
    for key, value in raw.items():
        if key not in known:
            continue
        values[key] = tuple(value) if isinstance(value, list) else value
    return cls(**values)


def config_from_payload(payload: dict[str, Any], label: str = "config") -> CodegenConfig:
    validate_config_payload(payload, label)
    generator = payload.get("instruction_set_generator") or {}
    return CodegenConfig(
        managed=_build_options(ManagedRenderOptions, payload.get("managed")),
        native=_build_options(NativeRenderOptions, payload.get("native")),
        instruction_set_command=tuple(generator.get("command") or ()),
    )


def load_config(path: Path | None) -> CodegenConfig:
    if path is None:
        return CodegenConfig()
    return config_from_payload(load_json_object(path), label=f"config '{path}'")
