from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .canonical import canonicalize
from .common import ThunkCodegenError
from .type_registry import TypeBinding, TypeRegistry, TypeScope

MANUAL_NATIVE_WRAPPER_MARKER = "[ManualNativeWrapper]"
_NAME_SEPARATORS = (" ", "*")


@dataclass(frozen=True)
class Parameter:
    name: str
    type: TypeBinding

    def __post_init__(self) -> None:
        _check_name(self.name, "Parameter")

    def as_dict(self) -> dict[str, Any]:
        return {"name": self.name, "type": self.type.as_dict()}


@dataclass(frozen=True)
class FunctionDecl:
    name: str
    return_type: TypeBinding
    parameters: tuple[Parameter, ...]
    manual_native_wrapper: bool = False

    def __post_init__(self) -> None:
        _check_name(self.name, "Function")

    def signature(self) -> str:
        params = ", ".join(f"{p.name}: {p.type.thunk_name}" for p in self.parameters)
        return f"{self.name}({params}) -> {self.return_type.thunk_name}"

    def as_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "return_type": self.return_type.as_dict(),
            "parameters": [p.as_dict() for p in self.parameters],
            "manual_native_wrapper": self.manual_native_wrapper,
        }


def _check_name(name: str, label: str) -> None:
    if not name:
        raise ThunkCodegenError(f"{label} name is missing")
    if name.startswith("*"):
        raise ThunkCodegenError("Names not allowed to start with *")


def split_type_and_name(declaration: str) -> tuple[str, str]:
    """Split ``Type Name`` at the last space or '*'; the '*' stays with the type."""
    index = max(declaration.rfind(sep) for sep in _NAME_SEPARATORS)
    name = canonicalize(declaration[index + 1:])
    type_text = canonicalize(declaration[: index + 1])
    return type_text, name


def parse_function_decl(line: str, registry: TypeRegistry) -> FunctionDecl:
    manual = MANUAL_NATIVE_WRAPPER_MARKER in line
    if manual:
        line = line.replace(MANUAL_NATIVE_WRAPPER_MARKER, "")

    open_index = line.find("(")
    close_index = line.find(")")
    if open_index < 0 or close_index < 0:
        raise ThunkCodegenError(f"Malformed function declaration '{canonicalize(line)}': missing parameter list")
    if close_index < open_index:
        raise ThunkCodegenError(f"Malformed function declaration '{canonicalize(line)}': ')' before '('")

    return_type_text, function_name = split_type_and_name(canonicalize(line[:open_index]))
    if function_name.startswith("*"):
        raise ThunkCodegenError("Names not allowed to start with *")
    return_type = registry.resolve(return_type_text, TypeScope.RETURN)

    parameter_list = canonicalize(line[open_index + 1:close_index])
    parameters: list[Parameter] = []
    if parameter_list:
        for chunk in parameter_list.split(","):
            type_text, param_name = split_type_and_name(canonicalize(chunk))
            binding = registry.resolve(type_text, TypeScope.PARAMETER)
            parameters.append(Parameter(param_name, binding))

    return FunctionDecl(
        name=function_name,
        return_type=return_type,
        parameters=tuple(parameters),
        manual_native_wrapper=manual,
    )
