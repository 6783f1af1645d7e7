from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from .model import FunctionDecl, Parameter
from .type_registry import MarshalKind, TypeBinding

AUTOGENERATED_BANNER = "// DO NOT EDIT THIS FILE! It IS AUTOGENERATED"

_INDENT = "    "


@dataclass(frozen=True)
class ManagedRenderOptions:
    license_header: tuple[str, ...] = ()
    usings: tuple[str, ...] = ("System", "System.Runtime.InteropServices")
    namespace: str = "Internal.JitInterface"
    class_name: str = "CorInfoImpl"
    get_this: str = "GetThis"
    alloc_exception: str = "AllocException"
    callbacks_method: str = "GetUnmanagedCallbacks"


def entry_point_name(decl: FunctionDecl) -> str:
    return f"_{decl.name}"


def wire_parameter_list(decl: FunctionDecl) -> str:
    parts = ["IntPtr thisHandle", "IntPtr* ppException"]
    parts.extend(f"{p.type.wire_spelling} {p.name}" for p in decl.parameters)
    return ", ".join(parts)


def forward_argument(param: Parameter) -> str:
    kind = param.type.marshal_kind
    if kind is MarshalKind.BY_REF:
        return f"ref *{param.name}"
    if kind.is_boolean:
        return f"{param.name} != 0"
    return param.name


def convert_return(return_type: TypeBinding) -> str:
    if return_type.marshal_kind is MarshalKind.BOOLEAN_I1:
        return " ? (byte)1 : (byte)0"
    if return_type.marshal_kind is MarshalKind.BOOLEAN_BOOL:
        return " ? 1 : 0"
    return ""


def function_pointer_type(decl: FunctionDecl) -> str:
    parts = ["IntPtr", "IntPtr*"]
    parts.extend(p.type.wire_spelling for p in decl.parameters)
    parts.append(decl.return_type.wire_spelling)
    return f"delegate* <{', '.join(parts)}>"


def render_entry_point(decl: FunctionDecl, options: ManagedRenderOptions) -> list[str]:
    """Render one unmanaged-callable thunk.

    Failures raised by the managed implementation never cross the boundary:
    they are stored into ``*ppException`` and the thunk returns ``default``.
    """
    pad = _INDENT * 2
    body = _INDENT * 4
    is_void = decl.return_type.is_managed_void
    arguments = ", ".join(forward_argument(p) for p in decl.parameters)
    call = f"_this.{decl.name}({arguments}){convert_return(decl.return_type)}"

    lines = [
        f"{pad}[UnmanagedCallersOnly]",
        f"{pad}static {decl.return_type.wire_spelling} {entry_point_name(decl)}({wire_parameter_list(decl)})",
        f"{pad}{{",
        f"{pad}{_INDENT}var _this = {options.get_this}(thisHandle);",
        f"{pad}{_INDENT}try",
        f"{pad}{_INDENT}{{",
        f"{body}{call};" if is_void else f"{body}return {call};",
        f"{pad}{_INDENT}}}",
        f"{pad}{_INDENT}catch (Exception ex)",
        f"{pad}{_INDENT}{{",
        f"{body}*ppException = _this.{options.alloc_exception}(ex);",
    ]
    if not is_void:
        lines.append(f"{body}return default;")
    lines.append(f"{pad}{_INDENT}}}")
    lines.append(f"{pad}}}")
    lines.append("")
    return lines


def render_callback_table(functions: Sequence[FunctionDecl], options: ManagedRenderOptions) -> list[str]:
    pad = _INDENT * 2
    body = _INDENT * 3
    lines = [
        f"{pad}static IntPtr {options.callbacks_method}()",
        f"{pad}{{",
        f"{body}void** callbacks = (void**)Marshal.AllocCoTaskMem(sizeof(IntPtr) * {len(functions)});",
        "",
    ]
    for index, decl in enumerate(functions):
        lines.append(f"{body}callbacks[{index}] = ({function_pointer_type(decl)})&{entry_point_name(decl)};")
    lines.append("")
    lines.append(f"{body}return (IntPtr)callbacks;")
    lines.append(f"{pad}}}")
    return lines


def render_managed_thunks(functions: Sequence[FunctionDecl], options: ManagedRenderOptions | None = None) -> str:
    options = options or ManagedRenderOptions()
    lines: list[str] = []
    lines.extend(options.license_header)
    if options.license_header:
        lines.append("")
    lines.append(AUTOGENERATED_BANNER)
    for using in options.usings:
        lines.append(f"using {using};")
    lines.append("")
    lines.append(f"namespace {options.namespace}")
    lines.append("{")
    lines.append(f"{_INDENT}unsafe partial class {options.class_name}")
    lines.append(f"{_INDENT}{{")

    for decl in functions:
        lines.extend(render_entry_point(decl, options))

    lines.extend(render_callback_table(functions, options))
    lines.append(f"{_INDENT}}}")
    lines.append("}")

    return "\n".join(lines) + "\n"
