from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from .managed_emitter import AUTOGENERATED_BANNER
from .model import FunctionDecl

_INDENT = "    "


@dataclass(frozen=True)
class NativeRenderOptions:
    license_header: tuple[str, ...] = ()
    includes: tuple[str, ...] = ("corinfoexception.h",)
    callbacks_struct: str = "JitInterfaceCallbacks"
    wrapper_class: str = "JitInterfaceWrapper"
    exception_type: str = "CorInfoException"


def native_parameter_list(decl: FunctionDecl) -> str:
    return ", ".join(f"{p.type.native_spelling} {p.name}" for p in decl.parameters)


def render_dispatch_field(decl: FunctionDecl, options: NativeRenderOptions) -> str:
    parts = ["void * thisHandle", f"{options.exception_type}** ppException"]
    parts.extend(f"{p.type.native_spelling} {p.name}" for p in decl.parameters)
    return f"{_INDENT}{decl.return_type.native_spelling} (* {decl.name})({', '.join(parts)});"


def render_wrapper_method(decl: FunctionDecl, options: NativeRenderOptions) -> list[str]:
    """Render the virtual method forwarding through the dispatch struct.

    Manual wrappers only get the declaration; their body is hand written.
    """
    return_type = decl.return_type.native_spelling
    header = f"{_INDENT}virtual {return_type} {decl.name}({native_parameter_list(decl)})"
    if decl.manual_native_wrapper:
        return [f"{header};"]

    body = _INDENT * 2
    is_void = decl.return_type.is_native_void
    arguments = ["_thisHandle", "&pException"]
    arguments.extend(p.name for p in decl.parameters)
    call = f"_callbacks->{decl.name}({', '.join(arguments)});"

    lines = [
        header,
        f"{_INDENT}{{",
        f"{body}{options.exception_type}* pException = nullptr;",
        f"{body}{call}" if is_void else f"{body}{return_type} _ret = {call}",
        f"{body}if (pException != nullptr)",
        f"{body}{_INDENT}throw pException;",
    ]
    if not is_void:
        lines.append(f"{body}return _ret;")
    lines.append(f"{_INDENT}}}")
    lines.append("")
    return lines


def render_native_wrapper(functions: Sequence[FunctionDecl], options: NativeRenderOptions | None = None) -> str:
    options = options or NativeRenderOptions()
    struct = options.callbacks_struct
    wrapper = options.wrapper_class

    lines: list[str] = []
    lines.extend(options.license_header)
    if options.license_header:
        lines.append("")
    lines.append(AUTOGENERATED_BANNER)
    for include in options.includes:
        lines.append(f'#include "{include}"')
    lines.append("")
    lines.append(f"struct {struct}")
    lines.append("{")
    for decl in functions:
        lines.append(render_dispatch_field(decl, options))
    lines.append("};")
    lines.append("")
    lines.append(f"class {wrapper}")
    lines.append("{")
    lines.append(f"{_INDENT}void * _thisHandle;")
    lines.append(f"{_INDENT}{struct} * _callbacks;")
    lines.append("")
    lines.append("public:")
    lines.append(f"{_INDENT}{wrapper}(void * thisHandle, void ** callbacks)")
    lines.append(f"{_INDENT * 2}: _thisHandle(thisHandle), _callbacks(({struct} *)callbacks)")
    lines.append(f"{_INDENT}{{")
    lines.append(f"{_INDENT}}}")
    lines.append("")

    for decl in functions:
        lines.extend(render_wrapper_method(decl, options))

    lines.append("};")
    return "\n".join(lines) + "\n"
