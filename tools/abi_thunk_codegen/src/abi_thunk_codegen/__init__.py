from .canonical import canonicalize
from .common import ThunkCodegenError, load_json_object, write_if_changed
from .config import CodegenConfig, load_config
from .generation import GeneratedArtifacts, generate_artifacts
from .managed_emitter import ManagedRenderOptions, render_managed_thunks
from .model import FunctionDecl, Parameter, parse_function_decl
from .native_emitter import NativeRenderOptions, render_native_wrapper
from .parser import ParseDiagnostic, ParseMode, ParseResult, ParseSession, parse_file, parse_lines, parse_text
from .type_registry import MarshalKind, TypeBinding, TypeRegistry, TypeScope

__all__ = [
    "CodegenConfig",
    "FunctionDecl",
    "GeneratedArtifacts",
    "ManagedRenderOptions",
    "MarshalKind",
    "NativeRenderOptions",
    "Parameter",
    "ParseDiagnostic",
    "ParseMode",
    "ParseResult",
    "ParseSession",
    "ThunkCodegenError",
    "TypeBinding",
    "TypeRegistry",
    "TypeScope",
    "canonicalize",
    "generate_artifacts",
    "load_config",
    "load_json_object",
    "parse_file",
    "parse_function_decl",
    "parse_lines",
    "parse_text",
    "render_managed_thunks",
    "render_native_wrapper",
    "write_if_changed",
]
