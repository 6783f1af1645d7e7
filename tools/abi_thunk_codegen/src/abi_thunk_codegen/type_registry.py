from __future__ import annotations

import enum
from dataclasses import dataclass, field

from .canonical import canonicalize
from .common import ThunkCodegenError

BOOLEAN_I1_SPELLING = "[MarshalAs(UnmanagedType.I1)]bool"
BOOLEAN_BOOL_SPELLING = "[MarshalAs(UnmanagedType.Bool)]bool"
BY_REF_MARKER = "ref "


class MarshalKind(enum.Enum):
    PLAIN = "plain"
    BOOLEAN_I1 = "boolean_i1"
    BOOLEAN_BOOL = "boolean_bool"
    BY_REF = "by_ref"

    @property
    def is_boolean(self) -> bool:
        return self in (MarshalKind.BOOLEAN_I1, MarshalKind.BOOLEAN_BOOL)


class TypeScope(enum.Enum):
    PARAMETER = "parameter"
    RETURN = "return"


def classify_managed_spelling(managed: str) -> MarshalKind:
    if managed == BOOLEAN_I1_SPELLING:
        return MarshalKind.BOOLEAN_I1
    if managed == BOOLEAN_BOOL_SPELLING:
        return MarshalKind.BOOLEAN_BOOL
    if BY_REF_MARKER in managed:
        return MarshalKind.BY_REF
    return MarshalKind.PLAIN


def derive_wire_spelling(managed: str, kind: MarshalKind) -> str:
    if kind is MarshalKind.BOOLEAN_I1:
        return "byte"
    if kind is MarshalKind.BOOLEAN_BOOL:
        return "int"
    if kind is MarshalKind.BY_REF:
        return managed.replace(BY_REF_MARKER, "") + "*"
    return managed


@dataclass(frozen=True)
class TypeBinding:
    thunk_name: str
    managed_spelling: str
    native_spelling: str
    marshal_kind: MarshalKind
    wire_spelling: str

    @classmethod
    def create(cls, thunk_name: str, managed: str | None = None, native: str | None = None) -> "TypeBinding":
        managed_spelling = managed or thunk_name
        kind = classify_managed_spelling(managed_spelling)
        return cls(
            thunk_name=thunk_name,
            managed_spelling=managed_spelling,
            native_spelling=native or thunk_name,
            marshal_kind=kind,
            wire_spelling=derive_wire_spelling(managed_spelling, kind),
        )

    @property
    def is_managed_void(self) -> bool:
        return self.managed_spelling == "void"

    @property
    def is_native_void(self) -> bool:
        return self.native_spelling == "void"

    def as_dict(self) -> dict[str, str]:
        return {
            "thunk": self.thunk_name,
            "managed": self.managed_spelling,
            "native": self.native_spelling,
            "wire": self.wire_spelling,
            "marshal_kind": self.marshal_kind.value,
        }


def parse_type_binding(line: str) -> TypeBinding:
    """Build a binding from a ``Thunk[,Managed[,Native]]`` declaration.

    Blank managed or native fields fall back to the thunk name.
    """
    fields = [canonicalize(item) for item in line.split(",")]
    if len(fields) > 3:
        raise ThunkCodegenError(f"Wrong number of type name entries ({len(fields)}) in '{line}'")
    thunk_name = fields[0]
    if not thunk_name:
        raise ThunkCodegenError(f"Missing thunk type name in '{line}'")
    managed = fields[1] if len(fields) > 1 else None
    native = fields[2] if len(fields) > 2 else None
    return TypeBinding.create(thunk_name, managed, native)


@dataclass
class TypeRegistry:
    """Parameter-type and return-type scopes for one parse session."""

    parameter_types: dict[str, TypeBinding] = field(default_factory=dict)
    return_types: dict[str, TypeBinding] = field(default_factory=dict)

    def declare_normal(self, line: str) -> TypeBinding:
        binding = parse_type_binding(line)
        name = binding.thunk_name
        if name in self.parameter_types:
            raise ThunkCodegenError(f"Type {name} already declared")
        self.parameter_types[name] = binding
        # An earlier RETURNTYPES binding keeps overriding the return scope.
        self.return_types.setdefault(name, binding)
        return binding

    def declare_return(self, line: str) -> TypeBinding:
        binding = parse_type_binding(line)
        self.return_types[binding.thunk_name] = binding
        return binding

    def declare(self, line: str, scope: TypeScope) -> TypeBinding:
        if scope is TypeScope.RETURN:
            return self.declare_return(line)
        return self.declare_normal(line)

    def resolve(self, type_name: str, scope: TypeScope) -> TypeBinding:
        table = self.return_types if scope is TypeScope.RETURN else self.parameter_types
        binding = table.get(type_name)
        if binding is None:
            raise ThunkCodegenError(f"Type {type_name} unknown")
        return binding
