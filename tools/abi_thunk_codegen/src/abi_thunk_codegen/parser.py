from __future__ import annotations

import enum
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable

from .canonical import canonicalize
from .common import ThunkCodegenError, read_text
from .model import FunctionDecl, parse_function_decl
from .type_registry import TypeRegistry, TypeScope

COMMENT_MARKER = ";"
CONDITIONAL_START = "#if"
CONDITIONAL_END = "#endif"


class ParseMode(enum.Enum):
    RETURNTYPES = "RETURNTYPES"
    NORMALTYPES = "NORMALTYPES"
    FUNCTIONS = "FUNCTIONS"
    CONDITIONAL_SKIP = "CONDITIONAL-SKIP"


SECTION_KEYWORDS = {
    "RETURNTYPES": ParseMode.RETURNTYPES,
    "NORMALTYPES": ParseMode.NORMALTYPES,
    "FUNCTIONS": ParseMode.FUNCTIONS,
}


@dataclass(frozen=True)
class ParseDiagnostic:
    line_number: int
    message: str
    text: str

    def format(self) -> str:
        return f"Error parsing line {self.line_number} : {self.message}"

    def as_dict(self) -> dict[str, Any]:
        return {"line": self.line_number, "message": self.message, "text": self.text}


@dataclass(frozen=True)
class ParseResult:
    functions: tuple[FunctionDecl, ...]
    diagnostics: tuple[ParseDiagnostic, ...]
    registry: TypeRegistry

    @property
    def ok(self) -> bool:
        return not self.diagnostics


@dataclass
class ParseSession:
    """Line-at-a-time state for one pass over an IDL document.

    Conditional regions remember only one earlier mode: a nested ``#if``
    overwrites ``saved_mode`` instead of stacking it, so the first ``#endif``
    returns to ``CONDITIONAL_SKIP`` and the outer ``#endif`` cannot restore the
    mode that was active before the outer region.
    """

    mode: ParseMode = ParseMode.FUNCTIONS
    saved_mode: ParseMode = ParseMode.FUNCTIONS
    registry: TypeRegistry = field(default_factory=TypeRegistry)
    functions: list[FunctionDecl] = field(default_factory=list)
    diagnostics: list[ParseDiagnostic] = field(default_factory=list)

    def feed(self, line_number: int, raw_line: str) -> None:
        line = canonicalize(raw_line)
        try:
            self._dispatch(line)
        except ThunkCodegenError as exc:
            self.diagnostics.append(ParseDiagnostic(line_number, str(exc), line))

    def _dispatch(self, line: str) -> None:
        if not line or line.startswith(COMMENT_MARKER):
            return

        if line == CONDITIONAL_END:
            self.mode = self.saved_mode
            return

        if line.startswith(CONDITIONAL_START):
            self.saved_mode = self.mode
            self.mode = ParseMode.CONDITIONAL_SKIP
            return

        # Section keywords inside a conditional region are skipped too.
        if self.mode is ParseMode.CONDITIONAL_SKIP:
            return

        section = SECTION_KEYWORDS.get(line)
        if section is not None:
            self.mode = section
            return

        if self.mode is ParseMode.NORMALTYPES:
            self.registry.declare(line, TypeScope.PARAMETER)
        elif self.mode is ParseMode.RETURNTYPES:
            self.registry.declare(line, TypeScope.RETURN)
        else:
            self.functions.append(parse_function_decl(line, self.registry))

    def result(self) -> ParseResult:
        return ParseResult(
            functions=tuple(self.functions),
            diagnostics=tuple(self.diagnostics),
            registry=self.registry,
        )


def parse_lines(lines: Iterable[str]) -> ParseResult:
    session = ParseSession()
    for line_number, line in enumerate(lines, start=1):
        session.feed(line_number, line)
    return session.result()


def parse_text(text: str) -> ParseResult:
    return parse_lines(text.splitlines())


def parse_file(path: Path) -> ParseResult:
    return parse_text(read_text(path))
