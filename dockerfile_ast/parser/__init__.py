"""
Dockerfile parser: a lark LALR grammar driven by a custom context-sensitive
lexer, the per-instruction assemblers, and the adapter that turns assembly
failures into Diagnostics.

Assemblers raise `DockerfileError` subclasses; the `assemble_*` and
`parse_dockerfile` entry points here collect them as Diagnostics instead, so
callers get `(record or None, diagnostics)` back. `build_dockerfile` (also
`Dockerfile.parse`) is the fail-fast variant.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable, List, Optional, Tuple, TypeVar

from lark import Tree
from lark.exceptions import UnexpectedCharacters, UnexpectedInput
from lark.exceptions import UnexpectedToken as LarkUnexpectedToken

from dockerfile_ast.core.diagnostics import Diagnostic
from dockerfile_ast.core.errors import DockerfileError
from dockerfile_ast.core.span import Span, SpannedString
from . import parser as _parser
from .ast import Dockerfile, Instruction
from .copy import CopyInstruction, build_copy
from .misc import MiscInstruction, build_misc
from .nodes import node_name, spanned, unexpected_token
from .run import RunInstruction, build_run

T = TypeVar("T")


def _expect(tree: Tree, kind: str) -> None:
	if node_name(tree) != kind:
		raise unexpected_token(tree)


def _build_copy(tree: Tree, source: str) -> CopyInstruction:
	_expect(tree, "copy")
	return build_copy(tree)


def _build_run(tree: Tree, source: str) -> RunInstruction:
	_expect(tree, "run")
	return build_run(tree, source)


def _build_misc(tree: Tree, source: str) -> MiscInstruction:
	_expect(tree, "misc")
	return build_misc(tree)


_BUILDERS = {
	"copy": _build_copy,
	"run": _build_run,
	"misc": _build_misc,
}


def build_instruction(tree: Tree, source: str) -> Instruction:
	"""Dispatch an instruction subtree to its assembler; raises on failure."""
	builder = _BUILDERS.get(node_name(tree))
	if builder is None:
		raise unexpected_token(tree)
	return builder(tree, source)


def _collect(builder: Callable[[Tree, str], T], tree: Tree, source: str) -> Tuple[Optional[T], List[Diagnostic]]:
	try:
		return builder(tree, source), []
	except DockerfileError as err:
		return None, [Diagnostic.from_error(err)]


def assemble_copy(tree: Tree, source: str) -> Tuple[Optional[CopyInstruction], List[Diagnostic]]:
	return _collect(_build_copy, tree, source)


def assemble_run(tree: Tree, source: str) -> Tuple[Optional[RunInstruction], List[Diagnostic]]:
	return _collect(_build_run, tree, source)


def assemble_misc(tree: Tree, source: str) -> Tuple[Optional[MiscInstruction], List[Diagnostic]]:
	return _collect(_build_misc, tree, source)


def assemble_instruction(tree: Tree, source: str) -> Tuple[Optional[Instruction], List[Diagnostic]]:
	return _collect(build_instruction, tree, source)


def diagnostic_from_lark(err: UnexpectedInput) -> Diagnostic:
	"""Report a tokenizer/grammar failure as a generic parse error at the offending offset."""
	pos = getattr(err, "pos_in_stream", None)
	span = Span.empty_at(pos) if isinstance(pos, int) and pos >= 0 else None
	if isinstance(err, UnexpectedCharacters):
		message = f"unexpected character {err.char!r}"
	elif isinstance(err, LarkUnexpectedToken):
		tok = err.token
		if tok.type == "$END":
			message = "unexpected end of input"
		else:
			message = f"unexpected {tok.type} {str(tok)!r}"
	else:
		message = str(err)
	return Diagnostic(message=message, code="generic-parse-error", severity="error", span=span)


def build_dockerfile(source: str) -> Dockerfile:
	"""Parse and assemble the whole file, raising the first failure."""
	tree = _parser.parse_tree(source)
	instructions: List[Instruction] = []
	comments: List[SpannedString] = []
	for child in tree.children:
		if node_name(child) == "comment":
			comments.append(spanned(child))
		else:
			instructions.append(build_instruction(child, source))
	return Dockerfile(source, tuple(instructions), tuple(comments))


def parse_dockerfile(source: str) -> Tuple[Dockerfile, List[Diagnostic]]:
	"""
	Parse a whole Dockerfile.

	Collects one diagnostic per failing instruction and keeps assembling the
	rest; the returned Dockerfile holds only the instructions that assembled.
	A grammar-level failure yields an empty Dockerfile plus one diagnostic.
	"""
	try:
		tree = _parser.parse_tree(source)
	except UnexpectedInput as err:
		return Dockerfile(source, ()), [diagnostic_from_lark(err)]
	instructions: List[Instruction] = []
	comments: List[SpannedString] = []
	diagnostics: List[Diagnostic] = []
	for child in tree.children:
		if node_name(child) == "comment":
			comments.append(spanned(child))
			continue
		instruction, diags = assemble_instruction(child, source)
		diagnostics.extend(diags)
		if instruction is not None:
			instructions.append(instruction)
	return Dockerfile(source, tuple(instructions), tuple(comments)), diagnostics


def parse_dockerfile_path(path: Path) -> Tuple[Dockerfile, List[Diagnostic]]:
	return parse_dockerfile(Path(path).read_text())


__all__ = [
	"assemble_copy",
	"assemble_instruction",
	"assemble_misc",
	"assemble_run",
	"build_dockerfile",
	"build_instruction",
	"diagnostic_from_lark",
	"parse_dockerfile",
	"parse_dockerfile_path",
]
