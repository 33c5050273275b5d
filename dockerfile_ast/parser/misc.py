# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Every instruction other than COPY and RUN (FROM, ENV, LABEL, CMD, ...).

These need no heredoc matching; their argument text is kept as a
BreakableString so continuations and comment lines still map back to the
source.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Optional

from lark import Tree

from dockerfile_ast.core.errors import GenericParseError
from dockerfile_ast.core.span import Span, SpannedString
from .ast import Instruction
from .breakable import BreakableString, build_breakable
from .nodes import node_name, node_span, spanned, unexpected_token


@dataclass(frozen=True)
class MiscInstruction(Instruction):
	kind: ClassVar[str] = "misc"

	span: Span
	instruction: SpannedString
	arguments: Optional[BreakableString] = None

	@property
	def keyword(self) -> str:
		return self.instruction.content.upper()


def build_misc(tree: Tree) -> MiscInstruction:
	span = node_span(tree)
	instruction: Optional[SpannedString] = None
	arguments: Optional[BreakableString] = None
	for child in tree.children:
		kind = node_name(child)
		if kind == "MISC_KEYWORD":
			instruction = spanned(child)
		elif kind == "any_breakable":
			arguments = build_breakable(child)
		else:
			raise unexpected_token(child)
	if instruction is None:
		raise GenericParseError("instruction is missing its keyword", span=span)
	return MiscInstruction(span, instruction, arguments)


__all__ = ["MiscInstruction", "build_misc"]
