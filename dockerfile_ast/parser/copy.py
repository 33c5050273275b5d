# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
COPY instruction assembly.

Two shapes come out of the grammar:
  - `copy_standard`: flags and paths; the last path is the destination.
  - `copy_heredoc`: flags, `<<DELIM` openers and paths on the first line,
    followed by one body + terminator per opener. Bodies become
    FileContents sources at their opener's position.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import ClassVar, Deque, List, Optional, Tuple, Union

from lark import Tree

from dockerfile_ast.core.errors import GenericParseError
from dockerfile_ast.core.span import Span, SpannedString
from .ast import Instruction
from .heredoc import HeredocMatcher, decode_delimiter, decode_terminator
from .nodes import node_name, node_span, spanned, unexpected_token

_ARITY_MESSAGE = "copy requires at least one source and a destination"


@dataclass(frozen=True)
class CopyFlag:
	"""A `--name=value` modifier, e.g. `COPY --from=builder /src /dst`."""

	span: Span
	name: SpannedString
	value: SpannedString


@dataclass(frozen=True)
class FileName:
	"""A copy source referring to a path in the build context (or another stage)."""

	value: SpannedString


@dataclass(frozen=True)
class FileContents:
	"""A copy source whose content is an inline heredoc body."""

	value: SpannedString


SourceType = Union[FileName, FileContents]


@dataclass(frozen=True)
class CopyInstruction(Instruction):
	kind: ClassVar[str] = "copy"

	span: Span
	flags: Tuple[CopyFlag, ...]
	sources: Tuple[SourceType, ...]
	destination: SpannedString

	def file_names(self) -> Tuple[SpannedString, ...]:
		return tuple(s.value for s in self.sources if isinstance(s, FileName))

	def file_contents(self) -> Tuple[SpannedString, ...]:
		return tuple(s.value for s in self.sources if isinstance(s, FileContents))


def build_copy_flag(tree: Tree) -> CopyFlag:
	name: Optional[SpannedString] = None
	value: Optional[SpannedString] = None
	for child in tree.children:
		kind = node_name(child)
		if kind == "copy_flag_name":
			name = spanned(child)
		elif kind == "copy_flag_value":
			value = spanned(child)
		else:
			raise unexpected_token(child)
	span = node_span(tree)
	if name is None:
		raise GenericParseError("copy flags require a key", span=span)
	if value is None:
		raise GenericParseError("copy flags require a value", span=span)
	return CopyFlag(span, name, value)


def build_copy(tree: Tree) -> CopyInstruction:
	"""Assemble a `copy` subtree into a CopyInstruction."""
	span = node_span(tree)
	if len(tree.children) != 1:
		raise GenericParseError("copy instruction expected a single field", span=span)
	field = tree.children[0]
	kind = node_name(field)
	if kind == "copy_standard":
		return _build_standard(field, span)
	if kind == "copy_heredoc":
		return _build_heredoc(field, span)
	raise unexpected_token(field)


def _build_standard(tree: Tree, span: Span) -> CopyInstruction:
	flags: List[CopyFlag] = []
	paths: List[SpannedString] = []
	for child in tree.children:
		kind = node_name(child)
		if kind == "copy_flag":
			flags.append(build_copy_flag(child))
		elif kind == "copy_pathspec":
			paths.append(spanned(child))
		elif kind == "comment":
			continue
		else:
			raise unexpected_token(child)
	if len(paths) < 2:
		raise GenericParseError(_ARITY_MESSAGE, span=span)
	destination = paths.pop()
	return CopyInstruction(span, tuple(flags), tuple(FileName(p) for p in paths), destination)


def _build_heredoc(tree: Tree, span: Span) -> CopyInstruction:
	flags: List[CopyFlag] = []
	# Slots keep sources in source order; heredoc slots are filled once their body resolves.
	slots: List[Optional[SourceType]] = []
	path_slots: List[int] = []
	waiting: Deque[int] = deque()
	matcher = HeredocMatcher("COPY")
	body: Optional[SpannedString] = None
	for child in tree.children:
		kind = node_name(child)
		if kind == "copy_flag":
			flags.append(build_copy_flag(child))
		elif kind == "copy_pathspec":
			path_slots.append(len(slots))
			slots.append(FileName(spanned(child)))
		elif kind == "heredoc_open":
			matcher.open(decode_delimiter(child))
			waiting.append(len(slots))
			slots.append(None)
		elif kind == "heredoc_body":
			body = spanned(child)
		elif kind == "heredoc_terminator":
			terminator = decode_terminator(child)
			matcher.close(terminator)
			if body is None:
				body = SpannedString(Span.empty_at(terminator.span.start), "")
			slots[waiting.popleft()] = FileContents(body)
			body = None
		elif kind == "comment":
			continue
		else:
			raise unexpected_token(child)
	matcher.finish()

	if not path_slots or len(slots) < 2:
		raise GenericParseError(_ARITY_MESSAGE, span=span)
	dest_slot = path_slots[-1]
	destination = slots[dest_slot].value
	sources = tuple(s for i, s in enumerate(slots) if i != dest_slot and s is not None)
	if not sources:
		raise GenericParseError(_ARITY_MESSAGE, span=span)
	return CopyInstruction(span, tuple(flags), sources, destination)


__all__ = [
	"CopyFlag",
	"CopyInstruction",
	"FileContents",
	"FileName",
	"SourceType",
	"build_copy",
	"build_copy_flag",
]
