# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
r"""
RUN instruction assembly.

	RUN [--name=value ...] ["exec", "form"]
	RUN [--name=value ...] shell form \
	    # comment lines may sit between continued lines
	    more shell
	RUN [--name=value ...] [command] <<DELIM [suffix] [<<DELIM2 [suffix]]
	...
	DELIM
	...
	DELIM2
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import ClassVar, List, Optional, Tuple, Union

from lark import Tree

from dockerfile_ast.core.errors import GenericParseError
from dockerfile_ast.core.span import Span, SpannedString
from .ast import Instruction
from .breakable import BreakableString, build_breakable
from .heredoc import Heredoc, HeredocMatcher, build_heredocs
from .nodes import node_name, node_span, node_token, spanned, unexpected_token


@dataclass(frozen=True)
class RunOption:
	"""A `--name=value` option; `original` is the option exactly as written."""

	span: Span
	name: SpannedString
	value: SpannedString
	original: str

	def __str__(self) -> str:
		return self.original


@dataclass(frozen=True)
class Exec:
	"""Exec form: a JSON string array, run without a shell."""

	span: Span
	elements: Tuple[SpannedString, ...]

	def as_list(self) -> List[str]:
		return [e.content for e in self.elements]


@dataclass(frozen=True)
class Shell:
	breakable: BreakableString


@dataclass(frozen=True)
class ShellWithHeredoc:
	"""
	Shell form followed by heredocs; `breakable` is empty (zero-width) for a bare heredoc.

	`heredoc` is the first block opened on the command line and `more_heredocs`
	holds any further ones, in opener order.
	"""

	breakable: BreakableString
	heredoc: Heredoc
	more_heredocs: Tuple[Heredoc, ...] = ()

	@property
	def heredocs(self) -> Tuple[Heredoc, ...]:
		return (self.heredoc,) + self.more_heredocs


ShellOrExecExpr = Union[Exec, Shell, ShellWithHeredoc]


@dataclass(frozen=True)
class RunInstruction(Instruction):
	kind: ClassVar[str] = "run"

	span: Span
	options: Tuple[RunOption, ...]
	expr: ShellOrExecExpr

	def as_shell(self) -> Optional[BreakableString]:
		"""The shell text when this is a shell-form RUN (with or without heredoc)."""
		if isinstance(self.expr, (Shell, ShellWithHeredoc)):
			return self.expr.breakable
		return None

	def as_exec(self) -> Optional[Exec]:
		if isinstance(self.expr, Exec):
			return self.expr
		return None

	def as_heredoc(self) -> Optional[Heredoc]:
		if isinstance(self.expr, ShellWithHeredoc):
			return self.expr.heredoc
		return None

	def heredocs(self) -> Tuple[Heredoc, ...]:
		if isinstance(self.expr, ShellWithHeredoc):
			return self.expr.heredocs
		return ()


def build_run_option(tree: Tree, source: str) -> RunOption:
	name: Optional[SpannedString] = None
	value: Optional[SpannedString] = None
	for child in tree.children:
		kind = node_name(child)
		if kind == "run_option_name":
			name = spanned(child)
		elif kind == "run_option_value":
			value = spanned(child)
		else:
			raise unexpected_token(child)
	span = node_span(tree)
	if name is None:
		raise GenericParseError("run options require a key", span=span)
	if value is None:
		raise GenericParseError("run options require a value", span=span)
	return RunOption(span, name, value, span.slice(source))


def build_exec(tree: Tree) -> Exec:
	elements: List[SpannedString] = []
	for child in tree.children:
		if node_name(child) != "exec_string":
			raise unexpected_token(child)
		tok = node_token(child)
		try:
			content = json.loads(str(tok))
		except ValueError as err:
			raise GenericParseError(f"invalid exec string {str(tok)}: {err}", span=node_span(tok)) from err
		elements.append(SpannedString(node_span(tok), content))
	return Exec(node_span(tree), tuple(elements))


def build_run(tree: Tree, source: str) -> RunInstruction:
	"""Assemble a `run` subtree; `source` is needed to keep option text verbatim."""
	span = node_span(tree)
	options: List[RunOption] = []
	body: Optional[Tree] = None
	for child in tree.children:
		kind = node_name(child)
		if kind == "run_option":
			options.append(build_run_option(child, source))
		elif kind in ("run_exec", "run_shell"):
			body = child
			break
		elif kind == "comment":
			continue
		else:
			raise unexpected_token(child)
	if body is None:
		raise GenericParseError("missing run expression", span=span)

	if node_name(body) == "run_exec":
		return RunInstruction(span, tuple(options), build_exec(body))
	return RunInstruction(span, tuple(options), _build_shell(body))


def _build_shell(tree: Tree) -> ShellOrExecExpr:
	if not tree.children:
		raise GenericParseError("missing run shell expression")
	first, rest = tree.children[0], tree.children[1:]
	matcher = HeredocMatcher("RUN")
	kind = node_name(first)
	if kind == "run_heredoc":
		heredoc, *more = build_heredocs(first, matcher)
		return ShellWithHeredoc(BreakableString(Span.empty_at(heredoc.span.start)), heredoc, tuple(more))
	if kind != "any_breakable":
		raise unexpected_token(first)
	breakable = build_breakable(first)
	if not rest:
		return Shell(breakable)
	if node_name(rest[0]) != "run_heredoc":
		raise unexpected_token(rest[0])
	if len(rest) > 1:
		raise unexpected_token(rest[1])
	heredoc, *more = build_heredocs(rest[0], matcher)
	return ShellWithHeredoc(breakable, heredoc, tuple(more))


__all__ = [
	"Exec",
	"RunInstruction",
	"RunOption",
	"Shell",
	"ShellOrExecExpr",
	"ShellWithHeredoc",
	"build_exec",
	"build_run",
	"build_run_option",
]
