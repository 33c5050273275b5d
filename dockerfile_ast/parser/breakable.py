# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
r"""
Breakable (line-continued) expressions.

A shell-form body such as

	RUN foo && \
	    # a comment
	    bar

is kept as an ordered list of fragments, each with its own span: literal
text between line continuations and whole comment lines. The continuation
markers themselves (`\` + newline) and the leading whitespace of comment
lines belong to no fragment. `effective_text()` joins the literal fragments
only, which is the command text the build actually runs.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Iterator, Tuple

from lark import Tree

from dockerfile_ast.core.span import Span, SpanLike
from .nodes import node_name, node_span, unexpected_token


class FragmentKind(str, Enum):
	LITERAL = "literal"
	COMMENT = "comment"


@dataclass(frozen=True)
class Fragment:
	span: Span
	kind: FragmentKind
	text: str


@dataclass(frozen=True)
class BreakableString:
	"""An expression split across continuation lines, possibly interleaved with comments."""

	span: Span
	components: Tuple[Fragment, ...] = ()

	def __init__(self, span: SpanLike, components: Tuple[Fragment, ...] = ()) -> None:
		object.__setattr__(self, "span", Span.coerce(span))
		object.__setattr__(self, "components", tuple(components))

	def _add(self, kind: FragmentKind, span: SpanLike, text: str) -> "BreakableString":
		span = Span.coerce(span)
		if self.components and span.start < self.components[-1].span.end:
			raise ValueError(
				f"fragment at {span} overlaps or precedes the previous fragment at {self.components[-1].span}"
			)
		return replace(self, components=self.components + (Fragment(span, kind, text),))

	def add_literal(self, span: SpanLike, text: str) -> "BreakableString":
		return self._add(FragmentKind.LITERAL, span, text)

	def add_comment(self, span: SpanLike, text: str) -> "BreakableString":
		return self._add(FragmentKind.COMMENT, span, text)

	def literals(self) -> Iterator[Fragment]:
		return (c for c in self.components if c.kind is FragmentKind.LITERAL)

	def comments(self) -> Iterator[Fragment]:
		return (c for c in self.components if c.kind is FragmentKind.COMMENT)

	def effective_text(self) -> str:
		return "".join(c.text for c in self.literals())

	def __str__(self) -> str:
		return self.effective_text()


def build_breakable(tree: Tree) -> BreakableString:
	"""Assemble an `any_breakable` subtree (BREAKABLE_STRING / COMMENT tokens)."""
	result = BreakableString(node_span(tree))
	for child in tree.children:
		kind = node_name(child)
		if kind == "BREAKABLE_STRING":
			result = result.add_literal(node_span(child), str(child))
		elif kind == "COMMENT":
			result = result.add_comment(node_span(child), str(child))
		else:
			raise unexpected_token(child)
	return result


__all__ = ["BreakableString", "Fragment", "FragmentKind", "build_breakable"]
