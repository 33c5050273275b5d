# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Heredoc records and the FIFO delimiter matcher.

One instruction may open several heredocs on a single line:

	COPY <<FIRST <<SECOND /dest/
	one
	FIRST
	two
	SECOND

Bodies and terminators follow in the order the openers were written, so the
matcher keeps a first-in-first-out queue of pending delimiters and checks
each terminator against the oldest one. The tokenizer only finds candidate
terminator lines; exact equality (`delimiter + "\\n"`) is enforced here.
"""

from __future__ import annotations

import re
from collections import deque
from dataclasses import dataclass
from typing import Deque, List, Optional, Tuple

from lark import Tree

from dockerfile_ast.core.errors import (
	GenericParseError,
	HeredocTerminatorMismatch,
	UnmatchedHeredocDelimiter,
	UnmatchedHeredocTerminator,
)
from dockerfile_ast.core.span import Span, SpannedString
from .nodes import Node, node_name, node_span, node_token, spanned, unexpected_token

# `<<EOF`, `<< EOF-1`, `<<"END OF FILE"`, `<<'EOF'`; `<<<` is a here-string, not a heredoc.
# Unquoted delimiters stop at whitespace, quotes, redirections and shell operators;
# `<<-` (tab stripping) is not an opener.
HEREDOC_OPEN_RE = re.compile(r"""<<(?!<)[ \t]*(?:"([^"\r\n]+)"|'([^'\r\n]+)'|([^\s<>"';|&()\\-][^\s<>"';|&()\\]*))""")


@dataclass(frozen=True)
class Heredoc:
	"""
	A captured literal block.

	`span` runs from the `<<` opener to the end of the terminator line.
	`body` is the raw block content (with its trailing newline unless empty)
	and `suffix` is whatever followed the delimiter on the opener line.
	"""

	span: Span
	delimiter: SpannedString
	terminator: SpannedString
	body: SpannedString
	suffix: Optional[SpannedString] = None


def decode_delimiter(node: Node) -> SpannedString:
	"""Decode a `heredoc_open` node to its bare identifier (quotes and `<<` stripped)."""
	tok = node_token(node)
	m = HEREDOC_OPEN_RE.match(str(tok))
	if m is None:
		raise GenericParseError(f"malformed heredoc opener {str(tok)!r}", span=node_span(tok))
	group = next(i for i in (1, 2, 3) if m.group(i) is not None)
	start = tok.start_pos + m.start(group)
	return SpannedString(Span(start, tok.start_pos + m.end(group)), m.group(group))


def decode_terminator(node: Node) -> SpannedString:
	"""
	Decode a terminator line.

	The line break is not part of the token; the decoded text always carries
	a single `\\n` so it compares against `delimiter + "\\n"`, whether the
	source used `\\r\\n` or ended without a final newline.
	"""
	raw = spanned(node)
	text = raw.content
	if text.endswith("\r\n"):
		text = text[:-2]
	elif text.endswith("\n") or text.endswith("\r"):
		text = text[:-1]
	return SpannedString(raw.span, text + "\n")


class HeredocMatcher:
	"""Pairs heredoc openers with terminators, first opened first closed."""

	def __init__(self, instruction: str) -> None:
		self.instruction = instruction
		self._pending: Deque[SpannedString] = deque()

	@property
	def pending(self) -> Tuple[SpannedString, ...]:
		return tuple(self._pending)

	def open(self, delimiter: SpannedString) -> None:
		self._pending.append(delimiter)

	def close(self, terminator: SpannedString) -> SpannedString:
		"""Match `terminator` against the oldest pending delimiter and return that delimiter."""
		if not self._pending:
			raise UnmatchedHeredocTerminator(self.instruction, terminator)
		delimiter = self._pending.popleft()
		if terminator.content != delimiter.content + "\n":
			raise HeredocTerminatorMismatch(self.instruction, delimiter, terminator)
		return delimiter

	def finish(self) -> None:
		if self._pending:
			raise UnmatchedHeredocDelimiter(self.instruction, tuple(self._pending))


@dataclass
class _Opener:
	start: int
	delimiter: SpannedString
	suffix: Optional[SpannedString] = None


def build_heredocs(tree: Tree, matcher: HeredocMatcher) -> Tuple[Heredoc, ...]:
	"""
	Assemble a `run_heredoc` subtree into one Heredoc per opener, in opener order.

	Every opener and terminator goes through `matcher`, and the matcher is
	finished here, so an unterminated opener fails the whole subtree.
	"""
	openers: List[_Opener] = []
	heredocs: List[Heredoc] = []
	body: Optional[SpannedString] = None
	for child in tree.children:
		kind = node_name(child)
		if kind == "heredoc_open":
			delimiter = decode_delimiter(child)
			matcher.open(delimiter)
			openers.append(_Opener(node_span(child).start, delimiter))
		elif kind == "heredoc_suffix" and openers:
			openers[-1].suffix = spanned(child)
		elif kind == "heredoc_body":
			body = spanned(child)
		elif kind == "heredoc_terminator":
			terminator = decode_terminator(child)
			matcher.close(terminator)
			# The matcher is FIFO, so the n-th terminator closes the n-th opener.
			opener = openers[len(heredocs)]
			if body is None:
				body = SpannedString(Span.empty_at(terminator.span.start), "")
			heredocs.append(
				Heredoc(
					Span(opener.start, terminator.span.end),
					opener.delimiter,
					terminator,
					body,
					opener.suffix,
				)
			)
			body = None
		else:
			raise unexpected_token(child)
	if not openers:
		raise GenericParseError("heredoc is missing its delimiter", span=node_span(tree))
	matcher.finish()
	return tuple(heredocs)


__all__ = [
	"HEREDOC_OPEN_RE",
	"Heredoc",
	"HeredocMatcher",
	"build_heredocs",
	"decode_delimiter",
	"decode_terminator",
]
