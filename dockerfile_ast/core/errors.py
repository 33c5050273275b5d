# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Closed taxonomy of instruction assembly failures.

Every error is a `ValueError` subclass so existing parser plumbing can treat
it as a parse-time failure, and each one carries a best-effort `span` plus a
stable `code` so the API boundary can turn it into a structured Diagnostic.
"""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

from .span import Span, SpannedString


class DockerfileError(ValueError):
	"""Base class for every failure raised while assembling instructions."""

	code = "parse-error"

	def __init__(self, message: str, *, span: Optional[Span] = None, notes: Iterable[str] = ()) -> None:
		super().__init__(message)
		self.message = message
		self.span = span
		self.notes = list(notes)


class GenericParseError(DockerfileError):
	"""Shape violation: missing key/value, missing body or destination, too few sources."""

	code = "generic-parse-error"


class UnexpectedToken(DockerfileError):
	"""A child node's kind was not one the current assembler state expected."""

	code = "unexpected-token"

	def __init__(self, kind: str, *, span: Optional[Span] = None) -> None:
		super().__init__(f"unexpected token '{kind}'", span=span)
		self.kind = kind


class HeredocTerminatorMismatch(DockerfileError):
	"""The terminator line does not equal the matched delimiter plus a newline."""

	code = "heredoc-terminator-mismatch"

	def __init__(self, instruction: str, delimiter: SpannedString, terminator: SpannedString) -> None:
		super().__init__(
			f"invalid heredoc in {instruction}: expected terminator {delimiter.content!r}, "
			f"found {terminator.content!r}",
			span=terminator.span,
			notes=[f"heredoc opened at {delimiter.span}"],
		)
		self.instruction = instruction
		self.delimiter = delimiter
		self.terminator = terminator


class UnmatchedHeredocTerminator(DockerfileError):
	"""A terminator line was seen while no heredoc opener was pending."""

	code = "unmatched-heredoc-terminator"

	def __init__(self, instruction: str, terminator: SpannedString) -> None:
		super().__init__(
			f"heredoc terminator {terminator.content!r} in {instruction} has no matching delimiter",
			span=terminator.span,
		)
		self.instruction = instruction
		self.terminator = terminator


class UnmatchedHeredocDelimiter(DockerfileError):
	"""The instruction ended while heredoc openers were still waiting for a terminator."""

	code = "unmatched-heredoc-delimiter"

	def __init__(self, instruction: str, delimiters: Sequence[SpannedString]) -> None:
		names = ", ".join(d.content for d in delimiters)
		super().__init__(
			f"unmatched heredoc delimiters in {instruction}: {names}",
			span=delimiters[0].span if delimiters else None,
		)
		self.instruction = instruction
		self.delimiters = tuple(delimiters)


class ConversionError(DockerfileError):
	"""Narrowing an instruction to a specific family failed because the shapes differ."""

	code = "conversion-error"

	def __init__(self, from_: str, to: str, *, span: Optional[Span] = None) -> None:
		super().__init__(f"cannot convert {from_} to {to}", span=span)
		self.from_ = from_
		self.to = to


__all__ = [
	"DockerfileError",
	"GenericParseError",
	"UnexpectedToken",
	"HeredocTerminatorMismatch",
	"UnmatchedHeredocTerminator",
	"UnmatchedHeredocDelimiter",
	"ConversionError",
]
