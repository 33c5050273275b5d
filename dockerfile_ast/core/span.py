# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Source span primitives shared by the tokenizer, the instruction assemblers
and diagnostics.

A Span is a half-open `[start, end)` range of offsets into the original
source string. Offsets index the decoded `str` (code points), so slicing the
source with a span always yields the raw text the node was built from.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Tuple, Union


@dataclass(frozen=True)
class Span:
	"""Half-open range [start, end) into the source text."""

	start: int
	end: int

	def __post_init__(self) -> None:
		if self.start < 0 or self.end < self.start:
			raise ValueError(f"invalid span range [{self.start}, {self.end})")

	@classmethod
	def coerce(cls, value: "SpanLike") -> "Span":
		"""Accept either a Span or a `(start, end)` pair."""
		if isinstance(value, cls):
			return value
		start, end = value
		return cls(start, end)

	@classmethod
	def from_node(cls, node: Any) -> "Span":
		"""
		Recover the span of a lark Tree or Token.

		Trees rely on `propagate_positions=True`; a tree whose meta is empty
		(no tokens underneath it) has no position and is rejected.
		"""
		meta = getattr(node, "meta", None)
		if meta is not None:
			if getattr(meta, "empty", True):
				raise ValueError(f"node '{getattr(node, 'data', node)}' carries no position")
			return cls(meta.start_pos, meta.end_pos)
		start = getattr(node, "start_pos", None)
		end = getattr(node, "end_pos", None)
		if start is None or end is None:
			raise ValueError(f"token {node!r} carries no position")
		return cls(start, end)

	@classmethod
	def empty_at(cls, pos: int) -> "Span":
		return cls(pos, pos)

	def __len__(self) -> int:
		return self.end - self.start

	def contains(self, other: "Span") -> bool:
		return self.start <= other.start and other.end <= self.end

	def slice(self, source: str) -> str:
		return source[self.start : self.end]

	def __str__(self) -> str:
		return f"{self.start}..{self.end}"


SpanLike = Union[Span, Tuple[int, int]]


@dataclass(frozen=True)
class SpannedString:
	"""
	A decoded string value paired with the raw source range it came from.

	`content` is the decoded value (quotes resolved where applicable), so
	`len(content)` may differ from `len(span)`.
	"""

	span: Span
	content: str

	@classmethod
	def from_token(cls, token: Any) -> "SpannedString":
		return cls(Span.from_node(token), str(token))

	def __str__(self) -> str:
		return self.content


__all__ = ["Span", "SpanLike", "SpannedString"]
