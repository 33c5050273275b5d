"""
Diagnostic records returned at the parser API boundary.

Assemblers raise `DockerfileError` subclasses; the adapter in
`dockerfile_ast.parser` converts them into Diagnostics so callers get data
back instead of an exception.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

from .span import Span

if TYPE_CHECKING:
	from .errors import DockerfileError


@dataclass
class Diagnostic:
	"""Represents a parse diagnostic (error/warning)."""

	message: str
	code: str | None = None
	severity: str = "error"
	span: Optional[Span] = None  # None denotes an unknown location.
	notes: list[str] = field(default_factory=list)

	@classmethod
	def from_error(cls, err: "DockerfileError") -> "Diagnostic":
		return cls(
			message=str(err),
			code=err.code,
			severity="error",
			span=err.span,
			notes=list(err.notes),
		)

	def format(self, source: str | None = None, *, path: str | None = None) -> str:
		"""
		Render as `path:line:column: code: message`.

		Line/column are only available when the original source is supplied.
		"""
		where = path or "<dockerfile>"
		if self.span is not None and source is not None:
			line = source.count("\n", 0, self.span.start) + 1
			column = self.span.start - (source.rfind("\n", 0, self.span.start) + 1) + 1
			where = f"{where}:{line}:{column}"
		elif self.span is not None:
			where = f"{where}:{self.span}"
		return f"{where}: {self.code or self.severity}: {self.message}"


__all__ = ["Diagnostic"]
