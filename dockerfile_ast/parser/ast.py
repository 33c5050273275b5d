# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Instruction base class and the whole-file Dockerfile record.

Concrete instruction records live next to their assemblers (copy.py, run.py,
misc.py); each one subclasses `Instruction` and sets `kind`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar, Iterator, Optional, Tuple

from dockerfile_ast.core.errors import ConversionError
from dockerfile_ast.core.span import SpannedString

if TYPE_CHECKING:
	from .copy import CopyInstruction
	from .misc import MiscInstruction
	from .run import RunInstruction


class Instruction:
	"""Common base of CopyInstruction, RunInstruction and MiscInstruction."""

	kind: ClassVar[str] = "instruction"

	@classmethod
	def try_from(cls, instruction: "Instruction"):
		"""Narrow `instruction` to `cls`, raising ConversionError when the shapes differ."""
		if isinstance(instruction, cls):
			return instruction
		raise ConversionError(
			type(instruction).__name__,
			cls.__name__,
			span=getattr(instruction, "span", None),
		)

	def as_copy(self) -> Optional["CopyInstruction"]:
		return self if self.kind == "copy" else None  # type: ignore[return-value]

	def as_run(self) -> Optional["RunInstruction"]:
		return self if self.kind == "run" else None  # type: ignore[return-value]

	def as_misc(self) -> Optional["MiscInstruction"]:
		return self if self.kind == "misc" else None  # type: ignore[return-value]


@dataclass(frozen=True)
class Dockerfile:
	"""A parsed file: the source text, its instructions and its top-level comments."""

	content: str
	instructions: Tuple[Instruction, ...]
	comments: Tuple[SpannedString, ...] = ()

	@classmethod
	def parse(cls, source: str) -> "Dockerfile":
		"""Parse `source`, raising the first DockerfileError (or lark error) encountered."""
		from . import build_dockerfile

		return build_dockerfile(source)

	def iter_kind(self, kind: str) -> Iterator[Instruction]:
		return (i for i in self.instructions if i.kind == kind)


__all__ = ["Dockerfile", "Instruction"]
