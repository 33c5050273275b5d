# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
dockerfile_ast: span-preserving Dockerfile parser.

Packages:
  core: Span/SpannedString, the error taxonomy, Diagnostics
  parser: grammar + lexer, instruction assemblers, parse entry points
"""

from dockerfile_ast.core.diagnostics import Diagnostic
from dockerfile_ast.core.errors import (
	ConversionError,
	DockerfileError,
	GenericParseError,
	HeredocTerminatorMismatch,
	UnexpectedToken,
	UnmatchedHeredocDelimiter,
	UnmatchedHeredocTerminator,
)
from dockerfile_ast.core.span import Span, SpannedString
from dockerfile_ast.parser import (
	assemble_copy,
	assemble_instruction,
	assemble_misc,
	assemble_run,
	parse_dockerfile,
)
from dockerfile_ast.parser.ast import Dockerfile, Instruction
from dockerfile_ast.parser.breakable import BreakableString, Fragment, FragmentKind
from dockerfile_ast.parser.copy import CopyFlag, CopyInstruction, FileContents, FileName
from dockerfile_ast.parser.heredoc import Heredoc, HeredocMatcher
from dockerfile_ast.parser.misc import MiscInstruction
from dockerfile_ast.parser.run import Exec, RunInstruction, RunOption, Shell, ShellWithHeredoc

__all__ = [
	"BreakableString",
	"ConversionError",
	"CopyFlag",
	"CopyInstruction",
	"Diagnostic",
	"Dockerfile",
	"DockerfileError",
	"Exec",
	"FileContents",
	"FileName",
	"Fragment",
	"FragmentKind",
	"GenericParseError",
	"Heredoc",
	"HeredocMatcher",
	"HeredocTerminatorMismatch",
	"Instruction",
	"MiscInstruction",
	"RunInstruction",
	"RunOption",
	"Shell",
	"ShellWithHeredoc",
	"Span",
	"SpannedString",
	"UnexpectedToken",
	"UnmatchedHeredocDelimiter",
	"UnmatchedHeredocTerminator",
	"assemble_copy",
	"assemble_instruction",
	"assemble_misc",
	"assemble_run",
	"parse_dockerfile",
]
