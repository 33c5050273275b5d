"""
dockerfile_ast.core: span primitives, the error taxonomy and diagnostics
shared by the tokenizer and the instruction assemblers.

Modules:
  - span: Span / SpannedString
  - errors: DockerfileError and its closed set of subclasses
  - diagnostics: Diagnostic records returned at the API boundary
"""

__all__ = [
	"span",
	"errors",
	"diagnostics",
]
