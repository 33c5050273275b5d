from __future__ import annotations

from pathlib import Path

from lark import Lark, Tree

from .lexer import DockerfileLexer

_GRAMMAR_PATH = Path(__file__).with_name("grammar.lark")
_GRAMMAR_SRC = _GRAMMAR_PATH.read_text()

_PARSER = Lark(
	_GRAMMAR_SRC,
	parser="lalr",
	lexer=DockerfileLexer,
	start="dockerfile",
	propagate_positions=True,
	maybe_placeholders=False,
)


def parse_tree(source: str) -> Tree:
	"""Parse Dockerfile text into the raw `dockerfile` lark tree."""
	return _PARSER.parse(source)


__all__ = ["parse_tree"]
