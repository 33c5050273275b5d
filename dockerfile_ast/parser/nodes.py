# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Small helpers over lark Tree/Token nodes used by every instruction assembler.
"""

from __future__ import annotations

from typing import Union

from lark import Token, Tree

from dockerfile_ast.core.errors import GenericParseError, UnexpectedToken
from dockerfile_ast.core.span import Span, SpannedString

Node = Union[Tree, Token]


def node_name(node: Node) -> str:
	if isinstance(node, Tree):
		data = node.data
		if isinstance(data, Token):
			return data.value
		return data
	if isinstance(node, Token):
		return node.type
	return str(node)


def node_span(node: Node) -> Span:
	try:
		return Span.from_node(node)
	except ValueError as err:
		raise GenericParseError(str(err)) from err


def node_token(node: Node) -> Token:
	"""
	Extract the single token of a one-token wrapper rule (e.g. `copy_pathspec`).

	Accepts a bare Token too so hand-built trees can skip the wrapper.
	"""
	if isinstance(node, Token):
		return node
	tok = next((c for c in node.children if isinstance(c, Token)), None)
	if tok is None:
		raise GenericParseError(f"'{node_name(node)}' is missing its token", span=node_span(node))
	return tok


def spanned(node: Node) -> SpannedString:
	"""Raw (undecoded) text of a one-token node together with its span."""
	return SpannedString.from_token(node_token(node))


def unexpected_token(node: Node) -> UnexpectedToken:
	if isinstance(node, Tree) and node.meta.empty:
		return UnexpectedToken(node_name(node))
	return UnexpectedToken(node_name(node), span=Span.from_node(node))


__all__ = ["Node", "node_name", "node_span", "node_token", "spanned", "unexpected_token"]
