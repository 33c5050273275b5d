# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Shared helpers for tests that need single instructions.

These helpers avoid re-spelling "parse the file, pick the first instruction
subtree, assemble it" in every test module, and build hand-made lark trees
for assembler states the grammar never produces.
"""

from __future__ import annotations

from typing import Optional, Sequence, Tuple, Union

from lark import Token, Tree

from dockerfile_ast.parser import build_instruction
from dockerfile_ast.parser.ast import Instruction
from dockerfile_ast.parser.nodes import node_name
from dockerfile_ast.parser.parser import parse_tree


def instruction_tree(source: str, index: int = 0) -> Tree:
	"""Return the `index`-th instruction subtree of `source` (comments skipped)."""
	tree = parse_tree(source)
	instructions = [c for c in tree.children if node_name(c) != "comment"]
	return instructions[index]


def parse_single(source: str) -> Instruction:
	"""Assemble the first instruction of `source`, raising on failure."""
	return build_instruction(instruction_tree(source), source)


def tok(type_: str, value: str, start: int) -> Token:
	"""A positioned single-line token for hand-built trees."""
	end = start + len(value)
	return Token(type_, value, start, 1, start + 1, 1, end + 1, end)


def node(data: str, children: Sequence[Union[Tree, Token]], span: Optional[Tuple[int, int]] = None) -> Tree:
	"""
	A hand-built tree whose span covers its positioned children (or `span`).

	lark only fills `meta` while parsing, so it is set here the way
	`propagate_positions` would.
	"""
	tree = Tree(data, list(children))
	spans = [
		(c.meta.start_pos, c.meta.end_pos) if isinstance(c, Tree) else (c.start_pos, c.end_pos)
		for c in children
		if not (isinstance(c, Tree) and c.meta.empty)
	]
	if span is not None:
		spans = [span]
	if spans:
		tree.meta.empty = False
		tree.meta.start_pos = spans[0][0]
		tree.meta.end_pos = spans[-1][1]
	return tree


__all__ = ["instruction_tree", "node", "parse_single", "tok"]
