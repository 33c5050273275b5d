# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Context-sensitive tokenizer for Dockerfiles, plugged into lark as a custom lexer.

Dockerfile lexing depends on where we are: keywords only exist at line
starts, `\\` + newline joins physical lines, comment lines may sit between
continued lines, and a heredoc opener switches to raw line scanning until a
terminator line shows up. None of that fits a context-free terminal set, so
the grammar `%declare`s every terminal and this scanner produces them.

A heredoc body ends at the first line exactly equal to its delimiter. When
there is none, a line that loosely equals a pending delimiter (trimmed,
case-insensitive) is taken instead, and the instruction assembler reports
the mismatch.
"""

from __future__ import annotations

import re
from bisect import bisect_right
from typing import Iterator, List, Optional, Tuple

from lark import Token
from lark.exceptions import UnexpectedCharacters
from lark.lexer import Lexer

from .heredoc import HEREDOC_OPEN_RE

_KEYWORD_RE = re.compile(r"[A-Za-z][A-Za-z0-9_]*")
_CONTINUATION_RE = re.compile(r"\\[ \t]*\r?\n")
_FLAG_RE = re.compile(r"--([A-Za-z][A-Za-z0-9_-]*)")
# JSON string literal; only escapes JSON accepts, so decoding cannot fail.
_EXEC_STRING_RE = re.compile(r'"(?:[^"\\\r\n]|\\["\\/bfnrt]|\\u[0-9a-fA-F]{4})*"')
# `<<<` here-strings are not heredocs, whichever `<` we start on.
_OPENER_RE = re.compile(r"(?<!<)" + HEREDOC_OPEN_RE.pattern)


def _delimiter(m: "re.Match[str]") -> str:
	return m.group(1) or m.group(2) or m.group(3)


KEYWORD_TOKENS = {
	"copy": "_COPY",
	"run": "_RUN",
}


class _Scanner:
	"""Single-use token producer over one source string."""

	def __init__(self, text: str) -> None:
		self.text = text
		self.pos = 0
		self._line_starts = [0] + [m.end() for m in re.finditer(r"\n", text)]

	# --- positions / token construction ---

	def _position(self, offset: int) -> Tuple[int, int]:
		line = bisect_right(self._line_starts, offset)
		return line, offset - self._line_starts[line - 1] + 1

	def _token(self, type_: str, start: int, end: int) -> Token:
		line, column = self._position(start)
		end_line, end_column = self._position(end)
		return Token(type_, self.text[start:end], start, line, column, end_line, end_column, end)

	def _unexpected(self, pos: int) -> UnexpectedCharacters:
		line, column = self._position(pos)
		return UnexpectedCharacters(self.text, pos, line, column)

	# --- character-level helpers ---

	def _skip_inline_ws(self, pos: int) -> int:
		text = self.text
		while pos < len(text) and text[pos] in " \t":
			pos += 1
		return pos

	def _newline_at(self, pos: int) -> int:
		"""Width of the line break at `pos` (0 when there is none)."""
		if self.text.startswith("\r\n", pos):
			return 2
		if self.text.startswith("\n", pos):
			return 1
		return 0

	def _at_eol(self, pos: int) -> bool:
		return pos >= len(self.text) or self._newline_at(pos) > 0

	def _line_end(self, pos: int) -> int:
		"""Offset of the line break ending the line containing `pos` (`\\r\\n` excluded)."""
		end = self.text.find("\n", pos)
		if end < 0:
			return len(self.text)
		if end > pos and self.text[end - 1] == "\r":
			return end - 1
		return end

	def _at_word_break(self, pos: int) -> bool:
		text = self.text
		if pos >= len(text) or text[pos] in " \t\r\n":
			return True
		return text[pos] == "\\" and _CONTINUATION_RE.match(text, pos) is not None

	def _word_end(self, pos: int) -> int:
		while not self._at_word_break(pos):
			pos += 1
		return pos

	# --- continuation handling ---

	def _skip_continued_lines(self, pos: int, comments: List[Token]) -> int:
		"""
		Consume the lines following a continuation that do not carry content.

		Blank lines are dropped and comment lines are collected as COMMENT
		tokens (leading whitespace and line break excluded). Returns the start
		of the first content line.
		"""
		text = self.text
		while pos < len(text):
			first = self._skip_inline_ws(pos)
			nl = self._newline_at(first)
			if nl:
				pos = first + nl
			elif first < len(text) and text[first] == "#":
				end = self._line_end(first)
				comments.append(self._token("COMMENT", first, end))
				pos = end + self._newline_at(end)
			else:
				return pos
		return pos

	def _separator(self, pos: int) -> Tuple[List[Token], int]:
		"""Skip whitespace and continuations between arguments, collecting comment lines."""
		comments: List[Token] = []
		while True:
			pos = self._skip_inline_ws(pos)
			m = _CONTINUATION_RE.match(self.text, pos)
			if m is None:
				return comments, pos
			pos = self._skip_continued_lines(m.end(), comments)

	def _flag(self, pos: int) -> Optional[Tuple[List[Token], int]]:
		"""`--name` or `--name=value` starting at `pos`, or None when the word is not a flag."""
		m = _FLAG_RE.match(self.text, pos)
		if m is None:
			return None
		end = self._word_end(pos)
		name_end = m.end()
		if name_end != end and self.text[name_end] != "=":
			return None
		tokens = [
			self._token("_FLAG_PREFIX", pos, pos + 2),
			self._token("FLAG_NAME", pos + 2, name_end),
		]
		if name_end < end:
			tokens.append(self._token("_EQUALS", name_end, name_end + 1))
			tokens.append(self._token("FLAG_VALUE", name_end + 1, end))
		return tokens, end

	# --- top level ---

	def tokens(self) -> Iterator[Token]:
		text = self.text
		while True:
			self.pos = self._skip_inline_ws(self.pos)
			if self.pos >= len(text):
				return
			nl = self._newline_at(self.pos)
			if nl:
				yield self._token("_NL", self.pos, self.pos + nl)
				self.pos += nl
				continue
			if text[self.pos] == "#":
				end = self._line_end(self.pos)
				yield self._token("COMMENT", self.pos, end)
				self.pos = end
			else:
				yield from self._instruction()
			yield from self._end_statement()

	def _end_statement(self) -> Iterator[Token]:
		if not self._at_eol(self.pos):
			raise self._unexpected(self.pos)
		nl = self._newline_at(self.pos)
		yield self._token("_NL", self.pos, self.pos + nl)
		self.pos += nl

	def _instruction(self) -> Iterator[Token]:
		text = self.text
		m = _KEYWORD_RE.match(text, self.pos)
		if m is None:
			raise self._unexpected(self.pos)
		end = m.end()
		if end < len(text) and text[end] not in " \t\r\n\\":
			raise self._unexpected(end)
		type_ = KEYWORD_TOKENS.get(m.group(0).lower(), "MISC_KEYWORD")
		yield self._token(type_, self.pos, end)
		self.pos = end
		if type_ == "_COPY":
			yield from self._copy()
		elif type_ == "_RUN":
			yield from self._run()
		else:
			yield from self._misc()

	# --- COPY ---

	def _copy(self) -> Iterator[Token]:
		text = self.text
		delimiters: List[str] = []
		seen_path = False
		while True:
			comments, pos = self._separator(self.pos)
			yield from comments
			self.pos = pos
			if self._at_eol(pos):
				break
			if not seen_path and not delimiters:
				flag = self._flag(pos)
				if flag is not None:
					tokens, self.pos = flag
					yield from tokens
					continue
			m = _OPENER_RE.match(text, pos)
			if m is not None and self._at_word_break(m.end()):
				yield self._token("HEREDOC_OPEN", pos, m.end())
				delimiters.append(_delimiter(m))
				self.pos = m.end()
				continue
			end = self._word_end(pos)
			yield self._token("PATHSPEC", pos, end)
			seen_path = True
			self.pos = end
		if delimiters:
			yield from self._heredoc_section(delimiters)

	# --- heredoc bodies ---

	def _heredoc_section(self, delimiters: List[str]) -> Iterator[Token]:
		"""
		Scan the lines after an opener line.

		`self.pos` sits on the opener line's break. Emits one HEREDOC_BODY per
		pending delimiter, a HEREDOC_TERMINATOR for every terminator line found
		(its line break excluded) and a closing zero-width _HEREDOC_END.
		"""
		text = self.text
		pending = list(delimiters)
		nl = self._newline_at(self.pos)
		yield self._token("_NL", self.pos, self.pos + nl)
		self.pos += nl
		body_start = self.pos
		while pending:
			found = self._terminator_line(body_start, pending)
			if found is None:
				yield self._token("HEREDOC_BODY", body_start, len(text))
				self.pos = len(text)
				break
			start, end, match = found
			yield self._token("HEREDOC_BODY", body_start, start)
			yield self._token("HEREDOC_TERMINATOR", start, end)
			pending.remove(match)
			self.pos = end
			if pending:
				body_start = end + self._newline_at(end)
		yield self._token("_HEREDOC_END", self.pos, self.pos)

	def _lines(self, pos: int) -> Iterator[Tuple[int, int]]:
		text = self.text
		while pos < len(text):
			end = self._line_end(pos)
			yield pos, end
			nl = self._newline_at(end)
			if not nl:
				return
			pos = end + nl

	def _terminator_line(self, pos: int, pending: List[str]) -> Optional[Tuple[int, int, str]]:
		"""
		Find the line ending the current body.

		A line exactly equal to the oldest pending delimiter wins. Only when no
		such line follows is a loose candidate (trimmed, case-insensitive, any
		pending delimiter) accepted, so the assembler can report it precisely.
		"""
		oldest = pending[0]
		for start, end in self._lines(pos):
			if self.text[start:end] == oldest:
				return start, end, oldest
		for start, end in self._lines(pos):
			candidate = self.text[start:end].strip().lower()
			match = next((d for d in pending if d.lower() == candidate), None)
			if match is not None:
				return start, end, match
		return None

	# --- RUN ---

	def _run(self) -> Iterator[Token]:
		text = self.text
		pos = self.pos
		while True:
			comments, after = self._separator(pos)
			flag = self._flag(after) if text.startswith("--", after) else None
			if flag is None:
				break
			tokens, pos = flag
			yield from comments
			yield from tokens
		self.pos = pos
		yield from self._run_body()

	def _run_body(self) -> Iterator[Token]:
		pos = self._skip_inline_ws(self.pos)
		self.pos = pos
		if self._at_eol(pos):
			return
		comments, after = self._separator(pos)
		if self.text.startswith("[", after):
			tokens = self._exec(after)
			if tokens is not None:
				yield from comments
				yield from tokens
				return
		yield from self._breakable(pos, heredocs=True)

	def _exec(self, pos: int) -> Optional[List[Token]]:
		"""JSON string array filling the rest of the instruction, or None to fall back to shell form."""
		text = self.text
		tokens = [self._token("_LSQB", pos, pos + 1)]
		comments, pos = self._separator(pos + 1)
		if comments:
			return None
		if not text.startswith("]", pos):
			while True:
				m = _EXEC_STRING_RE.match(text, pos)
				if m is None:
					return None
				tokens.append(self._token("EXEC_STRING", pos, m.end()))
				comments, pos = self._separator(m.end())
				if comments:
					return None
				if text.startswith(",", pos):
					tokens.append(self._token("_COMMA", pos, pos + 1))
					comments, pos = self._separator(pos + 1)
					if comments:
						return None
					continue
				if text.startswith("]", pos):
					break
				return None
		tokens.append(self._token("_RSQB", pos, pos + 1))
		end = self._skip_inline_ws(pos + 1)
		if not self._at_eol(end):
			return None
		self.pos = end
		return tokens

	# --- shell-like bodies ---

	def _breakable(self, pos: int, heredocs: bool) -> Iterator[Token]:
		text = self.text
		start = pos
		quote = None
		while pos < len(text):
			ch = text[pos]
			cont = _CONTINUATION_RE.match(text, pos) if ch == "\\" else None
			if cont is not None:
				if pos > start:
					yield self._token("BREAKABLE_STRING", start, pos)
				yield self._token("_LINE_CONT", pos, cont.end())
				comments: List[Token] = []
				pos = start = self._skip_continued_lines(cont.end(), comments)
				yield from comments
				continue
			if self._newline_at(pos):
				break
			if ch == "\\" and quote != "'":
				pos = min(pos + 2, len(text))
				continue
			if quote is not None:
				if ch == quote:
					quote = None
			elif ch in "\"'":
				quote = ch
			elif heredocs and ch == "<":
				m = _OPENER_RE.match(text, pos)
				if m is not None:
					if pos > start:
						yield self._token("BREAKABLE_STRING", start, pos)
					yield from self._shell_heredoc(pos, m)
					return
			pos += 1
		if pos > start:
			yield self._token("BREAKABLE_STRING", start, pos)
		self.pos = pos

	def _shell_heredoc(self, pos: int, m: "re.Match[str]") -> Iterator[Token]:
		"""Every opener on the rest of the line, each followed by its suffix text, then the bodies."""
		text = self.text
		line_end = self._line_end(m.end())
		delimiters: List[str] = []
		while m is not None:
			yield self._token("HEREDOC_OPEN", pos, m.end())
			delimiters.append(_delimiter(m))
			suffix_start = self._skip_inline_ws(m.end())
			pos, m = self._next_opener(m.end(), line_end)
			suffix_end = pos
			while suffix_end > suffix_start and text[suffix_end - 1] in " \t":
				suffix_end -= 1
			if suffix_end > suffix_start:
				yield self._token("HEREDOC_SUFFIX", suffix_start, suffix_end)
		self.pos = line_end
		yield from self._heredoc_section(delimiters)

	def _next_opener(self, pos: int, end: int) -> Tuple[int, Optional["re.Match[str]"]]:
		"""The next unquoted opener before `end`, or `(end, None)`."""
		text = self.text
		quote = None
		while pos < end:
			ch = text[pos]
			if ch == "\\" and quote != "'":
				pos += 2
				continue
			if quote is not None:
				if ch == quote:
					quote = None
			elif ch in "\"'":
				quote = ch
			elif ch == "<":
				m = _OPENER_RE.match(text, pos, end)
				if m is not None:
					return pos, m
			pos += 1
		return end, None

	# --- everything else ---

	def _misc(self) -> Iterator[Token]:
		pos = self._skip_inline_ws(self.pos)
		self.pos = pos
		if not self._at_eol(pos):
			yield from self._breakable(pos, heredocs=False)


class DockerfileLexer(Lexer):
	"""lark custom lexer: `Lark(..., lexer=DockerfileLexer)`."""

	def __init__(self, lexer_conf=None) -> None:
		self.lexer_conf = lexer_conf

	def lex(self, data: str) -> Iterator[Token]:
		return _Scanner(data).tokens()


def tokenize(source: str) -> List[Token]:
	"""Materialize the token stream for `source` (handy for debugging the grammar)."""
	return list(_Scanner(source).tokens())


__all__ = ["DockerfileLexer", "KEYWORD_TOKENS", "tokenize"]
