# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import pytest

from dockerfile_ast.core.errors import (
	DockerfileError,
	GenericParseError,
	HeredocTerminatorMismatch,
	UnexpectedToken,
	UnmatchedHeredocDelimiter,
)
from dockerfile_ast.core.span import Span, SpannedString
from dockerfile_ast.parser import assemble_copy, parse_dockerfile
from dockerfile_ast.parser.copy import CopyFlag, CopyInstruction, FileContents, FileName, build_copy
from dockerfile_ast.test_support import instruction_tree, node, parse_single, tok


def _s(start: int, end: int, content: str) -> SpannedString:
	return SpannedString(Span(start, end), content)


def test_copy_basic() -> None:
	assert parse_single("copy foo bar") == CopyInstruction(
		span=Span(0, 12),
		flags=(),
		sources=(FileName(_s(5, 8, "foo")),),
		destination=_s(9, 12, "bar"),
	)


def test_copy_multiple_sources_keep_order() -> None:
	copy = parse_single("copy foo bar baz qux")
	assert copy.sources == (
		FileName(_s(5, 8, "foo")),
		FileName(_s(9, 12, "bar")),
		FileName(_s(13, 16, "baz")),
	)
	assert copy.destination == _s(17, 20, "qux")
	assert copy.span == Span(0, 20)


def test_copy_multiline() -> None:
	copy = parse_single("copy foo \\\nbar")
	assert copy.span == Span(0, 14)
	assert copy.sources == (FileName(_s(5, 8, "foo")),)
	assert copy.destination == _s(11, 14, "bar")


def test_copy_line_breaks_must_be_escaped() -> None:
	with pytest.raises(GenericParseError, match="at least one source and a destination"):
		parse_single("copy foo\nbar")


def test_copy_flags() -> None:
	assert parse_single("copy --from=alpine:3.10 /usr/lib/libssl.so.1.1 /tmp/") == CopyInstruction(
		span=Span(0, 52),
		flags=(CopyFlag(Span(5, 23), _s(7, 11, "from"), _s(12, 23, "alpine:3.10")),),
		sources=(FileName(_s(24, 46, "/usr/lib/libssl.so.1.1")),),
		destination=_s(47, 52, "/tmp/"),
	)


def test_copy_comments_between_continued_lines() -> None:
	source = (
		"copy \\\n"
		"  --from=alpine:3.10 \\\n"
		"\n"
		"  # hello\n"
		"\n"
		"  /usr/lib/libssl.so.1.1 \\\n"
		"  # world\n"
		"  /tmp/\n"
	)
	assert parse_single(source) == CopyInstruction(
		span=Span(0, 86),
		flags=(CopyFlag(Span(9, 27), _s(11, 15, "from"), _s(16, 27, "alpine:3.10")),),
		sources=(FileName(_s(44, 66, "/usr/lib/libssl.so.1.1")),),
		destination=_s(81, 86, "/tmp/"),
	)


@pytest.mark.parametrize("source", ["copy foo", "copy", "copy --from=builder /only"])
def test_copy_minimum_arity(source: str) -> None:
	with pytest.raises(GenericParseError, match="copy requires at least one source and a destination"):
		parse_single(source)


def test_copy_flag_without_value() -> None:
	with pytest.raises(GenericParseError, match="copy flags require a value"):
		parse_single("copy --link a b")


def test_copy_flag_without_key_from_hand_built_tree() -> None:
	flag = node("copy_flag", [node("copy_flag_value", [tok("FLAG_VALUE", "x", 7)])])
	tree = node(
		"copy",
		[node("copy_standard", [flag, node("copy_pathspec", [tok("PATHSPEC", "a", 9)]), node("copy_pathspec", [tok("PATHSPEC", "b", 11)])])],
		span=(0, 12),
	)
	with pytest.raises(GenericParseError, match="copy flags require a key"):
		build_copy(tree)


def test_copy_unknown_child_is_unexpected() -> None:
	tree = node("copy", [node("copy_standard", [node("run_option", [tok("FLAG_NAME", "x", 7)])])], span=(0, 8))
	with pytest.raises(UnexpectedToken, match="run_option"):
		build_copy(tree)


def test_copy_heredoc_simple() -> None:
	source = "COPY <<EOF /tmp/test.txt\nhello\nEOF\n"
	assert parse_single(source) == CopyInstruction(
		span=Span(0, 34),
		flags=(),
		sources=(FileContents(_s(25, 31, "hello\n")),),
		destination=_s(11, 24, "/tmp/test.txt"),
	)


def test_copy_heredoc_multiline_body() -> None:
	source = (
		"COPY <<EOF /usr/share/nginx/html/index.html\n"
		"<!DOCTYPE html>\n"
		"<html>\n"
		"</html>\n"
		"EOF\n"
	)
	copy = parse_single(source)
	assert copy.destination == _s(11, 43, "/usr/share/nginx/html/index.html")
	(body,) = copy.file_contents()
	assert body.content == "<!DOCTYPE html>\n<html>\n</html>\n"
	assert body.span.slice(source) == body.content
	assert copy.span.end == len(source) - 1


def test_copy_heredoc_with_flags() -> None:
	source = (
		"COPY --from=builder <<EOF /tmp/config.json\n"
		"{\n"
		'  "version": "1.0",\n'
		'  "env": "production"\n'
		"}\n"
		"EOF\n"
	)
	assert parse_single(source) == CopyInstruction(
		span=Span(0, 92),
		flags=(CopyFlag(Span(5, 19), _s(7, 11, "from"), _s(12, 19, "builder")),),
		sources=(FileContents(_s(43, 89, '{\n  "version": "1.0",\n  "env": "production"\n}\n')),),
		destination=_s(26, 42, "/tmp/config.json"),
	)


def test_copy_heredoc_body_is_literal() -> None:
	source = (
		"COPY <<EOF /tmp/script.sh\n"
		"#!/bin/bash\n"
		"# This is a comment inside the heredoc\n"
		"FROM alpine:latest\n"
		'echo "$HOME" \\\n'
		"EOF\n"
	)
	(body,) = parse_single(source).file_contents()
	assert body.content == '#!/bin/bash\n# This is a comment inside the heredoc\nFROM alpine:latest\necho "$HOME" \\\n'


def test_copy_heredoc_empty_body() -> None:
	source = "COPY <<EOF /tmp/empty.txt\nEOF\n"
	assert parse_single(source) == CopyInstruction(
		span=Span(0, 29),
		flags=(),
		sources=(FileContents(_s(26, 26, "")),),
		destination=_s(11, 25, "/tmp/empty.txt"),
	)


def test_copy_heredoc_whitespace_after_opener() -> None:
	source = "COPY <<   DELIMITER   /tmp/test.txt\nsome content\nDELIMITER\n"
	assert parse_single(source) == CopyInstruction(
		span=Span(0, 58),
		flags=(),
		sources=(FileContents(_s(36, 49, "some content\n")),),
		destination=_s(22, 35, "/tmp/test.txt"),
	)


def test_copy_heredoc_quoted_delimiter() -> None:
	copy = parse_single("COPY <<'EOF' /x\n$HOME\nEOF\n")
	assert copy.file_contents()[0].content == "$HOME\n"


def test_copy_heredoc_wrong_terminator_fails() -> None:
	source = "COPY <<EOF /usr/share/nginx/html/index.html\n<html>\nWRONGTERMINATOR\n"
	with pytest.raises(UnmatchedHeredocDelimiter, match="EOF"):
		parse_single(source)


def test_copy_heredoc_terminator_is_case_sensitive() -> None:
	with pytest.raises(HeredocTerminatorMismatch):
		parse_single("COPY <<EOF /tmp/test.txt\ncontent here\neof\n")


def test_two_heredocs_resolve_in_opener_order() -> None:
	source = "COPY <<EOF <<EOF2 /dest/\nfirst\nEOF\nsecond\nEOF2\n"
	copy = parse_single(source)
	assert copy.sources == (
		FileContents(_s(25, 31, "first\n")),
		FileContents(_s(35, 42, "second\n")),
	)
	assert copy.destination == _s(18, 24, "/dest/")


def test_two_heredocs_with_reversed_terminators_fail() -> None:
	# the first body runs to the first exact `EOF` line, leaving EOF2 open
	source = "COPY <<EOF <<EOF2 /dest/\nsecond\nEOF2\nfirst\nEOF\n"
	with pytest.raises(UnmatchedHeredocDelimiter, match="EOF2"):
		parse_single(source)
	# with no exact `EOF` line the out-of-order terminator is reported
	source = "COPY <<EOF <<EOF2 /dest/\nsecond\nEOF2\nfirst\n"
	with pytest.raises(HeredocTerminatorMismatch, match="expected terminator 'EOF'"):
		parse_single(source)


def test_body_lines_resembling_the_terminator_stay_in_the_body() -> None:
	source = "COPY <<EOF /etc/x.sh\nif true; then\n  EOF\nfi\nEOF\n"
	dockerfile, diagnostics = parse_dockerfile(source)
	assert diagnostics == []
	(copy,) = dockerfile.instructions
	assert copy == CopyInstruction(
		span=Span(0, 47),
		flags=(),
		sources=(FileContents(_s(21, 44, "if true; then\n  EOF\nfi\n")),),
		destination=_s(11, 20, "/etc/x.sh"),
	)


def test_delimiters_beyond_word_characters() -> None:
	copy = parse_single("COPY <<EOF-1 /dst\nhello world\nEOF-1\n")
	assert copy.sources == (FileContents(_s(18, 30, "hello world\n")),)
	assert copy.destination == _s(13, 17, "/dst")
	copy = parse_single('COPY <<"END MARK" /dst\nhi\nEND MARK\n')
	assert copy.file_contents() == (_s(23, 26, "hi\n"),)
	assert copy.destination.content == "/dst"


def test_comment_lines_between_heredoc_arguments_are_ignored() -> None:
	source = "COPY <<EOF \\\n  # target\n  /x\nhi\nEOF\n"
	copy = parse_single(source)
	assert copy.file_contents()[0].content == "hi\n"
	assert copy.destination == _s(26, 28, "/x")


def test_heredoc_and_path_sources_stay_in_source_order() -> None:
	copy = parse_single("COPY <<EOF extra.txt /dest/\nhello\nEOF\n")
	assert [type(s) for s in copy.sources] == [FileContents, FileName]
	assert copy.file_names() == (_s(11, 20, "extra.txt"),)
	assert copy.destination.content == "/dest/"


def test_heredoc_without_destination_fails() -> None:
	with pytest.raises(GenericParseError, match="at least one source and a destination"):
		parse_single("COPY <<EOF\nhello\nEOF\n")


def test_heredoc_crlf_and_missing_final_newline() -> None:
	copy = parse_single("COPY <<EOF /x\r\nhi\r\nEOF\r\n")
	assert copy.file_contents()[0].content == "hi\r\n"
	copy = parse_single("COPY <<EOF /x\nhi\nEOF")
	assert copy.span == Span(0, 20)


def test_assemble_copy_returns_diagnostics_instead_of_raising() -> None:
	source = "copy foo"
	record, diagnostics = assemble_copy(instruction_tree(source), source)
	assert record is None
	assert [d.code for d in diagnostics] == ["generic-parse-error"]
	assert diagnostics[0].span == Span(0, 8)

	source = "copy foo bar"
	record, diagnostics = assemble_copy(instruction_tree(source), source)
	assert diagnostics == []
	assert record.destination.content == "bar"


def test_assemble_copy_rejects_other_instruction_trees() -> None:
	source = "run echo hi"
	record, diagnostics = assemble_copy(instruction_tree(source), source)
	assert record is None
	assert diagnostics[0].code == "unexpected-token"
	assert isinstance(diagnostics[0].message, str)
	assert "run" in diagnostics[0].message


def test_every_copy_failure_is_a_dockerfile_error() -> None:
	for source in ["copy foo", "COPY <<EOF /x\nhi\n", "COPY <<EOF /x\nhi\nEof\n"]:
		with pytest.raises(DockerfileError):
			parse_single(source)
