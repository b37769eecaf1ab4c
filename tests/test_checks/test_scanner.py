"""Tests for the line-oriented lexical scanner."""

from __future__ import annotations

from guardian.checks.scanner import LexicalScanner, ScanState, scan_source, split_lines


class TestSplitLines:
    def test_empty(self) -> None:
        assert split_lines("") == []

    def test_trailing_newline_not_counted(self) -> None:
        assert split_lines("a\nb\n") == ["a", "b"]

    def test_crlf_stripped(self) -> None:
        assert split_lines("a\r\nb\r\n") == ["a", "b"]

    def test_blank_lines_kept(self) -> None:
        assert split_lines("a\n\n\nb") == ["a", "", "", "b"]


class TestBraceDepth:
    def test_depth_tracks_braces(self) -> None:
        lines = scan_source("fn a() {\n    if x {\n    }\n}\n")
        assert [(l.depth_before, l.depth_after) for l in lines] == [(0, 1), (1, 2), (2, 1), (1, 0)]

    def test_lowest_close_depth(self) -> None:
        lines = scan_source("fn a() {\n} fn b() {\n")
        assert lines[0].lowest_close_depth is None
        assert lines[1].lowest_close_depth == 0
        assert lines[1].depth_after == 1


class TestRawStrings:
    def test_raw_string_lines_are_skipped(self) -> None:
        content = 'let s = r#"\nfn fake() {\n"#;\nfn real() {}\n'
        lines = scan_source(content)
        assert [l.in_raw_string for l in lines] == [True, True, True, False]
        assert lines[1].depth_after == 0
        assert not lines[1].is_code

    def test_single_line_raw_string(self) -> None:
        lines = scan_source('let s = r#"{ fn x() }"#;\nfn y() {}\n')
        assert lines[0].in_raw_string
        assert not lines[1].in_raw_string

    def test_unterminated_raw_string_runs_to_eof(self) -> None:
        scanner = LexicalScanner()
        for line in ['let s = r#"', "fn a() {", "}"]:
            scanner.feed(line)
        assert scanner.state is ScanState.raw_string
        assert scanner.depth == 0


class TestTestScope:
    def test_scope_entered_and_left(self) -> None:
        content = (
            "fn a() {}\n"
            "#[cfg(test)]\n"
            "mod tests {\n"
            "    fn helper() {}\n"
            "}\n"
            "fn b() {}\n"
        )
        flags = [l.in_test_scope for l in scan_source(content)]
        assert flags == [False, True, True, True, False, False]

    def test_nested_braces_do_not_end_scope(self) -> None:
        content = "#[cfg(test)]\nmod tests {\n    fn t() {\n    }\n    fn u() {}\n}\n"
        lines = scan_source(content)
        assert lines[3].in_test_scope
        assert lines[4].in_test_scope
        assert not lines[5].in_test_scope

    def test_scope_depth_recorded_at_marker(self) -> None:
        scanner = LexicalScanner()
        scanner.feed("mod outer {")
        scanner.feed("#[cfg(test)]")
        assert scanner.scope_depth == 1
        scanner.feed("mod tests {")
        scanner.feed("}")
        assert scanner.state is ScanState.normal
        assert scanner.scope_depth is None

    def test_raw_string_inside_scope_resumes_scope(self) -> None:
        content = '#[cfg(test)]\nmod tests {\n    let s = r#"\n}\n"#;\n    fn t() {}\n}\n'
        lines = scan_source(content)
        assert lines[3].in_raw_string
        assert lines[3].in_test_scope
        assert lines[5].in_test_scope
        assert not lines[6].in_test_scope


class TestComments:
    def test_comment_prefixes(self) -> None:
        lines = scan_source("// fn a()\n/* fn b() */\n * fn c()\nfn d() {}\n")
        assert [l.is_comment for l in lines] == [True, True, True, False]
