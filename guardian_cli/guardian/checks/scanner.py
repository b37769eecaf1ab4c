"""Line-oriented lexical scanner shared by the source checks.

The scanner does not tokenize. It walks a file line by line and keeps just
enough state to avoid misreading content:

* ``normal`` -- ordinary code.
* ``raw_string`` -- inside a ``r#" ... "#`` literal. Entered when a line
  contains ``r#"``; left when a line (possibly the same one) contains
  ``"#``. Lines that touch the span are skipped entirely: no pattern
  matching, no brace counting. An unterminated literal keeps the scanner
  here until end of file.
* ``test_scope`` -- after the scope marker (``#[cfg(test)]``). The brace
  depth at the marker is recorded; the scope ends on the ``}`` that brings
  depth back to that value or below.

Braces are counted character by character regardless of ordinary string or
comment content, so a lone ``{`` inside a ``"..."`` literal will skew depth.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator

RAW_STRING_OPEN = 'r#"'
RAW_STRING_CLOSE = '"#'
TEST_MODULE_MARKER = "#[cfg(test)]"
COMMENT_PREFIXES = ("//", "/*", "*")


class ScanState(str, Enum):
    normal = "normal"
    raw_string = "raw_string"
    test_scope = "test_scope"


@dataclass(frozen=True)
class ScannedLine:
    """Classification of one source line."""

    number: int
    text: str
    stripped: str
    in_raw_string: bool
    in_test_scope: bool
    is_comment: bool
    depth_before: int
    depth_after: int
    lowest_close_depth: int | None

    @property
    def is_code(self) -> bool:
        """True for lines that pattern checks should look at."""
        return not (self.in_raw_string or self.is_comment)


def split_lines(content: str) -> list[str]:
    """Split text on ``\\n`` with a trailing ``\\r`` dropped from each line.

    A final newline does not produce an empty trailing line.
    """
    if not content:
        return []
    lines = content.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


class LexicalScanner:
    """Finite-state scanner over the lines of a single file."""

    def __init__(self, scope_marker: str = TEST_MODULE_MARKER) -> None:
        self._scope_marker = scope_marker
        self._state = ScanState.normal
        self._resume_state = ScanState.normal
        self._depth = 0
        self._scope_depth = 0
        self._line_number = 0

    @property
    def state(self) -> ScanState:
        return self._state

    @property
    def depth(self) -> int:
        return self._depth

    @property
    def scope_depth(self) -> int | None:
        """Depth recorded when the test scope was entered, if inside one."""
        if self._state is ScanState.test_scope or (
            self._state is ScanState.raw_string
            and self._resume_state is ScanState.test_scope
        ):
            return self._scope_depth
        return None

    def feed(self, line: str) -> ScannedLine:
        """Advance the scanner by one line and classify it."""
        self._line_number += 1
        stripped = line.strip()
        depth_before = self._depth

        if RAW_STRING_OPEN in stripped and self._state is not ScanState.raw_string:
            self._resume_state = self._state
            self._state = ScanState.raw_string

        if self._state is ScanState.raw_string:
            if RAW_STRING_CLOSE in stripped:
                self._state = self._resume_state
            return ScannedLine(
                number=self._line_number,
                text=line,
                stripped=stripped,
                in_raw_string=True,
                in_test_scope=self._resume_state is ScanState.test_scope,
                is_comment=False,
                depth_before=depth_before,
                depth_after=depth_before,
                lowest_close_depth=None,
            )

        if self._scope_marker in stripped:
            self._state = ScanState.test_scope
            self._scope_depth = self._depth

        lowest_close_depth: int | None = None
        for ch in line:
            if ch == "{":
                self._depth += 1
            elif ch == "}":
                self._depth -= 1
                if lowest_close_depth is None or self._depth < lowest_close_depth:
                    lowest_close_depth = self._depth
                if self._state is ScanState.test_scope and self._depth <= self._scope_depth:
                    self._state = ScanState.normal

        return ScannedLine(
            number=self._line_number,
            text=line,
            stripped=stripped,
            in_raw_string=False,
            in_test_scope=self._state is ScanState.test_scope,
            is_comment=stripped.startswith(COMMENT_PREFIXES),
            depth_before=depth_before,
            depth_after=self._depth,
            lowest_close_depth=lowest_close_depth,
        )

    def scan(self, lines: Iterable[str]) -> Iterator[ScannedLine]:
        for line in lines:
            yield self.feed(line)


def scan_source(content: str, scope_marker: str = TEST_MODULE_MARKER) -> list[ScannedLine]:
    """Scan a whole file's text with a fresh scanner."""
    return list(LexicalScanner(scope_marker).scan(split_lines(content)))
