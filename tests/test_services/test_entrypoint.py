"""Tests for the fn main detection heuristic."""

from __future__ import annotations

import pytest

from cargo_bin.services.entrypoint import RegexEntryPointDetector, strip_comments

detector = RegexEntryPointDetector()


@pytest.mark.parametrize(
    "source",
    [
        "fn main() {}\n",
        "use std::io;\n\nfn main() -> io::Result<()> {\n    Ok(())\n}\n",
        "#[tokio::main]\nasync fn main() {\n}\n",
        "pub fn main() {}\n",
        "pub(crate) fn main() {}\n",
        "fn main ( ) {}\n",
        "/* header */ \nfn main() {}\n",
    ],
)
def test_detects_entry_point(source: str) -> None:
    assert detector.defines_entry_point(source)


@pytest.mark.parametrize(
    "source",
    [
        "",
        "pub fn helper() {}\n",
        "fn main_loop() {}\n",
        "fn mainly() {}\n",
        "// fn main() {}\n",
        "/*\nfn main() {}\n*/\n",
        "mod inner {\n    fn main() {}\n}\n",
        "let main = 1;\n",
    ],
)
def test_rejects_non_entry_point(source: str) -> None:
    assert not detector.defines_entry_point(source)


def test_custom_entry_point_name() -> None:
    custom = RegexEntryPointDetector(name="start")
    assert custom.defines_entry_point("fn start() {}\n")
    assert not custom.defines_entry_point("fn main() {}\n")


class TestStripComments:
    def test_keeps_line_count_for_block_comments(self) -> None:
        source = "/* a\nb\nc */fn main() {}\n"
        stripped = strip_comments(source)
        assert stripped.count("\n") == source.count("\n")
        assert stripped.endswith("fn main() {}\n")

    def test_removes_line_comments(self) -> None:
        assert strip_comments("let x = 1; // note\n") == "let x = 1; \n"

    def test_nested_block_comment_closes_at_first_end_marker(self) -> None:
        # Nesting is not tracked, so the tail of the outer comment reads as code.
        source = "/* outer\n/* inner */\nfn main() {}\n*/\n"
        assert RegexEntryPointDetector().defines_entry_point(source)
