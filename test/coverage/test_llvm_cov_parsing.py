from __future__ import annotations

from pathlib import Path

from XCJobs.coverage import (
    NEVER_EXECUTED,
    NOT_INSTRUMENTED,
    CoverageFile,
    CoverageLineRecord,
    normalize_execution_count,
    parse_llvm_cov_show,
    render_gcov,
    write_gcov_file,
)

SHOW_TEXT = """\
    9|    1|orphan record before any header
"/a/b/Foo.swift":
    3|   10|let x = 1
     |   11|// comment
    0|   12|never()
------------------
| Unexecuted instantiation: foo
------------------
/a/b/Bar.swift:
   42|    1|import Foundation
"""


def test_normalize_execution_count():
    assert normalize_execution_count("") == NOT_INSTRUMENTED
    assert normalize_execution_count("     ") == NOT_INSTRUMENTED
    assert normalize_execution_count("0") == NEVER_EXECUTED
    assert normalize_execution_count("42") == "   42"
    assert NOT_INSTRUMENTED == "    -"
    assert NEVER_EXECUTED == "#####"


def test_compact_counts_are_kept():
    files = parse_llvm_cov_show("/src/a.swift:\n 1.23k|    1|for x in xs {\n 12.3M|    2|    step()\n    2|    3|}\n")

    assert [r.line_number for r in files[0].records] == [1, 2, 3]
    assert [r.execution_count for r in files[0].records] == ["1.23k", "12.3M", "    2"]
    assert files[0].executed_lines == 3
    assert render_gcov(files[0])[1] == "1.23k:    1:for x in xs {"
    assert normalize_execution_count("4k") == "   4k"


def test_single_record_round_trip():
    files = parse_llvm_cov_show('"/a/b/Foo.swift":\n    3|   10|let x = 1\n')

    assert len(files) == 1
    assert files[0].source_path == "/a/b/Foo.swift"
    assert files[0].records == [CoverageLineRecord(execution_count="    3", line_number=10, text="let x = 1")]

    rendered = render_gcov(files[0])
    assert rendered[0] == "-----:    0:Source:/a/b/Foo.swift"
    assert rendered[1] == "    3:   10:let x = 1"


def test_sections_and_noise():
    files = parse_llvm_cov_show(SHOW_TEXT)

    assert [f.source_path for f in files] == ["/a/b/Foo.swift", "/a/b/Bar.swift"]
    foo, bar = files
    assert [r.line_number for r in foo.records] == [10, 11, 12]
    assert [r.execution_count for r in foo.records] == ["    3", NOT_INSTRUMENTED, NEVER_EXECUTED]
    assert foo.executable_lines == 2
    assert foo.executed_lines == 1
    assert bar.records[0].execution_count == "   42"


def test_record_text_keeps_pipes_and_spacing():
    files = parse_llvm_cov_show("/src/a.swift:\n    1|    2|  let s = a || b\n")
    assert files[0].records[0].text == "  let s = a || b"


def test_write_gcov_file_layout(tmp_path: Path):
    coverage_file = CoverageFile(
        source_path="/a/b/Foo.swift",
        records=[
            CoverageLineRecord(execution_count="    3", line_number=10, text="let x = 1"),
            CoverageLineRecord(execution_count=NOT_INSTRUMENTED, line_number=11, text=""),
        ],
    )

    path = write_gcov_file(coverage_file, tmp_path, Path("/obj/App.app/App"), token_factory=lambda: "tok123")

    assert path == tmp_path / "tok123-App.gcov"
    assert path.read_text(encoding="utf-8").splitlines() == [
        "-----:    0:Source:/a/b/Foo.swift",
        "    3:   10:let x = 1",
        "    -:   11:",
    ]


def test_default_tokens_do_not_collide(tmp_path: Path):
    coverage_file = CoverageFile(source_path="/a.swift")
    first = write_gcov_file(coverage_file, tmp_path, Path("App"))
    second = write_gcov_file(coverage_file, tmp_path, Path("App"))
    assert first != second
    assert first.name.endswith("-App.gcov")
