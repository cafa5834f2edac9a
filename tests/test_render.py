import io
from pathlib import Path

import pytest

from kilnbuild.diagnostic import BuildDiagnostic, Severity
from kilnbuild.render import format_diagnostics, format_plain, print_diagnostics


@pytest.fixture
def source_file(tmp_path: Path) -> Path:
    path = tmp_path / "tb.sv"
    path.write_text("module tb;\n    logic clk = 0;\nendmodule\n", encoding="utf-8")
    return path


def test_plain_without_location():
    d = BuildDiagnostic(Severity.ERROR, "Some catastrophe")
    assert format_plain(d) == "Error: Some catastrophe"


def test_plain_with_full_location():
    d = BuildDiagnostic(Severity.WARNING, "bad", file=Path("foo.sv"), line=5, column=3)
    assert format_plain(d) == f"Warning: bad at {Path('foo.sv')}:5:3"


def test_plain_with_line_only_and_file_only():
    f = Path("foo.sv")
    with_line = BuildDiagnostic(Severity.NOTE, "m", file=f, line=7)
    file_only = BuildDiagnostic(Severity.NOTE, "m", file=f, column=4)
    assert format_plain(with_line).endswith(f" at {f}:7")
    assert format_plain(file_only).endswith(f" at {f}")
    assert format_plain(file_only).startswith("Note: m")


def test_snippet_shows_source_line_and_caret(source_file: Path):
    d = BuildDiagnostic(
        Severity.WARNING,
        "Procedural assignment",
        code="PROCASSINIT",
        file=source_file,
        line=2,
        column=17,
    )
    out = format_diagnostics([d])
    lines = out.splitlines()
    assert "    logic clk = 0;" in out
    assert "Procedural assignment" in out
    assert "PROCASSINIT" in out
    assert "\x1b" not in out
    source_row = next(l for l in lines if l.endswith("logic clk = 0;"))
    caret_row = next(l for l in lines if l.rstrip().endswith("^"))
    # The caret sits under column 17 of the source text.
    text_start = source_row.index("    logic")
    assert caret_row.index("^") - text_start == 16
    assert source_row[caret_row.index("^")] == "0"


def test_snippet_error_label(source_file: Path):
    d = BuildDiagnostic(Severity.ERROR, "syntax error", file=source_file, line=1, column=1)
    out = format_diagnostics([d])
    assert out.startswith("error: syntax error")
    assert f"{source_file}:1:1" in out
    assert out.endswith("\n")


def test_unreadable_file_falls_back_to_plain(tmp_path: Path):
    missing = tmp_path / "nope.sv"
    d = BuildDiagnostic(Severity.ERROR, "gone", file=missing, line=1, column=2)
    assert format_diagnostics([d]) == format_plain(d) + "\n"


def test_line_beyond_file_falls_back_to_plain(source_file: Path):
    d = BuildDiagnostic(Severity.ERROR, "far", file=source_file, line=99, column=1)
    assert format_diagnostics([d]) == format_plain(d) + "\n"


def test_multiple_diagnostics_concatenate(source_file: Path):
    a = BuildDiagnostic(Severity.ERROR, "first")
    b = BuildDiagnostic(Severity.WARNING, "second", file=source_file, line=3)
    combined = format_diagnostics([a, b])
    assert combined == format_diagnostics([a]) + format_diagnostics([b])
    assert combined.index("first") < combined.index("second")


def test_empty_input_renders_nothing():
    assert format_diagnostics([]) == ""


def test_print_to_non_tty_matches_format(source_file: Path):
    diags = [
        BuildDiagnostic(Severity.ERROR, "x", file=source_file, line=2, column=5),
        BuildDiagnostic(Severity.NOTE, "y"),
    ]
    stream = io.StringIO()
    print_diagnostics(diags, stream)
    assert stream.getvalue() == format_diagnostics(diags)