"""Render build diagnostics as source snippets or plain one-line messages.

A diagnostic whose file can be read and whose line exists is shown as a
rustc-style snippet with a caret under the reported column. Anything else
falls back to ``Severity: message at file:line:col``.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Iterable, TextIO

from kilnbuild.diagnostic import BuildDiagnostic, Severity

_KIND_NAMES = {
    Severity.ERROR: "Error",
    Severity.WARNING: "Warning",
    Severity.NOTE: "Note",
}

_LABELS = {
    Severity.ERROR: "error",
    Severity.WARNING: "warning",
    Severity.NOTE: "note",
}

_COLORS = {
    Severity.ERROR: "\x1b[31m",
    Severity.WARNING: "\x1b[33m",
    Severity.NOTE: "\x1b[36m",
}
_BOLD = "\x1b[1m"
_RESET = "\x1b[0m"


def _split_lines(text: str) -> list[str]:
    """Split on newlines, dropping a trailing ``\\r`` and a final empty line."""
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def format_plain(diag: BuildDiagnostic) -> str:
    """Return the one-line ``Severity: message at location`` form."""
    if diag.file is not None and diag.line is not None and diag.column is not None:
        loc = f" at {diag.file}:{diag.line}:{diag.column}"
    elif diag.file is not None and diag.line is not None:
        loc = f" at {diag.file}:{diag.line}"
    elif diag.file is not None:
        loc = f" at {diag.file}"
    else:
        loc = ""
    return f"{_KIND_NAMES[diag.severity]}: {diag.message}{loc}"


def _render_snippet(diag: BuildDiagnostic, color: bool) -> str | None:
    if diag.file is None or diag.line is None:
        return None
    try:
        source = Path(diag.file).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return None

    lines = _split_lines(source)
    index = max(diag.line, 1) - 1
    if index >= len(lines):
        return None
    text = lines[index]
    column = diag.column if diag.column is not None else 1
    offset = min(max(column, 1) - 1, len(text))
    lead = "".join(ch if ch == "\t" else " " for ch in text[:offset])

    number = str(diag.line)
    pad = " " * len(number)
    label = _LABELS[diag.severity]
    caret = "^"
    if color:
        tint = _COLORS[diag.severity]
        label = f"{_BOLD}{tint}{label}{_RESET}"
        caret = f"{tint}{caret}{_RESET}"

    out = [
        f"{label}: {diag.message}",
        f"{pad}--> {diag.file}:{diag.line}:{column}",
        f"{pad} |",
        f"{number} | {text}",
        f"{pad} | {lead}{caret}",
    ]
    if diag.code is not None:
        out.append(f"{pad} = code: {diag.code}")
    return "\n".join(out) + "\n"


def _render(diag: BuildDiagnostic, color: bool) -> str:
    snippet = _render_snippet(diag, color)
    if snippet is not None:
        return snippet
    return format_plain(diag) + "\n"


def format_diagnostics(diags: Iterable[BuildDiagnostic]) -> str:
    """Render ``diags`` to one string without any ANSI colour codes."""
    return "".join(_render(diag, color=False) for diag in diags)


def _wants_color(stream: TextIO) -> bool:
    if os.environ.get("NO_COLOR"):
        return False
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


def print_diagnostics(
    diags: Iterable[BuildDiagnostic], stream: TextIO | None = None
) -> None:
    """Write ``diags`` to ``stream`` (standard error by default).

    Colour is used only when the stream is a terminal and ``NO_COLOR`` is
    unset.
    """
    out = sys.stderr if stream is None else stream
    color = _wants_color(out)
    for diag in diags:
        out.write(_render(diag, color))
    out.flush()