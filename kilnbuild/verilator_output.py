"""Parse Verilator's textual output into :class:`BuildDiagnostic` values.

A diagnostic line has the shape::

    %<Severity>(-<CODE>)?: (<file>:<line>:<col>: )?<message>

Indented continuation lines (notes, source quotes, hints) are dropped, as is
the ``Exiting due to N error(s)`` summary.
"""

from __future__ import annotations

from pathlib import Path

from kilnbuild.diagnostic import BuildDiagnostic, Severity

_DIGITS = frozenset("0123456789")
_U32_MAX = 2**32 - 1
_SEVERITIES = {
    "Error": Severity.ERROR,
    "Warning": Severity.WARNING,
    "Note": Severity.NOTE,
}


def _split_lines(text: str) -> list[str]:
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def parse_output(text: str) -> list[BuildDiagnostic]:
    """Return every diagnostic found in a block of Verilator output."""
    out: list[BuildDiagnostic] = []
    for line in _split_lines(text):
        if not line.startswith("%"):
            continue
        diag = parse_diagnostic_line(line)
        if diag is None or diag.message.startswith("Exiting due to "):
            continue
        out.append(diag)
    return out


def parse_diagnostic_line(line: str) -> BuildDiagnostic | None:
    """Parse one ``%Severity...`` line, or return None if it is not one."""
    if not line.startswith("%"):
        return None
    head, sep, after_colon = line[1:].partition(": ")
    if not sep:
        return None
    sev_text, dash, code_text = head.partition("-")
    severity = _SEVERITIES.get(sev_text.strip())
    if severity is None:
        return None
    code = code_text if dash else None

    located = _parse_with_location(after_colon, severity, code)
    if located is not None:
        return located
    return BuildDiagnostic(severity=severity, message=after_colon.strip(), code=code)


def _digits_end(s: str, start: int) -> int:
    end = start
    while end < len(s) and s[end] in _DIGITS:
        end += 1
    return end


def _parse_with_location(
    s: str, severity: Severity, code: str | None
) -> BuildDiagnostic | None:
    """Read a leading ``file:line:col:`` prefix, at its first occurrence."""
    for i, ch in enumerate(s):
        if ch != ":":
            continue
        line_start = i + 1
        line_end = _digits_end(s, line_start)
        if not (line_end > line_start and line_end < len(s) and s[line_end] == ":"):
            continue
        col_start = line_end + 1
        col_end = _digits_end(s, col_start)
        if not (col_end > col_start and col_end < len(s) and s[col_end] == ":"):
            continue
        line_no = int(s[line_start:line_end])
        col_no = int(s[col_start:col_end])
        if line_no > _U32_MAX or col_no > _U32_MAX:
            return None
        file_part = s[:i].strip()
        if not file_part:
            return None
        msg_start = col_end + 1
        if msg_start >= len(s):
            return None
        return BuildDiagnostic(
            severity=severity,
            message=s[msg_start:].strip(),
            code=code,
            file=Path(file_part),
            line=line_no,
            column=col_no,
        )
    return None