"""A simulator-agnostic diagnostic shape shared by backends and renderers."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping


class Severity(enum.Enum):
    """How serious a diagnostic is."""

    ERROR = "error"
    WARNING = "warning"
    NOTE = "note"


@dataclass(frozen=True)
class BuildDiagnostic:
    """One diagnostic reported by a tool, with optional location and code."""

    severity: Severity
    message: str
    code: str | None = None
    file: Path | None = None
    line: int | None = None
    column: int | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.severity, Severity):
            object.__setattr__(self, "severity", Severity(self.severity))
        if self.file is not None and not isinstance(self.file, Path):
            object.__setattr__(self, "file", Path(self.file))

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-ready mapping of this diagnostic."""
        return {
            "severity": self.severity.value,
            "code": self.code,
            "file": None if self.file is None else str(self.file),
            "line": self.line,
            "column": self.column,
            "message": self.message,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "BuildDiagnostic":
        """Build a diagnostic from a mapping as produced by :meth:`to_dict`."""
        try:
            severity = Severity(data["severity"])
            message = data["message"]
        except KeyError as exc:
            raise ValueError(f"missing field {exc.args[0]!r}") from None
        if not isinstance(message, str):
            raise ValueError("field 'message' must be a string")
        file = data.get("file")
        return cls(
            severity=severity,
            message=message,
            code=data.get("code"),
            file=None if file is None else Path(file),
            line=data.get("line"),
            column=data.get("column"),
        )