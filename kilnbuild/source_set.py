"""Resolve manifest globs into a concrete list of source files."""

from __future__ import annotations

import glob as _glob
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

from kilnbuild.errors import InvalidGlobError, NoSourcesError

_SEPARATORS = {"/", os.sep}


class _PatternError(ValueError):
    def __init__(self, pos: int, msg: str) -> None:
        super().__init__(f"Pattern syntax error near position {pos}: {msg}")


def _check_pattern(pattern: str) -> None:
    """Reject patterns with a malformed ``**`` or an unclosed ``[`` class."""
    i = 0
    n = len(pattern)
    while i < n:
        ch = pattern[i]
        if ch == "*":
            start = i
            while i < n and pattern[i] == "*":
                i += 1
            count = i - start
            if count > 2:
                raise _PatternError(start, "wildcards are either regular `*` or recursive `**`")
            if count == 2:
                before_ok = start == 0 or pattern[start - 1] in _SEPARATORS
                after_ok = i == n or pattern[i] in _SEPARATORS
                if not (before_ok and after_ok):
                    raise _PatternError(
                        start, "recursive wildcards must form a single path component"
                    )
            continue
        if ch == "[":
            # The first character of a class (after an optional `!`) is always
            # taken literally, so `[]]` is a class holding `]`.
            body = i + 2 if i + 1 < n and pattern[i + 1] == "!" else i + 1
            close = pattern.find("]", body + 1)
            if body >= n or close == -1:
                raise _PatternError(i, "invalid range pattern")
            i = close + 1
            continue
        i += 1


@dataclass
class SourceSet:
    """Resolved source files.

    Paths are absolute and deduplicated; they appear in glob order, then
    alphabetically within each glob.
    """

    project_root: Path
    files: list[Path] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.project_root = Path(self.project_root)
        self.files = [Path(p) for p in self.files]

    @classmethod
    def resolve(cls, project_root: Path | str, globs: Iterable[str]) -> "SourceSet":
        """Expand ``globs`` relative to ``project_root``.

        Callers pass the design sources first, then each vendor's simulation
        models and stubs in vendor-name order.  A file matched by several
        globs is kept only at its first match.

        Raises :class:`InvalidGlobError` for a malformed pattern and
        :class:`NoSourcesError` when nothing matched at all.
        """
        root = Path(project_root)
        files: list[Path] = []
        seen: set[Path] = set()

        for raw_glob in globs:
            try:
                _check_pattern(raw_glob)
            except _PatternError as exc:
                raise InvalidGlobError(raw_glob, exc) from None
            if Path(raw_glob).is_absolute():
                pattern = raw_glob
            else:
                pattern = os.path.join(_glob.escape(str(root)), raw_glob)

            matched: list[Path] = []
            for entry in _glob.iglob(pattern, recursive=True):
                path = Path(entry)
                if not path.is_file():
                    continue
                try:
                    canonical = path.resolve(strict=True)
                except OSError:
                    canonical = path
                if canonical not in seen:
                    seen.add(canonical)
                    matched.append(canonical)
            files.extend(sorted(matched))

        if not files:
            raise NoSourcesError(root)
        return cls(project_root=root, files=files)