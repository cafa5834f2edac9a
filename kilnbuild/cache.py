"""Content-hashed build cache rooted at ``target/kiln/<hash>/``."""

from __future__ import annotations

import hashlib
import os
from dataclasses import dataclass
from pathlib import Path

from kilnbuild.plan import BuildPlan

SCHEMA_VERSION = "kiln-build-cache-v1"
"""Bump when the cache layout or invocation flags change incompatibly."""

KEY_LENGTH = 32


def _path_bytes(path: Path) -> bytes:
    return os.fsencode(path)


@dataclass(frozen=True)
class BuildCacheKey:
    """A 32-character lowercase hex hash that uniquely keys a build."""

    value: str

    def __str__(self) -> str:
        return self.value

    @classmethod
    def for_plan(cls, plan: BuildPlan) -> "BuildCacheKey":
        """Compute the cache key for ``plan``.

        The key covers the content of every source file (not just its path or
        mtime), the top module, profile, trace flag, timescale, language,
        libraries, lint flags, defines and include directories.  Reading a
        source that does not exist raises :class:`OSError`.
        """
        hasher = hashlib.blake2b(digest_size=32)
        hasher.update(SCHEMA_VERSION.encode())
        hasher.update(plan.top.encode())
        hasher.update(plan.profile.as_str().encode())
        hasher.update(b"trace=1" if plan.trace else b"trace=0")
        if plan.timescale is not None:
            hasher.update(b"timescale=" + plan.timescale.encode() + b"\0")
        if plan.language is not None:
            hasher.update(b"language=" + plan.language.encode() + b"\0")
        for lib in plan.libraries:
            hasher.update(b"lib=" + _path_bytes(lib) + b"\0")
        for flag in plan.verilator_lint_flags:
            hasher.update(flag.encode() + b"\0")
        for name, value in sorted(plan.defines.items()):
            hasher.update(name.encode() + b"=" + value.encode() + b"\0")
        for inc in plan.include_dirs:
            hasher.update(_path_bytes(inc) + b"\0")
        for src in sorted(Path(p) for p in plan.sources):
            # Path and content both count: the simulator records file names
            # in its output, so identical content at another path differs.
            hasher.update(_path_bytes(src) + b"\0")
            hasher.update(src.read_bytes())
        return cls(hasher.hexdigest()[:KEY_LENGTH])


def cache_dir(project_root: Path | str, key: BuildCacheKey) -> Path:
    """Return the on-disk directory for ``key``; it may not exist yet."""
    return Path(project_root) / "target" / "kiln" / key.value