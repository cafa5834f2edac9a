"""Verilator backend: build the command line, run it, and collect results.

Flag selection is version-aware. Verilator 4.220 and later accept
``--binary``; 4.218 accepts the explicit ``--main --exe --build`` triple.
Anything older is reported as too old instead of letting Verilator fail
with an obscure option error.
"""

from __future__ import annotations

import enum
import functools
import itertools
import logging
import os
import shutil
import subprocess
import sys
from dataclasses import dataclass, field
from pathlib import Path

from kilnbuild.cache import BuildCacheKey, cache_dir
from kilnbuild.diagnostic import BuildDiagnostic
from kilnbuild.errors import (
    BackendIOError,
    BinaryNotFoundError,
    InvocationError,
    MissingOutputError,
    NonZeroExitError,
)
from kilnbuild.plan import BuildPlan, Profile
from kilnbuild.verilator_output import parse_output

TOOL_NAME = "verilator"
TAIL_LINES = 20
_BINARY_REJECTED = "Invalid Option: --binary"
_MAIN_EXE_BUILD = ("--main", "--exe", "--build")

_log = logging.getLogger("kilnbuild")


@dataclass
class VerilatorOutcome:
    """Result of one Verilator compilation."""

    diagnostics: list[BuildDiagnostic] = field(default_factory=list)
    binary: Path | None = None
    cache_hit: bool = False
    exit_code: int | None = None


@dataclass(frozen=True, order=True)
class VerilatorVersion:
    """The ``major.minor`` pair reported by ``verilator --version``."""

    major: int
    minor: int

    def supports_main_exe_build(self) -> bool:
        """True when ``--main --exe --build`` is available (4.218+)."""
        return (self.major, self.minor) >= (4, 218)

    def supports_binary(self) -> bool:
        """True when the ``--binary`` shorthand is available (4.220+)."""
        return (self.major, self.minor) >= (4, 220)

    @classmethod
    def parse(cls, text: str) -> "VerilatorVersion | None":
        """Parse output such as ``Verilator 5.022 2024-01-08 rev v5.022``."""
        tokens = text.split()
        if len(tokens) < 2:
            return None
        parts = tokens[1].split(".")
        if len(parts) < 2:
            return None
        major, minor = parts[0], parts[1]
        if not (_is_u32(major) and _is_u32(minor)):
            return None
        return cls(int(major), int(minor))

    def __str__(self) -> str:
        return f"{self.major}.{self.minor:03d}"


def _is_u32(text: str) -> bool:
    return bool(text) and text.isascii() and text.isdigit() and int(text) < 2**32


class CompileMode(enum.Enum):
    """Which flag set asks Verilator for an executable."""

    AUTO = "auto"
    MAIN_EXE_BUILD = "main-exe-build"


def install_hint() -> str:
    """Return a platform-appropriate hint for installing Verilator."""
    if sys.platform == "darwin":
        return "brew install verilator"
    if sys.platform.startswith("linux"):
        return "sudo apt-get install verilator (Debian/Ubuntu) or build from source"
    return "see the Verilator documentation for installation instructions"


@functools.lru_cache(maxsize=None)
def _probe(verilator: str) -> VerilatorVersion | None:
    try:
        result = subprocess.run(
            [verilator, "--version"],
            stdin=subprocess.DEVNULL,
            capture_output=True,
        )
    except OSError:
        return None
    return VerilatorVersion.parse(result.stdout.decode("utf-8", errors="replace"))


def probe_version(verilator: Path | str) -> VerilatorVersion | None:
    """Run ``verilator --version`` once per binary and parse the result.

    Returns None when the binary cannot be run or its output is not
    recognised.
    """
    return _probe(os.fspath(verilator))


def _compile_mode_flags(verilator: Path | str, mode: CompileMode) -> list[str]:
    if mode is CompileMode.MAIN_EXE_BUILD:
        return list(_MAIN_EXE_BUILD)
    version = probe_version(verilator)
    if version is None or version.supports_binary():
        # An unknown version still tries --binary; compile() retries with the
        # explicit triple if Verilator rejects it.
        return ["--binary"]
    if version.supports_main_exe_build():
        return list(_MAIN_EXE_BUILD)
    raise NonZeroExitError(
        TOOL_NAME,
        1,
        f"Verilator {version} is too old for kiln; need ≥ 4.218 "
        "(--main --exe --build) or ≥ 4.220 (--binary). "
        "Upgrade verilator and retry.",
    )


def build_command(
    verilator: Path | str, plan: BuildPlan, mode: CompileMode
) -> list[str]:
    """Return the full argument vector, program first, for compiling ``plan``.

    The command is meant to run inside the plan's cache directory.
    """
    opts = plan.verilator_options
    args = [os.fspath(verilator), *_compile_mode_flags(verilator, mode)]
    args += ["--top-module", plan.top, "--sv", "--Mdir", ".", "-o", f"V{plan.top}"]
    if plan.profile is Profile.RELEASE:
        args.append("-O3")
        if opts.x_assign is None:
            args += ["--x-assign", "0"]
    if opts.x_assign is not None:
        args += ["--x-assign", opts.x_assign]
    if opts.timing:
        args.append("--timing")
    if opts.bbox_unsup:
        args.append("--bbox-unsup")
    for module in plan.blackbox_modules:
        args += ["--bbox", module]
    if opts.threads is not None:
        args += ["--threads", str(opts.threads)]
    if opts.coverage:
        args.append("--coverage")
    if plan.trace:
        args += ["--trace", "--trace-fst"]
        if opts.trace_structs:
            args.append("--trace-structs")
        if opts.trace_params:
            args.append("--trace-params")
        if opts.trace_depth is not None:
            args += ["--trace-depth", str(opts.trace_depth)]
    if plan.timescale is not None:
        args += ["--timescale", plan.timescale]
    if plan.language is not None:
        args += ["--default-language", plan.language]
    for lib in plan.libraries:
        args += ["-y", os.fspath(lib)]
    args += [f"-I{os.fspath(inc)}" for inc in plan.include_dirs]
    for name, value in plan.defines.items():
        args.append(f"+define+{name}={value}" if value else f"+define+{name}")
    args += plan.verilator_lint_flags
    args += plan.extra_verilator_args
    args += [os.fspath(src) for src in plan.sources]
    return args


def _run(
    verilator: Path, directory: Path, plan: BuildPlan, mode: CompileMode
) -> tuple[str, str, int | None]:
    args = build_command(verilator, plan, mode)
    try:
        result = subprocess.run(
            args,
            cwd=directory,
            stdin=subprocess.DEVNULL,
            capture_output=True,
        )
    except OSError as exc:
        raise InvocationError(TOOL_NAME, verilator, exc) from exc
    code = result.returncode if result.returncode >= 0 else None
    return (
        result.stdout.decode("utf-8", errors="replace"),
        result.stderr.decode("utf-8", errors="replace"),
        code,
    )


def locate() -> Path:
    """Find the ``verilator`` binary on PATH."""
    path_var = os.environ.get("PATH")
    if path_var is None:
        raise BinaryNotFoundError(TOOL_NAME, install_hint())
    for directory in path_var.split(os.pathsep):
        candidate = Path(directory) / TOOL_NAME
        if candidate.is_file():
            return candidate
    raise BinaryNotFoundError(TOOL_NAME, install_hint())


def _split_lines(text: str) -> list[str]:
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def tail_of(text: str) -> str:
    """Return the last twenty lines of ``text`` joined by newlines."""
    return "\n".join(_split_lines(text)[-TAIL_LINES:])


def _sort_key(diag: BuildDiagnostic) -> tuple:
    return (
        diag.file is not None,
        diag.file.parts if diag.file is not None else (),
        diag.line is not None,
        diag.line or 0,
        diag.column is not None,
        diag.column or 0,
        diag.message,
    )


def compile(plan: BuildPlan) -> VerilatorOutcome:
    """Compile ``plan``, caching under ``<project_root>/target/kiln/<hash>/``."""
    try:
        key = BuildCacheKey.for_plan(plan)
    except OSError as exc:
        raise BackendIOError(Path(), exc) from exc
    directory = cache_dir(plan.project_root, key)
    binary_path = directory / f"V{plan.top}"

    if binary_path.is_file():
        _log.debug("verilator cache hit: %s", binary_path)
        return VerilatorOutcome(binary=binary_path, cache_hit=True, exit_code=0)

    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise BackendIOError(directory, exc) from exc

    verilator = locate()
    stdout, stderr, exit_code = _run(verilator, directory, plan, CompileMode.AUTO)
    if _BINARY_REJECTED in stderr or _BINARY_REJECTED in stdout:
        stdout, stderr, exit_code = _run(
            verilator, directory, plan, CompileMode.MAIN_EXE_BUILD
        )

    # Depending on its version Verilator reports on either stream.
    ordered = sorted(parse_output(stdout) + parse_output(stderr), key=_sort_key)
    diagnostics = [diag for diag, _ in itertools.groupby(ordered)]

    if binary_path.is_file():
        binary: Path | None = binary_path
    elif exit_code == 0:
        raise MissingOutputError(
            TOOL_NAME, binary_path, tail_of(stdout), tail_of(stderr)
        )
    else:
        binary = None

    return VerilatorOutcome(
        diagnostics=diagnostics,
        binary=binary,
        cache_hit=False,
        exit_code=exit_code,
    )


def clean(project_root: Path | str) -> None:
    """Remove ``<project_root>/target/kiln`` if it exists."""
    directory = Path(project_root) / "target" / "kiln"
    if directory.exists():
        shutil.rmtree(directory)