"""Build plan: the inputs, flags, top module and profile for one compilation."""

from __future__ import annotations

import dataclasses
import enum
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Mapping

TRACE_DEFINE = "KILN_TRACE"


class Profile(enum.Enum):
    """Optimisation profile of a build."""

    DEBUG = "debug"
    RELEASE = "release"

    def as_str(self) -> str:
        """Return the lowercase profile name."""
        return self.value


@dataclass
class VerilatorOptions:
    """Typed verilator knobs; anything else travels in the extra arguments."""

    timing: bool = False
    x_assign: str | None = None
    bbox_unsup: bool = False
    trace_structs: bool = False
    trace_params: bool = False
    trace_depth: int | None = None
    threads: int | None = None
    coverage: bool = False


@dataclass
class BuildPlan:
    """What to build, where the inputs came from, and how.

    ``defines`` is kept sorted by name so that every consumer sees the same
    order.
    """

    project_root: Path
    top: str
    sources: list[Path] = field(default_factory=list)
    include_dirs: list[Path] = field(default_factory=list)
    defines: dict[str, str] = field(default_factory=dict)
    profile: Profile = Profile.DEBUG
    trace: bool = False
    timescale: str | None = None
    language: str | None = None
    libraries: list[Path] = field(default_factory=list)
    verilator_lint_flags: list[str] = field(default_factory=list)
    extra_verilator_args: list[str] = field(default_factory=list)
    verilator_options: VerilatorOptions = field(default_factory=VerilatorOptions)
    blackbox_modules: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.project_root = Path(self.project_root)
        self.sources = [Path(p) for p in self.sources]
        self.include_dirs = [Path(p) for p in self.include_dirs]
        self.libraries = [Path(p) for p in self.libraries]
        self.defines = dict(sorted(self.defines.items()))
        if not isinstance(self.profile, Profile):
            self.profile = Profile(self.profile)

    def with_trace(self, on: bool) -> "BuildPlan":
        """Return a copy with tracing switched on or off.

        Turning tracing on also defines ``KILN_TRACE`` so testbenches can gate
        their dump calls on it; turning it off removes that define.
        """
        defines = dict(self.defines)
        if on:
            defines[TRACE_DEFINE] = ""
        else:
            defines.pop(TRACE_DEFINE, None)
        return dataclasses.replace(
            self,
            trace=on,
            defines=defines,
            sources=list(self.sources),
            include_dirs=list(self.include_dirs),
            libraries=list(self.libraries),
            verilator_lint_flags=list(self.verilator_lint_flags),
            extra_verilator_args=list(self.extra_verilator_args),
            verilator_options=dataclasses.replace(self.verilator_options),
            blackbox_modules=list(self.blackbox_modules),
        )


def aggregate_blackbox_modules(vendors: Mapping[str, Iterable[str]]) -> list[str]:
    """Collect every vendor's blackbox module names without duplicates.

    Vendors are visited in name order; module names keep first-seen order.
    """
    seen: set[str] = set()
    out: list[str] = []
    for vendor in sorted(vendors):
        for name in vendors[vendor]:
            if name not in seen:
                seen.add(name)
                out.append(name)
    return out