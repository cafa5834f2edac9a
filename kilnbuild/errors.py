"""Exception hierarchy for the build pipeline."""

from __future__ import annotations

from pathlib import Path


class BuildError(Exception):
    """Base class for every error raised by the build pipeline."""


class SourceSetError(BuildError):
    """Raised when manifest globs cannot be resolved into source files."""


class InvalidGlobError(SourceSetError):
    """A configured source glob is not a valid pattern."""

    def __init__(self, glob: str, reason: object) -> None:
        self.glob = glob
        self.reason = reason
        super().__init__(f"invalid source glob `{glob}`: {reason}")


class WalkGlobError(SourceSetError):
    """Walking the filesystem for a glob failed."""

    def __init__(self, glob: str, reason: object) -> None:
        self.glob = glob
        self.reason = reason
        super().__init__(f"error walking source glob `{glob}`: {reason}")


class NoSourcesError(SourceSetError):
    """No file matched any of the configured globs."""

    def __init__(self, root: Path | str) -> None:
        self.root = Path(root)
        super().__init__(
            f"no source files matched the configured globs in `{self.root}`"
        )


class BackendError(BuildError):
    """Base class for simulator backend failures."""


class BinaryNotFoundError(BackendError):
    """The simulator binary is not on PATH."""

    def __init__(self, tool: str, install_hint: str) -> None:
        self.tool = tool
        self.install_hint = install_hint
        super().__init__(
            f"could not find the `{tool}` binary on PATH.\n"
            f"Install {tool} (e.g., `{install_hint}`) and ensure it is on your PATH."
        )


class InvocationError(BackendError):
    """The simulator binary could not be started."""

    def __init__(self, tool: str, path: Path | str, source: BaseException) -> None:
        self.tool = tool
        self.path = Path(path)
        self.source = source
        super().__init__(f"failed to invoke {tool} at {self.path}: {source}")


class NonZeroExitError(BackendError):
    """The simulator exited with a failure code."""

    def __init__(self, tool: str, code: int, stderr_tail: str) -> None:
        self.tool = tool
        self.code = code
        self.stderr_tail = stderr_tail
        super().__init__(
            f"{tool} exited with code {code} and reported errors. "
            f"See diagnostics for details. stderr tail:\n{stderr_tail}"
        )


class MissingOutputError(BackendError):
    """The simulator succeeded but the expected output is absent."""

    def __init__(
        self,
        tool: str,
        expected: Path | str,
        stdout_tail: str,
        stderr_tail: str,
    ) -> None:
        self.tool = tool
        self.expected = Path(expected)
        self.stdout_tail = stdout_tail
        self.stderr_tail = stderr_tail
        super().__init__(
            f"{tool} exited successfully but did not produce the expected output "
            f"`{self.expected}`.\nstdout tail:\n{stdout_tail}\nstderr tail:\n{stderr_tail}"
        )


class BackendIOError(BackendError):
    """A filesystem operation performed by a backend failed."""

    def __init__(self, path: Path | str, source: BaseException) -> None:
        self.path = Path(path)
        self.source = source
        super().__init__(f"I/O error at {self.path}: {source}")