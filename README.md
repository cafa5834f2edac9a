# kilnbuild

A small library that builds SystemVerilog designs with Verilator.

It expands a list of source globs into a compiled simulator binary. Builds are
cached by a hash of their inputs and source content, and Verilator's messages
are turned into structured diagnostics.

## Installation

```
pip install kilnbuild
```

Compiling needs a `verilator` binary on your `PATH`. Version 4.218 or newer is
required.
- On 4.220 and newer, `--binary` is used.
- On 4.218, `--main --exe --build` is used.
- When the version cannot be read, `--binary` is tried first. If Verilator
  rejects it, the build is retried with `--main --exe --build`.

## Modules

### `kilnbuild.source_set`

`SourceSet.resolve(project_root, globs)` expands globs against the project root.
Absolute globs are used as they are.

The result is a `SourceSet` with `project_root` and `files`:
- the files are resolved, absolute and deduplicated;
- they follow glob order, and are alphabetical within each glob.

It raises two errors:
- `InvalidGlobError` for a malformed pattern, such as an unclosed `[`;
- `NoSourcesError` when no file matched.

### `kilnbuild.plan`

`BuildPlan` holds everything needed for one build:
- `project_root` and `top`;
- `sources`, `include_dirs` and `defines`, with defines kept sorted by name;
- `profile`, either `Profile.DEBUG` or `Profile.RELEASE`;
- `trace`, `timescale` and `language`;
- `libraries`, `verilator_lint_flags` and `extra_verilator_args`;
- typed `VerilatorOptions`: `timing`, `x_assign`, `bbox_unsup`,
  `trace_structs`, `trace_params`, `trace_depth`, `threads` and `coverage`;
- `blackbox_modules`.

`plan.with_trace(on)` returns a copy with tracing switched on or off. Switching
it on adds the `KILN_TRACE` define and switching it off removes it.

`aggregate_blackbox_modules(vendors)` takes a mapping of vendor name to module
names. It returns the module names deduplicated. Vendors are visited in name
order, and names keep the order in which they were first seen.

### `kilnbuild.cache`

`BuildCacheKey.for_plan(plan)` computes a 32-character hex key. The key covers:
- the top module and profile;
- the trace flag, timescale and language;
- libraries, lint flags, defines and include directories;
- the path and the content of every source file.

A missing source raises `OSError`. `cache_dir(project_root, key)` returns
`<project_root>/target/kiln/<key>`.

### `kilnbuild.verilator`

`build_command(verilator, plan, mode)` returns the full argument list for a
plan. `mode` is a `CompileMode`, either `AUTO` or `MAIN_EXE_BUILD`.

In the release profile the command adds:
- `-O3`;
- `--x-assign 0`, unless `x_assign` is set.

The trace sub-options are emitted only when `trace` is on.

`compile(plan)` returns a `VerilatorOutcome` with four fields:
- `diagnostics`, sorted and deduplicated;
- `binary`;
- `exit_code`;
- `cache_hit`.

It behaves as follows:
- If the binary already exists in the cache directory, Verilator is not run.
- Otherwise Verilator runs inside that directory.
- If Verilator exits with 0 but produces no binary, `MissingOutputError` is
  raised.

Other functions:
- `clean(project_root)` removes `target/kiln`.
- `locate()` finds the binary on `PATH`.
- `probe_version(verilator)` runs `verilator --version` once per binary.
- `VerilatorVersion.parse(text)` reads the version from that output.
- `install_hint()` gives a platform-specific install suggestion.
- `tail_of(text)` returns the last 20 lines of a text.

### `kilnbuild.verilator_output`

`parse_output(text)` turns Verilator output into `BuildDiagnostic` values. It
skips continuation lines and the `Exiting due to ...` summary.
`parse_diagnostic_line(line)` parses a single `%Severity-CODE: file:line:col:
message` line. It returns `None` for a line it does not recognise.

### `kilnbuild.diagnostic`

`BuildDiagnostic` is a frozen dataclass with these fields:
- `severity`, a `Severity`: `ERROR`, `WARNING` or `NOTE`;
- `message`;
- `code`, `file`, `line` and `column`, each optional.

`to_dict()` and `from_dict(data)` convert a diagnostic to and from a JSON-ready
mapping.

### `kilnbuild.render`

`format_diagnostics(diags)` renders diagnostics without colour.
- A diagnostic whose file and line can be read is shown as a source snippet,
  with a `^` under the reported column.
- Any other diagnostic falls back to `format_plain(diag)`, which gives
  `Severity: message at file:line:col`.

`print_diagnostics(diags, stream=None)` writes to the stream, standard error by
default. It uses colour only when the stream is a terminal and `NO_COLOR` is
unset.

## Example

```python
from pathlib import Path

from kilnbuild.plan import BuildPlan, Profile
from kilnbuild.render import format_diagnostics
from kilnbuild.source_set import SourceSet
from kilnbuild.verilator import compile

root = Path(".").resolve()
sources = SourceSet.resolve(root, ["src/**/*.sv"])
plan = BuildPlan(
    project_root=root,
    top="tb",
    sources=sources.files,
    profile=Profile.DEBUG,
).with_trace(True)

outcome = compile(plan)
print(format_diagnostics(outcome.diagnostics), end="")
if outcome.binary:
    print("built", outcome.binary, "(cached)" if outcome.cache_hit else "")
```

## Errors

Every error is a subclass of `kilnbuild.errors.BuildError`:
- `SourceSetError` covers `InvalidGlobError`, `WalkGlobError` and
  `NoSourcesError`.
- `BackendError` covers `BinaryNotFoundError`, `InvocationError`,
  `NonZeroExitError`, `MissingOutputError` and `BackendIOError`.
  - `NonZeroExitError` is raised when the installed Verilator is older than
    4.218.

## What it does not do

- There is no command-line program; this is a library only.
- Nothing reads a project manifest. You pass in the globs, defines, options and
  vendor blackbox lists yourself.
- It does not run the compiled simulator, lint, format or generate
  documentation.