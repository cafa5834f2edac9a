from pathlib import Path

from kilnbuild.plan import (
    BuildPlan,
    Profile,
    VerilatorOptions,
    aggregate_blackbox_modules,
)


def _plan(**overrides):
    fields = {"project_root": "/proj", "top": "top"}
    fields.update(overrides)
    return BuildPlan(**fields)


def test_profile_as_str():
    assert Profile.DEBUG.as_str() == "debug"
    assert Profile.RELEASE.as_str() == "release"


def test_aggregate_blackbox_modules_dedupes_across_vendors():
    vendors = {
        "xilinx": ["MMCME2_ADV", "PLLE2_ADV"],
        "altera": ["PLLE2_ADV", "altpll"],
    }
    names = aggregate_blackbox_modules(vendors)
    assert "MMCME2_ADV" in names
    assert "altpll" in names
    assert names.count("PLLE2_ADV") == 1


def test_aggregate_blackbox_modules_visits_vendors_in_name_order():
    vendors = {
        "xilinx": ["MMCME2_ADV", "PLLE2_ADV"],
        "altera": ["PLLE2_ADV", "altpll"],
    }
    assert aggregate_blackbox_modules(vendors) == ["PLLE2_ADV", "altpll", "MMCME2_ADV"]


def test_aggregate_blackbox_modules_empty():
    assert aggregate_blackbox_modules({}) == []


def test_verilator_options_defaults_are_off():
    opts = VerilatorOptions()
    assert (opts.timing, opts.bbox_unsup, opts.trace_structs, opts.trace_params, opts.coverage) == (
        False,
        False,
        False,
        False,
        False,
    )
    assert (opts.x_assign, opts.trace_depth, opts.threads) == (None, None, None)


def test_plan_normalises_paths_and_profile():
    plan = _plan(sources=["/proj/src/top.sv"], include_dirs=["/proj/inc"], profile="release")
    assert plan.project_root == Path("/proj")
    assert plan.sources == [Path("/proj/src/top.sv")]
    assert plan.include_dirs == [Path("/proj/inc")]
    assert plan.profile is Profile.RELEASE


def test_plan_defines_are_sorted():
    plan = _plan(defines={"ZED": "1", "ALPHA": "2"})
    assert list(plan.defines) == ["ALPHA", "ZED"]


def test_with_trace_adds_kiln_trace_define():
    plan = _plan(defines={"FOO": "1"})
    traced = plan.with_trace(True)
    assert traced.trace is True
    assert traced.defines == {"FOO": "1", "KILN_TRACE": ""}
    assert list(traced.defines) == ["FOO", "KILN_TRACE"]


def test_with_trace_leaves_original_untouched():
    plan = _plan(defines={"FOO": "1"})
    plan.with_trace(True)
    assert plan.trace is False
    assert plan.defines == {"FOO": "1"}


def test_with_trace_off_removes_define():
    traced = _plan(defines={"FOO": "1"}).with_trace(True)
    untraced = traced.with_trace(False)
    assert untraced.trace is False
    assert untraced.defines == {"FOO": "1"}


def test_with_trace_copies_options():
    plan = _plan()
    traced = plan.with_trace(True)
    traced.verilator_options.timing = True
    assert plan.verilator_options.timing is False


def test_plans_with_same_inputs_compare_equal():
    assert _plan(defines={"X": "1"}) == _plan(defines={"X": "1"})
    assert _plan(defines={"X": "1"}) != _plan(defines={"X": "2"})