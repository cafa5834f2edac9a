from pathlib import Path

import pytest

from kilnbuild.cache import BuildCacheKey, cache_dir
from kilnbuild.plan import BuildPlan, Profile


def write_src(directory: Path, name: str, body: str) -> Path:
    path = directory / name
    path.write_text(body)
    return path


def plan_for(sources, profile=Profile.DEBUG) -> BuildPlan:
    return BuildPlan(project_root=Path("/proj"), top="top", sources=sources, profile=profile)


def test_identical_inputs_yield_same_key(tmp_path):
    src = write_src(tmp_path, "a.sv", "module a; endmodule")
    plan = plan_for([src])
    k1 = BuildCacheKey.for_plan(plan)
    k2 = BuildCacheKey.for_plan(plan)
    assert k1 == k2
    assert len(k1.value) == 32
    assert all(c in "0123456789abcdef" for c in k1.value)


def test_editing_source_changes_key(tmp_path):
    src = write_src(tmp_path, "a.sv", "module a; endmodule")
    plan = plan_for([src])
    before = BuildCacheKey.for_plan(plan)
    src.write_text("module a;\n  // a comment\nendmodule")
    after = BuildCacheKey.for_plan(plan)
    assert before != after


def test_changing_profile_changes_key(tmp_path):
    src = write_src(tmp_path, "a.sv", "module a; endmodule")
    debug = BuildCacheKey.for_plan(plan_for([src], Profile.DEBUG))
    release = BuildCacheKey.for_plan(plan_for([src], Profile.RELEASE))
    assert debug != release


def test_changing_define_changes_key(tmp_path):
    src = write_src(tmp_path, "a.sv", "module a; endmodule")
    p1 = plan_for([src])
    p2 = plan_for([src])
    p1.defines["X"] = "1"
    p2.defines["X"] = "2"
    assert BuildCacheKey.for_plan(p1) != BuildCacheKey.for_plan(p2)


def test_changing_trace_changes_key(tmp_path):
    src = write_src(tmp_path, "a.sv", "module a; endmodule")
    plan = plan_for([src])
    assert BuildCacheKey.for_plan(plan) != BuildCacheKey.for_plan(plan.with_trace(True))


def test_source_order_does_not_matter(tmp_path):
    a = write_src(tmp_path, "a.sv", "module a; endmodule")
    b = write_src(tmp_path, "b.sv", "module b; endmodule")
    assert BuildCacheKey.for_plan(plan_for([a, b])) == BuildCacheKey.for_plan(plan_for([b, a]))


def test_same_content_different_path_changes_key(tmp_path):
    a = write_src(tmp_path, "a.sv", "module x; endmodule")
    b = write_src(tmp_path, "b.sv", "module x; endmodule")
    assert BuildCacheKey.for_plan(plan_for([a])) != BuildCacheKey.for_plan(plan_for([b]))


def test_missing_source_raises(tmp_path):
    plan = plan_for([tmp_path / "absent.sv"])
    with pytest.raises(FileNotFoundError):
        BuildCacheKey.for_plan(plan)


def test_cache_dir_layout():
    key = BuildCacheKey("abc123")
    assert cache_dir(Path("/proj"), key) == Path("/proj/target/kiln/abc123")