# tests/test_implementations.py

from __future__ import annotations

import pytest

from moduletasks.errors import ErrorCategory, ErrorKind, TaskError
from moduletasks.implementations import Implementation, find_implementations, task_basename

DIR = "/mods/foo/tasks"


def test_task_basename() -> None:
    assert task_basename("foo") == "init"
    assert task_basename("foo::bar") == "bar"


def test_single_implicit_implementation() -> None:
    impls = find_implementations("mod::foo", DIR, None, [f"{DIR}/foo.py"])
    assert impls == [Implementation(name="foo.py", path=f"{DIR}/foo.py", requirements=[])]


def test_init_task_matches_init_executable() -> None:
    impls = find_implementations("mod", DIR, {}, [f"{DIR}/init.sh", f"{DIR}/other.sh"])
    assert [i.name for i in impls] == ["init.sh"]


def test_no_implicit_implementation() -> None:
    with pytest.raises(TaskError) as exc:
        find_implementations("mod::foo", DIR, None, [])
    assert exc.value.kind is ErrorKind.NO_IMPLEMENTATION
    assert exc.value.category is ErrorCategory.INVALID_TASK


def test_multiple_implicit_implementations() -> None:
    with pytest.raises(TaskError) as exc:
        find_implementations("mod::foo", DIR, {}, [f"{DIR}/foo.sh", f"{DIR}/foo.py"])
    assert exc.value.kind is ErrorKind.MULTIPLE_IMPLEMENTATIONS


def test_explicit_implementations_pick_listed_executable() -> None:
    md = {"implementations": [{"name": "foo.py"}]}
    impls = find_implementations("mod::foo", DIR, md, [f"{DIR}/foo.py", f"{DIR}/foo.rb"])
    assert impls == [Implementation(name="foo.py", path=f"{DIR}/foo.py", requirements=[])]


def test_explicit_implementations_keep_metadata_order_and_requirements() -> None:
    md = {
        "implementations": [
            {"name": "foo.ps1", "requirements": ["powershell"]},
            {"name": "foo.sh", "requirements": ["shell"]},
        ]
    }
    impls = find_implementations("mod::foo", DIR, md, [f"{DIR}/foo.sh", f"{DIR}/foo.ps1"])
    assert [(i.name, i.requirements) for i in impls] == [
        ("foo.ps1", ["powershell"]),
        ("foo.sh", ["shell"]),
    ]


def test_explicit_implementation_may_use_other_basename() -> None:
    md = {"implementations": [{"name": "shared.sh"}]}
    impls = find_implementations("mod::foo", DIR, md, [f"{DIR}/shared.sh"])
    assert impls[0].path == f"{DIR}/shared.sh"


def test_missing_explicit_implementation() -> None:
    md = {"implementations": [{"name": "foo.ps1"}]}
    with pytest.raises(TaskError) as exc:
        find_implementations("mod::foo", DIR, md, [f"{DIR}/foo.py"])
    assert exc.value.kind is ErrorKind.MISSING_IMPLEMENTATION
    assert exc.value.details == {"missing": ["foo.ps1"]}


@pytest.mark.parametrize(
    "implementations",
    [{"name": "foo.py"}, "foo.py", [{"requirements": []}], ["foo.py"]],
)
def test_malformed_implementations(implementations) -> None:
    with pytest.raises(TaskError) as exc:
        find_implementations("mod::foo", DIR, {"implementations": implementations}, [f"{DIR}/foo.py"])
    assert exc.value.kind is ErrorKind.INVALID_METADATA


def test_error_dict_uses_bare_kind_tag() -> None:
    with pytest.raises(TaskError) as exc:
        find_implementations("mod::foo", DIR, {"implementations": [{"name": "foo.ps1"}]}, [])
    assert exc.value.to_dict() == {
        "msg": "Task metadata for task mod::foo specifies missing implementation foo.ps1",
        "kind": "missing-implementation",
        "details": {"missing": ["foo.ps1"]},
    }
