# -*- coding: utf-8 -*-
import logging

from ipygather.config import SlicerSettings
from test.utils import Session, session  # noqa: F401

logging.basicConfig(level=logging.ERROR)


def test_simple_chain(session):
    session.run_cell("x = 1", cell_id="a")
    session.run_cell("y = x + 1", cell_id="b")
    target = session.run_cell("print(y)", cell_id="c")
    assert session.gathered_ids(target) == ["a", "b", "c"]
    assert session.gathered_texts(target) == ["x = 1", "y = x + 1", "print(y)"]


def test_unrelated_cells_are_dropped(session):
    session.run_cell("x = 1")
    session.run_cell("unrelated = 42")
    target = session.run_cell("print(x)")
    assert session.gathered_texts(target) == ["x = 1", "print(x)"]


def test_target_is_always_included(session):
    target = session.run_cell("print(1)")
    assert session.gathered_texts(target) == ["print(1)"]


def test_unknown_event_gives_empty_slice(session):
    session.run_cell("x = 1")
    result = session.slicer.slice("not-an-event")
    assert len(result) == 0
    assert result.event_ids == ()


def test_rerun_uses_latest_definition(session):
    session.run_cell("x = 1", cell_id="a")
    session.run_cell("y = x + 1", cell_id="b")
    rerun = session.run_cell("x = 2", cell_id="a")
    target = session.run_cell("print(x)", cell_id="c")
    result = session.slicer.slice(target.execution_event_id)
    assert result.event_ids == (rerun.execution_event_id, target.execution_event_id)
    assert session.gathered_texts(target) == ["x = 2", "print(x)"]


def test_earlier_slice_sees_earlier_version(session):
    session.run_cell("x = 1", cell_id="a")
    first_use = session.run_cell("y = x + 1", cell_id="b")
    session.run_cell("x = 2", cell_id="a")
    assert session.gathered_texts(first_use) == ["x = 1", "y = x + 1"]


def test_ordering_follows_execution_counts(session):
    session.run_cell("x = 1", execution_count=1)
    session.run_cell("x = 2", execution_count=3)
    target = session.run_cell("print(x)", execution_count=2)
    assert session.gathered_texts(target) == ["x = 1", "print(x)"]


def test_no_definitions_from_later_executions(session):
    target = session.run_cell("print(x)")
    session.run_cell("x = 1")
    assert session.gathered_texts(target) == ["print(x)"]


def test_partial_cell_keeps_only_needed_statements(session):
    session.run_cell("import os\nx = 1\ny = 2", cell_id="a")
    target = session.run_cell("print(x)", cell_id="b")
    result = session.slicer.slice(target.execution_event_id)
    assert [cell_slice.stmt_nums for cell_slice in result] == [(1,), (0,)]
    assert session.gathered_texts(target) == ["x = 1", "print(x)"]


def test_partial_cell_keeps_whole_multiline_statement(session):
    session.run_cell(
        """
        x = [
            1,
            2,
        ]
        z = 0
        """
    )
    target = session.run_cell("total = sum(x)")
    assert session.gathered_texts(target) == ["x = [\n    1,\n    2,\n]", "total = sum(x)"]


def test_dependencies_within_a_cell(session):
    session.run_cell("a = 1\nb = a\nc = 5")
    target = session.run_cell("print(b)")
    assert session.gathered_texts(target) == ["a = 1\nb = a", "print(b)"]


def test_local_definition_shadows_earlier_cell(session):
    session.run_cell("x = 1", cell_id="a")
    session.run_cell("x = 2\ny = x", cell_id="b")
    target = session.run_cell("print(y)", cell_id="c")
    assert session.gathered_ids(target) == ["b", "c"]
    assert session.gathered_texts(target) == ["x = 2\ny = x", "print(y)"]


def test_use_before_local_definition_reads_earlier_cell(session):
    session.run_cell("x = 1")
    session.run_cell("y = x\nx = 5")
    target = session.run_cell("print(y)")
    assert session.gathered_texts(target) == ["x = 1", "y = x", "print(y)"]


def test_mutations_are_included(session):
    session.run_cell("lst = []")
    session.run_cell("lst.append(3)")
    session.run_cell("n = len(lst)")
    target = session.run_cell("print(lst)")
    assert session.gathered_texts(target) == ["lst = []", "lst.append(3)", "print(lst)"]


def test_function_definitions_are_included(session):
    session.run_cell("scale = 3")
    session.run_cell(
        """
        def f(v):
            return v * scale
        """
    )
    target = session.run_cell("print(f(2))")
    assert session.gathered_texts(target) == [
        "scale = 3",
        "def f(v):\n    return v * scale",
        "print(f(2))",
    ]


def test_target_is_whole_cell(session):
    session.run_cell("x = 1")
    target = session.run_cell("unused = 0\nprint(x)")
    assert session.gathered_texts(target) == ["x = 1", "unused = 0\nprint(x)"]


def test_target_blank_edges_are_stripped(session):
    target = session.run_cell("\n\nprint(1)\n\n", dedent=False)
    assert session.gathered_texts(target) == ["print(1)"]


def test_unparseable_target_is_kept_verbatim(session):
    session.run_cell("x = 1")
    target = session.run_cell("print(x")
    assert session.gathered_texts(target) == ["print(x"]


def test_errored_executions_do_not_provide_definitions(session):
    session.run_cell("x = 1")
    session.run_cell("x = undefined_fn()", has_error=True)
    target = session.run_cell("print(x)")
    assert session.gathered_texts(target) == ["x = 1", "print(x)"]


def test_errored_executions_can_provide_definitions():
    session = Session(SlicerSettings(include_error_definitions=True))
    session.run_cell("x = 1")
    session.run_cell("x = undefined_fn()", has_error=True)
    target = session.run_cell("print(x)")
    assert session.gathered_texts(target) == ["x = undefined_fn()", "print(x)"]


def test_errored_target_is_still_sliced(session):
    session.run_cell("x = 1")
    target = session.run_cell("print(x)\nraise ValueError()", has_error=True)
    assert session.gathered_texts(target) == ["x = 1", "print(x)\nraise ValueError()"]


def test_magic_cells(session):
    session.run_cell("%matplotlib inline\nimport numpy as np")
    session.run_cell("%%time\narr = np.arange(10)")
    target = session.run_cell("print(arr.sum())")
    assert session.gathered_texts(target) == [
        "import numpy as np",
        "%%time\narr = np.arange(10)",
        "print(arr.sum())",
    ]


def test_slice_latest_execution(session):
    session.run_cell("x = 1", cell_id="a")
    session.run_cell("print(x)", cell_id="b")
    session.run_cell("x = 2", cell_id="a")
    rerun = session.run_cell("print(x + 1)", cell_id="b")
    result = session.slicer.slice_latest_execution("b")
    assert result.contains_event(rerun.execution_event_id)
    assert [cell_slice.text for cell_slice in result] == ["x = 2", "print(x + 1)"]
    assert len(session.slicer.slice_latest_execution("missing")) == 0


def test_slice_all_executions(session):
    session.run_cell("x = 1", cell_id="a")
    session.run_cell("print(x)", cell_id="b")
    session.run_cell("x = 2", cell_id="a")
    session.run_cell("print(x)", cell_id="b")
    results = session.slicer.slice_all_executions("b")
    assert [[cell_slice.text for cell_slice in result] for result in results] == [
        ["x = 1", "print(x)"],
        ["x = 2", "print(x)"],
    ]
    assert session.slicer.slice_all_executions("missing") == []


def test_get_dependent_cells(session):
    source = session.run_cell("x = 1", cell_id="a")
    uses_x = session.run_cell("y = x", cell_id="b")
    session.run_cell("z = 3", cell_id="c")
    uses_y = session.run_cell("w = y", cell_id="d")
    assert session.slicer.get_dependent_cells(source.execution_event_id) == [
        uses_x,
        uses_y,
    ]
    session.run_cell("y = 7", cell_id="b")
    assert session.slicer.get_dependent_cells(source.execution_event_id) == [uses_y]
    assert session.slicer.get_dependent_cells("missing") == []


def test_rerun_does_not_change_earlier_slices(session):
    session.run_cell("x = 1", cell_id="a", execution_count=1)
    session.run_cell("y = x + 1", cell_id="b", execution_count=2)
    target = session.run_cell("print(y)", cell_id="c", execution_count=3)
    before = session.slicer.slice(target.execution_event_id)
    session.run_cell("x = 2", cell_id="a", execution_count=4)
    after = session.slicer.slice(target.execution_event_id)
    assert before == after
    assert session.gathered_texts(target) == ["x = 1", "y = x + 1", "print(y)"]


def test_shared_lines_are_emitted_once(session):
    session.run_cell("a = 1; b = 2; c = 3")
    target = session.run_cell("print(a + b)")
    result = session.slicer.slice(target.execution_event_id)
    assert result[0].stmt_nums == (0, 1)
    assert session.gathered_texts(target) == ["a = 1; b = 2; c = 3", "print(a + b)"]


def test_trailing_blank_lines_do_not_widen_slice(session):
    session.run_cell("import os\nx = 1\ny = 2\n\n", dedent=False)
    target = session.run_cell("print(x)")
    assert session.gathered_texts(target) == ["x = 1", "print(x)"]


def test_unicode_line_separator_does_not_hide_definitions(session):
    session.run_cell('s = "a\u2028b"\nx = 1\ny = 2', dedent=False)
    target = session.run_cell("print(x)")
    assert session.gathered_texts(target) == ["x = 1", "print(x)"]


def test_version_resolution_picks_version_live_at_target(session):
    session.run_cell("x = 1", cell_id="p")
    second = session.run_cell("x = 2", cell_id="p")
    target = session.run_cell("print(x)", cell_id="q")
    session.run_cell("x = 3", cell_id="p")
    result = session.slicer.slice(target.execution_event_id)
    assert result.event_ids == (second.execution_event_id, target.execution_event_id)
    assert session.gathered_texts(target) == ["x = 2", "print(x)"]
