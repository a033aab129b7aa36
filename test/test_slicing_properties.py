# -*- coding: utf-8 -*-
import logging

import hypothesis.strategies as st
from hypothesis import given, settings

from test.utils import Session

logging.basicConfig(level=logging.ERROR)


_NAMES = ["u", "v", "w", "x", "y"]


@st.composite
def statements(draw):
    target = draw(st.sampled_from(_NAMES))
    uses = draw(st.lists(st.sampled_from(_NAMES), max_size=3))
    return "%s = %s" % (target, " + ".join(uses) or "0")


@st.composite
def executions(draw):
    cell_id = draw(st.sampled_from(["a", "b", "c", "d"]))
    body = draw(st.lists(statements(), min_size=1, max_size=4))
    has_error = draw(st.booleans())
    return cell_id, "\n".join(body), has_error


def run_session(runs):
    session = Session()
    for cell_id, code, has_error in runs:
        session.run_cell(code, cell_id=cell_id, has_error=has_error)
    return session


@settings(max_examples=50, deadline=None)
@given(runs=st.lists(executions(), min_size=1, max_size=8))
def test_slicing_is_deterministic(runs):
    session = run_session(runs)
    for record in session.runs:
        first = session.slicer.slice(record.execution_event_id)
        second = session.slicer.slice(record.execution_event_id)
        assert first == second


@settings(max_examples=50, deadline=None)
@given(runs=st.lists(executions(), min_size=1, max_size=8))
def test_slices_end_with_target_and_never_look_ahead(runs):
    session = run_session(runs)
    log = session.log
    for record in session.runs:
        result = session.slicer.slice(record.execution_event_id)
        assert result[-1].record is record
        keys = [log.ordering_key(event_id) for event_id in result.event_ids]
        assert keys == sorted(keys)
        assert len(set(result.event_ids)) == len(result)


@settings(max_examples=50, deadline=None)
@given(runs=st.lists(executions(), min_size=1, max_size=8))
def test_sliced_lines_come_from_their_cells(runs):
    session = run_session(runs)
    for record in session.runs:
        for cell_slice in session.slicer.slice(record.execution_event_id):
            cell_lines = cell_slice.record.lines
            assert len(cell_slice.lines) > 0
            assert all(line in cell_lines for line in cell_slice.lines)
            if cell_slice.record is not record:
                assert not cell_slice.record.has_error


@settings(max_examples=25, deadline=None)
@given(runs=st.lists(executions(), min_size=1, max_size=8))
def test_reset_forgets_everything(runs):
    session = run_session(runs)
    session.log.reset()
    session.log.reset()
    assert session.log.is_empty
    for record in session.runs:
        assert len(session.slicer.slice(record.execution_event_id)) == 0
        assert session.slicer.slice_latest_execution(record.persistent_id) == ()
