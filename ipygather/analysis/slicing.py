# -*- coding: utf-8 -*-
import bisect
import logging
from collections import defaultdict, deque
from typing import TYPE_CHECKING, Deque, Dict, List, Optional, Set, Tuple

from ipygather.config import SlicerSettings
from ipygather.data_model.cell_record import CellRecord
from ipygather.data_model.cell_slice import CellSlice, SliceResult
from ipygather.data_model.statement_ref import StatementRef
from ipygather.types import EventId, IdType

if TYPE_CHECKING:
    from ipygather.analysis.dataflow import DependencyFacts
    from ipygather.execution_log import ExecutionLog


logger = logging.getLogger(__name__)
logger.setLevel(logging.WARNING)


# (position in the candidate history, statement number)
_DefSite = Tuple[int, int]


def _strip_blank_edges(lines: List[str]) -> List[str]:
    start, end = 0, len(lines)
    while start < end and len(lines[start].strip()) == 0:
        start += 1
    while end > start and len(lines[end - 1].strip()) == 0:
        end -= 1
    return lines[start:end]


class ExecutionLogSlicer:
    """
    Computes backward slices over an execution log: for a given execution, the
    statements from it and from earlier executions that it transitively reads
    from, grouped by execution and ordered the way they originally ran.
    """

    def __init__(
        self, log: "ExecutionLog", settings: Optional[SlicerSettings] = None
    ) -> None:
        self.log = log
        self.settings = settings or SlicerSettings()

    def _candidate_history(self, target: CellRecord) -> List[CellRecord]:
        target_key = self.log.ordering_key(target.execution_event_id)
        history = [
            record
            for record in self.log.history_up_to(target.execution_event_id)
            if self.log.ordering_key(record.execution_event_id) <= target_key
        ]
        history.sort(key=lambda record: self.log.ordering_key(record.execution_event_id))
        return history

    def _index_definitions(
        self, history: List[CellRecord], target: CellRecord
    ) -> Dict[str, List[_DefSite]]:
        defs_by_name: Dict[str, List[_DefSite]] = defaultdict(list)
        for pos, record in enumerate(history):
            if (
                record.has_error
                and record is not target
                and not self.settings.include_error_definitions
            ):
                continue
            for stmt in self.log.facts_for(record.execution_event_id).statements:
                for name in stmt.defs:
                    defs_by_name[name].append((pos, stmt.stmt_num))
        return defs_by_name

    @staticmethod
    def _nearest_definition(
        def_sites: List[_DefSite], before_pos: int
    ) -> Optional[_DefSite]:
        idx = bisect.bisect_left(def_sites, (before_pos, -1)) - 1
        if idx < 0:
            return None
        return def_sites[idx]

    def _compute_slice_refs(
        self, target: CellRecord, history: List[CellRecord]
    ) -> Set[StatementRef]:
        position_by_event_id = {
            record.execution_event_id: pos for pos, record in enumerate(history)
        }
        defs_by_name = self._index_definitions(history, target)
        target_facts = self.log.facts_for(target.execution_event_id)
        worklist: Deque[StatementRef] = deque(
            StatementRef(target.execution_event_id, stmt.stmt_num)
            for stmt in target_facts.statements
        )
        visited: Set[StatementRef] = set(worklist)
        while len(worklist) > 0:
            ref = worklist.popleft()
            facts = self.log.facts_for(ref.event_id)
            local_defs = facts.local_defs_for(ref.stmt_num)
            for name in sorted(facts.statements[ref.stmt_num].uses):
                if name in local_defs:
                    parent = StatementRef(ref.event_id, local_defs[name])
                else:
                    def_site = self._nearest_definition(
                        defs_by_name.get(name, []), position_by_event_id[ref.event_id]
                    )
                    if def_site is None:
                        # builtin, or never defined in this session
                        continue
                    pos, stmt_num = def_site
                    parent = StatementRef(history[pos].execution_event_id, stmt_num)
                if parent not in visited:
                    visited.add(parent)
                    worklist.append(parent)
        return visited

    def _make_cell_slice(
        self, record: CellRecord, stmt_nums: Set[int], whole_cell: bool
    ) -> CellSlice:
        facts: "DependencyFacts" = self.log.facts_for(record.execution_event_id)
        all_lines = record.lines
        if whole_cell or len(stmt_nums) == facts.num_statements:
            return CellSlice(
                record,
                tuple(range(facts.num_statements)),
                tuple(_strip_blank_edges(all_lines)),
            )
        line_nums: Set[int] = set()
        for stmt_num in stmt_nums:
            line_nums.update(facts.statements[stmt_num].line_range)
        lines = tuple(
            all_lines[line_num - 1]
            for line_num in sorted(line_nums)
            if 0 < line_num <= len(all_lines)
        )
        return CellSlice(record, tuple(sorted(stmt_nums)), lines)

    def slice(self, event_id: EventId) -> SliceResult:
        target = self.log.get(event_id)
        if target is None:
            logger.info("no logged execution for event %s", event_id)
            return SliceResult()
        history = self._candidate_history(target)
        refs = self._compute_slice_refs(target, history)
        stmt_nums_by_event_id: Dict[EventId, Set[int]] = defaultdict(set)
        for ref in refs:
            stmt_nums_by_event_id[ref.event_id].add(ref.stmt_num)
        cell_slices = []
        for record in history:
            if record is target:
                target_facts = self.log.facts_for(event_id)
                cell_slices.append(
                    self._make_cell_slice(
                        record,
                        stmt_nums_by_event_id[event_id],
                        whole_cell=target_facts.num_statements == 0,
                    )
                )
            elif record.execution_event_id in stmt_nums_by_event_id:
                cell_slices.append(
                    self._make_cell_slice(
                        record,
                        stmt_nums_by_event_id[record.execution_event_id],
                        whole_cell=False,
                    )
                )
        logger.debug(
            "slice for %s has %d statement(s) across %d cell(s)",
            event_id,
            len(refs),
            len(cell_slices),
        )
        return SliceResult(cell_slices)

    def slice_latest_execution(self, persistent_id: IdType) -> SliceResult:
        record = self.log.latest_for(persistent_id)
        if record is None:
            return SliceResult()
        return self.slice(record.execution_event_id)

    def slice_all_executions(self, persistent_id: IdType) -> List[SliceResult]:
        return [
            self.slice(record.execution_event_id)
            for record in self.log.executions_for(persistent_id)
        ]

    def get_dependent_cells(self, event_id: EventId) -> List[CellRecord]:
        """
        Returns the current version of every other cell, run after the given
        execution, whose slice includes a statement of that execution.
        """
        source = self.log.get(event_id)
        if source is None:
            return []
        start = self.log.insertion_index(event_id)
        dependents = []
        for record in self.log.records[start + 1 :]:
            if record.persistent_id == source.persistent_id:
                continue
            latest = self.log.latest_for(record.persistent_id)
            if latest is not record:
                continue
            if self.slice(record.execution_event_id).contains_event(event_id):
                dependents.append(record)
        return dependents
