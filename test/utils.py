# -*- coding: utf-8 -*-
import textwrap
from typing import List, Optional

import pytest

from ipygather.analysis.slicing import ExecutionLogSlicer
from ipygather.config import SlicerSettings
from ipygather.data_model.cell_record import CellRecord
from ipygather.execution_log import ExecutionLog
from ipygather.types import IdType


class Session:
    """
    Small stand-in for a notebook host: numbers each run the way a kernel
    would, and remembers which record each run produced.
    """

    def __init__(self, slicer_settings: Optional[SlicerSettings] = None) -> None:
        self.log = ExecutionLog()
        self.slicer = ExecutionLogSlicer(self.log, slicer_settings)
        self.counter = 0
        self.runs: List[CellRecord] = []

    def run_cell(
        self,
        code: str,
        cell_id: Optional[IdType] = None,
        execution_count: Optional[int] = None,
        has_error: bool = False,
        dedent: bool = True,
    ) -> CellRecord:
        self.counter += 1
        if cell_id is None:
            cell_id = f"cell-{self.counter}"
        if execution_count is None:
            execution_count = self.counter
        if dedent:
            code = textwrap.dedent(code).strip("\n")
        record = CellRecord.create(
            cell_id, code, execution_count=execution_count, has_error=has_error
        )
        self.log.log_execution(record)
        self.runs.append(record)
        return record

    def gathered_texts(self, record: CellRecord) -> List[str]:
        return [
            cell_slice.text for cell_slice in self.slicer.slice(record.execution_event_id)
        ]

    def gathered_ids(self, record: CellRecord) -> List[IdType]:
        return [
            cell_slice.record.persistent_id
            for cell_slice in self.slicer.slice(record.execution_event_id)
        ]


@pytest.fixture
def session() -> Session:
    return Session()
