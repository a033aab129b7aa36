# -*- coding: utf-8 -*-
import logging
from typing import Any, Dict, Mapping, Optional, Union

from traitlets import Bool, Unicode, observe
from traitlets.config.configurable import SingletonConfigurable

from ipygather.analysis.dataflow import DataflowAnalyzer
from ipygather.analysis.slicing import ExecutionLogSlicer
from ipygather.assembler import DEFAULT_CELL_MARKER, render
from ipygather.config import AnalyzerSettings, CellType, SlicerSettings
from ipygather.data_model.cell_record import CellRecord, notebook_cell_id
from ipygather.data_model.cell_slice import SliceResult
from ipygather.execution_log import ExecutionLog
from ipygather.types import EventId, IdType

logger = logging.getLogger(__name__)
logger.setLevel(logging.WARNING)


class GatherProvider(SingletonConfigurable):
    """
    Adapter between a notebook host and the execution log: converts host cells
    into records, owns the log and its slicer, and renders gathered programs
    using the host's settings.
    """

    enabled = Bool(
        True, help="Whether the host should forward executions to the log."
    ).tag(config=True)
    cell_marker = Unicode(
        DEFAULT_CELL_MARKER, help="Marker written before each gathered cell."
    ).tag(config=True)
    blacken = Bool(False, help="Format gathered cells with black.").tag(config=True)
    include_error_definitions = Bool(
        False,
        help="Allow definitions from executions that raised to satisfy dependencies.",
    ).tag(config=True)

    def __init__(
        self, analyzer_settings: Optional[AnalyzerSettings] = None, **kwargs
    ) -> None:
        # set up before traitlets loads config, since config changes notify observers
        self.dataflow_analyzer = DataflowAnalyzer(analyzer_settings)
        self.execution_log = ExecutionLog(self.dataflow_analyzer)
        self.execution_slicer = ExecutionLogSlicer(self.execution_log)
        super().__init__(**kwargs)
        self.execution_slicer.settings = self._make_slicer_settings()
        logger.info("gathering tools have been activated")

    def _make_slicer_settings(self) -> SlicerSettings:
        return SlicerSettings(include_error_definitions=self.include_error_definitions)

    @observe("include_error_definitions")
    def _on_include_error_definitions_changed(self, change: Dict[str, Any]) -> None:
        self.execution_slicer.settings = self._make_slicer_settings()

    @observe("enabled")
    def _on_enabled_changed(self, change: Dict[str, Any]) -> None:
        logger.info("gather %s", "enabled" if change["new"] else "disabled")

    def log_execution(
        self, cell: Mapping[str, Any], has_error: bool = False
    ) -> Optional[CellRecord]:
        record = CellRecord.from_notebook_cell(cell, has_error=has_error)
        if record is None or not self.log_record(record):
            return None
        return record

    def log_record(self, record: CellRecord) -> bool:
        return self.execution_log.log_execution(record)

    def reset_log(self) -> None:
        self.execution_log.reset()

    def render_slice(
        self,
        slice_result: SliceResult,
        cell_marker: Optional[str] = None,
        blacken: Optional[bool] = None,
    ) -> str:
        return render(
            slice_result,
            cell_marker=self.cell_marker if cell_marker is None else cell_marker,
            blacken=self.blacken if blacken is None else blacken,
        )

    def gather_code(self, cell: Union[Mapping[str, Any], IdType]) -> str:
        """
        For a given cell, returns a program containing all the code its latest
        execution depends on, or the empty string if there is nothing to show.
        """
        if isinstance(cell, Mapping):
            if CellType(cell.get("cell_type", CellType.CODE.value)) != CellType.CODE:
                return ""
            persistent_id = notebook_cell_id(cell)
            if persistent_id is None:
                return ""
        else:
            persistent_id = cell
        return self.render_slice(
            self.execution_slicer.slice_latest_execution(persistent_id)
        )

    def gather_execution(self, event_id: EventId) -> str:
        return self.render_slice(self.execution_slicer.slice(event_id))

    def settings_json(self) -> Dict[str, Any]:
        return {
            "enabled": self.enabled,
            "cell_marker": self.cell_marker,
            "blacken": self.blacken,
            "analyzer": self.dataflow_analyzer.settings.to_json(),
            "slicer": self.execution_slicer.settings.to_json(),
        }
