# -*- coding: utf-8 -*-
from ipygather.analysis import DataflowAnalyzer, ExecutionLogSlicer
from ipygather.assembler import DEFAULT_CELL_MARKER, DEFAULT_PREAMBLE, render
from ipygather.config import AnalyzerSettings, CellType, SlicerSettings
from ipygather.data_model import CellRecord, CellSlice, SliceResult, StatementRef
from ipygather.execution_log import ExecutionLog
from ipygather.gather import GatherProvider
from ipygather.shell import load_ipython_extension, unload_ipython_extension
from ipygather.version import __version__

__all__ = [
    "AnalyzerSettings",
    "CellRecord",
    "CellSlice",
    "CellType",
    "DEFAULT_CELL_MARKER",
    "DEFAULT_PREAMBLE",
    "DataflowAnalyzer",
    "ExecutionLog",
    "ExecutionLogSlicer",
    "GatherProvider",
    "SliceResult",
    "SlicerSettings",
    "StatementRef",
    "load_ipython_extension",
    "render",
    "unload_ipython_extension",
]
