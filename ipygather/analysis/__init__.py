# -*- coding: utf-8 -*-
from ipygather.analysis.dataflow import (
    DataflowAnalyzer,
    DefUseEdge,
    DependencyFacts,
    StatementFacts,
    compute_statement_defs_and_uses,
)
from ipygather.analysis.slicing import ExecutionLogSlicer

__all__ = [
    "DataflowAnalyzer",
    "DefUseEdge",
    "DependencyFacts",
    "ExecutionLogSlicer",
    "StatementFacts",
    "compute_statement_defs_and_uses",
]
