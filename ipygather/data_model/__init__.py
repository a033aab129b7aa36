# -*- coding: utf-8 -*-
from ipygather.data_model.cell_record import CellRecord
from ipygather.data_model.cell_slice import CellSlice, SliceResult
from ipygather.data_model.statement_ref import StatementRef

__all__ = ["CellRecord", "CellSlice", "SliceResult", "StatementRef"]
