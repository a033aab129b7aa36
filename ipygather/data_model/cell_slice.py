# -*- coding: utf-8 -*-
from typing import NamedTuple, Tuple

from ipygather.data_model.cell_record import CellRecord
from ipygather.types import EventId


class CellSlice(NamedTuple):
    record: CellRecord
    stmt_nums: Tuple[int, ...]
    lines: Tuple[str, ...]

    @property
    def execution_event_id(self) -> EventId:
        return self.record.execution_event_id

    @property
    def text(self) -> str:
        return "\n".join(self.lines)


class SliceResult(tuple):
    """
    Ordered cell slices that reproduce one execution, oldest first. An empty
    result means the target could not be found.
    """

    def __new__(cls, cell_slices=()):
        return super().__new__(cls, tuple(cell_slices))

    @property
    def event_ids(self) -> Tuple[EventId, ...]:
        return tuple(cell_slice.execution_event_id for cell_slice in self)

    def contains_event(self, event_id: EventId) -> bool:
        return event_id in self.event_ids

    def __repr__(self) -> str:
        return "%s(%s)" % (self.__class__.__name__, list(self.event_ids))
