# -*- coding: utf-8 -*-
from typing import NamedTuple

from ipygather.types import EventId


class StatementRef(NamedTuple):
    event_id: EventId
    stmt_num: int

    def __repr__(self) -> str:
        return "<%s:%d>" % (self.event_id, self.stmt_num)
