# -*- coding: utf-8 -*-
import logging
from typing import Dict, Iterator, List, Optional, Tuple

from ipygather.analysis.dataflow import DataflowAnalyzer, DependencyFacts
from ipygather.data_model.cell_record import CellRecord
from ipygather.types import EventId, IdType

logger = logging.getLogger(__name__)
logger.setLevel(logging.WARNING)


OrderingKey = Tuple[int, int]


class ExecutionLog:
    """
    Append-only history of cell executions for one session, in the order the
    executions finished. Each record is analyzed once, when it is logged.

    Callers must serialize access: `log_execution` for an event has to return
    before that event is sliced, and no two calls may interleave.
    """

    def __init__(self, analyzer: Optional[DataflowAnalyzer] = None) -> None:
        self.analyzer = analyzer or DataflowAnalyzer()
        self._records: List[CellRecord] = []
        self._index_by_event_id: Dict[EventId, int] = {}
        self._latest_by_persistent_id: Dict[IdType, EventId] = {}
        self._facts_by_event_id: Dict[EventId, DependencyFacts] = {}
        self._effective_ordinals: List[int] = []
        self._max_ordinal = 0

    def log_execution(self, record: CellRecord) -> bool:
        if not record.is_executable:
            logger.debug("ignoring non-code cell %s", record)
            return False
        if record.is_blank:
            logger.debug("ignoring empty cell %s", record)
            return False
        if record.execution_event_id in self._index_by_event_id:
            logger.warning(
                "execution event %s already logged; ignoring duplicate",
                record.execution_event_id,
            )
            return False
        facts = self.analyzer.analyze(record.text)
        if record.execution_count is None:
            # unnumbered runs sort right after whatever ran before them
            ordinal = self._max_ordinal
        else:
            ordinal = record.execution_count
        self._max_ordinal = max(self._max_ordinal, ordinal)
        self._index_by_event_id[record.execution_event_id] = len(self._records)
        self._records.append(record)
        self._effective_ordinals.append(ordinal)
        self._facts_by_event_id[record.execution_event_id] = facts
        self._latest_by_persistent_id[record.persistent_id] = record.execution_event_id
        logger.debug(
            "logged %s with %d statement(s)", record, facts.num_statements
        )
        return True

    def reset(self) -> None:
        self._records.clear()
        self._index_by_event_id.clear()
        self._latest_by_persistent_id.clear()
        self._facts_by_event_id.clear()
        self._effective_ordinals.clear()
        self._max_ordinal = 0

    def history_up_to(self, event_id: EventId) -> List[CellRecord]:
        idx = self._index_by_event_id.get(event_id)
        if idx is None:
            return []
        return self._records[: idx + 1]

    def get(self, event_id: EventId) -> Optional[CellRecord]:
        idx = self._index_by_event_id.get(event_id)
        if idx is None:
            return None
        return self._records[idx]

    def facts_for(self, event_id: EventId) -> DependencyFacts:
        return self._facts_by_event_id.get(event_id, DependencyFacts.empty())

    def latest_for(self, persistent_id: IdType) -> Optional[CellRecord]:
        event_id = self._latest_by_persistent_id.get(persistent_id)
        if event_id is None:
            return None
        return self.get(event_id)

    def executions_for(self, persistent_id: IdType) -> List[CellRecord]:
        return [
            record for record in self._records if record.persistent_id == persistent_id
        ]

    def insertion_index(self, event_id: EventId) -> int:
        return self._index_by_event_id[event_id]

    def effective_ordinal(self, event_id: EventId) -> int:
        return self._effective_ordinals[self._index_by_event_id[event_id]]

    def ordering_key(self, event_id: EventId) -> OrderingKey:
        idx = self._index_by_event_id[event_id]
        return self._effective_ordinals[idx], idx

    @property
    def records(self) -> Tuple[CellRecord, ...]:
        return tuple(self._records)

    @property
    def latest_by_persistent_id(self) -> Dict[IdType, EventId]:
        return dict(self._latest_by_persistent_id)

    @property
    def is_empty(self) -> bool:
        return len(self._records) == 0

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, event_id: object) -> bool:
        return event_id in self._index_by_event_id

    def __iter__(self) -> Iterator[CellRecord]:
        return iter(self._records)
