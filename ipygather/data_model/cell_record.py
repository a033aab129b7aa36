# -*- coding: utf-8 -*-
import logging
import uuid
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Sequence, Union

from ipygather.config import CellType
from ipygather.types import EventId, IdType
from ipygather.utils.misc_utils import source_lines

logger = logging.getLogger(__name__)
logger.setLevel(logging.WARNING)


def _join_source(source: Union[str, Sequence[str]]) -> str:
    # notebook json stores source either as one string or as a list of lines
    # that keep their own line endings
    if isinstance(source, str):
        return source
    return "".join(source)


def notebook_cell_id(cell: Mapping[str, Any]) -> Optional[IdType]:
    cell_id = cell.get("id")
    if cell_id is None:
        cell_id = cell.get("metadata", {}).get("id")
    return cell_id


@dataclass(frozen=True)
class CellRecord:
    """
    Snapshot of one execution of a cell.

    `persistent_id` names the logical cell and repeats every time that cell
    is re-run; `execution_event_id` names this particular run and is unique
    within a log.
    """

    persistent_id: IdType
    execution_event_id: EventId
    text: str
    execution_count: Optional[int] = None
    has_error: bool = False
    cell_type: CellType = CellType.CODE

    @property
    def lines(self) -> List[str]:
        return source_lines(self.text)

    @property
    def is_executable(self) -> bool:
        return self.cell_type == CellType.CODE

    @property
    def is_blank(self) -> bool:
        return len(self.text.strip()) == 0

    @classmethod
    def create(
        cls,
        persistent_id: IdType,
        text: str,
        execution_count: Optional[int] = None,
        has_error: bool = False,
        cell_type: CellType = CellType.CODE,
    ) -> "CellRecord":
        return cls(
            persistent_id=persistent_id,
            execution_event_id=str(uuid.uuid4()),
            text=text,
            execution_count=execution_count,
            has_error=has_error,
            cell_type=cell_type,
        )

    @classmethod
    def from_notebook_cell(
        cls, cell: Mapping[str, Any], has_error: bool = False
    ) -> Optional["CellRecord"]:
        """
        Converts a notebook-format cell (as found in .ipynb json) into a record
        for a fresh execution event. Returns None for cells that are not code
        or that have no id.
        """
        cell_type = CellType(cell.get("cell_type", CellType.CODE.value))
        if cell_type != CellType.CODE:
            return None
        persistent_id = notebook_cell_id(cell)
        if persistent_id is None:
            # cells from notebooks older than nbformat 4.5 carry no id
            logger.warning("ignoring notebook cell without an id: %r", cell)
            return None
        return cls.create(
            persistent_id,
            _join_source(cell.get("source", "")),
            execution_count=cell.get("execution_count"),
            has_error=has_error,
            cell_type=cell_type,
        )

    def __repr__(self) -> str:
        return "<%s[id=%s,event=%s,ctr=%s]>" % (
            self.__class__.__name__,
            self.persistent_id,
            self.execution_event_id,
            self.execution_count,
        )
