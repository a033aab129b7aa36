# -*- coding: utf-8 -*-
import logging
import textwrap
from typing import List, Optional

import black

from ipygather.data_model.cell_slice import CellSlice, SliceResult

logger = logging.getLogger(__name__)
logger.setLevel(logging.WARNING)


DEFAULT_CELL_MARKER = "# %%"

DEFAULT_PREAMBLE = textwrap.dedent(
    """\
    # This file was generated by ipygather, not written by hand.
    #
    # It holds only the code needed to reproduce the results of the cell that
    # was gathered, replayed in the order it originally ran. The analysis is
    # conservative: when it cannot prove a statement is unnecessary, the
    # statement is kept.

    """
)


def _format_group(cell_slice: CellSlice, blacken: bool) -> str:
    content = cell_slice.text
    if not blacken:
        return content
    try:
        return black.format_str(content, mode=black.FileMode()).strip()
    except Exception as e:
        logger.info("call to black failed with exception: %s", e)
        return content


def render(
    slice_result: SliceResult,
    cell_marker: str = DEFAULT_CELL_MARKER,
    preamble: Optional[str] = DEFAULT_PREAMBLE,
    blacken: bool = False,
) -> str:
    """
    Renders a slice as program text. Each execution's statements are preceded
    by `cell_marker` on a line of its own, so that the result can be reopened
    as a sequence of cells.

    Args:
        - slice_result (SliceResult): cell slices in execution order
        - cell_marker (str): opaque token written before each cell
        - preamble (str): header placed before the first cell, if any
        - blacken (bool): whether to format each cell with black

    Returns:
        - str: the program text, or the empty string for an empty slice
    """
    if len(slice_result) == 0:
        return ""
    chunks: List[str] = [preamble or ""]
    for cell_slice in slice_result:
        chunks.append(f"{cell_marker}\n{_format_group(cell_slice, blacken)}\n")
    return "".join(chunks)
