# -*- coding: utf-8 -*-
from typing import Optional

from IPython.core.inputtransformer2 import TransformerManager

from ipygather.utils.misc_utils import source_lines

# cell magics whose body is ordinary python run in the user namespace
PYTHON_CELL_MAGICS = frozenset({"capture", "prun", "time", "timeit"})


_TRANSFORMER_MANAGER = TransformerManager()


def transform_ipython_syntax(text: str) -> str:
    """
    Rewrites %magics, !shell escapes and friends into plain python, the same
    way the shell does before compiling a cell.
    """
    return _TRANSFORMER_MANAGER.transform_cell(text)


def python_cell_magic_body(text: str) -> Optional[str]:
    lines = source_lines(text.lstrip())
    if len(lines) == 0 or not lines[0].startswith("%%"):
        return None
    magic = lines[0][2:].split(maxsplit=1)
    if len(magic) == 0 or magic[0] not in PYTHON_CELL_MAGICS:
        return None
    return "\n".join(lines[1:])
