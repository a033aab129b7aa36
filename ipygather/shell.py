# -*- coding: utf-8 -*-
import logging
from typing import TYPE_CHECKING, Callable, Optional

from ipygather.data_model.cell_record import CellRecord
from ipygather.gather import GatherProvider
from ipygather.line_magics import make_line_magic

if TYPE_CHECKING:
    from IPython import InteractiveShell
    from IPython.core.interactiveshell import ExecutionResult


logger = logging.getLogger(__name__)
logger.setLevel(logging.WARNING)


_POST_RUN_CELL_EVENT = "post_run_cell"


def make_post_run_cell_hook(
    provider: GatherProvider,
) -> Callable[["ExecutionResult"], None]:
    def _post_run_cell(result: "ExecutionResult") -> None:
        if not provider.enabled:
            return
        info = result.info
        if info is None or info.silent or info.raw_cell is None:
            return
        persistent_id = getattr(info, "cell_id", None)
        if persistent_id is None:
            persistent_id = result.execution_count
        if persistent_id is None:
            logger.debug("skipping run with neither a cell id nor a counter")
            return
        provider.log_record(
            CellRecord.create(
                persistent_id,
                info.raw_cell,
                execution_count=result.execution_count,
                has_error=not result.success,
            )
        )

    return _post_run_cell


def load_ipython_extension(ipy: "InteractiveShell") -> None:
    provider = GatherProvider.instance(parent=ipy)
    prev_hook: Optional[Callable] = getattr(provider, "_post_run_cell_hook", None)
    if prev_hook is not None:
        # already loaded into this shell
        return
    hook = make_post_run_cell_hook(provider)
    provider._post_run_cell_hook = hook
    ipy.events.register(_POST_RUN_CELL_EVENT, hook)
    ipy.register_magic_function(
        make_line_magic(provider), magic_kind="line", magic_name="gather"
    )


def unload_ipython_extension(ipy: "InteractiveShell") -> None:
    if not GatherProvider.initialized():
        return
    provider = GatherProvider.instance()
    hook = getattr(provider, "_post_run_cell_hook", None)
    if hook is not None:
        ipy.events.unregister(_POST_RUN_CELL_EVENT, hook)
        provider._post_run_cell_hook = None
