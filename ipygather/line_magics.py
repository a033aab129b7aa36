# -*- coding: utf-8 -*-
import json
import shlex
import sys
from typing import TYPE_CHECKING, Callable, Optional, Tuple

from ipygather.types import IdType
from ipygather.utils.magic_parser import MagicParser

if TYPE_CHECKING:
    from ipygather.data_model.cell_slice import SliceResult
    from ipygather.gather import GatherProvider


_GATHER_LINE_MAGIC = "gather"


_USAGE = """Options:
[enable|disable]
    - Toggle logging of executed cells. On by default.

reset:
    - Forget every execution logged so far.

settings:
    - Print the current gather settings.

[<cell_id>] [--event <event_id>] [--blacken] [--marker <marker>]:
    - Print the code needed to reproduce the latest execution of <cell_id>
      (or the given execution event, or else the most recently run cell).

Append `> <path>` to any of the above to write the output to a file instead.
""".strip()


print_ = print


def warn(*args, **kwargs):
    print_(*args, file=sys.stderr, **kwargs)


_GATHER_PARSER = MagicParser("gather", usage="Usage: %gather [cell_id] [options]")
_GATHER_PARSER.add_argument("cell_id", nargs="?", type=str, default=None)
_GATHER_PARSER.add_argument("--event", type=str, default=None)
_GATHER_PARSER.add_argument("--blacken", action="store_true")
_GATHER_PARSER.add_argument("--marker", type=str, default=None)


def split_redirect(line: str) -> Tuple[str, Optional[str]]:
    """
    Splits `cmd args > path` at the first `>` outside of quotes. Returns the
    command part and the path, or None when there is no redirect.
    """
    quote = None
    for idx, ch in enumerate(line):
        if quote is not None:
            if ch == quote:
                quote = None
        elif ch in ("'", "\""):
            quote = ch
        elif ch == ">":
            tokens = shlex.split(line[idx + 1 :])
            if len(tokens) != 1:
                raise ValueError("expected exactly one path after `>`")
            return line[:idx], tokens[0]
    return line, None


def _resolve_persistent_id(provider: "GatherProvider", raw: str) -> IdType:
    # without a frontend cell id, executions are keyed by their int counter
    if provider.execution_log.latest_for(raw) is None and raw.isdigit():
        return int(raw)
    return raw


def toggle_logging(provider: "GatherProvider", cmd: str) -> str:
    provider.enabled = cmd in ("enable", "on")
    return "gather %s" % ("enabled" if provider.enabled else "disabled")


def reset_log(provider: "GatherProvider") -> str:
    provider.reset_log()
    return "gather log cleared"


def show_settings(provider: "GatherProvider") -> str:
    return json.dumps(provider.settings_json(), indent=2)


def gather_slice(provider: "GatherProvider", line: str) -> Optional[str]:
    try:
        args = _GATHER_PARSER.parse_args(shlex.split(line))
    except ValueError as e:
        warn(str(e).strip())
        warn(_USAGE)
        return None
    if args.help:
        return None
    slicer = provider.execution_slicer
    if args.event is not None:
        target = args.event
        slice_result: "SliceResult" = slicer.slice(args.event)
    elif args.cell_id is not None:
        target = args.cell_id
        slice_result = slicer.slice_latest_execution(
            _resolve_persistent_id(provider, args.cell_id)
        )
    elif provider.execution_log.is_empty:
        warn("No cells have been logged yet")
        return None
    else:
        target = "the last run cell"
        slice_result = slicer.slice(provider.execution_log.records[-1].execution_event_id)
    if len(slice_result) == 0:
        warn(f"Nothing to gather for {target}")
        return None
    return provider.render_slice(
        slice_result, cell_marker=args.marker, blacken=args.blacken or None
    )


def make_line_magic(provider: "GatherProvider") -> Callable[[str], None]:
    def _handle(cmd: str, line: str) -> Optional[str]:
        if cmd in ("enable", "disable", "on", "off"):
            return toggle_logging(provider, cmd)
        elif cmd in ("reset", "clear"):
            return reset_log(provider)
        elif cmd in ("settings", "show_settings"):
            return show_settings(provider)
        elif cmd in ("help", "usage"):
            warn(_USAGE)
            return None
        else:
            return gather_slice(provider, f"{cmd} {line}".strip())

    def _gather_magic(line: str) -> None:
        try:
            line, fname = split_redirect(line)
        except ValueError as e:
            warn(str(e))
            warn(_USAGE)
            return
        line = line.strip()
        try:
            cmd, rest = line.split(" ", 1)
        except ValueError:
            cmd, rest = line, ""

        outstr = _handle(cmd, rest)
        if outstr is None:
            return

        if fname is None:
            print_(outstr)
        else:
            with open(fname, "w") as f:
                f.write(outstr)

    _gather_magic.__name__ = _GATHER_LINE_MAGIC
    return _gather_magic
