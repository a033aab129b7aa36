# -*- coding: utf-8 -*-
import re
from typing import List

# the line terminators python source (and ast line numbers) recognize;
# str.splitlines also breaks on \x0c, \x1c, \x85, \u2028 and friends
_LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")


def source_lines(text: str) -> List[str]:
    """
    Like `text.splitlines()`, but breaking only where the python tokenizer
    does, so that line `n` here is line `n` of a parsed ast.
    """
    lines = _LINE_BREAK_RE.split(text)
    if lines[-1] == "":
        lines.pop()
    return lines
