# -*- coding: utf-8 -*-
import argparse


class MagicParser(argparse.ArgumentParser):
    """
    Argument parser for line magics. Malformed arguments raise ValueError
    instead of exiting, and `--help` prints help without exiting.
    """

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._help_printed = False

    def exit(self, status=0, message=None):
        if message is not None:
            raise ValueError(message)

    def error(self, message):
        raise ValueError(f"{self.prog}: error: {message}")

    def print_help(self, *args, **kwargs) -> None:
        super().print_help(*args, **kwargs)
        self._help_printed = True

    def parse_args(self, *args, **kwargs) -> argparse.Namespace:  # type: ignore
        ret = super().parse_args(*args, **kwargs)
        ret.help = self._help_printed
        self._help_printed = False
        return ret
