"""
argtree output sinks.

A command never prints by itself: every message (help text, usage lines,
binding errors) goes to its sink's write channel and every registration
problem to its warn channel. One sink is handed down the whole command tree,
so a single subscription sees the output of every sub-command.

- Output: plain callback sink; each channel receives one string.
- ConsoleOutput: rich console sink; faults render through __rich__.
"""
from rich.console import Console

from .utils import *


class Output:
    """
    callback sink.

    'write' and 'warn' are one-argument callables receiving str(message);
    an absent callback makes its channel a no-op.

    Examples
    - Output(print)                       # messages only, warnings dropped
    - Output(lines.append, lines.append)  # collect everything
    """

    def __init__(self, write=Unset, warn=Unset):
        for name, callback in (("write", write), ("warn", warn)):
            if callback is not Unset and not callable(callback):
                raise TypeError(f"output {name!r} must be callable")
        self._write = coalesce(write, None)
        self._warn = coalesce(warn, None)

    def write(self, message, /):
        if self._write is not None:
            self._write(str(message))

    def warn(self, message, /):
        if self._warn is not None:
            self._warn(str(message))

    def __repr__(self):
        return f"output(write={self._write!r}, warn={self._warn!r})"


class ConsoleOutput(Output):
    """
    rich console sink.

    - colorful: style faults with the fault palette (see faults.__styles__ hook).
    - fancy: box faults in a Panel.
    - stderr: send normal messages to stderr as well (warnings always go there).
    """

    def __init__(self, *, colorful=True, fancy=False, stderr=False):
        super().__init__()
        self.colorful = colorful
        self.fancy = fancy
        self._stdout = Console(stderr=stderr)
        self._stderr = Console(stderr=True)

    def _print(self, console, message):
        if hasattr(message, "__rich__") and callable(getattr(message, "__replace__", None)):
            console.print(message.__replace__(colorful=self.colorful, fancy=self.fancy))
        else:
            # help and usage text are laid out already
            console.print(str(message), markup=False, highlight=False, soft_wrap=True)

    def write(self, message, /):
        self._print(self._stdout, message)

    def warn(self, message, /):
        self._print(self._stderr, message)

    def __repr__(self):
        return f"console-output(colorful={self.colorful!r}, fancy={self.fancy!r})"


__all__ = (
    "Output",
    "ConsoleOutput",
)
