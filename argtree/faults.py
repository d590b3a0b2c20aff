"""
argtree faults (errors and warnings) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every diagnostic the
  package emits, grouped by domain.
- CommandException / CommandWarning: base types carrying a message plus
  options (code, title, hint, command, index, ...) that know how to render
  themselves with rich.
- CommandExit: an exception group bundling the faults of a failed parse, raised
  only when a host asks for it (Outcome.unwrap()). A console sink can
  write a caught group; rendering options reach every fault.
- HelpRequested: raised by Outcome.unwrap() when the parse stopped on --help.
- getdoc(): optional description lookup for a code from the host application.

Delivery
- Parsing never raises these: a Command writes each fault to its output sink
  (warnings to the warning channel, errors to the message channel) and keeps
  the errors on the returned Outcome.
- str(fault) is the bare message, which is what plain callback sinks receive;
  rich consoles use __rich__ for the full header / message / hint layout.

Host hooks (looked up in __main__)
- __styles__: overrides for the style palette.
- __codes__: mapping FaultCode → label, replacing the numeric code in headers.
- __docs__: mapping FaultCode → documentation string (see getdoc()).
"""
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping
    - binding errors (111xx): options and positionals that cannot be bound.
    - registration warnings (121xx): specs or sub-commands that were refused.
    """
    # --- option binding errors (1111x) ---
    UNKNOWN_OPTION              = 11111
    MALFORMED_CHAIN             = 11112
    MISSING_VALUE               = 11113
    NOT_ENOUGH_VALUES           = 11114
    MINIMUM_NOT_MET             = 11115
    MAXIMUM_EXCEEDED            = 11116
    UNCASTABLE_VALUE            = 11117

    # --- positional binding errors (1112x) ---
    MISSING_POSITIONAL          = 11121
    EXTRA_ARGUMENTS             = 11122

    # --- registration warnings (121xx) ---
    INVALID_NAME                = 12101
    DUPLICATE_NAME              = 12102
    INVALID_SHORT_NAME          = 12103
    DUPLICATE_SHORT_NAME        = 12104
    DUPLICATE_REF_NAME          = 12105
    MISPLACED_POSITIONAL        = 12106
    EMPTY_PREDICATE             = 12107
    DUPLICATE_PREDICATE         = 12108

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__ to
        override numeric ids with friendlier labels.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _render(fault, palette):
    """
    shared rich layout for errors and warnings: a "[ route — code | title ]"
    header, the message, then an arrowed hint. boxed in a Panel when fancy.
    """
    options = fault.options
    colorful = options.get("colorful", False)

    styles = defaultdict(str, palette | getattr(__import__("__main__"), "__styles__", {}))

    def styler(style):
        return styles[style] if colorful else ""

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if not colorful:
            return Text(str(fragment))
        if isinstance(fragment, Text):
            return fragment
        return Text(str(fragment), style)

    route = options.get("route") or getattr(options.get("command"), "predicate", "") or "argtree"

    header = Text.assemble(
        "[ ",
        text(route, styler("prog-name")),
        " — ",
        text(fault.code.normalize() if fault.code else "", styler("code")),
        " | ",
        text(fault.title.title(), styler("title")),
        " ]"
    )
    message = text(fault.message, styler("message"))
    renders = [message]
    if fault.hint:
        renders.append(Text.assemble(text(" → ", styler("hint-arrow")), text(fault.hint, styler("hint"))))

    if options.get("fancy", False):
        return Panel(Group(*renders), title=header, title_align="left")
    return Group(header, *renders)


class _Fault:
    """
    common surface of errors and warnings: message + read-only options.
    """

    def __init__(self, message, /, **options):
        assert isinstance(message, str)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    @property
    def code(self):
        return self.options.get("code")

    @property
    def title(self):
        return self.options.get("title", type(self).__name__)

    @property
    def hint(self):
        return self.options.get("hint")

    @property
    def command(self):
        return self.options.get("command")

    @property
    def index(self):
        return self.options.get("index")

    def __str__(self):
        return self.message

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class CommandException(_Fault, Exception):
    """
    a binding error: the current parse fails.
    """

    def __rich__(self):
        return _render(self, {
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "title": "bold #FF4DA6",  # friendly pinky title
            "message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        })


class UnknownOptionError(CommandException): ...
class MalformedChainError(CommandException): ...
class MissingValueError(CommandException): ...
class NotEnoughValuesError(CommandException): ...
class MinimumNotMetError(CommandException): ...
class MaximumExceededError(CommandException): ...
class UncastableValueError(CommandException): ...
class MissingPositionalError(CommandException): ...
class ExtraArgumentsError(CommandException): ...


class CommandWarning(_Fault, Warning):
    """
    a registration problem: the spec or sub-command was not added.
    """

    def __rich__(self):
        return _render(self, {
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #FFB400",  # amber fault code for warnings
            "title": "bold #FFC2E0",  # softer pinky title for warnings
            "message": "#D6D6DE",  # slightly lighter gray body
            "hint-arrow": "#B8EFAF dim",  # softer green arrow
            "hint": "italic #B8EFAF",  # softer green hint text
        })


class InvalidNameWarning(CommandWarning): ...
class DuplicateNameWarning(CommandWarning): ...
class InvalidShortNameWarning(CommandWarning): ...
class DuplicateShortNameWarning(CommandWarning): ...
class DuplicateRefNameWarning(CommandWarning): ...
class MisplacedPositionalWarning(CommandWarning): ...
class EmptyPredicateWarning(CommandWarning): ...
class DuplicatePredicateWarning(CommandWarning): ...


class CommandExit(ExceptionGroup[CommandException]):
    """
    the faults of one failed parse, raised by Outcome.unwrap().
    """

    def __new__(cls, exceptions, **options):
        return super().__new__(cls, "bad exit", tuple(exceptions))

    def __init__(self, exceptions, **options):
        super().__init__("bad exit", tuple(exceptions))
        self.options = MappingProxyType(options)

    def derive(self, exceptions):
        return type(self)(exceptions, **self.options)

    def __rich__(self):
        return Group(*self.exceptions)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(
            [exception.__replace__(**overrides) for exception in self.exceptions],
            **{**self.options, **overrides}
        )


class HelpRequested(Exception):
    """
    the parse stopped because help was requested (the help text was already written).
    """

    def __init__(self, command=Unset, /):
        super().__init__("help requested")
        self.command = command


def getdoc(code, /):
    """
    optional documentation fetch for a fault code.

    the host application may expose a __docs__ mapping in __main__ where keys
    are FaultCode instances and values are short documentation strings; None
    when absent.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    return getattr(__import__("__main__"), "__docs__", {}).get(code)


__all__ = (
    "FaultCode",

    "CommandException",
    "UnknownOptionError",
    "MalformedChainError",
    "MissingValueError",
    "NotEnoughValuesError",
    "MinimumNotMetError",
    "MaximumExceededError",
    "UncastableValueError",
    "MissingPositionalError",
    "ExtraArgumentsError",

    "CommandWarning",
    "InvalidNameWarning",
    "DuplicateNameWarning",
    "InvalidShortNameWarning",
    "DuplicateShortNameWarning",
    "DuplicateRefNameWarning",
    "MisplacedPositionalWarning",
    "EmptyPredicateWarning",
    "DuplicatePredicateWarning",

    "CommandExit",
    "HelpRequested",
    "getdoc",
)
