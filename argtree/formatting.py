"""
argtree help and usage rendering.

Everything here is a pure function of a command's public enumerations
(Command.options and Command.positionals); nothing reads or writes parse state.

- usage(command): one line, "usage: <predicate> [<option>] ... <positional> ...".
- helptext(command): usage, then "Positional arguments" and "Optional arguments"
  blocks with each argument followed by its help text on the next line.
- HelpFormatter: the same blocks laid out as two side-by-side wrapped columns,
  measured with a pluggable width function (terminal cells by default).

Argument rendering
    --name|-s            boolean option (no placeholder)
    --count COUNT        scalar option
    --pair PAIR_0 PAIR_1 well-defined array
    FILES_0 (FILES_1 FILES_2)   list with min 1, max 3
    FILES_0 ...          list with min 1, unbounded
    (REST_0 ...)         list without minimum, unbounded
"""
from rich.cells import cell_len

from .arguments import OptionSpec
from .values import ValueKind

_RULE = "-" * 24


def _placeholders(spec):
    placeholder = spec.name.upper()
    if not spec.is_array:
        return [placeholder]

    def indexed(start, stop):
        return [f"{placeholder}_{index}" for index in range(start, stop)]

    if spec.well_defined:
        return indexed(0, spec.max_args)

    minimum = max(spec.min_args, 0)
    rendered = indexed(0, minimum)
    if spec.max_args == -1:
        rendered.append("..." if minimum else f"({placeholder}_0 ...)")
    elif spec.max_args > minimum:
        rendered.append("(%s)" % " ".join(indexed(minimum, spec.max_args)))
    return rendered


def argument(spec, /):
    """
    render one argument as it appears in usage and help listings.
    """
    if isinstance(spec, OptionSpec):
        head = f"--{spec.name}" if spec.short is None else f"--{spec.name}|-{spec.short}"
        if spec.kind is ValueKind.BOOL:
            return head
        return " ".join([head, *_placeholders(spec)])
    # positionals always show what they expect, booleans included
    return " ".join(_placeholders(spec))


def usage(command, /):
    parts = ["usage:"]
    if command.predicate:
        parts.append(command.predicate)
    parts.extend("[%s]" % argument(spec) for spec in command.options)
    parts.extend(argument(spec) for spec in command.positionals)
    return " ".join(parts)


def _sections(command):
    yield "Positional arguments", command.positionals
    yield "Optional arguments", command.options


def helptext(command, /):
    """
    semi-formatted help: one block per argument, help text on its own line.

    used whenever a command has no HelpFormatter, i.e. when the output width is
    unknown or cannot be measured.
    """
    lines = [usage(command)]
    for title, specs in _sections(command):
        lines += ["", title, _RULE]
        for spec in specs:
            lines.append(argument(spec))
            if spec.help:
                lines.append(spec.help)
            lines.append("")
        if lines[-1] == "":
            lines.pop()
    return "\n".join(lines)


class HelpFormatter:
    """
    two-column help layout ("wrap and crowd").

    Parameters
    - columns: total output width, in the units 'measure' returns.
    - measure: width of a string; rich.cells.cell_len by default, so wide
      characters count double. hosts drawing with proportional fonts can pass a
      pixel-width function together with a pixel 'columns'.

    Layout
    - argument column: widest rendered argument, capped at 3/8 of columns.
    - help column: 85% of what remains; the rest is the gap between columns.
    """

    def __init__(self, columns=80, measure=cell_len):
        if not isinstance(columns, int) or isinstance(columns, bool) or columns <= 0:
            raise TypeError("help formatter 'columns' must be a positive integer")
        if not callable(measure):
            raise TypeError("help formatter 'measure' must be callable")
        self.columns = columns
        self.measure = measure

    def wrap(self, text, width, /):
        """
        greedy word wrap by measured width; a word wider than the column gets
        a line of its own.
        """
        lines, words = [], []
        used = 0
        space = self.measure(" ")
        for word in text.split(" "):
            size = self.measure(word)
            if words and used + size > width:
                lines.append(" ".join(words))
                words, used = [], 0
            words.append(word)
            used += size + space
        lines.append(" ".join(words))
        return lines

    def crowd(self, left, left_width, right, right_width, gap, /):
        """
        lay two paragraphs side by side, the right one starting at a fixed offset.
        """
        lefts = self.wrap(left, left_width)
        rights = self.wrap(right, right_width) if right else [""]
        height = max(len(lefts), len(rights))
        lefts += [""] * (height - len(lefts))
        rights += [""] * (height - len(rights))

        space = self.measure(" ") or 1
        lines = []
        for left_line, right_line in zip(lefts, rights):
            if not right_line:
                lines.append(left_line)
                continue
            padding = max((left_width - self.measure(left_line) + gap) // space, 1)
            lines.append(left_line + " " * padding + right_line)
        return "\n".join(lines)

    def helptext(self, command, /):
        entries = {title: [(argument(spec), spec.help) for spec in specs] for title, specs in _sections(command)}

        widths = [self.measure(rendered) for rows in entries.values() for rendered, _ in rows]
        left_width = min(max(widths, default=0), self.columns * 3 // 8)
        right_width = int((self.columns - left_width) * 0.85)
        gap = self.columns - right_width - left_width

        lines = [usage(command)]
        for title, rows in entries.items():
            lines += ["", title, _RULE]
            lines.extend(self.crowd(rendered, left_width, help, right_width, gap) for rendered, help in rows)
        return "\n".join(lines)

    def usage(self, command, /):
        return usage(command)

    def __repr__(self):
        return f"help-formatter(columns={self.columns!r})"


__all__ = (
    "argument",
    "usage",
    "helptext",
    "HelpFormatter",
)
