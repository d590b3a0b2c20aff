"""
argtree command layer: register arguments, compose sub-commands, parse tokens.

What this module provides
- Command: one node of a command tree. It owns
  • an option registry and a positional registry, each mapping every usable key
    (long name, short name, ref alias) to the one spec it names;
  • the ordered positional list (binding is first-declared-first-bound);
  • its sub-commands, keyed by predicate.
- ParseContext: the explicit state of one parse invocation.
- invoke(command, prompt): convenience runner (shell-like string, token list or
  sys.argv).

Parsing
    tokens[0] is the command's own predicate; the rest is scanned in phases:
    0. snapshot  one fresh ArgValue per spec, shared by all of its keys.
    1. sort      option candidates, plain arguments, "--", --help/-h and the
                 first sub-command predicate (which ends this level's scan).
    2. options   bound in order of appearance.
    3. positionals bound from the front of the plain-argument queue.
    4. delegate  the sub-command parses tokens[subcommand:].
    Any failing phase ends the parse.

Diagnostics
- Registration problems are warnings written to the output's warn channel;
  the offending spec is simply not registered.
- Binding problems are errors written to the output's write channel, followed
  by the usage line of the failing command. Messages lead with the token's
  ordinal position ("at third position"), counted from the first token after
  the root predicate.
- Nothing is raised while parsing; parse() returns an Outcome.

Quick start
    from argtree import Command, OptionSpec, ArgSpec, ValueKind, ConsoleOutput

    tool = Command("tool", output=ConsoleOutput())
    tool.add_option(OptionSpec("verbose", ValueKind.BOOL, False, short="v"))
    tool.add_positional(ArgSpec("files", ValueKind.STRING_ARRAY, min_args=1))

    if outcome := tool.parse(["tool", "-v", "a.txt", "b.txt"]):
        print(outcome.result["files"])  # ('a.txt', 'b.txt')
"""
import difflib
import shlex
import sys
from collections import deque
from collections.abc import Iterable
from types import MappingProxyType

from .arguments import ArgSpec, OptionSpec, valid_name
from .faults import *
from .formatting import helptext, usage
from .output import Output
from .results import ParseResult, Outcome
from .utils import *
from .values import ValueKind


def _snapshot(registry):
    """
    one fresh value box per distinct spec; every key of a spec gets that box.
    """
    boxes = {}
    for spec in registry.values():
        if spec not in boxes:
            boxes[spec] = spec.data()
    return {key: boxes[spec] for key, spec in registry.items()}


def _check_output(output):
    if not callable(getattr(output, "write", None)) or not callable(getattr(output, "warn", None)):
        raise TypeError("command 'output' must provide write() and warn() methods")


def _check_formatter(formatter):
    if formatter is not None and not all(callable(getattr(formatter, name, None)) for name in ("helptext", "usage")):
        raise TypeError("command 'formatter' must be None or provide helptext() and usage() methods")


class ParseContext:
    """
    state of one parse invocation.

    - tokens: the token list handed to this level (tokens[0] is the predicate).
    - offset: position of tokens[0] in the root token list (for messages).
    - options / positionals: key → ArgValue snapshots.
    - double_dash: index of the first "--", -1 when absent.
    - subcommand: index of the first sub-command predicate, -1 when absent.
    - bound: exclusive upper index for this level's own arguments.
    - candidates: indices of option tokens, in order.
    - plain: queue of plain-argument indices, in order.
    - faults: binding errors raised so far.
    """
    __slots__ = (
        "tokens",
        "offset",
        "options",
        "positionals",
        "double_dash",
        "subcommand",
        "bound",
        "candidates",
        "plain",
        "faults",
    )

    def __init__(self, command, tokens, offset=0):
        self.tokens = tokens
        self.offset = offset
        self.options = _snapshot(command._options)
        self.positionals = _snapshot(command._positionals)
        self.double_dash = -1
        self.subcommand = -1
        self.bound = len(tokens)
        self.candidates = []
        self.plain = deque()
        self.faults = []

    def position(self, index, /):
        return ordinal(self.offset + index)

    def marker(self, index, /):
        """
        whether tokens[index] ends a run of values: it starts with "-" and is
        not past the double dash (the "--" itself is a marker).
        """
        return self.tokens[index].startswith("-") and (self.double_dash == -1 or index <= self.double_dash)

    def gather(self, start, count, /):
        """
        indices of exactly 'count' values from 'start', or None when the run
        hits the bound or an option marker first.
        """
        indices = range(start, start + count)
        for index in indices:
            if index >= self.bound or self.marker(index):
                return None
        return list(indices)

    def consume(self, indices, /):
        for index in indices:
            if index in self.plain:
                self.plain.remove(index)

    def boxes(self):
        """
        distinct value boxes of both snapshots.
        """
        seen = {}
        for box in (*self.options.values(), *self.positionals.values()):
            seen.setdefault(id(box), box)
        return seen.values()


class Command:
    """
    a node of a command tree: argument registries, sub-commands and the parser.

    Parameters
    - predicate: the token selecting this command from its parent; the root
      may leave it empty.
    - output: sink with write()/warn() (see argtree.output); a silent Output()
      by default.
    - formatter: object with helptext(command) and usage(command) (see
      HelpFormatter); when unset, help requests write the semi-formatted
      helptext() and failures the plain usage() line.

    Every command registers a boolean "help"/"h" option at construction.
    """

    def __init__(self, predicate="", /, *, output=Unset, formatter=Unset):
        if not isinstance(predicate, str):
            raise TypeError("command 'predicate' must be a string")
        output = Output() if output is Unset else output
        _check_output(output)
        formatter = coalesce(formatter, None)
        _check_formatter(formatter)

        self._predicate = predicate
        self._output = output
        self._formatter = formatter
        self._parent = None
        self._options = {}
        self._positionals = {}
        self._ordered = []
        self._subcommands = {}

        self.add_option(OptionSpec("help", ValueKind.BOOL, False, short="h", help="shows this help text and exits."))

    # --- introspection ----------------------------------------------------------

    @property
    def predicate(self):
        return self._predicate

    @property
    def options(self):
        """
        distinct option specs in registration order.
        """
        return tuple(dict.fromkeys(self._options.values()))

    @property
    def positionals(self):
        """
        positional specs in declaration (binding) order.
        """
        return tuple(self._ordered)

    @property
    def subcommands(self):
        return MappingProxyType(self._subcommands)

    @property
    def parent(self):
        return self._parent

    @property
    def path(self):
        """
        commands from the root down to this one.
        """
        path = []
        command = self
        while command is not None:
            path.append(command)
            command = command._parent
        return path[::-1]

    @property
    def route(self):
        return " ".join(step.predicate for step in self.path if step.predicate) or "argtree"

    @property
    def output(self):
        return self._output

    @output.setter
    def output(self, output):
        _check_output(output)
        self._output = output
        for child in self._subcommands.values():
            child.output = output

    @property
    def formatter(self):
        return self._formatter

    @formatter.setter
    def formatter(self, formatter):
        _check_formatter(formatter)
        self._formatter = formatter
        for child in self._subcommands.values():
            child.formatter = formatter

    # --- registration -----------------------------------------------------------

    def _warn(self, warning, /, *, message, code, title, hint=None, **options):
        self._output.warn(warning(
            message,
            code=code,
            title=title,
            hint=hint,
            command=self,
            route=self.route,
            docs=getdoc(code),
            **options
        ))
        return False

    def _admit(self, spec, registry, category):
        """
        name checks shared by options and positionals.
        """
        if not valid_name(spec.name):
            return self._warn(
                InvalidNameWarning,
                message="%s name %r is invalid" % (category, spec.name),
                code=FaultCode.INVALID_NAME,
                title="invalid name",
                hint="names may only hold letters, digits, '-' and '_', and cannot start with '-'",
                argument=spec,
            )
        if spec.name in registry:
            return self._warn(
                DuplicateNameWarning,
                message="%s name %r is already in use by %r" % (category, spec.name, registry[spec.name].name),
                code=FaultCode.DUPLICATE_NAME,
                title="duplicate name",
                hint="the first %s registered under %r stays in effect" % (category, spec.name),
                argument=spec,
            )
        return True

    def _alias(self, spec, ref, registry, category):
        if not ref:
            return
        if not valid_name(ref):
            self._warn(
                InvalidNameWarning,
                message="reference name %r for %s %r is invalid" % (ref, category, spec.name),
                code=FaultCode.INVALID_NAME,
                title="invalid reference name",
                hint="the %s was registered without this reference name" % category,
                argument=spec,
            )
        elif ref in registry:
            self._warn(
                DuplicateRefNameWarning,
                message="reference name %r is already used by %s %r" % (ref, category, registry[ref].name),
                code=FaultCode.DUPLICATE_REF_NAME,
                title="duplicate reference name",
                hint="the %s was registered without this reference name" % category,
                argument=spec,
            )
        else:
            registry[ref] = spec

    def add_option(self, spec, /, ref=""):
        """
        register an option under its name, its short name and an optional ref
        alias. returns False (after a warning) when the option was refused.
        """
        if not isinstance(spec, OptionSpec):
            raise TypeError("add_option() argument must be an option-spec")
        if not isinstance(ref, str):
            raise TypeError("add_option() 'ref' must be a string")
        if not self._admit(spec, self._options, "option"):
            return False

        if spec.short is not None:
            if len(spec.short) != 1 or not spec.short.isalpha():
                return self._warn(
                    InvalidShortNameWarning,
                    message="option %r has invalid short name %r" % (spec.name, spec.short),
                    code=FaultCode.INVALID_SHORT_NAME,
                    title="invalid short name",
                    hint="short names are a single letter",
                    argument=spec,
                )
            if spec.short in self._options or spec.short == spec.name:
                owner = self._options[spec.short].name if spec.short in self._options else spec.name
                return self._warn(
                    DuplicateShortNameWarning,
                    message="option %r has short name %r already in use by %r" % (spec.name, spec.short, owner),
                    code=FaultCode.DUPLICATE_SHORT_NAME,
                    title="duplicate short name",
                    hint="pick another letter or leave the short name out",
                    argument=spec,
                )

        for key in spec.keys:
            self._options[key] = spec
        self._alias(spec, ref, self._options, "option")
        return True

    def add_positional(self, spec, /, ref=""):
        """
        register a positional after the ones already declared. a list-arity
        positional must be the last one. returns False (after a warning) when
        the positional was refused.
        """
        if not isinstance(spec, ArgSpec) or isinstance(spec, OptionSpec):
            raise TypeError("add_positional() argument must be an arg-spec")
        if not isinstance(ref, str):
            raise TypeError("add_positional() 'ref' must be a string")
        if not self._admit(spec, self._positionals, "positional"):
            return False

        if self._ordered and self._ordered[-1].is_list:
            return self._warn(
                MisplacedPositionalWarning,
                message="positional %r cannot follow list positional %r" % (spec.name, self._ordered[-1].name),
                code=FaultCode.MISPLACED_POSITIONAL,
                title="misplaced positional",
                hint="only one positional may take a variable number of values and it must be declared last",
                argument=spec,
            )

        self._positionals[spec.name] = spec
        self._ordered.append(spec)
        self._alias(spec, ref, self._positionals, "positional")
        return True

    def add_options(self, *specs):
        return [self.add_option(spec) for spec in specs]

    def add_positionals(self, *specs):
        return [self.add_positional(spec) for spec in specs]

    def add_subcommand(self, command, /):
        """
        attach a child command; it adopts this command's output and formatter.
        """
        if not isinstance(command, Command):
            raise TypeError("add_subcommand() argument must be a command")
        if command in self.path:
            raise ValueError("add_subcommand() cannot attach a command to itself or its descendants")
        if not command.predicate:
            return self._warn(
                EmptyPredicateWarning,
                message="sub-command predicate cannot be empty",
                code=FaultCode.EMPTY_PREDICATE,
                title="empty predicate",
                hint="give the sub-command the token that should select it",
            )
        if command.predicate in self._subcommands:
            return self._warn(
                DuplicatePredicateWarning,
                message="predicate %r is already assigned to another sub-command" % command.predicate,
                code=FaultCode.DUPLICATE_PREDICATE,
                title="duplicate predicate",
                hint="the first sub-command registered under %r stays in effect" % command.predicate,
            )

        if command._parent is not None:
            command._parent.remove_subcommand(command)
        self._subcommands[command.predicate] = command
        command._parent = self
        command.output = self._output
        command.formatter = self._formatter
        return True

    def remove_subcommand(self, command, /):
        """
        detach a child by object or predicate; False when it was not attached.
        """
        predicate = command.predicate if isinstance(command, Command) else command
        child = self._subcommands.get(predicate)
        if child is None or (isinstance(command, Command) and child is not command):
            return False
        del self._subcommands[predicate]
        child._parent = None
        return True

    # --- parsing ----------------------------------------------------------------

    def parse(self, tokens, /):
        """
        parse a token list whose first element is this command's predicate.

        returns an Outcome: SUCCESS with a frozen ParseResult, HELP after the
        help text was written, or FAILURE with the binding errors (already
        written, followed by this level's usage line).
        """
        if isinstance(tokens, str) or not isinstance(tokens, Iterable):
            raise TypeError("parse() argument must be a sequence of strings")
        tokens = list(tokens)
        if not all(isinstance(token, str) for token in tokens):
            raise TypeError("parse() argument must be a sequence of strings")
        return self._parse(tokens, 0)

    def _parse(self, tokens, offset):
        context = ParseContext(self, tokens, offset)

        if not self._categorize(context):
            return Outcome.help(self)

        if not self._bind_options(context) or not self._bind_positionals(context):
            self._output.write(usage(self) if self._formatter is None else self._formatter.usage(self))
            return Outcome.failure(context.faults)

        return self._delegate(context)

    def _help(self):
        self._output.write(helptext(self) if self._formatter is None else self._formatter.helptext(self))

    def _categorize(self, context):
        tokens = context.tokens
        for index in range(1, len(tokens)):
            token = tokens[index]
            if context.double_dash != -1:
                context.plain.append(index)
            elif token.startswith("-"):
                if token == "--":
                    context.double_dash = index
                elif token in ("--help", "-h"):
                    self._help()
                    return False
                else:
                    context.candidates.append(index)
            elif token in self._subcommands:
                context.subcommand = index
                break
            else:
                context.plain.append(index)
        context.bound = context.subcommand if context.subcommand != -1 else len(tokens)
        return True

    def _fail(self, context, error, /, *, message, code, title, hint=Unset, **options):
        """
        record and write one binding error; always returns False.
        """
        fault = error(
            message,
            code=code,
            title=title,
            hint=coalesce(hint, "try '%s --help' to see the expected usage" % self.route),
            command=self,
            route=self.route,
            docs=getdoc(code),
            **options
        )
        context.faults.append(fault)
        self._output.write(fault)
        return False

    def _store(self, context, spec, box, indices, label):
        """
        set or append the values at 'indices'; a conversion failure leaves the
        box untouched and names the first offending token.
        """
        raws = [context.tokens[index] for index in indices]
        if not spec.is_array:
            stored = box.set(raws[0])
        else:
            stored = (box.append if spec.append else box.set)(raws)
        if stored:
            context.consume(indices)
            return True
        for index, raw in zip(indices, raws):
            try:
                spec.kind.convert(raw)
            except ValueError:
                break
        return self._fail(
            context,
            UncastableValueError,
            message="value %r at %s position for %s is not a valid %s" % (
                raw, context.position(index), label, spec.kind.element.label
            ),
            code=FaultCode.UNCASTABLE_VALUE,
            title="invalid value",
            index=context.offset + index,
            argument=spec,
        )

    def _bounded(self, context, spec, count, label, start):
        """
        list arity check: min_args / max_args against the gathered count.
        """
        if spec.max_args != -1 and count > spec.max_args:
            return self._fail(
                context,
                MaximumExceededError,
                message="maximum array arguments exceeded: %s from %s position takes at most %d %s, got %d" % (
                    label, context.position(start), spec.max_args, pluralize("value", spec.max_args), count
                ),
                code=FaultCode.MAXIMUM_EXCEEDED,
                title="too many values",
                index=context.offset + start,
                argument=spec,
            )
        if spec.min_args != -1 and count < spec.min_args:
            return self._fail(
                context,
                MinimumNotMetError,
                message="minimum array arguments not met: %s from %s position takes at least %d %s, got %d" % (
                    label, context.position(start), spec.min_args, pluralize("value", spec.min_args), count
                ),
                code=FaultCode.MINIMUM_NOT_MET,
                title="not enough values",
                index=context.offset + start,
                argument=spec,
            )
        return True

    def _chain(self, context, index):
        """
        "-abc": every letter must be a boolean option; all become True.
        """
        token = context.tokens[index]
        for letter in token[1:]:
            spec = self._options.get(letter)
            if spec is None:
                return self._fail(
                    context,
                    MalformedChainError,
                    message="unknown flag %r in %r at %s position" % ("-" + letter, token, context.position(index)),
                    code=FaultCode.MALFORMED_CHAIN,
                    title="malformed flag chain",
                    index=context.offset + index,
                    input=token,
                )
            if spec.kind is not ValueKind.BOOL:
                return self._fail(
                    context,
                    MalformedChainError,
                    message="option %r in %r at %s position is not a flag" % ("-" + letter, token, context.position(index)),
                    code=FaultCode.MALFORMED_CHAIN,
                    title="malformed flag chain",
                    hint="only boolean options with short names may be chained like '-abcd'; use '-%s <value>' instead" % letter,
                    index=context.offset + index,
                    input=token,
                    argument=spec,
                )
            context.options[letter].mark(True)
        return True

    def _bind_options(self, context):
        tokens = context.tokens
        for index in context.candidates:
            token = tokens[index]
            long = token.startswith("--")
            key = token[2 if long else 1:]

            if not long and len(key) > 2:
                if not self._chain(context, index):
                    return False
                continue

            spec = self._options.get(key)
            if spec is None:
                suggestions = difflib.get_close_matches(key, self._options.keys(), 5)
                try:
                    hint = "did you mean %r? you can also run '%s --help' to see all options" % (
                        ("-" if len(suggestions[0]) == 1 else "--") + suggestions[0], self.route
                    )
                except IndexError:
                    hint = "try '%s --help' to see all available options" % self.route
                return self._fail(
                    context,
                    UnknownOptionError,
                    message="unknown option %r at %s position" % (token, context.position(index)),
                    code=FaultCode.UNKNOWN_OPTION,
                    title="unknown option",
                    hint=hint,
                    index=context.offset + index,
                    input=token,
                    suggestions=suggestions,
                )

            box = context.options[key]
            label = "option %r" % token

            if not spec.is_array:
                values = context.gather(index + 1, 1)
                if values is not None and box.set(tokens[values[0]]):
                    context.consume(values)
                    continue
                if spec.kind is ValueKind.BOOL:
                    # presence flag: the token stays a plain argument
                    box.mark(True)
                    continue
                if values is None:
                    return self._fail(
                        context,
                        MissingValueError,
                        message="option %r at %s position requires a value" % (token, context.position(index)),
                        code=FaultCode.MISSING_VALUE,
                        title="missing value",
                        hint="pass a %s after %r" % (spec.kind.label, token),
                        index=context.offset + index,
                        argument=spec,
                    )
                if not self._store(context, spec, box, values, label):
                    return False

            elif spec.well_defined:
                values = context.gather(index + 1, spec.max_args)
                if values is None:
                    return self._fail(
                        context,
                        NotEnoughValuesError,
                        message="option %r at %s position requires exactly %d %s" % (
                            token, context.position(index), spec.max_args, pluralize("value", spec.max_args)
                        ),
                        code=FaultCode.NOT_ENOUGH_VALUES,
                        title="not enough values",
                        index=context.offset + index,
                        argument=spec,
                    )
                if not self._store(context, spec, box, values, label):
                    return False

            else:
                end = index + 1
                while end < context.bound and not context.marker(end):
                    end += 1
                values = list(range(index + 1, end))
                if not self._bounded(context, spec, len(values), label, index + 1):
                    return False
                if not self._store(context, spec, box, values, label):
                    return False
        return True

    def _bind_positionals(self, context):
        plain = context.plain
        for spec in self._ordered:
            if not plain:
                break
            box = context.positionals[spec.name]
            label = "positional %r" % spec.name
            start = plain[0]

            if not spec.is_array:
                values = [start]
            elif spec.well_defined:
                if len(plain) < spec.max_args:
                    return self._fail(
                        context,
                        NotEnoughValuesError,
                        message="positional %r from %s position requires exactly %d %s, got %d" % (
                            spec.name, context.position(start), spec.max_args,
                            pluralize("value", spec.max_args), len(plain)
                        ),
                        code=FaultCode.NOT_ENOUGH_VALUES,
                        title="not enough values",
                        index=context.offset + start,
                        argument=spec,
                    )
                values = [plain[position] for position in range(spec.max_args)]
            else:
                values = list(plain)
                if not self._bounded(context, spec, len(values), label, start):
                    return False

            if not self._store(context, spec, box, values, label):
                return False

        if plain:
            return self._fail(
                context,
                ExtraArgumentsError,
                message="%d extra %s from %s position" % (
                    len(plain), pluralize("argument", len(plain)), context.position(plain[0])
                ),
                code=FaultCode.EXTRA_ARGUMENTS,
                title="extra arguments",
                hint="remove the extra values or run '%s --help' to see the expected usage" % self.route,
                index=context.offset + plain[0],
                arguments=tuple(context.tokens[index] for index in plain),
            )

        for spec in self._ordered:
            if not context.positionals[spec.name].has_value:
                return self._fail(
                    context,
                    MissingPositionalError,
                    message="missing positional argument %r" % spec.name,
                    code=FaultCode.MISSING_POSITIONAL,
                    title="missing positional",
                    argument=spec,
                )
        return True

    def _delegate(self, context):
        for box in context.boxes():
            box.freeze()

        if context.subcommand == -1:
            return Outcome.success(ParseResult(context.options, context.positionals))

        child = self._subcommands[context.tokens[context.subcommand]]
        outcome = child._parse(context.tokens[context.subcommand:], context.offset + context.subcommand)
        if not outcome:
            return outcome
        return Outcome.success(ParseResult(context.options, context.positionals, child.predicate, outcome.result))

    def __repr__(self):
        return "command(%r)" % self._predicate

    def __rich_repr__(self):
        yield self._predicate
        yield "options", self.options
        yield "positionals", self.positionals
        yield "subcommands", tuple(self._subcommands), ()


def invoke(command, prompt=Unset, /):
    """
    Convenience runner.

    Parameters
    - command: the root Command.
    - prompt:
      • Unset: parse sys.argv (argv[0] stands in for the predicate).
      • str: shell-like string split with shlex.split, prefixed with the
        command's predicate.
      • Iterable[str]: complete token list, used as-is.

    Returns the Outcome of command.parse().
    """
    if not isinstance(command, Command):
        raise TypeError("invoke() first argument must be a command")
    if prompt is Unset:
        tokens = list(sys.argv)
    elif isinstance(prompt, str):
        tokens = [command.predicate, *shlex.split(prompt)]
    elif isinstance(prompt, Iterable):
        tokens = list(prompt)
    else:
        raise TypeError("invoke() second argument must be a string or an iterable of strings")
    return command.parse(tokens)


__all__ = (
    "Command",
    "ParseContext",
    "invoke",
)
