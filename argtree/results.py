"""
argtree parse results.

- ParseResult: the resolved values of one command level plus, when a
  sub-command matched, its predicate and its own ParseResult. Levels form a
  chain that mirrors the matched command path.
- Status / Outcome: what Command.parse() returns. Help requests and failures
  are not exceptions; Outcome.unwrap() converts them for hosts that prefer
  exception flow.

Every key of one spec (long name, short name, ref alias) maps to the same
ArgValue instance, and values are frozen once the parse that produced them
finished.
"""
from enum import Enum
from types import MappingProxyType

from .faults import CommandExit, HelpRequested
from .utils import Unset


class ParseResult:
    """
    resolved values of one command level.

    Lookup
    - result["count"] → the python value of option or positional "count"
      (options first); KeyError when neither has the key.
    - result.options["count"] / result.positionals["file"] → the ArgValue box.
    - "count" in result → True when either mapping has the key.
    """
    __slots__ = ("_options", "_positionals", "_predicate", "_result")

    def __init__(self, options, positionals, predicate=None, result=None):
        if (predicate is None) != (result is None):
            raise TypeError("parse result 'predicate' and 'result' must be given together")
        if result is not None and not isinstance(result, ParseResult):
            raise TypeError("parse result 'result' must be a parse result")
        self._options = MappingProxyType(dict(options))
        self._positionals = MappingProxyType(dict(positionals))
        self._predicate = predicate
        self._result = result

    @property
    def options(self):
        return self._options

    @property
    def positionals(self):
        return self._positionals

    @property
    def predicate(self):
        return self._predicate

    @property
    def result(self):
        return self._result

    def __getitem__(self, key):
        if key in self._options:
            return self._options[key].value
        if key in self._positionals:
            return self._positionals[key].value
        raise KeyError(key)

    def __contains__(self, key):
        return key in self._options or key in self._positionals

    def chain(self):
        """
        yield (predicate, result) for every matched sub-command, outermost first.
        """
        current = self
        while current._result is not None:
            yield current._predicate, current._result
            current = current._result

    def __eq__(self, other):
        if not isinstance(other, ParseResult):
            return NotImplemented
        return (
            dict(self._options) == dict(other._options)
            and dict(self._positionals) == dict(other._positionals)
            and self._predicate == other._predicate
            and self._result == other._result
        )

    __hash__ = None

    def __repr__(self):
        return "parse-result(options=%r, positionals=%r, predicate=%r, result=%r)" % (
            dict(self._options), dict(self._positionals), self._predicate, self._result
        )

    def __rich_repr__(self):
        yield "options", dict(self._options)
        yield "positionals", dict(self._positionals)
        yield "predicate", self._predicate, None
        yield "result", self._result, None


class Status(Enum):
    SUCCESS = "success"
    HELP = "help"
    FAILURE = "failure"


class Outcome:
    """
    return value of Command.parse().

    - status: Status.
    - result: the ParseResult on success, None otherwise.
    - faults: tuple of binding errors on failure, empty otherwise.
    - command: the command that wrote the help text on a help request.

    Only a successful outcome is truthy:
        if outcome := command.parse(tokens):
            run(outcome.result)
    """
    __slots__ = ("_status", "_result", "_faults", "_command")

    def __init__(self, status, result=None, faults=(), command=Unset):
        if not isinstance(status, Status):
            raise TypeError("outcome 'status' must be a status")
        if (status is Status.SUCCESS) != isinstance(result, ParseResult):
            raise TypeError("outcome 'result' must be a parse result exactly when successful")
        self._status = status
        self._result = result
        self._faults = tuple(faults)
        self._command = command

    @classmethod
    def success(cls, result, /):
        return cls(Status.SUCCESS, result)

    @classmethod
    def help(cls, command=Unset, /):
        return cls(Status.HELP, command=command)

    @classmethod
    def failure(cls, faults, /):
        return cls(Status.FAILURE, None, faults)

    @property
    def status(self):
        return self._status

    @property
    def result(self):
        return self._result

    @property
    def faults(self):
        return self._faults

    @property
    def command(self):
        return self._command

    def __bool__(self):
        return self._status is Status.SUCCESS

    def unwrap(self):
        """
        the ParseResult, or raise HelpRequested / CommandExit.
        """
        match self._status:
            case Status.SUCCESS:
                return self._result
            case Status.HELP:
                raise HelpRequested(self._command)
            case Status.FAILURE:
                raise CommandExit(self._faults)

    def __repr__(self):
        return "outcome(%s, result=%r, faults=%r)" % (self._status.name.lower(), self._result, self._faults)

    def __rich_repr__(self):
        yield "status", self._status
        yield "result", self._result, None
        yield "faults", self._faults, ()


__all__ = (
    "ParseResult",
    "Status",
    "Outcome",
)
