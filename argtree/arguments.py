"""
argtree argument specifications.

Overview
- ArgSpec: description of one argument (used as-is for positionals): name,
  value kind, default, append mode, array arity bounds and help text.
- OptionSpec: an ArgSpec that may also be reached through a one-letter short
  name (e.g. "verbose" / "v" → --verbose / -v).

Arity
- min_args / max_args only matter for array kinds; -1 means unbounded.
- well_defined is derived (never stored): min_args == max_args and min_args > -1.
  Well-defined arrays take exactly that many values; every other array is a
  "list" that takes as many values as are available within its bounds.

Validation split
- Construction validates types and internal consistency and raises
  TypeError/ValueError (programming errors).
- Naming rules (charset, uniqueness, short-name shape) depend on the command the
  spec joins and are checked at registration, where they become warnings.

Specs compare by identity: a command stores one spec under several keys and
builds exactly one value box per spec for each parse.
"""
import functools
import operator
import re

from .utils import *
from .values import ValueKind, ArgValue

_NAME = re.compile(r"[^\W_]|[-_]")


def valid_name(name, /):
    """
    whether a name is usable as an argument key: non-empty, made of letters,
    digits, '-' and '_', and not starting with '-'.
    """
    return (
        isinstance(name, str)
        and bool(name)
        and not name.startswith("-")
        and all(_NAME.fullmatch(char) for char in name)
    )


class ArgumentType(type):
    """
    Metaclass wiring read-only fields and stable representations onto specs.

    - __typename__ is derived from the class name (camel-case split with
      hyphens) and used in messages.
    - every name in __introspectable__ becomes a read-only property over the
      backing field "_<name>" (see mirror()).
    - __repr__/__rich_repr__ list the introspectable fields.
    """
    __introspectable__ = ()

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}(%s)" % ", ".join(
                map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__())
            )
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in type(self).__introspectable__:
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: normalize and validate construction metadata in place.

    - name: must be a string (its charset is checked at registration).
    - kind: ValueKind, or inferred from default when Unset.
    - default: Unset or a value of the kind (arrays are stored as tuples).
    - append: bool, only meaningful for array kinds.
    - min_args/max_args: ints >= -1, ordered when both are bounded.
    - help: string.
    """
    if not isinstance(metadata["name"], str):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")

    kind, default = metadata["kind"], metadata["default"]
    if kind is Unset:
        if default is Unset:
            raise TypeError(f"{cls.__typename__} requires a 'kind' or a 'default' to infer it from")
        kind = ValueKind.infer(default)
    elif not isinstance(kind, ValueKind):
        raise TypeError(f"{cls.__typename__} 'kind' must be a value kind")

    if default is not Unset:
        if not kind.accepts(default):
            raise TypeError(f"{cls.__typename__} 'default' {default!r} is not a valid {kind.label}")
        default = kind.normalize(default)

    metadata["kind"] = kind
    metadata["default"] = default

    if not isinstance(metadata["append"], bool):
        raise TypeError(f"{cls.__typename__} 'append' must be a boolean")
    if metadata["append"] and not kind.is_array:
        raise TypeError(f"{cls.__typename__} 'append' is only valid for array kinds")

    for bound in ("min_args", "max_args"):
        if not isinstance(metadata[bound], int) or isinstance(metadata[bound], bool):
            raise TypeError(f"{cls.__typename__} {bound!r} must be an integer")
        if metadata[bound] < -1:
            raise ValueError(f"{cls.__typename__} {bound!r} must be -1 (unbounded) or non-negative")
    if -1 not in (metadata["min_args"], metadata["max_args"]) and metadata["min_args"] > metadata["max_args"]:
        raise ValueError(f"{cls.__typename__} 'min_args' cannot exceed 'max_args'")

    if not isinstance(metadata["help"], str):
        raise TypeError(f"{cls.__typename__} 'help' must be a string")


class ArgSpec(metaclass=ArgumentType):
    """
    Immutable description of one argument.

    Parameters
    - name: key the argument is registered and looked up under.
    - kind: ValueKind; inferred from default when omitted.
    - default: typed default value, or Unset for "no default".
    - append: arrays only; repeated occurrences extend instead of replace.
    - min_args / max_args: array arity bounds, -1 meaning unbounded.
    - help: free help text.

    Examples
    - ArgSpec("count", default=3)
    - ArgSpec("files", ValueKind.STRING_ARRAY, min_args=1)
    - ArgSpec("pair", ValueKind.INT_ARRAY, min_args=2, max_args=2)
    """

    __introspectable__ = (
        "name",
        "kind",
        "default",
        "append",
        "min_args",
        "max_args",
        "help",
    )

    def __init__(
            self,
            name,
            kind=Unset,
            /,
            default=Unset,
            *,
            append=False,
            min_args=-1,
            max_args=-1,
            help="",
    ):
        metadata = {
            "name": name,
            "kind": kind,
            "default": default,
            "append": append,
            "min_args": min_args,
            "max_args": max_args,
            "help": help,
        }
        _sanitize_metadata(type(self), metadata)
        for field, value in metadata.items():
            setattr(self, "_" + field, value)

    @property
    def well_defined(self):
        return self.min_args == self.max_args and self.min_args > -1

    @property
    def is_array(self):
        return self.kind.is_array

    @property
    def is_list(self):
        """
        array without a fixed element count.
        """
        return self.kind.is_array and not self.well_defined

    def data(self):
        """
        fresh value box seeded from the default (no value when there is none).
        """
        return ArgValue(self.kind, self.default)


class OptionSpec(ArgSpec):
    """
    ArgSpec reachable through an extra one-letter short name.

    'short' accepts a single character; Unset, "" and " " all mean "no short
    name" and are normalized to None. Whether the character is a letter is
    checked when the option is registered on a command.
    """

    __introspectable__ = ArgSpec.__introspectable__ + ("short",)

    def __init__(
            self,
            name,
            kind=Unset,
            /,
            default=Unset,
            *,
            short=Unset,
            append=False,
            min_args=-1,
            max_args=-1,
            help="",
    ):
        super().__init__(name, kind, default, append=append, min_args=min_args, max_args=max_args, help=help)
        if not isinstance(short, str | UnsetType):
            raise TypeError(f"{type(self).__typename__} 'short' must be a string")
        # " " is the conventional "no short name" marker
        self._short = coalesce(short, "").strip() or None

    @property
    def keys(self):
        """
        the lookup keys this option occupies by itself (name, then short name).
        """
        return (self.name,) if self.short is None else (self.name, self.short)


__all__ = (
    "ArgumentType",
    "ArgSpec",
    "OptionSpec",
    "valid_name",
)
