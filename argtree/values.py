"""
argtree value kinds and typed value boxes.

Overview
- ValueKind: the closed set of seven kinds an argument can hold (four scalars
  and three one-dimensional arrays). Each kind knows its element kind, whether
  it is an array, and how to convert one raw token.
- ArgValue: the mutable box a parse writes into. One box is created per spec
  per invocation from the spec's default; every lookup key of that spec shares
  the same box, so a write through any alias is visible through all of them.

Conversion rules
- int    → ascii base-10 integer, surrounding whitespace allowed.
- float  → standard float parsing (locale invariant, ascii only, no "_").
- string → passed through unchanged.
- bool   → case-insensitive {true, t, y, yes} / {false, f, n, no}.

Arrays are all-or-nothing: every element is converted before anything is
written, so a failed set/append leaves the previous value untouched. Array
values are stored as tuples and append always builds a new tuple.
"""
import re
from collections.abc import Sequence
from enum import Enum

from .utils import Unset

_TRUTHY = frozenset({"true", "t", "y", "yes"})
_FALSY = frozenset({"false", "f", "n", "no"})
_INT = re.compile(r"\s*[+-]?[0-9]+\s*", re.ASCII)


def _to_int(raw):
    if not _INT.fullmatch(raw):
        raise ValueError("invalid literal for int() with base 10: %r" % raw)
    return int(raw, 10)


def _to_float(raw):
    # digit separators and non-ascii digits are python literal syntax only
    if "_" in raw or not raw.isascii():
        raise ValueError("could not convert string to float: %r" % raw)
    return float(raw)


def _to_string(raw):
    return raw


def _to_bool(raw):
    if (lowered := raw.lower()) in _TRUTHY:
        return True
    if lowered in _FALSY:
        return False
    raise ValueError("invalid literal for bool(): %r" % raw)


class ValueKind(Enum):
    """
    the kind of value an argument holds.

    members are (label, element label) pairs; scalar kinds are their own
    element kind, array kinds point at the scalar they are made of.
    """
    INT = ("int", "int")
    FLOAT = ("float", "float")
    STRING = ("string", "string")
    BOOL = ("bool", "bool")
    INT_ARRAY = ("int[]", "int")
    FLOAT_ARRAY = ("float[]", "float")
    STRING_ARRAY = ("string[]", "string")

    @property
    def label(self):
        return self.value[0]

    @property
    def element(self):
        return _LABELS[self.value[1]]

    @property
    def is_array(self):
        return self.element is not self

    def convert(self, raw, /):
        """
        convert one raw token with this kind's element rule.

        raises ValueError when the token does not parse and TypeError when it
        is not a string.
        """
        if not isinstance(raw, str):
            raise TypeError("%s conversion expects a string, not %s" % (self.label, type(raw).__name__))
        return _CONVERTERS[self.element](raw)

    def accepts(self, object, /):
        """
        whether a python object is a valid (already converted) value of this kind.
        """
        if self.is_array:
            return (
                isinstance(object, Sequence) and not isinstance(object, str)
                and all(map(self.element.accepts, object))
            )
        match self:
            case ValueKind.BOOL:
                return isinstance(object, bool)
            case ValueKind.INT:
                return isinstance(object, int) and not isinstance(object, bool)
            case ValueKind.FLOAT:
                return isinstance(object, int | float) and not isinstance(object, bool)
            case ValueKind.STRING:
                return isinstance(object, str)

    def normalize(self, object, /):
        """
        canonical stored form of an accepted value (arrays become tuples, ints
        given for floats become floats).
        """
        if self.is_array:
            return tuple(map(self.element.normalize, object))
        if self is ValueKind.FLOAT:
            return float(object)
        return object

    @classmethod
    def infer(cls, object, /):
        """
        infer the kind of a python default value.

        bool is tested before int (bool is an int subclass). sequences must be
        non-empty and homogeneous; anything else raises TypeError.
        """
        for kind in (cls.BOOL, cls.INT, cls.FLOAT, cls.STRING):
            if kind.accepts(object):
                return kind
        if isinstance(object, Sequence) and not isinstance(object, str) and object:
            for kind in (cls.INT_ARRAY, cls.FLOAT_ARRAY, cls.STRING_ARRAY):
                if kind.accepts(object):
                    return kind
        raise TypeError("cannot infer a value kind from %r" % (object,))

    def __repr__(self):
        return f"{type(self).__name__}.{self.name}"


_LABELS = {kind.label: kind for kind in ValueKind}

_CONVERTERS = {
    ValueKind.INT: _to_int,
    ValueKind.FLOAT: _to_float,
    ValueKind.STRING: _to_string,
    ValueKind.BOOL: _to_bool,
}


class ArgValue:
    """
    typed, mutable value box for one argument during one parse.

    attributes
    - kind: ValueKind (fixed at construction).
    - value: the current value (tuple for arrays) or None when unset.
    - has_value: True once a value is held, including a falsy default.

    set()/append() return True on success and False when a raw token does not
    convert; they raise TypeError when called with the wrong shape (a sequence
    for a scalar, append on a scalar) and AttributeError once frozen.
    """
    __slots__ = ("_kind", "_value", "_frozen")

    def __init__(self, kind, default=Unset, /):
        if not isinstance(kind, ValueKind):
            raise TypeError("argument value 'kind' must be a value kind")
        if default is not Unset and not kind.accepts(default):
            raise TypeError("argument value default %r is not a valid %s" % (default, kind.label))
        self._kind = kind
        self._value = default if default is Unset else kind.normalize(default)
        self._frozen = False

    @property
    def kind(self):
        return self._kind

    @property
    def value(self):
        return None if self._value is Unset else self._value

    @property
    def has_value(self):
        return self._value is not Unset

    @property
    def frozen(self):
        return self._frozen

    def _writable(self):
        if self._frozen:
            raise AttributeError("argument value is read-only once parsing finished")

    def _convert_all(self, raws):
        if isinstance(raws, str) or not isinstance(raws, Sequence):
            raise TypeError("%s values must be set from a sequence of strings" % self._kind.label)
        try:
            return tuple(map(self._kind.convert, raws))
        except ValueError:
            return Unset

    def set(self, raw, /):
        """
        replace the value from raw text (one string for scalars, a sequence of
        strings for arrays).
        """
        self._writable()
        if self._kind.is_array:
            if (converted := self._convert_all(raw)) is Unset:
                return False
            self._value = converted
            return True

        if not isinstance(raw, str):
            raise TypeError("%s values must be set from a single string" % self._kind.label)
        try:
            self._value = self._kind.convert(raw)
        except ValueError:
            return False
        return True

    def append(self, raws, /):
        """
        extend an array value with raw texts; a value-less box starts empty.
        """
        self._writable()
        if not self._kind.is_array:
            raise TypeError("cannot append to a %s value" % self._kind.label)
        if (converted := self._convert_all(raws)) is Unset:
            return False
        self._value = (() if self._value is Unset else self._value) + converted
        return True

    def mark(self, value, /):
        """
        store an already-typed value (used for presence flags).
        """
        self._writable()
        if not self._kind.accepts(value):
            raise TypeError("%r is not a valid %s" % (value, self._kind.label))
        self._value = self._kind.normalize(value)

    def freeze(self):
        self._frozen = True
        return self

    def __eq__(self, other):
        if not isinstance(other, ArgValue):
            return NotImplemented
        return (self._kind, self.has_value, self.value) == (other._kind, other.has_value, other.value)

    __hash__ = None

    def __repr__(self):
        if self._value is Unset:
            return f"arg-value({self._kind.label}, unset)"
        return f"arg-value({self._kind.label}, {self._value!r})"

    def __rich_repr__(self):
        yield "kind", self._kind.label
        yield "value", self.value
        yield "has_value", self.has_value


__all__ = (
    "ValueKind",
    "ArgValue",
)
