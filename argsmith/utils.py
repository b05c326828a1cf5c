"""
Argsmith utilities (internal helpers, carefully exposed)

Scope
- Small building blocks shared by the option model, the parser and the renderers.
- Public-but-internal leaning: stable enough for consumers, designed primarily
  to support the options/parser layers.

Overview
- UnsetType / Unset
  • Singleton sentinel to represent “value not provided” without conflating with None.
  • Falsey (bool(Unset) is False), printable as "Unset", and non-subclassable.

- coalesce(value, default=None)
  • Replace Unset with a concrete default, but preserve legitimate falsey values like None/0/"".

- rename(callable, name) / @rename("name")
  • Assign stable __name__/__qualname__ to generated callables for clean tracebacks.

- mirror("attr")
  • Read-only property factory exposing a private backing field (self._attr).

- pad(text, width)
  • Right-pad a label with spaces (help listings line up on the widest label).

- Token coercion
  • as_integer(token): strict signed 64-bit integer literal.
  • as_double(token): strict floating point literal (no underscores, no blanks).
  • numeric(token): True when the token is an integer or a double literal.
  • truthy(token): boolean literal coercion ("true", "1", "yes" → True).

Quick examples
    >>> coalesce(Unset, "fallback")
    'fallback'
    >>> numeric("-5"), numeric("-s")
    (True, False)
    >>> pad("-s, --samples", 16)
    '-s, --samples   '
"""
import builtins
import functools
import math
import re
from collections.abc import Sequence, Mapping, Set
from typing import final

INT64_MIN = -(1 << 63)
INT64_MAX = (1 << 63) - 1

_INTEGER = re.compile(r"[+-]?[0-9]+")
_DOUBLE = re.compile(r"[+-]?([0-9]+\.?[0-9]*|\.[0-9]+)([eE][+-]?[0-9]+)?|[+-]?(inf|infinity|nan)", re.IGNORECASE)

TRUTHS = frozenset({"true", "1", "yes"})
LITERALS = TRUTHS | {"false", "0", "no"}


@final
class UnsetType:
    """
    Internal sentinel type representing a value that was not provided.

    Used where None is a legitimate value but the API still needs to tell
    “not provided” apart from “provided as None” (defaults, overrides).

    Characteristics
    - Boolean-false: bool(Unset) is False, but it is distinct from None and 0.
    - Printable: repr(Unset) -> "Unset".
    - Singleton per process: UnsetType() always yields the same instance.
    """

    def __or__(self, other, /):
        try:
            return type(self) | other
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


def coalesce(object, default=None, /):
    """
    Resolve the Unset sentinel to a concrete default.

    Falsey values such as None, 0 or "" are preserved; only Unset is replaced.

    Examples
    - coalesce("name", "fallback") -> "name"
    - coalesce(Unset, "fallback")  -> "fallback"
    - coalesce(None, "fallback")   -> None
    """
    return object if object is not Unset else default


def rename(*parameters):
    """
    Set a stable __name__/__qualname__ on a callable, or return a decorator
    that will do so later.

    Forms
    - rename(callable, name) -> callable (renamed in place)
    - rename(name)           -> decorator
    """
    match len(parameters):
        case 2:
            callable, name = parameters
            if not builtins.callable(callable):
                raise TypeError("rename() first argument must be callable")
            if not isinstance(name, str):
                raise TypeError("rename() second argument must be a string")
            try:
                callable.__qualname__ = name
                callable.__name__ = name
            except (AttributeError, TypeError):
                raise TypeError("rename() first argument must be a updatable callable") from None
            return callable
        case 1:
            name, = parameters
            if not isinstance(name, str):
                raise TypeError("@rename() argument must be a string")

            def wrapper(callable):
                if not builtins.callable(callable):
                    raise TypeError("@rename() must be applied to a callable")
                return rename(callable, name)

            return rename(wrapper, "rename")
        case _:
            raise TypeError("rename takes 1 to 2 arguments but %d were given" % len(parameters))


def _detach(object):
    """
    Copy containers so callers never mutate internal state through a property.

    Sequences (other than strings) become tuples, mappings become dicts and
    sets become frozensets; scalars are returned as-is.
    """
    if isinstance(object, Sequence) and not isinstance(object, str):
        return tuple(map(_detach, object))
    elif isinstance(object, Mapping):
        return dict(zip(object.keys(), map(_detach, object.values())))
    elif isinstance(object, Set):
        return frozenset(map(_detach, object))
    return object


def mirror(name, /):
    """
    Define a read-only property that mirrors the private field "_{name}".

    Example
    - Given self._flags, declare flags = mirror("flags") to expose it safely.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _detach(getattr(self, "_" + name))

    return property(getter)


def pad(text, width, /, fill=" "):
    """
    Right-pad text up to width using fill (a single character).

    Text already wider than width is returned unchanged; a negative width
    yields an empty string.
    """
    if width < 0:
        return ""
    return text.ljust(width, fill)


def as_integer(token, /):
    """
    Coerce a token into a signed 64-bit integer.

    Only plain decimal literals with an optional sign are accepted ("23", "-5",
    "+7"); underscores, blanks and out-of-range values raise ValueError.
    """
    if not isinstance(token, str):
        raise TypeError("as_integer() argument must be a string")
    if not _INTEGER.fullmatch(token):
        raise ValueError("invalid integer literal: %r" % token)
    if not INT64_MIN <= (value := int(token)) <= INT64_MAX:
        raise ValueError("integer literal out of 64-bit range: %r" % token)
    return value


def as_double(token, /):
    """
    Coerce a token into a float.

    Accepts decimal and scientific literals plus inf/nan spellings; underscores
    and blanks (which float() tolerates) raise ValueError.
    """
    if not isinstance(token, str):
        raise TypeError("as_double() argument must be a string")
    if not _DOUBLE.fullmatch(token):
        raise ValueError("invalid floating point literal: %r" % token)
    value = float(token)
    if math.isinf(value) and "inf" not in token.lower():
        raise ValueError("floating point literal out of range: %r" % token)
    return value


def numeric(token, /):
    """
    Return True when the token parses as an integer or a double.

    The parser uses this to let negative numbers through as values: "-5" is a
    number, "-s" is a flag.
    """
    return bool(_INTEGER.fullmatch(token) or _DOUBLE.fullmatch(token))


def truthy(token, /):
    """
    Coerce a boolean literal: "true", "1" and "yes" (any case) are True,
    everything else is False.
    """
    return token.strip().lower() in TRUTHS


Unset = UnsetType()
"""
Internal sentinel for “not provided”.

Use Unset as a default when None is a valid value but you still need to
distinguish “no input” from “explicitly passed None”.
"""


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "mirror",
    "pad",
    "as_integer",
    "as_double",
    "numeric",
    "truthy",

    # Types
    "UnsetType",

    # Constants
    "Unset",
    "TRUTHS",
    "LITERALS",
    "INT64_MIN",
    "INT64_MAX",
)
