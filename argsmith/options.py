r"""
Argsmith option declarations.

Overview
- OptionKind: the closed set of value kinds (string, bool, integer, double, path).
- Option: one declared argument. A single tagged class: identity (name + flags),
  kind, requiredness, placement, default and current value. Kind-specific
  behaviour (coercion, satisfaction, path predicates) is dispatched with `match`
  on the kind instead of through subclasses.
- Factories: string(), boolean(), integer(), double(), path() build an Option of
  the matching kind.

Placement
- Positional iff the option has no flags and its declared name does not start
  with the short prefix ("width"); flagged otherwise ("-s", "--verbose").
- Positional options are always required.

Values
- The current value is distinct from the default; the effective value is
  `current if set else default`. Bool options fall back to False.
- set_value() takes an explicit list of raw tokens; its length is checked against
  the arity (nargs) before coercion. Coercion failures raise ValueError.
- set_default() accepts a value of the underlying type or a string that coerces.

Identity
- collides(other): the identity sets {name} | flags of both options intersect.
  This is what the parser uses for duplicate detection.
- matches(token): the token, stripped of the long or short prefix, equals the
  name or one of the flags.

Quick example:
    >>> samples = integer("samples", "s", "ns", required=True, default=10)
    >>> samples.usage()
    '-s, -ns, --samples'
    >>> samples.set_value(["16"])
    >>> samples.value
    16
"""
import enum
import functools
import operator
import os
import pathlib
import re
from collections.abc import Sequence

from rich.text import Text

from .utils import *


class OptionKind(enum.StrEnum):
    """
    value kinds an option can carry (fixed at construction).
    """
    STRING  = "string"
    BOOL    = "bool"
    INTEGER = "integer"
    DOUBLE  = "double"
    PATH    = "path"


def coerce(kind, token, /):
    """
    Convert one raw token into a value of the given kind.

    Raises ValueError when the token is not a literal of that kind; strings and
    paths accept any token verbatim.
    """
    match kind:
        case OptionKind.STRING | OptionKind.PATH:
            return token
        case OptionKind.BOOL:
            return truthy(token)
        case OptionKind.INTEGER:
            return as_integer(token)
        case OptionKind.DOUBLE:
            return as_double(token)
        case _:
            raise TypeError("unknown option kind: %r" % (kind,))


class OptionType(type):
    """
    Metaclass giving options stable, introspectable representations.

    Responsibilities
    - Expose every name listed in __introspectable__ as a read-only property
      backed by the matching private field (see mirror()).
    - Derive __typename__ from the class name for messages ("option").
    - Provide __repr__/__rich_repr__ driven by __displayable__ (or, when unset,
      __introspectable__).
    """
    __introspectable__ = ()
    __displayable__ = Unset

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
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_identity(cls, metadata, /):
    """
    Internal: normalize and validate the name, flags and prefix of an option.

    - prefix: non-empty string without blanks.
    - name: non-empty string; blanks are trimmed, inner spaces become hyphens and
      a leading run of the prefix is removed (the run itself marks the option
      as dashed, which makes it flagged).
    - flags: strings, each stripped of a leading prefix run, non-empty after
      normalization; duplicates are dropped keeping the first occurrence.
    - a flag that reads as a number once prefixed ("5", "inf", "nan") is
      rejected, since the parser always treats such tokens as values.

    Mutates metadata in place (adds the "dashed" key).
    """
    if not isinstance(prefix := metadata["prefix"], str):
        raise TypeError(f"{cls.__typename__} 'prefix' must be a string")
    elif not prefix or any(char.isspace() for char in prefix):
        raise ValueError(f"{cls.__typename__} 'prefix' must be a non-empty string without blanks")

    if not isinstance(name := metadata["name"], str):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    name = re.sub(r"\s+", "-", name.strip())
    metadata["dashed"] = name.startswith(prefix)
    while name.startswith(prefix):
        name = name.removeprefix(prefix)
    if not name:
        raise ValueError(f"{cls.__typename__} 'name' cannot be empty")
    metadata["name"] = name

    flags = []
    for flag in metadata["flags"]:
        if not isinstance(flag, str):
            raise TypeError(f"{cls.__typename__} flags must be strings")
        flag = flag.strip()
        while flag.startswith(prefix):
            flag = flag.removeprefix(prefix)
        if not flag:
            raise ValueError(f"{cls.__typename__} flags cannot be empty")
        elif any(char.isspace() for char in flag):
            raise ValueError(f"{cls.__typename__} flags cannot contain blanks")
        elif numeric(prefix + flag):
            raise ValueError(f"{cls.__typename__} flag {flag!r} reads as a number once prefixed")
        if flag not in flags:
            flags.append(flag)
    metadata["flags"] = tuple(flags)


def _sanitize_display(cls, metadata, /):
    """
    Internal: validate display-only metadata (metavar, descr).

    Both are optional; when provided they must be non-empty after trimming.
    """
    if not isinstance(metavar := metadata["metavar"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'metavar' must be a string")
    elif isinstance(metavar, str) and not (metavar := metavar.strip()):
        raise ValueError(f"{cls.__typename__} 'metavar' cannot be empty")
    metadata["metavar"] = coalesce(metavar)

    if not isinstance(descr := metadata["descr"], str | Text | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    metadata["descr"] = coalesce(descr)


def _sanitize_arity(cls, metadata, /):
    """
    Internal: validate the kind and arity of an option.

    - kind: an OptionKind (or its string value).
    - nargs: 1 for value kinds; bool options always take "?" (zero or one
      value). "*" and "+" are recognised but not supported.
    """
    try:
        kind = metadata["kind"] = OptionKind(metadata["kind"])
    except ValueError:
        raise ValueError(f"{cls.__typename__} 'kind' must be one of {", ".join(map(str, OptionKind))}") from None

    nargs = metadata["nargs"]
    if nargs in ("*", "+"):
        raise ValueError(f"{cls.__typename__} multi-value arity {nargs!r} is not supported")
    if kind is OptionKind.BOOL:
        if nargs not in (Unset, 1, "?"):
            raise ValueError(f"{cls.__typename__} bool options take zero or one value")
        metadata["nargs"] = "?"
    else:
        if nargs not in (Unset, 1):
            raise ValueError(f"{cls.__typename__} 'nargs' must be 1")
        metadata["nargs"] = 1


class Option(metaclass=OptionType):
    """
    One declared command-line argument.

    Properties
    - name: canonical name (spaces normalized to hyphens, prefix removed).
    - flags: short aliases without prefix (e.g. ("s", "ns")).
    - kind: OptionKind, immutable.
    - nargs: 1, or "?" for bool options.
    - positional: no flags and the declared name was not dashed.
    - required: explicitly required, or positional.
    - default / value: default and effective value (current ?? default).
    - has_value / is_satisfied / is_valid: derived predicates, never stored.
    """

    __introspectable__ = (
        "name",
        "flags",
        "kind",
        "nargs",
        "metavar",
        "descr",
        "prefix",
    )

    __displayable__ = (
        "name",
        "flags",
        "kind",
        "positional",
        "required",
        "default",
        "value",
    )

    def __init__(
            self,
            name,
            /,
            *flags,
            kind=OptionKind.STRING,
            required=False,
            default=Unset,
            metavar=Unset,
            descr=Unset,
            nargs=Unset,
            prefix="-",
    ):
        """
        Construct an option declaration.

        Parameters
        - name: str
          Canonical name; "output file" becomes "output-file", "--verbose"
          becomes "verbose" and marks the option as flagged.
        - flags: str
          Short aliases, with or without the prefix ("s" and "-s" are the same).
        - kind: OptionKind | str
          Value kind; defaults to string.
        - required: bool
          Explicit requiredness (positional options are required regardless).
        - default: Any
          Default value, coerced through set_default().
        - metavar / descr: str
          Display-only label and help text.
        - nargs: 1 | "?"
          Arity; "*" and "+" raise ValueError.
        - prefix: str
          Short-option prefix used to read the name and flags ("-").
        """
        metadata = {
            "name": name,
            "flags": flags,
            "kind": kind,
            "metavar": metavar,
            "descr": descr,
            "nargs": nargs,
            "prefix": prefix,
        }
        _sanitize_identity(type(self), metadata)
        _sanitize_display(type(self), metadata)
        _sanitize_arity(type(self), metadata)

        for name, object in metadata.items():
            setattr(self, "_" + name, object)

        self._required = bool(required)
        self._default = Unset
        self._value = Unset

        if default is not Unset:
            self.set_default(default)

    @property
    def positional(self):
        return not self._flags and not self._dashed

    @property
    def required(self):
        return self._required or self.positional

    @property
    def identities(self):
        """
        every string that identifies this option: its name and its flags.
        """
        return frozenset((self._name, *self._flags))

    @property
    def default(self):
        if self._kind is OptionKind.BOOL:
            return coalesce(self._default, False)
        return coalesce(self._default)

    @property
    def value(self):
        """
        effective value: the current value when assigned, else the default.
        """
        return coalesce(self._value, self.default)

    @property
    def has_value(self):
        return self._value is not Unset

    @property
    def is_satisfied(self):
        match self._kind:
            case OptionKind.BOOL:
                # an absent switch means "not passed", which only fails when explicitly required
                return self.has_value if self.required else True
            case _:
                return self.value is not None

    @property
    def is_valid(self):
        return self.is_satisfied or not self.required

    @property
    def label(self):
        """
        display label for usage lines: the metavar, or the name.
        """
        return self._metavar if self._metavar is not None else self._name

    def set_value(self, values, /):
        """
        Assign the current value from an explicit list of raw tokens.

        The number of tokens must fit the arity: exactly one for value kinds,
        zero or one for bool options (zero means the switch is on).

        Raises
        - TypeError: values is a bare string instead of a sequence.
        - ValueError: arity mismatch or a token that cannot be coerced; the
          current value is left untouched.
        """
        if isinstance(values, str) or not isinstance(values, Sequence):
            raise TypeError(f"{type(self).__typename__} values must be a sequence of strings")

        match self._nargs, len(values):
            case 1, 1:
                value = coerce(self._kind, values[0])
            case "?", 0:
                value = True
            case "?", 1:
                value = coerce(self._kind, values[0])
            case _, count:
                raise ValueError(f"{self._name!r} takes {"one value" if self._nargs == 1 else "at most one value"} but {count} were given")

        self._value = value

    def set_default(self, value, /):
        """
        Assign the default value.

        Accepted
        - None: clears the default.
        - a string: coerced like a command-line token (ValueError if it cannot).
        - a value of the underlying type: bool for bool, int for integer,
          int or float for double, os.PathLike for path.

        Raises TypeError for any other type (bool is never an integer here).
        """
        match self._kind, value:
            case _, None:
                default = Unset
            case _, str():
                default = coerce(self._kind, value)
            case OptionKind.BOOL, bool():
                default = value
            case OptionKind.INTEGER, int() if not isinstance(value, bool):
                if not INT64_MIN <= value <= INT64_MAX:
                    raise ValueError(f"{self._name!r} default is out of 64-bit range")
                default = value
            case OptionKind.DOUBLE, int() | float() if not isinstance(value, bool):
                try:
                    default = float(value)
                except OverflowError:
                    raise ValueError(f"{self._name!r} default is out of floating point range") from None
            case OptionKind.PATH, os.PathLike():
                default = os.fspath(value)
            case kind, _:
                raise TypeError(f"{self._name!r} default must be a {kind} value, not {type(value).__name__}")

        self._default = default

    def reset(self):
        """
        Forget the current value (the default is kept).
        """
        self._value = Unset

    def collides(self, other, /):
        """
        Return True when both options share their name or any flag.
        """
        if not isinstance(other, Option):
            raise TypeError("collides() argument must be an option")
        return bool(self.identities & other.identities)

    def matches(self, token, /, short="-", long="--"):
        """
        Return True when the token names this option.

        The long prefix is tried first, then the short one; a bare token is
        compared as-is. Matching is exact (case-sensitive).
        """
        if token.startswith(long):
            token = token.removeprefix(long)
        elif token.startswith(short):
            token = token.removeprefix(short)
        return bool(token) and token in self.identities

    def usage(self, short="-", long="--"):
        """
        Usage label: flags joined by ", " with the short prefix, then "--name"
        for flagged options or the bare name for positional ones.
        """
        parts = [short + flag for flag in self._flags]
        parts.append(self._name if self.positional else long + self._name)
        return ", ".join(parts)

    @property
    def path(self):
        """
        pathlib view of a path option's effective value (None when unset).
        """
        if self._kind is not OptionKind.PATH:
            raise TypeError(f"{self._name!r} is a {self._kind} option, not a path option")
        return pathlib.Path(value) if (value := self.value) is not None else None

    @property
    def exists(self):
        return (path := self.path) is not None and path.exists()

    @property
    def is_directory(self):
        return (path := self.path) is not None and path.is_dir()

    def __str__(self):
        return self.usage()


def string(name, /, *flags, **options):
    """build a string option."""
    return Option(name, *flags, kind=OptionKind.STRING, **options)


def boolean(name, /, *flags, **options):
    """build a bool option (a switch)."""
    return Option(name, *flags, kind=OptionKind.BOOL, **options)


def integer(name, /, *flags, **options):
    """build a 64-bit integer option."""
    return Option(name, *flags, kind=OptionKind.INTEGER, **options)


def double(name, /, *flags, **options):
    """build a floating point option."""
    return Option(name, *flags, kind=OptionKind.DOUBLE, **options)


def path(name, /, *flags, **options):
    """build a filesystem path option."""
    return Option(name, *flags, kind=OptionKind.PATH, **options)


__all__ = (
    # Types
    "OptionKind",
    "Option",

    # Functions
    "coerce",

    # Factories
    "string",
    "boolean",
    "integer",
    "double",
    "path",
)

# Keep the metaclass out of star-imports and documentation.
del OptionType
