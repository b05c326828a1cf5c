"""
Argsmith faults (errors and warnings) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing issue.
  Codes are grouped by domain (registration, parsing, warnings).
- ParsingException / ParsingWarning: base types that carry a message plus
  read-only options (code, title, hint, context) and know how to render
  themselves with rich.
- trigger(): central entry point to surface any fault (respecting shell/fancy/colorful).
- getdoc(): optional description lookup for a code from the host application.

Taxonomy
- registration (exit status 1, raised by Parser.add_option/add_options)
  • ConflictingOptionError: name or flag collides with a declared option
    (including the reserved help/h).
  • LateRegistrationError: an option was added after parsing started.
- parsing (exit status 2, raised by Parser.parse/validate)
  • InvalidValueTypeError: a token could not be coerced into the option's kind.
  • MissingRequiredOptionsError: required options left unsatisfied.
  • UnknownOptionError: a flag-looking token that names no declared option.
  • UnexpectedPositionalError: more positional tokens than positional options.
- warnings
  • DuplicatedOptionWarning: an option was given more than once (last wins).

Integration
- The parser builds faults with their context and calls trigger(fault, **ctx).
- Outside shell mode exceptions are raised and warnings go through warnings.warn;
  in shell mode both are rendered via rich on stderr, and exceptions end the
  process with their exit status.
"""
import copy
import inspect
import sys
import warnings
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping
    - registration (211xx): CONFLICTING_OPTION, LATE_REGISTRATION
    - parsing (221xx): INVALID_VALUE_TYPE, MISSING_REQUIRED_OPTIONS,
      UNKNOWN_OPTION, UNEXPECTED_POSITIONAL
    - warnings (231xx): DUPLICATED_OPTION

    normalize() lets the host remap codes to its own labels while keeping
    the numeric identifiers stable.
    """
    # --- registration errors (21xxx) ---
    CONFLICTING_OPTION          = 21101
    LATE_REGISTRATION           = 21102

    # --- parsing errors (22xxx) ---
    INVALID_VALUE_TYPE          = 22101
    MISSING_REQUIRED_OPTIONS    = 22102
    UNKNOWN_OPTION              = 22103
    UNEXPECTED_POSITIONAL       = 22104

    # --- warnings (23xxx) ---
    DUPLICATED_OPTION           = 23101

    @property
    def status(self):
        """
        process exit status conventionally used for this fault (1 general, 2 usage).
        """
        return 2 if 22000 <= self.value < 23000 else 1

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _palette(defaults, /):
    return defaultdict(str, defaults | getattr(__import__("__main__"), "__styles__", {}))


def _prog(options, /):
    parser = options.get("parser")
    return getattr(__import__("__main__"), "__prog__", getattr(parser, "name", "argsmith"))


class ParsingException(Exception):
    """
    Base class of every argsmith error.

    The message is positional; everything else travels as keyword options and
    is exposed read-only through `options` (code, title, hint, docs, parser, shell,
    fancy, colorful and fault-specific context such as option/index/names).
    """
    code = Unset

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        self.message = message
        if "code" not in options and self.code is not Unset:
            options["code"] = self.code
        self.options = MappingProxyType(options)

    def __str__(self):
        return self.message if self.message is not Unset else ""

    @property
    def status(self):
        return self.options["code"].status if "code" in self.options else 1

    def __rich__(self):
        styles = _palette({
            "prog-name": "bold #E6E6F0",
            "code": "bold #00E5FF",
            "error-title": "bold #FF4DA6",
            "error-message": "#C8C8D0",
            "hint-arrow": "#9CE19C dim",
            "hint": "italic #9CE19C",
            "docs": "underline #00E5FF dim",
        })
        colorful = self.options.get("colorful", True)

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not colorful:
                return Text(str(fragment))
            return Text(str(fragment), styles[style])

        header = Text.assemble(
            "[ ",
            text(_prog(self.options), "prog-name"),
            " — ",
            text(self.options["code"].normalize() if "code" in self.options else "?", "code"),
            " | ",
            text(self.options.get("title", type(self).__name__).title(), "error-title"),
            " ]"
        )
        message = text(self, "error-message")
        hint = Text.assemble(text(" → ", "hint-arrow"), text(self.options.get("hint"), "hint"))
        body = [message, hint]
        if docs := self.options.get("docs"):
            body.append(text(docs, "docs"))

        if self.options.get("fancy", False):
            return Panel(Group(*body), title=header, title_align="left")

        return Group(header, *body)

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        sys.exit(self.status)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class InvalidValueTypeError(ParsingException):
    """a raw token could not be coerced into the option's kind."""
    code = FaultCode.INVALID_VALUE_TYPE

    @property
    def option(self):
        return self.options.get("option")

    @property
    def index(self):
        return self.options.get("index")


class MissingRequiredOptionsError(ParsingException):
    """required options remain unsatisfied after parsing."""
    code = FaultCode.MISSING_REQUIRED_OPTIONS

    @property
    def names(self):
        return tuple(self.options.get("names", ()))


class ConflictingOptionError(ParsingException):
    """an option's name or flag collides with a declared one."""
    code = FaultCode.CONFLICTING_OPTION

    @property
    def name(self):
        return self.options.get("name")


class LateRegistrationError(ParsingException):
    """options were registered after the parser started parsing."""
    code = FaultCode.LATE_REGISTRATION


class UnknownOptionError(ParsingException):
    """a flag-looking token names no declared option."""
    code = FaultCode.UNKNOWN_OPTION

    @property
    def token(self):
        return self.options.get("token")

    @property
    def index(self):
        return self.options.get("index")


class UnexpectedPositionalError(ParsingException):
    """a positional token has no positional option left to bind to."""
    code = FaultCode.UNEXPECTED_POSITIONAL

    @property
    def token(self):
        return self.options.get("token")

    @property
    def index(self):
        return self.options.get("index")


class ParsingWarning(Warning):
    """
    Base class of every argsmith warning (non-fatal, parsing continues).
    """
    code = Unset

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        self.message = message
        if "code" not in options and self.code is not Unset:
            options["code"] = self.code
        self.options = MappingProxyType(options)

    def __str__(self):
        return self.message if self.message is not Unset else ""

    def __rich__(self):
        styles = _palette({
            "prog-name": "bold #E6E6F0",
            "code": "bold #FFB400",
            "warning-title": "bold #FFC2E0",
            "warning-message": "#D6D6DE",
            "hint-arrow": "#B8EFAF dim",
            "hint": "italic #B8EFAF",
            "docs": "underline #00E5FF dim",
        })
        colorful = self.options.get("colorful", True)

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not colorful:
                return Text(str(fragment))
            return Text(str(fragment), styles[style])

        header = Text.assemble(
            "[ ",
            text(_prog(self.options), "prog-name"),
            " — ",
            text(self.options["code"].normalize() if "code" in self.options else "?", "code"),
            " | ",
            text(self.options.get("title", type(self).__name__).title(), "warning-title"),
            " ]"
        )
        message = text(self, "warning-message")
        hint = Text.assemble(text(" → ", "hint-arrow"), text(self.options.get("hint"), "hint"))
        body = [message, hint]
        if docs := self.options.get("docs"):
            body.append(text(docs, "docs"))

        if self.options.get("fancy", False):
            return Panel(Group(*body), title=header, title_align="left")

        return Group(header, *body)

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            return warnings.warn(self, stacklevel=len(inspect.stack()))
        console.print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class DuplicatedOptionWarning(ParsingWarning):
    """an option was given more than once; the last value wins."""
    code = FaultCode.DUPLICATED_OPTION


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see base classes).
    - options are merged into the fault via __replace__(**options) before triggering.
    - in shell mode, rendering happens via the rich console; otherwise exceptions
      are raised and warnings are emitted.

    typical options
    - parser, shell, fancy, colorful, title, hint, docs and any fault context
      (option/index/names/token).
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


def getdoc(code, /):
    """
    optional documentation fetch for a fault code.

    the host application may expose a __docs__ mapping in __main__ where keys
    are FaultCode members and values are short documentation strings; when
    nothing is found, None is returned.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "FaultCode",
    "ParsingException",
    "InvalidValueTypeError",
    "MissingRequiredOptionsError",
    "ConflictingOptionError",
    "LateRegistrationError",
    "UnknownOptionError",
    "UnexpectedPositionalError",
    "ParsingWarning",
    "DuplicatedOptionWarning",
    "trigger",
    "getdoc",
)
