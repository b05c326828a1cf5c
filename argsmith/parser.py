r"""
Argsmith parser: register options, match raw tokens, validate.

What this module provides
- Parser: owns the ordered declared options plus the raw token vector and
  turns them into a read-only name → value mapping.

Lifecycle
- Construct from the raw argv (program name first) or from a description and
  an optional usage string; tokens can also be handed to parse() later.
- Register options with add_option()/add_options() before the first parse();
  registering afterwards raises LateRegistrationError.
- parse() resets every option's current value, runs the two passes and returns
  a fresh mapping. Calling it again with other tokens is idempotent per call.

Matching (two passes over argv[1:])
- Pass 1, flagged options, left to right:
  • "-h"/"--help" (any case) enters help mode, prints the help screen and stops
    the pass; validation is skipped and parse() returns an empty mapping.
  • a token that does not look like a flag is left for pass 2. A token looks
    like a flag when it starts with the short prefix and is not a number, so
    "-5" is a value and "-s" is a flag.
  • otherwise the token is resolved against the flagged options. The matched
    option consumes as many following non-flag tokens as its arity allows
    (one; bool switches only consume a boolean literal such as "true" or "0").
    A coercion failure raises InvalidValueTypeError.
- Pass 2, positionals: every token not consumed in pass 1 binds, in order, to
  the next declared positional option (indexing the positional subset, so
  flagged options declared in between never shift the binding). Unknown flags
  raise UnknownOptionError, surplus tokens raise UnexpectedPositionalError.

Validation
- is_valid is a read-only query: every declared option (help excluded) is
  satisfied or not required. parse() does not raise for unmet requirements
  unless the parser is strict; validate() raises MissingRequiredOptionsError
  on demand.

Quick start
    from argsmith import Parser, integer

    parser = Parser(["render", "800", "600", "-s", "16"], "render the current scene")
    parser.add_options(
        integer("width", descr="output width"),
        integer("height", descr="output height"),
        integer("samples", "s", required=True, descr="render samples"),
    )
    values = parser.parse()      # {'width': 800, 'height': 600, 'samples': 16}
    parser.is_valid              # True
"""
import copy
import shlex
import sys
from collections.abc import Sequence
from types import MappingProxyType

from rich.console import Console

from . import rendering
from .faults import *
from .options import Option, OptionKind, boolean
from .utils import *


class Parser:
    """
    Command-line parser over a set of declared options.

    Configuration (constructor keywords)
    - short_prefix / long_prefix: option prefixes ("-" / "--").
    - strict: raise MissingRequiredOptionsError from parse() when requirements
      are left unmet (default: report through is_valid / invalid_options).
    - shell: render faults and help with rich and exit the process (status 2
      for parsing faults, 1 for registration faults, 0 after help) instead of
      raising.
    - colorful / fancy: styling of rendered help and faults.
    """

    def __init__(
            self,
            argv=Unset,
            /,
            descr=Unset,
            usage=Unset,
            *,
            short_prefix="-",
            long_prefix="--",
            strict=False,
            shell=False,
            colorful=True,
            fancy=False,
    ):
        """
        Build a parser.

        Parameters
        - argv: Sequence[str] | str
          Raw tokens, program name first. A string is split shell-style.
        - descr: str
          Description shown in the help overview ("(No description)" if omitted).
        - usage: str
          Custom usage line replacing the generated one.
        - short_prefix / long_prefix: str
          Non-empty, blank-free and distinct option prefixes.
        - strict / shell / colorful / fancy: bool
          See the class documentation.
        """
        if not isinstance(short_prefix, str) or not isinstance(long_prefix, str):
            raise TypeError("parser prefixes must be strings")
        elif not short_prefix or not long_prefix or any(char.isspace() for char in short_prefix + long_prefix):
            raise ValueError("parser prefixes must be non-empty strings without blanks")
        elif short_prefix == long_prefix:
            raise ValueError("parser short and long prefixes must differ")

        if not isinstance(descr, str | Unset):
            raise TypeError("parser 'descr' must be a string")
        if not isinstance(usage, str | Unset):
            raise TypeError("parser 'usage' must be a string")
        elif isinstance(usage, str) and not (usage := usage.strip()):
            raise ValueError("parser 'usage' cannot be empty")

        self._short_prefix = short_prefix
        self._long_prefix = long_prefix
        self._descr = coalesce(descr, "(No description)")
        self._usage = coalesce(usage)
        self._strict = bool(strict)
        self._shell = bool(shell)
        self._colorful = bool(colorful)
        self._fancy = bool(fancy)

        self._helper = boolean("help", "h", descr="show help message and exit", prefix=short_prefix)
        self._options = [self._helper]
        self._tokens = Unset
        self._executable = None
        self._help_mode = False
        self._parsed = False
        self._result = MappingProxyType({})

        if argv is not Unset:
            self._load(argv)

    def __repr__(self):
        return "parser(name=%r, options=%r)" % (self.name, [option.name for option in self.options])

    def __str__(self):
        return self._descr

    # --- configuration -----------------------------------------------------

    name = property(lambda self: self._executable if self._executable is not None else "(none)")
    descr = property(lambda self: self._descr)
    custom_usage = property(lambda self: self._usage)
    short_prefix = property(lambda self: self._short_prefix)
    long_prefix = property(lambda self: self._long_prefix)
    strict = property(lambda self: self._strict)
    shell = property(lambda self: self._shell)
    colorful = property(lambda self: self._colorful)
    fancy = property(lambda self: self._fancy)
    helper = property(lambda self: self._helper)

    # --- queries ----------------------------------------------------------

    @property
    def options(self):
        """
        declared options in insertion order (the reserved help switch excluded).
        """
        return [option for option in self._options if option is not self._helper]

    @property
    def positional_options(self):
        return [option for option in self.options if option.positional]

    @property
    def optional_options(self):
        return [option for option in self.options if not option.positional]

    @property
    def required_options(self):
        return [option for option in self.options if option.required]

    @property
    def invalid_options(self):
        """
        options that are required but not satisfied (empty in help mode).
        """
        if self._help_mode:
            return []
        return [option for option in self.options if not option.is_valid]

    @property
    def is_valid(self):
        if self._help_mode:
            return True
        return all(option.is_valid for option in self.options)

    @property
    def help_mode(self):
        return self._help_mode

    @property
    def result(self):
        """
        mapping returned by the last parse() (empty before parsing or in help mode).
        """
        return self._result

    @property
    def usage(self):
        """
        usage line as plain text.
        """
        return rendering.usage(self, colorful=False).plain

    @property
    def help_text(self):
        """
        complete help screen as plain text.
        """
        return rendering.helper(self, colorful=False).plain

    def has_option(self, token, /):
        return self.get_option(token) is not None

    def get_option(self, token, /):
        """
        Return the declared option (help included) named by token, or None.

        The token may carry the long or short prefix, or none at all.
        """
        if not isinstance(token, str):
            raise TypeError("get_option() argument must be a string")
        for option in self._options:
            if option.matches(token, self._short_prefix, self._long_prefix):
                return option
        return None

    # --- registration -----------------------------------------------------

    def _admit(self, option, declared, /):
        """
        check that option can join declared (raises through trigger()).
        """
        if not isinstance(option, Option):
            raise TypeError("parser can only register options, not %s" % type(option).__name__)
        if self._parsed:
            return self.trigger(LateRegistrationError(
                "option %r was registered after parsing started" % option.name,
                title="late registration",
                docs=getdoc(FaultCode.LATE_REGISTRATION),
                hint="register every option before calling parse()",
                name=option.name,
            ))
        if option.prefix != self._short_prefix:
            raise ValueError("option %r uses prefix %r but the parser uses %r" % (option.name, option.prefix, self._short_prefix))
        for other in declared:
            if reserved := other is self._helper:
                # help detection ignores case, so "H" or "HELP" could never be matched
                clash = any(identity.lower() in other.identities for identity in option.identities)
            else:
                clash = option is other or option.collides(other)
            if clash:
                return self.trigger(ConflictingOptionError(
                    "option %r conflicts with %s option %r" % (option.name, "the reserved" if reserved else "the declared", other.name),
                    title="conflicting option",
                    docs=getdoc(FaultCode.CONFLICTING_OPTION),
                    hint="'help' and 'h' are reserved" if reserved else "give every option a distinct name and distinct flags",
                    name=option.name,
                    conflict=other.name,
                ))

    def add_option(self, option, /, required=None, default=Unset):
        """
        Register one option, optionally overriding its requiredness and default.

        Nothing is registered when the option conflicts with a declared one
        (ConflictingOptionError), when parsing already started
        (LateRegistrationError) or when the default does not fit the option's
        kind (TypeError / ValueError).

        Returns the registered option.
        """
        self._admit(option, self._options)
        if default is not Unset:
            option.set_default(default)
        if required is not None:
            option._required = bool(required)
        self._options.append(option)
        return option

    def add_options(self, *options):
        """
        Register several options atomically.

        Every option is checked against the declared ones and against the
        options before it in the same call; the first conflict raises and
        nothing from the batch is registered.

        Returns the registered options as a tuple.
        """
        admitted = []
        for option in options:
            self._admit(option, [*self._options, *admitted])
            admitted.append(option)
        self._options.extend(admitted)
        return tuple(admitted)

    # --- parsing ----------------------------------------------------------

    def _load(self, argv, /):
        if isinstance(argv, str):
            argv = shlex.split(argv)
        if not isinstance(argv, Sequence) or not all(isinstance(token, str) for token in argv):
            raise TypeError("parser argv must be a sequence of strings")
        self._tokens = list(argv)
        self._executable = self._tokens[0] if self._tokens else None

    def _flagged(self, token, /):
        """
        True when token looks like a flag: prefixed, longer than the bare
        prefix and not a number.
        """
        return (
            token.startswith(self._short_prefix) and
            len(token) > len(self._short_prefix) and
            not numeric(token)
        )

    def _helping(self, token, /):
        return token.lower() in (self._short_prefix + "h", self._long_prefix + "help")

    def _lookup(self, token, /):
        for option in self.optional_options:
            if option.matches(token, self._short_prefix, self._long_prefix):
                return option
        return None

    def _collect(self, option, tokens, start, /):
        """
        values following a matched flag, limited by the option's arity.
        """
        if start >= len(tokens) or self._flagged(tokens[start]):
            return []
        if option.kind is OptionKind.BOOL and tokens[start].lower() not in LITERALS:
            return []
        return [tokens[start]]

    def _assign(self, option, values, index, /):
        try:
            option.set_value(values)
        except ValueError:
            self.trigger(InvalidValueTypeError(
                "invalid %s value %r for %r at index %d" % (option.kind, values[0], option.name, index),
                title="invalid argument type",
                docs=getdoc(FaultCode.INVALID_VALUE_TYPE),
                hint="%r expects a %s value" % (option.name, option.kind),
                option=option,
                index=index,
                token=values[0],
            ))

    def parse(self, argv=Unset, /):
        """
        Parse raw tokens into a read-only mapping of option name → effective value.

        Parameters
        - argv: Sequence[str] | str
          Raw tokens, program name first. When omitted, the tokens given at
          construction are used, or sys.argv when there are none.

        Returns
        - MappingProxyType: every declared option (help excluded) whose
          effective value is not None; path values are strings. Empty in
          help mode.

        Raises
        - InvalidValueTypeError: a token could not be coerced (index is the
          token's position in argv).
        - UnknownOptionError: a flag names no declared flagged option.
        - UnexpectedPositionalError: more positional tokens than positional options.
        - MissingRequiredOptionsError: only when the parser is strict.
        """
        if argv is not Unset:
            self._load(argv)
        elif self._tokens is Unset:
            self._load(sys.argv)

        self._parsed = True
        self._help_mode = False
        self._result = MappingProxyType({})
        for option in self._options:
            option.reset()

        tokens = self._tokens
        matched = set()
        seen = set()

        # pass 1: flagged options
        index = 1
        while index < len(tokens):
            token = tokens[index]

            if self._helping(token):
                self.help()
                break

            if not self._flagged(token) or (option := self._lookup(token)) is None:
                index += 1
                continue

            if option.name in seen:
                self.trigger(DuplicatedOptionWarning(
                    "option %r given more than once at index %d, the last value wins" % (option.name, index),
                    title="duplicated option",
                    docs=getdoc(FaultCode.DUPLICATED_OPTION),
                    hint="pass %r only once" % token,
                    option=option,
                    index=index,
                ))
            seen.add(option.name)

            values = self._collect(option, tokens, index + 1)
            if values or option.kind is OptionKind.BOOL:
                self._assign(option, values, index + len(values))

            matched.update(range(index, index + 1 + len(values)))
            index += 1 + len(values)

        if self._help_mode:
            return self._result

        # pass 2: positional options, in declared order
        positionals = iter(self.positional_options)
        for index, token in enumerate(tokens[1:], 1):
            if index in matched:
                continue
            if self._flagged(token):
                self.trigger(UnknownOptionError(
                    "unknown option %r at index %d" % (token, index),
                    title="unknown option",
                    docs=getdoc(FaultCode.UNKNOWN_OPTION),
                    hint="try '%s %s' to see all available options" % (self.name, self._long_prefix + "help"),
                    token=token,
                    index=index,
                ))
                continue
            if (option := next(positionals, None)) is None:
                self.trigger(UnexpectedPositionalError(
                    "unexpected positional argument %r at index %d" % (token, index),
                    title="unexpected positional argument",
                    docs=getdoc(FaultCode.UNEXPECTED_POSITIONAL),
                    hint="%s takes %d positional argument(s)" % (self.name, len(self.positional_options)),
                    token=token,
                    index=index,
                ))
                continue
            self._assign(option, [token], index)

        self._result = MappingProxyType({
            option.name: value for option in self.options if (value := option.value) is not None
        })

        if self._strict:
            self.validate()

        return self._result

    def validate(self):
        """
        Raise MissingRequiredOptionsError when required options are unmet.

        No-op in help mode or when every option is valid.
        """
        if not (invalid := self.invalid_options):
            return
        names = tuple(option.name for option in invalid)
        self.trigger(MissingRequiredOptionsError(
            "missing required %s: %s" % ("option" if len(names) == 1 else "options", ", ".join(names)),
            title="missing required options",
            docs=getdoc(FaultCode.MISSING_REQUIRED_OPTIONS),
            hint="usage: %s" % self.usage,
            names=names,
        ))

    # --- output -----------------------------------------------------------

    def trigger(self, fault, /, **options):
        """
        Surface a fault with this parser's context (shell/fancy/colorful).

        In shell mode errors are preceded by the usage line on stderr and end
        the process; otherwise they are raised. Warnings are printed in shell
        mode and emitted through the warnings module otherwise.
        """
        if (
                not hasattr(fault, "__trigger__") or
                not callable(fault.__trigger__) or
                not hasattr(fault, "__replace__") or
                not callable(fault.__replace__)
        ):
            raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
        fault = copy.replace(fault, **options, parser=self, shell=self._shell, fancy=self._fancy, colorful=self._colorful)
        if self._shell and isinstance(fault, ParsingException):
            Console(stderr=True).print(rendering.usage(self, colorful=self._colorful))
        trigger(fault)

    def help(self):
        """
        Enter help mode and print the help screen (exits with status 0 in shell mode).
        """
        self._help_mode = True
        Console().print(rendering.helper(self, colorful=self._colorful))
        if self._shell:
            sys.exit(0)

    def dump(self):
        """
        Print every declared option with its parsing state (debugging aid).
        """
        Console().print(rendering.table(self, colorful=self._colorful))


__all__ = (
    "Parser",
)
