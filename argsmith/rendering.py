"""
Help, usage and dump rendering (rich-based, color-aware).

Everything here is pure: the functions read a parser's declared options and
build rich renderables; nothing mutates parser state.

Layout of the help screen

    OVERVIEW:  <description>

    USAGE:  <prog> <width> <height> -s <samples>

    POSITIONAL ARGUMENTS:
      width    output width
      height   output height

    OPTIONAL ARGUMENTS:
      -h, --help          show help message and exit
      -s, -ns, --samples  render samples

Each listing is right-padded to the widest usage label of its own group.

Palette keys
- section, program-name, usage-option, usage-invalid, label, description
- dump-title, dump-invalid

Customization
- Define a mapping named __styles__ in __main__ to override any palette entry,
  and __prog__ to override the program name.
- When colorful is False, styling is suppressed entirely.
"""
from collections import defaultdict

from rich.table import Table
from rich.text import Text

from .options import OptionKind
from .utils import *

GUTTER = 2


def _styler(colorful, /):
    styles = defaultdict(str, {
        "section": "underline",
        "program-name": "bold",
        "usage-option": "",
        "usage-invalid": "bold red",
        "label": "bold #00E6FF",
        "description": "#9CA3AF",
        "dump-title": "bold",
        "dump-invalid": "bold red",
    } | getattr(__import__("__main__"), "__styles__", {}))

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if not colorful:
            return Text(str(fragment))
        if isinstance(fragment, Text):
            return fragment
        return Text(str(fragment), styles[style])

    return text


def program(parser, /):
    """
    program name shown in usage lines (__prog__ in __main__ wins).
    """
    return getattr(__import__("__main__"), "__prog__", parser.name)


def usage(parser, /, *, colorful=True):
    """
    Build the usage line.

    A custom usage string given to the parser is returned verbatim. Otherwise
    the program name is followed by every declared option (help excluded) in
    insertion order: "-s <samples>" for flagged options (bool switches show no
    placeholder), "<width>" for positional ones. Options that are currently
    invalid are highlighted.
    """
    text = _styler(colorful)

    if parser.custom_usage is not None:
        return text(parser.custom_usage)

    parts = [text(program(parser), "program-name")]
    for option in parser.options:
        style = "usage-option" if option.is_valid else "usage-invalid"
        placeholder = text("<%s>" % option.label, style)
        if option.positional:
            parts.append(placeholder)
            continue
        if option.flags:
            switch = parser.short_prefix + option.flags[0]
        else:
            switch = parser.long_prefix + option.name
        if option.kind is OptionKind.BOOL:
            parts.append(text(switch, style))
        else:
            parts.append(Text.assemble(text(switch, style), " ", placeholder))
    return Text(" ").join(parts)


def _listing(parser, options, text, /):
    labels = [option.usage(parser.short_prefix, parser.long_prefix) for option in options]
    width = max(map(len, labels), default=0) + GUTTER
    lines = []
    for label, option in zip(labels, options):
        lines.append(Text.assemble(
            "  ",
            text(pad(label, width), "label"),
            text(option.descr or "", "description"),
        ))
    return lines


def helper(parser, /, *, colorful=True):
    """
    Build the complete help screen as a single rich Text.

    Sections: overview (the parser description), usage, positional arguments
    (omitted when there are none) and optional arguments (always present, the
    reserved help switch included).
    """
    text = _styler(colorful)

    lines = [
        Text(""),
        Text.assemble(text("OVERVIEW", "section"), ":  ", parser.descr),
        Text(""),
        Text.assemble(text("USAGE", "section"), ":  ", usage(parser, colorful=colorful)),
    ]

    if positionals := parser.positional_options:
        lines.append(Text(""))
        lines.append(Text.assemble(text("POSITIONAL ARGUMENTS", "section"), ":"))
        lines.extend(_listing(parser, positionals, text))

    lines.append(Text(""))
    lines.append(Text.assemble(text("OPTIONAL ARGUMENTS", "section"), ":"))
    lines.extend(_listing(parser, [parser.helper, *parser.optional_options], text))
    lines.append(Text(""))

    return Text("\n").join(lines)


def table(parser, /, *, colorful=True):
    """
    Build a diagnostic table of every declared option and its parsing state.

    Columns: name, kind, positional, required, satisfied and effective value;
    required options that are not satisfied are highlighted.
    """
    text = _styler(colorful)

    renderable = Table(title=text("parser: %s" % parser.name, "dump-title"))
    for column in ("name", "kind", "positional", "required", "satisfied", "value"):
        renderable.add_column(column)

    for option in parser.options:
        satisfied = str(option.is_satisfied)
        renderable.add_row(
            option.name,
            str(option.kind),
            str(option.positional),
            str(option.required),
            text(satisfied, "dump-invalid") if not option.is_valid else satisfied,
            repr(option.value),
        )
    return renderable


__all__ = (
    "program",
    "usage",
    "helper",
    "table",
)
