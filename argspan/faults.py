"""
Argspan parse faults and rendering.

Scope
- ErrorType: coarse classification of the offending element (argument, flag,
  command, or none).
- ErrorCode: canonical, stable numeric identifiers for every parse failure.
- ParseError and its subclasses: one class per code, carrying the offending
  argument name, the raw value (when applicable), the type, and the zero-based
  position of the offending token in the original argument vector.
- trigger(): central entry point to surface a fault (raise, or print and exit
  in shell mode).

Positions
- Parsing routines compute positions relative to the slice they scan and hand
  the fault back to their caller, which relocates it by the base offset of that
  slice. The position a caller finally observes always indexes the original
  argument vector.

UX goals
- Position-first messages: every message names the ordinal position of the
  offending token (“at second position”), args[0] being the program itself.
- Lowercased tone, one sentence, a single hint.
- Styles, program name and code labels can be overridden by the host through
  __styles__, __prog__ and __codes__ in __main__.
"""
import functools
import os.path
import sys
from collections import defaultdict
from enum import Enum, IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

console = Console(stderr=True)


class ErrorType(Enum):
    """
    kind of grammar element a fault refers to.
    """
    ARGUMENT = "argument"
    FLAG = "flag"
    COMMAND = "command"
    NONE = "none"


class ErrorCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping (by domain)
    - input (2110x): BAD_STRING, SYNTAX_ERROR
    - routing (2111x): NO_GLOBAL_COMMAND
    - parameters (2112x): UNKNOWN_PARAMETER, FLAG_WITH_VALUE, MISSING_VALUE, INVALID_VALUE
    - validation (2113x): REQUIRED_ARGUMENT, OUT_OF_BOUND
    """
    # --- input errors ---
    BAD_STRING        = 21101
    SYNTAX_ERROR      = 21102

    # --- routing errors ---
    NO_GLOBAL_COMMAND = 21111

    # --- parameter errors ---
    UNKNOWN_PARAMETER = 21121
    FLAG_WITH_VALUE   = 21122
    MISSING_VALUE     = 21123
    INVALID_VALUE     = 21124

    # --- post-validation errors ---
    REQUIRED_ARGUMENT = 21131
    OUT_OF_BOUND      = 21132

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels.
        """
        return str(getattr(sys.modules.get("__main__"), "__codes__", {}).get(self, self.value))


@functools.cache
def _ordinal(number):
    """
    Return a human-friendly ordinal label for a position.

    - 1..10 are rendered as words ("first"…"tenth").
    - Other numbers use numeric ordinals with correct English suffixes.
    """
    try:
        return (
            "zeroth", "first", "second", "third", "fourth", "fifth",
            "sixth", "seventh", "eighth", "ninth", "tenth",
        )[number]
    except IndexError:
        pass

    if 10 < number % 100 < 20:
        return f"{number}th"
    return f"{number}%s" % {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")


class ParseError(Exception):
    """
    base class of every parse fault.

    fields
    - argument: str, the offending name or token ("" when unknown).
    - value: str | None, the raw value involved, when applicable.
    - type: ErrorType.
    - code: ErrorCode (fixed per subclass).
    - position: int, index into the original argument vector.
    - missing: tuple[str, ...], every missing name (required-argument faults).

    options
    - rendering-only context merged by the parser before triggering: program,
      shell, fancy, colorful.
    """
    code = None
    title = "parse error"
    template = "cannot parse %(argument)r at %(ordinal)s position"
    hint = "check the command line and try again"

    def __init__(self, argument="", value=None, /, *, type=ErrorType.NONE, position=0, missing=(), **options):
        if not isinstance(type, ErrorType):
            raise TypeError(f"{self.__class__.__name__}() 'type' must be an ErrorType")
        super().__init__(argument, value)
        self.argument = argument
        self.value = value
        self.type = type
        self.position = position
        self.missing = tuple(missing)
        self.options = MappingProxyType(options)

    @property
    def message(self):
        return self.template % {
            "argument": self.argument,
            "value": self.value,
            "ordinal": _ordinal(self.position),
            "missing": ", ".join(map(repr, self.missing or (self.argument,))),
        }

    def relocate(self, offset, /):
        """
        return a copy whose position is shifted by offset (a slice's base index).
        """
        return self.__replace__(position=self.position + offset)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        fields = {
            "type": self.type,
            "position": self.position,
            "missing": self.missing,
        }
        argument = overrides.pop("argument", self.argument)
        value = overrides.pop("value", self.value)
        for name in fields.keys() & overrides.keys():
            fields[name] = overrides.pop(name)
        return type(self)(argument, value, **fields, **{**self.options, **overrides})

    def __eq__(self, other):
        if not isinstance(other, ParseError):
            return NotImplemented
        return (
            type(self) is type(other)
            and (self.argument, self.value, self.type, self.position, self.missing)
            == (other.argument, other.value, other.type, other.position, other.missing)
        )

    __hash__ = Exception.__hash__

    def __repr__(self):
        return "%s(%r, %r, type=%s, position=%d)" % (
            type(self).__name__, self.argument, self.value, self.type, self.position
        )

    def __str__(self):
        return self.to_string()

    def to_string(self):
        """
        plain-text rendering: "<code> | <title>: <message>".
        """
        return "%s | %s: %s" % (self.code.normalize(), self.title, self.message)

    def __rich__(self):
        main = sys.modules.get("__main__")
        colorful = self.options.get("colorful", True)

        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # green arrow
            "hint": "italic #9CE19C",  # green hint text
        } | getattr(main, "__styles__", {}))

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not colorful:
                return Text(str(fragment))
            return Text(str(fragment), styles[style])

        program = getattr(main, "__prog__", None) or os.path.basename(self.options.get("program") or "") or "argspan"

        header = Text.assemble(
            "[ ",
            text(program, "prog-name"),
            " — ",
            text(self.code.normalize(), "code"),
            " | ",
            text(self.title.title(), "error-title"),
            " ]"
        )
        message = text(self.message, "error-message")
        hint = Text.assemble(text(" → ", "hint-arrow"), text(self.hint, "hint"))

        if self.options.get("fancy", False):
            return Panel(Group(message, hint), title=header, title_align="left")
        return Group(header, message, hint)

    def __trigger__(self):
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        sys.exit(1)



class BadStringError(ParseError):
    code = ErrorCode.BAD_STRING
    title = "malformed string"
    template = "malformed utf-8 in %(argument)r at %(ordinal)s position"
    hint = "make sure the argument is valid utf-8 text"


class MalformedTokenError(ParseError):
    code = ErrorCode.SYNTAX_ERROR
    title = "malformed option"
    template = "too many leading dashes in %(argument)r at %(ordinal)s position"
    hint = "use '--name' for long options and '-x' for short ones"


class NoGlobalCommandError(ParseError):
    code = ErrorCode.NO_GLOBAL_COMMAND
    title = "missing command"
    template = "no command given at %(ordinal)s position and no global command is registered"
    hint = "start the command line with one of the registered command names"


class UnknownParameterError(ParseError):
    code = ErrorCode.UNKNOWN_PARAMETER
    title = "unknown option or flag"
    template = "unknown option or flag %(argument)r at %(ordinal)s position"
    hint = "check the spelling against the options registered for this command"


class FlagAssignmentError(ParseError):
    code = ErrorCode.FLAG_WITH_VALUE
    title = "flag cannot take a value"
    template = "flag %(argument)r at %(ordinal)s position cannot have a value (got %(value)r)"
    hint = "remove everything from '=' on"


class MissingValueError(ParseError):
    code = ErrorCode.MISSING_VALUE
    title = "missing value"
    template = "argument %(argument)r at %(ordinal)s position requires a value"
    hint = "use '--name=value' or '-n value'"


class InvalidValueError(ParseError):
    code = ErrorCode.INVALID_VALUE
    title = "invalid value"
    template = "value %(value)r for argument %(argument)r at %(ordinal)s position was rejected"
    hint = "pass a value accepted by this argument"


class RequiredArgumentError(ParseError):
    code = ErrorCode.REQUIRED_ARGUMENT
    title = "missing required argument"
    template = "required arguments missing: %(missing)s"
    hint = "add every required argument to the command line"


class OutOfBoundError(ParseError):
    code = ErrorCode.OUT_OF_BOUND
    title = "occurrence out of bounds"
    template = "%(argument)r was given %(value)s times, which is out of its allowed bounds"
    hint = "repeat the option within its allowed number of occurrences"


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see ParseError).
    - options are merged into the fault via __replace__(**options) before triggering.
    - in shell mode the fault is rendered via rich and the process exits;
      otherwise the fault is raised.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    fault.__replace__(**options).__trigger__()


__all__ = (
    "ErrorType",
    "ErrorCode",
    "ParseError",
    "BadStringError",
    "MalformedTokenError",
    "NoGlobalCommandError",
    "UnknownParameterError",
    "FlagAssignmentError",
    "MissingValueError",
    "InvalidValueError",
    "RequiredArgumentError",
    "OutOfBoundError",
    "trigger",
)
