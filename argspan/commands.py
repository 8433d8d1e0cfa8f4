"""
Argspan command layer: register a grammar, then parse argument vectors with it.

What this module provides
- Command: a named set of flags and value-bearing arguments (one level deep).
- Parser: an optional global command plus the registered commands, and the
  parsing engine that turns an argument vector into a Result or a ParseError.

Parsing pipeline
- command resolution
  • no token after the program name, or a token starting with '-': the global
    command governs.
  • a token made of exactly one codepoint is looked up by short name; any other
    token by long name.
  • an unknown word is not an error here: the global command governs and the
    word is left in place (it becomes a positional input).
- dispatch (left to right over the remaining tokens)
  • '---…'  → malformed token.
  • '--…'   → long option: '--flag' or '--argument=value'.
  • '-…'    → short option(s): '-f', '-fgh' (flags only) or '-a value'.
  • other   → positional input, bound to the input slot.
- post-validation
  • every required argument must have been supplied at least once.
  • every flag/argument count must sit within its [min, max] bounds.

Positions
- every routine reports faults relative to the slice it scans and returns them
  (never raises); each caller relocates the fault by the base offset of its
  slice, so the fault handed to the user indexes the original vector.

Quick start
    from argspan import Parser, Command, Flag, Argument

    parser = Parser()
    build = parser.command("build", "b")
    build.flag("verbose", "v", max=3)
    build.argument("target", "t", metavar="NAME", required=True)
    parser.set_global_command(Command("main", flags=[Flag("version", "V")]))

    result = parser.parse(["tool", "build", "-vv", "--target=docs"])
    result.command.occurrences("verbose")  # 2
    result.command.get("target")           # 'docs'
"""
import logging
import shlex
import sys
from collections.abc import Iterable
from types import MappingProxyType

from .arguments import Flag, Argument, GrammarType, _sanitize_named_metadata, _sanitize_metadata
from .faults import *
from .results import *
from .utils import *

logger = logging.getLogger(__name__)


class Command(metaclass=GrammarType):
    """
    A named command owning an ordered set of flags and arguments.

    Registration
    - add_flag(flag) / add_argument(argument): register a prebuilt spec, return
      the command (chainable).
    - flag(...) / argument(...): build a spec, register it and return the spec.

    Invariants (checked at registration)
    - long names are unique within the flag set and within the argument set.
    - short names are unique within the flag set and within the argument set.
    - a flag and an argument may share a name; flags win during parsing.
    - once frozen (see Parser.freeze), registration raises RuntimeError.
    """

    __introspectable__ = (
        "longname",
        "shortname",
        "descr",
        "flags",
        "arguments",
        "frozen",
    )

    __displayable__ = (
        "longname",
        "shortname",
        "flags",
        "arguments",
    )

    def __new__(cls, longname, shortname=Unset, /, descr=Unset, *, flags=(), arguments=()):
        metadata = {
            "longname": longname,
            "shortname": shortname,
            "descr": descr,
        }
        _sanitize_named_metadata(cls, metadata)
        _sanitize_metadata(cls, metadata)

        if not isinstance(flags, Iterable) or not isinstance(arguments, Iterable):
            raise TypeError(f"{cls.__typename__} 'flags' and 'arguments' must be iterables")

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        self._flags = []
        self._arguments = []
        self._frozen = False

        for flag in flags:
            self.add_flag(flag)
        for argument in arguments:
            self.add_argument(argument)
        return self

    def _register(self, registry, spec, kind, /):
        if self._frozen:
            raise RuntimeError(f"command {self.longname!r} is frozen and cannot register new {kind.__typename__}s")
        if not isinstance(spec, kind):
            raise TypeError(f"add_{kind.__typename__}() argument must be a {kind.__typename__}")
        for registered in registry:
            if registered.longname == spec.longname:
                raise ValueError(
                    f"{kind.__typename__} name {spec.longname!r} is already in use in command {self.longname!r}"
                )
            if spec.shortname is not None and registered.shortname == spec.shortname:
                raise ValueError(
                    f"{kind.__typename__} short name {spec.shortname!r} is already in use in command {self.longname!r}"
                )
        registry.append(spec)
        return self

    def add_flag(self, flag, /):
        return self._register(self._flags, flag, Flag)

    def add_argument(self, argument, /):
        return self._register(self._arguments, argument, Argument)

    def flag(self, longname, shortname=Unset, /, *args, **kwargs):
        """
        Build a Flag from the given parameters, register it, and return it.
        """
        self.add_flag(flag := Flag(longname, shortname, *args, **kwargs))
        return flag

    def argument(self, longname, shortname=Unset, /, *args, **kwargs):
        """
        Build an Argument from the given parameters, register it, and return it.
        """
        self.add_argument(argument := Argument(longname, shortname, *args, **kwargs))
        return argument

    def freeze(self):
        self._frozen = True
        return self

    def find_flag(self, name, /):
        """
        Return the flag matching a long name (str) or a short codepoint (int), or None.
        """
        return next((flag for flag in self._flags if flag.matches(name)), None)

    def find_argument(self, name, /):
        """
        Return the argument matching a long name (str) or a short codepoint (int), or None.
        """
        return next((argument for argument in self._arguments if argument.matches(name)), None)


class _Binding:
    """
    Per-parse accumulator for the parameters bound to the governing command.

    Flags are merged: the first occurrence appends a ResultFlag, later ones bump
    its occurrence count in place. Every argument occurrence appends.
    """
    __slots__ = ("command", "parameters", "slots")

    def __init__(self, command):
        self.command = command
        self.parameters = []
        self.slots = {}

    def flag(self, flag, /):
        if (slot := self.slots.get(flag.longname)) is None:
            self.slots[flag.longname] = len(self.parameters)
            self.parameters.append(ResultFlag(flag.longname))
        else:
            self.parameters[slot] = self.parameters[slot]._replace(occurrence=self.parameters[slot].occurrence + 1)

    def argument(self, argument, value, /):
        if not argument.accepts(value):
            return InvalidValueError(argument.longname, value, type=ErrorType.ARGUMENT)
        self.parameters.append(ResultArgument(argument.longname, value))
        return None

    def input(self, token, /):
        self.parameters.append(ResultArgument(None, token))

    def occurrences(self, flag, /):
        if (slot := self.slots.get(flag.longname)) is None:
            return 0
        return self.parameters[slot].occurrence

    def supplied(self, argument, /):
        return sum(
            1 for parameter in self.parameters
            if isinstance(parameter, ResultArgument) and parameter.name == argument.longname
        )

    def build(self):
        return ResultCommand(
            self.command.longname,
            tuple(self.parameters),
            MappingProxyType({
                argument.longname: argument.default for argument in self.command.arguments if argument.has_default
            }),
        )


class Parser(metaclass=GrammarType):
    """
    Grammar holder and parsing engine.

    Grammar
    - commands: registered Command objects, in registration order.
    - global command: the fallback command; either a Command value or the long
      name of a registered command (resolved at parse time).

    Runtime options (used when surfacing faults through parse())
    - shell: print the fault with rich on stderr and exit instead of raising.
    - fancy: render the fault inside a panel.
    - colorful: use colour styles.

    Concurrency
    - the first parse (or an explicit freeze()) freezes the grammar: afterwards
      registration raises RuntimeError. Parsing keeps its state in locals, so a
      frozen parser can be shared between threads.
    """

    __introspectable__ = (
        "commands",
        "shell",
        "fancy",
        "colorful",
        "frozen",
    )

    def __new__(cls, *, shell=False, fancy=False, colorful=True):
        self = super().__new__(cls)
        self._commands = []
        self._global = Unset
        self._shell = bool(shell)
        self._fancy = bool(fancy)
        self._colorful = bool(colorful)
        self._frozen = False
        return self

    @property
    def global_command(self):
        """
        The resolved global command, or None when none is registered (or the
        registered long name matches no command).
        """
        if isinstance(self._global, Command):
            return self._global
        if isinstance(self._global, str):
            return next((command for command in self._commands if command.longname == self._global), None)
        return None

    def _ensure_mutable(self):
        if self._frozen:
            raise RuntimeError("parser is frozen and its grammar cannot be modified")

    def add_command(self, command, /):
        self._ensure_mutable()
        if not isinstance(command, Command):
            raise TypeError("add_command() argument must be a command")
        for registered in self._commands:
            if registered.longname == command.longname:
                raise ValueError(f"command name {command.longname!r} is already in use")
            if command.shortname is not None and registered.shortname == command.shortname:
                raise ValueError(f"command short name {command.shortname!r} is already in use")
        self._commands.append(command)
        return self

    def command(self, longname, shortname=Unset, /, *args, **kwargs):
        """
        Build a Command from the given parameters, register it, and return it.
        """
        self.add_command(command := Command(longname, shortname, *args, **kwargs))
        return command

    def set_global_command(self, command, /):
        """
        Register the fallback command, as a Command or as a registered long name.
        """
        self._ensure_mutable()
        if not isinstance(command, Command | str):
            raise TypeError("set_global_command() argument must be a command or a command name")
        self._global = command
        return self

    def freeze(self):
        """
        Freeze the parser and every command it can dispatch to.
        """
        if self._frozen:
            return self
        for command in self._commands:
            command.freeze()
        if isinstance(self._global, Command):
            self._global.freeze()
        self._frozen = True
        return self

    def _resolve_command(self, args):
        """
        Select the governing command.

        returns
        - (command, start) where start is the index of the first command token;
        - or a ParseError positioned in args.
        """
        index = 1
        if index < len(args) and not args[index].startswith("-"):
            token = args[index]
            data = utf8(token)
            if (length := utf8_char_length(data)) is None:
                return BadStringError(token, position=index)

            if len(data) == length:
                value = codepoint(data)
                found = next(
                    (command for command in self._commands
                     if command.shortname is not None and ord(command.shortname) == value),
                    None
                )
            else:
                found = next((command for command in self._commands if command.longname == token), None)

            if found is not None:
                logger.debug("command %r selected by %r", found.longname, token)
                return found, index + 1
            logger.debug("no command matches %r, falling back to the global command", token)

        if (command := self.global_command) is None:
            return NoGlobalCommandError(type=ErrorType.COMMAND, position=index)
        return command, index

    def _parse_long(self, token, command, binding):
        """
        Parse '--name' or '--name=value'. Returns (consumed, fault).
        """
        name, separator, value = token[2:].partition("=")
        value = value if separator else None

        if (flag := command.find_flag(name)) is not None:
            if value is not None:
                return 1, FlagAssignmentError(name, value, type=ErrorType.FLAG)
            binding.flag(flag)
            return 1, None

        if (argument := command.find_argument(name)) is not None:
            if value is None:
                return 1, MissingValueError(name, type=ErrorType.ARGUMENT)
            return 1, binding.argument(argument, value)

        return 1, UnknownParameterError(name, value, type=ErrorType.ARGUMENT)

    def _parse_short(self, token, following, command, binding):
        """
        Parse '-f', '-fgh' or '-a value'. Returns (consumed, fault).

        following is the next token of the stream, or Unset at the end of it.
        """
        name = token[1:]
        data = utf8(name)
        if (length := utf8_char_length(data)) is None:
            return 1, BadStringError(name, type=ErrorType.FLAG)

        if len(data) > length:
            # combined flags: every codepoint must name a flag
            offset = 0
            while offset < len(data):
                if (length := utf8_char_length(data[offset:])) is None:
                    return 1, BadStringError(name, type=ErrorType.FLAG)
                if (flag := command.find_flag(codepoint(data[offset:offset + length]))) is None:
                    return 1, UnknownParameterError(name, type=ErrorType.FLAG)
                binding.flag(flag)
                offset += length
            return 1, None

        value = codepoint(data)
        if (flag := command.find_flag(value)) is not None:
            binding.flag(flag)
            return 1, None

        if (argument := command.find_argument(value)) is not None:
            if following is Unset:
                return 1, MissingValueError(name, type=ErrorType.ARGUMENT)
            if (fault := binding.argument(argument, following)) is not None:
                # the rejected value is the token after the option
                return 2, fault.relocate(1)
            return 2, None

        return 1, UnknownParameterError(name, type=ErrorType.ARGUMENT)

    def _validate(self, command, binding):
        """
        Post-validation: required arguments first, then occurrence bounds.
        """
        supplied = {
            parameter.name for parameter in binding.parameters if isinstance(parameter, ResultArgument)
        }
        if missing := [
            argument.longname for argument in command.arguments
            if argument.required and argument.longname not in supplied
        ]:
            return RequiredArgumentError(missing[0], type=ErrorType.ARGUMENT, missing=missing)

        for flag in command.flags:
            count = binding.occurrences(flag)
            if count < flag.min or (flag.max is not None and count > flag.max):
                return OutOfBoundError(flag.longname, str(count), type=ErrorType.FLAG)

        for argument in command.arguments:
            count = binding.supplied(argument)
            if count and (count < argument.min or (argument.max is not None and count > argument.max)):
                return OutOfBoundError(argument.longname, str(count), type=ErrorType.ARGUMENT)

        return None

    def _parse_command(self, tokens, command):
        """
        Bind every token of the slice to the command.

        returns
        - a ResultCommand;
        - or a ParseError positioned in the slice.
        """
        binding = _Binding(command)

        index = 0
        while index < len(tokens):
            token = tokens[index]
            if token.startswith("---"):
                consumed, fault = 1, MalformedTokenError(token)
            elif token.startswith("--"):
                consumed, fault = self._parse_long(token, command, binding)
            elif token.startswith("-") and token != "-":
                following = tokens[index + 1] if index + 1 < len(tokens) else Unset
                consumed, fault = self._parse_short(token, following, command, binding)
            else:
                # positional input ('-' alone included, conventionally stdin)
                binding.input(token)
                consumed, fault = 1, None

            if fault is not None:
                return fault.relocate(index)
            index += consumed

        if (fault := self._validate(command, binding)) is not None:
            return fault
        return binding.build()

    def evaluate(self, args, /):
        """
        Parse an argument vector and return a Result or a ParseError.

        args[0] is the program name and is never matched against the grammar.
        Nothing is raised for user errors: the fault is returned, positioned in
        the original vector. The grammar is frozen on first use.
        """
        args = _tokenize(args, "evaluate")
        self.freeze()

        resolved = self._resolve_command(args)
        if isinstance(resolved, ParseError):
            return resolved
        command, start = resolved

        parsed = self._parse_command(args[start:], command)
        if isinstance(parsed, ParseError):
            return parsed.relocate(start)
        return Result(args[0], parsed)

    def parse(self, args=Unset, /):
        """
        Parse an argument vector and return a Result, surfacing faults.

        Parameters
        - args:
          • Unset: read sys.argv.
          • str: shell-like string; will be split via shlex.split (first item is
            the program name).
          • Iterable[str]: the argument vector itself.

        Faults are handed to trigger(): raised as ParseError, or printed and
        followed by sys.exit(1) when the parser runs in shell mode.
        """
        args = _tokenize(sys.argv if args is Unset else args, "parse")
        outcome = self.evaluate(args)
        if isinstance(outcome, ParseError):
            logger.debug("parse failed: %s", outcome)
            trigger(
                outcome,
                program=args[0],
                shell=self.shell,
                fancy=self.fancy,
                colorful=self.colorful
            )
        return outcome


def _tokenize(args, caller, /):
    """
    Normalize an argument vector into a tuple of strings (program name first).

    Raises
    - TypeError: when args is not a str or an iterable of str.
    - ValueError: when the vector is empty (the program name is mandatory).
    """
    if isinstance(args, str):
        tokens = tuple(shlex.split(args))
    elif isinstance(args, Iterable):
        tokens = tuple(args)
        if not all(isinstance(token, str) for token in tokens):
            raise TypeError(f"{caller}() argument must be a string or an iterable of strings")
    else:
        raise TypeError(f"{caller}() argument must be a string or an iterable of strings")

    if not tokens:
        raise ValueError(f"{caller}() argument must contain at least the program name")
    return tokens


__all__ = (
    "Command",
    "Parser",
)
