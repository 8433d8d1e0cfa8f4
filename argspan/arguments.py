r"""
Argspan parameter specifications.

Overview
- Specs
  • Flag: named, presence-only switch (no payload), e.g. -v/--verbose.
  • Argument: named, value-bearing parameter, e.g. -o out.txt/--output=out.txt.

- Naming
  • longname: multi-codepoint identifier, invoked as --name.
  • shortname: a single Unicode codepoint, invoked as -x (flags combine: -xyz).

- Introspection & representation
  • GrammarType metaclass provides stable __repr__/__rich_repr__ and exposes the
    fields declared in __introspectable__ as read-only properties.

Metadata (sanitized on construction)
- Shared (all specs)
  • longname: str matching r"[^\W\d_](-?[^\W_]+)+" (two codepoints at least).
  • shortname: Unset | str holding exactly one printable codepoint (not '-', '=').
  • descr: Unset | str | Text, non-empty when provided.
- Occurrence bounds (Flag/Argument)
  • min: int >= 0 (defaults to 0).
  • max: Unset | int >= min (Unset means unbounded, exposed as None).
- Argument only
  • metavar: Unset | str, non-empty when provided.
  • validator: Unset | Callable[[str], bool] applied to each raw value.
  • default: any value used when the argument is absent (exposed as None when Unset).
  • required: bool, defaults to min > 0.

Quick example:
    >>> from argspan.arguments import Flag, Argument
    >>> verbose = Flag("verbose", "v", max=3)
    >>> output = Argument("output", "o", metavar="FILE", required=True)
"""
import functools
import operator
import re

from rich.text import Text

from .utils import *


class GrammarType(type):
    """
    Metaclass that turns grammar specs into introspectable, read-only records.

    Responsibilities
    - Expose selected fields as read-only properties using mirror() for all
      names listed in __introspectable__.
    - Provide stable, readable __repr__/__rich_repr__ implementations for
      diagnostics.

    Conventions
    - __typename__ is derived from the class name (camel-case split with hyphens)
      and used in messages.
    - __displayable__ (if set) narrows which properties are shown by __rich_repr__;
      otherwise __introspectable__ is used.
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
            **options
        )

        @rename("__repr__")
        def __repr__(self):
            """
            Return a concise, stable representation with key metadata.

            Example
            - flag(longname='verbose', shortname='v', ...)
            """
            return "%s(%s)" % (
                type(self).__typename__,
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            )
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_named_metadata(cls, metadata, /):
    r"""
    Internal: validate and normalize the long and short names of a spec.

    Rules
    - longname is required. It must be a string that, once trimmed, matches
      r"[^\W\d_](-?[^\W_]+)+": starts with a letter, at least two codepoints,
      single hyphens between segments, no underscores, no '='.
    - shortname is optional. When given it must be a string of exactly one
      codepoint that is printable, not whitespace, and neither '-' nor '='.

    Raises
    - TypeError: when a name is not a string.
    - ValueError: when a name is empty or fails validation.
    """
    if not isinstance(longname := metadata["longname"], str):
        raise TypeError(f"{cls.__typename__} 'longname' must be a string")
    elif not (longname := longname.strip()):
        raise ValueError(f"{cls.__typename__} 'longname' cannot be empty")
    elif not re.fullmatch(r"[^\W\d_](-?[^\W_]+)+", longname):
        raise ValueError(
            f"{cls.__typename__} 'longname' must be a multi-character shell-style name without dashes prefix"
        )
    metadata["longname"] = longname

    if not isinstance(shortname := metadata["shortname"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'shortname' must be a string")
    elif isinstance(shortname, str):
        if len(shortname) != 1:
            raise ValueError(f"{cls.__typename__} 'shortname' must be a single codepoint")
        elif codepoint(shortname) is None or not shortname.isprintable() or shortname.isspace():
            raise ValueError(f"{cls.__typename__} 'shortname' must be a printable codepoint")
        elif shortname in ("-", "="):
            raise ValueError(f"{cls.__typename__} 'shortname' cannot be {shortname!r}")
    metadata["shortname"] = coalesce(shortname)


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: normalize the description (shared by every spec, commands included).
    """
    if not isinstance(descr := metadata["descr"], str | Text | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    metadata["descr"] = coalesce(descr)


def _sanitize_bounds(cls, metadata, /):
    """
    Internal: validate occurrence bounds [min, max].

    - min: non-negative int (bool is rejected).
    - max: Unset (unbounded, stored as None) or int >= max(min, 1).
    """
    if isinstance(minimum := metadata["min"], bool) or not isinstance(minimum, int):
        raise TypeError(f"{cls.__typename__} 'min' must be an integer")
    elif minimum < 0:
        raise ValueError(f"{cls.__typename__} 'min' cannot be negative")

    if isinstance(maximum := metadata["max"], bool) or not isinstance(maximum, int | Unset):
        raise TypeError(f"{cls.__typename__} 'max' must be an integer")
    elif isinstance(maximum, int) and maximum < max(minimum, 1):
        raise ValueError(f"{cls.__typename__} 'max' must be positive and not lower than 'min'")
    metadata["max"] = coalesce(maximum)


def _sanitize_parametric_metadata(cls, metadata, /):
    """
    Internal: validate metadata for value-bearing specs (Argument).

    - metavar: Unset or a non-empty string after trimming.
    - validator: Unset or a callable predicate over the raw value string.
    - default: not validated; any value (including None) is accepted.
    - required: Unset means "min > 0"; explicit values are coerced to bool.
    """
    if not isinstance(metavar := metadata["metavar"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'metavar' must be a string")
    elif isinstance(metavar, str) and not (metavar := metavar.strip()):
        raise ValueError(f"{cls.__typename__} 'metavar' cannot be empty")
    metadata["metavar"] = coalesce(metavar)

    if metadata["validator"] is not Unset and not callable(metadata["validator"]):
        raise TypeError(f"{cls.__typename__} 'validator' must be callable")
    metadata["validator"] = coalesce(metadata["validator"])

    metadata["defaulted"] = metadata["default"] is not Unset
    metadata["default"] = coalesce(metadata["default"])

    metadata["required"] = bool(coalesce(metadata["required"], metadata["min"] > 0))


class Flag(metaclass=GrammarType):
    """
    Named, presence-only parameter specification.

    A flag never carries a value: '--name=value' is a user error. Repeated
    occurrences are merged into one result entry with an occurrence count, which
    is checked against [min, max] once the whole line is parsed.
    """

    __introspectable__ = (
        "longname",
        "shortname",
        "descr",
        "min",
        "max",
    )

    def __new__(cls, longname, shortname=Unset, /, descr=Unset, *, min=0, max=Unset):
        metadata = {
            "longname": longname,
            "shortname": shortname,
            "descr": descr,
            "min": min,
            "max": max,
        }
        _sanitize_named_metadata(cls, metadata)
        _sanitize_metadata(cls, metadata)
        _sanitize_bounds(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    def matches(self, name, /):
        """
        Return True when name is this flag's long name or its short codepoint.

        An int is compared as a codepoint; a string is compared as a long name.
        """
        if isinstance(name, int):
            return self.shortname is not None and ord(self.shortname) == name
        return self.longname == name


class Argument(metaclass=GrammarType):
    """
    Named, value-bearing parameter specification.

    Forms on the command line
    - long:  --name=value   (the value is everything after the first '=')
    - short: -n value       (the next token is consumed as the value)

    Semantics
    - validator: called with each raw value; a falsey return (or a ValueError or
      TypeError raised from it) rejects the value.
    - default: reported by ResultCommand.get() when the argument is absent. A
      default never satisfies 'required'.
    - required: the post-validation pass fails when a required argument never
      appears on the line.
    """

    __introspectable__ = (
        "longname",
        "shortname",
        "metavar",
        "descr",
        "min",
        "max",
        "validator",
        "default",
        "required",
    )

    __displayable__ = (
        "longname",
        "shortname",
        "metavar",
        "min",
        "max",
        "default",
        "required",
    )

    def __new__(
            cls,
            longname,
            shortname=Unset,
            /,
            metavar=Unset,
            descr=Unset,
            *,
            min=0,
            max=Unset,
            validator=Unset,
            default=Unset,
            required=Unset
    ):
        metadata = {
            "longname": longname,
            "shortname": shortname,
            "metavar": metavar,
            "descr": descr,
            "min": min,
            "max": max,
            "validator": validator,
            "default": default,
            "required": required,
        }
        _sanitize_named_metadata(cls, metadata)
        _sanitize_metadata(cls, metadata)
        _sanitize_bounds(cls, metadata)
        _sanitize_parametric_metadata(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    @property
    def has_default(self):
        """
        True when a default value (possibly None) was registered.
        """
        return self._defaulted

    def matches(self, name, /):
        """
        Return True when name is this argument's long name or its short codepoint.
        """
        if isinstance(name, int):
            return self.shortname is not None and ord(self.shortname) == name
        return self.longname == name

    def accepts(self, value, /):
        """
        Run the validator (if any) against a raw value.
        """
        if self.validator is None:
            return True
        try:
            return bool(self.validator(value))
        except (ValueError, TypeError):
            return False


__all__ = (
    # Public API surface for consumers of argspan.arguments.
    "Flag",
    "Argument",
)
