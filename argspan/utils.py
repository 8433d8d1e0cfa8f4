"""
Argspan utilities (internal helpers, carefully exposed)

Scope
- Small building blocks shared by the grammar, result and fault layers.
- The codepoint utility the parsing engine relies on to match short names
  by Unicode codepoint rather than by byte.

Overview
- UnsetType / Unset
  • Singleton sentinel to represent “value not provided” without conflating with None.
  • Falsey (bool(Unset) is False), printable as "Unset", and non-subclassable.

- coalesce(value, default=None)
  • Replace Unset with a concrete default, but preserve legitimate falsey values like None/0/"".

- rename(callable, name) / @rename("name")
  • Assign stable __name__/__qualname__ to generated callables for clean tracebacks.

- mirror("attr")
  • Read-only property factory exposing a private backing field (self._attr) as an
    immutable view (tuple / mappingproxy / frozenset).

- utf8(token), utf8_char_length(data), codepoint(data)
  • UTF-8 view of a token and decoding of its first codepoint. Both decoders return
    None when the start of the data is not a well-formed UTF-8 sequence.

Quick examples
    >>> coalesce(Unset, "fallback")
    'fallback'
    >>> utf8_char_length("😀x")
    4
    >>> codepoint("é")
    233
"""
import builtins
import functools
from collections.abc import Sequence, Mapping, Set
from types import MappingProxyType
from typing import final


@final
class UnsetType:
    """
    Internal sentinel type representing a value that was not provided.

    This is used when None is a legitimate user value (a default value of None,
    an unbounded maximum) but the API needs a way to distinguish “not provided”
    from “provided as None”. A single instance, Unset, is exposed for use as the
    default in constructor parameters.

    Characteristics
    - Boolean-false: bool(Unset) is False, but it is distinct from None and 0.
    - Printable: repr(Unset) -> "Unset" for friendly diagnostics.
    - Non-subclassable: this type is sealed; do not subclass.
    - Singleton per process: UnsetType() always yields the same instance.
    """

    def __or__(self, other, /):
        """
        Support PEP 604 unions in isinstance checks (e.g., str | Unset).
        """
        try:
            return type(self) | other
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        """
        Support reversed PEP 604 unions when Unset appears on the right.
        """
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

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


def coalesce(object, default=None, /):
    """
    Resolve an internal Unset sentinel to a concrete default.

    Falsey values like None, 0 or "" are preserved as-is; only Unset is replaced.

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
    - rename(callable, name) -> callable
    - rename(name) -> decorator
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


def _freeze(object):
    """
    Return an immutable view of a container; other objects pass through.

    - Sequence (non-string) → tuple
    - Mapping               → MappingProxyType
    - Set                   → frozenset
    """
    if isinstance(object, Sequence) and not isinstance(object, str | bytes):
        return tuple(object)
    if isinstance(object, Mapping):
        return MappingProxyType(object)
    if isinstance(object, Set):
        return frozenset(object)
    return object


def mirror(name, /):
    """
    Define a read-only property that mirrors a private backing attribute.

    The generated property reads "_{name}" on the instance and returns an
    immutable view for container types, so grammar state cannot be mutated
    through the public API.

    Example
    - Given self._flags, declare flags = mirror("flags") to expose it safely.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _freeze(getattr(self, "_" + name))

    return property(getter)


def utf8(token, /):
    """
    Return the UTF-8 bytes of a token.

    Strings are encoded with 'surrogatepass' so that lone surrogates (including
    the ones produced by the 'surrogateescape' decoding of sys.argv) survive the
    conversion and are later rejected by the decoders below.
    """
    if isinstance(token, bytes):
        return token
    if not isinstance(token, str):
        raise TypeError("utf8() argument must be a string or bytes")
    return token.encode("utf-8", "surrogatepass")


def utf8_char_length(data, /):
    """
    Return the byte length of the first codepoint of data, or None.

    None is returned for empty data, for an invalid lead byte, when the sequence
    is truncated, and for any sequence the strict UTF-8 decoder refuses
    (overlong forms, surrogates, codepoints above U+10FFFF).
    """
    data = utf8(data)
    if not data:
        return None

    lead = data[0]
    if lead < 0x80:
        length = 1
    elif 0xC2 <= lead <= 0xDF:
        length = 2
    elif 0xE0 <= lead <= 0xEF:
        length = 3
    elif 0xF0 <= lead <= 0xF4:
        length = 4
    else:
        return None

    try:
        data[:length].decode("utf-8")
    except UnicodeDecodeError:
        return None
    return length if len(data) >= length else None


def codepoint(data, /):
    """
    Return the codepoint value of the first character of data, or None.
    """
    data = utf8(data)
    if (length := utf8_char_length(data)) is None:
        return None
    return ord(data[:length].decode("utf-8"))


Unset = UnsetType()
"""
Internal sentinel for “not provided”.

Typical pattern: value = coalesce(user_value, default) to materialize a fallback
only when user_value is Unset (None and other falsey values are preserved).
"""


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "mirror",
    "utf8",
    "utf8_char_length",
    "codepoint",

    # Types
    "UnsetType",

    # Constants
    "Unset",
)
