"""
Argspan parse results.

A successful parse produces a Result: the program name (args[0], verbatim)
and the ResultCommand that governed the line. Results are plain immutable
tuples; nothing in them aliases the parser's grammar storage.

Parameters are a closed, two-variant union:
- ResultArgument(name, value): one occurrence of a value-bearing argument.
  Positional inputs use the input slot, i.e. name is None.
- ResultFlag(name, occurrence): every occurrence of a flag, merged.

Parameter order is the order in which the parameters were first encountered
on the command line.
"""
from collections import namedtuple
from types import MappingProxyType


class ResultArgument(namedtuple("ResultArgument", ("name", "value"))):
    __slots__ = ()

    @property
    def positional(self):
        """
        True for positional inputs (bound to the input slot).
        """
        return self.name is None


class ResultFlag(namedtuple("ResultFlag", ("name", "occurrence"), defaults=(1,))):
    __slots__ = ()


Parameter = ResultArgument | ResultFlag


class ResultCommand(namedtuple("ResultCommand", ("name", "parameters", "defaults"),
                               defaults=((), MappingProxyType({})))):
    """
    The command that governed a parse and the parameters bound to it.

    Accessors
    - flags / arguments / inputs: parameters filtered by variant.
    - occurrences(name): how many times a flag was given (0 when absent).
    - values(name): every value given to an argument, in order.
    - get(name, default=None): the last value given to an argument, else its
      registered default, else `default`.
    """
    __slots__ = ()

    @property
    def flags(self):
        return tuple(parameter for parameter in self.parameters if isinstance(parameter, ResultFlag))

    @property
    def arguments(self):
        return tuple(
            parameter for parameter in self.parameters
            if isinstance(parameter, ResultArgument) and not parameter.positional
        )

    @property
    def inputs(self):
        return tuple(
            parameter.value for parameter in self.parameters
            if isinstance(parameter, ResultArgument) and parameter.positional
        )

    def occurrences(self, name, /):
        for parameter in self.flags:
            if parameter.name == name:
                return parameter.occurrence
        return 0

    def values(self, name, /):
        return tuple(parameter.value for parameter in self.arguments if parameter.name == name)

    def get(self, name, default=None, /):
        if values := self.values(name):
            return values[-1]
        return self.defaults.get(name, default)


class Result(namedtuple("Result", ("program", "command"))):
    __slots__ = ()


__all__ = (
    "Parameter",
    "ResultArgument",
    "ResultFlag",
    "ResultCommand",
    "Result",
)
