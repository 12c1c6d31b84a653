# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See LICENSE in the project root
# for license information.

"""Argument patterns for stubs and expectations.

A pattern is either Exactly(args), which matches one specific argument list, or
Any(arity), which matches any argument list of that length::

    Exactly((1, 2, 3)).matches((1, 2, 3))  # True
    Any(3).matches(("a", "b", "c"))        # True
    Any(3).matches((1,))                   # False

Elements of an exact argument list are compared with ==, with the pattern element
on the left, so argument matchers from understudy.some can be used in them.
"""

from typing import Iterable, List, Sequence


class Pattern:
    arity: int
    """Number of arguments that this pattern accepts."""

    is_exact: bool

    def matches(self, args: Sequence) -> bool:
        raise NotImplementedError

    def describe_call(self, name: str) -> str:
        raise NotImplementedError


class Exactly(Pattern):
    is_exact = True

    def __init__(self, args: Iterable = ()):
        self.args = tuple(args)
        self.arity = len(self.args)

    def matches(self, args):
        if len(args) != self.arity:
            return False
        return all(expected == actual for expected, actual in zip(self.args, args))

    def __eq__(self, other):
        if not isinstance(other, Exactly):
            return NotImplemented
        # Tuple comparison checks identity first, so the same matcher object in
        # both patterns counts as equal even though matchers don't match each other.
        return self.args == other.args

    def __hash__(self):
        return hash(self.arity)

    def __repr__(self):
        return "Exactly({0!r})".format(self.args)

    def describe_call(self, name):
        return "{0}({1})".format(name, ", ".join(repr(arg) for arg in self.args))


class Any(Pattern):
    is_exact = False

    def __init__(self, arity: int):
        if not isinstance(arity, int) or arity < 0:
            raise ValueError("arity must be a non-negative integer, not {0!r}".format(arity))
        self.arity = arity

    def matches(self, args):
        return len(args) == self.arity

    def __eq__(self, other):
        if not isinstance(other, Any):
            return NotImplemented
        return self.arity == other.arity

    def __hash__(self):
        return hash(self.arity)

    def __repr__(self):
        return "Any({0})".format(self.arity)

    def describe_call(self, name):
        return "{0}/{1}".format(name, self.arity)


def to_pattern(args) -> Pattern:
    """Converts the args= value accepted by the public API to a Pattern.

    None and () mean "no arguments"; a list or a tuple is an exact argument list;
    a Pattern is returned as is.
    """
    if args is None:
        return Exactly(())
    if isinstance(args, Pattern):
        return args
    if isinstance(args, (list, tuple)):
        return Exactly(args)
    raise TypeError(
        "args must be a list, a tuple, or understudy.Any(arity), not {0!r}".format(args)
    )


def match(entries, args: Sequence) -> List:
    """Returns those of entries whose .pattern matches args. All exact matches come
    before all wildcard matches; within each group, entries keep their order.
    """
    exact = []
    wildcard = []
    for entry in entries:
        if not entry.pattern.matches(args):
            continue
        (exact if entry.pattern.is_exact else wildcard).append(entry)
    return exact + wildcard
