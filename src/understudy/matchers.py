# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See LICENSE in the project root
# for license information.

# Argument matchers are defined here, so that understudy.some can redefine builtin
# names like str, int etc without affecting the implementations in this file -
# some.* then provides shorthand aliases.

import re


def _literal(text):
    return text.replace("{", "{{").replace("}", "}}")


class Some:
    """An argument matcher. It is compared to an actual argument with ==, so it
    can be placed anywhere an exact argument list is expected::

        allow(dbl, "process", args=[some.int, some.str.starting_with("a")])

    Since stub patterns, expectations and inbox records all compare with the
    expected value on the left, Some.__eq__ is what decides the match.
    """

    def matches(self, value):
        raise NotImplementedError

    def __repr__(self):
        try:
            return self.name
        except AttributeError:
            raise NotImplementedError

    def __eq__(self, value):
        return self.matches(value)

    def __ne__(self, value):
        return not self.matches(value)

    __hash__ = None

    def __invert__(self):
        return Not(self)

    def __or__(self, other):
        return Either(self, other)

    def such_that(self, condition):
        """Narrows this matcher to values for which condition(value) is true."""
        name = getattr(condition, "__qualname__", repr(condition))
        return Also(self, condition, "{0!r} if " + _literal(name))

    def in_range(self, start, stop):
        """Narrows this matcher to values v such that start <= v < stop."""
        description = "({0} <= {{0!r}} < {1})".format(
            _literal(repr(start)), _literal(repr(stop))
        )
        return Also(self, lambda value: start <= value < stop, description)

    def same_as(self, obj):
        """Narrows this matcher to obj itself, compared with 'is'."""
        return Also(self, lambda value: value is obj, _literal("<is {0!r}>".format(obj)))

    def matching(self, regex, flags=0):
        """Narrows this matcher to str or bytes values that fully match regex."""
        assert isinstance(regex, (bytes, str))

        def fullmatch(value):
            return type(value) is type(regex) and bool(re.fullmatch(regex, value, flags))

        shown = regex if isinstance(regex, str) else repr(regex)
        return Also(self, fullmatch, _literal("/{0}/".format(shown)))


class Also(Some):
    """Matches what matcher matches, provided that condition(value) also holds.

    description is a format string for repr(); {0} is replaced with the repr of
    the narrowed matcher.
    """

    def __init__(self, matcher, condition, description):
        self.matcher = matcher
        self.condition = condition
        self.description = description

    def __repr__(self):
        return self.description.format(self.matcher)

    def matches(self, value):
        return self.matcher == value and self.condition(value)


class Not(Some):
    def __init__(self, matcher):
        self.matcher = matcher

    def __repr__(self):
        return "~{0!r}".format(self.matcher)

    def matches(self, value):
        return value != self.matcher


class Either(Some):
    def __init__(self, *alternatives):
        assert len(alternatives) > 0
        self.alternatives = alternatives

    def __repr__(self):
        return "({0})".format(" | ".join(repr(alt) for alt in self.alternatives))

    def matches(self, value):
        return any(alt == value for alt in self.alternatives)


class Object(Some):
    """Matches any argument, including None."""

    name = "<?>"

    def matches(self, value):
        return True


class Thing(Some):
    """Matches any argument but None."""

    name = "<>"

    def matches(self, value):
        return value is not None


class InstanceOf(Some):
    def __init__(self, classinfo, name=None):
        if isinstance(classinfo, type):
            classinfo = (classinfo,)
        assert classinfo and all(isinstance(cls, type) for cls in classinfo)
        self.classinfo = tuple(classinfo)
        self.name = name or " | ".join(cls.__name__ for cls in self.classinfo)

    def __repr__(self):
        return "<{0}>".format(self.name)

    def matches(self, value):
        return isinstance(value, self.classinfo)


class ListContaining(Some):
    """Matches a list in which items occur consecutively, in the same order."""

    def __init__(self, *items):
        self.items = list(items)

    def __repr__(self):
        if not self.items:
            return "[...]"
        return "[..., {0}, ...]".format(repr(self.items)[1:-1])

    def matches(self, other):
        if not isinstance(other, list):
            return False
        n = len(self.items)
        return any(
            self.items == other[start : start + n]
            for start in range(len(other) - n + 1)
        )


class DictContaining(Some):
    """Matches a dict that has all the specified keys, with matching values.
    Other keys are ignored::

        assert {"id": 1, "name": "x"} == some.dict.containing({"id": some.int})
    """

    def __init__(self, items):
        self.items = dict(items)

    def __repr__(self):
        return repr(self.items)[:-1] + ", ...}"

    def matches(self, other):
        if not isinstance(other, dict):
            return False
        return all(
            key in other and expected == other[key]
            for key, expected in self.items.items()
        )
