# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See LICENSE in the project root
# for license information.

import collections
from dataclasses import dataclass
from typing import Dict, List

from understudy import errors, patterns
from understudy.actions import Action
from understudy.patterns import Pattern


@dataclass(eq=False)
class StubEntry:
    name: str
    pattern: Pattern
    action: Action

    default: bool = False
    """Whether this is an implicit stub registered by expect(). Default entries only
    apply when nothing else matches, and are never consumed.
    """

    def __repr__(self):
        return "{0} -> {1!r}{2}".format(
            self.pattern.describe_call(self.name),
            self.action,
            " (default)" if self.default else "",
        )


class StubTable:
    """Configured stubs of a single double, keyed by operation name.

    Not thread-safe; the double's actor is the only thing that ever touches it.
    """

    def __init__(self, owner="<double>"):
        self.owner = owner
        self._entries: Dict[str, List[StubEntry]] = collections.OrderedDict()

    def __repr__(self):
        return "StubTable({0})".format(self.owner)

    def names(self):
        return list(self._entries)

    def entries(self, name=None):
        if name is not None:
            return list(self._entries.get(name, ()))
        return [entry for entries in self._entries.values() for entry in entries]

    def arities(self, name):
        return {entry.pattern.arity for entry in self._entries.get(name, ())}

    def register(self, name, pattern, action, default=False):
        """Appends a new stub. Existing stubs are never replaced: if there already are
        stubs with the same pattern, the new one is queued after them.
        """
        entry = StubEntry(name, pattern, action, default)
        self._entries.setdefault(name, []).append(entry)
        return entry

    def resolve(self, name, args):
        """Selects the stub for the call name(*args), and returns its action.

        Raises UnstubbedCall if there are no stubs for name or none of them match
        args, and ArityMismatch if none of them accepts len(args) arguments.
        """
        entries = self._entries.get(name)
        if not entries:
            raise errors.UnstubbedCall(self.owner, name, args)

        arities = self.arities(name)
        if len(args) not in arities:
            raise errors.ArityMismatch(self.owner, name, len(args), arities)

        candidates = patterns.match((e for e in entries if not e.default), args)
        if not candidates:
            candidates = patterns.match((e for e in entries if e.default), args)
        if not candidates:
            raise errors.UnstubbedCall(self.owner, name, args)

        entry = candidates[0]
        if not entry.default:
            # Stubs queued for the same pattern drain in order, but the last one
            # stays in place and keeps answering all future matching calls.
            same_pattern = [
                e for e in entries if not e.default and e.pattern == entry.pattern
            ]
            if len(same_pattern) > 1:
                entries.remove(entry)

        return entry.action

    def clear(self, name=None):
        """Removes all stubs, or only the stubs for the specified operation name(s).
        """
        if name is None:
            self._entries.clear()
        elif isinstance(name, str):
            self._entries.pop(name, None)
        else:
            for n in name:
                self._entries.pop(n, None)
