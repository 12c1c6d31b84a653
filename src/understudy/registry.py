# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See LICENSE in the project root
# for license information.

import itertools
from dataclasses import dataclass
from typing import Any, Optional

from understudy.actor import DoubleActor
from understudy.common import log
from understudy.common.singleton import ThreadSafeSingleton, autolocked_method
from understudy.inbox import Inbox


PLAIN = "plain"
VERIFYING = "verifying"
SPY = "spy"

MODES = (PLAIN, VERIFYING, SPY)


@dataclass(frozen=True)
class DoubleRecord:
    """Everything a call site needs to know about a double. Never changes after the
    double has been registered.
    """

    id: str
    actor: DoubleActor
    inbox: Inbox
    """Inbox of the thread that created the double."""

    mode: str = PLAIN
    surface: Optional[Any] = None
    """The module, class or object being doubled, for verifying doubles and spies."""

    template: Optional[Any] = None
    """The mapping, dataclass or named tuple fixing the operation names, if any."""

    @property
    def is_fixed_shape(self):
        return self.template is not None


class Registry(ThreadSafeSingleton):
    """Process-wide lookup of doubles by their ID. A double is added when it is
    created, and removed when it is closed.
    """

    _initialized = False

    def __init__(self):
        # Invoked on every Registry() call.
        with self:
            if self._initialized:
                return
            self._initialized = True
            self._records = {}
            self._counters = {}

    @autolocked_method
    def new_id(self, prefix):
        """Returns a unique ID of the form "<prefix>Double<N>"."""
        counter = self._counters.setdefault(prefix, itertools.count(1))
        return "{0}Double{1}".format(prefix, next(counter))

    @autolocked_method
    def register(self, record):
        assert record.id not in self._records, "{0} is already registered".format(
            record.id
        )
        self._records[record.id] = record
        log.debug("Registered {0} ({1}).", record.id, record.mode)
        return record

    @autolocked_method
    def unregister(self, double_id):
        """Removes the record for double_id, and returns it. Returns None if there is
        no such record.
        """
        record = self._records.pop(double_id, None)
        if record is not None:
            log.debug("Unregistered {0}.", double_id)
        return record

    @autolocked_method
    def lookup(self, double_id):
        try:
            return self._records[double_id]
        except KeyError:
            raise LookupError("Unknown double {0!r}".format(double_id)) from None

    @autolocked_method
    def __contains__(self, double_id):
        return double_id in self._records

    @autolocked_method
    def __len__(self):
        return len(self._records)
