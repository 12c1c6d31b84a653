# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See LICENSE in the project root
# for license information.

"""Per-thread inboxes that receive a CallRecord for every call made to a double.

A double posts to the inbox of the thread that created it, no matter which thread
calls it - so a test can make assertions about calls that happened on workers::

    dbl = allow(double(), "ping")
    threading.Thread(target=dbl.ping).start()
    assert_received("ping")
"""

import collections
import itertools
import threading
import weakref
from dataclasses import dataclass, field
from typing import Any, Tuple

from understudy.common import log, options, timestamp


@dataclass(frozen=True)
class CallRecord:
    double: str
    """Name of the double that was called."""

    name: str
    """Name of the operation that was called."""

    args: Tuple[Any, ...]

    index: int = 0
    """Ordinal of this record in the inbox that it was posted to."""

    timestamp: float = field(default=0.0, compare=False)

    def __repr__(self):
        return "#{0} {1}.{2}({3})".format(
            self.index,
            self.double,
            self.name,
            ", ".join(repr(arg) for arg in self.args),
        )

    def matches(self, name, args=None, double=None):
        """Whether this record is a call to operation name with args (a sequence of
        values or matchers, or None for any arguments), made on double (a name, or
        None for any double).
        """
        if name != self.name:
            return False
        if double is not None and double != self.double:
            return False
        if args is None:
            return True
        args = tuple(args)
        return len(args) == len(self.args) and all(
            expected == actual for expected, actual in zip(args, self.args)
        )


class Inbox:
    """Accumulates call records for one thread. Posting never blocks on readers, and
    records are never dropped; they stay in history() until reset().

    receive() and the assertion helpers consume records from a separate unread queue,
    so that every record can be received at most once, while history() stays intact
    for verify().
    """

    _lock = threading.Lock()
    _by_thread = weakref.WeakKeyDictionary()

    def __init__(self, thread_name="<unknown>"):
        self.thread_name = thread_name
        self._history = []
        self._unread = collections.deque()
        self._index_iter = itertools.count(1)
        self._posted = threading.Condition()

    def __repr__(self):
        return "Inbox({0})".format(self.thread_name)

    @classmethod
    def of(cls, thread):
        """Returns the inbox for the specified thread, creating it if needed."""
        with cls._lock:
            inbox = cls._by_thread.get(thread)
            if inbox is None:
                inbox = cls(thread.name)
                cls._by_thread[thread] = inbox
            return inbox

    @classmethod
    def current(cls):
        """Returns the inbox for the calling thread."""
        return cls.of(threading.current_thread())

    def post(self, double, name, args):
        with self._posted:
            record = CallRecord(
                str(double), name, tuple(args), next(self._index_iter), timestamp.current()
            )
            self._history.append(record)
            self._unread.append(record)
            self._posted.notify_all()
        log.debug("{0} <-- {1!r}", self, record)
        return record

    def history(self, double=None):
        """Returns all records posted since the last reset(), oldest first. If double
        is specified, only returns calls to that double.
        """
        with self._posted:
            records = list(self._history)
        if double is not None:
            double = str(double)
            records = [r for r in records if r.double == double]
        return records

    def unread(self):
        with self._posted:
            return list(self._unread)

    def reset(self):
        with self._posted:
            self._history.clear()
            self._unread.clear()
            self._index_iter = itertools.count(1)

    def _take(self, name, args, double):
        for record in self._unread:
            if record.matches(name, args, double):
                self._unread.remove(record)
                return record
        return None

    def receive(self, name, *args, double=None, any_args=False, timeout=None):
        """Removes and returns the oldest unread record for a call to name(*args), on
        the specified double if any. Waits up to timeout seconds for it to be posted
        if it isn't there yet. Returns None if there is no such record.

        If any_args is True, args are ignored, and a call with any arguments matches.
        """
        args = None if any_args else args
        if double is not None:
            double = str(double)
        with self._posted:
            record = self._take(name, args, double)
            if record is None and timeout:
                self._posted.wait_for(
                    lambda: self._has(name, args, double), timeout=timeout
                )
                record = self._take(name, args, double)
        return record

    def _has(self, name, args, double):
        return any(record.matches(name, args, double) for record in self._unread)

    def assert_received(self, name, *args, double=None, any_args=False, timeout=None):
        """Like receive(), but raises AssertionError if there is no matching record.
        Waits for options.receive_timeout seconds by default.
        """
        if timeout is None:
            timeout = options.receive_timeout
        record = self.receive(
            name, *args, double=double, any_args=any_args, timeout=timeout
        )
        if record is None:
            expected = "{0}({1})".format(
                name, "..." if any_args else ", ".join(repr(arg) for arg in args)
            )
            raise log.error(
                "{0}: expected to receive {1}{2}, but it was not received.\n"
                "Unread calls: {3!r}",
                self,
                expected,
                "" if double is None else " on " + str(double),
                self.unread(),
            )
        return record

    def refute_received(self, name, *args, double=None, any_args=False, timeout=0):
        """Raises AssertionError if a matching record is, or within timeout seconds
        becomes, available. The record is consumed in that case.
        """
        record = self.receive(
            name, *args, double=double, any_args=any_args, timeout=timeout
        )
        if record is not None:
            raise log.error("{0}: unexpectedly received {1!r}", self, record)
