# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See LICENSE in the project root
# for license information.

"""Serializes all access to the state of a double.

Every double owns one DoubleActor. Requests are posted to its mailbox, and handled
one at a time, to completion, by the actor's worker thread - so configure() and
dispatch() never interleave for the same double, no matter how many threads call
it. The caller blocks until its own request has been handled, and gets its result
or exception back.
"""

import queue
import threading

from understudy import errors
from understudy.common import log, options
from understudy.stubs import StubTable


class _Request:
    def __init__(self, handler, args):
        self.handler = handler
        self.args = args
        self.result = None
        self.exc = None
        self.done = threading.Event()


class Actor:
    """A worker thread draining a mailbox. The worker is started when the first request
    is posted, and exits after staying idle for options.actor_idle_timeout seconds;
    the next request starts a new one. At most one worker is alive at any time.
    """

    def __init__(self, name):
        self.name = name
        self._mailbox = queue.Queue()
        self._lock = threading.Lock()
        self._worker = None
        self._is_closed = False

    def __repr__(self):
        return "{0}({1})".format(type(self).__name__, self.name)

    @property
    def is_closed(self):
        return self._is_closed

    def close(self):
        """Stops the worker. Requests posted afterwards raise DoubleClosed.
        """
        with self._lock:
            if self._is_closed:
                return
            self._is_closed = True
            worker = self._worker
            if worker is not None:
                self._mailbox.put(None)
        log.debug("{0} closed.", self)
        if worker is not None and worker is not threading.current_thread():
            worker.join()

    def call(self, handler, *args):
        """Runs handler(*args) on the worker thread, after all previously posted
        requests have been handled, and returns its result.
        """
        request = _Request(handler, args)
        with self._lock:
            if self._is_closed:
                raise errors.DoubleClosed(self.name)
            self._mailbox.put(request)
            if self._worker is None:
                self._worker = threading.Thread(
                    target=self._worker_loop, name="{0} actor".format(self.name)
                )
                self._worker.daemon = True
                self._worker.start()

        request.done.wait()
        if request.exc is not None:
            raise request.exc
        return request.result

    def _worker_loop(self):
        while True:
            try:
                request = self._mailbox.get(timeout=options.actor_idle_timeout)
            except queue.Empty:
                # Only exit if nothing was posted in the meantime. Posting happens
                # under the same lock, so anything posted after this check will
                # see that there's no worker, and start a new one.
                with self._lock:
                    if self._mailbox.empty():
                        self._worker = None
                        return
                continue

            if request is None:
                with self._lock:
                    self._worker = None
                self._fail_pending()
                return

            try:
                request.result = request.handler(*request.args)
            except BaseException as exc:
                request.exc = exc
            finally:
                request.done.set()

    def _fail_pending(self):
        while True:
            try:
                request = self._mailbox.get_nowait()
            except queue.Empty:
                return
            if request is not None:
                request.exc = errors.DoubleClosed(self.name)
                request.done.set()


class DoubleActor(Actor):
    """Owns the stub table and the expectation list of one double."""

    def __init__(self, name):
        super().__init__(name)
        self._table = StubTable(name)
        self._expectations = []

    def configure(self, name, pattern, action, default=False):
        return self.call(self._table.register, name, pattern, action, default)

    def dispatch(self, name, args):
        """Resolves the call name(*args) against the stub table, and returns the
        action of the selected stub. The action is not applied.
        """
        return self.call(self._table.resolve, name, tuple(args))

    def clear(self, name=None):
        return self.call(self._table.clear, name)

    def expect(self, expectation):
        return self.call(self._expectations.append, expectation)

    def expectations(self):
        return self.call(list, self._expectations)

    def entries(self, name=None):
        return self.call(self._table.entries, name)

    def arities(self, name):
        return self.call(self._table.arities, name)
