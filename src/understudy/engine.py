# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See LICENSE in the project root
# for license information.

"""The dispatch engine behind doubles.

All functions here identify a double by its handle - the unique ID under which it
is registered in the process-wide Registry - so that they can be used from any
thread without holding on to the double object itself.
"""

import threading

from understudy import errors, surfaces
from understudy.actions import Action, Return
from understudy.actor import DoubleActor
from understudy.common import log
from understudy.expectations import Expectation, verify as verify_expectations
from understudy.inbox import Inbox
from understudy.registry import MODES, PLAIN, SPY, VERIFYING, DoubleRecord, Registry


class CallThrough(Action):
    """Action of a spy for calls that have no stub: invoke the real operation."""

    def __init__(self, surface, name):
        self.surface = surface
        self.name = name

    def __repr__(self):
        return "CallThrough({0}.{1})".format(surfaces.name_of(self.surface), self.name)

    def apply(self, args):
        return surfaces.call_through(self.surface, self.name, args)


def create_double(identity, mode=PLAIN, surface=None, template=None):
    """Creates and registers a new double, and returns its handle.

    identity is used as the prefix of the generated unique name. The double reports
    its calls to the inbox of the calling thread.
    """
    if mode not in MODES:
        raise ValueError("mode must be one of {0!r}, not {1!r}".format(MODES, mode))
    if mode in (VERIFYING, SPY) and surface is None:
        raise ValueError("{0} doubles require a surface".format(mode))

    registry = Registry()
    handle = registry.new_id(identity)
    record = DoubleRecord(
        id=handle,
        actor=DoubleActor(handle),
        inbox=Inbox.current(),
        mode=mode,
        surface=surface,
        template=template,
    )
    registry.register(record)
    log.info(
        "{0} created ({1}) on {2}.", handle, mode, threading.current_thread().name
    )
    return handle


def record_of(handle):
    try:
        return Registry().lookup(handle)
    except LookupError:
        # Closed doubles are unregistered.
        raise log.reraise(errors.DoubleClosed(handle)) from None


def configure(handle, name, pattern, action, default=False):
    """Adds a stub for the call name(*args) with args matching pattern."""
    record = record_of(handle)

    if record.is_fixed_shape and name not in surfaces.template_keys(record.template):
        raise log.reraise(
            errors.UnknownKeyOnFixedSurface(surfaces.name_of(record.template), name)
        )
    if record.mode in (VERIFYING, SPY):
        surfaces.verify_declared(record.surface, handle, name, pattern.arity)

    log.debug("{0}: {1} -> {2!r}", handle, pattern.describe_call(name), action)
    return record.actor.configure(name, pattern, action, default)


def dispatch(handle, name, args):
    """Resolves the call name(*args) made on the double, records it in the inbox of
    the thread that created the double, and returns the action to apply.

    For spies, calls without a matching stub resolve to CallThrough.
    """
    args = tuple(args)
    record = record_of(handle)
    try:
        action = record.actor.dispatch(name, args)
    except (errors.UnstubbedCall, errors.ArityMismatch) as exc:
        if record.mode != SPY:
            raise log.reraise(exc)
        if not surfaces.can_call_through(record.surface, name, len(args)):
            arities = getattr(exc, "arities", ())
            raise log.reraise(
                errors.ArityMismatch(handle, name, len(args), arities)
            ) from None
        action = CallThrough(record.surface, name)

    record.inbox.post(handle, name, args)
    log.debug("{0}: {1}{2!r} -> {3!r}", handle, name, args, action)
    return action


def call(handle, name, args):
    """Dispatches the call name(*args), and applies the resulting action."""
    args = tuple(args)
    return dispatch(handle, name, args).apply(args)


def clear(handle, name=None):
    """Removes all stubs of the double, or only those for the specified operation
    name(s). Expectations are not affected.
    """
    log.debug("{0}: clearing {1}", handle, "all stubs" if name is None else name)
    record_of(handle).actor.clear(name)


def expect(handle, name, pattern):
    """Declares that the call name(*args) with args matching pattern must happen,
    after all previously declared expected calls.

    Also adds a default stub returning None for it, which is only used when there
    is no other stub matching the call. Spies get no default stub, since their
    unstubbed calls go through to the real operation.
    """
    record = record_of(handle)
    if record.mode == SPY:
        surfaces.verify_declared(record.surface, handle, name, pattern.arity)
    else:
        configure(handle, name, pattern, Return(None), default=True)
    record.actor.expect(Expectation(name, pattern))


def verify(handle):
    """Checks all expectations of the double against the calls recorded for it.
    Raises VerificationFailure if any expectation is not met.
    """
    record = record_of(handle)
    expectations = record.actor.expectations()
    history = record.inbox.history(double=handle)
    verify_expectations(handle, expectations, history)
    log.debug("{0}: {1} expectation(s) verified.", handle, len(expectations))


def close(handle):
    """Stops the actor of the double, and removes it from the registry. Closing a
    double that is already closed does nothing.
    """
    record = Registry().unregister(handle)
    if record is not None:
        record.actor.close()
