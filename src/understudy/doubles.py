# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See LICENSE in the project root
# for license information.

"""Doubles and their configuration API.

A double is injected in place of a real dependency::

    def greet(name, io=builtins):
        io.print("Hello, " + name)

    def test_greet():
        io = allow(double(builtins), "print", args=["Hello, World"])
        greet("World", io)
        assert_received("print", "Hello, World")

All configuration functions return the double, so they can be nested::

    dbl = allow(allow(double(), "get", args=[1], returns="a"), "get", args=[2], returns="b")
"""

from understudy import engine, surfaces
from understudy.actions import Invoke, Raise, Return
from understudy.inbox import Inbox
from understudy.patterns import Any, to_pattern
from understudy.registry import PLAIN, SPY, VERIFYING


class Operation:
    """A named operation of a double. Calling it dispatches the call through the
    double's stub table.
    """

    def __init__(self, handle, name):
        self.handle = handle
        self.name = name
        self.__name__ = name
        self.__qualname__ = "{0}.{1}".format(handle, name)

    def __repr__(self):
        return "<operation {0}>".format(self.__qualname__)

    def __call__(self, *args):
        return engine.call(self.handle, self.name, args)


class Double:
    """A substitute for a module, an object, a mapping of functions, or nothing in
    particular. Operations are accessible both as attributes and as items.

    Do not create directly; use double() or spy() instead.
    """

    def __init__(self, handle, names=()):
        # Bypass __setattr__ overrides in derived classes, and keep all internal
        # state under names that cannot collide with operation names.
        vars(self)["_understudy_handle"] = handle
        vars(self)["_understudy_names"] = set(names)
        vars(self)["_understudy_operations"] = {}

    def __repr__(self):
        return "<Double {0}>".format(self._understudy_handle)

    def __str__(self):
        return self._understudy_handle

    def _understudy_operation(self, name):
        operations = self._understudy_operations
        op = operations.get(name)
        if op is None:
            op = operations.setdefault(name, Operation(self._understudy_handle, name))
        return op

    def __getattr__(self, name):
        if name.startswith("_understudy") or (
            name.startswith("__") and name.endswith("__")
        ):
            raise AttributeError(name)

        record = engine.record_of(self._understudy_handle)
        if name in self._understudy_names:
            return self._understudy_operation(name)
        if record.is_fixed_shape and name in surfaces.template_keys(record.template):
            return surfaces.template_value(record.template, name)
        if record.surface is not None and surfaces.lookup(record.surface, name):
            return self._understudy_operation(name)
        raise AttributeError(
            "{0} has no operation {1!r}".format(self._understudy_handle, name)
        )

    def __getitem__(self, name):
        try:
            return getattr(self, name)
        except AttributeError:
            raise KeyError(name) from None

    def __contains__(self, name):
        try:
            getattr(self, name)
        except AttributeError:
            return False
        return True


def _identity(source):
    return "" if source is None else surfaces.name_of(source)


def double(source=None, verify=True):
    """Creates a new double.

    If source is None, the double is open: operations with any name can be added.

    If source is a mapping, a dataclass instance, or a named tuple, it is a template:
    only its keys can be stubbed, and the values of those that aren't stubbed are
    returned as is.

    Otherwise, source is the module, class or object being doubled. Stubs are only
    accepted for operations that source declares, with an arity it accepts, unless
    verify is False.
    """
    if source is None:
        handle = engine.create_double(_identity(source), PLAIN)
    elif surfaces.is_template(source):
        handle = engine.create_double(_identity(source), PLAIN, template=source)
    elif verify:
        handle = engine.create_double(_identity(source), VERIFYING, surface=source)
    else:
        handle = engine.create_double(_identity(source), PLAIN)
    return Double(handle)


def spy(source):
    """Creates a double for source which calls through to the real operation for
    every call that has no matching stub. All calls are recorded.
    """
    if source is None or surfaces.is_template(source):
        raise TypeError("Can only spy on a module, a class, or an object")
    return Double(engine.create_double(_identity(source), SPY, surface=source))


def _double_for(dbl):
    # Configuring something that isn't a double yet creates one for it.
    return dbl if isinstance(dbl, Double) else double(dbl)


def _configure(dbl, name, pattern, action):
    engine.configure(dbl._understudy_handle, name, pattern, action)
    dbl._understudy_names.add(name)


def allow(dbl, name, args=(), returns=None, raises=None, returns_each=None):
    """Stubs operation name of dbl for calls with args.

    args is a list or tuple of argument values or matchers, or Any(arity) to accept
    any arguments of that count. Calls return returns (None by default), or raise
    raises. raises can be an exception type or instance, a (type, message) tuple,
    or a message string for a RuntimeError.

    returns_each queues several values, returned by successive matching calls; the
    last one keeps being returned after that. Stubbing the same args again appends
    to that queue rather than replacing it.
    """
    given = [x is not None for x in (returns, raises, returns_each)]
    if sum(given) > 1:
        raise TypeError("Only one of returns, raises, returns_each can be specified")

    dbl = _double_for(dbl)
    pattern = to_pattern(args)
    if raises is not None:
        actions = [Raise.from_spec(raises)]
    elif returns_each is not None:
        actions = [Return(value) for value in returns_each]
        if not actions:
            raise ValueError("returns_each cannot be empty")
    else:
        actions = [Return(returns)]

    for action in actions:
        _configure(dbl, name, pattern, action)
    return dbl


def stub(dbl, name, func, args=None):
    """Stubs operation name of dbl with func. Calls with args invoke func with the
    same arguments, and return what it returns or raise what it raises.

    If args is None, func handles all calls with as many arguments as it requires.
    """
    dbl = _double_for(dbl)
    if args is None:
        pattern = Any(surfaces.arity_of(func))
    else:
        pattern = to_pattern(args)
    _configure(dbl, name, pattern, Invoke(func))
    return dbl


def expect(dbl, name, args=()):
    """Declares that dbl.name must be called with args, after all calls previously
    declared with expect() for dbl. Checked by verify().

    Unless it is stubbed separately, the expected call returns None.
    """
    dbl = _double_for(dbl)
    engine.expect(dbl._understudy_handle, name, to_pattern(args))
    dbl._understudy_names.add(name)
    return dbl


def verify(dbl):
    """Raises VerificationFailure unless all calls declared with expect() for dbl
    happened, in the order in which they were declared.
    """
    engine.verify(dbl._understudy_handle)
    return dbl


def clear(dbl, names=None):
    """Removes all stubs of dbl, or only those for the specified operation name or
    list of names.
    """
    engine.clear(dbl._understudy_handle, names)
    return dbl


def close(dbl):
    """Stops the actor of dbl. Any further use of it raises DoubleClosed."""
    engine.close(dbl._understudy_handle)


def handle_of(dbl):
    return dbl._understudy_handle


def current_inbox():
    """Returns the inbox of the calling thread."""
    return Inbox.current()


def history(dbl=None):
    """Returns all calls recorded in the inbox of the calling thread, optionally only
    those made on dbl.
    """
    return Inbox.current().history(double=dbl)


def assert_received(name, *args, double=None, any_args=False, timeout=None):
    """Asserts that a call to name(*args) was posted to the inbox of the calling thread,
    waiting for it a little if necessary. The call is consumed from the inbox.
    """
    return Inbox.current().assert_received(
        name, *args, double=double, any_args=any_args, timeout=timeout
    )


def refute_received(name, *args, double=None, any_args=False, timeout=0):
    """Asserts that no call to name(*args) was posted to the inbox of the calling thread.
    """
    Inbox.current().refute_received(
        name, *args, double=double, any_args=any_args, timeout=timeout
    )


def is_double(obj):
    return isinstance(obj, Double)
