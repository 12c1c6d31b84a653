# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See LICENSE in the project root
# for license information.

"""Inspection of the real things that doubles stand in for.

A surface is a module, a class, or any other object whose attributes are the
operations being doubled. A template is a mapping, a dataclass instance, or a named
tuple; it fixes the set of operation names a double can have, but not their arity.
"""

import dataclasses
import inspect
from collections.abc import Mapping

from understudy import errors
from understudy.common import log


def is_template(obj):
    if isinstance(obj, Mapping):
        return True
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return True
    return isinstance(obj, tuple) and hasattr(type(obj), "_fields")


def template_keys(template):
    if isinstance(template, Mapping):
        return list(template.keys())
    if dataclasses.is_dataclass(template):
        return [f.name for f in dataclasses.fields(template)]
    return list(type(template)._fields)


def template_value(template, key):
    if isinstance(template, Mapping):
        return template[key]
    return getattr(template, key)


def name_of(obj):
    """Short name used to derive double names from the thing being doubled."""
    if inspect.ismodule(obj) or isinstance(obj, type):
        name = obj.__name__
    else:
        name = type(obj).__name__
    return name.rpartition(".")[2]


def _signature(func):
    try:
        return inspect.signature(func)
    except (TypeError, ValueError):
        # Some builtins don't have signature metadata; assume they accept anything.
        return None


def accepts(func, arity):
    """Whether func can be called with arity positional arguments."""
    sig = _signature(func)
    if sig is None:
        return True
    try:
        sig.bind(*([None] * arity))
    except TypeError:
        return False
    return True


def arity_of(func):
    """Number of required positional arguments of func."""
    sig = _signature(func)
    if sig is None:
        raise TypeError("Cannot determine the arity of {0!r}".format(func))
    return sum(
        1
        for p in sig.parameters.values()
        if p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD) and p.default is p.empty
    )


def lookup(surface, name):
    """Returns the operation name as declared by surface, as something that can be
    checked by accepts(), or None if surface doesn't declare it.
    """
    if isinstance(surface, type):
        # Look at the class dict to tell static and class methods apart from
        # plain functions, which get self as their first argument.
        for cls in inspect.getmro(surface):
            if name in vars(cls):
                attr = vars(cls)[name]
                break
        else:
            return None
        if isinstance(attr, (staticmethod, classmethod)):
            return getattr(surface, name)
        if inspect.isfunction(attr):
            return _drop_self(attr)
        return attr if callable(attr) else None

    try:
        attr = getattr(surface, name)
    except AttributeError:
        return None
    return attr if callable(attr) else None


def _drop_self(func):
    sig = _signature(func)
    if sig is None:
        return func
    params = list(sig.parameters.values())[1:]

    def unbound(*args):
        raise AssertionError("Only used for its signature")

    unbound.__signature__ = sig.replace(parameters=params)
    return unbound


def validate(surface, name, arity):
    """Whether surface declares operation name, and it accepts arity arguments."""
    func = lookup(surface, name)
    return func is not None and accepts(func, arity)


def verify_declared(surface, double_name, name, arity):
    """Raises SurfaceVerificationFailure unless validate(surface, name, arity)."""
    if not validate(surface, name, arity):
        raise log.reraise(errors.SurfaceVerificationFailure(double_name, name, arity))


def can_call_through(surface, name, arity):
    """Whether call_through() can invoke the real operation name with arity arguments.

    Unlike validate(), this is never true for plain methods of a class, since there
    is no instance to call them on.
    """
    if isinstance(surface, type) and inspect.isfunction(
        inspect.getattr_static(surface, name, None)
    ):
        return False
    return validate(surface, name, arity)


def call_through(surface, name, args):
    """Invokes the real operation for a spy."""
    func = getattr(surface, name)
    log.debug("Calling through to {0}.{1}{2!r}", name_of(surface), name, tuple(args))
    return func(*args)
