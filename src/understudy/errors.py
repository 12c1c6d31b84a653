# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See LICENSE in the project root
# for license information.

"""Exceptions raised by doubles.

Every exception also derives from the closest builtin exception type, so that
code under test which catches e.g. TypeError or AttributeError behaves the same
way with a double as it would with the real dependency.
"""


class DoubleError(Exception):
    """Base class for all errors raised by understudy itself. Errors injected via
    raises= or Raise() are raised as configured, and do not derive from this.
    """


class UnstubbedCall(DoubleError, LookupError):
    """An operation was invoked with arguments that match no configured stub."""

    def __init__(self, double, name, args):
        self.double = double
        self.name = name
        self.arguments = tuple(args)
        super().__init__(
            "{0}.{1}{2!r} has no stub matching these arguments".format(
                double, name, self.arguments
            )
        )


class ArityMismatch(DoubleError, TypeError):
    """An operation was invoked with an argument count that no configured pattern
    for it accepts.
    """

    def __init__(self, double, name, arity, arities=()):
        self.double = double
        self.name = name
        self.arity = arity
        self.arities = tuple(sorted(set(arities)))
        if self.arities:
            known = ", ".join("{0}/{1}".format(name, n) for n in self.arities)
        else:
            known = "nothing"
        super().__init__(
            "{0}.{1}/{2} is undefined; stubbed: {3}".format(double, name, arity, known)
        )


class SurfaceVerificationFailure(DoubleError, AttributeError):
    """A stub was configured for an operation or arity that the real surface
    being doubled does not declare.
    """

    def __init__(self, surface_name, name, arity):
        self.surface_name = surface_name
        self.name = name
        self.arity = arity
        super().__init__(
            "The function '{0}/{1}' is not defined in {2}".format(
                name, arity, surface_name
            )
        )


class UnknownKeyOnFixedSurface(DoubleError, KeyError):
    """A stub was configured for a name that a fixed-shape double does not have."""

    def __init__(self, template_name, name):
        self.template_name = template_name
        self.name = name
        super().__init__(template_name, name)

    def __str__(self):
        return (
            "{0} does not contain key: {1}. Use double() without a template if you "
            "want to add dynamic operation names.".format(self.template_name, self.name)
        )


class VerificationFailure(DoubleError, AssertionError):
    """verify() found an expectation that was not met by the recorded calls.

    expectation is the first unmet expectation, and history is the list of all
    CallRecord objects that were considered.
    """

    def __init__(self, double, expectation, history):
        self.double = double
        self.expectation = expectation
        self.history = list(history)

        lines = ["{0}: expected {1!r}, but it was not called".format(double, expectation)]
        if self.history:
            lines.append("Calls observed, in order:")
            lines += ["    {0!r}".format(record) for record in self.history]
        else:
            lines.append("No calls were observed.")
        super().__init__("\n".join(lines))


class DoubleClosed(DoubleError, RuntimeError):
    """A double was used after it had been closed. Closed doubles are removed from
    the registry, so this is also raised for handles that are not registered.
    """

    def __init__(self, double):
        self.double = double
        super().__init__("{0} is closed".format(double))
