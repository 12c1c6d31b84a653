# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See LICENSE in the project root
# for license information.

"""What a stub does once it has been selected for a call.

Actions are plain data until apply() is invoked, so that the stub table can hold
them, and the double's actor can hand them back to the caller without running any
user code on the actor thread.
"""


class Action:
    def apply(self, args):
        raise NotImplementedError


class Return(Action):
    def __init__(self, value=None):
        self.value = value

    def __repr__(self):
        return "Return({0!r})".format(self.value)

    def apply(self, args):
        return self.value


class Raise(Action):
    """Raises an exception of the specified kind with the specified message.

    kind can also be an exception instance, in which case it is raised as is, and
    message must be None.
    """

    def __init__(self, kind=RuntimeError, message=None):
        if isinstance(kind, BaseException):
            assert message is None, "message cannot be used with an exception instance"
        elif not (isinstance(kind, type) and issubclass(kind, BaseException)):
            raise TypeError(
                "kind must be an exception type or instance, not {0!r}".format(kind)
            )
        self.kind = kind
        self.message = message

    @classmethod
    def from_spec(cls, raises):
        """Creates an instance from the raises= value accepted by the public API:
        an exception type or instance, a (type, message) tuple, or a message string
        for a RuntimeError.
        """
        if isinstance(raises, Raise):
            return raises
        if isinstance(raises, str):
            return cls(RuntimeError, raises)
        if isinstance(raises, tuple):
            kind, message = raises
            return cls(kind, message)
        return cls(raises)

    def __repr__(self):
        if isinstance(self.kind, BaseException):
            return "Raise({0!r})".format(self.kind)
        return "Raise({0}, {1!r})".format(self.kind.__name__, self.message)

    def apply(self, args):
        if isinstance(self.kind, BaseException):
            raise self.kind
        if self.message is None:
            raise self.kind()
        raise self.kind(self.message)


class Invoke(Action):
    """Calls a replacement function with the call arguments, and returns its result.
    """

    def __init__(self, func):
        assert callable(func)
        self.func = func

    def __repr__(self):
        return "Invoke({0})".format(getattr(self.func, "__qualname__", repr(self.func)))

    def apply(self, args):
        return self.func(*args)
