# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See LICENSE in the project root
# for license information.

import contextlib
import functools
import os
import platform
import sys
import threading
import traceback

import understudy
from understudy.common import options, timestamp


LEVELS = ("debug", "info", "warning", "error")
"""Logging levels, lowest to highest importance.
"""

stderr = sys.__stderr__

stderr_levels = {"warning", "error"}
"""What should be logged to stderr.
"""

file_levels = set(LEVELS)
"""What should be logged to file, when it is not None.
"""

file = None
"""If not None, which file to log to.

This can be automatically set by to_file().
"""

log_dir = options.log_dir
"""If not None, to_file() creates log files in this directory. Defaults to the
value of UNDERSTUDY_LOG_DIR.
"""

timestamp_format = "09.3f"
"""Format spec used for timestamps. Can be changed to dial precision up or down.
"""


_lock = threading.RLock()


def write(level, text):
    assert level in LEVELS

    t = timestamp.current()
    prefix = "{0}+{1:{2}}: ".format(level[0].upper(), t, timestamp_format)

    indent = "\n" + (" " * len(prefix))
    output = prefix + indent.join(text.split("\n")) + "\n\n"

    with _lock:
        if level in stderr_levels:
            try:
                stderr.write(output)
            except Exception:
                pass

        if file is not None and level in file_levels:
            try:
                file.write(output)
                file.flush()
            except Exception:
                pass

    return text


def write_format(level, format_string, *args, **kwargs):
    try:
        text = format_string.format(*args, **kwargs)
    except Exception:
        exception()
        raise
    return write(level, text)


debug = functools.partial(write_format, "debug")
info = functools.partial(write_format, "info")
warning = functools.partial(write_format, "warning")


def error(*args, **kwargs):
    """Logs an error.

    Returns the output wrapped in AssertionError. Thus, the following::

        raise log.error(...)

    has the same effect as::

        log.error(...)
        assert False, fmt(...)
    """
    return AssertionError(write_format("error", *args, **kwargs))


def exception(format_string="", *args, **kwargs):
    """Logs an exception with full traceback.

    If format_string is specified, it is formatted with format(*args, **kwargs),
    and prepended to the exception traceback on a separate line.

    If exc_info is specified, the exception it describes will be logged. Otherwise,
    sys.exc_info() - i.e. the exception being handled currently - will be logged.

    If level is specified, the exception will be logged as a message of that level.
    The default is "error".

    Returns the exception object, for convenient re-raising::

        try:
            ...
        except Exception:
            raise log.exception()  # log it and re-raise
    """

    level = kwargs.pop("level", "error")
    exc_info = kwargs.pop("exc_info", sys.exc_info())

    if format_string:
        format_string += "\n\n"
    format_string += "{exception}"

    exception = "".join(traceback.format_exception(*exc_info))
    write_format(level, format_string, *args, exception=exception, **kwargs)

    return exc_info[1]


def reraise(exc, format_string="", *args, **kwargs):
    """Logs exc at the "info" level and returns it, so that a failure that is
    about to propagate to test code can be written as::

        raise log.reraise(errors.UnstubbedCall(...), "{0} has no stub", name)
    """
    if format_string:
        info(format_string + "\n{exc}", *args, exc=exc, **kwargs)
    else:
        info("{0}", exc)
    return exc


class LogFile:
    """A log file opened by to_file(). Closing it stops logging to it.

    Can be used as a context manager::

        with log.to_file(prefix="tests"):
            ...
    """

    def __init__(self, filename, f):
        self.filename = filename
        self.file = f

    def __repr__(self):
        return "LogFile({0!r})".format(self.filename)

    def close(self):
        global file
        with _lock:
            if file is self.file:
                file = None
        self.file.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, exc_tb):
        self.close()


def to_file(filename=None, prefix=None):
    """Starts logging all messages at file_levels to the specified file.

    If filename is None, the file is created in log_dir, and named after prefix
    and the current process ID. Returns None if there is no log_dir to put it in.
    """
    global file

    if filename is None:
        if log_dir is None:
            return None
        os.makedirs(log_dir, exist_ok=True)
        filename = os.path.join(
            log_dir, "{0}-{1}.log".format(prefix or "understudy", os.getpid())
        )

    f = open(filename, "w", encoding="utf-8")
    with _lock:
        if file is not None:
            file.close()
        file = f

    describe_environment("understudy {0} log", understudy.__version__)
    return LogFile(filename, f)


def describe_environment(header, *args):
    info(
        header + "\n\n{platform} {machine}\n{impl} {version} ({bits}-bit)",
        *args,
        platform=platform.platform(),
        machine=platform.machine(),
        impl=platform.python_implementation(),
        version=platform.python_version(),
        bits=64 if sys.maxsize > 2 ** 32 else 32,
    )


def stack(title="Stack trace"):
    stack = "\n".join(traceback.format_stack())
    debug("{0}:\n\n{1}", title, stack)


@contextlib.contextmanager
def suppressed(*levels):
    """Temporarily stops writing messages of the given levels to stderr.
    """
    global stderr_levels
    with _lock:
        original = stderr_levels
        stderr_levels = original - set(levels)
    try:
        yield
    finally:
        with _lock:
            stderr_levels = original
