# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See LICENSE in the project root
# for license information.

"""Argument matchers for exact stub patterns, expectations and inbox assertions.

Usage::

    from understudy import allow, double, some

    dbl = allow(double(), "send", args=[some.str.starting_with("user:"), some.int])
    dbl.send("user:42", 3)

    assert 123 == some.int.in_range(0, 200)
    assert "abc" == some.str.such_that(lambda s: s.startswith("ab"))
    assert None != some.thing
    assert None == some.thing | None

    assert {"id": 1, "name": "x"} == some.dict.containing({"id": some.int})
"""

__all__ = [
    "bool",
    "bytes",
    "dict",
    "error",
    "instanceof",
    "int",
    "list",
    "number",
    "object",
    "str",
    "thing",
    "tuple",
]

import builtins
import numbers
import re

from understudy import matchers


object = matchers.Object()
thing = matchers.Thing()
instanceof = matchers.InstanceOf


bool = instanceof(builtins.bool)
number = instanceof(numbers.Real, "number")
int = instanceof(numbers.Integral, "int")
tuple = instanceof(builtins.tuple)
error = instanceof(BaseException, "error")


bytes = instanceof(builtins.bytes)
bytes.starting_with = lambda prefix: bytes.matching(re.escape(prefix) + b".*", re.DOTALL)
bytes.ending_with = lambda suffix: bytes.matching(b".*" + re.escape(suffix), re.DOTALL)
bytes.containing = lambda sub: bytes.matching(b".*" + re.escape(sub) + b".*", re.DOTALL)


str = instanceof(builtins.str)
str.starting_with = lambda prefix: str.matching(re.escape(prefix) + ".*", re.DOTALL)
str.ending_with = lambda suffix: str.matching(".*" + re.escape(suffix), re.DOTALL)
str.containing = lambda sub: str.matching(".*" + re.escape(sub) + ".*", re.DOTALL)


list = instanceof(builtins.list)
list.containing = matchers.ListContaining


dict = instanceof(builtins.dict)
dict.containing = matchers.DictContaining
