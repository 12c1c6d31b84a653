# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See LICENSE in the project root
# for license information.

"""Injectable test doubles.

understudy creates substitute objects that stand in for real dependencies in tests.
It never patches or modifies the real thing: the double must be passed to the code
under test in its place.
"""

__all__ = [
    "Any",
    "Double",
    "allow",
    "assert_received",
    "clear",
    "close",
    "double",
    "expect",
    "history",
    "current_inbox",
    "refute_received",
    "some",
    "spy",
    "stub",
    "verify",
]

__version__ = "0.4.0"

# __version__ must be defined before these imports, since common.log reads it.
from understudy.doubles import (  # noqa
    Double,
    allow,
    assert_received,
    clear,
    close,
    double,
    expect,
    current_inbox,
    history,
    refute_received,
    spy,
    stub,
    verify,
)
from understudy.errors import (  # noqa
    ArityMismatch,
    DoubleClosed,
    DoubleError,
    SurfaceVerificationFailure,
    UnknownKeyOnFixedSurface,
    UnstubbedCall,
    VerificationFailure,
)
from understudy.patterns import Any  # noqa
from understudy import some  # noqa
