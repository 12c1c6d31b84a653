# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See LICENSE in the project root
# for license information.

import re
import threading

import pytest

import understudy
from understudy import (
    Any,
    allow,
    assert_received,
    clear,
    close,
    double,
    errors,
    history,
    refute_received,
    some,
    stub,
)
from understudy.doubles import handle_of, is_double
from understudy.registry import Registry
from tests import sample


pytestmark = pytest.mark.timeout(5)


@pytest.fixture(params=["open", "template", "surface"])
def dbl(request):
    """A double of every kind that has io_puts/1 and process/3."""
    if request.param == "open":
        result = double()
    elif request.param == "template":
        result = double(sample.template())
    else:
        result = double(sample)
    yield result
    close(result)


def test_names():
    assert re.fullmatch(r"Double\d+", str(double()))
    assert re.fullmatch(r"sampleDouble\d+", str(double(sample)))
    assert re.fullmatch(r"GreeterDouble\d+", str(double(sample.Greeter)))
    assert re.fullmatch(r"dictDouble\d+", str(double({"a": 1})))

    first = double()
    second = double()
    assert handle_of(first) != handle_of(second)
    assert repr(first) == "<Double {0}>".format(first)
    assert is_double(first)
    assert not is_double(sample)


def test_returns(dbl):
    allow(dbl, "io_puts", args=["x"], returns=":ok")
    assert dbl.io_puts("x") == ":ok"
    assert dbl.io_puts("x") == ":ok"
    assert_received("io_puts", "x")
    assert_received("io_puts", "x")
    refute_received("io_puts", any_args=True)


def test_returns_none_by_default(dbl):
    allow(dbl, "io_puts", args=["x"])
    assert dbl.io_puts("x") is None


def test_returns_each(dbl):
    allow(dbl, "io_puts", args=["x"], returns_each=[1, 2, 3])
    assert [dbl.io_puts("x") for _ in range(5)] == [1, 2, 3, 3, 3]


def test_allow_again_queues(dbl):
    allow(dbl, "io_puts", args=["x"], returns=1)
    allow(dbl, "io_puts", args=["x"], returns=2)
    assert [dbl.io_puts("x") for _ in range(3)] == [1, 2, 2]


def test_any_args(dbl):
    allow(dbl, "process", args=Any(3), returns="any")
    allow(dbl, "process", args=[1, 2, 3], returns="exact")

    assert dbl.process(1, 2, 3) == "exact"
    assert dbl.process("a", None, 3) == "any"


def test_matchers_in_args(dbl):
    allow(dbl, "io_puts", args=[some.str.starting_with("user:")], returns="user")
    assert dbl.io_puts("user:42") == "user"
    with pytest.raises(errors.UnstubbedCall):
        dbl.io_puts("admin")


@pytest.mark.parametrize(
    "raises, kind, message",
    [
        ("failed", RuntimeError, "failed"),
        ((ValueError, "bad value"), ValueError, "bad value"),
        (KeyError, KeyError, None),
        (OSError("disk full"), OSError, "disk full"),
    ],
)
def test_raises(dbl, raises, kind, message):
    allow(dbl, "io_puts", args=["x"], raises=raises)
    with pytest.raises(kind) as exc_info:
        dbl.io_puts("x")
    if message is not None:
        assert str(exc_info.value) == message

    # Calls that raise are still recorded.
    assert_received("io_puts", "x")


def test_stub_with_function(dbl):
    stub(dbl, "process", lambda x, y, z: x + y + z)
    assert dbl.process(1, 2, 3) == 6
    assert dbl.process("a", "b", "c") == "abc"

    stub(dbl, "io_puts", lambda text: text.upper(), args=["special"])
    assert dbl.io_puts("special") == "SPECIAL"
    with pytest.raises(errors.UnstubbedCall):
        dbl.io_puts("other")


def test_unstubbed_call(dbl):
    allow(dbl, "io_puts", args=["x"])
    with pytest.raises(errors.UnstubbedCall) as exc_info:
        dbl.io_puts("y")

    exc = exc_info.value
    assert exc.double == str(dbl)
    assert exc.name == "io_puts"
    assert exc.arguments == ("y",)
    refute_received("io_puts", "y")


def test_arity_mismatch(dbl):
    allow(dbl, "process", args=[1, 2, 3])
    with pytest.raises(errors.ArityMismatch) as exc_info:
        dbl.process(1, 2)
    assert str(exc_info.value) == "{0}.process/2 is undefined; stubbed: process/3".format(dbl)


def test_item_access(dbl):
    allow(dbl, "io_puts", args=["x"], returns=1)
    assert dbl["io_puts"]("x") == 1
    assert "io_puts" in dbl
    assert "no_such_operation" not in dbl
    with pytest.raises(KeyError):
        dbl["no_such_operation"]
    with pytest.raises(AttributeError):
        dbl.no_such_operation


def test_configuration_returns_double(dbl):
    result = allow(
        allow(dbl, "io_puts", args=["a"], returns="A"), "io_puts", args=["b"], returns="B"
    )
    assert result is dbl
    assert dbl.io_puts("a") == "A"
    assert dbl.io_puts("b") == "B"


def test_clear(dbl):
    allow(dbl, "io_puts", args=["x"], returns=1)
    allow(dbl, "process", args=Any(3), returns=2)

    assert clear(dbl, "io_puts") is dbl
    with pytest.raises(errors.UnstubbedCall):
        dbl.io_puts("x")
    assert dbl.process(1, 2, 3) == 2

    clear(dbl)
    with pytest.raises(errors.UnstubbedCall):
        dbl.process(1, 2, 3)

    allow(dbl, "io_puts", args=["x"], returns=3)
    assert dbl.io_puts("x") == 3


def test_history(dbl):
    other = allow(double(), "io_puts", args=Any(1))
    allow(dbl, "io_puts", args=Any(1))

    dbl.io_puts(1)
    other.io_puts(2)
    dbl.io_puts(3)

    assert [r.args for r in history(dbl)] == [(1,), (3,)]
    assert [r.args for r in history()] == [(1,), (2,), (3,)]
    assert history()[1].double == str(other)

    assert_received("io_puts", 2, double=other)
    refute_received("io_puts", 2, double=dbl)
    close(other)


def test_calls_from_other_threads(dbl):
    allow(dbl, "io_puts", args=Any(1), returns="ok")
    results = []

    t = threading.Thread(target=lambda: results.append(dbl.io_puts("from thread")))
    t.start()
    assert_received("io_puts", "from thread", timeout=2)
    t.join()

    assert results == ["ok"]


def test_concurrent_callers(dbl):
    allow(dbl, "io_puts", args=Any(1), returns_each=range(100))
    results = []
    lock = threading.Lock()

    def worker():
        for i in range(50):
            value = dbl.io_puts(i)
            with lock:
                results.append(value)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sorted(results) == list(range(99)) + [99] * 301
    assert len(history(dbl)) == 400


def test_close(dbl):
    allow(dbl, "io_puts", args=["x"])
    close(dbl)
    with pytest.raises(errors.DoubleClosed):
        dbl.io_puts("x")
    with pytest.raises(errors.DoubleClosed):
        allow(dbl, "io_puts", args=["y"])


def test_close_unregisters():
    registry = Registry()
    before = len(registry)

    created = [double() for _ in range(50)]
    assert len(registry) == before + 50

    for dbl in created:
        close(dbl)
    assert len(registry) == before


def test_invalid_allow_arguments():
    dbl = double()
    with pytest.raises(TypeError):
        allow(dbl, "f", returns=1, raises="boom")
    with pytest.raises(TypeError):
        allow(dbl, "f", returns=1, returns_each=[1])
    with pytest.raises(ValueError):
        allow(dbl, "f", returns_each=[])
    with pytest.raises(TypeError):
        allow(dbl, "f", args="x")


def test_open_double_accepts_any_name():
    dbl = allow(double(), "whatever", args=[1, 2, 3, 4], returns=4)
    assert dbl.whatever(1, 2, 3, 4) == 4

    with pytest.raises(AttributeError):
        double().not_configured


def test_template():
    dbl = double(sample.template())
    allow(dbl, "io_puts", args=["x"], returns="stubbed")

    assert dbl.io_puts("x") == "stubbed"
    assert dbl.version == "1.0"

    # Keys that are not stubbed keep their values.
    assert dbl.process is sample.process
    assert dbl["version"] == "1.0"

    with pytest.raises(errors.UnknownKeyOnFixedSurface) as exc_info:
        allow(dbl, "delete", args=["x"])
    assert str(exc_info.value) == (
        "dict does not contain key: delete. Use double() without a template if you "
        "want to add dynamic operation names."
    )
    assert isinstance(exc_info.value, KeyError)

    # Templates don't fix the arity.
    allow(dbl, "process", args=[1], returns="one arg")
    assert dbl.process(1) == "one arg"


def test_template_namedtuple_and_dataclass():
    point = allow(double(sample.Point(1, 2)), "x", returns=10)
    assert point.x() == 10
    assert point.y == 2
    with pytest.raises(errors.UnknownKeyOnFixedSurface):
        allow(point, "z")

    settings = double(sample.Settings(port=9000))
    assert settings.port == 9000
    allow(settings, "host", returns="example.com")
    assert settings.host() == "example.com"


def test_verifying_double():
    dbl = double(sample)
    allow(dbl, "process", args=[1, 2, 3], returns="ok")
    assert dbl.process(1, 2, 3) == "ok"

    with pytest.raises(errors.SurfaceVerificationFailure) as exc_info:
        allow(dbl, "process", args=[1, 2])
    assert str(exc_info.value) == "The function 'process/2' is not defined in {0}".format(
        dbl
    )

    with pytest.raises(errors.SurfaceVerificationFailure):
        allow(dbl, "no_such_function", args=[])

    with pytest.raises(errors.SurfaceVerificationFailure):
        stub(dbl, "io_puts", lambda a, b: None)

    # Functions with defaults accept every arity in their range.
    allow(dbl, "another_function", returns=0)
    allow(dbl, "another_function", args=[1], returns=1)
    assert dbl.another_function() == 0
    assert dbl.another_function(1) == 1


def test_verifying_double_exposes_surface_operations():
    dbl = double(sample)
    assert "io_puts" in dbl
    assert "no_such_function" not in dbl
    with pytest.raises(errors.UnstubbedCall):
        dbl.io_puts("x")


def test_verifying_double_of_class():
    dbl = double(sample.Greeter)
    allow(dbl, "greet", args=["Bob"], returns="Hi Bob")
    allow(dbl, "shout", args=["a"], returns="A")
    assert dbl.greet("Bob") == "Hi Bob"
    assert dbl.shout("a") == "A"

    with pytest.raises(errors.SurfaceVerificationFailure):
        allow(dbl, "greet", args=[])


def test_unverified_double():
    dbl = double(sample, verify=False)
    allow(dbl, "process", args=[1], returns="ok")
    allow(dbl, "no_such_function", returns="ok too")
    assert dbl.process(1) == "ok"
    assert dbl.no_such_function() == "ok too"
    assert re.fullmatch(r"sampleDouble\d+", str(dbl))


def test_allow_on_real_thing_creates_double():
    dbl = allow(sample, "io_puts", args=["x"], returns="stubbed")
    assert is_double(dbl)
    assert dbl.io_puts("x") == "stubbed"
    assert sample.io_puts("x") == "real io_puts: x"

    with pytest.raises(errors.SurfaceVerificationFailure):
        allow(sample, "io_puts", args=[])


def test_double_injection():
    def greet(name, io=sample):
        return io.io_puts("Hello, " + name)

    assert greet("World") == "real io_puts: Hello, World"

    io = allow(double(sample), "io_puts", args=["Hello, World"], returns=":ok")
    assert greet("World", io) == ":ok"
    assert_received("io_puts", "Hello, World")


def test_public_api():
    for name in understudy.__all__:
        assert hasattr(understudy, name), name
