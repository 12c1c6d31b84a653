# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See LICENSE in the project root
# for license information.

"""pytest integration. Enable it in conftest.py with::

    pytest_plugins = ["understudy.pytest_plugin"]

It gives every test a clean inbox, and provides the doubles fixture::

    def test_process(doubles):
        dbl = doubles.double()
        doubles.expect(dbl, "process", args=[1])
        run(dbl)
        # expectations of dbl are verified when the test finishes
"""

import os

import pytest

import understudy
from understudy.common import log
from understudy.inbox import Inbox


class Session:
    """Creates doubles for a single test, and keeps track of them, so that they can
    all be verified and closed when the test is over.
    """

    def __init__(self, name):
        self.name = name
        self.doubles = []

    def __repr__(self):
        return "Session({0})".format(self.name)

    def _track(self, dbl):
        if dbl not in self.doubles:
            self.doubles.append(dbl)
        return dbl

    def double(self, source=None, verify=True):
        return self._track(understudy.double(source, verify=verify))

    def spy(self, source):
        return self._track(understudy.spy(source))

    def allow(self, dbl, *args, **kwargs):
        return self._track(understudy.allow(dbl, *args, **kwargs))

    def stub(self, dbl, *args, **kwargs):
        return self._track(understudy.stub(dbl, *args, **kwargs))

    def expect(self, dbl, *args, **kwargs):
        return self._track(understudy.expect(dbl, *args, **kwargs))

    def verify_all(self):
        for dbl in self.doubles:
            understudy.verify(dbl)

    def close(self):
        for dbl in self.doubles:
            understudy.close(dbl)


def pytest_addoption(parser):
    parser.addoption(
        "--understudy-log-dir",
        type=str,
        help="Write understudy logs to the specified directory",
    )


def pytest_configure(config):
    log_dir = config.getoption("understudy_log_dir", None)
    if log_dir:
        log.log_dir = os.path.abspath(log_dir)


@pytest.hookimpl(hookwrapper=True, tryfirst=True)
def pytest_runtest_makereport(item, call):
    # Adds attributes setup_report, call_report, and teardown_report to the item,
    # referencing TestReport instances for the corresponding phases, so that fixtures
    # can tell whether the test failed.
    outcome = yield
    report = outcome.get_result()
    setattr(item, report.when + "_report", report)


@pytest.fixture(scope="session", autouse=True)
def understudy_log_file():
    log_file = log.to_file(prefix="tests")
    try:
        yield log_file
    finally:
        if log_file is not None:
            log_file.close()


@pytest.fixture(autouse=True)
def understudy_inbox(request):
    """Resets the inbox of the test thread, so that every test starts with no calls
    recorded.
    """
    inbox = Inbox.current()
    inbox.reset()
    log.info("{0} started.", request.node.nodeid)
    try:
        yield inbox
    finally:
        inbox.reset()


@pytest.fixture
def doubles(request):
    """Provides a Session for the test. Expectations of all doubles created through
    it are verified after the test, unless the test has already failed.
    """
    session = Session(request.node.nodeid)
    try:
        yield session
        call_report = getattr(request.node, "call_report", None)
        if call_report is not None and call_report.passed:
            session.verify_all()
    finally:
        session.close()
