# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See LICENSE in the project root
# for license information.

from understudy import errors
from understudy.common import log


class Expectation:
    """A call that must happen: operation name, called with arguments that match
    pattern. Expectations of a double are checked in the order they were declared.
    """

    def __init__(self, name, pattern):
        self.name = name
        self.pattern = pattern

    def __repr__(self):
        return self.pattern.describe_call(self.name)

    def realized_by(self, record):
        return record.name == self.name and self.pattern.matches(record.args)


def verify(double, expectations, history):
    """Checks expectations against history, a list of CallRecord in the order they
    were posted.

    Each expectation is only searched for among the records that follow the record
    which realized the previous expectation, so that expectations must be realized
    in the same order in which they were declared. Raises VerificationFailure for
    the first expectation that is not realized.
    """
    history = list(history)
    position = 0
    for expectation in expectations:
        for i in range(position, len(history)):
            if expectation.realized_by(history[i]):
                log.debug("{0}: {1!r} realized by {2!r}", double, expectation, history[i])
                position = i + 1
                break
        else:
            log.info("{0}: no calls matching {1!r}", double, expectation)
            log.info("Calls considered: {0!r}", history[position:])
            raise errors.VerificationFailure(double, expectation, history)
