"""Host test interfaces that receive assertion outcomes."""

from __future__ import annotations

import logging
import unittest
from typing import Any, Protocol

__unittest = True

logger = logging.getLogger(__name__)


class AbortTest(AssertionError):
    """Raised by a handle to stop the current test immediately."""


class TestHandle(Protocol):
    """Capabilities a prover needs from the surrounding test framework."""

    def log(self, *args: Any) -> None: ...

    def error(self, *args: Any) -> None: ...

    def fail_now(self) -> None: ...

    def fatal(self, *args: Any) -> None: ...

    def fatalf(self, fmt: str, *args: Any) -> None: ...

    def failed(self) -> bool: ...

    def helper(self) -> None: ...


class RecordingHandle:
    """Handle that records output and aborts by raising ``AbortTest``.

    Works anywhere an ``AssertionError`` counts as a failure: scripts,
    pytest, or a bare ``try`` block.
    """

    def __init__(self, name: str = "proof") -> None:
        self.name = name
        self.logs: list[str] = []
        self.errors: list[str] = []
        self.aborted = False
        self._failed = False

    def log(self, *args: Any) -> None:
        line = _join(args)
        self.logs.append(line)
        logger.info("event=test_log test=%s message=%s", self.name, line)

    def error(self, *args: Any) -> None:
        message = _join(args)
        self.errors.append(message)
        self._failed = True
        logger.error("event=test_error test=%s message=%s", self.name, message)

    def fail_now(self) -> None:
        self._failed = True
        self.aborted = True
        raise AbortTest(self.summary())

    def fatal(self, *args: Any) -> None:
        self.error(*args)
        self.fail_now()

    def fatalf(self, fmt: str, *args: Any) -> None:
        self.fatal(fmt % args if args else fmt)

    def failed(self) -> bool:
        return self._failed

    def helper(self) -> None:
        pass

    def summary(self) -> str:
        if not self.errors:
            return f"{self.name}: test marked failed"
        return "\n".join(self.errors)


class UnitTestHandle(RecordingHandle):
    """Handle bound to a ``unittest.TestCase``.

    Soft failures that were never escalated fail the test during cleanup.
    """

    def __init__(self, testcase: unittest.TestCase) -> None:
        super().__init__(name=testcase.id())
        self.testcase = testcase
        testcase.addCleanup(self._check_soft_failures)

    def _check_soft_failures(self) -> None:
        if self.failed() and not self.aborted:
            self.aborted = True
            raise AbortTest(self.summary())


def _join(args: tuple[Any, ...]) -> str:
    return " ".join(str(arg) for arg in args)
