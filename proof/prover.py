"""Assertion facade: named assertions reported through a test handle."""

from __future__ import annotations

import contextlib
import enum
import logging
import time
import traceback
import unittest
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Callable, Iterator

from proof.config import Config, configure_logging, default_config
from proof.equality import equal, get_len, is_nil, is_zero
from proof.handle import AbortTest, TestHandle, UnitTestHandle
from proof.kinds import Kind, kind_of, type_name
from proof.messages import (
    failure_with_diff,
    failure_with_value,
    failure_with_values,
    format_duration,
)

__unittest = True

logger = logging.getLogger(__name__)


class Strictness(enum.Enum):
    STRICT = "strict"
    LAX = "lax"


class Outcome(enum.Enum):
    PASS = "pass"
    FAIL_FATAL = "fail_fatal"
    FAIL_SOFT = "fail_soft"


@dataclass(frozen=True)
class PollPolicy:
    interval: float = 0.1
    sleep: Callable[[float], None] = time.sleep
    clock: Callable[[], float] = time.monotonic


class Prover:
    """Named assertions over the equality engine.

    A ``STRICT`` prover aborts the test on the first failure. A ``LAX``
    prover records the failure and keeps going; it is only created by
    :meth:`lax`, which escalates once the scope returns.
    """

    def __init__(
        self,
        handle: TestHandle,
        *,
        strictness: Strictness = Strictness.STRICT,
        config: Config | None = None,
        poll_policy: PollPolicy | None = None,
    ) -> None:
        self.handle = handle
        self.strictness = strictness
        self.config = config or Config()
        self.poll_policy = poll_policy or PollPolicy(
            interval=self.config.poll_interval_seconds
        )
        self._failed = False

    @property
    def failed(self) -> bool:
        """Whether an assertion made through this prover has failed."""
        return self._failed

    def equal(self, x: Any, y: Any) -> None:
        if not equal(x, y):
            self._fail(
                "equal",
                failure_with_diff(
                    "Objects should be equal", x, y, self.config.diff_context_lines
                ),
            )

    def equals_any(self, x: Any, *ys: Any) -> None:
        if any(equal(x, y) for y in ys):
            return
        self._fail(
            "equals_any",
            failure_with_diff(
                "One of the list of objects should be equal to the first argument",
                x,
                list(ys),
                self.config.diff_context_lines,
            ),
        )

    def not_equal(self, x: Any, y: Any) -> None:
        if equal(x, y):
            self._fail(
                "not_equal",
                failure_with_values(
                    "Objects should not be equal", x, y, self.config.max_value_length
                ),
            )

    def err(self, error: BaseException | None) -> None:
        if is_nil(error):
            self._fail("err", self._with_value("Error should not be nil", error))

    def not_err(self, error: BaseException | None) -> None:
        if not is_nil(error):
            self._fail("not_err", self._with_value("Error should be nil", error))

    def nil(self, value: Any) -> None:
        if not is_nil(value):
            self._fail("nil", self._with_value("Object should be nil", value))

    def not_nil(self, value: Any) -> None:
        if is_nil(value):
            self._fail("not_nil", self._with_value("Object should not be nil", value))

    def true(self, value: Any) -> None:
        if not value:
            self._fail("true", self._with_value("Bool should be true", value))

    def false(self, value: Any) -> None:
        if value:
            self._fail("false", self._with_value("Bool should not be true", value))

    def zero(self, value: Any) -> None:
        if not is_zero(value):
            self._fail("zero", self._with_value("Object should be zero value", value))

    def not_zero(self, value: Any) -> None:
        if is_zero(value):
            self._fail(
                "not_zero", self._with_value("Object should not be zero value", value)
            )

    def contained_by_slice(self, value: Any, sequence: Any) -> None:
        """Assert that some element of ``sequence`` equals ``value``.

        A non-sequence argument is a broken test, so it aborts even in a
        lax scope.
        """
        if kind_of(sequence) is not Kind.SEQUENCE:
            self._failed = True
            self.handle.helper()
            self.handle.fatalf(
                "contained_by_slice received non-sequence argument (%s)",
                type_name(sequence),
            )
            return
        for item in sequence:
            if equal(item, value):
                return
        self._fail(
            "contained_by_slice",
            failure_with_values(
                "Slice does not contain object",
                sequence,
                value,
                self.config.max_value_length,
            ),
        )

    def len(self, value: Any, length: int) -> None:
        actual, has_len = get_len(value)
        if has_len and actual == length:
            return
        if not has_len:
            message = self._with_value(
                "Object was not of type sequence, mapping, set or queue", value
            )
        else:
            message = self._with_value(
                f"Expected object of length {actual} to be length {length}", value
            )
        self._fail("len", message)

    def panic(self, fn: Callable[[], Any]) -> None:
        try:
            fn()
        except AbortTest:
            raise
        except Exception:
            return
        self._fail("panic", "Expected function to panic")

    def retry(self, timeout: float | timedelta, fn: Callable[[], bool]) -> None:
        """Poll ``fn`` until it returns true or ``timeout`` elapses.

        The deadline is checked before every poll, so a predicate that never
        succeeds fails once, no earlier than ``timeout``.
        """
        if isinstance(timeout, timedelta):
            seconds = timeout.total_seconds()
        else:
            seconds = float(timeout)
        policy = self.poll_policy
        deadline = policy.clock() + seconds
        while True:
            if policy.clock() >= deadline:
                self._fail(
                    "retry",
                    "Expected function to return true within duration "
                    f"{format_duration(seconds)}",
                )
                return
            if fn():
                return
            policy.sleep(policy.interval)

    def lax(self, fn: Callable[["Prover"], Any]) -> None:
        """Run ``fn`` with a lax child, then escalate if the child failed.

        Every assertion inside the scope runs and reports, so all failure
        messages are visible before the test stops.
        """
        child = Prover(
            self.handle,
            strictness=Strictness.LAX,
            config=self.config,
            poll_policy=self.poll_policy,
        )
        fn(child)
        if not child.failed:
            return
        self._failed = True
        logger.info("event=lax_escalated parent=%s", self.strictness.value)
        if self.strictness is Strictness.STRICT:
            self.handle.helper()
            self.handle.fail_now()

    def _with_value(self, message: str, value: Any) -> str:
        return failure_with_value(message, value, self.config.max_value_length)

    def _fail(self, method: str, message: str) -> Outcome:
        self._failed = True
        if self.strictness is Strictness.STRICT:
            outcome = Outcome.FAIL_FATAL
        else:
            outcome = Outcome.FAIL_SOFT
        logger.debug(
            "event=assertion_failed method=%s outcome=%s", method, outcome.value
        )
        self.handle.helper()
        if outcome is Outcome.FAIL_FATAL:
            self.handle.fatal(message)
        else:
            self.handle.error(message)
        return outcome


def new(t: TestHandle | unittest.TestCase, config: Config | None = None) -> Prover:
    """Build a prover for a test.

    The prover is always strict; lax assertions only exist inside
    :meth:`Prover.lax`. A ``unittest.TestCase`` is wrapped in a
    :class:`UnitTestHandle`; any other object must already provide the
    handle methods.
    """
    config = config or default_config()
    configure_logging(config)
    if isinstance(t, unittest.TestCase):
        handle: TestHandle = UnitTestHandle(t)
    else:
        handle = t
    return Prover(handle, config=config)


@contextlib.contextmanager
def recover(handle: TestHandle) -> Iterator[None]:
    """Catch an unexpected exception and report it as a test failure.

    The exception never propagates. It is reported only when the handle
    has not already failed. ``AbortTest`` always propagates, since it is the
    handle's own abort signal.
    """
    try:
        yield
    except AbortTest:
        raise
    except Exception as exc:
        if handle.failed():
            return
        stack = traceback.format_exc()
        logger.error("event=panic_recovered error=%s", exc)
        handle.helper()
        handle.error(f"panic: {exc} [recovered]\n\n{stack}")
