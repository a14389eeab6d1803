"""Test handle tests."""

from __future__ import annotations

import unittest

from proof.handle import AbortTest, RecordingHandle, UnitTestHandle


def _run(case: unittest.TestCase) -> unittest.TestResult:
    result = unittest.TestResult()
    case.run(result)
    return result


def _reports(result: unittest.TestResult) -> str:
    return "\n".join(text for _, text in result.failures + result.errors)


class RecordingHandleTests(unittest.TestCase):
    def test_log_is_recorded(self) -> None:
        handle = RecordingHandle()
        handle.log("hello", 3)
        self.assertEqual(handle.logs, ["hello 3"])
        self.assertFalse(handle.failed())

    def test_error_marks_failed_without_aborting(self) -> None:
        handle = RecordingHandle()
        handle.error("first")
        handle.error("second")
        self.assertTrue(handle.failed())
        self.assertFalse(handle.aborted)
        self.assertEqual(handle.errors, ["first", "second"])

    def test_fatal_records_and_aborts(self) -> None:
        handle = RecordingHandle()
        with self.assertRaises(AbortTest) as ctx:
            handle.fatal("boom")
        self.assertEqual(str(ctx.exception), "boom")
        self.assertTrue(handle.failed())
        self.assertTrue(handle.aborted)

    def test_fatalf_formats(self) -> None:
        handle = RecordingHandle()
        with self.assertRaises(AbortTest):
            handle.fatalf("bad argument (%s)", "int")
        self.assertEqual(handle.errors, ["bad argument (int)"])

    def test_fatalf_without_args_keeps_percent(self) -> None:
        handle = RecordingHandle()
        with self.assertRaises(AbortTest):
            handle.fatalf("100% broken")
        self.assertEqual(handle.errors, ["100% broken"])

    def test_fail_now_without_errors(self) -> None:
        handle = RecordingHandle(name="case")
        with self.assertRaises(AbortTest) as ctx:
            handle.fail_now()
        self.assertEqual(str(ctx.exception), "case: test marked failed")

    def test_abort_is_an_assertion_error(self) -> None:
        self.assertTrue(issubclass(AbortTest, AssertionError))

    def test_errors_are_logged(self) -> None:
        handle = RecordingHandle(name="case")
        with self.assertLogs("proof.handle", level="ERROR") as logs:
            handle.error("broken")
        self.assertIn("event=test_error test=case message=broken", logs.output[0])


class UnitTestHandleTests(unittest.TestCase):
    def test_soft_failure_fails_test_at_cleanup(self) -> None:
        class Inner(unittest.TestCase):
            def test_soft(self) -> None:
                handle = UnitTestHandle(self)
                handle.error("soft failure")
                handle.log("still running")

        result = _run(Inner("test_soft"))
        self.assertFalse(result.wasSuccessful())
        self.assertIn("soft failure", _reports(result))

    def test_clean_test_passes(self) -> None:
        class Inner(unittest.TestCase):
            def test_clean(self) -> None:
                UnitTestHandle(self).log("fine")

        result = _run(Inner("test_clean"))
        self.assertTrue(result.wasSuccessful())

    def test_fatal_fails_once(self) -> None:
        class Inner(unittest.TestCase):
            def test_fatal(self) -> None:
                UnitTestHandle(self).fatal("boom")

        result = _run(Inner("test_fatal"))
        self.assertEqual(len(result.failures) + len(result.errors), 1)
        self.assertIn("boom", _reports(result))

    def test_name_is_test_id(self) -> None:
        handle = UnitTestHandle(self)
        self.assertEqual(handle.name, self.id())


if __name__ == "__main__":
    unittest.main()
