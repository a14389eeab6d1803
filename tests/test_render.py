"""Rendering and diff tests."""

from __future__ import annotations

import unittest
import weakref
from collections import OrderedDict
from dataclasses import dataclass

import numpy as np

from proof.render import diff, render


@dataclass
class Point:
    x: int
    y: int


class Box:
    pass


class RenderTests(unittest.TestCase):
    def test_scalars(self) -> None:
        self.assertEqual(render(1), ["1"])
        self.assertEqual(render(np.int32(1)), ["1"])
        self.assertEqual(render("a"), ["'a'"])
        self.assertEqual(render(None), ["None"])

    def test_sequences(self) -> None:
        self.assertEqual(render([1, 2]), ["[", "    1,", "    2,", "]"])
        self.assertEqual(render([]), ["[]"])
        self.assertEqual(render(()), ["()"])
        self.assertEqual(render((1,)), ["(", "    1,", ")"])
        self.assertEqual(
            render(np.array([1, 2])), ["array([", "    1,", "    2,", "])"]
        )

    def test_nested(self) -> None:
        self.assertEqual(
            render([[1]]), ["[", "    [", "        1,", "    ],", "]"]
        )

    def test_mappings_sort_keys(self) -> None:
        self.assertEqual(
            render({"b": 1, "a": 2}), ["{", "    'a': 2,", "    'b': 1,", "}"]
        )
        self.assertEqual(
            render(OrderedDict(a=1)), ["OrderedDict({", "    'a': 1,", "})"]
        )

    def test_sets(self) -> None:
        self.assertEqual(render(set()), ["set()"])
        self.assertEqual(render(frozenset()), ["frozenset()"])
        self.assertEqual(render({2, 1}), ["{", "    1,", "    2,", "}"])

    def test_structs(self) -> None:
        self.assertEqual(
            render(Point(1, 2)), ["Point(", "    x=1,", "    y=2,", ")"]
        )

    def test_cycle_marker(self) -> None:
        items: list = []
        items.append(items)
        self.assertEqual(render(items), ["[", "    <cycle list>,", "]"])

    def test_references(self) -> None:
        box = Box()
        box.v = 1
        self.assertEqual(render(weakref.ref(box)), ["ref(Box(", "    v=1,", "))"])
        self.assertEqual(render(weakref.ref(Box())), ["ref(None)"])


class DiffTests(unittest.TestCase):
    def test_identical_renderings_have_no_diff(self) -> None:
        cases = [1, "text", [1, 2], {"a": [1]}, Point(1, 2), None]
        for value in cases:
            with self.subTest(value=value):
                self.assertEqual(diff(value, value), "")
        self.assertEqual(diff(np.int64(1), np.int32(1)), "")

    def test_scalar_diff(self) -> None:
        self.assertEqual(diff(1, 2), "- 1\n+ 2")

    def test_changed_element(self) -> None:
        expected = "\n".join(
            [
                "  [",
                "      1,",
                "-     2,",
                "+     5,",
                "      3,",
                "  ]",
            ]
        )
        self.assertEqual(diff([1, 2, 3], [1, 5, 3]), expected)

    def test_long_runs_are_elided(self) -> None:
        left = list(range(20))
        right = list(range(19)) + [99]
        expected = [
            "  ... 18 identical lines",
            "      17,",
            "      18,",
            "-     19,",
            "+     99,",
            "  ]",
        ]
        self.assertEqual(diff(left, right, context=2).splitlines(), expected)

    def test_added_field(self) -> None:
        self.assertEqual(
            diff({"a": 1}, {"a": 1, "b": 2}),
            "  {\n      'a': 1,\n+     'b': 2,\n  }",
        )


if __name__ == "__main__":
    unittest.main()
