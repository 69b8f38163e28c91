#!/usr/bin/env python3
# Copyright 2010-2025 Google LLC
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

import dataclasses
import math

from absl.testing import absltest
from absl.testing import parameterized
from mathmodel.python import sets


class FromBoundsTest(parameterized.TestCase):

    @parameterized.named_parameters(
        ("equal", 2.0, 2.0, sets.EqualTo(2.0)),
        ("upper_only", -math.inf, 3.0, sets.LessThan(3.0)),
        ("lower_only", 1.0, math.inf, sets.GreaterThan(1.0)),
        ("both", 1.0, 3.0, sets.Interval(1.0, 3.0)),
        ("reversed", 3.0, 1.0, sets.Interval(3.0, 1.0)),
    )
    def test_from_bounds(self, lb, ub, expected) -> None:
        self.assertEqual(sets.from_bounds(lb, ub), expected)

    def test_nan(self) -> None:
        with self.assertRaisesRegex(ValueError, "NaN"):
            sets.from_bounds(math.nan, 1.0)

    def test_unbounded(self) -> None:
        with self.assertRaisesRegex(ValueError, "finite bound"):
            sets.from_bounds(-math.inf, math.inf)


class ShiftedTest(parameterized.TestCase):

    @parameterized.named_parameters(
        ("less_than", sets.LessThan(3.0), sets.LessThan(1.0)),
        ("greater_than", sets.GreaterThan(3.0), sets.GreaterThan(1.0)),
        ("equal_to", sets.EqualTo(3.0), sets.EqualTo(1.0)),
        ("interval", sets.Interval(3.0, 4.0), sets.Interval(1.0, 2.0)),
    )
    def test_shifted(self, scalar_set, expected) -> None:
        self.assertEqual(scalar_set.shifted(-2.0), expected)

    def test_frozen(self) -> None:
        s = sets.LessThan(3.0)
        with self.assertRaises(dataclasses.FrozenInstanceError):
            s.upper = 4.0  # pytype: disable=not-writable


if __name__ == "__main__":
    absltest.main()
