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

"""Scalar sets a constraint function is required to belong to."""

import dataclasses
import math
from typing import Union


@dataclasses.dataclass(frozen=True)
class LessThan:
    """The set (-inf, upper]."""

    __slots__ = ("upper",)
    upper: float

    def shifted(self, offset: float) -> "LessThan":
        return LessThan(self.upper + offset)


@dataclasses.dataclass(frozen=True)
class GreaterThan:
    """The set [lower, +inf)."""

    __slots__ = ("lower",)
    lower: float

    def shifted(self, offset: float) -> "GreaterThan":
        return GreaterThan(self.lower + offset)


@dataclasses.dataclass(frozen=True)
class EqualTo:
    """The set {value}."""

    __slots__ = ("value",)
    value: float

    def shifted(self, offset: float) -> "EqualTo":
        return EqualTo(self.value + offset)


@dataclasses.dataclass(frozen=True)
class Interval:
    """The set [lower, upper].

    Attributes:
      lower: The lower bound, may be -inf.
      upper: The upper bound, may be +inf.
    """

    __slots__ = "lower", "upper"
    lower: float
    upper: float

    def shifted(self, offset: float) -> "Interval":
        return Interval(self.lower + offset, self.upper + offset)


ScalarSet = Union[LessThan, GreaterThan, EqualTo, Interval]


def from_bounds(lower_bound: float, upper_bound: float) -> ScalarSet:
    """Returns the simplest set for lower_bound <= f <= upper_bound.

    Args:
      lower_bound: The lower bound, -inf if f is not bounded below.
      upper_bound: The upper bound, +inf if f is not bounded above.

    Returns:
      EqualTo when both bounds are equal, LessThan or GreaterThan when only one
      bound is finite and an Interval otherwise.

    Raises:
      ValueError: if a bound is NaN or if both bounds are infinite.
    """
    if math.isnan(lower_bound) or math.isnan(upper_bound):
        raise ValueError(f"NaN bound in [{lower_bound}, {upper_bound}]")
    if lower_bound == upper_bound:
        return EqualTo(upper_bound)
    if lower_bound == -math.inf and upper_bound == math.inf:
        raise ValueError("a constraint needs at least one finite bound")
    if lower_bound == -math.inf:
        return LessThan(upper_bound)
    if upper_bound == math.inf:
        return GreaterThan(lower_bound)
    return Interval(lower_bound, upper_bound)
