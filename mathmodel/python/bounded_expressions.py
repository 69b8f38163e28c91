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

"""Comparisons between expressions, the input of Model.add_constraint()."""

import math
from typing import Any, Generic, NoReturn, Optional, Type, TypeVar

from mathmodel.python import printer
from mathmodel.python import sets

_CHAINED_COMPARISON_MESSAGE = (
    "If you were trying to create a two-sided or "
    "ranged constraint of the form `lb <= "
    "expr <= ub`, try `(lb <= expr) <= ub` instead"
)


def _raise_binary_operator_type_error(
    operator: str,
    lhs: Type[Any],
    rhs: Type[Any],
    extra_message: Optional[str] = None,
) -> NoReturn:
    """Raises TypeError on unsupported operators."""
    message = (
        f"unsupported operand type(s) for {operator}: {lhs.__name__!r} and"
        f" {rhs.__name__!r}"
    )
    if extra_message is not None:
        message += "\n" + extra_message
    raise TypeError(message)


T = TypeVar("T")


class _Comparison(Generic[T]):
    """Shared accessors of the comparison classes below."""

    __slots__ = ("_expression",)

    def __init__(self, expression: T) -> None:
        self._expression: T = expression

    @property
    def expression(self) -> T:
        return self._expression

    @property
    def lower_bound(self) -> float:
        return -math.inf

    @property
    def upper_bound(self) -> float:
        return math.inf

    def as_set(self) -> sets.ScalarSet:
        """Returns the set `expression` must belong to."""
        return sets.from_bounds(self.lower_bound, self.upper_bound)

    def __bool__(self) -> bool:
        raise TypeError(
            f"__bool__ is unsupported for {type(self).__name__}"
            + "\n"
            + _CHAINED_COMPARISON_MESSAGE
        )


class BoundedExpression(_Comparison[T]):
    """An inequality of the form lower_bound <= expression <= upper_bound.

    Where:
     * expression is a T, typically a variables.Expression.
     * lower_bound is a float.
     * upper_bound is a float.

    lower_bound == upper_bound encodes the equality expression == lower_bound.

    Note: Because of limitations related to Python's handling of chained
    comparisons, bounded expressions cannot be directly created using
    overloaded comparisons as in `lower_bound <= expression <= upper_bound`.
    Wrap one of the inequalities in parenthesis as in
    `(lower_bound <= expression) <= upper_bound`.
    """

    __slots__ = "_lower_bound", "_upper_bound"

    def __init__(self, lower_bound: float, expression: T, upper_bound: float) -> None:
        super().__init__(expression)
        self._lower_bound: float = lower_bound
        self._upper_bound: float = upper_bound

    @property
    def lower_bound(self) -> float:
        return self._lower_bound

    @property
    def upper_bound(self) -> float:
        return self._upper_bound

    def __str__(self):
        if self._lower_bound == self._upper_bound:
            return f"{self._expression!s} == {printer.format_number(self._upper_bound)}"
        return (
            f"{printer.format_number(self._lower_bound)} <= {self._expression!s} <="
            f" {printer.format_number(self._upper_bound)}"
        )

    def __repr__(self):
        return f"{self._lower_bound} <= {self._expression!r} <= {self._upper_bound}"


class UpperBoundedExpression(_Comparison[T]):
    """An inequality of the form expression <= upper_bound."""

    __slots__ = ("_upper_bound",)

    def __init__(self, expression: T, upper_bound: float) -> None:
        """Operator overloading can be used instead: e.g. `x + y <= 2.0`."""
        super().__init__(expression)
        self._upper_bound: float = upper_bound

    @property
    def upper_bound(self) -> float:
        return self._upper_bound

    def __ge__(self, lhs: float) -> BoundedExpression[T]:
        if isinstance(lhs, (int, float)):
            return BoundedExpression[T](lhs, self._expression, self._upper_bound)
        _raise_binary_operator_type_error(">=", type(self), type(lhs))

    def __str__(self):
        return f"{self._expression!s} <= {printer.format_number(self._upper_bound)}"

    def __repr__(self):
        return f"{self._expression!r} <= {self._upper_bound}"


class LowerBoundedExpression(_Comparison[T]):
    """An inequality of the form expression >= lower_bound."""

    __slots__ = ("_lower_bound",)

    def __init__(self, expression: T, lower_bound: float) -> None:
        """Operator overloading can be used instead: e.g. `x + y >= 2.0`."""
        super().__init__(expression)
        self._lower_bound: float = lower_bound

    @property
    def lower_bound(self) -> float:
        return self._lower_bound

    def __le__(self, rhs: float) -> BoundedExpression[T]:
        if isinstance(rhs, (int, float)):
            return BoundedExpression[T](self._lower_bound, self._expression, rhs)
        _raise_binary_operator_type_error("<=", type(self), type(rhs))

    def __str__(self):
        return f"{self._expression!s} >= {printer.format_number(self._lower_bound)}"

    def __repr__(self):
        return f"{self._expression!r} >= {self._lower_bound}"


ComparisonTypes = (BoundedExpression, UpperBoundedExpression, LowerBoundedExpression)
