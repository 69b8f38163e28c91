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

"""Constraints `function in set` where the constant of function is zero.

In contrast to BoundedExpression and related structures, there is no constant
inside the function: `x + 1 <= 3` is normalized to `x in LessThan(2)`.

This is not part of the public API, do not depend on it externally.
"""

import dataclasses
import math
from typing import Any, Optional, Union

from mathmodel.python import bounded_expressions
from mathmodel.python import folding
from mathmodel.python import problem_data
from mathmodel.python import sets
from mathmodel.python import variables

_BoundedExpressions = bounded_expressions.ComparisonTypes


def _bool_error() -> TypeError:
    return TypeError(
        "Unsupported type for bounded_expr argument:"
        " bool. This error can occur when trying to add != constraints "
        "(which are not supported) or inequalities/equalities with constant "
        "left-hand-side and right-hand-side (which are redundant or make a "
        "model infeasible)."
    )


def without_constant(
    function: Union[float, variables.AffineExpression, variables.QuadraticExpression],
) -> problem_data.ConstraintFunction:
    """Returns function with a zero constant, quadratic only if it has quadratic terms."""
    if isinstance(function, (int, float)):
        return variables.AffineExpression()
    if isinstance(function, variables.QuadraticExpression):
        affine = variables.AffineExpression(0.0, function.linear_terms)
        if not function.quadratic_terms:
            return affine
        return variables.QuadraticExpression(affine, function.quadratic_terms)
    return variables.AffineExpression(0.0, function.terms)


@dataclasses.dataclass
class NormalizedConstraint:
    """Represents a constraint `function in set` where function's constant is zero."""

    function: problem_data.ConstraintFunction
    set: sets.ScalarSet

    def __init__(
        self,
        *,
        lb: Optional[float] = None,
        ub: Optional[float] = None,
        expr: Optional[variables.ExpressionTypes] = None,
    ) -> None:
        """Raises a ValueError if expr's constant is infinite."""
        lb = -math.inf if lb is None else lb
        ub = math.inf if ub is None else ub
        expr = 0.0 if expr is None else expr
        if not isinstance(expr, (int, float, variables.Expression)):
            raise TypeError(
                f"Unsupported type for expr argument: {type(expr).__name__!r}."
            )
        flat_expr = folding.fold(expr)
        constant = flat_expr if isinstance(flat_expr, (int, float)) else flat_expr.constant
        if math.isinf(constant):
            raise ValueError(
                "Trying to create a constraint whose expression has an infinite"
                " constant."
            )
        self.function = without_constant(flat_expr)
        self.set = sets.from_bounds(lb, ub).shifted(-constant)


def _normalize_bounded_expression(bounded_expr: Any) -> NormalizedConstraint:
    """Converts a bounded expression into a NormalizedConstraint."""
    if isinstance(bounded_expr, variables.VarEqVar):
        return NormalizedConstraint(lb=0.0, ub=0.0, expr=bounded_expr.expression)
    elif isinstance(bounded_expr, _BoundedExpressions):
        if isinstance(bounded_expr.expression, (int, float, variables.Expression)):
            return NormalizedConstraint(
                lb=bounded_expr.lower_bound,
                ub=bounded_expr.upper_bound,
                expr=bounded_expr.expression,
            )
        else:
            raise TypeError(
                "Bad type of expression in bounded_expr:"
                f" {type(bounded_expr.expression).__name__!r}."
            )
    else:
        raise TypeError(f"bounded_expr has bad type: {type(bounded_expr).__name__!r}.")


# Note: bounded_expr's type includes bool only because comparisons of two
# constants are bools. Passing a bool for bounded_expr will raise an error in
# runtime.
def as_normalized_constraint(
    bounded_expr: Optional[Union[bool, Any]] = None,
    *,
    lb: Optional[float] = None,
    ub: Optional[float] = None,
    expr: Optional[variables.ExpressionTypes] = None,
) -> NormalizedConstraint:
    """Builds a NormalizedConstraint.

    If bounded_expr is not None, then all other arguments must be None.

    If expr has a nonzero constant, it will be subtracted from both lb and ub.

    When bounded_expr is unset and a named argument is unset, we use the defaults:
      * lb: -math.inf
      * ub: math.inf
      * expr: 0

    Args:
      bounded_expr: a bounded expression (e.g. `x + y <= 2.0`) or the result of
        `x == y` for two variables.
      lb: The constraint's lower bound if bounded_expr is omitted.
      ub: The constraint's upper bound if bounded_expr is omitted.
      expr: The constraint's expression if bounded_expr is omitted.

    Returns:
      A NormalizedConstraint representing the constraint.
    """
    if isinstance(bounded_expr, bool):
        raise _bool_error()
    if bounded_expr is not None:
        if lb is not None:
            raise AssertionError(
                "lb cannot be specified when bounded_expr is not None."
            )
        if ub is not None:
            raise AssertionError(
                "ub cannot be specified when bounded_expr is not None."
            )
        if expr is not None:
            raise AssertionError(
                "expr cannot be specified when bounded_expr is not None"
            )
        return _normalize_bounded_expression(bounded_expr)
    # Note: NormalizedConstraint() will runtime check the type of expr.
    return NormalizedConstraint(lb=lb, ub=ub, expr=expr)
