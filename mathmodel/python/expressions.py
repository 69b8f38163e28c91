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

"""Utilities for working with affine and quadratic expressions."""

from typing import Any, Callable, Iterable, Mapping, Optional

from mathmodel.python import folding
from mathmodel.python import syntax
from mathmodel.python import variables

as_flat_affine_expression = folding.as_flat_affine_expression
as_flat_quadratic_expression = folding.as_flat_quadratic_expression


def fast_sum(summands: Iterable[variables.ExpressionTypes]) -> variables.Sum:
    """Sums the elements of summand into an expression.

    Similar to Python's sum function, but faster for input that not just integers
    and floats: the result is a single Sum node folded in one pass, while sum()
    builds a chain of nested nodes.

    Unlike sum(), the function returns an expression when all inputs are floats
    and/or integers. Importantly, the code:
      model.add_constraint(fast_sum(maybe_empty_list) <= 1.0)
    is safe to call, while:
      model.add_constraint(sum(maybe_empty_list) <= 1.0)
    fails at runtime when the list is empty.

    Args:
      summands: The elements to add up.

    Returns:
      An expression with the sum of the elements of summand.
    """
    return variables.Sum(summands)


def sum_over(
    body: Callable[..., variables.ExpressionTypes],
    *index_sets: Iterable[Any],
    condition: Optional[Callable[..., bool]] = None,
) -> variables.GeneratorSum:
    """Returns the deferred sum of body(i, j, ...) over the product of index_sets.

    E.g. sum_over(lambda i, j: c[i, j] * x[i, j], I, J, condition=lambda i, j:
    i < j) is the sum of c_ij * x_ij for i in I, j in J with i < j. The bodies are
    folded into a single accumulator when the sum is used.

    Args:
      body: Called with one element of each index set.
      *index_sets: Re-iterable index sets (e.g. ranges, lists or tuples).
      condition: If set, only the indices for which it returns True are summed.

    Returns:
      The deferred sum.
    """
    return variables.GeneratorSum(body, index_sets, condition)


def evaluate_expression(
    expression: variables.ExpressionTypes,
    variable_values: Mapping[variables.Variable, float],
) -> float:
    """Evaluates an affine or quadratic expression for given variable values.

    E.g. if expression  = 3 * x + 4 and variable_values = {x: 2.0}, then
    evaluate_expression(expression, variable_values) equals 10.0.

    Args:
      expression: The expression to evaluate.
      variable_values: Must contain a value for every variable in expression.

    Returns:
      The value of the expression when replacing variables by their value.
    """
    flat = folding.fold(expression)
    if isinstance(flat, (int, float)):
        return flat
    return flat.evaluate(variable_values)


def expression_from_source(
    source: str, scope: Optional[Mapping[str, Any]] = None
) -> folding.FoldResult:
    """Parses and folds source, e.g. "sum(c[i] * x[i] for i in I) + 2 * y".

    Args:
      source: The expression (see syntax.parse_expression()).
      scope: The names visible to source.

    Returns:
      A number, an AffineExpression or a QuadraticExpression.

    Raises:
      MalformedSyntaxError: if source is not a supported expression.
    """
    return folding.fold(syntax.parse_expression(source), scope)
