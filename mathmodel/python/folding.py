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

"""Folds expression trees into numbers, affine and quadratic expressions.

An expression tree (see variables.Expression and syntax.parse_expression()) is
folded left to right into a single accumulator:

  * Sums and differences add each element to the same accumulator, so folding
    x_1 + ... + x_n allocates one AffineBuilder, not n expressions.
  * A product with a single non-constant factor is not materialized: the
    constant factors become the coefficient used when folding that factor.
  * Only products of several non-constant factors (e.g. (x + y) * (x - y)) and
    squares fold their factors into temporaries before multiplying them.

The accumulator is a number, an AffineBuilder or a QuadraticBuilder. The
builders are mutable and private to a fold, fold() returns immutable
variables.AffineExpression and variables.QuadraticExpression objects.

Terms are combined by add_to_expression(accumulator, coefficient, term), which
dispatches on the kinds of coefficient and term (number, variable, affine,
quadratic or nonlinear), promoting the accumulator from number to affine to
quadratic as needed.
"""

import collections
import enum
import itertools
import numbers
from typing import (
    Any,
    Callable,
    DefaultDict,
    Dict,
    Iterable,
    Iterator,
    List,
    Mapping,
    Optional,
    Tuple,
    Union,
)

from mathmodel.python import bounded_expressions
from mathmodel.python import errors
from mathmodel.python import nonlinear
from mathmodel.python import syntax
from mathmodel.python import variables


class AffineBuilder:
    """A mutable constant + sum(coefficient * variable), the accumulator of a fold."""

    __slots__ = "constant", "terms"

    def __init__(self, constant: float = 0.0) -> None:
        self.constant: float = constant
        self.terms: DefaultDict[variables.Variable, float] = collections.defaultdict(
            float
        )

    def add_term(self, variable: variables.Variable, coefficient: float) -> None:
        self.terms[variable] += coefficient

    def add_scaled(
        self, scale: float, constant: float, terms: Mapping[variables.Variable, float]
    ) -> None:
        """Adds scale * (constant + sum(c * v for v, c in terms.items()))."""
        self.constant += scale * constant
        for var, coef in terms.items():
            self.terms[var] += scale * coef

    @property
    def degree(self) -> int:
        return 1 if self.terms else 0

    def build(self) -> variables.AffineExpression:
        return variables.AffineExpression(self.constant, self.terms)


class QuadraticBuilder:
    """A mutable AffineBuilder + sum(coefficient * variable * variable)."""

    __slots__ = "affine", "quadratic_terms"

    def __init__(self, affine: Optional[AffineBuilder] = None) -> None:
        self.affine: AffineBuilder = affine if affine is not None else AffineBuilder()
        self.quadratic_terms: DefaultDict[variables.QuadraticTermKey, float] = (
            collections.defaultdict(float)
        )

    @property
    def constant(self) -> float:
        return self.affine.constant

    @property
    def linear_terms(self) -> Mapping[variables.Variable, float]:
        return self.affine.terms

    @property
    def degree(self) -> int:
        return 2 if self.quadratic_terms else self.affine.degree

    def add_quadratic_term(
        self,
        first: variables.Variable,
        second: variables.Variable,
        coefficient: float,
    ) -> None:
        self.quadratic_terms[variables.QuadraticTermKey(first, second)] += coefficient

    def build(self) -> variables.QuadraticExpression:
        return variables.QuadraticExpression(
            self.affine.build(), self.quadratic_terms
        )


Accumulator = Union[float, AffineBuilder, QuadraticBuilder]
FoldResult = Union[float, variables.AffineExpression, variables.QuadraticExpression]


@enum.unique
class _Kind(enum.Enum):
    """The kinds add_to_expression() dispatches on."""

    NUMBER = 0
    VARIABLE = 1
    AFFINE = 2
    QUADRATIC = 3
    NONLINEAR = 4
    OTHER = 5


def _kind(value: Any) -> _Kind:
    if isinstance(value, numbers.Number):
        return _Kind.NUMBER
    if isinstance(value, variables.Variable):
        return _Kind.VARIABLE
    if isinstance(value, (variables.AffineExpression, AffineBuilder)):
        return _Kind.AFFINE
    if isinstance(value, (variables.QuadraticExpression, QuadraticBuilder)):
        return _Kind.QUADRATIC
    if isinstance(value, nonlinear.NonlinearReference):
        return _Kind.NONLINEAR
    return _Kind.OTHER


def _promote_to_affine(accumulator: Any) -> Union[AffineBuilder, QuadraticBuilder]:
    """Returns a builder holding accumulator, accumulator itself if it is one."""
    if isinstance(accumulator, (AffineBuilder, QuadraticBuilder)):
        return accumulator
    if isinstance(accumulator, numbers.Number):
        return AffineBuilder(accumulator)
    # Finished expressions are immutable, copy them.
    if isinstance(accumulator, variables.Variable):
        result = AffineBuilder()
        result.add_term(accumulator, 1.0)
        return result
    if isinstance(accumulator, variables.AffineExpression):
        result = AffineBuilder()
        result.add_scaled(1.0, accumulator.constant, accumulator.terms)
        return result
    if isinstance(accumulator, variables.QuadraticExpression):
        result = QuadraticBuilder()
        result.affine.add_scaled(
            1.0, accumulator.constant, accumulator.linear_terms
        )
        result.quadratic_terms.update(accumulator.quadratic_terms)
        return result
    raise TypeError(
        f"unsupported accumulator type: {type(accumulator).__name__!r}"
    )


def _promote_to_quadratic(accumulator: Any) -> QuadraticBuilder:
    accumulator = _promote_to_affine(accumulator)
    if isinstance(accumulator, AffineBuilder):
        return QuadraticBuilder(accumulator)
    return accumulator


def _degree(value: Any) -> int:
    if isinstance(value, variables.Variable):
        return 1
    return value.degree


def _constant_of(value: Any) -> float:
    """The constant of a degree 0 affine or quadratic value."""
    return value.constant


def _linear_view(value: Any) -> Tuple[float, Mapping[variables.Variable, float]]:
    """Returns (constant, terms) of a variable or degree <= 1 expression."""
    if isinstance(value, variables.Variable):
        return 0.0, {value: 1.0}
    if isinstance(value, (variables.QuadraticExpression, QuadraticBuilder)):
        return value.constant, value.linear_terms
    return value.constant, value.terms


def _affine_part(builder: Union[AffineBuilder, QuadraticBuilder]) -> AffineBuilder:
    if isinstance(builder, QuadraticBuilder):
        return builder.affine
    return builder


def _add_numbers(accumulator: Any, coefficient: Any, term: Any) -> Accumulator:
    value = coefficient * term
    if isinstance(accumulator, numbers.Number):
        return accumulator + value
    accumulator = _promote_to_affine(accumulator)
    _affine_part(accumulator).constant += value
    return accumulator


def _add_scaled_variable(
    accumulator: Any, scale: Any, variable: variables.Variable
) -> Accumulator:
    accumulator = _promote_to_affine(accumulator)
    _affine_part(accumulator).add_term(variable, scale)
    return accumulator


def _add_scaled_affine(accumulator: Any, scale: Any, affine: Any) -> Accumulator:
    accumulator = _promote_to_affine(accumulator)
    _affine_part(accumulator).add_scaled(scale, affine.constant, affine.terms)
    return accumulator


def _add_scaled_quadratic(accumulator: Any, scale: Any, quadratic: Any) -> Accumulator:
    accumulator = _promote_to_quadratic(accumulator)
    accumulator.affine.add_scaled(scale, quadratic.constant, quadratic.linear_terms)
    for key, coef in quadratic.quadratic_terms.items():
        accumulator.quadratic_terms[key] += scale * coef
    return accumulator


def _add_product(accumulator: Any, first: Any, second: Any) -> Accumulator:
    """Adds first * second where both are variables or expressions."""
    if _degree(first) == 0:
        return add_to_expression(accumulator, _constant_of(first), second)
    if _degree(second) == 0:
        return add_to_expression(accumulator, _constant_of(second), first)
    if _degree(first) > 1 or _degree(second) > 1:
        raise TypeError(
            "the product of"
            f" {type(first).__name__!r} and {type(second).__name__!r} is not"
            " quadratic"
        )
    accumulator = _promote_to_quadratic(accumulator)
    first_constant, first_terms = _linear_view(first)
    second_constant, second_terms = _linear_view(second)
    for first_var, first_coef in first_terms.items():
        for second_var, second_coef in second_terms.items():
            accumulator.add_quadratic_term(
                first_var, second_var, first_coef * second_coef
            )
    if second_constant != 0:
        for var, coef in first_terms.items():
            accumulator.affine.add_term(var, coef * second_constant)
    if first_constant != 0:
        for var, coef in second_terms.items():
            accumulator.affine.add_term(var, first_constant * coef)
    accumulator.affine.constant += first_constant * second_constant
    return accumulator


def _raise_nonlinear_use(accumulator: Any, coefficient: Any, term: Any) -> Accumulator:
    del accumulator  # Unused.
    raise errors.UnsupportedNonlinearUseError(
        "cannot combine"
        f" {type(coefficient).__name__!r} and {type(term).__name__!r}:"
        " nonlinear expressions and parameters can only be used in nonlinear"
        " expressions, not in affine or quadratic ones"
    )


def _add_generic(accumulator: Any, coefficient: Any, term: Any) -> Accumulator:
    """Fallback: accumulator + coefficient * term with Python operators."""
    result = _finish(accumulator) + coefficient * term
    if isinstance(result, variables.Expression):
        return _fold(result, {})
    return result


def _reordered(
    rule: Callable[[Any, Any, Any], Accumulator],
) -> Callable[[Any, Any, Any], Accumulator]:
    """Returns rule with coefficient and term swapped."""

    def reordered_rule(accumulator: Any, coefficient: Any, term: Any) -> Accumulator:
        return rule(accumulator, term, coefficient)

    return reordered_rule


_RuleTable = Dict[Tuple[_Kind, _Kind], Callable[[Any, Any, Any], Accumulator]]


def _make_rule_table() -> _RuleTable:
    """Returns the rule for each (coefficient kind, term kind) pair."""
    table: _RuleTable = {
        (_Kind.NUMBER, _Kind.NUMBER): _add_numbers,
        (_Kind.NUMBER, _Kind.VARIABLE): _add_scaled_variable,
        (_Kind.NUMBER, _Kind.AFFINE): _add_scaled_affine,
        (_Kind.NUMBER, _Kind.QUADRATIC): _add_scaled_quadratic,
    }
    for kind in (_Kind.VARIABLE, _Kind.AFFINE, _Kind.QUADRATIC):
        table[(kind, _Kind.NUMBER)] = _reordered(table[(_Kind.NUMBER, kind)])
        for other_kind in (_Kind.VARIABLE, _Kind.AFFINE, _Kind.QUADRATIC):
            table[(kind, other_kind)] = _add_product
    for kind in _Kind:
        if kind != _Kind.OTHER:
            table[(kind, _Kind.NONLINEAR)] = _raise_nonlinear_use
            table[(_Kind.NONLINEAR, kind)] = _raise_nonlinear_use
    table[(_Kind.NONLINEAR, _Kind.OTHER)] = _raise_nonlinear_use
    table[(_Kind.OTHER, _Kind.NONLINEAR)] = _raise_nonlinear_use
    return table


_RULES: _RuleTable = _make_rule_table()


def add_to_expression(accumulator: Any, coefficient: Any, term: Any) -> Accumulator:
    """Returns accumulator + coefficient * term, mutating accumulator if possible.

    When accumulator is an AffineBuilder or QuadraticBuilder it is updated in
    place and returned, unless it has to be promoted to a higher degree (an
    AffineBuilder receiving a quadratic term is moved into a new
    QuadraticBuilder). Numbers and finished expressions are never mutated, a
    builder holding a copy is returned instead. coefficient and term are never
    mutated.

    Args:
      accumulator: A number, builder, Variable or finished expression.
      coefficient: A number, Variable, builder or expression.
      term: A number, Variable, builder or expression.

    Returns:
      The updated accumulator, a number or a builder.

    Raises:
      UnsupportedNonlinearUseError: if coefficient, term or accumulator is a
        nonlinear expression or parameter.
      TypeError: if coefficient * term has a degree larger than two.
    """
    if isinstance(accumulator, nonlinear.NonlinearReference):
        _raise_nonlinear_use(accumulator, accumulator, term)
    rule = _RULES.get((_kind(coefficient), _kind(term)), _add_generic)
    return rule(accumulator, coefficient, term)


def _multiply(first: Any, second: Any) -> Accumulator:
    if isinstance(first, numbers.Number) and isinstance(second, numbers.Number):
        return first * second
    return add_to_expression(0.0, first, second)


def _negate(coefficient: Any) -> Accumulator:
    if isinstance(coefficient, numbers.Number):
        return -coefficient
    return _multiply(-1.0, coefficient)


def _finish(accumulator: Any) -> Any:
    if isinstance(accumulator, (AffineBuilder, QuadraticBuilder)):
        return accumulator.build()
    if isinstance(accumulator, variables.Variable):
        return variables.AffineExpression(0.0, {accumulator: 1.0})
    return accumulator


_COMPOUND_TYPES = (
    variables.Sum,
    variables.Difference,
    variables.Negation,
    variables.Product,
    variables.Quotient,
    variables.Power,
    variables.GeneratorSum,
    syntax.ComprehensionSum,
)

_COMPARISON_TYPES = bounded_expressions.ComparisonTypes + (variables.VarEqVar,)

_Scope = Mapping[str, Any]
_WorkItem = Tuple[Any, Any, _Scope]


def _resolve(node: Any, scope: _Scope) -> Any:
    """Evaluates syntax.Reference leaves, rejects comparisons."""
    while isinstance(node, syntax.Reference):
        node = node.evaluate(scope)
    if isinstance(node, _COMPARISON_TYPES):
        raise errors.MalformedSyntaxError("Unexpected comparison in expression")
    return node


def _items(
    nodes: Iterable[Any], coefficient: Any, scope: _Scope
) -> Iterator[_WorkItem]:
    for node in nodes:
        yield node, coefficient, scope


def _comprehension_items(
    node: syntax.ComprehensionSum, coefficient: Any, scope: _Scope
) -> Iterator[_WorkItem]:
    for body_scope in node.scopes(scope):
        yield node.body, coefficient, body_scope


def _fold_product(
    accumulator: Any,
    node: variables.Product,
    coefficient: Any,
    scope: _Scope,
    stack: List[Iterator[_WorkItem]],
) -> Accumulator:
    """Folds a product, pushing its only non-constant factor when there is one."""
    factors = [_resolve(factor, scope) for factor in node.factors]
    if not factors:
        return add_to_expression(accumulator, coefficient, 1.0)
    compound = [f for f in factors if isinstance(f, _COMPOUND_TYPES)]
    leaves = [f for f in factors if not isinstance(f, _COMPOUND_TYPES)]
    if not compound:
        for leaf in leaves[:-1]:
            coefficient = _multiply(coefficient, leaf)
        return add_to_expression(accumulator, coefficient, leaves[-1])
    for leaf in leaves:
        coefficient = _multiply(coefficient, leaf)
    if len(compound) == 1:
        stack.append(iter(((compound[0], coefficient, scope),)))
        return accumulator
    # A true cross product: each factor needs its own temporary.
    temporaries = [_fold(factor, scope) for factor in compound]
    for temporary in temporaries[:-1]:
        coefficient = _multiply(coefficient, temporary)
    return add_to_expression(accumulator, coefficient, temporaries[-1])


def _constant_exponent(value: Any, scope: _Scope) -> Any:
    exponent = _fold(value, scope)
    if not isinstance(exponent, numbers.Number):
        raise errors.MalformedSyntaxError(
            "the exponent of a power must be a constant, got a"
            f" {type(_finish(exponent)).__name__!r}"
        )
    return exponent


def _fold_power(
    accumulator: Any,
    node: variables.Power,
    coefficient: Any,
    scope: _Scope,
    stack: List[Iterator[_WorkItem]],
) -> Accumulator:
    """Folds base ** exponent for exponents 0, 1 and 2 or a constant base."""
    exponent = _constant_exponent(node.exponent, scope)
    if exponent == 0:
        return add_to_expression(accumulator, coefficient, 1.0)
    if exponent == 1:
        stack.append(iter(((node.base, coefficient, scope),)))
        return accumulator
    base = _fold(node.base, scope)
    if exponent == 2:
        return add_to_expression(accumulator, _multiply(coefficient, base), base)
    if not isinstance(base, numbers.Number):
        raise errors.MalformedSyntaxError(
            f"cannot raise a non-constant expression to the power {exponent}, only"
            " the exponents 0, 1 and 2 are supported"
        )
    return add_to_expression(accumulator, coefficient, base**exponent)


def _fold(value: Any, scope: _Scope) -> Accumulator:
    """Returns the accumulator (a number or a builder) obtained by folding value."""
    accumulator: Accumulator = 0.0
    stack: List[Iterator[_WorkItem]] = [iter(((value, 1.0, scope),))]
    while stack:
        item = next(stack[-1], None)
        if item is None:
            stack.pop()
            continue
        node, coefficient, node_scope = item
        node = _resolve(node, node_scope)
        if isinstance(node, variables.Sum):
            stack.append(_items(node.elements, coefficient, node_scope))
        elif isinstance(node, variables.Difference):
            stack.append(
                itertools.chain(
                    _items(node.elements[:1], coefficient, node_scope),
                    _items(node.elements[1:], _negate(coefficient), node_scope),
                )
            )
        elif isinstance(node, variables.Negation):
            stack.append(_items((node.operand,), _negate(coefficient), node_scope))
        elif isinstance(node, variables.GeneratorSum):
            stack.append(_items(node.addends(), coefficient, node_scope))
        elif isinstance(node, syntax.ComprehensionSum):
            stack.append(_comprehension_items(node, coefficient, node_scope))
        elif isinstance(node, variables.Product):
            accumulator = _fold_product(
                accumulator, node, coefficient, node_scope, stack
            )
        elif isinstance(node, variables.Quotient):
            denominator = _fold(node.denominator, node_scope)
            if not isinstance(denominator, numbers.Number):
                raise TypeError(
                    "division is only supported by constants, got a"
                    f" {type(_finish(denominator)).__name__!r}"
                )
            stack.append(
                _items(
                    (node.numerator,),
                    _multiply(coefficient, 1.0 / denominator),
                    node_scope,
                )
            )
        elif isinstance(node, variables.Power):
            accumulator = _fold_power(accumulator, node, coefficient, node_scope, stack)
        else:
            accumulator = add_to_expression(accumulator, coefficient, node)
    return accumulator


def fold(value: Any, scope: Optional[Mapping[str, Any]] = None) -> FoldResult:
    """Folds an expression tree into a number or a canonical expression.

    E.g. fold(x + 2 * x - x) is AffineExpression(0.0, {x: 2.0}) and
    fold(x * y + y * x) is a QuadraticExpression with the single term
    {QuadraticTermKey(x, y): 2.0}.

    The tree is traversed without recursion (except for the factors of products
    of non-constant expressions and for powers), left to right.

    Args:
      value: A number, Variable, expression or expression tree, including trees
        returned by syntax.parse_expression().
      scope: The names visible to the syntax.Reference leaves of parsed trees.

    Returns:
      A number if value does not depend on any variable, otherwise an
      AffineExpression or, when value has quadratic terms, a QuadraticExpression.
      Terms whose coefficients cancel are kept with a zero coefficient.

    Raises:
      MalformedSyntaxError: if value contains a comparison or a power of a
        non-constant expression with an exponent other than 0, 1 or 2.
      UnsupportedNonlinearUseError: if value contains a nonlinear expression
        or parameter.
      TypeError: if a term has a degree larger than two, or for a division by a
        non-constant expression.
    """
    scope = syntax.namespace(scope) if scope is not None else {}
    return _finish(_fold(value, scope))


def as_flat_affine_expression(
    value: Any, scope: Optional[Mapping[str, Any]] = None
) -> variables.AffineExpression:
    """Folds value, which must not have quadratic terms, to an AffineExpression."""
    result = fold(value, scope)
    if isinstance(result, variables.AffineExpression):
        return result
    if isinstance(result, variables.QuadraticExpression):
        if result.quadratic_terms:
            raise TypeError(f"expression is not affine: {result!s}")
        return result.affine
    return variables.AffineExpression(result)


def as_flat_quadratic_expression(
    value: Any, scope: Optional[Mapping[str, Any]] = None
) -> variables.QuadraticExpression:
    """Folds value to a QuadraticExpression."""
    result = fold(value, scope)
    if isinstance(result, variables.QuadraticExpression):
        return result
    if isinstance(result, variables.AffineExpression):
        return variables.QuadraticExpression(result)
    return variables.QuadraticExpression(variables.AffineExpression(result))
