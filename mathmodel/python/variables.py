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

"""Define Variables, affine and quadratic expressions and expression trees."""

import abc
import itertools
import math
import typing
from typing import (
    Any,
    Callable,
    Iterable,
    Iterator,
    Mapping,
    NoReturn,
    Optional,
    Sequence,
    Tuple,
    Type,
    Union,
)

import immutabledict

from mathmodel.python import bounded_expressions
from mathmodel.python import enums
from mathmodel.python import errors
from mathmodel.python import nonlinear
from mathmodel.python import printer


ExpressionTypes = Union[int, float, "Expression"]

_EXPRESSION_COMP_EXPRESSION_MESSAGE = (
    "This error can occur when adding "
    "inequalities of the form `(a <= b) <= "
    "c` where (a, b, c) includes two or more"
    " non-constant expressions"
)

_UNEXPECTED_COMPARISON_MESSAGE = "Unexpected comparison in expression"


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


def _raise_ne_not_supported() -> NoReturn:
    raise TypeError("!= constraints are not supported")


def _is_operand(value: Any) -> bool:
    """Returns True if value can appear in an arithmetic expression tree.

    Args:
      value: The candidate operand.

    Returns:
      True for numbers and Expression objects.

    Raises:
      MalformedSyntaxError: if value is a comparison, e.g. in `(x <= 1) + y`.
    """
    if isinstance(value, bounded_expressions.ComparisonTypes + (VarEqVar,)):
        raise errors.MalformedSyntaxError(_UNEXPECTED_COMPARISON_MESSAGE)
    return isinstance(value, (int, float, Expression))


LowerBoundedExpression = bounded_expressions.LowerBoundedExpression["Expression"]
UpperBoundedExpression = bounded_expressions.UpperBoundedExpression["Expression"]
BoundedExpression = bounded_expressions.BoundedExpression["Expression"]


class VarEqVar:
    """The result of the equality comparison between two Variable.

    We use an object here to delay the evaluation of equality so that we can use
    the operator== in two use-cases:

      1. when the user want to test that two Variable values references the same
         variable. This is supported by having this object support implicit
         conversion to bool.

      2. when the user want to use the equality to create a constraint of equality
         between two variables.
    """

    __slots__ = "_first_variable", "_second_variable"

    def __init__(
        self,
        first_variable: "Variable",
        second_variable: "Variable",
    ) -> None:
        self._first_variable: "Variable" = first_variable
        self._second_variable: "Variable" = second_variable

    @property
    def first_variable(self) -> "Variable":
        return self._first_variable

    @property
    def second_variable(self) -> "Variable":
        return self._second_variable

    @property
    def expression(self) -> "Difference":
        return Difference((self._first_variable, self._second_variable))

    @property
    def lower_bound(self) -> float:
        return 0.0

    @property
    def upper_bound(self) -> float:
        return 0.0

    def __bool__(self) -> bool:
        return (
            self._first_variable.model is self._second_variable.model
            and self._first_variable.index == self._second_variable.index
        )

    def __str__(self):
        return f"{self._first_variable!s} == {self._second_variable!s}"

    def __repr__(self):
        return f"{self._first_variable!r} == {self._second_variable!r}"


class QuadraticTermKey:
    """An unordered pair of variables used as a key for quadratic terms.

    QuadraticTermKey(x, y) and QuadraticTermKey(y, x) are equal and have the
    same hash.
    """

    __slots__ = "_first_var", "_second_var"

    def __init__(self, a: "Variable", b: "Variable"):
        """Variables a and b will be ordered internally by their indices."""
        self._first_var: "Variable" = a
        self._second_var: "Variable" = b
        if self._first_var.index > self._second_var.index:
            self._first_var, self._second_var = self._second_var, self._first_var

    @property
    def first_var(self) -> "Variable":
        return self._first_var

    @property
    def second_var(self) -> "Variable":
        return self._second_var

    def __eq__(self, other: "QuadraticTermKey") -> bool:
        if not isinstance(other, QuadraticTermKey):
            return NotImplemented
        return bool(
            self._first_var == other._first_var
            and self._second_var == other._second_var
        )

    def __hash__(self) -> int:
        return hash((self._first_var, self._second_var))

    def __str__(self):
        return f"{self._first_var!s} * {self._second_var!s}"

    def __repr__(self):
        return f"QuadraticTermKey({self._first_var!r}, {self._second_var!r})"


class Expression(metaclass=abc.ABCMeta):
    """Interface for types that can build expressions with +, -, *, / and **.

    Classes derived from Expression (plus float and int scalars) are used to
    build expression trees. Operation nodes of the tree are:

      * Sum: a deferred n-ary sum.
      * Difference: a deferred n-ary subtraction, a - b - ... - z.
      * Negation: a deferred unary minus.
      * Product: a deferred n-ary product.
      * Quotient: a deferred division, the divisor must be constant.
      * Power: a deferred power, the exponent must be constant.
      * GeneratorSum: a deferred sum over the cartesian product of index sets.

    Leaf nodes are:

      * float and int scalars.
      * Variable: a single variable.
      * AffineExpression: a constant plus a weighted sum of variables.
      * QuadraticExpression: an AffineExpression plus a weighted sum of
        variable pairs.

    Building a node is O(1), all the work is done when the tree is folded into
    a number, AffineExpression or QuadraticExpression with folding.fold(). The
    cost of folding is linear in the size of the tree (plus the size of the
    cross products of non-constant factors).

    Comparisons with <=, >= and == build bounded expressions that can be added
    to a model as constraints.
    """

    __slots__ = ()

    def __eq__(
        self, rhs: ExpressionTypes
    ) -> (
        BoundedExpression
    ):  # pytype: disable=signature-mismatch  # overriding-return-type-checks
        if isinstance(rhs, (int, float)):
            return BoundedExpression(rhs, self, rhs)
        if not isinstance(rhs, Expression):
            _raise_binary_operator_type_error("==", type(self), type(rhs))
        return BoundedExpression(0.0, self - rhs, 0.0)

    def __ne__(
        self, rhs: ExpressionTypes
    ) -> (
        NoReturn
    ):  # pytype: disable=signature-mismatch  # overriding-return-type-checks
        _raise_ne_not_supported()

    @typing.overload
    def __le__(self, rhs: float) -> "UpperBoundedExpression": ...

    @typing.overload
    def __le__(self, rhs: "Expression") -> "BoundedExpression": ...

    def __le__(self, rhs):
        if isinstance(rhs, (int, float)):
            return UpperBoundedExpression(self, rhs)
        if isinstance(rhs, Expression):
            return BoundedExpression(-math.inf, self - rhs, 0.0)
        if isinstance(rhs, bounded_expressions.ComparisonTypes):
            _raise_binary_operator_type_error(
                "<=", type(self), type(rhs), _EXPRESSION_COMP_EXPRESSION_MESSAGE
            )
        _raise_binary_operator_type_error("<=", type(self), type(rhs))

    @typing.overload
    def __ge__(self, lhs: float) -> "LowerBoundedExpression": ...

    @typing.overload
    def __ge__(self, lhs: "Expression") -> "BoundedExpression": ...

    def __ge__(self, lhs):
        if isinstance(lhs, (int, float)):
            return LowerBoundedExpression(self, lhs)
        if isinstance(lhs, Expression):
            return BoundedExpression(0.0, self - lhs, math.inf)
        if isinstance(lhs, bounded_expressions.ComparisonTypes):
            _raise_binary_operator_type_error(
                ">=", type(self), type(lhs), _EXPRESSION_COMP_EXPRESSION_MESSAGE
            )
        _raise_binary_operator_type_error(">=", type(self), type(lhs))

    def __add__(self, expr: ExpressionTypes) -> "Sum":
        if not _is_operand(expr):
            return NotImplemented
        return Sum((self, expr))

    def __radd__(self, expr: ExpressionTypes) -> "Sum":
        if not _is_operand(expr):
            return NotImplemented
        return Sum((expr, self))

    def __sub__(self, expr: ExpressionTypes) -> "Difference":
        if not _is_operand(expr):
            return NotImplemented
        return Difference((self, expr))

    def __rsub__(self, expr: ExpressionTypes) -> "Difference":
        if not _is_operand(expr):
            return NotImplemented
        return Difference((expr, self))

    def __mul__(self, other: ExpressionTypes) -> "Product":
        if not _is_operand(other):
            return NotImplemented
        return Product((self, other))

    def __rmul__(self, other: ExpressionTypes) -> "Product":
        if not _is_operand(other):
            return NotImplemented
        return Product((other, self))

    def __truediv__(self, other: ExpressionTypes) -> "Quotient":
        if not _is_operand(other):
            return NotImplemented
        return Quotient(self, other)

    def __rtruediv__(self, other: ExpressionTypes) -> "Quotient":
        if not _is_operand(other):
            return NotImplemented
        return Quotient(other, self)

    def __pow__(self, exponent: ExpressionTypes) -> "Power":
        if not _is_operand(exponent):
            return NotImplemented
        return Power(self, exponent)

    def __neg__(self) -> "Negation":
        return Negation(self)

    def __pos__(self) -> "Expression":
        return self

    def to_string(self, mode: enums.PrintMode) -> str:
        """Returns the folded expression rendered in mode."""
        # folding depends on this module.
        from mathmodel.python import folding  # pylint: disable=g-import-not-at-top

        return printer.render(mode, folding.fold(self))

    def __str__(self):
        return self.to_string(enums.PrintMode.PLAIN_TEXT)

    def _repr_latex_(self) -> str:
        return printer.wrap_in_math_mode(self.to_string(enums.PrintMode.TYPESET))


class Variable(Expression):
    """A decision variable for an optimization model.

    A decision variable takes a value from a domain, either the real numbers or
    the integers, and restricted to be in some interval [lb, ub] (where lb and ub
    can be infinite).

    The name is optional and used only for printing. Non-empty names should be
    distinct.

    Every Variable is associated with a Model. The data describing the variable
    (e.g. lower_bound) is owned by the model, this class is simply a reference to
    that data. Do not create a Variable directly, use Model.add_variable()
    instead.
    """

    __slots__ = "_model", "_index"

    def __init__(self, model: Any, index: int) -> None:
        """Internal only, prefer Model functions (add_variable() and get_variable())."""
        if not isinstance(index, int):
            raise TypeError(f"index type should be int, was:{type(index)}")
        self._model = model
        self._index: int = index

    @property
    def lower_bound(self) -> float:
        return self._model.variable_data(self._index).lower_bound

    @lower_bound.setter
    def lower_bound(self, value: float) -> None:
        self._model.variable_data(self._index).lower_bound = value

    @property
    def upper_bound(self) -> float:
        return self._model.variable_data(self._index).upper_bound

    @upper_bound.setter
    def upper_bound(self, value: float) -> None:
        self._model.variable_data(self._index).upper_bound = value

    @property
    def integer(self) -> bool:
        return self._model.variable_data(self._index).integer

    @integer.setter
    def integer(self, value: bool) -> None:
        self._model.variable_data(self._index).integer = value

    @property
    def binary(self) -> bool:
        return self.integer and self.lower_bound == 0.0 and self.upper_bound == 1.0

    @property
    def name(self) -> str:
        return self._model.variable_data(self._index).name

    @property
    def index(self) -> int:
        return self._index

    @property
    def model(self) -> Any:
        return self._model

    def to_string(self, mode: enums.PrintMode) -> str:
        return printer.var_string(mode, self.name)

    def __repr__(self):
        return f"<Variable index: {self._index}, name: {self.name!r}>"

    @typing.overload
    def __eq__(self, rhs: "Variable") -> "VarEqVar": ...

    @typing.overload
    def __eq__(self, rhs: ExpressionTypes) -> "BoundedExpression": ...

    def __eq__(self, rhs):
        if isinstance(rhs, Variable):
            return VarEqVar(self, rhs)
        return super().__eq__(rhs)

    @typing.overload
    def __ne__(self, rhs: "Variable") -> bool: ...

    @typing.overload
    def __ne__(self, rhs: ExpressionTypes) -> NoReturn: ...

    def __ne__(self, rhs):
        if isinstance(rhs, Variable):
            return not self == rhs
        _raise_ne_not_supported()

    def __hash__(self) -> int:
        return hash(self._index)


class AffineExpression(Expression):
    """For variables x, an expression: b + sum_{i in I} a_i * x_i.

    This class is immutable, build instances by folding expression trees (see
    folding.fold()) or from a constant and a mapping of terms.
    """

    __slots__ = "__weakref__", "_constant", "_terms"

    def __init__(
        self,
        constant: float = 0.0,
        terms: Optional[Mapping[Variable, float]] = None,
    ) -> None:
        self._constant: float = constant
        self._terms: Mapping[Variable, float] = immutabledict.immutabledict(
            terms or {}
        )

    @property
    def constant(self) -> float:
        return self._constant

    @property
    def terms(self) -> Mapping[Variable, float]:
        return self._terms

    @property
    def degree(self) -> int:
        return 1 if self._terms else 0

    def evaluate(self, variable_values: Mapping[Variable, float]) -> float:
        """Returns the value of this expression for given variable values.

        E.g. if this is 3 * x + 4 and variable_values = {x: 2.0}, then
        evaluate(variable_values) equals 10.0.

        Args:
          variable_values: Must contain a value for every variable in expression.

        Returns:
          The value of this expression when replacing variables by their value.
        """
        result = self._constant
        for var, coef in sorted(
            self._terms.items(), key=lambda var_coef_pair: var_coef_pair[0].index
        ):
            result += coef * variable_values[var]
        return result

    def to_string(self, mode: enums.PrintMode) -> str:
        return printer.aff_string(
            mode,
            self._constant,
            ((coef, var.name) for var, coef in self._terms.items()),
        )

    def __repr__(self):
        result = f"AffineExpression({self._constant}, " + "{"
        result += ", ".join(
            f"{var!r}: {coefficient}" for var, coefficient in self._terms.items()
        )
        result += "})"
        return result


class QuadraticExpression(Expression):
    """For variables x, an expression: b + sum_{i in I} a_i * x_i + sum_{i,j in I, i<=j} a_i,j * x_i * x_j.

    This class is immutable.
    """

    __slots__ = "__weakref__", "_affine", "_quadratic_terms"

    def __init__(
        self,
        affine: Optional[AffineExpression] = None,
        quadratic_terms: Optional[Mapping[QuadraticTermKey, float]] = None,
    ) -> None:
        self._affine: AffineExpression = (
            affine if affine is not None else AffineExpression()
        )
        self._quadratic_terms: Mapping[QuadraticTermKey, float] = (
            immutabledict.immutabledict(quadratic_terms or {})
        )

    @property
    def affine(self) -> AffineExpression:
        return self._affine

    @property
    def constant(self) -> float:
        return self._affine.constant

    @property
    def linear_terms(self) -> Mapping[Variable, float]:
        return self._affine.terms

    @property
    def quadratic_terms(self) -> Mapping[QuadraticTermKey, float]:
        return self._quadratic_terms

    @property
    def degree(self) -> int:
        return 2 if self._quadratic_terms else self._affine.degree

    def evaluate(self, variable_values: Mapping[Variable, float]) -> float:
        """Returns the value of this expression for given variable values.

        E.g. if this is 3 * x * x + 4 and variable_values = {x: 2.0}, then
        evaluate(variable_values) equals 16.0.

        Args:
          variable_values: Must contain a value for every variable in expression.

        Returns:
          The value of this expression when replacing variables by their value.
        """
        result = self._affine.evaluate(variable_values)
        for key, coef in sorted(
            self._quadratic_terms.items(),
            key=lambda quad_coef_pair: (
                quad_coef_pair[0].first_var.index,
                quad_coef_pair[0].second_var.index,
            ),
        ):
            result += (
                coef * variable_values[key.first_var] * variable_values[key.second_var]
            )
        return result

    def to_string(self, mode: enums.PrintMode) -> str:
        return printer.quad_string(
            mode,
            (
                (coef, key.first_var.name, key.second_var.name)
                for key, coef in self._quadratic_terms.items()
            ),
            self._affine.constant,
            ((coef, var.name) for var, coef in self._affine.terms.items()),
        )

    def __repr__(self):
        result = f"QuadraticExpression({self._affine.constant}, " + "{"
        result += ", ".join(
            f"{var!r}: {coefficient}"
            for var, coefficient in self._affine.terms.items()
        )
        result += "}, {"
        result += ", ".join(
            f"{key!r}: {coefficient}"
            for key, coefficient in self._quadratic_terms.items()
        )
        result += "})"
        return result


class Sum(Expression):
    """A deferred sum of expressions and numbers.

    Sum objects are automatically created when an Expression is added and, in
    a fold, every element is added to the same accumulator. For example:

      x + y + 3.0

    is Sum((Sum((x, y)), 3.0)), folded left to right into one AffineExpression
    without temporaries.

    This class is immutable.
    """

    __slots__ = ("_elements",)

    def __init__(self, elements: Iterable[ExpressionTypes]) -> None:
        self._elements: Tuple[ExpressionTypes, ...] = tuple(elements)
        for element in self._elements:
            if isinstance(element, nonlinear.NonlinearReference):
                raise errors.UnsupportedNonlinearUseError(
                    "unsupported type in iterable argument for Sum:"
                    f" {type(element).__name__!r}\nNonlinear expressions and"
                    " parameters can only be used in nonlinear expressions, not"
                    " in affine or quadratic ones"
                )
            if not isinstance(element, (int, float, Expression)):
                raise TypeError(
                    "unsupported type in iterable argument for "
                    f"Sum: {type(element).__name__!r}"
                )

    @property
    def elements(self) -> Tuple[ExpressionTypes, ...]:
        return self._elements

    def __repr__(self):
        return "Sum((" + ", ".join(repr(e) for e in self._elements) + "))"


class Difference(Expression):
    """A deferred a - b - ... - z, all elements after the first are negated.

    This class is immutable.
    """

    __slots__ = ("_elements",)

    def __init__(self, elements: Iterable[ExpressionTypes]) -> None:
        self._elements: Tuple[ExpressionTypes, ...] = tuple(elements)
        if not self._elements:
            raise ValueError("Difference needs at least one element")

    @property
    def elements(self) -> Tuple[ExpressionTypes, ...]:
        return self._elements

    def __repr__(self):
        return "Difference((" + ", ".join(repr(e) for e in self._elements) + "))"


class Negation(Expression):
    """A deferred -operand.

    This class is immutable.
    """

    __slots__ = ("_operand",)

    def __init__(self, operand: ExpressionTypes) -> None:
        self._operand: ExpressionTypes = operand

    @property
    def operand(self) -> ExpressionTypes:
        return self._operand

    def __repr__(self):
        return f"Negation({self._operand!r})"


class Product(Expression):
    """A deferred product of factors.

    At most one factor is expected to be non-constant for an affine result, two
    for a quadratic one. The other factors are folded as coefficients.

    This class is immutable.
    """

    __slots__ = ("_factors",)

    def __init__(self, factors: Iterable[ExpressionTypes]) -> None:
        self._factors: Tuple[ExpressionTypes, ...] = tuple(factors)

    @property
    def factors(self) -> Tuple[ExpressionTypes, ...]:
        return self._factors

    def __repr__(self):
        return "Product((" + ", ".join(repr(f) for f in self._factors) + "))"


class Quotient(Expression):
    """A deferred numerator / denominator where denominator folds to a number.

    This class is immutable.
    """

    __slots__ = "_numerator", "_denominator"

    def __init__(
        self, numerator: ExpressionTypes, denominator: ExpressionTypes
    ) -> None:
        self._numerator: ExpressionTypes = numerator
        self._denominator: ExpressionTypes = denominator

    @property
    def numerator(self) -> ExpressionTypes:
        return self._numerator

    @property
    def denominator(self) -> ExpressionTypes:
        return self._denominator

    def __repr__(self):
        return f"Quotient({self._numerator!r}, {self._denominator!r})"


class Power(Expression):
    """A deferred base ** exponent where exponent folds to a number.

    This class is immutable.
    """

    __slots__ = "_base", "_exponent"

    def __init__(self, base: ExpressionTypes, exponent: ExpressionTypes) -> None:
        self._base: ExpressionTypes = base
        self._exponent: ExpressionTypes = exponent

    @property
    def base(self) -> ExpressionTypes:
        return self._base

    @property
    def exponent(self) -> ExpressionTypes:
        return self._exponent

    def __repr__(self):
        return f"Power({self._base!r}, {self._exponent!r})"


class GeneratorSum(Expression):
    """A deferred sum of body(*index) over the cartesian product of index sets.

    For example, with x an IndexedContainer over (I, J):

      GeneratorSum(lambda i, j: c[i] * x[i, j], (I, J), lambda i, j: i != j)

    is sum_{i in I, j in J, i != j} c_i * x_ij. When folded, every body is added
    to the same accumulator.

    This class is immutable (the index sets are iterated on every fold and must
    be re-iterable, e.g. ranges, lists or tuples).
    """

    __slots__ = "_body", "_index_sets", "_condition"

    def __init__(
        self,
        body: Callable[..., ExpressionTypes],
        index_sets: Sequence[Iterable[Any]],
        condition: Optional[Callable[..., bool]] = None,
    ) -> None:
        if not index_sets:
            raise ValueError("GeneratorSum needs at least one index set")
        self._body: Callable[..., ExpressionTypes] = body
        self._index_sets: Tuple[Iterable[Any], ...] = tuple(index_sets)
        self._condition: Optional[Callable[..., bool]] = condition

    @property
    def body(self) -> Callable[..., ExpressionTypes]:
        return self._body

    @property
    def index_sets(self) -> Tuple[Iterable[Any], ...]:
        return self._index_sets

    @property
    def condition(self) -> Optional[Callable[..., bool]]:
        return self._condition

    def addends(self) -> Iterator[ExpressionTypes]:
        """Yields body(*index) for every index passing the condition, in order."""
        for index in itertools.product(*self._index_sets):
            if self._condition is None or self._condition(*index):
                yield self._body(*index)

    def __repr__(self):
        return f"GeneratorSum({self._body!r}, {self._index_sets!r})"
