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

"""Parses expression source text into expression trees.

For example:

  tree = syntax.parse_expression("sum(c[i] * x[i] for i in I if c[i] > 0) - 2 * y")

returns a tree of variables.Expression nodes that folding.fold(tree, scope)
turns into an AffineExpression, looking up `c`, `x` and `I` in scope.

The arithmetic skeleton of the source (+, -, *, /, ** or ^, unary minus and
sum(<generator>)) becomes Sum, Difference, Product, Quotient, Power, Negation
and ComprehensionSum nodes. Names, attribute accesses, subscripts, conditional
expressions and calls other than sum() become Reference leaves, evaluated as
plain Python in the scope when the tree is folded.

Anything else in the arithmetic skeleton (a comparison, a boolean operator,
curly braces, %, //, ...) raises MalformedSyntaxError when parsing, before any
folding.
"""

import ast
import builtins
import collections
import dataclasses
import io
import tokenize
from typing import Any, Iterator, List, Mapping, Optional, Sequence, Tuple

from mathmodel.python import errors
from mathmodel.python import variables

_BUILTINS = "__builtins__"

_COMPARISON_MESSAGE = "Unexpected comparison in expression"
_CURLY_MESSAGE = "Curly braces are not supported in expressions"
_NESTED_SCOPE_TYPES = (
    ast.GeneratorExp,
    ast.ListComp,
    ast.SetComp,
    ast.DictComp,
    ast.Lambda,
)


def _compile(node: ast.expr) -> Any:
    expression = ast.fix_missing_locations(ast.Expression(body=node))
    return compile(expression, "<expression>", "eval")


class _Namespace(dict):
    """The names of a scope and the builtins, the globals of Reference leaves."""

    __slots__ = ()


def namespace(scope: Mapping[str, Any]) -> Mapping[str, Any]:
    """Returns scope prepared for evaluating Reference leaves.

    Folding a parsed tree prepares its scope once, the leaves then evaluate
    without copying it.

    Args:
      scope: The names visible to the leaves.

    Returns:
      scope itself if it is already prepared, otherwise a copy of scope with the
      builtins.
    """
    if isinstance(scope, _Namespace):
        return scope
    result = _Namespace(scope)
    result[_BUILTINS] = builtins
    return result


def _root(scope: Mapping[str, Any]) -> Mapping[str, Any]:
    """Returns the outermost mapping of the generator scopes chained in scope."""
    while isinstance(scope, collections.ChainMap):
        scope = scope.maps[-1]
    return scope


class Reference(variables.Expression):
    """A leaf evaluated as Python code in the scope of the fold.

    E.g. `x[i, j]`, `c[i]`, `data.weight` or `math.sqrt(2)`.
    """

    __slots__ = "_source", "_code", "_has_nested_scopes"

    def __init__(self, node: ast.expr) -> None:
        self._source: str = ast.unparse(node)
        self._code = _compile(node)
        # Comprehensions and lambdas in the source, e.g. `max(c[i] for i in I)`.
        self._has_nested_scopes: bool = any(
            isinstance(child, _NESTED_SCOPE_TYPES) for child in ast.walk(node)
        )

    @property
    def source(self) -> str:
        return self._source

    def evaluate(self, scope: Mapping[str, Any]) -> Any:
        """Returns the value of the source in scope.

        Args:
          scope: The names visible to the source.

        Returns:
          The value.

        Raises:
          NameError: if the source uses a name missing from scope.
        """
        if isinstance(scope, collections.ChainMap) and not self._has_nested_scopes:
            # The targets of the enclosing generators are locals.
            return eval(  # pylint: disable=eval-used
                self._code, namespace(_root(scope)), scope
            )
        # Nested scopes only see globals, they need every name there.
        return eval(self._code, namespace(scope))  # pylint: disable=eval-used

    def to_string(self, mode: Any) -> str:
        del mode  # Unused.
        return self._source

    def __repr__(self):
        return f"Reference({self._source!r})"


@dataclasses.dataclass(frozen=True)
class _Clause:
    """One `for target in iterable if condition...` of a generator."""

    target: ast.expr
    iterable: Reference
    conditions: Tuple[Reference, ...]


def _bind(target: ast.expr, value: Any, bindings: dict) -> None:
    """Assigns value to the names of target, unpacking tuples."""
    if isinstance(target, ast.Name):
        bindings[target.id] = value
        return
    # Validated when parsing: a tuple or list of valid targets.
    elements = target.elts
    values = tuple(value)
    if len(values) != len(elements):
        raise ValueError(
            f"cannot unpack {len(values)} values into {ast.unparse(target)}"
        )
    for element, element_value in zip(elements, values):
        _bind(element, element_value, bindings)


class ComprehensionSum(variables.Expression):
    """A deferred sum(body for ... in ... if ...), folded into the running sum.

    Clauses may depend on the targets of the previous ones, e.g.
    `sum(x[i, j] for i in I for j in range(i))`.
    """

    __slots__ = "_body", "_clauses", "_source"

    def __init__(
        self, body: variables.ExpressionTypes, clauses: Sequence[_Clause], source: str
    ) -> None:
        self._body: variables.ExpressionTypes = body
        self._clauses: Tuple[_Clause, ...] = tuple(clauses)
        self._source: str = source

    @property
    def body(self) -> variables.ExpressionTypes:
        return self._body

    def scopes(self, scope: Mapping[str, Any]) -> Iterator[Mapping[str, Any]]:
        """Yields the scope of every evaluation of the body, in order."""
        if not isinstance(scope, collections.ChainMap):
            scope = namespace(scope)
        return self._expand(0, scope)

    def _expand(
        self, clause_index: int, scope: Mapping[str, Any]
    ) -> Iterator[Mapping[str, Any]]:
        if clause_index == len(self._clauses):
            yield scope
            return
        clause = self._clauses[clause_index]
        for value in clause.iterable.evaluate(scope):
            bindings = {}
            _bind(clause.target, value, bindings)
            inner_scope = collections.ChainMap(bindings, scope)
            if all(
                condition.evaluate(inner_scope) for condition in clause.conditions
            ):
                yield from self._expand(clause_index + 1, inner_scope)

    def to_string(self, mode: Any) -> str:
        del mode  # Unused.
        return self._source

    def __repr__(self):
        return f"ComprehensionSum({self._source!r})"


def _translate_carets(source: str) -> str:
    """Replaces the `^` operator by `**`, which has the precedence of a power."""
    try:
        tokens = list(tokenize.generate_tokens(io.StringIO(source).readline))
    except (tokenize.TokenError, SyntaxError) as e:
        raise errors.MalformedSyntaxError(f"invalid expression {source!r}") from e
    if not any(t.type == tokenize.OP and t.string == "^" for t in tokens):
        return source
    return tokenize.untokenize(
        (t.type, "**" if t.type == tokenize.OP and t.string == "^" else t.string)
        for t in tokens
    )


def _parse(source: str) -> ast.expr:
    try:
        tree = ast.parse(_translate_carets(source.strip()), mode="eval")
    except SyntaxError as e:
        raise errors.MalformedSyntaxError(
            f"invalid expression {source!r}: {e.msg}"
        ) from e
    return tree.body


def _flatten(node: ast.expr, op_type: type) -> List[ast.expr]:
    """Returns [a, b, c] for the left-associative chain a op b op c."""
    operands = []
    while isinstance(node, ast.BinOp) and isinstance(node.op, op_type):
        operands.append(node.right)
        node = node.left
    operands.append(node)
    operands.reverse()
    return operands


class _Parser(ast.NodeVisitor):
    """Converts the arithmetic skeleton of an AST into expression nodes."""

    def visit_BinOp(self, node: ast.BinOp) -> variables.ExpressionTypes:
        if isinstance(node.op, ast.Add):
            return variables.Sum(self.visit(n) for n in _flatten(node, ast.Add))
        if isinstance(node.op, ast.Sub):
            return variables.Difference(self.visit(n) for n in _flatten(node, ast.Sub))
        if isinstance(node.op, ast.Mult):
            return variables.Product(self.visit(n) for n in _flatten(node, ast.Mult))
        if isinstance(node.op, ast.Div):
            return variables.Quotient(self.visit(node.left), self.visit(node.right))
        if isinstance(node.op, ast.Pow):
            return variables.Power(self.visit(node.left), self.visit(node.right))
        raise errors.MalformedSyntaxError(
            f"Unsupported operator {type(node.op).__name__} in expression:"
            f" {ast.unparse(node)}"
        )

    def visit_UnaryOp(self, node: ast.UnaryOp) -> variables.ExpressionTypes:
        if isinstance(node.op, ast.USub):
            return variables.Negation(self.visit(node.operand))
        if isinstance(node.op, ast.UAdd):
            return self.visit(node.operand)
        raise errors.MalformedSyntaxError(
            f"Unsupported operator {type(node.op).__name__} in expression:"
            f" {ast.unparse(node)}"
        )

    def visit_Constant(self, node: ast.Constant) -> Any:
        if isinstance(node.value, (int, float)):
            return node.value
        raise errors.MalformedSyntaxError(
            f"Unexpected constant {node.value!r} in expression"
        )

    def _reference(self, node: ast.expr) -> Reference:
        return Reference(node)

    visit_Name = _reference
    visit_Attribute = _reference
    visit_Subscript = _reference
    visit_IfExp = _reference

    def visit_Call(self, node: ast.Call) -> variables.ExpressionTypes:
        if not (isinstance(node.func, ast.Name) and node.func.id == "sum"):
            return Reference(node)
        if (
            len(node.args) != 1
            or node.keywords
            or not isinstance(node.args[0], ast.GeneratorExp)
        ):
            # e.g. sum(values) of a plain Python iterable.
            return Reference(node)
        generator = node.args[0]
        clauses = []
        for comprehension in generator.generators:
            if comprehension.is_async:
                raise errors.MalformedSyntaxError(
                    "async generators are not supported in expressions"
                )
            _check_target(comprehension.target)
            clauses.append(
                _Clause(
                    target=comprehension.target,
                    iterable=Reference(comprehension.iter),
                    conditions=tuple(Reference(c) for c in comprehension.ifs),
                )
            )
        return ComprehensionSum(
            self.visit(generator.elt), clauses, ast.unparse(node)
        )

    def visit_Compare(self, node: ast.Compare) -> Any:
        raise errors.MalformedSyntaxError(
            f"{_COMPARISON_MESSAGE}: {ast.unparse(node)}"
        )

    def visit_BoolOp(self, node: ast.BoolOp) -> Any:
        raise errors.MalformedSyntaxError(
            f"Unexpected boolean operator in expression: {ast.unparse(node)}"
        )

    def _curly(self, node: ast.expr) -> Any:
        raise errors.MalformedSyntaxError(f"{_CURLY_MESSAGE}: {ast.unparse(node)}")

    visit_Set = _curly
    visit_Dict = _curly
    visit_SetComp = _curly
    visit_DictComp = _curly

    def _generator(self, node: ast.expr) -> Any:
        raise errors.MalformedSyntaxError(
            "Generators are only supported as the single argument of sum(): "
            f"{ast.unparse(node)}"
        )

    visit_GeneratorExp = _generator
    visit_ListComp = _generator

    def generic_visit(self, node: ast.AST) -> Any:
        raise errors.MalformedSyntaxError(
            f"Unsupported syntax {type(node).__name__} in expression"
        )


def _check_target(target: ast.expr) -> None:
    if isinstance(target, ast.Name):
        return
    if isinstance(target, (ast.Tuple, ast.List)):
        for element in target.elts:
            _check_target(element)
        return
    raise errors.MalformedSyntaxError(
        f"Unsupported generator target {ast.unparse(target)}"
    )


def parse_expression(source: str) -> variables.ExpressionTypes:
    """Returns the expression tree of source.

    Args:
      source: A Python expression, `^` may be used for powers.

    Returns:
      A number or an expression tree to fold with folding.fold(tree, scope).

    Raises:
      MalformedSyntaxError: if source is not a valid expression, or contains a
        comparison, a boolean operator, curly braces or another unsupported
        construct.
    """
    return _Parser().visit(_parse(source))


@dataclasses.dataclass(frozen=True)
class ConstraintSyntax:
    """A parsed constraint lower <= function <= upper.

    Attributes:
      function: The expression tree of the constrained function.
      lower: The expression tree of the lower bound, must fold to a number. None
        if there is no lower bound.
      upper: The expression tree of the upper bound, must fold to a number. None
        if there is no upper bound.
    """

    function: variables.ExpressionTypes
    lower: Optional[variables.ExpressionTypes] = None
    upper: Optional[variables.ExpressionTypes] = None


def parse_constraint(source: str) -> ConstraintSyntax:
    """Returns the parsed constraint of source.

    Supported forms are `lhs <= rhs`, `lhs >= rhs` and `lhs == rhs` (the
    function is lhs - rhs) and the two-sided `lb <= expr <= ub` and
    `ub >= expr >= lb`.

    Args:
      source: A Python comparison, `^` may be used for powers.

    Returns:
      The parsed constraint.

    Raises:
      MalformedSyntaxError: if source is not one of the forms above, or if its
        sides are not valid expressions (see parse_expression()).
    """
    node = _parse(source)
    if not isinstance(node, ast.Compare):
        raise errors.MalformedSyntaxError(
            f"Expected a comparison in constraint: {source!r}"
        )
    parser = _Parser()
    ops = [type(op) for op in node.ops]
    operands = [parser.visit(n) for n in [node.left] + node.comparators]
    if len(ops) == 1:
        difference = variables.Difference((operands[0], operands[1]))
        if ops[0] is ast.LtE:
            return ConstraintSyntax(difference, upper=0.0)
        if ops[0] is ast.GtE:
            return ConstraintSyntax(difference, lower=0.0)
        if ops[0] is ast.Eq:
            return ConstraintSyntax(difference, lower=0.0, upper=0.0)
    elif len(ops) == 2:
        if ops == [ast.LtE, ast.LtE]:
            return ConstraintSyntax(operands[1], lower=operands[0], upper=operands[2])
        if ops == [ast.GtE, ast.GtE]:
            return ConstraintSyntax(operands[1], lower=operands[2], upper=operands[0])
    raise errors.MalformedSyntaxError(
        "Unsupported comparison in constraint, expected <=, >=, == or a two-sided"
        f" <= or >= comparison: {source!r}"
    )
