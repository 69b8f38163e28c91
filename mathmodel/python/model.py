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

"""A solver independent library for modeling optimization problems.

Example:
  model = mathmodel.Model(name="my_model")
  x = model.add_variables("x", range(3), lb=0.0, ub=1.0)
  c = model.add_constraints(
      "c", range(2), rule=lambda i: x[i] + x[i + 1] <= 1.0
  )
  model.maximize(mathmodel.sum_over(lambda i: (i + 1) * x[i], range(3)))
  print(model.to_string(mathmodel.PrintMode.PLAIN_TEXT))
"""

import collections
import dataclasses
import math
from typing import (
    Any,
    Callable,
    Dict,
    Iterable,
    Iterator,
    List,
    Mapping,
    Optional,
    Tuple,
    Type,
    Union,
)

from absl import logging

from mathmodel.python import constraints
from mathmodel.python import containers
from mathmodel.python import enums
from mathmodel.python import errors
from mathmodel.python import folding
from mathmodel.python import nonlinear
from mathmodel.python import normalized_inequality
from mathmodel.python import printer
from mathmodel.python import problem_data
from mathmodel.python import sets
from mathmodel.python import syntax
from mathmodel.python import variables

_NO_OPTIMIZER = "No optimizer attached."

AffineExpression = variables.AffineExpression
Expression = variables.Expression
ExpressionTypes = variables.ExpressionTypes
QuadraticExpression = variables.QuadraticExpression
ScalarConstraint = constraints.ScalarConstraint
Variable = variables.Variable

Bound = Union[float, Callable[..., float]]


# TODO: remove __slots__ and set slots=True once Python 3.10 is the minimum
# supported version.
@dataclasses.dataclass
class _VariableData:
    """The mutable data of a variable, referenced by Variable objects."""

    __slots__ = "name", "lower_bound", "upper_bound", "integer"
    name: str
    lower_bound: float
    upper_bound: float
    integer: bool


def _index_name(name: str, index: Tuple[Any, ...]) -> str:
    return f"{name}[{','.join(str(i) for i in index)}]"


def _check_bounds(lb: float, ub: float, name: str) -> None:
    if math.isnan(lb) or math.isnan(ub):
        raise ValueError(f"NaN bound for variable {name!r}: [{lb}, {ub}]")


class Model:
    """An optimization model.

    A model has variables, scalar constraints `function in set`, an objective
    function with a sense (minimize, maximize or feasibility) and opaque
    nonlinear expressions and parameters that are forwarded to the optimizer.

    Containers of variables and constraints built by add_variables() and
    add_constraints() are registered under their name, e.g. model["x"].

    str(model) is a short summary, to_string() lists the full problem.

    Attributes:
      name: A description of the problem, can be empty.
    """

    __slots__ = (
        "_name",
        "_variables",
        "_variable_refs",
        "_constraints",
        "_constraint_refs",
        "_objective_sense",
        "_objective",
        "_nonlinear_expressions",
        "_nonlinear_parameters",
        "_registered",
        "_optimizer",
    )

    def __init__(self, *, name: str = "", optimizer: Any = None) -> None:
        self._name: str = name
        self._variables: List[_VariableData] = []
        self._variable_refs: List[Variable] = []
        self._constraints: List[problem_data.ConstraintData] = []
        self._constraint_refs: List[ScalarConstraint] = []
        self._objective_sense: enums.ObjectiveSense = enums.ObjectiveSense.FEASIBILITY
        self._objective: QuadraticExpression = QuadraticExpression()
        self._nonlinear_expressions: List[nonlinear.NonlinearExpression] = []
        self._nonlinear_parameters: List[nonlinear.NonlinearParameter] = []
        self._registered: Dict[str, Any] = {}
        self._optimizer = optimizer

    @property
    def name(self) -> str:
        return self._name

    #############################################################################
    # Variables
    #############################################################################

    def add_variable(
        self,
        *,
        lb: float = -math.inf,
        ub: float = math.inf,
        is_integer: bool = False,
        name: str = "",
    ) -> Variable:
        """Adds a decision variable to the optimization model.

        Args:
          lb: The new variable must take at least this value (a lower bound).
          ub: The new variable must be at most this value (an upper bound).
          is_integer: Indicates if the variable can only take integer values
            (otherwise, the variable can take any continuous value).
          name: For printing purposes only, but nonempty names should be
            distinct.

        Returns:
          A reference to the new decision variable.

        Raises:
          ValueError: if a bound is NaN.
        """
        _check_bounds(lb, ub, name)
        index = len(self._variables)
        self._variables.append(_VariableData(name, lb, ub, is_integer))
        result = Variable(self, index)
        self._variable_refs.append(result)
        logging.vlog(1, "Added variable #%d %r in [%s, %s]", index, name, lb, ub)
        return result

    def add_integer_variable(
        self, *, lb: float = -math.inf, ub: float = math.inf, name: str = ""
    ) -> Variable:
        return self.add_variable(lb=lb, ub=ub, is_integer=True, name=name)

    def add_binary_variable(self, *, name: str = "") -> Variable:
        return self.add_variable(lb=0.0, ub=1.0, is_integer=True, name=name)

    def add_variables(
        self,
        name: str,
        *index_sets: Iterable[Any],
        lb: Bound = -math.inf,
        ub: Bound = math.inf,
        is_integer: bool = False,
    ) -> containers.IndexedContainer:
        """Adds a container of variables, one per index, registered under name.

        For example, add_variables("x", range(1, 3), ["a", "b"], lb=0.0) adds the
        variables x[1,a], x[1,b], x[2,a] and x[2,b].

        Args:
          name: The name of the container, variables are named `name[i,j,...]`.
          *index_sets: The index sets of the container.
          lb: The lower bound of all variables, or a function returning the lower
            bound of the variable at index (i, j, ...) when called with i, j, ...
          ub: The upper bound of all variables, or a function like lb.
          is_integer: Whether the variables are integer.

        Returns:
          The container of the new variables.

        Raises:
          ValueError: if name is already registered.
          Any exception raised by lb or ub, no variable is added in that case.
        """
        self._check_unregistered(name)

        def new_variable(*index: Any) -> Variable:
            return self.add_variable(
                lb=lb(*index) if callable(lb) else lb,
                ub=ub(*index) if callable(ub) else ub,
                is_integer=is_integer,
                name=_index_name(name, index),
            )

        num_variables = len(self._variables)
        try:
            result = containers.IndexedContainer(name, index_sets, new_variable)
        except Exception:
            # Remove the variables of the indices built before the failure.
            del self._variables[num_variables:]
            del self._variable_refs[num_variables:]
            raise
        self.register(name, result)
        return result

    def variable_data(self, index: int) -> _VariableData:
        """Internal only, the data of the variable at index."""
        return self._variables[index]

    def get_variable(self, index: int) -> Variable:
        """Returns the Variable at index, or raises KeyError."""
        if not 0 <= index < len(self._variable_refs):
            raise KeyError(f"variable does not exist with index {index}")
        return self._variable_refs[index]

    def variables(self) -> Iterator[Variable]:
        """Yields the variables in the order of creation."""
        yield from self._variable_refs

    def num_variables(self) -> int:
        return len(self._variables)

    #############################################################################
    # Constraints
    #############################################################################

    # Note: bounded_expr's type includes bool only because comparisons of two
    # constants are bools. Passing a bool for bounded_expr will raise an error in
    # runtime.
    def add_constraint(
        self,
        bounded_expr: Optional[Union[bool, Any]] = None,
        *,
        lb: Optional[float] = None,
        ub: Optional[float] = None,
        expr: Optional[ExpressionTypes] = None,
        name: str = "",
    ) -> ScalarConstraint:
        """Adds a scalar constraint to the optimization model.

        The simplest way to specify the constraint is by passing a one-sided or
        two-sided inequality, or an equality, as in:
          * add_constraint(x + y + 1.0 <= 2.0),
          * add_constraint(x * x + y >= 2.0),
          * add_constraint(x == y), or
          * add_constraint((1.0 <= x + y) <= 2.0).

        The second way is by setting lb, ub and/or expr as in:
          * add_constraint(expr=x + y + 1.0, ub=2.0), or
          * add_constraint(expr=x + y, lb=1.0, ub=2.0).

        These two alternatives are exclusive. The constant of the expression is
        moved into the set, e.g. `x + 1.0 <= 3.0` is stored as `x ≤ 2`.

        Args:
          bounded_expr: An inequality or equality describing the constraint. Cannot
            be specified together with lb, ub, or expr.
          lb: The constraint's lower bound if bounded_expr is omitted.
          ub: The constraint's upper bound if bounded_expr is omitted.
          expr: The constraint's expression if bounded_expr is omitted.
          name: For printing purposes only, but nonempty names should be
            distinct.

        Returns:
          A reference to the new constraint.

        Raises:
          ValueError: if the expression uses variables of another model, or if the
            bounds are NaN or both infinite.
          TypeError: if bounded_expr is not a comparison.
        """
        normalized = normalized_inequality.as_normalized_constraint(
            bounded_expr, lb=lb, ub=ub, expr=expr
        )
        return self._add_normalized_constraint(
            normalized.function, normalized.set, name
        )

    def add_constraint_from_source(
        self,
        source: str,
        scope: Optional[Mapping[str, Any]] = None,
        *,
        name: str = "",
    ) -> ScalarConstraint:
        """Adds the constraint written in source, e.g. "sum(x[i] for i in I) <= 1".

        Args:
          source: A comparison (see syntax.parse_constraint()), names are looked up
            in scope.
          scope: The names visible to source, e.g. {"x": x, "I": range(3)}.
          name: For printing purposes only.

        Returns:
          A reference to the new constraint.

        Raises:
          MalformedSyntaxError: if source is not a supported comparison or if the
            bounds of a two-sided comparison are not constant.
        """
        parsed = syntax.parse_constraint(source)
        bounds = []
        for bound, default in ((parsed.lower, -math.inf), (parsed.upper, math.inf)):
            if bound is None:
                bounds.append(default)
                continue
            value = folding.fold(bound, scope)
            if not isinstance(value, (int, float)):
                raise errors.MalformedSyntaxError(
                    f"the bounds of a two-sided constraint must be constant: {source!r}"
                )
            bounds.append(value)
        normalized = normalized_inequality.NormalizedConstraint(
            lb=bounds[0],
            ub=bounds[1],
            expr=folding.fold(parsed.function, scope),
        )
        return self._add_normalized_constraint(
            normalized.function, normalized.set, name
        )

    def add_constraints(
        self,
        name: str,
        *index_sets: Iterable[Any],
        rule: Callable[..., Any],
    ) -> containers.IndexedContainer:
        """Adds a container of constraints, one per index, registered under name.

        For example:
          add_constraints("c", range(3), rule=lambda i: x[i] <= i)

        Args:
          name: The name of the container, constraints are named `name[i,...]`.
          *index_sets: The index sets of the container.
          rule: Called with the index (i, j, ...), returns the bounded expression
            of the constraint at that index.

        Returns:
          The container of the new constraints.

        Raises:
          ValueError: if name is already registered.
          Any exception raised by rule or by add_constraint(), no constraint is
            added in that case.
        """
        self._check_unregistered(name)

        def new_constraint(*index: Any) -> ScalarConstraint:
            return self.add_constraint(rule(*index), name=_index_name(name, index))

        num_constraints = len(self._constraints)
        try:
            result = containers.IndexedContainer(name, index_sets, new_constraint)
        except Exception:
            del self._constraints[num_constraints:]
            del self._constraint_refs[num_constraints:]
            raise
        self.register(name, result)
        return result

    def _add_normalized_constraint(
        self,
        function: problem_data.ConstraintFunction,
        scalar_set: sets.ScalarSet,
        name: str,
    ) -> ScalarConstraint:
        self._check_function(function)
        index = len(self._constraints)
        self._constraints.append(
            problem_data.ConstraintData(index, name, function, scalar_set)
        )
        result = ScalarConstraint(self, index)
        self._constraint_refs.append(result)
        logging.vlog(
            1,
            "Added constraint #%d %r: %s-in-%s",
            index,
            name,
            type(function).__name__,
            type(scalar_set).__name__,
        )
        return result

    def constraint_data(self, index: int) -> problem_data.ConstraintData:
        """Internal only, the data of the constraint at index."""
        return self._constraints[index]

    def get_constraint(self, index: int) -> ScalarConstraint:
        """Returns the ScalarConstraint at index, or raises KeyError."""
        if not 0 <= index < len(self._constraint_refs):
            raise KeyError(f"constraint does not exist with index {index}")
        return self._constraint_refs[index]

    def constraints(self) -> Iterator[ScalarConstraint]:
        """Yields the constraints in the order of creation."""
        yield from self._constraint_refs

    def list_of_constraint_types(self) -> List[Tuple[Type[Any], Type[Any]]]:
        """Returns the (function type, set type) pairs of the constraints.

        Pairs are listed in the order in which they first appear.
        """
        return list(self._constraint_type_counts())

    def num_constraints(
        self,
        function_type: Optional[Type[Any]] = None,
        set_type: Optional[Type[Any]] = None,
    ) -> int:
        """Returns the number of constraints, of the given types if set."""
        return sum(
            1
            for data in self._constraints
            if (function_type is None or type(data.function) is function_type)
            and (set_type is None or type(data.set) is set_type)
        )

    def _constraint_type_counts(self) -> Dict[Tuple[Type[Any], Type[Any]], int]:
        counts = collections.Counter(
            (type(data.function), type(data.set)) for data in self._constraints
        )
        # Counter keeps the order of first insertion.
        return dict(counts)

    #############################################################################
    # Objective
    #############################################################################

    def set_objective(
        self, objective: ExpressionTypes, sense: enums.ObjectiveSense
    ) -> None:
        """Sets the objective function and sense.

        Args:
          objective: An affine or quadratic expression, or an expression tree that
            folds to one.
          sense: MINIMIZE, MAXIMIZE or FEASIBILITY.

        Raises:
          TypeError: if objective is not an expression.
          ValueError: if objective uses variables of another model.
        """
        if not isinstance(objective, (int, float, Expression)):
            raise TypeError(
                "unsupported type in objective argument for "
                f"set_objective: {type(objective).__name__!r}"
            )
        objective_expr = folding.as_flat_quadratic_expression(objective)
        self._check_function(objective_expr)
        self._objective = objective_expr
        self._objective_sense = sense
        logging.vlog(1, "Objective set to %s %s", sense.name, objective_expr)

    def minimize(self, objective: ExpressionTypes) -> None:
        """Sets the objective to minimize the provided expression `objective`."""
        self.set_objective(objective, enums.ObjectiveSense.MINIMIZE)

    def maximize(self, objective: ExpressionTypes) -> None:
        """Sets the objective to maximize the provided expression `objective`."""
        self.set_objective(objective, enums.ObjectiveSense.MAXIMIZE)

    @property
    def objective_sense(self) -> enums.ObjectiveSense:
        return self._objective_sense

    @objective_sense.setter
    def objective_sense(self, sense: enums.ObjectiveSense) -> None:
        self._objective_sense = sense

    @property
    def objective_function(self) -> QuadraticExpression:
        """The objective, a QuadraticExpression even when it has no quadratic terms."""
        return self._objective

    #############################################################################
    # Nonlinear expressions and parameters
    #############################################################################

    def add_nonlinear_expression(self, source: str) -> nonlinear.NonlinearExpression:
        """Adds an opaque nonlinear expression evaluated by the optimizer.

        Args:
          source: The expression, e.g. "exp(x) * sin(y)".

        Returns:
          A reference to the expression. It can not be combined with affine or
          quadratic expressions.

        Raises:
          ValueError: if source is empty.
        """
        if not source.strip():
            raise ValueError("empty nonlinear expression")
        result = nonlinear.NonlinearExpression(
            self, len(self._nonlinear_expressions), source
        )
        self._nonlinear_expressions.append(result)
        logging.vlog(1, "Added nonlinear expression #%d: %s", result.index, source)
        return result

    def add_nonlinear_parameter(self, value: float) -> nonlinear.NonlinearParameter:
        """Adds a parameter of nonlinear expressions with an initial value."""
        result = nonlinear.NonlinearParameter(
            self, len(self._nonlinear_parameters), value
        )
        self._nonlinear_parameters.append(result)
        logging.vlog(1, "Added nonlinear parameter #%d = %s", result.index, value)
        return result

    def nonlinear_expressions(self) -> Iterator[nonlinear.NonlinearExpression]:
        yield from self._nonlinear_expressions

    def nonlinear_parameters(self) -> Iterator[nonlinear.NonlinearParameter]:
        yield from self._nonlinear_parameters

    def num_nonlinear_constraints(self) -> int:
        """The number of nonlinear constraints, always 0: they are not supported."""
        return 0

    #############################################################################
    # Registered names
    #############################################################################

    def register(self, name: str, value: Any) -> None:
        """Makes value available as model[name].

        Raises:
          ValueError: if name is empty or already registered.
        """
        if not name:
            raise ValueError("cannot register an object without a name")
        self._check_unregistered(name)
        self._registered[name] = value

    def unregister(self, name: str) -> None:
        """Removes the name, or raises KeyError if it is not registered."""
        if name not in self._registered:
            raise KeyError(f"no object registered under the name {name!r}")
        del self._registered[name]

    def registered_names(self) -> List[str]:
        """Returns the registered names, in the order of registration."""
        return list(self._registered)

    def _check_unregistered(self, name: str) -> None:
        if name in self._registered:
            raise ValueError(
                f"An object of name {name} is already attached to this model. If"
                " this is intended, consider using model.unregister"
                f"({name!r}) first"
            )

    def __getitem__(self, name: str) -> Any:
        if name not in self._registered:
            raise KeyError(f"no object registered under the name {name!r}")
        return self._registered[name]

    def __contains__(self, name: str) -> bool:
        return name in self._registered

    #############################################################################
    # Optimizer
    #############################################################################

    def set_optimizer(self, optimizer: Any) -> None:
        """Attaches optimizer (see solve.Optimizer), None detaches it."""
        self._optimizer = optimizer

    @property
    def optimizer(self) -> Any:
        return self._optimizer

    @property
    def solver_name(self) -> str:
        if self._optimizer is None:
            return _NO_OPTIMIZER
        return self._optimizer.name

    #############################################################################
    # Export and printing
    #############################################################################

    def export_problem(self) -> problem_data.ProblemData:
        """Returns an immutable snapshot of the model, the input of optimizers."""
        return problem_data.ProblemData(
            name=self._name,
            variables=tuple(
                problem_data.VariableData(
                    variable=variable,
                    name=data.name,
                    lower_bound=data.lower_bound,
                    upper_bound=data.upper_bound,
                    integer=data.integer,
                )
                for variable, data in zip(self._variable_refs, self._variables)
            ),
            objective_sense=self._objective_sense,
            objective=self._objective,
            constraints=tuple(self._constraints),
            nonlinear_expressions=tuple(e.source for e in self._nonlinear_expressions),
            nonlinear_parameters=tuple(p.value for p in self._nonlinear_parameters),
        )

    def to_string(self, mode: enums.PrintMode) -> str:
        """Returns the objective and the constraints of the model in mode."""
        return printer.model_string(
            mode,
            self._objective_sense,
            self._objective.to_string(mode),
            ((data.function.to_string(mode), data.set) for data in self._constraints),
        )

    def _repr_latex_(self) -> str:
        return printer.wrap_in_math_mode(self.to_string(enums.PrintMode.TYPESET))

    def __str__(self):
        return printer.model_summary(
            self._objective_sense,
            self.num_variables(),
            (
                (function_type.__name__, set_type.__name__, count)
                for (function_type, set_type), count in (
                    self._constraint_type_counts().items()
                )
            ),
            self.num_nonlinear_constraints(),
            self.solver_name,
            self.registered_names(),
        )

    def __repr__(self):
        return f"<Model {self._name!r}>"

    def check_compatible(self, value: Any) -> None:
        """Raises a ValueError if the model of value is not self."""
        if value.model is not self:
            raise ValueError(
                f"{value} is from model {value.model!r} and cannot be used with"
                f" model {self!r}"
            )

    def _check_function(
        self,
        function: Union[AffineExpression, QuadraticExpression],
    ) -> None:
        if isinstance(function, QuadraticExpression):
            for key in function.quadratic_terms:
                self.check_compatible(key.first_var)
                self.check_compatible(key.second_var)
            function = function.affine
        for variable in function.terms:
            self.check_compatible(variable)
