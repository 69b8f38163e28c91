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

"""An immutable snapshot of a model, the input of an optimizer."""

import dataclasses
from typing import Tuple, Union

from mathmodel.python import enums
from mathmodel.python import sets
from mathmodel.python import variables

ConstraintFunction = Union[
    variables.AffineExpression, variables.QuadraticExpression
]


# TODO: remove __slots__ and set slots=True once Python 3.10 is the minimum
# supported version.
@dataclasses.dataclass(frozen=True)
class VariableData:
    __slots__ = "variable", "name", "lower_bound", "upper_bound", "integer"
    variable: variables.Variable
    name: str
    lower_bound: float
    upper_bound: float
    integer: bool


@dataclasses.dataclass(frozen=True)
class ConstraintData:
    """A constraint `function in set`.

    The constant of function is always zero, it is moved into the set when the
    constraint is added.
    """

    __slots__ = "index", "name", "function", "set"
    index: int
    name: str
    function: ConstraintFunction
    set: sets.ScalarSet


@dataclasses.dataclass(frozen=True)
class ProblemData:
    """The description of an optimization problem handed to an optimizer.

    Attributes:
      name: The name of the model, can be empty.
      variables: The variables, in the order of creation.
      objective_sense: Whether the objective is minimized, maximized or ignored
        (FEASIBILITY).
      objective: The objective function.
      constraints: The constraints, in the order of creation.
      nonlinear_expressions: The source of the nonlinear expressions, indexed
        like the NonlinearExpression references.
      nonlinear_parameters: The value of the nonlinear parameters, indexed like
        the NonlinearParameter references.
    """

    __slots__ = (
        "name",
        "variables",
        "objective_sense",
        "objective",
        "constraints",
        "nonlinear_expressions",
        "nonlinear_parameters",
    )
    name: str
    variables: Tuple[VariableData, ...]
    objective_sense: enums.ObjectiveSense
    objective: variables.QuadraticExpression
    constraints: Tuple[ConstraintData, ...]
    nonlinear_expressions: Tuple[str, ...]
    nonlinear_parameters: Tuple[float, ...]

    @property
    def num_variables(self) -> int:
        return len(self.variables)

    @property
    def num_constraints(self) -> int:
        return len(self.constraints)

    @property
    def is_integer(self) -> bool:
        """True if some variable is integer."""
        return any(v.integer for v in self.variables)

    @property
    def is_linear(self) -> bool:
        """True if the objective and all constraints have no quadratic terms."""
        if self.objective.quadratic_terms:
            return False
        return all(
            isinstance(c.function, variables.AffineExpression)
            for c in self.constraints
        )
