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

"""The output of solving an optimization model."""

import dataclasses
import datetime
import enum
from typing import Any, Dict, Optional

from mathmodel.python import containers
from mathmodel.python import folding
from mathmodel.python import variables


@enum.unique
class TerminationStatus(enum.Enum):
    """The reason a solve of a model terminated.

    These reasons are as reported by the optimizer, we do not attempt to verify
    the precision of the solution returned.

    The values are:
       * OPTIMAL: A provably optimal solution (up to numerical tolerances) has
           been found.
       * INFEASIBLE: The primal problem has no feasible solutions.
       * UNBOUNDED: The primal problem is feasible and arbitrarily good solutions
           can be found along a primal ray.
       * INFEASIBLE_OR_UNBOUNDED: The primal problem is either infeasible or
           unbounded.
       * TIME_LIMIT: The optimizer stopped after SolveParameters.time_limit, a
           primal feasible solution may be returned.
       * ITERATION_LIMIT: The optimizer stopped after
           SolveParameters.iteration_limit, a primal feasible solution may be
           returned.
       * OTHER_ERROR: The optimizer stopped because of an error not covered by
           one of the statuses defined above. No solution information is present.
       * OPTIMIZE_NOT_CALLED: The model was not solved.
    """

    OPTIMAL = 1
    INFEASIBLE = 2
    UNBOUNDED = 3
    INFEASIBLE_OR_UNBOUNDED = 4
    TIME_LIMIT = 5
    ITERATION_LIMIT = 6
    OTHER_ERROR = 7
    OPTIMIZE_NOT_CALLED = 8


_NO_SOLUTION_STATUSES = frozenset(
    (
        TerminationStatus.INFEASIBLE,
        TerminationStatus.INFEASIBLE_OR_UNBOUNDED,
        TerminationStatus.OTHER_ERROR,
        TerminationStatus.OPTIMIZE_NOT_CALLED,
    )
)


@dataclasses.dataclass
class SolveResult:
    """The result of solving an optimization problem.

    Attributes:
      termination: The reason the optimizer stopped.
      objective_value: The objective value of the returned primal solution, None
        if there is no primal solution.
      variable_values: The value of each variable in the returned primal
        solution, empty if there is none.
      raw_status: The status reported by the optimizer, in its own terms.
      solve_time: The time spent by the optimizer.
    """

    termination: TerminationStatus = TerminationStatus.OPTIMIZE_NOT_CALLED
    objective_value: Optional[float] = None
    variable_values: Dict[variables.Variable, float] = dataclasses.field(
        default_factory=dict
    )
    raw_status: str = ""
    solve_time: datetime.timedelta = datetime.timedelta()

    def has_primal_feasible_solution(self) -> bool:
        """Indicates if a primal feasible solution is available.

        When termination is TerminationStatus.OPTIMAL, this is guaranteed to be
        true if the optimizer follows the Optimizer protocol.

        Returns:
          True if there is a primal feasible solution, False otherwise.
        """
        return (
            self.objective_value is not None
            and self.termination not in _NO_SOLUTION_STATUSES
        )

    def result_count(self) -> int:
        """The number of primal solutions available, 0 or 1."""
        return 1 if self.has_primal_feasible_solution() else 0

    def value(self, value: Any) -> Any:
        """Returns the value of value in the primal solution.

        Args:
          value: A Variable, an expression or an expression tree, a number, or an
            IndexedContainer of those (mapped element-wise).

        Returns:
          A float, or an IndexedContainer of floats for containers.

        Raises:
          ValueError: There is no primal feasible solution.
          KeyError: value uses a variable missing from the solution (e.g. a
            variable of another model).
        """
        if not self.has_primal_feasible_solution():
            raise ValueError("No primal feasible solution available.")
        if isinstance(value, containers.IndexedContainer):
            return value.map(self.value)
        if isinstance(value, variables.Variable):
            return self.variable_values[value]
        flat = folding.fold(value)
        if isinstance(flat, (int, float)):
            return flat
        return flat.evaluate(self.variable_values)
