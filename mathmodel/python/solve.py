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

"""Solve optimization problems, as defined by Model in model.py."""

from typing import Optional, Protocol

from absl import logging

from mathmodel.python import errors
from mathmodel.python import model
from mathmodel.python import parameters
from mathmodel.python import problem_data
from mathmodel.python import result


class Optimizer(Protocol):
    """An optimization backend.

    Backends receive an immutable snapshot of the model and return the
    termination status and, if any, a primal solution keyed by the Variable
    objects of problem.variables.
    """

    @property
    def name(self) -> str:
        """The name of the optimizer, e.g. shown by str(model)."""

    def optimize(
        self,
        problem: problem_data.ProblemData,
        params: parameters.SolveParameters,
    ) -> result.SolveResult:
        """Solves problem, errors are raised as exceptions."""


def solve(
    opt_model: model.Model,
    optimizer: Optional[Optimizer] = None,
    *,
    params: Optional[parameters.SolveParameters] = None,
) -> result.SolveResult:
    """Solves an optimization model.

    Thread-safety: this function must not be called while modifying the Model
    (adding variables...).

    Args:
      opt_model: The optimization model.
      optimizer: The optimizer to use, defaults to the optimizer attached to
        opt_model (see Model.set_optimizer()).
      params: Configuration of the optimizer.

    Returns:
      A SolveResult containing the termination status and the solution.

    Raises:
      NoOptimizerError: if optimizer is None and no optimizer is attached to
        opt_model.
      ValueError: if params is invalid.
    """
    # Note that in python, default arguments must be immutable, and these are not.
    params = params or parameters.SolveParameters()
    params.validate()
    if optimizer is None:
        optimizer = opt_model.optimizer
    if optimizer is None:
        raise errors.NoOptimizerError()
    problem = opt_model.export_problem()
    logging.info(
        "Solving model %r (%d variables, %d constraints) with %s",
        problem.name,
        problem.num_variables,
        problem.num_constraints,
        optimizer.name,
    )
    solve_result = optimizer.optimize(problem, params)
    logging.info(
        "Solve of model %r finished: %s", problem.name, solve_result.termination.name
    )
    if not solve_result.has_primal_feasible_solution():
        logging.warning(
            "Solve of model %r returned no primal feasible solution (%s)",
            problem.name,
            solve_result.termination.name,
        )
    return solve_result
