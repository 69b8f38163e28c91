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

"""Configures the solving of an optimization model."""

import dataclasses
import datetime
from typing import Any, Dict, Optional


@dataclasses.dataclass
class SolveParameters:
    """Parameters to control a single solve.

    If a value is set both in a common field and in solver_specific, the solver
    specific setting is used.

    See solve() in solve.py for more details.

    Attributes:
      time_limit: The maximum time a solver should spend on the problem, or if
        None, then the time limit is infinite. This value is not a hard limit,
        solve time may slightly exceed this value.
      iteration_limit: Limit on the iterations of the underlying algorithm (e.g.
        simplex pivots). Must be >= 0 if set.
      enable_output: If the solver should print out its log messages.
      threads: An integer >= 1, how many threads to use when solving.
      random_seed: Seed for the pseudo-random number generator in the underlying
        solver. Must be >= 0 if set.
      relative_gap_tolerance: A relative optimality tolerance (primarily) for MIP
        solvers. Must be >= 0 if set.
      absolute_gap_tolerance: An absolute optimality tolerance (primarily) for MIP
        solvers. Must be >= 0 if set.
      solver_specific: Parameters passed unchanged to the optimizer, keyed by the
        optimizer's own parameter names.
    """

    time_limit: Optional[datetime.timedelta] = None
    iteration_limit: Optional[int] = None
    enable_output: bool = False
    threads: Optional[int] = None
    random_seed: Optional[int] = None
    relative_gap_tolerance: Optional[float] = None
    absolute_gap_tolerance: Optional[float] = None
    solver_specific: Dict[str, Any] = dataclasses.field(default_factory=dict)

    def validate(self) -> None:
        """Raises a ValueError if a parameter has an invalid value."""
        if self.time_limit is not None and self.time_limit < datetime.timedelta(0):
            raise ValueError(f"time_limit must be >= 0, got {self.time_limit}")
        if self.iteration_limit is not None and self.iteration_limit < 0:
            raise ValueError(
                f"iteration_limit must be >= 0, got {self.iteration_limit}"
            )
        if self.threads is not None and self.threads < 1:
            raise ValueError(f"threads must be >= 1, got {self.threads}")
        if self.random_seed is not None and self.random_seed < 0:
            raise ValueError(f"random_seed must be >= 0, got {self.random_seed}")
        for field_name in ("relative_gap_tolerance", "absolute_gap_tolerance"):
            value = getattr(self, field_name)
            if value is not None and not value >= 0.0:
                raise ValueError(f"{field_name} must be >= 0, got {value}")
