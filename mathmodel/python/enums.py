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

"""Enums shared by the model, the printer and the optimizer interface."""

import enum


@enum.unique
class ObjectiveSense(enum.Enum):
    """The direction of optimization of a model.

    The values are:
      * FEASIBILITY: There is no objective, any feasible point is a solution.
      * MINIMIZE: Find a feasible point with the smallest objective value.
      * MAXIMIZE: Find a feasible point with the largest objective value.
    """

    FEASIBILITY = 0
    MINIMIZE = 1
    MAXIMIZE = 2


@enum.unique
class PrintMode(enum.Enum):
    """How values are rendered to strings.

    The values are:
      * PLAIN_TEXT: Readable text for terminals and logs, e.g. `2 x² + y ≤ 1`.
      * TYPESET: LaTeX math for notebooks and documents, e.g.
          `2 x^2 + y \\leq 1`.
    """

    PLAIN_TEXT = 0
    TYPESET = 1
