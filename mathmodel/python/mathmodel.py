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

"""Module exporting all classes and functions needed for MathModel.

This module defines aliases to all classes and functions needed for regular use
of MathModel. It removes the need for users to have multiple imports for
specific sub-modules.

For example instead of:
  from mathmodel.python import model
  from mathmodel.python import solve

  m = model.Model()
  solve.solve(m, my_optimizer)

we can simply do:
  from mathmodel.python import mathmodel

  m = mathmodel.Model()
  mathmodel.solve(m, my_optimizer)
"""

# pylint: disable=unused-import
# pylint: disable=g-importing-member

from mathmodel.python.bounded_expressions import BoundedExpression
from mathmodel.python.bounded_expressions import LowerBoundedExpression
from mathmodel.python.bounded_expressions import UpperBoundedExpression
from mathmodel.python.constraints import ScalarConstraint
from mathmodel.python.containers import IndexSet
from mathmodel.python.containers import IndexedContainer
from mathmodel.python.enums import ObjectiveSense
from mathmodel.python.enums import PrintMode
from mathmodel.python.errors import DimensionMismatchError
from mathmodel.python.errors import InternalMathModelError
from mathmodel.python.errors import KeyNotFoundError
from mathmodel.python.errors import MalformedSyntaxError
from mathmodel.python.errors import NoOptimizerError
from mathmodel.python.errors import UnrecognizedSymbolError
from mathmodel.python.errors import UnsupportedNonlinearUseError
from mathmodel.python.expressions import as_flat_affine_expression
from mathmodel.python.expressions import as_flat_quadratic_expression
from mathmodel.python.expressions import evaluate_expression
from mathmodel.python.expressions import expression_from_source
from mathmodel.python.expressions import fast_sum
from mathmodel.python.expressions import sum_over
from mathmodel.python.folding import add_to_expression
from mathmodel.python.folding import AffineBuilder
from mathmodel.python.folding import fold
from mathmodel.python.folding import QuadraticBuilder
from mathmodel.python.model import Bound
from mathmodel.python.model import Model
from mathmodel.python.nonlinear import NonlinearExpression
from mathmodel.python.nonlinear import NonlinearParameter
from mathmodel.python.nonlinear import NonlinearReference
from mathmodel.python.parameters import SolveParameters
from mathmodel.python.printer import math_symbol
from mathmodel.python.printer import render
from mathmodel.python.problem_data import ConstraintFunction
from mathmodel.python.problem_data import ConstraintData
from mathmodel.python.problem_data import ProblemData
from mathmodel.python.problem_data import VariableData
from mathmodel.python.result import SolveResult
from mathmodel.python.result import TerminationStatus
from mathmodel.python.sets import EqualTo
from mathmodel.python.sets import from_bounds
from mathmodel.python.sets import GreaterThan
from mathmodel.python.sets import Interval
from mathmodel.python.sets import LessThan
from mathmodel.python.sets import ScalarSet
from mathmodel.python.solve import Optimizer
from mathmodel.python.solve import solve
from mathmodel.python.syntax import parse_constraint
from mathmodel.python.syntax import parse_expression
from mathmodel.python.variables import AffineExpression
from mathmodel.python.variables import Expression
from mathmodel.python.variables import ExpressionTypes
from mathmodel.python.variables import GeneratorSum
from mathmodel.python.variables import QuadraticExpression
from mathmodel.python.variables import QuadraticTermKey
from mathmodel.python.variables import Variable
from mathmodel.python.variables import VarEqVar
