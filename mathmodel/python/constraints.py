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

"""References to the scalar constraints of a model."""

from typing import Any

from mathmodel.python import enums
from mathmodel.python import printer
from mathmodel.python import problem_data
from mathmodel.python import sets


class ScalarConstraint:
    """A constraint `function in set` of a model, e.g. `2 x + y ≤ 3`.

    The function is an AffineExpression or a QuadraticExpression with a zero
    constant, the set is one of sets.LessThan, sets.GreaterThan, sets.EqualTo
    and sets.Interval.

    Every ScalarConstraint is associated with a Model. The data describing the
    constraint is owned by the model, this class is simply a reference to that
    data. Do not create a ScalarConstraint directly, use Model.add_constraint()
    instead.
    """

    __slots__ = "_model", "_index"

    def __init__(self, model: Any, index: int) -> None:
        """Internal only, prefer Model functions (add_constraint())."""
        self._model = model
        self._index: int = index

    @property
    def name(self) -> str:
        return self._model.constraint_data(self._index).name

    @property
    def function(self) -> problem_data.ConstraintFunction:
        return self._model.constraint_data(self._index).function

    @property
    def set(self) -> sets.ScalarSet:
        return self._model.constraint_data(self._index).set

    @property
    def index(self) -> int:
        return self._index

    @property
    def model(self) -> Any:
        return self._model

    def to_string(self, mode: enums.PrintMode) -> str:
        data = self._model.constraint_data(self._index)
        return printer.constraint_string(
            mode, data.name, data.function.to_string(mode), data.set
        )

    def __str__(self):
        return self.to_string(enums.PrintMode.PLAIN_TEXT)

    def _repr_latex_(self) -> str:
        return self.to_string(enums.PrintMode.TYPESET)

    def __repr__(self):
        return f"<ScalarConstraint index: {self._index}, name: {self.name!r}>"

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, ScalarConstraint):
            return NotImplemented
        return self._model is other._model and self._index == other._index

    def __hash__(self) -> int:
        return hash(self._index)
