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

"""Opaque references to nonlinear expressions and parameters of a model.

The nonlinear data itself lives in the model and is evaluated by the optimizer.
These references can not be combined with affine or quadratic expressions.
"""

from typing import Any, NoReturn

from mathmodel.python import enums
from mathmodel.python import errors


def _raise_nonlinear_use(operator: str, lhs: Any, rhs: Any) -> NoReturn:
    raise errors.UnsupportedNonlinearUseError(
        f"unsupported operand type(s) for {operator}: {type(lhs).__name__!r} and"
        f" {type(rhs).__name__!r}\nNonlinear expressions and parameters can only"
        " be used in nonlinear expressions, not in affine or quadratic ones"
    )


class NonlinearReference:
    """Base class of NonlinearExpression and NonlinearParameter."""

    __slots__ = "_model", "_index"

    _KIND = ""

    def __init__(self, model: Any, index: int) -> None:
        """Internal only, use the Model.add_nonlinear_*() functions."""
        self._model = model
        self._index: int = index

    @property
    def model(self) -> Any:
        return self._model

    @property
    def index(self) -> int:
        return self._index

    def to_string(self, mode: enums.PrintMode) -> str:
        del mode  # Same text in all modes.
        return f"Reference to nonlinear {self._KIND} #{self._index}"

    def __str__(self):
        return self.to_string(enums.PrintMode.PLAIN_TEXT)

    def __repr__(self):
        return f"<{type(self).__name__} index: {self._index}>"

    def __add__(self, other: Any) -> NoReturn:
        _raise_nonlinear_use("+", self, other)

    def __radd__(self, other: Any) -> NoReturn:
        _raise_nonlinear_use("+", other, self)

    def __sub__(self, other: Any) -> NoReturn:
        _raise_nonlinear_use("-", self, other)

    def __rsub__(self, other: Any) -> NoReturn:
        _raise_nonlinear_use("-", other, self)

    def __mul__(self, other: Any) -> NoReturn:
        _raise_nonlinear_use("*", self, other)

    def __rmul__(self, other: Any) -> NoReturn:
        _raise_nonlinear_use("*", other, self)

    def __truediv__(self, other: Any) -> NoReturn:
        _raise_nonlinear_use("/", self, other)

    def __rtruediv__(self, other: Any) -> NoReturn:
        _raise_nonlinear_use("/", other, self)

    def __pow__(self, other: Any) -> NoReturn:
        _raise_nonlinear_use("**", self, other)

    def __neg__(self) -> NoReturn:
        raise errors.UnsupportedNonlinearUseError(
            f"bad operand type for unary -: {type(self).__name__!r}"
        )


class NonlinearExpression(NonlinearReference):
    """A nonlinear expression stored in a model, e.g. `sin(x) * exp(y)`.

    The expression is kept as source text, evaluating it is the optimizer's job.
    """

    __slots__ = ("_source",)

    _KIND = "expression"

    def __init__(self, model: Any, index: int, source: str) -> None:
        super().__init__(model, index)
        self._source: str = source

    @property
    def source(self) -> str:
        return self._source


class NonlinearParameter(NonlinearReference):
    """A parameter of nonlinear expressions whose value can be changed between solves."""

    __slots__ = ("_value",)

    _KIND = "parameter"

    def __init__(self, model: Any, index: int, value: float) -> None:
        super().__init__(model, index)
        self._value: float = value

    @property
    def value(self) -> float:
        return self._value

    @value.setter
    def value(self, value: float) -> None:
        self._value = value
