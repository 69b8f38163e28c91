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

"""Errors raised while building, printing and solving models.

Each error derives from the standard Python error a user would expect for the
same mistake, so that code catching ValueError, KeyError or TypeError keeps
working.
"""


class DimensionMismatchError(ValueError):
    """An index tuple does not have as many entries as the container has index sets."""


class KeyNotFoundError(KeyError):
    """A key was never registered in a non-range dimension of a container."""

    def __str__(self):
        # KeyError quotes its argument, we want the plain message.
        return str(self.args[0]) if self.args else ""


class UnsupportedNonlinearUseError(TypeError):
    """An opaque nonlinear expression or parameter reached polynomial arithmetic.

    Nonlinear expressions and parameters can only be composed with other
    nonlinear objects, never added to or multiplied with affine or quadratic
    expressions.
    """


class MalformedSyntaxError(ValueError):
    """An expression contains a construct that cannot be folded.

    This error is raised before any folding happens, e.g. for a comparison
    inside an arithmetic expression or for curly-brace syntax.
    """


class InternalMathModelError(RuntimeError):
    """Some mathmodel internal error.

    This error is usually raised because of a bug in mathmodel or in one of its
    extensions.
    """


class UnrecognizedSymbolError(InternalMathModelError):
    """The printer was asked for a math symbol it does not know."""


class NoOptimizerError(RuntimeError):
    """A model was solved before an optimizer was attached to it."""

    def __init__(self, message: str = "No optimizer attached to the model.") -> None:
        super().__init__(message)
