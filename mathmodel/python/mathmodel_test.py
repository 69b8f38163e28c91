#!/usr/bin/env python3
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

"""Tests for mathmodel."""
import inspect
import types
import typing
from typing import Any, List, Set, Tuple

from absl.testing import absltest
from mathmodel.python import constraints
from mathmodel.python import containers
from mathmodel.python import enums
from mathmodel.python import errors
from mathmodel.python import expressions
from mathmodel.python import mathmodel
from mathmodel.python import model
from mathmodel.python import nonlinear
from mathmodel.python import parameters
from mathmodel.python import problem_data
from mathmodel.python import result
from mathmodel.python import sets
from mathmodel.python import solve

# This list does not contain some modules intentionally:
#
# - `syntax`, `folding` and `printer`: only their entry points are exported,
#   their other public symbols are building blocks of the model.
#
# - `variables` and `bounded_expressions`: the lazy expression nodes are
#   created by operators, users never need to name them.
#
_MODULES_TO_CHECK: List[types.ModuleType] = [
    constraints,
    containers,
    enums,
    errors,
    expressions,
    model,
    nonlinear,
    parameters,
    problem_data,
    result,
    sets,
    solve,
]

# Some symbols are not meant to be exported; we exclude them here.
_EXCLUDED_SYMBOLS: Set[Tuple[types.ModuleType, str]] = set()

_TYPING_PUBLIC_CONTENT = [
    getattr(typing, name) for name in dir(typing) if not name.startswith("_")
]


def _is_actual_export(v: Any) -> bool:
    if inspect.ismodule(v):
        return False
    if getattr(v, "__module__", None) != typing.__name__:
        return True
    return v not in _TYPING_PUBLIC_CONTENT


def _get_public_api(module: types.ModuleType) -> List[Tuple[str, Any]]:
    tuple_list = inspect.getmembers(module, _is_actual_export)
    return [(name, obj) for name, obj in tuple_list if not name.startswith("_")]


class MathModelTest(absltest.TestCase):

    def test_imports(self) -> None:
        missing_imports: List[str] = []
        for module in _MODULES_TO_CHECK:
            for name, obj in _get_public_api(module):
                if (module, name) in _EXCLUDED_SYMBOLS:
                    continue
                if hasattr(mathmodel, name):
                    self.assertIs(
                        getattr(mathmodel, name),
                        obj,
                        msg=f"module: {module.__name__} name: {name}",
                    )
                else:
                    # Collect every missing import before failing.
                    missing_imports.append(f"from {module.__name__} import {name}")
        # We can't have \ in an expression inside an f-string.
        nl = "\n"
        self.assertFalse(
            bool(missing_imports),
            msg=f"missing imports:\n{nl.join(missing_imports)}",
        )


if __name__ == "__main__":
    absltest.main()
