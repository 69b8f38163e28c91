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

import datetime
import math

from absl.testing import absltest
from absl.testing import parameterized
from mathmodel.python import parameters


class SolveParametersTest(parameterized.TestCase):

    def test_defaults(self) -> None:
        params = parameters.SolveParameters()
        self.assertIsNone(params.time_limit)
        self.assertIsNone(params.iteration_limit)
        self.assertFalse(params.enable_output)
        self.assertIsNone(params.threads)
        self.assertDictEqual(params.solver_specific, {})
        params.validate()

    def test_solver_specific_is_not_shared(self) -> None:
        first = parameters.SolveParameters()
        first.solver_specific["presolve"] = False
        self.assertDictEqual(parameters.SolveParameters().solver_specific, {})

    def test_valid(self) -> None:
        parameters.SolveParameters(
            time_limit=datetime.timedelta(seconds=10),
            iteration_limit=0,
            enable_output=True,
            threads=4,
            random_seed=0,
            relative_gap_tolerance=1e-4,
            absolute_gap_tolerance=0.0,
        ).validate()

    @parameterized.named_parameters(
        ("time_limit", dict(time_limit=datetime.timedelta(seconds=-1)), "time_limit"),
        ("iteration_limit", dict(iteration_limit=-1), "iteration_limit"),
        ("threads", dict(threads=0), "threads"),
        ("random_seed", dict(random_seed=-3), "random_seed"),
        ("relative_gap", dict(relative_gap_tolerance=-0.1), "relative_gap_tolerance"),
        ("absolute_gap_nan", dict(absolute_gap_tolerance=math.nan), "absolute_gap"),
    )
    def test_invalid(self, kwargs, message) -> None:
        with self.assertRaisesRegex(ValueError, message):
            parameters.SolveParameters(**kwargs).validate()


if __name__ == "__main__":
    absltest.main()
