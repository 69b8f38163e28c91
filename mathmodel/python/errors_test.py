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

"""Tests of the `errors` package."""

from absl.testing import absltest
from absl.testing import parameterized
from mathmodel.python import errors


class ErrorHierarchyTest(parameterized.TestCase):

    @parameterized.named_parameters(
        ("dimension_mismatch", errors.DimensionMismatchError, ValueError),
        ("key_not_found", errors.KeyNotFoundError, KeyError),
        ("nonlinear_use", errors.UnsupportedNonlinearUseError, TypeError),
        ("malformed_syntax", errors.MalformedSyntaxError, ValueError),
        ("internal", errors.InternalMathModelError, RuntimeError),
        (
            "unrecognized_symbol",
            errors.UnrecognizedSymbolError,
            errors.InternalMathModelError,
        ),
        ("no_optimizer", errors.NoOptimizerError, RuntimeError),
    )
    def test_base_class(self, error_type, base_type) -> None:
        self.assertTrue(issubclass(error_type, base_type))

    def test_key_not_found_message_is_not_quoted(self) -> None:
        self.assertEqual(
            str(errors.KeyNotFoundError("x has no index 'a'")), "x has no index 'a'"
        )
        self.assertEqual(str(KeyError("x has no index 'a'")), "\"x has no index 'a'\"")

    def test_no_optimizer_default_message(self) -> None:
        self.assertEqual(
            str(errors.NoOptimizerError()), "No optimizer attached to the model."
        )


if __name__ == "__main__":
    absltest.main()
