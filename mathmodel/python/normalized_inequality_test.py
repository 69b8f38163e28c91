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

import math

from absl.testing import absltest
from mathmodel.python import bounded_expressions
from mathmodel.python import model
from mathmodel.python import normalized_inequality
from mathmodel.python import sets
from mathmodel.python import variables

_BAD_TYPE = "bounded_expr has bad type"


class NormalizedConstraintTest(absltest.TestCase):

    def setUp(self):
        super().setUp()
        self.mod = model.Model(name="test_model")
        self.x = self.mod.add_variable(name="x")
        self.y = self.mod.add_variable(name="y")

    def test_init(self) -> None:
        x, y = self.x, self.y
        inequality = normalized_inequality.NormalizedConstraint(
            lb=1.0, ub=5.0, expr=2 * x + y + 1.0
        )
        self.assertIsInstance(inequality.function, variables.AffineExpression)
        self.assertEqual(inequality.function.constant, 0.0)
        self.assertDictEqual(dict(inequality.function.terms), {x: 2.0, y: 1.0})
        self.assertEqual(inequality.set, sets.Interval(0.0, 4.0))

    def test_defaults(self) -> None:
        inequality = normalized_inequality.NormalizedConstraint(ub=2.0)
        self.assertDictEqual(dict(inequality.function.terms), {})
        self.assertEqual(inequality.set, sets.LessThan(2.0))

    def test_constant_expression(self) -> None:
        inequality = normalized_inequality.NormalizedConstraint(
            lb=1.0, ub=2.0, expr=3.0
        )
        self.assertEqual(inequality.function.degree, 0)
        self.assertEqual(inequality.set, sets.Interval(-2.0, -1.0))

    def test_quadratic(self) -> None:
        x = self.x
        inequality = normalized_inequality.NormalizedConstraint(
            lb=-math.inf, ub=1.0, expr=x * x - 2.0
        )
        self.assertIsInstance(inequality.function, variables.QuadraticExpression)
        self.assertEqual(inequality.function.constant, 0.0)
        self.assertEqual(inequality.set, sets.LessThan(3.0))

    def test_quadratic_without_quadratic_terms_is_affine(self) -> None:
        y = self.y
        quadratic = variables.QuadraticExpression(
            variables.AffineExpression(1.0, {y: 1.0})
        )
        inequality = normalized_inequality.NormalizedConstraint(
            lb=0.0, ub=0.0, expr=quadratic
        )
        self.assertIsInstance(inequality.function, variables.AffineExpression)
        self.assertEqual(inequality.set, sets.EqualTo(-1.0))

    def test_infinite_constant(self) -> None:
        with self.assertRaisesRegex(ValueError, "infinite"):
            normalized_inequality.NormalizedConstraint(
                lb=0.0, ub=1.0, expr=self.x + math.inf
            )

    def test_bad_expr_type(self) -> None:
        with self.assertRaisesRegex(TypeError, "Unsupported type for expr"):
            normalized_inequality.NormalizedConstraint(ub=1.0, expr="x")


class AsNormalizedConstraintTest(absltest.TestCase):

    def setUp(self):
        super().setUp()
        self.mod = model.Model(name="test_model")
        self.x = self.mod.add_variable(name="x")
        self.y = self.mod.add_variable(name="y")

    def test_upper_bounded_expression(self) -> None:
        inequality = normalized_inequality.as_normalized_constraint(
            self.x + 1.0 <= 3.0
        )
        self.assertDictEqual(dict(inequality.function.terms), {self.x: 1.0})
        self.assertEqual(inequality.set, sets.LessThan(2.0))

    def test_lower_bounded_expression(self) -> None:
        inequality = normalized_inequality.as_normalized_constraint(
            2.0 * self.y >= -1.0
        )
        self.assertDictEqual(dict(inequality.function.terms), {self.y: 2.0})
        self.assertEqual(inequality.set, sets.GreaterThan(-1.0))

    def test_var_eq_var(self) -> None:
        inequality = normalized_inequality.as_normalized_constraint(self.x == self.y)
        self.assertDictEqual(
            dict(inequality.function.terms), {self.x: 1.0, self.y: -1.0}
        )
        self.assertEqual(inequality.set, sets.EqualTo(0.0))

    def test_keyword_arguments(self) -> None:
        inequality = normalized_inequality.as_normalized_constraint(
            lb=-1.0, expr=self.x - 1.0
        )
        self.assertEqual(inequality.set, sets.GreaterThan(0.0))

    def test_bool(self) -> None:
        with self.assertRaisesRegex(TypeError, "Unsupported type for bounded_expr"):
            normalized_inequality.as_normalized_constraint(True)

    def test_bad_bounded_expr_type(self) -> None:
        with self.assertRaisesRegex(TypeError, _BAD_TYPE):
            normalized_inequality.as_normalized_constraint("x <= 1")

    def test_bad_expression_type_in_bounded_expr(self) -> None:
        with self.assertRaisesRegex(TypeError, "Bad type of expression"):
            normalized_inequality.as_normalized_constraint(
                bounded_expressions.BoundedExpression(0.0, "x", 1.0)
            )

    def test_bounded_expr_with_keyword_arguments(self) -> None:
        bounded = self.x <= 1.0
        with self.assertRaisesRegex(AssertionError, "lb cannot be specified"):
            normalized_inequality.as_normalized_constraint(bounded, lb=0.0)
        with self.assertRaisesRegex(AssertionError, "ub cannot be specified"):
            normalized_inequality.as_normalized_constraint(bounded, ub=0.0)
        with self.assertRaisesRegex(AssertionError, "expr cannot be specified"):
            normalized_inequality.as_normalized_constraint(bounded, expr=self.y)


if __name__ == "__main__":
    absltest.main()
