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

from absl.testing import absltest
from mathmodel.python import errors
from mathmodel.python import expressions
from mathmodel.python import model
from mathmodel.python import sets
from mathmodel.python import variables


class FastSumTest(absltest.TestCase):

    def setUp(self):
        super().setUp()
        self.mod = model.Model(name="test_model")
        self.x = self.mod.add_variable(name="x")
        self.y = self.mod.add_variable(name="y")

    def test_variables_and_numbers(self) -> None:
        x, y = self.x, self.y
        result = expressions.fast_sum([x, 2 * y, 3.0, x])
        self.assertIsInstance(result, variables.Sum)
        self.assertLen(result.elements, 4)
        flat = expressions.as_flat_affine_expression(result)
        self.assertEqual(flat.constant, 3.0)
        self.assertDictEqual(dict(flat.terms), {x: 2.0, y: 2.0})

    def test_generator(self) -> None:
        x = self.x
        result = expressions.fast_sum(i * x for i in range(4))
        self.assertDictEqual(
            dict(expressions.as_flat_affine_expression(result).terms), {x: 6.0}
        )

    def test_empty_sum_in_constraint(self) -> None:
        c = self.mod.add_constraint(expressions.fast_sum([]) <= 1.0)
        self.assertEqual(c.set, sets.LessThan(1.0))
        self.assertDictEqual(dict(c.function.terms), {})
        self.assertEqual(self.mod.num_constraints(), 1)

    def test_bad_type(self) -> None:
        with self.assertRaisesRegex(TypeError, "unsupported type in iterable"):
            expressions.fast_sum([self.x, "y"])

    def test_nonlinear_summand(self) -> None:
        p = self.mod.add_nonlinear_parameter(1.0)
        e = self.mod.add_nonlinear_expression("exp(x)")
        for summand in (p, e):
            with self.assertRaisesRegex(
                errors.UnsupportedNonlinearUseError,
                "can only be used in nonlinear expressions",
            ):
                expressions.fast_sum([self.x, summand])


class SumOverTest(absltest.TestCase):

    def setUp(self):
        super().setUp()
        self.mod = model.Model(name="test_model")
        self.x = self.mod.add_variables("x", range(3), range(3))

    def test_sum_over(self) -> None:
        x = self.x
        result = expressions.sum_over(lambda i, j: (i + 1) * x[i, j], range(3), [1])
        self.assertIsInstance(result, variables.GeneratorSum)
        flat = expressions.as_flat_affine_expression(result)
        self.assertDictEqual(
            dict(flat.terms), {x[0, 1]: 1.0, x[1, 1]: 2.0, x[2, 1]: 3.0}
        )

    def test_condition(self) -> None:
        x = self.x
        result = expressions.sum_over(
            lambda i, j: x[i, j], range(3), range(3), condition=lambda i, j: i < j
        )
        flat = expressions.as_flat_affine_expression(result)
        self.assertDictEqual(
            dict(flat.terms), {x[0, 1]: 1.0, x[0, 2]: 1.0, x[1, 2]: 1.0}
        )

    def test_sum_over_is_reusable(self) -> None:
        x = self.x
        result = expressions.sum_over(lambda i: x[i, i], range(3))
        first = expressions.as_flat_affine_expression(result)
        second = expressions.as_flat_affine_expression(2 * result)
        self.assertDictEqual(
            dict(first.terms), {x[0, 0]: 1.0, x[1, 1]: 1.0, x[2, 2]: 1.0}
        )
        self.assertDictEqual(
            dict(second.terms), {x[0, 0]: 2.0, x[1, 1]: 2.0, x[2, 2]: 2.0}
        )


class EvaluateExpressionTest(absltest.TestCase):

    def setUp(self):
        super().setUp()
        self.mod = model.Model(name="test_model")
        self.x = self.mod.add_variable(name="x")
        self.y = self.mod.add_variable(name="y")

    def test_affine(self) -> None:
        x = self.x
        self.assertEqual(expressions.evaluate_expression(3 * x + 4, {x: 2.0}), 10.0)

    def test_quadratic(self) -> None:
        x, y = self.x, self.y
        self.assertEqual(
            expressions.evaluate_expression(x * y + x - 1, {x: 2.0, y: 3.0}), 7.0
        )

    def test_variable(self) -> None:
        self.assertEqual(expressions.evaluate_expression(self.x, {self.x: 1.5}), 1.5)

    def test_number(self) -> None:
        self.assertEqual(expressions.evaluate_expression(2.5, {}), 2.5)

    def test_missing_value(self) -> None:
        with self.assertRaises(KeyError):
            expressions.evaluate_expression(self.x + self.y, {self.x: 1.0})


class ExpressionFromSourceTest(absltest.TestCase):

    def setUp(self):
        super().setUp()
        self.mod = model.Model(name="test_model")
        self.x = self.mod.add_variables("x", range(3))
        self.y = self.mod.add_variable(name="y")

    def test_weighted_sum(self) -> None:
        x, y = self.x, self.y
        result = expressions.expression_from_source(
            "sum(c[i] * x[i] for i in I) + 2 * y",
            {"c": [1.0, 2.0, 3.0], "x": x, "y": y, "I": range(3)},
        )
        self.assertIsInstance(result, variables.AffineExpression)
        self.assertDictEqual(
            dict(result.terms), {x[0]: 1.0, x[1]: 2.0, x[2]: 3.0, y: 2.0}
        )

    def test_constant(self) -> None:
        self.assertEqual(expressions.expression_from_source("2 * (3 + 1)"), 8)

    def test_malformed(self) -> None:
        with self.assertRaises(errors.MalformedSyntaxError):
            expressions.expression_from_source("x <= 1", {"x": self.y})


if __name__ == "__main__":
    absltest.main()
