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
from absl.testing import parameterized
from mathmodel.python import bounded_expressions
from mathmodel.python import errors
from mathmodel.python import model
from mathmodel.python import variables


class VariableTest(absltest.TestCase):

    def test_read_and_write_properties(self) -> None:
        mod = model.Model(name="test_model")
        x = mod.add_variable(lb=1.0, ub=2.0, is_integer=False, name="x")
        self.assertEqual(x.lower_bound, 1.0)
        self.assertEqual(x.upper_bound, 2.0)
        self.assertFalse(x.integer)
        self.assertFalse(x.binary)
        self.assertEqual(x.name, "x")
        self.assertEqual(x.index, 0)
        self.assertIs(x.model, mod)

        x.lower_bound = 0.0
        x.upper_bound = 1.0
        x.integer = True
        self.assertEqual(x.lower_bound, 0.0)
        self.assertEqual(x.upper_bound, 1.0)
        self.assertTrue(x.integer)
        self.assertTrue(x.binary)

    def test_default_values(self) -> None:
        mod = model.Model()
        x = mod.add_variable()
        self.assertEqual(x.lower_bound, -math.inf)
        self.assertEqual(x.upper_bound, math.inf)
        self.assertFalse(x.integer)
        self.assertEqual(x.name, "")
        self.assertEqual(str(x), "noname")

    def test_str_and_repr(self) -> None:
        mod = model.Model()
        x = mod.add_variable(name="x[1,2]")
        self.assertEqual(str(x), "x[1,2]")
        self.assertEqual(x._repr_latex_(), "$$ x_{1,2} $$")
        self.assertEqual(repr(x), "<Variable index: 0, name: 'x[1,2]'>")

    def test_bad_index_type(self) -> None:
        with self.assertRaisesRegex(TypeError, "index type should be int"):
            variables.Variable(model.Model(), "a")

    def test_equality_is_identity_as_bool(self) -> None:
        mod = model.Model()
        x = mod.add_variable(name="x")
        y = mod.add_variable(name="y")
        self.assertTrue(x == x)
        self.assertFalse(x == y)
        self.assertTrue(x != y)
        self.assertFalse(x != x)
        self.assertTrue(x == mod.get_variable(0))

    def test_same_index_other_model_is_different(self) -> None:
        x = model.Model().add_variable(name="x")
        other_x = model.Model().add_variable(name="x")
        self.assertFalse(x == other_x)

    def test_variables_as_dict_keys(self) -> None:
        mod = model.Model()
        x = mod.add_variable(name="x")
        y = mod.add_variable(name="y")
        values = {x: 1.0, y: 2.0}
        self.assertEqual(values[mod.get_variable(1)], 2.0)


class VarEqVarTest(absltest.TestCase):

    def test_var_eq_var(self) -> None:
        mod = model.Model()
        x = mod.add_variable(name="x")
        y = mod.add_variable(name="y")
        eq = x == y
        self.assertIsInstance(eq, variables.VarEqVar)
        self.assertIs(eq.first_variable, x)
        self.assertIs(eq.second_variable, y)
        self.assertEqual(eq.lower_bound, 0.0)
        self.assertEqual(eq.upper_bound, 0.0)
        self.assertEqual(str(eq), "x == y")
        difference = eq.expression
        self.assertIsInstance(difference, variables.Difference)
        self.assertIs(difference.elements[0], x)
        self.assertIs(difference.elements[1], y)


class QuadraticTermKeyTest(absltest.TestCase):

    def test_unordered(self) -> None:
        mod = model.Model()
        x = mod.add_variable(name="x")
        y = mod.add_variable(name="y")
        key = variables.QuadraticTermKey(y, x)
        self.assertIs(key.first_var, x)
        self.assertIs(key.second_var, y)
        self.assertEqual(key, variables.QuadraticTermKey(x, y))
        self.assertEqual(hash(key), hash(variables.QuadraticTermKey(x, y)))
        self.assertNotEqual(key, variables.QuadraticTermKey(x, x))
        self.assertEqual(str(key), "x * y")


class ExpressionTreeTest(absltest.TestCase):

    def setUp(self):
        super().setUp()
        self.mod = model.Model()
        self.x = self.mod.add_variable(name="x")
        self.y = self.mod.add_variable(name="y")

    def test_operators_build_lazy_nodes(self) -> None:
        x, y = self.x, self.y
        self.assertIsInstance(x + y, variables.Sum)
        self.assertIsInstance(1 + x, variables.Sum)
        self.assertIsInstance(x - y, variables.Difference)
        self.assertIsInstance(1 - x, variables.Difference)
        self.assertIsInstance(-x, variables.Negation)
        self.assertIsInstance(2 * x, variables.Product)
        self.assertIsInstance(x * y, variables.Product)
        self.assertIsInstance(x / 2, variables.Quotient)
        self.assertIsInstance(x**2, variables.Power)
        self.assertIs(+x, x)

    def test_operand_order_is_kept(self) -> None:
        x, y = self.x, self.y
        product = 2 * x
        self.assertEqual(product.factors[0], 2)
        self.assertIs(product.factors[1], x)
        difference = 3 - y
        self.assertEqual(difference.elements[0], 3)
        self.assertIs(difference.elements[1], y)
        quotient = 1 / x
        self.assertEqual(quotient.numerator, 1)
        self.assertIs(quotient.denominator, x)
        power = x**3
        self.assertIs(power.base, x)
        self.assertEqual(power.exponent, 3)
        self.assertIs((-x).operand, x)

    def test_sum_flattening_is_deferred(self) -> None:
        x, y = self.x, self.y
        s = x + y + 3.0
        self.assertLen(s.elements, 2)
        self.assertIsInstance(s.elements[0], variables.Sum)
        self.assertEqual(s.elements[1], 3.0)

    def test_sum_bad_element(self) -> None:
        with self.assertRaisesRegex(TypeError, "unsupported type in iterable"):
            variables.Sum([self.x, "a"])

    def test_empty_difference(self) -> None:
        with self.assertRaises(ValueError):
            variables.Difference(())

    def test_add_string_raises(self) -> None:
        with self.assertRaisesRegex(TypeError, "unsupported operand"):
            self.x + "a"  # pylint: disable=pointless-statement

    def test_comparison_in_arithmetic_raises(self) -> None:
        with self.assertRaisesRegex(
            errors.MalformedSyntaxError, "Unexpected comparison"
        ):
            (self.x <= 1.0) + self.y  # pylint: disable=pointless-statement

    def test_str_folds(self) -> None:
        x, y = self.x, self.y
        self.assertEqual(str(x + 2 * y - 1), "x + 2 y - 1")
        self.assertEqual(str(x - x), "0")
        self.assertEqual(str(3 * x * y), "3 x*y")

    def test_repr_latex(self) -> None:
        self.assertEqual((self.x * self.x)._repr_latex_(), "$$ x^2 $$")


class ComparisonTest(absltest.TestCase):

    def setUp(self):
        super().setUp()
        self.mod = model.Model()
        self.x = self.mod.add_variable(name="x")
        self.y = self.mod.add_variable(name="y")

    def test_upper_bounded(self) -> None:
        c = self.x + self.y <= 2.0
        self.assertIsInstance(c, bounded_expressions.UpperBoundedExpression)
        self.assertEqual(c.upper_bound, 2.0)
        self.assertEqual(c.lower_bound, -math.inf)

    def test_reflected_lower_bound(self) -> None:
        c = 1.0 <= self.x
        self.assertIsInstance(c, bounded_expressions.LowerBoundedExpression)
        self.assertEqual(c.lower_bound, 1.0)
        self.assertIs(c.expression, self.x)

    def test_ranged(self) -> None:
        c = (1.0 <= self.x + self.y) <= 2.0
        self.assertIsInstance(c, bounded_expressions.BoundedExpression)
        self.assertEqual(c.lower_bound, 1.0)
        self.assertEqual(c.upper_bound, 2.0)

    def test_expression_on_both_sides(self) -> None:
        c = self.x <= self.y
        self.assertIsInstance(c, bounded_expressions.BoundedExpression)
        self.assertEqual(c.lower_bound, -math.inf)
        self.assertEqual(c.upper_bound, 0.0)
        self.assertIsInstance(c.expression, variables.Difference)

        c = self.x + 1.0 >= self.y
        self.assertEqual(c.lower_bound, 0.0)
        self.assertEqual(c.upper_bound, math.inf)

    def test_equality(self) -> None:
        c = self.x + self.y == 1.0
        self.assertIsInstance(c, bounded_expressions.BoundedExpression)
        self.assertEqual(c.lower_bound, 1.0)
        self.assertEqual(c.upper_bound, 1.0)

    def test_not_equal_raises(self) -> None:
        with self.assertRaisesRegex(TypeError, "!= constraints are not supported"):
            self.x + self.y != 1.0  # pylint: disable=expression-not-assigned

    def test_bounded_on_both_sides_raises(self) -> None:
        with self.assertRaisesRegex(TypeError, "two or more non-constant"):
            (self.x <= self.y) <= self.x + 1.0  # pylint: disable=expression-not-assigned

    def test_compare_with_string_raises(self) -> None:
        with self.assertRaisesRegex(TypeError, "unsupported operand"):
            self.x + self.y <= "a"  # pylint: disable=expression-not-assigned


class AffineExpressionTest(absltest.TestCase):

    def test_properties(self) -> None:
        mod = model.Model()
        x = mod.add_variable(name="x")
        y = mod.add_variable(name="y")
        e = variables.AffineExpression(4.0, {x: 3.0, y: -1.0})
        self.assertEqual(e.constant, 4.0)
        self.assertDictEqual(dict(e.terms), {x: 3.0, y: -1.0})
        self.assertEqual(e.degree, 1)
        self.assertEqual(e.evaluate({x: 2.0, y: 1.0}), 9.0)
        self.assertEqual(str(e), "3 x - y + 4")

    def test_constant_only(self) -> None:
        e = variables.AffineExpression(-3.0)
        self.assertEqual(e.degree, 0)
        self.assertEqual(e.evaluate({}), -3.0)
        self.assertEqual(str(e), "-3")
        self.assertEqual(repr(e), "AffineExpression(-3.0, {})")

    def test_terms_are_immutable(self) -> None:
        x = model.Model().add_variable(name="x")
        e = variables.AffineExpression(0.0, {x: 1.0})
        with self.assertRaises(TypeError):
            e.terms[x] = 2.0  # pytype: disable=unsupported-operands


class QuadraticExpressionTest(absltest.TestCase):

    def test_properties(self) -> None:
        mod = model.Model()
        x = mod.add_variable(name="x")
        y = mod.add_variable(name="y")
        e = variables.QuadraticExpression(
            variables.AffineExpression(1.0, {y: 2.0}),
            {variables.QuadraticTermKey(x, y): 3.0},
        )
        self.assertEqual(e.constant, 1.0)
        self.assertDictEqual(dict(e.linear_terms), {y: 2.0})
        self.assertDictEqual(
            dict(e.quadratic_terms), {variables.QuadraticTermKey(x, y): 3.0}
        )
        self.assertEqual(e.degree, 2)
        self.assertEqual(e.evaluate({x: 2.0, y: 3.0}), 25.0)
        self.assertEqual(str(e), "3 x*y + 2 y + 1")

    def test_degree_without_quadratic_terms(self) -> None:
        x = model.Model().add_variable(name="x")
        self.assertEqual(variables.QuadraticExpression().degree, 0)
        self.assertEqual(
            variables.QuadraticExpression(
                variables.AffineExpression(0.0, {x: 1.0})
            ).degree,
            1,
        )


class GeneratorSumTest(parameterized.TestCase):

    def test_addends(self) -> None:
        s = variables.GeneratorSum(
            lambda i, j: 10 * i + j, (range(2), range(3)), lambda i, j: i != j
        )
        self.assertListEqual(list(s.addends()), [1, 2, 10, 12])
        # The index sets are re-iterated.
        self.assertListEqual(list(s.addends()), [1, 2, 10, 12])

    def test_no_index_set(self) -> None:
        with self.assertRaisesRegex(ValueError, "at least one index set"):
            variables.GeneratorSum(lambda: 1, ())


if __name__ == "__main__":
    absltest.main()
