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

"""Renders variables, expressions, constraints and models to strings.

Two modes are supported (see enums.PrintMode):
  * PLAIN_TEXT: e.g. `2 x² - x*y + 3 ≤ 4`, used by str().
  * TYPESET: LaTeX math, e.g. `2 x^2 - x\\times y + 3 \\leq 4`, used by
    _repr_latex_() in notebooks.

The term construction logic is shared by both modes, only the symbols returned
by math_symbol() and the wrapping of the result differ. The functions below
work on plain data (coefficients and variable names) so that this module does
not depend on the expression classes; those implement `to_string(mode)` by
calling the functions here.

All functions are pure.
"""

import sys
from typing import Any, Iterable, Mapping, Optional, Protocol, Sequence, Tuple

import immutabledict

from mathmodel.python import enums
from mathmodel.python import errors
from mathmodel.python import sets

PrintMode = enums.PrintMode

# token -> (unicode glyph, ASCII glyph used on Windows consoles).
_PLAIN_TEXT_SYMBOLS: Mapping[str, Tuple[str, str]] = immutabledict.immutabledict(
    {
        "leq": ("≤", "<="),
        "geq": ("≥", ">="),
        "eq": ("=", "=="),
        "times": ("*", "*"),
        "sq": ("²", "²"),
        "ind_open": ("[", "["),
        "ind_close": ("]", "]"),
        "for_all": ("∀", "for all"),
        "in": ("∈", "in"),
        "open_set": ("{", "{"),
        "dots": ("…", ".."),
        "close_set": ("}", "}"),
        "union": ("∪", "or"),
        "infty": ("∞", "Inf"),
        "open_rng": ("[", "["),
        "close_rng": ("]", "]"),
        "integer": ("integer", "integer"),
        "succeq0": (" is semidefinite", " is semidefinite"),
        "Vert": ("‖", "||"),
        "sub2": ("₂", "_2"),
    }
)

_TYPESET_SYMBOLS: Mapping[str, str] = immutabledict.immutabledict(
    {
        "leq": "\\leq",
        "geq": "\\geq",
        "eq": "=",
        "times": "\\times ",
        "sq": "^2",
        "ind_open": "_{",
        "ind_close": "}",
        "for_all": "\\quad\\forall",
        "in": "\\in",
        "open_set": "\\{",
        "dots": "\\dots",
        "close_set": "\\}",
        "union": "\\cup",
        "infty": "\\infty",
        "open_rng": "\\[",
        "close_rng": "\\]",
        "integer": "\\in \\mathbb{Z}",
        "succeq0": "\\succeq 0",
        "Vert": "\\Vert",
        "sub2": "_2",
    }
)

_ZERO_TOLERANCE = 1e-10

_NO_NAME = "noname"


class Printable(Protocol):
    """Values that can be passed to render()."""

    def to_string(self, mode: PrintMode) -> str:
        """Returns the representation of this value in the given mode."""


def math_symbol(mode: PrintMode, token: str, windows: Optional[bool] = None) -> str:
    """Returns the glyph representing `token` in `mode`.

    Args:
      mode: The print mode.
      token: One of leq, geq, eq, times, sq, ind_open, ind_close, for_all, in,
        open_set, dots, close_set, union, infty, open_rng, close_rng, integer,
        succeq0, Vert and sub2.
      windows: Whether to use the ASCII fallbacks of PLAIN_TEXT mode. Defaults
        to True on Windows where consoles often lack the unicode glyphs.

    Returns:
      The glyph.

    Raises:
      UnrecognizedSymbolError: if token is not one of the tokens above.
    """
    if mode == PrintMode.TYPESET:
        symbol = _TYPESET_SYMBOLS.get(token)
        if symbol is None:
            raise errors.UnrecognizedSymbolError(f"Unrecognized symbol {token}")
        return symbol
    symbols = _PLAIN_TEXT_SYMBOLS.get(token)
    if symbols is None:
        raise errors.UnrecognizedSymbolError(f"Unrecognized symbol {token}")
    if windows is None:
        windows = sys.platform == "win32"
    return symbols[1] if windows else symbols[0]


def _one_unit(value: Any) -> Any:
    """Returns 1 in the units of value (e.g. a pint.Quantity), else 1.0."""
    units = getattr(value, "units", None)
    if units is None:
        return 1.0
    return 1.0 * units


def is_zero_for_printing(coefficient: Any) -> bool:
    return abs(coefficient) < _ZERO_TOLERANCE * _one_unit(coefficient)


def is_one_for_printing(coefficient: Any) -> bool:
    return is_zero_for_printing(abs(coefficient) - _one_unit(coefficient))


def sign_string(coefficient: Any) -> str:
    return " - " if coefficient < 0 else " + "


def format_number(value: Any) -> str:
    """Returns value as a string, without the ".0" of integral floats.

    E.g. 5.3 is "5.3", 1.0 is "1" and -0.0 is "0".

    Args:
      value: The number to format.

    Returns:
      The string.
    """
    if isinstance(value, float):
        if value == 0.0:
            return "0"
        text = str(value)
        if text.endswith(".0"):
            return text[:-2]
        return text
    return str(value)


def wrap_in_math_mode(text: str) -> str:
    return f"$$ {text} $$"


def wrap_in_inline_math_mode(text: str) -> str:
    return f"$ {text} $"


def var_string(mode: PrintMode, name: str) -> str:
    """Returns the representation of a variable named `name`.

    In TYPESET mode the first "[" of the name opens a subscript, e.g. x[1,2] is
    rendered as x_{1,2}.

    Args:
      mode: The print mode.
      name: The variable name, possibly empty.

    Returns:
      The name, or "noname" if it is empty.
    """
    if not name:
        return _NO_NAME
    if mode == PrintMode.TYPESET:
        return name.replace("[", "_{", 1).replace("]", "}")
    return name


def _coefficient_prefix(coefficient: Any) -> str:
    if is_one_for_printing(coefficient):
        return ""
    return format_number(abs(coefficient)) + " "


def aff_string(
    mode: PrintMode,
    constant: Any,
    terms: Iterable[Tuple[Any, str]],
    show_constant: bool = True,
) -> str:
    """Returns the representation of constant + sum(c * v for c, v in terms).

    Terms whose coefficient is zero for printing are omitted. The first term has
    no leading "+" and a leading "-" without space.

    Args:
      mode: The print mode.
      constant: The constant of the expression.
      terms: (coefficient, variable name) pairs, in print order.
      show_constant: If False, the constant is not printed (and the result is
        "0" when no term is printed).

    Returns:
      The string.
    """
    pieces = []
    for coefficient, name in terms:
        if is_zero_for_printing(coefficient):
            continue
        pieces.append(sign_string(coefficient))
        pieces.append(_coefficient_prefix(coefficient) + var_string(mode, name))
    if not pieces:
        return format_number(constant) if show_constant else "0"
    pieces[0] = "-" if pieces[0] == " - " else ""
    result = "".join(pieces)
    if show_constant and not is_zero_for_printing(constant):
        result += sign_string(constant) + format_number(abs(constant))
    return result


def quad_string(
    mode: PrintMode,
    quadratic_terms: Iterable[Tuple[Any, str, str]],
    constant: Any,
    linear_terms: Iterable[Tuple[Any, str]],
) -> str:
    """Returns the representation of a quadratic expression.

    Args:
      mode: The print mode.
      quadratic_terms: (coefficient, first name, second name) triples, in print
        order.
      constant: The constant of the expression.
      linear_terms: (coefficient, variable name) pairs, in print order.

    Returns:
      The quadratic terms followed by the affine part, which is omitted when it
      renders as "0".
    """
    pieces = []
    for coefficient, first_name, second_name in quadratic_terms:
        if is_zero_for_printing(coefficient):
            continue
        first = var_string(mode, first_name)
        second = var_string(mode, second_name)
        if first == second:
            product = first + math_symbol(mode, "sq")
        else:
            product = first + math_symbol(mode, "times") + second
        pieces.append(sign_string(coefficient))
        pieces.append(_coefficient_prefix(coefficient) + product)
    affine = aff_string(mode, constant, linear_terms)
    if not pieces:
        return affine
    pieces[0] = "-" if pieces[0] == " - " else ""
    result = "".join(pieces)
    if affine == "0":
        return result
    if affine.startswith("-"):
        return f"{result} - {affine[1:]}"
    return f"{result} + {affine}"


def in_set_string(mode: PrintMode, scalar_set: sets.ScalarSet) -> str:
    """Returns the membership to scalar_set, e.g. "≤ 3" or "∈ [1, 2]"."""
    if isinstance(scalar_set, sets.LessThan):
        return f"{math_symbol(mode, 'leq')} {format_number(scalar_set.upper)}"
    if isinstance(scalar_set, sets.GreaterThan):
        return f"{math_symbol(mode, 'geq')} {format_number(scalar_set.lower)}"
    if isinstance(scalar_set, sets.EqualTo):
        return f"{math_symbol(mode, 'eq')} {format_number(scalar_set.value)}"
    if isinstance(scalar_set, sets.Interval):
        return (
            f"{math_symbol(mode, 'in')} {math_symbol(mode, 'open_rng')}"
            f"{format_number(scalar_set.lower)}, {format_number(scalar_set.upper)}"
            f"{math_symbol(mode, 'close_rng')}"
        )
    raise TypeError(f"unsupported set type: {type(scalar_set).__name__!r}")


def constraint_string(
    mode: PrintMode,
    name: str,
    function_string: str,
    scalar_set: sets.ScalarSet,
) -> str:
    """Returns `name : function set`, the function already rendered in mode.

    In TYPESET mode the constraint (but not its name) is wrapped in inline math.

    Args:
      mode: The print mode.
      name: The constraint name, the prefix is omitted when empty.
      function_string: The rendered function of the constraint.
      scalar_set: The set the function must belong to.

    Returns:
      The string.
    """
    text = f"{function_string} {in_set_string(mode, scalar_set)}"
    if mode == PrintMode.TYPESET:
        text = wrap_in_inline_math_mode(text)
    if not name:
        return text
    return f"{name} : {text}"


def model_string(
    mode: PrintMode,
    sense: enums.ObjectiveSense,
    objective_string: str,
    constraints: Iterable[Tuple[str, sets.ScalarSet]],
) -> str:
    """Returns the full listing of a model.

    Args:
      mode: The print mode.
      sense: The objective sense, the objective is not printed for FEASIBILITY.
      objective_string: The rendered objective function.
      constraints: (rendered function, set) pairs, in print order.

    Returns:
      One line for the objective, one for "Subject to" and one per constraint,
      each ending with a newline. In TYPESET mode the lines form an alignat*
      environment.
    """
    typeset = mode == PrintMode.TYPESET
    sep = " & " if typeset else " "
    eol = "\\\\\n" if typeset else "\n"
    if sense == enums.ObjectiveSense.MAXIMIZE:
        result = "\\max" if typeset else "Max"
    elif sense == enums.ObjectiveSense.MINIMIZE:
        result = "\\min" if typeset else "Min"
    else:
        result = "\\text{feasibility}" if typeset else "Feasibility"
    if sense != enums.ObjectiveSense.FEASIBILITY:
        if typeset:
            result += "\\quad"
        result += sep + objective_string
    result += eol
    result += "\\text{Subject to} \\quad" if typeset else "Subject to" + eol
    for function_string, scalar_set in constraints:
        result += f"{sep}{function_string} {in_set_string(mode, scalar_set)}{eol}"
    if typeset:
        result = "\\begin{alignat*}{1}" + result + "\\end{alignat*}\n"
    return result


def _plural(count: int) -> str:
    return "" if count == 1 else "s"


def model_summary(
    sense: enums.ObjectiveSense,
    num_variables: int,
    constraint_counts: Iterable[Tuple[str, str, int]],
    num_nonlinear_constraints: int,
    solver_name: str,
    registered_names: Sequence[str],
) -> str:
    """Returns the short description of a model shown by str(model).

    Args:
      sense: The objective sense.
      num_variables: The number of variables.
      constraint_counts: (function type name, set type name, count) triples.
      num_nonlinear_constraints: The number of nonlinear constraints.
      solver_name: The name of the attached optimizer.
      registered_names: The names registered in the model, in any order.

    Returns:
      The description, without trailing newline.
    """
    if sense == enums.ObjectiveSense.MAXIMIZE:
        sense_name = "Maximization"
    elif sense == enums.ObjectiveSense.MINIMIZE:
        sense_name = "Minimization"
    else:
        sense_name = "Feasibility"
    lines = [
        "A MathModel Model",
        f"{sense_name} problem with:",
        f"Variable{_plural(num_variables)}: {num_variables}",
    ]
    for function_type, set_type, count in constraint_counts:
        lines.append(
            f"`{function_type}`-in-`{set_type}`: {count} constraint{_plural(count)}"
        )
    if num_nonlinear_constraints:
        lines.append(
            f"Nonlinear: {num_nonlinear_constraints} constraint"
            f"{_plural(num_nonlinear_constraints)}"
        )
    lines.append(f"Solver name: {solver_name}")
    if registered_names:
        lines.append(
            "Names registered in the model: " + ", ".join(sorted(registered_names))
        )
    return "\n".join(lines)


def render(mode: PrintMode, value: Any) -> str:
    """Returns the representation of value in mode.

    Args:
      mode: The print mode.
      value: A number, a scalar set, or a Printable (variables, expressions,
        constraints, models and nonlinear references).

    Returns:
      The string, without math mode wrapping.

    Raises:
      TypeError: if value cannot be rendered.
    """
    if isinstance(value, (int, float)):
        return format_number(value)
    if isinstance(value, (sets.LessThan, sets.GreaterThan, sets.EqualTo, sets.Interval)):
        return in_set_string(mode, value)
    to_string = getattr(value, "to_string", None)
    if to_string is None:
        raise TypeError(f"cannot render value of type {type(value).__name__!r}")
    return to_string(mode)
