"""
Calculator tool

Evaluates arithmetic expressions with SymPy's parser. Expressions come from
model output, so they are screened before parsing: only numbers, operators
and a fixed set of function and constant names get through, and the parser
runs against a namespace without Python builtins. Supports scientific
calculator syntax:
- Caret exponentiation: 2^16
- Factorial notation: 5!
- Degree notation: sin(30 degrees)

Every intermediate value is size-checked on an unevaluated parse first, so a
short input like 9^9^9 is rejected instead of expanded into an exact integer.
"""

import logging
import re
from typing import Optional

from pydantic import BaseModel, Field
from sympy import (
    E,
    Add,
    Basic,
    Float,
    Function,
    Integer,
    Mul,
    N,
    Pow,
    Rational,
    Symbol,
    ceiling,
    cos,
    exp,
    factorial,
    floor,
    log,
    pi,
    postorder_traversal,
    sin,
    sqrt,
    tan,
)
from sympy.parsing.sympy_parser import (
    parse_expr,
    standard_transformations,
    implicit_multiplication_application,
    convert_xor,
    factorial_notation,
)

from .registry import ToolName, ToolRegistry

logger = logging.getLogger(__name__)

INVALID_EXPRESSION = "Ungültiger Ausdruck"

TRANSFORMATIONS = (
    standard_transformations
    + (implicit_multiplication_application,)
    + (convert_xor,)  # 2^16 -> 2**16
    + (factorial_notation,)  # 5! -> factorial(5)
)

# Names a user may write; everything else is rejected before parsing
CALCULATOR_NAMES = {
    "sqrt": sqrt,
    "sin": sin,
    "cos": cos,
    "tan": tan,
    "log": log,
    "exp": exp,
    "pi": pi,
    "E": E,
    "factorial": factorial,
    "ceiling": ceiling,
    "floor": floor,
}

# Names the parser's transformations emit
_PARSER_NAMES = {
    "Integer": Integer,
    "Float": Float,
    "Rational": Rational,
    "Symbol": Symbol,
    "Function": Function,
    "Add": Add,
    "Mul": Mul,
    "Pow": Pow,
}

MAX_EXPONENT = 10_000
MAX_MAGNITUDE = Float("1e1000")
MAX_FACTORIAL = 1000

_ALLOWED_CHARS = re.compile(r"^[0-9A-Za-z\s+\-*/^().,!]*$")
_NUMBER = re.compile(r"(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_NAME = re.compile(r"[A-Za-z]+")


class CalculatorParams(BaseModel):
    expression: str = Field(..., description="arithmetic expression, e.g. 25 * 4")


def preprocess_expression(expression: str) -> str:
    """Rewrite "30 degrees" as radians and ceil() as SymPy's ceiling()."""
    degree_pattern = r"(\d+(?:\.\d+)?)\s*(?:degrees?|deg)\b"
    expression = re.sub(degree_pattern, r"(\1 * pi / 180)", expression, flags=re.IGNORECASE)
    expression = re.sub(r"\bceil\b", "ceiling", expression)
    return expression


def screen_expression(expression: str) -> Optional[str]:
    """
    Check an expression against the calculator's allow-list.

    Returns:
        None when the expression may be parsed, otherwise the reason it may not
    """
    if not _ALLOWED_CHARS.match(expression):
        return "unerlaubte Zeichen"

    without_numbers = _NUMBER.sub("0", expression)
    if "." in without_numbers:
        return "unerlaubte Zeichen"

    unknown = sorted(set(_NAME.findall(without_numbers)) - set(CALCULATOR_NAMES))
    if unknown:
        return f"unbekannte Namen {', '.join(unknown)}"
    return None


def _unevaluated_factorial(n, **kwargs):
    return factorial(n, evaluate=False)


def _namespace(evaluate: bool) -> dict:
    names = {"__builtins__": {}, **_PARSER_NAMES, **CALCULATOR_NAMES}
    if not evaluate:
        names["factorial"] = _unevaluated_factorial
    return names


def _parse(expression: str, evaluate: bool):
    return parse_expr(
        expression,
        transformations=TRANSFORMATIONS,
        global_dict=_namespace(evaluate),
        local_dict={},
        evaluate=evaluate,
    )


def _exceeds(expr, limit) -> bool:
    value = abs(N(expr))
    return bool(value.is_finite and value > limit)


def check_size(tree) -> Optional[str]:
    """
    Find values too large to evaluate exactly.

    Walks an unevaluated tree bottom-up, so each node is only measured
    numerically once everything below it has passed. Bounding every
    intermediate value also bounds the arguments of exp, sin and friends.
    """
    for node in postorder_traversal(tree):
        if not isinstance(node, Basic):
            continue
        if isinstance(node, Pow) and _exceeds(node.exp, MAX_EXPONENT):
            return "Zahl zu groß"
        if isinstance(node, factorial) and _exceeds(node.args[0], MAX_FACTORIAL):
            return "Zahl zu groß"
        if _exceeds(node, MAX_MAGNITUDE):
            return "Zahl zu groß"
    return None


def _failure(expression: str, detail: str) -> dict:
    return {
        "success": False,
        "expression": expression,
        "error": f"{INVALID_EXPRESSION}: {detail}",
    }


def calculate(expression: str) -> dict:
    """
    Evaluate an arithmetic expression.

    Args:
        expression: Arithmetic in calculator notation, e.g. "2^10 + 5!"

    Returns:
        Dictionary with ``result`` on success or ``error`` on failure
    """
    if not expression or not expression.strip():
        return _failure(expression, "leerer Ausdruck")

    prepared = preprocess_expression(expression)
    rejection = screen_expression(prepared)
    if rejection:
        return _failure(expression, rejection)

    try:
        rejection = check_size(_parse(prepared, evaluate=False))
        if rejection:
            return _failure(expression, rejection)

        result = complex(N(_parse(prepared, evaluate=True)))
        if result.imag != 0:
            return _failure(expression, "komplexes Ergebnis")
        result = result.real
        if result != result or result in (float("inf"), float("-inf")):
            return _failure(expression, "Ergebnis ist nicht endlich")
        if result.is_integer():
            result = int(result)

        return {"success": True, "expression": expression, "result": result}

    except SyntaxError as e:
        logger.debug(f"Calculator could not parse '{expression}': {e}")
        return _failure(expression, "Syntaxfehler")
    except Exception as e:
        # SymPy raises a mix of TypeError, ValueError and TokenError on bad input
        logger.debug(f"Calculator rejected '{expression}': {e}")
        return _failure(expression, str(e) or type(e).__name__)


async def _handle_calculate(params: CalculatorParams) -> dict:
    return calculate(params.expression)


def _register():
    ToolRegistry.register(
        name=ToolName.CALCULATOR,
        description="Führt mathematische Berechnungen durch.",
        params_model=CalculatorParams,
        handler=_handle_calculate,
    )


_register()
