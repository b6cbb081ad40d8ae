"""
Mathematical Expression Solver

Safely evaluates mathematical expressions using SymPy's parser, and exposes
that as a tool the model can call. Supports scientific calculator syntax
including:
- Factorial notation: 5!
- Caret exponentiation: 2^16
- Degree notation: sin(30 degrees)
"""

import json
import logging
import re

from sympy import N
from sympy.parsing.sympy_parser import (
    convert_xor,
    factorial_notation,
    implicit_multiplication_application,
    parse_expr,
    standard_transformations,
)

from ..schemas import JsonSchema, ToolDefinition, ToolResult, new_tool_definition

logger = logging.getLogger(__name__)

TOOL_NAME = "calculate"

TRANSFORMATIONS = (
    standard_transformations
    + (implicit_multiplication_application,)
    + (convert_xor,)  # 2^16 -> 2**16
    + (factorial_notation,)  # 5! -> factorial(5)
)

PARAMETERS = JsonSchema(
    type="object",
    properties={
        "expression": JsonSchema(
            type="string",
            description="math expression like 2+2 or sqrt(16)",
        )
    },
    required=["expression"],
)


def preprocess_expression(expression: str) -> str:
    """Rewrite degree notation and ``ceil`` into SymPy syntax."""
    degree_pattern = r"(\d+(?:\.\d+)?)\s*(?:degrees?|deg)\b"
    expression = re.sub(degree_pattern, r"(\1 * pi / 180)", expression, flags=re.IGNORECASE)
    return re.sub(r"\bceil\b", "ceiling", expression)


def calculate(expression: str) -> dict:
    """
    Safely evaluate a mathematical expression.

    Args:
        expression: Mathematical expression as a string

    Returns:
        Dictionary with ``success``, ``expression``, ``result`` and ``error``
    """
    if not expression or not expression.strip():
        return {
            "success": False,
            "expression": expression,
            "result": None,
            "error": "Expression is empty",
        }

    try:
        expr = parse_expr(
            preprocess_expression(expression),
            transformations=TRANSFORMATIONS,
            evaluate=True,
        )
        result = complex(N(expr))
        if result.imag == 0:
            result = result.real
        if isinstance(result, float) and result.is_integer():
            result = int(result)

        return {
            "success": True,
            "expression": expression,
            "result": result,
            "error": None,
        }
    except SyntaxError as e:
        logger.debug("Syntax error parsing expression '%s': %s", expression, e)
        error = f"Syntax error: {e}"
    except (ValueError, TypeError) as e:
        logger.debug("Value/Type error evaluating '%s': %s", expression, e)
        error = str(e)
    except Exception as e:
        logger.debug("Calculation error for '%s': %s", expression, e)
        error = f"Calculation error: {e}"

    return {
        "success": False,
        "expression": expression,
        "result": None,
        "error": error,
    }


def format_result_for_llm(calc_result: dict) -> str:
    """Render a ``calculate`` result as a ToolResult JSON string."""
    if not calc_result["success"]:
        return ToolResult(error=f"Calculation failed: {calc_result['error']}").to_json()
    return ToolResult(
        result=f"{calc_result['expression']} = {calc_result['result']}"
    ).to_json()


def handle_calculate(arguments: str) -> str:
    """Tool entry point: raw JSON arguments in, ToolResult JSON out."""
    try:
        params = json.loads(arguments) if arguments else {}
    except json.JSONDecodeError:
        params = None

    if not isinstance(params, dict):
        return ToolResult(
            error='Invalid input format. Expected JSON: {"expression": "2+2"}'
        ).to_json()

    return format_result_for_llm(calculate(str(params.get("expression", ""))))


def calculate_tool() -> ToolDefinition:
    """The ``calculate`` tool, ready to put on a payload."""
    return new_tool_definition(
        name=TOOL_NAME,
        fn=handle_calculate,
        description="Perform mathematical calculations",
        parameters=PARAMETERS,
    )
