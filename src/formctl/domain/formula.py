"""Calculated-field formulas.

A formula is arithmetic over field references written as ``{fieldName}``,
e.g. ``"{price} * {quantity} * 1.18"``. Formulas are parsed with
:mod:`ast` and interpreted node by node against a fixed whitelist
(numbers, field references, ``+ - * / // % **``, unary sign, and
parentheses). Names, calls, attributes, subscripts, and every other
construct are rejected, so a formula can never reach ambient scope.
"""

from __future__ import annotations

import ast
import logging
import math
import operator
import re
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from formctl.domain.conditions import to_number
from formctl.domain.field_config import CalculatedConfig, parse_field_config
from formctl.domain.models import FieldDefinition

logger = logging.getLogger(__name__)

_REFERENCE = re.compile(r"\{([^{}]+)\}")
_REF_PREFIX = "__ref_"
_MAX_EXPONENT = 64

_BINARY_OPS: dict[type[ast.operator], Callable[[float, float], float]] = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.FloorDiv: operator.floordiv,
    ast.Mod: operator.mod,
    ast.Pow: operator.pow,
}

_UNARY_OPS: dict[type[ast.unaryop], Callable[[float], float]] = {
    ast.UAdd: operator.pos,
    ast.USub: operator.neg,
}


class FormulaError(ValueError):
    """Raised for formulas outside the supported grammar."""


def formula_references(formula: str) -> list[str]:
    """Field names referenced by *formula*, in first-seen order."""
    seen: dict[str, None] = {}
    for match in _REFERENCE.finditer(formula):
        seen.setdefault(match.group(1).strip(), None)
    return list(seen)


def compile_formula(formula: str) -> tuple[ast.Expression, dict[str, str]]:
    """Parse *formula* into an expression tree plus a placeholder -> field name map."""
    names: dict[str, str] = {}

    def _placeholder(match: re.Match[str]) -> str:
        placeholder = f"{_REF_PREFIX}{len(names)}"
        names[placeholder] = match.group(1).strip()
        return placeholder

    source = _REFERENCE.sub(_placeholder, formula)
    try:
        tree = ast.parse(source.strip(), mode="eval")
    except (SyntaxError, ValueError) as exc:
        msg = f"Invalid formula syntax: {formula!r}"
        raise FormulaError(msg) from exc
    return tree, names


def _interpret(node: ast.AST, refs: Mapping[str, str], values: Mapping[str, Any]) -> float:
    match node:
        case ast.Expression(body=body):
            return _interpret(body, refs, values)
        case ast.Constant(value=value) if isinstance(value, int | float) and not isinstance(
            value, bool
        ):
            return float(value)
        case ast.Name(id=name) if name in refs:
            number = to_number(values.get(refs[name]))
            return 0.0 if math.isnan(number) else number
        case ast.BinOp(left=left, op=op, right=right) if type(op) in _BINARY_OPS:
            lhs = _interpret(left, refs, values)
            rhs = _interpret(right, refs, values)
            if isinstance(op, ast.Pow) and abs(rhs) > _MAX_EXPONENT:
                msg = f"Exponent {rhs} is too large"
                raise FormulaError(msg)
            return _BINARY_OPS[type(op)](lhs, rhs)
        case ast.UnaryOp(op=op, operand=operand) if type(op) in _UNARY_OPS:
            return _UNARY_OPS[type(op)](_interpret(operand, refs, values))
        case _:
            msg = f"Unsupported formula element: {type(node).__name__}"
            raise FormulaError(msg)


def evaluate_formula(formula: str, values: Mapping[str, Any], *, decimals: int = 2) -> float | None:
    """Evaluate *formula* against *values*.

    Missing or non-numeric references count as 0. Any error (bad syntax,
    disallowed construct, division by zero, overflow) yields None.
    """
    if not formula.strip():
        return None
    try:
        tree, refs = compile_formula(formula)
        result = _interpret(tree, refs, values)
    except (FormulaError, ArithmeticError, TypeError, RecursionError) as exc:
        logger.debug("Formula %r failed: %s", formula, exc)
        return None
    if isinstance(result, complex) or math.isnan(result) or math.isinf(result):
        return None
    return round(result, decimals)


def validate_formula(formula: str) -> str | None:
    """Return an error message if *formula* falls outside the grammar, else None."""
    try:
        tree, refs = compile_formula(formula)
        _interpret(tree, refs, {})
    except FormulaError as exc:
        return str(exc)
    except (ArithmeticError, TypeError):
        return None
    return None


def compute_calculated_values(
    fields: Iterable[FieldDefinition], values: Mapping[str, Any]
) -> dict[str, Any]:
    """Return *values* with every calculated field filled in.

    Calculated fields are evaluated in field order, so a formula may use
    the result of a calculated field declared before it.
    """
    result = dict(values)
    for f in fields:
        if f.type != "calculated":
            continue
        config = parse_field_config(f.type, f.config)
        assert isinstance(config, CalculatedConfig)
        result[f.name] = evaluate_formula(config.formula, result, decimals=config.decimals)
    return result
