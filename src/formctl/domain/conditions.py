"""Conditional-logic evaluation.

:func:`evaluate_condition` is a pure decision function over a rule and a
map of runtime values keyed by field name. Comparisons follow the loose
semantics form values have in the browser: ``5`` equals ``"5"``, numeric
operators coerce strings, and anything malformed fails closed (False).

Visibility policy is composed on top in :func:`is_field_visible`:
``hideWhen`` wins over ``showWhen``; ``disableWhen`` is independent.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping
from typing import Any

from formctl.domain.models import ConditionalRule, FieldDefinition, parse_rule
from formctl.domain.types import Operator, RuleKind

logger = logging.getLogger(__name__)


# --- Coercions ---


def _is_number(value: Any) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool)


def to_display_string(value: Any) -> str:
    """String coercion with script semantics (``True`` -> ``"true"``, ``5.0`` -> ``"5"``)."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer():
            return str(int(value))
        return repr(value)
    if isinstance(value, list | tuple):
        return ",".join("" if item is None else to_display_string(item) for item in value)
    if isinstance(value, Mapping):
        return "[object Object]"
    return str(value)


def to_number(value: Any) -> float:
    """Numeric coercion; anything non-numeric becomes NaN.

    Booleans map to 1/0 and blank strings to 0. A missing value (None)
    is NaN so that an unanswered field never satisfies a comparison.
    """
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if _is_number(value):
        return float(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0.0
        try:
            return float(text)
        except ValueError:
            return math.nan
    return math.nan


def _strict_equals(left: Any, right: Any) -> bool:
    if _is_number(left) and _is_number(right):
        return left == right
    if type(left) is not type(right):
        return False
    return bool(left == right)


def _loose_equals(left: Any, right: Any) -> bool:
    return _strict_equals(left, right) or to_display_string(left) == to_display_string(right)


def is_empty_value(value: Any) -> bool:
    return value is None or value == ""


# --- Evaluation ---


def evaluate_condition(
    rule: ConditionalRule | Mapping[str, Any] | None, values: Mapping[str, Any]
) -> bool:
    """Decide whether *rule* holds for *values*.

    Returns False when the rule is missing, lacks a field or operator,
    or uses an operator this evaluator does not know.
    """
    parsed = parse_rule(rule)
    if parsed is None:
        if rule:
            logger.debug("Ignoring malformed conditional rule: %r", rule)
        return False

    field_value = values.get(parsed.field)
    rule_value = parsed.value

    match parsed.operator:
        case Operator.EQUALS:
            return _loose_equals(field_value, rule_value)
        case Operator.NOT_EQUALS:
            return not _strict_equals(field_value, rule_value) and to_display_string(
                field_value
            ) != to_display_string(rule_value)
        case Operator.CONTAINS:
            if isinstance(field_value, str) and isinstance(rule_value, str):
                return rule_value.lower() in field_value.lower()
            return False
        case Operator.GREATER_THAN:
            return to_number(field_value) > to_number(rule_value)
        case Operator.LESS_THAN:
            return to_number(field_value) < to_number(rule_value)
        case Operator.IS_EMPTY:
            return is_empty_value(field_value)
        case Operator.IS_NOT_EMPTY:
            return not is_empty_value(field_value)
        case _:
            logger.debug("Unknown operator %r on rule for %s", parsed.operator, parsed.field)
            return False


def is_field_visible(field: FieldDefinition, values: Mapping[str, Any]) -> bool:
    """Apply the visibility policy: hideWhen wins, then showWhen, else visible."""
    hide = field.rule(RuleKind.HIDE_WHEN)
    if hide is not None and evaluate_condition(hide, values):
        return False
    show = field.rule(RuleKind.SHOW_WHEN)
    if show is not None:
        return evaluate_condition(show, values)
    return True


def is_field_disabled(field: FieldDefinition, values: Mapping[str, Any]) -> bool:
    """True when the field's disableWhen rule holds. Does not affect visibility."""
    rule = field.rule(RuleKind.DISABLE_WHEN)
    return rule is not None and evaluate_condition(rule, values)


def visible_fields(
    fields: Iterable[FieldDefinition], values: Mapping[str, Any]
) -> list[FieldDefinition]:
    """The subset of *fields* visible under *values*, in the given order."""
    return [f for f in fields if is_field_visible(f, values)]


def field_states(
    fields: Iterable[FieldDefinition], values: Mapping[str, Any]
) -> dict[str, dict[str, bool]]:
    """Visibility and disablement per field name, for preview layers."""
    return {
        f.name: {
            "visible": is_field_visible(f, values),
            "disabled": is_field_disabled(f, values),
        }
        for f in fields
    }
