"""Form-builder enums.

Wire values are the camelCase strings used in exported JSON and the
persisted-state blob, so every enum is a :class:`StrEnum`.
"""

from __future__ import annotations

from enum import StrEnum


class Operator(StrEnum):
    """Comparison operators available to conditional rules."""

    EQUALS = "equals"
    NOT_EQUALS = "notEquals"
    CONTAINS = "contains"
    GREATER_THAN = "greaterThan"
    LESS_THAN = "lessThan"
    IS_EMPTY = "isEmpty"
    IS_NOT_EMPTY = "isNotEmpty"


class RuleKind(StrEnum):
    """Config keys that may hold a conditional rule."""

    SHOW_WHEN = "showWhen"
    HIDE_WHEN = "hideWhen"
    DISABLE_WHEN = "disableWhen"


class CrossValidatorType(StrEnum):
    """Cross-field validator kinds."""

    FIELDS_MATCH = "fieldsMatch"
    AT_LEAST_ONE = "atLeastOne"
    CUSTOM = "custom"


class ExportFormat(StrEnum):
    """Code generator targets."""

    JSON = "json"
    TYPESCRIPT = "typescript"


class Layout(StrEnum):
    VERTICAL = "vertical"
    HORIZONTAL = "horizontal"
    GRID = "grid"


class LabelPosition(StrEnum):
    TOP = "top"
    LEFT = "left"
    FLOATING = "floating"


class Size(StrEnum):
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"


class Theme(StrEnum):
    DARK = "dark"
    LIGHT = "light"


class Language(StrEnum):
    TR = "tr"
    EN = "en"


class FieldCategory(StrEnum):
    """Palette categories for the field type catalog."""

    BASIC = "basic"
    SELECTION = "selection"
    ADVANCED = "advanced"
    SPECIAL = "special"


class MoveDirection(StrEnum):
    UP = "up"
    DOWN = "down"
