"""FormCheckService: structural validation of the current form.

Follows the linter pattern: the check reports issues and never modifies
the form. Structural problems are surfaced so the caller can decide what
to do; nothing is auto-corrected.
"""

from __future__ import annotations

import re
from collections import Counter
from typing import Any

from formctl.domain.dependencies import detect_circular_references, format_circular_error
from formctl.domain.field_config import CalculatedConfig, parse_field_config
from formctl.domain.formula import formula_references, validate_formula
from formctl.domain.models import FormDefinition
from formctl.domain.types import CrossValidatorType, RuleKind
from formctl.services.base import BaseService
from formctl.services.result import ServiceResult

SEVERITY_ERROR = "error"
SEVERITY_WARNING = "warning"

CAT_STRUCTURE = "structure"
CAT_CONDITIONS = "conditions"
CAT_CONFIG = "config"
CAT_VALIDATORS = "cross_validators"


def _issue(
    category: str, severity: str, message: str, field_id: str | None = None
) -> dict[str, Any]:
    return {"category": category, "severity": severity, "message": message, "field_id": field_id}


def check_structure(form: FormDefinition) -> list[dict[str, Any]]:
    issues: list[dict[str, Any]] = []
    counts = Counter(f.name for f in form.fields)
    for name, count in counts.items():
        if count > 1:
            issues.append(
                _issue(CAT_STRUCTURE, SEVERITY_ERROR, f"Field name '{name}' is used {count} times")
            )

    for index, f in enumerate(form.fields):
        if f.order != index:
            issues.append(
                _issue(
                    CAT_STRUCTURE,
                    SEVERITY_ERROR,
                    f"Field '{f.name}' has order {f.order} at position {index}",
                    f.id,
                )
            )

    group_ids = {g.id for g in form.groups}
    for f in form.fields:
        if f.group_id is not None and f.group_id not in group_ids:
            issues.append(
                _issue(
                    CAT_STRUCTURE,
                    SEVERITY_WARNING,
                    f"Field '{f.name}' belongs to missing group {f.group_id}",
                    f.id,
                )
            )
    return issues


def check_conditions(form: FormDefinition) -> list[dict[str, Any]]:
    issues: list[dict[str, Any]] = []
    names = {f.name for f in form.fields}

    for f in form.fields:
        for kind in RuleKind:
            raw = f.config.get(kind.value)
            if raw is None:
                continue
            rule = f.rule(kind)
            if rule is None:
                issues.append(
                    _issue(
                        CAT_CONDITIONS,
                        SEVERITY_WARNING,
                        f"Field '{f.name}' has a malformed {kind.value} rule (ignored)",
                        f.id,
                    )
                )
            elif rule.field not in names:
                issues.append(
                    _issue(
                        CAT_CONDITIONS,
                        SEVERITY_WARNING,
                        f"Field '{f.name}' {kind.value} references unknown field '{rule.field}'",
                        f.id,
                    )
                )

    for chain in detect_circular_references(form.fields):
        issues.append(
            _issue(
                CAT_CONDITIONS,
                SEVERITY_ERROR,
                format_circular_error(chain, form.fields),
                chain[0],
            )
        )
    return issues


def check_config(form: FormDefinition) -> list[dict[str, Any]]:
    issues: list[dict[str, Any]] = []
    names = {f.name for f in form.fields}

    for f in form.fields:
        cfg = parse_field_config(f.type, f.config)
        for key in cfg.invalid_keys:
            issues.append(
                _issue(
                    CAT_CONFIG,
                    SEVERITY_WARNING,
                    f"Field '{f.name}' config key '{key}' has an invalid value",
                    f.id,
                )
            )
        if cfg.pattern:
            try:
                re.compile(cfg.pattern)
            except re.error as exc:
                issues.append(
                    _issue(
                        CAT_CONFIG,
                        SEVERITY_ERROR,
                        f"Field '{f.name}' has an invalid pattern: {exc}",
                        f.id,
                    )
                )
        if isinstance(cfg, CalculatedConfig) and cfg.formula.strip():
            error = validate_formula(cfg.formula)
            if error is not None:
                issues.append(
                    _issue(CAT_CONFIG, SEVERITY_ERROR, f"Field '{f.name}': {error}", f.id)
                )
            for ref in formula_references(cfg.formula):
                if ref not in names:
                    issues.append(
                        _issue(
                            CAT_CONFIG,
                            SEVERITY_WARNING,
                            f"Field '{f.name}' formula references unknown field '{ref}'",
                            f.id,
                        )
                    )
    return issues


def check_cross_validators(form: FormDefinition) -> list[dict[str, Any]]:
    issues: list[dict[str, Any]] = []
    names = {f.name for f in form.fields}

    for v in form.cross_validators:
        missing = [n for n in v.fields if n not in names]
        if missing:
            issues.append(
                _issue(
                    CAT_VALIDATORS,
                    SEVERITY_WARNING,
                    f"Validator '{v.name}' references unknown fields: {', '.join(missing)}",
                )
            )
        if v.type is CrossValidatorType.FIELDS_MATCH and len(set(v.fields)) < 2:
            issues.append(
                _issue(
                    CAT_VALIDATORS,
                    SEVERITY_ERROR,
                    f"Validator '{v.name}' needs two distinct fields to compare",
                )
            )
        if v.type is CrossValidatorType.CUSTOM and not (v.custom_expression or "").strip():
            issues.append(
                _issue(
                    CAT_VALIDATORS,
                    SEVERITY_WARNING,
                    f"Custom validator '{v.name}' has no expression",
                )
            )
    return issues


class FormCheckService(BaseService):
    """Reports structural problems in the current form."""

    def check(self, *, min_severity: str = SEVERITY_WARNING) -> ServiceResult:
        """Run every check. Issues below *min_severity* are hidden."""
        form = self._store.form
        issues = [
            *check_structure(form),
            *check_conditions(form),
            *check_config(form),
            *check_cross_validators(form),
        ]
        if min_severity == SEVERITY_ERROR:
            issues = [i for i in issues if i["severity"] == SEVERITY_ERROR]

        return ServiceResult(
            ok=True,
            op="check",
            data={"form_id": form.id, "issues": issues, "count": len(issues)},
        )
