"""FormService: ServiceResult wrappers around the form store.

Each public method performs one store operation, persists the workspace
state when something changed, and reports the outcome as a
:class:`ServiceResult`. Store exceptions become failures through
:func:`~formctl.services.result.failure_from`:

- :class:`~formctl.errors.DuplicateFieldNameError` -> ``DUPLICATE_NAME``
- :class:`~formctl.errors.NotFoundError` -> ``NOT_FOUND``
- pydantic ``ValidationError`` / ``ValueError`` -> ``INVALID_INPUT``
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from formctl.domain.catalog import default_config, get_field_type, get_template
from formctl.domain.conditions import field_states
from formctl.domain.dependencies import can_safely_delete, would_create_circle
from formctl.domain.formula import compute_calculated_values
from formctl.domain.models import FieldDefinition, FieldGroup, parse_rule
from formctl.domain.types import MoveDirection, RuleKind
from formctl.domain.validation import evaluate_cross_validators, validate_fields
from formctl.errors import FormctlError, NotFoundError
from formctl.services.base import BaseService
from formctl.services.result import ErrorCode, ServiceResult, failure, failure_from


def field_data(f: FieldDefinition) -> dict[str, Any]:
    return {
        "id": f.id,
        "name": f.name,
        "type": f.type,
        "label": f.label,
        "group_id": f.group_id,
        "order": f.order,
        "config": f.config,
    }


def group_data(g: FieldGroup) -> dict[str, Any]:
    return {"id": g.id, "name": g.name, "label": g.label, "order": g.order}


class FormService(BaseService):
    """Form, field, group, and validator operations for the CLI."""

    # ------------------------------------------------------------------
    # Lookup helpers
    # ------------------------------------------------------------------

    def _resolve_field(self, ref: str) -> FieldDefinition:
        """Find a field by id, then by name."""
        form = self._store.form
        found = form.field_by_id(ref) or form.field_by_name(ref)
        if found is None:
            raise NotFoundError("field", ref)
        return found

    def _resolve_group(self, ref: str) -> FieldGroup:
        form = self._store.form
        found = form.group_by_id(ref) or next((g for g in form.groups if g.name == ref), None)
        if found is None:
            raise NotFoundError("group", ref)
        return found

    # ------------------------------------------------------------------
    # Forms
    # ------------------------------------------------------------------

    def _discard_warnings(self) -> list[str]:
        """Warn before replacing a current form that has unsaved edits."""
        store = self._store
        if store.is_saved or not (store.fields or store.groups or store.cross_validators):
            return []
        return [f"Unsaved changes to '{store.form.name}' were discarded"]

    def new_form(self, name: str | None = None, description: str | None = None) -> ServiceResult:
        store = self._store
        warnings = self._discard_warnings()
        form = store.new_form()
        if name is not None or description is not None:
            form = store.update_form_meta(name or form.name, description)
        self._persist()
        return ServiceResult(
            ok=True, op="new_form", data={"id": form.id, "name": form.name}, warnings=warnings
        )

    def show(self) -> ServiceResult:
        form = self._store.form
        return ServiceResult(
            ok=True,
            op="show_form",
            data={
                "id": form.id,
                "name": form.name,
                "description": form.description,
                "fields": [field_data(f) for f in form.fields],
                "groups": [group_data(g) for g in form.groups],
                "cross_validators": [
                    {"id": v.id, "name": v.name, "type": v.type.value, "fields": v.fields}
                    for v in form.cross_validators
                ],
                "updated_at": form.updated_at.isoformat(),
                "saved": self._store.is_saved,
            },
        )

    def rename(self, name: str, description: str | None = None) -> ServiceResult:
        form = self._store.update_form_meta(name, description)
        self._persist()
        return ServiceResult(ok=True, op="rename_form", data={"id": form.id, "name": form.name})

    def save(self) -> ServiceResult:
        record = self._store.save_form()
        self._workspace.persist()
        return ServiceResult(
            ok=True,
            op="save_form",
            data={"id": record.id, "name": record.name, "saved_at": record.saved_at.isoformat()},
        )

    def load(self, form_id: str) -> ServiceResult:
        warnings = self._discard_warnings()
        form = self._store.load_form(form_id)
        if form is None:
            return failure("load_form", ErrorCode.NOT_FOUND, f"Saved form '{form_id}' not found")
        self._workspace.persist()
        return ServiceResult(
            ok=True, op="load_form", data={"id": form.id, "name": form.name}, warnings=warnings
        )

    def list_forms(self) -> ServiceResult:
        current = self._store.form.id
        items = [
            {
                "id": s.id,
                "name": s.name,
                "fields": len(s.data.fields),
                "saved_at": s.saved_at.isoformat(),
                "current": s.id == current,
            }
            for s in self._store.saved_forms
        ]
        return ServiceResult(ok=True, op="list_forms", data={"items": items, "count": len(items)})

    def delete(self, form_id: str) -> ServiceResult:
        if not self._store.delete_form(form_id):
            return failure("delete_form", ErrorCode.NOT_FOUND, f"Saved form '{form_id}' not found")
        self._workspace.persist()
        return ServiceResult(ok=True, op="delete_form", data={"id": form_id})

    def import_json(self, text: str) -> ServiceResult:
        if not self._store.import_from_json(text):
            return failure(
                "import_form",
                ErrorCode.INVALID_JSON,
                "Input is neither a field array nor a form definition",
            )
        self._persist()
        form = self._store.form
        return ServiceResult(
            ok=True,
            op="import_form",
            data={"id": form.id, "name": form.name, "fields": len(form.fields)},
        )

    def apply_template(self, template_id: str) -> ServiceResult:
        """Start a new form populated from a built-in template."""
        template = get_template(template_id)
        if template is None:
            msg = f"Template '{template_id}' not found"
            return failure("apply_template", ErrorCode.NOT_FOUND, msg)
        store = self._store
        warnings = self._discard_warnings()
        store.new_form()
        store.update_form_meta(template.name, "")
        for draft in template.fields:
            store.add_field(draft)
        self._persist()
        form = store.form
        return ServiceResult(
            ok=True,
            op="apply_template",
            data={"id": form.id, "name": form.name, "fields": len(form.fields)},
            warnings=warnings,
        )

    # ------------------------------------------------------------------
    # Settings and preferences
    # ------------------------------------------------------------------

    def update_settings(self, patch: Mapping[str, Any]) -> ServiceResult:
        """Apply form-wide settings (camelCase or snake_case keys)."""
        op = "update_settings"
        if not patch:
            return failure(op, ErrorCode.INVALID_INPUT, "No settings given")
        try:
            settings = self._store.update_settings(patch)
        except ValueError as exc:
            return failure_from(op, exc)
        self._persist()
        return ServiceResult(ok=True, op=op, data=settings.model_dump(mode="json", by_alias=True))

    def clear_fields(self) -> ServiceResult:
        """Drop every field, group, and validator. Undoable."""
        form = self._store.form
        counts = {
            "fields": len(form.fields),
            "groups": len(form.groups),
            "validators": len(form.cross_validators),
        }
        self._store.clear_all_fields()
        self._persist()
        return ServiceResult(ok=True, op="clear_fields", data=counts)

    def set_preferences(
        self, *, theme: str | None = None, language: str | None = None
    ) -> ServiceResult:
        """Set theme and UI language; with neither given, report the current ones."""
        store = self._store
        try:
            if theme is not None:
                store.set_theme(theme)
            if language is not None:
                store.set_language(language)
        except ValueError as exc:
            return failure_from("preferences", exc)
        if theme is not None or language is not None:
            self._workspace.persist()
        return ServiceResult(
            ok=True,
            op="preferences",
            data={"theme": store.theme.value, "language": store.language.value},
        )

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def _history_result(self, op: str, moved: bool, empty_msg: str) -> ServiceResult:
        store = self._store
        if not moved:
            return failure(op, ErrorCode.INVALID_INPUT, empty_msg)
        self._persist()
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "fields": len(store.fields),
                "undo_depth": store.history.undo_depth,
                "redo_depth": store.history.redo_depth,
            },
        )

    def undo(self) -> ServiceResult:
        return self._history_result("undo", self._store.undo(), "Nothing to undo")

    def redo(self) -> ServiceResult:
        return self._history_result("redo", self._store.redo(), "Nothing to redo")

    # ------------------------------------------------------------------
    # Fields
    # ------------------------------------------------------------------

    def add_field(
        self,
        field_type: str,
        name: str,
        *,
        label: str = "",
        group: str | None = None,
        config: Mapping[str, Any] | None = None,
    ) -> ServiceResult:
        """Add a field starting from the type's default config."""
        op = "add_field"
        warnings: list[str] = []
        if get_field_type(field_type) is None:
            warnings.append(
                f"Unknown field type '{field_type}'; generated code will use StringField"
            )
        merged = default_config(field_type)
        merged.update(config or {})
        try:
            group_id = self._resolve_group(group).id if group else None
            f = self._store.add_field(
                {"type": field_type, "name": name, "label": label, "config": merged}, group_id
            )
        except (FormctlError, ValueError) as exc:
            return failure_from(op, exc)
        self._persist()
        return ServiceResult(ok=True, op=op, data=field_data(f), warnings=warnings)

    def remove_field(self, ref: str, *, force: bool = False) -> ServiceResult:
        """Remove a field unless other fields' rules still reference it (see *force*)."""
        op = "remove_field"
        try:
            f = self._resolve_field(ref)
        except NotFoundError as exc:
            return failure_from(op, exc)

        store = self._store
        check = can_safely_delete(f.id, store.fields)
        warnings: list[str] = []
        if not check.safe:
            names = [d.name for d in store.fields if d.id in check.dependents]
            if not force:
                return failure(
                    op,
                    ErrorCode.INVALID_INPUT,
                    f"Field '{f.name}' is referenced by: {', '.join(names)}",
                    dependents=check.dependents,
                )
            warnings.append(f"Rules on {', '.join(names)} now reference a missing field")
        store.remove_field(f.id)
        self._persist()
        return ServiceResult(
            ok=True, op=op, data={"id": f.id, "name": f.name}, warnings=warnings
        )

    def update_field(
        self,
        ref: str,
        *,
        name: str | None = None,
        label: str | None = None,
        config: Mapping[str, Any] | None = None,
    ) -> ServiceResult:
        """Rename/relabel a field and set config keys (None removes a key)."""
        op = "update_field"
        store = self._store
        try:
            f = self._resolve_field(ref)
            patch = {k: v for k, v in (("name", name), ("label", label)) if v is not None}
            if patch:
                store.update_field(f.id, patch)
            for key, value in (config or {}).items():
                store.update_field_config(f.id, key, value)
        except (FormctlError, ValueError) as exc:
            return failure_from(op, exc)
        self._persist()
        updated = store.form.field_by_id(f.id)
        assert updated is not None
        return ServiceResult(ok=True, op=op, data=field_data(updated))

    def set_rule(self, ref: str, kind: RuleKind, rule: Mapping[str, Any] | None) -> ServiceResult:
        """Attach (or with None, clear) a conditional rule, refusing cycles."""
        op = "set_rule"
        store = self._store
        try:
            f = self._resolve_field(ref)
        except NotFoundError as exc:
            return failure_from(op, exc)

        if rule is not None:
            parsed = parse_rule(rule)
            if parsed is None:
                return failure(op, ErrorCode.INVALID_INPUT, f"Malformed rule: {dict(rule)}")
            target = store.form.field_by_name(parsed.field)
            if target is None:
                return failure(op, ErrorCode.NOT_FOUND, f"Field '{parsed.field}' not found")
            if would_create_circle(f.id, target.id, store.fields):
                return failure(
                    op,
                    ErrorCode.CIRCULAR_REFERENCE,
                    f"A rule on '{f.name}' referencing '{target.name}' would create a cycle",
                    field_id=f.id,
                    target_id=target.id,
                )
            value: Any = parsed.model_dump(mode="json")
        else:
            value = None

        updated = store.update_field_config(f.id, kind.value, value)
        assert updated is not None
        self._persist()
        return ServiceResult(ok=True, op=op, data=field_data(updated))

    def duplicate_field(self, ref: str) -> ServiceResult:
        """Append a copy of the field to its group, named ``<name>_copy``."""
        op = "duplicate_field"
        try:
            f = self._resolve_field(ref)
        except NotFoundError as exc:
            return failure_from(op, exc)
        duplicate = self._store.duplicate_field(f.id)
        assert duplicate is not None
        self._persist()
        return ServiceResult(ok=True, op=op, data=field_data(duplicate))

    def copy_field(self, ref: str, *, cut: bool = False) -> ServiceResult:
        """Put a field on the clipboard; with *cut*, also remove it."""
        op = "cut_field" if cut else "copy_field"
        try:
            f = self._resolve_field(ref)
        except NotFoundError as exc:
            return failure_from(op, exc)
        warnings: list[str] = []
        if cut:
            check = can_safely_delete(f.id, self._store.fields)
            if not check.safe:
                names = [d.name for d in self._store.fields if d.id in check.dependents]
                warnings.append(f"Rules on {', '.join(names)} now reference a missing field")
            self._store.cut_field(f.id)
        else:
            self._store.copy_field(f.id)
        self._persist()
        return ServiceResult(
            ok=True, op=op, data={"id": f.id, "name": f.name}, warnings=warnings
        )

    def paste_field(self, group: str | None = None) -> ServiceResult:
        """Add the clipboard field as a new field (``<name>_paste``, numbered if taken)."""
        op = "paste_field"
        store = self._store
        if not store.has_clipboard:
            return failure(op, ErrorCode.NOT_FOUND, "Clipboard is empty")
        try:
            group_id = self._resolve_group(group).id if group else None
            pasted = store.paste_field(group_id)
        except NotFoundError as exc:
            return failure_from(op, exc)
        assert pasted is not None
        self._persist()
        return ServiceResult(ok=True, op=op, data=field_data(pasted))

    def move_field(
        self,
        ref: str,
        *,
        direction: MoveDirection | None = None,
        to_index: int | None = None,
        group: str | None = None,
        ungroup: bool = False,
    ) -> ServiceResult:
        """Reorder a field (by step or to an index) and/or change its group."""
        op = "move_field"
        store = self._store
        try:
            f = self._resolve_field(ref)
            if group is not None or ungroup:
                group_id = None if ungroup else self._resolve_group(group or "").id
                store.move_field_to_group(f.id, group_id)
        except NotFoundError as exc:
            return failure_from(op, exc)

        moved = True
        if direction is not None:
            moved = store.move_field(f.id, direction)
        elif to_index is not None:
            current = next(i for i, x in enumerate(store.fields) if x.id == f.id)
            moved = store.reorder_fields(current, to_index)

        warnings = [] if moved else [f"Field '{f.name}' is already at the boundary"]
        self._persist()
        updated = store.form.field_by_id(f.id)
        assert updated is not None
        return ServiceResult(ok=True, op=op, data=field_data(updated), warnings=warnings)

    def list_fields(self) -> ServiceResult:
        buckets = []
        for bucket in self._store.grouped_fields():
            buckets.append(
                {
                    "group": group_data(bucket.group) if bucket.group else None,
                    "fields": [field_data(f) for f in bucket.fields],
                }
            )
        count = len(self._store.fields)
        return ServiceResult(ok=True, op="list_fields", data={"buckets": buckets, "count": count})

    # ------------------------------------------------------------------
    # Groups and validators
    # ------------------------------------------------------------------

    def add_group(
        self, name: str, label: str = "", description: str | None = None
    ) -> ServiceResult:
        g = self._store.add_group(name, label or name, description)
        self._persist()
        return ServiceResult(ok=True, op="add_group", data=group_data(g))

    def update_group(self, ref: str, patch: Mapping[str, Any]) -> ServiceResult:
        op = "update_group"
        if not patch:
            return failure(op, ErrorCode.INVALID_INPUT, "Nothing to change")
        try:
            g = self._resolve_group(ref)
            updated = self._store.update_group(g.id, patch)
        except (NotFoundError, ValueError) as exc:
            return failure_from(op, exc)
        assert updated is not None
        self._persist()
        return ServiceResult(ok=True, op=op, data=group_data(updated))

    def remove_group(self, ref: str) -> ServiceResult:
        try:
            g = self._resolve_group(ref)
        except NotFoundError as exc:
            return failure_from("remove_group", exc)
        detached = [f.name for f in self._store.fields if f.group_id == g.id]
        self._store.remove_group(g.id)
        self._persist()
        return ServiceResult(
            ok=True, op="remove_group", data={"id": g.id, "name": g.name, "detached": detached}
        )

    def add_validator(
        self,
        name: str,
        validator_type: str,
        fields: list[str],
        *,
        message: str | Mapping[str, str] = "",
        expression: str | None = None,
    ) -> ServiceResult:
        op = "add_validator"
        warnings: list[str] = []
        known = {f.name for f in self._store.fields}
        missing = [n for n in fields if n not in known]
        if missing:
            warnings.append(f"Unknown fields: {', '.join(missing)}")
        try:
            v = self._store.add_cross_validator(
                {
                    "name": name,
                    "type": validator_type,
                    "fields": fields,
                    "message": message,
                    "customExpression": expression,
                }
            )
        except ValueError as exc:
            return failure_from(op, exc)
        self._persist()
        return ServiceResult(
            ok=True,
            op=op,
            data={"id": v.id, "name": v.name, "type": v.type.value, "fields": v.fields},
            warnings=warnings,
        )

    def update_validator(self, ref: str, patch: Mapping[str, Any]) -> ServiceResult:
        """Patch a validator's name, fields, message, or expression."""
        op = "update_validator"
        if not patch:
            return failure(op, ErrorCode.INVALID_INPUT, "Nothing to change")
        form = self._store.form
        v = form.validator_by_id(ref) or next(
            (x for x in form.cross_validators if x.name == ref), None
        )
        if v is None:
            return failure(op, ErrorCode.NOT_FOUND, f"Validator '{ref}' not found")
        warnings: list[str] = []
        known = {f.name for f in self._store.fields}
        missing = [n for n in patch.get("fields", []) if n not in known]
        if missing:
            warnings.append(f"Unknown fields: {', '.join(missing)}")
        try:
            updated = self._store.update_cross_validator(v.id, patch)
        except ValueError as exc:
            return failure_from(op, exc)
        assert updated is not None
        self._persist()
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "id": updated.id,
                "name": updated.name,
                "type": updated.type.value,
                "fields": updated.fields,
            },
            warnings=warnings,
        )

    def remove_validator(self, ref: str) -> ServiceResult:
        form = self._store.form
        v = form.validator_by_id(ref) or next(
            (x for x in form.cross_validators if x.name == ref), None
        )
        if v is None:
            return failure("remove_validator", ErrorCode.NOT_FOUND, f"Validator '{ref}' not found")
        self._store.remove_cross_validator(v.id)
        self._persist()
        return ServiceResult(ok=True, op="remove_validator", data={"id": v.id, "name": v.name})

    # ------------------------------------------------------------------
    # Preview
    # ------------------------------------------------------------------

    def preview(self, values: Mapping[str, Any]) -> ServiceResult:
        """Evaluate formulas, conditional rules, and validation against *values*.

        Hidden fields are not validated. Calculated fields take their
        computed value.
        """
        store = self._store
        fields = store.fields
        computed = compute_calculated_values(fields, values)
        states = field_states(fields, computed)
        visible = [f for f in fields if states[f.name]["visible"]]
        errors = validate_fields(visible, computed, store.language)
        cross_errors, skipped = evaluate_cross_validators(
            store.cross_validators, computed, store.language
        )
        warnings = [f"Custom validator '{name}' was not evaluated" for name in skipped]
        return ServiceResult(
            ok=True,
            op="preview",
            data={
                "values": computed,
                "fields": states,
                "visible": [f.name for f in visible],
                "errors": errors,
                "cross_errors": cross_errors,
                "valid": not errors and not cross_errors,
            },
            warnings=warnings,
        )
