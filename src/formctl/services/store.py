"""FormStore: single owner of the live form definition.

Every structural mutation follows the same sequence:

1. validate the request (unknown ids are a silent no-op, duplicate names
   raise :class:`~formctl.errors.DuplicateFieldNameError`);
2. build the replacement definition (models are frozen, so the previous
   definition is never touched);
3. push a snapshot of the pre-mutation state into history, which clears
   the redo stack;
4. swap in the replacement, bump ``updated_at``, and publish
   ``post_mutation``.

A request rejected in step 1 pushes nothing. ``update_form_meta`` skips
step 3; undo, redo, and form replacement (new/load) skip it too.

INVARIANT: field names are unique, and field ``order`` values are dense,
zero-based, and equal to list position after every operation.
"""

from __future__ import annotations

import copy
import json
from collections.abc import Iterable, Mapping, Sequence
from typing import TYPE_CHECKING, Any, NamedTuple

import structlog
from pydantic import BaseModel, ValidationError

from formctl.domain.ids import generate_id
from formctl.domain.models import (
    CrossValidatorDef,
    EditorSession,
    FieldDefinition,
    FieldDraft,
    FieldGroup,
    FormDefinition,
    FormSettings,
    PersistedState,
    SavedForm,
    create_empty_form,
    utc_now,
)
from formctl.domain.types import Language, MoveDirection, Theme
from formctl.errors import DuplicateFieldNameError
from formctl.infrastructure.clipboard import ClipboardManager
from formctl.infrastructure.history import DEFAULT_MAX_ENTRIES, HistoryManager, restore_snapshot

if TYPE_CHECKING:
    from formctl.plugins.manager import PluginManager

log = structlog.get_logger("formctl.store")

COPY_SUFFIX = "_copy"
COPY_LABEL_SUFFIX = " (Copy)"


class FieldBucket(NamedTuple):
    """Fields of one group (``group`` is None for ungrouped fields)."""

    group: FieldGroup | None
    fields: list[FieldDefinition]


# --- Patch helpers ---


def _normalize_patch(
    model: type[BaseModel], patch: Mapping[str, Any], *, protected: Iterable[str] = ("id",)
) -> dict[str, Any]:
    """Map wire aliases to attribute names and drop protected keys.

    Raises ValueError for a key *model* does not define.
    """
    by_alias = {info.alias: name for name, info in model.model_fields.items() if info.alias}
    skip = set(protected)
    normalized: dict[str, Any] = {}
    for key, value in patch.items():
        name = by_alias.get(key, key)
        if name not in model.model_fields:
            msg = f"{model.__name__} has no attribute {key!r}"
            raise ValueError(msg)
        if name not in skip:
            normalized[name] = value
    return normalized


def _patched[M: BaseModel](entity: M, patch: Mapping[str, Any], **kwargs: Any) -> M:
    """Return a validated copy of *entity* with *patch* applied."""
    data = entity.model_dump()
    data.update(_normalize_patch(type(entity), patch, **kwargs))
    return type(entity).model_validate(data)


def _renumber[T: (FieldDefinition, FieldGroup)](items: Sequence[T]) -> list[T]:
    return [
        item if item.order == i else item.model_copy(update={"order": i})
        for i, item in enumerate(items)
    ]


def _sorted_by_order[T: (FieldDefinition, FieldGroup)](items: Sequence[T]) -> list[T]:
    """Stable sort by ``order``, ties broken by list position."""
    return [item for _, item in sorted(enumerate(items), key=lambda pair: (pair[1].order, pair[0]))]


def _has_duplicate_names(fields: Iterable[FieldDefinition | FieldDraft]) -> bool:
    names = [f.name for f in fields]
    return len(names) != len(set(names))


class FormStore:
    """Owns one live :class:`FormDefinition` plus its history, clipboard, and saved forms.

    Parameters:
        form: Initial definition (an empty form when omitted).
        saved_forms: Previously saved forms.
        theme, language: Editor preferences carried in the persisted state.
        max_history: Bound on each of the undo and redo stacks.
        plugins: Receives ``post_mutation`` and ``post_save`` notifications.
    """

    def __init__(
        self,
        form: FormDefinition | None = None,
        *,
        saved_forms: Iterable[SavedForm] = (),
        theme: Theme = Theme.DARK,
        language: Language = Language.TR,
        max_history: int = DEFAULT_MAX_ENTRIES,
        plugins: PluginManager | None = None,
    ) -> None:
        self._form = form if form is not None else create_empty_form()
        self._saved: list[SavedForm] = list(saved_forms)
        self.theme = Theme(theme)
        self.language = Language(language)
        self._history = HistoryManager(max_history)
        self._clipboard = ClipboardManager()
        self._plugins = plugins
        self._selected_field_id: str | None = None
        self._selected_group_id: str | None = None

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def form(self) -> FormDefinition:
        return self._form

    @property
    def fields(self) -> list[FieldDefinition]:
        return list(self._form.fields)

    @property
    def groups(self) -> list[FieldGroup]:
        return list(self._form.groups)

    @property
    def settings(self) -> FormSettings:
        return self._form.settings

    @property
    def cross_validators(self) -> list[CrossValidatorDef]:
        return list(self._form.cross_validators)

    @property
    def saved_forms(self) -> list[SavedForm]:
        return list(self._saved)

    @property
    def is_saved(self) -> bool:
        """True when the saved-forms list holds exactly the current definition."""
        return any(s.id == self._form.id and s.data == self._form for s in self._saved)

    @property
    def history(self) -> HistoryManager:
        return self._history

    @property
    def can_undo(self) -> bool:
        return self._history.can_undo

    @property
    def can_redo(self) -> bool:
        return self._history.can_redo

    @property
    def has_clipboard(self) -> bool:
        return self._clipboard.has_entry

    @property
    def clipboard(self) -> ClipboardManager:
        return self._clipboard

    @property
    def selected_field_id(self) -> str | None:
        return self._selected_field_id

    @property
    def selected_group_id(self) -> str | None:
        return self._selected_group_id

    @property
    def selected_field(self) -> FieldDefinition | None:
        if self._selected_field_id is None:
            return None
        return self._form.field_by_id(self._selected_field_id)

    @property
    def selected_group(self) -> FieldGroup | None:
        if self._selected_group_id is None:
            return None
        return self._form.group_by_id(self._selected_group_id)

    def grouped_fields(self) -> list[FieldBucket]:
        """Fields bucketed for display.

        The ungrouped bucket comes first (omitted when empty), then one
        bucket per group in group order. Fields pointing at a group that
        no longer exists count as ungrouped.
        """
        known = {g.id for g in self._form.groups}
        fields = _sorted_by_order(self._form.fields)
        buckets: list[FieldBucket] = []

        ungrouped = [f for f in fields if f.group_id is None or f.group_id not in known]
        if ungrouped:
            buckets.append(FieldBucket(None, ungrouped))
        for group in _sorted_by_order(self._form.groups):
            buckets.append(FieldBucket(group, [f for f in fields if f.group_id == group.id]))
        return buckets

    # ------------------------------------------------------------------
    # Commit plumbing
    # ------------------------------------------------------------------

    def _commit(
        self,
        op: str,
        form: FormDefinition,
        entity_id: str | None = None,
        *,
        snapshot: bool = True,
    ) -> None:
        if snapshot:
            self._history.snapshot(self._form)
        self._form = form.model_copy(update={"updated_at": utc_now()})
        self._publish(op, entity_id)

    def _publish(self, op: str, entity_id: str | None) -> None:
        log.debug("form_mutation", op=op, form_id=self._form.id, entity_id=entity_id)
        if self._plugins is not None:
            self._plugins.dispatch(
                "post_mutation", op=op, form_id=self._form.id, entity_id=entity_id
            )

    def _replace_fields(self, fields: Sequence[FieldDefinition], **extra: Any) -> FormDefinition:
        return self._form.model_copy(update={"fields": list(fields), **extra})

    def _require_unique_name(self, name: str, *, ignore_id: str | None = None) -> None:
        existing = self._form.field_by_name(name)
        if existing is not None and existing.id != ignore_id:
            raise DuplicateFieldNameError(name)

    def _unique_name(self, base: str) -> str:
        """*base*, or *base* with the first free ``_N`` suffix (N >= 2)."""
        if self._form.field_by_name(base) is None:
            return base
        n = 2
        while self._form.field_by_name(f"{base}_{n}") is not None:
            n += 1
        return f"{base}_{n}"

    # ------------------------------------------------------------------
    # Fields
    # ------------------------------------------------------------------

    def add_field(
        self, partial: FieldDraft | Mapping[str, Any], group_id: str | None = None
    ) -> FieldDefinition:
        """Append a new field and select it.

        *group_id*, when given, overrides the draft's own group. Raises
        DuplicateFieldNameError if the name is taken; pydantic's
        ValidationError if *partial* is not a valid draft.
        """
        draft = partial if isinstance(partial, FieldDraft) else FieldDraft.model_validate(partial)
        self._require_unique_name(draft.name)

        field = FieldDefinition(
            type=draft.type,
            name=draft.name,
            label=draft.label,
            config=copy.deepcopy(draft.config),
            group_id=group_id if group_id is not None else draft.group_id,
            order=len(self._form.fields),
        )
        self._commit("add_field", self._replace_fields([*self._form.fields, field]), field.id)
        self.select_field(field.id)
        return field

    def update_field(self, field_id: str, patch: Mapping[str, Any]) -> FieldDefinition | None:
        """Merge *patch* into a field. ``id`` and ``order`` are not patchable.

        Renames are checked for uniqueness.
        """
        current = self._form.field_by_id(field_id)
        if current is None:
            return None
        updated = _patched(current, patch, protected=("id", "order"))
        if updated.name != current.name:
            self._require_unique_name(updated.name, ignore_id=field_id)

        fields = [updated if f.id == field_id else f for f in self._form.fields]
        self._commit("update_field", self._replace_fields(fields), field_id)
        return updated

    def update_field_config(self, field_id: str, key: str, value: Any) -> FieldDefinition | None:
        """Set one config key. A None *value* removes the key."""
        current = self._form.field_by_id(field_id)
        if current is None:
            return None
        config = copy.deepcopy(current.config)
        if value is None:
            config.pop(key, None)
        else:
            config[key] = copy.deepcopy(value)
        updated = current.model_copy(update={"config": config})

        fields = [updated if f.id == field_id else f for f in self._form.fields]
        self._commit("update_field_config", self._replace_fields(fields), field_id)
        return updated

    def remove_field(self, field_id: str) -> bool:
        if self._form.field_by_id(field_id) is None:
            return False
        fields = _renumber([f for f in self._form.fields if f.id != field_id])
        self._commit("remove_field", self._replace_fields(fields), field_id)
        if self._selected_field_id == field_id:
            self._selected_field_id = None
        return True

    def duplicate_field(self, field_id: str) -> FieldDefinition | None:
        """Add a copy of a field to the same group (name ``<name>_copy``)."""
        source = self._form.field_by_id(field_id)
        if source is None:
            return None
        draft = source.to_draft().model_copy(
            update={
                "name": self._unique_name(source.name + COPY_SUFFIX),
                "label": source.label + COPY_LABEL_SUFFIX,
            }
        )
        return self.add_field(draft, source.group_id)

    def move_field(self, field_id: str, direction: MoveDirection | str) -> bool:
        """Swap a field with its neighbour. Out of bounds or unknown id: no-op."""
        fields = list(self._form.fields)
        index = next((i for i, f in enumerate(fields) if f.id == field_id), -1)
        if index == -1:
            return False
        target = index - 1 if MoveDirection(direction) is MoveDirection.UP else index + 1
        if not 0 <= target < len(fields):
            return False

        moving, other = fields[index], fields[target]
        fields[index] = moving.model_copy(update={"order": other.order})
        fields[target] = other.model_copy(update={"order": moving.order})
        fields = _renumber(_sorted_by_order(fields))
        self._commit("move_field", self._replace_fields(fields), field_id)
        return True

    def reorder_fields(self, from_index: int, to_index: int) -> bool:
        """Move the field at *from_index* to *to_index*, then renumber.

        *to_index* is clamped to the list; an out-of-range *from_index*
        is a no-op.
        """
        fields = list(self._form.fields)
        if not 0 <= from_index < len(fields):
            return False
        moved = fields.pop(from_index)
        fields.insert(max(0, min(to_index, len(fields))), moved)
        self._commit("reorder_fields", self._replace_fields(_renumber(fields)), moved.id)
        return True

    def select_field(self, field_id: str | None) -> None:
        """Select a field (clears the group selection)."""
        self._selected_field_id = field_id
        self._selected_group_id = None

    # ------------------------------------------------------------------
    # Clipboard
    # ------------------------------------------------------------------

    def copy_field(self, field_id: str) -> bool:
        field = self._form.field_by_id(field_id)
        if field is None:
            return False
        self._clipboard.copy(field)
        return True

    def cut_field(self, field_id: str) -> bool:
        return self.copy_field(field_id) and self.remove_field(field_id)

    def paste_field(self, group_id: str | None = None) -> FieldDefinition | None:
        """Add a new field built from the clipboard entry (name ``<name>_paste``)."""
        draft = self._clipboard.paste(group_id)
        if draft is None:
            return None
        draft = draft.model_copy(update={"name": self._unique_name(draft.name)})
        return self.add_field(draft, group_id)

    # ------------------------------------------------------------------
    # Groups
    # ------------------------------------------------------------------

    def add_group(self, name: str, label: str = "", description: str | None = None) -> FieldGroup:
        group = FieldGroup(
            name=name,
            label=label,
            description=description,
            collapsible=True,
            collapsed=False,
            order=len(self._form.groups),
        )
        form = self._form.model_copy(update={"groups": [*self._form.groups, group]})
        self._commit("add_group", form, group.id)
        self.select_group(group.id)
        return group

    def update_group(self, group_id: str, patch: Mapping[str, Any]) -> FieldGroup | None:
        current = self._form.group_by_id(group_id)
        if current is None:
            return None
        updated = _patched(current, patch, protected=("id", "order"))
        groups = [updated if g.id == group_id else g for g in self._form.groups]
        self._commit("update_group", self._form.model_copy(update={"groups": groups}), group_id)
        return updated

    def remove_group(self, group_id: str) -> bool:
        """Delete a group. Its fields become ungrouped; none are deleted."""
        if self._form.group_by_id(group_id) is None:
            return False
        groups = _renumber([g for g in self._form.groups if g.id != group_id])
        fields = [
            f.model_copy(update={"group_id": None}) if f.group_id == group_id else f
            for f in self._form.fields
        ]
        self._commit("remove_group", self._replace_fields(fields, groups=groups), group_id)
        if self._selected_group_id == group_id:
            self._selected_group_id = None
        return True

    def select_group(self, group_id: str | None) -> None:
        """Select a group (clears the field selection)."""
        self._selected_group_id = group_id
        self._selected_field_id = None

    def move_field_to_group(self, field_id: str, group_id: str | None) -> FieldDefinition | None:
        """Assign a field to a group, or ungroup it with None."""
        current = self._form.field_by_id(field_id)
        if current is None:
            return None
        if group_id is not None and self._form.group_by_id(group_id) is None:
            return None
        updated = current.model_copy(update={"group_id": group_id})
        fields = [updated if f.id == field_id else f for f in self._form.fields]
        self._commit("move_field_to_group", self._replace_fields(fields), field_id)
        return updated

    # ------------------------------------------------------------------
    # Cross validators
    # ------------------------------------------------------------------

    def add_cross_validator(
        self, validator: CrossValidatorDef | Mapping[str, Any]
    ) -> CrossValidatorDef:
        """Append a validator under a fresh id."""
        if isinstance(validator, CrossValidatorDef):
            created = validator.model_copy(update={"id": generate_id()}, deep=True)
        else:
            payload = _normalize_patch(CrossValidatorDef, validator)
            created = CrossValidatorDef.model_validate(payload)
        form = self._form.model_copy(
            update={"cross_validators": [*self._form.cross_validators, created]}
        )
        self._commit("add_cross_validator", form, created.id)
        return created

    def update_cross_validator(
        self, validator_id: str, patch: Mapping[str, Any]
    ) -> CrossValidatorDef | None:
        current = self._form.validator_by_id(validator_id)
        if current is None:
            return None
        updated = _patched(current, patch)
        validators = [updated if v.id == validator_id else v for v in self._form.cross_validators]
        form = self._form.model_copy(update={"cross_validators": validators})
        self._commit("update_cross_validator", form, validator_id)
        return updated

    def remove_cross_validator(self, validator_id: str) -> bool:
        if self._form.validator_by_id(validator_id) is None:
            return False
        validators = [v for v in self._form.cross_validators if v.id != validator_id]
        form = self._form.model_copy(update={"cross_validators": validators})
        self._commit("remove_cross_validator", form, validator_id)
        return True

    # ------------------------------------------------------------------
    # Settings and metadata
    # ------------------------------------------------------------------

    def update_settings(self, patch: Mapping[str, Any]) -> FormSettings:
        settings = _patched(self._form.settings, patch, protected=())
        self._commit("update_settings", self._form.model_copy(update={"settings": settings}))
        return settings

    def update_form_meta(self, name: str, description: str | None = None) -> FormDefinition:
        """Rename the form. Not recorded in history."""
        form = self._form.model_copy(update={"name": name, "description": description})
        self._commit("update_form_meta", form, self._form.id, snapshot=False)
        return self._form

    def clear_all_fields(self) -> None:
        """Drop every field, group, and cross validator in one undoable step."""
        form = self._replace_fields([], groups=[], cross_validators=[])
        self._commit("clear_all_fields", form)
        self._selected_field_id = None
        self._selected_group_id = None

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def undo(self) -> bool:
        snapshot = self._history.undo(self._form)
        if snapshot is None:
            return False
        self._commit("undo", restore_snapshot(self._form, snapshot), snapshot=False)
        return True

    def redo(self) -> bool:
        snapshot = self._history.redo(self._form)
        if snapshot is None:
            return False
        self._commit("redo", restore_snapshot(self._form, snapshot), snapshot=False)
        return True

    # ------------------------------------------------------------------
    # Form management
    # ------------------------------------------------------------------

    def _switch_to(self, op: str, form: FormDefinition) -> None:
        """Replace the whole definition; history and selection start over."""
        self._form = form
        self._history.clear()
        self._selected_field_id = None
        self._selected_group_id = None
        self._publish(op, form.id)

    def new_form(self) -> FormDefinition:
        self._switch_to("new_form", create_empty_form())
        return self._form

    def load_form(self, form_id: str) -> FormDefinition | None:
        saved = next((s for s in self._saved if s.id == form_id), None)
        if saved is None:
            return None
        self._switch_to("load_form", saved.data.model_copy(deep=True))
        return self._form

    def save_form(self) -> SavedForm:
        """Upsert the current form into the saved-forms list."""
        form = self._form.model_copy(deep=True)
        record = SavedForm(
            id=form.id, name=form.name, description=form.description, data=form, saved_at=utc_now()
        )
        index = next((i for i, s in enumerate(self._saved) if s.id == form.id), None)
        if index is None:
            self._saved.append(record)
        else:
            self._saved[index] = record
        log.debug("form_saved", form_id=form.id, name=form.name)
        if self._plugins is not None:
            self._plugins.dispatch("post_save", form_id=form.id, name=form.name)
        return record

    def delete_form(self, form_id: str) -> bool:
        before = len(self._saved)
        self._saved = [s for s in self._saved if s.id != form_id]
        return len(self._saved) != before

    # ------------------------------------------------------------------
    # Import / export
    # ------------------------------------------------------------------

    def export_to_json(self) -> str:
        """The full definition as JSON (camelCase keys, 2-space indent)."""
        return self._form.model_dump_json(by_alias=True, indent=2)

    def export_fields_to_json(self) -> str:
        """Just the fields, without ids, order, or groups."""
        payload = [
            {"type": f.type, "name": f.name, "label": f.label, "config": f.config}
            for f in self._form.fields
        ]
        return json.dumps(payload, indent=2, ensure_ascii=False)

    def import_from_json(self, text: str) -> bool:
        """Load a bare field array or a full definition.

        A field array replaces the current fields (fresh ids, sequential
        order, no groups). A full definition replaces the whole form.
        Both are undoable. Returns False, leaving state untouched, when
        the text is not JSON or does not have either shape.
        """
        try:
            data = json.loads(text)
        except (ValueError, TypeError, RecursionError) as exc:
            log.warning("import_rejected", reason="invalid_json", error=str(exc))
            return False

        if isinstance(data, list):
            form = self._form_from_field_array(data)
        elif isinstance(data, dict) and isinstance(data.get("fields"), list):
            form = self._form_from_definition(data)
        else:
            form = None

        if form is None:
            log.warning("import_rejected", reason="invalid_shape")
            return False

        self._commit("import", form, form.id)
        self._selected_field_id = None
        return True

    def _form_from_field_array(self, items: list[Any]) -> FormDefinition | None:
        try:
            drafts = [FieldDraft.model_validate(item) for item in items]
        except ValidationError:
            return None
        if _has_duplicate_names(drafts):
            return None
        fields = [
            FieldDefinition(type=d.type, name=d.name, label=d.label, config=d.config, order=i)
            for i, d in enumerate(drafts)
        ]
        return self._replace_fields(fields)

    @staticmethod
    def _form_from_definition(data: dict[str, Any]) -> FormDefinition | None:
        payload = dict(data)
        if not payload.get("id"):
            payload["id"] = generate_id()
        try:
            form = FormDefinition.model_validate(payload)
        except ValidationError:
            return None
        if _has_duplicate_names(form.fields):
            return None
        return form.model_copy(update={"fields": _renumber(_sorted_by_order(form.fields))})

    # ------------------------------------------------------------------
    # Persisted state and preferences
    # ------------------------------------------------------------------

    def to_persisted_state(self) -> PersistedState:
        return PersistedState(
            saved_forms=[s.model_copy(deep=True) for s in self._saved],
            theme=self.theme,
            language=self.language,
            current_form_id=self._form.id,
        )

    @classmethod
    def from_persisted_state(cls, state: PersistedState | None, **kwargs: Any) -> FormStore:
        """Rebuild a store; the current form is the saved form ``current_form_id`` names.

        A missing state (None) gives an empty store built from *kwargs*.
        """
        if state is None:
            return cls(**kwargs)
        current = next((s for s in state.saved_forms if s.id == state.current_form_id), None)
        kwargs["theme"] = state.theme
        kwargs["language"] = state.language
        return cls(
            current.data.model_copy(deep=True) if current is not None else None,
            saved_forms=state.saved_forms,
            **kwargs,
        )

    def to_session(self) -> EditorSession:
        """The working copy: current form, history stacks, clipboard, selection."""
        undo, redo = self._history.stacks()
        return EditorSession(
            form=self._form.model_copy(deep=True),
            undo_stack=undo,
            redo_stack=redo,
            clipboard=self._clipboard.peek(),
            selected_field_id=self._selected_field_id,
            selected_group_id=self._selected_group_id,
        )

    def restore_session(self, session: EditorSession) -> None:
        """Resume a working copy written by :meth:`to_session`.

        Selections pointing at entities the form no longer has are dropped.
        """
        self._form = session.form.model_copy(deep=True)
        self._history.restore(session.undo_stack, session.redo_stack)
        self._clipboard.restore(session.clipboard)
        field_id, group_id = session.selected_field_id, session.selected_group_id
        if field_id is not None and self._form.field_by_id(field_id) is None:
            field_id = None
        if group_id is not None and self._form.group_by_id(group_id) is None:
            group_id = None
        self._selected_field_id = field_id
        self._selected_group_id = group_id
        log.debug("session_restored", form_id=self._form.id, undo=len(session.undo_stack))

    def set_theme(self, theme: Theme | str) -> None:
        self.theme = Theme(theme)

    def toggle_theme(self) -> Theme:
        self.theme = Theme.LIGHT if self.theme is Theme.DARK else Theme.DARK
        return self.theme

    def set_language(self, language: Language | str) -> None:
        self.language = Language(language)

    def toggle_language(self) -> Language:
        self.language = Language.EN if self.language is Language.TR else Language.TR
        return self.language
