"""Form definition models.

Attribute names are snake_case; the wire format (exported JSON, the
persisted-state blob) uses camelCase aliases generated from them, so
``FieldDefinition(group_id=...)`` dumps as ``{"groupId": ...}`` with
``by_alias=True``.

All models are frozen. Mutation happens by building a replacement via
``model_copy(update=...)`` inside the form store, never in place.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator
from pydantic.alias_generators import to_camel

from formctl.domain.ids import generate_id
from formctl.domain.types import (
    CrossValidatorType,
    LabelPosition,
    Language,
    Layout,
    Operator,
    RuleKind,
    Size,
    Theme,
)

type RuleValue = str | int | float | bool | None

DEFAULT_FORM_NAME = "Yeni Form / New Form"


def utc_now() -> datetime:
    """Current UTC time (timezone-aware)."""
    return datetime.now(UTC)


class FormModel(BaseModel):
    """Base for every form-builder model: frozen, camelCase on the wire."""

    model_config = {
        "frozen": True,
        "alias_generator": to_camel,
        "populate_by_name": True,
    }


# --- Rules and options ---


class ConditionalRule(FormModel):
    """A single ``field operator value`` comparison."""

    field: str = Field(min_length=1)
    operator: Operator
    value: RuleValue = None


def parse_rule(raw: Any) -> ConditionalRule | None:
    """Lenient rule parsing: anything malformed becomes None.

    Rules live inside the open ``config`` map, so they may be missing,
    half-filled by an editor, or hand-written in imported JSON. Callers
    treat None as "no rule", which makes a bad rule fail closed.
    """
    if isinstance(raw, ConditionalRule):
        return raw
    if not isinstance(raw, Mapping):
        return None
    try:
        return ConditionalRule.model_validate(raw)
    except ValidationError:
        return None


class SelectOption(FormModel):
    value: str
    label: str


class LocalizedText(FormModel):
    """Bilingual display text (Turkish and English)."""

    tr: str = ""
    en: str = ""

    @classmethod
    def coerce(cls, value: Any) -> Any:
        """Promote a bare string to the same text in both languages."""
        if isinstance(value, str):
            return {"tr": value, "en": value}
        return value

    def get(self, language: Language | str) -> str:
        """Text for *language*, falling back to the other one when empty."""
        if Language(language) is Language.EN:
            return self.en or self.tr
        return self.tr or self.en


# --- Fields and groups ---


def _blank_group_is_none(value: Any) -> Any:
    return value or None


class FieldDraft(FormModel):
    """A field before the store assigns its id and order."""

    type: str = Field(min_length=1)
    name: str = Field(min_length=1)
    label: str = ""
    config: dict[str, Any] = Field(default_factory=dict)
    group_id: str | None = None

    normalize_group = field_validator("group_id", mode="before")(_blank_group_is_none)


class FieldDefinition(FormModel):
    """One form input: type tag, identity, and configuration.

    ``name`` is the runtime value key and must be unique within a form;
    the store enforces that on add and rename.
    """

    id: str = Field(default_factory=generate_id)
    type: str = Field(min_length=1)
    name: str = Field(min_length=1)
    label: str = ""
    config: dict[str, Any] = Field(default_factory=dict)
    group_id: str | None = None
    order: int = 0

    normalize_group = field_validator("group_id", mode="before")(_blank_group_is_none)

    def rule(self, kind: RuleKind) -> ConditionalRule | None:
        """The parsed rule stored under *kind*, or None."""
        return parse_rule(self.config.get(kind.value))

    def rules(self) -> dict[RuleKind, ConditionalRule]:
        """All well-formed conditional rules on this field."""
        found: dict[RuleKind, ConditionalRule] = {}
        for kind in RuleKind:
            rule = self.rule(kind)
            if rule is not None:
                found[kind] = rule
        return found

    def to_draft(self) -> FieldDraft:
        """Strip identity and order, deep-copying config."""
        return FieldDraft(
            type=self.type,
            name=self.name,
            label=self.label,
            config=self.model_copy(deep=True).config,
            group_id=self.group_id,
        )


class FieldGroup(FormModel):
    """A named, optionally collapsible section of fields."""

    id: str = Field(default_factory=generate_id)
    name: str
    label: str = ""
    description: str | None = None
    collapsible: bool | None = None
    collapsed: bool | None = None
    order: int = 0


# --- Cross validators and settings ---


class CrossValidatorDef(FormModel):
    """A rule spanning two or more fields."""

    id: str = Field(default_factory=generate_id)
    name: str = Field(min_length=1)
    type: CrossValidatorType
    fields: list[str] = Field(default_factory=list)
    message: LocalizedText = Field(default_factory=LocalizedText)
    custom_expression: str | None = None

    @field_validator("message", mode="before")
    @classmethod
    def _coerce_message(cls, value: Any) -> Any:
        return LocalizedText.coerce(value)

    @model_validator(mode="after")
    def _check_arity(self) -> CrossValidatorDef:
        if self.type is CrossValidatorType.FIELDS_MATCH and len(self.fields) < 2:
            msg = "fieldsMatch validators need at least two field names"
            raise ValueError(msg)
        return self


def _default_submit_text() -> LocalizedText:
    return LocalizedText(tr="Gönder", en="Submit")


def _default_reset_text() -> LocalizedText:
    return LocalizedText(tr="Sıfırla", en="Reset")


class FormSettings(FormModel):
    """Form-wide layout, label, size, and validation-timing flags."""

    submit_button_text: LocalizedText = Field(default_factory=_default_submit_text)
    reset_button_text: LocalizedText = Field(default_factory=_default_reset_text)
    show_reset: bool = True
    validate_on_blur: bool = True
    validate_on_change: bool = False
    persist_draft: bool = False
    persist_key: str | None = None
    layout: Layout = Layout.VERTICAL
    label_position: LabelPosition = LabelPosition.TOP
    size: Size = Size.MEDIUM

    @field_validator("submit_button_text", "reset_button_text", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> Any:
        return LocalizedText.coerce(value)


# --- Aggregate root ---


class FormDefinition(FormModel):
    """The aggregate root owned by the form store.

    Invariants (checked by the store, not by this model): field names
    are unique, and field ``order`` values are dense, zero-based, and
    agree with list position.
    """

    id: str = Field(default_factory=generate_id)
    name: str = DEFAULT_FORM_NAME
    description: str | None = None
    fields: list[FieldDefinition] = Field(default_factory=list)
    groups: list[FieldGroup] = Field(default_factory=list)
    settings: FormSettings = Field(default_factory=FormSettings)
    cross_validators: list[CrossValidatorDef] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    def field_by_id(self, field_id: str) -> FieldDefinition | None:
        return next((f for f in self.fields if f.id == field_id), None)

    def field_by_name(self, name: str) -> FieldDefinition | None:
        return next((f for f in self.fields if f.name == name), None)

    def group_by_id(self, group_id: str) -> FieldGroup | None:
        return next((g for g in self.groups if g.id == group_id), None)

    def validator_by_id(self, validator_id: str) -> CrossValidatorDef | None:
        return next((v for v in self.cross_validators if v.id == validator_id), None)


def create_empty_form(form_id: str | None = None) -> FormDefinition:
    """A blank form with default settings."""
    return FormDefinition(id=form_id or generate_id(), description="")


# --- History and persistence ---


class StateSnapshot(FormModel):
    """Deep copy of the editable parts of a form, used as an undo checkpoint.

    ``timestamp`` is informational; stack position defines ordering.
    """

    fields: list[FieldDefinition]
    groups: list[FieldGroup]
    settings: FormSettings
    cross_validators: list[CrossValidatorDef]
    timestamp: float


class SavedForm(FormModel):
    id: str
    name: str
    description: str | None = None
    data: FormDefinition
    saved_at: datetime = Field(default_factory=utc_now)


class PersistedState(FormModel):
    """The blob exchanged with an external storage collaborator."""

    saved_forms: list[SavedForm] = Field(default_factory=list)
    theme: Theme = Theme.DARK
    language: Language = Language.TR
    current_form_id: str | None = None


class EditorSession(FormModel):
    """The working copy carried between CLI invocations.

    Holds what :class:`PersistedState` does not: the current form with
    its unsaved edits, both history stacks (oldest first), the clipboard
    entry, and the selection.
    """

    form: FormDefinition
    undo_stack: list[StateSnapshot] = Field(default_factory=list)
    redo_stack: list[StateSnapshot] = Field(default_factory=list)
    clipboard: FieldDefinition | None = None
    selected_field_id: str | None = None
    selected_group_id: str | None = None
