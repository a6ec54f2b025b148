"""Tests for form definition models and wire aliases."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from formctl.domain.ids import validate_id
from formctl.domain.models import (
    ConditionalRule,
    CrossValidatorDef,
    FieldDefinition,
    FieldDraft,
    FormDefinition,
    FormSettings,
    LocalizedText,
    PersistedState,
    create_empty_form,
    parse_rule,
)
from formctl.domain.types import CrossValidatorType, Language, Operator, RuleKind, Theme


class TestFieldDefinition:
    def test_generates_id(self) -> None:
        f = FieldDefinition(type="string", name="email")
        assert validate_id(f.id)

    def test_camel_case_aliases(self) -> None:
        f = FieldDefinition(type="string", name="email", group_id="g1", order=3)
        dumped = f.model_dump(by_alias=True)
        assert dumped["groupId"] == "g1"
        assert "group_id" not in dumped

    def test_accepts_wire_keys(self) -> None:
        f = FieldDefinition.model_validate({"type": "string", "name": "a", "groupId": "g"})
        assert f.group_id == "g"

    def test_blank_group_becomes_none(self) -> None:
        f = FieldDefinition(type="string", name="a", group_id="")
        assert f.group_id is None

    def test_frozen(self) -> None:
        f = FieldDefinition(type="string", name="a")
        with pytest.raises(ValidationError):
            f.name = "b"  # type: ignore[misc]

    def test_empty_name_rejected(self) -> None:
        with pytest.raises(ValidationError):
            FieldDefinition(type="string", name="")

    def test_rules_skip_malformed(self) -> None:
        f = FieldDefinition(
            type="string",
            name="a",
            config={
                "showWhen": {"field": "b", "operator": "equals", "value": 1},
                "hideWhen": {"field": "b"},
                "disableWhen": "not a rule",
            },
        )
        rules = f.rules()
        assert list(rules) == [RuleKind.SHOW_WHEN]
        assert rules[RuleKind.SHOW_WHEN].operator is Operator.EQUALS

    def test_to_draft_copies_config(self) -> None:
        f = FieldDefinition(type="select", name="a", config={"options": [{"value": "x"}]})
        draft = f.to_draft()
        assert isinstance(draft, FieldDraft)
        draft.config["options"].append({"value": "y"})
        assert f.config["options"] == [{"value": "x"}]


class TestParseRule:
    def test_valid(self) -> None:
        parsed = parse_rule({"field": "country", "operator": "equals", "value": "TR"})
        assert parsed == ConditionalRule(field="country", operator=Operator.EQUALS, value="TR")

    @pytest.mark.parametrize(
        "raw",
        [
            None,
            "equals",
            {},
            {"field": "country"},
            {"operator": "equals"},
            {"field": "", "operator": "equals"},
            {"field": "country", "operator": "matches"},
        ],
    )
    def test_malformed_is_none(self, raw: object) -> None:
        assert parse_rule(raw) is None


class TestLocalizedText:
    def test_coerce_bare_string(self) -> None:
        v = CrossValidatorDef(
            name="pw", type=CrossValidatorType.FIELDS_MATCH, fields=["a", "b"], message="Eşleşmiyor"
        )
        assert v.message == LocalizedText(tr="Eşleşmiyor", en="Eşleşmiyor")

    def test_get_falls_back(self) -> None:
        text = LocalizedText(tr="Gönder")
        assert text.get(Language.EN) == "Gönder"
        assert text.get("tr") == "Gönder"


class TestCrossValidatorDef:
    def test_fields_match_needs_two_fields(self) -> None:
        with pytest.raises(ValidationError):
            CrossValidatorDef(name="x", type=CrossValidatorType.FIELDS_MATCH, fields=["a"])

    def test_at_least_one_allows_single_field(self) -> None:
        v = CrossValidatorDef(name="x", type=CrossValidatorType.AT_LEAST_ONE, fields=["a"])
        assert v.fields == ["a"]


class TestFormDefinition:
    def test_empty_form_defaults(self) -> None:
        form = create_empty_form()
        assert form.fields == []
        assert form.settings == FormSettings()
        assert form.settings.submit_button_text.en == "Submit"
        assert validate_id(form.id)

    def test_lookups(self) -> None:
        a = FieldDefinition(type="string", name="a")
        form = FormDefinition(fields=[a])
        assert form.field_by_id(a.id) is a
        assert form.field_by_name("a") is a
        assert form.field_by_name("missing") is None
        assert form.group_by_id("nope") is None

    def test_json_round_trip_uses_aliases(self) -> None:
        form = FormDefinition(fields=[FieldDefinition(type="string", name="a", group_id="g")])
        text = form.model_dump_json(by_alias=True)
        assert '"crossValidators"' in text
        assert FormDefinition.model_validate_json(text) == form


class TestPersistedState:
    def test_defaults(self) -> None:
        state = PersistedState()
        assert state.theme is Theme.DARK
        assert state.language is Language.TR
        assert state.current_form_id is None

    def test_wire_keys(self) -> None:
        state = PersistedState.model_validate(
            {"savedForms": [], "theme": "light", "language": "en", "currentFormId": "abc"}
        )
        assert state.theme is Theme.LIGHT
        assert state.current_form_id == "abc"
