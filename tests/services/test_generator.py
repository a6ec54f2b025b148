"""Tests for JSON and typed-schema code generation."""

from __future__ import annotations

import json
import logging

import pytest

from formctl.domain.models import (
    ConditionalRule,
    CrossValidatorDef,
    FieldDefinition,
    FieldGroup,
    FormDefinition,
)
from formctl.domain.types import CrossValidatorType, ExportFormat, Language, Operator
from formctl.services.generator import (
    GeneratorOptions,
    camel_case,
    escape_string,
    field_class,
    generate,
    generate_json,
    generate_typescript,
    interface_name,
    member,
    pascal_case,
    property_key,
    render_expression,
    value_type,
)
from tests.conftest import rule


def _form(**kwargs: object) -> FormDefinition:
    defaults: dict[str, object] = {"id": "f" * 16, "name": "Contact", "description": ""}
    defaults.update(kwargs)
    return FormDefinition.model_validate(defaults)


class TestHelpers:
    def test_lookups_fall_back(self) -> None:
        assert field_class("email") == "EmailField"
        assert field_class("unknown") == "StringField"
        assert value_type("multiselect") == "string[]"
        assert value_type("unknown") == "unknown"

    def test_escape(self) -> None:
        assert escape_string("it's\nok") == "it\\'s\\nok"
        assert escape_string("C:\\") == "C:\\\\"
        assert escape_string("a\\'b") == "a\\\\\\'b"

    def test_property_keys(self) -> None:
        assert property_key("email") == "email"
        assert property_key("$ref_1") == "$ref_1"
        assert property_key("it's") == "'it\\'s'"
        assert property_key("first name") == "'first name'"
        assert property_key("a\n") == "'a\\n'"
        assert member("values", "email") == "values.email"
        assert member("values", "e-mail") == "values['e-mail']"

    def test_case_helpers(self) -> None:
        assert pascal_case("password match") == "PasswordMatch"
        assert camel_case("password_match") == "passwordMatch"
        assert interface_name(_form(name="Kayıt-2024!")) == "Kayt2024FormData"

    @pytest.mark.parametrize(
        ("operator", "value", "expected"),
        [
            (Operator.EQUALS, "TR", "country === 'TR'"),
            (Operator.EQUALS, 5, "country === 5"),
            (Operator.NOT_EQUALS, "it's", "country !== 'it\\'s'"),
            (Operator.CONTAINS, "ist", "country?.includes('ist')"),
            (Operator.GREATER_THAN, 18, "country > 18"),
            (Operator.LESS_THAN, None, "country < undefined"),
            (Operator.IS_EMPTY, None, "!country || country === ''"),
            (Operator.IS_NOT_EMPTY, None, "country && country !== ''"),
        ],
    )
    def test_render_expression(self, operator: Operator, value: object, expected: str) -> None:
        parsed = ConditionalRule(field="country", operator=operator, value=value)
        assert render_expression(parsed) == expected


class TestGenerateJson:
    def test_deterministic(self) -> None:
        group = FieldGroup(id="g" * 16, name="company", label="Şirket")
        form = _form(
            groups=[group],
            fields=[
                FieldDefinition(type="select", name="customerType"),
                FieldDefinition(
                    type="string",
                    name="taxNumber",
                    group_id=group.id,
                    order=1,
                    config={"showWhen": rule("customerType", "equals", "corporate")},
                ),
            ],
            cross_validators=[
                CrossValidatorDef(
                    name="either",
                    type=CrossValidatorType.AT_LEAST_ONE,
                    fields=["customerType", "taxNumber"],
                    message={"tr": "Birini girin", "en": "Fill one"},
                )
            ],
        )
        first = generate(form, "json")
        assert first == generate(form, "json")
        assert first == generate(form.model_copy(deep=True), ExportFormat.JSON)

    def test_portable_shape(self) -> None:
        group = FieldGroup(id="g" * 16, name="contact", label="Contact")
        form = _form(
            fields=[
                FieldDefinition(type="string", name="a", config={"required": True}),
                FieldDefinition(type="email", name="b", group_id=group.id, order=1),
            ],
            groups=[group],
        )
        data = json.loads(generate_json(form))
        assert data["name"] == "Contact"
        assert data["fields"][0] == {
            "type": "string",
            "name": "a",
            "label": "",
            "config": {"required": True},
        }
        assert data["fields"][1]["groupId"] == group.id
        assert "id" not in data["fields"][0]
        assert data["groups"] == [{"name": "contact", "label": "Contact"}]
        assert data["settings"]["submitButtonText"] == {"tr": "Gönder", "en": "Submit"}
        assert "persistKey" not in data["settings"]

    def test_none_description_omitted(self) -> None:
        data = json.loads(generate_json(_form(description=None)))
        assert "description" not in data

    def test_validators(self) -> None:
        v = CrossValidatorDef(
            name="custom",
            type=CrossValidatorType.CUSTOM,
            fields=["a"],
            custom_expression="return values.a ? null : 'x';",
        )
        data = json.loads(generate_json(_form(cross_validators=[v])))
        assert data["crossValidators"][0]["customExpression"] == "return values.a ? null : 'x';"


class TestGenerateTypescript:
    def test_deterministic(self) -> None:
        form = _form(
            fields=[
                FieldDefinition(id="1" * 16, type="string", name="a", config={"required": True}),
                FieldDefinition(id="2" * 16, type="number", name="b", order=1),
            ]
        )
        assert generate_typescript(form) == generate_typescript(form)
        assert generate(form, ExportFormat.TYPESCRIPT) == generate(form, "typescript")

    def test_quoted_name_escaped(self) -> None:
        form = _form(fields=[FieldDefinition(type="string", name="it's", label="x")])
        code = generate_typescript(form)
        assert "  'it\\'s': new StringField('it\\'s', 'x')," in code
        assert "  'it\\'s'?: string;" in code
        assert "formState.getField('it\\'s')" in code

    def test_backslash_label_keeps_literal_closed(self) -> None:
        form = _form(fields=[FieldDefinition(type="string", name="a", label="C:\\")])
        assert "new StringField('a', 'C:\\\\')," in generate_typescript(form)

    def test_expression_string_escaped(self) -> None:
        form = _form(
            fields=[
                FieldDefinition(type="string", name="country"),
                FieldDefinition(
                    type="string",
                    name="tax",
                    order=1,
                    config={"showWhen": rule("country", "equals", 'say "it\'s"')},
                ),
            ]
        )
        code = generate_typescript(form)
        assert 'showExpression: "country === \'say \\"it\\\\\'s\\"\'"' in code

    def test_group_label_line_breaks_stay_in_comment(self) -> None:
        group = FieldGroup(id="g" * 16, name="g", label="Line one\nLine two")
        form = _form(
            groups=[group],
            fields=[FieldDefinition(type="string", name="a", group_id=group.id)],
        )
        assert "  // === Line one Line two ===\n" in generate_typescript(form)

    def test_validator_members_for_odd_names(self) -> None:
        form = _form(
            fields=[
                FieldDefinition(type="string", name="e-mail"),
                FieldDefinition(type="string", name="phone", order=1),
            ],
            cross_validators=[
                CrossValidatorDef(
                    name="contact",
                    type=CrossValidatorType.AT_LEAST_ONE,
                    fields=["e-mail", "phone"],
                )
            ],
        )
        assert "(values) => !(values['e-mail'] || values.phone)" in generate_typescript(form)

    def test_imports_deduplicated(self) -> None:
        form = _form(
            fields=[
                FieldDefinition(type="string", name="a"),
                FieldDefinition(type="text", name="b", order=1),
                FieldDefinition(type="email", name="c", order=2),
            ]
        )
        code = generate_typescript(form)
        header = code.split("} from")[0]
        assert header.count("StringField") == 1
        assert "EmailField" in header
        assert "} from '@biyonik/zignal';" in code

    def test_custom_library(self) -> None:
        code = generate_typescript(_form(), GeneratorOptions(library="@acme/forms"))
        assert "} from '@acme/forms';" in code

    def test_interface_optionality(self) -> None:
        form = _form(
            fields=[
                FieldDefinition(type="string", name="a", config={"required": True}),
                FieldDefinition(type="multiselect", name="b", order=1),
            ]
        )
        code = generate_typescript(form)
        assert "export interface ContactFormData {" in code
        assert "  a: string;" in code
        assert "  b?: string[];" in code

    def test_field_options(self) -> None:
        form = _form(
            fields=[
                FieldDefinition(
                    type="string",
                    name="code",
                    label="Kod'u",
                    config={
                        "required": True,
                        "minLength": 0,
                        "maxLength": 10,
                        "pattern": "^[A-Z]+$",
                        "placeholder": "ABC",
                    },
                ),
            ]
        )
        code = generate_typescript(form)
        assert "  code: new StringField('code', 'Kod\\'u', {" in code
        assert "required: true" in code
        assert "minLength" not in code
        assert "maxLength: 10" in code
        assert "pattern: /^[A-Z]+$/" in code
        assert "placeholder: 'ABC'" in code

    def test_defaults_not_emitted(self) -> None:
        form = _form(
            fields=[
                FieldDefinition(type="textarea", name="t", config={"rows": 4}),
                FieldDefinition(type="money", name="m", config={"currency": "TRY"}, order=1),
                FieldDefinition(type="file", name="f", config={"accept": "*"}, order=2),
            ]
        )
        code = generate_typescript(form)
        assert "new TextareaField('t', '')," in code
        assert "new MoneyField('m', '')," in code
        assert "new FileField('f', '')," in code

    def test_select_options_escaped(self) -> None:
        form = _form(
            fields=[
                FieldDefinition(
                    type="select",
                    name="s",
                    config={"options": [{"value": "a'b", "label": "A"}]},
                )
            ]
        )
        assert "options: [{ value: 'a\\'b', label: 'A' }]" in generate_typescript(form)

    def test_condition_expressions(self) -> None:
        form = _form(
            fields=[
                FieldDefinition(type="string", name="country"),
                FieldDefinition(
                    type="string",
                    name="tax",
                    order=1,
                    config={
                        "showWhen": rule("country", "equals", "TR"),
                        "disableWhen": {"field": "country"},
                    },
                ),
            ]
        )
        code = generate_typescript(form)
        assert "showExpression: \"country === 'TR'\"" in code
        assert "disableExpression" not in code

    def test_invalid_pattern_emitted_with_warning(self, caplog: pytest.LogCaptureFixture) -> None:
        form = _form(fields=[FieldDefinition(type="string", name="a", config={"pattern": "(["})])
        with caplog.at_level(logging.WARNING, logger="formctl.services.generator"):
            code = generate_typescript(form)
        assert "pattern: /([/" in code
        assert "invalid pattern" in caplog.text

    def test_groups_render_section_headers(self) -> None:
        group = FieldGroup(id="g" * 16, name="contact", label="İletişim")
        form = _form(
            fields=[
                FieldDefinition(type="string", name="a"),
                FieldDefinition(type="email", name="b", group_id=group.id, order=1),
            ],
            groups=[group],
        )
        code = generate_typescript(form)
        assert "// === İletişim ===" in code
        assert code.index("  a: new StringField") < code.index("// === İletişim ===")

    def test_cross_validators(self) -> None:
        validators = [
            CrossValidatorDef(
                name="password match",
                type=CrossValidatorType.FIELDS_MATCH,
                fields=["password", "confirm"],
                message={"tr": "Şifreler eşleşmiyor", "en": "Passwords do not match"},
            ),
            CrossValidatorDef(
                name="contact",
                type=CrossValidatorType.AT_LEAST_ONE,
                fields=["email", "phone"],
                message="Birini girin",
            ),
            CrossValidatorDef(
                name="custom",
                type=CrossValidatorType.CUSTOM,
                fields=["a"],
                custom_expression="if (values.a === 'x') return 'bad';",
            ),
        ]
        code = generate_typescript(
            _form(cross_validators=validators),
            GeneratorOptions(message_language=Language.EN),
        )
        assert "export const passwordMatchValidator: CrossFieldValidator<ContactFormData>" in code
        assert "(values) => values.password !== values.confirm" in code
        assert "'Passwords do not match'" in code
        assert "(values) => !(values.email || values.phone)" in code
        assert "'Birini girin'" in code
        assert "    if (values.a === 'x') return 'bad';\n    return null;" in code
        assert (
            "crossValidators: [passwordMatchValidator, contactValidator, customValidator]" in code
        )
        assert "CrossFieldValidator,\n} from" in code

    def test_form_state_usage_comment(self) -> None:
        empty = generate_typescript(_form())
        assert "formState.getField('fieldName')" in empty
        assert empty.endswith("\n")
        named = generate_typescript(_form(fields=[FieldDefinition(type="string", name="email")]))
        assert "formState.getField('email')" in named


class TestGenerate:
    def test_json_format(self) -> None:
        assert json.loads(generate(_form(), ExportFormat.JSON))["name"] == "Contact"

    def test_unknown_format(self) -> None:
        with pytest.raises(ValueError):
            generate(_form(), "yaml")
