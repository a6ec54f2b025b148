"""Code generation: JSON export and typed-schema (TypeScript) source.

Output is a pure function of the definition plus the generator options:
the same input always yields byte-identical text. Every user-supplied
string inserted into a single-quoted literal goes through
:func:`escape_string`.

Malformed rules are omitted from the generated options; invalid regex
patterns are still emitted (logged as warnings).
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any

from formctl.domain.conditions import to_display_string
from formctl.domain.field_config import BaseFieldConfig, parse_field_config
from formctl.domain.models import (
    ConditionalRule,
    CrossValidatorDef,
    FieldDefinition,
    FormDefinition,
)
from formctl.domain.types import CrossValidatorType, ExportFormat, Language, Operator

logger = logging.getLogger(__name__)

DEFAULT_LIBRARY = "@biyonik/zignal"

FIELD_CLASSES: dict[str, str] = {
    "string": "StringField",
    "text": "StringField",
    "textarea": "TextareaField",
    "number": "NumberField",
    "email": "EmailField",
    "password": "PasswordField",
    "url": "UrlField",
    "phone": "PhoneField",
    "select": "SelectField",
    "dropdown": "SelectField",
    "multiselect": "MultiselectField",
    "boolean": "BooleanField",
    "checkbox": "BooleanField",
    "date": "DateField",
    "time": "TimeField",
    "color": "ColorField",
    "rating": "RatingField",
    "money": "MoneyField",
    "currency": "MoneyField",
    "percent": "PercentField",
    "file": "FileField",
    "tags": "TagsField",
    "slug": "SlugField",
    "json": "JsonField",
    "masked": "MaskedField",
    "tckn": "StringField",
    "vkn": "StringField",
    "iban": "StringField",
    "turkishPhone": "PhoneField",
    "turkishPlate": "StringField",
    "postalCode": "StringField",
}

VALUE_TYPES: dict[str, str] = {
    "string": "string",
    "text": "string",
    "textarea": "string",
    "number": "number",
    "email": "string",
    "password": "string",
    "url": "string",
    "phone": "string",
    "select": "string",
    "dropdown": "string",
    "multiselect": "string[]",
    "boolean": "boolean",
    "checkbox": "boolean",
    "date": "Date | string",
    "time": "string",
    "color": "string",
    "rating": "number",
    "money": "number",
    "currency": "number",
    "percent": "number",
    "file": "File | null",
    "tags": "string[]",
    "slug": "string",
    "json": "unknown",
    "masked": "string",
    "signature": "string",
    "slider": "number",
    "calculated": "number",
    "tckn": "string",
    "vkn": "string",
    "iban": "string",
    "turkishPhone": "string",
    "turkishPlate": "string",
    "postalCode": "string",
}

DEFAULT_ROWS = 4
DEFAULT_CURRENCY = "TRY"
ACCEPT_ANY = "*"

_NON_ALNUM = re.compile(r"[^a-zA-Z0-9]")
_WORD_SPLIT = re.compile(r"[\s_-]+")
_IDENTIFIER = re.compile(r"[A-Za-z_$][\w$]*", re.ASCII)


@dataclass(frozen=True)
class GeneratorOptions:
    """Knobs read from the ``[generator]`` config section."""

    library: str = DEFAULT_LIBRARY
    message_language: Language = Language.TR


# --- Lookups and string helpers ---


def field_class(field_type: str) -> str:
    """Schema-library class for *field_type* (``StringField`` when unknown)."""
    return FIELD_CLASSES.get(field_type, "StringField")


def value_type(field_type: str) -> str:
    """Data-interface type for *field_type* (``unknown`` when unknown)."""
    return VALUE_TYPES.get(field_type, "unknown")


def escape_string(text: str) -> str:
    """Escape backslashes, single quotes, and line breaks for a single-quoted literal."""
    return (
        text.replace("\\", "\\\\")
        .replace("'", "\\'")
        .replace("\r", "\\r")
        .replace("\n", "\\n")
    )


def property_key(name: str) -> str:
    """*name* as an object key: bare when it is an identifier, else quoted."""
    if _IDENTIFIER.fullmatch(name):
        return name
    return f"'{escape_string(name)}'"


def member(obj: str, name: str) -> str:
    """Property access on *obj*, bracketed when *name* is not an identifier."""
    if _IDENTIFIER.fullmatch(name):
        return f"{obj}.{name}"
    return f"{obj}['{escape_string(name)}']"


def pascal_case(text: str) -> str:
    return "".join(word[:1].upper() + word[1:].lower() for word in _WORD_SPLIT.split(text))


def camel_case(text: str) -> str:
    pascal = pascal_case(text)
    return pascal[:1].lower() + pascal[1:]


def interface_name(form: FormDefinition) -> str:
    return pascal_case(_NON_ALNUM.sub("", form.name)) + "FormData"


def _literal(value: Any) -> str:
    """Render a non-string rule value the way a template literal would."""
    if value is None:
        return "undefined"
    return to_display_string(value)


# --- Expressions ---


def render_expression(rule: ConditionalRule) -> str:
    """Source-text rendering of a rule, e.g. ``country === 'TR'``."""
    ref = rule.field
    value = rule.value
    match rule.operator:
        case Operator.EQUALS:
            if isinstance(value, str):
                return f"{ref} === '{escape_string(value)}'"
            return f"{ref} === {_literal(value)}"
        case Operator.NOT_EQUALS:
            if isinstance(value, str):
                return f"{ref} !== '{escape_string(value)}'"
            return f"{ref} !== {_literal(value)}"
        case Operator.CONTAINS:
            text = value if isinstance(value, str) else _literal(value)
            return f"{ref}?.includes('{escape_string(text)}')"
        case Operator.GREATER_THAN:
            return f"{ref} > {_literal(value)}"
        case Operator.LESS_THAN:
            return f"{ref} < {_literal(value)}"
        case Operator.IS_EMPTY:
            return f"!{ref} || {ref} === ''"
        case Operator.IS_NOT_EMPTY:
            return f"{ref} && {ref} !== ''"
        case _:
            return ref


# --- JSON ---


def _without_none(entry: dict[str, Any]) -> dict[str, Any]:
    """Drop unset optional keys, as a JSON serializer of absent properties would."""
    return {key: value for key, value in entry.items() if value is not None}


def generate_json(form: FormDefinition) -> str:
    """Portable JSON export: no ids or order, groupId only when set."""
    fields = []
    for f in form.fields:
        entry: dict[str, Any] = {
            "type": f.type,
            "name": f.name,
            "label": f.label,
            "config": f.config,
        }
        if f.group_id:
            entry["groupId"] = f.group_id
        fields.append(entry)

    validators = []
    for v in form.cross_validators:
        entry = {
            "name": v.name,
            "type": v.type.value,
            "fields": v.fields,
            "message": v.message.model_dump(mode="json"),
        }
        if v.custom_expression:
            entry["customExpression"] = v.custom_expression
        validators.append(entry)

    payload = _without_none(
        {
            "name": form.name,
            "description": form.description,
            "fields": fields,
            "groups": [
                _without_none(
                    {
                        "name": g.name,
                        "label": g.label,
                        "description": g.description,
                        "collapsible": g.collapsible,
                    }
                )
                for g in form.groups
            ],
            "settings": form.settings.model_dump(mode="json", by_alias=True, exclude_none=True),
            "crossValidators": validators,
        }
    )
    return json.dumps(payload, indent=2, ensure_ascii=False)


# --- TypeScript ---


def _config_parts(field: FieldDefinition) -> list[str]:
    """Option entries for a field constructor, built from non-default keys."""
    cfg: BaseFieldConfig = parse_field_config(field.type, field.config)
    parts: list[str] = []

    if cfg.required:
        parts.append("required: true")
    if cfg.min_length is not None and cfg.min_length != 0:
        parts.append(f"minLength: {cfg.min_length}")
    if cfg.max_length is not None:
        parts.append(f"maxLength: {cfg.max_length}")
    if cfg.min is not None:
        parts.append(f"min: {_literal(cfg.min)}")
    if cfg.max is not None:
        parts.append(f"max: {_literal(cfg.max)}")
    if cfg.pattern:
        try:
            re.compile(cfg.pattern)
        except re.error as exc:
            logger.warning("Field %s has an invalid pattern %r: %s", field.name, cfg.pattern, exc)
        parts.append(f"pattern: /{cfg.pattern}/")
    if cfg.placeholder:
        parts.append(f"placeholder: '{escape_string(cfg.placeholder)}'")
    if cfg.hint:
        parts.append(f"hint: '{escape_string(cfg.hint)}'")
    if cfg.options:
        rendered = ", ".join(
            f"{{ value: '{escape_string(o.value)}', label: '{escape_string(o.label)}' }}"
            for o in cfg.options
        )
        parts.append(f"options: [{rendered}]")
    if cfg.rows and cfg.rows != DEFAULT_ROWS:
        parts.append(f"rows: {cfg.rows}")
    if cfg.currency and cfg.currency != DEFAULT_CURRENCY:
        parts.append(f"currency: '{escape_string(cfg.currency)}'")
    if cfg.integer:
        parts.append("integer: true")
    if cfg.require_uppercase:
        parts.append("requireUppercase: true")
    if cfg.require_lowercase:
        parts.append("requireLowercase: true")
    if cfg.require_number:
        parts.append("requireNumber: true")
    if cfg.require_special:
        parts.append("requireSpecial: true")
    if cfg.accept and cfg.accept != ACCEPT_ANY:
        parts.append(f"accept: '{escape_string(cfg.accept)}'")
    if cfg.max_size:
        parts.append(f"maxSize: {_literal(cfg.max_size)}")

    for key, rule in (
        ("showExpression", cfg.show_when),
        ("hideExpression", cfg.hide_when),
        ("disableExpression", cfg.disable_when),
    ):
        if rule is not None:
            expression = render_expression(rule).replace("\\", "\\\\").replace('"', '\\"')
            parts.append(f'{key}: "{expression}"')
    return parts


def _field_code(field: FieldDefinition) -> str:
    parts = _config_parts(field)
    options = ""
    if parts:
        joined = ",\n    ".join(parts)
        options = f", {{\n    {joined}\n  }}"
    return (
        f"  {property_key(field.name)}: new {field_class(field.type)}"
        f"('{escape_string(field.name)}', '{escape_string(field.label)}'{options}),"
    )


def _imports(form: FormDefinition, options: GeneratorOptions) -> str:
    names = ["FormSchema", "FormState"]
    for f in form.fields:
        cls = field_class(f.type)
        if cls not in names:
            names.append(cls)
    if form.cross_validators:
        names.append("CrossFieldValidator")
    joined = ",\n  ".join(names)
    return f"import {{\n  {joined},\n}} from '{options.library}';"


def _interface(form: FormDefinition) -> str:
    lines = "\n".join(
        f"  {property_key(f.name)}{'' if f.config.get('required') else '?'}: "
        f"{value_type(f.type)};"
        for f in form.fields
    )
    return (
        "/**\n * TR: Form veri tipi\n * EN: Form data type\n */\n"
        f"export interface {interface_name(form)} {{\n{lines}\n}}"
    )


def _schema(form: FormDefinition) -> str:
    ungrouped = [f for f in form.fields if not f.group_id]
    content = "\n\n".join(_field_code(f) for f in ungrouped)

    for group in form.groups:
        members = [f for f in form.fields if f.group_id == group.id]
        if members:
            title = " ".join(group.label.splitlines())
            content += f"\n\n  // === {title} ===\n"
            content += "\n\n".join(_field_code(f) for f in members)

    return (
        "/**\n * TR: Form semasi\n * EN: Form schema\n */\n"
        f"export const formSchema = new FormSchema<{interface_name(form)}>({{\n{content}\n}});"
    )


def _validator_code(validator: CrossValidatorDef, iface: str, options: GeneratorOptions) -> str:
    message = escape_string(validator.message.get(options.message_language))
    names = validator.fields

    match validator.type:
        case CrossValidatorType.FIELDS_MATCH:
            validate = (
                f"(values) => {member('values', names[0])} !== {member('values', names[1])}\n"
                f"      ? '{message}'\n"
                "      : null"
            )
        case CrossValidatorType.AT_LEAST_ONE:
            checks = " || ".join(member("values", n) for n in names)
            validate = f"(values) => !({checks})\n      ? '{message}'\n      : null"
        case CrossValidatorType.CUSTOM:
            body = validator.custom_expression or "// Custom logic here"
            validate = f"(values) => {{\n    {body}\n    return null;\n  }}"
        case _:
            validate = "(values) => null"

    quoted = ", ".join(f"'{escape_string(n)}'" for n in names)
    return (
        f"export const {camel_case(validator.name)}Validator: CrossFieldValidator<{iface}> = {{\n"
        f"  name: '{escape_string(validator.name)}',\n"
        f"  fields: [{quoted}],\n"
        f"  validate: {validate}\n"
        "};"
    )


def _cross_validators(form: FormDefinition, options: GeneratorOptions) -> str:
    if not form.cross_validators:
        return ""
    iface = interface_name(form)
    blocks = "\n\n".join(_validator_code(v, iface, options) for v in form.cross_validators)
    return f"/**\n * TR: Cross-field validatorler\n * EN: Cross-field validators\n */\n{blocks}"


def _form_state(form: FormDefinition) -> str:
    iface = interface_name(form)
    code = (
        "/**\n * TR: Form state olusturma\n * EN: Create form state\n */\n"
        f"export function createFormState(): FormState<{iface}> {{\n"
        f"  return new FormState<{iface}>(formSchema"
    )
    if form.cross_validators:
        names = ", ".join(f"{camel_case(v.name)}Validator" for v in form.cross_validators)
        code += f", {{\n    crossValidators: [{names}]\n  }}"
    first = form.fields[0].name if form.fields else "fieldName"
    code += (
        ");\n}\n\n"
        "// Kullanim / Usage:\n"
        "// const formState = createFormState();\n"
        f"// formState.getField('{escape_string(first)}').value.set('...');"
    )
    return code


def generate_typescript(form: FormDefinition, options: GeneratorOptions | None = None) -> str:
    """Typed-schema module: imports, data interface, schema, validators, factory."""
    opts = options or GeneratorOptions()
    sections = [
        _imports(form, opts),
        _interface(form),
        _schema(form),
        _cross_validators(form, opts),
        _form_state(form),
    ]
    return "\n\n".join(sections) + "\n"


def generate(
    form: FormDefinition, fmt: ExportFormat | str, options: GeneratorOptions | None = None
) -> str:
    """Render *form* as ``json`` or ``typescript``."""
    if ExportFormat(fmt) is ExportFormat.TYPESCRIPT:
        return generate_typescript(form, options)
    return generate_json(form)
