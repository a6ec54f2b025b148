"""Value checks for previewing a form against sample input.

:func:`validate_field` applies one field's config (required, lengths,
bounds, pattern, password strength) and its type's format check to a
value and returns the first failure as a localized message.
:func:`validate_fields` does that for a whole form, and
:func:`evaluate_cross_validators` runs the ``fieldsMatch`` and
``atLeastOne`` rules. ``custom`` validators hold JavaScript expressions
and are never evaluated here.

The Turkish identifier checks (TCKN, VKN, IBAN, phone, plate, postal
code) use the published checksum and format rules.
"""

from __future__ import annotations

import json
import re
from collections.abc import Callable, Iterable, Mapping
from typing import TYPE_CHECKING, Any
from urllib.parse import urlsplit

from formctl.domain.field_config import BaseFieldConfig, parse_field_config
from formctl.domain.models import LocalizedText
from formctl.domain.types import CrossValidatorType, Language

if TYPE_CHECKING:
    from formctl.domain.models import CrossValidatorDef, FieldDefinition

MESSAGES: dict[str, LocalizedText] = {
    "required": LocalizedText(tr="Bu alan zorunludur", en="This field is required"),
    "min_length": LocalizedText(
        tr="En az {min} karakter gerekli", en="Minimum {min} characters required"
    ),
    "max_length": LocalizedText(
        tr="En fazla {max} karakter olmalı", en="Maximum {max} characters allowed"
    ),
    "min_value": LocalizedText(tr="Minimum değer: {min}", en="Minimum value: {min}"),
    "max_value": LocalizedText(tr="Maksimum değer: {max}", en="Maximum value: {max}"),
    "min_selections": LocalizedText(tr="En az {min} seçim", en="Select at least {min}"),
    "max_selections": LocalizedText(tr="En fazla {max} seçim", en="Select at most {max}"),
    "invalid_email": LocalizedText(
        tr="Geçerli bir e-posta adresi girin", en="Enter a valid email address"
    ),
    "invalid_url": LocalizedText(tr="Geçerli bir URL girin", en="Enter a valid URL"),
    "invalid_format": LocalizedText(tr="Geçersiz format", en="Invalid format"),
    "invalid_number": LocalizedText(tr="Geçerli bir sayı girin", en="Enter a valid number"),
    "invalid_json": LocalizedText(tr="Geçersiz JSON formatı", en="Invalid JSON format"),
    "password_uppercase": LocalizedText(
        tr="En az bir büyük harf", en="At least one uppercase letter"
    ),
    "password_lowercase": LocalizedText(
        tr="En az bir küçük harf", en="At least one lowercase letter"
    ),
    "password_number": LocalizedText(tr="En az bir rakam", en="At least one number"),
    "password_special": LocalizedText(
        tr="En az bir özel karakter", en="At least one special character"
    ),
    "invalid_tckn": LocalizedText(tr="Geçersiz TCKN numarası", en="Invalid TCKN number"),
    "invalid_vkn": LocalizedText(tr="Geçersiz VKN numarası", en="Invalid VKN number"),
    "invalid_iban": LocalizedText(tr="Geçersiz IBAN numarası", en="Invalid IBAN number"),
    "invalid_phone": LocalizedText(
        tr="Geçersiz telefon numarası", en="Invalid phone number"
    ),
    "invalid_plate": LocalizedText(tr="Geçersiz plaka numarası", en="Invalid license plate"),
    "invalid_postal_code": LocalizedText(tr="Geçersiz posta kodu", en="Invalid postal code"),
    "fields_match": LocalizedText(tr="Alanlar eşleşmiyor", en="Fields do not match"),
    "at_least_one": LocalizedText(
        tr="Şu alanlardan en az biri gerekli: {fields}",
        en="At least one of these is required: {fields}",
    ),
}

STRING_TYPES = frozenset({"string", "textarea", "password", "slug"})
NUMBER_TYPES = frozenset({"number", "money", "percent", "slider", "rating"})

_EMAIL = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")
_URL_SCHEME = re.compile(r"[A-Za-z][A-Za-z0-9+.-]*")
_PHONE = re.compile(r"\+?[0-9]{7,15}")
_PHONE_NOISE = re.compile(r"[\s\-().]")
_TURKISH_PHONE = re.compile(r"(?:\+90|0090|90|0)?[2-58][0-9]{9}")
_PLATE = re.compile(r"(0[1-9]|[1-7][0-9]|8[01]) ?[A-Z]{1,3} ?[0-9]{2,4}")
_POSTAL_CODE = re.compile(r"(0[1-9]|[1-7][0-9]|8[01])[0-9]{3}")
_SPECIAL = re.compile(r"[!@#$%^&*(),.?\":{}|<>]")


def message(key: str, language: Language | str = Language.TR, **params: Any) -> str:
    """The text registered under *key* in *language*, with ``{name}`` slots filled."""
    return MESSAGES[key].get(language).format(**params)


def is_empty(value: Any) -> bool:
    """None, the empty string, and empty lists count as no answer."""
    return value is None or value == "" or (isinstance(value, list) and not value)


# --- Turkish identifiers ---


def is_valid_tckn(value: str) -> bool:
    """Turkish national id: 11 digits, no leading zero, two check digits."""
    if len(value) != 11 or not value.isascii() or not value.isdigit() or value[0] == "0":
        return False
    d = [int(ch) for ch in value]
    odd = d[0] + d[2] + d[4] + d[6] + d[8]
    even = d[1] + d[3] + d[5] + d[7]
    if (odd * 7 - even) % 10 != d[9]:
        return False
    return sum(d[:10]) % 10 == d[10]


def is_valid_vkn(value: str) -> bool:
    """Turkish tax id: 10 digits, the last one a weighted check digit."""
    if len(value) != 10 or not value.isascii() or not value.isdigit():
        return False
    total = 0
    for i, ch in enumerate(value[:9]):
        shifted = (int(ch) + 9 - i) % 10
        weighted = (shifted * 2 ** (9 - i)) % 9
        if shifted != 0 and weighted == 0:
            weighted = 9
        total += weighted
    return (10 - total % 10) % 10 == int(value[9])


def is_valid_turkish_iban(value: str) -> bool:
    """``TR`` + 24 digits passing the ISO 13616 mod-97 check. Spaces are ignored."""
    iban = value.replace(" ", "").upper()
    if len(iban) != 26 or not iban.startswith("TR") or not iban[2:].isdigit():
        return False
    rearranged = iban[4:] + iban[:4]
    digits = "".join(str(int(ch, 36)) for ch in rearranged)
    return int(digits) % 97 == 1


def is_valid_turkish_phone(value: str) -> bool:
    return _TURKISH_PHONE.fullmatch(_PHONE_NOISE.sub("", value)) is not None


def is_valid_turkish_plate(value: str) -> bool:
    """Province code 01-81, one to three letters, two to four digits."""
    return _PLATE.fullmatch(value.strip().upper()) is not None


def is_valid_turkish_postal_code(value: str) -> bool:
    return _POSTAL_CODE.fullmatch(value.strip()) is not None


# --- Per-type checks ---


def _check_email(value: str) -> str | None:
    return None if _EMAIL.fullmatch(value) else "invalid_email"


def _check_url(value: str) -> str | None:
    parts = urlsplit(value.strip())
    if not _URL_SCHEME.fullmatch(parts.scheme) or not (parts.netloc or parts.path):
        return "invalid_url"
    return None


def _check_phone(value: str) -> str | None:
    return None if _PHONE.fullmatch(_PHONE_NOISE.sub("", value)) else "invalid_format"


def _check_json(value: Any) -> str | None:
    if not isinstance(value, str):
        return None
    try:
        json.loads(value)
    except (ValueError, RecursionError):
        return "invalid_json"
    return None


def _predicate(check: Callable[[str], bool], key: str) -> Callable[[str], str | None]:
    return lambda value: None if check(value) else key


_FORMAT_CHECKS: dict[str, Callable[[str], str | None]] = {
    "email": _check_email,
    "url": _check_url,
    "phone": _check_phone,
    "tckn": _predicate(is_valid_tckn, "invalid_tckn"),
    "vkn": _predicate(is_valid_vkn, "invalid_vkn"),
    "iban": _predicate(is_valid_turkish_iban, "invalid_iban"),
    "turkishPhone": _predicate(is_valid_turkish_phone, "invalid_phone"),
    "turkishPlate": _predicate(is_valid_turkish_plate, "invalid_plate"),
    "postalCode": _predicate(is_valid_turkish_postal_code, "invalid_postal_code"),
}


def _as_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        return float(value)
    try:
        return float(str(value).strip())
    except ValueError:
        return None


def _length_error(config: BaseFieldConfig, text: str, language: Language | str) -> str | None:
    if config.min_length and len(text) < config.min_length:
        return message("min_length", language, min=config.min_length)
    if config.max_length and len(text) > config.max_length:
        return message("max_length", language, max=config.max_length)
    return None


def _number_error(config: BaseFieldConfig, value: Any, language: Language | str) -> str | None:
    number = _as_number(value)
    if number is None:
        return message("invalid_number", language)
    if config.min is not None and number < config.min:
        return message("min_value", language, min=config.min)
    if config.max is not None and number > config.max:
        return message("max_value", language, max=config.max)
    return None


def _selection_error(config: BaseFieldConfig, value: Any, language: Language | str) -> str | None:
    count = len(value) if isinstance(value, list) else 1
    if config.min is not None and count < config.min:
        return message("min_selections", language, min=config.min)
    if config.max is not None and count > config.max:
        return message("max_selections", language, max=config.max)
    return None


def _pattern_error(pattern: str, value: str, language: Language | str) -> str | None:
    try:
        regex = re.compile(pattern)
    except re.error:
        return None
    return None if regex.search(value) else message("invalid_format", language)


def password_errors(
    value: str, config: BaseFieldConfig, language: Language | str = Language.TR
) -> list[str]:
    """Every strength rule *value* breaks, in a fixed order."""
    errors: list[str] = []
    if config.min_length and len(value) < config.min_length:
        errors.append(message("min_length", language, min=config.min_length))
    if config.require_uppercase and not any(ch.isupper() for ch in value):
        errors.append(message("password_uppercase", language))
    if config.require_lowercase and not any(ch.islower() for ch in value):
        errors.append(message("password_lowercase", language))
    if config.require_number and not any(ch.isdigit() for ch in value):
        errors.append(message("password_number", language))
    if config.require_special and _SPECIAL.search(value) is None:
        errors.append(message("password_special", language))
    return errors


def validate_field(
    field: FieldDefinition, value: Any, language: Language | str = Language.TR
) -> str | None:
    """The first rule *value* breaks for *field*, or None when it passes.

    An empty value only fails ``required``; every other rule applies to
    answered fields. ``pattern`` is checked last, on string values.
    """
    config = parse_field_config(field.type, field.config)
    if is_empty(value):
        return message("required", language) if config.required else None

    error: str | None = None
    if field.type in STRING_TYPES:
        text = value if isinstance(value, str) else str(value)
        error = _length_error(config, text, language)
        if error is None and field.type == "password":
            error = next(iter(password_errors(text, config, language)), None)
    elif field.type in NUMBER_TYPES:
        error = _number_error(config, value, language)
    elif field.type == "multiselect":
        error = _selection_error(config, value, language)
    elif field.type == "json":
        key = _check_json(value)
        error = message(key, language) if key else None
    elif field.type in _FORMAT_CHECKS:
        if not isinstance(value, str):
            error = message("invalid_format", language)
        else:
            key = _FORMAT_CHECKS[field.type](value)
            error = message(key, language) if key else None

    if error is None and config.pattern and isinstance(value, str):
        error = _pattern_error(config.pattern, value, language)
    return error


def validate_fields(
    fields: Iterable[FieldDefinition],
    values: Mapping[str, Any],
    language: Language | str = Language.TR,
) -> dict[str, str]:
    """Field name to error message, for every field whose value fails."""
    errors: dict[str, str] = {}
    for field in fields:
        error = validate_field(field, values.get(field.name), language)
        if error is not None:
            errors[field.name] = error
    return errors


def evaluate_cross_validators(
    validators: Iterable[CrossValidatorDef],
    values: Mapping[str, Any],
    language: Language | str = Language.TR,
) -> tuple[dict[str, str], list[str]]:
    """Run ``fieldsMatch`` and ``atLeastOne`` validators against *values*.

    Returns validator name to message for each failure, plus the names of
    the validators that were skipped (``custom`` ones).
    """
    errors: dict[str, str] = {}
    skipped: list[str] = []
    for validator in validators:
        custom_text = validator.message.get(language)
        if validator.type is CrossValidatorType.FIELDS_MATCH:
            first, second = validator.fields[0], validator.fields[1]
            if values.get(first) != values.get(second):
                errors[validator.name] = custom_text or message("fields_match", language)
        elif validator.type is CrossValidatorType.AT_LEAST_ONE:
            if all(is_empty(values.get(name)) for name in validator.fields):
                fallback = message("at_least_one", language, fields=", ".join(validator.fields))
                errors[validator.name] = custom_text or fallback
        else:
            skipped.append(validator.name)
    return errors, skipped
