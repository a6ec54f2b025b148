"""Field type catalog and starter templates.

The catalog is the palette an editor offers: every supported type tag,
its category, and the config a freshly added field starts with.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any

from formctl.domain.models import FieldDraft
from formctl.domain.types import FieldCategory


@dataclass(frozen=True)
class FieldTypeSpec:
    """A palette entry."""

    type: str
    label_tr: str
    label_en: str
    category: FieldCategory
    default_config: dict[str, Any] = field(default_factory=lambda: {"required": False})


FIELD_TYPES: tuple[FieldTypeSpec, ...] = (
    # Basic
    FieldTypeSpec(
        "string",
        "Metin",
        "Text",
        FieldCategory.BASIC,
        {"required": False, "minLength": 0, "maxLength": 255},
    ),
    FieldTypeSpec(
        "textarea",
        "Çok Satırlı Metin",
        "Textarea",
        FieldCategory.BASIC,
        {"required": False, "rows": 4},
    ),
    FieldTypeSpec("number", "Sayı", "Number", FieldCategory.BASIC),
    FieldTypeSpec("email", "E-posta", "Email", FieldCategory.BASIC),
    FieldTypeSpec(
        "password", "Şifre", "Password", FieldCategory.BASIC, {"required": False, "minLength": 8}
    ),
    FieldTypeSpec("url", "URL", "URL", FieldCategory.BASIC),
    FieldTypeSpec("phone", "Telefon", "Phone", FieldCategory.BASIC),
    # Selection
    FieldTypeSpec(
        "select", "Seçim", "Select", FieldCategory.SELECTION, {"required": False, "options": []}
    ),
    FieldTypeSpec(
        "multiselect",
        "Çoklu Seçim",
        "Multi Select",
        FieldCategory.SELECTION,
        {"required": False, "options": []},
    ),
    FieldTypeSpec("boolean", "Evet/Hayır", "Checkbox", FieldCategory.SELECTION),
    # Advanced
    FieldTypeSpec("date", "Tarih", "Date", FieldCategory.ADVANCED),
    FieldTypeSpec("time", "Saat", "Time", FieldCategory.ADVANCED),
    FieldTypeSpec("color", "Renk", "Color", FieldCategory.ADVANCED),
    FieldTypeSpec(
        "rating", "Puanlama", "Rating", FieldCategory.ADVANCED, {"required": False, "max": 5}
    ),
    FieldTypeSpec(
        "money", "Para", "Money", FieldCategory.ADVANCED, {"required": False, "currency": "TRY"}
    ),
    FieldTypeSpec("percent", "Yüzde", "Percent", FieldCategory.ADVANCED),
    FieldTypeSpec(
        "slider",
        "Kaydırıcı",
        "Slider",
        FieldCategory.ADVANCED,
        {"required": False, "min": 0, "max": 100, "step": 1, "showValue": True},
    ),
    # Special
    FieldTypeSpec("file", "Dosya", "File", FieldCategory.SPECIAL),
    FieldTypeSpec("tags", "Etiketler", "Tags", FieldCategory.SPECIAL),
    FieldTypeSpec("slug", "Slug", "Slug", FieldCategory.SPECIAL),
    FieldTypeSpec("json", "JSON", "JSON", FieldCategory.SPECIAL),
    FieldTypeSpec(
        "calculated",
        "Hesaplanan Alan",
        "Calculated Field",
        FieldCategory.SPECIAL,
        {"formula": "", "decimals": 2},
    ),
    FieldTypeSpec(
        "signature",
        "İmza",
        "Signature",
        FieldCategory.SPECIAL,
        {
            "required": False,
            "width": 400,
            "height": 150,
            "penColor": "#000000",
            "backgroundColor": "#ffffff",
        },
    ),
)

_BY_TYPE: dict[str, FieldTypeSpec] = {spec.type: spec for spec in FIELD_TYPES}


def get_field_type(field_type: str) -> FieldTypeSpec | None:
    return _BY_TYPE.get(field_type)


def default_config(field_type: str) -> dict[str, Any]:
    """A fresh copy of the starting config for *field_type*."""
    spec = _BY_TYPE.get(field_type)
    if spec is None:
        return {"required": False}
    return copy.deepcopy(spec.default_config)


# --- Templates ---


@dataclass(frozen=True)
class FormTemplate:
    id: str
    name: str
    fields: tuple[FieldDraft, ...]


FORM_TEMPLATES: tuple[FormTemplate, ...] = (
    FormTemplate(
        id="contact",
        name="İletişim Formu / Contact Form",
        fields=(
            FieldDraft(
                type="string",
                name="name",
                label="Ad Soyad / Full Name",
                config={"required": True},
            ),
            FieldDraft(
                type="email",
                name="email",
                label="E-posta / Email",
                config={"required": True},
            ),
            FieldDraft(
                type="phone",
                name="phone",
                label="Telefon / Phone",
                config={"required": False},
            ),
            FieldDraft(
                type="textarea",
                name="message",
                label="Mesaj / Message",
                config={"required": True, "rows": 5},
            ),
        ),
    ),
    FormTemplate(
        id="registration",
        name="Kayıt Formu / Registration Form",
        fields=(
            FieldDraft(
                type="string",
                name="username",
                label="Kullanıcı Adı / Username",
                config={"required": True, "minLength": 3},
            ),
            FieldDraft(
                type="email",
                name="email",
                label="E-posta / Email",
                config={"required": True},
            ),
            FieldDraft(
                type="password",
                name="password",
                label="Şifre / Password",
                config={
                    "required": True,
                    "minLength": 8,
                    "requireUppercase": True,
                    "requireNumber": True,
                },
            ),
            FieldDraft(
                type="date",
                name="birthDate",
                label="Doğum Tarihi / Birth Date",
                config={"required": True},
            ),
            FieldDraft(
                type="boolean",
                name="acceptTerms",
                label="Şartları Kabul Et / Accept Terms",
                config={"required": True},
            ),
        ),
    ),
)


def get_template(template_id: str) -> FormTemplate | None:
    return next((t for t in FORM_TEMPLATES if t.id == template_id), None)
