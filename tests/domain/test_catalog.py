"""Tests for the field type catalog and templates."""

from __future__ import annotations

from formctl.domain.catalog import (
    FIELD_TYPES,
    FORM_TEMPLATES,
    default_config,
    get_field_type,
    get_template,
)
from formctl.domain.types import FieldCategory
from formctl.services.generator import FIELD_CLASSES, VALUE_TYPES


class TestFieldTypes:
    def test_unique_type_tags(self) -> None:
        tags = [spec.type for spec in FIELD_TYPES]
        assert len(tags) == len(set(tags))

    def test_every_type_has_a_value_type(self) -> None:
        for spec in FIELD_TYPES:
            assert spec.type in VALUE_TYPES, spec.type

    def test_lookup(self) -> None:
        spec = get_field_type("slider")
        assert spec is not None
        assert spec.category is FieldCategory.ADVANCED
        assert get_field_type("nope") is None

    def test_default_config_is_a_fresh_copy(self) -> None:
        first = default_config("select")
        first["options"].append({"value": "x", "label": "X"})
        assert default_config("select") == {"required": False, "options": []}

    def test_unknown_type_default(self) -> None:
        assert default_config("mystery") == {"required": False}

    def test_basic_types_map_to_classes(self) -> None:
        for spec in FIELD_TYPES:
            if spec.category is FieldCategory.BASIC:
                assert spec.type in FIELD_CLASSES


class TestTemplates:
    def test_known_templates(self) -> None:
        assert {t.id for t in FORM_TEMPLATES} == {"contact", "registration"}

    def test_template_field_names_unique(self) -> None:
        for template in FORM_TEMPLATES:
            names = [f.name for f in template.fields]
            assert len(names) == len(set(names))

    def test_get_template(self) -> None:
        template = get_template("contact")
        assert template is not None
        assert template.fields[1].name == "email"
        assert get_template("missing") is None
