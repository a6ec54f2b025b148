"""Typed views over the open per-field ``config`` map.

A field stores its configuration as a plain dict so unknown keys survive
import/export untouched. Consumers that need types (the code generator,
form checks, formula evaluation) ask :func:`parse_field_config` for the
variant registered under the field's type tag. Each variant knows a fixed
set of keys; everything else is kept in ``extra``.

Parsing never raises. A recognized key holding a value of the wrong
shape is moved to ``extra`` and reported via ``invalid_keys``.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from formctl.domain.models import ConditionalRule, SelectOption, parse_rule

type Number = int | float


class BaseFieldConfig(BaseModel):
    """Keys every field type understands."""

    model_config = {
        "frozen": True,
        "alias_generator": to_camel,
        "populate_by_name": True,
        "extra": "ignore",
    }

    required: bool = False
    min_length: int | None = None
    max_length: int | None = None
    min: Number | None = None
    max: Number | None = None
    pattern: str | None = None
    placeholder: str | None = None
    hint: str | None = None
    options: list[SelectOption] | None = None
    rows: int | None = None
    accept: str | None = None
    max_size: Number | None = None
    currency: str | None = None
    integer: bool = False
    require_uppercase: bool = False
    require_lowercase: bool = False
    require_number: bool = False
    require_special: bool = False
    show_when: ConditionalRule | None = None
    hide_when: ConditionalRule | None = None
    disable_when: ConditionalRule | None = None

    extra: dict[str, Any] = Field(default_factory=dict, exclude=True)
    invalid_keys: tuple[str, ...] = Field(default=(), exclude=True)

    @field_validator("show_when", "hide_when", "disable_when", mode="before")
    @classmethod
    def _lenient_rule(cls, value: Any) -> Any:
        return parse_rule(value)


class SliderConfig(BaseFieldConfig):
    step: Number | None = None
    show_value: bool = True
    unit: str | None = None


class CalculatedConfig(BaseFieldConfig):
    formula: str = ""
    decimals: int = 2
    prefix: str | None = None
    suffix: str | None = None


class SignatureConfig(BaseFieldConfig):
    width: int = 400
    height: int = 150
    pen_color: str = "#000000"
    background_color: str = "#ffffff"


CONFIG_VARIANTS: dict[str, type[BaseFieldConfig]] = {
    "slider": SliderConfig,
    "calculated": CalculatedConfig,
    "signature": SignatureConfig,
}


def config_model_for(field_type: str) -> type[BaseFieldConfig]:
    """Return the config variant for *field_type* (base model when unregistered)."""
    return CONFIG_VARIANTS.get(field_type, BaseFieldConfig)


def _known_aliases(model: type[BaseFieldConfig]) -> set[str]:
    """Wire keys (camelCase aliases) that *model* recognizes."""
    return {
        info.alias or name
        for name, info in model.model_fields.items()
        if name not in {"extra", "invalid_keys"}
    }


def parse_field_config(field_type: str, config: Mapping[str, Any]) -> BaseFieldConfig:
    """Build the typed view of *config* for a field of *field_type*."""
    model = config_model_for(field_type)
    known = _known_aliases(model)

    recognized = {key: value for key, value in config.items() if key in known}
    extra = {key: value for key, value in config.items() if key not in known}
    invalid: list[str] = []

    while True:
        try:
            parsed = model.model_validate(recognized)
            break
        except ValidationError as exc:
            locs = {str(err["loc"][0]) for err in exc.errors() if err["loc"]}
            bad = [key for key in recognized if key in locs or _snake(key) in locs]
            if not bad:
                bad = list(recognized)
            for key in bad:
                extra[key] = recognized.pop(key)
                invalid.append(key)

    return parsed.model_copy(update={"extra": extra, "invalid_keys": tuple(sorted(invalid))})


def _snake(alias: str) -> str:
    return "".join(f"_{ch.lower()}" if ch.isupper() else ch for ch in alias)
