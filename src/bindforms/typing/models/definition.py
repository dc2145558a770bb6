"""Declarative form definition models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from bindforms.typing.enums import FieldType, ValidationMode
from bindforms.typing.models.validation import FormItemValidations


class FieldDefinition(FormItemValidations):
    """One bound field as authored in a form definition.

    Validation props sit flat on the field, the way authors write them.
    """

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    bind_to: str | None = None
    type: FieldType = FieldType.TEXT
    label: str | None = None
    enabled: bool = True
    initial_value: Any = None
    validation_mode: ValidationMode | None = None
    custom_validations_debounce: int | None = Field(default=None, ge=0)
    items: list[FieldDefinition] = Field(default_factory=list)

    @model_validator(mode="after")
    def _items_require_collection_type(self) -> FieldDefinition:
        if self.items and self.type != FieldType.ITEMS:
            raise ValueError("Child items are only allowed on fields of type 'items'")  # noqa: TRY003
        return self

    @property
    def validations(self) -> FormItemValidations:
        """Return the rule set extracted from the field props."""
        return FormItemValidations.model_validate(
            self.model_dump(include=set(FormItemValidations.model_fields)),
        )


class FormDefinition(BaseModel):
    """Form-level definition: initial data, submission target and fields."""

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    data: dict[str, Any] | None = None
    submit_url: str | None = None
    submit_method: str | None = None
    keep_modal_open_on_submit: bool | None = None
    enabled: bool = True
    fields: list[FieldDefinition] = Field(default_factory=list)
