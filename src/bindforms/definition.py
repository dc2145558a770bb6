"""JSON form definitions: loading and mounting onto a form."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from bindforms import logger
from bindforms.exceptions import DefinitionError
from bindforms.form import Form
from bindforms.repeating import RepeatingFieldGroup
from bindforms.settings import get_settings
from bindforms.typing.enums import FieldType
from bindforms.typing.models import FormDefinition

if TYPE_CHECKING:
    from collections.abc import Mapping
    from pathlib import Path

    from bindforms.form import FieldBinding
    from bindforms.settings import Settings
    from bindforms.typing.models import FieldDefinition
    from bindforms.typing.protocol import CustomValidator, SubmitOperation


def _read_json(path: Path) -> Any:
    if not path.is_file():
        raise DefinitionError(message=f"File not found: {path}")
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise DefinitionError(message=f"Invalid JSON in {path}: {exc}") from exc


def load_form_definition(path: Path) -> FormDefinition:
    """Load a form definition file.

    Args:
        path (Path): JSON definition path.

    Raises:
        DefinitionError: If the file is missing, is not JSON or does not describe a form.

    Returns:
        FormDefinition: Parsed definition.
    """
    payload = _read_json(path)
    try:
        definition = FormDefinition.model_validate(payload)
    except ValidationError as exc:
        raise DefinitionError(message=f"Invalid form definition in {path}: {exc}") from exc
    logger.info("Form definition loaded", extra={"path": str(path), "fields": len(definition.fields)})
    return definition


def load_form_data(path: Path) -> dict[str, Any]:
    """Load a JSON object used as form data.

    Raises:
        DefinitionError: If the file is missing or does not hold a JSON object.
    """
    payload = _read_json(path)
    if not isinstance(payload, dict):
        raise DefinitionError(message=f"Form data in {path} must be a JSON object")
    return payload


def _field_options(field: FieldDefinition, checks: Mapping[str, CustomValidator]) -> dict[str, Any]:
    return {
        "rules": field.validations,
        "check": checks.get(field.bind_to or ""),
        "validation_mode": field.validation_mode,
        "debounce_ms": field.custom_validations_debounce,
        "enabled": field.enabled,
        "initial_value": field.initial_value,
    }


def _mount_field(
    form: Form,
    field: FieldDefinition,
    checks: Mapping[str, CustomValidator],
    parent: RepeatingFieldGroup | None = None,
    index: int | None = None,
) -> FieldBinding | RepeatingFieldGroup:
    options = _field_options(field, checks)
    if parent is None:
        binding = form.bind(field.bind_to, **options)
    else:
        binding = parent.bind_item(index or 0, field.bind_to, **options)

    if field.type is not FieldType.ITEMS:
        return binding

    group = RepeatingFieldGroup(binding)
    for item_index in range(len(group.items)):
        for child in field.items:
            _mount_field(form, child, checks, group, item_index)
    return group


def mount_definition(
    form: Form,
    definition: FormDefinition,
    *,
    checks: Mapping[str, CustomValidator] | None = None,
) -> list[FieldBinding | RepeatingFieldGroup]:
    """Bind every field of a definition onto a form.

    Fields of type ``items`` become repeating groups; their children are bound once per
    item already present in the data.

    Args:
        form (Form): Target form.
        definition (FormDefinition): Parsed definition.
        checks (Mapping[str, CustomValidator] | None): Custom checks keyed by binding name.

    Returns:
        list[FieldBinding | RepeatingFieldGroup]: Top-level bindings, in definition order.
    """
    return [_mount_field(form, field, checks or {}) for field in definition.fields]


def build_form(
    definition: FormDefinition,
    *,
    data: dict[str, Any] | None = None,
    submit_operation: SubmitOperation | None = None,
    settings: Settings | None = None,
    checks: Mapping[str, CustomValidator] | None = None,
    **form_options: Any,
) -> Form:
    """Create a form from a definition and mount its fields.

    Args:
        definition (FormDefinition): Parsed definition.
        data (dict[str, Any] | None): Initial data overriding the definition's own.
        submit_operation (SubmitOperation | None): External submit operation.
        settings (Settings | None): Runtime settings supplying form defaults.
        checks (Mapping[str, CustomValidator] | None): Custom checks keyed by binding name.
        **form_options (Any): Further ``Form`` options.

    Returns:
        Form: The mounted form.
    """
    settings = settings or get_settings()
    keep_open = definition.keep_modal_open_on_submit
    form = Form(
        data if data is not None else definition.data,
        submit_operation=submit_operation,
        enabled=definition.enabled,
        validation_mode=settings.validation_mode,
        debounce_ms=settings.custom_validations_debounce,
        keep_modal_open_on_submit=settings.keep_modal_open_on_submit if keep_open is None else keep_open,
        default_error_message=settings.default_submit_error_message,
        **form_options,
    )
    mount_definition(form, definition, checks=checks)
    return form
