from __future__ import annotations

import pytest

from bindforms.typing.enums import FieldType, ValidationMode, ValidationSeverity


def test_validation_mode_from_str() -> None:
    assert ValidationMode.from_str("onLostFocus") == ValidationMode.ON_LOST_FOCUS


def test_validation_mode_from_str_raises_on_invalid_value() -> None:
    with pytest.raises(ValueError, match="Expected one of"):
        ValidationMode.from_str("eventually")


def test_severity_rank_orders_error_above_warning() -> None:
    ranked = sorted(ValidationSeverity, key=lambda severity: severity.rank)

    assert ranked == [
        ValidationSeverity.NONE,
        ValidationSeverity.VALID,
        ValidationSeverity.WARNING,
        ValidationSeverity.ERROR,
    ]


def test_field_type_to_str() -> None:
    assert FieldType.DATE_PICKER.to_str() == "datePicker"
