"""Built-in validation rules and the custom asynchronous check.

``evaluate_sync`` runs ``required`` first. When it is configured and fails, it is the only
reported result. Otherwise length, range, pattern and regex each run independently and
every configured one is reported.
"""

from __future__ import annotations

import math
import re
from collections.abc import Mapping, Sized
from functools import lru_cache
from typing import TYPE_CHECKING, Any
from urllib.parse import urlsplit

from bindforms import logger
from bindforms.typing.enums import NamedPattern, ValidationSeverity
from bindforms.typing.models import SingleValidationResult, ValidationResult

if TYPE_CHECKING:
    from bindforms.typing.models import FormItemValidations
    from bindforms.typing.protocol import CustomValidator

REQUIRED_MESSAGE = "This field is required"
REGEX_MESSAGE = "Input is not in the correct format"
CUSTOM_MESSAGE = "Invalid input"

_EMAIL = re.compile(r"^[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+@[a-zA-Z0-9-]+(?:\.[a-zA-Z0-9-]+)*$")
_PHONE = re.compile(r"^[a-zA-Z0-9#*)(+.\-_&']+$")
_DELIMITED_REGEX = re.compile(r"^([/~@;%#'])(.*?)\1([gimsuy]*)$", re.DOTALL)
_REGEX_FLAGS = {"i": re.IGNORECASE, "m": re.MULTILINE, "s": re.DOTALL}
_PATTERN_MESSAGES = {
    NamedPattern.EMAIL: "Not a valid email address",
    NamedPattern.PHONE: "Not a valid phone number",
    NamedPattern.URL: "Not a valid URL",
}


def is_input_empty(value: Any) -> bool:
    """Return whether a value counts as missing for ``required``.

    Args:
        value: Field value.

    Returns:
        bool: True for None, blank strings and empty collections.
    """
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, bool | int | float):
        return False
    if isinstance(value, Sized):
        return len(value) == 0
    return False


def _pluralize(count: float, word: str) -> str:
    return word if count == 1 else f"{word}s"


def _format_number(number: float) -> str:
    return str(int(number)) if float(number).is_integer() else str(number)


def _as_number(value: Any) -> float:
    """Coerce a value to a number; unparsable input becomes NaN, which fails every bound."""
    if value is None:
        return 0.0
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, int | float):
        return float(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0.0
        try:
            return float(text)
        except ValueError:
            return math.nan
    logger.warning("Range can only be used on strings and numbers", extra={"value_type": type(value).__name__})
    try:
        return float(value)
    except (TypeError, ValueError):
        return math.nan


def _length_within(value: Any, minimum: int | None, maximum: int | None) -> bool:
    text = "" if value is None else value
    if not isinstance(text, str):
        logger.warning("Length can only be used on strings", extra={"value_type": type(text).__name__})
        return True
    if minimum is not None and len(text) < minimum:
        return False
    return maximum is None or len(text) <= maximum


@lru_cache(maxsize=256)
def compile_user_regex(source: str) -> re.Pattern[str]:
    """Compile an author-supplied regex.

    ``/pattern/flags`` (or the same form with ``~ @ ; % # '`` delimiters) carries flags;
    anything else is taken as a literal pattern.

    Args:
        source: Regex as written in the field configuration.

    Returns:
        re.Pattern[str]: Compiled expression.
    """
    match = _DELIMITED_REGEX.match(source)
    if match is None:
        return re.compile(source)
    flags = 0
    for flag in match.group(3):
        flags |= _REGEX_FLAGS.get(flag, 0)
    return re.compile(match.group(2), flags)


def _is_http_url(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    try:
        parts = urlsplit(value.strip())
    except ValueError:
        return False
    return parts.scheme in {"http", "https"} and bool(parts.netloc)


def validate_required(rules: FormItemValidations, value: Any) -> SingleValidationResult | None:
    """Evaluate ``required``."""
    if not rules.required:
        return None
    return SingleValidationResult(
        is_valid=not is_input_empty(value),
        invalid_message=rules.required_invalid_message or REQUIRED_MESSAGE,
        severity=ValidationSeverity.ERROR,
    )


def validate_length(rules: FormItemValidations, value: Any) -> SingleValidationResult | None:
    """Evaluate ``minLength``/``maxLength``."""
    minimum, maximum = rules.min_length, rules.max_length
    if minimum is None and maximum is None:
        return None
    if maximum is None:
        message = f"Input should be at least {minimum} {_pluralize(minimum, 'character')}"
    elif minimum is None:
        message = f"Input should be up to {maximum} {_pluralize(maximum, 'character')}"
    else:
        message = f"Input length should be between {minimum} and {maximum}"
    return SingleValidationResult(
        is_valid=_length_within(value, minimum, maximum),
        invalid_message=rules.length_invalid_message or message,
        severity=rules.length_invalid_severity,
    )


def validate_range(rules: FormItemValidations, value: Any) -> SingleValidationResult | None:
    """Evaluate ``minValue``/``maxValue`` after numeric coercion."""
    minimum, maximum = rules.min_value, rules.max_value
    if minimum is None and maximum is None:
        return None
    number = _as_number(value)
    if maximum is None:
        is_valid = number >= minimum
        message = f"Input should be bigger than {_format_number(minimum)}"
    elif minimum is None:
        is_valid = number <= maximum
        message = f"Input should be smaller than {_format_number(maximum)}"
    else:
        is_valid = minimum <= number <= maximum
        message = f"Input should be between {_format_number(minimum)} and {_format_number(maximum)}"
    return SingleValidationResult(
        is_valid=is_valid,
        invalid_message=rules.range_invalid_message or message,
        severity=rules.range_invalid_severity,
    )


def validate_pattern(rules: FormItemValidations, value: Any) -> SingleValidationResult | None:
    """Evaluate a named pattern (``email``, ``phone`` or ``url``)."""
    if not rules.pattern:
        return None
    try:
        pattern = NamedPattern(rules.pattern.lower())
    except ValueError:
        logger.warning("Unknown pattern provided", extra={"pattern": rules.pattern})
        return SingleValidationResult(is_valid=True, severity=ValidationSeverity.VALID)

    text = "" if value is None else str(value)
    if pattern is NamedPattern.URL:
        is_valid = _is_http_url(value)
    else:
        is_valid = bool((_EMAIL if pattern is NamedPattern.EMAIL else _PHONE).fullmatch(text))
    if is_valid and pattern is NamedPattern.URL:
        return SingleValidationResult(is_valid=True, severity=ValidationSeverity.VALID)
    return SingleValidationResult(
        is_valid=is_valid,
        invalid_message=rules.pattern_invalid_message or _PATTERN_MESSAGES[pattern],
        severity=rules.pattern_invalid_severity,
    )


def validate_regex(rules: FormItemValidations, value: Any) -> SingleValidationResult | None:
    """Evaluate the author-supplied ``regex``."""
    if rules.regex is None:
        return None
    text = "" if value is None else value
    if isinstance(text, str):
        is_valid = compile_user_regex(rules.regex).search(text) is not None
    else:
        logger.warning("Regex can only be used on strings", extra={"value_type": type(text).__name__})
        is_valid = True
    return SingleValidationResult(
        is_valid=is_valid,
        invalid_message=rules.regex_invalid_message or REGEX_MESSAGE,
        severity=rules.regex_invalid_severity,
    )


_INDEPENDENT_RULES = (validate_length, validate_range, validate_pattern, validate_regex)


def evaluate_sync(rules: FormItemValidations, value: Any) -> list[SingleValidationResult]:
    """Run the built-in rules against one value.

    Args:
        rules: Field rule set.
        value: Value to check.

    Returns:
        list[SingleValidationResult]: One entry per configured rule that ran.
    """
    if rules.is_empty:
        return []
    required = validate_required(rules, value)
    if required is not None and not required.is_valid:
        return [required]

    results = [] if required is None else [required]
    for rule in _INDEPENDENT_RULES:
        result = rule(rules, value)
        if result is not None:
            results.append(result)
    return results


def _coerce_custom_result(raw: Any) -> SingleValidationResult:
    if isinstance(raw, SingleValidationResult):
        return raw
    if isinstance(raw, Mapping):
        return SingleValidationResult.model_validate(raw)
    return SingleValidationResult(
        is_valid=bool(raw),
        invalid_message=CUSTOM_MESSAGE,
        severity=ValidationSeverity.ERROR,
    )


def normalize_custom_outcome(outcome: Any) -> list[SingleValidationResult]:
    """Turn a custom check's return value into tagged results.

    Args:
        outcome: A boolean, one result (model or mapping), a sequence of results, or None.

    Returns:
        list[SingleValidationResult]: Results tagged as asynchronous.
    """
    if outcome is None:
        return []
    if isinstance(outcome, bool):
        raw_results: list[Any] = [
            SingleValidationResult(
                is_valid=outcome,
                invalid_message=CUSTOM_MESSAGE,
                severity=ValidationSeverity.ERROR,
            ),
        ]
    elif isinstance(outcome, list | tuple):
        raw_results = list(outcome)
    else:
        raw_results = [outcome]
    return [_coerce_custom_result(raw).model_copy(update={"is_async": True}) for raw in raw_results]


async def evaluate_custom(check: CustomValidator, value: Any) -> list[SingleValidationResult]:
    """Await the custom check for exactly ``value``.

    A check that raises produces one failing ``error`` result instead of propagating.

    Args:
        check: Author-supplied asynchronous check.
        value: Value captured when the check was requested.

    Returns:
        list[SingleValidationResult]: Results tagged as asynchronous.
    """
    try:
        outcome = await check(value)
        return normalize_custom_outcome(outcome)
    except Exception as exc:
        logger.exception("Custom validation raised", extra={"error": str(exc)})
        return [
            SingleValidationResult(
                is_valid=False,
                invalid_message=f"Validation failed: {exc}",
                severity=ValidationSeverity.ERROR,
                is_async=True,
            ),
        ]


async def evaluate_async(
    rules: FormItemValidations,
    check: CustomValidator | None,
    value: Any,
) -> list[SingleValidationResult]:
    """Run the built-in rules and then the custom check.

    Args:
        rules: Field rule set.
        check: Author-supplied asynchronous check, if any.
        value: Value to check.

    Returns:
        list[SingleValidationResult]: Synchronous results followed by asynchronous ones.
    """
    results = evaluate_sync(rules, value)
    if check is not None:
        results.extend(await evaluate_custom(check, value))
    return results


def pre_validate(rules: FormItemValidations, check: CustomValidator | None, value: Any) -> ValidationResult:
    """Build the immediate, synchronous-only field result.

    The result is partial when a custom check is still to run.
    """
    return ValidationResult(
        validated_value=value,
        is_partial=check is not None,
        validations=tuple(evaluate_sync(rules, value)),
    )


async def validate(rules: FormItemValidations, check: CustomValidator | None, value: Any) -> ValidationResult:
    """Build the complete field result, including the custom check."""
    return ValidationResult(
        validated_value=value,
        is_partial=False,
        validations=tuple(await evaluate_async(rules, check, value)),
    )
