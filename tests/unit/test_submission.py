from __future__ import annotations

import asyncio

import pytest

from bindforms.exceptions import GENERIC_BACKEND_ERROR, SubmissionError
from bindforms.field_path import unbound_path
from bindforms.store import FormStore
from bindforms.submission import SubmissionController
from bindforms.typing.enums import SubmitOutcome, ValidationSeverity
from bindforms.typing.models import (
    BackendValidationArrived,
    FieldValidated,
    FieldValueChanged,
    SingleValidationResult,
    SubmitOptions,
    ValidationResult,
)

_ERROR = SingleValidationResult(is_valid=False, severity=ValidationSeverity.ERROR, invalid_message="E")
_WARNING = SingleValidationResult(is_valid=False, severity=ValidationSeverity.WARNING, invalid_message="W")


def _validated(path: str, *validations: SingleValidationResult) -> FieldValidated:
    return FieldValidated(path=path, result=ValidationResult(validated_value=None, validations=validations))


def test_submit_sends_cleaned_payload(mocker) -> None:
    store = FormStore({"name": "Jane"})
    store.dispatch(FieldValueChanged(path=unbound_path("scratch"), value="ignored"))
    operation = mocker.AsyncMock()
    controller = SubmissionController(store, operation)

    outcome = asyncio.run(controller.submit())

    assert outcome is SubmitOutcome.SUBMITTED
    operation.assert_awaited_once_with({"name": "Jane"}, SubmitOptions(pass_as_default_body=True))
    assert store.state.submit_in_progress is False


def test_errors_block_submission(mocker) -> None:
    store = FormStore()
    store.dispatch(_validated("name", _ERROR))
    operation = mocker.AsyncMock()
    controller = SubmissionController(store, operation)

    outcome = asyncio.run(controller.submit())

    assert outcome is SubmitOutcome.BLOCKED_BY_ERRORS
    operation.assert_not_awaited()
    assert store.state.interaction_flags["name"].force_show_result is True


def test_backend_general_errors_do_not_block_resubmission(mocker) -> None:
    store = FormStore({"name": "Jane"})
    store.dispatch(BackendValidationArrived(general=(_ERROR,)))
    operation = mocker.AsyncMock()

    outcome = asyncio.run(SubmissionController(store, operation).submit())

    assert outcome is SubmitOutcome.SUBMITTED
    assert store.state.general_validation_results == ()


def test_warnings_require_confirmation(mocker) -> None:
    store = FormStore({"name": "Jane"})
    store.dispatch(_validated("name", _WARNING))
    operation = mocker.AsyncMock()
    prompt = mocker.Mock()
    controller = SubmissionController(store, operation, on_confirmation_requested=prompt)

    outcome = asyncio.run(controller.submit())

    assert outcome is SubmitOutcome.AWAITING_CONFIRMATION
    assert controller.awaiting_confirmation is True
    prompt.assert_called_once_with([_WARNING])
    operation.assert_not_awaited()

    confirmed = asyncio.run(controller.confirm())

    assert confirmed is SubmitOutcome.SUBMITTED
    operation.assert_awaited_once()
    assert controller.awaiting_confirmation is False


def test_dismissed_confirmation_does_not_submit(mocker) -> None:
    store = FormStore({"name": "Jane"})
    store.dispatch(_validated("name", _WARNING))
    operation = mocker.AsyncMock()
    controller = SubmissionController(store, operation)

    asyncio.run(controller.submit())
    controller.dismiss_confirmation()

    assert controller.awaiting_confirmation is False
    operation.assert_not_awaited()


def test_disabled_form_does_not_submit(mocker) -> None:
    store = FormStore({"name": "Jane"})
    operation = mocker.AsyncMock()
    controller = SubmissionController(store, operation)
    controller.enabled = False

    outcome = asyncio.run(controller.submit())

    assert outcome is SubmitOutcome.DISABLED
    assert store.state.interaction_flags == {}
    operation.assert_not_awaited()


def test_overlapping_submit_is_rejected() -> None:
    store = FormStore({"name": "Jane"})

    async def _slow(payload: dict, options: SubmitOptions) -> None:
        assert controller.is_enabled is False
        assert await controller.submit() is SubmitOutcome.DISABLED

    controller = SubmissionController(store, _slow)

    assert asyncio.run(controller.submit()) is SubmitOutcome.SUBMITTED


def test_structured_rejection_becomes_field_results(mocker) -> None:
    store = FormStore({"name": "Jane"})
    error = SubmissionError(
        message="Rejected",
        error_category=GENERIC_BACKEND_ERROR,
        details={"issues": [{"field": "name", "message": "X", "severity": "warning"}]},
    )
    operation = mocker.AsyncMock(side_effect=error)
    controller = SubmissionController(store, operation)

    outcome = asyncio.run(controller.submit())

    assert outcome is SubmitOutcome.FAILED
    (entry,) = store.state.validation_results["name"].validations
    assert entry.invalid_message == "X"
    assert entry.severity is ValidationSeverity.WARNING
    assert entry.from_backend is True
    assert store.state.subject == {"name": "Jane"}
    assert controller.is_enabled is True


def test_unstructured_rejection_uses_default_message(mocker) -> None:
    store = FormStore({"name": "Jane"})
    operation = mocker.AsyncMock(side_effect=RuntimeError())
    controller = SubmissionController(store, operation, default_error_message="Try again later")

    asyncio.run(controller.submit())

    (general,) = store.state.general_validation_results
    assert general.invalid_message == "Try again later"


def test_success_closes_modal_and_restores_focus(mocker) -> None:
    store = FormStore({"name": "Jane"})
    modal = mocker.Mock()
    focused = mocker.Mock()
    focus_manager = mocker.Mock()
    focus_manager.active_element.return_value = focused
    controller = SubmissionController(store, mocker.AsyncMock(), modal=modal, focus_manager=focus_manager)

    asyncio.run(controller.submit())

    modal.request_close.assert_called_once()
    focused.focus.assert_called_once()


def test_keep_modal_open_on_submit(mocker) -> None:
    store = FormStore({"name": "Jane"})
    modal = mocker.Mock()
    controller = SubmissionController(store, mocker.AsyncMock(), modal=modal, keep_modal_open_on_submit=True)

    asyncio.run(controller.submit())

    modal.request_close.assert_not_called()


def test_success_resets_form_that_started_empty(mocker) -> None:
    store = FormStore()
    store.dispatch(FieldValueChanged(path="name", value="Jane"))
    on_reset = mocker.Mock()
    controller = SubmissionController(store, mocker.AsyncMock(), on_reset=on_reset)

    asyncio.run(controller.submit())

    assert store.state.subject == {}
    assert store.state.reset_epoch == 1
    on_reset.assert_called_once()


def test_success_keeps_data_of_form_that_started_with_data(mocker) -> None:
    store = FormStore({"name": "Jane"})
    store.dispatch(FieldValueChanged(path="name", value="John"))

    asyncio.run(SubmissionController(store, mocker.AsyncMock()).submit())

    assert store.state.subject == {"name": "John"}
    assert store.state.reset_epoch == 0


def test_cancel_notifies_and_closes_modal(mocker) -> None:
    modal = mocker.Mock()
    on_cancel = mocker.Mock()
    controller = SubmissionController(FormStore(), modal=modal, on_cancel=on_cancel)

    controller.cancel()

    on_cancel.assert_called_once()
    modal.request_close.assert_called_once()


def test_reset_restores_original_subject_and_cancels_validation(mocker) -> None:
    store = FormStore({"name": "Jane"})
    store.dispatch(FieldValueChanged(path="name", value="John"))
    scheduler = mocker.Mock()
    controller = SubmissionController(store, scheduler=scheduler)

    controller.reset()

    scheduler.cancel_all.assert_called_once()
    assert store.state.subject == {"name": "Jane"}
    assert store.state.reset_epoch == 1


def test_explicit_empty_data_is_not_reset_after_success(mocker) -> None:
    store = FormStore({})
    store.dispatch(FieldValueChanged(path="name", value="Jane"))

    asyncio.run(SubmissionController(store, mocker.AsyncMock()).submit())

    assert store.state.subject == {"name": "Jane"}
    assert store.state.reset_epoch == 0


def test_interrupted_submission_leaves_form_usable(mocker) -> None:
    store = FormStore({"name": "Jane"})
    operation = mocker.AsyncMock(side_effect=asyncio.CancelledError)
    controller = SubmissionController(store, operation)

    with pytest.raises(asyncio.CancelledError):
        asyncio.run(controller.submit())

    assert store.state.submit_in_progress is False
    assert controller.is_enabled is True

    operation.side_effect = None
    assert asyncio.run(controller.submit()) is SubmitOutcome.SUBMITTED
