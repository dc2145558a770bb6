from __future__ import annotations

import asyncio

import httpx

from bindforms.form import Form
from bindforms.http_submit import HttpSubmitOperation
from bindforms.settings import DEFAULT_SUBMIT_ERROR_MESSAGE, Settings
from bindforms.typing.enums import SubmitOutcome, ValidationMode, ValidationSeverity
from bindforms.typing.models import FormItemValidations, Reset, Submitted


def _http_operation(*responses: httpx.Response) -> tuple[HttpSubmitOperation, list[httpx.Request]]:
    seen: list[httpx.Request] = []
    queue = list(responses)

    def _handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return queue.pop(0)

    operation = HttpSubmitOperation(
        "https://api.example.test/forms",
        has_initial_data=True,
        settings=Settings(),
        transport=httpx.MockTransport(_handler),
    )
    return operation, seen


def test_required_empty_field_blocks_submission(mocker) -> None:
    operation = mocker.AsyncMock()
    form = Form(submit_operation=operation)
    name = form.bind("name", rules=FormItemValidations(required=True))

    assert name.props().helper_text_shown is False

    outcome = asyncio.run(form.submit())

    assert outcome is SubmitOutcome.BLOCKED_BY_ERRORS
    operation.assert_not_awaited()
    props = name.props()
    assert props.helper_text_shown is True
    assert props.validation_status is ValidationSeverity.ERROR


def test_min_length_fails_without_required() -> None:
    form = Form({"name": "Bo"})
    form.bind("name", rules=FormItemValidations(min_length=3))

    result = form.state.validation_results["name"]

    assert result.is_valid is False
    (validation,) = result.validations
    assert validation.invalid_message == "Input should be at least 3 characters"


def test_backend_warning_lands_on_field_and_clears_after_success() -> None:
    operation, seen = _http_operation(
        httpx.Response(
            422,
            json={"message": "Invalid", "details": {"issues": [{"field": "name", "message": "X", "severity": "warning"}]}},
        ),
        httpx.Response(200),
    )
    warnings_shown = []
    form = Form(
        {"name": "Jane"},
        submit_operation=operation,
        on_confirmation_requested=warnings_shown.append,
    )
    form.bind("name")

    assert asyncio.run(form.submit()) is SubmitOutcome.FAILED

    (entry,) = form.state.validation_results["name"].validations
    assert entry.invalid_message == "X"
    assert entry.severity is ValidationSeverity.WARNING
    assert entry.from_backend is True
    assert form.general_validation_results == ()

    assert asyncio.run(form.submit()) is SubmitOutcome.AWAITING_CONFIRMATION
    assert len(warnings_shown) == 1

    assert asyncio.run(form.confirm()) is SubmitOutcome.SUBMITTED
    assert form.state.validation_results["name"].validations == ()
    assert [request.method for request in seen] == ["PUT", "PUT"]


def test_unstructured_rejection_becomes_general_error() -> None:
    operation, _ = _http_operation(httpx.Response(500, text="boom"))
    form = Form({"name": "Jane"}, submit_operation=operation)
    form.bind("name")

    assert asyncio.run(form.submit()) is SubmitOutcome.FAILED

    (general,) = form.general_validation_results
    assert general.invalid_message == DEFAULT_SUBMIT_ERROR_MESSAGE
    assert general.severity is ValidationSeverity.ERROR
    assert form.state.submit_in_progress is False


def test_repeating_group_payload(mocker) -> None:
    operation = mocker.AsyncMock()
    form = Form(submit_operation=operation)
    group = form.repeating_group("arrayItems")

    group.add_item({"name": "John"})
    group.add_item({"name": "Peter"})
    outcome = asyncio.run(form.submit())

    assert outcome is SubmitOutcome.SUBMITTED
    payload, _ = operation.await_args.args
    assert payload == {"arrayItems": [{"name": "John"}, {"name": "Peter"}]}


def test_on_changed_mode_shows_helper_text_immediately() -> None:
    form = Form(validation_mode=ValidationMode.ON_CHANGED)
    email = form.bind("email", rules=FormItemValidations(pattern="email"))

    email.on_change("not-an-email")

    props = email.props()
    assert props.helper_text_shown is True
    assert props.validation_status is ValidationSeverity.ERROR


def test_submitted_twice_is_idempotent() -> None:
    form = Form({"name": "Jane"})
    form.bind("name")

    form.store.dispatch(Submitted())
    first = form.state
    form.store.dispatch(Submitted())

    assert form.state.general_validation_results == ()
    assert form.state.subject == first.subject


def test_reset_bumps_epoch_and_restores_subject() -> None:
    form = Form({"name": "Jane"})
    name = form.bind("name")
    name.on_change("Changed")
    epoch = form.state.reset_epoch

    form.store.dispatch(Reset(original_subject={"name": "Other"}))

    assert form.state.reset_epoch > epoch
    assert form.state.subject == {"name": "Other"}


def test_pending_custom_check_result_is_dropped_after_reset() -> None:
    async def _scenario() -> Form:
        release = asyncio.Event()

        async def _check(value):
            await release.wait()
            return {"isValid": value != "Changed", "invalidMessage": "late"}

        form = Form({"name": "Jane"})
        name = form.bind("name", check=_check)
        name.on_change("Changed")
        form.reset()
        release.set()
        await form.settle()
        return form

    form = asyncio.run(_scenario())

    result = form.state.validation_results["name"]
    assert result.validated_value == "Jane"
    assert result.is_valid is True
