"""Submit, cancel and reset orchestration for one form instance."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from bindforms import field_path, logger
from bindforms.backend_errors import map_submission_error
from bindforms.settings import DEFAULT_SUBMIT_ERROR_MESSAGE
from bindforms.typing.enums import SubmitOutcome, ValidationSeverity
from bindforms.typing.models import (
    BackendValidationArrived,
    Reset,
    SubmitCancelled,
    SubmitOptions,
    Submitted,
    Submitting,
    TriedToSubmit,
)
from bindforms.validation.display import group_invalid_results_by_severity

if TYPE_CHECKING:
    from collections.abc import Callable

    from bindforms.store import FormStore
    from bindforms.typing.models import SingleValidationResult
    from bindforms.typing.protocol import (
        ConfirmationPrompt,
        FocusManager,
        ModalContext,
        SubmitOperation,
    )
    from bindforms.validation.scheduler import AsyncValidationScheduler


class SubmissionController:
    """Drives a form's store through submission, cancellation and reset.

    A submission rejection never escapes: it is mapped into general and per-field
    backend results and the form stays populated and usable.
    """

    def __init__(  # noqa: PLR0913
        self,
        store: FormStore,
        submit_operation: SubmitOperation | None = None,
        *,
        scheduler: AsyncValidationScheduler | None = None,
        modal: ModalContext | None = None,
        focus_manager: FocusManager | None = None,
        keep_modal_open_on_submit: bool = False,
        default_error_message: str = DEFAULT_SUBMIT_ERROR_MESSAGE,
        submit_options: SubmitOptions | None = None,
        on_confirmation_requested: ConfirmationPrompt | None = None,
        on_cancel: Callable[[], Any] | None = None,
        on_reset: Callable[[], Any] | None = None,
    ) -> None:
        """Initialize the controller.

        Args:
            store: Store of the form instance.
            submit_operation: External operation persisting the payload.
            scheduler: Validation scheduler whose pending work a reset drops.
            modal: Owning modal dialog, if any.
            focus_manager: Source of the element to refocus after a successful submit.
            keep_modal_open_on_submit: Leave the modal open after success.
            default_error_message: General error text for failures without a message.
            submit_options: Options handed to the submit operation.
            on_confirmation_requested: Shows the warnings confirmation prompt.
            on_cancel: Cancel notification.
            on_reset: Reset notification.
        """
        self._store = store
        self._submit_operation = submit_operation
        self._scheduler = scheduler
        self._modal = modal
        self._focus_manager = focus_manager
        self._keep_modal_open_on_submit = keep_modal_open_on_submit
        self._default_error_message = default_error_message
        self._submit_options = submit_options or SubmitOptions()
        self._on_confirmation_requested = on_confirmation_requested
        self._on_cancel = on_cancel
        self._on_reset = on_reset
        self._awaiting_confirmation = False
        self.enabled = True

    @property
    def is_enabled(self) -> bool:
        """Return whether the form currently accepts input and submission."""
        return self.enabled and not self._store.state.submit_in_progress

    @property
    def awaiting_confirmation(self) -> bool:
        """Return whether the warnings prompt is open."""
        return self._awaiting_confirmation

    def _gate_results(self) -> dict[ValidationSeverity, list[SingleValidationResult]]:
        state = self._store.state
        general = [validation for validation in state.general_validation_results if not validation.from_backend]
        return group_invalid_results_by_severity(state.validation_results.values(), general)

    async def submit(self) -> SubmitOutcome:
        """Attempt a submission.

        Returns:
            SubmitOutcome: What the attempt led to.
        """
        return await self._attempt(confirmed=False)

    async def confirm(self) -> SubmitOutcome:
        """Accept the pending warnings and submit."""
        return await self._attempt(confirmed=True)

    def dismiss_confirmation(self) -> None:
        """Close the warnings prompt without submitting."""
        self._awaiting_confirmation = False

    async def _attempt(self, *, confirmed: bool) -> SubmitOutcome:
        if not self.is_enabled:
            logger.info("Submit ignored, form is disabled")
            return SubmitOutcome.DISABLED

        self._awaiting_confirmation = False
        self._store.dispatch(TriedToSubmit())
        grouped = self._gate_results()
        if grouped[ValidationSeverity.ERROR]:
            logger.info("Submit blocked by validation errors", extra={"errors": len(grouped[ValidationSeverity.ERROR])})
            return SubmitOutcome.BLOCKED_BY_ERRORS

        warnings = grouped[ValidationSeverity.WARNING]
        if warnings and not confirmed:
            self._awaiting_confirmation = True
            logger.info("Submit awaiting confirmation", extra={"warnings": len(warnings)})
            if self._on_confirmation_requested is not None:
                self._on_confirmation_requested(warnings)
            return SubmitOutcome.AWAITING_CONFIRMATION

        return await self._perform()

    async def _perform(self) -> SubmitOutcome:
        previously_focused = self._focus_manager.active_element() if self._focus_manager is not None else None
        self._store.dispatch(Submitting())
        payload = field_path.without_unbound(self._store.state.subject)
        logger.info("Submitting form", extra={"keys": sorted(payload)})
        try:
            if self._submit_operation is not None:
                await self._submit_operation(payload, self._submit_options)
        except Exception as exc:
            mapped = map_submission_error(exc, default_message=self._default_error_message)
            self._store.dispatch(BackendValidationArrived(general=mapped.general, per_field=mapped.per_field))
            logger.warning("Form submission failed", extra={"error": str(exc)})
            return SubmitOutcome.FAILED
        except BaseException:
            self._store.dispatch(SubmitCancelled())
            logger.warning("Form submission interrupted")
            raise

        self._store.dispatch(Submitted())
        logger.info("Form submitted")
        if not self._keep_modal_open_on_submit and self._modal is not None:
            self._modal.request_close()
        if self._store.started_empty:
            self.reset()
        if previously_focused is not None:
            previously_focused.focus()
        return SubmitOutcome.SUBMITTED

    def cancel(self) -> None:
        """Notify cancellation and ask the owning modal to close."""
        logger.info("Form cancelled")
        if self._on_cancel is not None:
            self._on_cancel()
        if self._modal is not None:
            self._modal.request_close()

    def reset(self) -> None:
        """Start over from the original subject and notify the reset."""
        if self._scheduler is not None:
            self._scheduler.cancel_all()
        self._awaiting_confirmation = False
        self._store.dispatch(Reset(original_subject=self._store.state.original_subject))
        logger.info("Form reset", extra={"reset_epoch": self._store.state.reset_epoch})
        if self._on_reset is not None:
            self._on_reset()
